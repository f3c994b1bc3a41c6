"""Turn raw TXT strings into SPF, DMARC and DKIM facts.

Parsers do no I/O. An empty record set means "nothing published or the
lookup failed"; the two cases are not told apart here.
"""
import re
from typing import Dict, List, Optional, Sequence

from .models import DkimFacts, DmarcFacts, SpfFacts

SPF_PREFIX = "v=spf1"
DMARC_PREFIX = "v=DMARC1"
SPF_INCLUDE_LIMIT = 10

SPF_MISSING = "no SPF record found"
SPF_MULTIPLE = "multiple SPF records found - ambiguous"
SPF_NO_ALL = "missing all mechanism"
SPF_TOO_MANY_INCLUDES = "too many include mechanisms (more than 10 causes DNS lookup limit errors)"
SPF_PERMISSIVE = "overly permissive (+all) - any server may send mail for this domain"

DMARC_MISSING = "no DMARC record found"
DMARC_POLICY_NONE = "policy is none - receivers take no action on failing mail"
DMARC_NO_RUA = "no aggregate reporting configured (rua)"

DKIM_MISSING = "no DKIM selectors found (checked common selectors)"

SPF_ALL_RE = re.compile(r"(?<!\S)([-~?+])all(?!\S)")
SPF_INCLUDE_RE = re.compile(r"\binclude:(\S+)")
QUALIFIERS = {"-": "fail", "~": "softfail", "?": "neutral", "+": "pass"}

DMARC_POLICIES = ("none", "quarantine", "reject")
DKIM_KEY_TAG_RE = re.compile(r"[kp]=")


def parse_spf(records: Sequence[str]) -> SpfFacts:
    spfs = [r for r in records if r.startswith(SPF_PREFIX)]
    if not spfs:
        return SpfFacts(present=False, issues=(SPF_MISSING,))
    if len(spfs) > 1:
        # ambiguous: don't try to interpret either record
        return SpfFacts(present=True, record=spfs[0], issues=(SPF_MULTIPLE,))

    record = spfs[0]
    issues: List[str] = []
    alls = SPF_ALL_RE.findall(record)
    if alls:
        qualifier = QUALIFIERS[alls[-1]]
    else:
        qualifier = "unknown"
        issues.append(SPF_NO_ALL)

    includes = tuple(SPF_INCLUDE_RE.findall(record))
    if len(includes) > SPF_INCLUDE_LIMIT:
        issues.append(SPF_TOO_MANY_INCLUDES)
    if qualifier == "pass":
        issues.append(SPF_PERMISSIVE)

    return SpfFacts(present=True, record=record, qualifier=qualifier,
                    includes=includes, issues=tuple(issues))


def _dmarc_tag(record: str, tag: str) -> Optional[str]:
    """Value of *tag* up to the next ';', or None when absent or empty."""
    m = re.search(rf"(?:^|;)\s*{tag}\s*=([^;]*)", record, re.I)
    if not m:
        return None
    return m.group(1).strip() or None


def parse_dmarc(records: Sequence[str]) -> DmarcFacts:
    record = next((r for r in records if r.startswith(DMARC_PREFIX)), None)
    if record is None:
        return DmarcFacts(present=False, issues=(DMARC_MISSING,))

    policy = (_dmarc_tag(record, "p") or "none").lower()
    if policy not in DMARC_POLICIES:
        policy = "none"
    rua = _dmarc_tag(record, "rua")

    issues = []
    if policy == "none":
        issues.append(DMARC_POLICY_NONE)
    if rua is None:
        issues.append(DMARC_NO_RUA)
    return DmarcFacts(present=True, record=record, policy=policy,
                      reporting_address=rua, issues=tuple(issues))


def looks_like_dkim_key(record: str) -> bool:
    return DKIM_KEY_TAG_RE.search(record) is not None


def parse_dkim(selector_records: Dict[str, Sequence[str]]) -> DkimFacts:
    """Selectors, in probe order, with at least one key-like record."""
    found = tuple(
        selector for selector, records in selector_records.items()
        if any(looks_like_dkim_key(r) for r in records)
    )
    if not found:
        return DkimFacts(present=False, issues=(DKIM_MISSING,))
    return DkimFacts(present=True, selectors_found=found)
