from typing import Sequence

from . import parsers
from .models import DkimFacts, DmarcFacts, SectionScore, SpfFacts

BASE_SCORE = 60
ISSUE_PENALTY = 10
PASS_THRESHOLD = 80
WARN_THRESHOLD = 60
GRADES = ((90, "A"), (80, "B"), (70, "C"), (60, "D"))


def clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


def status_for(value: int) -> str:
    if value >= PASS_THRESHOLD:
        return "pass"
    if value >= WARN_THRESHOLD:
        return "warn"
    return "fail"


def _section(raw: int) -> SectionScore:
    value = clamp(raw)
    return SectionScore(value=value, status=status_for(value))


def score_spf(facts: SpfFacts) -> SectionScore:
    score = BASE_SCORE
    if facts.present and not facts.issues:
        score += 20
    if facts.qualifier == "fail":
        score += 20
    elif facts.qualifier == "softfail":
        score += 10
    score -= len(facts.issues) * ISSUE_PENALTY
    return _section(score)


def score_dkim(facts: DkimFacts) -> SectionScore:
    score = BASE_SCORE
    if facts.present:
        score += 20
    score += min(len(facts.selectors_found) * 10, 20)
    score -= len(facts.issues) * ISSUE_PENALTY
    return _section(score)


def score_dmarc(facts: DmarcFacts) -> SectionScore:
    score = BASE_SCORE
    if facts.present:
        score += 20
    if facts.policy == "reject":
        score += 20
    elif facts.policy == "quarantine":
        score += 10
    if facts.reporting_address:
        score += 10
    score -= len(facts.issues) * ISSUE_PENALTY
    return _section(score)


def overall_score(sections: Sequence[SectionScore]) -> int:
    # round half up; Python's round() would send 84.5 to 84
    total = sum(s.value for s in sections)
    return int(total / len(sections) + 0.5)


def grade_for(score: int) -> str:
    for threshold, grade in GRADES:
        if score >= threshold:
            return grade
    return "F"


# ---------- Fix recommendations ----------

def spf_fix(facts: SpfFacts) -> str:
    if not facts.present:
        return ('Create an SPF record in your DNS: "v=spf1 include:_spf.google.com ~all" '
                '(adjust for your email provider)')
    if parsers.SPF_MULTIPLE in facts.issues:
        return "Remove duplicate SPF records - only one SPF record is allowed per domain"
    if facts.qualifier == "pass":
        return 'Change "+all" to "~all" or "-all" to prevent unauthorized email sending'
    if facts.qualifier == "unknown":
        return 'Add an "all" mechanism to your SPF record (recommended: "~all" or "-all")'
    return "Review your SPF record for potential issues with includes or syntax"


def dkim_fix(facts: DkimFacts) -> str:
    if not facts.present:
        return "Configure DKIM signing with your email provider and publish DKIM public keys in DNS"
    return "DKIM appears to be configured correctly"


def dmarc_fix(facts: DmarcFacts) -> str:
    if not facts.present:
        return ('Create a DMARC record: "_dmarc.yourdomain.com TXT v=DMARC1; p=quarantine; '
                'rua=mailto:dmarc@yourdomain.com"')
    if facts.policy == "none":
        return 'Upgrade DMARC policy from "none" to "quarantine" or "reject" for better protection'
    if not facts.reporting_address:
        return 'Add aggregate reporting to your DMARC record: "rua=mailto:dmarc@yourdomain.com"'
    if facts.policy == "reject":
        return "DMARC is enforcing p=reject - keep reviewing aggregate reports for new senders"
    return 'Consider upgrading to "p=reject" for maximum protection'
