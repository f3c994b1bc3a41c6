import asyncio
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from . import dns_utils, parsers, scoring
from .errors import DomainUnresolvable, InvalidDomainFormat
from .models import DkimSection, DmarcSection, Report, SpfSection, isoformat
from .validators import validate_domain

logger = logging.getLogger(__name__)

REPORT_TIMEOUT = float(os.environ.get("EMAIL_AUTH_REPORT_TIMEOUT", "15.0"))  # seconds

MISSING_DOMAIN = "Domain parameter is required"
INVALID_DOMAIN = "Invalid domain format"
UNRESOLVABLE = ("Failed to check domain. Please verify the domain exists "
                "and is publicly accessible.")


def build_report(domain: str, fetched: dns_utils.FetchResult,
                 timestamp: Optional[datetime] = None) -> Report:
    """Parse, score and assemble a report from already-fetched records."""
    spf = parsers.parse_spf(fetched.spf_raw)
    dkim = parsers.parse_dkim(fetched.dkim_raw)
    dmarc = parsers.parse_dmarc(fetched.dmarc_raw)

    spf_section = SpfSection(facts=spf, score=scoring.score_spf(spf), fix=scoring.spf_fix(spf))
    dkim_section = DkimSection(facts=dkim, score=scoring.score_dkim(dkim), fix=scoring.dkim_fix(dkim))
    dmarc_section = DmarcSection(facts=dmarc, score=scoring.score_dmarc(dmarc),
                                 fix=scoring.dmarc_fix(dmarc))

    overall = scoring.overall_score([spf_section.score, dkim_section.score, dmarc_section.score])
    return Report(
        domain=domain,
        timestamp=timestamp or datetime.now(timezone.utc),
        spf=spf_section,
        dkim=dkim_section,
        dmarc=dmarc_section,
        overall_score=overall,
        overall_grade=scoring.grade_for(overall),
    )


async def analyze(domain: str, lookup: Optional[dns_utils.TxtLookup] = None,
                  timeout: Optional[float] = None) -> Report:
    """Async: validate *domain*, fetch its policy records and grade them.

    Raises InvalidDomainFormat before any lookup, DomainUnresolvable when
    the domain does not exist and asyncio.TimeoutError when the whole fetch
    runs past the request budget.
    """
    domain = validate_domain(domain)
    timestamp = datetime.now(timezone.utc)
    fetched = await asyncio.wait_for(
        dns_utils.fetch_all(domain, lookup=lookup),
        timeout=timeout or REPORT_TIMEOUT,
    )
    report = build_report(domain, fetched, timestamp=timestamp)
    logger.info("Graded %s: %d (%s)", domain, report.overall_score, report.overall_grade)
    return report


def error_document(message: str, domain: Optional[str] = None) -> Dict[str, Any]:
    doc: Dict[str, Any] = {"error": message}
    if domain is not None:
        doc["domain"] = domain
        doc["timestamp"] = isoformat(datetime.now(timezone.utc))
    return doc


async def check(domain: Optional[str], lookup: Optional[dns_utils.TxtLookup] = None
                ) -> Tuple[int, Dict[str, Any]]:
    """Async: run a full check and return (HTTP status, JSON document).

    Never raises for bad input or DNS trouble; those become 400/500 documents.
    """
    if not domain:
        return 400, error_document(MISSING_DOMAIN)
    try:
        report = await analyze(domain, lookup=lookup)
    except InvalidDomainFormat:
        return 400, error_document(INVALID_DOMAIN)
    except DomainUnresolvable as e:
        return 500, error_document(UNRESOLVABLE, e.domain)
    except asyncio.TimeoutError:
        name = validate_domain(domain)
        logger.warning("Check for %s ran past %.1fs", name, REPORT_TIMEOUT)
        return 500, error_document(UNRESOLVABLE, name)
    return 200, report.as_document()


def human_report(doc: Dict[str, Any]) -> str:
    lines = []
    lines.append(f"Email authentication report for: {doc['domain']}")
    lines.append(f"Checked at (UTC): {doc['timestamp']}")
    lines.append("-" * 60)

    spf = doc["spf"]
    lines.append(f"SPF: {spf['status'].upper()} ({spf['score']}/100)")
    if spf.get("record"):
        lines.append(f"  - Record: {spf['record']}")
        lines.append(f"  - Qualifier: {spf['qualifier']}")
        for inc in spf.get("includes", []):
            lines.append(f"  - include: {inc}")
    for issue in spf["issues"]:
        lines.append(f"    ! {issue}")
    lines.append(f"  Fix: {spf['fix']}")
    lines.append("")

    dkim = doc["dkim"]
    lines.append(f"DKIM: {dkim['status'].upper()} ({dkim['score']}/100)")
    for sel in dkim["selectors"]:
        lines.append(f"  - Selector: {sel}")
    for issue in dkim["issues"]:
        lines.append(f"    ! {issue}")
    lines.append(f"  Fix: {dkim['fix']}")
    lines.append("")

    dmarc = doc["dmarc"]
    lines.append(f"DMARC: {dmarc['status'].upper()} ({dmarc['score']}/100)")
    if dmarc.get("record"):
        lines.append(f"  - Record: {dmarc['record']}")
    lines.append(f"  - Policy: {dmarc['policy']}")
    if dmarc.get("rua"):
        lines.append(f"  - Aggregate reports: {dmarc['rua']}")
    for issue in dmarc["issues"]:
        lines.append(f"    ! {issue}")
    lines.append(f"  Fix: {dmarc['fix']}")
    lines.append("-" * 60)
    lines.append(f"Overall: {doc['overallScore']}/100, grade {doc['overallGrade']}")
    return "\n".join(lines)
