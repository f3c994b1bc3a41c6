import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional

import dns.asyncresolver
import dns.exception
import dns.resolver

from .errors import DomainUnresolvable, LookupFailure

logger = logging.getLogger(__name__)

# ---------- Configuration ----------
DNS_TIMEOUT = float(os.environ.get("EMAIL_AUTH_DNS_TIMEOUT", "5.0"))  # seconds
NAMESERVERS = [
    ns.strip() for ns in os.environ.get("EMAIL_AUTH_NAMESERVERS", "").split(",") if ns.strip()
]
DKIM_SELECTORS = (
    "default", "google", "s1", "s2", "selector1", "selector2",
    "mandrill", "postmark", "pm", "k1", "k2", "mail",
)
# -----------------------------------

resolver = dns.asyncresolver.Resolver()
resolver.lifetime = DNS_TIMEOUT
resolver.timeout = DNS_TIMEOUT
if NAMESERVERS:
    resolver.nameservers = NAMESERVERS

TxtLookup = Callable[[str], Awaitable[List[str]]]


async def resolve_txt(name: str) -> List[str]:
    """Async: return the TXT strings published at *name*.

    Each record's character chunks are joined into one string. A name that
    exists without TXT data gives an empty list; anything else that goes
    wrong raises LookupFailure.
    """
    try:
        answers = await resolver.resolve(name, "TXT")
    except dns.resolver.NoAnswer:
        return []
    except dns.resolver.NXDOMAIN:
        raise LookupFailure(name, "NXDOMAIN", nxdomain=True)
    except dns.exception.Timeout:
        raise LookupFailure(name, "timeout")
    except (dns.exception.DNSException, OSError) as e:
        raise LookupFailure(name, str(e) or e.__class__.__name__)
    return [b"".join(r.strings).decode("utf-8", errors="replace") for r in answers]


def dmarc_name(domain: str) -> str:
    return f"_dmarc.{domain}"


def dkim_name(domain: str, selector: str) -> str:
    return f"{selector}._domainkey.{domain}"


@dataclass(frozen=True)
class FetchResult:
    """Raw TXT answers for one domain, one slot per looked-up name."""

    spf_raw: List[str]
    dmarc_raw: List[str]
    dkim_raw: Dict[str, List[str]]
    failures: Dict[str, LookupFailure] = field(default_factory=dict)


async def fetch_all(domain: str, lookup: Optional[TxtLookup] = None,
                    selectors=DKIM_SELECTORS) -> FetchResult:
    """Async: look up the apex, _dmarc and every DKIM selector concurrently.

    A failed lookup becomes an empty record set for that name only. Raises
    DomainUnresolvable when every lookup failed and the apex is NXDOMAIN.
    Cancelling the caller cancels all outstanding lookups.
    """
    lookup = lookup or resolve_txt
    names = [domain, dmarc_name(domain)] + [dkim_name(domain, s) for s in selectors]

    async def _probe(name: str):
        try:
            return await lookup(name), None
        except LookupFailure as e:
            logger.debug("%s", e)
            return [], e

    outcomes = await asyncio.gather(*(_probe(n) for n in names))
    results = dict(zip(names, outcomes))
    failures = {n: err for n, (_, err) in results.items() if err is not None}

    apex_failure = failures.get(domain)
    if len(failures) == len(names) and apex_failure is not None and apex_failure.nxdomain:
        logger.warning("Every lookup failed for %s and the apex is NXDOMAIN", domain)
        raise DomainUnresolvable(domain)
    if failures:
        logger.debug("%d of %d lookups failed for %s", len(failures), len(names), domain)

    return FetchResult(
        spf_raw=results[domain][0],
        dmarc_raw=results[dmarc_name(domain)][0],
        dkim_raw={s: results[dkim_name(domain, s)][0] for s in selectors},
        failures=failures,
    )
