import logging
import os
from typing import Any, Dict, Optional, Tuple

from cachetools import TTLCache
from dotenv import load_dotenv
from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from . import __version__
from .core import UNRESOLVABLE, check, error_document
from .errors import InvalidDomainFormat
from .validators import validate_domain

load_dotenv()

logging.basicConfig(
    level=getattr(logging, os.environ.get("EMAIL_AUTH_LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

CACHE_TTL = int(os.environ.get("EMAIL_AUTH_CACHE_TTL", "300"))  # seconds
CACHE_SIZE = int(os.environ.get("EMAIL_AUTH_CACHE_SIZE", "1024"))
CACHE_CONTROL = f"public, max-age={CACHE_TTL}, s-maxage={CACHE_TTL}"

app = FastAPI(title="email-auth-grader", version=__version__)

# successful report documents only, keyed by normalized domain
report_cache: TTLCache = TTLCache(maxsize=CACHE_SIZE, ttl=CACHE_TTL)


async def cached_check(domain: Optional[str]) -> Tuple[int, Dict[str, Any]]:
    try:
        key = validate_domain(domain)
    except InvalidDomainFormat:
        key = None
    if key is not None and key in report_cache:
        return 200, report_cache[key]

    try:
        status, doc = await check(domain)
    except Exception:
        logger.exception("Unexpected error while checking %r", domain)
        return 500, error_document(UNRESOLVABLE, key or (domain or "").strip().lower())

    if status == 200:
        report_cache[key] = doc
    return status, doc


def respond(status: int, doc: Dict[str, Any]) -> JSONResponse:
    headers = {"Cache-Control": CACHE_CONTROL} if status == 200 else None
    return JSONResponse(doc, status_code=status, headers=headers)


@app.get("/health")
async def health():
    """Simple health check endpoint."""
    return {"status": "ok", "service": "email-auth-grader"}


@app.get("/check")
async def check_domain(domain: Optional[str] = Query(None)):
    """Grade the SPF, DKIM and DMARC posture of a domain."""
    return respond(*await cached_check(domain))


async def section(domain: str, name: str) -> JSONResponse:
    status, doc = await cached_check(domain)
    if status != 200:
        return respond(status, doc)
    return respond(status, {"domain": doc["domain"], "timestamp": doc["timestamp"], name: doc[name]})


@app.get("/spf/{domain}")
async def get_spf(domain: str):
    """Return the SPF section of the report for a domain."""
    return await section(domain, "spf")


@app.get("/dkim/{domain}")
async def get_dkim(domain: str):
    """Return the DKIM selectors found for a domain."""
    return await section(domain, "dkim")


@app.get("/dmarc/{domain}")
async def get_dmarc(domain: str):
    """Return the DMARC section of the report for a domain."""
    return await section(domain, "dmarc")
