import re
from typing import Optional

import idna

from .errors import InvalidDomainFormat

MAX_DOMAIN_LENGTH = 253

SCHEME_RE = re.compile(r"^https?://", re.I)
LABEL = r"[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?"
DOMAIN_RE = re.compile(rf"^(?:{LABEL}\.)+[a-z]{{2,}}$")


def _strip_decorations(value: str) -> str:
    """Drop a leading http(s) scheme and anything after the host."""
    value = SCHEME_RE.sub("", value)
    return re.split(r"[/?#]", value, maxsplit=1)[0]


def _to_ascii(host: str) -> Optional[str]:
    try:
        return idna.encode(host, uts46=True).decode("ascii")
    except idna.IDNAError:
        return None


def validate_domain(value: Optional[str]) -> str:
    """Return the normalized (lowercase, trimmed) form of *value*.

    Raises InvalidDomainFormat when the input is not a plain host name.
    Pure string check, nothing is resolved here.
    """
    if not value:
        raise InvalidDomainFormat(value)
    host = _strip_decorations(value.strip().lower()).rstrip(".")
    if not host:
        raise InvalidDomainFormat(value)
    if not host.isascii():
        host = _to_ascii(host)
        if host is None:
            raise InvalidDomainFormat(value)
    if len(host) > MAX_DOMAIN_LENGTH or not DOMAIN_RE.match(host):
        raise InvalidDomainFormat(value)
    return host
