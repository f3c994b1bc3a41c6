"""Grade a domain's SPF, DKIM and DMARC records."""

__version__ = "0.1.0"

from .core import analyze, build_report, check, human_report  # noqa: E402,F401
from .errors import (  # noqa: E402,F401
    DomainUnresolvable,
    EmailAuthError,
    InvalidDomainFormat,
    LookupFailure,
)
