from typing import Optional


class EmailAuthError(Exception):
    """Base class for errors raised by the grader."""


class InvalidDomainFormat(EmailAuthError):
    """Input is not a syntactically valid domain. No lookup is attempted."""

    def __init__(self, value: Optional[str]):
        super().__init__(f"Invalid domain format: {value!r}")
        self.value = value


class LookupFailure(EmailAuthError):
    """A single TXT lookup failed (NXDOMAIN, SERVFAIL, timeout, bad answer).

    Always recovered by the fetcher into an empty record set.
    """

    def __init__(self, name: str, reason: str, nxdomain: bool = False):
        super().__init__(f"TXT lookup for {name} failed: {reason}")
        self.name = name
        self.reason = reason
        self.nxdomain = nxdomain


class DomainUnresolvable(EmailAuthError):
    """Every lookup in a batch failed and the domain itself does not exist."""

    def __init__(self, domain: str):
        super().__init__(f"Domain {domain} could not be resolved")
        self.domain = domain
