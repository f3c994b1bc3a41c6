import pytest

from email_auth_grader.errors import LookupFailure


class FakeDNS:
    """Async TXT lookup answering from a dict; names mapped to an
    exception raise it, unknown names have no records."""

    def __init__(self, records=None):
        self.records = records or {}
        self.queried = []

    async def __call__(self, name):
        self.queried.append(name)
        answer = self.records.get(name, [])
        if isinstance(answer, Exception):
            raise answer
        return list(answer)


@pytest.fixture
def fake_dns():
    return FakeDNS


@pytest.fixture
def servfail():
    def _make(name):
        return LookupFailure(name, "SERVFAIL")
    return _make
