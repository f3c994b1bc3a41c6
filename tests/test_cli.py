import json

import pytest

from email_auth_grader import cli, dns_utils
from email_auth_grader.errors import LookupFailure

RECORDS = {
    "example.com": ["v=spf1 include:_spf.google.com -all"],
    "_dmarc.example.com": ["v=DMARC1; p=reject; rua=mailto:d@example.com"],
    "google._domainkey.example.com": ["v=DKIM1; k=rsa; p=MIGf"],
}


@pytest.fixture(autouse=True)
def fake_resolver(monkeypatch):
    async def fake_resolve_txt(name):
        if name.endswith("missing.example"):
            raise LookupFailure(name, "NXDOMAIN", nxdomain=True)
        return list(RECORDS.get(name, []))

    monkeypatch.setattr(dns_utils, "resolve_txt", fake_resolve_txt)


def test_human_report(capsys):
    cli.main(["example.com"])
    out = capsys.readouterr().out
    assert "Email authentication report for: example.com" in out
    assert "Selector: google" in out
    assert "grade A" in out


def test_quiet_prints_compact_json(capsys):
    cli.main(["example.com", "--quiet"])
    out = capsys.readouterr().out.strip()
    assert "\n" not in out
    doc = json.loads(out)
    assert doc["domain"] == "example.com"
    assert doc["dkim"]["selectors"] == ["google"]


def test_json_out_writes_file(tmp_path, capsys):
    target = tmp_path / "report.json"
    cli.main(["example.com", "--quiet", "--json-out", str(target)])
    doc = json.loads(target.read_text(encoding="utf-8"))
    assert doc["overallGrade"] == "A"
    assert json.loads(capsys.readouterr().out) == doc


@pytest.mark.parametrize("domain,message", [
    ("not_a_domain", "Invalid domain format"),
    ("missing.example", "Failed to check domain"),
])
def test_errors_exit_with_status_2(domain, message, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([domain])
    assert excinfo.value.code == 2
    assert message in capsys.readouterr().err


def test_unexpected_error_is_reported(monkeypatch, capsys):
    async def broken(domain, lookup=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(cli, "check", broken)
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["example.com"])
    assert excinfo.value.code == 2
    assert "Fatal error: boom" in capsys.readouterr().err
