import pytest

from email_auth_grader import scoring
from email_auth_grader.models import DkimFacts, DmarcFacts, SectionScore, SpfFacts
from email_auth_grader.parsers import parse_dkim, parse_dmarc, parse_spf


def test_spf_scores():
    assert scoring.score_spf(parse_spf(["v=spf1 -all"])).value == 100
    assert scoring.score_spf(parse_spf(["v=spf1 include:_spf.google.com ~all"])).value == 90
    assert scoring.score_spf(parse_spf(["v=spf1 ?all"])).value == 80
    assert scoring.score_spf(parse_spf(["v=spf1 +all"])).value == 50
    assert scoring.score_spf(parse_spf([])).value == 50


def test_dkim_scores():
    assert scoring.score_dkim(parse_dkim({"default": []})).value == 50
    assert scoring.score_dkim(parse_dkim({"a": ["p=x"]})).value == 90
    assert scoring.score_dkim(parse_dkim({"a": ["p=x"], "b": ["p=y"], "c": ["p=z"]})).value == 100


def test_dmarc_scores():
    assert scoring.score_dmarc(parse_dmarc(["v=DMARC1; p=reject; rua=mailto:a@b.co"])).value == 100
    assert scoring.score_dmarc(parse_dmarc(["v=DMARC1; p=quarantine"])).value == 80
    assert scoring.score_dmarc(parse_dmarc(["v=DMARC1; p=none"])).value == 60
    assert scoring.score_dmarc(parse_dmarc([])).value == 50


def test_scores_are_clamped():
    many = tuple(f"issue {i}" for i in range(20))
    assert scoring.score_spf(SpfFacts(present=True, issues=many)).value == 0
    assert scoring.score_dmarc(DmarcFacts(present=True, policy="reject",
                                          reporting_address="x", issues=many)).value == 0
    assert scoring.score_dkim(DkimFacts(present=True, selectors_found=("a", "b", "c"))).value <= 100


@pytest.mark.parametrize("value,status", [(100, "pass"), (80, "pass"), (79, "warn"),
                                          (60, "warn"), (59, "fail"), (0, "fail")])
def test_status_tiers(value, status):
    assert scoring.status_for(value) == status


@pytest.mark.parametrize("score,grade", [(100, "A"), (90, "A"), (89, "B"), (80, "B"),
                                         (79, "C"), (70, "C"), (69, "D"), (60, "D"), (59, "F")])
def test_grade_boundaries(score, grade):
    assert scoring.grade_for(score) == grade


def test_overall_rounds_half_up():
    scores = [SectionScore(value=v, status="pass") for v in (90, 80, 84)]
    assert scoring.overall_score(scores) == 85
    scores = [SectionScore(value=v, status="pass") for v in (100, 100, 50)]
    assert scoring.overall_score(scores) == 83


def test_spf_fix_priority():
    assert "Create an SPF record" in scoring.spf_fix(parse_spf([]))
    assert "duplicate" in scoring.spf_fix(parse_spf(["v=spf1 -all", "v=spf1 +all"]))
    assert "+all" in scoring.spf_fix(parse_spf(["v=spf1 +all"]))
    assert '"all" mechanism' in scoring.spf_fix(parse_spf(["v=spf1 mx"]))
    assert "Review" in scoring.spf_fix(parse_spf(["v=spf1 -all"]))


def test_dmarc_fix_priority():
    assert "Create a DMARC record" in scoring.dmarc_fix(parse_dmarc([]))
    assert "Upgrade" in scoring.dmarc_fix(parse_dmarc(["v=DMARC1; p=none"]))
    assert "rua=" in scoring.dmarc_fix(parse_dmarc(["v=DMARC1; p=quarantine"]))
    assert "p=reject" in scoring.dmarc_fix(parse_dmarc(["v=DMARC1; p=quarantine; rua=mailto:a@b.co"]))


def test_dkim_fix():
    assert "Configure DKIM" in scoring.dkim_fix(parse_dkim({}))
    assert "correctly" in scoring.dkim_fix(parse_dkim({"google": ["p=abc"]}))
