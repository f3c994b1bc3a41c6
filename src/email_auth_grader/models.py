from datetime import datetime
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict

Qualifier = Literal["fail", "softfail", "neutral", "pass", "unknown"]
Policy = Literal["none", "quarantine", "reject"]
Status = Literal["pass", "warn", "fail"]
Grade = Literal["A", "B", "C", "D", "F"]


class Facts(BaseModel):
    model_config = ConfigDict(frozen=True)

    present: bool
    issues: Tuple[str, ...] = ()


class SpfFacts(Facts):
    record: Optional[str] = None
    qualifier: Qualifier = "unknown"
    includes: Tuple[str, ...] = ()


class DmarcFacts(Facts):
    record: Optional[str] = None
    policy: Policy = "none"
    reporting_address: Optional[str] = None


class DkimFacts(Facts):
    selectors_found: Tuple[str, ...] = ()


class SectionScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: int
    status: Status


class Section(BaseModel):
    model_config = ConfigDict(frozen=True)

    facts: Facts
    score: SectionScore
    fix: str

    def as_document(self) -> Dict[str, Any]:
        return {
            "present": self.facts.present,
            "status": self.score.status,
            "score": self.score.value,
            "issues": list(self.facts.issues),
            "fix": self.fix,
        }


class SpfSection(Section):
    facts: SpfFacts

    def as_document(self) -> Dict[str, Any]:
        doc = super().as_document()
        if self.facts.record is not None:
            doc["record"] = self.facts.record
            doc["qualifier"] = self.facts.qualifier
            doc["includes"] = list(self.facts.includes)
        return doc


class DkimSection(Section):
    facts: DkimFacts

    def as_document(self) -> Dict[str, Any]:
        doc = super().as_document()
        doc["selectors"] = list(self.facts.selectors_found)
        return doc


class DmarcSection(Section):
    facts: DmarcFacts

    def as_document(self) -> Dict[str, Any]:
        doc = super().as_document()
        doc["policy"] = self.facts.policy
        if self.facts.record is not None:
            doc["record"] = self.facts.record
        if self.facts.reporting_address is not None:
            doc["rua"] = self.facts.reporting_address
        return doc


class Report(BaseModel):
    model_config = ConfigDict(frozen=True)

    domain: str
    timestamp: datetime
    spf: SpfSection
    dkim: DkimSection
    dmarc: DmarcSection
    overall_score: int
    overall_grade: Grade

    def as_document(self) -> Dict[str, Any]:
        """Render the report as the JSON document served by /check."""
        return {
            "domain": self.domain,
            "timestamp": isoformat(self.timestamp),
            "spf": self.spf.as_document(),
            "dkim": self.dkim.as_document(),
            "dmarc": self.dmarc.as_document(),
            "overallScore": self.overall_score,
            "overallGrade": self.overall_grade,
        }


def isoformat(ts: datetime) -> str:
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")
