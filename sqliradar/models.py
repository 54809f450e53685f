# sqliradar/models.py - Shared data models for the SQL injection scanner

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

FormFields = Tuple[Tuple[str, str], ...]


class ParameterContext(str, Enum):
    """Where a candidate parameter was discovered."""

    URL_PARAMETER = "URL Parameter"
    FORM_GET = "Form Field (GET)"
    FORM_POST = "Form Field (POST)"
    MANUAL = "Manual"

    @classmethod
    def for_form(cls, method: str) -> "ParameterContext":
        return cls.FORM_POST if method == "POST" else cls.FORM_GET


class InjectionFamily(str, Enum):
    """Detection heuristic a payload belongs to."""

    ERROR_BASED = "Error-based"
    BOOLEAN_BASED = "Boolean-based"
    UNION_BASED = "Union-based"
    TIME_BASED = "Time-based"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        return None


@dataclass(frozen=True)
class ParameterInfo:
    """A single injectable parameter and everything needed to resubmit it."""

    name: str
    source: str
    method: str
    action_url: str
    context: ParameterContext
    sample_value: Optional[str] = None
    form_fields: FormFields = ()

    @property
    def key(self) -> Tuple[str, str, str]:
        """Baseline lookup key, unique per target rather than per name."""
        return (self.action_url, self.method, self.name)

    @property
    def is_post(self) -> bool:
        return self.method == "POST"


@dataclass(frozen=True)
class Baseline:
    """Reference metrics of an unmodified request."""

    status: int
    content_length: int
    response_time: float
    title: Optional[str]
    body_hash: str


@dataclass(frozen=True)
class ProbeResponse:
    """One completed HTTP exchange."""

    status: int
    body: str
    elapsed: float
    url: str = ""
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TestOutcome:
    """Result of firing one payload at one parameter."""

    # keep pytest from collecting this as a test class
    __test__ = False

    parameter: str
    payload: str
    injection_type: InjectionFamily
    evidence: str
    vulnerable: bool
    action_url: str = ""
    method: str = "GET"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["injection_type"] = self.injection_type.value
        return data


@dataclass(frozen=True)
class HeaderFinding:
    """Result of sending one payload in one request header."""

    header: str
    payload: str
    evidence: str
    vulnerable: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ScanSummary:
    """Aggregated result of a finished scan."""

    target: str
    parameters_tested: int = 0
    total_tests: int = 0
    findings: List[TestOutcome] = field(default_factory=list)

    @property
    def vulnerable(self) -> bool:
        return bool(self.findings)

    @property
    def verdict(self) -> str:
        if not self.findings:
            return "Scan completed successfully - No vulnerabilities found"
        return f"Critical: {len(self.findings)} SQL injection vulnerabilities found"

    def render(self) -> str:
        """Human readable summary: verdict line plus one line per finding."""
        lines = [
            self.verdict,
            f"Completed {self.total_tests} tests on {self.parameters_tested} parameters against {self.target}",
        ]
        for finding in self.findings:
            lines.append(
                f"  - {finding.injection_type.value} in '{finding.parameter}' parameter "
                f"[{finding.method} {finding.action_url}] payload={finding.payload!r} ({finding.evidence})"
            )
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "parameters_tested": self.parameters_tested,
            "total_tests": self.total_tests,
            "verdict": self.verdict,
            "findings": [finding.to_dict() for finding in self.findings],
        }
