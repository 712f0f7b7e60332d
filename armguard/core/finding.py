"""
ArmGuard Finding Model

A Finding represents one template output that may expose a secret.
Findings are immutable report records and carry no reference back to
the template they were produced from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class Severity(Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"

    @classmethod
    def from_string(cls, value: str) -> "Severity":
        """Parse a severity from a string (case-insensitive)."""
        return cls[value.upper()]

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def __ge__(self, other: "Severity") -> bool:
        return self.rank >= other.rank

    def __gt__(self, other: "Severity") -> bool:
        return self.rank > other.rank

    def __le__(self, other: "Severity") -> bool:
        return not self.__gt__(other)

    def __lt__(self, other: "Severity") -> bool:
        return not self.__ge__(other)


_SEVERITY_ORDER = [Severity.INFO, Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]


class FindingKind(Enum):
    LIST_FUNCTION_SECRET = "ListFunctionSecret"
    NAME_SUGGESTS_SECRET = "NameSuggestsSecret"
    SECURE_PARAMETER_LEAK = "SecureParameterLeak"

    @property
    def rule_id(self) -> str:
        return _KIND_RULES[self][0]

    @property
    def title(self) -> str:
        return _KIND_RULES[self][1]

    @property
    def severity(self) -> Severity:
        return _KIND_RULES[self][2]

    @property
    def fix(self) -> str:
        return _KIND_RULES[self][3]


# kind -> (rule_id, title, default severity, fix)
_KIND_RULES: dict[FindingKind, tuple[str, str, Severity, str]] = {
    FindingKind.LIST_FUNCTION_SECRET: (
        "AG-OUT-001",
        "Output exposes a list* function result",
        Severity.HIGH,
        "Do not return list*() results from outputs; read secrets from "
        "Key Vault or the resource itself when needed.",
    ),
    FindingKind.NAME_SUGGESTS_SECRET: (
        "AG-OUT-002",
        "Output name suggests a password",
        Severity.MEDIUM,
        "Remove the output, or rename it if it does not carry a password.",
    ),
    FindingKind.SECURE_PARAMETER_LEAK: (
        "AG-OUT-003",
        "Output references a secure parameter",
        Severity.CRITICAL,
        "Do not reference securestring or secureobject parameters in outputs.",
    ),
}


@dataclass(frozen=True)
class Location:
    file_path: Path
    start_line: int
    snippet: Optional[str] = None


@dataclass(frozen=True)
class Finding:
    output_name: str
    kind: FindingKind
    message: str
    location: Optional[Location] = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def rule_id(self) -> str:
        return self.kind.rule_id

    @property
    def title(self) -> str:
        return self.kind.title

    @property
    def severity(self) -> Severity:
        return self.kind.severity

    @property
    def fix(self) -> str:
        return self.kind.fix

    def with_location(self, location: Location) -> "Finding":
        """Return a copy of this finding pinned to a file location."""
        return Finding(
            output_name=self.output_name,
            kind=self.kind,
            message=self.message,
            location=location,
            metadata=dict(self.metadata),
        )

    def display(self) -> str:
        """Human-readable output for console printing."""
        loc = ""
        if self.location:
            loc = f"{self.location.file_path}:{self.location.start_line}"

        parts = [
            f"[{self.severity.value}] {self.title}",
            f"  Rule: {self.rule_id}",
            f"  Output: {self.output_name}",
            f"  Location: {loc}",
            f"  {self.message}",
            f"  Fix: {self.fix}",
        ]
        return "\n".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert finding to a dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "rule_id": self.rule_id,
            "kind": self.kind.value,
            "title": self.title,
            "output_name": self.output_name,
            "message": self.message,
            "severity": self.severity.value,
            "fix": self.fix,
        }
        if self.location:
            result["location"] = {
                "file": str(self.location.file_path),
                "start_line": self.location.start_line,
                "snippet": self.location.snippet,
            }
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        return result
