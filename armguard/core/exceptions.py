"""
ArmGuard Exceptions

All exceptions inherit from ArmGuardError so callers can catch them in one
place. Findings are never raised; they are the normal result of a scan.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ArmGuardError(Exception):
    """Base exception for all ArmGuard errors."""

    pass


class TemplateLoadError(ArmGuardError):
    """Raised when a template file cannot be read or parsed.

    This can indicate:
    - File system errors
    - Invalid JSON / YAML
    - A document whose top level is not an object
    """

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class MalformedOutputValue(ArmGuardError):
    """Raised when an output value cannot be serialized for pattern matching."""

    def __init__(self, output_name: str, reason: str) -> None:
        super().__init__(f"Output '{output_name}': {reason}")
        self.output_name = output_name
        self.reason = reason


class OutputTooLarge(MalformedOutputValue):
    """Raised when an output's serialized text exceeds the configured cap."""

    def __init__(self, output_name: str, length: int, limit: int) -> None:
        super().__init__(
            output_name,
            f"serialized value is {length} characters (limit {limit})",
        )
        self.length = length
        self.limit = limit


class UnknownParameterType(ArmGuardError):
    """Raised when a parameter declares a type ArmGuard does not recognize."""

    def __init__(self, type_name: Optional[str]) -> None:
        super().__init__(f"Unknown parameter type: {type_name!r}")
        self.type_name = type_name
