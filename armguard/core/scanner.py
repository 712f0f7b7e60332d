"""
ArmGuard Base Scanner

A scanner walks a target file or directory and returns findings.
Errors that affect a single file are collected on the scanner rather
than aborting the whole run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterator, List, Optional

from armguard.core.exceptions import ArmGuardError
from armguard.core.finding import Finding


class BaseScanner(ABC):
    """
    Minimal scanner interface.
    Each scanner must implement scan().
    """

    name: str = "base"
    suffixes: tuple[str, ...] = ()

    def __init__(self, target_path: Path, exclude: Optional[list[str]] = None):
        self.target_path = target_path
        self.exclude = exclude or []
        self.errors: list[ArmGuardError] = []

    @abstractmethod
    def scan(self) -> List[Finding]:
        """
        Run the scan and return findings.
        """
        raise NotImplementedError

    def is_excluded(self, path: Path) -> bool:
        text = str(path)
        return any(
            ex in text or any(fnmatch(part, ex) for part in path.parts)
            for ex in self.exclude
        )

    def iter_files(self) -> Iterator[Path]:
        """Yield candidate files under the target, honoring exclusions."""
        if self.target_path.is_file():
            if self.target_path.suffix.lower() in self.suffixes:
                yield self.target_path
            return

        for file_path in sorted(self.target_path.rglob("*")):
            if not file_path.is_file() or file_path.suffix.lower() not in self.suffixes:
                continue
            if self.is_excluded(file_path.relative_to(self.target_path)):
                continue
            yield file_path
