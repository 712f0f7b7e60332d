"""
ArmGuard JSON Reporter

Generates machine-readable JSON output format:
{
    "version": "1.0",
    "summary": {
        "total_findings": N,
        "templates_scanned": N,
        "by_severity": {"CRITICAL": n, "HIGH": n, ...},
        "by_kind": {"ListFunctionSecret": n, ...}
    },
    "findings": [...],
    "errors": [...]
}
"""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Optional, Sequence

from armguard import __version__
from armguard.core.exceptions import ArmGuardError
from armguard.core.finding import Finding, FindingKind


class JSONReporter:
    """Generates JSON-formatted scan reports."""

    def __init__(self, target: str) -> None:
        self.target = target

    def report(
        self,
        findings: list[Finding],
        output_file: Optional[str] = None,
        errors: Sequence[ArmGuardError] = (),
        templates_scanned: Optional[int] = None,
    ) -> str:
        """
        Generate JSON report.

        Args:
            findings: All findings from the scan.
            output_file: Optional file path to write the report to.
            errors: Per-file and per-output errors collected while scanning.
            templates_scanned: Number of templates that were checked.

        Returns:
            The JSON string.
        """
        severity_counter = Counter(f.severity.value for f in findings)
        kind_counter = Counter(f.kind.value for f in findings)

        summary: dict = {
            "total_findings": len(findings),
            "by_severity": {
                sev: severity_counter.get(sev, 0)
                for sev in ["CRITICAL", "HIGH", "MEDIUM", "LOW", "INFO"]
            },
            "by_kind": {kind.value: kind_counter.get(kind.value, 0) for kind in FindingKind},
        }
        if templates_scanned is not None:
            summary["templates_scanned"] = templates_scanned

        report_data = {
            "version": "1.0",
            "tool": {
                "name": "ArmGuard",
                "version": __version__,
            },
            "target": self.target,
            "summary": summary,
            "findings": [f.to_dict() for f in findings],
            "errors": [
                {"type": type(e).__name__, "message": str(e)} for e in errors
            ],
        }

        json_str = json.dumps(report_data, indent=2, default=str)

        if output_file:
            Path(output_file).write_text(json_str, encoding="utf-8")

        return json_str
