"""
ArmGuard SARIF Reporter

Generates SARIF 2.1.0 (Static Analysis Results Interchange Format) output
for integration with:
- GitHub Code Scanning / Security tab
- Azure DevOps
- Visual Studio / VSCode
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from armguard import __version__
from armguard.core.finding import Finding, FindingKind, Severity


SARIF_SCHEMA = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/main/sarif-2.1/schema/sarif-schema-2.1.0.json"

# SARIF severity level mapping
SARIF_LEVEL_MAP = {
    Severity.CRITICAL: "error",
    Severity.HIGH: "error",
    Severity.MEDIUM: "warning",
    Severity.LOW: "note",
    Severity.INFO: "note",
}

SECURITY_SEVERITY = {
    Severity.CRITICAL: "9.5",
    Severity.HIGH: "7.5",
    Severity.MEDIUM: "5.0",
    Severity.LOW: "2.5",
    Severity.INFO: "1.0",
}


class SARIFReporter:
    """Generates SARIF 2.1.0-formatted scan reports."""

    def __init__(self, target: str) -> None:
        self.target = target

    def report(
        self,
        findings: list[Finding],
        output_file: Optional[str] = None,
    ) -> str:
        """
        Generate SARIF report.

        Every finding kind is listed as a rule, so ruleIndex is stable
        across runs regardless of which kinds were found.
        """
        kinds = list(FindingKind)
        results: list[dict] = []

        for finding in findings:
            result: dict = {
                "ruleId": finding.rule_id,
                "ruleIndex": kinds.index(finding.kind),
                "level": SARIF_LEVEL_MAP.get(finding.severity, "warning"),
                "message": {"text": finding.message},
                "properties": {"outputName": finding.output_name},
            }

            if finding.location:
                file_path = str(finding.location.file_path).replace("\\", "/")
                result["locations"] = [
                    {
                        "physicalLocation": {
                            "artifactLocation": {
                                "uri": file_path,
                                "uriBaseId": "%SRCROOT%",
                            },
                            "region": {
                                "startLine": max(1, finding.location.start_line),
                                "startColumn": 1,
                            },
                        },
                        "logicalLocations": [
                            {"name": finding.output_name, "kind": "member"},
                        ],
                    }
                ]

            results.append(result)

        sarif = {
            "$schema": SARIF_SCHEMA,
            "version": "2.1.0",
            "runs": [
                {
                    "tool": {
                        "driver": {
                            "name": "ArmGuard",
                            "version": __version__,
                            "rules": [self._rule(kind) for kind in kinds],
                        }
                    },
                    "results": results,
                    "columnKind": "utf16CodeUnits",
                }
            ],
        }

        sarif_str = json.dumps(sarif, indent=2, default=str)

        if output_file:
            Path(output_file).write_text(sarif_str, encoding="utf-8")

        return sarif_str

    @staticmethod
    def _rule(kind: FindingKind) -> dict:
        return {
            "id": kind.rule_id,
            "name": kind.value,
            "shortDescription": {"text": kind.title},
            "defaultConfiguration": {
                "level": SARIF_LEVEL_MAP.get(kind.severity, "warning")
            },
            "help": {
                "text": kind.fix,
                "markdown": f"**Fix:** {kind.fix}",
            },
            "properties": {
                "security-severity": SECURITY_SEVERITY.get(kind.severity, "5.0"),
                "tags": ["security", "arm-template", "secrets"],
            },
        }
