"""
ArmGuard Template Scanner

Finds ARM deployment templates under a path, loads each one and runs the
secret output checks on it. Findings are pinned to the line where the
output is declared.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional

from armguard.core.exceptions import TemplateLoadError
from armguard.core.finding import Finding, Location
from armguard.core.scanner import BaseScanner
from armguard.core.template import (
    TEMPLATE_SUFFIXES,
    Template,
    is_deployment_template,
    read_document,
)
from armguard.scanners.outputs import SecretOutputScanner

logger = logging.getLogger(__name__)

_OUTPUTS_KEY = re.compile(r'\s*["\']?outputs["\']?\s*:', re.IGNORECASE)


class TemplateScanner(BaseScanner):
    """
    Scans ARM template files (.json, plus .yaml / .yml renditions)
    for outputs that leak secrets.
    """

    name = "templates"
    suffixes = TEMPLATE_SUFFIXES

    def __init__(
        self,
        target_path: Path,
        exclude: Optional[list[str]] = None,
        output_scanner: Optional[SecretOutputScanner] = None,
    ):
        super().__init__(target_path, exclude)
        self.output_scanner = output_scanner or SecretOutputScanner()
        self.templates_scanned = 0

    def scan(self) -> List[Finding]:
        findings: List[Finding] = []

        for template_file in self.iter_files():
            findings.extend(self.scan_file(template_file))

        return findings

    def scan_file(self, file_path: Path) -> List[Finding]:
        try:
            content, data = read_document(file_path)
        except TemplateLoadError as exc:
            # Only .json files are expected to be templates; other formats
            # are opportunistic and silently skipped when they fail to parse.
            if file_path.suffix.lower() == ".json":
                logger.warning("%s", exc)
                self.errors.append(exc)
            else:
                logger.debug("%s", exc)
            return []

        if not is_deployment_template(data):
            logger.debug("Skipping %s: not a deployment template", file_path)
            return []

        template = Template.from_dict(data, source=file_path)
        result = self.output_scanner.evaluate(template)
        self.errors.extend(result.errors)
        self.templates_scanned += 1

        lines = content.splitlines()
        return [
            finding.with_location(self._locate_output(file_path, lines, finding.output_name))
            for finding in result.findings
        ]

    # ── Helpers ──

    @staticmethod
    def _locate_output(file_path: Path, lines: list[str], output_name: str) -> Location:
        """Find the line that declares an output, falling back to the outputs block.

        The top-level outputs block is the least indented ``outputs`` key, so
        outputs of nested inline deployments are passed over. Only keys at the
        block's first child indentation count as declarations.
        """
        outputs_line = 0
        outputs_indent = -1
        for line_no, line in enumerate(lines, start=1):
            if _OUTPUTS_KEY.match(line):
                indent = _indent(line)
                if not outputs_line or indent < outputs_indent:
                    outputs_line, outputs_indent = line_no, indent

        if not outputs_line:
            return Location(file_path=file_path, start_line=1)

        key = re.compile(rf'\s*["\']?{re.escape(output_name)}["\']?\s*:')
        child_indent = None
        for line_no in range(outputs_line + 1, len(lines) + 1):
            line = lines[line_no - 1]
            if not line.strip():
                continue
            indent = _indent(line)
            if indent <= outputs_indent:
                break
            if child_indent is None:
                child_indent = indent
            if indent == child_indent and key.match(line):
                return Location(file_path=file_path, start_line=line_no, snippet=line.strip())

        return Location(
            file_path=file_path,
            start_line=outputs_line,
            snippet=lines[outputs_line - 1].strip(),
        )


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())
