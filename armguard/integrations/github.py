"""
ArmGuard GitHub Actions Integration

Provides helpers for running ArmGuard in GitHub Actions:
- GitHub Actions annotations (warnings/errors)
- Step summary output
- Environment detection
"""

from __future__ import annotations

import logging
import os
from collections import Counter

import click

from armguard.core.finding import Finding, Severity

logger = logging.getLogger(__name__)


def is_github_actions() -> bool:
    """Check if currently running inside GitHub Actions."""
    return os.environ.get("GITHUB_ACTIONS") == "true"


def format_annotation(finding: Finding) -> str:
    """
    Format a finding as a workflow command:
    ::error file={name},line={line},title={title}::{message}
    """
    level = "error" if finding.severity in (Severity.CRITICAL, Severity.HIGH) else "warning"

    params = []
    if finding.location:
        params.append(f"file={finding.location.file_path}")
        params.append(f"line={finding.location.start_line}")
    params.append(f"title={finding.rule_id} - {finding.title}")

    msg = f"{finding.message} Fix: {finding.fix}"
    return f"::{level} {','.join(params)}::{msg}"


def emit_annotations(findings: list[Finding]) -> None:
    """
    Emit GitHub Actions workflow annotations for each finding.
    Errors show as red annotations, warnings as yellow.
    """
    if not is_github_actions():
        return

    for finding in findings:
        click.echo(format_annotation(finding))


def write_step_summary(
    findings: list[Finding],
    target: str,
    should_fail: bool = False,
) -> None:
    """
    Write a summary to the GitHub Actions step summary.
    This appears on the workflow run page.
    """
    if not is_github_actions():
        return

    summary_file = os.environ.get("GITHUB_STEP_SUMMARY")
    if not summary_file:
        return

    counter = Counter(f.severity.value for f in findings)
    lines = [
        "## ArmGuard Template Output Scan\n",
        f"**Target:** `{target}`\n",
        "| Severity | Count |",
        "|----------|-------|",
    ]
    for sev in ["CRITICAL", "HIGH", "MEDIUM", "LOW", "INFO"]:
        lines.append(f"| {sev} | {counter.get(sev, 0)} |")

    lines.append("")

    if should_fail:
        lines.append("### Status: FAILED")
        lines.append("Template outputs expose secrets and must be fixed before merging.")
    elif findings:
        lines.append("### Status: WARNINGS")
        lines.append("Review the findings below.")
    else:
        lines.append("### Status: PASSED")
        lines.append("No secret-leaking outputs found.")

    lines.append("")

    if findings:
        lines.append("<details><summary>Findings (click to expand)</summary>\n")
        sorted_findings = sorted(findings, key=lambda f: -f.severity.rank)
        for i, f in enumerate(sorted_findings[:20], start=1):
            lines.append(f"{i}. **{f.severity.value}** - {f.title} ({f.rule_id}): `{f.output_name}`")
            if f.location:
                lines.append(f"   - Location: `{f.location.file_path}:{f.location.start_line}`")
        lines.append("\n</details>")

    try:
        with open(summary_file, "a", encoding="utf-8") as fh:
            fh.write("\n".join(lines) + "\n")
    except OSError as exc:
        logger.warning("Could not write step summary to %s: %s", summary_file, exc)
