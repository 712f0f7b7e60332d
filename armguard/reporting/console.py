"""
ArmGuard Console Reporter

Generates human-readable colored console output.
"""

from __future__ import annotations

import sys
from collections import Counter
from typing import Optional, Sequence

import click

from armguard import __version__
from armguard.core.exceptions import ArmGuardError
from armguard.core.finding import Finding
from armguard.policy.engine import PolicyResult


def safe_echo(text: str = "", **kwargs) -> None:
    """Echo text, handling Unicode issues on Windows consoles."""
    try:
        click.echo(text, **kwargs)
    except UnicodeEncodeError:
        safe = text.encode(sys.stdout.encoding or "utf-8", errors="replace").decode(
            sys.stdout.encoding or "utf-8", errors="replace"
        )
        click.echo(safe, **kwargs)


# Severity colors
SEVERITY_COLORS = {
    "CRITICAL": "bright_red",
    "HIGH": "red",
    "MEDIUM": "yellow",
    "LOW": "cyan",
    "INFO": "white",
}


class ConsoleReporter:
    """Prints a formatted security report to the console."""

    def __init__(self, target: str) -> None:
        self.target = target

    def report(
        self,
        findings: list[Finding],
        templates_scanned: int = 0,
        errors: Sequence[ArmGuardError] = (),
        policy_result: Optional[PolicyResult] = None,
    ) -> None:
        """
        Print the full scan report.

        Args:
            findings: Findings to display (suppressed ones already removed).
            templates_scanned: Number of templates that were checked.
            errors: Load and serialization errors collected during the scan.
            policy_result: Policy evaluation result.
        """
        self._print_header(templates_scanned)
        self._print_severity_summary(findings)

        if findings:
            self._print_detailed_findings(findings)
        if errors:
            self._print_errors(errors)

        self._print_footer(findings, policy_result)

    def _print_header(self, templates_scanned: int) -> None:
        safe_echo("")
        safe_echo(click.style("=" * 55, fg="bright_blue"))
        safe_echo(click.style("  ArmGuard Template Output Report", fg="bright_white", bold=True))
        safe_echo(click.style(f"  Version: {__version__}", fg="white"))
        safe_echo(click.style(f"  Target: {self.target}", fg="white"))
        safe_echo(click.style(f"  Templates scanned: {templates_scanned}", fg="white"))
        safe_echo(click.style("=" * 55, fg="bright_blue"))

    def _print_severity_summary(self, findings: list[Finding]) -> None:
        safe_echo("")
        safe_echo(click.style("  Findings Summary:", fg="bright_white", bold=True))
        counter = Counter(f.severity.value for f in findings)
        for sev in ["CRITICAL", "HIGH", "MEDIUM", "LOW", "INFO"]:
            count = counter.get(sev, 0)
            color = SEVERITY_COLORS.get(sev, "white")
            safe_echo(
                click.style(f"     {sev:10s}: ", fg=color) + click.style(str(count), fg="white")
            )

    def _print_detailed_findings(self, findings: list[Finding]) -> None:
        safe_echo("")
        safe_echo(click.style("  Detailed Findings:", fg="bright_white", bold=True))
        safe_echo(click.style("-" * 55, fg="bright_black"))

        # CRITICAL first; stable within a severity
        sorted_findings = sorted(findings, key=lambda f: -f.severity.rank)

        for idx, finding in enumerate(sorted_findings, start=1):
            sev = finding.severity.value
            color = SEVERITY_COLORS.get(sev, "white")

            safe_echo("")
            safe_echo(
                click.style(f"  {idx}. ", fg="white")
                + click.style(f" {sev} ", fg=color, bold=True)
                + click.style(f" {finding.title}", fg="bright_white")
            )
            safe_echo(click.style(f"      Rule: {finding.rule_id} ({finding.kind.value})", fg="bright_black"))
            safe_echo(click.style(f"      Output: {finding.output_name}", fg="bright_black"))
            if finding.location:
                loc = f"{finding.location.file_path}:{finding.location.start_line}"
                safe_echo(click.style(f"      Location: {loc}", fg="bright_black"))
            safe_echo(click.style(f"      {finding.message}", fg="white"))
            safe_echo(click.style(f"      Fix: {finding.fix}", fg="green"))

    def _print_errors(self, errors: Sequence[ArmGuardError]) -> None:
        safe_echo("")
        safe_echo(click.style("  Skipped:", fg="bright_white", bold=True))
        for error in errors:
            safe_echo(click.style(f"    [!] {error}", fg="yellow"))

    def _print_footer(
        self,
        findings: list[Finding],
        policy_result: Optional[PolicyResult],
    ) -> None:
        safe_echo("")
        safe_echo(click.style("=" * 55, fg="bright_blue"))

        if policy_result and policy_result.should_fail:
            safe_echo(
                click.style(
                    "  [X] FAILED - Template outputs expose secrets",
                    fg="bright_red",
                    bold=True,
                )
            )
        elif not findings:
            safe_echo(
                click.style("  [OK] PASSED - No secret-leaking outputs found", fg="green", bold=True)
            )
        else:
            safe_echo(
                click.style(
                    "  [!] WARNINGS - Review findings above",
                    fg="yellow",
                    bold=True,
                )
            )

        safe_echo(click.style("=" * 55, fg="bright_blue"))
        safe_echo("")
