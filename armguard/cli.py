"""
ArmGuard CLI

Command-line interface for scanning ARM templates.

Commands:
    armguard scan [PATH]    - Check template outputs for leaked secrets
    armguard init           - Create default config & policy files
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from armguard import __version__
from armguard.core.config import (
    CONFIG_FILENAME,
    POLICY_FILENAME,
    ArmGuardConfig,
    generate_default_config,
    generate_default_policy,
)
from armguard.integrations.github import (
    emit_annotations,
    is_github_actions,
    write_step_summary,
)
from armguard.policy.engine import PolicyEngine
from armguard.policy.loader import Policy
from armguard.reporting.console import ConsoleReporter, safe_echo
from armguard.reporting.json_reporter import JSONReporter
from armguard.reporting.sarif import SARIFReporter
from armguard.scanners.outputs import OutputCheck, SecretOutputScanner
from armguard.scanners.templates import TemplateScanner

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.version_option(version=__version__, prog_name="ArmGuard")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging on stderr.")
def cli(verbose: bool) -> None:
    """
    ArmGuard - ARM Template Output Scanner

    Detect deployment template outputs that expose keys, passwords
    and secure parameters.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


# ═══════════════════════════════════════════════════════
#  armguard scan
# ═══════════════════════════════════════════════════════
@cli.command()
@click.argument("path", type=click.Path(exists=True), default=".")
@click.option("--format", "-f", "output_format", type=click.Choice(["console", "json", "sarif"]),
              default=None, help="Output format (default: console).")
@click.option("--output", "-o", "output_file", type=click.Path(), default=None,
              help="Write report to a file.")
@click.option("--fail-on", type=click.Choice(["critical", "high", "medium", "low", "info"],
              case_sensitive=False), default=None,
              help="Minimum severity that causes a non-zero exit code.")
@click.option("--exclude", multiple=True, help="Paths or patterns to exclude.")
@click.option("--no-list-functions", is_flag=True, help="Disable the list*() function check.")
@click.option("--no-password-names", is_flag=True, help="Disable the password output name check.")
@click.option("--no-secure-parameters", is_flag=True, help="Disable the secure parameter check.")
@click.option("--max-text-size", type=click.IntRange(min=1), default=None,
              help="Skip outputs whose serialized value is longer than this.")
@click.option("--ci", is_flag=True, help="Enable CI mode (GitHub Actions annotations, etc.).")
@click.option("--config", "config_path", type=click.Path(), default=None,
              help="Path to .armguard.yaml configuration file.")
def scan(
    path: str,
    output_format: Optional[str],
    output_file: Optional[str],
    fail_on: Optional[str],
    exclude: tuple,
    no_list_functions: bool,
    no_password_names: bool,
    no_secure_parameters: bool,
    max_text_size: Optional[int],
    ci: bool,
    config_path: Optional[str],
) -> None:
    """Scan templates for outputs that leak secrets.

    Examples:

        armguard scan

        armguard scan ./templates --format json --output results.json

        armguard scan azuredeploy.json --format sarif --fail-on medium --ci
    """
    target = Path(path).resolve()
    base_dir = target if target.is_dir() else target.parent

    # ── Load configuration ──
    cfg_path = Path(config_path) if config_path else base_dir / CONFIG_FILENAME
    config = ArmGuardConfig.load(cfg_path)

    # CLI flags override config
    fmt = output_format or config.output.format
    out_file = output_file or config.output.file
    exclusions = list(exclude) + config.exclude_paths

    checks = config.enabled_checks()
    if no_list_functions:
        checks.discard(OutputCheck.LIST_FUNCTIONS)
    if no_password_names:
        checks.discard(OutputCheck.PASSWORD_NAMES)
    if no_secure_parameters:
        checks.discard(OutputCheck.SECURE_PARAMETERS)

    output_scanner = SecretOutputScanner(
        max_text_size=max_text_size or config.max_text_size,
        checks=checks,
    )
    scanner = TemplateScanner(target, exclude=exclusions, output_scanner=output_scanner)

    # ── Run scan ──
    findings = scanner.scan()

    # ── Apply policy ──
    policy_path = base_dir / (config.policy.file or POLICY_FILENAME)
    policy = Policy.load(policy_path)
    engine = PolicyEngine(policy, base_path=base_dir)
    policy_result = engine.evaluate(
        findings, fail_on=fail_on or config.policy.fail_on_severity
    )
    display_findings = policy_result.visible

    # ── Report ──
    if fmt == "json":
        reporter = JSONReporter(target=str(target))
        json_str = reporter.report(
            display_findings,
            output_file=out_file,
            errors=scanner.errors,
            templates_scanned=scanner.templates_scanned,
        )
        if not out_file:
            safe_echo(json_str)
    elif fmt == "sarif":
        reporter = SARIFReporter(target=str(target))
        sarif_str = reporter.report(display_findings, output_file=out_file)
        if not out_file:
            safe_echo(sarif_str)
    else:
        console = ConsoleReporter(target=str(target))
        console.report(
            display_findings,
            templates_scanned=scanner.templates_scanned,
            errors=scanner.errors,
            policy_result=policy_result,
        )
        if out_file:
            # Also write JSON when console + output file
            JSONReporter(target=str(target)).report(
                display_findings,
                output_file=out_file,
                errors=scanner.errors,
                templates_scanned=scanner.templates_scanned,
            )

    # ── CI integrations ──
    if ci or is_github_actions():
        emit_annotations(display_findings)
        write_step_summary(display_findings, str(target), policy_result.should_fail)

    # ── Exit code ──
    if policy_result.should_fail:
        sys.exit(1)


# ═══════════════════════════════════════════════════════
#  armguard init
# ═══════════════════════════════════════════════════════
@cli.command()
@click.option("--path", "-p", "target_path", type=click.Path(), default=".",
              help="Directory to create config files in.")
def init(target_path: str) -> None:
    """Create default .armguard.yaml and policy file."""
    target = Path(target_path).resolve()
    target.mkdir(parents=True, exist_ok=True)

    for filename, content in (
        (CONFIG_FILENAME, generate_default_config()),
        (POLICY_FILENAME, generate_default_policy()),
    ):
        file_path = target / filename
        if file_path.exists():
            safe_echo(click.style(f"  [!] {file_path} already exists, skipping.", fg="yellow"))
        else:
            file_path.write_text(content, encoding="utf-8")
            safe_echo(click.style(f"  [+] Created {file_path}", fg="green"))

    safe_echo("")
    safe_echo("  Edit these files to customize your security policy.")
    safe_echo("  Run 'armguard scan' to start scanning.")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
