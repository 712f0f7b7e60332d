"""
ArmGuard Configuration Management

Loads and manages configuration from .armguard.yaml files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from armguard.core.finding import Severity
from armguard.scanners.outputs import DEFAULT_MAX_TEXT_SIZE, OutputCheck

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".armguard.yaml"
POLICY_FILENAME = ".armguard-policy.yaml"

DEFAULT_EXCLUDE_PATHS = [
    "node_modules",
    ".git",
    "__pycache__",
    "venv",
    ".venv",
    ".tox",
    ".vscode",
    "*.parameters.json",
]


@dataclass
class CheckConfig:
    enabled: bool = True


@dataclass
class OutputConfig:
    format: str = "console"
    file: Optional[str] = None


@dataclass
class PolicyConfig:
    file: Optional[str] = None
    # Falls back to the policy file setting when unset
    fail_on_severity: Optional[str] = None


@dataclass
class ArmGuardConfig:
    """Root configuration object for ArmGuard."""

    output: OutputConfig = field(default_factory=OutputConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    checks: dict[str, CheckConfig] = field(
        default_factory=lambda: {check.value: CheckConfig() for check in OutputCheck}
    )
    max_text_size: int = DEFAULT_MAX_TEXT_SIZE
    exclude_paths: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATHS))

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "ArmGuardConfig":
        """Load configuration from a YAML file, falling back to defaults."""
        if config_path is None:
            # Search in current directory
            config_path = Path.cwd() / CONFIG_FILENAME

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Ignoring unreadable config %s: %s", config_path, exc)
            return cls()

        if not isinstance(raw, dict):
            logger.warning("Ignoring config %s: top level is not a mapping", config_path)
            return cls()

        return cls._from_dict(raw)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "ArmGuardConfig":
        """Build config from a parsed YAML dictionary.

        Sections with the wrong shape are replaced by their defaults.
        """
        output_data = _section(data, "output")
        output = OutputConfig(
            format=output_data.get("format") or "console",
            file=output_data.get("file"),
        )

        policy_data = _section(data, "policy")
        policy = PolicyConfig(
            file=policy_data.get("file"),
            fail_on_severity=_severity_name(policy_data.get("fail_on_severity")),
        )

        checks: dict[str, CheckConfig] = {}
        checks_data = _section(data, "checks")
        for check in OutputCheck:
            check_raw = checks_data.get(check.value)
            if isinstance(check_raw, bool):
                # Shorthand: "list_functions: false"
                enabled = check_raw
            elif isinstance(check_raw, dict):
                enabled = bool(check_raw.get("enabled", True))
            else:
                if check_raw is not None:
                    logger.warning("Ignoring invalid settings for check '%s'", check.value)
                enabled = True
            checks[check.value] = CheckConfig(enabled=enabled)

        return cls(
            output=output,
            policy=policy,
            checks=checks,
            max_text_size=_max_text_size(data.get("max_text_size")),
            exclude_paths=_exclude_paths(data.get("exclude_paths")),
        )

    def enabled_checks(self) -> set[OutputCheck]:
        return {
            check for check in OutputCheck
            if self.checks.get(check.value, CheckConfig()).enabled
        }


# ── Helpers ──

def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning("Ignoring config section '%s': not a mapping", key)
        return {}
    return value


def _severity_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    if str(value).upper() not in Severity.__members__:
        logger.warning("Ignoring unknown fail_on_severity %r", value)
        return None
    return str(value)


def _max_text_size(value: Any) -> int:
    if value is None:
        return DEFAULT_MAX_TEXT_SIZE
    try:
        size = int(value)
    except (TypeError, ValueError):
        size = 0
    if isinstance(value, bool) or size < 1:
        logger.warning("Ignoring invalid max_text_size %r", value)
        return DEFAULT_MAX_TEXT_SIZE
    return size


def _exclude_paths(value: Any) -> list[str]:
    if value is None:
        return list(DEFAULT_EXCLUDE_PATHS)
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        logger.warning("Ignoring invalid exclude_paths %r", value)
        return list(DEFAULT_EXCLUDE_PATHS)
    return [str(item) for item in value if item is not None]


def generate_default_config() -> str:
    """Generate a default .armguard.yaml configuration file content."""
    return """\
# ArmGuard Configuration

# Output settings
output:
  format: console  # console, json, sarif
  # file: armguard-report.json

# Policy settings
policy:
  file: .armguard-policy.yaml
  # fail_on_severity: HIGH  # overrides the policy file setting

# Output checks
checks:
  list_functions:
    enabled: true
  password_names:
    enabled: true
  secure_parameters:
    enabled: true

# Serialized outputs longer than this are skipped
max_text_size: 1000000

# Global exclusions
exclude_paths:
  - node_modules
  - .git
  - "*.parameters.json"
"""


def generate_default_policy() -> str:
    """Generate a default .armguard-policy.yaml file content."""
    return """\
# ArmGuard Security Policy
version: "1.0"
name: "Default Security Policy"

settings:
  fail_on_severity: HIGH
  default_action: warn

rules:
  # Block secure parameters leaking through outputs
  - id: block_secure_parameter_leak
    kinds:
      - SecureParameterLeak
    action: fail

  # Block list*() results in outputs
  - id: block_list_functions
    rule_ids:
      - AG-OUT-001
    action: fail

  # Allow password-named outputs in test templates
  - id: allow_test_templates
    file_patterns:
      - ".*test.*"
    kinds:
      - NameSuggestsSecret
    action: allow
    priority: 100
"""
