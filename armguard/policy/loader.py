"""
ArmGuard Policy Loader

Loads security policies from YAML files.
Policies define rules for how findings should be handled:
  - fail: block the pipeline
  - warn: report but don't block
  - allow: accept the finding
  - suppress: hide the finding entirely
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from armguard.core.finding import Severity

logger = logging.getLogger(__name__)

ACTIONS = ("fail", "warn", "allow", "suppress")


@dataclass
class PolicyRule:
    """A single policy rule."""

    id: str
    action: str = "warn"  # fail, warn, allow, suppress
    severity: Optional[str] = None
    kinds: list[str] = field(default_factory=list)
    rule_ids: list[str] = field(default_factory=list)
    file_patterns: list[str] = field(default_factory=list)
    output_patterns: list[str] = field(default_factory=list)
    priority: int = 0


@dataclass
class PolicySettings:
    """Global policy settings."""

    fail_on_severity: str = "HIGH"
    default_action: str = "warn"


@dataclass
class Policy:
    """A complete security policy."""

    version: str = "1.0"
    name: str = "Default Policy"
    settings: PolicySettings = field(default_factory=PolicySettings)
    rules: list[PolicyRule] = field(default_factory=list)

    @classmethod
    def load(cls, policy_path: Path) -> "Policy":
        """Load a policy from a YAML file."""
        if not policy_path.exists():
            return cls()

        try:
            with open(policy_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Ignoring unreadable policy %s: %s", policy_path, exc)
            return cls()

        if not isinstance(data, dict):
            logger.warning("Ignoring policy %s: top level is not a mapping", policy_path)
            return cls()

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "Policy":
        settings_data = data.get("settings") or {}
        settings = PolicySettings(
            fail_on_severity=_severity_name(settings_data.get("fail_on_severity")),
            default_action=settings_data.get("default_action", "warn"),
        )

        rules = []
        for rule_data in data.get("rules") or []:
            action = rule_data.get("action", "warn")
            if action not in ACTIONS:
                logger.warning(
                    "Policy rule '%s' has unknown action %r; using 'warn'",
                    rule_data.get("id", "unknown"), action,
                )
                action = "warn"
            rules.append(
                PolicyRule(
                    id=rule_data.get("id", "unknown"),
                    action=action,
                    severity=rule_data.get("severity"),
                    kinds=rule_data.get("kinds", []),
                    rule_ids=rule_data.get("rule_ids", []),
                    file_patterns=rule_data.get("file_patterns", []),
                    output_patterns=rule_data.get("output_patterns", []),
                    priority=rule_data.get("priority", 0),
                )
            )

        return cls(
            version=str(data.get("version", "1.0")),
            name=data.get("name", "Default Policy"),
            settings=settings,
            rules=rules,
        )


def _severity_name(value: Optional[str]) -> str:
    if value is None:
        return "HIGH"
    if str(value).upper() not in Severity.__members__:
        logger.warning("Unknown fail_on_severity %r in policy; using 'HIGH'", value)
        return "HIGH"
    return str(value)
