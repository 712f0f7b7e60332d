"""
ArmGuard Policy Evaluation Engine

Evaluates findings against policy rules to determine:
- Which findings should fail the pipeline
- Which should be warnings
- Which should be allowed/suppressed

Rules are matched by severity, finding kind, rule ID, file pattern and
output name pattern. Higher-priority rules take precedence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from armguard.core.finding import Finding, Severity
from armguard.policy.loader import Policy, PolicyRule


@dataclass
class PolicyResult:
    """Result of evaluating findings against a policy."""

    findings: list[Finding] = field(default_factory=list)
    failed: list[Finding] = field(default_factory=list)
    warned: list[Finding] = field(default_factory=list)
    allowed: list[Finding] = field(default_factory=list)
    suppressed: list[Finding] = field(default_factory=list)
    should_fail: bool = False

    @property
    def visible(self) -> list[Finding]:
        """Findings that were not suppressed, in original order."""
        hidden = {id(f) for f in self.suppressed}
        return [f for f in self.findings if id(f) not in hidden]


class PolicyEngine:
    """
    Evaluates output findings against a policy.
    """

    def __init__(self, policy: Policy, base_path: Optional[Path] = None) -> None:
        self.policy = policy
        # File patterns see paths relative to this directory
        self.base_path = base_path
        # Sort rules by priority (highest first)
        self._rules = sorted(policy.rules, key=lambda r: r.priority, reverse=True)

    def evaluate(
        self,
        findings: list[Finding],
        fail_on: Optional[str] = None,
    ) -> PolicyResult:
        """
        Evaluate a list of findings against the policy.

        Args:
            findings: List of findings to evaluate.
            fail_on: Override severity threshold for failing the pipeline.

        Returns:
            PolicyResult with categorized findings.
        """
        result = PolicyResult(findings=list(findings))

        fail_severity = Severity.from_string(
            fail_on or self.policy.settings.fail_on_severity
        )

        for finding in findings:
            action = self._match_action(finding)

            if action == "suppress":
                result.suppressed.append(finding)
            elif action == "allow":
                result.allowed.append(finding)
            elif action == "fail" or finding.severity >= fail_severity:
                result.failed.append(finding)
                result.should_fail = True
            else:
                result.warned.append(finding)

        return result

    def _match_action(self, finding: Finding) -> str:
        """
        Find the highest-priority matching rule for a finding.
        Returns the action string, or the default action if no rule matches.
        """
        for rule in self._rules:
            if self._rule_matches(rule, finding):
                return rule.action

        return self.policy.settings.default_action

    def _rule_matches(self, rule: PolicyRule, finding: Finding) -> bool:
        """Check if a policy rule matches a finding."""
        if rule.severity:
            if finding.severity.value != rule.severity.upper():
                return False

        if rule.kinds:
            kinds = {k.lower() for k in rule.kinds}
            if finding.kind.value.lower() not in kinds and finding.kind.name.lower() not in kinds:
                return False

        if rule.rule_ids:
            if finding.rule_id not in rule.rule_ids:
                return False

        if rule.file_patterns:
            if not finding.location:
                return False
            file_str = self._relative_path(finding.location.file_path)
            if not any(re.search(pattern, file_str) for pattern in rule.file_patterns):
                return False

        if rule.output_patterns:
            if not any(
                re.search(pattern, finding.output_name, re.IGNORECASE)
                for pattern in rule.output_patterns
            ):
                return False

        return True

    def _relative_path(self, file_path: Path) -> str:
        if self.base_path is not None:
            try:
                file_path = Path(file_path).relative_to(self.base_path)
            except ValueError:
                pass
        return Path(file_path).as_posix()
