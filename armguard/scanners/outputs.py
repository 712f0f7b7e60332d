"""
ArmGuard Secret Output Scanner

Flags template outputs that may expose secrets. Three passes run in order:
- list*() function calls (listKeys, listSecrets, ...) inside output expressions
- output names containing "password"
- live references to securestring / secureobject parameters

The scanner is a pure function of the template: it keeps no state between
calls and never mutates its input, so one instance can be shared freely.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from armguard.core.exceptions import MalformedOutputValue
from armguard.core.finding import Finding, FindingKind
from armguard.core.template import OutputDefinition, Template
from armguard.rules.matchers import find_list_function_calls, find_parameter_reference
from armguard.rules.serialize import serialize_output

logger = logging.getLogger(__name__)

DEFAULT_MAX_TEXT_SIZE = 1_000_000

PASSWORD_KEYWORD = "password"


class OutputCheck(Enum):
    LIST_FUNCTIONS = "list_functions"
    PASSWORD_NAMES = "password_names"
    SECURE_PARAMETERS = "secure_parameters"


ALL_CHECKS = frozenset(OutputCheck)


@dataclass
class OutputScanResult:
    findings: list[Finding] = field(default_factory=list)
    errors: list[MalformedOutputValue] = field(default_factory=list)


class SecretOutputScanner:
    """Detects outputs that leak secrets in a single parsed template."""

    name = "outputs"

    def __init__(
        self,
        max_text_size: Optional[int] = DEFAULT_MAX_TEXT_SIZE,
        checks: Iterable[OutputCheck] = ALL_CHECKS,
    ) -> None:
        self.max_text_size = max_text_size
        self.checks = frozenset(checks)

    def scan(self, template: Template) -> List[Finding]:
        return self.evaluate(template).findings

    def evaluate(self, template: Template) -> OutputScanResult:
        """Run all enabled passes and collect findings plus per-output errors."""
        result = OutputScanResult()
        outputs = list(template.outputs.values())

        # Serialize each output once; outputs that fail are skipped by the
        # value-based passes and reported in result.errors.
        texts: dict[str, str] = {}
        if self.checks & {OutputCheck.LIST_FUNCTIONS, OutputCheck.SECURE_PARAMETERS}:
            for output in outputs:
                try:
                    texts[output.name] = serialize_output(output, self.max_text_size)
                except MalformedOutputValue as exc:
                    logger.warning("Skipping output '%s': %s", output.name, exc.reason)
                    result.errors.append(exc)

        if OutputCheck.LIST_FUNCTIONS in self.checks:
            for output in outputs:
                if output.name in texts:
                    result.findings.extend(self._check_list_functions(output, texts[output.name]))

        if OutputCheck.PASSWORD_NAMES in self.checks:
            for output in outputs:
                result.findings.extend(self._check_password_name(output))

        if OutputCheck.SECURE_PARAMETERS in self.checks:
            for parameter in template.secure_parameters:
                for output in outputs:
                    if output.name not in texts:
                        continue
                    if find_parameter_reference(texts[output.name], parameter.name) is None:
                        continue
                    result.findings.append(Finding(
                        output_name=output.name,
                        kind=FindingKind.SECURE_PARAMETER_LEAK,
                        message=(
                            f"Output '{output.name}' contains {parameter.type} "
                            f"parameter '{parameter.name}'."
                        ),
                        metadata={
                            "parameter": parameter.name,
                            "parameter_type": parameter.type,
                        },
                    ))

        logger.debug(
            "Scanned %d output(s): %d finding(s), %d error(s)",
            len(outputs), len(result.findings), len(result.errors),
        )
        return result

    # ── Passes ──

    @staticmethod
    def _check_list_functions(output: OutputDefinition, text: str) -> List[Finding]:
        return [
            Finding(
                output_name=output.name,
                kind=FindingKind.LIST_FUNCTION_SECRET,
                message=f"Output '{output.name}' calls {call.function}(), which can return secrets.",
                metadata={"function": call.function},
            )
            for call in find_list_function_calls(text)
        ]

    @staticmethod
    def _check_password_name(output: OutputDefinition) -> List[Finding]:
        if PASSWORD_KEYWORD not in output.name.lower():
            return []
        return [Finding(
            output_name=output.name,
            kind=FindingKind.NAME_SUGGESTS_SECRET,
            message=f"Output '{output.name}' looks like it contains a password.",
        )]
