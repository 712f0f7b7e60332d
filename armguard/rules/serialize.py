"""
Canonical text form of template outputs.

Every output is rendered to indented JSON before any pattern runs, so
expressions buried in nested objects, arrays and copy loops are all
visible to the matchers in one flat string.
"""

from __future__ import annotations

import json
from typing import Optional

from armguard.core.exceptions import MalformedOutputValue, OutputTooLarge
from armguard.core.template import OutputDefinition

# Serializers that escape HTML-sensitive characters write the single quote
# as \u0027; fold it back so parameter patterns still match.
_ESCAPED_SINGLE_QUOTE = "\\u0027"


def normalize_quotes(text: str) -> str:
    """Replace escaped unicode single quotes with literal ones."""
    return text.replace(_ESCAPED_SINGLE_QUOTE, "'")


def serialize_value(name: str, value: object, max_length: Optional[int] = None) -> str:
    """Render an arbitrary output value to canonical JSON text."""
    try:
        text = json.dumps(value, indent=2, ensure_ascii=False)
    except (TypeError, ValueError, RecursionError) as exc:
        raise MalformedOutputValue(name, f"cannot serialize value ({exc})") from exc

    text = normalize_quotes(text)

    if max_length is not None and len(text) > max_length:
        raise OutputTooLarge(name, len(text), max_length)
    return text


def serialize_output(output: OutputDefinition, max_length: Optional[int] = None) -> str:
    """Render the full output definition (type, value, copy, ...) to text."""
    body = output.definition if output.definition is not None else output.value
    return serialize_value(output.name, body, max_length)
