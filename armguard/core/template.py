"""
ArmGuard Template Model

Read-only view over a parsed ARM deployment template: its outputs and
parameter declarations. Loading from disk accepts JSON templates and,
for convenience, YAML renditions of the same document.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

import yaml

from armguard.core.exceptions import TemplateLoadError, UnknownParameterType

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIXES = (".json", ".yaml", ".yml")

# deploymentTemplate.json and its subscription / managementGroup / tenant variants
_SCHEMA_SUFFIX = "deploymenttemplate.json"


class ParameterType(Enum):
    STRING = "string"
    SECURESTRING = "securestring"
    INT = "int"
    BOOL = "bool"
    OBJECT = "object"
    SECUREOBJECT = "secureobject"
    ARRAY = "array"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "ParameterType":
        """Parse a parameter type (case-insensitive)."""
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnknownParameterType(value)

    @property
    def is_secure(self) -> bool:
        return self in (ParameterType.SECURESTRING, ParameterType.SECUREOBJECT)


@dataclass(frozen=True)
class ParameterDefinition:
    name: str
    type: Optional[str] = None

    @property
    def is_secure(self) -> bool:
        try:
            return ParameterType.from_string(self.type).is_secure
        except UnknownParameterType:
            logger.debug("Parameter '%s' has unrecognized type %r", self.name, self.type)
            return False


@dataclass(frozen=True)
class OutputDefinition:
    name: str
    type: str = ""
    value: Any = None
    # Full raw output object (type, value, copy, condition, ...)
    definition: Any = None


@dataclass(frozen=True)
class Template:
    outputs: Mapping[str, OutputDefinition] = field(default_factory=dict)
    parameters: Mapping[str, ParameterDefinition] = field(default_factory=dict)
    source: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: Optional[Path] = None) -> "Template":
        """Build a template from an already-parsed document."""
        outputs: dict[str, OutputDefinition] = {}
        for name, raw in _as_mapping(data.get("outputs")).items():
            name = str(name)
            if isinstance(raw, Mapping):
                outputs[name] = OutputDefinition(
                    name=name,
                    type=str(raw.get("type") or ""),
                    value=raw.get("value"),
                    definition=raw,
                )
            else:
                outputs[name] = OutputDefinition(name=name, value=raw, definition=raw)

        parameters: dict[str, ParameterDefinition] = {}
        for name, raw in _as_mapping(data.get("parameters")).items():
            name = str(name)
            param_type = raw.get("type") if isinstance(raw, Mapping) else None
            parameters[name] = ParameterDefinition(name=name, type=param_type)

        return cls(
            outputs=MappingProxyType(outputs),
            parameters=MappingProxyType(parameters),
            source=source,
        )

    @property
    def secure_parameters(self) -> list[ParameterDefinition]:
        return [p for p in self.parameters.values() if p.is_secure]


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    return {}


def is_deployment_template(data: Any) -> bool:
    """Heuristic check that a parsed document is an ARM deployment template."""
    if not isinstance(data, Mapping):
        return False
    schema = data.get("$schema")
    if isinstance(schema, str):
        lowered = schema.lower().rstrip("#")
        return lowered.endswith(_SCHEMA_SUFFIX)
    return "resources" in data and ("outputs" in data or "parameters" in data)


def parse_template_text(text: str, suffix: str = ".json") -> Any:
    """Parse template text as JSON, or YAML for .yaml/.yml sources."""
    if suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_load(text)
    return json.loads(text)


def read_document(path: Path) -> tuple[str, Mapping[str, Any]]:
    """Read a template file, returning its raw text and parsed document."""
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise TemplateLoadError(path, f"cannot read file ({exc})") from exc
    except UnicodeDecodeError as exc:
        raise TemplateLoadError(path, f"file is not valid UTF-8 ({exc})") from exc

    try:
        data = parse_template_text(text, path.suffix)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise TemplateLoadError(path, f"cannot parse document ({exc})") from exc
    except RecursionError as exc:
        raise TemplateLoadError(path, "document is nested too deeply") from exc

    if not isinstance(data, Mapping):
        raise TemplateLoadError(path, "top-level document is not an object")

    return text, data


def load_template(path: Path) -> Template:
    """Load and parse a template file."""
    _, data = read_document(path)
    return Template.from_dict(data, source=path)
