"""
Pytest Configuration and Fixtures

Shared fixtures for ArmGuard tests.
"""

import json
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator

import pytest

from armguard.core.config import ArmGuardConfig
from armguard.core.finding import Finding, FindingKind, Location
from armguard.core.template import Template

DEPLOYMENT_SCHEMA = "https://schema.management.azure.com/schemas/2019-04-01/deploymentTemplate.json#"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config() -> ArmGuardConfig:
    """Create a default configuration."""
    return ArmGuardConfig()


@pytest.fixture
def make_template() -> Callable[..., Template]:
    """Build a Template from output values and parameter types."""

    def _make(outputs: dict[str, Any] = None, parameters: dict[str, str] = None) -> Template:
        data: dict[str, Any] = {}
        if outputs is not None:
            data["outputs"] = {
                name: {"type": "string", "value": value} for name, value in outputs.items()
            }
        if parameters is not None:
            data["parameters"] = {
                name: {"type": param_type} for name, param_type in parameters.items()
            }
        return Template.from_dict(data)

    return _make


@pytest.fixture
def sample_findings() -> list[Finding]:
    """Create one finding of each kind."""
    return [
        Finding(
            output_name="storageKey",
            kind=FindingKind.LIST_FUNCTION_SECRET,
            message="Output 'storageKey' calls listKeys(), which can return secrets.",
            location=Location(file_path=Path("templates/azuredeploy.json"), start_line=40),
            metadata={"function": "listKeys"},
        ),
        Finding(
            output_name="adminPassword",
            kind=FindingKind.NAME_SUGGESTS_SECRET,
            message="Output 'adminPassword' looks like it contains a password.",
            location=Location(file_path=Path("templates/test/azuredeploy.json"), start_line=12),
        ),
        Finding(
            output_name="connection",
            kind=FindingKind.SECURE_PARAMETER_LEAK,
            message="Output 'connection' contains securestring parameter 'sqlPassword'.",
            location=Location(file_path=Path("templates/azuredeploy.json"), start_line=55),
            metadata={"parameter": "sqlPassword", "parameter_type": "securestring"},
        ),
    ]


def _write_template(path: Path, outputs: dict, parameters: dict = None) -> Path:
    document = {
        "$schema": DEPLOYMENT_SCHEMA,
        "contentVersion": "1.0.0.0",
        "parameters": parameters or {},
        "resources": [],
        "outputs": outputs,
    }
    path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def leaky_template_file(temp_dir: Path) -> Path:
    """Create a template with one leaking output of each kind and one clean output."""
    return _write_template(
        temp_dir / "azuredeploy.json",
        outputs={
            "storageEndpoint": {
                "type": "string",
                "value": "[reference(variables('storageName')).primaryEndpoints.blob]",
            },
            "storageKey": {
                "type": "string",
                "value": "[listKeys(resourceId('Microsoft.Storage/storageAccounts', "
                         "variables('storageName')), '2019-06-01').keys[0].value]",
            },
            "adminPassword": {
                "type": "string",
                "value": "[variables('generated')]",
            },
            "connection": {
                "type": "string",
                "value": "[concat('Server=db;Password=', parameters('sqlPassword'))]",
            },
        },
        parameters={
            "sqlPassword": {"type": "securestring"},
            "location": {"type": "string"},
        },
    )


@pytest.fixture
def clean_template_file(temp_dir: Path) -> Path:
    """Create a template whose outputs expose nothing sensitive."""
    return _write_template(
        temp_dir / "clean.json",
        outputs={
            "vmName": {"type": "string", "value": "[parameters('vmName')]"},
        },
        parameters={"vmName": {"type": "string"}},
    )


@pytest.fixture
def policy_file(temp_dir: Path) -> Path:
    """Create a test policy file."""
    policy = temp_dir / "policy.yaml"
    policy.write_text('''
version: "1.0"
name: "Test Policy"

settings:
  fail_on_severity: CRITICAL
  default_action: warn

rules:
  - id: block_list_functions
    rule_ids:
      - AG-OUT-001
    action: fail

  - id: allow_test_templates
    file_patterns:
      - ".*test.*"
    action: allow
    priority: 100

  - id: suppress_connection_outputs
    output_patterns:
      - "^connection$"
    action: suppress
    priority: 50
''')
    return policy
