from __future__ import annotations

from typing import Any, Dict

import jsonschema

from ..errors import ValidationError


# Events the example workflows are allowed to use. The allow-list in
# lab_config.yml must be a subset of these.
KNOWN_TRIGGERS = (
    "push",
    "pull_request",
    "pull_request_target",
    "workflow_dispatch",
    "workflow_call",
    "workflow_run",
    "schedule",
    "release",
    "repository_dispatch",
)


def lab_config_schema() -> Dict[str, Any]:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "required": [
            "workflows_dir",
            "allowed_triggers",
            "python_versions",
            "lint_tools",
            "require_pinned_actions",
        ],
        "properties": {
            "workflows_dir": {"type": "string", "minLength": 1},
            "allowed_triggers": {
                "type": "array",
                "minItems": 1,
                "uniqueItems": True,
                "items": {"type": "string", "enum": list(KNOWN_TRIGGERS)},
            },
            "python_versions": {
                "type": "array",
                "minItems": 1,
                "uniqueItems": True,
                "items": {"type": "string", "pattern": r"^3\.[0-9]+$"},
            },
            "lint_tools": {
                "type": "array",
                "uniqueItems": True,
                "items": {"type": "string", "minLength": 1},
            },
            "require_pinned_actions": {"type": "boolean"},
        },
        "additionalProperties": False,
    }


def validate_lab_config(cfg: Dict[str, Any]) -> None:
    """Validate lab_config.yml.

    Raises:
        ValidationError: if the configuration is invalid. The message names the
        failing path inside the document.
    """
    try:
        jsonschema.validate(instance=cfg, schema=lab_config_schema())
    except jsonschema.ValidationError as e:
        where = ".".join(str(p) for p in e.absolute_path) or "<root>"
        raise ValidationError(f"Invalid lab_config at {where}: {e.message}") from e
