from __future__ import annotations

from typing import Any, Dict

_STRING_OR_LIST = {
    "anyOf": [
        {"type": "string", "minLength": 1},
        {"type": "array", "items": {"type": "string", "minLength": 1}},
    ]
}

_STEP = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "id": {"type": "string"},
        "uses": {"type": "string"},
        "run": {"type": "string"},
        "with": {"type": "object"},
        "env": {"type": "object"},
        "if": {"type": ["string", "boolean"]},
    },
}

_EXPRESSION = {"type": "string", "pattern": r"^\s*\$\{\{.*\}\}\s*$"}

_MATRIX = {
    "anyOf": [
        # The whole matrix may be an expression such as ${{ fromJson(...) }}.
        _EXPRESSION,
        {
            "type": "object",
            "properties": {
                "include": {"type": "array", "items": {"type": "object"}},
                "exclude": {"type": "array", "items": {"type": "object"}},
            },
            "additionalProperties": {"anyOf": [{"type": "array"}, _EXPRESSION]},
        },
    ]
}

_JOB = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "runs-on": _STRING_OR_LIST,
        "needs": _STRING_OR_LIST,
        "steps": {"type": "array", "items": _STEP},
        "strategy": {
            "type": "object",
            "properties": {
                "matrix": _MATRIX,
                "fail-fast": {"type": "boolean"},
                "max-parallel": {"type": "integer", "minimum": 1},
            },
        },
    },
}


def workflow_schema() -> Dict[str, Any]:
    """Structural schema for a workflow document (after `on` key repair)."""
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "required": ["on", "jobs"],
        "properties": {
            "name": {"type": "string"},
            "on": {
                "anyOf": [
                    {"type": "string", "minLength": 1},
                    {"type": "array", "items": {"type": "string", "minLength": 1}},
                    {"type": "object"},
                ]
            },
            "jobs": {
                "type": "object",
                "additionalProperties": _JOB,
            },
            "env": {"type": "object"},
            "permissions": {"type": ["object", "string"]},
            "concurrency": {"type": ["object", "string"]},
            "defaults": {"type": "object"},
        },
    }
