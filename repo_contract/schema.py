"""JSON Schema for contract documents."""

from __future__ import annotations

import json
from typing import Any

SCHEMA_ID = "https://repo-contract.dev/schemas/v1.json"

_SEVERITY = {"type": "string", "enum": ["error", "warning", "info"]}

_STATUS_CHECK = {
    "oneOf": [
        {"type": "string"},
        {
            "type": "object",
            "required": ["context"],
            "additionalProperties": False,
            "properties": {
                "context": {"type": "string"},
                "app_id": {"type": ["integer", "null"], "minimum": 0},
            },
        },
    ]
}

_RULES = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "required_pull_request_reviews": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "enabled": {"type": "boolean"},
                "required_approving_review_count": {
                    "type": "integer",
                    "minimum": 0,
                    "maximum": 255,
                },
                "dismiss_stale_reviews": {"type": "boolean"},
                "require_code_owner_reviews": {"type": "boolean"},
                "require_last_push_approval": {"type": "boolean"},
            },
        },
        "required_status_checks": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "enabled": {"type": "boolean"},
                "strict": {"type": "boolean"},
                "checks": {"type": "array", "items": _STATUS_CHECK},
            },
        },
        "enforce_admins": {"type": "boolean"},
        "required_linear_history": {"type": "boolean"},
        "allow_force_pushes": {"type": "boolean"},
        "allow_deletions": {"type": "boolean"},
        "required_conversation_resolution": {"type": "boolean"},
        "required_signatures": {"type": "boolean"},
    },
}

_REQUIRED_FILE = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "path": {"type": "string", "minLength": 1},
        "pattern": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "alternatives": {"type": "array", "items": {"type": "string"}},
        "severity": _SEVERITY,
        "case_insensitive": {"type": "boolean"},
    },
    "oneOf": [
        {"required": ["path"], "not": {"required": ["pattern"]}},
        {"required": ["pattern"], "not": {"required": ["path"]}},
    ],
}

CONTRACT_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": SCHEMA_ID,
    "title": "Repository contract",
    "type": "object",
    "required": ["version"],
    "additionalProperties": False,
    "properties": {
        "$schema": {"type": "string"},
        "version": {"type": "string"},
        "profile": {"type": "string"},
        "language": {"type": "string"},
        "branch_protection": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "branches": {"type": "array", "items": {"type": "string"}},
                "rules": _RULES,
            },
        },
        "required_files": {"type": "array", "items": _REQUIRED_FILE},
        "metadata": {},
    },
}


def schema_json() -> str:
    """Return the contract schema as pretty-printed JSON."""
    return json.dumps(CONTRACT_SCHEMA, indent=2)
