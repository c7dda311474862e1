"""OpenAPI metadata and customization utilities.

Enriches the generated OpenAPI schema with:
- Tags metadata
- A shared ``Error`` component schema
- Documented 429 responses on every rate limited operation

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

TAGS_METADATA = [
    {
        "name": "Transcription",
        "description": "Create and list audio transcriptions.",
    },
    {
        "name": "Info",
        "description": "Service metadata and endpoint discovery.",
    },
    {
        "name": "Health",
        "description": "Liveness and database connectivity checks.",
    },
]

ERROR_SCHEMA = {
    "type": "object",
    "properties": {
        "error": {
            "type": "object",
            "properties": {
                "code": {"type": "string"},
                "message": {"type": "string"},
                "request_id": {"type": "string", "nullable": True},
                "details": {"type": "object"},
            },
            "required": ["code", "message"],
        }
    },
}

RATE_LIMITED_RESPONSE = {
    "description": "Rate limit exceeded",
    "headers": {
        "Retry-After": {
            "description": "Seconds until the current window resets",
            "schema": {"type": "integer"},
        },
    },
    "content": {
        "application/json": {"schema": {"$ref": "#/components/schemas/Error"}}
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add metadata and error docs.

    - Adds tags metadata if not present
    - Registers ``components.schemas.Error``
    - Documents a 429 response for every operation under ``/api``
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        components.setdefault("schemas", {}).setdefault("Error", ERROR_SCHEMA)

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if not path.startswith("/api/"):
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj.setdefault("responses", {}).setdefault(
                        "429", RATE_LIMITED_RESPONSE
                    )

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
