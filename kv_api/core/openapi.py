"""OpenAPI metadata and customization utilities.

Provides a helper to enrich the generated OpenAPI schema with:
- Tags metadata
- Request body schemas for endpoints that parse their JSON body manually
- The shared error body and the 429 response on admission-controlled routes

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from kv_api.schemas.kv import CreateKeyValueBody, MessageResponse, UpdateKeyValueBody

_REQUEST_BODIES = {
    ("/kv", "post"): CreateKeyValueBody,
    ("/kv/{key}", "put"): UpdateKeyValueBody,
}

_ERROR_DESCRIPTIONS = {
    "400": "Bad Request: malformed body or missing 'key'/'value'",
    "404": "Not Found",
    "409": "Conflict: 'key' must be unique",
    "429": "Too Many Requests",
}

_ERROR_CODES = {
    ("/kv", "post"): ("400", "409", "429"),
    ("/kv", "get"): ("429",),
    ("/kv/{key}", "put"): ("400", "404", "429"),
    ("/kv/{key}", "get"): ("404", "429"),
    ("/kv/{key}", "delete"): ("404", "429"),
}


def _error_response(description: str) -> Dict[str, Any]:
    return {
        "description": description,
        "content": {
            "application/json": {"schema": {"$ref": "#/components/schemas/MessageResponse"}}
        },
    }


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add metadata and body schemas."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        schemas = components.setdefault("schemas", {})
        schemas.setdefault("MessageResponse", MessageResponse.model_json_schema())

        # Tags metadata
        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {
                "name": "KV",
                "description": "Key-value records; every call passes admission control first.",
            },
            {
                "name": "Health",
                "description": "Liveness check, not admission-controlled.",
            },
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        paths = schema.get("paths", {})
        for (path, method), model in _REQUEST_BODIES.items():
            operation = paths.get(path, {}).get(method)
            if isinstance(operation, dict):
                operation["requestBody"] = {
                    "required": True,
                    "content": {"application/json": {"schema": model.model_json_schema()}},
                }

        for (path, method), codes in _ERROR_CODES.items():
            operation = paths.get(path, {}).get(method)
            if not isinstance(operation, dict):
                continue
            responses = operation.setdefault("responses", {})
            # Bodies are validated by the service, never by FastAPI
            responses.pop("422", None)
            for code in codes:
                responses.setdefault(code, _error_response(_ERROR_DESCRIPTIONS[code]))

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
