"""Service account (machine user) tools.

Machine users authenticate with JWT keys, not passwords. Key material is
returned by Zitadel exactly once, at creation time.
"""
from __future__ import annotations
import logging
from typing import Any, Mapping

from ..core.validators import optional_string, require_string, validate_choice, validate_identifier
from .base import (
    HandlerContext,
    Operation,
    ToolAnnotations,
    ToolMeta,
    ToolResult,
    search_body,
    text_response,
)

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPES = ("ACCESS_TOKEN_TYPE_BEARER", "ACCESS_TOKEN_TYPE_JWT")
KEY_SEARCH_LIMIT = 100


def create_service_user(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    user_name = require_string(params, "userName")
    name = require_string(params, "name")
    description = optional_string(params, "description") or ""
    token_type = validate_choice(params, "accessTokenType", ACCESS_TOKEN_TYPES, "ACCESS_TOKEN_TYPE_BEARER")

    logger.info("Creating service user user_name=%s", user_name)

    response = ctx.client.request(
        "/management/v1/users/machine",
        method="POST",
        json={
            "userName": user_name,
            "name": name,
            "description": description,
            "accessTokenType": token_type,
        },
    )

    return text_response(
        "Service account created successfully.\n"
        f"User ID: {response.get('userId')}\n"
        f"Username: {user_name}\n"
        f"Name: {name}\n\n"
        "Next step: Generate a key with zitadel_create_service_user_key using this User ID."
    )


def create_service_user_key(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    user_id = validate_identifier(params.get("userId"), "userId")
    expiration = optional_string(params, "expirationDate")

    logger.info("Creating service user key user_id=%s", user_id)

    body = {"type": "KEY_TYPE_JSON"}
    if expiration:
        body["expirationDate"] = expiration

    response = ctx.client.request(f"/management/v1/users/{user_id}/keys", method="POST", json=body)

    return text_response(
        "Service account key created.\n"
        f"Key ID: {response.get('keyId')}\n\n"
        "=== KEY DETAILS (save immediately, cannot be retrieved again) ===\n"
        f"{response.get('keyDetails')}\n"
        "=================================================================\n\n"
        "Use this key to configure ZITADEL_SERVICE_ACCOUNT_KEY_ID and ZITADEL_SERVICE_ACCOUNT_PRIVATE_KEY."
    )


def list_service_user_keys(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    user_id = validate_identifier(params.get("userId"), "userId")

    response = ctx.client.request(
        f"/management/v1/users/{user_id}/keys/_search",
        method="POST",
        json=search_body(KEY_SEARCH_LIMIT),
    )
    keys = response.get("result") or []
    if not keys:
        return text_response(f"No keys found for service account {user_id}.")

    lines = [
        f"- Key {k.get('id')}: type={k.get('type')}, expires={k.get('expirationDate') or 'never'}, "
        f"created={(k.get('details') or {}).get('creationDate') or 'N/A'}"
        for k in keys
    ]
    return text_response(f"Found {len(keys)} key(s) for service account {user_id}:\n\n" + "\n".join(lines))


_USER_ID_SCHEMA = {
    "type": "object",
    "properties": {"userId": {"type": "string", "description": "The service account user ID"}},
    "required": ["userId"],
}

SERVICE_ACCOUNT_OPERATIONS: tuple[Operation, ...] = (
    Operation(
        name="zitadel_create_service_user",
        description=(
            "Create a new service account (machine user) for API access. "
            "Service accounts authenticate via JWT keys, not passwords."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "userName": {"type": "string", "description": "Unique username for the service account"},
                "name": {"type": "string", "description": "Display name"},
                "description": {"type": "string", "description": "Optional description of what this account is used for"},
                "accessTokenType": {
                    "type": "string",
                    "enum": list(ACCESS_TOKEN_TYPES),
                    "description": "Token type (default: ACCESS_TOKEN_TYPE_BEARER)",
                },
            },
            "required": ["userName", "name"],
        },
        annotations=ToolAnnotations("Create Service User", read_only=False, destructive=False, idempotent=False),
        meta=ToolMeta("service-accounts", read_only=False),
        handler=create_service_user,
    ),
    Operation(
        name="zitadel_create_service_user_key",
        description=(
            "Generate a new key pair for a service account. "
            "The private key is returned ONLY at creation time, so save it immediately."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "userId": {"type": "string", "description": "The service account user ID"},
                "expirationDate": {"type": "string", "description": "Optional expiration date (ISO 8601 format)"},
            },
            "required": ["userId"],
        },
        annotations=ToolAnnotations("Create Service User Key", read_only=False, destructive=False, idempotent=False),
        meta=ToolMeta("service-accounts", read_only=False),
        handler=create_service_user_key,
    ),
    Operation(
        name="zitadel_list_service_user_keys",
        description="List existing keys for a service account. Shows key metadata only (not private keys).",
        input_schema=_USER_ID_SCHEMA,
        annotations=ToolAnnotations("List Service User Keys", read_only=True, destructive=False, idempotent=True),
        meta=ToolMeta("service-accounts", read_only=True),
        handler=list_service_user_keys,
    ),
)
