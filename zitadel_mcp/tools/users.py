"""User management tools (Zitadel v2 user API)."""
from __future__ import annotations
import logging
from typing import Any, Mapping

from ..core.validators import optional_string, require_string, validate_email, validate_identifier, validate_limit
from .base import (
    HandlerContext,
    Operation,
    ToolAnnotations,
    ToolMeta,
    ToolResult,
    search_body,
    strip_prefix,
    text_response,
)

logger = logging.getLogger(__name__)


def _display_name(user: Mapping[str, Any]) -> str:
    profile = (user.get("human") or {}).get("profile")
    if profile:
        return f"{profile.get('givenName', '')} {profile.get('familyName', '')}".strip()
    return user.get("username", "")


def _email(user: Mapping[str, Any]) -> str:
    return ((user.get("human") or {}).get("email") or {}).get("email") or "N/A"


def format_user(user: Mapping[str, Any]) -> str:
    state = strip_prefix(user.get("state"), "USER_STATE_")
    return f"- {_display_name(user)} ({_email(user)}) [{state}] ID: {user.get('userId')}"


def list_users(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    query = optional_string(params, "query")
    limit = validate_limit(params)

    body = search_body(limit)
    if query:
        body["queries"] = [
            {"emailQuery": {"emailAddress": query, "method": "TEXT_QUERY_METHOD_CONTAINS_IGNORE_CASE"}},
        ]

    response = ctx.client.request("/v2/users", method="POST", json=body)
    users = response.get("result") or []
    if not users:
        return text_response("No users found.")

    total = (response.get("details") or {}).get("totalResult") or len(users)
    lines = [format_user(u) for u in users]
    return text_response(f"Found {total} user(s):\n\n" + "\n".join(lines))


def get_user(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    user_id = validate_identifier(params.get("userId"), "userId")

    # v2 GET returns the user under "user"; older deployments return it flat
    response = ctx.client.request(f"/v2/users/{user_id}")
    user = response.get("user") or response
    human_email = (user.get("human") or {}).get("email") or {}
    verified = human_email.get("isVerified", human_email.get("isEmailVerified"))

    lines = [
        f"User: {_display_name(user)}",
        f"ID: {user.get('userId', user_id)}",
        f"Email: {_email(user)}",
        f"Email Verified: {'N/A' if verified is None else str(verified).lower()}",
        f"State: {strip_prefix(user.get('state'), 'USER_STATE_')}",
        f"Username: {user.get('username', 'N/A')}",
        f"Login Names: {', '.join(user.get('loginNames') or [])}",
        f"Created: {(user.get('details') or {}).get('creationDate') or 'N/A'}",
    ]
    return text_response("\n".join(lines))


def create_user(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    email = validate_email(params)
    first_name = require_string(params, "firstName")
    last_name = require_string(params, "lastName")

    logger.info("Creating user")

    response = ctx.client.request(
        "/v2/users/human",
        method="POST",
        json={
            "profile": {"givenName": first_name, "familyName": last_name},
            "email": {"email": email, "isVerified": False},
        },
    )

    return text_response(
        "User created successfully.\n"
        f"User ID: {response.get('userId')}\n"
        f"Email: {email}\n"
        f"Name: {first_name} {last_name}\n\n"
        f"An invitation email has been sent to {email} to complete registration."
    )


def deactivate_user(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    user_id = validate_identifier(params.get("userId"), "userId")
    ctx.client.request(f"/v2/users/{user_id}/deactivate", method="POST")
    return text_response(f"User {user_id} has been deactivated.")


def reactivate_user(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    user_id = validate_identifier(params.get("userId"), "userId")
    ctx.client.request(f"/v2/users/{user_id}/reactivate", method="POST")
    return text_response(f"User {user_id} has been reactivated.")


_USER_ID_SCHEMA = {
    "type": "object",
    "properties": {"userId": {"type": "string", "description": "The Zitadel user ID"}},
    "required": ["userId"],
}

USER_OPERATIONS: tuple[Operation, ...] = (
    Operation(
        name="zitadel_list_users",
        description="List or search users in the Zitadel instance. Returns user details including name, email, status, and login names.",
        input_schema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Optional search query to filter users by email"},
                "limit": {"type": "number", "description": "Maximum number of users to return (default: 50)"},
            },
        },
        annotations=ToolAnnotations("List Users", read_only=True, destructive=False, idempotent=True),
        meta=ToolMeta("users", read_only=True),
        handler=list_users,
    ),
    Operation(
        name="zitadel_get_user",
        description="Get detailed information about a specific user by their user ID.",
        input_schema=_USER_ID_SCHEMA,
        annotations=ToolAnnotations("Get User", read_only=True, destructive=False, idempotent=True),
        meta=ToolMeta("users", read_only=True),
        handler=get_user,
    ),
    Operation(
        name="zitadel_create_user",
        description="Create a new human user in Zitadel. An invitation email will be sent automatically so the user can set their password.",
        input_schema={
            "type": "object",
            "properties": {
                "email": {"type": "string", "description": "Email address for the new user"},
                "firstName": {"type": "string", "description": "First name"},
                "lastName": {"type": "string", "description": "Last name"},
            },
            "required": ["email", "firstName", "lastName"],
        },
        annotations=ToolAnnotations("Create User", read_only=False, destructive=False, idempotent=False),
        meta=ToolMeta("users", read_only=False),
        handler=create_user,
    ),
    Operation(
        name="zitadel_deactivate_user",
        description="Deactivate a user account. The user will no longer be able to log in.",
        input_schema=_USER_ID_SCHEMA,
        annotations=ToolAnnotations("Deactivate User", read_only=False, destructive=True, idempotent=True),
        meta=ToolMeta("users", read_only=False),
        handler=deactivate_user,
    ),
    Operation(
        name="zitadel_reactivate_user",
        description="Reactivate a previously deactivated user account.",
        input_schema=_USER_ID_SCHEMA,
        annotations=ToolAnnotations("Reactivate User", read_only=False, destructive=False, idempotent=True),
        meta=ToolMeta("users", read_only=False),
        handler=reactivate_user,
    ),
)
