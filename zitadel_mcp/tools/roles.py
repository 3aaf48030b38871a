"""Project role and user grant tools (Management API v1)."""
from __future__ import annotations
import logging
from typing import Any, List, Mapping

from ..core.validators import optional_string, require_string, validate_identifier, validate_string_list
from .base import (
    HandlerContext,
    Operation,
    ToolAnnotations,
    ToolMeta,
    ToolResult,
    error_response,
    resolve_project_id,
    search_body,
    strip_prefix,
    text_response,
)

logger = logging.getLogger(__name__)

ROLE_SEARCH_LIMIT = 100


def _project_role_keys(project_id: str, ctx: HandlerContext) -> List[str]:
    response = ctx.client.request(
        f"/management/v1/projects/{project_id}/roles/_search",
        method="POST",
        json=search_body(ROLE_SEARCH_LIMIT),
    )
    return [r.get("key") for r in response.get("result") or []]


def format_grant(grant: Mapping[str, Any]) -> str:
    roles = ", ".join(grant.get("roleKeys") or [])
    state = strip_prefix(grant.get("state"), "USER_GRANT_STATE_")
    return f"- Grant {grant.get('id')}: [{roles}] ({state}) Project: {grant.get('projectId')}"


def list_project_roles(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    project_id = resolve_project_id(params, ctx)

    response = ctx.client.request(
        f"/management/v1/projects/{project_id}/roles/_search",
        method="POST",
        json=search_body(ROLE_SEARCH_LIMIT),
    )
    roles = response.get("result") or []
    if not roles:
        return text_response(f"No roles found in project {project_id}.")

    lines = []
    for role in roles:
        group = f" (group: {role['group']})" if role.get("group") else ""
        lines.append(f"- {role.get('key')}: {role.get('displayName')}{group}")
    return text_response(f"Found {len(roles)} role(s) in project {project_id}:\n\n" + "\n".join(lines))


def create_project_role(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    role_key = require_string(params, "roleKey")
    display_name = require_string(params, "displayName")
    group = optional_string(params, "group")
    project_id = resolve_project_id(params, ctx)

    logger.info("Creating project role role_key=%s project_id=%s", role_key, project_id)

    body = {"roleKey": role_key, "displayName": display_name}
    if group:
        body["group"] = group
    ctx.client.request(f"/management/v1/projects/{project_id}/roles", method="POST", json=body)

    return text_response(f"Role created: {role_key} ({display_name}) in project {project_id}")


def list_user_grants(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    user_id = validate_identifier(params.get("userId"), "userId")
    project_id = params.get("projectId") or ctx.config.project_id

    queries: List[dict] = [{"userIdQuery": {"userId": user_id}}]
    if project_id:
        queries.append({"projectIdQuery": {"projectId": validate_identifier(project_id, "projectId")}})

    body = search_body(ROLE_SEARCH_LIMIT)
    body["queries"] = queries
    response = ctx.client.request("/management/v1/users/grants/_search", method="POST", json=body)

    grants = response.get("result") or []
    if not grants:
        return text_response(f"No grants found for user {user_id}.")

    lines = [format_grant(g) for g in grants]
    return text_response(f"Found {len(grants)} grant(s) for user {user_id}:\n\n" + "\n".join(lines))


def create_user_grant(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    user_id = validate_identifier(params.get("userId"), "userId")
    role_keys = validate_string_list(params, "roleKeys", required=True)
    project_id = resolve_project_id(params, ctx)

    existing = _project_role_keys(project_id, ctx)
    missing = [key for key in role_keys if key not in existing]
    if missing:
        return error_response(
            f"Cannot grant access: role(s) not found in project {project_id}: {', '.join(missing)}\n"
            f"Available roles: {', '.join(existing) or 'none'}\n\n"
            "Create the missing roles first with zitadel_create_project_role."
        )

    logger.info("Creating user grant user_id=%s roles=%s project_id=%s", user_id, role_keys, project_id)

    response = ctx.client.request(
        f"/management/v1/users/{user_id}/grants",
        method="POST",
        json={"projectId": project_id, "roleKeys": role_keys},
    )

    return text_response(
        "Grant created successfully.\n"
        f"Grant ID: {response.get('userGrantId')}\n"
        f"User: {user_id}\n"
        f"Roles: {', '.join(role_keys)}\n"
        f"Project: {project_id}"
    )


def remove_user_grant(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    user_id = validate_identifier(params.get("userId"), "userId")
    grant_id = validate_identifier(params.get("grantId"), "grantId")

    ctx.client.request(f"/management/v1/users/{user_id}/grants/{grant_id}", method="DELETE")
    return text_response(f"Grant {grant_id} removed from user {user_id}.")


_PROJECT_ID_PROPERTY = {"type": "string", "description": "The project ID (uses default project if omitted)"}

ROLE_OPERATIONS: tuple[Operation, ...] = (
    Operation(
        name="zitadel_list_project_roles",
        description='List all roles defined in a Zitadel project (e.g., "admin", "app:finance").',
        input_schema={"type": "object", "properties": {"projectId": _PROJECT_ID_PROPERTY}},
        annotations=ToolAnnotations("List Project Roles", read_only=True, destructive=False, idempotent=True),
        meta=ToolMeta("roles", read_only=True),
        handler=list_project_roles,
    ),
    Operation(
        name="zitadel_create_project_role",
        description='Create a new role in a Zitadel project. Use key format "app:{slug}" for app-specific access roles.',
        input_schema={
            "type": "object",
            "properties": {
                "projectId": _PROJECT_ID_PROPERTY,
                "roleKey": {"type": "string", "description": 'Role key (e.g., "admin", "app:finance")'},
                "displayName": {"type": "string", "description": "Human-readable role name"},
                "group": {"type": "string", "description": "Optional role group for organization"},
            },
            "required": ["roleKey", "displayName"],
        },
        annotations=ToolAnnotations("Create Project Role", read_only=False, destructive=False, idempotent=True),
        meta=ToolMeta("roles", read_only=False),
        handler=create_project_role,
    ),
    Operation(
        name="zitadel_list_user_grants",
        description="List role grants for a specific user, showing which roles they have been assigned.",
        input_schema={
            "type": "object",
            "properties": {
                "userId": {"type": "string", "description": "The user ID to list grants for"},
                "projectId": {"type": "string", "description": "Filter by project ID (uses default project if omitted)"},
            },
            "required": ["userId"],
        },
        annotations=ToolAnnotations("List User Grants", read_only=True, destructive=False, idempotent=True),
        meta=ToolMeta("roles", read_only=True),
        handler=list_user_grants,
    ),
    Operation(
        name="zitadel_create_user_grant",
        description="Assign roles to a user by creating a grant. Validates that the roles exist in the project before granting.",
        input_schema={
            "type": "object",
            "properties": {
                "userId": {"type": "string", "description": "The user ID to grant roles to"},
                "roleKeys": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": 'Role keys to assign (e.g., ["admin", "app:finance"])',
                },
                "projectId": _PROJECT_ID_PROPERTY,
            },
            "required": ["userId", "roleKeys"],
        },
        annotations=ToolAnnotations("Create User Grant", read_only=False, destructive=False, idempotent=False),
        meta=ToolMeta("roles", read_only=False),
        handler=create_user_grant,
    ),
    Operation(
        name="zitadel_remove_user_grant",
        description="Remove a role grant from a user by grant ID.",
        input_schema={
            "type": "object",
            "properties": {
                "userId": {"type": "string", "description": "The user ID"},
                "grantId": {"type": "string", "description": "The grant ID to remove"},
            },
            "required": ["userId", "grantId"],
        },
        annotations=ToolAnnotations("Remove User Grant", read_only=False, destructive=True, idempotent=True),
        meta=ToolMeta("roles", read_only=False),
        handler=remove_user_grant,
    ),
)
