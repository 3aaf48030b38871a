"""Project management tools (Management API v1)."""
from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Any, Dict, Mapping

from ..core.validators import require_string, validate_boolean, validate_identifier, validate_limit
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

if TYPE_CHECKING:
    from ..core.zitadel.client import ZitadelClient

logger = logging.getLogger(__name__)


def format_project(project: Mapping[str, Any]) -> str:
    state = strip_prefix(project.get("state"), "PROJECT_STATE_")
    return f"- {project.get('name')} [{state}] ID: {project.get('id')}"


def list_projects(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    limit = validate_limit(params)

    response = ctx.client.request("/management/v1/projects/_search", method="POST", json=search_body(limit))
    projects = response.get("result") or []
    if not projects:
        return text_response("No projects found.")

    lines = [format_project(p) for p in projects]
    return text_response(f"Found {len(projects)} project(s):\n\n" + "\n".join(lines))


def get_project(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    project_id = validate_identifier(params.get("projectId"), "projectId")

    response = ctx.client.request(f"/management/v1/projects/{project_id}")
    project = response.get("project") or {}

    def _flag(key: str) -> str:
        value = project.get(key)
        return "N/A" if value is None else str(value).lower()

    lines = [
        f"Project: {project.get('name')}",
        f"ID: {project.get('id', project_id)}",
        f"State: {strip_prefix(project.get('state'), 'PROJECT_STATE_')}",
        f"Role Assertion: {_flag('projectRoleAssertion')}",
        f"Role Check: {_flag('projectRoleCheck')}",
        f"Created: {(project.get('details') or {}).get('creationDate') or 'N/A'}",
    ]
    return text_response("\n".join(lines))


def create_project_request(
    client: "ZitadelClient",
    name: str,
    *,
    role_assertion: bool = True,
    role_check: bool = False,
) -> Dict[str, Any]:
    logger.info("Creating project name=%s", name)
    return client.request(
        "/management/v1/projects",
        method="POST",
        json={
            "name": name,
            "projectRoleAssertion": role_assertion,
            "projectRoleCheck": role_check,
        },
    )


def create_project(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    name = require_string(params, "name")
    role_assertion = validate_boolean(params, "projectRoleAssertion", default=True)
    role_check = validate_boolean(params, "projectRoleCheck", default=False)

    response = create_project_request(ctx.client, name, role_assertion=role_assertion, role_check=role_check)

    return text_response(
        "Project created successfully.\n"
        f"Project ID: {response.get('id')}\n"
        f"Name: {name}"
    )


PROJECT_OPERATIONS: tuple[Operation, ...] = (
    Operation(
        name="zitadel_list_projects",
        description="List all projects in the Zitadel organization.",
        input_schema={
            "type": "object",
            "properties": {
                "limit": {"type": "number", "description": "Maximum number of results (default: 50)"},
            },
        },
        annotations=ToolAnnotations("List Projects", read_only=True, destructive=False, idempotent=True),
        meta=ToolMeta("projects", read_only=True),
        handler=list_projects,
    ),
    Operation(
        name="zitadel_get_project",
        description="Get details of a specific project by its ID.",
        input_schema={
            "type": "object",
            "properties": {"projectId": {"type": "string", "description": "The project ID"}},
            "required": ["projectId"],
        },
        annotations=ToolAnnotations("Get Project", read_only=True, destructive=False, idempotent=True),
        meta=ToolMeta("projects", read_only=True),
        handler=get_project,
    ),
    Operation(
        name="zitadel_create_project",
        description="Create a new project in Zitadel. Projects contain applications, roles, and grants.",
        input_schema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Project name"},
                "projectRoleAssertion": {"type": "boolean", "description": "Include roles in tokens (default: true)"},
                "projectRoleCheck": {
                    "type": "boolean",
                    "description": "Only allow users with grants to authenticate (default: false)",
                },
            },
            "required": ["name"],
        },
        annotations=ToolAnnotations("Create Project", read_only=False, destructive=False, idempotent=False),
        meta=ToolMeta("projects", read_only=False),
        handler=create_project,
    ),
)
