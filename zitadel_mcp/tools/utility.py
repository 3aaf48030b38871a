"""Utility tools: configuration snippets for apps consuming Zitadel."""
from __future__ import annotations
from typing import Any, List, Mapping, Optional

from ..core.validators import validate_identifier
from .base import HandlerContext, Operation, ToolAnnotations, ToolMeta, ToolResult, text_response


def env_block(
    *,
    app_name: str,
    issuer: str,
    client_id: str,
    project_id: str,
    org_id: str,
    app_id: str,
    role_key: Optional[str] = None,
) -> str:
    """Render the ``.env.local`` lines an Auth.js app needs, plus reference ids."""
    lines: List[str] = [
        f"# .env.local for {app_name}",
        f"AUTH_ZITADEL_ISSUER={issuer}",
        f"AUTH_ZITADEL_CLIENT_ID={client_id}",
        "",
        "# Reference",
        f"# ZITADEL_PROJECT_ID={project_id}",
        f"# ZITADEL_ORG_ID={org_id}",
        f"# ZITADEL_APP_ID={app_id}",
    ]
    if role_key:
        lines.append(f"# Role key: {role_key}")
    return "\n".join(lines)


def get_auth_config(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    project_id = validate_identifier(params.get("projectId"), "projectId")
    app_id = validate_identifier(params.get("appId"), "appId")

    response = ctx.client.request(f"/management/v1/projects/{project_id}/apps/{app_id}")
    app = response.get("app") or response
    client_id = (app.get("oidcConfig") or {}).get("clientId") or "N/A"

    return text_response(
        env_block(
            app_name=app.get("name") or app_id,
            issuer=ctx.config.issuer,
            client_id=client_id,
            project_id=project_id,
            org_id=ctx.config.org_id,
            app_id=app_id,
        )
    )


UTILITY_OPERATIONS: tuple[Operation, ...] = (
    Operation(
        name="zitadel_get_auth_config",
        description=(
            "Generate the .env.local configuration for an app using Zitadel auth "
            "(issuer, client ID, and reference IDs)."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "projectId": {"type": "string", "description": "The project ID"},
                "appId": {"type": "string", "description": "The application ID"},
            },
            "required": ["projectId", "appId"],
        },
        annotations=ToolAnnotations("Get Auth Config", read_only=True, destructive=False, idempotent=True),
        meta=ToolMeta("utility", read_only=True),
        handler=get_auth_config,
    ),
)
