"""Application management tools (OIDC apps, Management API v1)."""
from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from ..core.validators import (
    require_string,
    validate_boolean,
    validate_choice,
    validate_identifier,
    validate_string_list,
)
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

APP_TYPES = ("OIDC_APP_TYPE_WEB", "OIDC_APP_TYPE_USER_AGENT", "OIDC_APP_TYPE_NATIVE")
AUTH_METHOD_TYPES = (
    "OIDC_AUTH_METHOD_TYPE_BASIC",
    "OIDC_AUTH_METHOD_TYPE_POST",
    "OIDC_AUTH_METHOD_TYPE_NONE",
    "OIDC_AUTH_METHOD_TYPE_PRIVATE_KEY_JWT",
)
DEFAULT_APP_TYPE = "OIDC_APP_TYPE_WEB"
DEFAULT_AUTH_METHOD = "OIDC_AUTH_METHOD_TYPE_NONE"
APP_SEARCH_LIMIT = 100


def create_oidc_app_request(
    client: "ZitadelClient",
    project_id: str,
    name: str,
    redirect_uris: List[str],
    *,
    post_logout_redirect_uris: Optional[List[str]] = None,
    app_type: str = DEFAULT_APP_TYPE,
    auth_method_type: str = DEFAULT_AUTH_METHOD,
    dev_mode: bool = False,
) -> Dict[str, Any]:
    """Create an authorization-code OIDC app; returns appId/clientId/clientSecret."""
    body: Dict[str, Any] = {
        "name": name,
        "redirectUris": redirect_uris,
        "responseTypes": ["OIDC_RESPONSE_TYPE_CODE"],
        "grantTypes": ["OIDC_GRANT_TYPE_AUTHORIZATION_CODE"],
        "appType": app_type,
        "authMethodType": auth_method_type,
        "devMode": dev_mode,
    }
    if post_logout_redirect_uris is not None:
        body["postLogoutRedirectUris"] = post_logout_redirect_uris

    return client.request(f"/management/v1/projects/{project_id}/apps/oidc", method="POST", json=body)


def format_app(app: Mapping[str, Any]) -> str:
    state = strip_prefix(app.get("state"), "APP_STATE_")
    client_id = (app.get("oidcConfig") or {}).get("clientId") or "N/A"
    return f"- {app.get('name')} [{state}] Client ID: {client_id} | App ID: {app.get('id')}"


def list_apps(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    project_id = validate_identifier(params.get("projectId"), "projectId")

    response = ctx.client.request(
        f"/management/v1/projects/{project_id}/apps/_search",
        method="POST",
        json=search_body(APP_SEARCH_LIMIT),
    )
    apps = response.get("result") or []
    if not apps:
        return text_response("No applications found in this project.")

    lines = [format_app(a) for a in apps]
    return text_response(f"Found {len(apps)} application(s):\n\n" + "\n".join(lines))


def get_app(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    project_id = validate_identifier(params.get("projectId"), "projectId")
    app_id = validate_identifier(params.get("appId"), "appId")

    response = ctx.client.request(f"/management/v1/projects/{project_id}/apps/{app_id}")
    app = response.get("app") or response

    lines = [
        f"Application: {app.get('name')}",
        f"App ID: {app.get('id', app_id)}",
        f"State: {strip_prefix(app.get('state'), 'APP_STATE_')}",
    ]

    oidc = app.get("oidcConfig")
    if oidc:
        lines.extend([
            f"Client ID: {oidc.get('clientId')}",
            f"App Type: {oidc.get('appType')}",
            f"Auth Method: {oidc.get('authMethodType')}",
            f"Redirect URIs: {', '.join(oidc.get('redirectUris') or []) or 'none'}",
            f"Post-Logout URIs: {', '.join(oidc.get('postLogoutRedirectUris') or []) or 'none'}",
            f"Response Types: {', '.join(oidc.get('responseTypes') or [])}",
            f"Grant Types: {', '.join(oidc.get('grantTypes') or [])}",
            f"Dev Mode: {str(bool(oidc.get('devMode'))).lower()}",
        ])

    lines.append(f"Created: {(app.get('details') or {}).get('creationDate') or 'N/A'}")
    return text_response("\n".join(lines))


def create_oidc_app(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    project_id = validate_identifier(params.get("projectId"), "projectId")
    name = require_string(params, "name")
    redirect_uris = validate_string_list(params, "redirectUris", required=True, urls=True)
    post_logout = validate_string_list(params, "postLogoutRedirectUris", urls=True)
    app_type = validate_choice(params, "appType", APP_TYPES, DEFAULT_APP_TYPE)
    auth_method = validate_choice(params, "authMethodType", AUTH_METHOD_TYPES, DEFAULT_AUTH_METHOD)
    dev_mode = validate_boolean(params, "devMode", default=False)

    logger.info("Creating OIDC app name=%s project_id=%s", name, project_id)

    response = create_oidc_app_request(
        ctx.client,
        project_id,
        name,
        redirect_uris,
        post_logout_redirect_uris=post_logout,
        app_type=app_type,
        auth_method_type=auth_method,
        dev_mode=dev_mode,
    )

    lines = [
        "OIDC Application created successfully.",
        f"App ID: {response.get('appId')}",
        f"Client ID: {response.get('clientId')}",
    ]
    if response.get("clientSecret"):
        lines.extend([
            f"Client Secret: {response['clientSecret']}",
            "",
            "WARNING: Save the Client Secret now. It cannot be retrieved again.",
        ])
    return text_response("\n".join(lines))


def update_app(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    project_id = validate_identifier(params.get("projectId"), "projectId")
    app_id = validate_identifier(params.get("appId"), "appId")
    redirect_uris = validate_string_list(params, "redirectUris", urls=True)
    post_logout = validate_string_list(params, "postLogoutRedirectUris", urls=True)
    dev_mode = validate_boolean(params, "devMode")

    body: Dict[str, Any] = {}
    if redirect_uris is not None:
        body["redirectUris"] = redirect_uris
    if post_logout is not None:
        body["postLogoutRedirectUris"] = post_logout
    if dev_mode is not None:
        body["devMode"] = dev_mode

    ctx.client.request(
        f"/management/v1/projects/{project_id}/apps/{app_id}/oidc",
        method="PUT",
        json=body,
    )
    return text_response(f"Application {app_id} updated successfully.")


APPLICATION_OPERATIONS: tuple[Operation, ...] = (
    Operation(
        name="zitadel_list_apps",
        description="List all applications in a Zitadel project.",
        input_schema={
            "type": "object",
            "properties": {"projectId": {"type": "string", "description": "The project ID to list apps for"}},
            "required": ["projectId"],
        },
        annotations=ToolAnnotations("List Apps", read_only=True, destructive=False, idempotent=True),
        meta=ToolMeta("applications", read_only=True),
        handler=list_apps,
    ),
    Operation(
        name="zitadel_get_app",
        description="Get details of a specific application including its Client ID and OIDC configuration.",
        input_schema={
            "type": "object",
            "properties": {
                "projectId": {"type": "string", "description": "The project ID"},
                "appId": {"type": "string", "description": "The application ID"},
            },
            "required": ["projectId", "appId"],
        },
        annotations=ToolAnnotations("Get App", read_only=True, destructive=False, idempotent=True),
        meta=ToolMeta("applications", read_only=True),
        handler=get_app,
    ),
    Operation(
        name="zitadel_create_oidc_app",
        description=(
            "Create a new OIDC application in a Zitadel project. Returns the Client ID "
            "(and Client Secret for confidential clients). Configure redirect URIs, response types, and grant types."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "projectId": {"type": "string", "description": "The project ID to create the app in"},
                "name": {"type": "string", "description": "Application name"},
                "redirectUris": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": 'OAuth redirect URIs (e.g., ["https://myapp.example.com/api/auth/callback/zitadel"])',
                },
                "postLogoutRedirectUris": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Post-logout redirect URIs (optional)",
                },
                "appType": {
                    "type": "string",
                    "enum": list(APP_TYPES),
                    "description": f"Application type (default: {DEFAULT_APP_TYPE})",
                },
                "authMethodType": {
                    "type": "string",
                    "enum": list(AUTH_METHOD_TYPES),
                    "description": f"Auth method. Use NONE for PKCE public clients (default: {DEFAULT_AUTH_METHOD})",
                },
                "devMode": {
                    "type": "boolean",
                    "description": "Enable dev mode to allow http:// redirect URIs (default: false)",
                },
            },
            "required": ["projectId", "name", "redirectUris"],
        },
        annotations=ToolAnnotations("Create OIDC App", read_only=False, destructive=False, idempotent=False),
        meta=ToolMeta("applications", read_only=False),
        handler=create_oidc_app,
    ),
    Operation(
        name="zitadel_update_app",
        description="Update an OIDC application's configuration (redirect URIs, dev mode).",
        input_schema={
            "type": "object",
            "properties": {
                "projectId": {"type": "string", "description": "The project ID"},
                "appId": {"type": "string", "description": "The application ID to update"},
                "redirectUris": {"type": "array", "items": {"type": "string"}, "description": "Updated redirect URIs"},
                "postLogoutRedirectUris": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Updated post-logout URIs",
                },
                "devMode": {"type": "boolean", "description": "Enable/disable dev mode"},
            },
            "required": ["projectId", "appId"],
        },
        annotations=ToolAnnotations("Update App", read_only=False, destructive=False, idempotent=True),
        meta=ToolMeta("applications", read_only=False),
        handler=update_app,
    ),
)
