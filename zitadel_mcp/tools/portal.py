"""App-portal extension tools.

Only registered when PORTAL_DATABASE_URL is set. They write to the portal's
``apps`` table and orchestrate a full Zitadel + portal setup for a new app.
"""
from __future__ import annotations
import logging
from typing import Any, List, Mapping

from ..core.validators import (
    optional_identifier,
    optional_string,
    require_string,
    validate_boolean,
    validate_identifier,
    validate_slug,
    validate_string_list,
    validate_url,
)
from ..core.zitadel.exceptions import ConfigurationError, ZitadelAPIError
from .applications import create_oidc_app_request
from .base import (
    HandlerContext,
    Operation,
    ToolAnnotations,
    ToolMeta,
    ToolResult,
    error_response,
    text_response,
)
from .projects import create_project_request
from .utility import env_block

logger = logging.getLogger(__name__)

CALLBACK_PATH = "/api/auth/callback/zitadel"


def _require_portal(ctx: HandlerContext):
    if ctx.portal is None:
        raise ConfigurationError("PORTAL_DATABASE_URL is not configured")
    return ctx.portal


def _optional_url(params: Mapping[str, Any], field: str):
    value = optional_string(params, field)
    return validate_url(value, field) if value else None


def register_app(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    slug = validate_slug(params)
    name = require_string(params, "name")
    description = optional_string(params, "description") or ""
    app_url = validate_url(params.get("appUrl"), "appUrl")
    icon_url = _optional_url(params, "iconUrl")
    store = _require_portal(ctx)

    if store.find_app_by_slug(slug):
        return error_response(f"Slug '{slug}' already exists in the portal database.")

    app = store.insert_app(slug=slug, name=name, app_url=app_url, description=description, icon_url=icon_url)

    return text_response(
        "App registered in portal.\n"
        f"ID: {app.get('id')}\n"
        f"Slug: {app.get('slug')}\n"
        f"Name: {app.get('name')}"
    )


def setup_full_app(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    """Project, OIDC app, ``app:{slug}`` role and portal row in one call.

    Steps run in order and are not rolled back; each one is recorded in the
    result so a partial setup is visible to the caller when a later step fails.
    """
    name = require_string(params, "name")
    slug = validate_slug(params)
    app_url = validate_url(params.get("appUrl"), "appUrl")
    description = optional_string(params, "description") or ""
    icon_url = _optional_url(params, "iconUrl")
    project_id = optional_identifier(params, "projectId")
    redirect_uris = validate_string_list(params, "redirectUris", urls=True)
    dev_mode = validate_boolean(params, "devMode", default=False)
    store = _require_portal(ctx)

    config = ctx.config
    results: List[str] = []

    if not project_id and config.project_id:
        project_id = validate_identifier(config.project_id, "projectId")

    if project_id:
        results.append(f"1. Using existing project: {project_id}")
    else:
        project = create_project_request(ctx.client, name)
        # the id comes back from Zitadel and goes straight into the app path
        project_id = validate_identifier(project.get("id"), "Created project id")
        results.append(f"1. Created project: {project_id}")

    redirect_uris = redirect_uris or [f"{app_url.rstrip('/')}{CALLBACK_PATH}"]
    logger.info("Creating OIDC app name=%s project_id=%s", name, project_id)
    app = create_oidc_app_request(ctx.client, project_id, name, redirect_uris, dev_mode=dev_mode)
    results.append(f"2. Created OIDC app: Client ID = {app.get('clientId')}")

    role_key = f"app:{slug}"
    try:
        ctx.client.request(
            f"/management/v1/projects/{project_id}/roles",
            method="POST",
            json={"roleKey": role_key, "displayName": name},
        )
        results.append(f"3. Created role: {role_key}")
    except ZitadelAPIError as exc:
        if exc.status_code != 409:
            raise
        logger.info("Role %s already exists in project %s", role_key, project_id)
        results.append(f"3. Role {role_key} already exists (skipped)")

    if store.find_app_by_slug(slug):
        results.append(f"4. App slug '{slug}' already in portal DB (skipped)")
    else:
        store.insert_app(slug=slug, name=name, app_url=app_url, description=description, icon_url=icon_url)
        results.append("4. Registered in portal database")

    env = env_block(
        app_name=name,
        issuer=config.issuer,
        client_id=app.get("clientId"),
        project_id=project_id,
        org_id=config.org_id,
        app_id=app.get("appId"),
        role_key=role_key,
    )
    return text_response("Full app setup complete:\n\n" + "\n".join(results) + "\n\n" + env)


PORTAL_OPERATIONS: tuple[Operation, ...] = (
    Operation(
        name="portal_register_app",
        description=(
            "Register an application in the app-portal database so it appears in the portal UI. "
            "This only creates the portal DB record. Use zitadel_create_oidc_app separately "
            "if you also need the Zitadel OIDC app."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "slug": {
                    "type": "string",
                    "description": 'URL-safe slug (e.g., "proposal-rodeo"). Used as the role key: app:{slug}',
                },
                "name": {"type": "string", "description": 'Display name (e.g., "Proposal Rodeo")'},
                "description": {"type": "string", "description": "Brief description of the application"},
                "appUrl": {"type": "string", "description": "URL where the app is hosted"},
                "iconUrl": {"type": "string", "description": "Optional URL to the app icon"},
            },
            "required": ["slug", "name", "appUrl"],
        },
        annotations=ToolAnnotations("Register App in Portal", read_only=False, destructive=False, idempotent=False),
        meta=ToolMeta("portal", read_only=False),
        handler=register_app,
    ),
    Operation(
        name="portal_setup_full_app",
        description=(
            "One-click app setup: creates a Zitadel project (or uses an existing one), an OIDC application "
            "and a project role, then registers the app in the portal database. "
            "Returns the .env.local configuration for the new app."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": 'Application name (e.g., "Proposal Rodeo")'},
                "slug": {"type": "string", "description": 'URL-safe slug (e.g., "proposal-rodeo")'},
                "appUrl": {"type": "string", "description": "URL where the app will be hosted"},
                "description": {"type": "string", "description": "Brief description"},
                "iconUrl": {"type": "string", "description": "Optional icon URL"},
                "projectId": {
                    "type": "string",
                    "description": "Existing project ID. If omitted, the default project is used or a new one is created.",
                },
                "redirectUris": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": f'OAuth redirect URIs. Defaults to ["{{appUrl}}{CALLBACK_PATH}"] if omitted.',
                },
                "devMode": {"type": "boolean", "description": "Enable dev mode for http:// URIs (default: false)"},
            },
            "required": ["name", "slug", "appUrl"],
        },
        annotations=ToolAnnotations("Full App Setup", read_only=False, destructive=False, idempotent=False),
        meta=ToolMeta("portal", read_only=False),
        handler=setup_full_app,
    ),
)
