"""Organization tools (Management API for the current org, Admin API for the instance)."""
from __future__ import annotations
from typing import Any, Mapping

from ..core.validators import validate_limit
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


def get_org(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    response = ctx.client.request("/management/v1/orgs/me")
    org = response.get("org") or {}

    lines = [
        f"Organization: {org.get('name')}",
        f"ID: {org.get('id')}",
        f"State: {strip_prefix(org.get('state'), 'ORG_STATE_')}",
        f"Primary Domain: {org.get('primaryDomain') or 'N/A'}",
        f"Created: {(org.get('details') or {}).get('creationDate') or 'N/A'}",
    ]
    return text_response("\n".join(lines))


def list_orgs(params: Mapping[str, Any], ctx: HandlerContext) -> ToolResult:
    limit = validate_limit(params)

    response = ctx.client.request("/admin/v1/orgs/_search", method="POST", json=search_body(limit))
    orgs = response.get("result") or []
    if not orgs:
        return text_response("No organizations found.")

    lines = [f"- {o.get('name')} [{strip_prefix(o.get('state'), 'ORG_STATE_')}] ID: {o.get('id')}" for o in orgs]
    return text_response(f"Found {len(orgs)} organization(s):\n\n" + "\n".join(lines))


ORGANIZATION_OPERATIONS: tuple[Operation, ...] = (
    Operation(
        name="zitadel_get_org",
        description="Get details of the current organization (based on the configured ZITADEL_ORG_ID).",
        input_schema={"type": "object", "properties": {}},
        annotations=ToolAnnotations("Get Organization", read_only=True, destructive=False, idempotent=True),
        meta=ToolMeta("organizations", read_only=True),
        handler=get_org,
    ),
    Operation(
        name="zitadel_list_orgs",
        description="List all organizations in the Zitadel instance. Requires IAM-level admin permissions.",
        input_schema={
            "type": "object",
            "properties": {"limit": {"type": "number", "description": "Maximum number of results (default: 50)"}},
        },
        annotations=ToolAnnotations("List Organizations", read_only=True, destructive=False, idempotent=True),
        meta=ToolMeta("organizations", read_only=True),
        handler=list_orgs,
    ),
)
