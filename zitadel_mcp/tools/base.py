"""Tool types: operation metadata, handler contract, and result shape."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Literal, Mapping, Optional

from ..core.validators import validate_identifier
from ..core.zitadel.exceptions import ValidationError

if TYPE_CHECKING:
    from ..config.settings import ZitadelConfig
    from ..core.portal_store import PortalStore
    from ..core.zitadel.client import ZitadelClient

ToolName = Literal[
    # Users
    "zitadel_list_users", "zitadel_get_user", "zitadel_create_user",
    "zitadel_deactivate_user", "zitadel_reactivate_user",
    # Projects
    "zitadel_list_projects", "zitadel_get_project", "zitadel_create_project",
    # Applications
    "zitadel_list_apps", "zitadel_get_app", "zitadel_create_oidc_app", "zitadel_update_app",
    # Roles & grants
    "zitadel_list_project_roles", "zitadel_create_project_role", "zitadel_list_user_grants",
    "zitadel_create_user_grant", "zitadel_remove_user_grant",
    # Service accounts
    "zitadel_create_service_user", "zitadel_create_service_user_key", "zitadel_list_service_user_keys",
    # Organizations
    "zitadel_get_org", "zitadel_list_orgs",
    # Utility
    "zitadel_get_auth_config",
    # Portal (PORTAL_DATABASE_URL only)
    "portal_register_app", "portal_setup_full_app",
]

Domain = Literal[
    "users", "projects", "applications", "roles",
    "service-accounts", "organizations", "utility", "portal",
]


@dataclass(frozen=True)
class ToolAnnotations:
    """Capability hints for the calling agent; not enforced server-side."""
    title: str
    read_only: bool
    destructive: bool
    idempotent: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "readOnlyHint": self.read_only,
            "destructiveHint": self.destructive,
            "idempotentHint": self.idempotent,
        }


@dataclass(frozen=True)
class ToolMeta:
    """Internal-only annotation. Never sent to MCP clients."""
    domain: Domain
    read_only: bool


@dataclass(frozen=True)
class ToolResult:
    text: str
    is_error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"content": [{"type": "text", "text": self.text}], "isError": self.is_error}


@dataclass(frozen=True)
class HandlerContext:
    """Everything a handler may touch. Built once at startup."""
    client: "ZitadelClient"
    config: "ZitadelConfig"
    portal: Optional["PortalStore"] = None


Handler = Callable[[Mapping[str, Any], HandlerContext], ToolResult]


@dataclass(frozen=True)
class Operation:
    name: ToolName
    description: str
    input_schema: Dict[str, Any]
    annotations: ToolAnnotations
    meta: ToolMeta
    handler: Handler = field(repr=False, compare=False)

    def definition(self) -> Dict[str, Any]:
        """Public tool metadata (``meta`` and the handler are left out)."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
            "annotations": self.annotations.to_dict(),
        }


def text_response(text: str) -> ToolResult:
    return ToolResult(text=text)


def error_response(text: str) -> ToolResult:
    return ToolResult(text=text, is_error=True)


def strip_prefix(state: Optional[str], prefix: str) -> str:
    """``USER_STATE_ACTIVE`` -> ``ACTIVE``; missing states read ``UNKNOWN``."""
    if not state:
        return "UNKNOWN"
    return state.replace(prefix, "")


def resolve_project_id(params: Mapping[str, Any], ctx: HandlerContext) -> str:
    """Pick the explicit projectId, else the configured default.

    Raises:
        ValidationError: If neither is set, or the value is not a safe identifier
    """
    project_id = params.get("projectId") or ctx.config.project_id
    if not project_id:
        raise ValidationError(
            "projectId is required. Pass it as a parameter or set ZITADEL_PROJECT_ID",
            field="projectId",
        )
    return validate_identifier(project_id, "projectId")


def search_body(limit: int) -> Dict[str, Any]:
    """Zitadel list query envelope."""
    return {"query": {"offset": "0", "limit": limit}}
