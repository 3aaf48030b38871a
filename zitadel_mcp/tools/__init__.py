"""MCP tool catalogue.

Operations are grouped by domain, one module each. ``get_operations`` returns
them in a fixed order; the portal group is appended only when a portal
database is configured.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Optional

from .applications import APPLICATION_OPERATIONS
from .base import HandlerContext, Operation, ToolResult
from .organizations import ORGANIZATION_OPERATIONS
from .portal import PORTAL_OPERATIONS
from .projects import PROJECT_OPERATIONS
from .registry import ToolRegistry, redact_args
from .roles import ROLE_OPERATIONS
from .service_accounts import SERVICE_ACCOUNT_OPERATIONS
from .users import USER_OPERATIONS
from .utility import UTILITY_OPERATIONS

if TYPE_CHECKING:
    from ..config.settings import ZitadelConfig
    from ..core.portal_store import PortalStore
    from ..core.zitadel.client import ZitadelClient

CORE_OPERATIONS: tuple[Operation, ...] = (
    USER_OPERATIONS
    + PROJECT_OPERATIONS
    + APPLICATION_OPERATIONS
    + ROLE_OPERATIONS
    + SERVICE_ACCOUNT_OPERATIONS
    + ORGANIZATION_OPERATIONS
    + UTILITY_OPERATIONS
)


def get_operations(config: "ZitadelConfig") -> tuple[Operation, ...]:
    """Operations exposed for ``config``. Pure; same input, same list."""
    if config.portal_enabled:
        return CORE_OPERATIONS + PORTAL_OPERATIONS
    return CORE_OPERATIONS


def build_registry(
    config: "ZitadelConfig",
    client: "ZitadelClient",
    portal: Optional["PortalStore"] = None,
) -> ToolRegistry:
    context = HandlerContext(client=client, config=config, portal=portal)
    return ToolRegistry(get_operations(config), context)


__all__ = [
    "CORE_OPERATIONS",
    "HandlerContext",
    "Operation",
    "PORTAL_OPERATIONS",
    "ToolRegistry",
    "ToolResult",
    "build_registry",
    "get_operations",
    "redact_args",
]
