"""Configuration module for the Zitadel MCP server."""
from .log import configure_logging
from .settings import LOG_LEVELS, ZitadelConfig, is_portal_enabled, load_settings

__all__ = ["LOG_LEVELS", "ZitadelConfig", "configure_logging", "is_portal_enabled", "load_settings"]
