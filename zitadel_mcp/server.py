"""MCP stdio server exposing Zitadel administration tools.

Uses the low-level ``mcp.server.lowlevel.Server`` so argument checking stays
with the tool handlers: SDK-side schema validation is switched off and every
call is relayed to ``ToolRegistry.dispatch`` on a worker thread.
"""
from __future__ import annotations
import asyncio
import logging
import signal
import sys
from typing import Any

import anyio
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from . import __version__
from .config import configure_logging, load_settings
from .config.settings import ZitadelConfig
from .core.zitadel import ZitadelClient
from .core.zitadel.exceptions import ConfigurationError
from .tools import ToolRegistry, build_registry

logger = logging.getLogger(__name__)

SERVER_NAME = "zitadel-mcp-server"


def _to_tool(definition: dict[str, Any]) -> types.Tool:
    return types.Tool(
        name=definition["name"],
        description=definition["description"],
        inputSchema=definition["inputSchema"],
        annotations=types.ToolAnnotations(**definition["annotations"]),
    )


def build_server(registry: ToolRegistry) -> Server:
    """Wire ``registry`` into list_tools/call_tool handlers."""
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return [_to_tool(d) for d in registry.list_operations()]

    @server.call_tool(validate_input=False)
    async def handle_call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
        result = await anyio.to_thread.run_sync(registry.dispatch, name, arguments or {})
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=result.text)],
            isError=result.is_error,
        )

    return server


def create_registry(config: ZitadelConfig) -> ToolRegistry:
    """Build client, optional portal store and registry from config."""
    client = ZitadelClient.from_config(config)

    portal = None
    if config.portal_enabled:
        # Imported lazily so psycopg is only loaded when the portal is in use
        from .core.portal_store import PortalStore
        portal = PortalStore(config.portal_database_url)

    return build_registry(config, client, portal)


async def run(config: ZitadelConfig) -> None:
    registry = create_registry(config)
    server = build_server(registry)

    suffix = " (portal extension enabled)" if config.portal_enabled else ""
    logger.info("Zitadel MCP server running with %d tools%s", len(registry), suffix)

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> int:
    try:
        config = load_settings()
    except ConfigurationError as exc:
        configure_logging()
        logger.error("%s", exc)
        return 1

    configure_logging(config.log_level)
    logger.debug("Loaded %r", config)

    asyncio.run(run(config))
    return 0


def _handle_sigterm(signum, frame):
    raise KeyboardInterrupt


def cli() -> None:
    """Console entry point; SIGINT/SIGTERM shut down cleanly with status 0."""
    signal.signal(signal.SIGTERM, _handle_sigterm)
    try:
        code = main()
    except KeyboardInterrupt:
        logger.info("Shutting down")
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    cli()
