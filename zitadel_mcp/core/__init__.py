"""Core Business Logic Module

This module holds the protocol-independent pieces of the server: the Zitadel
API client, input validation, and the portal database store.

Module Structure:
    - zitadel/          : Zitadel API client (assertion, token cache, HTTP)
    - validators.py     : Tool argument validation (identifier guard etc.)
    - portal_store.py   : app-portal ``apps`` table access (psycopg)

Usage Pattern:
    These modules are NOT auto-imported so the client library can be used
    without the MCP SDK or psycopg installed.

        from zitadel_mcp.core.zitadel import ZitadelClient
        from zitadel_mcp.core.validators import validate_identifier
        from zitadel_mcp.core.portal_store import PortalStore
"""
