"""Zitadel API client library.

Architecture:
- assertion.py: Service account identity and signed JWT assertion
- token_cache.py: JWT-bearer token exchange with a cached access token
- client.py: HTTP client with tenant scoping and error mapping
- exceptions.py: Typed exceptions for error handling

Usage:
    from zitadel_mcp.core.zitadel import ZitadelClient, ServiceIdentity

    client = ZitadelClient(ServiceIdentity.from_config(config))
    project = client.get("/management/v1/projects/123")
"""
from .assertion import (
    ServiceIdentity,
    build_assertion,
    decode_key_material,
    to_pkcs8_pem,
)
from .client import ORG_HEADER, ZitadelClient
from .exceptions import (
    ConfigurationError,
    SigningError,
    TokenExchangeError,
    ValidationError,
    ZitadelAPIError,
    ZitadelError,
    describe_error,
)
from .token_cache import (
    REQUEST_TIMEOUT,
    SAFETY_MARGIN_MS,
    CachedToken,
    TokenCache,
)

__all__ = [
    # Client
    "ZitadelClient",
    "ORG_HEADER",
    "REQUEST_TIMEOUT",

    # Authentication
    "ServiceIdentity",
    "build_assertion",
    "decode_key_material",
    "to_pkcs8_pem",
    "TokenCache",
    "CachedToken",
    "SAFETY_MARGIN_MS",

    # Exceptions
    "ZitadelError",
    "ZitadelAPIError",
    "TokenExchangeError",
    "ValidationError",
    "ConfigurationError",
    "SigningError",
    "describe_error",
]
