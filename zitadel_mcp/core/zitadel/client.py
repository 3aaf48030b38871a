"""Low-level HTTP client for the Zitadel Management API.

Handles authentication, tenant scoping, and HTTP operations.
"""
from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

import requests

from .assertion import ServiceIdentity
from .exceptions import ZitadelAPIError
from .token_cache import REQUEST_TIMEOUT, TokenCache

if TYPE_CHECKING:
    from ...config.settings import ZitadelConfig

logger = logging.getLogger(__name__)

ORG_HEADER = "x-zitadel-orgid"


class ZitadelClient:
    """HTTP client for the Zitadel API with automatic token management.

    Features:
    - JWT-bearer service account authentication with a cached access token
    - Token cache cleared on 401 so the next call re-authenticates
    - Tenant scope header (x-zitadel-orgid) on every call
    - Centralized error handling; empty bodies come back as {}

    Usage:
        client = ZitadelClient(identity)
        user = client.get("/v2/users/123")
        client.post("/v2/users/123/deactivate")
    """

    def __init__(
        self,
        identity: ServiceIdentity,
        token_cache: Optional[TokenCache] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        """Initialize Zitadel client.

        Args:
            identity: Service account identity (issuer URL doubles as API base URL)
            token_cache: Token cache to use (a new one is created by default)
            timeout: Per-request timeout in seconds
        """
        self.identity = identity
        self.base_url = identity.issuer.rstrip("/")
        self.token_cache = token_cache or TokenCache(identity, timeout=timeout)
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: "ZitadelConfig") -> "ZitadelClient":
        return cls(ServiceIdentity.from_config(config))

    def clear_token_cache(self) -> None:
        self.token_cache.invalidate()

    def request(
        self,
        path: str,
        method: str = "GET",
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Execute an authenticated request against the Zitadel API.

        Args:
            path: API path (e.g., "/management/v1/projects/_search")
            method: HTTP method
            json: JSON payload
            headers: Extra headers; they override the defaults on conflict

        Returns:
            Parsed JSON body, or {} for an empty body

        Raises:
            SigningError: If the service account key is unusable
            TokenExchangeError: If authentication fails
            ZitadelAPIError: On non-2xx response
        """
        token = self.token_cache.acquire()
        url = f"{self.base_url}{path}"

        merged = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            ORG_HEADER: self.identity.org_id,
        }
        merged.update(headers or {})

        resp = requests.request(method, url, json=json, headers=merged, timeout=self._timeout)
        self._handle_error(resp, path)

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as exc:
            raise ZitadelAPIError(resp.status_code, f"Invalid JSON in response: {exc}", path) from exc

    def get(self, path: str, **kwargs) -> Dict[str, Any]:
        return self.request(path, method="GET", **kwargs)

    def post(self, path: str, json: Optional[Any] = None, **kwargs) -> Dict[str, Any]:
        return self.request(path, method="POST", json=json, **kwargs)

    def put(self, path: str, json: Optional[Any] = None, **kwargs) -> Dict[str, Any]:
        return self.request(path, method="PUT", json=json, **kwargs)

    def delete(self, path: str, **kwargs) -> Dict[str, Any]:
        return self.request(path, method="DELETE", **kwargs)

    def _handle_error(self, resp: requests.Response, path: str) -> None:
        """Centralized error handling for HTTP responses.

        Args:
            resp: Response object to check
            path: API path, for the error and the log line

        Raises:
            ZitadelAPIError: If response status indicates error
        """
        if 200 <= resp.status_code < 300:
            return

        error_data: Optional[Dict[str, Any]] = None
        try:
            parsed = resp.json()
            if isinstance(parsed, dict):
                error_data = parsed
        except ValueError:
            pass

        message = (error_data or {}).get("message") or f"HTTP {resp.status_code}"
        logger.error("Zitadel API error: status=%s path=%s error=%s", resp.status_code, path, error_data)

        if resp.status_code == 401:
            self.token_cache.invalidate()

        raise ZitadelAPIError(
            resp.status_code,
            message,
            path,
            code=(error_data or {}).get("code"),
            details=(error_data or {}).get("details"),
        )
