"""Access token cache backed by the JWT-bearer token exchange.

States: EMPTY -> VALID -> (inside safety margin) -> EMPTY. A token is served
only while ``now < expires_at - SAFETY_MARGIN_MS``.
"""
from __future__ import annotations
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from .assertion import ServiceIdentity, build_assertion
from .exceptions import TokenExchangeError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
SAFETY_MARGIN_MS = 60_000
DEFAULT_EXPIRES_IN = 3600

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
TOKEN_SCOPE = "openid urn:zitadel:iam:org:project:id:zitadel:aud"


@dataclass(frozen=True)
class CachedToken:
    value: str
    expires_at_ms: int

    def is_fresh(self, now_ms: int) -> bool:
        return now_ms < self.expires_at_ms - SAFETY_MARGIN_MS


class TokenCache:
    """Holds at most one access token for a service identity.

    Concurrent cold-cache callers share a single exchange: the first one
    performs it while the others wait on the lock and then read its result.

    Usage:
        cache = TokenCache(identity)
        token = cache.acquire()
        ...
        cache.invalidate()  # after a 401
    """

    def __init__(
        self,
        identity: ServiceIdentity,
        clock: Callable[[], float] = time.time,
        timeout: float = REQUEST_TIMEOUT,
    ):
        """Initialize token cache.

        Args:
            identity: Service account identity used to sign assertions
            clock: Returns the current time in epoch seconds
            timeout: Token endpoint request timeout in seconds
        """
        self.identity = identity
        self._clock = clock
        self._timeout = timeout
        self._token: Optional[CachedToken] = None
        self._lock = threading.Lock()

    @property
    def token_url(self) -> str:
        return f"{self.identity.issuer}/oauth/v2/token"

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def peek(self) -> Optional[CachedToken]:
        """Return the cached token without refreshing it."""
        return self._token

    def _fresh_token(self) -> Optional[str]:
        token = self._token
        if token is not None and token.is_fresh(self._now_ms()):
            return token.value
        return None

    def acquire(self) -> str:
        """Return a valid access token, exchanging a new assertion if needed.

        Raises:
            SigningError: If the assertion cannot be signed
            TokenExchangeError: If the token endpoint returns a non-2xx status
        """
        token = self._fresh_token()
        if token is not None:
            return token

        with self._lock:
            # Another caller may have completed the exchange while we waited
            token = self._fresh_token()
            if token is not None:
                return token
            return self._exchange()

    def invalidate(self) -> None:
        """Drop the cached token so the next acquire() re-exchanges."""
        self._token = None

    def _exchange(self) -> str:
        assertion = build_assertion(self.identity, now=int(self._clock()))
        url = self.token_url

        resp = requests.post(
            url,
            data={
                "grant_type": JWT_BEARER_GRANT,
                "assertion": assertion,
                "scope": TOKEN_SCOPE,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=self._timeout,
        )
        if not 200 <= resp.status_code < 300:
            logger.error("Token exchange failed: status=%s body=%s", resp.status_code, resp.text)
            raise TokenExchangeError(
                resp.status_code,
                f"Failed to get access token: {resp.status_code} {resp.text}",
                url,
            )

        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            logger.error("Token exchange returned a non-JSON body: status=%s", resp.status_code)
            raise TokenExchangeError(resp.status_code, f"Invalid token response: {resp.text}", url)

        access_token = data.get("access_token")
        if not access_token:
            raise TokenExchangeError(resp.status_code, "Token response did not contain access_token", url)

        expires_in = data.get("expires_in") or DEFAULT_EXPIRES_IN
        self._token = CachedToken(
            value=access_token,
            expires_at_ms=self._now_ms() + int(expires_in) * 1000,
        )
        logger.debug("Obtained access token (expires_in=%ss)", expires_in)
        return access_token
