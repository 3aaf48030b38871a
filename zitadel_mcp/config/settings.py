"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import urlparse

from ..core.zitadel.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


def _load_secret_from_file(secret_name: str, env_var: str | None = None, environ: Mapping[str, str] | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Secret value or None if not found
    """
    environ = os.environ if environ is None else environ
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as exc:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, exc)

    if env_var:
        secret_value = environ.get(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass(frozen=True)
class ZitadelConfig:
    """Application configuration container."""
    # Service account (JWT profile)
    issuer: str
    service_account_user_id: str
    service_account_key_id: str
    service_account_private_key: str
    org_id: str

    # Optional
    project_id: Optional[str] = None
    portal_database_url: Optional[str] = None
    log_level: str = "INFO"

    @property
    def portal_enabled(self) -> bool:
        """Portal tools are exposed only when the portal database is configured."""
        return bool(self.portal_database_url)

    def __repr__(self) -> str:
        # Keep the key material and DB credentials out of logs and tracebacks
        return (
            f"ZitadelConfig(issuer={self.issuer!r}, org_id={self.org_id!r}, "
            f"project_id={self.project_id!r}, portal_enabled={self.portal_enabled}, "
            f"log_level={self.log_level!r})"
        )


def is_portal_enabled(config: ZitadelConfig) -> bool:
    return config.portal_enabled


def _is_valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def load_settings(environ: Mapping[str, str] | None = None) -> ZitadelConfig:
    """Load application settings from environment and /run/secrets.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: Listing every missing or invalid variable
    """
    environ = os.environ if environ is None else environ
    errors: list[str] = []

    def _required(var_name: str) -> str:
        value = (environ.get(var_name) or "").strip()
        if not value:
            errors.append(f"{var_name}: {var_name} is required")
        return value

    issuer = _required("ZITADEL_ISSUER")
    if issuer and not _is_valid_url(issuer):
        errors.append("ZITADEL_ISSUER: ZITADEL_ISSUER must be a valid URL")

    service_account_user_id = _required("ZITADEL_SERVICE_ACCOUNT_USER_ID")
    service_account_key_id = _required("ZITADEL_SERVICE_ACCOUNT_KEY_ID")

    private_key = _load_secret_from_file(
        "zitadel_service_account_private_key",
        "ZITADEL_SERVICE_ACCOUNT_PRIVATE_KEY",
        environ,
    )
    if not private_key:
        errors.append("ZITADEL_SERVICE_ACCOUNT_PRIVATE_KEY: ZITADEL_SERVICE_ACCOUNT_PRIVATE_KEY is required")

    org_id = _required("ZITADEL_ORG_ID")

    project_id = (environ.get("ZITADEL_PROJECT_ID") or "").strip() or None
    portal_database_url = _load_secret_from_file("portal_database_url", "PORTAL_DATABASE_URL", environ) or None

    log_level = (environ.get("LOG_LEVEL") or "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        errors.append(f"LOG_LEVEL: LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

    if errors:
        raise ConfigurationError("Configuration error:\n" + "\n".join(f"  - {e}" for e in errors))

    return ZitadelConfig(
        issuer=issuer.rstrip("/"),
        service_account_user_id=service_account_user_id,
        service_account_key_id=service_account_key_id,
        service_account_private_key=private_key or "",
        org_id=org_id,
        project_id=project_id,
        portal_database_url=portal_database_url,
        log_level=log_level,
    )
