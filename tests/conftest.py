"""Pytest shared fixtures."""
import base64
import json
import pathlib
import sys
from unittest.mock import MagicMock

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from zitadel_mcp.config.settings import ZitadelConfig
from zitadel_mcp.tools.base import HandlerContext


class StubResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, payload=None, status_code: int = 200, text: str = None):
        self._payload = payload
        self.status_code = status_code
        if text is not None:
            self.text = text
        elif payload is None:
            self.text = ""
        else:
            self.text = json.dumps(payload)
        self.content = self.text.encode("utf-8")

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from reaching a real Zitadel instance.

    Tests that need HTTP install their own stubs over these; integration
    tests (marked with @pytest.mark.integration) are left alone.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _unexpected(*args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP call in unit test: {args} {kwargs.get('url', '')}")

    monkeypatch.setattr(requests, "post", _unexpected)
    monkeypatch.setattr(requests, "request", _unexpected)


# ─────────────────────────────────────────────────────────────────────────────
# RSA Key Pair for assertion signing
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(scope="session")
def rsa_key_pair():
    """RSA key pair in the formats Zitadel hands out (PKCS#1) and PKCS#8."""
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
        backend=default_backend()
    )

    pkcs1_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption()
    ).decode("utf-8")

    pkcs8_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    ).decode("utf-8")

    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode("utf-8")

    return {
        "private_key": private_key,
        "pkcs1_pem": pkcs1_pem,
        "pkcs8_pem": pkcs8_pem,
        "pkcs1_b64": base64.b64encode(pkcs1_pem.encode("utf-8")).decode("ascii"),
        "public_pem": public_pem,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Config / handler context
# ─────────────────────────────────────────────────────────────────────────────
def make_config(**overrides) -> ZitadelConfig:
    base = dict(
        issuer="https://test.zitadel.cloud",
        service_account_user_id="sa-user-1",
        service_account_key_id="key-1",
        service_account_private_key="unused",
        org_id="org-1",
        project_id="proj-default",
        portal_database_url=None,
        log_level="INFO",
    )
    base.update(overrides)
    return ZitadelConfig(**base)


@pytest.fixture()
def config():
    return make_config()


@pytest.fixture()
def ctx(config):
    """Handler context with a mocked client and portal store."""
    return HandlerContext(client=MagicMock(), config=config, portal=MagicMock())


@pytest.fixture()
def stub_response():
    return StubResponse


@pytest.fixture()
def config_factory():
    return make_config
