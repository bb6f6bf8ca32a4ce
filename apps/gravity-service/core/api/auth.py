"""
Client authentication for the list API.

A single API password protects the service. Its hash is configured through
``API_PASSWORD_HASH``; when unset, every client is authorized. ``DEV_MODE=true``
skips the check on local deployments only.
"""
import logging
import os
from typing import Optional, Set
from urllib.parse import urlparse

from starlette.requests import Request

from core.utils.token_crypto import extract_presented_secret, verify_secret

logger = logging.getLogger(__name__)

_LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}


def _configured_password_hash() -> Optional[str]:
    value = os.getenv("API_PASSWORD_HASH", "").strip()
    return value or None


def _dev_mode_hosts() -> Set[str]:
    extra = os.getenv("DEV_MODE_ALLOWED_HOSTS", "")
    return _LOCAL_HOSTS | {h.strip().lower() for h in extra.split(",") if h.strip()}


def dev_mode_active() -> bool:
    """Return True if DEV_MODE is on; raise if it is on for a non-local deployment.

    ``APP_BASE_URL`` must name a local host (or one listed in
    ``DEV_MODE_ALLOWED_HOSTS``). Without a base URL, ``ALLOW_DEV_MODE=true``
    is required.
    """
    if os.getenv("DEV_MODE", "false").lower() != "true":
        return False
    base_url = os.getenv("APP_BASE_URL", "").strip()
    if not base_url:
        if os.getenv("ALLOW_DEV_MODE", "false").lower() != "true":
            raise RuntimeError("DEV_MODE=true requires a localhost APP_BASE_URL or ALLOW_DEV_MODE=true")
        return True
    candidate = base_url if "://" in base_url else f"http://{base_url}"
    hostname = urlparse(candidate).hostname
    allowed = _dev_mode_hosts()
    if hostname is None or hostname.lower() not in allowed:
        raise RuntimeError(
            f"DEV_MODE=true is not permitted for APP_BASE_URL {base_url!r}; allowed hosts: {sorted(allowed)}"
        )
    return True


def check_client_auth(request: Request) -> bool:
    """Return True when the requesting client may use the list API."""
    if dev_mode_active():
        return True
    encoded = _configured_password_hash()
    if encoded is None:
        return True
    presented = extract_presented_secret(
        request.headers.get("authorization"),
        request.headers.get("x-api-key"),
    )
    if verify_secret(presented, encoded):
        return True
    client_host = request.client.host if request.client else None
    logger.info("auth_rejected: path=%s client=%s", request.url.path, client_host)
    return False
