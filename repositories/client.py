"""
Admin service client initialization.

This module contains *only* the connection setup for the remote admin service
and the shared request helper every repository module uses.

Environment variables:
- ADMIN_API_BASE_URL: Root URL of the admin service (default http://localhost:3000/api)
- ADMIN_API_TOKEN: Bearer credential attached to each call
- ADMIN_API_TIMEOUT_SECONDS: Transport timeout (default 30)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import httpx
from dotenv import load_dotenv

# Load environment variables from the .env file at the project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL: str = "http://localhost:3000/api"
DEFAULT_TIMEOUT_SECONDS: float = 30.0


class RemoteCallError(RuntimeError):
    """
    Raised when an admin service call does not succeed.

    Covers both explicit application failures (non-2xx or success=false) and
    transport failures (network=True). Callers treat both the same way.

    `message` is always printable; `detail` is the service's own message and
    stays None when the service sent none.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        network: bool = False,
        detail: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.network = network
        self.detail = detail
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class AdminApiSettings:
    base_url: str = DEFAULT_BASE_URL
    token: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class ApiResult:
    """
    Successful service response.

    For paginated responses `data` is {"data": [...], "pagination": {...}},
    otherwise it is the service's `data` field as sent.
    """

    data: Any
    message: Optional[str] = None


def load_settings() -> AdminApiSettings:
    """Read settings from the environment."""

    base_url = os.getenv("ADMIN_API_BASE_URL") or DEFAULT_BASE_URL
    token = os.getenv("ADMIN_API_TOKEN") or None
    raw_timeout = os.getenv("ADMIN_API_TIMEOUT_SECONDS")
    timeout = DEFAULT_TIMEOUT_SECONDS
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise RuntimeError(
                "Invalid environment variable: ADMIN_API_TIMEOUT_SECONDS. "
                f"Expected a number of seconds, got {raw_timeout!r}."
            ) from None
    return AdminApiSettings(base_url=base_url.rstrip("/"), token=token, timeout_seconds=timeout)


class AdminApiClient:
    """Thin async JSON client for the admin service."""

    def __init__(
        self,
        settings: Optional[AdminApiSettings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or load_settings()
        self._http = httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=self.settings.timeout_seconds,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.settings.token:
            headers["Authorization"] = f"Bearer {self.settings.token}"
        return headers

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Optional[Mapping[str, Any]] = None,
    ) -> ApiResult:
        """
        Issue one call and unwrap the service envelope.

        Raises:
            RemoteCallError: on transport errors, undecodable bodies, non-2xx
                statuses, or success=false.
        """

        query = {k: v for k, v in (params or {}).items() if v is not None and v != ""}
        logger.debug("%s %s params=%s", method, endpoint, query)

        try:
            response = await self._http.request(
                method,
                endpoint,
                params=query or None,
                json=json,
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            logger.warning("Network error calling %s %s: %s", method, endpoint, exc)
            raise RemoteCallError(str(exc) or "Network error occurred", network=True) from exc

        try:
            body = response.json()
        except ValueError:
            raise RemoteCallError(
                "Invalid response from server",
                status_code=response.status_code,
                network=True,
            ) from None

        if not isinstance(body, dict):
            # Some list endpoints answer with a bare array.
            if response.is_success:
                return ApiResult(data=body)
            raise RemoteCallError("An error occurred", status_code=response.status_code)

        message = body.get("message") or body.get("error")
        if not response.is_success or body.get("success") is False:
            raise RemoteCallError(
                str(message or "An error occurred"),
                status_code=response.status_code,
                detail=str(message) if message else None,
            )

        if body.get("pagination") is not None:
            return ApiResult(data={"data": body.get("data"), "pagination": body["pagination"]}, message=message)
        return ApiResult(data=body.get("data"), message=message)

    async def aclose(self) -> None:
        await self._http.aclose()


_client: Optional[AdminApiClient] = None


def get_admin_client() -> AdminApiClient:
    """Shared client built from the environment on first use."""

    global _client
    if _client is None:
        _client = AdminApiClient(load_settings())
    return _client


async def close_admin_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


__all__ = [
    "AdminApiClient",
    "AdminApiSettings",
    "ApiResult",
    "RemoteCallError",
    "close_admin_client",
    "get_admin_client",
    "load_settings",
]
