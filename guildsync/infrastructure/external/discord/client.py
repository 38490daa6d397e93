"""Thin Discord REST v10 client over httpx.AsyncClient.

Handles bot authorization, audit-log reasons, 429 retries (honouring
retry_after) and converts every failure into RemoteSyncError so callers deal
with one exception type.
"""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import quote

import httpx

from guildsync.domain.exceptions import RemoteSyncError
from guildsync.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_DEFAULT_RETRY_AFTER = 1.0


def build_http_client(
    token: str, api_base: str, timeout: float
) -> httpx.AsyncClient:
    """Create the shared AsyncClient used by DiscordRestClient (closed on shutdown)."""
    return httpx.AsyncClient(
        base_url=api_base,
        headers={
            "Authorization": f"Bot {token}",
            "Content-Type": "application/json",
            "User-Agent": "DiscordBot (guildsync, 1.0)",
        },
        timeout=timeout,
    )


def _retry_after(resp: httpx.Response) -> float:
    """Seconds to wait before retrying a rate-limited request."""
    try:
        body = resp.json()
    except ValueError:
        body = {}
    value = body.get("retry_after") if isinstance(body, dict) else None
    if value is None:
        value = resp.headers.get("Retry-After", _DEFAULT_RETRY_AFTER)
    try:
        return max(float(value), 0.0)
    except (TypeError, ValueError):
        return _DEFAULT_RETRY_AFTER


class DiscordRestClient:
    """Issue Discord REST requests. 404 may be mapped to None per call."""

    def __init__(self, http: httpx.AsyncClient, max_retries: int = 3) -> None:
        self._http = http
        self._max_retries = max_retries

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        reason: str | None = None,
        allow_404: bool = False,
    ) -> Any:
        """Perform one API call and return the decoded JSON body.

        Returns {} for 204 responses and None for 404 when allow_404 is set.

        Raises:
            RemoteSyncError: Transport error, timeout, non-success status, or
                rate limit still in force after max_retries retries.
        """
        headers = {"X-Audit-Log-Reason": quote(reason, safe=" ")} if reason else None
        attempt = 0
        while True:
            try:
                resp = await self._http.request(method, path, json=json, headers=headers)
            except httpx.TimeoutException as exc:
                raise RemoteSyncError(
                    f"Discord request timed out: {method} {path}",
                    details={"method": method, "path": path},
                ) from exc
            except httpx.HTTPError as exc:
                raise RemoteSyncError(
                    f"Discord request failed: {method} {path}: {exc}",
                    details={"method": method, "path": path},
                ) from exc

            if resp.status_code == 429:
                if attempt >= self._max_retries:
                    raise RemoteSyncError(
                        f"Discord rate limit exceeded: {method} {path}",
                        status_code=429,
                        details={"method": method, "path": path, "attempts": attempt + 1},
                    )
                wait = _retry_after(resp)
                attempt += 1
                logger.warning(
                    "Discord rate limit on %s %s; retrying in %.2fs (attempt %d/%d)",
                    method,
                    path,
                    wait,
                    attempt,
                    self._max_retries,
                )
                await asyncio.sleep(wait)
                continue

            if resp.status_code == 404 and allow_404:
                return None
            if resp.status_code == 204:
                return {}
            if resp.is_success:
                return resp.json() if resp.content else {}
            # Never log the response body; it can echo request headers.
            raise RemoteSyncError(
                f"Discord API error {resp.status_code}: {method} {path}",
                status_code=resp.status_code,
                details={"method": method, "path": path},
            )

    async def get(self, path: str, *, allow_404: bool = False) -> Any:
        return await self.request("GET", path, allow_404=allow_404)

    async def post(self, path: str, payload: dict[str, Any], *, reason: str | None = None) -> Any:
        return await self.request("POST", path, json=payload, reason=reason)

    async def put(
        self, path: str, payload: dict[str, Any] | None = None, *, reason: str | None = None
    ) -> Any:
        return await self.request("PUT", path, json=payload, reason=reason)

    async def patch(self, path: str, payload: dict[str, Any], *, reason: str | None = None) -> Any:
        return await self.request("PATCH", path, json=payload, reason=reason)

    async def delete(
        self, path: str, *, reason: str | None = None, allow_404: bool = False
    ) -> Any:
        return await self.request("DELETE", path, reason=reason, allow_404=allow_404)
