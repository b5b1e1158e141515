"""
Async HTTP client for the Aliyun Drive API.

Provides a clean interface for making API requests with lazy token refresh,
status classification, and raw transfers for part uploads and downloads.
"""

import asyncio
import json as jsonlib
import time
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

import httpx
import structlog

from aliyun_drive.config import AliyunDriveConfig
from aliyun_drive.exceptions import (
    AliyunDriveError,
    NetworkError,
    NotFoundError,
    ProtocolError,
    RequestFailedError,
    TokenRefreshError,
)
from aliyun_drive.models.auth import EXPIRED_TOKEN, Token

logger = structlog.get_logger(__name__)

TOKEN_ENDPOINT = "/v2/account/token"

SENSITIVE_KEYS = frozenset(
    {
        "access_token",
        "refresh_token",
        "proof_code",
        "upload_url",
        "url",
        "authorization",
    }
)


def sanitize_for_log(data: dict[str, Any]) -> dict[str, Any]:
    """
    Remove sensitive fields from a dict before logging.

    Recursively sanitizes nested dictionaries and lists.

    Args:
        data: Dictionary that may contain sensitive values.

    Returns:
        Copy with sensitive values replaced by "***".
    """
    result = {}
    for key, value in data.items():
        if key in SENSITIVE_KEYS:
            result[key] = "***"
        elif isinstance(value, dict):
            result[key] = sanitize_for_log(value)
        elif isinstance(value, list):
            result[key] = [
                sanitize_for_log(item) if isinstance(item, dict) else item for item in value
            ]
        else:
            result[key] = value
    return result


class AsyncHttpClient:
    """
    Async HTTP client for the Aliyun Drive API.

    Owns the access token. Every authenticated request first checks the
    token's expiry and refreshes it when needed; refreshes are serialized so
    concurrent callers holding the same stale token trigger a single refresh.
    """

    def __init__(
        self,
        config: AliyunDriveConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            config: Client configuration.
            transport: Optional transport for testing (mock transport).
        """
        self._config = config
        self._transport = transport

        self._token: Token = EXPIRED_TOKEN
        self._refresh_token = config.refresh_token
        self._client: httpx.AsyncClient | None = None

        self._client_lock = asyncio.Lock()
        self._refresh_lock = asyncio.Lock()

    async def __aenter__(self) -> "AsyncHttpClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self._close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self._config.api_url,
                    timeout=self._config.timeout,
                    transport=self._transport,
                    headers={
                        "Referer": self._config.referer,
                        "User-Agent": self._config.user_agent,
                    },
                )
        return self._client

    async def _close(self) -> None:
        async with self._client_lock:
            if self._client is None:
                logger.debug("Client not open.")
                return
            await self._client.aclose()
            self._client = None

    @property
    def token(self) -> Token:
        """Current access token (possibly expired)."""
        return self._token

    @property
    def refresh_token(self) -> str:
        """Latest refresh token; the service may rotate it on every refresh."""
        return self._refresh_token

    async def ensure_token(self) -> Token:
        """
        Return a valid access token, refreshing it first if it has expired.

        Raises:
            TokenRefreshError: If the refresh request fails.
        """
        token = self._token  # Capture atomically for consistent reads
        if not token.is_expired():
            return token
        await self._refresh_access_token(stale_token=token)
        return self._token

    async def _refresh_access_token(self, stale_token: Token) -> None:
        async with self._refresh_lock:
            if self._token is not stale_token:
                logger.debug("Token already refreshed by another coroutine")
                return

            logger.debug("Refreshing access token")
            try:
                response = await self.request(
                    "POST",
                    f"{self._config.auth_url}{TOKEN_ENDPOINT}",
                    json={
                        "refresh_token": self._refresh_token,
                        "grant_type": "refresh_token",
                    },
                    authenticated=False,
                )
                token = Token.from_response(response, now=time.time())
            except KeyError as e:
                msg = f"Token refresh failed: missing field {e}"
                raise TokenRefreshError(msg) from e
            except (TypeError, ValueError) as e:
                msg = f"Token refresh failed: malformed response: {e}"
                raise TokenRefreshError(msg) from e
            except AliyunDriveError as e:
                msg = f"Token refresh failed: {e.message}"
                raise TokenRefreshError(msg) from e

            self._token = token
            if token.refresh_token is not None:
                self._refresh_token = token.refresh_token
            logger.debug("Token refreshed successfully", expires_at=token.expires_at)

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> dict[str, Any]:
        """
        Make a JSON API request.

        Args:
            method: HTTP method (GET, POST, etc.).
            url: Endpoint path (e.g., "/v2/file/list") or absolute URL.
            json: JSON body.
            authenticated: Whether to attach the bearer token.

        Returns:
            Response JSON data, or an empty dict for an empty body.

        Raises:
            NotFoundError: On HTTP 404.
            RequestFailedError: On any other HTTP status >= 400.
            ProtocolError: If the body is not a JSON object.
            NetworkError: If the request fails at the transport level.
            TokenRefreshError: If the access token could not be refreshed.
        """
        headers = {}
        if authenticated:
            token = await self.ensure_token()
            headers["Authorization"] = f"Bearer {token.access_token}"

        client = self._require_client()
        logger.debug("Request", method=method, url=url, body=sanitize_for_log(json or {}))
        try:
            response = await client.request(method, url, json=json, headers=headers)
        except httpx.TransportError as e:
            msg = f'failed to request "{url}": {e}'
            raise NetworkError(msg, url=url) from e

        self._raise_for_status(response, url)
        return self._parse_json(response)

    async def upload_part(self, url: str, content: AsyncIterable[bytes] | bytes) -> None:
        """
        PUT raw bytes to a part destination.

        Security:
            Only pass URLs obtained from upload session responses
            (``part_info_list[].upload_url``).

        Args:
            url: Pre-signed upload URL.
            content: Part body, either bytes or an async byte stream.

        Raises:
            RequestFailedError: If the destination rejects the part.
            NetworkError: If the transfer fails at the transport level.
        """
        client = self._require_client()
        try:
            response = await client.put(
                url, content=content, timeout=self._config.transfer_timeout
            )
        except httpx.TransportError as e:
            msg = "failed to upload part"
            raise NetworkError(msg) from e
        self._raise_for_status(response, url)

    async def stream_raw(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        chunk_size: int | None = None,
    ) -> AsyncIterator[bytes]:
        """
        Stream a raw HTTP response (for downloads).

        Security:
            This method accepts arbitrary URLs. Only pass URLs obtained from
            trusted API responses (``get_download_url``), never user input.

        Args:
            method: HTTP method.
            url: Full URL from an API response.
            headers: Extra request headers (e.g. ``Range``).
            chunk_size: Size of chunks to yield.

        Yields:
            Response content in chunks.
        """
        client = self._require_client()
        try:
            async with client.stream(
                method,
                url,
                headers=headers,
                timeout=self._config.transfer_timeout,
            ) as response:
                self._raise_for_status(response, url)
                async for chunk in response.aiter_bytes(chunk_size or self._config.chunk_size):
                    yield chunk
        except httpx.TransportError as e:
            msg = f'failed to download "{url}"'
            raise NetworkError(msg) from e

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "HTTP client not initialized. Use 'async with' first."
            raise RuntimeError(msg)
        return self._client

    @staticmethod
    def _raise_for_status(response: httpx.Response, url: str) -> None:
        status = response.status_code
        if status == httpx.codes.NOT_FOUND:
            msg = f'failed to request "{url}", got "{status}"'
            raise NotFoundError(msg, url=url)
        if status >= httpx.codes.BAD_REQUEST:
            msg = f'failed to request "{url}", got "{status}"'
            raise RequestFailedError(msg, code=status, url=url)

    @staticmethod
    def _parse_json(response: httpx.Response) -> dict[str, Any]:
        if not response.content:
            return {}
        try:
            data = jsonlib.loads(response.content)
        except ValueError as e:
            msg = f'failed to parse response "{response.text}"'
            raise ProtocolError(msg, body=response.text) from e
        if not isinstance(data, dict):
            msg = f'unexpected response "{response.text}"'
            raise ProtocolError(msg, body=response.text)
        return data
