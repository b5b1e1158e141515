import time
from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest
import pytest_asyncio

from aliyun_drive.api.http_client import AsyncHttpClient
from aliyun_drive.config import AliyunDriveConfig
from aliyun_drive.models.auth import Token
from aliyun_drive.tests.utils.mock_transport import MockTransport

DRIVE_ID = "drive-1"


@pytest.fixture
def config() -> AliyunDriveConfig:
    return AliyunDriveConfig(refresh_token="refresh-abc")


@pytest.fixture
def mock_transport() -> MockTransport:
    return MockTransport()


@pytest_asyncio.fixture
async def http(
    config: AliyunDriveConfig, mock_transport: MockTransport
) -> AsyncIterator[AsyncHttpClient]:
    """HTTP client over the mock transport, holding a valid access token."""
    client = AsyncHttpClient(config, transport=mock_transport)
    client._token = Token(access_token="access-abc", expires_at=time.time() + 3600)
    async with client:
        yield client


@pytest.fixture
def node_json() -> Callable[..., dict[str, Any]]:
    def _make(
        file_id: str,
        name: str,
        kind: str = "file",
        parent_file_id: str = "root",
        **extra: Any,
    ) -> dict[str, Any]:
        return {
            "drive_id": DRIVE_ID,
            "file_id": file_id,
            "name": name,
            "type": kind,
            "parent_file_id": parent_file_id,
            **extra,
        }

    return _make
