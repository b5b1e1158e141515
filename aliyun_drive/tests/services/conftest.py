import time
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from aliyun_drive.api.http_client import AsyncHttpClient
from aliyun_drive.config import AliyunDriveConfig
from aliyun_drive.models.auth import Token
from aliyun_drive.services.file_service import FileService
from aliyun_drive.services.folder_service import FolderService
from aliyun_drive.services.tree_service import TreeService
from aliyun_drive.services.upload_service import UploadService
from aliyun_drive.tests.utils.fake_drive import FakeDrive


@pytest.fixture
def fake_drive() -> FakeDrive:
    return FakeDrive()


@pytest_asyncio.fixture
async def fake_http(
    config: AliyunDriveConfig, fake_drive: FakeDrive
) -> AsyncIterator[AsyncHttpClient]:
    """HTTP client talking to the in-memory drive, holding a valid access token."""
    client = AsyncHttpClient(config, transport=fake_drive)
    client._token = Token(access_token="access-abc", expires_at=time.time() + 3600)
    async with client:
        yield client


@pytest.fixture
def tree_service(fake_http: AsyncHttpClient) -> TreeService:
    return TreeService(fake_http, FakeDrive.DRIVE_ID, page_size=2)


@pytest.fixture
def folder_service(fake_http: AsyncHttpClient, tree_service: TreeService) -> FolderService:
    return FolderService(fake_http, tree_service)


@pytest.fixture
def file_service(fake_http: AsyncHttpClient) -> FileService:
    return FileService(fake_http, FakeDrive.DRIVE_ID, chunk_size=4)


@pytest.fixture
def upload_service(
    fake_http: AsyncHttpClient,
    tree_service: TreeService,
    folder_service: FolderService,
    file_service: FileService,
) -> UploadService:
    return UploadService(
        fake_http, tree_service, folder_service, file_service, max_part_size=4, chunk_size=3
    )
