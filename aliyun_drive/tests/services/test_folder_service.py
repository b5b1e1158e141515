import asyncio
from unittest.mock import patch

import pytest

from aliyun_drive.exceptions import RequestFailedError
from aliyun_drive.models.drive import ROOT_NODE, Node
from aliyun_drive.models.requests import CreateFolderRequest
from aliyun_drive.services.folder_service import FolderService
from aliyun_drive.tests.utils.fake_drive import FakeDrive

CREATE_PATH = "/v2/file/create_with_proof"


@pytest.mark.asyncio
async def test_create_folder_creates_missing_chain(
    folder_service: FolderService, fake_drive: FakeDrive
) -> None:
    node = await folder_service.create_folder("/a/b/c")

    created = fake_drive.find("/a/b/c")
    assert created is not None
    assert node.node_id == created.file_id
    assert node.name == "c"
    assert node.is_folder
    assert fake_drive.calls[CREATE_PATH] == 3


@pytest.mark.asyncio
async def test_create_folder_is_idempotent(
    folder_service: FolderService, fake_drive: FakeDrive
) -> None:
    first = await folder_service.create_folder("/a/b")
    creates = fake_drive.calls[CREATE_PATH]

    second = await folder_service.create_folder("a/b/")

    assert second.node_id == first.node_id
    assert fake_drive.calls[CREATE_PATH] == creates


@pytest.mark.asyncio
async def test_create_folder_reuses_existing_prefix(
    folder_service: FolderService, fake_drive: FakeDrive
) -> None:
    existing = fake_drive.add_node("root", "a", "folder")

    await folder_service.create_folder("/a/b")

    assert [c.name for c in fake_drive.children("root")] == ["a"]
    assert [c.name for c in fake_drive.children(existing.file_id)] == ["b"]
    assert fake_drive.calls[CREATE_PATH] == 1


@pytest.mark.asyncio
async def test_create_root_issues_no_request(
    folder_service: FolderService, fake_drive: FakeDrive
) -> None:
    assert await folder_service.create_folder("/") is ROOT_NODE
    assert fake_drive.requests == []


@pytest.mark.asyncio
async def test_concurrent_creates_produce_single_folder(
    folder_service: FolderService, fake_drive: FakeDrive
) -> None:
    nodes = await asyncio.gather(*(folder_service.create_folder("/x/y") for _ in range(5)))

    assert len({n.node_id for n in nodes}) == 1
    assert [c.name for c in fake_drive.children("root")] == ["x"]
    assert fake_drive.calls[CREATE_PATH] == 2


@pytest.mark.asyncio
async def test_refused_create_resolves_concurrent_folder(
    folder_service: FolderService, fake_drive: FakeDrive
) -> None:
    async def created_elsewhere(http, request: CreateFolderRequest) -> Node:
        fake_drive.add_node(request.parent_file_id, request.name, "folder")
        msg = "failed to request, got 409"
        raise RequestFailedError(msg, code=409, url=CREATE_PATH)

    with patch("aliyun_drive.services.folder_service.create_folder", created_elsewhere):
        node = await folder_service.create_folder("/late")

    assert node.node_id == fake_drive.find("/late").file_id


@pytest.mark.asyncio
async def test_create_folder_fails_when_name_taken_by_file(
    folder_service: FolderService, fake_drive: FakeDrive
) -> None:
    fake_drive.add_node("root", "taken")

    with pytest.raises(RequestFailedError, match='failed to create folder "/taken"') as exc_info:
        await folder_service.create_folder("/taken/sub")

    assert exc_info.value.code == 409
    assert fake_drive.find("/taken/sub") is None
