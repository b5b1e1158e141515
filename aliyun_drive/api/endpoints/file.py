"""File and folder endpoints (listing, lookup, upload sessions, mutations)."""

from collections.abc import Callable
from typing import Any, TypeVar

from aliyun_drive.api.http_client import AsyncHttpClient
from aliyun_drive.exceptions import ProtocolError
from aliyun_drive.models.drive import DownloadTarget, Node, NodePage, ProofSession
from aliyun_drive.models.requests import (
    CompleteUploadRequest,
    CreateFolderRequest,
    CreateWithProofRequest,
    FileRequest,
    GetByPathRequest,
    ListChildrenRequest,
    RenameRequest,
    TransferRequest,
)

FILE_LIST = "/v2/file/list"
FILE_GET_BY_PATH = "/v2/file/get_by_path"
FILE_CREATE_WITH_PROOF = "/v2/file/create_with_proof"
FILE_COMPLETE = "/v2/file/complete"
FILE_UPDATE = "/v2/file/update"
FILE_MOVE = "/v2/file/move"
FILE_COPY = "/v2/file/copy"
FILE_GET_DOWNLOAD_URL = "/v2/file/get_download_url"
RECYCLEBIN_TRASH = "/v2/recyclebin/trash"

T = TypeVar("T")


def _parse(parser: Callable[[dict[str, Any]], T], data: dict[str, Any], what: str) -> T:
    try:
        return parser(data)
    except (KeyError, TypeError, ValueError) as e:
        msg = f"Malformed {what} response"
        raise ProtocolError(msg, body=str(data)) from e


async def list_children(http: AsyncHttpClient, request: ListChildrenRequest) -> NodePage:
    """Fetch one page of a folder's children."""
    response = await http.request("POST", FILE_LIST, json=request.to_payload())
    return _parse(NodePage.from_response, response, "list")


async def get_by_path(http: AsyncHttpClient, drive_id: str, file_path: str) -> Node:
    """
    Look a node up by its full path.

    Raises:
        NotFoundError: If the service has no node at this path.
    """
    request = GetByPathRequest(drive_id=drive_id, file_path=file_path)
    response = await http.request("POST", FILE_GET_BY_PATH, json=request.to_payload())
    return _parse(Node.from_response, response, "get_by_path")


async def create_folder(http: AsyncHttpClient, request: CreateFolderRequest) -> Node:
    """Create a single folder under an existing parent."""
    response = await http.request("POST", FILE_CREATE_WITH_PROOF, json=request.to_payload())
    # The response only echoes file_name; the refuse policy guarantees it is ours.
    response = {"type": "folder", **response, "name": request.name}
    return _parse(Node.from_response, response, "create folder")


async def create_with_proof(http: AsyncHttpClient, request: CreateWithProofRequest) -> ProofSession:
    """Open a proof-based upload session."""
    response = await http.request("POST", FILE_CREATE_WITH_PROOF, json=request.to_payload())
    return _parse(ProofSession.from_response, response, "create_with_proof")


async def complete_upload(http: AsyncHttpClient, request: CompleteUploadRequest) -> Node:
    """Finalize an upload session, returning the created file."""
    response = await http.request("POST", FILE_COMPLETE, json=request.to_payload())
    return _parse(Node.from_response, response, "complete")


async def rename_file(http: AsyncHttpClient, request: RenameRequest) -> None:
    await http.request("POST", FILE_UPDATE, json=request.to_payload())


async def move_file(http: AsyncHttpClient, request: TransferRequest) -> None:
    await http.request("POST", FILE_MOVE, json=request.to_payload())


async def copy_file(http: AsyncHttpClient, request: TransferRequest) -> None:
    await http.request("POST", FILE_COPY, json=request.to_payload())


async def trash_file(http: AsyncHttpClient, drive_id: str, file_id: str) -> None:
    """Move a node to the recycle bin."""
    request = FileRequest(drive_id=drive_id, file_id=file_id)
    await http.request("POST", RECYCLEBIN_TRASH, json=request.to_payload())


async def get_download_url(http: AsyncHttpClient, drive_id: str, file_id: str) -> DownloadTarget:
    """Get a transient download location for a file."""
    request = FileRequest(drive_id=drive_id, file_id=file_id)
    response = await http.request("POST", FILE_GET_DOWNLOAD_URL, json=request.to_payload())
    return _parse(DownloadTarget.from_response, response, "get_download_url")
