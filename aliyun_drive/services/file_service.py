"""
Node operations for Aliyun Drive.

Rename, move, copy, trash and download existing nodes.
"""

import io
import zipfile
from collections.abc import AsyncGenerator

import structlog

from aliyun_drive.api.endpoints.file import (
    copy_file,
    get_download_url,
    move_file,
    rename_file,
    trash_file,
)
from aliyun_drive.api.http_client import AsyncHttpClient
from aliyun_drive.exceptions import (
    AliyunDriveError,
    ProtocolError,
    RootNodeError,
    ValidationError,
    wrap_error,
)
from aliyun_drive.models.drive import Node
from aliyun_drive.models.requests import CheckNameMode, RenameRequest, TransferRequest

logger = structlog.get_logger(__name__)


def check_node(node: Node | None) -> Node:
    """
    Reject a missing node or the root folder.

    Raises:
        ValidationError: If ``node`` is None.
        RootNodeError: If ``node`` is the root folder.
    """
    if node is None:
        msg = "empty node"
        raise ValidationError(msg)
    if node.is_root:
        raise RootNodeError()
    return node


def check_parent(parent: Node | None) -> Node:
    if parent is None:
        msg = "parent node is empty"
        raise ValidationError(msg)
    return parent


class FileService:
    """
    Service for mutating and downloading single nodes.

    Every mutation validates its arguments before issuing a request; the root
    folder can never be renamed, moved, copied, removed or opened.
    """

    def __init__(
        self,
        http: AsyncHttpClient,
        drive_id: str,
        *,
        chunk_size: int = 64 * 1024,
    ) -> None:
        """
        Args:
            http: Async HTTP client.
            drive_id: Drive to operate on.
            chunk_size: Chunk size for streamed downloads.
        """
        self._http = http
        self._drive_id = drive_id
        self._chunk_size = chunk_size

    async def rename(self, node: Node, new_name: str) -> None:
        node = check_node(node)
        request = RenameRequest(
            drive_id=self._drive_id,
            file_id=node.node_id,
            name=new_name,
            check_name_mode=CheckNameMode.REFUSE,
        )
        try:
            await rename_file(self._http, request)
        except AliyunDriveError as e:
            raise wrap_error(e, "failed to post rename request", node_id=node.node_id) from e
        logger.info("Renamed node", node_id=node.node_id, name=new_name)

    async def move(self, node: Node, dst_parent: Node, dst_name: str | None = None) -> None:
        """
        Move a node under another folder.

        Args:
            node: Node to move.
            dst_parent: Destination folder.
            dst_name: Name at the destination; defaults to the current name.

        Raises:
            RootNodeError: If ``node`` is the root folder.
            ValidationError: If ``node`` or ``dst_parent`` is missing.
        """
        node = check_node(node)
        dst_parent = check_parent(dst_parent)
        request = self._transfer_request(node, dst_parent, dst_name)
        try:
            await move_file(self._http, request)
        except AliyunDriveError as e:
            raise wrap_error(e, "failed to post move request", node_id=node.node_id) from e
        logger.info("Moved node", node_id=node.node_id, parent_id=dst_parent.node_id)

    async def copy(self, node: Node, dst_parent: Node, dst_name: str | None = None) -> None:
        """
        Copy a node under another folder.

        Same argument rules as ``move``, root folder included.
        """
        node = check_node(node)
        dst_parent = check_parent(dst_parent)
        request = self._transfer_request(node, dst_parent, dst_name)
        try:
            await copy_file(self._http, request)
        except AliyunDriveError as e:
            raise wrap_error(e, "failed to post copy request", node_id=node.node_id) from e
        logger.info("Copied node", node_id=node.node_id, parent_id=dst_parent.node_id)

    async def remove(self, node: Node) -> None:
        """Move a node to the recycle bin."""
        node = check_node(node)
        try:
            await trash_file(self._http, self._drive_id, node.node_id)
        except AliyunDriveError as e:
            raise wrap_error(e, "failed to post remove request", node_id=node.node_id) from e
        logger.info("Removed node", node_id=node.node_id)

    async def open(
        self, node: Node, headers: dict[str, str] | None = None
    ) -> AsyncGenerator[bytes, None]:
        """
        Stream a file's content.

        Live photos have no single download URL, only one URL per component
        stream. Those are packed on the fly into a zip archive with one entry
        per stream, named ``<node name>.<stream type>``.

        Args:
            node: File node.
            headers: Extra headers for the download request (e.g. ``Range``).

        Yields:
            File content in chunks.

        Raises:
            RootNodeError: If ``node`` is the root folder.
            ProtocolError: If the service returned no download location.
        """
        node = check_node(node)
        try:
            target = await get_download_url(self._http, self._drive_id, node.node_id)
        except AliyunDriveError as e:
            raise wrap_error(e, "failed to get download url", node_id=node.node_id) from e

        if target.url is not None:
            logger.debug("Downloading file", node_id=node.node_id)
            async for chunk in self._http.stream_raw(
                "GET", target.url, headers=headers, chunk_size=self._chunk_size
            ):
                yield chunk
            return

        if target.streams_url:
            archive = await self._build_archive(node, target.streams_url, headers)
            for start in range(0, len(archive), self._chunk_size):
                yield archive[start : start + self._chunk_size]
            return

        msg = f'failed to open "{node.name}"'
        raise ProtocolError(msg)

    async def _build_archive(
        self, node: Node, streams_url: dict[str, str], headers: dict[str, str] | None
    ) -> bytes:
        logger.debug("Packing multi-stream file", node_id=node.node_id, streams=list(streams_url))
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            for stream_type, url in streams_url.items():
                name = f"{node.name}.{stream_type}"
                with archive.open(name, "w") as entry:
                    async for chunk in self._http.stream_raw(
                        "GET", url, headers=headers, chunk_size=self._chunk_size
                    ):
                        entry.write(chunk)
        return buffer.getvalue()

    def _transfer_request(
        self, node: Node, dst_parent: Node, dst_name: str | None
    ) -> TransferRequest:
        return TransferRequest(
            drive_id=self._drive_id,
            file_id=node.node_id,
            to_parent_file_id=dst_parent.node_id,
            new_name=dst_name if dst_name is not None else node.name,
        )
