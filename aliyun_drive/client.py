"""
Aliyun Drive client facade.

This is the main entry point for users of the library. It exposes the drive
as a path-addressed filesystem and hides identifiers, pagination and the
upload protocol behind the underlying services.
"""

import asyncio
from collections.abc import AsyncGenerator
from typing import BinaryIO, Self

import httpx
import structlog

from aliyun_drive.api.endpoints.user import get_album_drive_id, get_default_drive_id
from aliyun_drive.api.http_client import AsyncHttpClient
from aliyun_drive.config import AliyunDriveConfig
from aliyun_drive.exceptions import AliyunDriveError, PathNotFoundError, wrap_error
from aliyun_drive.models.drive import Node, NodeKind
from aliyun_drive.services.file_service import FileService
from aliyun_drive.services.folder_service import FolderService
from aliyun_drive.services.tree_service import TreeService
from aliyun_drive.services.upload_service import UploadService

logger = structlog.get_logger(__name__)


class AliyunDriveClient:
    """
    Async filesystem client for Aliyun Drive.

    Example:
        ```python
        config = AliyunDriveConfig(refresh_token="...")
        async with AliyunDriveClient(config) as drive:
            folder = await drive.create_folder("/backup/2024")
            with open("photo.jpg", "rb") as f:
                node = await drive.create_file(
                    "/backup/2024/photo.jpg", os.path.getsize("photo.jpg"), f
                )

            for child in await drive.list("/backup/2024"):
                print(child.name, child.size)

            async for chunk in drive.open(node):
                ...
        ```

    Args:
        config: Client configuration, including the refresh token.
        transport: Optional httpx transport for testing (mock transport).
    """

    def __init__(
        self,
        config: AliyunDriveConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

        self._http: AsyncHttpClient | None = None
        self._drive_id: str | None = None
        self._tree_service: TreeService | None = None
        self._folder_service: FolderService | None = None
        self._file_service: FileService | None = None
        self._upload_service: UploadService | None = None

        self._initialized = False
        self._init_lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"AliyunDriveClient(drive_id={self._drive_id!r})"

    async def __aenter__(self) -> Self:
        """Enter async context."""
        await self._ensure_initialized()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        """Exit async context."""
        await self.close()

    async def _ensure_initialized(self) -> None:
        """Open the HTTP client, look up the drive and wire the services."""
        async with self._init_lock:
            if self._initialized:
                return

            self._http = AsyncHttpClient(self._config, transport=self._transport)
            await self._http.__aenter__()

            try:
                if self._config.is_album:
                    drive_id = await get_album_drive_id(self._http)
                else:
                    drive_id = await get_default_drive_id(self._http)
            except AliyunDriveError as e:
                await self._http.__aexit__(None, None, None)
                self._http = None
                raise wrap_error(e, "failed to get drive id") from e

            self._drive_id = drive_id
            self._tree_service = TreeService(
                self._http, drive_id, page_size=self._config.page_size
            )
            self._folder_service = FolderService(self._http, self._tree_service)
            self._file_service = FileService(
                self._http, drive_id, chunk_size=self._config.chunk_size
            )
            self._upload_service = UploadService(
                self._http,
                self._tree_service,
                self._folder_service,
                self._file_service,
                max_part_size=self._config.max_part_size,
                chunk_size=self._config.chunk_size,
                proof_offset=self._config.proof_offset,
            )

            self._initialized = True
            logger.debug("Client initialized", drive_id=drive_id, is_album=self._config.is_album)

    async def close(self) -> None:
        """Close the client and release resources."""
        async with self._init_lock:
            if self._http:
                await self._http.__aexit__(None, None, None)
                self._http = None

            self._tree_service = None
            self._folder_service = None
            self._file_service = None
            self._upload_service = None
            self._initialized = False
            logger.debug("Client closed")

    @property
    def drive_id(self) -> str | None:
        """Identifier of the drive in use, once initialized."""
        return self._drive_id

    @property
    def refresh_token(self) -> str:
        """
        Latest refresh token.

        The service may hand out a new refresh token with every access token;
        persist this value rather than the one the client was created with.
        """
        if self._http is None:
            return self._config.refresh_token
        return self._http.refresh_token

    async def get(self, path: str, kind: NodeKind = NodeKind.ANY) -> Node:
        """
        Resolve a path to a node.

        Args:
            path: File or folder path; "" and "/" denote the root.
            kind: Required kind, ``NodeKind.ANY`` by default.

        Raises:
            PathNotFoundError: If nothing of that kind exists at the path.
        """
        return await self._tree().get(path, kind)

    async def list(self, path: str = "/") -> list[Node]:
        """
        List contents of a directory.

        Raises:
            PathNotFoundError: If no folder exists at the path.
        """
        try:
            return await self._tree().list_directory(path)
        except PathNotFoundError as e:
            raise wrap_error(e, f'failed to find node of "{path}"') from e

    async def create_folder(self, path: str) -> Node:
        """
        Create a folder and any missing parents.

        Returns:
            The folder at ``path``, created or already present.
        """
        return await self._folders().create_folder(path)

    async def rename(self, node: Node, new_name: str) -> None:
        """
        Rename a node in place.

        Raises:
            RootNodeError: If ``node`` is the root folder.
        """
        await self._files().rename(node, new_name)

    async def move(self, node: Node, dst_parent: Node, dst_name: str | None = None) -> None:
        """
        Move a node under ``dst_parent``, optionally renaming it.

        Raises:
            RootNodeError: If ``node`` is the root folder.
            ValidationError: If ``dst_parent`` is missing.
        """
        await self._files().move(node, dst_parent, dst_name)

    async def copy(self, node: Node, dst_parent: Node, dst_name: str | None = None) -> None:
        """Copy a node under ``dst_parent``."""
        await self._files().copy(node, dst_parent, dst_name)

    async def remove(self, node: Node) -> None:
        """Move a node to the recycle bin."""
        await self._files().remove(node)

    async def open(
        self, node: Node, headers: dict[str, str] | None = None
    ) -> AsyncGenerator[bytes, None]:
        """
        Stream a file's content.

        Example:
            ```python
            with open("local.bin", "wb") as f:
                async for chunk in drive.open(node, headers={"Range": "bytes=0-1023"}):
                    f.write(chunk)
            ```
        """
        async for chunk in self._files().open(node, headers):
            yield chunk

    async def create_file(
        self, path: str, size: int, content: BinaryIO, *, overwrite: bool = False
    ) -> Node:
        """
        Upload ``size`` bytes from ``content`` to ``path``.

        Seekable sources are hashed and sampled first so the server can skip
        the transfer when it already has the content.
        """
        return await self._uploads().create_file(path, size, content, overwrite=overwrite)

    async def calc_proof(self, size: int, content: BinaryIO) -> str:
        """Compute the proof code for a seekable source."""
        return await self._uploads().calc_proof(size, content)

    async def create_file_with_proof(
        self,
        path: str,
        size: int,
        content: BinaryIO,
        sha1: str,
        proof_code: str,
        *,
        overwrite: bool = False,
    ) -> Node:
        """Upload with a content hash and proof code computed by the caller."""
        return await self._uploads().create_file_with_proof(
            path, size, content, sha1=sha1, proof_code=proof_code, overwrite=overwrite
        )

    def _tree(self) -> TreeService:
        if self._tree_service is None:
            raise RuntimeError("Client not initialized. Use 'async with' first.")
        return self._tree_service

    def _folders(self) -> FolderService:
        if self._folder_service is None:
            raise RuntimeError("Client not initialized. Use 'async with' first.")
        return self._folder_service

    def _files(self) -> FileService:
        if self._file_service is None:
            raise RuntimeError("Client not initialized. Use 'async with' first.")
        return self._file_service

    def _uploads(self) -> UploadService:
        if self._upload_service is None:
            raise RuntimeError("Client not initialized. Use 'async with' first.")
        return self._upload_service
