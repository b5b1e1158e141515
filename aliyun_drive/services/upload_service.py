"""
File upload service for Aliyun Drive.

Handles proof-based uploads: the server may recognize the content from its
hash and proof code and complete the upload without a byte transfer (rapid
upload); otherwise the content is sent part by part and the session is
completed explicitly.
"""

import asyncio
import math
from collections.abc import AsyncGenerator
from typing import BinaryIO

import structlog

from aliyun_drive.api.endpoints.file import complete_upload, create_with_proof
from aliyun_drive.api.http_client import AsyncHttpClient
from aliyun_drive.config import MAX_PART_SIZE
from aliyun_drive.core.path import ROOT_PATH, normalize_path, split_path
from aliyun_drive.crypto.proof import (
    ProofOffsetFunc,
    calc_proof,
    calc_proof_code,
    zero_proof_offset,
)
from aliyun_drive.exceptions import (
    AliyunDriveError,
    PathNotFoundError,
    ProtocolError,
    UnsupportedFormatError,
    ValidationError,
    wrap_error,
)
from aliyun_drive.models.drive import Node, NodeKind, PartInfo
from aliyun_drive.models.requests import (
    CheckNameMode,
    CompleteUploadRequest,
    CreateWithProofRequest,
)
from aliyun_drive.services.file_service import FileService
from aliyun_drive.services.folder_service import FolderService
from aliyun_drive.services.tree_service import TreeService

logger = structlog.get_logger(__name__)

# Bundled live photos; the service only produces them, never accepts them.
UNSUPPORTED_EXTENSION = ".livp"


def make_part_info_list(size: int, max_part_size: int = MAX_PART_SIZE) -> tuple[PartInfo, ...]:
    """
    Split ``size`` bytes into numbered parts of at most ``max_part_size``.

    An empty file still gets one part.
    """
    count = max(1, math.ceil(size / max_part_size))
    return tuple(PartInfo(part_number=number) for number in range(1, count + 1))


class UploadService:
    """
    Service for uploading files.

    Parts are transferred sequentially. A failed upload is not rolled back:
    parts already sent stay on the server, and with ``overwrite`` the previous
    file has already been moved to the recycle bin.
    """

    def __init__(
        self,
        http: AsyncHttpClient,
        tree_service: TreeService,
        folder_service: FolderService,
        file_service: FileService,
        *,
        max_part_size: int = MAX_PART_SIZE,
        chunk_size: int = 64 * 1024,
        proof_offset: ProofOffsetFunc = zero_proof_offset,
    ) -> None:
        """
        Args:
            http: Async HTTP client.
            tree_service: Tree service for path resolution.
            folder_service: Folder service for creating the parent chain.
            file_service: File service for removing overwritten files.
            max_part_size: Upper bound in bytes for a single part.
            chunk_size: Read size when streaming a part.
            proof_offset: Proof sample offset derivation.
        """
        self._http = http
        self._tree_service = tree_service
        self._folder_service = folder_service
        self._file_service = file_service
        self._max_part_size = max_part_size
        self._chunk_size = chunk_size
        self._proof_offset = proof_offset

    async def calc_proof(self, size: int, content: BinaryIO) -> str:
        """
        Compute the proof code for ``content`` with the current access token.

        The source is rewound afterwards.
        """
        token = await self._http.ensure_token()
        return await asyncio.to_thread(
            calc_proof_code, content, size, token.access_token, self._proof_offset
        )

    async def create_file(
        self, path: str, size: int, content: BinaryIO, *, overwrite: bool = False
    ) -> Node:
        """
        Upload a file, computing its hash and proof code when possible.

        Non-seekable sources, and sources whose proof sample cannot be read,
        are uploaded without a content proof, so the server cannot
        short-circuit them.

        Args:
            path: Destination path.
            size: Number of bytes ``content`` will yield.
            content: Binary source positioned at its start.
            overwrite: Remove an existing file at ``path`` first.

        Returns:
            The created file node.
        """
        self._check_path(normalize_path(path))
        token = await self._http.ensure_token()
        try:
            sha1, proof_code = await asyncio.to_thread(
                calc_proof, content, size, token.access_token, self._proof_offset
            )
        except (ValidationError, OSError) as e:
            logger.debug("Content proof unavailable, uploading without it", path=path, error=str(e))
            sha1, proof_code = "", ""
        return await self.create_file_with_proof(
            path, size, content, sha1=sha1, proof_code=proof_code, overwrite=overwrite
        )

    async def create_file_with_proof(
        self,
        path: str,
        size: int,
        content: BinaryIO,
        *,
        sha1: str = "",
        proof_code: str = "",
        overwrite: bool = False,
    ) -> Node:
        """
        Upload a file with a precomputed content hash and proof code.

        Args:
            path: Destination path.
            size: Number of bytes ``content`` will yield.
            content: Binary source positioned at its start.
            sha1: Uppercase hex SHA-1 of the content, or "".
            proof_code: Proof code for the content, or "".
            overwrite: Remove an existing file at ``path`` first.

        Returns:
            The created file node. The server may have renamed it if a
            sibling with the same name exists.

        Raises:
            UnsupportedFormatError: If the path names a ``.livp`` file.
            ValidationError: If the path is the root.
            ProtocolError: If the upload session carries no part destinations.
        """
        path = normalize_path(path)
        self._check_path(path)

        if overwrite:
            await self._remove_existing(path)

        parent_path, name = split_path(path)
        try:
            parent = await self._folder_service.create_folder(parent_path)
        except AliyunDriveError as e:
            raise wrap_error(e, f'failed to create folder "{parent_path}"', path=path) from e

        request = CreateWithProofRequest(
            drive_id=self._tree_service.drive_id,
            parent_file_id=parent.node_id,
            name=name,
            size=size,
            parts=make_part_info_list(size, self._max_part_size),
            content_hash=sha1,
            proof_code=proof_code,
            check_name_mode=CheckNameMode.AUTO_RENAME,
        )
        try:
            session = await create_with_proof(self._http, request)
        except AliyunDriveError as e:
            raise wrap_error(e, "failed to post create file request", path=path) from e

        if session.rapid_upload:
            logger.info("Rapid upload hit", path=path, file_id=session.file_id)
            return await self._tree_service.get(path, NodeKind.FILE)

        if not session.parts or session.upload_id is None:
            msg = "failed to extract uploadUrl"
            raise ProtocolError(msg)

        for part in session.parts:
            if not part.upload_url:
                msg = f"part {part.part_number} has no upload url"
                raise ProtocolError(msg)
            logger.debug("Uploading part", path=path, part_number=part.part_number)
            try:
                await self._http.upload_part(part.upload_url, self._read_part(content))
            except AliyunDriveError as e:
                raise wrap_error(
                    e, "failed to upload file", path=path, part_number=part.part_number
                ) from e

        try:
            node = await complete_upload(
                self._http,
                CompleteUploadRequest(
                    drive_id=self._tree_service.drive_id,
                    file_id=session.file_id,
                    upload_id=session.upload_id,
                ),
            )
        except AliyunDriveError as e:
            raise wrap_error(e, "failed to post upload complete request", path=path) from e

        logger.info("Uploaded file", path=path, file_id=node.node_id, size=size)
        return node

    async def _remove_existing(self, path: str) -> None:
        try:
            existing = await self._tree_service.get(path, NodeKind.FILE)
        except PathNotFoundError:
            return
        try:
            await self._file_service.remove(existing)
        except AliyunDriveError as e:
            msg = f'failed to overwrite "{path}", can\'t remove file'
            raise wrap_error(e, msg, path=path) from e

    async def _read_part(self, content: BinaryIO) -> AsyncGenerator[bytes, None]:
        remaining = self._max_part_size
        while remaining > 0:
            chunk = await asyncio.to_thread(content.read, min(self._chunk_size, remaining))
            if not chunk:
                return
            remaining -= len(chunk)
            yield chunk

    @staticmethod
    def _check_path(path: str) -> None:
        if path == ROOT_PATH:
            msg = "can't upload a file to the root path"
            raise ValidationError(msg, path=path)
        if path.lower().endswith(UNSUPPORTED_EXTENSION):
            msg = "uploading .livp to album is not supported"
            raise UnsupportedFormatError(msg, path=path)
