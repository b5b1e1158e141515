"""
Folder creation service for Aliyun Drive.

Materializes a folder path one component at a time, creating whatever is
missing.
"""

import asyncio
import weakref

import structlog

from aliyun_drive.api.endpoints.file import create_folder
from aliyun_drive.api.http_client import AsyncHttpClient
from aliyun_drive.core.path import ROOT_PATH, join_path, path_components
from aliyun_drive.exceptions import PathNotFoundError, RequestFailedError
from aliyun_drive.models.drive import ROOT_NODE, Node, NodeKind
from aliyun_drive.models.requests import CheckNameMode, CreateFolderRequest
from aliyun_drive.services.tree_service import TreeService

logger = structlog.get_logger(__name__)


class FolderService:
    """
    Creates folder chains without producing duplicate siblings.

    Concurrency:
    - The check-then-create step for a given parent folder runs under a lock
      keyed by the parent's identifier, so two tasks creating the same child
      cannot both issue a create request.
    - Creations under different parents proceed concurrently.
    """

    def __init__(self, http: AsyncHttpClient, tree_service: TreeService) -> None:
        """
        Args:
            http: Async HTTP client.
            tree_service: Tree service for path resolution.
        """
        self._http = http
        self._tree_service = tree_service
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    async def create_folder(self, path: str) -> Node:
        """
        Ensure every folder along ``path`` exists.

        Args:
            path: Folder path.

        Returns:
            The deepest folder, created or found.

        Raises:
            RequestFailedError: If a missing folder could not be created.
        """
        current = ROOT_NODE
        current_path = ROOT_PATH
        for name in path_components(path):
            child_path = join_path(current_path, name)
            current = await self._ensure_child(current, name, child_path)
            current_path = child_path
        return current

    async def _ensure_child(self, parent: Node, name: str, child_path: str) -> Node:
        if (existing := await self._find_folder(child_path)) is not None:
            return existing

        async with self._lock_for(parent.node_id):
            # Another task may have created it while we waited.
            if (existing := await self._find_folder(child_path)) is not None:
                return existing
            return await self._create_child(parent, name, child_path)

    async def _create_child(self, parent: Node, name: str, child_path: str) -> Node:
        logger.debug("Creating folder", path=child_path, parent_id=parent.node_id)
        request = CreateFolderRequest(
            drive_id=self._tree_service.drive_id,
            parent_file_id=parent.node_id,
            name=name,
            check_name_mode=CheckNameMode.REFUSE,
        )
        try:
            return await create_folder(self._http, request)
        except RequestFailedError as e:
            # A sibling with this name appeared; the refuse policy rejected us.
            if (existing := await self._find_folder(child_path)) is not None:
                logger.debug("Folder created concurrently elsewhere", path=child_path)
                return existing
            msg = f'failed to create folder "{child_path}": {e.message}'
            raise RequestFailedError(msg, code=e.code, url=e.url) from e

    async def _find_folder(self, path: str) -> Node | None:
        try:
            return await self._tree_service.get(path, NodeKind.FOLDER)
        except PathNotFoundError:
            return None

    def _lock_for(self, parent_id: str) -> asyncio.Lock:
        if (lock := self._locks.get(parent_id)) is None:
            lock = asyncio.Lock()
            self._locks[parent_id] = lock
        return lock
