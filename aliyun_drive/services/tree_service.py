"""
Tree traversal service for Aliyun Drive.

Lists folders page by page and maps paths onto node identifiers.
"""

import structlog

from aliyun_drive.api.endpoints.file import get_by_path, list_children
from aliyun_drive.api.http_client import AsyncHttpClient
from aliyun_drive.core.path import ROOT_PATH, normalize_path, split_path
from aliyun_drive.exceptions import NotFoundError, PathNotFoundError
from aliyun_drive.models.drive import ROOT_NODE, Node, NodeKind
from aliyun_drive.models.requests import ListChildrenRequest

logger = structlog.get_logger(__name__)

DEFAULT_PAGE_SIZE = 200


class TreeService:
    """
    Service for listing folders and resolving paths.

    Nothing is cached: every lookup goes to the service, so resolution cost
    grows with path depth.
    """

    def __init__(
        self,
        http: AsyncHttpClient,
        drive_id: str,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        """
        Initialize tree service.

        Args:
            http: Async HTTP client.
            drive_id: Drive to operate on.
            page_size: Number of children requested per listing page.
        """
        self._http = http
        self._drive_id = drive_id
        self._page_size = page_size

    @property
    def drive_id(self) -> str:
        return self._drive_id

    async def list_children(self, folder: Node) -> list[Node]:
        """
        List all children of a folder, following the pagination cursor.

        Args:
            folder: Folder node.

        Returns:
            Children in server order, all pages concatenated.
        """
        nodes: list[Node] = []
        marker = ""
        while True:
            page = await list_children(
                self._http,
                ListChildrenRequest(
                    drive_id=self._drive_id,
                    parent_file_id=folder.node_id,
                    limit=self._page_size,
                    marker=marker,
                ),
            )
            nodes.extend(page.items)
            if not page.next_marker:
                break
            marker = page.next_marker

        logger.debug("Listed folder", node_id=folder.node_id, count=len(nodes))
        return nodes

    async def get(self, path: str, kind: NodeKind = NodeKind.ANY) -> Node:
        """
        Resolve a path to a node.

        The path is first looked up directly. Paths the lookup cannot match
        (for example components padded with spaces) fall back to resolving the
        parent folder and scanning its children by name.

        Args:
            path: Slash-delimited path.
            kind: Required node kind; ``NodeKind.ANY`` accepts both.

        Returns:
            The matching node. The root path returns ``ROOT_NODE`` without a request.

        Raises:
            PathNotFoundError: If no node of the requested kind exists at the path.
        """
        path = normalize_path(path)
        if path == ROOT_PATH:
            return ROOT_NODE

        node: Node | None = None
        try:
            node = await get_by_path(self._http, self._drive_id, path)
        except NotFoundError:
            pass

        if node is not None and kind.matches(node.kind):
            return node

        logger.debug("Path lookup missed, scanning parent", path=path, kind=str(kind))
        parent_path, name = split_path(path)
        try:
            parent = await self.get(parent_path, NodeKind.FOLDER)
        except PathNotFoundError as e:
            msg = f'failed to find node of "{path}": {e.message}'
            raise PathNotFoundError(msg, path=path) from e

        return await self.find_child(parent, name, kind, path=path)

    async def find_child(
        self, folder: Node, name: str, kind: NodeKind = NodeKind.ANY, *, path: str | None = None
    ) -> Node:
        """
        Find the first child of a folder with the given name and kind.

        Raises:
            PathNotFoundError: If no child matches.
        """
        for child in await self.list_children(folder):
            if child.name == name and kind.matches(child.kind):
                return child

        msg = f'can\'t find "{name}", kind: "{kind}" under "{folder.name}"'
        raise PathNotFoundError(msg, path=path or name)

    async def list_directory(self, path: str = ROOT_PATH) -> list[Node]:
        """
        List contents of a directory.

        Args:
            path: Folder path.

        Returns:
            Child nodes.

        Raises:
            PathNotFoundError: If no folder exists at the path.
        """
        path = normalize_path(path)
        folder = await self.get(path, NodeKind.FOLDER)
        return await self.list_children(folder)
