"""
Drive-related domain models.

These mirror the service's JSON responses. Required fields raise KeyError when
missing; callers in the API layer turn that into ProtocolError.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Self


class NodeKind(StrEnum):
    """Kind of drive node."""

    FOLDER = "folder"
    FILE = "file"
    ANY = "any"

    def matches(self, kind: str) -> bool:
        """Check if a node of ``kind`` satisfies this filter."""
        return self is NodeKind.ANY or self == kind


ROOT_NODE_ID = "root"


@dataclass(frozen=True, kw_only=True)
class Node:
    """
    Represents a file or folder in the drive.

    Attributes:
        node_id: Server-assigned identifier (``file_id``).
        kind: ``file`` or ``folder``.
        name: Display name.
        parent_id: Identifier of the containing folder.
        drive_id: Drive the node belongs to.
        size: Size in bytes, files only.
        content_hash: Uppercase hex SHA-1 reported by the server, files only.
        content_type: MIME type reported by the server.
        created_at: Creation time as returned by the service (ISO 8601).
        updated_at: Last modification time (ISO 8601).
    """

    node_id: str
    kind: NodeKind
    name: str
    parent_id: str | None = None
    drive_id: str | None = None
    size: int = 0
    content_hash: str | None = None
    content_type: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> Self:
        return cls(
            node_id=data["file_id"],
            kind=NodeKind(data.get("type", NodeKind.FILE)),
            name=data.get("name", ""),
            parent_id=data.get("parent_file_id"),
            drive_id=data.get("drive_id"),
            size=data.get("size") or 0,
            content_hash=data.get("content_hash"),
            content_type=data.get("content_type") or data.get("mime_type"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    @property
    def is_folder(self) -> bool:
        """Check if this node is a folder."""
        return self.kind == NodeKind.FOLDER

    @property
    def is_file(self) -> bool:
        """Check if this node is a file."""
        return self.kind == NodeKind.FILE

    @property
    def is_root(self) -> bool:
        return self.node_id == ROOT_NODE_ID


ROOT_NODE = Node(node_id=ROOT_NODE_ID, kind=NodeKind.FOLDER, name="root")


@dataclass(frozen=True, kw_only=True)
class NodePage:
    """One page of a folder listing."""

    items: tuple[Node, ...]
    next_marker: str = ""

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> Self:
        return cls(
            items=tuple(Node.from_response(item) for item in data.get("items") or []),
            next_marker=data.get("next_marker") or "",
        )


@dataclass(frozen=True, kw_only=True)
class PartInfo:
    """
    One upload part.

    ``upload_url`` is only set once the server has opened an upload session.
    """

    part_number: int
    upload_url: str | None = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> Self:
        return cls(part_number=data["part_number"], upload_url=data.get("upload_url"))

    def to_payload(self) -> dict[str, Any]:
        return {"part_number": self.part_number}


@dataclass(frozen=True, kw_only=True)
class ProofSession:
    """
    Upload session opened by a proof-based create request.

    Attributes:
        file_id: Identifier the file will have once completed.
        upload_id: Identifier of the upload session.
        rapid_upload: Content already stored, no parts need transferring.
        parts: Part destinations in upload order.
        file_name: Name chosen by the server (may differ after auto-rename).
    """

    file_id: str
    upload_id: str | None = None
    rapid_upload: bool = False
    parts: tuple[PartInfo, ...] = ()
    file_name: str | None = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> Self:
        return cls(
            file_id=data["file_id"],
            upload_id=data.get("upload_id"),
            rapid_upload=bool(data.get("rapid_upload", False)),
            parts=tuple(PartInfo.from_response(p) for p in data.get("part_info_list") or []),
            file_name=data.get("file_name"),
        )


@dataclass(frozen=True, kw_only=True)
class DownloadTarget:
    """
    Where to fetch a node's content from.

    Either ``url`` is set, or ``streams_url`` maps component types (for
    example ``heic`` and ``mov`` of a live photo) to their own URLs.
    """

    url: str | None = None
    streams_url: dict[str, str] = field(default_factory=dict)
    expiration: str | None = None
    size: int | None = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> Self:
        return cls(
            url=data.get("url") or None,
            streams_url=dict(data.get("streams_url") or {}),
            expiration=data.get("expiration"),
            size=data.get("size"),
        )

    @property
    def is_multi_stream(self) -> bool:
        return self.url is None and bool(self.streams_url)
