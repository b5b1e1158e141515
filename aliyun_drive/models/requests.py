"""
Typed request bodies, one record per endpoint.

Every record renders its JSON body with ``to_payload()``. Fields without a
default are required by the service.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from aliyun_drive.crypto.proof import CONTENT_HASH_NAME, PROOF_VERSION
from aliyun_drive.models.drive import NodeKind, PartInfo


class CheckNameMode(StrEnum):
    """What the server does when a sibling with the same name exists."""

    REFUSE = "refuse"
    AUTO_RENAME = "auto_rename"


@dataclass(frozen=True, kw_only=True)
class ListChildrenRequest:
    drive_id: str
    parent_file_id: str
    limit: int = 200
    marker: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "drive_id": self.drive_id,
            "parent_file_id": self.parent_file_id,
            "limit": self.limit,
            "marker": self.marker,
        }


@dataclass(frozen=True, kw_only=True)
class GetByPathRequest:
    drive_id: str
    file_path: str

    def to_payload(self) -> dict[str, Any]:
        return {"drive_id": self.drive_id, "file_path": self.file_path}


@dataclass(frozen=True, kw_only=True)
class FileRequest:
    """Body shared by endpoints addressing a single node (get, trash, download url)."""

    drive_id: str
    file_id: str

    def to_payload(self) -> dict[str, Any]:
        return {"drive_id": self.drive_id, "file_id": self.file_id}


@dataclass(frozen=True, kw_only=True)
class CreateFolderRequest:
    drive_id: str
    parent_file_id: str
    name: str
    check_name_mode: CheckNameMode = CheckNameMode.REFUSE

    def to_payload(self) -> dict[str, Any]:
        return {
            "drive_id": self.drive_id,
            "check_name_mode": str(self.check_name_mode),
            "name": self.name,
            "parent_file_id": self.parent_file_id,
            "type": str(NodeKind.FOLDER),
        }


@dataclass(frozen=True, kw_only=True)
class CreateWithProofRequest:
    """
    Open a proof-based upload session.

    ``content_hash`` and ``proof_code`` may be empty, in which case the
    server cannot match existing content and always asks for the parts.
    """

    drive_id: str
    parent_file_id: str
    name: str
    size: int
    parts: tuple[PartInfo, ...]
    content_hash: str = ""
    proof_code: str = ""
    check_name_mode: CheckNameMode = CheckNameMode.AUTO_RENAME

    def to_payload(self) -> dict[str, Any]:
        return {
            "drive_id": self.drive_id,
            "part_info_list": [part.to_payload() for part in self.parts],
            "parent_file_id": self.parent_file_id,
            "name": self.name,
            "type": str(NodeKind.FILE),
            "check_name_mode": str(self.check_name_mode),
            "size": self.size,
            "content_hash": self.content_hash,
            "content_hash_name": CONTENT_HASH_NAME,
            "proof_code": self.proof_code,
            "proof_version": PROOF_VERSION,
        }


@dataclass(frozen=True, kw_only=True)
class CompleteUploadRequest:
    drive_id: str
    file_id: str
    upload_id: str

    def to_payload(self) -> dict[str, Any]:
        return {"drive_id": self.drive_id, "file_id": self.file_id, "upload_id": self.upload_id}


@dataclass(frozen=True, kw_only=True)
class RenameRequest:
    drive_id: str
    file_id: str
    name: str
    check_name_mode: CheckNameMode = CheckNameMode.REFUSE

    def to_payload(self) -> dict[str, Any]:
        return {
            "check_name_mode": str(self.check_name_mode),
            "drive_id": self.drive_id,
            "file_id": self.file_id,
            "name": self.name,
        }


@dataclass(frozen=True, kw_only=True)
class TransferRequest:
    """Body for move and copy: relocate ``file_id`` under another parent."""

    drive_id: str
    file_id: str
    to_parent_file_id: str
    new_name: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "drive_id": self.drive_id,
            "file_id": self.file_id,
            "to_parent_file_id": self.to_parent_file_id,
            "new_name": self.new_name,
        }
