"""
Domain models for Aliyun Drive.

These are immutable (frozen) dataclasses representing the core domain concepts.
"""

from aliyun_drive.models.auth import Token
from aliyun_drive.models.drive import (
    ROOT_NODE,
    ROOT_NODE_ID,
    DownloadTarget,
    Node,
    NodeKind,
    NodePage,
    PartInfo,
    ProofSession,
)
from aliyun_drive.models.requests import (
    CheckNameMode,
    CompleteUploadRequest,
    CreateFolderRequest,
    CreateWithProofRequest,
    FileRequest,
    GetByPathRequest,
    ListChildrenRequest,
    RenameRequest,
    TransferRequest,
)

__all__ = [
    # Auth
    "Token",
    # Drive
    "Node",
    "NodeKind",
    "NodePage",
    "ROOT_NODE",
    "ROOT_NODE_ID",
    "PartInfo",
    "ProofSession",
    "DownloadTarget",
    # Requests
    "CheckNameMode",
    "ListChildrenRequest",
    "GetByPathRequest",
    "FileRequest",
    "CreateFolderRequest",
    "CreateWithProofRequest",
    "CompleteUploadRequest",
    "RenameRequest",
    "TransferRequest",
]
