"""
Aliyun Drive Python Client.

An async, path-addressed filesystem client for Aliyun Drive.

Example:
    ```python
    from aliyun_drive import AliyunDriveClient, AliyunDriveConfig

    config = AliyunDriveConfig(refresh_token="...")
    async with AliyunDriveClient(config) as drive:
        # List files
        for node in await drive.list("/docs"):
            print(node.kind, node.name)

        # Upload a file, creating missing folders
        with open("report.pdf", "rb") as f:
            await drive.create_file("/docs/2024/report.pdf", size, f, overwrite=True)

        # Download a file
        node = await drive.get("/docs/2024/report.pdf")
        async for chunk in drive.open(node):
            ...
    ```
"""

from aliyun_drive.client import AliyunDriveClient
from aliyun_drive.config import AliyunDriveConfig
from aliyun_drive.exceptions import (
    AliyunDriveError,
    APIError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    PathError,
    PathNotFoundError,
    ProtocolError,
    RequestFailedError,
    RootNodeError,
    TokenRefreshError,
    UnsupportedFormatError,
    ValidationError,
)
from aliyun_drive.models.drive import ROOT_NODE, DownloadTarget, Node, NodeKind

__version__ = "0.1.0"

__all__ = [
    # Main client
    "AliyunDriveClient",
    "AliyunDriveConfig",
    # Models
    "Node",
    "NodeKind",
    "ROOT_NODE",
    "DownloadTarget",
    # Exceptions
    "AliyunDriveError",
    "AuthenticationError",
    "TokenRefreshError",
    "APIError",
    "NotFoundError",
    "RequestFailedError",
    "ProtocolError",
    "ValidationError",
    "RootNodeError",
    "UnsupportedFormatError",
    "NetworkError",
    "PathError",
    "PathNotFoundError",
]
