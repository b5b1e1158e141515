"""
Business logic services for Aliyun Drive.
"""

from aliyun_drive.services.file_service import FileService
from aliyun_drive.services.folder_service import FolderService
from aliyun_drive.services.tree_service import TreeService
from aliyun_drive.services.upload_service import UploadService

__all__ = [
    "FileService",
    "FolderService",
    "TreeService",
    "UploadService",
]
