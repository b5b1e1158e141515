"""
Aliyun Drive API client layer.

Provides async HTTP communication with the Aliyun Drive API.
"""

from aliyun_drive.api.http_client import AsyncHttpClient, sanitize_for_log

__all__ = ["AsyncHttpClient", "sanitize_for_log"]
