"""User and drive identity endpoints."""

from typing import Any

from aliyun_drive.api.http_client import AsyncHttpClient
from aliyun_drive.exceptions import ProtocolError

USER_GET = "/v2/user/get"
ALBUMS_INFO = "/adrive/v1/user/albums_info"


async def get_user(http: AsyncHttpClient) -> dict[str, Any]:
    """Get the signed-in user's profile."""
    return await http.request("POST", USER_GET, json={})


async def get_default_drive_id(http: AsyncHttpClient) -> str:
    """Get the identifier of the user's default drive."""
    user = await get_user(http)
    if not (drive_id := user.get("default_drive_id")):
        msg = "User response has no default_drive_id"
        raise ProtocolError(msg, body=str(user))
    return drive_id


async def get_album_drive_id(http: AsyncHttpClient) -> str:
    """Get the identifier of the drive backing the photo album."""
    response = await http.request("POST", ALBUMS_INFO, json={})
    if not (drive_id := (response.get("data") or {}).get("driveId")):
        msg = "Album info response has no driveId"
        raise ProtocolError(msg, body=str(response))
    return drive_id
