"""
In-memory Aliyun Drive server exposed as an httpx transport.

Implements just enough of the service for end-to-end client tests: token
refresh, drive lookup, paginated listing, path lookup, folder creation,
proof-based uploads with rapid-upload matching, mutations and downloads.
"""

import hashlib
import itertools
import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

import httpx

UPLOAD_HOST = "upload.fake"
DOWNLOAD_HOST = "download.fake"


@dataclass
class FakeNode:
    file_id: str
    parent_file_id: str | None
    name: str
    type: str
    content: bytes = b""
    streams: dict[str, bytes] = field(default_factory=dict)
    trashed: bool = False

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "drive_id": FakeDrive.DRIVE_ID,
            "file_id": self.file_id,
            "parent_file_id": self.parent_file_id,
            "name": self.name,
            "type": self.type,
        }
        if self.type == "file":
            data["size"] = len(self.content)
            data["content_hash"] = hashlib.sha1(self.content).hexdigest().upper()
        return data


@dataclass
class PendingUpload:
    file_id: str
    parent_file_id: str
    name: str
    parts: dict[int, bytes] = field(default_factory=dict)


class FakeDrive(httpx.AsyncBaseTransport):
    """Fake service; ``calls`` counts requests per URL path."""

    DRIVE_ID = "drive-1"
    ALBUM_DRIVE_ID = "album-1"

    def __init__(self, *, expires_in: int = 7200) -> None:
        self._ids = itertools.count(1)
        self._expires_in = expires_in
        self.nodes: dict[str, FakeNode] = {
            "root": FakeNode(file_id="root", parent_file_id=None, name="root", type="folder")
        }
        self.uploads: dict[str, PendingUpload] = {}
        self.calls: Counter[str] = Counter()
        self.requests: list[httpx.Request] = []
        self.uploaded_parts: list[bytes] = []

    # Test setup helpers

    def add_node(
        self,
        parent_id: str,
        name: str,
        type: str = "file",
        content: bytes = b"",
        streams: dict[str, bytes] | None = None,
    ) -> FakeNode:
        node = FakeNode(
            file_id=f"id-{next(self._ids)}",
            parent_file_id=parent_id,
            name=name,
            type=type,
            content=content,
            streams=streams or {},
        )
        self.nodes[node.file_id] = node
        return node

    def children(self, parent_id: str) -> list[FakeNode]:
        return [
            n for n in self.nodes.values() if n.parent_file_id == parent_id and not n.trashed
        ]

    def find(self, path: str) -> FakeNode | None:
        current = self.nodes["root"]
        for part in [p for p in path.split("/") if p]:
            match = next((c for c in self.children(current.file_id) if c.name == part), None)
            if match is None:
                return None
            current = match
        return current

    # Transport

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        self.calls[request.url.path] += 1

        if request.url.host == UPLOAD_HOST:
            return self._put_part(request)
        if request.url.host == DOWNLOAD_HOST:
            return self._download(request)

        body = json.loads(request.content) if request.content else {}
        handler = self._routes().get(request.url.path)
        if handler is None:
            return httpx.Response(404)
        return handler(body)

    def _routes(self) -> dict[str, Any]:
        return {
            "/v2/account/token": self._token,
            "/v2/user/get": lambda _: _json({"default_drive_id": self.DRIVE_ID}),
            "/adrive/v1/user/albums_info": lambda _: _json(
                {"data": {"driveId": self.ALBUM_DRIVE_ID}}
            ),
            "/v2/file/list": self._list,
            "/v2/file/get_by_path": self._get_by_path,
            "/v2/file/create_with_proof": self._create,
            "/v2/file/complete": self._complete,
            "/v2/file/update": self._update,
            "/v2/file/move": self._move,
            "/v2/file/copy": self._copy,
            "/v2/recyclebin/trash": self._trash,
            "/v2/file/get_download_url": self._download_url,
        }

    def _token(self, body: dict[str, Any]) -> httpx.Response:
        if not body.get("refresh_token"):
            return httpx.Response(400)
        return _json(
            {
                "access_token": f"access-{next(self._ids)}",
                "expires_in": self._expires_in,
                "refresh_token": "rotated-refresh",
            }
        )

    def _list(self, body: dict[str, Any]) -> httpx.Response:
        children = self.children(body["parent_file_id"])
        start = int(body.get("marker") or 0)
        end = start + body["limit"]
        page = children[start:end]
        return _json(
            {
                "items": [c.to_json() for c in page],
                "next_marker": str(end) if end < len(children) else "",
            }
        )

    def _get_by_path(self, body: dict[str, Any]) -> httpx.Response:
        # Like the real service, padded components are not matched.
        if any(p != p.strip() for p in body["file_path"].split("/")):
            return httpx.Response(404)
        node = self.find(body["file_path"])
        if node is None:
            return httpx.Response(404)
        return _json(node.to_json())

    def _create(self, body: dict[str, Any]) -> httpx.Response:
        parent_id, name = body["parent_file_id"], body["name"]
        existing = next((c for c in self.children(parent_id) if c.name == name), None)

        if body["type"] == "folder":
            if existing is not None:
                return httpx.Response(409)
            node = self.add_node(parent_id, name, "folder")
            return _json({"file_id": node.file_id, "parent_file_id": parent_id, "type": "folder"})

        if existing is not None and body["check_name_mode"] == "auto_rename":
            name = f"{name}(1)"

        stored = next(
            (
                n
                for n in self.nodes.values()
                if n.type == "file"
                and body["content_hash"]
                and n.to_json()["content_hash"] == body["content_hash"]
            ),
            None,
        )
        if stored is not None:
            node = self.add_node(parent_id, name, "file", stored.content)
            return _json({"file_id": node.file_id, "rapid_upload": True, "file_name": name})

        file_id = f"id-{next(self._ids)}"
        upload_id = f"upload-{next(self._ids)}"
        self.uploads[upload_id] = PendingUpload(
            file_id=file_id, parent_file_id=parent_id, name=name
        )
        parts = [
            {
                "part_number": p["part_number"],
                "upload_url": f"https://{UPLOAD_HOST}/{upload_id}/{p['part_number']}",
            }
            for p in body["part_info_list"]
        ]
        return _json(
            {
                "file_id": file_id,
                "upload_id": upload_id,
                "rapid_upload": False,
                "part_info_list": parts,
                "file_name": name,
            }
        )

    def _put_part(self, request: httpx.Request) -> httpx.Response:
        _, upload_id, number = request.url.path.split("/")
        self.uploads[upload_id].parts[int(number)] = request.content
        self.uploaded_parts.append(request.content)
        return httpx.Response(200)

    def _complete(self, body: dict[str, Any]) -> httpx.Response:
        upload = self.uploads.pop(body["upload_id"])
        content = b"".join(upload.parts[n] for n in sorted(upload.parts))
        node = FakeNode(
            file_id=upload.file_id,
            parent_file_id=upload.parent_file_id,
            name=upload.name,
            type="file",
            content=content,
        )
        self.nodes[node.file_id] = node
        return _json(node.to_json())

    def _update(self, body: dict[str, Any]) -> httpx.Response:
        node = self.nodes[body["file_id"]]
        node.name = body["name"]
        return _json(node.to_json())

    def _move(self, body: dict[str, Any]) -> httpx.Response:
        node = self.nodes[body["file_id"]]
        node.parent_file_id = body["to_parent_file_id"]
        node.name = body["new_name"]
        return _json({"file_id": node.file_id})

    def _copy(self, body: dict[str, Any]) -> httpx.Response:
        source = self.nodes[body["file_id"]]
        node = self.add_node(
            body["to_parent_file_id"], body["new_name"], source.type, source.content
        )
        return _json({"file_id": node.file_id})

    def _trash(self, body: dict[str, Any]) -> httpx.Response:
        node = self.nodes.get(body["file_id"])
        if node is None:
            return httpx.Response(404)
        node.trashed = True
        return httpx.Response(204)

    def _download_url(self, body: dict[str, Any]) -> httpx.Response:
        node = self.nodes[body["file_id"]]
        if node.streams:
            return _json(
                {
                    "streams_url": {
                        kind: f"https://{DOWNLOAD_HOST}/{node.file_id}/{kind}"
                        for kind in node.streams
                    }
                }
            )
        return _json({"url": f"https://{DOWNLOAD_HOST}/{node.file_id}", "size": len(node.content)})

    def _download(self, request: httpx.Request) -> httpx.Response:
        parts = request.url.path.strip("/").split("/")
        node = self.nodes[parts[0]]
        if len(parts) == 2:
            return httpx.Response(200, content=node.streams[parts[1]])
        return httpx.Response(200, content=node.content)


def _json(data: dict[str, Any]) -> httpx.Response:
    return httpx.Response(200, content=json.dumps(data).encode())
