"""Shared test helpers for dropboxer tests."""

from __future__ import annotations

import json
import threading
from typing import Any

import httpx

API_URL = "https://api.test/2/files"
CONTENT_URL = "https://content.test/2/files"


def make_response(
    status: int = 200,
    data: Any = None,
    *,
    text: str | None = None,
    url: str = f"{API_URL}/test",
) -> httpx.Response:
    """Build an httpx.Response bound to a request, as the client sees it."""
    request = httpx.Request("POST", url)
    if text is not None:
        return httpx.Response(status, text=text, request=request)
    return httpx.Response(status, json=data if data is not None else {}, request=request)


def file_metadata(path: str, size: int = 0) -> dict[str, Any]:
    name = path.rsplit("/", 1)[-1]
    return {
        ".tag": "file",
        "name": name,
        "path_lower": path.lower(),
        "path_display": path,
        "id": f"id:{path}",
        "client_modified": "2024-01-01T00:00:00Z",
        "server_modified": "2024-01-01T00:00:00Z",
        "rev": "015f",
        "size": size,
        "content_hash": "abc",
    }


def folder_metadata(path: str) -> dict[str, Any]:
    return {
        ".tag": "folder",
        "name": path.rsplit("/", 1)[-1],
        "path_lower": path.lower(),
        "path_display": path,
        "id": f"id:{path}",
    }


class FakeDropbox:
    """In-memory stand-in for the remote store, served via httpx.MockTransport.

    Records every call as ``(endpoint, path)`` in ``calls`` so tests can
    check ordering. ``fail_create`` and ``fail_upload`` map remote paths to
    status codes to return instead of succeeding.
    """

    def __init__(self) -> None:
        self.folders: set[str] = set()
        self.files: dict[str, bytes] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_create: dict[str, int] = {}
        self.fail_upload: dict[str, int] = {}
        self.search_status = 200
        self._lock = threading.Lock()

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def count(self, endpoint: str) -> int:
        return sum(1 for e, _ in self.calls if e == endpoint)

    def handle(self, request: httpx.Request) -> httpx.Response:
        endpoint = request.url.path.split("/2/files", 1)[-1]
        with self._lock:
            if endpoint == "/upload":
                arg = json.loads(request.headers["Dropbox-API-Arg"])
                return self._upload(arg["path"], request.read())
            payload = json.loads(request.content or b"{}")
            if endpoint == "/create_folder_v2":
                return self._create(payload["path"])
            if endpoint == "/search":
                return self._search(payload)
            if endpoint == "/list_folder":
                return self._list(payload["path"])
        return httpx.Response(404, text="unknown endpoint")

    def _create(self, path: str) -> httpx.Response:
        self.calls.append(("create", path))
        if path in self.fail_create:
            return httpx.Response(self.fail_create[path], text="create failed")
        if path in self.folders:
            return httpx.Response(409, json={"error_summary": "path/conflict/folder/"})
        self.folders.add(path)
        return httpx.Response(200, json={"metadata": folder_metadata(path)})

    def _upload(self, path: str, body: bytes) -> httpx.Response:
        self.calls.append(("upload", path))
        if path in self.fail_upload:
            return httpx.Response(self.fail_upload[path], text="upload failed")
        self.files[path] = body
        return httpx.Response(200, json=file_metadata(path, len(body)))

    def _search(self, payload: dict[str, Any]) -> httpx.Response:
        self.calls.append(("search", payload["path"]))
        if self.search_status != 200:
            return httpx.Response(self.search_status, text="search failed")
        prefix = payload["path"] + "/"
        matches = [
            {"metadata": file_metadata(p)}
            for p in sorted(self.files)
            if p.startswith(prefix) and payload["query"] in p.rsplit("/", 1)[-1]
        ]
        return httpx.Response(200, json={"matches": matches, "more": False, "start": len(matches)})

    def _list(self, path: str) -> httpx.Response:
        self.calls.append(("list", path))
        prefix = path + "/"
        entries = [folder_metadata(p) for p in sorted(self.folders) if p.startswith(prefix)]
        entries += [file_metadata(p, len(b)) for p, b in sorted(self.files.items()) if p.startswith(prefix)]
        return httpx.Response(200, json={"entries": entries, "cursor": "c1", "has_more": False})
