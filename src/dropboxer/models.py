"""Data models for the dropboxer package."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from typing import Any, Union

from dropboxer.exceptions import DecodeError


def int_field(data: dict[str, Any], key: str, default: int = 0) -> int:
    """Read an integer field from decoded metadata.

    Raises:
        DecodeError: If the field is present but not a number
    """
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise DecodeError(f"Field {key!r} is not a number: {value!r}")
    try:
        return int(value)
    except ValueError as e:
        raise DecodeError(f"Field {key!r} is not a number: {value!r}") from e


def join_remote(*parts: str) -> str:
    """Join remote path segments, dropping empty ones and stray slashes."""
    return "/".join(p.strip("/") for p in parts if p and p.strip("/"))


@dataclass(frozen=True)
class RemoteFolder:
    """A folder entry as reported by the remote store."""

    tag: str
    name: str
    path_lower: str
    path_display: str
    id: str

    @classmethod
    def from_metadata(cls, data: dict[str, Any]) -> RemoteFolder:
        return cls(
            tag=data.get(".tag", "folder"),
            name=data.get("name", ""),
            path_lower=data.get("path_lower", ""),
            path_display=data.get("path_display", ""),
            id=data.get("id", ""),
        )


@dataclass(frozen=True)
class RemoteFile:
    """A file entry as reported by the remote store."""

    name: str
    path_lower: str
    path_display: str
    id: str
    client_modified: str = ""
    server_modified: str = ""
    rev: str = ""
    size: int = 0
    content_hash: str = ""

    @classmethod
    def from_metadata(cls, data: dict[str, Any]) -> RemoteFile:
        return cls(
            name=data.get("name", ""),
            path_lower=data.get("path_lower", ""),
            path_display=data.get("path_display", ""),
            id=data.get("id", ""),
            client_modified=data.get("client_modified", ""),
            server_modified=data.get("server_modified", ""),
            rev=data.get("rev", ""),
            size=int_field(data, "size"),
            content_hash=data.get("content_hash", ""),
        )


RemoteEntry = Union[RemoteFolder, RemoteFile]


def entry_from_metadata(data: dict[str, Any]) -> RemoteEntry:
    """Build a RemoteFolder or RemoteFile depending on the ``.tag`` field."""
    if data.get(".tag") == "file":
        return RemoteFile.from_metadata(data)
    return RemoteFolder.from_metadata(data)


@dataclass(frozen=True)
class FolderListing:
    """One (possibly merged) list_folder response."""

    entries: list[RemoteEntry]
    cursor: str = ""
    has_more: bool = False


@dataclass(frozen=True)
class SearchMatch:
    """Minimal projection of a search hit: only its display path."""

    path_display: str


@dataclass(frozen=True)
class SearchResult:
    """One page of search results."""

    matches: list[SearchMatch]
    has_more: bool = False
    start: int = 0


@dataclass(frozen=True)
class UploadTask:
    """A single file scheduled for upload."""

    file_name: str
    local_dir: str
    remote_dir: str

    @property
    def local_path(self) -> str:
        return os.path.join(self.local_dir, self.file_name) if self.local_dir else self.file_name

    @property
    def remote_path(self) -> str:
        return "/" + join_remote(self.remote_dir, self.file_name)


@dataclass(frozen=True)
class FolderCreationRequest:
    """A remote folder to create under a remote parent."""

    name: str
    remote_parent: str = ""

    @property
    def path(self) -> str:
        return "/" + join_remote(self.remote_parent, self.name)


class UploadStatus(enum.Enum):
    UPLOADED = "uploaded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadResult:
    """Result of an upload operation."""

    status: UploadStatus
    file_name: str
    local_path: str
    remote_path: str
    size: int = 0
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.status is not UploadStatus.FAILED


@dataclass(frozen=True)
class FolderFailure:
    """A local subtree that was skipped because of an error."""

    local_path: str
    remote_path: str
    error: Exception


@dataclass
class TreeUploadSummary:
    """Aggregated outcome of a recursive tree upload."""

    results: list[UploadResult] = field(default_factory=list)
    folder_failures: list[FolderFailure] = field(default_factory=list)

    def _count(self, status: UploadStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    @property
    def uploaded(self) -> int:
        return self._count(UploadStatus.UPLOADED)

    @property
    def skipped(self) -> int:
        return self._count(UploadStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(UploadStatus.FAILED)

    @property
    def ok(self) -> bool:
        return self.failed == 0 and not self.folder_failures
