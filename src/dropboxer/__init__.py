"""Dropboxer - mirror local files and folder trees onto Dropbox.

Example usage:
    from dropboxer import DropboxerClient, Settings, TreeUploader

    with DropboxerClient(Settings.from_env()) as client:
        client.upload("notes.txt", "./docs", "backups")

        summary = TreeUploader(client, max_workers=8).upload_tree("./photos", "backups/photos")
        print(f"{summary.uploaded} uploaded, {summary.failed} failed")
"""

from dropboxer.client import DropboxerClient
from dropboxer.config import Settings
from dropboxer.exceptions import (
    ConfigError,
    DecodeError,
    DropboxerError,
    LocalIOError,
    RemoteError,
    TransportError,
)
from dropboxer.models import (
    FolderCreationRequest,
    FolderFailure,
    FolderListing,
    RemoteFile,
    RemoteFolder,
    SearchMatch,
    SearchResult,
    TreeUploadSummary,
    UploadResult,
    UploadStatus,
    UploadTask,
)
from dropboxer.tree import TreeUploader

__version__ = "0.1.0"

__all__ = [
    # Main client
    "DropboxerClient",
    "TreeUploader",
    "Settings",
    # Models
    "RemoteFolder",
    "RemoteFile",
    "FolderListing",
    "SearchMatch",
    "SearchResult",
    "UploadTask",
    "FolderCreationRequest",
    "UploadStatus",
    "UploadResult",
    "FolderFailure",
    "TreeUploadSummary",
    # Exceptions
    "DropboxerError",
    "TransportError",
    "RemoteError",
    "LocalIOError",
    "DecodeError",
    "ConfigError",
]
