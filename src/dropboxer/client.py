"""Main DropboxerClient class for interacting with the remote store."""

from __future__ import annotations

import logging
from typing import Any

from dropboxer._internal.api import (
    CREATE_FOLDER,
    LIST_FOLDER,
    LIST_FOLDER_CONTINUE,
    SEARCH,
    UPLOAD,
    DropboxAPI,
    decode,
)
from dropboxer.config import Settings
from dropboxer.exceptions import DropboxerError, LocalIOError, RemoteError
from dropboxer.models import (
    FolderCreationRequest,
    FolderListing,
    RemoteEntry,
    RemoteFile,
    RemoteFolder,
    SearchMatch,
    SearchResult,
    UploadResult,
    UploadStatus,
    UploadTask,
    entry_from_metadata,
    int_field,
    join_remote,
)

logger = logging.getLogger(__name__)

HTTP_CONFLICT = 409


def normalize_remote_path(path: str) -> str:
    """Return the API form of a remote folder path.

    The root is the empty string; every other path has one leading slash.
    """
    path = path.strip("/")
    return f"/{path}" if path else ""


def target_path(remote_dir: str, file_name: str) -> str:
    """Path a file is expected at: bare name at the root, else ``dir/name``."""
    return join_remote(remote_dir, file_name) if remote_dir.strip("/") else file_name


class DropboxerClient:
    """Client for listing, creating folders in and uploading to the remote store.

    Example:
        with DropboxerClient(Settings.from_env()) as client:
            client.create_folder("photos", "backups")
            client.upload("cat.jpg", "/home/me/pics", "backups/photos")
    """

    def __init__(self, settings: Settings, *, api: DropboxAPI | None = None) -> None:
        """Initialize the client.

        Args:
            settings: Runtime settings; the token must be set
            api: Pre-built HTTP layer, mostly for tests
        """
        settings.validate()
        self.settings = settings
        self._api: DropboxAPI | None = api or DropboxAPI(
            settings.token,  # type: ignore[arg-type]
            api_url=settings.api_url,
            content_url=settings.content_url,
            timeout=settings.timeout,
            verify=settings.verify_tls,
        )
        if not settings.verify_tls:
            logger.warning("TLS certificate verification is disabled")

    def __enter__(self) -> DropboxerClient:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Exit context manager."""
        self.close()

    def _get_api(self) -> DropboxAPI:
        if self._api is None:
            raise DropboxerError("Client is closed")
        return self._api

    def _display(self, remote_path: str) -> str:
        """Remote path as shown in log lines, prefixed with the base folder."""
        return "/" + join_remote(self.settings.base_folder, remote_path)

    def list_folder(self, path: str = "", *, follow_cursor: bool = True) -> FolderListing:
        """List the contents of a remote folder.

        Args:
            path: Remote folder path, empty or ``/`` for the root
            follow_cursor: Keep fetching pages while the remote reports more

        Returns:
            FolderListing with RemoteFolder and RemoteFile entries

        Raises:
            TransportError, RemoteError, DecodeError
        """
        api = self._get_api()
        data = decode(api.rpc(LIST_FOLDER, {"path": normalize_remote_path(path)}))
        entries: list[RemoteEntry] = [entry_from_metadata(e) for e in data.get("entries", [])]
        cursor = data.get("cursor", "")
        has_more = bool(data.get("has_more", False))

        while follow_cursor and has_more:
            data = decode(api.rpc(LIST_FOLDER_CONTINUE, {"cursor": cursor}))
            entries.extend(entry_from_metadata(e) for e in data.get("entries", []))
            cursor = data.get("cursor", "")
            has_more = bool(data.get("has_more", False))

        return FolderListing(entries=entries, cursor=cursor, has_more=has_more)

    def search(self, remote_dir: str, file_name: str, *, start: int = 0) -> SearchResult:
        """Search ``remote_dir`` for files whose name matches ``file_name``.

        Returns one page of results.
        """
        payload = {
            "path": normalize_remote_path(remote_dir),
            "query": file_name,
            "start": start,
            "mode": {".tag": "filename"},
        }
        data = decode(self._get_api().rpc(SEARCH, payload))
        matches = [
            SearchMatch(path_display=m.get("metadata", {}).get("path_display", ""))
            for m in data.get("matches", [])
        ]
        return SearchResult(
            matches=matches,
            has_more=bool(data.get("more", data.get("has_more", False))),
            start=int_field(data, "start", start + len(matches)),
        )

    def exists(self, remote_dir: str, file_name: str) -> bool:
        """Check whether ``file_name`` is already stored at exactly ``remote_dir``.

        The search is by file name, so it can return other paths; only an
        exact display path match counts. A non-success search response is
        logged and treated as "does not exist". Only ``settings.search_pages``
        pages are read (0 reads them all).

        Raises:
            TransportError, DecodeError
        """
        expected = target_path(remote_dir, file_name)
        max_pages = self.settings.search_pages
        start = 0
        pages = 0

        while True:
            try:
                result = self.search(remote_dir, file_name, start=start)
            except RemoteError as e:
                logger.warning(f"Search failed. {e}")
                return False
            pages += 1

            for match in result.matches:
                if match.path_display.lstrip("/") == expected:
                    return True

            if not result.has_more or (max_pages and pages >= max_pages):
                return False
            if result.start <= start:
                logger.warning(f"Search for {expected} did not advance past {start}")
                return False
            start = result.start

    def create_folder(self, name: str, remote_parent: str = "") -> RemoteFolder:
        """Create folder ``name`` under ``remote_parent``.

        An already existing folder (409 conflict) counts as success, so the
        call is safe to repeat.

        Returns:
            RemoteFolder for the folder (id is empty if it already existed)

        Raises:
            TransportError, RemoteError, DecodeError
        """
        request = FolderCreationRequest(name=name, remote_parent=remote_parent)
        response = self._get_api().rpc(
            CREATE_FOLDER, {"path": request.path}, accept=(HTTP_CONFLICT,)
        )

        if response.status_code == HTTP_CONFLICT:
            logger.debug(f"Folder {request.path} already exists")
            return RemoteFolder(
                tag="folder",
                name=name,
                path_lower=request.path.lower(),
                path_display=request.path,
                id="",  # unknown from the conflict response
            )

        data = decode(response)
        folder = RemoteFolder.from_metadata(data.get("metadata", data))
        logger.info(f"Created folder {self._display(request.path)}")
        return folder

    def upload(self, file_name: str, local_dir: str = "", remote_dir: str = "") -> UploadResult:
        """Upload ``local_dir/file_name`` into ``remote_dir``.

        Skips the upload when the file already exists at the target path.
        Errors are not raised; they are logged and returned on the result.

        Returns:
            UploadResult with UPLOADED, SKIPPED or FAILED status
        """
        task = UploadTask(file_name=file_name, local_dir=local_dir, remote_dir=remote_dir)

        def failed(error: Exception) -> UploadResult:
            logger.warning(
                f"Couldn't upload file {task.local_path} "
                f"to {self._display(task.remote_path)}: {error}"
            )
            return UploadResult(
                status=UploadStatus.FAILED,
                file_name=file_name,
                local_path=task.local_path,
                remote_path=task.remote_path,
                error=error,
            )

        try:
            fh = open(task.local_path, "rb")
        except OSError as e:
            return failed(LocalIOError(f"Cannot open {task.local_path}: {e.strerror or e}"))

        with fh:
            try:
                if self.exists(remote_dir, file_name):
                    logger.info(f"File {self._display(task.remote_path)} exists. Skipping")
                    return UploadResult(
                        status=UploadStatus.SKIPPED,
                        file_name=file_name,
                        local_path=task.local_path,
                        remote_path=task.remote_path,
                    )

                response = self._get_api().upload(UPLOAD, {"path": task.remote_path}, fh)
                remote = RemoteFile.from_metadata(decode(response))
            except DropboxerError as e:
                return failed(e)

        logger.info(f'File {file_name} uploaded to "{remote.path_display}". Size is {remote.size}')
        return UploadResult(
            status=UploadStatus.UPLOADED,
            file_name=file_name,
            local_path=task.local_path,
            remote_path=remote.path_display or task.remote_path,
            size=remote.size,
        )

    def close(self) -> None:
        """Close the client and release the connection pool."""
        if self._api is not None:
            self._api.close()
            self._api = None
