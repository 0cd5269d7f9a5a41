"""Recursive upload of a local directory tree.

Remote folders are created parent first, then each directory's files are
uploaded concurrently and joined before the walk moves on.
"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from dropboxer.client import DropboxerClient
from dropboxer.exceptions import DropboxerError, LocalIOError
from dropboxer.models import (
    FolderFailure,
    TreeUploadSummary,
    UploadResult,
    UploadStatus,
    UploadTask,
    join_remote,
)

logger = logging.getLogger(__name__)


def _scan(local_dir: str) -> tuple[list[str], list[str]]:
    """Split the immediate entries of ``local_dir`` into (dirs, files), by name."""
    try:
        with os.scandir(local_dir) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise LocalIOError(f"Cannot read directory {local_dir}: {e.strerror or e}") from e

    dirs: list[str] = []
    files: list[str] = []
    for entry in entries:
        try:
            is_link = entry.is_symlink()
            is_dir = entry.is_dir()
        except OSError:
            is_link = is_dir = False
        if is_link and is_dir:
            # Links to directories are not followed.
            logger.info(f"Skipping symlinked directory {entry.path}")
            continue
        (dirs if is_dir else files).append(entry.name)
    return dirs, files


class TreeUploader:
    """Mirror a local directory tree into a remote folder.

    Subdirectories are handled one after another; only the files of the
    directory currently being processed are uploaded in parallel.

    Args:
        client: Client used for folder creation and file uploads
        max_workers: Cap on concurrent uploads per directory. None starts
            one worker per file.
    """

    def __init__(self, client: DropboxerClient, *, max_workers: int | None = None) -> None:
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.client = client
        self.max_workers = max_workers

    def upload_tree(self, local_dir: str, remote_dir: str = "") -> TreeUploadSummary:
        """Upload everything under ``local_dir`` into ``remote_dir``.

        Failures of single files or subtrees are logged and recorded on the
        summary; they never stop the rest of the walk.

        Raises:
            LocalIOError: If ``local_dir`` itself cannot be read
        """
        summary = TreeUploadSummary()
        dirs, files = _scan(local_dir)
        self._process(local_dir, remote_dir, dirs, files, summary)
        return summary

    def _walk(self, local_dir: str, remote_dir: str, summary: TreeUploadSummary) -> None:
        try:
            dirs, files = _scan(local_dir)
        except LocalIOError as e:
            logger.warning(f"Skipping {local_dir}: {e}")
            summary.folder_failures.append(
                FolderFailure(local_path=local_dir, remote_path=remote_dir, error=e)
            )
            return
        self._process(local_dir, remote_dir, dirs, files, summary)

    def _process(
        self,
        local_dir: str,
        remote_dir: str,
        dirs: list[str],
        files: list[str],
        summary: TreeUploadSummary,
    ) -> None:
        for name in dirs:
            child_local = os.path.join(local_dir, name)
            child_remote = join_remote(remote_dir, name)
            try:
                self.client.create_folder(name, remote_dir)
            except DropboxerError as e:
                logger.info(f"Couldn't create a remote folder /{child_remote}")
                logger.warning(str(e))
                summary.folder_failures.append(
                    FolderFailure(local_path=child_local, remote_path=child_remote, error=e)
                )
                continue
            self._walk(child_local, child_remote, summary)

        if files:
            summary.results.extend(self._upload_files(local_dir, remote_dir, files))

    def _upload_files(
        self, local_dir: str, remote_dir: str, files: list[str]
    ) -> list[UploadResult]:
        tasks = [UploadTask(file_name=f, local_dir=local_dir, remote_dir=remote_dir) for f in files]
        workers = min(self.max_workers or len(tasks), len(tasks))
        results: list[UploadResult] = []

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="upload") as pool:
            futures: dict[Future[UploadResult], UploadTask] = {
                pool.submit(self._upload_one, task): task for task in tasks
            }
            for future in as_completed(futures):
                results.append(future.result())

        logger.debug(f"{len(results)}/{len(tasks)} uploads finished in {local_dir}")
        return results

    def _upload_one(self, task: UploadTask) -> UploadResult:
        start = time.monotonic()
        try:
            result = self.client.upload(task.file_name, task.local_dir, task.remote_dir)
        except Exception as e:
            # A worker must always report back, or the join would come up short.
            logger.exception(f"Unexpected error uploading {task.local_path}")
            result = UploadResult(
                status=UploadStatus.FAILED,
                file_name=task.file_name,
                local_path=task.local_path,
                remote_path=task.remote_path,
                error=e,
            )
        logger.debug(f"{time.monotonic() - start:.2f}s uploading {task.file_name} finished")
        return result
