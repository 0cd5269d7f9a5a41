"""Command-line interface for dropboxer."""

from __future__ import annotations

import logging
import time

import click

from dropboxer import (
    ConfigError,
    DropboxerClient,
    DropboxerError,
    RemoteFile,
    RemoteFolder,
    Settings,
    TreeUploader,
)
from dropboxer.log import FORMATS, setup_logging

logger = logging.getLogger("dropboxer.cli")


def get_client(settings: Settings) -> DropboxerClient:
    """Create the client for one CLI invocation."""
    return DropboxerClient(settings)


def _list(client: DropboxerClient, rfolder: str) -> None:
    listing = client.list_folder(rfolder)
    if not listing.entries:
        click.echo(f"(empty folder: /{rfolder.strip('/')})")
    for entry in listing.entries:
        if isinstance(entry, RemoteFolder):
            click.echo(click.style(f"{entry.name}/", fg="blue"))
        elif isinstance(entry, RemoteFile):
            click.echo(f"{entry.name}  ({_format_size(entry.size)})")


def _upload(
    client: DropboxerClient,
    settings: Settings,
    file: str,
    folder: str,
    rfolder: str,
) -> None:
    if file:
        result = client.upload(file, folder, rfolder)
        if not result.success:
            logger.info(f"Couldn't upload file {file}.")
        return

    if not folder:
        logger.info("Nothing to upload. Exiting")
        return

    uploader = TreeUploader(client, max_workers=settings.max_workers)
    try:
        summary = uploader.upload_tree(folder, rfolder)
    except DropboxerError as e:
        logger.info(f"Couldn't upload files from folder {folder} to a remote folder {rfolder}")
        logger.warning(str(e))
        return

    logger.info(
        f"Uploaded {summary.uploaded}, skipped {summary.skipped}, failed {summary.failed} "
        f"file(s); {len(summary.folder_failures)} folder(s) skipped"
    )


def _create(client: DropboxerClient, folder: str, rfolder: str) -> None:
    if not folder:
        logger.warning("Nothing to create. Exiting.")
        return
    try:
        client.create_folder(folder, rfolder)
    except DropboxerError as e:
        logger.info(f"Couldn't create a remote folder {rfolder}/{folder}")
        logger.warning(str(e))


@click.command()
@click.version_option(package_name="dropboxer")
@click.option(
    "-fmt",
    "--fmt",
    "fmt",
    type=click.Choice(FORMATS),
    default="json",
    show_default=True,
    help="Log output format",
)
@click.option("-file", "--file", "file", default="", help="Name of file to be uploaded")
@click.option(
    "-folder",
    "--folder",
    "folder",
    default="",
    help="Local folder to upload recursively, or name of the folder to create",
)
@click.option("-rfolder", "--rfolder", "rfolder", default="", help="Remote folder path")
@click.option(
    "-list",
    "--list",
    "do_list",
    is_flag=True,
    help="List content of the remote folder (root by default)",
)
@click.option(
    "-upload", "--upload", "do_upload", is_flag=True, help="Upload the file or folder"
)
@click.option(
    "-create", "--create", "do_create", is_flag=True, help="Create a remote folder"
)
@click.option("--token", default=None, help="API bearer token (default: $DROPBOXER_TOKEN)")
@click.option(
    "--insecure", is_flag=True, help="Disable TLS certificate verification"
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Max concurrent uploads per directory (default: one per file)",
)
@click.option(
    "--search-pages",
    type=click.IntRange(min=0),
    default=None,
    help="Search pages read before deciding a file is new (0 = all)",
)
def main(
    fmt: str,
    file: str,
    folder: str,
    rfolder: str,
    do_list: bool,
    do_upload: bool,
    do_create: bool,
    token: str | None,
    insecure: bool,
    workers: int | None,
    search_pages: int | None,
) -> None:
    """Mirror local files and folders onto Dropbox.

    Examples:

        dropboxer -list -rfolder backups

        dropboxer -upload -folder ./photos -rfolder backups/photos

        dropboxer -upload -file notes.txt -folder ./docs

        dropboxer -create -folder photos -rfolder backups
    """
    start = time.monotonic()
    setup_logging(fmt)

    try:
        _run(
            file=file,
            folder=folder,
            rfolder=rfolder,
            do_list=do_list,
            do_upload=do_upload,
            do_create=do_create,
            token=token,
            insecure=insecure,
            workers=workers,
            search_pages=search_pages,
        )
    finally:
        logger.info(f"{time.monotonic() - start:.2f}s  elapsed")


def _run(
    *,
    file: str,
    folder: str,
    rfolder: str,
    do_list: bool,
    do_upload: bool,
    do_create: bool,
    token: str | None,
    insecure: bool,
    workers: int | None,
    search_pages: int | None,
) -> None:
    if not (do_list or do_upload or do_create):
        return

    try:
        settings = Settings.from_env()
        if token:
            settings.token = token
        if insecure:
            settings.verify_tls = False
        if workers is not None:
            settings.max_workers = workers
        if search_pages is not None:
            settings.search_pages = search_pages
        client = get_client(settings)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return

    with client:
        if do_list:
            try:
                _list(client, rfolder)
            except DropboxerError as e:
                logger.info("Couldn't list folders.")
                logger.warning(str(e))
        elif do_upload:
            _upload(client, settings, file, folder, rfolder)
        elif do_create:
            _create(client, folder, rfolder)


def _format_size(size_bytes: int) -> str:
    """Format file size in human-readable form."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}" if unit != "B" else f"{size_bytes} {unit}"
        size_bytes /= 1024  # type: ignore[assignment]
    return f"{size_bytes:.1f} TB"


if __name__ == "__main__":
    main()
