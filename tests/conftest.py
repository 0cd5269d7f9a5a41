"""Pytest fixtures for dropboxer tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from helpers import API_URL, CONTENT_URL, FakeDropbox

from dropboxer import DropboxerClient, Settings
from dropboxer._internal.api import DropboxAPI


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep DROPBOXER_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("DROPBOXER_"):
            monkeypatch.delenv(key)


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at the fake hosts."""
    return Settings(token="test_token", api_url=API_URL, content_url=CONTENT_URL)


@pytest.fixture
def mock_api() -> MagicMock:
    """Create a mock DropboxAPI."""
    return MagicMock(spec=DropboxAPI)


@pytest.fixture
def client(settings: Settings, mock_api: MagicMock) -> DropboxerClient:
    """Client wired to a mock DropboxAPI."""
    return DropboxerClient(settings, api=mock_api)


@pytest.fixture
def fake_dropbox() -> FakeDropbox:
    return FakeDropbox()


@pytest.fixture
def fake_client(settings: Settings, fake_dropbox: FakeDropbox) -> Iterator[DropboxerClient]:
    """Client talking HTTP to an in-memory FakeDropbox."""
    api = DropboxAPI(
        "test_token",
        api_url=API_URL,
        content_url=CONTENT_URL,
        transport=fake_dropbox.transport(),
    )
    with DropboxerClient(settings, api=api) as c:
        yield c


@pytest.fixture
def temp_file(tmp_path: Path) -> Path:
    """Create a temporary file for testing."""
    path = tmp_path / "a.txt"
    path.write_bytes(b"hello dropbox")
    return path


@pytest.fixture
def local_tree(tmp_path: Path) -> Path:
    """Create a nested tree A/B/C with one file on each level.

    tree/
        top.txt
        A/a.txt
        A/B/b.txt
        A/B/C/c.txt
    """
    root = tmp_path / "tree"
    (root / "A" / "B" / "C").mkdir(parents=True)
    (root / "top.txt").write_text("top")
    (root / "A" / "a.txt").write_text("a")
    (root / "A" / "B" / "b.txt").write_text("b")
    (root / "A" / "B" / "C" / "c.txt").write_text("c")
    return root


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Drop handlers the CLI installs so they don't outlive the test's streams."""
    yield
    logger = logging.getLogger("dropboxer")
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
