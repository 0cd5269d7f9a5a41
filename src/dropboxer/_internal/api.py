"""Thin HTTP layer over the Dropbox-style files API."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import IO, Any, Union

import httpx

from dropboxer.config import DEFAULT_API_URL, DEFAULT_CONTENT_URL, DEFAULT_TIMEOUT
from dropboxer.exceptions import DecodeError, RemoteError, TransportError

LIST_FOLDER = "/list_folder"
LIST_FOLDER_CONTINUE = "/list_folder/continue"
SEARCH = "/search"
CREATE_FOLDER = "/create_folder_v2"
UPLOAD = "/upload"

API_ARG_HEADER = "Dropbox-API-Arg"

Content = Union[bytes, IO[bytes], Iterable[bytes]]


def decode(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body."""
    try:
        data = response.json()
    except ValueError as e:
        raise DecodeError(f"Malformed JSON from {response.request.url}: {e}") from e
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object from {response.request.url}")
    return data


class DropboxAPI:
    """Issues POST requests against the RPC and content endpoints.

    A single httpx.Client is held for the lifetime of the object and may be
    shared by concurrent workers.
    """

    def __init__(
        self,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        content_url: str = DEFAULT_CONTENT_URL,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = True,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.content_url = content_url.rstrip("/")
        self._client = httpx.Client(
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            verify=verify,
            transport=transport,
        )

    def _post(
        self,
        url: str,
        *,
        headers: dict[str, str],
        accept: tuple[int, ...],
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = self._client.post(url, headers=headers, **kwargs)
        except httpx.TransportError as e:
            raise TransportError(f"POST {url} failed: {e}") from e

        if not response.is_success and response.status_code not in accept:
            raise RemoteError(response.status_code, response.text)
        return response

    def rpc(
        self,
        endpoint: str,
        payload: dict[str, Any],
        *,
        accept: tuple[int, ...] = (),
    ) -> httpx.Response:
        """POST a JSON payload to an RPC endpoint.

        Args:
            endpoint: Endpoint path, e.g. ``/search``
            payload: JSON-encodable request body
            accept: Extra non-2xx status codes that are not errors

        Raises:
            TransportError: If the request could not be completed
            RemoteError: If the status is not 2xx and not in ``accept``
        """
        return self._post(
            f"{self.api_url}{endpoint}",
            headers={"Content-Type": "application/json"},
            accept=accept,
            json=payload,
        )

    def upload(self, endpoint: str, arg: dict[str, Any], content: Content) -> httpx.Response:
        """POST a binary body to a content endpoint with a path descriptor."""
        return self._post(
            f"{self.content_url}{endpoint}",
            headers={
                "Content-Type": "application/octet-stream",
                API_ARG_HEADER: json.dumps(arg),
            },
            accept=(),
            content=content,
        )

    def close(self) -> None:
        self._client.close()
