"""
HTTP transport for the CRUD protocol.

Three buffered primitives (fetch, submit, remove) plus the streaming
``open_stream`` used by watch calls. Each call issues exactly one request;
nothing is retried or cached here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import httpx

from .config import ClientSettings
from .core import CrudStoreException, ProtocolError, TransportError
from .envelope import params, result_of_json
from .json_codec import DEFAULT_MAX_FRAME_BYTES, dumps, loads
from .paths import uri
from .stream import WatchStream

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _strict(decode: Callable[[Any], T]) -> Callable[[Any], T]:
    """Make caller-supplied decoders fail with ProtocolError only."""

    def wrapped(value: Any) -> T:
        try:
            return decode(value)
        except CrudStoreException:
            raise
        except Exception as e:
            raise ProtocolError(f"cannot decode {dumps(value)}: {e}") from e

    return wrapped


class Transport:
    """
    Sends CRUD requests over a shared ``httpx.AsyncClient``.

    When no client is given one is created from the settings and closed by
    :meth:`aclose`; a caller-supplied client is left open.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        settings: ClientSettings | None = None,
        max_frame_bytes: int | None = None,
    ):
        self.settings = settings
        self._owns_client = client is None
        if client is None:
            if settings is not None:
                client = httpx.AsyncClient(timeout=settings.timeout, headers=settings.request_headers())
            else:
                client = httpx.AsyncClient(headers={"Content-Type": "application/json"})
        self.client = client
        if max_frame_bytes is None:
            max_frame_bytes = settings.max_frame_bytes if settings is not None else DEFAULT_MAX_FRAME_BYTES
        self.max_frame_bytes = max_frame_bytes

    async def _send(self, method: str, url: httpx.URL, content: str | None = None) -> httpx.Response:
        logger.debug("%s %s", method.lower(), url)
        try:
            return await self.client.request(method, url, content=content)
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP request failed: {e}", url=str(url)) from e

    def _map_response(self, response: httpx.Response, decode: Callable[[Any], T]) -> T:
        body = response.text
        logger.debug("response: status=%d body=%s", response.status_code, body)
        try:
            json_value = loads(body)
        except ProtocolError as e:
            raise ProtocolError(f"HTTP {response.status_code}: {e}") from e
        return _strict(decode)(result_of_json(json_value))

    async def fetch(self, base: httpx.URL | str, path: Sequence[str], decode: Callable[[Any], T]) -> T:
        """GET ``base/path`` and decode the success payload."""
        response = await self._send("GET", uri(base, path))
        return self._map_response(response, decode)

    async def submit(self, base: httpx.URL | str, path: Sequence[str], body: Any, decode: Callable[[Any], T]) -> T:
        """POST ``{"params": body}`` to ``base/path`` and decode the success payload."""
        response = await self._send("POST", uri(base, path), content=dumps(params(body)))
        return self._map_response(response, decode)

    async def remove(self, base: httpx.URL | str, path: Sequence[str], decode: Callable[[Any], T]) -> T:
        """DELETE ``base/path`` and decode the success payload."""
        response = await self._send("DELETE", uri(base, path))
        return self._map_response(response, decode)

    def open_stream(self, base: httpx.URL | str, path: Sequence[str], decode: Callable[[Any], T]) -> WatchStream[T]:
        """Return a lazy stream of decoded frames from a chunked GET ``base/path``.

        No request is issued until the first element is pulled.
        """
        url = uri(base, path)

        async def open_response() -> httpx.Response:
            logger.debug("get %s (stream)", url)
            try:
                return await self.client.send(self.client.build_request("GET", url), stream=True)
            except httpx.HTTPError as e:
                raise TransportError(f"HTTP request failed: {e}", url=str(url)) from e

        return WatchStream(open_response, _strict(decode), url=str(url), max_frame_bytes=self.max_frame_bytes)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> Transport:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
