"""Bridge from a chunked HTTP body to a pull-based sequence of decoded frames.

A :class:`WatchStream` is a lazy, single-subscription async iterator. The
first ``__anext__`` issues the underlying request; later pulls reuse the
cached response until the server ends the transfer or something fails.

A stream must be consumed by a single task. Interleaved pulls from several
consumers on the same stream are not supported.
"""

from __future__ import annotations

import enum
import logging
from collections import deque
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Generic, TypeVar

import httpx

from .core import CrudStoreException, TransportError
from .envelope import result_of_json
from .json_codec import DEFAULT_MAX_FRAME_BYTES, FrameDecoder

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StreamState(enum.Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"
    FAILED = "failed"


class WatchStream(Generic[T]):
    """Decoded frames of one streaming call.

    Not restartable: once exhausted it keeps raising ``StopAsyncIteration``,
    once failed it keeps raising the same exception. Open a new stream to
    subscribe again.
    """

    def __init__(
        self,
        open_response: Callable[[], Awaitable[httpx.Response]],
        decode: Callable[[Any], T],
        url: str = "",
        max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES,
    ):
        self._open_response = open_response
        self._decode = decode
        self.url = url
        self._frames = FrameDecoder(max_frame_bytes)
        self._pending: deque[Any] = deque()
        self._response: httpx.Response | None = None
        self._chunks: AsyncIterator[str] | None = None
        self._error: BaseException | None = None
        self.state = StreamState.UNOPENED

    def __aiter__(self) -> WatchStream[T]:
        return self

    async def __anext__(self) -> T:
        if self.state is StreamState.CLOSED:
            raise StopAsyncIteration
        if self.state is StreamState.FAILED:
            raise self._error

        try:
            if self.state is StreamState.UNOPENED:
                await self._open()
            while not self._pending:
                self._frames.check()
                try:
                    chunk = await self._chunks.__anext__()
                except StopAsyncIteration:
                    self._frames.close()
                    logger.debug("stream %s: end of transfer", self.url)
                    await self._release(StreamState.CLOSED)
                    raise
                except httpx.HTTPError as e:
                    raise TransportError(f"stream read failed: {e}", url=self.url) from e
                self._pending.extend(self._frames.feed(chunk))
            frame = self._pending.popleft()
            logger.debug("stream %s: frame=%s", self.url, frame)
            return self._decode(result_of_json(frame))
        except StopAsyncIteration:
            raise
        except CrudStoreException as e:
            self._error = e
            await self._release(StreamState.FAILED)
            raise

    async def _open(self) -> None:
        self._response = await self._open_response()
        self._chunks = self._response.aiter_text()
        self.state = StreamState.OPEN

    async def _release(self, state: StreamState) -> None:
        self.state = state
        self._pending.clear()
        if self._response is not None:
            response, self._response = self._response, None
            self._chunks = None
            await response.aclose()

    async def aclose(self) -> None:
        """Release the underlying transfer without waiting for the server to end it."""
        if self.state in (StreamState.UNOPENED, StreamState.OPEN):
            await self._release(StreamState.CLOSED)

    async def collect(self, limit: int | None = None) -> list[T]:
        """Pull up to ``limit`` elements (all of them when ``limit`` is None)."""
        items: list[T] = []
        if limit is not None and limit <= 0:
            return items
        async for item in self:
            items.append(item)
            if limit is not None and len(items) >= limit:
                break
        return items
