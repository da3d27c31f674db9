"""JSON helpers shared by the envelope codec, the transport and the entity types.

The decoders in this module are the ``decode`` callables handed to the
transport operations. They turn a protocol-level JSON value into a Python
value and raise :class:`ProtocolError` on any shape mismatch, so a decoding
failure never leaks as a bare ``TypeError`` or ``KeyError``.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any, TypeVar

from .core import ProtocolError

A = TypeVar("A")
B = TypeVar("B")

Decoder = Callable[[Any], A]

DEFAULT_MAX_FRAME_BYTES = 16 * 1024 * 1024


def dumps(value: Any) -> str:
    """Render a JSON value compactly."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def loads(text: str) -> Any:
    """Parse one JSON document, raising ProtocolError on malformed input."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"malformed JSON body: {e}") from e


def _type_name(value: Any) -> str:
    return type(value).__name__


def to_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ProtocolError(f"expected a boolean, got {_type_name(value)}: {dumps(value)}")
    return value


def to_unit(value: Any) -> None:
    # Servers answer unit operations with null, an empty object or an empty list.
    if value is None or value == {} or value == []:
        return None
    raise ProtocolError(f"expected unit, got {dumps(value)}")


def to_string(value: Any) -> str:
    if not isinstance(value, str):
        raise ProtocolError(f"expected a string, got {_type_name(value)}: {dumps(value)}")
    return value


def to_list(fn: Decoder[A]) -> Decoder[list[A]]:
    """Lift an element decoder to a decoder of JSON arrays."""

    def decode(value: Any) -> list[A]:
        if not isinstance(value, list):
            raise ProtocolError(f"expected a list, got {_type_name(value)}: {dumps(value)}")
        return [fn(item) for item in value]

    return decode


def to_pair(fst: Decoder[A], snd: Decoder[B]) -> Decoder[tuple[A, B]]:
    """Build a decoder for two-element JSON arrays."""

    def decode(value: Any) -> tuple[A, B]:
        if not isinstance(value, list) or len(value) != 2:
            raise ProtocolError(f"expected a pair, got {dumps(value)}")
        return fst(value[0]), snd(value[1])

    return decode


def to_option(fn: Decoder[A]) -> Decoder[A | None]:
    def decode(value: Any) -> A | None:
        return None if value is None else fn(value)

    return decode


def encode_bytes(data: bytes) -> Any:
    """Encode raw bytes as a JSON string, or as ``{"hex": ...}`` when not valid UTF-8."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return {"hex": data.hex()}


def decode_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, dict) and set(value) == {"hex"} and isinstance(value["hex"], str):
        try:
            return bytes.fromhex(value["hex"])
        except ValueError as e:
            raise ProtocolError(f"invalid hex string: {value['hex']!r}") from e
    raise ProtocolError(f"expected a string, got {dumps(value)}")


_WHITESPACE = " \t\n\r"
_CLOSERS = {"{": "}", "[": "]"}


class FrameDecoder:
    """Incrementally split a chunked text body into JSON object frames.

    Frames may be concatenated directly or separated by JSON whitespace. Each
    character is scanned once: string literals and bracket nesting are
    tracked across chunks, so a frame is only parsed when its closing brace
    arrives. Text that cannot begin or continue a frame fails at once rather
    than waiting for more input.

    When a chunk completes some frames and then turns malformed, ``feed``
    returns the completed frames and the error is raised by the next
    ``check``, ``feed`` or ``close``.
    """

    def __init__(self, max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES):
        self.max_frame_bytes = max_frame_bytes
        self._parts: list[str] = []
        self._pending_bytes = 0
        self._closers: list[str] = []
        self._in_string = False
        self._escaped = False
        self._error: ProtocolError | None = None

    def feed(self, chunk: str) -> list[Any]:
        self.check()
        frames = []
        try:
            self._scan(chunk, frames)
        except ProtocolError as e:
            if not frames:
                raise
            self._error = e
        return frames

    def check(self) -> None:
        """Raise the error left behind by a partially successful ``feed``."""
        if self._error is not None:
            raise self._error

    def close(self) -> None:
        self.check()
        pending = "".join(self._parts)
        self._reset()
        if pending:
            raise ProtocolError(f"malformed stream frame: truncated {pending[:80]!r}")

    def _reset(self) -> None:
        self._parts = []
        self._pending_bytes = 0
        self._closers = []
        self._in_string = False
        self._escaped = False

    def _scan(self, chunk: str, frames: list[Any]) -> None:
        start = 0
        for i, char in enumerate(chunk):
            if not self._closers:
                if char in _WHITESPACE:
                    start = i + 1
                elif char == "{":
                    start = i
                    self._closers.append("}")
                else:
                    raise ProtocolError(f"malformed stream frame: unexpected {chunk[i:i + 80]!r}")
            elif self._in_string:
                if self._escaped:
                    self._escaped = False
                elif char == "\\":
                    self._escaped = True
                elif char == '"':
                    self._in_string = False
            elif char == '"':
                self._in_string = True
            elif char in _CLOSERS:
                self._closers.append(_CLOSERS[char])
            elif char in "}]":
                if char != self._closers.pop():
                    raise ProtocolError(f"malformed stream frame: unbalanced {char!r}")
                if not self._closers:
                    self._parts.append(chunk[start : i + 1])
                    frames.append(self._complete())
                    start = i + 1
        if self._closers:
            piece = chunk[start:]
            self._parts.append(piece)
            self._pending_bytes += len(piece.encode("utf-8"))
            if self._pending_bytes > self.max_frame_bytes:
                raise ProtocolError(f"stream frame exceeds {self.max_frame_bytes} bytes")

    def _complete(self) -> Any:
        text = "".join(self._parts)
        self._reset()
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ProtocolError(f"malformed stream frame: {e}: {text[:80]!r}") from e
