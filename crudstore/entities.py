"""Interfaces of the entity types a store facade is generic over."""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, runtime_checkable

E = TypeVar("E", bound="Entity")


@runtime_checkable
class Entity(Protocol):
    """A value that round-trips through the protocol's JSON representation.

    ``from_json(x.to_json())`` must be equal to ``x`` for every value the
    store produces.
    """

    def to_json(self) -> Any: ...

    @classmethod
    def from_json(cls: type[E], value: Any) -> E: ...

    def pretty(self) -> str:
        """Human-readable rendering, also used as the key's path segment."""
        ...


@runtime_checkable
class Key(Entity, Protocol):
    """An entity that can also be parsed from its compact or raw binary form."""

    @classmethod
    def from_string(cls: type[E], value: str) -> E: ...

    @classmethod
    def from_raw(cls: type[E], data: bytes) -> E: ...


@runtime_checkable
class BinaryKey(Key, Protocol):
    """A key with a fixed binary representation, rendered in hex for paths."""

    def to_hex(self) -> str: ...
