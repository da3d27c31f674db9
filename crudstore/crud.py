"""
Capability facades over a remote CRUD endpoint.

Each facade closes over an endpoint URL, a shared :class:`Transport` and the
entity types it is generic over:

- :class:`Readable`: read, read_exn, mem, list, contents
- :class:`Appendable`: Readable + add (content-addressed insertion)
- :class:`Mutable`: Readable + update, remove
- :class:`Versioned`: Mutable + snapshot, revert, watch, export, import
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Generic, TypeVar

import httpx

from .core import CrudStoreException, ServerError, UnknownEntity
from .json_codec import to_bool, to_list, to_option, to_pair, to_unit
from .stream import WatchStream
from .transport import Transport

K = TypeVar("K")
V = TypeVar("V")
R = TypeVar("R")
D = TypeVar("D")


def endpoint_logger(url: httpx.URL | str) -> logging.Logger:
    """Logger named after the endpoint path, e.g. ``crudstore.crud.value``."""
    labels = [label for label in httpx.URL(url).path.split("/") if label]
    return logging.getLogger(".".join([__name__, *labels]))


def pretty_list(items: Sequence) -> str:
    return "[" + ", ".join(item.pretty() for item in items) + "]"


class Readable(Generic[K, V]):
    """Read-only view of the entities stored at one endpoint."""

    def __init__(
        self,
        transport: Transport,
        url: httpx.URL | str,
        key_type: type[K],
        value_type: type[V],
        logger: logging.Logger | None = None,
    ):
        self.transport = transport
        self.url = httpx.URL(url)
        self.key_type = key_type
        self.value_type = value_type
        self.logger = logger or endpoint_logger(self.url)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.url)!r})"

    async def read(self, key: K) -> V | None:
        """Return the value stored at ``key``, or None if it cannot be read for any reason."""
        self.logger.debug("read %s", key.pretty())
        try:
            return await self.read_exn(key)
        except (UnknownEntity, ServerError) as e:
            self.logger.debug("read %s: absent (%s)", key.pretty(), e)
        except CrudStoreException as e:
            self.logger.warning("read %s failed, reporting absence: %s", key.pretty(), e)
        return None

    async def read_exn(self, key: K) -> V:
        """Return the value stored at ``key``.

        Raises:
            UnknownEntity: If the server reports no value for the key
            ServerError, ProtocolError, TransportError: On any other failure
        """
        self.logger.debug("read_exn %s", key.pretty())
        value = await self.transport.fetch(self.url, ["read", key.pretty()], to_option(self.value_type.from_json))
        if value is None:
            raise UnknownEntity(key.pretty())
        return value

    async def mem(self, key: K) -> bool:
        self.logger.debug("mem %s", key.pretty())
        return await self.transport.fetch(self.url, ["mem", key.pretty()], to_bool)

    async def list(self, key: K) -> list[K]:
        self.logger.debug("list %s", key.pretty())
        return await self.transport.fetch(self.url, ["list", key.pretty()], to_list(self.key_type.from_json))

    async def contents(self) -> list[tuple[K, V]]:
        """Enumerate every key/value pair stored at this endpoint."""
        self.logger.debug("contents")
        decode = to_list(to_pair(self.key_type.from_json, self.value_type.from_json))
        return await self.transport.fetch(self.url, ["contents"], decode)


class Appendable(Readable[K, V]):
    """Content-addressed store: the server derives the key from the value."""

    async def add(self, value: V) -> K:
        self.logger.debug("add %s", value.pretty())
        return await self.transport.submit(self.url, ["add"], value.to_json(), self.key_type.from_json)


class Mutable(Readable[K, V]):
    """Store whose values are written at caller-chosen keys."""

    async def update(self, key: K, value: V) -> None:
        self.logger.debug("update %s %s", key.pretty(), value.pretty())
        await self.transport.submit(self.url, ["update", key.pretty()], value.to_json(), to_unit)

    async def remove(self, key: K) -> None:
        self.logger.debug("remove %s", key.pretty())
        await self.transport.remove(self.url, ["remove", key.pretty()], to_unit)


class Versioned(Mutable[K, V], Generic[K, V, R, D]):
    """Mutable store with revision history, change notifications and bulk transfer."""

    def __init__(
        self,
        transport: Transport,
        url: httpx.URL | str,
        key_type: type[K],
        value_type: type[V],
        revision_type: type[R],
        dump_type: type[D],
        logger: logging.Logger | None = None,
    ):
        super().__init__(transport, url, key_type, value_type, logger=logger)
        self.revision_type = revision_type
        self.dump_type = dump_type

    async def snapshot(self) -> R:
        """Return the current head revision."""
        self.logger.debug("snapshot")
        return await self.transport.fetch(self.url, ["snapshot"], self.revision_type.from_json)

    async def revert(self, rev: R) -> None:
        """Reset the head to ``rev``."""
        self.logger.debug("revert %s", rev.pretty())
        await self.transport.fetch(self.url, ["revert", rev.pretty()], to_unit)

    def watch(self, key: K) -> WatchStream[tuple[K, R]]:
        """Stream ``(key, revision)`` change notifications below ``key``.

        The request is issued on the first pull. The stream only ends when the
        server closes the transfer.

        Example:
            ```python
            async for changed, rev in store.watch(Path.from_string("a/b")):
                print(changed.pretty(), rev.pretty())
            ```
        """
        self.logger.debug("watch %s", key.pretty())
        decode = to_pair(self.key_type.from_json, self.revision_type.from_json)
        return self.transport.open_stream(self.url, ["watch", key.pretty()], decode)

    async def export(self, revs: Sequence[R]) -> D:
        """Dump every object reachable from ``revs``."""
        self.logger.debug("export %s", pretty_list(revs))
        return await self.transport.fetch(self.url, ["export", *(rev.to_hex() for rev in revs)], self.dump_type.from_json)

    async def import_(self, dump: D) -> None:
        """Bulk-load a dump produced by :meth:`export`."""
        self.logger.debug("import %s", dump.pretty())
        await self.transport.submit(self.url, ["import"], dump.to_json(), to_unit)
