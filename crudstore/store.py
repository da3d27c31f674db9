"""Composition of the capability facades into one remote store.

Sub-resources are mounted under the base endpoint::

    <base>/value     Appendable[Sha1Key, Blob]
    <base>/tree      Appendable[Sha1Key, Tree]
    <base>/revision  Appendable[Sha1Key, Commit]
    <base>/tag       Mutable[TagName, Sha1Key]
    <base>           Versioned[Path, Blob, Sha1Key, Dump]
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import httpx

from .config import ClientSettings
from .crud import Appendable, Mutable, Versioned
from .model import Blob, Commit, Dump, Path, Sha1Key, TagName, Tree
from .paths import uri
from .stream import WatchStream
from .transport import Transport

logger = logging.getLogger(__name__)


@runtime_checkable
class SimpleStore(Protocol):
    """Interface expected by consumers of a full store."""

    value: Appendable[Sha1Key, Blob]
    tree: Appendable[Sha1Key, Tree]
    revision: Appendable[Sha1Key, Commit]
    tag: Mutable[TagName, Sha1Key]

    async def read(self, key: Path) -> Blob | None: ...

    async def read_exn(self, key: Path) -> Blob: ...

    async def mem(self, key: Path) -> bool: ...

    async def list(self, key: Path) -> list[Path]: ...

    async def contents(self) -> list[tuple[Path, Blob]]: ...

    async def update(self, key: Path, value: Blob) -> None: ...

    async def remove(self, key: Path) -> None: ...

    async def snapshot(self) -> Sha1Key: ...

    async def revert(self, rev: Sha1Key) -> None: ...

    def watch(self, key: Path) -> WatchStream[tuple[Path, Sha1Key]]: ...

    async def export(self, revs: Sequence[Sha1Key]) -> Dump: ...

    async def import_(self, dump: Dump) -> None: ...


class RemoteStore(Versioned[Path, Blob, Sha1Key, Dump]):
    """A remote simple store: versioned path/blob operations plus the object stores."""

    def __init__(self, transport: Transport, url: httpx.URL | str, logger: logging.Logger | None = None):
        super().__init__(transport, url, Path, Blob, Sha1Key, Dump, logger=logger)
        self.value = Appendable(transport, uri(self.url, ["value"]), Sha1Key, Blob)
        self.tree = Appendable(transport, uri(self.url, ["tree"]), Sha1Key, Tree)
        self.revision = Appendable(transport, uri(self.url, ["revision"]), Sha1Key, Commit)
        self.tag = Mutable(transport, uri(self.url, ["tag"]), TagName, Sha1Key)

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> RemoteStore:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


def simple(endpoint: httpx.URL | str, client: httpx.AsyncClient | None = None) -> RemoteStore:
    """Build a store for ``endpoint``, optionally over an existing httpx client."""
    return RemoteStore(Transport(client), endpoint)


def connect(settings: ClientSettings | str | None = None, client: httpx.AsyncClient | None = None) -> RemoteStore:
    """Build a store from settings, an endpoint string, or ``CRUDSTORE_*`` environment variables.

    Example:
        ```python
        async with connect("http://localhost:8080") as store:
            key = await store.value.add(Blob.of_string("hello"))
            await store.update(Path.from_string("greetings/en"), Blob.of_string("hello"))
            head = await store.snapshot()
        ```
    """
    if settings is None:
        settings = ClientSettings.from_env()
    elif isinstance(settings, str):
        settings = ClientSettings(endpoint=settings)
    logger.info("Connecting to CRUD store at %s", settings.endpoint)
    return RemoteStore(Transport(client, settings=settings), settings.endpoint)
