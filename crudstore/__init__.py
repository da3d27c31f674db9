"""
crudstore - async HTTP client for remote content-addressed, versioned stores

- Transport: fetch/submit/remove over httpx, plus chunked watch streams
- Readable / Appendable / Mutable / Versioned: capability facades generic over entity types
- RemoteStore: the facades wired over value/tree/revision/tag sub-endpoints
"""

from .config import ClientSettings
from .core import CrudStoreException, ProtocolError, ServerError, TransportError, UnknownEntity
from .crud import Appendable, Mutable, Readable, Versioned
from .entities import BinaryKey, Entity, Key
from .envelope import params, result_of_json
from .model import Blob, Commit, Dump, Path, Sha1Key, TagName, Tree
from .paths import uri
from .store import RemoteStore, SimpleStore, connect, simple
from .stream import StreamState, WatchStream
from .transport import Transport

__version__ = "0.1.0"
__all__ = [
    "ClientSettings",
    "Transport",
    "WatchStream",
    "StreamState",
    "Readable",
    "Appendable",
    "Mutable",
    "Versioned",
    "RemoteStore",
    "SimpleStore",
    "connect",
    "simple",
    "Entity",
    "Key",
    "BinaryKey",
    "Sha1Key",
    "Path",
    "TagName",
    "Blob",
    "Tree",
    "Commit",
    "Dump",
    "result_of_json",
    "params",
    "uri",
    "CrudStoreException",
    "ProtocolError",
    "ServerError",
    "UnknownEntity",
    "TransportError",
]
