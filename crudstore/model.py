"""
Concrete entity types of the simple content-addressed store.
"""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass, field
from typing import Any

from .core import ProtocolError
from .json_codec import decode_bytes, dumps, encode_bytes, to_list, to_pair, to_string


@dataclass(frozen=True, order=True)
class Sha1Key:
    """A 20-byte SHA1 digest addressing an object by its contents."""

    digest: bytes

    SIZE = 20

    def __post_init__(self):
        if len(self.digest) != self.SIZE:
            raise ValueError(f"SHA1 keys are {self.SIZE} bytes, got {len(self.digest)}")

    @classmethod
    def compute(cls, data: bytes) -> Sha1Key:
        return cls(hashlib.sha1(data).digest())

    @classmethod
    def from_raw(cls, data: bytes) -> Sha1Key:
        return cls(bytes(data))

    @classmethod
    def from_string(cls, value: str) -> Sha1Key:
        try:
            return cls(bytes.fromhex(value))
        except ValueError as e:
            raise ValueError(f"invalid SHA1 key {value!r}: {e}") from e

    def to_hex(self) -> str:
        return self.digest.hex()

    def pretty(self) -> str:
        return self.to_hex()

    def to_json(self) -> str:
        return self.to_hex()

    @classmethod
    def from_json(cls, value: Any) -> Sha1Key:
        try:
            return cls.from_string(to_string(value))
        except ValueError as e:
            raise ProtocolError(str(e)) from e

    def __str__(self) -> str:
        return self.pretty()


@dataclass(frozen=True, order=True)
class Path:
    """A key of the versioned store: a sequence of labels, rendered ``a/b/c``."""

    labels: tuple[str, ...] = ()

    @classmethod
    def from_string(cls, value: str) -> Path:
        return cls(tuple(label for label in value.split("/") if label))

    @classmethod
    def from_raw(cls, data: bytes) -> Path:
        return cls.from_string(data.decode("utf-8"))

    def pretty(self) -> str:
        return "/".join(self.labels)

    def to_json(self) -> list[str]:
        return list(self.labels)

    @classmethod
    def from_json(cls, value: Any) -> Path:
        return cls(tuple(to_list(to_string)(value)))

    def __str__(self) -> str:
        return self.pretty()


@dataclass(frozen=True, order=True)
class TagName:
    """A mutable name pointing at a revision, e.g. ``master``."""

    name: str

    @classmethod
    def from_string(cls, value: str) -> TagName:
        return cls(value)

    @classmethod
    def from_raw(cls, data: bytes) -> TagName:
        return cls(data.decode("utf-8"))

    def pretty(self) -> str:
        return self.name

    def to_json(self) -> str:
        return self.name

    @classmethod
    def from_json(cls, value: Any) -> TagName:
        return cls(to_string(value))

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Blob:
    """Raw contents stored at a leaf of the tree."""

    contents: bytes

    @classmethod
    def of_string(cls, value: str) -> Blob:
        return cls(value.encode("utf-8"))

    def pretty(self) -> str:
        text = self.contents.decode("utf-8", errors="replace")
        return text if len(text) <= 64 else text[:61] + "..."

    def to_json(self) -> Any:
        return encode_bytes(self.contents)

    @classmethod
    def from_json(cls, value: Any) -> Blob:
        return cls(decode_bytes(value))

    def key(self) -> Sha1Key:
        return Sha1Key.compute(dumps(self.to_json()).encode("utf-8"))


def _expect_dict(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ProtocolError(f"expected a {what} object, got {dumps(value)}")
    return value


@dataclass(frozen=True)
class Tree:
    """A tree node: an optional blob and labelled sub-trees."""

    blob: Sha1Key | None = None
    children: dict[str, Sha1Key] = field(default_factory=dict)

    def pretty(self) -> str:
        blob = self.blob.pretty() if self.blob else "-"
        children = ", ".join(f"{label}:{key.pretty()}" for label, key in sorted(self.children.items()))
        return f"tree(blob={blob}, children=[{children}])"

    def to_json(self) -> dict[str, Any]:
        return {
            "blob": self.blob.to_json() if self.blob else None,
            "children": [[label, key.to_json()] for label, key in sorted(self.children.items())],
        }

    @classmethod
    def from_json(cls, value: Any) -> Tree:
        data = _expect_dict(value, "tree")
        blob = data.get("blob")
        children = to_list(to_pair(to_string, Sha1Key.from_json))(data.get("children", []))
        return cls(blob=Sha1Key.from_json(blob) if blob is not None else None, children=dict(children))

    def __hash__(self) -> int:
        return hash((self.blob, tuple(sorted(self.children.items()))))


@dataclass(frozen=True)
class Commit:
    """A revision object: a tree snapshot plus its parent revisions."""

    tree: Sha1Key | None = None
    parents: tuple[Sha1Key, ...] = ()
    date: float = field(default_factory=time.time)
    origin: str = ""

    def pretty(self) -> str:
        tree = self.tree.pretty() if self.tree else "-"
        parents = ", ".join(p.pretty() for p in self.parents)
        return f"commit(tree={tree}, parents=[{parents}], origin={self.origin!r})"

    def to_json(self) -> dict[str, Any]:
        return {
            "tree": self.tree.to_json() if self.tree else None,
            "parents": [p.to_json() for p in self.parents],
            "date": self.date,
            "origin": self.origin,
        }

    @classmethod
    def from_json(cls, value: Any) -> Commit:
        data = _expect_dict(value, "revision")
        tree = data.get("tree")
        date = data.get("date", 0.0)
        if not isinstance(date, int | float) or isinstance(date, bool):
            raise ProtocolError(f"expected a numeric date, got {dumps(date)}")
        return cls(
            tree=Sha1Key.from_json(tree) if tree is not None else None,
            parents=tuple(to_list(Sha1Key.from_json)(data.get("parents", []))),
            date=float(date),
            origin=to_string(data.get("origin", "")),
        )


@dataclass(frozen=True)
class Dump:
    """Bulk transfer of every object reachable from a set of revisions."""

    values: tuple[tuple[Sha1Key, Blob], ...] = ()
    trees: tuple[tuple[Sha1Key, Tree], ...] = ()
    revisions: tuple[tuple[Sha1Key, Commit], ...] = ()
    tags: tuple[tuple[TagName, Sha1Key], ...] = ()

    def pretty(self) -> str:
        return f"dump(values={len(self.values)}, trees={len(self.trees)}, revisions={len(self.revisions)}, tags={len(self.tags)})"

    def to_json(self) -> dict[str, Any]:
        return {
            "values": [[k.to_json(), v.to_json()] for k, v in self.values],
            "trees": [[k.to_json(), v.to_json()] for k, v in self.trees],
            "revisions": [[k.to_json(), v.to_json()] for k, v in self.revisions],
            "tags": [[k.to_json(), v.to_json()] for k, v in self.tags],
        }

    @classmethod
    def from_json(cls, value: Any) -> Dump:
        data = _expect_dict(value, "dump")
        return cls(
            values=tuple(to_list(to_pair(Sha1Key.from_json, Blob.from_json))(data.get("values", []))),
            trees=tuple(to_list(to_pair(Sha1Key.from_json, Tree.from_json))(data.get("trees", []))),
            revisions=tuple(to_list(to_pair(Sha1Key.from_json, Commit.from_json))(data.get("revisions", []))),
            tags=tuple(to_list(to_pair(TagName.from_json, Sha1Key.from_json))(data.get("tags", []))),
        )
