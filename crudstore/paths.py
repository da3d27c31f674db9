"""Request target construction."""

from collections.abc import Sequence

import httpx


def uri(base: httpx.URL | str, segments: Sequence[str] = ()) -> httpx.URL:
    """Append path segments to a base endpoint, joined by a single ``/``.

    Segments are expected to be safe tokens already (rendered keys, hex
    revisions); no escaping is applied beyond what httpx does for the path.
    """
    base = httpx.URL(base)
    if not segments:
        return base
    path = "/".join([base.path.rstrip("/"), *segments])
    if not path.startswith("/"):
        path = "/" + path
    return base.copy_with(path=path)
