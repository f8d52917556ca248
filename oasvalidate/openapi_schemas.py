"""Loading of the official OpenAPI 3.0 and 3.1 JSON schemas.

A local copy of each schema is compared, by MD5 digest, against the copy held
in the published specification repository. When they differ the remote copy
wins; when the remote copy cannot be fetched the local copy is used. The
result is cached for the life of the process.
"""

from __future__ import annotations

import hashlib
import threading
import urllib.error
import urllib.request

SCHEMA_3_0_URL = (
    "https://raw.githubusercontent.com/pb33f/openapi-specification/main/schemas/v3.0/schema.json"
)
SCHEMA_3_1_URL = (
    "https://raw.githubusercontent.com/pb33f/openapi-specification/main/schemas/v3.1/schema.json"
)

_FETCH_TIMEOUT = 30.0

_cache: dict[str, str] = {}
_cache_lock = threading.Lock()


def _load(version: str, url: str, schema: str) -> str:
    with _cache_lock:
        cached = _cache.get(version)
        if cached:
            return cached
        _cache[version] = extract_schema(url, schema)
        return _cache[version]


def load_schema_3_0(schema: str) -> str:
    """Return the OpenAPI 3.0 schema, preferring the published copy if it differs."""
    return _load("3.0", SCHEMA_3_0_URL, schema)


def load_schema_3_1(schema: str) -> str:
    """Return the OpenAPI 3.1 schema, preferring the published copy if it differs."""
    return _load("3.1", SCHEMA_3_1_URL, schema)


def clear_cache() -> None:
    """Forget any schema loaded so far."""
    with _cache_lock:
        _cache.clear()


def get_file(url: str) -> bytes:
    """Fetch the body at ``url``.

    A response with an error status still yields its body. Failure to reach
    the server, or a URL that cannot be fetched at all, raises ``OSError``.
    """
    try:
        with urllib.request.urlopen(url, timeout=_FETCH_TIMEOUT) as response:
            return response.read()
    except urllib.error.HTTPError as exc:
        with exc:
            return exc.read()
    except ValueError as exc:
        raise OSError(f"cannot fetch {url!r}: {exc}") from exc


def _md5(data: bytes) -> str:
    return hashlib.md5(data, usedforsecurity=False).hexdigest()


def extract_schema(url: str, local: str) -> str:
    """Return the remote document at ``url`` if it differs from ``local``, else ``local``."""
    try:
        remote = get_file(url)
    except OSError:
        return local
    if _md5(remote) != _md5(local.encode("utf-8")):
        return remote.decode("utf-8", errors="replace")
    return local