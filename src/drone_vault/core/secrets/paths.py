"""Path rewriting for versioned (KV v2) mounts.

KV v2 stores record data under ``<mount>/data/<path>``, while users and the
Vault CLI address records as ``<mount>/<path>``. The CLI inserts the
``data`` segment after asking Vault which mount a path belongs to; this
module reproduces that so both path styles read the same record::

    $ vault kv get -output-curl-string foo/versioned/bar
    curl ... https://vault.example.com/v1/foo/versioned/data/bar
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Mapping
from typing import Any, Protocol

from drone_vault.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)

DATA_SEGMENT = "data"


class MountInfoSource(Protocol):
    """Anything able to describe the mount a path belongs to."""

    def mount_info(self, path: str) -> Any:
        """Return the decoded ``sys/internal/ui/mounts`` response for *path*."""
        ...


def _trim_slash(path: str) -> str:
    return path[:-1] if path.endswith("/") else path


def _join(*elements: str) -> str:
    joined = "/".join(element for element in elements if element)
    return posixpath.normpath(joined) if joined else ""


def rewrite_path(response: Any, original: str) -> tuple[bool, str]:
    """Rewrite *original* according to a mount description.

    Args:
        response: Decoded mount-introspection response. The interesting
            fields are ``data.options.version`` and ``data.path``.
        original: The path as requested.

    Returns:
        ``(is_v2, path)``. Non-v2 mounts keep the original path. The
        returned path never ends with a slash.

    Raises:
        ValueError: If *response* does not have the expected shape.
    """
    if not isinstance(response, Mapping):
        raise ValueError("failed parsing response: expected an object")
    data = response.get("data") or {}
    if not isinstance(data, Mapping):
        raise ValueError("failed parsing response: 'data' is not an object")
    options = data.get("options") or {}
    if not isinstance(options, Mapping):
        raise ValueError("failed parsing response: 'options' is not an object")
    mount = data.get("path") or ""
    if not isinstance(mount, str):
        raise ValueError("failed parsing response: 'path' is not a string")

    version = options.get("version")
    try:
        is_v2 = isinstance(version, str) and int(version) == 2
    except ValueError:
        is_v2 = False
    if not is_v2:
        return False, _trim_slash(original)

    if original == mount or original == _trim_slash(mount):
        return True, _trim_slash(_join(mount, DATA_SEGMENT))

    remainder = original[len(mount):] if original.startswith(mount) else original
    stripped = remainder.lstrip("/")
    if original.startswith(mount) and (stripped == DATA_SEGMENT or stripped.startswith(DATA_SEGMENT + "/")):
        # Already addressed through the data segment.
        return True, _trim_slash(_join(mount, stripped))
    return True, _trim_slash(_join(mount, DATA_SEGMENT, remainder))


class PathResolver:
    """Resolve request paths to the path Vault actually serves.

    Any failure to describe the mount leaves the path untouched; path
    resolution never fails a secret request on its own.

    Args:
        source: Client used for the mount-introspection call.
    """

    def __init__(self, source: MountInfoSource) -> None:
        self._source = source

    def resolve(self, path: str) -> tuple[bool, str]:
        """Return ``(is_v2, effective_path)`` for *path*."""
        try:
            response = self._source.mount_info(path)
        except UpstreamError as exc:
            logger.debug("failed querying mount point; defaulting to original: %s", exc)
            return False, path
        try:
            is_v2, rewritten = rewrite_path(response, path)
        except ValueError as exc:
            logger.debug("failed rewriting; defaulting to original: %s", exc)
            return False, path
        logger.debug("rewrote %r to %r", path, rewritten)
        return is_v2, rewritten
