"""Path translation and item classification for flat library listings.

Remote paths are absolute, server-relative and case-insensitive. Everything
below the library root is expressed as a relative path that always uses
forward slashes; the local separator only appears in ``to_local_path``.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable

from teams_archive.graph.models import ListingItem

# Relative path of the library root itself.
ROOT_MARKER = "/"

SEPARATOR = "/"

# Characters that cannot appear in a local path segment on Windows or POSIX.
_DISALLOWED_SEGMENT_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def _normalize(path: str) -> str:
    return path.replace("\\", SEPARATOR)


def relative_path(absolute_path: str, library_root: str) -> str | None:
    """Translate an absolute item path into a path relative to the library root.

    Args:
        absolute_path: Server-relative path of the item (e.g. FileRef).
        library_root: Server-relative path of the library root.

    Returns:
        The relative path, ``ROOT_MARKER`` when the item is the root itself,
        or None when the item does not live under the library root.
    """
    path = _normalize(absolute_path)
    root = _normalize(library_root).rstrip(SEPARATOR)
    if path[: len(root)].casefold() != root.casefold():
        return None
    remainder = path[len(root) :]
    if remainder and not remainder.startswith(SEPARATOR):
        # Sibling sharing a name prefix, e.g. "Documents2" next to "Documents".
        return None
    remainder = remainder.strip(SEPARATOR)
    return remainder or ROOT_MARKER


def parent_of(relative: str) -> str:
    """Return the parent of a relative path (``ROOT_MARKER`` for top-level entries)."""
    if relative == ROOT_MARKER or SEPARATOR not in relative:
        return ROOT_MARKER
    return relative.rsplit(SEPARATOR, 1)[0]


def to_local_path(base: str, relative: str) -> str:
    """Join a relative path onto a local base directory using the local separator."""
    if relative == ROOT_MARKER:
        return base
    return os.path.join(base, *relative.split(SEPARATOR))


def classify(items: Iterable[ListingItem]) -> tuple[list[ListingItem], list[ListingItem]]:
    """Partition listing items into (folders, files) by their type discriminator.

    Every item lands in exactly one partition; anything not marked as a
    folder is treated as a file.
    """
    folders: list[ListingItem] = []
    files: list[ListingItem] = []
    for item in items:
        (folders if item.is_folder else files).append(item)
    return folders, files


def sanitize_name(name: str, replacement: str = "_") -> str:
    """Make a display name usable as a single local path segment.

    Each disallowed character is replaced one-for-one, so two names that
    differ only in disallowed characters map to the same segment.
    """
    return _DISALLOWED_SEGMENT_CHARS.sub(replacement, name)
