"""Local directory tree creation for relative folder paths."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field

from teams_archive.mirror.paths import ROOT_MARKER, to_local_path

logger = logging.getLogger(__name__)


@dataclass
class MaterializeResult:
    """Outcome of materializing a set of folders.

    Attributes:
        created: Number of directories that did not exist before the call.
        failures: (relative path, reason) for every folder that could not be created.
    """

    created: int = 0
    failures: list[tuple[str, str]] = field(default_factory=list)


def ensure_directory(path: str) -> bool:
    """Create a directory and any missing ancestors.

    Creation is create-if-absent, so concurrent callers racing on the same
    path all succeed.

    Returns:
        True if the directory was created by this call, False if it already existed.

    Raises:
        OSError: If the directory cannot be created for any other reason.
    """
    try:
        os.makedirs(path)
    except FileExistsError:
        if not os.path.isdir(path):
            raise
        return False
    return True


def sorted_folders(relative_paths: Iterable[str]) -> list[str]:
    """Deduplicate and sort relative folder paths, dropping the library root."""
    return sorted({p for p in relative_paths if p and p != ROOT_MARKER})


class DirectoryMaterializer:
    """Recreates a set of relative folders below a local base directory."""

    def materialize(self, relative_paths: Iterable[str], base: str) -> MaterializeResult:
        """Create every folder below ``base``, continuing past per-folder failures.

        Args:
            relative_paths: Relative folder paths; duplicates and the root
                marker are ignored.
            base: Local directory the relative paths are rooted at.

        Returns:
            MaterializeResult with the created count and per-folder failures.
        """
        result = MaterializeResult()
        ensure_directory(base)
        for relative in sorted_folders(relative_paths):
            target = to_local_path(base, relative)
            try:
                if ensure_directory(target):
                    result.created += 1
            except OSError as exc:
                result.failures.append((relative, str(exc)))
                logger.warning(
                    "[materialize] folder could not be created; folder:%s;error:%s",
                    relative,
                    exc,
                )
        logger.info(
            "[materialize] folders mirrored; created:%d;failed:%d",
            result.created,
            len(result.failures),
        )
        return result
