"""Downloads listed files into their reconstructed local folders."""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from dataclasses import dataclass
from typing import TYPE_CHECKING

from teams_archive.graph.client import GraphApiError, GraphAuthError, GraphTransferError
from teams_archive.mirror.materializer import ensure_directory
from teams_archive.mirror.paths import ROOT_MARKER, parent_of, relative_path, to_local_path

if TYPE_CHECKING:
    from teams_archive.graph.directory import TeamDirectory
    from teams_archive.graph.models import DocumentLibrary, ListingItem

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".part"


@dataclass
class FetchResult:
    """Outcome of fetching one file.

    Attributes:
        path: Absolute remote path of the file.
        local_path: Local destination, empty when the item was skipped.
        success: Whether the file is now present locally.
        skipped: True when the item lies outside the library root or is the root itself.
        reason: Failure or skip reason; empty on success.
        size: Bytes written on success.
    """

    path: str
    local_path: str = ""
    success: bool = False
    skipped: bool = False
    reason: str = ""
    size: int = 0


class FileFetcher:
    """Mirrors single files of a library below a local ``Files`` folder."""

    def __init__(self, directory: TeamDirectory) -> None:
        """Initialise the fetcher.

        Args:
            directory: TeamDirectory used to download file content.
        """
        self._directory = directory

    def fetch(self, item: ListingItem, library: DocumentLibrary, files_base: str) -> FetchResult:
        """Download one file to ``files_base/<relative parent>/<leaf name>``.

        Missing parent folders are created on demand, so the file lands in the
        right place even if its folder never appeared in the listing. An
        existing local file is replaced. Content is streamed into a partial
        file first and moved into place only after the transfer completes.

        Args:
            item: File entry from the library listing.
            library: Library the item was listed from.
            files_base: Local folder mirroring the library root.

        Returns:
            FetchResult describing success, skip or failure. Per-file
            failures are reported, never raised.
        """
        relative = relative_path(item.path, library.root_path)
        if relative is None:
            logger.info(
                "[fetch] skipping item outside library root; path:%s;root:%s",
                item.path,
                library.root_path,
            )
            return FetchResult(path=item.path, skipped=True, reason="outside library root")
        if relative == ROOT_MARKER:
            logger.info("[fetch] skipping item that is the library root; path:%s", item.path)
            return FetchResult(path=item.path, skipped=True, reason="library root")

        target_dir = to_local_path(files_base, parent_of(relative))
        destination = os.path.join(target_dir, item.name or relative.rsplit("/", 1)[-1])
        partial: str | None = None
        try:
            ensure_directory(target_dir)
            # Unique name, so a listed sibling such as "<leaf>.part" is never clobbered.
            fd, partial = tempfile.mkstemp(dir=target_dir, prefix=".", suffix=PARTIAL_SUFFIX)
            os.close(fd)
            size = self._directory.download(library, relative, partial)
            os.replace(partial, destination)
        except (GraphApiError, GraphTransferError, GraphAuthError, OSError) as exc:
            if partial is not None:
                with contextlib.suppress(OSError):
                    os.remove(partial)
            logger.warning("[fetch] file download failed; path:%s;error:%s", item.path, exc)
            return FetchResult(path=item.path, local_path=destination, reason=str(exc))

        logger.debug("[fetch] file downloaded; path:%s;bytes:%d", relative, size)
        return FetchResult(path=item.path, local_path=destination, success=True, size=size)
