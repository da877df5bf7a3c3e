"""Team archiver — mirrors one team's channels and document library to disk."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from teams_archive.graph.client import GraphApiError, GraphTransferError
from teams_archive.graph.directory import TeamDirectory
from teams_archive.graph.models import Team
from teams_archive.mirror.fetcher import FetchResult, FileFetcher
from teams_archive.mirror.manifest import (
    CHANNELS_FILENAME,
    FOLDERS_FILENAME,
    write_folder_manifest,
    write_records,
)
from teams_archive.mirror.materializer import DirectoryMaterializer, ensure_directory, sorted_folders
from teams_archive.mirror.paths import classify, relative_path

logger = logging.getLogger(__name__)

FILES_FOLDER = "Files"
DEFAULT_LIBRARY_NAME = "Documents"


class TeamStage(str, Enum):
    """Progress of a team through the archiving pipeline."""

    INIT = "init"
    LIBRARY_RESOLVED = "library_resolved"
    ITEMS_LISTED = "items_listed"
    FOLDERS_MIRRORED = "folders_mirrored"
    FILES_MIRRORED = "files_mirrored"
    DONE = "done"


class TeamStatus(str, Enum):
    """Final outcome of archiving a team."""

    DONE = "done"
    NO_LIBRARY = "no_library"
    NO_ITEMS = "no_items"
    FAILED = "failed"


@dataclass
class TeamResult:
    """Outcome of archiving a single team.

    ``stage`` is the last stage the team completed; for a FAILED team it is
    the stage the failure happened after.
    """

    team: Team
    local_folder: str
    status: TeamStatus = TeamStatus.DONE
    stage: TeamStage = TeamStage.INIT
    channel_count: int = 0
    folder_count: int = 0
    file_count: int = 0
    files_downloaded: int = 0
    files_skipped: int = 0
    folder_failures: list[tuple[str, str]] = field(default_factory=list)
    file_failures: list[FetchResult] = field(default_factory=list)
    reason: str = ""

    @property
    def failed(self) -> bool:
        return self.status is TeamStatus.FAILED

    def to_dict(self) -> dict[str, Any]:
        return {
            "team": self.team.display_name,
            "team_id": self.team.id,
            "local_folder": self.local_folder,
            "status": self.status.value,
            "stage": self.stage.value,
            "channel_count": self.channel_count,
            "folder_count": self.folder_count,
            "file_count": self.file_count,
            "files_downloaded": self.files_downloaded,
            "files_skipped": self.files_skipped,
            "folder_failures": len(self.folder_failures),
            "file_failures": len(self.file_failures),
            "reason": self.reason,
        }


class TeamArchiver:
    """Drives one team from site resolution to a fully mirrored local folder."""

    def __init__(
        self,
        directory: TeamDirectory,
        materializer: DirectoryMaterializer | None = None,
        fetcher: FileFetcher | None = None,
        library_name: str = DEFAULT_LIBRARY_NAME,
    ) -> None:
        """Initialise the archiver.

        Args:
            directory: TeamDirectory for channel, site, library and item lookups.
            materializer: Folder creator; a default instance is used if omitted.
            fetcher: File downloader; one bound to ``directory`` is used if omitted.
            library_name: Preferred document library name for every team.
        """
        self._directory = directory
        self._materializer = materializer or DirectoryMaterializer()
        self._fetcher = fetcher or FileFetcher(directory)
        self._library_name = library_name

    def archive(self, team: Team, team_folder: str) -> TeamResult:
        """Archive one team into ``team_folder``.

        Never raises: any error is captured in the returned TeamResult so the
        caller can move on to the next team. Files already written stay on disk.

        Args:
            team: Team to archive.
            team_folder: Local folder receiving the team's exports.

        Returns:
            TeamResult describing how far the team got and what failed.
        """
        result = TeamResult(team=team, local_folder=team_folder)
        try:
            self._archive(team, team_folder, result)
        except Exception as exc:
            result.status = TeamStatus.FAILED
            result.reason = str(exc) or type(exc).__name__
            logger.warning(
                "[archive] team failed; team:%s;stage:%s;error:%s",
                team.display_name,
                result.stage.value,
                result.reason,
                exc_info=True,
            )
        return result

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _archive(self, team: Team, team_folder: str, result: TeamResult) -> None:
        ensure_directory(team_folder)
        result.channel_count = self._export_channels(team, team_folder)

        site = self._directory.find_site_for_group(team.id)
        library = None if site is None else self._directory.resolve_library(site, self._library_name)
        if site is None or library is None:
            result.status = TeamStatus.NO_LIBRARY
            result.stage = TeamStage.DONE
            result.reason = "no site" if site is None else "no document library"
            logger.warning(
                "[archive] no document library for team; team:%s;reason:%s",
                team.display_name,
                result.reason,
            )
            return
        result.stage = TeamStage.LIBRARY_RESOLVED
        logger.info(
            "[archive] library resolved; team:%s;library:%s;root:%s",
            team.display_name,
            library.display_name,
            library.root_path,
        )

        items = self._directory.list_items(site, library)
        result.stage = TeamStage.ITEMS_LISTED
        if not items:
            result.status = TeamStatus.NO_ITEMS
            result.stage = TeamStage.DONE
            logger.info("[archive] library is empty; team:%s", team.display_name)
            return

        folders, files = classify(items)
        relative_folders = []
        for folder in folders:
            relative = relative_path(folder.path, library.root_path)
            if relative is None:
                logger.info(
                    "[archive] skipping folder outside library root; path:%s",
                    folder.path,
                )
                continue
            relative_folders.append(relative)
        relative_folders = sorted_folders(relative_folders)
        result.folder_count = len(relative_folders)
        result.file_count = len(files)
        logger.info(
            "[archive] items classified; team:%s;folders:%d;files:%d",
            team.display_name,
            result.folder_count,
            result.file_count,
        )

        self._export_folders(team, team_folder, relative_folders)
        files_base = os.path.join(team_folder, FILES_FOLDER)
        materialized = self._materializer.materialize(relative_folders, files_base)
        result.folder_failures = materialized.failures
        result.stage = TeamStage.FOLDERS_MIRRORED

        for item in files:
            fetched = self._fetcher.fetch(item, library, files_base)
            if fetched.success:
                result.files_downloaded += 1
            elif fetched.skipped:
                result.files_skipped += 1
            else:
                result.file_failures.append(fetched)
        result.stage = TeamStage.FILES_MIRRORED

        logger.info(
            "[archive] team archived; team:%s;downloaded:%d;skipped:%d;failed:%d",
            team.display_name,
            result.files_downloaded,
            result.files_skipped,
            len(result.file_failures),
        )
        result.stage = TeamStage.DONE

    def _export_folders(self, team: Team, team_folder: str, relative_folders: list[str]) -> None:
        """Write Folders.csv; the file mirror does not depend on it, so failures only warn."""
        try:
            write_folder_manifest(relative_folders, os.path.join(team_folder, FOLDERS_FILENAME))
        except OSError as exc:
            logger.warning(
                "[_export_folders] folder manifest failed; team:%s;error:%s",
                team.display_name,
                exc,
            )

    def _export_channels(self, team: Team, team_folder: str) -> int:
        """Write the team's channels to Channels.csv; failures only warn."""
        try:
            channels = self._directory.list_channels(team.id)
            return write_records(channels, os.path.join(team_folder, CHANNELS_FILENAME))
        except (GraphApiError, GraphTransferError, OSError) as exc:
            logger.warning(
                "[_export_channels] channel export failed; team:%s;error:%s",
                team.display_name,
                exc,
            )
            return 0
