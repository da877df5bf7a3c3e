"""Archive run — archives every team of the tenant below one export root."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from teams_archive.graph.client import (
    GraphApiError,
    GraphAuthError,
    GraphTransferError,
    graph_client_from_config,
)
from teams_archive.graph.directory import TeamDirectory, team_directory_from_config
from teams_archive.graph.models import Team
from teams_archive.mirror.materializer import ensure_directory
from teams_archive.mirror.paths import sanitize_name
from teams_archive.orchestration.archiver import TeamArchiver, TeamResult

if TYPE_CHECKING:
    from teams_archive.config import AppConfig

logger = logging.getLogger(__name__)

TEAM_FOLDER_PREFIX = "Team_"


class SetupError(Exception):
    """Raised when the run cannot start: no export root or no team listing."""


@dataclass
class RunSummary:
    """Aggregated outcome of an archive run."""

    export_root: str
    teams: list[TeamResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for team in self.teams if not team.failed)

    @property
    def failed(self) -> int:
        return sum(1 for team in self.teams if team.failed)

    @property
    def files_downloaded(self) -> int:
        return sum(team.files_downloaded for team in self.teams)

    @property
    def file_failures(self) -> int:
        return sum(len(team.file_failures) for team in self.teams)

    def to_dict(self) -> dict[str, Any]:
        return {
            "export_root": self.export_root,
            "teams_processed": len(self.teams),
            "teams_failed": self.failed,
            "files_downloaded": self.files_downloaded,
            "file_failures": self.file_failures,
            "teams": [team.to_dict() for team in self.teams],
        }


def team_folder_name(team: Team) -> str:
    """Return the local folder name for a team, e.g. ``Team_Sales _ Ops``."""
    return f"{TEAM_FOLDER_PREFIX}{sanitize_name(team.display_name)}"


class ArchiveRun:
    """Iterates all teams and archives each one independently."""

    def __init__(self, directory: TeamDirectory, archiver: TeamArchiver, export_root: str) -> None:
        """Initialise the run.

        Args:
            directory: TeamDirectory used to list the tenant's teams.
            archiver: TeamArchiver invoked once per team.
            export_root: Local directory receiving one folder per team.
        """
        self._directory = directory
        self._archiver = archiver
        self._export_root = export_root

    def run(self) -> RunSummary:
        """Archive every team, in listing order.

        Team-level failures are recorded in the summary and never stop the
        run.

        Returns:
            RunSummary with one TeamResult per team.

        Raises:
            SetupError: If the export root cannot be created or the teams
                cannot be listed.
        """
        try:
            ensure_directory(self._export_root)
        except OSError as exc:
            raise SetupError(f"Cannot create export root {self._export_root}: {exc}") from exc

        try:
            teams = self._directory.list_teams()
        except (GraphAuthError, GraphApiError, GraphTransferError) as exc:
            raise SetupError(f"Cannot list teams: {exc}") from exc

        summary = RunSummary(export_root=self._export_root)
        for index, team in enumerate(teams, start=1):
            logger.info(
                "[run] processing team; team:%s;position:%d/%d",
                team.display_name,
                index,
                len(teams),
            )
            team_folder = os.path.join(self._export_root, team_folder_name(team))
            summary.teams.append(self._archiver.archive(team, team_folder))

        logger.info(
            "[run] archive complete; export_root:%s;teams:%d;failed:%d;files:%d;file_failures:%d",
            self._export_root,
            len(summary.teams),
            summary.failed,
            summary.files_downloaded,
            summary.file_failures,
        )
        return summary


def archive_run_from_config(config: AppConfig) -> ArchiveRun:
    """Construct an ArchiveRun from application configuration.

    Creates a GraphClient and TeamDirectory from the config, then wires
    them into a TeamArchiver and ArchiveRun.

    Args:
        config: Application configuration instance.

    Returns:
        Configured ArchiveRun instance.
    """
    client = graph_client_from_config(config)
    directory = team_directory_from_config(client, config)
    archiver = TeamArchiver(directory=directory, library_name=config.library_name)
    return ArchiveRun(directory=directory, archiver=archiver, export_root=config.export_root)
