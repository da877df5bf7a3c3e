"""Unit tests for graph/directory.py — TeamDirectory lookups and parsing."""

from unittest.mock import MagicMock

import pytest

from teams_archive.graph.client import GraphApiError
from teams_archive.graph.directory import TeamDirectory
from teams_archive.graph.models import DocumentLibrary, Site, Team

SITE = Site(id="contoso.sharepoint.com,site-guid,web-guid", web_url="https://contoso.sharepoint.com/sites/Corp")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_directory() -> tuple[TeamDirectory, MagicMock]:
    """Return (directory, mock_graph_client)."""
    mock_graph = MagicMock()
    return TeamDirectory(graph_client=mock_graph, page_size=500), mock_graph


def _raw_list(
    id: str,
    display_name: str,
    web_url: str,
    template: str = "documentLibrary",
    hidden: bool = False,
    name: str = "",
) -> dict:  # type: ignore[type-arg]
    return {
        "id": id,
        "name": name or display_name,
        "displayName": display_name,
        "webUrl": web_url,
        "list": {"template": template, "hidden": hidden},
    }


# ---------------------------------------------------------------------------
# Teams and channels
# ---------------------------------------------------------------------------


class TestListTeams:
    def test_maps_groups_to_teams_in_order(self) -> None:
        directory, mock_graph = _make_directory()
        mock_graph.get_all.return_value = [
            {"id": "g1", "displayName": "Sales"},
            {"id": "g2", "displayName": "Engineering"},
        ]

        teams = directory.list_teams()

        assert teams == [Team(id="g1", display_name="Sales"), Team(id="g2", display_name="Engineering")]
        path = mock_graph.get_all.call_args[0][0]
        assert path.startswith("/groups?$filter=resourceProvisioningOptions/Any(")
        assert " " not in path

    def test_missing_display_name_becomes_empty_string(self) -> None:
        directory, mock_graph = _make_directory()
        mock_graph.get_all.return_value = [{"id": "g1", "displayName": None}]

        assert directory.list_teams() == [Team(id="g1", display_name="")]


class TestListChannels:
    def test_returns_raw_channel_records(self) -> None:
        directory, mock_graph = _make_directory()
        channels = [{"id": "c1", "displayName": "General", "membershipType": "standard"}]
        mock_graph.get_all.return_value = channels

        assert directory.list_channels("g1") == channels
        mock_graph.get_all.assert_called_once_with("/teams/g1/channels")


# ---------------------------------------------------------------------------
# Site and library resolution
# ---------------------------------------------------------------------------


class TestFindSiteForGroup:
    def test_returns_site(self) -> None:
        directory, mock_graph = _make_directory()
        mock_graph.get.return_value = {"id": "site-1", "webUrl": "https://contoso.sharepoint.com/sites/Corp"}

        site = directory.find_site_for_group("g1")

        assert site == Site(id="site-1", web_url="https://contoso.sharepoint.com/sites/Corp")

    def test_returns_none_when_group_has_no_site(self) -> None:
        directory, mock_graph = _make_directory()
        mock_graph.get.side_effect = GraphApiError(404, "Resource not found")

        assert directory.find_site_for_group("g1") is None

    def test_other_errors_propagate(self) -> None:
        directory, mock_graph = _make_directory()
        mock_graph.get.side_effect = GraphApiError(403, "Access denied")

        with pytest.raises(GraphApiError):
            directory.find_site_for_group("g1")


class TestGetLibrary:
    def test_parses_root_path_and_resolves_drive(self) -> None:
        directory, mock_graph = _make_directory()
        mock_graph.get.side_effect = [
            _raw_list(
                "list-1",
                "Documents",
                "https://contoso.sharepoint.com/sites/Corp/Shared%20Documents",
                name="Shared Documents",
            ),
            {"id": "drive-1"},
        ]

        library = directory.get_library(SITE, "Documents")

        assert library == DocumentLibrary(
            id="list-1",
            name="Shared Documents",
            display_name="Documents",
            root_path="/sites/Corp/Shared Documents",
            drive_id="drive-1",
            hidden=False,
            template="documentLibrary",
        )
        assert mock_graph.get.call_args_list[1][0][0] == f"/sites/{SITE.id}/lists/list-1/drive?$select=id"

    def test_returns_none_when_missing(self) -> None:
        directory, mock_graph = _make_directory()
        mock_graph.get.side_effect = GraphApiError(404, "List does not exist")

        assert directory.get_library(SITE, "Documents") is None

    def test_returns_none_for_non_library_list(self) -> None:
        directory, mock_graph = _make_directory()
        mock_graph.get.return_value = _raw_list(
            "list-1", "Documents", "https://contoso.sharepoint.com/sites/Corp/Lists/Documents", template="genericList"
        )

        assert directory.get_library(SITE, "Documents") is None
        assert mock_graph.get.call_count == 1


class TestResolveLibrary:
    def test_prefers_named_library(self) -> None:
        directory, _ = _make_directory()
        preferred = DocumentLibrary("l1", "Shared Documents", "Documents", "/sites/Corp/Shared Documents")
        directory.get_library = MagicMock(return_value=preferred)  # type: ignore[method-assign]
        directory.list_libraries = MagicMock()  # type: ignore[method-assign]

        assert directory.resolve_library(SITE, "Documents") is preferred
        directory.list_libraries.assert_not_called()

    def test_falls_back_to_first_visible_library_by_title(self) -> None:
        directory, mock_graph = _make_directory()
        directory.get_library = MagicMock(return_value=None)  # type: ignore[method-assign]
        directory.list_libraries = MagicMock(  # type: ignore[method-assign]
            return_value=[
                DocumentLibrary("l-z", "Zeta", "zeta", "/sites/Corp/Zeta"),
                DocumentLibrary("l-h", "Hidden", "Assets", "/sites/Corp/Hidden", hidden=True),
                DocumentLibrary("l-g", "Tasks", "Alpha tasks", "/sites/Corp/Lists/Tasks", template="genericList"),
                DocumentLibrary("l-b", "Beta", "Beta", "/sites/Corp/Beta"),
            ]
        )
        mock_graph.get.return_value = {"id": "drive-b"}

        library = directory.resolve_library(SITE, "Documents")

        assert library is not None
        assert library.id == "l-b"
        assert library.drive_id == "drive-b"

    def test_returns_none_when_nothing_qualifies(self) -> None:
        directory, _ = _make_directory()
        directory.get_library = MagicMock(return_value=None)  # type: ignore[method-assign]
        directory.list_libraries = MagicMock(  # type: ignore[method-assign]
            return_value=[DocumentLibrary("l-h", "Hidden", "Hidden", "/sites/Corp/Hidden", hidden=True)]
        )

        assert directory.resolve_library(SITE, "Documents") is None


# ---------------------------------------------------------------------------
# Listing and download
# ---------------------------------------------------------------------------


class TestListItems:
    def test_requests_item_fields_with_page_size(self) -> None:
        directory, mock_graph = _make_directory()
        mock_graph.get_all.return_value = []
        library = DocumentLibrary("list-1", "Shared Documents", "Documents", "/sites/Corp/Shared Documents")

        directory.list_items(SITE, library)

        path = mock_graph.get_all.call_args[0][0]
        assert path.startswith(f"/sites/{SITE.id}/lists/list-1/items?$expand=fields($select=")
        assert "FileRef" in path and "FSObjType" in path
        assert path.endswith("&$top=500")

    def test_parses_fields(self) -> None:
        directory, mock_graph = _make_directory()
        mock_graph.get_all.return_value = [
            {
                "fields": {
                    "FileRef": "/sites/Corp/Shared Documents/A",
                    "FileDirRef": "/sites/Corp/Shared Documents",
                    "FileLeafRef": "A",
                    "FSObjType": "1",
                }
            },
            {
                "fields": {
                    "FileRef": "/sites/Corp/Shared Documents/A/report.csv",
                    "FileDirRef": "/sites/Corp/Shared Documents/A",
                    "FileLeafRef": "report.csv",
                    "FSObjType": "0",
                }
            },
        ]
        library = DocumentLibrary("list-1", "Shared Documents", "Documents", "/sites/Corp/Shared Documents")

        folder, file = directory.list_items(SITE, library)

        assert folder.is_folder is True
        assert folder.name == "A"
        assert file.is_folder is False
        assert file.parent_path == "/sites/Corp/Shared Documents/A"

    def test_falls_back_to_web_url_when_file_ref_missing(self) -> None:
        directory, mock_graph = _make_directory()
        mock_graph.get_all.return_value = [
            {
                "webUrl": "https://contoso.sharepoint.com/sites/Corp/Shared%20Documents/A/q%231.docx",
                "fields": {"FSObjType": 0},
            }
        ]
        library = DocumentLibrary("list-1", "Shared Documents", "Documents", "/sites/Corp/Shared Documents")

        (item,) = directory.list_items(SITE, library)

        assert item.path == "/sites/Corp/Shared Documents/A/q#1.docx"
        assert item.parent_path == "/sites/Corp/Shared Documents/A"
        assert item.name == "q#1.docx"


class TestDownload:
    def test_addresses_file_relative_to_drive_root(self) -> None:
        directory, mock_graph = _make_directory()
        mock_graph.download.return_value = 42
        library = DocumentLibrary(
            "list-1", "Shared Documents", "Documents", "/sites/Corp/Shared Documents", drive_id="drive-1"
        )

        size = directory.download(library, "Q1 Plans/report #2.csv", "/tmp/out.csv")

        assert size == 42
        mock_graph.download.assert_called_once_with(
            "/drives/drive-1/root:/Q1%20Plans/report%20%232.csv:/content", "/tmp/out.csv"
        )
