"""Team, site and document library lookups against Microsoft Graph."""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, unquote, urlparse

from teams_archive.graph.client import GraphApiError, GraphClient
from teams_archive.graph.models import (
    DOCUMENT_LIBRARY_TEMPLATE,
    FIELD_DISPLAY_NAME,
    FIELD_FIELDS,
    FIELD_FILE_DIR_REF,
    FIELD_FILE_LEAF_REF,
    FIELD_FILE_REF,
    FIELD_FS_OBJ_TYPE,
    FIELD_HIDDEN,
    FIELD_ID,
    FIELD_LIST,
    FIELD_NAME,
    FIELD_TEMPLATE,
    FIELD_WEB_URL,
    DocumentLibrary,
    ListingItem,
    Site,
    Team,
)

if TYPE_CHECKING:
    from teams_archive.config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 999

_TEAMS_FILTER = "resourceProvisioningOptions/Any(x:x%20eq%20'Team')"
_LIBRARY_SELECT = "id,name,displayName,webUrl,list"
_ITEM_FIELDS = ",".join(
    [FIELD_FILE_REF, FIELD_FILE_DIR_REF, FIELD_FILE_LEAF_REF, FIELD_FS_OBJ_TYPE]
)


class TeamDirectory:
    """Read-only access to teams, channels, sites and library contents."""

    def __init__(self, graph_client: GraphClient, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        """Initialise the directory.

        Args:
            graph_client: Authenticated GraphClient instance.
            page_size: Items requested per page when listing library contents.
        """
        self._graph = graph_client
        self._page_size = page_size

    def list_teams(self) -> list[Team]:
        """Return every team in the tenant, in service order."""
        raw_groups = self._graph.get_all(f"/groups?$filter={_TEAMS_FILTER}&$select=id,displayName")
        teams = [
            Team(id=raw.get(FIELD_ID, ""), display_name=raw.get(FIELD_DISPLAY_NAME) or "")
            for raw in raw_groups
        ]
        logger.info("[list_teams] teams listed; team_count:%d", len(teams))
        return teams

    def list_channels(self, team_id: str) -> list[dict[str, Any]]:
        """Return the channel records of a team exactly as Graph reports them."""
        return self._graph.get_all(f"/teams/{team_id}/channels")

    def find_site_for_group(self, group_id: str) -> Site | None:
        """Resolve the root SharePoint site of a Microsoft 365 group.

        Returns:
            The site, or None when the group has no provisioned site.
        """
        try:
            raw = self._graph.get(f"/groups/{group_id}/sites/root?$select=id,webUrl")
        except GraphApiError as exc:
            if exc.status_code == 404:
                return None
            raise
        return Site(id=raw.get(FIELD_ID, ""), web_url=raw.get(FIELD_WEB_URL, ""))

    def get_library(self, site: Site, name: str) -> DocumentLibrary | None:
        """Look up a document library by title or URL name.

        Returns:
            The library with its drive ID resolved, or None if no list with
            that name exists or the list is not a document library.
        """
        try:
            raw = self._graph.get(f"/sites/{site.id}/lists/{quote(name)}?$select={_LIBRARY_SELECT}")
        except GraphApiError as exc:
            if exc.status_code == 404:
                return None
            raise
        library = self._parse_library(raw)
        if library.template != DOCUMENT_LIBRARY_TEMPLATE:
            return None
        return self._with_drive(site, library)

    def list_libraries(self, site: Site) -> list[DocumentLibrary]:
        """Return every list of the site as a DocumentLibrary record (any template)."""
        raw_lists = self._graph.get_all(f"/sites/{site.id}/lists?$select={_LIBRARY_SELECT}")
        return [self._parse_library(raw) for raw in raw_lists]

    def resolve_library(self, site: Site, preferred_name: str) -> DocumentLibrary | None:
        """Pick the library to archive for a site.

        Uses the preferred name first. Otherwise falls back to the first
        visible document library, ordered by display name (case-insensitive)
        and then by ID so the choice does not depend on listing order.

        Returns:
            The resolved library, or None if the site has no eligible library.
        """
        library = self.get_library(site, preferred_name)
        if library is not None:
            return library

        candidates = sorted(
            (
                lib
                for lib in self.list_libraries(site)
                if lib.template == DOCUMENT_LIBRARY_TEMPLATE and not lib.hidden
            ),
            key=lambda lib: (lib.display_name.casefold(), lib.id),
        )
        if not candidates:
            return None
        logger.info(
            "[resolve_library] preferred library missing, using fallback;"
            " preferred:%s;library:%s;candidates:%d",
            preferred_name,
            candidates[0].display_name,
            len(candidates),
        )
        return self._with_drive(site, candidates[0])

    def list_items(self, site: Site, library: DocumentLibrary) -> list[ListingItem]:
        """Return the complete flat listing of a library (folders and files).

        Pagination is followed internally; callers see one logical listing.
        """
        path = (
            f"/sites/{site.id}/lists/{library.id}/items"
            f"?$expand={FIELD_FIELDS}($select={_ITEM_FIELDS})&$top={self._page_size}"
        )
        items = [self._parse_item(raw) for raw in self._graph.get_all(path)]
        logger.info(
            "[list_items] library listed; library:%s;item_count:%d",
            library.display_name,
            len(items),
        )
        return items

    def download(self, library: DocumentLibrary, relative_path: str, destination: str) -> int:
        """Download one file of a library, addressed relative to the library root.

        Args:
            library: Library holding the file; its drive ID must be resolved.
            relative_path: Forward-slash path of the file below the library root.
            destination: Local file path to write (overwritten).

        Returns:
            Number of bytes written.
        """
        encoded = quote(relative_path.strip("/"), safe="/")
        return self._graph.download(f"/drives/{library.drive_id}/root:/{encoded}:/content", destination)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _with_drive(self, site: Site, library: DocumentLibrary) -> DocumentLibrary:
        """Return a copy of the library with its drive ID filled in."""
        raw = self._graph.get(f"/sites/{site.id}/lists/{library.id}/drive?$select=id")
        return dataclasses.replace(library, drive_id=raw.get(FIELD_ID, ""))

    @staticmethod
    def _parse_library(raw: dict) -> DocumentLibrary:  # type: ignore[type-arg]
        """Map a raw Graph list resource to a DocumentLibrary."""
        list_info = raw.get(FIELD_LIST, {})
        root_path = unquote(urlparse(raw.get(FIELD_WEB_URL, "")).path).rstrip("/")
        return DocumentLibrary(
            id=raw.get(FIELD_ID, ""),
            name=raw.get(FIELD_NAME, ""),
            display_name=raw.get(FIELD_DISPLAY_NAME, ""),
            root_path=root_path,
            hidden=bool(list_info.get(FIELD_HIDDEN, False)),
            template=list_info.get(FIELD_TEMPLATE, ""),
        )

    @staticmethod
    def _parse_item(raw: dict) -> ListingItem:  # type: ignore[type-arg]
        """Map a raw Graph list item (with expanded fields) to a ListingItem.

        Some tenants omit FileRef/FileDirRef from the expanded fields; the
        item's webUrl carries the same server-relative path in that case.
        """
        fields = raw.get(FIELD_FIELDS, {})
        path = fields.get(FIELD_FILE_REF) or unquote(urlparse(raw.get(FIELD_WEB_URL, "")).path)
        parent_path = fields.get(FIELD_FILE_DIR_REF) or path.rsplit("/", 1)[0]
        return ListingItem(
            path=path,
            parent_path=parent_path,
            name=fields.get(FIELD_FILE_LEAF_REF) or path.rsplit("/", 1)[-1],
            object_type=fields.get(FIELD_FS_OBJ_TYPE),
        )


def team_directory_from_config(graph_client: GraphClient, config: AppConfig) -> TeamDirectory:
    """Construct a TeamDirectory from application configuration.

    Args:
        graph_client: Authenticated GraphClient instance.
        config: Application configuration instance.

    Returns:
        Configured TeamDirectory instance.
    """
    return TeamDirectory(graph_client=graph_client, page_size=config.page_size)
