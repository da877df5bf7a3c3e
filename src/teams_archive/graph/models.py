"""Data models for Teams, SharePoint sites, document libraries and listing items."""

from dataclasses import dataclass
from typing import Any

# Graph API JSON field names
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_DISPLAY_NAME = "displayName"
FIELD_WEB_URL = "webUrl"
FIELD_LIST = "list"
FIELD_HIDDEN = "hidden"
FIELD_TEMPLATE = "template"
FIELD_FIELDS = "fields"

# SharePoint list item fields
FIELD_FILE_REF = "FileRef"
FIELD_FILE_DIR_REF = "FileDirRef"
FIELD_FILE_LEAF_REF = "FileLeafRef"
FIELD_FS_OBJ_TYPE = "FSObjType"

# OData response keys
ODATA_NEXT_LINK = "@odata.nextLink"
ODATA_VALUE = "value"

DOCUMENT_LIBRARY_TEMPLATE = "documentLibrary"
FOLDER_OBJECT_TYPE = 1


@dataclass(frozen=True)
class Team:
    """A Microsoft Teams team, identified by its backing Microsoft 365 group."""

    id: str
    display_name: str


@dataclass(frozen=True)
class Site:
    """The SharePoint site backing a team."""

    id: str
    web_url: str


@dataclass(frozen=True)
class DocumentLibrary:
    """A SharePoint document library.

    Attributes:
        id: List ID of the library.
        name: URL name of the list (e.g. "Shared Documents").
        display_name: Title shown in SharePoint (e.g. "Documents").
        root_path: Server-relative, URL-decoded path of the library root
            without a trailing slash (e.g. "/sites/Corp/Shared Documents").
        drive_id: ID of the drive exposing the library's file content.
        hidden: Whether the list is hidden from site navigation.
        template: SharePoint list template name.
    """

    id: str
    name: str
    display_name: str
    root_path: str
    drive_id: str = ""
    hidden: bool = False
    template: str = DOCUMENT_LIBRARY_TEMPLATE


@dataclass(frozen=True)
class ListingItem:
    """One entry of the flat listing of a document library.

    Attributes:
        path: Absolute server-relative path of the item (FileRef).
        parent_path: Absolute server-relative path of its parent (FileDirRef).
        name: Leaf name (FileLeafRef).
        object_type: Type discriminator (FSObjType); 1 marks a folder.
    """

    path: str
    parent_path: str
    name: str
    object_type: Any

    @property
    def is_folder(self) -> bool:
        try:
            return int(self.object_type) == FOLDER_OBJECT_TYPE
        except (TypeError, ValueError):
            return False
