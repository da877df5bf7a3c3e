"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding environment variable is missing. Archive tuning
    values have sensible defaults but can be overridden via environment variables.
    """

    # Required — no defaults, fail at startup if missing
    client_id: str
    client_secret: str
    tenant_id: str
    export_root: str

    # Archive tuning — defaults provided, overridable via env
    library_name: str = "Documents"
    page_size: int = 999
    max_retries: int = 3
    retry_backoff_seconds: float = 2.0
    request_timeout_seconds: float = 120.0


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        TA_CLIENT_ID: Azure AD application (client) ID.
        TA_CLIENT_SECRET: Azure AD application client secret.
        TA_TENANT_ID: Azure AD tenant (directory) ID.
        TA_EXPORT_ROOT: Local directory that receives one folder per team.

    Optional environment variables (with defaults):
        TA_LIBRARY_NAME: Preferred document library name (default: Documents).
        TA_PAGE_SIZE: Items requested per listing page (default: 999).
        TA_MAX_RETRIES: Retry attempts for transient Graph errors (default: 3).
        TA_RETRY_BACKOFF_SECONDS: Base delay for exponential backoff (default: 2.0).
        TA_REQUEST_TIMEOUT_SECONDS: Socket timeout per Graph request (default: 120).

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        client_id=os.environ["TA_CLIENT_ID"],
        client_secret=os.environ["TA_CLIENT_SECRET"],
        tenant_id=os.environ["TA_TENANT_ID"],
        export_root=os.environ["TA_EXPORT_ROOT"],
        library_name=os.environ.get("TA_LIBRARY_NAME", "Documents"),
        page_size=int(os.environ.get("TA_PAGE_SIZE", "999")),
        max_retries=int(os.environ.get("TA_MAX_RETRIES", "3")),
        retry_backoff_seconds=float(os.environ.get("TA_RETRY_BACKOFF_SECONDS", "2.0")),
        request_timeout_seconds=float(os.environ.get("TA_REQUEST_TIMEOUT_SECONDS", "120")),
    )
