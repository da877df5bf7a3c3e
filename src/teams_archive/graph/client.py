"""Microsoft Graph API client with MSAL authentication."""

from __future__ import annotations

import http.client
import json
import logging
import shutil
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar
from urllib import request as urllib_request
from urllib.error import HTTPError, URLError

import msal

from teams_archive.graph.models import ODATA_NEXT_LINK, ODATA_VALUE

if TYPE_CHECKING:
    from teams_archive.config import AppConfig

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPES = ["https://graph.microsoft.com/.default"]
AUTHORITY_BASE_URL = "https://login.microsoftonline.com"

# Retry defaults for transient failures
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BACKOFF_SECONDS = 2.0
DEFAULT_REQUEST_TIMEOUT_SECONDS = 120.0
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

_DOWNLOAD_CHUNK_BYTES = 1024 * 1024

T = TypeVar("T")


class GraphAuthError(Exception):
    """Raised when MSAL token acquisition fails."""


class GraphApiError(Exception):
    """Raised when the Graph API returns a non-2xx response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Graph API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class GraphTransferError(Exception):
    """Raised when a request cannot reach the Graph API after all retries."""


class GraphClient:
    """Authenticated client for Microsoft Graph API."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        tenant_id: str,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_backoff_seconds: float = DEFAULT_RETRY_BACKOFF_SECONDS,
        request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        """Initialise the MSAL confidential client application.

        Args:
            client_id: Azure AD application (client) ID.
            client_secret: Azure AD application client secret.
            tenant_id: Azure AD tenant ID.
            max_retries: Extra attempts for throttled, unavailable or unreachable requests.
            retry_backoff_seconds: Base delay; attempt n waits base * 2**n seconds
                unless the service sends a Retry-After header.
            request_timeout_seconds: Socket timeout for connecting and for each read;
                a stalled transfer raises TimeoutError and is retried.
        """
        authority = f"{AUTHORITY_BASE_URL}/{tenant_id}"
        self._app = msal.ConfidentialClientApplication(
            client_id=client_id,
            client_credential=client_secret,
            authority=authority,
        )
        self._max_retries = max_retries
        self._retry_backoff_seconds = retry_backoff_seconds
        self._request_timeout_seconds = request_timeout_seconds

    def _acquire_token(self) -> str:
        """Acquire a Bearer token using client credentials flow.

        Returns:
            Access token string.

        Raises:
            GraphAuthError: If MSAL cannot acquire a token.
        """
        result: dict[str, Any] = self._app.acquire_token_for_client(scopes=GRAPH_SCOPES) or {}
        if "access_token" not in result:
            error = result.get("error", "unknown_error")
            description = result.get("error_description", "No description provided")
            logger.error("[_acquire_token] MSAL token acquisition failed; error:%s", error)
            raise GraphAuthError(f"Token acquisition failed: {error} — {description}")
        return str(result["access_token"])

    def get(self, path: str) -> dict[str, Any]:
        """Perform an authenticated GET request to the Graph API.

        Args:
            path: URL path relative to BASE_URL (must start with '/'), or an
                absolute URL such as an @odata.nextLink.

        Returns:
            Parsed JSON response body as a dict.

        Raises:
            GraphAuthError: If token acquisition fails.
            GraphApiError: If the API returns a non-2xx status code.
            GraphTransferError: If the API stays unreachable after all retries.
        """
        body = self._request(path, "application/json", lambda resp: resp.read())
        return json.loads(body)  # type: ignore[no-any-return]

    def get_all(self, path: str) -> list[dict[str, Any]]:
        """Collect the ``value`` entries of every page of a collection.

        Follows @odata.nextLink until the service stops returning one, so
        callers see a single logical listing.

        Args:
            path: URL path of the first page.

        Returns:
            All entries across all pages, in service order.
        """
        entries: list[dict[str, Any]] = []
        next_path: str | None = path
        pages = 0
        while next_path is not None:
            response = self.get(next_path)
            entries.extend(response.get(ODATA_VALUE, []))
            next_path = response.get(ODATA_NEXT_LINK)
            pages += 1
        logger.debug("[get_all] collection retrieved; pages:%d;entries:%d", pages, len(entries))
        return entries

    def download(self, path: str, destination: str) -> int:
        """Stream the body of an authenticated GET request into a local file.

        The destination is truncated on every attempt, so a retried transfer
        never appends to a partial earlier one.

        Args:
            path: URL path relative to BASE_URL (typically ending in ``/content``).
            destination: Local file path to write.

        Returns:
            Number of bytes written.
        """

        def _write(resp: Any) -> int:
            with open(destination, "wb") as fh:
                shutil.copyfileobj(resp, fh, _DOWNLOAD_CHUNK_BYTES)
                return fh.tell()

        return self._request(path, "*/*", _write)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _request(self, path: str, accept: str, handle: Callable[[Any], T]) -> T:
        """Open a GET request with bounded retry and pass the response to ``handle``."""
        url = path if path.startswith("https://") else f"{GRAPH_BASE_URL}{path}"
        attempt = 0
        while True:
            token = self._acquire_token()
            req = urllib_request.Request(
                url,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": accept,
                },
                method="GET",
            )
            try:
                with urllib_request.urlopen(req, timeout=self._request_timeout_seconds) as resp:
                    return handle(resp)
            except HTTPError as exc:
                if exc.code not in RETRYABLE_STATUS_CODES or attempt >= self._max_retries:
                    raise _api_error(exc) from exc
                delay = self._retry_delay(attempt, exc.headers)
                logger.warning(
                    "[_request] transient Graph response; status:%d;attempt:%d;delay:%.1f;url:%s",
                    exc.code,
                    attempt + 1,
                    delay,
                    url,
                )
            except (URLError, ConnectionError, TimeoutError, http.client.HTTPException) as exc:
                if attempt >= self._max_retries:
                    raise GraphTransferError(f"Request to {url} failed: {exc}") from exc
                delay = self._retry_delay(attempt, None)
                logger.warning(
                    "[_request] transfer error; attempt:%d;delay:%.1f;url:%s;error:%s",
                    attempt + 1,
                    delay,
                    url,
                    exc,
                )
            time.sleep(delay)
            attempt += 1

    def _retry_delay(self, attempt: int, headers: Any) -> float:
        """Honour Retry-After when present, otherwise back off exponentially."""
        if headers is not None:
            retry_after = headers.get("Retry-After")
            if retry_after is not None:
                try:
                    return max(float(retry_after), 0.0)
                except (TypeError, ValueError):
                    pass
        return float(self._retry_backoff_seconds * (2**attempt))


def _api_error(exc: HTTPError) -> GraphApiError:
    """Map an HTTPError to a GraphApiError carrying the Graph error message."""
    raw = exc.read() if exc.fp is not None else b""
    try:
        detail = json.loads(raw).get("error", {}).get("message", exc.reason)
    except Exception:
        detail = exc.reason
    return GraphApiError(exc.code, detail)


def graph_client_from_config(config: AppConfig) -> GraphClient:
    """Construct a GraphClient from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured GraphClient instance.
    """
    return GraphClient(
        client_id=config.client_id,
        client_secret=config.client_secret,
        tenant_id=config.tenant_id,
        max_retries=config.max_retries,
        retry_backoff_seconds=config.retry_backoff_seconds,
        request_timeout_seconds=config.request_timeout_seconds,
    )
