"""Authenticated access to the Community Hub (Salesforce) REST API.

Only the two lookups the sync needs are implemented:

- get_account: GET /services/data/v<ver>/sobjects/Account/<id>
- query_account_id: GET /services/data/v<ver>/query/?q=SELECT AccountId ...

Both go through fetch(), which retries exactly once with a freshly issued
token when the API answers INVALID_SESSION_ID. Any other failure yields None.
"""

from __future__ import annotations

from typing import Any

import httpx
import msgspec

from .config import Settings
from .credentials import CredentialCache
from .errors import AuthenticationError, RequestBuildError
from .logging_config import get_logger
from .token_manager import TokenManager

logger = get_logger("client")

INVALID_SESSION_ERROR = "INVALID_SESSION_ID"


def _is_invalid_session(body: Any) -> bool:
    """Return True for the API's ``[{"errorCode": "INVALID_SESSION_ID", ...}]``."""
    if not isinstance(body, list) or not body:
        return False
    first = body[0]
    return isinstance(first, dict) and first.get("errorCode") == INVALID_SESSION_ERROR


def _soql_quote(value: str) -> str:
    """Escape a value for use inside a single-quoted SOQL literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class CommunityHubClient:
    """Synchronous Community Hub API client.

    Args:
        settings: Sync settings (credentials, API version, timeout)
        cache: Credential cache holding the token and instance URL
        http_client: Optional httpx client; one is created (and owned) if omitted
    """

    def __init__(
        self,
        settings: Settings,
        cache: CredentialCache,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client and its token manager."""
        self._settings = settings
        self._cache = cache
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=settings.timeout)
        self.token_manager = TokenManager(settings, cache, self._http)

    @property
    def api_version(self) -> str:
        """REST API version used in endpoint paths, e.g. '46.0'."""
        return self._settings.api_version

    def _headers(self, token: str) -> dict[str, str]:
        """Get request headers carrying the bearer token."""
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    def build_request(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
    ) -> httpx.Request:
        """Build an authenticated GET request.

        Endpoints starting with '/' are resolved against the cached instance
        URL. The token is looked up first because a first-time token exchange
        is what populates the instance URL.

        Raises:
            AuthenticationError: If no access token is available
            RequestBuildError: If the endpoint is relative and no instance URL
                is cached, or the resulting URL is malformed
        """
        token = self.token_manager.get_token()
        if not token:
            raise AuthenticationError("No access token available")

        url = endpoint
        if endpoint.startswith("/"):
            instance_url = self._cache.instance_url
            if not instance_url:
                raise RequestBuildError(f"No instance URL cached for {endpoint}")
            url = instance_url.rstrip("/") + endpoint

        try:
            return httpx.Request(
                "GET", url, params=params, headers=self._headers(token)
            )
        except httpx.InvalidURL as e:
            raise RequestBuildError(f"Invalid request URL for {endpoint}: {e}") from e

    def refresh_headers(self, request: httpx.Request) -> bool:
        """Replace the request's Authorization header using a forced token refresh.

        Returns:
            False if no new token could be obtained
        """
        token = self.token_manager.get_token(force=True)
        if not token:
            return False
        request.headers["Authorization"] = f"Bearer {token}"
        return True

    def _execute(self, request: httpx.Request) -> tuple[int, Any]:
        """Send a request once.

        Args:
            request: Prepared request

        Returns:
            Status code and decoded JSON body (None if empty or not JSON)
        """
        response = self._http.send(request)
        try:
            body = msgspec.json.decode(response.content) if response.content else None
        except msgspec.DecodeError:
            logger.debug("Response from %s is not valid JSON", request.url.path)
            body = None
        return response.status_code, body

    def fetch(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
    ) -> Any | None:
        """GET an API endpoint and return the decoded JSON body.

        On a non-200 INVALID_SESSION_ID answer the token is refreshed and the
        request is sent once more. A second failure is final.

        Returns:
            Decoded body on HTTP 200, otherwise None
        """
        try:
            request = self.build_request(endpoint, params)
        except (AuthenticationError, RequestBuildError) as e:
            logger.warning("Cannot build request for %s: %s", endpoint, e)
            return None

        try:
            status, body = self._execute(request)
            if status != 200 and _is_invalid_session(body):
                logger.info("Session invalid for %s, refreshing token", endpoint)
                if not self.refresh_headers(request):
                    logger.warning("Token refresh failed, giving up on %s", endpoint)
                    return None
                status, body = self._execute(request)
        except httpx.HTTPError as e:
            logger.error("Request to %s failed: %s", endpoint, e)
            return None

        if status != 200:
            logger.warning("Request to %s failed: status=%d", endpoint, status)
            return None
        return body

    def get_account(self, account_id: str) -> dict[str, Any] | None:
        """Fetch an Account record by id."""
        body = self.fetch(
            f"/services/data/v{self.api_version}/sobjects/Account/{account_id}"
        )
        if not isinstance(body, dict):
            return None
        return body

    def query_account_id(self, user_id: str) -> str | None:
        """Look up the AccountId of a remote User record."""
        soql = f"SELECT AccountId FROM User WHERE Id = '{_soql_quote(user_id)}'"
        body = self.fetch(
            f"/services/data/v{self.api_version}/query/",
            params={"q": soql},
        )
        if not isinstance(body, dict):
            return None

        records = body.get("records")
        if not isinstance(records, list) or not records:
            logger.info("No remote User found for id=%s", user_id)
            return None
        first = records[0]
        if not isinstance(first, dict):
            return None
        return first.get("AccountId") or None

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "CommunityHubClient":
        """Enter context manager."""
        return self

    def __exit__(self, *exc_info: object) -> None:
        """Exit context manager, closing an owned HTTP client."""
        self.close()
