"""Password-grant access token acquisition for the Community Hub API.

The token is cached in a CredentialCache and reused until a caller asks for
a forced refresh, which happens when the API reports INVALID_SESSION_ID.
Retrying is the caller's job; this module makes at most one token request
per call.
"""

from __future__ import annotations

import httpx
import msgspec

from .config import Settings
from .credentials import CredentialCache
from .logging_config import get_logger

logger = get_logger("token_manager")


def _preview(token: str) -> str:
    """Shorten a token for log output."""
    return token[:8] + "..." if len(token) > 8 else "****"


class TokenManager:
    """Obtain and cache bearer tokens via the OAuth2 password grant.

    Example:
        >>> manager = TokenManager(settings, CredentialCache(store), http)
        >>> token = manager.get_token()
        >>> if not token:
        ...     return  # cannot sync
    """

    def __init__(
        self,
        settings: Settings,
        cache: CredentialCache,
        http_client: httpx.Client,
    ) -> None:
        """Initialize the token manager."""
        self._settings = settings
        self._cache = cache
        self._http = http_client

    @property
    def cache(self) -> CredentialCache:
        """The credential cache tokens are read from and written to."""
        return self._cache

    def get_token(self, force: bool = False) -> str:
        """Return an access token, or an empty string if none can be obtained.

        Args:
            force: Ignore the cached token and perform a new exchange

        Returns:
            The access token, or "" when credentials are incomplete or the
            exchange fails
        """
        if not force:
            cached = self._cache.access_token
            if cached:
                return cached
        else:
            logger.debug("Forced token refresh requested")
            self._cache.invalidate()

        creds = self._settings.credentials()
        if creds is None:
            logger.warning("Cannot request access token: API credentials incomplete")
            return ""

        try:
            response = self._http.post(
                creds.login_url,
                data={
                    "grant_type": "password",
                    "client_id": creds.client_id,
                    "client_secret": creds.client_secret,
                    "username": creds.username,
                    "password": creds.password,
                },
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Token request to %s failed: %s", creds.login_url, e)
            return ""

        if response.status_code != 200:
            logger.warning(
                "Token request rejected: status=%d, login_url=%s",
                response.status_code,
                creds.login_url,
            )
            return ""

        try:
            data = msgspec.json.decode(response.content)
        except msgspec.DecodeError as e:
            logger.error("Token response is not valid JSON: %s", e)
            return ""

        if not isinstance(data, dict):
            logger.error("Token response is not a JSON object")
            return ""

        instance_url = data.get("instance_url")
        if instance_url:
            self._cache.store_instance_url(instance_url)

        access_token = data.get("access_token")
        if not access_token:
            logger.warning("Token response did not contain an access_token")
            return ""

        self._cache.store_access_token(access_token)
        logger.info(
            "Obtained access token: token_preview=%s, instance_url=%s",
            _preview(access_token),
            self._cache.instance_url,
        )
        return access_token
