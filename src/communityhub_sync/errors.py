"""Exceptions raised inside the Community Hub sync client.

None of these reach a host event handler: the fetch protocol and the sync
service catch them and degrade to a skipped sync.
"""


class CommunityHubSyncError(Exception):
    """Base class for all Community Hub sync errors."""


class ConfigurationError(CommunityHubSyncError):
    """Required settings are missing or invalid."""


class AuthenticationError(CommunityHubSyncError):
    """No access token could be obtained."""


class RequestBuildError(CommunityHubSyncError):
    """An API request could not be constructed (e.g. no instance URL)."""
