class GoogleAPIError(Exception):
    """A Google call failed or returned something unusable."""


class GoogleNotConfigured(GoogleAPIError):
    """OAuth client credentials are missing from settings."""


class GoogleTokenExpired(GoogleAPIError):
    """The stored refresh token was rejected; the user must reconnect."""
