from .base import AuthenticationError


class InvalidCredentialsError(AuthenticationError):
    """Raised when client credentials are missing, invalid or revoked."""
    pass


class ScopeError(AuthenticationError):
    """Raised when the requested application scopes are not granted."""
    pass
