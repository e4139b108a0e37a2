class GraphClientError(Exception):
    """Base exception for all Graph mail client errors."""
    pass


class AuthenticationError(GraphClientError):
    """Raised when authentication fails."""
    pass


class APIError(GraphClientError):
    """Raised when API calls fail."""
    pass


class ValidationError(GraphClientError):
    """Raised when input validation fails."""
    pass
