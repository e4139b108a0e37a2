from typing import Optional

from .base import APIError


class MailError(APIError):
    """
    Flattened error for mail operations.

    The message is human readable. The original structured error, when there
    was one, stays reachable through ``__cause__``.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MailNotFoundError(MailError):
    """Raised when a message, folder or mailbox does not exist."""
    pass


class MailPermissionError(MailError):
    """Raised when the application lacks permission for a mailbox operation."""
    pass


class DeltaLinkExpiredError(MailError):
    """Raised when a replayed delta link has expired or been invalidated upstream."""
    pass


class DeltaProtocolError(MailError):
    """Raised when a delta page breaks the next-link / delta-link contract."""
    pass
