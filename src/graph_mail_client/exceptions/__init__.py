from .base import GraphClientError, AuthenticationError, APIError, ValidationError
from .auth import InvalidCredentialsError, ScopeError
from .odata import ODataError
from .mail import (
    MailError, MailNotFoundError, MailPermissionError,
    DeltaLinkExpiredError, DeltaProtocolError
)

__all__ = [
    "GraphClientError",
    "AuthenticationError",
    "APIError",
    "ValidationError",
    "InvalidCredentialsError",
    "ScopeError",
    "ODataError",
    "MailError",
    "MailNotFoundError",
    "MailPermissionError",
    "DeltaLinkExpiredError",
    "DeltaProtocolError",
]
