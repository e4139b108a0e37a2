"""Mail service module for Microsoft Graph integration."""

from .api_service import MailApiService
from .delta import DeltaSynchronizer
from .types import EmailMessage, EmailAddress, FileAttachment, DeltaLink, DeltaPage, DeltaChanges

__all__ = [
    # Service layer
    "MailApiService",
    "DeltaSynchronizer",

    # Data types
    "EmailMessage",
    "EmailAddress",
    "FileAttachment",
    "DeltaLink",
    "DeltaPage",
    "DeltaChanges",
]
