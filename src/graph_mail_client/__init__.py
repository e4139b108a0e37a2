"""Thin client for Microsoft Graph mail: delta sync, messages, attachments and sending."""

from .user_client import UserClient
from .auth import Credentials, AuthManager
from .services.adapter import GraphRequestAdapter, RequestInformation
from .services.mail import (
    MailApiService, DeltaSynchronizer,
    EmailMessage, EmailAddress, FileAttachment, DeltaLink, DeltaPage, DeltaChanges
)

__version__ = "0.1.0"

__all__ = [
    "UserClient",
    "Credentials",
    "AuthManager",
    "GraphRequestAdapter",
    "RequestInformation",
    "MailApiService",
    "DeltaSynchronizer",
    "EmailMessage",
    "EmailAddress",
    "FileAttachment",
    "DeltaLink",
    "DeltaPage",
    "DeltaChanges",
]
