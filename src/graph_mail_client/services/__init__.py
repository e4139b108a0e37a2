"""Microsoft Graph API services."""

from .adapter import GraphRequestAdapter, RequestInformation
from . import mail

__all__ = [
    "GraphRequestAdapter",
    "RequestInformation",
    "mail",
]
