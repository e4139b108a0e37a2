"""Authentication for the Graph mail client."""

from .credentials import Credentials
from .manager import AuthManager

__all__ = [
    "Credentials",
    "AuthManager",
]
