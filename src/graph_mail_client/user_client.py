"""
User-centric Graph mail client.

One UserClient wraps one application identity and gives access to the mail
operations of every mailbox that identity is allowed to read or send from.
"""

from typing import Optional, List, Union

from .auth.credentials import Credentials
from .auth.manager import AuthManager


class UserClient:
    """
    Entry point for Graph mail operations.

    Usage Examples:
        # Credentials from CLIENT_ID / CLIENT_SECRET / TENANT_ID
        client = UserClient.from_env()
        message = client.mail.get_message("user@contoso.com", message_id)

        # Delta synchronization of a folder
        link = client.mail.get_delta_link("user@contoso.com", "inbox")
        messages, link = client.mail.get_messages_delta(link)

        # Explicit credentials
        client = UserClient.from_credentials(client_id, client_secret, tenant_id)
        client.mail.send_message("to@contoso.com", "from@contoso.com", "Hi", "<p>Hello</p>")
    """

    def __init__(self, auth_manager: AuthManager):
        """
        Initialize the client with an authentication manager.

        Args:
            auth_manager: Token provider for the application identity
        """
        self._auth_manager = auth_manager
        self._mail_service = None

        self.mail = MailServiceProxy(self)

    @classmethod
    def from_env(cls) -> "UserClient":
        """
        Create a UserClient from the CLIENT_ID, CLIENT_SECRET and TENANT_ID environment variables.

        Returns:
            UserClient instance
        """
        return cls(AuthManager(Credentials.from_env()))

    @classmethod
    def from_credentials(cls, client_id: str, client_secret: str, tenant_id: str,
                         scopes: Optional[List[str]] = None) -> "UserClient":
        """
        Create a UserClient from explicit application credentials.

        Args:
            client_id: The application (client) id
            client_secret: A client secret of the application
            tenant_id: The directory (tenant) id
            scopes: Scopes to request (defaults to Graph .default)

        Returns:
            UserClient instance
        """
        credentials = Credentials(client_id=client_id, client_secret=client_secret, tenant_id=tenant_id)
        return cls(AuthManager(credentials, scopes))

    @property
    def auth_manager(self) -> AuthManager:
        return self._auth_manager

    def get_mail_service(self):
        """Get or create the mail service for this client."""
        if self._mail_service is None:
            from .services.mail.api_service import MailApiService
            self._mail_service = MailApiService(self._auth_manager.get_request_adapter())
        return self._mail_service


class MailServiceProxy:
    """Proxy that provides clean access to mail operations."""

    def __init__(self, user_client: UserClient):
        self._user_client = user_client

    def synchronizer(self, user_id: str):
        """Create a delta synchronizer for a mailbox."""
        return self._user_client.get_mail_service().synchronizer(user_id)

    def get_delta_link(self, user_id: str, folder_id: str, max_page_size: Optional[int] = None):
        """Establish a delta link for a folder, skipping existing messages."""
        return self._user_client.get_mail_service().get_delta_link(user_id, folder_id, max_page_size)

    def get_messages_delta(self, delta_link, user_id: str = "me"):
        """Fetch messages changed since a delta link, with the link for the next round."""
        return self._user_client.get_mail_service().get_messages_delta(delta_link, user_id)

    def get_message(self, user_id: str, message_id: str):
        """Get a specific message."""
        return self._user_client.get_mail_service().get_message(user_id, message_id)

    def get_attachments(self, user_id: str, message_id: str, with_content: bool = False):
        """List the file attachments of a message."""
        return self._user_client.get_mail_service().get_attachments(user_id, message_id, with_content)

    def send_message(self, to: Union[str, List[str]], sender: str, subject: Optional[str] = None,
                     content: Optional[str] = None, **kwargs):
        """Send a message from a mailbox."""
        return self._user_client.get_mail_service().send_message(
            to, sender, subject=subject, content=content, **kwargs
        )
