"""
Authentication manager for the Graph mail client.

Acquires application (client credentials) tokens for Microsoft Graph through
msal and hands out a request adapter bound to those tokens.
"""

import logging
from typing import Optional, List

import msal
import requests

from .credentials import Credentials
from ..exceptions import AuthenticationError, InvalidCredentialsError, ScopeError

logger = logging.getLogger(__name__)

# Configuration
SCOPES = ["https://graph.microsoft.com/.default"]
AUTHORITY_URL = "https://login.microsoftonline.com/{tenant_id}"

_CREDENTIAL_ERRORS = ("invalid_client", "unauthorized_client", "invalid_request")
_SCOPE_ERRORS = ("invalid_scope",)


class AuthManager:
    """
    Token provider for one application identity.

    Each manager owns its msal application and token cache; create one per
    identity and inject it where it is needed.
    """

    def __init__(self, credentials: Credentials, scopes: Optional[List[str]] = None):
        """
        Args:
            credentials: The application's client credentials.
            scopes: Scopes to request; defaults to the Graph ``.default`` scope.

        Raises:
            AuthenticationError: If the msal application cannot be created
                (unknown tenant, unreachable authority).
        """
        self._credentials = credentials
        self._scopes = list(scopes or SCOPES)
        self._adapter = None

        authority = AUTHORITY_URL.format(tenant_id=credentials.tenant_id)
        try:
            self._app = msal.ConfidentialClientApplication(
                credentials.client_id,
                client_credential=credentials.client_secret,
                authority=authority
            )
        except (ValueError, requests.RequestException) as e:
            logger.error("Failed to create confidential client for tenant %s: %s", credentials.tenant_id, e)
            raise AuthenticationError(f"Failed to initialize authentication: {e}") from e

        logger.info("Authentication initialized for client %s", credentials.client_id)

    @property
    def scopes(self) -> List[str]:
        return list(self._scopes)

    def get_access_token(self, force_refresh: bool = False) -> str:
        """
        Get an access token for Graph.

        msal serves cached tokens until shortly before they expire.

        Args:
            force_refresh: Skip the token cache and request a new token

        Returns:
            The bearer access token

        Raises:
            InvalidCredentialsError: If the client id or secret is rejected.
            ScopeError: If the scopes are not granted to the application.
            AuthenticationError: For any other token endpoint failure.
        """
        if force_refresh:
            logger.info("Forcing access token refresh")
            self._app.remove_tokens_for_client()

        result = self._app.acquire_token_for_client(scopes=self._scopes)

        if result and "access_token" in result:
            return result["access_token"]

        result = result or {}
        error = result.get("error", "unknown_error")
        description = result.get("error_description") or error
        logger.error("Failed to acquire access token: %s", error)

        if error in _CREDENTIAL_ERRORS:
            raise InvalidCredentialsError(description)
        if error in _SCOPE_ERRORS:
            raise ScopeError(description)
        raise AuthenticationError(description)

    def get_request_adapter(self):
        """
        Get the Graph request adapter bound to this manager.

        Returns:
            GraphRequestAdapter instance, created once and reused
        """
        if self._adapter is None:
            from ..services.adapter import GraphRequestAdapter
            self._adapter = GraphRequestAdapter(self)
        return self._adapter
