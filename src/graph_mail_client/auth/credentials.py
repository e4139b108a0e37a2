import os
from dataclasses import dataclass, field

from ..exceptions import InvalidCredentialsError

CLIENT_ID_ENV = "CLIENT_ID"
CLIENT_SECRET_ENV = "CLIENT_SECRET"
TENANT_ID_ENV = "TENANT_ID"


@dataclass(frozen=True)
class Credentials:
    """
    Client credentials of an Entra ID (Azure AD) application.
    Args:
        client_id: The application (client) id.
        client_secret: A client secret of the application.
        tenant_id: The directory (tenant) id the application lives in.
    """
    client_id: str
    client_secret: str = field(repr=False)
    tenant_id: str

    @classmethod
    def from_env(cls) -> "Credentials":
        """
        Reads credentials from the CLIENT_ID, CLIENT_SECRET and TENANT_ID environment variables.

        Raises:
            InvalidCredentialsError: If any of them is missing or empty.
        """
        values = {name: os.getenv(name, "").strip()
                  for name in (CLIENT_ID_ENV, CLIENT_SECRET_ENV, TENANT_ID_ENV)}
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise InvalidCredentialsError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        return cls(
            client_id=values[CLIENT_ID_ENV],
            client_secret=values[CLIENT_SECRET_ENV],
            tenant_id=values[TENANT_ID_ENV]
        )
