import pytest
import requests
from datetime import datetime
from unittest.mock import patch

from src.graph_mail_client.__main__ import main
from src.graph_mail_client.services.mail.types import EmailMessage
from src.graph_mail_client.exceptions import InvalidCredentialsError, MailNotFoundError


@pytest.fixture
def mock_user_client():
    with patch('src.graph_mail_client.__main__.UserClient') as mock_cls:
        yield mock_cls


@pytest.fixture(autouse=True)
def message_env(monkeypatch):
    monkeypatch.setenv("USER_ID", "user@contoso.com")
    monkeypatch.setenv("MESSAGE_ID", "msg_123")


@pytest.mark.unit
class TestMain:

    def test_prints_message(self, mock_user_client, capsys):
        client = mock_user_client.from_env.return_value
        client.mail.get_message.return_value = EmailMessage(
            message_id="msg_123",
            subject="Quarterly report",
            body_content="<p>Numbers attached</p>",
            body_content_type="html",
            received_date_time=datetime(2025, 1, 15, 14, 0, 0)
        )

        assert main() == 0

        client.mail.get_message.assert_called_once_with("user@contoso.com", "msg_123")
        assert capsys.readouterr().out == (
            "Subject: Quarterly report\n"
            "Body: <p>Numbers attached</p>\n"
            "Received: 2025-01-15 14:00:00\n"
        )

    def test_missing_credentials(self, mock_user_client, capsys):
        mock_user_client.from_env.side_effect = InvalidCredentialsError(
            "Missing required environment variables: CLIENT_SECRET"
        )

        assert main() == 1
        assert capsys.readouterr().out == (
            "Error creating service: Missing required environment variables: CLIENT_SECRET\n"
        )

    def test_message_not_found(self, mock_user_client, capsys):
        client = mock_user_client.from_env.return_value
        client.mail.get_message.side_effect = MailNotFoundError("The specified object was not found in the store.",
                                                                status_code=404)

        assert main() == 1
        assert capsys.readouterr().out == "Error getting message: The specified object was not found in the store.\n"

    def test_unreachable_authority(self, monkeypatch, capsys):
        monkeypatch.setenv("CLIENT_ID", "client-id")
        monkeypatch.setenv("CLIENT_SECRET", "client-secret")
        monkeypatch.setenv("TENANT_ID", "tenant-id")

        with patch('src.graph_mail_client.auth.manager.msal.ConfidentialClientApplication',
                   side_effect=requests.ConnectionError("authority unreachable")):
            assert main() == 1

        assert capsys.readouterr().out.startswith("Error creating service: Failed to initialize authentication")
