"""
Integration tests for mail workflows.

These tests run UserClient end to end with msal and the HTTP session replaced
by fakes, so every layer between the public API and the wire is exercised.
"""

import json
import pytest
from unittest.mock import Mock, patch

from src.graph_mail_client import UserClient, DeltaLink
from src.graph_mail_client.exceptions import (
    MailError, DeltaLinkExpiredError, InvalidCredentialsError, ODataError
)

GRAPH = "https://graph.microsoft.com/v1.0"
USER = "user@contoso.com"
USER_PATH = f"{GRAPH}/users/user%40contoso.com"
BASELINE_URL = f"{USER_PATH}/mailFolders/inbox/messages/delta"


class FakeGraphSession:
    """HTTP session answering from a table keyed by (method, url)."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, url, status=200, body=None):
        self.routes.setdefault((method, url), []).append((status, body))

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json,
                           "headers": headers, "timeout": timeout})
        status, body = self.routes[(method, url)].pop(0)
        return _response(status, body)


def _response(status, body):
    response = Mock()
    response.status_code = status
    response.content = json.dumps(body).encode() if body is not None else b''
    response.json.return_value = body
    return response


@pytest.fixture
def fake_session():
    session = FakeGraphSession()
    with patch('src.graph_mail_client.services.adapter.requests.Session', return_value=session):
        yield session


@pytest.fixture
def mock_msal():
    with patch('src.graph_mail_client.auth.manager.msal.ConfidentialClientApplication') as mock_cls:
        app = Mock()
        app.acquire_token_for_client.return_value = {"access_token": "graph-token"}
        mock_cls.return_value = app
        yield app


@pytest.fixture
def client(fake_session, mock_msal):
    return UserClient.from_credentials("client-id", "client-secret", "tenant-id")


@pytest.mark.integration
class TestDeltaSyncWorkflow:
    """Baseline then repeated change rounds."""

    def test_full_sync_cycle(self, client, fake_session, graph_message_factory):
        fake_session.add("GET", BASELINE_URL, body={
            "value": [graph_message_factory("old-1")],
            "@odata.nextLink": f"{BASELINE_URL}?$skiptoken=p2",
        })
        fake_session.add("GET", f"{BASELINE_URL}?$skiptoken=p2", body={
            "value": [graph_message_factory("old-2")],
            "@odata.deltaLink": f"{BASELINE_URL}?$deltatoken=d1",
        })
        fake_session.add("GET", f"{BASELINE_URL}?$deltatoken=d1", body={
            "value": [graph_message_factory("new-1", subject="Fresh")],
            "@odata.nextLink": f"{BASELINE_URL}?$skiptoken=p3",
        })
        fake_session.add("GET", f"{BASELINE_URL}?$skiptoken=p3", body={
            "value": [{"id": "old-1", "@removed": {"reason": "deleted"}}],
            "@odata.deltaLink": f"{BASELINE_URL}?$deltatoken=d2",
        })
        fake_session.add("GET", f"{BASELINE_URL}?$deltatoken=d2", body={
            "value": [],
            "@odata.deltaLink": f"{BASELINE_URL}?$deltatoken=d3",
        })

        link = client.mail.get_delta_link(USER, "inbox", max_page_size=25)
        messages, link = client.mail.get_messages_delta(link, USER)

        assert [m.message_id for m in messages] == ["new-1", "old-1"]
        assert messages[0].subject == "Fresh"
        assert messages[1].is_removed

        # The stored token resumes the next round
        stored = link.to_token()
        messages, link = client.mail.get_messages_delta(DeltaLink.from_token(stored), USER)
        assert messages == []
        assert link.to_token() == f"{BASELINE_URL}?$deltatoken=d3"

        first, second = fake_session.calls[0], fake_session.calls[1]
        assert first["params"] == {"changeType": "created"}
        assert second["params"] is None
        assert first["headers"]["Authorization"] == "Bearer graph-token"
        assert first["headers"]["Prefer"] == "odata.maxpagesize=25"
        assert second["headers"]["Prefer"] == "odata.maxpagesize=25"
        assert "Prefer" not in fake_session.calls[2]["headers"]
        assert all(call["timeout"] == 60 for call in fake_session.calls)

    def test_expired_link_requires_new_baseline(self, client, fake_session):
        expired = f"{BASELINE_URL}?$deltatoken=old"
        fake_session.add("GET", expired, status=410, body={
            "error": {"code": "SyncStateNotFound", "message": "The sync state is no longer valid."}
        })

        with pytest.raises(DeltaLinkExpiredError) as exc_info:
            client.mail.get_messages_delta(DeltaLink(expired), USER)

        assert isinstance(exc_info.value.__cause__, ODataError)
        assert exc_info.value.__cause__.code == "SyncStateNotFound"

    def test_failed_round_can_be_retried(self, client, fake_session, graph_message_factory):
        start = f"{BASELINE_URL}?$deltatoken=d1"
        page2 = f"{BASELINE_URL}?$skiptoken=p2"
        for _ in range(2):
            fake_session.add("GET", start, body={
                "value": [graph_message_factory("m1")], "@odata.nextLink": page2,
            })
        fake_session.add("GET", page2, status=503, body=None)
        fake_session.add("GET", page2, body={
            "value": [graph_message_factory("m2")], "@odata.deltaLink": f"{BASELINE_URL}?$deltatoken=d2",
        })

        with pytest.raises(MailError, match="Graph API returned HTTP 503"):
            client.mail.get_messages_delta(DeltaLink(start))

        messages, link = client.mail.get_messages_delta(DeltaLink(start))
        assert [m.message_id for m in messages] == ["m1", "m2"]
        assert link == DeltaLink(f"{BASELINE_URL}?$deltatoken=d2")


@pytest.mark.integration
class TestMessageWorkflow:
    """Read a message, its attachments, and reply by sending mail."""

    def test_read_download_and_send(self, client, fake_session, sample_graph_message,
                                    sample_graph_attachments, tmp_path):
        fake_session.add("GET", f"{USER_PATH}/messages/msg_123", body=sample_graph_message)
        fake_session.add("GET", f"{USER_PATH}/messages/msg_123/attachments", body=sample_graph_attachments)
        fake_session.add("POST", f"{USER_PATH}/sendMail", status=202)

        message = client.mail.get_message(USER, "msg_123")
        assert message.subject == "Test Email Subject"
        assert message.body_text.strip() == "This is a test email body."

        attachments = client.mail.get_attachments(USER, message.message_id, with_content=True)
        path = attachments[0].save_to(str(tmp_path))
        with open(path, 'rb') as f:
            assert f.read() == b"PDF content"

        client.mail.send_message(
            message.sender.email, USER,
            subject=f"Re: {message.subject}",
            content="Thanks",
            content_type="text"
        )

        sent = fake_session.calls[-1]["json"]["message"]
        assert sent["subject"] == "Re: Test Email Subject"
        assert sent["toRecipients"] == [{"emailAddress": {"address": "sender@example.com"}}]

    def test_one_adapter_shared_across_calls(self, client, fake_session, sample_graph_message, mock_msal):
        fake_session.add("GET", f"{USER_PATH}/messages/msg_123", body=sample_graph_message)
        fake_session.add("GET", f"{USER_PATH}/messages/msg_123", body=sample_graph_message)

        client.mail.get_message(USER, "msg_123")
        client.mail.get_message(USER, "msg_123")

        assert client.get_mail_service() is client.get_mail_service()
        assert mock_msal.acquire_token_for_client.call_count == 2


@pytest.mark.integration
class TestAuthenticationWorkflow:

    def test_rejected_secret_surfaces_on_first_call(self, client, fake_session, mock_msal):
        mock_msal.acquire_token_for_client.return_value = {
            "error": "invalid_client",
            "error_description": "AADSTS7000215: Invalid client secret provided.",
        }

        with pytest.raises(MailError, match="Invalid client secret") as exc_info:
            client.mail.get_message(USER, "msg_123")

        assert isinstance(exc_info.value.__cause__, InvalidCredentialsError)
        assert fake_session.calls == []

    def test_from_env(self, monkeypatch, fake_session, mock_msal):
        monkeypatch.setenv("CLIENT_ID", "client-id")
        monkeypatch.setenv("CLIENT_SECRET", "client-secret")
        monkeypatch.setenv("TENANT_ID", "tenant-id")

        client = UserClient.from_env()

        assert client.auth_manager.get_access_token() == "graph-token"
