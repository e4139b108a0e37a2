import pytest
import sys
from pathlib import Path
from unittest.mock import Mock

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

GRAPH = "https://graph.microsoft.com/v1.0"


class StubGraphAdapter:
    """
    Stand-in for GraphRequestAdapter that serves canned responses keyed by URL.

    A route value is either a response body (dict), a list of bodies served
    one per call, or an exception instance to raise.
    """

    def __init__(self, routes=None, base_url=GRAPH):
        self.routes = dict(routes or {})
        self.base_url = base_url
        self.requests = []

    def send(self, request_info, error_mapping=None):
        url = request_info.get_url(self.base_url)
        self.requests.append(request_info)
        if url not in self.routes:
            raise AssertionError(f"Unexpected request to {url}")

        response = self.routes[url]
        if isinstance(response, list):
            response = response.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def urls(self):
        return [request.get_url(self.base_url) for request in self.requests]


@pytest.fixture
def stub_adapter():
    """Empty stub adapter; tests add routes."""
    return StubGraphAdapter()


@pytest.fixture
def mock_auth_provider():
    """Auth provider returning a fixed token."""
    provider = Mock()
    provider.get_access_token.return_value = "test-access-token"
    return provider


def make_graph_message(message_id, subject="Test Email Subject", **overrides):
    """Builds a Graph message resource."""
    message = {
        "id": message_id,
        "subject": subject,
        "bodyPreview": "This is a test email body.",
        "body": {"contentType": "html", "content": "<p>This is a test email body.</p>"},
        "sender": {"emailAddress": {"name": "Sender", "address": "sender@example.com"}},
        "from": {"emailAddress": {"name": "Sender", "address": "sender@example.com"}},
        "toRecipients": [{"emailAddress": {"name": "Recipient", "address": "recipient@example.com"}}],
        "ccRecipients": [],
        "bccRecipients": [],
        "receivedDateTime": "2025-01-15T14:00:00Z",
        "sentDateTime": "2025-01-15T13:59:58Z",
        "isRead": False,
        "hasAttachments": False,
        "conversationId": "conv_123",
        "internetMessageId": "<msg123@example.com>",
        "parentFolderId": "inbox_folder",
        "webLink": "https://outlook.office365.com/owa/?ItemID=" + message_id,
    }
    message.update(overrides)
    return message


@pytest.fixture
def graph_message_factory():
    """Factory for Graph message resources."""
    return make_graph_message


@pytest.fixture
def sample_graph_message():
    """Sample Graph API message response."""
    return make_graph_message("msg_123")


@pytest.fixture
def sample_graph_attachments():
    """Sample Graph attachments collection with mixed attachment kinds."""
    return {
        "value": [
            {
                "@odata.type": "#microsoft.graph.fileAttachment",
                "id": "att_1",
                "name": "report.pdf",
                "contentType": "application/pdf",
                "size": 11,
                "isInline": False,
                "contentBytes": "UERGIGNvbnRlbnQ=",  # Base64: "PDF content"
            },
            {
                "@odata.type": "#microsoft.graph.itemAttachment",
                "id": "att_2",
                "name": "Forwarded meeting",
                "contentType": None,
                "size": 2048,
                "isInline": False,
            },
            {
                "@odata.type": "#microsoft.graph.fileAttachment",
                "id": "att_3",
                "name": "logo.png",
                "contentType": "image/png",
                "size": 4,
                "isInline": True,
                "contentBytes": "iVBORw==",
            },
            {
                "@odata.type": "#microsoft.graph.referenceAttachment",
                "id": "att_4",
                "name": "shared.docx",
                "contentType": None,
                "size": 0,
            },
        ]
    }


@pytest.fixture
def odata_error_payload():
    """Sample Graph error body."""
    return {
        "error": {
            "code": "ErrorItemNotFound",
            "message": "The specified object was not found in the store.",
            "innerError": {"request-id": "req-1", "date": "2025-01-15T14:00:00"},
        }
    }
