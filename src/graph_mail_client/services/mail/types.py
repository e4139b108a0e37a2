from datetime import datetime
from typing import Optional, List, NamedTuple
from dataclasses import dataclass, field
import logging
import os
import re

from html2text import html2text

from .constants import BODY_TYPE_HTML
from ...utils.datetime import convert_datetime_to_readable

logger = logging.getLogger(__name__)


@dataclass
class EmailAddress:
    """
    Represents an email address with name and email.
    Args:
        email: The email address.
        name: The display name (optional).
    """
    email: str
    name: Optional[str] = None

    def __post_init__(self):
        if not self.email:
            raise ValueError("Email address cannot be empty.")
        if not self._is_valid_email(self.email):
            raise ValueError(f"Invalid email format: {self.email}")

    @staticmethod
    def _is_valid_email(email: str) -> bool:
        """Validate email format using regex."""
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return re.match(pattern, email) is not None

    def to_dict(self) -> dict:
        """
        Converts the EmailAddress instance to a Graph ``recipient`` representation.
        Returns:
            A dictionary containing the email address data.
        """
        address = {"address": self.email}
        if self.name:
            address["name"] = self.name
        return {"emailAddress": address}

    def __str__(self):
        if self.name:
            return f"{self.name} <{self.email}>"
        return self.email


@dataclass
class FileAttachment:
    """
    A file attachment on a message. Item and reference attachments are not modelled.
    Args:
        name: The attachment file name.
        content_type: The MIME type of the attachment.
        attachment_id: The Graph identifier of the attachment.
        size: The size of the attachment in bytes.
        is_inline: Whether the attachment is rendered inline in the body.
        content: The decoded attachment bytes, present only when requested.
    """
    name: str
    content_type: str
    attachment_id: Optional[str] = None
    size: int = 0
    is_inline: bool = False
    content: Optional[bytes] = field(default=None, repr=False)

    def __post_init__(self):
        if not self.name:
            raise ValueError("Attachment name cannot be empty")

    def to_dict(self) -> dict:
        return {
            "id": self.attachment_id,
            "name": self.name,
            "content_type": self.content_type,
            "size": self.size,
            "is_inline": self.is_inline,
        }

    def save_to(self, directory: str) -> str:
        """
        Writes the attachment content into ``directory`` under its own name.

        Security: Names containing path separators or resolving outside the
        directory (e.g. '../../../etc/passwd') are rejected.

        Args:
            directory: The destination directory, created if missing.

        Returns:
            The path of the written file.

        Raises:
            ValueError: If the content was not loaded or the name attempts path traversal.
        """
        if self.content is None:
            raise ValueError("Attachment content was not loaded. Fetch attachments with with_content=True.")

        if os.sep in self.name or (os.altsep and os.altsep in self.name):
            raise ValueError("Security error: Path separators not allowed in filename.")

        if not os.path.exists(directory):
            os.makedirs(directory)
        if not os.path.isdir(directory):
            raise ValueError(f"Provided path '{directory}' is not a directory.")

        resolved_directory = os.path.realpath(directory)
        file_path = os.path.join(directory, self.name)
        resolved_file_path = os.path.realpath(file_path)

        try:
            common_path = os.path.commonpath([resolved_directory, resolved_file_path])
        except ValueError:
            # Paths on different drives (Windows)
            raise ValueError("Security error: Path traversal detected in filename.")
        if common_path != resolved_directory or resolved_file_path == resolved_directory:
            raise ValueError("Security error: Path traversal detected in filename.")

        with open(file_path, 'wb') as f:
            f.write(self.content)

        logger.info("Saved attachment %s (%d bytes)", self.attachment_id, len(self.content))
        return file_path


@dataclass
class EmailMessage:
    """
    Read-only projection of a Graph message.
    Args:
        message_id: The Graph identifier of the message.
        subject: The subject line.
        body_content: The body, as HTML or text depending on body_content_type.
        body_content_type: ``html`` or ``text``.
        body_preview: The first characters of the body as plain text.
        sender: The account the message was sent from.
        from_address: The mailbox owner the message was sent on behalf of.
        to_recipients: The To recipients.
        cc_recipients: The Cc recipients.
        bcc_recipients: The Bcc recipients.
        received_date_time: When the message was received (local timezone).
        sent_date_time: When the message was sent (local timezone).
        created_date_time: When the message was created (local timezone).
        last_modified_date_time: When the message last changed (local timezone).
        is_read: Whether the message has been read.
        has_attachments: Whether the message has non-inline attachments.
        conversation_id: The conversation the message belongs to.
        internet_message_id: The RFC 5322 Message-ID.
        parent_folder_id: The folder the message lives in.
        web_link: Link to open the message in Outlook on the web.
        removed_reason: Set when a delta round reports the message as removed.
    """
    message_id: Optional[str] = None
    subject: Optional[str] = None
    body_content: Optional[str] = None
    body_content_type: Optional[str] = None
    body_preview: Optional[str] = None
    sender: Optional[EmailAddress] = None
    from_address: Optional[EmailAddress] = None
    to_recipients: List[EmailAddress] = field(default_factory=list)
    cc_recipients: List[EmailAddress] = field(default_factory=list)
    bcc_recipients: List[EmailAddress] = field(default_factory=list)
    received_date_time: Optional[datetime] = None
    sent_date_time: Optional[datetime] = None
    created_date_time: Optional[datetime] = None
    last_modified_date_time: Optional[datetime] = None
    is_read: Optional[bool] = None
    has_attachments: bool = False
    conversation_id: Optional[str] = None
    internet_message_id: Optional[str] = None
    parent_folder_id: Optional[str] = None
    web_link: Optional[str] = None
    removed_reason: Optional[str] = None

    @property
    def is_removed(self) -> bool:
        return self.removed_reason is not None

    @property
    def body_text(self) -> Optional[str]:
        """The body as plain text, rendering HTML bodies."""
        if self.body_content is None:
            return None
        if self.body_content_type == BODY_TYPE_HTML:
            return html2text(self.body_content)
        return self.body_content

    def get_recipient_emails(self) -> List[str]:
        """Returns the addresses of all To, Cc and Bcc recipients."""
        return [recipient.email for recipient in
                self.to_recipients + self.cc_recipients + self.bcc_recipients]

    def to_dict(self) -> dict:
        """
        Converts the EmailMessage instance to a dictionary representation.
        Returns:
            A dictionary containing the message data.
        """
        return {
            "message_id": self.message_id,
            "subject": self.subject,
            "body_content_type": self.body_content_type,
            "body_preview": self.body_preview,
            "sender": str(self.sender) if self.sender else None,
            "to_recipients": [str(r) for r in self.to_recipients],
            "cc_recipients": [str(r) for r in self.cc_recipients],
            "bcc_recipients": [str(r) for r in self.bcc_recipients],
            "received_date_time": self.received_date_time.isoformat() if self.received_date_time else None,
            "is_read": self.is_read,
            "has_attachments": self.has_attachments,
            "conversation_id": self.conversation_id,
            "removed_reason": self.removed_reason,
        }

    def __str__(self):
        received = convert_datetime_to_readable(self.received_date_time) if self.received_date_time else "Unknown"
        return (
            f"Subject: {self.subject or '(no subject)'}\n"
            f"From: {self.sender or 'Unknown'}\n"
            f"Received: {received}"
        )


class DeltaLink:
    """
    Opaque synchronization position issued by Graph (an ``@odata.deltaLink``).

    Store it with ``to_token()`` and rebuild it with ``DeltaLink.from_token()``;
    never build or edit the token by hand, its contents are server state.
    """

    __slots__ = ("_token",)

    def __init__(self, token: str):
        if not token:
            raise ValueError("Delta link cannot be empty.")
        self._token = token

    @classmethod
    def from_token(cls, token: str) -> "DeltaLink":
        return cls(token)

    def to_token(self) -> str:
        return self._token

    def __eq__(self, other):
        if not isinstance(other, DeltaLink):
            return NotImplemented
        return self._token == other._token

    def __hash__(self):
        return hash(self._token)

    def __repr__(self):
        return f"DeltaLink(<{len(self._token)} chars>)"


@dataclass
class DeltaPage:
    """
    One page of a delta response.
    Args:
        messages: The messages on this page, in server order.
        next_link: The ``@odata.nextLink`` when more pages follow.
        delta_link: The ``@odata.deltaLink`` on the final page.
    """
    messages: List[EmailMessage] = field(default_factory=list)
    next_link: Optional[str] = None
    delta_link: Optional[str] = None

    @property
    def is_final(self) -> bool:
        return bool(self.delta_link)


class DeltaChanges(NamedTuple):
    """Result of one delta round: the changed messages and the link for the next round."""
    messages: List[EmailMessage]
    delta_link: DeltaLink
