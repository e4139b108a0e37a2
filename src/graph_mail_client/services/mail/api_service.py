from typing import Optional, List, Union
import logging

from ..adapter import GraphRequestAdapter, RequestInformation, DEFAULT_ERROR_MAPPING
from ...exceptions import ValidationError, MailError
from ...utils.log_sanitizer import sanitize_for_logging
from .types import EmailMessage, FileAttachment, DeltaLink, DeltaChanges
from .delta import DeltaSynchronizer
from .constants import BODY_TYPE_HTML
from . import utils

logger = logging.getLogger(__name__)


def _require_ids(**ids) -> None:
    for name, value in ids.items():
        if not value:
            raise ValidationError(f"{name} cannot be empty")


class MailApiService:
    """
    Service layer for Graph mail operations.
    """

    def __init__(self, adapter: GraphRequestAdapter):
        """
        Initialize mail service.

        Args:
            adapter: The Graph request adapter to send requests through
        """
        self._adapter = adapter

    def synchronizer(self, user_id: str) -> DeltaSynchronizer:
        """
        Create a DeltaSynchronizer bound to a mailbox and this service's adapter.

        Args:
            user_id: Mailbox owner id or user principal name.

        Returns:
            DeltaSynchronizer instance
        """
        return DeltaSynchronizer(self._adapter, user_id)

    def get_delta_link(self, user_id: str, folder_id: str, max_page_size: Optional[int] = None) -> DeltaLink:
        """
        Establishes a delta link for a mail folder, skipping existing messages.

        Args:
            user_id: Mailbox owner id or user principal name.
            folder_id: Mail folder id or well-known name.
            max_page_size: Preferred page size for the baseline traversal.

        Returns:
            The DeltaLink to pass to get_messages_delta.
        """
        return self.synchronizer(user_id).establish_baseline(folder_id, max_page_size=max_page_size)

    def get_messages_delta(self, delta_link: Union[DeltaLink, str], user_id: str = "me") -> DeltaChanges:
        """
        Retrieves the messages changed since a delta link was issued.

        The link already identifies the mailbox; user_id is only used for logging.

        Args:
            delta_link: A DeltaLink (or stored token) from get_delta_link or an earlier round.
            user_id: Mailbox owner id, if known.

        Returns:
            DeltaChanges(messages, delta_link) for the next round.
        """
        return self.synchronizer(user_id).fetch_changes(delta_link)

    def get_message(self, user_id: str, message_id: str) -> EmailMessage:
        """
        Retrieves a specific message using its unique identifier.

        Args:
            user_id: Mailbox owner id or user principal name.
            message_id: The unique identifier of the message to be retrieved.

        Returns:
            An EmailMessage object representing the message with the specified ID.
        """
        _require_ids(user_id=user_id, message_id=message_id)

        sanitized = sanitize_for_logging(user_id=user_id, message_id=message_id)
        logger.info("Retrieving message %s for user %s", sanitized['message_id'], sanitized['user_id'])

        request_info = RequestInformation(
            url_template="/users/{user_id}/messages/{message_id}",
            path_parameters={"user_id": user_id, "message_id": message_id}
        )
        try:
            graph_message = self._adapter.send(request_info, DEFAULT_ERROR_MAPPING)
        except Exception as e:
            logger.error("Error retrieving message: %s", e)
            raise utils.parse_error(e) from e

        if not isinstance(graph_message, dict):
            raise MailError("Graph returned no message body")

        logger.info("Message retrieved successfully")
        return utils.from_graph_message(graph_message)

    def get_attachments(self, user_id: str, message_id: str, with_content: bool = False) -> List[FileAttachment]:
        """
        Lists the file attachments of a message.

        Item and reference attachments are skipped.

        Args:
            user_id: Mailbox owner id or user principal name.
            message_id: The message whose attachments to list.
            with_content: Whether to decode and include the attachment bytes.

        Returns:
            A list of FileAttachment objects, in server order.
        """
        _require_ids(user_id=user_id, message_id=message_id)

        sanitized = sanitize_for_logging(user_id=user_id, message_id=message_id)
        logger.info("Fetching attachments of message %s for user %s, with_content=%s",
                    sanitized['message_id'], sanitized['user_id'], with_content)

        request_info = RequestInformation(
            url_template="/users/{user_id}/messages/{message_id}/attachments",
            path_parameters={"user_id": user_id, "message_id": message_id}
        )
        try:
            result = self._adapter.send(request_info, DEFAULT_ERROR_MAPPING)
        except Exception as e:
            logger.error("Error fetching attachments: %s", e)
            raise utils.parse_error(e) from e

        if not isinstance(result, dict):
            raise MailError("Graph returned no attachment collection")

        attachments = []
        for graph_attachment in result.get('value') or []:
            try:
                attachment = utils.from_graph_attachment(graph_attachment, with_content=with_content)
            except ValueError as e:
                logger.warning("Skipping invalid attachment: %s", e)
                continue
            if attachment is not None:
                attachments.append(attachment)

        logger.info("Found %s", sanitize_for_logging(attachments=attachments)['attachments'])
        return attachments

    def send_message(
            self,
            to: Union[str, List[str]],
            sender: str,
            subject: Optional[str] = None,
            content: Optional[str] = None,
            cc: Optional[List[str]] = None,
            bcc: Optional[List[str]] = None,
            content_type: str = BODY_TYPE_HTML,
            save_to_sent_items: bool = True
    ) -> None:
        """
        Sends a new email message from a mailbox.

        Args:
            to: Recipient address or list of addresses.
            sender: Mailbox to send from (id or user principal name).
            subject: The subject line of the email.
            content: The body of the email.
            cc: List of CC recipient email addresses (optional).
            bcc: List of BCC recipient email addresses (optional).
            content_type: ``html`` (default) or ``text``.
            save_to_sent_items: Whether to keep a copy in Sent Items.
        """
        _require_ids(sender=sender)

        recipients = [to] if isinstance(to, str) else list(to or [])
        sanitized = sanitize_for_logging(subject=subject, to=recipients, sender=sender)
        logger.info("Sending message with subject=%s, to=%s, from=%s",
                    sanitized['subject'], sanitized['to'], sanitized['sender'])

        body = utils.create_send_mail_body(
            to=recipients,
            subject=subject,
            content=content,
            cc=cc,
            bcc=bcc,
            content_type=content_type,
            save_to_sent_items=save_to_sent_items
        )
        request_info = RequestInformation(
            method="POST",
            url_template="/users/{user_id}/sendMail",
            path_parameters={"user_id": sender},
            body=body
        )
        try:
            self._adapter.send(request_info, DEFAULT_ERROR_MAPPING)
        except Exception as e:
            logger.error("Error sending message: %s", e)
            raise utils.parse_error(e) from e

        logger.info("Message sent successfully")
