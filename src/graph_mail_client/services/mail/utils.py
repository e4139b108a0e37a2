from typing import Optional, List, Dict, Any, Union
import base64
import logging
import re

import requests

from .types import EmailMessage, EmailAddress, FileAttachment, DeltaPage
from .constants import (
    ODATA_NEXT_LINK, ODATA_DELTA_LINK, ODATA_TYPE, ODATA_REMOVED, FILE_ATTACHMENT_TYPE,
    BODY_TYPE_HTML, BODY_TYPE_TEXT, MAX_SUBJECT_LENGTH, MAX_BODY_LENGTH
)
from ...exceptions import (
    ODataError, ValidationError, MailError, MailNotFoundError, MailPermissionError,
    DeltaLinkExpiredError
)
from ...utils.datetime import parse_graph_datetime, convert_datetime_to_local_timezone

logger = logging.getLogger(__name__)

_STATUS_ERRORS = {
    403: MailPermissionError,
    404: MailNotFoundError,
    410: DeltaLinkExpiredError,
}


def is_valid_email(email: str) -> bool:
    """Validate email format using regex."""
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return re.match(pattern, email) is not None


def parse_error(err: Exception) -> MailError:
    """
    Flattens any failure from a Graph call into a MailError.

    The message comes from the Graph error payload when there is one, else
    from the exception text. Callers should ``raise parse_error(e) from e`` so
    the structured error stays reachable via ``__cause__``.
    """
    if isinstance(err, MailError):
        return err

    status_code = None
    message = str(err)
    if isinstance(err, ODataError):
        status_code = err.status_code
        if err.message:
            message = err.message
    elif isinstance(err, requests.HTTPError) and err.response is not None:
        status_code = err.response.status_code

    error_class = _STATUS_ERRORS.get(status_code, MailError)
    return error_class(message, status_code=status_code)


def _parse_recipient(recipient: Optional[Dict[str, Any]]) -> Optional[EmailAddress]:
    if not recipient:
        return None
    address = recipient.get('emailAddress') or {}
    email = address.get('address')
    if not email:
        return None
    try:
        return EmailAddress(email=email, name=address.get('name') or None)
    except ValueError as e:
        logger.warning("Skipping invalid email address: %s", e)
        return None


def _parse_recipients(recipients: Optional[List[Dict[str, Any]]]) -> List[EmailAddress]:
    parsed = []
    for recipient in recipients or []:
        email_address = _parse_recipient(recipient)
        if email_address:
            parsed.append(email_address)
    return parsed


def _parse_local_datetime(value: Optional[str]):
    try:
        date_time = parse_graph_datetime(value)
    except ValueError:
        logger.warning("Failed to parse date: %s", value)
        return None
    return convert_datetime_to_local_timezone(date_time) if date_time else None


def from_graph_message(graph_message: Dict[str, Any]) -> EmailMessage:
    """
    Creates an EmailMessage instance from a Graph API message resource.
    Args:
        graph_message: A dictionary containing message data from the Graph API.

    Returns:
        An EmailMessage instance populated with the data from the dictionary.
    """
    body = graph_message.get('body') or {}
    removed = graph_message.get(ODATA_REMOVED)
    content_type = body.get('contentType')

    return EmailMessage(
        message_id=graph_message.get('id'),
        subject=graph_message.get('subject'),
        body_content=body.get('content'),
        body_content_type=content_type.lower() if content_type else None,
        body_preview=graph_message.get('bodyPreview'),
        sender=_parse_recipient(graph_message.get('sender')),
        from_address=_parse_recipient(graph_message.get('from')),
        to_recipients=_parse_recipients(graph_message.get('toRecipients')),
        cc_recipients=_parse_recipients(graph_message.get('ccRecipients')),
        bcc_recipients=_parse_recipients(graph_message.get('bccRecipients')),
        received_date_time=_parse_local_datetime(graph_message.get('receivedDateTime')),
        sent_date_time=_parse_local_datetime(graph_message.get('sentDateTime')),
        created_date_time=_parse_local_datetime(graph_message.get('createdDateTime')),
        last_modified_date_time=_parse_local_datetime(graph_message.get('lastModifiedDateTime')),
        is_read=graph_message.get('isRead'),
        has_attachments=bool(graph_message.get('hasAttachments', False)),
        conversation_id=graph_message.get('conversationId'),
        internet_message_id=graph_message.get('internetMessageId'),
        parent_folder_id=graph_message.get('parentFolderId'),
        web_link=graph_message.get('webLink'),
        removed_reason=(removed.get('reason') or 'removed') if isinstance(removed, dict) else None
    )


def from_delta_response(response: Optional[Dict[str, Any]]) -> DeltaPage:
    """
    Creates a DeltaPage from one delta response body. Does not check the link invariant.
    """
    response = response or {}
    return DeltaPage(
        messages=[from_graph_message(message) for message in response.get('value') or []],
        next_link=response.get(ODATA_NEXT_LINK),
        delta_link=response.get(ODATA_DELTA_LINK)
    )


def from_graph_attachment(graph_attachment: Dict[str, Any], with_content: bool = False) -> Optional[FileAttachment]:
    """
    Creates a FileAttachment from a Graph attachment resource.

    Args:
        graph_attachment: A dictionary containing attachment data from the Graph API.
        with_content: Whether to decode ``contentBytes`` into the content field.

    Returns:
        A FileAttachment, or None for item and reference attachments.
    """
    if graph_attachment.get(ODATA_TYPE) != FILE_ATTACHMENT_TYPE:
        logger.debug("Skipping attachment of type %s", graph_attachment.get(ODATA_TYPE))
        return None

    content = None
    if with_content and graph_attachment.get('contentBytes') is not None:
        content = base64.b64decode(graph_attachment['contentBytes'])

    return FileAttachment(
        name=graph_attachment.get('name'),
        content_type=graph_attachment.get('contentType') or 'application/octet-stream',
        attachment_id=graph_attachment.get('id'),
        size=graph_attachment.get('size') or 0,
        is_inline=bool(graph_attachment.get('isInline', False)),
        content=content
    )


def _normalize_addresses(addresses: Union[str, List[str], None], field_name: str) -> List[str]:
    if not addresses:
        return []
    if isinstance(addresses, str):
        addresses = [addresses]
    for address in addresses:
        if not is_valid_email(address):
            raise ValidationError(f"Invalid {field_name} address: {address}")
    return list(addresses)


def create_send_mail_body(
        to: Union[str, List[str]],
        subject: Optional[str] = None,
        content: Optional[str] = None,
        cc: Optional[List[str]] = None,
        bcc: Optional[List[str]] = None,
        content_type: str = BODY_TYPE_HTML,
        save_to_sent_items: bool = True
) -> Dict[str, Any]:
    """
    Composes the JSON body of a ``sendMail`` request.

    Args:
        to: Recipient address or list of addresses.
        subject: The subject line of the email.
        content: The body of the email.
        cc: List of CC recipient email addresses (optional).
        bcc: List of BCC recipient email addresses (optional).
        content_type: ``html`` (default) or ``text``.
        save_to_sent_items: Whether Graph keeps a copy in Sent Items.

    Returns:
        The request body as a dictionary.
    """
    to_addresses = _normalize_addresses(to, "recipient")
    if not to_addresses:
        raise ValidationError("At least one recipient is required.")
    cc_addresses = _normalize_addresses(cc, "cc")
    bcc_addresses = _normalize_addresses(bcc, "bcc")

    if content_type not in (BODY_TYPE_HTML, BODY_TYPE_TEXT):
        raise ValidationError(f"Unsupported body content type: {content_type}")
    if subject and len(subject) > MAX_SUBJECT_LENGTH:
        raise ValidationError(f"Subject cannot exceed {MAX_SUBJECT_LENGTH} characters")
    if content and len(content) > MAX_BODY_LENGTH:
        raise ValidationError(f"Body cannot exceed {MAX_BODY_LENGTH} characters")

    message = {
        "subject": subject or "",
        "body": {
            "contentType": content_type,
            "content": content or "",
        },
        "toRecipients": [EmailAddress(email=address).to_dict() for address in to_addresses],
    }
    if cc_addresses:
        message["ccRecipients"] = [EmailAddress(email=address).to_dict() for address in cc_addresses]
    if bcc_addresses:
        message["bccRecipients"] = [EmailAddress(email=address).to_dict() for address in bcc_addresses]

    return {"message": message, "saveToSentItems": save_to_sent_items}
