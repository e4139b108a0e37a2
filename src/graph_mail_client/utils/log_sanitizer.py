"""
Log sanitization utilities to prevent PII and sensitive data leakage.

Mailbox identifiers, addresses, subjects and delta links all identify a person
or grant access to their mail, so they are reduced to non-identifying
summaries before they reach a log record.
"""

from typing import List, Optional
from urllib.parse import urlsplit


def sanitize_email(email: str) -> str:
    """
    Sanitize email address for logging by showing only domain and length.

    Args:
        email: Email address to sanitize

    Returns:
        Sanitized email representation

    Example:
        "user@example.com" -> "***@example.com (16 chars)"
    """
    if not email or '@' not in email:
        return "[invalid-email]"

    _, domain = email.split('@', 1)
    return f"***@{domain} ({len(email)} chars)"


def sanitize_email_list(emails: List[str]) -> str:
    """
    Sanitize list of email addresses for logging.

    Args:
        emails: List of email addresses

    Returns:
        Sanitized representation of email list
    """
    if not emails:
        return "[]"

    domains = []
    for email in emails:
        if '@' in email:
            domains.append(email.split('@', 1)[1])

    return f"[{len(emails)} recipients from domains: {', '.join(sorted(set(domains)))}]"


def sanitize_subject(subject: str, max_preview_length: int = 20) -> str:
    """
    Sanitize email subject for logging.

    Args:
        subject: Email subject to sanitize
        max_preview_length: Maximum characters to show from subject

    Returns:
        Sanitized subject representation
    """
    if not subject:
        return "[empty-subject]"

    preview = subject[:max_preview_length]
    if len(subject) > max_preview_length:
        preview += "..."

    return f"'{preview}' ({len(subject)} chars)"


def sanitize_identifier(identifier: str, label: str = "id") -> str:
    """
    Sanitize a Graph object identifier (message, folder, user) for logging.

    Shows only the first 8 and last 4 characters of long identifiers.
    """
    if not identifier:
        return f"[no-{label}]"

    if len(identifier) <= 12:
        return f"[{label}: {identifier}]"
    return f"[{label}: {identifier[:8]}...{identifier[-4:]}]"


def sanitize_message_id(message_id: str) -> str:
    """
    Sanitize message ID for logging.

    Args:
        message_id: Message ID to sanitize

    Returns:
        Sanitized message ID representation
    """
    return sanitize_identifier(message_id, "msg-id")


def sanitize_delta_link(delta_link: Optional[str]) -> str:
    """
    Sanitize a delta or next link for logging.

    The query string carries the server-side sync state and is replayable,
    so only the path and the link length are kept.

    Example:
        "https://graph.microsoft.com/v1.0/users/u/mailFolders/f/messages/delta?$deltatoken=abc"
        -> "[link: /v1.0/users/.../delta (N chars)]"
    """
    if not delta_link:
        return "[no-link]"

    path = urlsplit(delta_link).path
    segments = [segment for segment in path.split('/') if segment]
    if len(segments) > 3:
        path = f"/{segments[0]}/{segments[1]}/.../{segments[-1]}"
    return f"[link: {path} ({len(delta_link)} chars)]"


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename for logging.

    Args:
        filename: Filename to sanitize

    Returns:
        Sanitized filename representation
    """
    if not filename:
        return "[no-filename]"

    parts = filename.split('.')
    if len(parts) > 1:
        return f"[file.{parts[-1].lower()}] ({len(filename)} chars)"
    return f"[file] ({len(filename)} chars)"


def sanitize_attachment_info(attachments: List) -> str:
    """
    Sanitize attachment information for logging.

    Args:
        attachments: List of attachment objects or filenames

    Returns:
        Sanitized attachment summary
    """
    if not attachments:
        return "[no-attachments]"

    extensions = set()
    for attachment in attachments:
        filename = attachment if isinstance(attachment, str) else getattr(attachment, 'name', '')
        if filename and '.' in filename:
            extensions.add(filename.split('.')[-1].lower())

    ext_info = f"types: {', '.join(sorted(extensions))}" if extensions else "unknown types"
    return f"[{len(attachments)} attachments, {ext_info}]"


def sanitize_for_logging(**kwargs) -> dict:
    """
    Sanitize multiple fields for logging in one call.

    Args:
        **kwargs: Fields to sanitize (subject, to, cc, sender, delta_link, etc.)

    Returns:
        Dictionary with sanitized values
    """
    sanitized = {}

    for key, value in kwargs.items():
        if key in ('to', 'cc', 'bcc', 'recipients') and isinstance(value, list):
            sanitized[key] = sanitize_email_list(value)
        elif key == 'subject':
            sanitized[key] = sanitize_subject(value) if value else None
        elif key in ('from', 'sender', 'user_id') and isinstance(value, str):
            sanitized[key] = sanitize_email(value) if '@' in value else sanitize_identifier(value, "user")
        elif key == 'message_id':
            sanitized[key] = sanitize_message_id(value) if value else None
        elif key == 'folder_id':
            sanitized[key] = sanitize_identifier(value, "folder") if value else None
        elif key in ('delta_link', 'next_link'):
            sanitized[key] = sanitize_delta_link(value)
        elif key == 'attachments':
            sanitized[key] = sanitize_attachment_info(value)
        else:
            # Non-PII fields pass through unchanged
            sanitized[key] = value

    return sanitized
