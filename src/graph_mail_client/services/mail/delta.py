"""
Delta synchronization of a mail folder.

A baseline traversal drains the initial delta pages of a folder and keeps only
the final delta link. Each later round replays the previous delta link,
collects every changed message across the round's pages, and hands back the
delta link for the next round.
"""

from typing import Optional, List, Union
import logging

from ..adapter import GraphRequestAdapter, RequestInformation, DEFAULT_ERROR_MAPPING
from ...exceptions import ValidationError, DeltaProtocolError
from ...utils.log_sanitizer import sanitize_for_logging
from .types import EmailMessage, DeltaLink, DeltaPage, DeltaChanges
from .constants import CHANGE_TYPE_CREATED, MAX_DELTA_PAGES
from . import utils

logger = logging.getLogger(__name__)

FOLDER_DELTA_TEMPLATE = "/users/{user_id}/mailFolders/{folder_id}/messages/delta"


class DeltaSynchronizer:
    """
    Delta synchronizer for one mailbox.

    Rounds are sequential and blocking: each page's link decides the next
    request. The synchronizer keeps no state between calls; persisting the
    returned DeltaLink is the caller's job.

    Usage:
        sync = DeltaSynchronizer(adapter, "user@contoso.com")
        link = sync.establish_baseline("inbox")
        ...
        messages, link = sync.fetch_changes(link)
    """

    def __init__(self, adapter: GraphRequestAdapter, user_id: str, max_pages: int = MAX_DELTA_PAGES):
        """
        Args:
            adapter: The long-lived request adapter.
            user_id: Mailbox owner id or user principal name.
            max_pages: Upper bound on pages followed in one traversal.
        """
        if not user_id:
            raise ValidationError("user_id cannot be empty")
        if max_pages < 1:
            raise ValidationError("max_pages must be at least 1")
        self._adapter = adapter
        self._user_id = user_id
        self._max_pages = max_pages

    @property
    def user_id(self) -> str:
        return self._user_id

    def establish_baseline(self, folder_id: str, max_page_size: Optional[int] = None) -> DeltaLink:
        """
        Establishes a delta link for a folder without returning existing messages.

        The first request filters on ``changeType=created``; every page is
        followed and its messages discarded until the delta link arrives.

        Args:
            folder_id: Mail folder id or well-known name (``inbox``).
            max_page_size: Preferred page size sent as ``Prefer: odata.maxpagesize``.

        Returns:
            The delta link for the first fetch_changes round.

        Raises:
            ValidationError: If folder_id is empty.
            MailError: If any page request fails; no partial link is returned.
            DeltaProtocolError: If a page breaks the link contract.
        """
        if not folder_id:
            raise ValidationError("folder_id cannot be empty")

        sanitized = sanitize_for_logging(user_id=self._user_id, folder_id=folder_id)
        logger.info("Establishing delta baseline for user=%s, folder=%s",
                    sanitized['user_id'], sanitized['folder_id'])

        headers = {}
        if max_page_size:
            headers["Prefer"] = f"odata.maxpagesize={max_page_size}"

        request_info = RequestInformation(
            url_template=FOLDER_DELTA_TEMPLATE,
            path_parameters={"user_id": self._user_id, "folder_id": folder_id},
            query_parameters={"changeType": CHANGE_TYPE_CREATED},
            headers=headers
        )

        page = self._get_page(request_info)
        pages = 1
        discarded = len(page.messages)
        while not page.is_final:
            pages = self._next_page_count(pages)
            page = self._get_page(RequestInformation(url=page.next_link, headers=headers))
            discarded += len(page.messages)

        logger.info("Delta baseline established after %d page(s), skipped %d existing message(s)",
                    pages, discarded)
        return DeltaLink(page.delta_link)

    def fetch_changes(self, delta_link: Union[DeltaLink, str]) -> DeltaChanges:
        """
        Retrieves every message changed since ``delta_link`` was issued.

        Messages from all pages of the round are concatenated in server order.
        If any page fails, nothing is returned and ``delta_link`` stays valid
        for a retry.

        Args:
            delta_link: A DeltaLink from establish_baseline or an earlier round,
                or its stored token.

        Returns:
            DeltaChanges(messages, delta_link) where delta_link starts the next round.

        Raises:
            ValidationError: If delta_link is empty.
            MailError: If any page request fails (DeltaLinkExpiredError when
                the link is no longer accepted).
            DeltaProtocolError: If a page breaks the link contract.
        """
        if not isinstance(delta_link, DeltaLink):
            if not delta_link:
                raise ValidationError("delta_link cannot be empty")
            delta_link = DeltaLink.from_token(delta_link)

        logger.info("Fetching message changes since %s",
                    sanitize_for_logging(delta_link=delta_link.to_token())['delta_link'])

        page = self._get_page(RequestInformation(url=delta_link.to_token()))
        messages: List[EmailMessage] = list(page.messages)
        pages = 1
        while not page.is_final:
            pages = self._next_page_count(pages)
            page = self._get_page(RequestInformation(url=page.next_link))
            messages.extend(page.messages)

        logger.info("Fetched %d changed message(s) across %d page(s)", len(messages), pages)
        return DeltaChanges(messages=messages, delta_link=DeltaLink(page.delta_link))

    def _next_page_count(self, pages: int) -> int:
        if pages >= self._max_pages:
            raise DeltaProtocolError(
                f"Delta traversal exceeded {self._max_pages} pages without reaching a delta link"
            )
        return pages + 1

    def _get_page(self, request_info: RequestInformation) -> DeltaPage:
        try:
            response = self._adapter.send(request_info, DEFAULT_ERROR_MAPPING)
        except Exception as e:
            logger.error("Delta page request failed: %s", e)
            raise utils.parse_error(e) from e

        try:
            page = utils.from_delta_response(response)
        except (TypeError, AttributeError, ValueError) as e:
            logger.error("Malformed delta page: %s", e)
            raise DeltaProtocolError(f"Malformed delta page: {e}") from e

        if page.next_link is not None and page.delta_link is not None:
            raise DeltaProtocolError("Delta page carries both a next link and a delta link")
        if page.next_link is None and page.delta_link is None:
            raise DeltaProtocolError("Delta page carries neither a next link nor a delta link")
        if not (page.next_link or page.delta_link):
            raise DeltaProtocolError("Delta page carries an empty link")

        logger.debug("Delta page with %d message(s), next=%s",
                     len(page.messages), sanitize_for_logging(next_link=page.next_link)['next_link'])
        return page
