"""
Request adapter for Microsoft Graph.

Turns a RequestInformation into an authenticated HTTP call and decodes the
result, mapping failed responses to exceptions through an error mapping keyed
by exact status ("404") or status class ("4XX", "5XX").
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote
import logging

import requests

from ..exceptions import APIError, ODataError

logger = logging.getLogger(__name__)

GRAPH_API_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_TIMEOUT = 60  # seconds

ErrorFactory = Callable[[Optional[Dict[str, Any]], int], Exception]
ErrorMapping = Dict[str, ErrorFactory]

DEFAULT_ERROR_MAPPING: ErrorMapping = {
    "4XX": ODataError.from_payload,
    "5XX": ODataError.from_payload,
}


@dataclass
class RequestInformation:
    """
    Describes one Graph request.

    Either ``url_template`` (relative to the adapter base URL, with
    ``{placeholders}`` filled from ``path_parameters``) or an absolute ``url``
    must be set. Absolute URLs are used verbatim for server-issued next and
    delta links.
    """
    method: str = "GET"
    url_template: Optional[str] = None
    path_parameters: Dict[str, str] = field(default_factory=dict)
    url: Optional[str] = None
    query_parameters: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None

    def get_url(self, base_url: str) -> str:
        if self.url:
            return self.url
        if not self.url_template:
            raise ValueError("RequestInformation needs either url or url_template")

        encoded = {name: quote(str(value), safe='') for name, value in self.path_parameters.items()}
        return base_url.rstrip('/') + self.url_template.format(**encoded)


class GraphRequestAdapter:
    """
    Sends RequestInformation objects to Graph with a bearer token.

    The adapter is long-lived and reused across calls. It is as thread-safe as
    the underlying ``requests.Session``.
    """

    def __init__(
            self,
            auth_provider: Any,
            base_url: str = GRAPH_API_URL,
            timeout: float = DEFAULT_TIMEOUT,
            session: Optional[requests.Session] = None
    ):
        """
        Args:
            auth_provider: Object with ``get_access_token() -> str`` (an AuthManager).
            base_url: Graph root used for relative URL templates.
            timeout: Per-request timeout in seconds.
            session: HTTP session to reuse; a new one is created when omitted.
        """
        self._auth_provider = auth_provider
        self._base_url = base_url
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def send(
            self,
            request_info: RequestInformation,
            error_mapping: Optional[ErrorMapping] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Executes a request and returns the decoded JSON body.

        Args:
            request_info: The request to send.
            error_mapping: Factories for failed responses; defaults to decoding ODataError.

        Returns:
            The decoded body, or None for empty responses (202, 204).

        Raises:
            ODataError or the mapped exception for HTTP >= 400, APIError when no
            factory matches, and ``requests`` exceptions for transport failures.
        """
        url = request_info.get_url(self._base_url)
        headers = {
            "Authorization": f"Bearer {self._auth_provider.get_access_token()}",
            "Accept": "application/json",
        }
        headers.update(request_info.headers)

        logger.debug("%s %s", request_info.method, request_info.url_template or "<server link>")

        response = self._session.request(
            request_info.method,
            url,
            params=request_info.query_parameters or None,
            json=request_info.body,
            headers=headers,
            timeout=self._timeout
        )

        if response.status_code >= 400:
            raise self._map_error(response, error_mapping or DEFAULT_ERROR_MAPPING)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _map_error(response: requests.Response, error_mapping: ErrorMapping) -> Exception:
        status = response.status_code
        factory = error_mapping.get(str(status)) or error_mapping.get(f"{status // 100}XX")
        if factory is None:
            return APIError(
                f"The server returned an unexpected status code ({status}) "
                "and no error factory is registered for it"
            )

        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            payload = None
        return factory(payload, status)
