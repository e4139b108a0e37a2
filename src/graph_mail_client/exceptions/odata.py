from typing import Any, Dict, Optional

from .base import APIError


class ODataError(APIError):
    """
    Structured error decoded from a Graph error payload.

    Graph reports failures as ``{"error": {"code": ..., "message": ..., "innerError": {...}}}``.

    Args:
        status_code: HTTP status of the failed response.
        code: The Graph error code (e.g. ``ErrorItemNotFound``).
        message: The Graph error message, if any.
        inner_error: The ``innerError`` object (request id, date, ...).
        payload: The full decoded response body.
    """

    def __init__(
            self,
            status_code: int,
            code: Optional[str] = None,
            message: Optional[str] = None,
            inner_error: Optional[Dict[str, Any]] = None,
            payload: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message or code or f"Graph API returned HTTP {status_code}")
        self.status_code = status_code
        self.code = code
        self.message = message
        self.inner_error = inner_error or {}
        self.payload = payload or {}

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]], status_code: int) -> "ODataError":
        """
        Builds an ODataError from a decoded response body.

        Args:
            payload: The decoded JSON body, or None when the body was empty or not JSON.
            status_code: HTTP status of the response.

        Returns:
            An ODataError instance.
        """
        error = (payload or {}).get("error")
        if not isinstance(error, dict):
            return cls(status_code, payload=payload)
        return cls(
            status_code,
            code=error.get("code"),
            message=error.get("message"),
            inner_error=error.get("innerError"),
            payload=payload
        )
