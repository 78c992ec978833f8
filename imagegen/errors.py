"""Error kinds raised while handling a generation request."""

from __future__ import annotations

from typing import Optional

from fastapi import status


class ImageGenerationError(Exception):
    """Base error carrying the HTTP status and message reported to the caller."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class InvalidRequestError(ImageGenerationError):
    """The request is missing fields, carries invalid values or names an unknown model."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConfigurationError(ImageGenerationError):
    """The server lacks configuration required to reach the inference API."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class UpstreamError(ImageGenerationError):
    """The inference API answered with a non-success status.

    Error statuses are passed through. A 3xx left over after redirects
    (e.g. 304, or a redirect without a Location) is reported as 502.
    """

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(
            f"Hugging Face API error: {status_code}",
            details=body,
            status_code=status_code if status_code >= 400 else status.HTTP_502_BAD_GATEWAY,
        )
        self.upstream_status = status_code
