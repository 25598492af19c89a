"""
Webhook request errors.

Each error carries the HTTP status it terminates the request with.
Device-side failures (connection, missing component, write) are defined in
device.base and mapped to status codes by the dispatcher.
"""

from fastapi import status


class WebhookError(Exception):
    """Request rejected before reaching the device."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class AuthorizationError(WebhookError):
    """Missing or wrong shared secret."""

    status_code = status.HTTP_401_UNAUTHORIZED


class DecodeError(WebhookError):
    """Request body is not well-formed JSON."""

    status_code = status.HTTP_400_BAD_REQUEST


class ValidationError(WebhookError):
    """Request body is JSON but fields are missing or of the wrong type."""

    status_code = 422
