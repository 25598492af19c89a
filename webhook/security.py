"""
Shared Secret Verification

SECURITY BOUNDARY - compare the caller's secret with the configured one.
No device imports. No retries. No logic.
"""

import hmac
from typing import Optional

from .errors import AuthorizationError


def verify_secret(passed_secret: Optional[str], configured_secret: str) -> None:
    """
    Verify the `secret` query parameter.

    Raises:
        AuthorizationError: Secret not configured, missing, or wrong

    Args:
        passed_secret: Value of the secret query parameter (None if absent)
        configured_secret: Server-side secret

    Returns:
        None (raises if invalid)
    """
    if not configured_secret:
        raise AuthorizationError("Shared secret not configured")

    if passed_secret is None:
        raise AuthorizationError("Missing secret")

    # Compare (constant-time to prevent timing attacks)
    if not hmac.compare_digest(
        passed_secret.encode("utf-8"),
        configured_secret.encode("utf-8"),
    ):
        raise AuthorizationError("Wrong secret")
