"""
Shared Secret Verification Tests
"""

import pytest

from webhook.errors import AuthorizationError
from webhook.security import verify_secret


class TestSecretVerification:

    def test_matching_secret(self):
        """Matching secret passes."""
        verify_secret("xyz", "xyz")

    def test_wrong_secret_returns_401(self):
        with pytest.raises(AuthorizationError) as exc_info:
            verify_secret("abc", "xyz")

        assert exc_info.value.status_code == 401

    def test_missing_secret(self):
        with pytest.raises(AuthorizationError):
            verify_secret(None, "xyz")

    def test_unconfigured_secret_rejects_everything(self):
        """An empty configured secret never authorizes, not even an empty one."""
        with pytest.raises(AuthorizationError):
            verify_secret("", "")

    def test_secret_is_case_sensitive(self):
        with pytest.raises(AuthorizationError):
            verify_secret("XYZ", "xyz")
