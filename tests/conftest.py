"""Pytest configuration and fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Never dial real machines from the test suite
os.environ["DEVICE_BACKEND"] = "stub"

from config import WebhookConfig  # noqa: E402
from device import StubDeviceBackend  # noqa: E402
from webhook.dispatcher import RequestDispatcher, reset_dispatcher  # noqa: E402


TEST_SECRET = "xyz"
TEST_SUFFIX = "abc123.viam.cloud"


class RecordingSleep:
    """Awaitable sleep replacement that records requested delays."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def webhook_config() -> WebhookConfig:
    return WebhookConfig(
        api_key="test_key",
        api_key_id="test_key_id",
        uri_suffix=TEST_SUFFIX,
        alert_machine_uri=f"woop-woop-main.{TEST_SUFFIX}",
        secret=TEST_SECRET,
        device_backend="stub",
    )


@pytest.fixture
def backend() -> StubDeviceBackend:
    return StubDeviceBackend()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def dispatcher(webhook_config, backend, recording_sleep) -> RequestDispatcher:
    return RequestDispatcher(webhook_config, backend, sleep=recording_sleep)


@pytest.fixture(autouse=True)
def _reset_dispatcher_singleton():
    reset_dispatcher()
    yield
    reset_dispatcher()
