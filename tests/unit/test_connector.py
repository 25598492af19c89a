"""
Machine Connector Tests

Retry count, linear backoff, per-attempt timeout and scoped release.
"""

import asyncio

import pytest

from device import (
    Credentials,
    DeviceConnectionError,
    StubDeviceBackend,
    connect_with_retry,
    device_session,
)
from device.stub import StubDeviceSession

CREDS = Credentials(api_key="key", api_key_id="key_id")
ADDRESS = "woopwoop3-main.abc123.viam.cloud"


class SlowBackend(StubDeviceBackend):
    """Backend whose connect() never finishes within the attempt timeout."""

    async def connect(self, address, credentials):
        self.connect_attempts.append(address)
        await asyncio.sleep(10)


class TestConnectWithRetry:
    """Test bounded retry with linear backoff."""

    @pytest.mark.asyncio
    async def test_first_attempt_success(self, recording_sleep):
        """Successful first attempt does not sleep."""
        backend = StubDeviceBackend()

        session = await connect_with_retry(backend, ADDRESS, CREDS, sleep=recording_sleep)

        assert session.address == ADDRESS
        assert backend.connect_attempts == [ADDRESS]
        assert recording_sleep.calls == []

    @pytest.mark.asyncio
    async def test_succeeds_after_failures(self, recording_sleep):
        """Two failures then success: waits 0 then 1 unit."""
        backend = StubDeviceBackend(fail_connects=2)

        session = await connect_with_retry(backend, ADDRESS, CREDS, sleep=recording_sleep)

        assert isinstance(session, StubDeviceSession)
        assert len(backend.connect_attempts) == 3
        assert recording_sleep.calls == [0, 1]

    @pytest.mark.asyncio
    async def test_exhaustion_makes_exactly_n_attempts(self, recording_sleep):
        """All attempts fail: exactly N attempts, each followed by a linear wait."""
        backend = StubDeviceBackend(fail_connects=100)

        with pytest.raises(DeviceConnectionError) as exc_info:
            await connect_with_retry(
                backend, ADDRESS, CREDS, retries=5, sleep=recording_sleep
            )

        assert len(backend.connect_attempts) == 5
        assert recording_sleep.calls == [0, 1, 2, 3, 4]
        assert exc_info.value.attempts == 5
        assert exc_info.value.address == ADDRESS

    @pytest.mark.asyncio
    async def test_worst_case_total_wait(self, recording_sleep):
        """Five failed attempts wait 0+1+2+3+4 units in total."""
        backend = StubDeviceBackend(fail_connects=100)

        with pytest.raises(DeviceConnectionError):
            await connect_with_retry(backend, ADDRESS, CREDS, sleep=recording_sleep)

        assert sum(recording_sleep.calls) == 10

    @pytest.mark.asyncio
    async def test_exhaustion_carries_last_error(self, recording_sleep):
        """The last underlying error is kept and chained."""
        backend = StubDeviceBackend(fail_connects=2)

        with pytest.raises(DeviceConnectionError) as exc_info:
            await connect_with_retry(
                backend, ADDRESS, CREDS, retries=2, sleep=recording_sleep
            )

        assert isinstance(exc_info.value.last_error, OSError)
        assert exc_info.value.__cause__ is exc_info.value.last_error
        assert isinstance(exc_info.value, ConnectionError)

    @pytest.mark.asyncio
    async def test_backoff_unit_scales_waits(self, recording_sleep):
        """Backoff unit multiplies the attempt index."""
        backend = StubDeviceBackend(fail_connects=3)

        await connect_with_retry(
            backend, ADDRESS, CREDS, backoff_unit=0.5, sleep=recording_sleep
        )

        assert recording_sleep.calls == [0, 0.5, 1.0]

    @pytest.mark.asyncio
    async def test_attempt_timeout_counts_as_failure(self, recording_sleep):
        """An attempt that exceeds the timeout is retried, then reported."""
        backend = SlowBackend()

        with pytest.raises(DeviceConnectionError) as exc_info:
            await connect_with_retry(
                backend,
                ADDRESS,
                CREDS,
                retries=2,
                attempt_timeout=0.01,
                sleep=recording_sleep,
            )

        assert len(backend.connect_attempts) == 2
        assert isinstance(exc_info.value.last_error, asyncio.TimeoutError)

    @pytest.mark.asyncio
    async def test_invalid_retry_count(self):
        """Zero retries is rejected before any attempt."""
        backend = StubDeviceBackend()

        with pytest.raises(ValueError):
            await connect_with_retry(backend, ADDRESS, CREDS, retries=0)

        assert backend.connect_attempts == []


class TestDeviceSession:
    """Test scoped acquisition and release."""

    @pytest.mark.asyncio
    async def test_session_closed_after_block(self):
        """Session is closed exactly once on normal exit."""
        backend = StubDeviceBackend()

        async with device_session(backend, ADDRESS, CREDS) as session:
            assert not session.closed

        assert session.closed
        assert backend.close_count == 1

    @pytest.mark.asyncio
    async def test_session_closed_on_error(self):
        """Session is closed exactly once when the block raises."""
        backend = StubDeviceBackend()

        with pytest.raises(RuntimeError):
            async with device_session(backend, ADDRESS, CREDS):
                raise RuntimeError("boom")

        assert backend.close_count == 1

    @pytest.mark.asyncio
    async def test_no_session_no_close(self, recording_sleep):
        """Failed connection never opens, so nothing is closed."""
        backend = StubDeviceBackend(fail_connects=100)

        with pytest.raises(DeviceConnectionError):
            async with device_session(
                backend, ADDRESS, CREDS, retries=2, sleep=recording_sleep
            ):
                pytest.fail("block must not run")

        assert backend.close_count == 0

    @pytest.mark.asyncio
    async def test_close_failure_does_not_mask_result(self):
        """A failing close() is logged, not raised."""
        backend = StubDeviceBackend()

        async def broken_close():
            raise OSError("close failed")

        async with device_session(backend, ADDRESS, CREDS) as session:
            session.close = broken_close
            result = "done"

        assert result == "done"
