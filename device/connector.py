"""
Machine Connector

Opens a session to a remote machine with bounded retry and linear backoff,
and scopes that session to a single request.

Invariants:
- Exactly `retries` attempts before giving up
- Each attempt is bounded by `attempt_timeout`
- Every failed attempt i (0-indexed), the last included, is followed by a
  wait of i * backoff_unit
- A session acquired through device_session() is closed exactly once
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Optional

from .base import Credentials, DeviceBackend, DeviceConnectionError, DeviceSession

logger = logging.getLogger(__name__)

DEFAULT_RETRIES = 5
DEFAULT_ATTEMPT_TIMEOUT_S = 20.0
DEFAULT_BACKOFF_UNIT_S = 1.0


async def connect_with_retry(
    backend: DeviceBackend,
    address: str,
    credentials: Credentials,
    *,
    retries: int = DEFAULT_RETRIES,
    attempt_timeout: float = DEFAULT_ATTEMPT_TIMEOUT_S,
    backoff_unit: float = DEFAULT_BACKOFF_UNIT_S,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> DeviceSession:
    """
    Connect to a machine, retrying on failure.

    Args:
        backend: Device backend that performs a single connect attempt
        address: Endpoint identifier of the machine
        credentials: API key pair
        retries: Total number of attempts
        attempt_timeout: Seconds allowed per attempt
        backoff_unit: Seconds of wait per attempt index
        sleep: Awaitable sleep (injected by tests)

    Returns:
        Open DeviceSession

    Raises:
        DeviceConnectionError: All attempts failed
        ValueError: retries < 1
    """
    if retries < 1:
        raise ValueError(f"retries must be >= 1, got {retries}")

    logger.info(f"Connecting to machine: {address}")
    last_error: Optional[Exception] = None

    for attempt in range(retries):
        try:
            session = await asyncio.wait_for(
                backend.connect(address, credentials),
                timeout=attempt_timeout,
            )
        except asyncio.TimeoutError as e:
            last_error = e
            logger.info(
                f"Connection attempt {attempt + 1}/{retries} to {address} "
                f"timed out after {attempt_timeout}s"
            )
        except Exception as e:
            last_error = e
            logger.info(
                f"Connection attempt {attempt + 1}/{retries} to {address} failed: {e}"
            )
        else:
            logger.info(f"Connected to machine {address}")
            return session

        await sleep(attempt * backoff_unit)

    logger.warning(f"Failed to connect to machine {address} after {retries} attempts")
    raise DeviceConnectionError(address, retries, last_error) from last_error


@asynccontextmanager
async def device_session(
    backend: DeviceBackend,
    address: str,
    credentials: Credentials,
    **retry_kwargs,
) -> AsyncIterator[DeviceSession]:
    """
    Acquire a session for the duration of a block and always release it.

    Usage:
        async with device_session(backend, address, creds) as session:
            board = await session.board("board")
    """
    session = await connect_with_retry(backend, address, credentials, **retry_kwargs)
    try:
        yield session
    finally:
        try:
            await session.close()
        except Exception as e:
            # Close errors are logged only; the block outcome stands
            logger.error(f"Failed to close session to {address}: {e}", exc_info=True)
