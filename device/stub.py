"""
Stub device backend for testing and offline development.

Deterministic, in-memory, and records every write it receives.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from .base import (
    Board,
    ComponentNotFoundError,
    Credentials,
    DeviceBackend,
    DeviceSession,
    GpioPin,
    PinWriteError,
)

logger = logging.getLogger(__name__)

DEFAULT_PINS = ("5", "12", "14", "18", "19", "21")


@dataclass
class StubPinState:
    """Last values written to a stub pin."""

    high: Optional[bool] = None
    pwm_frequency: Optional[int] = None
    pwm_duty: Optional[float] = None


class StubGpioPin(GpioPin):
    """GPIO pin that records writes on the owning backend."""

    def __init__(self, backend: "StubDeviceBackend", address: str, name: str):
        self._backend = backend
        self._address = address
        self.name = name

    async def set(self, high: bool) -> None:
        self._backend._record(self._address, self.name, "set", high)

    async def set_pwm_frequency(self, frequency: int) -> None:
        self._backend._record(self._address, self.name, "pwm_frequency", frequency)

    async def set_pwm(self, duty_cycle: float) -> None:
        self._backend._record(self._address, self.name, "pwm_duty", duty_cycle)


class StubBoard(Board):
    """Board exposing the backend's configured pins."""

    def __init__(self, backend: "StubDeviceBackend", address: str, name: str):
        self._backend = backend
        self._address = address
        self.name = name

    async def gpio_pin_by_name(self, name: str) -> GpioPin:
        if name in self._backend.missing_pins or name not in self._backend.pins:
            raise ComponentNotFoundError("pin", name)
        return StubGpioPin(self._backend, self._address, name)


class StubDeviceSession(DeviceSession):
    """Session handed out by StubDeviceBackend."""

    def __init__(self, backend: "StubDeviceBackend", address: str):
        self._backend = backend
        self.address = address
        self.closed = False

    async def board(self, name: str) -> Board:
        if name not in self._backend.boards:
            raise ComponentNotFoundError("board", name)
        return StubBoard(self._backend, self.address, name)

    async def close(self) -> None:
        self.closed = True
        self._backend.close_count += 1


class StubDeviceBackend(DeviceBackend):
    """
    Deterministic fake machine fleet for tests and CI.

    Knobs:
        fail_connects: number of connect() calls that fail before one succeeds
        boards: board names that exist on every machine
        pins: pin names that exist on every board
        missing_pins: pins hidden even if listed in `pins`
        failing_writes: (pin, operation) pairs whose writes raise PinWriteError;
            operation "*" fails every write on that pin
    """

    def __init__(
        self,
        *,
        fail_connects: int = 0,
        boards: Tuple[str, ...] = ("board",),
        pins: Tuple[str, ...] = DEFAULT_PINS,
    ):
        self.fail_connects = fail_connects
        self.boards: Set[str] = set(boards)
        self.pins: Set[str] = set(pins)
        self.missing_pins: Set[str] = set()
        self.failing_writes: Set[Tuple[str, str]] = set()

        self.connect_attempts: List[str] = []
        self.sessions: List[StubDeviceSession] = []
        self.writes: List[Tuple[str, str, str, Any]] = []
        self.pin_state: Dict[str, StubPinState] = {}
        self.close_count = 0

    async def connect(self, address: str, credentials: Credentials) -> DeviceSession:
        self.connect_attempts.append(address)
        if self.fail_connects > 0:
            self.fail_connects -= 1
            raise OSError(f"stub: {address} unreachable")

        session = StubDeviceSession(self, address)
        self.sessions.append(session)
        return session

    def _record(self, address: str, pin: str, operation: str, value: Any) -> None:
        if (pin, operation) in self.failing_writes or (pin, "*") in self.failing_writes:
            raise PinWriteError(pin, operation, "stub write failure")

        self.writes.append((address, pin, operation, value))
        state = self.pin_state.setdefault(pin, StubPinState())
        if operation == "set":
            state.high = value
        elif operation == "pwm_frequency":
            state.pwm_frequency = value
        elif operation == "pwm_duty":
            state.pwm_duty = value
        logger.debug(f"stub write {address} pin={pin} {operation}={value}")

    def written_pins(self) -> Set[str]:
        """Names of all pins that received at least one write."""
        return {pin for _, pin, _, _ in self.writes}
