"""
Remote device abstract interface.

Role: connect to a remote machine and drive GPIO pins on its board.

Rules:
- Dispatcher code must depend ONLY on these interfaces
- Sessions are single-use and owned by one request
- Lookup failures raise ComponentNotFoundError
- Write failures raise PinWriteError
- Any other connect() failure is a connection failure
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


class DeviceError(Exception):
    """Base class for device-side failures."""
    pass


class ComponentNotFoundError(DeviceError):
    """Named board or GPIO pin does not exist on the machine."""

    def __init__(self, kind: str, name: str, reason: str = ""):
        self.kind = kind
        self.name = name
        message = f"{kind} '{name}' not found"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PinWriteError(DeviceError):
    """A GPIO write (level, PWM frequency or duty) failed."""

    def __init__(self, pin: str, operation: str, reason: str = ""):
        self.pin = pin
        self.operation = operation
        message = f"{operation} on pin '{pin}' failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DeviceConnectionError(ConnectionError):
    """Machine could not be reached after all connection attempts."""

    def __init__(self, address: str, attempts: int, last_error: Optional[Exception]):
        self.address = address
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed to connect to {address} after {attempts} attempt(s): {last_error}"
        )


@dataclass(frozen=True)
class Credentials:
    """API key credentials for the outbound connection."""

    api_key: str = field(repr=False)
    api_key_id: str


class GpioPin(ABC):
    """A single GPIO line on a board."""

    name: str

    @abstractmethod
    async def set(self, high: bool) -> None:
        raise NotImplementedError

    @abstractmethod
    async def set_pwm_frequency(self, frequency: int) -> None:
        raise NotImplementedError

    @abstractmethod
    async def set_pwm(self, duty_cycle: float) -> None:
        raise NotImplementedError


class Board(ABC):
    """Controller board exposing GPIO pins by name."""

    @abstractmethod
    async def gpio_pin_by_name(self, name: str) -> GpioPin:
        """
        Look up a GPIO pin.

        Raises:
            ComponentNotFoundError: pin does not exist
        """
        raise NotImplementedError


class DeviceSession(ABC):
    """Authenticated, short-lived connection to one machine."""

    address: str

    @abstractmethod
    async def board(self, name: str) -> Board:
        """
        Look up a board component on the machine.

        Raises:
            ComponentNotFoundError: board does not exist
        """
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        raise NotImplementedError


class DeviceBackend(ABC):
    """
    Abstract device boundary.
    The connector calls connect(); everything else goes through the session.
    """

    @abstractmethod
    async def connect(self, address: str, credentials: Credentials) -> DeviceSession:
        """
        Open a session to the machine at address.

        Args:
            address: Endpoint identifier (e.g. woopwoop3-main.example.viam.cloud)
            credentials: API key pair

        Returns:
            Open DeviceSession
        """
        raise NotImplementedError
