"""
Viam device backend.

Requires: viam-sdk Python package.
Connections are single-use: no reconnect loop, no connection checks,
no credential refresh and no SDK sessions.
"""

import logging

from .base import (
    Board,
    ComponentNotFoundError,
    Credentials,
    DeviceBackend,
    DeviceSession,
    GpioPin,
    PinWriteError,
)

try:
    from viam.components.board import Board as ViamBoard
    from viam.robot.client import RobotClient
    from viam.rpc.dial import Credentials as ViamCredentials, DialOptions
    VIAM_AVAILABLE = True
except ImportError:
    VIAM_AVAILABLE = False

logger = logging.getLogger(__name__)

API_KEY_CREDENTIALS_TYPE = "api-key"


class ViamGpioPin(GpioPin):
    """Adapter over a viam Board.GPIOPin."""

    def __init__(self, pin, name: str):
        self._pin = pin
        self.name = name

    async def set(self, high: bool) -> None:
        try:
            await self._pin.set(high)
        except Exception as e:
            raise PinWriteError(self.name, "set", str(e)) from e

    async def set_pwm_frequency(self, frequency: int) -> None:
        try:
            await self._pin.set_pwm_frequency(frequency)
        except Exception as e:
            raise PinWriteError(self.name, "pwm_frequency", str(e)) from e

    async def set_pwm(self, duty_cycle: float) -> None:
        try:
            await self._pin.set_pwm(duty_cycle)
        except Exception as e:
            raise PinWriteError(self.name, "pwm_duty", str(e)) from e


class ViamBoardAdapter(Board):
    """Adapter over a viam Board component."""

    def __init__(self, board, name: str):
        self._board = board
        self.name = name

    async def gpio_pin_by_name(self, name: str) -> GpioPin:
        try:
            pin = await self._board.gpio_pin_by_name(name)
        except Exception as e:
            raise ComponentNotFoundError("pin", name, str(e)) from e
        return ViamGpioPin(pin, name)


class ViamDeviceSession(DeviceSession):
    """Wraps a connected RobotClient."""

    def __init__(self, robot, address: str):
        self._robot = robot
        self.address = address

    async def board(self, name: str) -> Board:
        try:
            board = ViamBoard.from_robot(self._robot, name)
        except Exception as e:
            raise ComponentNotFoundError("board", name, str(e)) from e
        return ViamBoardAdapter(board, name)

    async def close(self) -> None:
        await self._robot.close()


class ViamDeviceBackend(DeviceBackend):
    """
    Connects to machines on the Viam fleet with API key credentials.

    Requires: pip install viam-sdk
    """

    def __init__(self, dial_timeout: float = 20.0):
        """
        Initialize Viam backend.

        Args:
            dial_timeout: Seconds the SDK may spend dialing a single attempt
        """
        if not VIAM_AVAILABLE:
            raise ImportError(
                "viam-sdk not installed. Install with: pip install viam-sdk"
            )

        self.dial_timeout = dial_timeout

    def _options(self, credentials: Credentials) -> "RobotClient.Options":
        dial_options = DialOptions(
            credentials=ViamCredentials(
                type=API_KEY_CREDENTIALS_TYPE,
                payload=credentials.api_key,
            ),
            auth_entity=credentials.api_key_id,
            timeout=self.dial_timeout,
        )
        return RobotClient.Options(
            refresh_interval=0,
            check_connection_interval=0,
            attempt_reconnect_interval=0,
            disable_sessions=True,
            dial_options=dial_options,
        )

    async def connect(self, address: str, credentials: Credentials) -> DeviceSession:
        robot = await RobotClient.at_address(address, self._options(credentials))
        logger.debug(f"RobotClient connected to {address}")
        return ViamDeviceSession(robot, address)
