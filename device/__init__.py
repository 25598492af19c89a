"""
Remote device exports.

Clean interface for the webhook to import device components.
"""

from .base import (
    Board,
    ComponentNotFoundError,
    Credentials,
    DeviceBackend,
    DeviceConnectionError,
    DeviceError,
    DeviceSession,
    GpioPin,
    PinWriteError,
)
from .connector import connect_with_retry, device_session
from .stub import StubDeviceBackend
from .viam_backend import ViamDeviceBackend

__all__ = [
    "Board",
    "ComponentNotFoundError",
    "Credentials",
    "DeviceBackend",
    "DeviceConnectionError",
    "DeviceError",
    "DeviceSession",
    "GpioPin",
    "PinWriteError",
    "connect_with_retry",
    "device_session",
    "StubDeviceBackend",
    "ViamDeviceBackend",
]
