"""
Woop Request Dispatcher

Selects a request variant from the query string shape, authorizes it,
turns it into pin commands and applies them to the target machine.

Stages (one-shot per request):
  authorize → parse → endpoint → connect → resolve pins → write → status

Variants:
  - ALERT:    no query parameters, monitoring alert body
  - QUERY:    strobe/buzzer flags in the query string
  - LIGHTING: v=3, RGB PWM + buzzer JSON body
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Mapping, Optional

from fastapi import status

from config import WebhookConfig, get_config
from device import (
    ComponentNotFoundError,
    DeviceBackend,
    DeviceConnectionError,
    GpioPin,
    PinWriteError,
    device_session,
)

from .commands import (
    alert_commands,
    build_endpoint,
    lighting_commands,
    parse_alert,
    parse_lighting,
    query_commands,
)
from .errors import WebhookError
from .schemas import PinCommand
from .security import verify_secret

logger = logging.getLogger(__name__)

LIGHTING_VERSION = "3"


class Variant(str, Enum):
    """Request handling path."""

    ALERT = "alert"
    QUERY = "query"
    LIGHTING = "lighting"


def select_variant(query: Mapping[str, str]) -> Variant:
    """No query → ALERT; v=3 → LIGHTING; anything else → QUERY."""
    if len(query) == 0:
        return Variant.ALERT
    if query.get("v") == LIGHTING_VERSION:
        return Variant.LIGHTING
    return Variant.QUERY


@dataclass(frozen=True)
class DispatchPlan:
    """Everything needed to touch the machine, decided before connecting."""

    variant: Variant
    address: str
    commands: List[PinCommand]
    write_failure_status: int


class RequestDispatcher:
    """
    Relays one inbound request to GPIO writes on a remote machine.

    Holds only read-only configuration and the device backend; no state is
    kept between requests.
    """

    def __init__(
        self,
        config: WebhookConfig,
        backend: DeviceBackend,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self.backend = backend
        self._sleep = sleep

    def plan(self, query: Mapping[str, str], body: bytes) -> DispatchPlan:
        """
        Authorize and parse a request without touching the device.

        Raises:
            AuthorizationError: Wrong secret (QUERY / LIGHTING)
            DecodeError: Malformed JSON body (ALERT / LIGHTING)
            ValidationError: Wrong body shape (ALERT / LIGHTING)
        """
        variant = select_variant(query)

        if variant is Variant.ALERT:
            alert = parse_alert(body)
            logger.info(f"Received an alert with summary: {alert.incident.summary}")
            return DispatchPlan(
                variant=variant,
                address=self.config.alert_machine_uri,
                commands=alert_commands(alert),
                write_failure_status=status.HTTP_408_REQUEST_TIMEOUT,
            )

        verify_secret(query.get("secret"), self.config.secret)
        address = build_endpoint(query.get("woop", ""), self.config.uri_suffix)

        if variant is Variant.LIGHTING:
            return DispatchPlan(
                variant=variant,
                address=address,
                commands=lighting_commands(parse_lighting(body)),
                write_failure_status=status.HTTP_400_BAD_REQUEST,
            )

        return DispatchPlan(
            variant=variant,
            address=address,
            commands=query_commands(query),
            write_failure_status=status.HTTP_408_REQUEST_TIMEOUT,
        )

    async def dispatch(self, query: Mapping[str, str], body: bytes) -> int:
        """
        Handle one request end to end.

        Returns:
            HTTP status code
              200 success
              400 malformed body, or lighting write failure
              401 wrong secret
              404 machine unreachable
              408 strobe/buzzer write failure
              417 board or pin not found
              422 invalid body fields
        """
        try:
            plan = self.plan(query, body)
        except WebhookError as e:
            logger.warning(f"Request rejected ({e.status_code}): {e.detail}")
            return e.status_code

        logger.info(
            f"Request: variant={plan.variant.value} machine={plan.address} "
            f"commands={[(c.label, c.pin) for c in plan.commands]}"
        )

        try:
            await self._apply(plan)
        except DeviceConnectionError as e:
            logger.error(f"Failed to connect to machine: {e}")
            return status.HTTP_404_NOT_FOUND
        except ComponentNotFoundError as e:
            logger.error(f"Component lookup failed: {e}")
            return status.HTTP_417_EXPECTATION_FAILED
        except PinWriteError as e:
            logger.error(f"Couldn't set pin value: {e}")
            return plan.write_failure_status

        return status.HTTP_200_OK

    async def _apply(self, plan: DispatchPlan) -> None:
        async with device_session(
            self.backend,
            plan.address,
            self.config.credentials,
            retries=self.config.connect_retries,
            attempt_timeout=self.config.connect_timeout_s,
            backoff_unit=self.config.retry_backoff_s,
            sleep=self._sleep,
        ) as session:
            board = await session.board(self.config.board_name)

            # Resolve every pin before the first write
            pins: Dict[str, GpioPin] = {}
            for command in plan.commands:
                if command.pin not in pins:
                    pins[command.pin] = await board.gpio_pin_by_name(command.pin)

            for command in plan.commands:
                await self._write(pins[command.pin], command)

    async def _write(self, pin: GpioPin, command: PinCommand) -> None:
        if command.kind == "pwm":
            logger.info(
                f"Setting {command.label} pin {command.pin} PWM "
                f"freq={command.freq} duty={command.duty}"
            )
            await pin.set_pwm_frequency(command.freq)
            await pin.set_pwm(command.duty)
        else:
            logger.info(f"Setting {command.label} pin {command.pin} to {command.value}")
            await pin.set(command.value)


# Dispatcher is built once per process
_dispatcher: Optional[RequestDispatcher] = None


def get_dispatcher() -> RequestDispatcher:
    """Get or create the request dispatcher (singleton)."""
    global _dispatcher
    if _dispatcher is None:
        config = get_config()
        _dispatcher = RequestDispatcher(config, config.create_device_backend())
    return _dispatcher


def reset_dispatcher() -> None:
    """Reset singleton (for testing)."""
    global _dispatcher
    _dispatcher = None
