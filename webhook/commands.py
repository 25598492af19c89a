"""
Request → Pin Command Conversion

PURE CONVERSION - NO DEVICE CALLS

Turns query parameters and JSON bodies into PinCommand lists and builds
the endpoint identifier of the target machine.
- Alert: incident state → strobe level
- Query: strobe / buzzer on-off flags → two levels
- Lighting: RGB PWM channels + buzzer level
"""

import json
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from .errors import DecodeError, ValidationError
from .schemas import AlertPayload, LightingRequest, PinCommand

ENDPOINT_PREFIX = "woopwoop"

# Strobe/buzzer wiring
STROBE_PIN = "12"
BUZZER_PIN = "14"

# RGB lighting wiring
RED_PIN = "19"
GREEN_PIN = "18"
BLUE_PIN = "21"
LIGHTING_BUZZER_PIN = "5"


def build_endpoint(woop_num: str, uri_suffix: str) -> str:
    """
    Build the machine address for a woop number.

    build_endpoint("7", "xyz.viam.cloud") -> "woopwoop7-main.xyz.viam.cloud"
    """
    return f"{ENDPOINT_PREFIX}{woop_num}-main.{uri_suffix}"


def is_on(value: Optional[str]) -> bool:
    """True only for 'on', compared case-insensitively."""
    return value is not None and value.casefold() == "on"


def decode_json(body: bytes) -> Any:
    """
    Decode a JSON request body.

    Raises:
        DecodeError: Body is empty or not well-formed JSON
    """
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"Invalid JSON body: {e}")


def _validate(model, data: Any, what: str):
    if not isinstance(data, dict):
        raise ValidationError(f"{what} must be a JSON object, got {type(data).__name__}")
    try:
        return model(**data)
    except PydanticValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]) for err in e.errors()
        )
        raise ValidationError(f"Invalid {what}: {fields}")


def parse_alert(body: bytes) -> AlertPayload:
    """
    Decode and validate a monitoring alert body.

    Raises:
        DecodeError: Not JSON
        ValidationError: incident.summary / incident.state missing or not strings
    """
    return _validate(AlertPayload, decode_json(body), "alert payload")


def alert_commands(alert: AlertPayload) -> List[PinCommand]:
    """An open incident turns the strobe on; any other state turns it off."""
    return [
        PinCommand.level(STROBE_PIN, alert.incident.state.casefold() == "open", "strobe"),
    ]


def query_commands(query: Mapping[str, str]) -> List[PinCommand]:
    """Strobe then buzzer level from the `strobe` and `buzzer` query parameters."""
    return [
        PinCommand.level(STROBE_PIN, is_on(query.get("strobe")), "strobe"),
        PinCommand.level(BUZZER_PIN, is_on(query.get("buzzer")), "buzzer"),
    ]


def parse_lighting(body: bytes) -> LightingRequest:
    """
    Decode and validate a lighting body.

    Raises:
        DecodeError: Not JSON
        ValidationError: A present key has the wrong shape
    """
    return _validate(LightingRequest, decode_json(body), "lighting request")


def lighting_commands(request: LightingRequest) -> List[PinCommand]:
    """
    Commands for the keys present in the request.

    Order: red, green, blue, buzzer. Frequencies are truncated to whole Hz.
    """
    commands: List[PinCommand] = []
    for label, pin in (("red", RED_PIN), ("green", GREEN_PIN), ("blue", BLUE_PIN)):
        channel = getattr(request, label)
        if channel is not None:
            commands.append(PinCommand.pwm(pin, int(channel.freq), channel.duty, label))

    if request.buzzer is not None:
        commands.append(PinCommand.level(LIGHTING_BUZZER_PIN, request.buzzer, "buzzer"))

    return commands
