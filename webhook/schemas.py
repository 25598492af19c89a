"""
Woop Webhook - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Defines the request bodies accepted by the relay and the pin commands
derived from them.
"""

from dataclasses import dataclass
from typing import Literal, Optional

from pydantic import BaseModel, Field, StrictBool, StrictStr


# ============================================================================
# MONITORING ALERT PAYLOAD (variant A)
# ============================================================================

class Incident(BaseModel):
    """Incident object of a monitoring alert."""

    summary: StrictStr
    state: StrictStr = Field(..., description="'open' or 'closed'")

    class Config:
        extra = "allow"  # Alerting platforms send many more fields


class AlertPayload(BaseModel):
    """
    Monitoring alert webhook body.

    Only incident.summary and incident.state are used.
    """

    incident: Incident

    class Config:
        extra = "allow"


# ============================================================================
# LIGHTING REQUEST (variant C)
# ============================================================================

class ColorChannel(BaseModel):
    """PWM settings for one LED color channel."""

    freq: float = Field(..., ge=0, strict=True, allow_inf_nan=False, description="PWM frequency in Hz")
    duty: float = Field(..., ge=0, le=1, strict=True, allow_inf_nan=False, description="Duty cycle 0.0-1.0")


class LightingRequest(BaseModel):
    """
    Lighting body. Every key is optional; absent keys leave pins untouched.

    Example:
    {"red": {"freq": 500, "duty": 0.5}, "buzzer": true}
    """

    red: Optional[ColorChannel] = None
    green: Optional[ColorChannel] = None
    blue: Optional[ColorChannel] = None
    buzzer: Optional[StrictBool] = None

    class Config:
        extra = "ignore"


# ============================================================================
# PIN COMMANDS (OUTPUT)
# ============================================================================

PinCommandKind = Literal["set", "pwm"]


@dataclass(frozen=True)
class PinCommand:
    """
    A single pin write derived from a request.

    kind "set" writes `value`; kind "pwm" writes `freq` then `duty`.
    """

    pin: str
    kind: PinCommandKind
    label: str
    value: Optional[bool] = None
    freq: Optional[int] = None
    duty: Optional[float] = None

    @classmethod
    def level(cls, pin: str, value: bool, label: str) -> "PinCommand":
        return cls(pin=pin, kind="set", label=label, value=value)

    @classmethod
    def pwm(cls, pin: str, freq: int, duty: float, label: str) -> "PinCommand":
        return cls(pin=pin, kind="pwm", label=label, freq=freq, duty=duty)
