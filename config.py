"""
Configuration management for the Woop webhook.

Loads environment variables from .env file and provides an immutable,
typed configuration value that is built once per process.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Literal

from dotenv import load_dotenv

from device import Credentials, DeviceBackend, StubDeviceBackend, ViamDeviceBackend

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


DeviceBackendType = Literal["viam", "stub"]

REQUIRED_KEYS = ("api_key", "api_key_id", "uri_suffix", "secret")


@dataclass(frozen=True)
class WebhookConfig:
    """Process-wide webhook configuration from environment."""

    # Outbound credentials
    api_key: str = field(default="", repr=False)
    api_key_id: str = ""

    # Endpoint construction
    uri_suffix: str = ""
    alert_machine_uri: str = ""

    # Inbound shared secret
    secret: str = field(default="", repr=False)

    # Device connection
    device_backend: DeviceBackendType = "viam"
    connect_retries: int = 5
    connect_timeout_s: float = 20.0
    retry_backoff_s: float = 1.0
    board_name: str = "board"

    # Server
    log_level: str = "INFO"
    port: int = 8080
    environment: str = "development"

    @classmethod
    def from_env(cls) -> "WebhookConfig":
        """
        Load configuration from environment variables.

        Credential and secret variable names are lower-case to match the
        existing deployment environment.
        """
        uri_suffix = os.getenv("uri_suffix", "")
        return cls(
            api_key=os.getenv("api_key", ""),
            api_key_id=os.getenv("api_key_id", ""),
            uri_suffix=uri_suffix,
            alert_machine_uri=os.getenv("ALERT_MACHINE_URI") or f"woop-woop-main.{uri_suffix}",
            secret=os.getenv("secret", ""),
            device_backend=os.getenv("DEVICE_BACKEND", "viam").lower(),  # type: ignore
            connect_retries=int(os.getenv("CONNECT_RETRIES", "5")),
            connect_timeout_s=float(os.getenv("CONNECT_TIMEOUT_S", "20")),
            retry_backoff_s=float(os.getenv("RETRY_BACKOFF_S", "1")),
            board_name=os.getenv("BOARD_NAME", "board"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            port=int(os.getenv("PORT", "8080")),
            environment=os.getenv("ENVIRONMENT", "development"),
        )

    @property
    def credentials(self) -> Credentials:
        """Outbound API key credentials."""
        return Credentials(api_key=self.api_key, api_key_id=self.api_key_id)

    def missing_keys(self) -> List[str]:
        """Names of required settings that are empty."""
        return [key for key in REQUIRED_KEYS if not getattr(self, key)]

    def validate(self) -> bool:
        """Validate that required configuration is set."""
        return not self.missing_keys()

    def create_device_backend(self) -> DeviceBackend:
        """Create device backend instance based on configuration."""
        if self.device_backend == "stub":
            return StubDeviceBackend()
        if self.device_backend == "viam":
            return ViamDeviceBackend(dial_timeout=self.connect_timeout_s)
        raise ValueError(f"Unknown DEVICE_BACKEND: {self.device_backend}")


def get_config() -> WebhookConfig:
    """Get webhook configuration from the current environment."""
    return WebhookConfig.from_env()


if __name__ == "__main__":
    # Test configuration loading
    config = get_config()
    print("Configuration loaded:")
    print(f"  API key: {'✓ Set' if config.api_key else '✗ Missing'}")
    print(f"  API key id: {config.api_key_id or '✗ Missing'}")
    print(f"  URI suffix: {config.uri_suffix or '✗ Missing'}")
    print(f"  Secret: {'✓ Set' if config.secret else '✗ Missing'}")
    print(f"  Alert machine: {config.alert_machine_uri}")
    print(f"  Device backend: {config.device_backend}")
    print(f"  Environment: {config.environment}")
    print(f"\n  Validation: {'✓ PASSED' if config.validate() else '✗ FAILED'}")
