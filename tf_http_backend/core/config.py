"""Application configuration."""

from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tf_http_backend import __version__

DEFAULT_LISTEN_ADDR = ":3001"
DEFAULT_STORAGE_PATH = Path("/var/lib/terraform")

# Accepted spellings of true; anything else disables debug
_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}


def parse_address(address: str) -> tuple[str, int]:
    """Split a ``host:port`` bind address.

    An empty host (``:3001``) binds all interfaces. IPv6 hosts may be given
    in brackets (``[::1]:3001``).

    Raises:
        ValueError: If the address has no valid port
    """
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit() or int(port) > 65535:
        raise ValueError(f"invalid address {address!r}: expected host:port")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    return host or "0.0.0.0", int(port)


class Settings(BaseSettings):
    """
    Application settings.

    Values are read from ``TF_HTTP_*`` environment variables or a ``.env``
    file. Command line flags override them by passing keyword arguments.
    """

    app_name: str = "Terraform HTTP Backend"
    version: str = __version__

    # Server Settings
    address: str = Field(
        default=DEFAULT_LISTEN_ADDR,
        validation_alias=AliasChoices("TF_HTTP_ADDRESS", "TF_HTTP_ADDR"),
        description="The address to which HTTP server will bind",
    )
    keep_alive_timeout: int = Field(default=60, ge=1)

    # Storage Settings
    path: Path = Field(
        default=DEFAULT_STORAGE_PATH,
        description="The path to Terraform state files storage",
    )

    # Logging Settings
    debug: bool = False
    json_logs: bool = True

    model_config = SettingsConfigDict(
        env_prefix="TF_HTTP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        str_strip_whitespace=True,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("debug", mode="before")
    @classmethod
    def parse_debug(cls, value: Any) -> Any:
        """Treat unparseable debug values as disabled."""
        if isinstance(value, str):
            return value.strip() in _TRUE_VALUES
        return value

    @model_validator(mode="after")
    def validate_address(self) -> "Settings":
        """Validate the bind address."""
        parse_address(self.address)
        return self

    @property
    def bind_host(self) -> str:
        return parse_address(self.address)[0]

    @property
    def bind_port(self) -> int:
        return parse_address(self.address)[1]
