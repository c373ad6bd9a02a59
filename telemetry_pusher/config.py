from __future__ import annotations

import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from telemetry_pusher.errors import ConfigError

SERVER_ENV = "server"
DEVICE_TOKEN_ENV = "device_token"


class Settings(BaseModel):
    server: str = Field(..., min_length=1, description="Base URL of the ingestion server, e.g. http://localhost:8080")
    device_token: str = Field(..., min_length=1, description="Device access token used in the telemetry URL")

    @property
    def telemetry_url(self) -> str:
        return f"{self.server.rstrip('/')}/api/v1/{self.device_token}/telemetry"

    def masked_token(self) -> str:
        return f"{self.device_token[:8]}..."


def _lookup(env: Mapping[str, str], name: str) -> Optional[str]:
    # lower-case name first, upper-case as fallback
    value = env.get(name)
    if value is None:
        value = env.get(name.upper())
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    A .env file in the working directory is loaded first (existing variables win).
    Passing `environ` skips the .env lookup and reads only from that mapping.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    server = _lookup(environ, SERVER_ENV)
    if not server:
        raise ConfigError(f"environment variable '{SERVER_ENV}' not found")
    device_token = _lookup(environ, DEVICE_TOKEN_ENV)
    if not device_token:
        raise ConfigError(f"environment variable '{DEVICE_TOKEN_ENV}' not found")

    try:
        return Settings(server=server, device_token=device_token)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {e}") from e
