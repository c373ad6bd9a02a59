from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests
from pydantic import BaseModel, Field

from telemetry_pusher.config import Settings
from telemetry_pusher.errors import ClockError, DispatchStatusError, DispatchTransportError
from telemetry_pusher.transform import SEND_TIME_FIELD

logger = logging.getLogger(__name__)


class TelemetryEnvelope(BaseModel):
    ts: int = Field(..., ge=0, description="Milliseconds since the Unix epoch")
    values: Dict[str, Any] = Field(..., description="Telemetry key/value pairs")


@dataclass(frozen=True)
class DispatchResult:
    status_code: int
    body: str
    envelope: TelemetryEnvelope


def now_millis(clock: Callable[[], float] = time.time) -> int:
    try:
        seconds = clock()
    except (OSError, OverflowError, ValueError) as e:
        raise ClockError(f"cannot read system clock: {e}") from e
    if seconds < 0:
        raise ClockError("system clock is before the Unix epoch")
    return int(seconds * 1000)


class TelemetryDispatcher:
    """POSTs one set of telemetry values per call to the device telemetry endpoint."""

    def __init__(
        self,
        settings: Settings,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings
        self.session = session or requests.Session()
        self.timeout = timeout
        self.clock = clock

    @property
    def url(self) -> str:
        return self.settings.telemetry_url

    def build_envelope(self, values: Dict[str, Any]) -> TelemetryEnvelope:
        return TelemetryEnvelope(ts=now_millis(self.clock), values=values)

    def send(self, values: Dict[str, Any]) -> DispatchResult:
        envelope = self.build_envelope(values)

        kwargs: Dict[str, Any] = {}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        try:
            resp = self.session.post(
                self.url,
                json=envelope.model_dump(),
                headers={"Content-Type": "application/json"},
                **kwargs,
            )
        except requests.RequestException as e:
            raise DispatchTransportError(f"HTTP request failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise DispatchStatusError(resp.status_code, resp.text)

        logger.info("Telemetry sent at %s", values.get(SEND_TIME_FIELD))
        logger.info("Sent values:\n%s", json.dumps(values, indent=2, ensure_ascii=False))
        return DispatchResult(status_code=resp.status_code, body=resp.text, envelope=envelope)

    def close(self) -> None:
        self.session.close()
