from __future__ import annotations

from typing import Optional


class PusherError(Exception):
    """Base class for every error raised by telemetry_pusher."""


class ConfigError(PusherError):
    pass


class ClockError(PusherError):
    pass


class DataFileError(PusherError):
    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class DataFileReadError(DataFileError):
    pass


class DataFileParseError(DataFileError):
    pass


class DataFileShapeError(DataFileError):
    pass


class EmptyDataError(DataFileError):
    pass


class RecoverableError(PusherError):
    """A failure scoped to one send attempt; the send loop logs it and moves on."""


class TransformError(RecoverableError):
    pass


class DispatchTransportError(RecoverableError):
    pass


class DispatchStatusError(RecoverableError):
    def __init__(self, status_code: int, body: Optional[str]) -> None:
        super().__init__(f"HTTP {status_code} - {body or ''}")
        self.status_code = status_code
        self.body = body or ""
