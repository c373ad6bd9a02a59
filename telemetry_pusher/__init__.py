from telemetry_pusher.config import Settings, load_settings
from telemetry_pusher.controller import SendLoop, SendState
from telemetry_pusher.dispatcher import DispatchResult, TelemetryDispatcher, TelemetryEnvelope
from telemetry_pusher.loader import DataFileResult, load_data_file
from telemetry_pusher.transform import synthesize_value, transform_record

__version__ = "0.1.0"

__all__ = [
    "DataFileResult",
    "DispatchResult",
    "SendLoop",
    "SendState",
    "Settings",
    "TelemetryDispatcher",
    "TelemetryEnvelope",
    "load_data_file",
    "load_settings",
    "synthesize_value",
    "transform_record",
]
