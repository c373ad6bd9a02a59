from __future__ import annotations

import json
import logging
import random
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from telemetry_pusher.errors import TransformError

logger = logging.getLogger(__name__)

SEND_TIME_FIELD = "send_time"
SEND_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
FLOAT_FALLBACK_UPPER = 100.0


def is_number(value: Any) -> bool:
    # bool is an int subclass but not a JSON number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def synthesize_value(value: Any, rng: random.Random) -> Any:
    """
    Random replacement that keeps the numeric kind of `value`.

    int   -> randint in [1, max(1, value*2)]
    float -> uniform in [1.0, value*2], or [1.0, 100.0] when value <= 0
    other -> returned unchanged
    """
    if not is_number(value):
        return value
    if isinstance(value, int):
        return rng.randint(1, max(1, value * 2))

    upper = value * 2 if value > 0 else FLOAT_FALLBACK_UPPER
    return rng.uniform(1.0, max(1.0, upper))


def transform_record(
    record: Any,
    random_key: Optional[str],
    rng: random.Random,
    now: Callable[[], datetime] = datetime.now,
) -> Dict[str, Any]:
    """
    Turn one record into the telemetry values for a single send.

    Nested objects are kept whole under their top-level key. When `random_key`
    names a numeric field inside a nested object, a copy of that object is sent
    with the field replaced by `synthesize_value`. The input is never mutated.
    """
    if not isinstance(record, dict):
        raise TransformError(f"expected a JSON object, got {type(record).__name__}")

    values: Dict[str, Any] = {}
    for key, value in record.items():
        if random_key and isinstance(value, dict) and is_number(value.get(random_key)):
            original = value[random_key]
            modified = dict(value)
            modified[random_key] = synthesize_value(original, rng)
            logger.info(
                "Randomized field '%s' in '%s': %s -> %s",
                random_key,
                key,
                json.dumps(original),
                json.dumps(modified[random_key]),
            )
            values[key] = modified
        else:
            values[key] = value

    if not values:
        raise TransformError("no telemetry values extracted from record")

    values[SEND_TIME_FIELD] = now().strftime(SEND_TIME_FORMAT)
    return values
