from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from telemetry_pusher.errors import (
    DataFileParseError,
    DataFileReadError,
    DataFileShapeError,
    EmptyDataError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DataFileResult:
    records: List[Any]
    random_key: Optional[str] = None


def load_data_file(path: str) -> DataFileResult:
    """
    Read a data file in one of two shapes:

      [{"sensor1": {...}}, {"sensor2": {...}}]
      {"random_key": "drp", "data": [{"sensor1": {...}}, ...]}

    Records are returned in file order. Elements are not checked here; a
    non-object element fails later, when that record is transformed.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise DataFileReadError(path, f"cannot read data file ({e})") from e

    try:
        root = json.loads(content)
    except json.JSONDecodeError as e:
        raise DataFileParseError(path, f"cannot parse data file as JSON ({e})") from e

    if isinstance(root, list):
        logger.info("Detected bare array data file")
        result = DataFileResult(records=root)
    elif isinstance(root, dict):
        logger.info("Detected wrapped object data file")
        result = _from_object(path, root)
    else:
        raise DataFileShapeError(path, "unsupported JSON root, expected an array or an object with a 'data' field")

    if not result.records:
        raise EmptyDataError(path, "no records found in data file")
    return result


def _from_object(path: str, obj: Dict[str, Any]) -> DataFileResult:
    data = obj.get("data")
    if not isinstance(data, list):
        raise DataFileShapeError(path, "'data' field missing or not an array")

    random_key = obj.get("random_key")
    if not isinstance(random_key, str) or not random_key:
        random_key = None
    return DataFileResult(records=data, random_key=random_key)
