"""
Kwollect record codec.

One Kwollect measure looks like:

    {
        "timestamp": "2025-07-21T16:15:31+02:00",   # or 1718892920.005984
        "metric_id": "wattmetre_power_watt",
        "device_id": "taurus-7",
        "value": 131.7,                              # or 131
        "labels": {"_device_orig": "wattmetre1-port6"}
    }

Every field is required. A record that fails on any field is rejected as a
whole, never partially populated.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict

import pandas as pd

from kwollect_input.ingestion.core.errors import (
    BadTimestamp,
    BadValue,
    DecodeError,
    MissingField,
)
from kwollect_input.ingestion.kwollect.attributes import (
    LabelValue,
    NumericValue,
    classify_number,
    decode_attribute,
)
from kwollect_input.ingestion.kwollect.constants import ENCODED_FIELD_ORDER, REQUIRED_FIELDS

# Full date, full time, at most microseconds, explicit offset
RFC3339_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}(\.\d{1,6})?(Z|[+-]\d{2}:\d{2})"
)


@dataclass(frozen=True)
class MeasureRecord:
    """A normalized Kwollect measure.

    Attributes:
        device_id: Device that reported the measure (e.g. taurus-7).
        metric_id: Measured quantity (e.g. wattmetre_power_watt).
        timestamp: Timezone-aware instant of the measure.
        value: float, or int for exact non-negative integers.
        labels: Label name -> bool / float / int / str. May be empty.
    """

    device_id: str
    metric_id: str
    timestamp: datetime
    value: NumericValue
    labels: Dict[str, LabelValue]


# -----------------------------
# Field decoders
# -----------------------------
def _decode_string(field: str, raw: Any) -> str:
    if not isinstance(raw, str):
        raise BadValue(field, f"expected a string, got {type(raw).__name__}")
    return raw


def decode_timestamp(raw: Any) -> datetime:
    """Epoch seconds (JSON number) or RFC-3339 string -> aware datetime."""
    if isinstance(raw, bool):
        raise BadTimestamp()

    if isinstance(raw, (int, float)):
        try:
            return datetime.fromtimestamp(raw, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise BadTimestamp(f"epoch seconds out of range: {raw}") from e

    if isinstance(raw, str):
        if not RFC3339_PATTERN.fullmatch(raw):
            raise BadTimestamp(f"not an RFC-3339 string with UTC offset: {raw!r}")
        try:
            ts = pd.to_datetime(raw, format="ISO8601")
        except (ValueError, TypeError) as e:
            raise BadTimestamp(f"not an RFC-3339 string: {raw!r}") from e
        if ts is pd.NaT or ts.tzinfo is None:
            raise BadTimestamp(f"RFC-3339 string without UTC offset: {raw!r}")
        return ts.to_pydatetime()

    raise BadTimestamp()


def decode_value(raw: Any) -> NumericValue:
    number = classify_number(raw)
    if number is None:
        raise BadValue("value", f"expected a float or non-negative integer, got {raw!r}")
    return number


def decode_labels(raw: Any) -> Dict[str, LabelValue]:
    if not isinstance(raw, dict):
        raise BadValue("labels", f"expected an object, got {type(raw).__name__}")

    labels: Dict[str, LabelValue] = {}
    for key, value in raw.items():
        try:
            labels[key] = decode_attribute(value)
        except DecodeError as e:
            raise BadValue("labels", f"label {key!r}: {e}") from e
    return labels


# -----------------------------
# Record
# -----------------------------
def decode_record(obj: Any) -> MeasureRecord:
    """JSON object -> MeasureRecord.

    Raises:
        MissingField: a required key is absent.
        BadValue: a key is present but its JSON shape is not accepted
            (BadTimestamp for the timestamp).
    """
    if not isinstance(obj, dict):
        raise BadValue("record", f"expected an object, got {type(obj).__name__}")

    for field in REQUIRED_FIELDS:
        if field not in obj:
            raise MissingField(field)

    return MeasureRecord(
        device_id=_decode_string("device_id", obj["device_id"]),
        metric_id=_decode_string("metric_id", obj["metric_id"]),
        timestamp=decode_timestamp(obj["timestamp"]),
        value=decode_value(obj["value"]),
        labels=decode_labels(obj["labels"]),
    )


def encode_record(record: MeasureRecord) -> dict:
    """MeasureRecord -> JSON object, keys in wire order.

    The timestamp is written as RFC-3339 with microseconds so that
    decode_record(encode_record(r)) == r.
    """
    fields = {
        "timestamp": record.timestamp.isoformat(timespec="microseconds"),
        "metric_id": record.metric_id,
        "device_id": record.device_id,
        "value": record.value,
        "labels": dict(record.labels),
    }
    return {name: fields[name] for name in ENCODED_FIELD_ORDER}
