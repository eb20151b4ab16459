"""
Label value decoding.

A Kwollect label is any JSON scalar or an array of scalars. Labels end up as
one of: bool, float, int (unsigned 64-bit) or str. Arrays are folded into a
single string.
"""

import json
from typing import Any, Union

from kwollect_input.ingestion.core.errors import UnsupportedShape
from kwollect_input.ingestion.kwollect.constants import ARRAY_LABEL_SEPARATOR, U64_MAX

LabelValue = Union[bool, float, int, str]
NumericValue = Union[float, int]


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def classify_number(value: Any) -> NumericValue | None:
    """Float-first classification of a JSON number.

    Returns None when value is not a number the record model can hold
    (bool, negative integer, anything non-numeric).
    """
    # bool is an int subclass: keep it out of the numeric variants
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        if value < 0:
            return None
        if value > U64_MAX:
            return float(value)
        return value
    return None


def _element_text(element: Any) -> str:
    if isinstance(element, str):
        return element
    return json.dumps(element)


def decode_attribute(value: Any) -> LabelValue:
    """Decode one untyped JSON value into a LabelValue.

    Raises:
        UnsupportedShape: for objects, null and negative integers.
    """
    if isinstance(value, bool):
        return value

    if isinstance(value, (int, float)):
        number = classify_number(value)
        if number is None:
            raise UnsupportedShape("negative integer")
        return number

    if isinstance(value, str):
        return value

    if isinstance(value, list):
        return ARRAY_LABEL_SEPARATOR.join(_element_text(e) for e in value)

    raise UnsupportedShape(_kind(value))
