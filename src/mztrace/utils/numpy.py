"""Serializable numpy array types."""

from __future__ import annotations

import base64
import json
from typing import Any, Callable, Literal, TypeVar

import numpy
from numpy import floating, frombuffer, integer
from numpy.typing import NDArray
from pydantic.functional_serializers import PlainSerializer
from pydantic.functional_validators import BeforeValidator
from typing_extensions import Annotated


def array_to_json_str(arr: NDArray) -> str:
    """Serialize a numpy array as a JSON string.

    :param arr: The numpy array to serialize
    :return: JSON string with the following three fields. `dtype` store the array dtype, `shape` contains the array
        shape and `base64_bytes` stores the array data in base64 format.

    """
    d = {
        "dtype": str(arr.dtype),
        "shape": arr.shape,
        "base64_bytes": base64.b64encode(arr.tobytes()).decode("utf8"),
    }
    return json.dumps(d)


def json_str_to_array(s: str):
    """Decode a string generated with array_to_json_str into a numpy array.

    :param s: A string serialized numpy array
    :return: a new numpy instance

    """
    d = json.loads(s)
    dtype = d["dtype"]
    shape = d["shape"]
    data = base64.b64decode(bytes(d["base64_bytes"], "utf8"))
    return frombuffer(data, dtype=dtype).reshape(shape).copy()


def _make_array_validator(dtype: type) -> Callable[[Any], NDArray]:
    """Create a validator that converts serialized strings or sequences of numbers into arrays."""

    def validate(value: Any) -> NDArray:
        if isinstance(value, str):
            return json_str_to_array(value)
        if isinstance(value, (list, tuple)):
            return numpy.array(value, dtype=dtype)
        return value

    return validate


validate_float_array = _make_array_validator(float)
validate_int_array = _make_array_validator(int)


FloatDtype = TypeVar("FloatDtype", bound=floating)
IntDtype = TypeVar("IntDtype", bound=integer)


FloatArray1D = Annotated[
    NDArray[FloatDtype],
    Literal["N"],
    BeforeValidator(validate_float_array),
    PlainSerializer(array_to_json_str, return_type=str),
]

IntArray1D = Annotated[
    NDArray[IntDtype],
    Literal["N"],
    BeforeValidator(validate_int_array),
    PlainSerializer(array_to_json_str, return_type=str),
]
