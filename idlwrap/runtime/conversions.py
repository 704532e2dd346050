"""WebIDL value conversions for Python values.

Generated wrapper modules call these functions on every argument and
attribute assignment.  Each raises :class:`TypeError` prefixed with the
caller's ``context`` when a value cannot be converted.
"""

from __future__ import annotations

import math
import struct
from typing import Any, Callable, Iterable, List

DEFAULT_CONTEXT = "The provided value"


def _to_number(value: Any, context: str) -> float | int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if value is None:
        return 0
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text, 0)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return math.nan
    raise TypeError(f"{context} is not a number.")


def _integer(bits: int, signed: bool) -> Callable[..., int]:
    if signed:
        lower, upper = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1
    else:
        lower, upper = 0, 2**bits - 1

    def convert(
        value: Any,
        *,
        context: str = DEFAULT_CONTEXT,
        enforce_range: bool = False,
        clamp: bool = False,
    ) -> int:
        number = _to_number(value, context)
        if enforce_range:
            if isinstance(number, float) and not math.isfinite(number):
                raise TypeError(f"{context} is not a finite number.")
            integer = int(number)
            if integer < lower or integer > upper:
                raise TypeError(f"{context} is outside the accepted range of {lower} to {upper}.")
            return integer
        if isinstance(number, float):
            if math.isnan(number):
                return 0
            if clamp:
                if math.isinf(number):
                    return upper if number > 0 else lower
                # round() rounds half to even
                return max(lower, min(upper, round(number)))
            if math.isinf(number):
                return 0
            number = int(number)
        if clamp:
            return max(lower, min(upper, number))
        number %= 2**bits
        if signed and number > upper:
            number -= 2**bits
        return number

    convert.__name__ = f"{'' if signed else 'unsigned_'}int{bits}"
    return convert


byte = _integer(8, signed=True)
octet = _integer(8, signed=False)
short = _integer(16, signed=True)
unsigned_short = _integer(16, signed=False)
long = _integer(32, signed=True)
unsigned_long = _integer(32, signed=False)
long_long = _integer(64, signed=True)
unsigned_long_long = _integer(64, signed=False)


def _float32(number: float, context: str) -> float:
    try:
        result = struct.unpack("f", struct.pack("f", number))[0]
    except OverflowError:
        result = math.inf
    if math.isinf(result):
        raise TypeError(f"{context} is outside the range of a float.")
    return result


def double(value: Any, *, context: str = DEFAULT_CONTEXT) -> float:
    number = float(_to_number(value, context))
    if not math.isfinite(number):
        raise TypeError(f"{context} is not a finite floating-point value.")
    return number


def unrestricted_double(value: Any, *, context: str = DEFAULT_CONTEXT) -> float:
    return float(_to_number(value, context))


def float_(value: Any, *, context: str = DEFAULT_CONTEXT) -> float:
    number = double(value, context=context)
    return _float32(number, context)


def unrestricted_float(value: Any, *, context: str = DEFAULT_CONTEXT) -> float:
    number = unrestricted_double(value, context=context)
    if not math.isfinite(number):
        return number
    try:
        return struct.unpack("f", struct.pack("f", number))[0]
    except OverflowError:
        # Older interpreters raise instead of rounding to infinity.
        return math.copysign(math.inf, number)


def boolean(value: Any, *, context: str = DEFAULT_CONTEXT) -> bool:
    return bool(value)


def DOMString(
    value: Any, *, context: str = DEFAULT_CONTEXT, treat_null_as_empty_string: bool = False
) -> str:
    if value is None and treat_null_as_empty_string:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def ByteString(value: Any, *, context: str = DEFAULT_CONTEXT) -> str:
    text = DOMString(value, context=context)
    if any(ord(char) > 255 for char in text):
        raise TypeError(f"{context} is not a valid ByteString.")
    return text


def USVString(value: Any, *, context: str = DEFAULT_CONTEXT) -> str:
    text = DOMString(value, context=context)
    return "".join("\ufffd" if 0xD800 <= ord(char) <= 0xDFFF else char for char in text)


def object_(value: Any, *, context: str = DEFAULT_CONTEXT) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        raise TypeError(f"{context} is not an object.")
    return value


def any_(value: Any, *, context: str = DEFAULT_CONTEXT) -> Any:
    return value


def void(value: Any = None, *, context: str = DEFAULT_CONTEXT) -> None:
    return None


def sequence(
    value: Any, convert: Callable[[Any], Any], *, context: str = DEFAULT_CONTEXT
) -> List[Any]:
    """Convert an iterable (but not a string or mapping) element by element."""
    if value is None or isinstance(value, (str, bytes, dict)) or not isinstance(value, Iterable):
        raise TypeError(f"{context} is not an iterable object.")
    return [convert(item) for item in value]


__all__ = [
    "ByteString",
    "DOMString",
    "USVString",
    "any_",
    "boolean",
    "byte",
    "double",
    "float_",
    "long",
    "long_long",
    "object_",
    "octet",
    "sequence",
    "short",
    "unrestricted_double",
    "unrestricted_float",
    "unsigned_long",
    "unsigned_long_long",
    "unsigned_short",
    "void",
]
