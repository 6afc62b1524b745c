"""
Argflags value kinds and string coercion.

Overview
- parsebool(text): boolean literal parsing ("1", "t", "T", "TRUE", "true", "True" and
  their false counterparts "0", "f", "F", "FALSE", "false", "False").
- parseint(text, bits=64): base-10 signed integer parsing bounded to a bit width.
- parsefloat(text, bits=64): decimal/hexadecimal float parsing, optionally narrowed
  to single precision.
- Sized kinds: int8, int16, int32, int64, float32, float64. These are int/float
  subclasses usable as field annotations when a width other than the default is
  wanted. Plain int is treated as int64 and plain float as float64.
- coerce(text, type): convert a raw token into the given kind, or fail with
  UnsupportedFieldTypeError naming the type.

Failure contract
- Malformed or out-of-range input raises ValueError with a short reason
  ("invalid syntax" / "value out of range").
- Kinds coerce() does not know raise UnsupportedFieldTypeError.

Numbers are strict: surrounding whitespace and '_' digit separators are rejected.
"""
import builtins
import math
import re
import struct
import typing

from .faults import FaultCode, UnsupportedFieldTypeError, getdoc

_INTEGER = re.compile(r"[+-]?[0-9]+")
_DECIMAL = re.compile(r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)", re.IGNORECASE)
_HEXADECIMAL = re.compile(r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)")

_BOOLEANS = {
    "1": True, "t": True, "T": True, "TRUE": True, "true": True, "True": True,
    "0": False, "f": False, "F": False, "FALSE": False, "false": False, "False": False,
}


def typename(type, /):
    """
    Readable name of a kind for messages (generic aliases keep their parameters).
    """
    if isinstance(type, builtins.type) and typing.get_origin(type) is None:
        return type.__name__
    return repr(type)


class _SignedInteger(int):
    """
    Base of the sized integer kinds; construction enforces the width.
    """
    __bits__ = 64

    def __init_subclass__(cls, /, bits=64, **options):
        super().__init_subclass__(**options)
        cls.__bits__ = bits

    def __new__(cls, value=0, /):
        self = super().__new__(cls, value)
        limit = 1 << cls.__bits__ - 1
        if not -limit <= self < limit:
            raise ValueError(f"{int(self)} is out of range for {cls.__name__}")
        return self

    def __repr__(self):
        return f"{type(self).__name__}({int(self)})"


class int8(_SignedInteger, bits=8): ...
class int16(_SignedInteger, bits=16): ...
class int32(_SignedInteger, bits=32): ...
class int64(_SignedInteger, bits=64): ...


class float64(float):
    """
    Double precision float kind (same as float).
    """
    __bits__ = 64

    def __repr__(self):
        return f"{type(self).__name__}({float(self)!r})"


class float32(float64):
    """
    Single precision float kind; construction narrows the value to 32 bits.
    """
    __bits__ = 32

    def __new__(cls, value=0.0, /):
        return super().__new__(cls, _narrow(float(value)))


def _narrow(value):
    # older runtimes raise on overflow, newer ones round to inf
    try:
        narrowed = struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        narrowed = math.inf
    if math.isinf(narrowed) and not math.isinf(value):
        raise ValueError(f"{value!r} is out of range for float32")
    return narrowed


def parsebool(text, /):
    try:
        return _BOOLEANS[text]
    except (KeyError, TypeError):
        raise ValueError(f"parsing {text!r}: invalid syntax") from None


def parseint(text, /, bits=64):
    """
    Parse a base-10 signed integer that must fit in `bits` bits.
    """
    if not isinstance(text, str) or not _INTEGER.fullmatch(text):
        raise ValueError(f"parsing {text!r}: invalid syntax")
    value = int(text, 10)
    limit = 1 << bits - 1
    if not -limit <= value < limit:
        raise ValueError(f"parsing {text!r}: value out of range")
    return value


def parsefloat(text, /, bits=64):
    """
    Parse a float literal; with bits=32 the result is narrowed to single precision.

    Accepted forms
    - decimal: "1", "-1.5", ".5", "1e10", "2.5E-3"
    - hexadecimal: "0x1p-2", "0x1.8p1"
    - special values in any case: "inf", "+Infinity", "NaN"

    Finite literals that overflow the requested precision are rejected.
    """
    if not isinstance(text, str):
        raise ValueError(f"parsing {text!r}: invalid syntax")
    if _DECIMAL.fullmatch(text):
        value = float(text)
    elif _HEXADECIMAL.fullmatch(text):
        try:
            value = float.fromhex(text)
        except OverflowError:
            raise ValueError(f"parsing {text!r}: value out of range") from None
    else:
        raise ValueError(f"parsing {text!r}: invalid syntax")

    if math.isinf(value) and "inf" not in text.lower():
        raise ValueError(f"parsing {text!r}: value out of range")
    if bits == 32:
        try:
            value = _narrow(value)
        except ValueError:
            raise ValueError(f"parsing {text!r}: value out of range") from None
    return value


def coerce(text, type, /):
    """
    Convert a raw string into a value of the given kind.

    Parameters
    - text: str
      The raw token.
    - type: type
      The target kind: str, bool, int (and sized/derived integer kinds), float
      (and float32/float64). Subclasses are honored: the parsed value is passed
      through the subclass constructor (so an IntEnum receives the parsed int).

    Returns
    - The converted value.

    Raises
    - ValueError: when the text does not parse as the kind.
    - UnsupportedFieldTypeError: when the kind is not supported.
    """
    if isinstance(type, builtins.type) and typing.get_origin(type) is None:
        if issubclass(type, str):
            return text if type is str else type(text)
        if issubclass(type, bool):
            return parsebool(text)
        if issubclass(type, int):
            value = parseint(text, getattr(type, "__bits__", 64))
            return value if type is int else type(value)
        if issubclass(type, float):
            value = parsefloat(text, getattr(type, "__bits__", 64))
            return value if type is float else type(value)

    raise unsupported(type)


def unsupported(type, /):
    """
    Build the fault reported when a value is bound to a kind argflags cannot set.
    """
    return UnsupportedFieldTypeError(
        f"{typename(type)} is an unsupported field type",
        title="unsupported field type",
        code=FaultCode.UNSUPPORTED_FIELD_TYPE,
        type=type,
        hint="use str, bool, int, float, a list of those, or a type providing __unmarshal_text__",
        docs=getdoc(FaultCode.UNSUPPORTED_FIELD_TYPE),
    )


__all__ = (
    "int8",
    "int16",
    "int32",
    "int64",
    "float32",
    "float64",
    "parsebool",
    "parseint",
    "parsefloat",
    "coerce",
)
