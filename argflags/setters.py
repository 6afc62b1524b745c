"""
Argflags setters: turn a raw token into the value a field should hold.

A setter is chosen once per field type by setter(type) and then called for every
value bound to that field:

    value = setter(type)(text, current)

Variants
- Scalar: str/bool/int/float kinds through kinds.coerce().
- Decodable: types exposing the text-decoding hook

      def __unmarshal_text__(self, text: bytes) -> None: ...

  The hook fills the instance in place and raises on bad input. It takes
  precedence over every other variant (even for list subclasses). The current
  field value is reused when it already is an instance of the type; otherwise a
  zero value is allocated first.
- Collection: list[T]. The text is split on SLICE_DELIMITER (no quoting, no
  trimming) and each part goes through the element setter. The list is built
  aside and only returned when every element succeeded, so a failure never
  leaves a half-filled list in the field. A repeated flag replaces the list.
- Nullable: T | None. Delegates to the setter of T.
- Unsupported: everything else (tuples, dicts, unions, nested lists, ...). It
  fails with UnsupportedFieldTypeError only when a value is actually bound.

zero(type) builds the "empty" value of a type, used to allocate optional
sub-structures and decodable instances.
"""
import builtins
import dataclasses
import types
import typing

from .faults import ConfigurationError, FaultCode, getdoc
from .kinds import coerce, typename, unsupported

SLICE_DELIMITER = ","


def unwrap(type, /):
    """
    Split `T | None` (or Optional[T]) into (T, True); other types give (type, False).
    """
    if typing.get_origin(type) in (typing.Union, types.UnionType):
        arguments = typing.get_args(type)
        others = [argument for argument in arguments if argument is not types.NoneType]
        if len(others) == 1 and len(arguments) == 2:
            return others[0], True
    return type, False


def decodable(type, /):
    """
    True when the type provides a callable __unmarshal_text__ hook.
    """
    return isinstance(type, builtins.type) and callable(getattr(type, "__unmarshal_text__", None))


def zero(type, /):
    """
    Build the zero value of a type.

    - T | None → None
    - list / list[T] → []
    - dataclasses → an instance whose fields without defaults hold their own zero value
    - anything else → type() (so "" for str, False for bool, 0 for ints, 0.0 for floats)

    Raises ConfigurationError when the type cannot be allocated that way.
    """
    type, optional = unwrap(type)
    if optional:
        return None
    if type is list or typing.get_origin(type) is list:
        return []
    if isinstance(type, builtins.type) and dataclasses.is_dataclass(type):
        hints = typing.get_type_hints(type)
        return type(**{
            field.name: zero(hints[field.name])
            for field in dataclasses.fields(type)
            if field.init
            and field.default is dataclasses.MISSING
            and field.default_factory is dataclasses.MISSING
        })
    try:
        return type()
    except TypeError as error:
        raise ConfigurationError(
            f"cannot allocate an empty {typename(type)}",
            title="misconfigured schema",
            code=FaultCode.MISCONFIGURED_SCHEMA,
            type=type,
            cause=error,
            hint="make the type constructible without arguments",
            docs=getdoc(FaultCode.MISCONFIGURED_SCHEMA),
        ) from error


class Setter:
    """
    Base setter. `boolean` tells the applier whether the flag's value is optional.
    """
    boolean = False

    def __init__(self, type, /):
        self.type = type

    def __call__(self, text, current=None, /):
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__.lower()}({typename(self.type)})"


class Scalar(Setter):
    def __init__(self, type, /):
        super().__init__(type)
        self.boolean = type is bool

    def __call__(self, text, current=None, /):
        return coerce(text, self.type)


class Decodable(Setter):
    def __call__(self, text, current=None, /):
        instance = current if isinstance(current, self.type) else zero(self.type)
        instance.__unmarshal_text__(text.encode())
        return instance


class Collection(Setter):
    def __init__(self, type, element, /):
        super().__init__(type)
        self.element = element

    def __call__(self, text, current=None, /):
        return [self.element(part) for part in text.split(SLICE_DELIMITER)]


class Nullable(Setter):
    def __init__(self, type, inner, /):
        super().__init__(type)
        self.inner = inner
        self.boolean = inner.boolean

    def __call__(self, text, current=None, /):
        return self.inner(text, current)


class Unsupported(Setter):
    def __call__(self, text, current=None, /):
        raise unsupported(self.type)


def setter(type, /, *, element=False):
    """
    Pick the setter variant for a field type (dispatched once per field).

    `element` is True while building the setter of a list element, where a
    nested list is not supported.
    """
    inner, optional = unwrap(type)
    if optional:
        return Nullable(type, setter(inner, element=element))

    if decodable(type):
        return Decodable(type)

    if typing.get_origin(type) is list and not element:
        arguments = typing.get_args(type)
        if len(arguments) == 1:
            return Collection(type, setter(arguments[0], element=True))
        return Unsupported(type)

    if isinstance(type, builtins.type) and typing.get_origin(type) is None:
        if issubclass(type, (str, int, float)):
            return Scalar(type)

    return Unsupported(type)


__all__ = (
    "SLICE_DELIMITER",
    "zero",
)
