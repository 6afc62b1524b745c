"""
Argflags applier: bind "-name value" tokens onto a dataclass record.

What this module provides
- flagnames(tokens): names of every flag token, leading dashes stripped, in order.
- applyto(tokens, record, **options): bind the tokens to the record's fields and
  return the tokens no field claimed.
- ArgFlags: an immutable token sequence offering both operations as methods.

Binding rules
- A token starting with '-' is a flag; its name is the token without leading dashes
  and is resolved against the record (see argflags.resolver). Other tokens, and flags
  naming no field, are returned unused in their original order.
- Value window: a non-boolean flag takes the next token as its value unless that
  token is missing or is itself a flag, which is a NoValueFoundError. A boolean flag
  only takes the next token when it reads as a boolean literal ("true", "0", "F", ...);
  otherwise the flag means true and the next token is left alone.
- The first failing flag aborts the call. Fields set by earlier flags keep their values.

Quick example
    @dataclass
    class Options:
        verbose: bool = False
        names: list[str] = tag("names", "n", default_factory=list)

    options = Options()
    applyto(["-verbose", "input.txt", "-n", "a,b"], options)  # -> ["input.txt"]
"""
import builtins
import dataclasses
import logging
import shlex
import sys
from collections.abc import Iterable

from .faults import FaultCode, FlagException, NoValueFoundError, UnresolvableTargetError, getdoc, trigger
from .kinds import parsebool
from .resolver import FlagField, schema
from .utils import Unset, coalesce, ordinal

logger = logging.getLogger(__name__)

FLAG_MARKER = "-"


def _isflag(token):
    return token.startswith(FLAG_MARKER)


def _tokenize(tokens):
    """
    Normalize the accepted token inputs into a list of strings.

    - Unset: the current process arguments (sys.argv[1:]).
    - str: a shell-like string, split with shlex.split.
    - Iterable[str]: used as-is (empty strings are kept; they are legitimate values).
    """
    tokens = coalesce(tokens, sys.argv[1:])
    if isinstance(tokens, str):
        return shlex.split(tokens)
    if isinstance(tokens, Iterable):
        tokens = list(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("tokens must be a string or an iterable of strings")
        return tokens
    raise TypeError("tokens must be a string or an iterable of strings")


def flagnames(tokens, /):
    """
    Return the names of all flag tokens (leading dashes stripped), duplicates retained.
    """
    return [token.lstrip(FLAG_MARKER) for token in _tokenize(tokens) if _isflag(token)]


def _window(tokens, boolean):
    """
    Pick the value of a matched flag from the tokens that follow it.

    Returns (value, consumed); value is Unset when a non-boolean flag has no value.
    """
    value = tokens[0] if tokens and not _isflag(tokens[0]) else Unset
    if boolean:
        try:
            parsebool(value)
        except ValueError:
            return "true", 0
    if value is Unset:
        return Unset, 0
    return value, 1


def applyto(tokens, record, /, **options):
    """
    Apply flag tokens to the fields of a dataclass record.

    Parameters
    - tokens: Iterable[str] | str | Unset
      The tokens to bind; a string is split shell-style, Unset reads sys.argv[1:].
    - record: a (non-frozen) dataclass instance, mutated in place.
    - options: runtime switches forwarded to trigger() for faults
      • shell: print faults on stderr and exit(1) instead of raising (default False).
      • fancy: render faults inside a panel (default False).
      • colorful: colorize rendered faults (default True).
      • prog: program name shown in rendered faults.

    Returns
    - list[str]: tokens that were not flags, or flags that matched no field, in order.

    Raises (non-shell mode)
    - UnresolvableTargetError: record is not a mutable dataclass instance.
    - ConfigurationError: the record type has a malformed promoted field.
    - NoValueFoundError: a non-boolean flag has no value.
    - UnsupportedFieldTypeError / CoercionError: a value cannot be set.
    """
    options = {"shell": False, "fancy": False, "colorful": True} | options
    tokens = _tokenize(tokens)

    if (
        isinstance(record, builtins.type) or
        not dataclasses.is_dataclass(record) or
        type(record).__dataclass_params__.frozen
    ):
        trigger(UnresolvableTargetError(
            f"flags can only be applied to a mutable dataclass instance, not {type(record).__qualname__}",
            title="unresolvable target",
            code=FaultCode.UNRESOLVABLE_TARGET,
            hint="pass an instance of a (non-frozen) @dataclass",
            docs=getdoc(FaultCode.UNRESOLVABLE_TARGET),
        ), **options)

    layout = schema(type(record))
    unused = []
    index = 0

    while index < len(tokens):
        token = tokens[index]

        if not _isflag(token):
            unused.append(token)
            index += 1
            continue

        if (path := layout.resolve(token.lstrip(FLAG_MARKER))) is None:
            logger.debug("no field matches flag %r, leaving it unused", token)
            unused.append(token)
            index += 1
            continue

        field = FlagField(*layout.materialize(record, path))
        value, consumed = _window(tokens[index + 1:], field.boolean)

        if value is Unset:
            trigger(NoValueFoundError(
                "no value found for flag %r at %s position" % (token, ordinal(index + 1)),
                title="no value found",
                code=FaultCode.NO_VALUE_FOUND,
                token=token,
                index=index + 1,
                field=field.name,
                hint="pass a value after the flag (for example: %s <value>)" % token,
                docs=getdoc(FaultCode.NO_VALUE_FOUND),
            ), **options)

        try:
            field.setvalue(value)
        except FlagException as fault:
            trigger(fault, message="flag %r at %s position: %s" % (token, ordinal(index + 1), fault.message),
                    token=token, index=index + 1, **options)

        logger.debug("flag %r set %s to %r (consumed %d token(s))", token, field.name, value, consumed)
        index += 1 + consumed

    return unused


class ArgFlags(tuple):
    """
    Immutable sequence of command-line tokens that may contain flags.

    str() joins the tokens with spaces; flagnames() and applyto() behave like the
    module-level functions of the same name.
    """

    def __new__(cls, tokens=Unset, /):
        return super().__new__(cls, _tokenize(tokens))

    def __str__(self):
        return " ".join(self)

    def __repr__(self):
        return f"ArgFlags({list(self)!r})"

    def flagnames(self):
        return flagnames(self)

    def applyto(self, record, /, **options):
        return applyto(self, record, **options)


__all__ = (
    "FLAG_MARKER",
    "ArgFlags",
    "flagnames",
    "applyto",
)
