"""
Argflags faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fatal issue a bind
  pass can surface. Codes are grouped by domain to keep copy consistent and make
  logs/searches predictable.
- FlagException: base type that carries message + options and knows how to render
  itself (rich), surface itself (__trigger__) and copy itself with overrides
  (__replace__, used through copy.replace).
- trigger(): central entry point to surface a fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages: faults raised while binding a flag include the ordinal
  position of the flag token (“flag '-count' at third position ...”).
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.

Integration
- applyto() builds faults and calls trigger(fault, **options).
- In non-shell mode, exceptions are raised; in shell mode, they are rendered via rich
  on stderr and the process exits with status 1.
- ConfigurationError signals a bug in the record schema; it is always raised, never
  printed-and-exited, so host applications and tests can handle it.
"""
import copy
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across argflags (stable identifiers).

    grouping (by high-level domain)
    - target (1110x)
      • UNRESOLVABLE_TARGET
    - values (1111x)
      • NO_VALUE_FOUND, UNSUPPORTED_FIELD_TYPE, UNPARSABLE_VALUE
    - schema (1120x)
      • MISCONFIGURED_SCHEMA

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- target errors (11xxx) ---
    UNRESOLVABLE_TARGET         = 11101

    # --- value errors (11xxx) ---
    NO_VALUE_FOUND              = 11111
    UNSUPPORTED_FIELD_TYPE      = 11112
    UNPARSABLE_VALUE            = 11113

    # --- schema errors (11xxx) ---
    MISCONFIGURED_SCHEMA        = 11201

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class FlagException(Exception):
    """
    base class of every argflags fault.

    options (all optional, read-only once built)
    - title, code, hint, docs: copy shown by the renderer.
    - token, index, field, type, value: context of the failing flag.
    - cause: the underlying exception; raised faults are chained to it.
    - shell, fancy, colorful, prog: rendering/surfacing switches (see trigger()).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def cause(self):
        return self.options.get("cause")

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = getattr(main, "__prog__", self.options.get("prog") or os.path.basename(sys.argv[0]) or "argflags")
        code = self.code.normalize() if isinstance(self.code, FaultCode) else "-"

        header = Text.assemble(
            "[ ",
            text(prog, styler("prog-name")),
            " — ",
            text(code, styler("code")),
            " | ",
            text(str(self.options.get("title", "fault")).title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from self.cause
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        message = overrides.pop("message", self.message)
        return type(self)(message, **{**self.options, **overrides})


class UnresolvableTargetError(FlagException): ...
class NoValueFoundError(FlagException): ...
class UnsupportedFieldTypeError(FlagException): ...
class CoercionError(FlagException): ...


class ConfigurationError(FlagException):
    """
    the record schema is malformed (e.g. a promoted field that is not a dataclass).

    this is a programmer error in the record type, not bad input, so it ignores
    shell mode and is always raised.
    """

    def __trigger__(self) -> None:
        raise self from self.cause


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see FlagException).
    - options are merged into the fault via copy.replace(fault, **options) before
      triggering; a 'message' option replaces the message itself.
    - in shell mode, rendering happens via the rich console; otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FlagException",
    "UnresolvableTargetError",
    "NoValueFoundError",
    "UnsupportedFieldTypeError",
    "CoercionError",
    "ConfigurationError",
    "FaultCode",
    "trigger",
    "getdoc",
)
