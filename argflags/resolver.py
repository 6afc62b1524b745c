r"""
Argflags resolver: which field of a record does a flag name refer to?

Records are dataclass instances. Every public field (name not starting with '_')
can be targeted by a flag named after it, compared case-insensitively. A field
may declare extra names under the "flag" metadata key as a comma-separated list:

    @dataclass
    class Options:
        names: list[str] = field(default_factory=list, metadata={"flag": "names,n"})
        verbose: bool = False
        server: Server | None = tag("+", default=None)

Reserved tag entries
- '+': the field is a promoted sub-structure; the fields of its dataclass become
  matchable as if declared on the parent. Its type must be a dataclass or an
  optional dataclass; None values are allocated when one of its fields is set.
- '-' and 'omitempty': recognized and never treated as names. They carry no
  other behavior.

Resolution order (first match wins)
1. fields of the record in declaration order, by name then by alias;
2. promoted fields in declaration order, recursively, with the same rule.

Schemas are built once per dataclass and cached. Building validates the whole
promotion tree eagerly and raises ConfigurationError for a promoted field that is
not a dataclass (or optional dataclass), for a frozen promoted dataclass, for a
promotion cycle, and for annotations that cannot be resolved.
"""
import builtins
import dataclasses
import logging
import typing

from .faults import ConfigurationError, CoercionError, FaultCode, FlagException, getdoc
from .kinds import typename
from .setters import setter, unwrap, zero

logger = logging.getLogger(__name__)

FLAG_TAG_NAME = "flag"
TAG_DELIMITER = ","
PROMOTED_MARKER = "+"
RESERVED_MARKERS = frozenset((PROMOTED_MARKER, "-", "omitempty"))

_schemas = {}


def aliases(tag, /):
    """
    Parse a flag tag into the tuple of names it declares (markers and empty entries dropped).
    """
    return tuple(name for name in tag.split(TAG_DELIMITER) if name and name not in RESERVED_MARKERS)


def tag(*names, **options):
    """
    Build a dataclasses.field() carrying the given flag tag entries.

    Example
        tag("names", "n", default_factory=list)
        tag("+", default=None)

    Remaining keyword arguments are forwarded to dataclasses.field(); any other
    metadata passed through `metadata` is preserved.
    """
    for name in names:
        if not isinstance(name, str):
            raise TypeError("tag() names must be strings")
        if TAG_DELIMITER in name:
            raise ValueError(f"tag() names cannot contain {TAG_DELIMITER!r}")
    metadata = dict(options.pop("metadata", None) or {})
    metadata[FLAG_TAG_NAME] = TAG_DELIMITER.join(names)
    return dataclasses.field(metadata=metadata, **options)


@dataclasses.dataclass(frozen=True, slots=True)
class FieldSpec:
    """
    A public field of a record type, as seen by the resolver.
    """
    name: str
    index: int
    type: typing.Any
    aliases: tuple[str, ...] = ()
    promoted: bool = False
    setter: typing.Any = None

    @property
    def target(self):
        """The field type without its optional wrapper."""
        return unwrap(self.type)[0]

    def matches(self, name, /):
        name = name.lower()
        if self.name.lower() == name:
            return True
        return any(alias.lower() == name for alias in self.aliases)


class Schema:
    """
    Resolution table of a record dataclass.

    Use schema(cls) to obtain one; instances are cached per type.
    """

    def __init__(self, type, fields, /):
        self.type = type
        self.fields = tuple(fields)

    def __repr__(self):
        return f"schema({self.type.__qualname__}, fields={[spec.name for spec in self.fields]!r})"

    def resolve(self, name, /, parents=()):
        """
        Find the field index path for a flag name, or None when no field matches.

        Direct fields are scanned first (name, then aliases); promoted fields are
        searched afterwards, in declaration order, depth-first.
        """
        promoted = []
        for spec in self.fields:
            if spec.matches(name):
                return (*parents, spec.index)
            if spec.promoted:
                promoted.append(spec)

        for spec in promoted:
            if (path := schema(spec.target).resolve(name, (*parents, spec.index))) is not None:
                return path
        return None

    def field(self, path, /):
        """
        Return the FieldSpec at the end of a resolved path.
        """
        layout = self
        for index in path[:-1]:
            layout = schema(layout.fields[index].target)
        return layout.fields[path[-1]]

    def materialize(self, record, path, /):
        """
        Walk a resolved path on a record, allocating empty sub-structures on the way.

        Returns (owner, spec): the instance holding the terminal field and its FieldSpec.
        """
        owner, layout = record, self
        for index in path[:-1]:
            spec = layout.fields[index]
            owner, layout = _ensure(owner, spec), schema(spec.target)
        return owner, layout.fields[path[-1]]


def _ensure(owner, spec):
    """
    Return the sub-structure held by a promoted field, allocating it when None.
    """
    value = getattr(owner, spec.name)
    if value is None:
        value = zero(spec.target)
        setattr(owner, spec.name, value)
        logger.debug("allocated empty %s for %s.%s", typename(spec.target), type(owner).__qualname__, spec.name)
    return value


def _misconfigured(message, /, **options):
    return ConfigurationError(
        message,
        title="misconfigured schema",
        code=FaultCode.MISCONFIGURED_SCHEMA,
        docs=getdoc(FaultCode.MISCONFIGURED_SCHEMA),
        **options
    )


def _isdataclass(type):
    return isinstance(type, builtins.type) and dataclasses.is_dataclass(type)


def _register(type, stack):
    try:
        return _schemas[type]
    except KeyError:
        pass

    if not _isdataclass(type):
        raise _misconfigured(f"{typename(type)} is not a dataclass", type=type, hint="decorate the record type with @dataclass")
    if type in stack:
        cycle = " -> ".join(step.__qualname__ for step in (*stack, type))
        raise _misconfigured(f"promoted fields form a cycle ({cycle})", type=type, hint="remove the '+' tag from one of the fields")

    try:
        hints = typing.get_type_hints(type)
    except (NameError, TypeError) as error:
        raise _misconfigured(f"cannot resolve annotations of {type.__qualname__}: {error}", type=type, cause=error) from error

    fields = []
    for field in dataclasses.fields(type):
        if field.name.startswith("_"):
            continue
        entries = str(field.metadata.get(FLAG_TAG_NAME, "")).split(TAG_DELIMITER)
        promoted = PROMOTED_MARKER in entries
        hint = hints[field.name]

        if promoted:
            target = unwrap(hint)[0]
            if not _isdataclass(target):
                raise _misconfigured(
                    f"field {field.name!r} in {type.__qualname__} is tagged as a promoted sub-structure '+', "
                    f"but {typename(hint)} is not a dataclass or an optional dataclass",
                    type=type,
                    field=field.name,
                    hint="remove the '+' tag or annotate the field with a dataclass",
                )
            if target.__dataclass_params__.frozen:
                raise _misconfigured(
                    f"field {field.name!r} in {type.__qualname__} promotes the frozen dataclass {target.__qualname__}",
                    type=type,
                    field=field.name,
                    hint="promoted sub-structures must be mutable",
                )
            _register(target, (*stack, type))

        fields.append(FieldSpec(
            name=field.name,
            index=len(fields),
            type=hint,
            aliases=aliases(field.metadata.get(FLAG_TAG_NAME, "")),
            promoted=promoted,
            setter=setter(hint),
        ))

    _schemas[type] = layout = Schema(type, fields)
    logger.debug("registered %r", layout)
    return layout


def schema(type, /):
    """
    Register (or fetch) the schema of a record dataclass.

    Registration validates the whole promotion tree; calling this once at start-up
    surfaces schema bugs as ConfigurationError before any token is processed.
    """
    return _register(type, ())


class FlagField:
    """
    A record field matched to a flag: its type plus a setter bound to its location.
    """

    def __init__(self, owner, spec, /):
        self._owner = owner
        self._spec = spec

    def __repr__(self):
        return f"flag-field({type(self._owner).__qualname__}.{self._spec.name}: {typename(self._spec.type)})"

    @property
    def name(self):
        return self._spec.name

    @property
    def type(self):
        return self._spec.type

    @property
    def boolean(self):
        """Whether the value of this flag is optional (boolean fields default to true)."""
        return self._spec.setter.boolean

    def setvalue(self, text, /):
        """
        Convert the text for this field and store it.

        Raises
        - UnsupportedFieldTypeError: the field type cannot be set from text.
        - CoercionError: the text does not parse (or the __unmarshal_text__ hook failed);
          the underlying error is chained and kept as the 'cause' option.
        """
        try:
            value = self._spec.setter(text, getattr(self._owner, self._spec.name))
        except FlagException:
            raise
        except Exception as error:
            raise CoercionError(
                f"cannot set field {self._spec.name!r} ({typename(self._spec.type)}) from {text!r}: {error}",
                title="unparsable value",
                code=FaultCode.UNPARSABLE_VALUE,
                field=self._spec.name,
                type=self._spec.type,
                value=text,
                cause=error,
                hint=f"pass a value that reads as {typename(self._spec.type)}",
                docs=getdoc(FaultCode.UNPARSABLE_VALUE),
            ) from error
        setattr(self._owner, self._spec.name, value)


def findfield(name, record, /):
    """
    Resolve a flag name against a record and materialize its path.

    Returns a FlagField, or None when no field matches at any depth.
    """
    layout = schema(type(record))
    if (path := layout.resolve(name)) is None:
        return None
    return FlagField(*layout.materialize(record, path))


__all__ = (
    "FLAG_TAG_NAME",
    "FieldSpec",
    "Schema",
    "FlagField",
    "aliases",
    "tag",
    "schema",
    "findfield",
)
