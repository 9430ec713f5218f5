r"""
Vexil schema specifications.

Overview
- Option: a named flag (`--name`, `-n`), value-bearing or boolean depending on its type.
- Subcommand: a leading positional slot, matched by position before any flag.
- Cardinal: a trailing (tail) positional slot; the last one may be variadic (`rest`).

A schema handed to a parser is a mapping of option name -> Option (or a plain
mapping of the same fields) plus two reserved keys holding ordered slot lists:

    {
        "number": {"type": "number", "required": True, "alias": ["n"]},
        "bool": Option(type="boolean"),
        "__subcommands": [Subcommand("operation", required=True)],
        "__tail": [Cardinal("source"), {"name": "files", "rest": True}],
    }

Mapping schemas also accept "__subCommands" for the sub-command key and the
field names "defaultValue", "variableName" and "description".

Introspection & representation
- SpecType metaclass provides stable __repr__/__rich_repr__ and exposes the
  fields declared in __introspectable__ via read-only properties.
- Specs are immutable; copy.replace(spec, **changes) builds a modified copy by
  re-running construction (and therefore validation) with the merged arguments.

Validation highlights
- Option names and aliases must be non-empty, must not start with "-", and may
  not contain whitespace or "=".
- type must be a non-empty string naming a coercer ("string", "number", ...).
- transform and test must be callables.
- group-like strings (descr/metavar) are trimmed; empty strings are rejected.
"""
import copy
import functools
import operator
import re
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from rich.text import Text

from .utils import *

SUBCOMMANDS = "__subcommands"
TAIL = "__tail"

RESERVED = frozenset((SUBCOMMANDS, "__subCommands", TAIL))

# Alternate spellings accepted in mapping schemas.
_KEYS = MappingProxyType({"__subCommands": SUBCOMMANDS})
_FIELDS = MappingProxyType({
    "defaultValue": "default",
    "variableName": "metavar",
    "description": "descr",
})


class SpecType(type):
    """
    Metaclass wiring introspection for the spec classes.

    - __typename__ is derived from the class name ("Subcommand" -> "subcommand").
    - Every name in __introspectable__ becomes a read-only property mirroring "_" + name.
    - __repr__/__rich_repr__ list the introspectable fields in declaration order.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _valid_word(word):
    return isinstance(word, str) and re.fullmatch(r"[^\s=-][^\s=]*", word) is not None


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize the fields shared by every spec.

    - type: Unset or a non-empty string (the coercer name is resolved by the parser).
    - transform/test: Unset or callables.
    - descr: Unset or a non-empty string/Text; Unset becomes None.
    - metavar: Unset or a non-empty string; Unset becomes None.
    - required/hidden: booleans.
    """
    if not isinstance(type := metadata["type"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'type' must be a string")
    elif isinstance(type, str) and not (type := type.strip()):
        raise ValueError(f"{cls.__typename__} 'type' cannot be empty")
    metadata["type"] = type

    for name in ("transform", "test"):
        if metadata[name] is not Unset and not callable(metadata[name]):
            raise TypeError(f"{cls.__typename__} {name!r} must be callable")

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = coalesce(metavar)

    metadata["required"] = bool(metadata["required"])
    metadata["hidden"] = bool(metadata["hidden"])


def _sanitize_slot_name(cls, metadata, /):
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif name in RESERVED:
        raise ValueError(f"{cls.__typename__} 'name' {name!r} is reserved")
    metadata["name"] = name


def _sanitize_named_metadata(cls, metadata, /):
    """
    Internal: validate the canonical name and the aliases of an Option.

    - name: Unset (bound later from the schema key) or a valid flag word.
    - alias: a single string or an iterable of strings, each a valid flag word;
      duplicates (including the canonical name) are rejected. Normalized to a tuple.
    """
    if (name := metadata["name"]) is not Unset and not _valid_word(name):
        raise ValueError(f"{cls.__typename__} name {name!r} must be a non-empty word without whitespace, '=' or a leading '-'")

    alias = metadata["alias"]
    if isinstance(alias, str):
        alias = (alias,)
    elif not isinstance(alias, Iterable):
        raise TypeError(f"{cls.__typename__} 'alias' must be a string or an iterable of strings")

    seen = {name} if name is not Unset else set()
    aliases = []
    for item in alias:
        if not isinstance(item, str):
            raise TypeError(f"{cls.__typename__} 'alias' must be a string or an iterable of strings")
        elif not _valid_word(item):
            raise ValueError(f"{cls.__typename__} alias {item!r} must be a non-empty word without whitespace, '=' or a leading '-'")
        elif item in seen:
            raise ValueError(f"{cls.__typename__} aliases cannot contain duplicates ({item!r})")
        seen.add(item)
        aliases.append(item)
    metadata["alias"] = tuple(aliases)


class Spec(metaclass=SpecType):
    """
    Common behaviour of all specs: immutable fields and copy.replace() support.
    """

    def __replace__(self, /, **overrides):
        arguments = dict(self._arguments) | overrides
        if "name" in arguments:
            return type(self)(arguments.pop("name"), **arguments)
        return type(self)(**arguments)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in type(self).__introspectable__)

    def __hash__(self):
        return hash((type(self), self.name))

    def _store(self, metadata, arguments):
        self._arguments = MappingProxyType(arguments)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)


class Option(Spec):
    """
    Named flag specification.

    Fields
    - name: canonical name (the schema key). May be left Unset and bound at registration.
    - type: coercer name ("string", "number", "integer", "boolean", "json", "csv" or a
      user-registered one). Unset means the parser's default type.
    - alias: alternate names; one character is a short alias (-n), longer is long (--num).
    - required: the flag must be present in every invocation.
    - default: value used when the flag never matched (stored untransformed).
    - transform: callable replacing the type's coercer.
    - test: validator; True or another truthy non-string passes, a string or a falsy
      result fails (a string is used as the failure message).
    - descr / metavar / hidden: help output only.
    """

    __introspectable__ = (
        "name",
        "type",
        "alias",
        "required",
        "default",
        "transform",
        "test",
        "descr",
        "metavar",
        "hidden",
    )

    def __new__(
            cls,
            name=Unset,
            /,
            *,
            type=Unset,
            alias=(),
            required=False,
            default=Unset,
            transform=Unset,
            test=Unset,
            descr=Unset,
            metavar=Unset,
            hidden=False,
    ):
        arguments = {
            "type": type,
            "alias": alias,
            "required": required,
            "default": default,
            "transform": transform,
            "test": test,
            "descr": descr,
            "metavar": metavar,
            "hidden": hidden,
        }
        if name is not Unset:
            arguments = {"name": name} | arguments
        metadata = {"name": name} | arguments

        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)

        self = super().__new__(cls)
        self._store(metadata, arguments)
        return self

    @property
    def aliases(self):
        """
        Canonical name followed by the aliases, e.g. ("number", "n", "num").
        """
        return ((self.name,) if self.name is not Unset else ()) + self.alias


class Subcommand(Spec):
    """
    Leading positional slot. Slot i receives the i-th token when tokens 0..i are
    an unbroken run of non-flag tokens at the start of the argument vector.
    """

    __introspectable__ = (
        "name",
        "type",
        "required",
        "transform",
        "test",
        "descr",
        "metavar",
        "hidden",
    )

    def __new__(
            cls,
            name,
            /,
            *,
            type=Unset,
            required=False,
            transform=Unset,
            test=Unset,
            descr=Unset,
            metavar=Unset,
            hidden=False,
    ):
        arguments = {
            "name": name,
            "type": type,
            "required": required,
            "transform": transform,
            "test": test,
            "descr": descr,
            "metavar": metavar,
            "hidden": hidden,
        }
        metadata = dict(arguments)

        _sanitize_slot_name(cls, metadata)
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        self._store(metadata, arguments)
        return self


class Cardinal(Spec):
    """
    Tail positional slot, matched by position after flags were consumed.

    A `rest` slot absorbs every remaining positional token as a list and must be
    the last tail slot; transform and test then apply to each element.
    """

    __introspectable__ = (
        "name",
        "type",
        "required",
        "rest",
        "transform",
        "test",
        "descr",
        "metavar",
        "hidden",
    )

    def __new__(
            cls,
            name,
            /,
            *,
            type=Unset,
            required=False,
            rest=False,
            transform=Unset,
            test=Unset,
            descr=Unset,
            metavar=Unset,
            hidden=False,
    ):
        arguments = {
            "name": name,
            "type": type,
            "required": required,
            "rest": rest,
            "transform": transform,
            "test": test,
            "descr": descr,
            "metavar": metavar,
            "hidden": hidden,
        }
        metadata = dict(arguments)

        _sanitize_slot_name(cls, metadata)
        _sanitize_metadata(cls, metadata)
        metadata["rest"] = bool(metadata["rest"])

        self = super().__new__(cls)
        self._store(metadata, arguments)
        return self


def _respell(mapping, spellings, what, /):
    respelled = {}
    for key, value in mapping.items():
        key = spellings.get(key, key)
        if key in respelled:
            raise TypeError(f"{what} {key!r} is given under two spellings")
        respelled[key] = value
    return respelled


def respell_schema(schema, /):
    """
    Map alternate reserved keys ("__subCommands") to their canonical spelling.
    """
    return _respell(schema, _KEYS, "schema entry")


def respell_fields(fields, /):
    """
    Map alternate field names ("defaultValue", "variableName", "description")
    to the spec's own ("default", "metavar", "descr").
    """
    return _respell(fields, _FIELDS, "field")


def to_option(object, name, /):
    """
    Build the Option registered under `name` from a schema value.

    - Option: bound to `name` (copied when its own name differs or is unset).
    - Mapping: the mapping's keys are Option fields (alternate spellings accepted).
    """
    if isinstance(object, Option):
        return object if object.name == name else copy.replace(object, name=name)
    if isinstance(object, Mapping):
        return Option(name, **respell_fields(object))
    raise TypeError(f"schema entry {name!r} must be an option or a mapping")


def to_slots(cls, objects, key, /):
    """
    Build the ordered tuple of slots for a reserved schema key.
    """
    if isinstance(objects, str | Mapping) or not isinstance(objects, Iterable):
        raise TypeError(f"schema entry {key!r} must be a sequence of slots")
    slots = []
    for object in objects:
        if isinstance(object, cls):
            slots.append(object)
        elif isinstance(object, Mapping):
            arguments = respell_fields(object)
            try:
                name = arguments.pop("name")
            except KeyError:
                raise TypeError(f"schema entry {key!r} slots must have a 'name'") from None
            slots.append(cls(name, **arguments))
        else:
            raise TypeError(f"schema entry {key!r} slots must be {cls.__typename__}s or mappings")
    return tuple(slots)


__all__ = (
    "Option",
    "Subcommand",
    "Cardinal",
    "SUBCOMMANDS",
    "TAIL",
    "RESERVED",
)
