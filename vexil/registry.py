"""
Vexil option registry.

The registry is the resolved configuration model shared by parsing and help
rendering. It is built once per schema registration and only read while
parsing, so one registry can serve any number of parse calls.

Structures
- options:     canonical name -> Option, in registration order
- subcommands: ordered Subcommand slots
- tail:        ordered Cardinal slots (a `rest` slot may only be last)
- aliases:     every matchable word (canonical names included) -> canonical name
- flags:       every matchable word, longest first, ties in code-point order
- required:    canonical names of required options, in registration order
- labels:      canonical name -> display string ("--number, -n, --num")

Longest-first ordering matters to the matcher: a longer alias is always tried
before any shorter alias, so `--ab` resolves to option "ab" and never to "a".
"""
from collections.abc import Mapping
from types import MappingProxyType

from .specs import *
from .specs import respell_schema, to_option, to_slots


def _label(option):
    return ", ".join(("--" if len(alias) > 1 else "-") + alias for alias in option.aliases)


class Registry:
    """
    Mergeable schema registry.

    register() merges a schema into the configuration: new keys are added,
    existing keys are replaced, a None value removes a key, and the reserved
    slot keys replace their whole slot list.
    """

    def __init__(self, schema=None, /):
        self._options = {}
        self._subcommands = ()
        self._tail = ()
        self._labels = {}
        self._aliases = {}
        self._flags = ()
        self._required = ()
        if schema is not None:
            self.register(schema)

    @property
    def options(self):
        return MappingProxyType(self._options)

    @property
    def subcommands(self):
        return self._subcommands

    @property
    def tail(self):
        return self._tail

    @property
    def aliases(self):
        return MappingProxyType(self._aliases)

    @property
    def flags(self):
        return self._flags

    @property
    def required(self):
        return self._required

    @property
    def labels(self):
        return MappingProxyType(self._labels)

    def resolve(self, alias, /):
        """
        Return the Option an alias (or canonical name) points to.
        """
        return self._options[self._aliases[alias]]

    def register(self, schema, /):
        """
        Merge `schema` and rebuild the lookup structures.

        Returns the shadowed aliases as (alias, ignored option, owning option)
        triples for the options touched by this schema.
        """
        if not isinstance(schema, Mapping):
            raise TypeError("register() argument must be a mapping")

        for key, object in respell_schema(schema).items():
            if not isinstance(key, str):
                raise TypeError("register() schema keys must be strings")
            if key == SUBCOMMANDS:
                self._subcommands = () if object is None else to_slots(Subcommand, object, key)
            elif key == TAIL:
                tail = () if object is None else to_slots(Cardinal, object, key)
                for slot in tail[:-1]:
                    if slot.rest:
                        raise ValueError(f"tail slot {slot.name!r} is variadic, it must be the last tail slot")
                self._tail = tail
            elif object is None:
                self._options.pop(key, None)
                self._labels.pop(key, None)
            else:
                option = to_option(object, key)
                if self._options.get(key) != option:
                    # Display string is recomputed only for changed options.
                    self._labels.pop(key, None)
                self._options[key] = option

        shadowed = self._rebuild()
        return tuple(triple for triple in shadowed if triple[1] in schema or triple[2] in schema)

    def _rebuild(self):
        aliases = {name: name for name in self._options}
        shadowed = []

        for name, option in self._options.items():
            if name not in self._labels:
                self._labels[name] = _label(option)
            for alias in option.alias:
                if (owner := aliases.setdefault(alias, name)) != name:
                    if owner == alias:
                        # Canonical names always own themselves.
                        shadowed.append((alias, name, owner))
                    else:
                        shadowed.append((alias, owner, name))
                        aliases[alias] = name

        self._aliases = aliases
        self._flags = tuple(sorted(aliases, key=lambda x: (-len(x), x)))
        self._required = tuple(name for name, option in self._options.items() if option.required)
        return shadowed


__all__ = (
    "Registry",
)
