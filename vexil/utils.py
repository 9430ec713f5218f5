"""
Vexil utilities (internal helpers shared by the specs, registry and parser)

Overview
- UnsetType / Unset
  • Singleton sentinel for "not provided", distinct from None (None, 0, "" and []
    are legitimate option values and defaults).

- coalesce(value, default=None)
  • Replace Unset with a concrete default, preserving every other value.

- rename(callable, name) / @rename("name")
  • Give generated callables a stable __name__/__qualname__ so that reprs and
    validation messages stay readable.

- mirror("attr")
  • Read-only property factory over a private backing field (self._attr).
    Container values are copied on access so the public view cannot mutate specs.
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type for values that were not provided.

    Characteristics
    - Boolean-false, but never equal to None, 0 or "".
    - repr(Unset) -> "Unset".
    - One instance per process; the type cannot be subclassed.
    """

    def __or__(self, other, /):
        # Allows `str | Unset` in isinstance checks.
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return `object` unless it is the Unset sentinel, in which case return `default`.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or return a decorator that does so.

    Forms
    - rename(callable, name) -> callable
    - @rename(name)
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _detach(object):
    """
    Copy containers recursively; tuples stay tuples, everything else is returned as-is.
    """
    if isinstance(object, tuple):
        return tuple(map(_detach, object))
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return list(map(_detach, object))
    if isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_detach, object.values())))
    if isinstance(object, Set) and not isinstance(object, frozenset):
        return set(map(_detach, object))
    return object


def mirror(name, /):
    """
    Define a read-only property that serves a detached copy of self._{name}.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()
"""
Sentinel for "not provided". Materialize it with coalesce(value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
