"""
Small helpers shared by the docket modules.

Contents
- Unset (UnsetType): marker for "argument not given", kept apart from None
  because None is a meaningful value for defaults and descriptions.
- coalesce(): swap Unset for a fallback, leaving every other value alone.
- mirror(): read-only property over a "_<name>" attribute; containers come out
  as tuples, frozensets or mapping proxies so shared grammars stay immutable.
- ordinal(): "first", "second", ..., "11th", "22nd" for position-first messages.

    >>> coalesce(Unset, "fallback"), coalesce(None, "fallback")
    ('fallback', None)
    >>> ordinal(3), ordinal(23)
    ('third', '23rd')
"""
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final

_ORDINAL_WORDS = (
    "first",
    "second",
    "third",
    "fourth",
    "fifth",
    "sixth",
    "seventh",
    "eighth",
    "ninth",
    "tenth",
)


@final
class UnsetType:
    """
    Type of the Unset marker.

    There is exactly one instance; it is falsy, prints as "Unset" and the type
    refuses subclasses. Use `str | UnsetType` in isinstance checks.
    """
    __slots__ = ()

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return `default` when `object` is Unset, otherwise `object` itself.

    Only Unset is replaced; None, 0, "" and empty containers are kept.
    """
    if object is Unset:
        return default
    return object


def _frozen(object):
    match object:
        case str() | bytes():
            return object
        case Mapping():
            return MappingProxyType(object)
        case Set():
            return frozenset(object)
        case Sequence():
            return tuple(object)
        case _:
            return object


def mirror(name, /):
    """
    Build a read-only property exposing the private attribute "_<name>".

    Lists and other sequences are returned as tuples, sets as frozensets and
    mappings as mapping proxies; any other value is returned untouched.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")
    attribute = "_" + name

    def getter(self):
        return _frozen(getattr(self, attribute))

    getter.__name__ = getter.__qualname__ = name
    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Ordinal label of a 1-based position: words up to ten, then "11th", "21st", ...
    """
    if 1 <= number <= len(_ORDINAL_WORDS):
        return _ORDINAL_WORDS[number - 1]
    if number % 100 in (11, 12, 13):
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return "%d%s" % (number, suffix)


__all__ = (
    # Functions
    "coalesce",
    "mirror",
    "ordinal",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
