r"""
Docket argument specifications.

Overview
- Cardinality: how many tokens an argument takes and whether it may be absent.
  • REQUIRED: exactly one token, must be present.
  • OPTIONAL: one token when available, otherwise the default.
  • REST_OPTIONAL: every remaining token (zero or more).
  • REST_REQUIRED: every remaining token (one or more).

- Specs
  • Required[_T]: required positional argument converted with `type`.
  • Optional[_T]: optional positional argument converted with `type`, with a default.
  • Rest[_T]: variadic trailing argument; each token converted with `type`.
  • Subcommand: trailing argument whose tokens are parsed by a nested grammar.

- Introspection & representation
  • SpecType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields declared in __introspectable__ via read-only properties.

Metadata (sanitized on construction)
- name: str, non-empty, no whitespace and none of the usage-line delimiters
  "<>[]()|"; must not end with "..." (that spelling is reserved for rest arguments
  in usage lines).
- metavar: Unset | str, label used in synopses (defaults to the name).
- descr: Unset | str | Text (short help), non-empty when provided.
- type: Callable[[str], _T] converter; any exception it raises is reported as a
  conversion fault by the binder.

Ordering rules (checked by docket.grammar.Command)
- required arguments first, then optional ones, then at most one rest or
  subcommand argument, which must be the last one.

Quick example:
    >>> from docket.arguments import Required, Optional, Rest
    >>> user = Required("user", type=int)
    >>> reason = Optional("reason", default="unspecified")
    >>> roles = Rest("roles", required=True)
    ...

Public API
- Enumerations: Cardinality
- Classes: Argument, Required, Optional, Rest, Subcommand
"""
import re
from enum import Enum

from rich.text import Text

from .internals import SpecType
from .utils import *


class Cardinality(Enum):
    """
    Arity and presence of an argument.
    """
    REQUIRED = "required"
    OPTIONAL = "optional"
    REST_OPTIONAL = "rest-optional"
    REST_REQUIRED = "rest-required"

    @property
    def rest(self):
        """
        True for the variadic cardinalities (they consume the rest of the stream).
        """
        return self in (Cardinality.REST_OPTIONAL, Cardinality.REST_REQUIRED)

    @property
    def mandatory(self):
        """
        True when at least one token must be present.
        """
        return self in (Cardinality.REQUIRED, Cardinality.REST_REQUIRED)


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate metadata shared by every argument spec.

    - name: required, trimmed, free of whitespace and usage-line delimiters.
    - metavar: optional display label; defaults to the name.
    - descr: optional short description; becomes None when omitted.

    Raises
    - TypeError: if a field has the wrong type.
    - ValueError: if a string is empty after trimming or malformed.

    Notes
    - This function mutates the provided metadata dict in place.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[^\s<>\[\]()|]+", name) or name.endswith("..."):
        raise ValueError(f"{cls.__typename__} 'name' must be a single word without usage delimiters")
    metadata["name"] = name

    if not isinstance(metavar := metadata["metavar"], str | UnsetType):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = coalesce(metavar, name)

    if not isinstance(descr := metadata["descr"], str | Text | UnsetType):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_parametric_metadata(cls, metadata, /):
    """
    Internal: validate the converter of value-bearing specs (not Subcommand).
    """
    # Trust the converter's signature; only require callability.
    if not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")


class Argument(metaclass=SpecType):
    """
    Base of every argument specification.

    An argument has a name, a cardinality and a conversion capability: either a
    `type` converter applied to tokens, or (for Subcommand) a nested `grammar`
    that parses the rest of the stream. Instances are immutable once built and
    safe to share between grammars and threads.
    """
    __introspectable__ = (
        "name",
        "cardinality",
        "metavar",
        "descr",
    )

    type = None
    grammar = None

    def __new__(cls, *args, **kwargs):
        if cls is Argument:
            raise TypeError("type 'Argument' cannot be instantiated directly")
        return super().__new__(cls)

    @classmethod
    def _build(cls, metadata, /):
        """
        Create an instance and mirror sanitized metadata into private fields.
        """
        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def convert(self, token, /):
        """
        Convert one raw token with the declared converter.
        """
        return self.type(token)

    def __argument__(self):
        """
        Introspection hook: identify this object as an argument spec.
        """
        return self


class Required[_T](Argument, final=True):
    """
    Required positional argument: takes exactly one token.
    """
    __introspectable__ = (
        "name",
        "cardinality",
        "type",
        "metavar",
        "descr",
    )

    def __new__(cls, name, /, type=str, *, metavar=Unset, descr=Unset):
        metadata = {
            "name": name,
            "type": type,
            "metavar": metavar,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_parametric_metadata(cls, metadata)
        return cls._build(metadata | {"cardinality": Cardinality.REQUIRED})


class Optional[_T](Argument, final=True):
    """
    Optional positional argument: takes the next token when there is one.

    The default is bound untouched (it is not passed through the converter) and
    is intentionally not validated; it may be any value, including None.
    """
    __introspectable__ = (
        "name",
        "cardinality",
        "type",
        "default",
        "metavar",
        "descr",
    )

    def __new__(cls, name, /, type=str, default=None, *, metavar=Unset, descr=Unset):
        metadata = {
            "name": name,
            "type": type,
            "metavar": metavar,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_parametric_metadata(cls, metadata)
        return cls._build(metadata | {"cardinality": Cardinality.OPTIONAL, "default": default})


class Rest[_T](Argument, final=True):
    """
    Variadic trailing argument: converts every remaining token into a tuple.

    With required=True at least one token must remain.
    """
    __introspectable__ = (
        "name",
        "cardinality",
        "type",
        "metavar",
        "descr",
    )

    def __new__(cls, name, /, type=str, required=False, *, metavar=Unset, descr=Unset):
        metadata = {
            "name": name,
            "type": type,
            "metavar": metavar,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_parametric_metadata(cls, metadata)
        cardinality = Cardinality.REST_REQUIRED if required else Cardinality.REST_OPTIONAL
        return cls._build(metadata | {"cardinality": cardinality})


class Subcommand(Argument, final=True):
    """
    Trailing argument parsed by a nested grammar level.

    The whole remaining token stream is handed to `grammar`, whose own faults
    are wrapped by the binder. A required subcommand with no tokens left is a
    missing argument; an optional one passes the empty stream to `grammar`,
    so the binder reports the nested NoInputError.
    """
    __introspectable__ = (
        "name",
        "cardinality",
        "grammar",
        "metavar",
        "descr",
    )

    def __new__(cls, name, grammar, /, required=True, *, metavar=Unset, descr=Unset):
        metadata = {
            "name": name,
            "metavar": metavar,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)
        if not (hasattr(grammar, "__grammar__") and callable(grammar.__grammar__)):
            raise TypeError(f"{cls.__typename__} 'grammar' must be a grammar")
        cardinality = Cardinality.REST_REQUIRED if required else Cardinality.REST_OPTIONAL
        return cls._build(metadata | {"cardinality": cardinality, "grammar": grammar.__grammar__()})

    def convert(self, token, /):
        raise TypeError("subcommand arguments are parsed by their grammar, not converted")


__all__ = (
    # Enumerations
    "Cardinality",

    # Classes (specifications)
    "Argument",
    "Required",
    "Optional",
    "Rest",
    "Subcommand",
)
