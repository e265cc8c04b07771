import re

from .utils import Unset, coalesce, mirror


def _typename(name):
    # CamelCase -> camel-case
    return re.sub(r"(?<!^)(?=[A-Z])", "-", name).lower()


def _spec_repr(self):
    return "%s(%s)" % (type(self).__typename__, ", ".join("%s=%r" % pair for pair in self.__rich_repr__()))


def _spec_rich_repr(self):
    cls = type(self)
    for name in coalesce(cls.__displayable__, cls.__introspectable__):
        yield name, getattr(self, name)


def _sealed(cls, **options):
    raise TypeError(f"type {cls.__base__.__name__!r} is not an acceptable base type")


class SpecType(type):
    """
    Metaclass of the definition classes (argument specs, commands, grammars).

    For every class it creates
    - sets __typename__, the hyphenated lowercase class name used in messages
      and reprs ("Required" -> "required");
    - turns every name listed in __introspectable__ into a read-only property
      backed by "_<name>" (see utils.mirror);
    - installs __repr__ and __rich_repr__ over __displayable__, falling back to
      __introspectable__, unless the class body defines its own.

    Class option `final=True` refuses any further subclass.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, *, final=False):
        namespace = dict(namespace)
        namespace["__typename__"] = _typename(name)
        for field in namespace.get("__introspectable__", ()):
            namespace[field] = mirror(field)
        namespace.setdefault("__repr__", _spec_repr)
        namespace.setdefault("__rich_repr__", _spec_rich_repr)
        if final:
            namespace["__init_subclass__"] = classmethod(_sealed)
        return super().__new__(cls, name, bases, namespace)

    def __init__(self, name, bases, namespace, *, final=False):
        super().__init__(name, bases, namespace)


__all__ = ("SpecType",)
