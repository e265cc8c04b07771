"""
Usage lines and usage descriptors.

Usage lines
- A docopt-like, one-line description of a command:
      (list | ls)
      show [user]
      add <user> <roles...>
      (role | roles) <subcommand...>
  • ids: a bare word, or a parenthesised "|"-separated alternation.
  • <name>: required argument; [name]: optional argument.
  • <name...> / [name...]: required / optional rest argument (always last).
  Required arguments come first, then optional ones, then at most one rest.
- parse_usage() turns such a line into aliases plus argument specs; anything
  it cannot read raises UsageSyntaxError (a GrammarError, fatal at startup).

Descriptors
- ArgumentUsage, CommandUsage and GrammarUsage are plain, immutable records
  derived from the very specs the binder uses, for consumption by help
  renderers. `synopsis` spells them back in usage-line syntax; no markup is
  produced here.
"""
import re
from collections import namedtuple
from collections.abc import Mapping

from .arguments import Cardinality, Optional, Required, Rest, Subcommand
from .faults import UsageSyntaxError
from .utils import Unset, coalesce

_IDS_RE = re.compile(r"\s*(?:(?P<single>[^(\s]\S*)|\(\s*(?P<many>[^)]*)\))")
_PIPE_RE = re.compile(r"\s*\|\s*")
_ARGUMENT_RE = re.compile(r"\s*(?:<(?P<required>[^<>]+)>|\[(?P<optional>[^\[\]]+)\])")


class ArgumentUsage(namedtuple("ArgumentUsage", ("name", "metavar", "cardinality", "subcommand", "descr"))):
    """
    Help descriptor of one argument.
    """
    __slots__ = ()

    @classmethod
    def of(cls, argument, /):
        return cls(
            argument.name,
            argument.metavar,
            argument.cardinality,
            argument.grammar is not None,
            argument.descr,
        )

    @property
    def required(self):
        return self.cardinality.mandatory

    @property
    def rest(self):
        return self.cardinality.rest

    @property
    def synopsis(self):
        match self.cardinality:
            case Cardinality.REQUIRED:
                return "<%s>" % self.metavar
            case Cardinality.OPTIONAL:
                return "[%s]" % self.metavar
            case Cardinality.REST_REQUIRED:
                return "<%s...>" % self.metavar
            case Cardinality.REST_OPTIONAL:
                return "[%s...]" % self.metavar


class CommandUsage(namedtuple("CommandUsage", ("id", "aliases", "arguments", "descr"))):
    """
    Help descriptor of one command: its aliases (canonical first) and arguments.
    """
    __slots__ = ()

    @property
    def synopsis(self):
        """
        the command spelled as a usage line, e.g. "(remove|rm) <user> <roles...>".
        """
        ids = self.aliases[0] if len(self.aliases) == 1 else "(%s)" % "|".join(self.aliases)
        return " ".join((ids, *(argument.synopsis for argument in self.arguments)))

    @property
    def subcommands(self):
        """
        the arguments that recurse into a nested grammar.
        """
        return tuple(argument for argument in self.arguments if argument.subcommand)


class GrammarUsage(namedtuple("GrammarUsage", ("name", "descr", "commands"))):
    """
    Help descriptor of a whole grammar level.
    """
    __slots__ = ()


def _split_doc(doc, /):
    """
    split a command doc string into (usage line, description or None).
    """
    lines = [line.strip() for line in doc.strip().splitlines()]
    if not lines or not lines[0]:
        raise UsageSyntaxError("usage line cannot be empty")
    descr = "\n".join(lines[1:]).strip()
    return lines[0], descr or None


def _check_names(mapping, label, names, /):
    if not isinstance(mapping, Mapping):
        raise TypeError("usage %r must be a mapping" % label)
    if unknown := [name for name in mapping if name not in names]:
        raise UsageSyntaxError(
            "usage %s refer to unknown arguments: %s" % (label, ", ".join(map(repr, unknown))),
            names=tuple(unknown),
        )


def parse_usage(doc, /, types=Unset, subcommands=Unset, defaults=Unset):
    """
    Parse a usage doc string into (aliases, arguments, descr).

    The first non-blank line is the usage line; the following lines, if any,
    form the description.

    Parameters
    - types: mapping of argument name -> converter (default str).
    - subcommands: mapping of rest argument name -> grammar.
    - defaults: mapping of optional argument name -> default value.

    Raises
    - UsageSyntaxError: malformed line, arguments out of order, or mappings
      naming arguments the line does not declare.
    """
    if not isinstance(doc, str):
        raise TypeError("usage must be a string")

    line, descr = _split_doc(doc)

    if not (match := _IDS_RE.match(line)):
        raise UsageSyntaxError(
            "invalid command id specifier in %r, expected e.g. 'foo' or '(foo|bar)'" % line,
            usage=line,
        )
    if match["many"] is not None:
        aliases = tuple(_PIPE_RE.split(match["many"].strip()))
    else:
        aliases = (match["single"],)

    position = match.end()
    declared = []

    while match := _ARGUMENT_RE.match(line, position):
        required = match["required"] is not None
        name = (match["required"] if required else match["optional"]).strip()
        rest = name.endswith("...")
        if rest:
            name = name[:-3].strip()

        if declared and declared[-1][2]:
            raise UsageSyntaxError("argument %r follows the rest argument %r in %r" % (name, declared[-1][0], line), usage=line)
        if required and not rest and any(not previous for _, previous, _ in declared):
            raise UsageSyntaxError("required argument %r follows an optional one in %r" % (name, line), usage=line)

        declared.append((name, required, rest))
        position = match.end()

    if trailing := line[position:].strip():
        raise UsageSyntaxError("trailing string %r in usage %r" % (trailing, line), usage=line)

    types = coalesce(types, {})
    subcommands = coalesce(subcommands, {})
    defaults = coalesce(defaults, {})

    names = {name for name, _, _ in declared}
    _check_names(types, "types", names)
    _check_names(subcommands, "subcommands", names)
    _check_names(defaults, "defaults", names)

    arguments = []
    for name, required, rest in declared:
        if name in defaults and (rest or required):
            raise UsageSyntaxError("only optional arguments take defaults, %r is not one" % name, usage=line)

        try:
            if name in subcommands:
                if not rest:
                    raise UsageSyntaxError("subcommand %r must be a rest argument, e.g. <%s...>" % (name, name), usage=line)
                if name in types:
                    raise UsageSyntaxError("subcommand %r cannot declare a type" % name, usage=line)
                arguments.append(Subcommand(name, subcommands[name], required))
            elif rest:
                arguments.append(Rest(name, types.get(name, str), required))
            elif required:
                arguments.append(Required(name, types.get(name, str)))
            else:
                arguments.append(Optional(name, types.get(name, str), defaults.get(name)))
        except UsageSyntaxError:
            raise
        except ValueError as exception:
            # argument sanitizers reject malformed names with plain ValueErrors
            raise UsageSyntaxError("invalid argument %r in %r: %s" % (name, line, exception), usage=line) from exception

    return aliases, tuple(arguments), descr


__all__ = (
    "ArgumentUsage",
    "CommandUsage",
    "GrammarUsage",
    "parse_usage",
)
