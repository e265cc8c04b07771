"""
Docket grammar layer: commands, grammars, binding and dispatch.

What this module provides
- Command: one command definition, i.e. a non-empty set of aliases plus an
  ordered argument syntax (Required, Optional, Rest, Subcommand).
- Grammar: one level of commands. Assigns a CommandId to every command in
  declaration order, builds the alias trie and parses token sequences.
- CommandId / CommandValue: the opaque identifier of a command and the value
  produced by a successful parse.
- Module functions: parse, resolve_id, display, identify, build_grammar and
  command (usage-line definitions).

Core ideas
- Build once, parse many: grammars are validated and frozen at construction;
  malformed definitions raise GrammarError right away, never while parsing.
- Pure parsing: Grammar.parse neither prints nor logs; every failure is raised
  as a CommandParseError carrying the grammar name, the resolved command, the
  1-based position of the offending token and the expected usage.
- Position-first faults: token positions keep counting through nested
  grammars, so a fault deep inside a subcommand still points at the right
  token of the full input.

Quick start
    from docket import Grammar, Required, Rest, Subcommand, command

    roles = Grammar(
        command("(list | ls)"),
        command("add <user> <roles...>", types={"user": int}),
        name="role",
    )
    bot = Grammar(
        command("help [command]"),
        command("(role | roles) <subcommand...>", subcommands={"subcommand": roles}),
        name="bot",
    )

    value = bot.parse("ro a 1234 admin")
    value.subcommand.roles  # ('admin',)
"""
import logging
from collections import namedtuple
from collections.abc import Iterable
from types import MappingProxyType

from rich.text import Text

from .arguments import Cardinality
from .faults import *
from .internals import SpecType
from .tokens import tokenize
from .trie import Trie
from .usage import ArgumentUsage, CommandUsage, GrammarUsage, parse_usage
from .utils import *

logger = logging.getLogger(__name__)


class CommandId(namedtuple("CommandId", ("grammar", "index", "alias"))):
    """
    Opaque identifier of one command inside one grammar level.

    Ids are hashable, ordered by declaration inside their grammar and print as
    the command's canonical (first-listed) alias. `grammar` is the owning
    Grammar itself, so ids of distinct grammars never compare equal.
    """
    __slots__ = ()

    def __str__(self):
        return self.alias

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join("%s=%r" % pair for pair in self.__rich_repr__()))

    def __rich_repr__(self):
        # The grammar repr lists its ids; name it instead.
        yield "grammar", self.grammar.name
        yield "index", self.index
        yield "alias", self.alias


class CommandValue:
    """
    Default command value: the resolved id plus the bound arguments.

    Arguments are reachable by attribute (value.user) or by item
    (value["user"]); the mapping itself is read-only.
    """
    __slots__ = ("_id", "_arguments")

    def __init__(self, id, arguments, /):
        self._id = id
        self._arguments = MappingProxyType(dict(arguments))

    @property
    def id(self):
        return self._id

    @property
    def arguments(self):
        return self._arguments

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._arguments[name]
        except KeyError:
            raise AttributeError("command %r has no argument %r" % (str(self._id), name)) from None

    def __getitem__(self, name, /):
        return self._arguments[name]

    def __contains__(self, name, /):
        return name in self._arguments

    def __eq__(self, other):
        if not isinstance(other, CommandValue):
            return NotImplemented
        return self._id == other._id and dict(self._arguments) == dict(other._arguments)

    __hash__ = None

    def __command_id__(self):
        return self._id

    def __rich_repr__(self):
        yield "id", str(self._id)
        yield from self._arguments.items()

    def __repr__(self):
        return "command-value(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


_RANKS = {
    Cardinality.REQUIRED: 0,
    Cardinality.OPTIONAL: 1,
    Cardinality.REST_OPTIONAL: 2,
    Cardinality.REST_REQUIRED: 2,
}


def _sanitize_aliases(cls, aliases, /):
    """
    Internal: turn `aliases` into a non-empty tuple of distinct, non-empty strings.
    """
    if isinstance(aliases, str):
        aliases = (aliases,)
    elif not isinstance(aliases, Iterable):
        raise TypeError(f"{cls.__typename__} 'aliases' must be a string or an iterable of strings")

    aliases = tuple(aliases)
    if not aliases:
        raise EmptyAliasesError(f"{cls.__typename__} must declare at least one alias")

    seen = set()
    for alias in aliases:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} 'aliases' must be a string or an iterable of strings")
        if not alias:
            raise EmptyAliasesError(f"{cls.__typename__} aliases cannot be empty strings", aliases=aliases)
        if alias in seen:
            raise AliasCollisionError(f"alias {alias!r} is declared twice by the same command", alias=alias)
        seen.add(alias)
    return aliases


def _sanitize_syntax(cls, arguments, /):
    """
    Internal: check the argument order (required, optional, one trailing rest).
    """
    names = set()
    rank = 0
    for position, argument in enumerate(arguments):
        if not (hasattr(argument, "__argument__") and callable(argument.__argument__)):
            raise TypeError(f"{cls.__typename__} arguments must be argument specs")
        argument = argument.__argument__()

        if argument.name in names:
            raise ArgumentOrderError(f"argument {argument.name!r} is declared twice", argument=argument.name)
        names.add(argument.name)

        if argument.cardinality.rest and position != len(arguments) - 1:
            raise ArgumentOrderError(
                f"rest argument {argument.name!r} must be the last one",
                argument=argument.name,
            )
        if _RANKS[argument.cardinality] < rank:
            raise ArgumentOrderError(
                f"{argument.cardinality.value} argument {argument.name!r} cannot follow an optional one",
                argument=argument.name,
            )
        rank = _RANKS[argument.cardinality]


class Command(metaclass=SpecType, final=True):
    """
    One command definition: aliases plus an ordered argument syntax.

    Parameters
    - aliases: a string or an iterable of strings; the first one is canonical.
    - *arguments: argument specs, required first, then optional, then at most
      one rest/subcommand spec.
    - descr: short description used by help renderers.
    - factory: callable building the command value as factory(id, arguments);
      defaults to CommandValue.

    Raises
    - EmptyAliasesError: no alias, or an empty alias.
    - AliasCollisionError: the same alias listed twice.
    - ArgumentOrderError: arguments out of order or sharing a name.
    - TypeError: wrongly typed parameters.
    """
    __introspectable__ = (
        "aliases",
        "arguments",
        "descr",
        "factory",
    )

    def __new__(cls, aliases, /, *arguments, descr=Unset, factory=Unset):
        aliases = _sanitize_aliases(cls, aliases)
        _sanitize_syntax(cls, arguments)

        if not isinstance(descr, str | Text | UnsetType):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")

        if not callable(factory := coalesce(factory, CommandValue)):
            raise TypeError(f"{cls.__typename__} 'factory' must be callable")

        self = super().__new__(cls)
        self._aliases = aliases
        self._arguments = tuple(argument.__argument__() for argument in arguments)
        self._descr = coalesce(descr)
        self._factory = factory
        return self

    @property
    def canonical(self):
        return self._aliases[0]


class Grammar(metaclass=SpecType, final=True):
    """
    One grammar level: commands indexed by CommandId plus their alias trie.

    Construction
    - Grammar(*definitions, name=..., descr=...) where every definition is a
      Command, an (aliases, arguments) pair or a usage doc string.
    - Ids are assigned in declaration order; every alias of every command is
      inserted in the trie, and an alias shared by two commands raises
      AliasCollisionError.

    Parsing
    - resolve_id(token): identifier matching only.
    - parse(tokens): full dispatch (matcher, then binder, recursively).
    - usage(id) / describe(topic): help descriptors.

    A grammar never changes after construction and can be shared freely.
    """
    __introspectable__ = (
        "name",
        "descr",
        "commands",
    )

    __displayable__ = (
        "name",
        "descr",
        "ids",
    )

    def __new__(cls, *definitions, name=Unset, descr=Unset):
        if not definitions:
            raise EmptyAliasesError(f"{cls.__typename__} must declare at least one command")

        if not isinstance(name, str | UnsetType):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        if not isinstance(descr, str | Text | UnsetType):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")

        self = super().__new__(cls)
        self._name = coalesce(name)
        self._descr = coalesce(descr)
        commands = {}
        for index, definition in enumerate(definitions):
            if isinstance(definition, str):
                definition = command(definition)
            elif not isinstance(definition, Command):
                try:
                    aliases, arguments = definition
                except (TypeError, ValueError):
                    raise TypeError(
                        f"{cls.__typename__} definitions must be commands, usage strings or (aliases, arguments) pairs"
                    ) from None
                definition = Command(aliases, *arguments)
            commands[CommandId(self, index, definition.canonical)] = definition

        trie = Trie.build((alias, id) for id, definition in commands.items() for alias in definition.aliases)

        self._commands = commands
        self._trie = trie

        logger.debug(
            "built grammar %r: %d commands, %d aliases, %d trie nodes",
            self._name,
            len(commands),
            len(trie.root.aliases),
            len(trie),
        )
        return self

    @property
    def ids(self):
        return tuple(self._commands)

    @property
    def trie(self):
        return self._trie

    def __iter__(self):
        return iter(self._commands)

    def __len__(self):
        return len(self._commands)

    def __getitem__(self, id, /):
        return self._commands[id]

    def __grammar__(self):
        """
        Introspection hook: identify this object as a grammar.
        """
        return self

    def resolve_id(self, token, /):
        """
        Resolve one identifier token (possibly abbreviated) to a CommandId.

        Raises IdParseError (NoMatchError or AmbiguousIdError).
        """
        if not isinstance(token, str):
            raise TypeError("resolve_id() argument must be a string")
        return self._trie.match(token, grammar=self._name)

    def parse(self, tokens, /):
        """
        Parse a token sequence into a command value.

        Parameters
        - tokens:
          • str: split with docket.tokens.tokenize first.
          • Iterable[str]: used as-is, one token per item.

        Raises
        - CommandParseError: NoInputError, BadIdError, MissingRequiredError,
          BadConvertError, TrailingError or SubcommandError.
        - TypeError: when tokens is not a string or an iterable of strings.
        """
        if isinstance(tokens, str):
            tokens = tokenize(tokens)
        elif isinstance(tokens, Iterable):
            tokens = list(tokens)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        else:
            raise TypeError("parse() argument must be a string or an iterable of strings")
        return self._parse(tuple(tokens), 1)

    def _parse(self, tokens, start, /):
        """
        dispatch `tokens`, whose first item sits at position `start` of the full input.
        """
        if not tokens:
            raise NoInputError(grammar=self._name, index=start)
        try:
            id = self._trie.match(tokens[0], grammar=self._name, index=start)
        except IdParseError as error:
            raise BadIdError(error, grammar=self._name, index=start) from error
        return self._bind(id, tokens[1:], start + 1)

    def _context(self, id, index, /):
        return {
            "grammar": self._name,
            "command": id,
            "index": index,
            "usage": self.usage(id).synopsis,
        }

    def _convert(self, id, argument, token, index, /):
        try:
            return argument.convert(token)
        except Exception as exception:
            raise BadConvertError(argument.name, exception, **self._context(id, index)) from exception

    def _bind(self, id, tokens, start, /):
        """
        bind `tokens` (positions start, start + 1, ...) to the syntax of command `id`.

        behavior
        - required: next token, or MissingRequiredError.
        - optional: next token when there is one, otherwise the default.
        - rest: every remaining token as a tuple (at least one when required).
        - subcommand: the remaining tokens are parsed by the nested grammar,
          whose faults are wrapped in SubcommandError. A required subcommand
          with nothing left is a MissingRequiredError; an optional one still
          hands the empty stream over, which fails with NoInputError.
        - tokens left over once the syntax is exhausted raise TrailingError.
        """
        command = self._commands[id]
        arguments = {}
        position = 0

        for argument in command.arguments:
            index = start + position
            available = position < len(tokens)

            match argument.cardinality:
                case Cardinality.REQUIRED | Cardinality.OPTIONAL if available:
                    arguments[argument.name] = self._convert(id, argument, tokens[position], index)
                    position += 1
                case Cardinality.OPTIONAL:
                    arguments[argument.name] = argument.default
                case Cardinality.REQUIRED | Cardinality.REST_REQUIRED if not available:
                    raise MissingRequiredError(argument.name, **self._context(id, index))
                case _ if argument.grammar is not None:
                    try:
                        arguments[argument.name] = argument.grammar._parse(tokens[position:], index)
                    except CommandParseError as error:
                        raise SubcommandError(error, **self._context(id, index)) from error
                    position = len(tokens)
                case _:
                    arguments[argument.name] = tuple(
                        self._convert(id, argument, token, index + offset)
                        for offset, token in enumerate(tokens[position:])
                    )
                    position = len(tokens)

        if position < len(tokens):
            raise TrailingError(tokens[position], **self._context(id, start + position))

        return command.factory(id, arguments)

    def usage(self, id, /):
        """
        Return the CommandUsage descriptor of command `id`.

        Raises ValueError when `id` was assigned by another grammar.
        """
        if not isinstance(id, CommandId) or id.grammar is not self:
            raise ValueError("command id %r does not belong to this grammar" % (id,))
        command = self._commands[id]
        return CommandUsage(
            id,
            command.aliases,
            tuple(ArgumentUsage.of(argument) for argument in command.arguments),
            command.descr,
        )

    def describe(self, topic=Unset, /):
        """
        Help-topic lookup.

        - Unset: GrammarUsage of the whole level.
        - CommandId: CommandUsage of that command.
        - str: a topic spelling some alias exactly selects that command, even
          when it also prefixes other aliases; any other topic is resolved
          like a command identifier (abbreviations included). Bad topics raise
          IdParseError.
        """
        if topic is Unset:
            return GrammarUsage(self._name, self._descr, tuple(map(self.usage, self._commands)))
        if isinstance(topic, CommandId):
            return self.usage(topic)
        if isinstance(topic, str):
            if (id := self._trie.exact(topic)) is None:
                id = self.resolve_id(topic)
            return self.usage(id)
        raise TypeError("describe() argument must be a string or a command id")


def command(doc, /, *, types=Unset, subcommands=Unset, defaults=Unset, factory=Unset):
    """
    Build a Command from a usage doc string.

    The first line is the usage line, e.g. "(remove | rm) <user> <roles...>";
    the following lines become the description.

    Parameters
    - types: mapping of argument name -> converter.
    - subcommands: mapping of rest argument name -> grammar.
    - defaults: mapping of optional argument name -> default value.
    - factory: forwarded to Command.

    Raises
    - UsageSyntaxError: unreadable usage line or unknown names in the mappings.
    - GrammarError: any other definition error reported by Command.
    """
    aliases, arguments, descr = parse_usage(doc, types=types, subcommands=subcommands, defaults=defaults)
    return Command(aliases, *arguments, descr=Unset if descr is None else descr, factory=factory)


def build_grammar(definitions, /, *, name=Unset, descr=Unset):
    """
    Build a Grammar from an iterable of definitions (see Grammar).

    Raises GrammarError on malformed definitions; this is meant to run once,
    at startup.
    """
    if isinstance(definitions, str) or not isinstance(definitions, Iterable):
        raise TypeError("build_grammar() argument must be an iterable of definitions")
    return Grammar(*definitions, name=name, descr=descr)


def _grammar(object, /, caller):
    if not (hasattr(object, "__grammar__") and callable(object.__grammar__)):
        raise TypeError(f"{caller}() first argument must be a grammar")
    return object.__grammar__()


def parse(grammar, tokens, /):
    """
    Parse `tokens` with `grammar`; see Grammar.parse.
    """
    return _grammar(grammar, "parse").parse(tokens)


def resolve_id(grammar, token, /):
    """
    Resolve one identifier token with `grammar`; see Grammar.resolve_id.
    """
    return _grammar(grammar, "resolve_id").resolve_id(token)


def display(id, /):
    """
    Return the canonical alias of a command id.
    """
    if not isinstance(id, CommandId):
        raise TypeError("display() argument must be a command id")
    return str(id)


def identify(value, /):
    """
    Return the CommandId of a command value.

    Any object implementing __command_id__() qualifies, so custom factories
    can build their own value types.
    """
    if not (hasattr(value, "__command_id__") and callable(value.__command_id__)):
        raise TypeError("identify() argument must implement __command_id__ method")
    return value.__command_id__()


__all__ = (
    "CommandId",
    "CommandValue",
    "Command",
    "Grammar",
    "command",
    "build_grammar",
    "parse",
    "resolve_id",
    "display",
    "identify",
)
