"""
Docket faults (parse errors, grammar errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault the engine
  can produce. Codes are grouped by domain to keep copy consistent and make
  logs/searches predictable.
- IdParseError: the identifier matcher taxonomy (NoMatchError, AmbiguousIdError).
- CommandParseError: the dispatcher/binder taxonomy (NoInputError, BadIdError,
  MissingRequiredError, BadConvertError, TrailingError, SubcommandError).
- GrammarError: fatal definition errors, raised only while grammars are built.
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages: argument faults name the ordinal position of the
  offending token (“at third position”) so users can learn by trying.
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The engine raises parse faults; it never prints them. Hosts render a fault
  with rich (faults implement __rich__) and may tweak rendering options with
  copy.replace(fault, colorful=False, fancy=True).
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.padding import Padding
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, UnsetType, ordinal


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • NO_MATCH, AMBIGUOUS_ID
    - input (1111x)
      • NO_INPUT, BAD_ID
    - arguments (1112x/1114x)
      • MISSING_REQUIRED, TRAILING_TOKENS
    - delegated (1113x/1115x)
      • BAD_CONVERT (converter raised), SUBCOMMAND (nested grammar failed)
    - grammar definition (131xx)
      • EMPTY_ALIASES, ARGUMENT_ORDER, ALIAS_COLLISION, USAGE_SYNTAX

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- routing errors (11xxx) ---
    NO_MATCH                    = 11101
    AMBIGUOUS_ID                = 11102

    # --- input errors (11xxx) ---
    NO_INPUT                    = 11111
    BAD_ID                      = 11112

    # --- argument errors (11xxx) ---
    MISSING_REQUIRED            = 11121
    TRAILING_TOKENS             = 11141

    # --- delegated errors (11xxx) ---
    BAD_CONVERT                 = 11131
    SUBCOMMAND                  = 11151

    # --- grammar errors (13xxx) ---
    EMPTY_ALIASES               = 13101
    ARGUMENT_ORDER              = 13102
    ALIAS_COLLISION             = 13103
    USAGE_SYNTAX                = 13104

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base type of every parse fault.

    a fault carries a lowercased message plus read-only options. the engine
    fills in context options when raising:
    - grammar: name of the grammar level that failed.
    - command: CommandId of the resolved command (argument faults only).
    - index: 1-based position of the offending token in the full input.
    - usage: synopsis of the resolved command (argument faults only).

    rendering options (read by __rich__ only)
    - colorful: bool, default True.
    - fancy: bool, default False (panel chrome).
    - hint: str, overrides the fault's own hint.
    """
    code = Unset
    title = Unset
    __fields__ = ()

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | UnsetType)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def grammar(self):
        return self.options.get("grammar")

    @property
    def command(self):
        return self.options.get("command")

    @property
    def index(self):
        return self.options.get("index")

    @property
    def hint(self):
        """
        single actionable hint shown under the message.
        """
        if "hint" in self.options:
            return self.options["hint"]
        if usage := self.options.get("usage"):
            return "expected usage: %s" % usage
        return None

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "docs": "dim",
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style])

        prog = text(getattr(main, "__prog__", self.grammar or "docket"), "prog-name")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        body = [text(self.message, "error-message")]
        if hint := self.hint:
            body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
        if docs := getdoc(self.code):
            body.append(text(docs, "docs"))

        if self.options.get("fancy", False):
            return Panel(Group(*body), title=header, title_align="left")

        return Group(header, *body)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(*(getattr(self, name) for name in self.__fields__), **{**self.options, **overrides})


class IdParseError(CommandException):
    """
    an identifier token could not be resolved to exactly one command.
    """


class NoMatchError(IdParseError):
    """
    no alias of the grammar level starts with the input.

    besides the input, the fault keeps every alias of the level (in declaration
    order) so suggestion helpers can rank them without the grammar at hand.
    """
    code = FaultCode.NO_MATCH
    title = "unknown command"
    __fields__ = ("input",)

    def __init__(self, input, /, **options):
        self.input = input
        super().__init__("no command matches %r" % input, **options)

    @property
    def aliases(self):
        return tuple(self.options.get("aliases", ()))

    @property
    def hint(self):
        if "hint" in self.options:
            return self.options["hint"]
        from .suggest import suggest

        if suggestions := suggest(self):
            return "did you mean %s?" % " or ".join(map(repr, suggestions))
        return None


class AmbiguousIdError(IdParseError):
    """
    the input is a prefix of aliases belonging to two or more commands.
    """
    code = FaultCode.AMBIGUOUS_ID
    title = "ambiguous command"
    __fields__ = ("candidates", "input")

    def __init__(self, candidates, input, /, **options):
        self.candidates = tuple(candidates)
        self.input = input
        super().__init__("ambiguous command %r, could be any of %s" % (input, ", ".join(self.candidates)), **options)

    @property
    def hint(self):
        if "hint" in self.options:
            return self.options["hint"]
        return "type more characters of %s" % " or ".join(map(repr, self.candidates))


class CommandParseError(CommandException):
    """
    a token sequence could not be parsed into a command value.
    """


class NoInputError(CommandParseError):
    code = FaultCode.NO_INPUT
    title = "missing command"

    def __init__(self, **options):
        super().__init__("expected a command, got nothing", **options)


class BadIdError(CommandParseError):
    """
    the first token did not resolve; wraps the IdParseError as `error`.
    """
    code = FaultCode.BAD_ID
    title = "bad command"
    __fields__ = ("error",)

    def __init__(self, error, /, **options):
        if not isinstance(error, IdParseError):
            raise TypeError("BadIdError() argument must be an id parse error")
        self.error = error
        super().__init__(error.message, **options)

    @property
    def hint(self):
        if "hint" in self.options:
            return self.options["hint"]
        return self.error.hint


class MissingRequiredError(CommandParseError):
    code = FaultCode.MISSING_REQUIRED
    title = "missing argument"
    __fields__ = ("argument",)

    def __init__(self, argument, /, **options):
        self.argument = argument
        if index := options.get("index"):
            message = "missing required argument %r at %s position" % (argument, ordinal(index))
        else:
            message = "missing required argument %r" % argument
        super().__init__(message, **options)


class BadConvertError(CommandParseError):
    """
    an argument converter raised; its exception is kept as `cause`.

    the engine never inspects the cause, it is carried for diagnostics only.
    """
    code = FaultCode.BAD_CONVERT
    title = "conversion error"
    __fields__ = ("argument", "cause")

    def __init__(self, argument, cause, /, **options):
        self.argument = argument
        self.cause = cause
        if index := options.get("index"):
            message = "argument %r at %s position cannot be converted" % (argument, ordinal(index))
        else:
            message = "argument %r cannot be converted" % argument
        if detail := str(cause):
            message += ": %s" % detail
        super().__init__(message, **options)


class TrailingError(CommandParseError):
    code = FaultCode.TRAILING_TOKENS
    title = "too many arguments"
    __fields__ = ("token",)

    def __init__(self, token, /, **options):
        self.token = token
        if index := options.get("index"):
            message = "too many arguments, starting with %r at %s position" % (token, ordinal(index))
        else:
            message = "too many arguments, starting with %r" % token
        super().__init__(message, **options)


class SubcommandError(CommandParseError):
    """
    a subcommand argument failed; wraps the nested CommandParseError as `error`.

    nesting is one level per subcommand, so a chain of SubcommandError faults
    mirrors the chain of grammar levels that were entered.
    """
    code = FaultCode.SUBCOMMAND
    title = "subcommand failed"
    __fields__ = ("error",)

    def __init__(self, error, /, **options):
        if not isinstance(error, CommandParseError):
            raise TypeError("SubcommandError() argument must be a command parse error")
        self.error = error
        if command := options.get("command"):
            message = "subcommand of %r failed: %s" % (str(command), error.message)
        else:
            message = "subcommand failed: %s" % error.message
        super().__init__(message, **options)

    def unwrap(self):
        """
        return (path, fault): the commands entered on the way down and the innermost fault.
        """
        path = [self.command]
        error = self.error
        while isinstance(error, SubcommandError):
            path.append(error.command)
            error = error.error
        return tuple(path), error

    @property
    def hint(self):
        if "hint" in self.options:
            return self.options["hint"]
        return self.error.hint

    def __rich__(self):
        _, innermost = self.unwrap()
        # the nested fault is indented under this one, never wrapped in its own panel
        overrides = {"fancy": False}
        if "colorful" in self.options:
            overrides["colorful"] = self.options["colorful"]
        return Group(super().__rich__(), Padding(copy.replace(innermost, **overrides), (0, 0, 0, 4)))


class GrammarError(ValueError):
    """
    a command set definition is malformed.

    grammar errors are fatal: they are raised while commands and grammars are
    built (at startup), never while parsing input.
    """
    code = Unset

    def __init__(self, message, /, **options):
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)


class EmptyAliasesError(GrammarError):
    code = FaultCode.EMPTY_ALIASES


class ArgumentOrderError(GrammarError):
    code = FaultCode.ARGUMENT_ORDER


class AliasCollisionError(GrammarError):
    code = FaultCode.ALIAS_COLLISION


class UsageSyntaxError(GrammarError):
    code = FaultCode.USAGE_SYNTAX


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "CommandException",
    "IdParseError",
    "NoMatchError",
    "AmbiguousIdError",
    "CommandParseError",
    "NoInputError",
    "BadIdError",
    "MissingRequiredError",
    "BadConvertError",
    "TrailingError",
    "SubcommandError",
    "GrammarError",
    "EmptyAliasesError",
    "ArgumentOrderError",
    "AliasCollisionError",
    "UsageSyntaxError",
    "getdoc",
)
