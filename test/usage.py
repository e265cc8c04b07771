"""
Usage module behavioral tests (usage lines and help descriptors).

Scope
- Validate parse_usage: id specifiers, argument brackets, ordering rules,
  descriptions, and the types/subcommands/defaults mappings.
- Validate synopsis rendering of ArgumentUsage and CommandUsage.

Conventions
- Test method names follow CamelCase per project convention.
- Usage lines are written the way a chat bot documents its commands.
"""
import unittest
from unittest import TestCase

from docket import Cardinality, Command, Grammar, Optional, Required, Rest, Subcommand
from docket.faults import GrammarError, UsageSyntaxError
from docket.usage import ArgumentUsage, parse_usage


class TestParseUsage(TestCase):
    """Behavioral tests for parse_usage."""

    def testSingleId(self):
        aliases, arguments, descr = parse_usage("help")
        self.assertEqual(aliases, ("help",))
        self.assertEqual(arguments, ())
        self.assertIsNone(descr)

    def testAlternation(self):
        aliases, _, _ = parse_usage("(remove | rm)")
        self.assertEqual(aliases, ("remove", "rm"))
        aliases, _, _ = parse_usage("(list|ls)")
        self.assertEqual(aliases, ("list", "ls"))

    def testArgumentKinds(self):
        _, arguments, _ = parse_usage("add <user> [reason] [roles...]")
        self.assertEqual([type(argument) for argument in arguments], [Required, Optional, Rest])
        self.assertEqual([argument.name for argument in arguments], ["user", "reason", "roles"])
        self.assertIs(arguments[2].cardinality, Cardinality.REST_OPTIONAL)

    def testRequiredRest(self):
        _, arguments, _ = parse_usage("(modmail | mm) <message...>")
        self.assertIs(arguments[0].cardinality, Cardinality.REST_REQUIRED)

    def testDescription(self):
        _, _, descr = parse_usage("""
            show [user]
            Show the roles of a user.
            Defaults to yourself.
        """)
        self.assertEqual(descr, "Show the roles of a user.\nDefaults to yourself.")

    def testTypes(self):
        _, arguments, _ = parse_usage("add <user> <roles...>", types={"user": int})
        self.assertIs(arguments[0].type, int)
        self.assertIs(arguments[1].type, str)

    def testDefaults(self):
        _, arguments, _ = parse_usage("show [user]", defaults={"user": "me"})
        self.assertEqual(arguments[0].default, "me")

    def testSubcommands(self):
        inner = Grammar(Command("ls"))
        _, arguments, _ = parse_usage("role <subcommand...>", subcommands={"subcommand": inner})
        self.assertIsInstance(arguments[0], Subcommand)
        self.assertIs(arguments[0].grammar, inner)
        _, arguments, _ = parse_usage("role [subcommand...]", subcommands={"subcommand": inner})
        self.assertIs(arguments[0].cardinality, Cardinality.REST_OPTIONAL)

    def testEmptyUsageRejected(self):
        with self.assertRaises(UsageSyntaxError):
            parse_usage("   ")

    def testMalformedIdsRejected(self):
        with self.assertRaises(UsageSyntaxError):
            parse_usage("(list | ls")

    def testTrailingTextRejected(self):
        with self.assertRaises(UsageSyntaxError):
            parse_usage("add <user> roles")

    def testRequiredAfterOptionalRejected(self):
        with self.assertRaises(UsageSyntaxError):
            parse_usage("show [user] <channel>")

    def testArgumentAfterRestRejected(self):
        with self.assertRaises(UsageSyntaxError):
            parse_usage("add <roles...> <user>")

    def testUnknownMappingNamesRejected(self):
        with self.assertRaises(UsageSyntaxError):
            parse_usage("show [user]", types={"usr": int})
        with self.assertRaises(UsageSyntaxError):
            parse_usage("show [user]", defaults={"usr": 1})

    def testSubcommandMustBeRest(self):
        inner = Grammar(Command("ls"))
        with self.assertRaises(UsageSyntaxError):
            parse_usage("role <subcommand>", subcommands={"subcommand": inner})

    def testSubcommandCannotBeTyped(self):
        inner = Grammar(Command("ls"))
        with self.assertRaises(UsageSyntaxError):
            parse_usage("role <subcommand...>", subcommands={"subcommand": inner}, types={"subcommand": int})

    def testDefaultsOnlyForOptionalArguments(self):
        with self.assertRaises(UsageSyntaxError):
            parse_usage("add <user>", defaults={"user": 1})

    def testMalformedArgumentNameRejected(self):
        with self.assertRaises(UsageSyntaxError):
            parse_usage("add <two words>")

    def testUsageErrorsAreGrammarErrors(self):
        self.assertTrue(issubclass(UsageSyntaxError, GrammarError))

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            parse_usage(42)
        with self.assertRaises(TypeError):
            parse_usage("show [user]", types=[("user", int)])


class TestSynopsis(TestCase):
    """Behavioral tests for ArgumentUsage/CommandUsage synopses."""

    def testArgumentSynopsis(self):
        inner = Grammar(Command("ls"))
        cases = [
            (Required("user"), "<user>"),
            (Optional("user", metavar="member"), "[member]"),
            (Rest("roles"), "[roles...]"),
            (Rest("roles", required=True), "<roles...>"),
            (Subcommand("action", inner), "<action...>"),
        ]
        for argument, synopsis in cases:
            with self.subTest(synopsis=synopsis):
                self.assertEqual(ArgumentUsage.of(argument).synopsis, synopsis)

    def testArgumentUsageFields(self):
        usage = ArgumentUsage.of(Required("user", descr="who"))
        self.assertEqual(usage.name, "user")
        self.assertTrue(usage.required)
        self.assertFalse(usage.rest)
        self.assertFalse(usage.subcommand)
        self.assertEqual(usage.descr, "who")

    def testCommandSynopsisSpellsUsageLineBack(self):
        for line in ("help [command]", "(list|ls)", "(remove|rm) <user> <roles...>", "echo [words...]"):
            grammar = Grammar(line)
            with self.subTest(line=line):
                self.assertEqual(grammar.usage(grammar.ids[0]).synopsis, line)


if __name__ == "__main__":
    unittest.main()
