"""
Arguments module behavioral tests (specs, cardinalities, metadata).

Scope
- Validate public specs (Required, Optional, Rest, Subcommand): construction,
  normalization and cardinality.
- Validate metadata constraints (names, metavars, descriptions, converters).
- Validate immutability, finality and representation of specs.

Conventions
- Test method names follow CamelCase per project convention.
- Omit optional parameters instead of passing explicit None.
"""
import unittest
from unittest import TestCase

from rich.text import Text

from docket import Argument, Cardinality, Command, Grammar, Optional, Required, Rest, Subcommand


class TestCardinality(TestCase):
    """Behavioral tests for Cardinality."""

    def testRest(self):
        self.assertFalse(Cardinality.REQUIRED.rest)
        self.assertFalse(Cardinality.OPTIONAL.rest)
        self.assertTrue(Cardinality.REST_OPTIONAL.rest)
        self.assertTrue(Cardinality.REST_REQUIRED.rest)

    def testMandatory(self):
        self.assertTrue(Cardinality.REQUIRED.mandatory)
        self.assertFalse(Cardinality.OPTIONAL.mandatory)
        self.assertFalse(Cardinality.REST_OPTIONAL.mandatory)
        self.assertTrue(Cardinality.REST_REQUIRED.mandatory)


class TestRequired(TestCase):
    """Behavioral tests for Required specifications."""

    def testDefaults(self):
        r = Required("user")
        self.assertEqual(r.name, "user")
        self.assertEqual(r.metavar, "user")
        self.assertIs(r.type, str)
        self.assertIsNone(r.descr)
        self.assertIs(r.cardinality, Cardinality.REQUIRED)

    def testNameIsTrimmed(self):
        self.assertEqual(Required("  user ").name, "user")

    def testEmptyNameRejected(self):
        with self.assertRaises(ValueError):
            Required("   ")

    def testNameWithDelimitersRejected(self):
        for name in ("two words", "<user>", "[user]", "a|b", "(x)", "roles..."):
            with self.subTest(name=name):
                with self.assertRaises(ValueError):
                    Required(name)

    def testNonStringNameRejected(self):
        with self.assertRaises(TypeError):
            Required(1)

    def testMetavar(self):
        self.assertEqual(Required("user", metavar="USER").metavar, "USER")
        with self.assertRaises(ValueError):
            Required("user", metavar=" ")
        with self.assertRaises(TypeError):
            Required("user", metavar=1)

    def testDescr(self):
        self.assertEqual(Required("user", descr=" the user ").descr, "the user")
        text = Text("styled")
        self.assertIs(Required("user", descr=text).descr, text)
        with self.assertRaises(ValueError):
            Required("user", descr="")
        with self.assertRaises(TypeError):
            Required("user", descr=None)

    def testConverter(self):
        self.assertEqual(Required("n", int).convert("42"), 42)
        with self.assertRaises(ValueError):
            Required("n", int).convert("x")
        with self.assertRaises(TypeError):
            Required("n", 42)

    def testReadOnly(self):
        r = Required("user")
        with self.assertRaises(AttributeError):
            r.name = "other"

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Sub", (Required,), {})

    def testRepr(self):
        self.assertEqual(
            repr(Required("user")),
            "required(name='user', cardinality=<Cardinality.REQUIRED: 'required'>, type=<class 'str'>, metavar='user', descr=None)",
        )

    def testArgumentHook(self):
        r = Required("user")
        self.assertIs(r.__argument__(), r)
        self.assertIsInstance(r, Argument)


class TestOptional(TestCase):
    """Behavioral tests for Optional specifications."""

    def testDefaultIsNone(self):
        o = Optional("user")
        self.assertIsNone(o.default)
        self.assertIs(o.cardinality, Cardinality.OPTIONAL)

    def testDefaultIsKeptUnconverted(self):
        o = Optional("count", int, default="all")
        self.assertEqual(o.default, "all")

    def testContainerDefaultIsExposedReadOnly(self):
        o = Optional("roles", default=["admin"])
        self.assertEqual(o.default, ("admin",))


class TestRest(TestCase):
    """Behavioral tests for Rest specifications."""

    def testOptionalByDefault(self):
        self.assertIs(Rest("roles").cardinality, Cardinality.REST_OPTIONAL)

    def testRequired(self):
        self.assertIs(Rest("roles", required=True).cardinality, Cardinality.REST_REQUIRED)

    def testConverter(self):
        self.assertEqual(Rest("ids", int).convert("7"), 7)


class TestSubcommand(TestCase):
    """Behavioral tests for Subcommand specifications."""

    def setUp(self):
        self.grammar = Grammar(Command("ls"), name="inner")

    def testRequiredByDefault(self):
        s = Subcommand("action", self.grammar)
        self.assertIs(s.cardinality, Cardinality.REST_REQUIRED)
        self.assertIs(s.grammar, self.grammar)
        self.assertIsNone(s.type)

    def testOptional(self):
        self.assertIs(Subcommand("action", self.grammar, required=False).cardinality, Cardinality.REST_OPTIONAL)

    def testGrammarRequired(self):
        with self.assertRaises(TypeError):
            Subcommand("action", "ls")

    def testNoConversion(self):
        with self.assertRaises(TypeError):
            Subcommand("action", self.grammar).convert("ls")


class TestArgument(TestCase):
    """Behavioral tests for the abstract Argument base."""

    def testCannotBeInstantiated(self):
        with self.assertRaises(TypeError):
            Argument()

    def testPlainSpecsHaveNoGrammar(self):
        self.assertIsNone(Required("user").grammar)
        self.assertIsNone(Optional("user").grammar)
        self.assertIsNone(Rest("user").grammar)


if __name__ == "__main__":
    unittest.main()
