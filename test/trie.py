"""
Trie module behavioral tests (arena construction and identifier matching).

Scope
- Validate the arena layout: nodes addressed by index, parents and depths, frozen state.
- Validate matching: abbreviations, exact aliases, ambiguity and missing edges.
- Validate collisions and repeated registrations at build time.
- Validate determinism: equal definitions build tries that resolve identically.

Conventions
- Test method names follow CamelCase per project convention.
- Ids are plain strings here; the trie never inspects them.
"""
import itertools
import unittest
from unittest import TestCase

from docket.faults import AliasCollisionError, AmbiguousIdError, NoMatchError
from docket.trie import Trie, TrieNode


class TestTrieBuild(TestCase):
    """Behavioral tests for Trie.build."""

    def testRootIsFirstNode(self):
        trie = Trie.build([("ls", "list")])
        self.assertIs(trie.root, trie[0])
        self.assertIsInstance(trie.root, TrieNode)
        self.assertIsNone(trie.root.parent)
        self.assertEqual(trie.root.depth, 0)

    def testNodesAreAddressedByIndex(self):
        trie = Trie.build([("ab", "x")])
        self.assertEqual(len(trie), 3)
        for index, node in enumerate(trie.nodes):
            self.assertEqual(node.index, index)
        self.assertEqual(trie[trie.root.children["a"]].depth, 1)
        child = trie[trie.root.children["a"]]
        self.assertEqual(trie[child.children["b"]].parent, child.index)

    def testSharedPrefixesShareNodes(self):
        trie = Trie.build([("list", "list"), ("ls", "list")])
        # root, l, i, s, t, s
        self.assertEqual(len(trie), 6)

    def testNodesAccumulateIdsOnceAndAliasesInOrder(self):
        trie = Trie.build([("list", "list"), ("ls", "list"), ("lock", "lock")])
        node = trie[trie.root.children["l"]]
        self.assertEqual(node.ids, ("list", "lock"))
        self.assertEqual(node.aliases, ("list", "ls", "lock"))
        self.assertEqual(trie.root.aliases, ("list", "ls", "lock"))

    def testTerminalRecordsAliasAndId(self):
        trie = Trie.build([("rm", "remove")])
        node = trie[trie[trie.root.children["r"]].children["m"]]
        self.assertEqual(node.terminal, ("rm", "remove"))
        self.assertIsNone(trie[trie.root.children["r"]].terminal)

    def testNodesAreFrozen(self):
        trie = Trie.build([("a", "x")])
        with self.assertRaises(TypeError):
            trie.root.children["b"] = 2
        with self.assertRaises(AttributeError):
            trie.root.ids.append("y")

    def testCollisionBetweenIdsRaises(self):
        with self.assertRaises(AliasCollisionError):
            Trie.build([("rm", "remove"), ("rm", "rename")])

    def testRepeatedAliasForSameIdIsNoop(self):
        trie = Trie.build([("rm", "remove"), ("rm", "remove")])
        self.assertEqual(trie.root.aliases, ("rm",))
        self.assertEqual(trie.match("rm"), "remove")

    def testNonStringAliasRejected(self):
        with self.assertRaises(TypeError):
            Trie.build([(1, "one")])

    def testExactLookup(self):
        trie = Trie.build([("list", "list"), ("ls", "list")])
        self.assertEqual(trie.exact("ls"), "list")
        self.assertIsNone(trie.exact("l"))
        self.assertIsNone(trie.exact("lz"))


class TestTrieMatch(TestCase):
    """Behavioral tests for Trie.match."""

    def setUp(self):
        self.trie = Trie.build([
            ("help", "help"),
            ("list", "list"),
            ("ls", "list"),
            ("mark", "mark"),
            ("match", "match"),
        ])

    def testEveryUnambiguousPrefixResolves(self):
        for prefix in ("l", "li", "lis", "list", "ls"):
            with self.subTest(prefix=prefix):
                self.assertEqual(self.trie.match(prefix), "list")

    def testAmbiguousPrefixListsCandidatesInInsertionOrder(self):
        with self.assertRaises(AmbiguousIdError) as context:
            self.trie.match("ma")
        self.assertEqual(context.exception.candidates, ("mark", "match"))
        self.assertEqual(context.exception.input, "ma")

    def testDisambiguatedPrefixResolves(self):
        self.assertEqual(self.trie.match("mar"), "mark")
        self.assertEqual(self.trie.match("mat"), "match")

    def testMissingEdgeIsNoMatch(self):
        with self.assertRaises(NoMatchError) as context:
            self.trie.match("zzz")
        self.assertEqual(context.exception.input, "zzz")
        self.assertEqual(context.exception.aliases, ("help", "list", "ls", "mark", "match"))

    def testOvershootIsNoMatch(self):
        with self.assertRaises(NoMatchError):
            self.trie.match("lists")

    def testEmptyInputIsAmbiguousWithManyIds(self):
        with self.assertRaises(AmbiguousIdError) as context:
            self.trie.match("")
        self.assertEqual(context.exception.candidates, ("help", "list", "ls", "mark", "match"))

    def testExactAliasPrefixOfAnotherIdIsAmbiguous(self):
        trie = Trie.build([("add", "add"), ("address", "address")])
        with self.assertRaises(AmbiguousIdError) as context:
            trie.match("add")
        self.assertEqual(context.exception.candidates, ("add", "address"))
        self.assertEqual(trie.match("addr"), "address")

    def testMatchingIsCaseSensitive(self):
        with self.assertRaises(NoMatchError):
            self.trie.match("HELP")

    def testOptionsAreAttachedToFaults(self):
        with self.assertRaises(NoMatchError) as context:
            self.trie.match("zzz", grammar="bot", index=1)
        self.assertEqual(context.exception.grammar, "bot")
        self.assertEqual(context.exception.index, 1)

    def testEqualDefinitionsResolveIdentically(self):
        pairs = [("help", "help"), ("list", "list"), ("ls", "list"), ("mark", "mark"), ("match", "match")]
        first, second = Trie.build(pairs), Trie.build(list(pairs))
        alphabet = "hlmastkz"
        for length in range(4):
            for letters in itertools.product(alphabet, repeat=length):
                string = "".join(letters)
                outcomes = []
                for trie in (first, second):
                    try:
                        outcomes.append(("ok", trie.match(string)))
                    except AmbiguousIdError as error:
                        outcomes.append(("ambiguous", error.candidates))
                    except NoMatchError:
                        outcomes.append(("none",))
                with self.subTest(string=string):
                    self.assertEqual(outcomes[0], outcomes[1])


if __name__ == "__main__":
    unittest.main()
