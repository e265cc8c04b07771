"""
Prefix automaton used to resolve abbreviated command identifiers.

The trie is an arena: nodes live in a tuple and refer to their children and
parent by index, never by reference, so a built trie is a flat, acyclic,
immutable structure that can be shared freely between threads.

Every node accumulates, in insertion order, the distinct ids and the full
aliases reachable beneath it. Resolution walks the input character by
character and never backtracks:

- a missing edge is a NoMatchError;
- a node from which exactly one id is reachable resolves to that id (so any
  unambiguous prefix of an alias works, the alias itself included);
- otherwise the input is ambiguous and the reachable aliases are reported.
"""
from types import MappingProxyType

from .faults import AliasCollisionError, AmbiguousIdError, NoMatchError


class TrieNode:
    """
    One state of the automaton.

    Fields
    - index: position of this node in the arena.
    - parent: arena index of the parent node (None for the root).
    - depth: number of characters consumed to reach this node.
    - children: mapping of next character -> arena index.
    - ids: distinct ids reachable from here, in insertion order.
    - aliases: full aliases reachable from here, in insertion order.
    - terminal: (alias, id) when an alias ends exactly here, otherwise None.
    """
    __slots__ = ("index", "parent", "depth", "children", "ids", "aliases", "terminal")

    def __init__(self, index, parent=None, depth=0):
        self.index = index
        self.parent = parent
        self.depth = depth
        self.children = {}
        self.ids = []
        self.aliases = []
        self.terminal = None

    def _freeze(self):
        self.children = MappingProxyType(self.children)
        self.ids = tuple(self.ids)
        self.aliases = tuple(self.aliases)

    def __repr__(self):
        return "trie-node(index=%r, depth=%r, children=%r, ids=%r, terminal=%r)" % (
            self.index, self.depth, "".join(self.children), self.ids, self.terminal
        )


class Trie:
    """
    Immutable prefix automaton over the aliases of one grammar level.

    Build it with Trie.build(pairs) where pairs is an iterable of (alias, id).
    """
    __slots__ = ("_nodes",)

    def __init__(self, nodes, /):
        self._nodes = tuple(nodes)

    @classmethod
    def build(cls, pairs, /):
        """
        Build a trie from (alias, id) pairs, in order.

        - aliases are inserted character by character, creating nodes as needed;
        - every node on the path records the id (once) and the full alias;
        - the final node records (alias, id) as its terminal binding.

        Registering an alias that already names another id raises
        AliasCollisionError; registering it again for the same id is a no-op.
        """
        nodes = [TrieNode(0)]

        for alias, id in pairs:
            if not isinstance(alias, str):
                raise TypeError("trie aliases must be strings")

            if (index := cls._walk(nodes, alias)) is not None and (terminal := nodes[index].terminal):
                if terminal[1] != id:
                    raise AliasCollisionError(
                        "alias %r is already bound to %r, cannot bind it to %r" % (alias, str(terminal[1]), str(id)),
                        alias=alias,
                        ids=(terminal[1], id),
                    )
                continue

            node = nodes[0]
            path = [node]
            for char in alias:
                try:
                    node = nodes[node.children[char]]
                except KeyError:
                    node.children[char] = len(nodes)
                    nodes.append(node := TrieNode(len(nodes), node.index, node.depth + 1))
                path.append(node)

            for step in path:
                if id not in step.ids:
                    step.ids.append(id)
                step.aliases.append(alias)
            node.terminal = (alias, id)

        for node in nodes:
            node._freeze()
        return cls(nodes)

    @staticmethod
    def _walk(nodes, string, /):
        """
        Return the arena index reached by consuming `string`, or None.
        """
        node = nodes[0]
        for char in string:
            try:
                node = nodes[node.children[char]]
            except KeyError:
                return None
        return node.index

    @property
    def root(self):
        return self._nodes[0]

    @property
    def nodes(self):
        return self._nodes

    def __len__(self):
        return len(self._nodes)

    def __getitem__(self, index, /):
        return self._nodes[index]

    def exact(self, alias, /):
        """
        Return the id bound to exactly `alias`, or None.
        """
        if (index := self._walk(self._nodes, alias)) is None:
            return None
        if (terminal := self._nodes[index].terminal) is None:
            return None
        return terminal[1]

    def match(self, string, /, **options):
        """
        Resolve `string` (a possibly abbreviated alias) to one id.

        Raises
        - NoMatchError(string): some character has no matching edge.
        - AmbiguousIdError(candidates, string): two or more distinct ids remain
          reachable; candidates are the reachable aliases in insertion order.

        Extra keyword options are attached to the raised fault.
        """
        node = self._nodes[0]
        for char in string:
            try:
                node = self._nodes[node.children[char]]
            except KeyError:
                raise NoMatchError(string, aliases=self.root.aliases, **options) from None

        if node.terminal is not None and node.ids == (node.terminal[1],):
            return node.terminal[1]
        if len(node.ids) == 1:
            return node.ids[0]
        raise AmbiguousIdError(node.aliases, string, **options)


__all__ = (
    "TrieNode",
    "Trie",
)
