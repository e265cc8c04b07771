"""
Did-you-mean suggestions for identifier faults.

This is an optional post-processing step over NoMatchError/AmbiguousIdError:
the matcher never calls it and its output is not part of the parsing contract.

Ranking (NoMatchError)
- every alias of the failing grammar level is scored with
  difflib.SequenceMatcher against the input, comparing the input with the alias
  truncated to len(input) + 1 characters (so long aliases are not penalized for
  what the user has not typed yet);
- scores below `cutoff` are discarded;
- ties are broken by alias, ascending, so the result is deterministic;
- at most `limit` aliases are returned.

AmbiguousIdError faults simply suggest their candidates, in trie order.
"""
import difflib

from .faults import AmbiguousIdError, BadIdError, NoMatchError, SubcommandError


def _similarity(input, alias, /):
    return difflib.SequenceMatcher(None, input, alias[:len(input) + 1], autojunk=False).ratio()


def suggest(fault, /, limit=3, cutoff=0.3):
    """
    Return a tuple of aliases the user probably meant, best first.

    Wrapping faults (BadIdError, SubcommandError) are unwrapped down to the
    innermost one. Faults that are not about identifiers yield ().
    """
    if not isinstance(limit, int) or limit < 0:
        raise ValueError("suggest() 'limit' must be a non-negative integer")
    if not 0.0 <= cutoff <= 1.0:
        raise ValueError("suggest() 'cutoff' must be within [0.0, 1.0]")

    while isinstance(fault, BadIdError | SubcommandError):
        fault = fault.error

    if isinstance(fault, AmbiguousIdError):
        return fault.candidates[:limit]
    if not isinstance(fault, NoMatchError):
        return ()

    ranked = sorted(
        ((_similarity(fault.input, alias), alias) for alias in dict.fromkeys(fault.aliases)),
        key=lambda pair: (-pair[0], pair[1]),
    )
    return tuple(alias for score, alias in ranked if score >= cutoff)[:limit]


__all__ = ("suggest",)
