r"""
Quote-aware tokenizer for chat-style command lines.

Rules
- tokens are separated by whitespace;
- 'single quotes' keep their content verbatim (no escapes);
- "double quotes" honour backslash escapes: \" and \\ (and \x → x in general);
- a bare word runs until the next whitespace, quotes inside it included
  (e.g. don't → "don't").

Unterminated quotes never raise: the stray quote character is skipped and
scanning resumes right after it. The engine itself never calls this module;
it is the collaborator that produces the token sequences parse() consumes.

Examples
    >>> tokenize('role add 123 "rust fans" \'c++\'')
    ['role', 'add', '123', 'rust fans', 'c++']
"""
import re

_TOKEN_RE = re.compile(r"""\s*(?:(?P<bare>[^'"\s]\S*)|'(?P<single>[^']*)'|"(?P<double>(?:[^"\\]|\\.)*)")""", re.DOTALL)
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def tokenize(line, /):
    """
    Split `line` into a list of tokens (see module documentation for the rules).
    """
    if not isinstance(line, str):
        raise TypeError("tokenize() argument must be a string")

    tokens = []
    for match in _TOKEN_RE.finditer(line):
        if (double := match["double"]) is not None:
            tokens.append(_ESCAPE_RE.sub(r"\1", double))
        elif (single := match["single"]) is not None:
            tokens.append(single)
        elif (bare := match["bare"]) is not None:
            tokens.append(bare)
    return tokens


__all__ = ("tokenize",)
