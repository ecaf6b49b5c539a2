"""Lexical macro scanner.

Finds ``NAME(arg, arg, ...)`` calls for a fixed set of macro names in C
source text without preprocessing or parsing it. The scan walks a token
stream produced by one compiled regular expression:

- comments, string and character literals never yield macro names
- preprocessor directive lines are skipped, so ``#define HOOK(name)`` is not
  an invocation
- arguments split on commas at the call's own nesting level; ``()``, ``[]``
  and ``{}`` all nest
- a ``;`` outside braces or a mismatched ``]``/``}`` abandons the call being
  collected, and so does reaching end of input; scanning restarts just
  inside the abandoned call's ``(``, so complete calls written after a
  half-typed one are still found
- C23 digit separators (``1'000``) stay inside the number token

Malformed input is never an error: anything that does not match a complete
call shape is skipped.
"""

from __future__ import annotations

import bisect
import re
from collections.abc import Collection, Iterator
from dataclasses import dataclass
from enum import Enum

from elysium.index.models import ArgumentToken, MacroArgument, MacroCall, Position, Span

_TOKEN_RE = re.compile(
    r"""
      (?P<newline>\n)
    | (?P<space>[ \t\r\f\v]+)
    | (?P<line_comment>//[^\n]*)
    | (?P<block_comment>/\*.*?(?:\*/|\Z))
    | (?P<string>"(?:\\.|[^"\\\n])*"?)
    | (?P<char>'(?:\\.|[^'\\\n])*'?)
    | (?P<ident>[A-Za-z_]\w*)
    | (?P<number>\.?\d(?:[eEpP][+-]|'(?=\w)|[\w.])*)
    | (?P<punct>.)
    """,
    re.VERBOSE | re.DOTALL,
)

# A directive runs to the end of the line, following backslash continuations.
_DIRECTIVE_RE = re.compile(r"#(?:\\\r?\n|[^\n])*")

_OPENERS = frozenset("([{")
_CLOSERS = frozenset(")]}")


class TokenKind(Enum):
    IDENT = "ident"
    STRING = "string"
    CHAR = "char"
    NUMBER = "number"
    PUNCT = "punct"


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    text: str
    start: int
    end: int


class _Locator:
    """Maps character offsets to zero-based (line, character) positions."""

    __slots__ = ("_line_starts",)

    def __init__(self, text: str) -> None:
        starts = [0]
        starts.extend(m.end() for m in re.finditer("\n", text))
        self._line_starts = starts

    def position(self, offset: int) -> Position:
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return Position(line, offset - self._line_starts[line])

    def span(self, start: int, end: int) -> Span:
        return Span(self.position(start), self.position(end))


def tokenize(text: str) -> Iterator[Token]:
    """Yield the significant tokens of ``text``.

    Whitespace, comments and preprocessor directives are dropped.
    """
    pos = 0
    length = len(text)
    at_line_start = True
    while pos < length:
        m = _TOKEN_RE.match(text, pos)
        if m is None:  # pragma: no cover - the punct branch matches any char
            break
        group = m.lastgroup
        if group == "newline":
            at_line_start = True
        elif group == "space" or group == "line_comment" or group == "block_comment":
            pass
        elif group == "punct" and m.group() == "#" and at_line_start:
            directive = _DIRECTIVE_RE.match(text, pos)
            assert directive is not None
            pos = directive.end()
            continue
        else:
            at_line_start = False
            yield Token(TokenKind(group), m.group(), m.start(), m.end())
        pos = m.end()


def scan_calls(text: str, macros: Collection[str]) -> Iterator[MacroCall]:
    """Yield every complete call of one of ``macros`` in ``text``, in order."""
    if not macros:
        return
    tokens = list(tokenize(text))
    locator = _Locator(text)
    count = len(tokens)
    i = 0
    while i < count:
        token = tokens[i]
        if (
            token.kind is TokenKind.IDENT
            and token.text in macros
            and i + 1 < count
            and tokens[i + 1].kind is TokenKind.PUNCT
            and tokens[i + 1].text == "("
        ):
            call, i = _collect_call(tokens, i, locator)
            if call is not None:
                yield call
            continue
        i += 1


def _collect_call(
    tokens: list[Token], start: int, locator: _Locator
) -> tuple[MacroCall | None, int]:
    """Collect the call whose name is ``tokens[start]``.

    Returns the call (or None when abandoned) and the index to resume at.
    """
    name = tokens[start]
    restart = start + 2
    region_start = tokens[start + 1].end
    arguments: list[MacroArgument] = []
    current: list[Token] = []
    depth = 0
    brace_depth = 0

    j = start + 2
    count = len(tokens)
    while j < count:
        token = tokens[j]
        if token.kind is TokenKind.PUNCT:
            text = token.text
            if text in _OPENERS:
                depth += 1
                if text == "{":
                    brace_depth += 1
            elif text in _CLOSERS:
                if depth == 0:
                    if text != ")":
                        return None, restart
                    arguments.append(
                        _argument(len(arguments), current, region_start, token.start, locator)
                    )
                    call = MacroCall(
                        macro=name.text,
                        span=locator.span(name.start, token.end),
                        name_span=locator.span(name.start, name.end),
                        arguments=tuple(arguments),
                    )
                    return call, j + 1
                depth -= 1
                if text == "}":
                    brace_depth = max(0, brace_depth - 1)
            elif text == "," and depth == 0:
                arguments.append(
                    _argument(len(arguments), current, region_start, token.start, locator)
                )
                current = []
                region_start = token.end
                j += 1
                continue
            elif text == ";" and brace_depth == 0:
                return None, restart
        current.append(token)
        j += 1

    # Unterminated at end of input
    return None, restart


def _argument(
    index: int,
    tokens: list[Token],
    region_start: int,
    region_end: int,
    locator: _Locator,
) -> MacroArgument:
    region = locator.span(region_start, region_end)
    if not tokens:
        return MacroArgument(index=index, text="", span=Span.empty_at(region.start), region=region)
    return MacroArgument(
        index=index,
        text=" ".join(t.text for t in tokens),
        span=locator.span(tokens[0].start, tokens[-1].end),
        region=region,
        tokens=tuple(
            ArgumentToken(
                text=t.text,
                span=locator.span(t.start, t.end),
                is_string=t.kind is TokenKind.STRING,
            )
            for t in tokens
        ),
    )
