"""Source preprocessing and tokenization for the Flowgo DSL."""

import logging
import re
from collections import deque
from pathlib import Path
from typing import Iterator, NamedTuple

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import DSLSyntaxError

logger = logging.getLogger(__name__)

GRAMMAR_PATH = Path(__file__).parent / "grammar.lark"

BOM = "\ufeff"

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")
_LINE_COMMENT = re.compile(r"//.*$", re.MULTILINE)
_WHITESPACE = re.compile(r"\s+")
_ESCAPE = re.compile(r"\\(.)", re.DOTALL)


class Token(NamedTuple):
    """A lexed token; offsets index into the preprocessed buffer."""

    kind: str
    value: str
    start: int
    end: int


def preprocess(text: str) -> str:
    """Normalize raw DSL source into the buffer the lexer scans.

    Strips a leading byte-order mark and stray control characters, removes
    ``//`` line comments and collapses every whitespace run to one space.
    Comments are removed before strings are recognised, so ``//`` inside a
    string literal cuts off the rest of that line.
    """
    if text.startswith(BOM):
        logger.debug("Byte-order mark detected, removing")
        text = text[1:]
    text = _CONTROL_CHARS.sub("", text)
    text = _LINE_COMMENT.sub("", text)
    return _WHITESPACE.sub(" ", text)


def unescape_string(token_value: str) -> str:
    """Strip the quotes of a STRING token and resolve backslash escapes."""
    return _ESCAPE.sub(r"\1", token_value[1:-1])


class Lexer:
    """Thin wrapper over the Lark basic lexer built from ``grammar.lark``."""

    def __init__(self, grammar_path: str | Path | None = None):
        if grammar_path is None:
            grammar_path = GRAMMAR_PATH

        with open(grammar_path) as f:
            self.lark = Lark(f.read(), start="start", parser="lalr", lexer="basic")

    def tokenize(self, buffer: str) -> Iterator[Token]:
        """Lazily yield tokens of an already preprocessed buffer."""
        try:
            for tok in self.lark.lex(buffer):
                yield Token(tok.type, str(tok), tok.start_pos, tok.end_pos)
        except UnexpectedCharacters as e:
            position = e.pos_in_stream
            if buffer[position] == '"':
                # An opening quote that never closes runs to end of input.
                raise DSLSyntaxError.at('Expected "\\"", got EOF', buffer, len(buffer)) from e
            raise DSLSyntaxError.at(
                f"Unexpected character '{buffer[position]}'", buffer, position
            ) from e


class TokenStream:
    """Cursor over a lazily lexed token sequence with arbitrary lookahead.

    One instance belongs to a single parse call.
    """

    def __init__(self, tokens: Iterator[Token], buffer: str):
        self._tokens = tokens
        self._lookahead: deque[Token] = deque()
        self._exhausted = False
        self.buffer = buffer
        self.position = 0

    def _fill(self, count: int) -> None:
        while len(self._lookahead) < count and not self._exhausted:
            try:
                self._lookahead.append(next(self._tokens))
            except StopIteration:
                self._exhausted = True

    def peek(self, offset: int = 0) -> Token | None:
        """Return the token ``offset`` places ahead without consuming it."""
        self._fill(offset + 1)
        if offset < len(self._lookahead):
            return self._lookahead[offset]
        return None

    def advance(self) -> Token:
        """Consume and return the current token."""
        token = self.peek()
        if token is None:
            raise self.error("Unexpected end of input")
        self._lookahead.popleft()
        self.position = token.end
        return token

    def at_end(self) -> bool:
        return self.peek() is None

    def offset(self) -> int:
        """Offset of the current token, or the buffer length at end of input."""
        token = self.peek()
        return token.start if token is not None else len(self.buffer)

    def error(self, message: str) -> DSLSyntaxError:
        return DSLSyntaxError.at(message, self.buffer, self.offset())
