"""
Lexical analyzer for the EMBER language.

This module turns raw source text into a lazy stream of `(Token, Span)` pairs:

Classes:
    Span: Half-open byte-offset interval into the UTF-8 encoded source.
    Token: A token type tag plus an optional payload (integer, name, string).
    CharacterStream: Cursor over the source tracking character and byte offsets.
    Lexer: Iterator producing `(Token, Span)` pairs from a source string.

Features:
    - Longest match at every position; on equal length the earlier rule in
      `LEXER_RULES` wins, so `print` is a keyword but `printer` an identifier
    - Skips whitespace, `// line` and `/* block */` comments
    - Never splits `>=`, `<=`, `==`, `!=`
    - Strings run from a `"` to the last `"` on the same line, no escapes

Raises:
    LexError: On an integer that does not fit 32 bits, a character no rule
        accepts, or a block comment that never closes. The lexer stops there.

Example:
    >>> [tok for tok, _ in Lexer("print 42;")]
    [Token(PRINT), Token(INTEGER, 42), Token(SEMI)]

Exports:
    - Span
    - Token
    - CharacterStream
    - Lexer
    - tokenize
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, NamedTuple, NoReturn

import ember.ember_constants as constants
from ember.ember_constants import (
    BLOCK_COMMENT_OPEN,
    COMMENT,
    IDENT,
    INT_MAX,
    INTEGER,
    LEXER_RULES,
    SKIPPED_TOKENS,
    STRING,
    TOKEN_TYPES,
)
from ember.ember_errors import (
    INTEGER_OVERFLOW,
    UNEXPECTED_CHARACTER,
    UNTERMINATED_COMMENT,
    LexError,
)

logger = logging.getLogger(__name__)


class Span(NamedTuple):
    """Half-open byte interval `[lo, hi)` into the original source."""

    lo: int
    hi: int

    def combine(self, other: Span) -> Span:
        """Span covering `self` through `other`: lower bound of the first, upper of the second."""
        return Span(self.lo, other.hi)

    def slice(self, source: str) -> str:
        """Return the source text this span addresses."""
        return source.encode("utf-8")[self.lo : self.hi].decode("utf-8")


class Token:
    """A single lexical token of the EMBER language.

    Attributes:
        type (str): The token type tag (e.g. 'PRINT', 'INTEGER', 'IDENT').
        value (int | str | None): The payload for INTEGER, IDENT and STRING
            tokens; None for bare markers.
    """

    __slots__ = ("type", "value")

    def __init__(self, type_: str, value: int | str | None = None) -> None:
        if type_ not in TOKEN_TYPES:
            raise ValueError(f"unknown token type: {type_!r}")
        self.type = type_
        self.value = value

    def __repr__(self) -> str:
        if self.value is None:
            return f"Token({self.type})"
        return f"Token({self.type}, {self.value!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value))


class CharacterStream:
    """Cursor over a source string.

    Keeps the character index used for regex matching in step with the UTF-8
    byte offset used for spans.

    Attributes:
        source (str): The input source string.
        position (int): Current character index.
        offset (int): Current byte offset into the UTF-8 encoding.
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self.position = 0
        self.offset = 0

    def peek(self) -> str:
        """Returns the character under the cursor, or an empty string at EOF."""
        return self.source[self.position] if self.position < len(self.source) else ""

    def startswith(self, text: str) -> bool:
        """Checks whether the unread source begins with `text`."""
        return self.source.startswith(text, self.position)

    def advance(self, text: str) -> Span:
        """Moves past `text`, which must be what sits under the cursor, and returns its span."""
        lo = self.offset
        self.position += len(text)
        self.offset += len(text.encode("utf-8"))
        return Span(lo, self.offset)

    def remaining_span(self) -> Span:
        """Returns the span from the cursor to the end of the source."""
        rest = self.source[self.position :]
        return Span(self.offset, self.offset + len(rest.encode("utf-8")))

    def end_of_file(self) -> bool:
        """Checks if the cursor has consumed the whole source.

        Returns:
            bool: True once no characters remain, False otherwise.
        """
        return self.position >= len(self.source)


class Lexer:
    """Lexical analyzer for EMBER source.

    A `Lexer` is a one-shot iterator: it walks its own cursor forward and
    cannot be rewound. Build a new one to tokenize the same text again.

    Args:
        source (str): The program text.
        max_bytes (int | None): Reject sources longer than this many UTF-8
            bytes. When omitted, `ember_constants.MAX_SOURCE_BYTES` is read
            at construction time; that setting defaults to None (no limit).

    Raises:
        ValueError: If the source exceeds the byte limit.
    """

    def __init__(self, source: str, max_bytes: int | None = None) -> None:
        limit = constants.MAX_SOURCE_BYTES if max_bytes is None else max_bytes
        if limit is not None:
            size = len(source.encode("utf-8"))
            if size > limit:
                raise ValueError(f"source is {size} bytes, limit is {limit}")
        self.stream = CharacterStream(source)
        self.done = False
        self.emitted = 0

    def __iter__(self) -> Iterator[tuple[Token, Span]]:
        return self

    def __next__(self) -> tuple[Token, Span]:
        item = self.next_token()
        if item is None:
            raise StopIteration
        return item

    def match_rule(self) -> tuple[str, str]:
        """Finds the longest rule match at the cursor.

        Returns:
            tuple[str, str]: The matched rule's token type and the matched text.

        Raises:
            LexError: If no rule matches, or a block comment opens and never closes.
        """
        source, pos = self.stream.source, self.stream.position
        best_type = ""
        best_text = ""
        for token_type, pattern in LEXER_RULES:
            m = pattern.match(source, pos)
            if m is not None and len(m.group(0)) > len(best_text):
                best_type, best_text = token_type, m.group(0)

        if best_type != COMMENT and self.stream.startswith(BLOCK_COMMENT_OPEN):
            self.fail(UNTERMINATED_COMMENT, BLOCK_COMMENT_OPEN, self.stream.remaining_span())
        if not best_text:
            ch = self.stream.peek()
            lo = self.stream.offset
            self.fail(UNEXPECTED_CHARACTER, ch, Span(lo, lo + len(ch.encode("utf-8"))))
        return best_type, best_text

    def fail(self, kind: str, lexeme: str, span: Span) -> NoReturn:
        """Marks the lexer finished and raises a `LexError`.

        Args:
            kind (str): One of the lexical error kinds in `ember_errors`.
            lexeme (str): The offending source text.
            span (Span): Where that text sits.

        Raises:
            LexError: Always.
        """
        self.done = True
        logger.debug("lexical error %s on %r at %s", kind, lexeme, span)
        raise LexError(kind, lexeme, span)

    def make_token(self, token_type: str, text: str, span: Span) -> Token:
        """Builds the token for a matched rule, decoding its payload.

        Args:
            token_type (str): The matched rule's token type.
            text (str): The matched source text.
            span (Span): The span of `text`, reported on overflow.

        Returns:
            Token: INTEGER carries an int, IDENT the name, STRING the text
            between the outer quotes; everything else has no payload.

        Raises:
            LexError: If an integer literal does not fit in 32 bits.
        """
        if token_type == INTEGER:
            digits = text.lstrip("0") or "0"
            if len(digits) > len(str(INT_MAX)) or int(digits) > INT_MAX:
                self.fail(INTEGER_OVERFLOW, text, span)
            return Token(INTEGER, int(digits))
        if token_type == IDENT:
            return Token(IDENT, text)
        if token_type == STRING:
            return Token(STRING, text[1:-1])
        return Token(token_type)

    def next_token(self) -> tuple[Token, Span] | None:
        """Consumes and returns the next significant token with its span.

        Returns:
            tuple[Token, Span] | None: The next pair, or None once input is exhausted.

        Raises:
            LexError: If the input at the cursor cannot be tokenized.
        """
        while not self.done and not self.stream.end_of_file():
            token_type, text = self.match_rule()
            span = self.stream.advance(text)
            if token_type in SKIPPED_TOKENS:
                continue
            token = self.make_token(token_type, text, span)
            self.emitted += 1
            return token, span

        if not self.done:
            self.done = True
            logger.debug("lexer exhausted after %d tokens", self.emitted)
        return None


def tokenize(source: str, max_bytes: int | None = None) -> list[tuple[Token, Span]]:
    """Tokenize a whole source string eagerly."""
    return list(Lexer(source, max_bytes=max_bytes))


__all__ = ["CharacterStream", "Lexer", "Span", "Token", "tokenize"]
