"""
Error types and diagnostic rendering for the EMBER front end.

Two failure classes exist and they never mix:

    LexError:   raised by the lexer when no valid token boundary exists
                (integer out of range, unknown character, unterminated
                block comment). Lexing stops at the first one.
    ParseError: raised by the parser on the first token the grammar cannot
                accept, or when input ends early. It carries the offending
                token and span (both None at end of input) and one of the
                fixed messages from `ember_constants`.

Both derive from `EmberError`, itself a `SyntaxError`, so callers that only
care about "the source is malformed" can catch either with one clause.

Functions:
    locate(source, offset) -> tuple[int, int]
    format_error(source, error) -> str
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ember.ember_lexer import Span, Token

INTEGER_OVERFLOW = "INTEGER_OVERFLOW"
UNEXPECTED_CHARACTER = "UNEXPECTED_CHARACTER"
UNTERMINATED_COMMENT = "UNTERMINATED_COMMENT"

LEX_ERROR_KINDS = frozenset(
    {INTEGER_OVERFLOW, UNEXPECTED_CHARACTER, UNTERMINATED_COMMENT}
)


class EmberError(SyntaxError):
    """Base class for every error raised while turning source into an AST."""

    span: Span | None


class LexError(EmberError):
    """A fatal lexical error.

    Attributes:
        kind (str): One of INTEGER_OVERFLOW, UNEXPECTED_CHARACTER, UNTERMINATED_COMMENT.
        lexeme (str): The offending source text (the digit run, the character,
            or the comment opener).
        span (Span): Where the offending text sits in the source.
    """

    def __init__(self, kind: str, lexeme: str, span: Span) -> None:
        if kind not in LEX_ERROR_KINDS:
            raise ValueError(f"unknown lexical error kind: {kind!r}")
        self.kind = kind
        self.lexeme = lexeme
        self.span = span
        super().__init__(self._message())

    def _message(self) -> str:
        if self.kind == INTEGER_OVERFLOW:
            return f"integer {self.lexeme} is out of range"
        if self.kind == UNTERMINATED_COMMENT:
            return "unterminated block comment"
        return f"unexpected character: {self.lexeme}"

    def __str__(self) -> str:
        return self._message()

    def __repr__(self) -> str:
        return f"LexError({self.kind}, {self.lexeme!r}, {self.span!r})"


class ParseError(EmberError):
    """A syntax error: the first token the grammar could not accept.

    Attributes:
        token (Token | None): The offending token, or None at end of input.
        span (Span | None): The offending token's span, or None at end of input.
        message (str): A fixed diagnostic string.
    """

    def __init__(self, token: Token | None, span: Span | None, message: str) -> None:
        self.token = token
        self.span = span
        self.message = message
        super().__init__(message)

    @property
    def at_eof(self) -> bool:
        return self.token is None

    def __str__(self) -> str:
        if self.token is None or self.span is None:
            return self.message
        return f"{self.message}: {self.token!r} at {self.span.lo}..{self.span.hi}"

    def __repr__(self) -> str:
        return f"ParseError({self.token!r}, {self.span!r}, {self.message!r})"


def locate(source: str, offset: int) -> tuple[int, int]:
    """Translate a byte offset into a 1-based (line, column) pair.

    Columns count characters, not bytes, so a caret lines up under the
    offending text when the line is printed.
    """
    data = source.encode("utf-8")[:offset]
    line_start = data.rfind(b"\n") + 1
    line = data.count(b"\n") + 1
    col = len(data[line_start:].decode("utf-8", errors="replace")) + 1
    return line, col


def format_error(source: str, error: EmberError) -> str:
    """Render an error as a header, the offending source line and a caret marker.

    Example:
        >>> print(format_error("x = 1 +;", err))
        1:8: syntax error: unexpected token: Token(SEMI) at 7..8
        x = 1 +;
               ^
    """
    encoded = source.encode("utf-8")
    span = error.span
    lo = span.lo if span is not None else len(encoded)
    hi = span.hi if span is not None else lo
    line, col = locate(source, lo)

    label = "lexical error" if isinstance(error, LexError) else "syntax error"
    header = f"{line}:{col}: {label}: {error}"

    lines = source.split("\n")
    text = lines[line - 1] if line - 1 < len(lines) else ""
    marked = encoded[lo:hi].decode("utf-8", errors="replace").split("\n")[0]
    width = max(1, len(marked))
    caret = " " * (col - 1) + "^" * width
    return f"{header}\n{text}\n{caret}"


__all__ = [
    "EmberError",
    "INTEGER_OVERFLOW",
    "LexError",
    "ParseError",
    "UNEXPECTED_CHARACTER",
    "UNTERMINATED_COMMENT",
    "format_error",
    "locate",
]
