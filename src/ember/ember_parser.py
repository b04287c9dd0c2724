"""
EMBER Language Parser

Turns the `(Token, Span)` stream produced by `ember_lexer.Lexer` into a
`Program` of `Expr` nodes.

Grammar
-------
Precedence from lowest to highest::

    program    := statements
    statements := (assign ';')*
    assign     := 'print' assign | IDENT '=' assign | term
    term       := term ('+' | '-') fact | fact
    fact       := fact ('*' | '/') atom | atom
    atom       := IDENT | INTEGER | '(' assign ')'

- `print` and `=` are right-associative; `x = y = 1;` binds `y` first.
- The target of `=` must be a bare identifier.
- `+ -` and `* /` are left-associative; `1 - 2 - 3` is `(1 - 2) - 3`.
- Parentheses yield the inner expression unchanged.
- Comparison operators, `true`/`false`, strings, brackets, braces, `typeof`,
  `env`, `.`, `!` and `,` are valid tokens with no production here: meeting
  one where an expression is expected is a syntax error.

Spans
-----
Every node's span runs from the start of its first constituent to the end of
its last one; leaves take their token's span.

Parser Behavior
---------------
Fail fast: the first token the grammar rejects raises `ParseError` with that
token, its span and a fixed message. Running out of tokens early raises
`ParseError(None, None, "unexpected end of input")`. There is no recovery
and no partial result. Lexical errors surface unchanged as `LexError`.
Nesting `print`, `=` or parentheses deeper than `MAX_NESTING_DEPTH` raises
`ParseError` with "expression nested too deeply" at the token that went
over the limit.

Entry Points
------------
- `Parser(tokens).parse()`: parse a token stream.
- `parse(source)`: lex and parse a source string.
"""

from __future__ import annotations

import logging
from typing import Iterable, NoReturn

import ember.ember_constants as constants
from ember.ember_ast import Add, Assign, Div, Expr, IntegerLiteral, Mul, Print, Program, Sub, Var
from ember.ember_constants import (
    EQUALS,
    IDENT,
    INTEGER,
    LPAREN,
    MINUS,
    MSG_EXPECTED_RPAREN,
    MSG_EXPECTED_SEMI,
    MSG_INVALID_ASSIGN_TARGET,
    MSG_TOO_DEEP,
    MSG_UNEXPECTED_EOF,
    MSG_UNEXPECTED_TOKEN,
    PLUS,
    PRINT,
    RPAREN,
    SEMI,
    SLASH,
    STAR,
)
from ember.ember_errors import ParseError
from ember.ember_lexer import Lexer, Span, Token

logger = logging.getLogger(__name__)

Item = tuple[Token, Span]

TERM_OPS = {PLUS: Add, MINUS: Sub}
FACT_OPS = {STAR: Mul, SLASH: Div}


class Parser:
    """
    Recursive-descent parser for EMBER.

    Tokens are pulled from the iterator on demand; at most two are buffered
    (the `IDENT '='` decision needs one token of extra lookahead).

    Attributes
    ----------
    tokens : Iterator[tuple[Token, Span]]
        The remaining token stream.
    lookahead : list[tuple[Token, Span]]
        Tokens pulled from the stream but not yet consumed.
    depth : int
        How many `assign` levels (`print`, `=`, parentheses) are open.
    max_depth : int
        Nesting limit; deeper input raises `ParseError` instead of
        exhausting the Python stack.
    """

    def __init__(self, tokens: Iterable[Item], max_depth: int | None = None) -> None:
        self.tokens = iter(tokens)
        self.lookahead: list[Item] = []
        self.depth = 0
        self.max_depth = constants.MAX_NESTING_DEPTH if max_depth is None else max_depth

    def fill(self, count: int) -> None:
        """Pulls tokens until `count` are buffered or the stream runs dry.

        Args:
            count (int): Number of tokens wanted in the lookahead buffer.

        Raises:
            LexError: If the lexer fails while producing a token.
        """
        while len(self.lookahead) < count:
            item = next(self.tokens, None)
            if item is None:
                return
            self.lookahead.append(item)

    def current(self) -> Item | None:
        """Returns the next unconsumed token pair, or None at end of input."""
        return self.peek(0)

    def peek(self, offset: int = 1) -> Item | None:
        """Looks `offset` tokens past the current one without consuming anything.

        Args:
            offset (int, optional): Distance from the current token. Defaults to 1.

        Returns:
            tuple[Token, Span] | None: The token pair, or None if input ends first.
        """
        self.fill(offset + 1)
        return self.lookahead[offset] if offset < len(self.lookahead) else None

    def at(self, *types: str) -> bool:
        """True if the current token's type is one of `types`."""
        item = self.current()
        return item is not None and item[0].type in types

    def advance(self) -> Item:
        """Consumes and returns the current token pair.

        Raises:
            ParseError: If input has already ended.
        """
        item = self.current()
        if item is None:
            self.error(None, MSG_UNEXPECTED_EOF)
        return self.lookahead.pop(0)

    def error(self, item: Item | None, message: str) -> NoReturn:
        """Raises a `ParseError` for `item`.

        A missing item means input ran out, which always reports
        "unexpected end of input" whatever `message` says.

        Args:
            item (tuple[Token, Span] | None): The offending token pair.
            message (str): One of the fixed diagnostics in `ember_constants`.

        Raises:
            ParseError: Always.
        """
        if item is None:
            logger.debug("parse error at end of input: %s", MSG_UNEXPECTED_EOF)
            raise ParseError(None, None, MSG_UNEXPECTED_EOF)
        token, span = item
        logger.debug("parse error at %s: %s (%r)", span, message, token)
        raise ParseError(token, span, message)

    def expect(self, token_type: str, message: str) -> Item:
        """Consumes the current token if it has type `token_type`.

        Args:
            token_type (str): The required token type.
            message (str): Diagnostic used when the token does not match.

        Returns:
            tuple[Token, Span]: The consumed token pair.

        Raises:
            ParseError: If the current token is missing or of another type.
        """
        item = self.current()
        if item is None or item[0].type != token_type:
            self.error(item, message)
        return self.advance()

    def parse(self) -> Program:
        """Parse every statement up to the end of the stream."""
        stmts: list[Expr] = []
        while self.current() is not None:
            stmts.append(self.parse_statement())
        logger.debug("parsed %d statements", len(stmts))
        return Program(tuple(stmts))

    def parse_statement(self) -> Expr:
        """Parse one `assign ';'` statement."""
        expr = self.parse_assign()
        self.expect(SEMI, MSG_EXPECTED_SEMI)
        return expr

    def parse_assign(self) -> Expr:
        """Parse `print` / assignment, the right-associative lowest level.

        Every nested `print`, `=` and parenthesis comes back through here, so
        this is where the nesting limit is enforced.

        Raises:
            ParseError: On a syntax error, or when nesting passes `max_depth`.
        """
        first = self.current()
        if first is None:
            self.error(None, MSG_UNEXPECTED_EOF)
        if self.depth >= self.max_depth:
            self.error(first, MSG_TOO_DEEP)

        self.depth += 1
        try:
            return self.parse_assign_level(first)
        finally:
            self.depth -= 1

    def parse_assign_level(self, first: Item) -> Expr:
        token, span = first

        if token.type == PRINT:
            self.advance()
            inner = self.parse_assign()
            return Expr(span.combine(inner.span), Print(inner))

        if token.type == IDENT:
            following = self.peek()
            if following is not None and following[0].type == EQUALS:
                self.advance()
                self.advance()
                rhs = self.parse_assign()
                return Expr(span.combine(rhs.span), Assign(token.value, rhs))

        expr = self.parse_term()
        if self.at(EQUALS):
            # `=` after anything but a lone identifier: blame where the target began
            self.error(first, MSG_INVALID_ASSIGN_TARGET)
        return expr

    def parse_term(self) -> Expr:
        """Parse a left-associative run of `+` / `-` over facts."""
        lhs = self.parse_fact()
        while self.at(*TERM_OPS):
            op, _ = self.advance()
            rhs = self.parse_fact()
            lhs = Expr(lhs.span.combine(rhs.span), TERM_OPS[op.type](lhs, rhs))
        return lhs

    def parse_fact(self) -> Expr:
        lhs = self.parse_atom()
        while self.at(*FACT_OPS):
            op, _ = self.advance()
            rhs = self.parse_atom()
            lhs = Expr(lhs.span.combine(rhs.span), FACT_OPS[op.type](lhs, rhs))
        return lhs

    def parse_atom(self) -> Expr:
        """Parse an identifier, an integer, or a parenthesised `assign`."""
        item = self.current()
        if item is None:
            self.error(None, MSG_UNEXPECTED_EOF)
        token, span = item

        if token.type == IDENT:
            self.advance()
            return Expr(span, Var(token.value))
        if token.type == INTEGER:
            self.advance()
            return Expr(span, IntegerLiteral(token.value))
        if token.type == LPAREN:
            self.advance()
            inner = self.parse_assign()
            self.expect(RPAREN, MSG_EXPECTED_RPAREN)
            return inner

        self.error(item, MSG_UNEXPECTED_TOKEN)


def parse(source: str, max_bytes: int | None = None) -> Program:
    """Lex and parse `source` into a `Program`.

    Raises:
        LexError: If the source cannot be tokenized.
        ParseError: If the token stream is not a valid program or nests too deeply.
        ValueError: If the source exceeds the byte limit.
    """
    return Parser(Lexer(source, max_bytes=max_bytes)).parse()


__all__ = ["Parser", "parse"]
