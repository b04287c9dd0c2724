"""
Token vocabulary and lexer configuration for the EMBER language.

Everything the lexer and parser agree on lives here: the closed set of token
types, the keyword and punctuation tables, the ordered rule table the lexer
walks at every position, integer bounds and the fixed parser diagnostics.

Exports:
    - TOKEN_TYPES
    - SKIPPED_TOKENS
    - KEYWORDS
    - PUNCTUATION
    - LEXER_RULES
    - INT_MIN / INT_MAX
    - MAX_SOURCE_BYTES
    - MAX_NESTING_DEPTH
    - parser messages (MSG_*)
"""

import re

# Bare markers
PRINT = "PRINT"
TYPEOF = "TYPEOF"
ENV = "ENV"
TRUE = "TRUE"
FALSE = "FALSE"
LBRACK = "LBRACK"
RBRACK = "RBRACK"
LBRACE = "LBRACE"
RBRACE = "RBRACE"
COMMA = "COMMA"
EQUALS = "EQUALS"
PLUS = "PLUS"
MINUS = "MINUS"
STAR = "STAR"
SLASH = "SLASH"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
SEMI = "SEMI"
BANG = "BANG"
GT = "GT"
LT = "LT"
GE = "GE"
LE = "LE"
EQ = "EQ"
NE = "NE"
DOT = "DOT"

# Payload carriers
INTEGER = "INTEGER"
IDENT = "IDENT"
STRING = "STRING"

# Matched, never emitted
WHITESPACE = "WHITESPACE"
COMMENT = "COMMENT"

TOKEN_TYPES: frozenset[str] = frozenset(
    {
        PRINT,
        TYPEOF,
        ENV,
        TRUE,
        FALSE,
        LBRACK,
        RBRACK,
        LBRACE,
        RBRACE,
        COMMA,
        EQUALS,
        PLUS,
        MINUS,
        STAR,
        SLASH,
        LPAREN,
        RPAREN,
        SEMI,
        BANG,
        GT,
        LT,
        GE,
        LE,
        EQ,
        NE,
        DOT,
        INTEGER,
        IDENT,
        STRING,
    }
)

SKIPPED_TOKENS: frozenset[str] = frozenset({WHITESPACE, COMMENT})

KEYWORDS: dict[str, str] = {
    "print": PRINT,
    "typeof": TYPEOF,
    "env": ENV,
    "true": TRUE,
    "false": FALSE,
}

# Multi-character operators come first so a table walk never splits them.
PUNCTUATION: dict[str, str] = {
    ">=": GE,
    "<=": LE,
    "==": EQ,
    "!=": NE,
    "[": LBRACK,
    "]": RBRACK,
    "{": LBRACE,
    "}": RBRACE,
    ",": COMMA,
    "=": EQUALS,
    "+": PLUS,
    "-": MINUS,
    "*": STAR,
    "/": SLASH,
    "(": LPAREN,
    ")": RPAREN,
    ";": SEMI,
    "!": BANG,
    ">": GT,
    "<": LT,
    ".": DOT,
}

BLOCK_COMMENT_OPEN = "/*"


def _rules() -> list[tuple[str, re.Pattern[str]]]:
    rules: list[tuple[str, re.Pattern[str]]] = [
        (WHITESPACE, re.compile(r"[ \t\r\n]+")),
        (COMMENT, re.compile(r"/\*(?:(?!\*/)[\s\S])*\*/")),
        (COMMENT, re.compile(r"//[^\n]*")),
    ]
    rules += [(tok, re.compile(re.escape(word))) for word, tok in KEYWORDS.items()]
    rules.append((INTEGER, re.compile(r"[0-9]+")))
    rules += [(tok, re.compile(re.escape(sym))) for sym, tok in PUNCTUATION.items()]
    rules.append((STRING, re.compile(r'"[^\n]*"')))
    rules.append((IDENT, re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")))
    return rules


# Priority order: on equal match length the earlier rule wins.
LEXER_RULES: list[tuple[str, re.Pattern[str]]] = _rules()

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1

# Optional cap on source size in UTF-8 bytes; None disables the check.
# Read when a Lexer is built, so it can be changed at runtime.
MAX_SOURCE_BYTES: int | None = None

# Deepest nesting of `print`, `=` and parentheses the parser accepts.
# Each level costs several Python stack frames.
MAX_NESTING_DEPTH = 100

# Parser diagnostics
MSG_UNEXPECTED_TOKEN = "unexpected token"
MSG_UNEXPECTED_EOF = "unexpected end of input"
MSG_EXPECTED_SEMI = "expected ';' after statement"
MSG_EXPECTED_RPAREN = "expected ')'"
MSG_INVALID_ASSIGN_TARGET = "assignment target must be an identifier"
MSG_TOO_DEEP = "expression nested too deeply"
