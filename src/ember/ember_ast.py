"""
Defines the abstract syntax tree (AST) produced by the EMBER parser.

Every expression is an `Expr`: a source `span` plus a `node` payload, which is
exactly one of the variant classes below.

Variants:
    Print(expr)           `print <expr>`
    Assign(name, expr)    `<name> = <expr>`
    Add / Sub / Mul / Div(lhs, rhs)
    Var(name)             identifier reference
    IntegerLiteral(value) 32-bit integer constant

A `Program` is the ordered tuple of top-level statements. All classes are
frozen dataclasses: nodes are built once by the parser and never mutated, and
each compound node owns its children outright (a tree, never a DAG).

Serialisation:
    `to_dict()` gives a JSON-ready nested dict (see `ASTDict`), and `dump()`
    gives the compact form used in tests and debugging:

        >>> program.dump()
        ['Print(Add(Literal(1), Literal(2)))']
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, TypedDict, Union

from ember.ember_lexer import Span


class ASTDict(TypedDict, total=False):
    """
    Dictionary form of an `Expr`, as returned by `Expr.to_dict()`.

    Fields:
        kind (str): Variant name ("Print", "Assign", "Add", "Var", ...).
        span (list[int]): `[lo, hi]` byte offsets.
        name (str): Bound or referenced name (Assign, Var).
        value (int): Integer constant (IntegerLiteral).
        children (list[ASTDict]): Child expressions in source order.
    """

    kind: str
    span: list[int]
    name: str
    value: int
    children: list["ASTDict"]


@dataclass(frozen=True)
class Print:
    expr: Expr


@dataclass(frozen=True)
class Assign:
    name: str
    expr: Expr


@dataclass(frozen=True)
class Add:
    lhs: Expr
    rhs: Expr


@dataclass(frozen=True)
class Sub:
    lhs: Expr
    rhs: Expr


@dataclass(frozen=True)
class Mul:
    lhs: Expr
    rhs: Expr


@dataclass(frozen=True)
class Div:
    lhs: Expr
    rhs: Expr


@dataclass(frozen=True)
class Var:
    name: str


@dataclass(frozen=True)
class IntegerLiteral:
    value: int


Node = Union[Print, Assign, Add, Sub, Mul, Div, Var, IntegerLiteral]

BINARY_NODES = (Add, Sub, Mul, Div)


@dataclass(frozen=True)
class Expr:
    """An AST expression: where it came from and what it is.

    Attributes:
        span (Span): Byte range in the source covering the whole expression.
        node (Node): The variant payload.
    """

    span: Span
    node: Node

    @property
    def kind(self) -> str:
        return type(self.node).__name__

    def children(self) -> tuple[Expr, ...]:
        node = self.node
        if isinstance(node, (Print, Assign)):
            return (node.expr,)
        if isinstance(node, BINARY_NODES):
            return (node.lhs, node.rhs)
        return ()

    def walk(self) -> Iterator[Expr]:
        """Yield this expression and every descendant, parents before children."""
        yield self
        for child in self.children():
            yield from child.walk()

    def to_dict(self) -> ASTDict:
        out: ASTDict = {"kind": self.kind, "span": [self.span.lo, self.span.hi]}
        node = self.node
        if isinstance(node, (Assign, Var)):
            out["name"] = node.name
        elif isinstance(node, IntegerLiteral):
            out["value"] = node.value
        children = self.children()
        if children:
            out["children"] = [c.to_dict() for c in children]
        return out

    def dump(self) -> str:
        node = self.node
        if isinstance(node, IntegerLiteral):
            return f"Literal({node.value})"
        if isinstance(node, Var):
            return f"Var({node.name})"
        if isinstance(node, Assign):
            return f"Assign({node.name}, {node.expr.dump()})"
        inner = ", ".join(c.dump() for c in self.children())
        return f"{self.kind}({inner})"


@dataclass(frozen=True)
class Program:
    """The parsed program: top-level statements in source order."""

    stmts: tuple[Expr, ...] = ()

    def __len__(self) -> int:
        return len(self.stmts)

    def __iter__(self) -> Iterator[Expr]:
        return iter(self.stmts)

    def to_dict(self) -> dict[str, Any]:
        return {"stmts": [s.to_dict() for s in self.stmts]}

    def dump(self) -> list[str]:
        return [s.dump() for s in self.stmts]


__all__ = [
    "ASTDict",
    "Add",
    "Assign",
    "Div",
    "Expr",
    "IntegerLiteral",
    "Mul",
    "Node",
    "Print",
    "Program",
    "Sub",
    "Var",
]
