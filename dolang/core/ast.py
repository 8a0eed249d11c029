"""Abstract syntax tree for dolang. Nodes are frozen dataclasses; child sequences are tuples so that a parsed tree is
immutable and compares structurally.

Statements: Let, Def, If, For, Return, Expression, Assignment (all contained in a Source).
Expressions: Literal, Group, Binary, Variable, Property, Function (a call), Method, ObjectExpr.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple


class Ast:
    """Superclass of every node. Subclass names are used by the evaluator for dispatch."""

    @property
    def kind(self):
        return type(self).__name__


class Stmt(Ast):
    ...


class Expr(Ast):
    ...


@dataclass(frozen=True)
class Source(Ast):
    statements: Tuple[Stmt, ...]


@dataclass(frozen=True)
class Let(Stmt):
    name: str
    value: Optional[Expr] = None


@dataclass(frozen=True)
class Def(Stmt):
    name: str
    parameters: Tuple[str, ...]
    body: Tuple[Stmt, ...]


@dataclass(frozen=True)
class If(Stmt):
    condition: Expr
    then_body: Tuple[Stmt, ...]
    else_body: Tuple[Stmt, ...] = ()


@dataclass(frozen=True)
class For(Stmt):
    name: str
    iterable: Expr
    body: Tuple[Stmt, ...]


@dataclass(frozen=True)
class Return(Stmt):
    value: Optional[Expr] = None


@dataclass(frozen=True)
class Expression(Stmt):
    expression: Expr


@dataclass(frozen=True)
class Assignment(Stmt):
    expression: Expr  # always a Variable or Property
    value: Expr


@dataclass(frozen=True)
class Literal(Expr):
    value: Any  # None, bool, int, Decimal, Character or str


@dataclass(frozen=True)
class Group(Expr):
    expression: Expr


@dataclass(frozen=True)
class Binary(Expr):
    operator: str
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Variable(Expr):
    name: str


@dataclass(frozen=True)
class Property(Expr):
    receiver: Expr
    name: str


@dataclass(frozen=True)
class Function(Expr):
    name: str
    arguments: Tuple[Expr, ...]


@dataclass(frozen=True)
class Method(Expr):
    receiver: Expr
    name: str
    arguments: Tuple[Expr, ...]


@dataclass(frozen=True)
class ObjectExpr(Expr):
    name: Optional[str]
    fields: Tuple[Let, ...]
    methods: Tuple[Def, ...]
