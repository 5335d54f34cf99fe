"""AST node types for the sparklet script language."""

from dataclasses import dataclass
from typing import Any, Union


# ============================================================================
# Expressions
# ============================================================================

@dataclass(frozen=True, slots=True)
class Literal:
    value: Any


@dataclass(frozen=True, slots=True)
class TemplateLiteral:
    parts: tuple["Node | str", ...]


@dataclass(frozen=True, slots=True)
class Identifier:
    name: str


@dataclass(frozen=True, slots=True)
class Spread:
    argument: "Node"


@dataclass(frozen=True, slots=True)
class ArrayLiteral:
    items: tuple["Node", ...]


@dataclass(frozen=True, slots=True)
class Property:
    key: "str | Node"  # Node when computed: {[expr]: value}
    value: "Node"


@dataclass(frozen=True, slots=True)
class ObjectLiteral:
    properties: tuple[Property | Spread, ...]


@dataclass(frozen=True, slots=True)
class Member:
    obj: "Node"
    name: str
    optional: bool = False


@dataclass(frozen=True, slots=True)
class Index:
    obj: "Node"
    index: "Node"
    optional: bool = False


@dataclass(frozen=True, slots=True)
class Call:
    callee: "Node"
    args: tuple["Node", ...]
    optional: bool = False


@dataclass(frozen=True, slots=True)
class Unary:
    op: str
    operand: "Node"


@dataclass(frozen=True, slots=True)
class Binary:
    op: str
    left: "Node"
    right: "Node"


@dataclass(frozen=True, slots=True)
class Logical:
    op: str  # "&&", "||", "??"
    left: "Node"
    right: "Node"


@dataclass(frozen=True, slots=True)
class Conditional:
    test: "Node"
    consequent: "Node"
    alternate: "Node"


@dataclass(frozen=True, slots=True)
class Arrow:
    params: tuple[str, ...]
    body: "Node | Block"


# ============================================================================
# Statements
# ============================================================================

@dataclass(frozen=True, slots=True)
class VarDecl:
    kind: str  # const, let, var
    name: str
    init: "Node | None"


@dataclass(frozen=True, slots=True)
class Assign:
    name: str
    value: "Node"


@dataclass(frozen=True, slots=True)
class If:
    test: "Node"
    consequent: "Statement"
    alternate: "Statement | None"


@dataclass(frozen=True, slots=True)
class Return:
    value: "Node | None"


@dataclass(frozen=True, slots=True)
class ExprStmt:
    expr: "Node"


@dataclass(frozen=True, slots=True)
class Block:
    body: tuple["Statement", ...]


Node = Union[
    Literal, TemplateLiteral, Identifier, ArrayLiteral, ObjectLiteral, Member,
    Index, Call, Unary, Binary, Logical, Conditional, Arrow,
]
Statement = Union[VarDecl, Assign, If, Return, ExprStmt, Block]
