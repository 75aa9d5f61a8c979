from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class NodeKind(str, Enum):
    PROGRAM = "Program"
    BLOCK = "Block"
    IDENTIFIER = "Identifier"
    STRING = "String"
    INT = "Int"
    FLOAT = "Float"
    THIS = "This"
    BOOL = "Bool"
    NULL = "Null"
    MEMBER_ACCESS_OP = "MemberAccessOp"
    DYNAMIC_MEMBER_ACCESS_OP = "DynamicMemberAccessOp"
    FUNCTION_APPLICATION = "FunctionApplication"
    PLUS_OP = "PlusOp"
    SUBTRACT_OP = "SubtractOp"
    MULTIPLY_OP = "MultiplyOp"
    DIVIDE_OP = "DivideOp"
    REM_OP = "RemOp"
    UNARY_PLUS_OP = "UnaryPlusOp"
    UNARY_NEGATE_OP = "UnaryNegateOp"
    TYPEOF_OP = "TypeofOp"
    LOGICAL_NOT_OP = "LogicalNotOp"
    ASSIGN_OP = "AssignOp"
    OBJECT_INITIALISER = "ObjectInitialiser"
    OBJECT_INITIALISER_MEMBER = "ObjectInitialiserMember"
    ARRAY_INITIALISER = "ArrayInitialiser"
    CONDITIONAL = "Conditional"
    FUNCTION = "Function"
    BOUND_FUNCTION = "BoundFunction"
    DEFAULT_PARAM = "DefaultParam"
    WHILE = "While"
    CLASS = "Class"
    CONSTRUCTOR = "Constructor"
    CLASS_PROTO_ASSIGN_OP = "ClassProtoAssignOp"
    SWITCH = "Switch"
    SWITCH_CASE = "SwitchCase"


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Where a node sits in the source: 1-based line/column plus a half-open range."""

    line: int
    column: int
    start: int
    end: int
    raw: str


@dataclass(frozen=True, slots=True)
class Node:
    kind: ClassVar[NodeKind]

    location: SourceLocation | None

    @property
    def virtual(self) -> bool:
        return self.location is None

    @property
    def range(self) -> tuple[int, int] | None:
        if self.location is None:
            return None
        return self.location.start, self.location.end

    @property
    def raw(self) -> str | None:
        return None if self.location is None else self.location.raw

    @property
    def line(self) -> int | None:
        return None if self.location is None else self.location.line

    @property
    def column(self) -> int | None:
        return None if self.location is None else self.location.column


@dataclass(frozen=True, slots=True)
class Block(Node):
    kind = NodeKind.BLOCK

    statements: list[Node]


@dataclass(frozen=True, slots=True)
class Program(Node):
    kind = NodeKind.PROGRAM

    body: Block | None


@dataclass(frozen=True, slots=True)
class Identifier(Node):
    kind = NodeKind.IDENTIFIER

    data: str


@dataclass(frozen=True, slots=True)
class String(Node):
    kind = NodeKind.STRING

    data: str


@dataclass(frozen=True, slots=True)
class Int(Node):
    kind = NodeKind.INT

    data: int


@dataclass(frozen=True, slots=True)
class Float(Node):
    kind = NodeKind.FLOAT

    data: float


@dataclass(frozen=True, slots=True)
class This(Node):
    kind = NodeKind.THIS


@dataclass(frozen=True, slots=True)
class Bool(Node):
    kind = NodeKind.BOOL

    data: bool


@dataclass(frozen=True, slots=True)
class Null(Node):
    kind = NodeKind.NULL


@dataclass(frozen=True, slots=True)
class MemberAccessOp(Node):
    kind = NodeKind.MEMBER_ACCESS_OP

    expression: Node
    member_name: str


@dataclass(frozen=True, slots=True)
class DynamicMemberAccessOp(Node):
    kind = NodeKind.DYNAMIC_MEMBER_ACCESS_OP

    expression: Node
    indexing_expr: Node


@dataclass(frozen=True, slots=True)
class FunctionApplication(Node):
    kind = NodeKind.FUNCTION_APPLICATION

    function: Node
    arguments: list[Node]


@dataclass(frozen=True, slots=True)
class BinaryOp(Node):
    left: Node
    right: Node


@dataclass(frozen=True, slots=True)
class PlusOp(BinaryOp):
    kind = NodeKind.PLUS_OP


@dataclass(frozen=True, slots=True)
class SubtractOp(BinaryOp):
    kind = NodeKind.SUBTRACT_OP


@dataclass(frozen=True, slots=True)
class MultiplyOp(BinaryOp):
    kind = NodeKind.MULTIPLY_OP


@dataclass(frozen=True, slots=True)
class DivideOp(BinaryOp):
    kind = NodeKind.DIVIDE_OP


@dataclass(frozen=True, slots=True)
class RemOp(BinaryOp):
    kind = NodeKind.REM_OP


@dataclass(frozen=True, slots=True)
class UnaryOp(Node):
    expression: Node


@dataclass(frozen=True, slots=True)
class UnaryPlusOp(UnaryOp):
    kind = NodeKind.UNARY_PLUS_OP


@dataclass(frozen=True, slots=True)
class UnaryNegateOp(UnaryOp):
    kind = NodeKind.UNARY_NEGATE_OP


@dataclass(frozen=True, slots=True)
class TypeofOp(UnaryOp):
    kind = NodeKind.TYPEOF_OP


@dataclass(frozen=True, slots=True)
class LogicalNotOp(UnaryOp):
    kind = NodeKind.LOGICAL_NOT_OP


@dataclass(frozen=True, slots=True)
class AssignOp(Node):
    kind = NodeKind.ASSIGN_OP

    assignee: Node
    expression: Node


@dataclass(frozen=True, slots=True)
class ObjectInitialiserMember(Node):
    kind = NodeKind.OBJECT_INITIALISER_MEMBER

    key: Node
    expression: Node


@dataclass(frozen=True, slots=True)
class ObjectInitialiser(Node):
    kind = NodeKind.OBJECT_INITIALISER

    members: list[Node]


@dataclass(frozen=True, slots=True)
class ArrayInitialiser(Node):
    kind = NodeKind.ARRAY_INITIALISER

    members: list[Node]


@dataclass(frozen=True, slots=True)
class Conditional(Node):
    kind = NodeKind.CONDITIONAL

    condition: Node
    consequent: Block | None
    alternate: Node | None = None


@dataclass(frozen=True, slots=True)
class BaseFunction(Node):
    body: Block | None
    parameters: list[Node]


@dataclass(frozen=True, slots=True)
class Function(BaseFunction):
    kind = NodeKind.FUNCTION


@dataclass(frozen=True, slots=True)
class BoundFunction(BaseFunction):
    kind = NodeKind.BOUND_FUNCTION


@dataclass(frozen=True, slots=True)
class DefaultParam(Node):
    kind = NodeKind.DEFAULT_PARAM

    param: Node
    default: Node


@dataclass(frozen=True, slots=True)
class While(Node):
    kind = NodeKind.WHILE

    condition: Node
    body: Block | None


@dataclass(frozen=True, slots=True)
class Constructor(Node):
    kind = NodeKind.CONSTRUCTOR

    expression: Node


@dataclass(frozen=True, slots=True)
class ClassProtoAssignOp(Node):
    kind = NodeKind.CLASS_PROTO_ASSIGN_OP

    assignee: Node
    expression: Node


@dataclass(frozen=True, slots=True)
class Class(Node):
    kind = NodeKind.CLASS

    name: Node | None
    name_assignee: Node | None
    body: Block | None
    bound_members: list[Node]
    parent: Node | None = None
    ctor: Constructor | None = None


@dataclass(frozen=True, slots=True)
class SwitchCase(Node):
    kind = NodeKind.SWITCH_CASE

    conditions: list[Node]
    consequent: Block | None


@dataclass(frozen=True, slots=True)
class Switch(Node):
    kind = NodeKind.SWITCH

    expression: Node | None
    cases: list[SwitchCase]
    alternate: Block | None = None
