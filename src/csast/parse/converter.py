from __future__ import annotations

from dataclasses import dataclass, field

from csast.diag.source import SourceText
from csast.parse import ast
from csast.parse.builder import N, NodeBuilder
from csast.parse.errors import UnrecognizedNodeError
from csast.parse.literal import LiteralKind, classify_literal, looks_numeric, parse_number
from csast.parse.location import (
    expand_left_through,
    expand_right_through,
    locations_containing,
    merge_all,
)
from csast.upstream import nodes as up

Ancestors = tuple[up.UpstreamNode, ...]

_BINARY_OPS: dict[str, type[ast.BinaryOp]] = {
    "+": ast.PlusOp,
    "-": ast.SubtractOp,
    "*": ast.MultiplyOp,
    "/": ast.DivideOp,
    "%": ast.RemOp,
}

_UNARY_OPS: dict[str, type[ast.UnaryOp]] = {
    "+": ast.UnaryPlusOp,
    "-": ast.UnaryNegateOp,
    "typeof": ast.TypeofOp,
    "!": ast.LogicalNotOp,
}

_BOOL_VALUES = {
    "true": True,
    "yes": True,
    "on": True,
    "false": False,
    "no": False,
    "off": False,
}


@dataclass(slots=True)
class TreeConverter:
    source: SourceText
    builder: NodeBuilder = field(init=False)

    def __post_init__(self) -> None:
        self.builder = NodeBuilder(self.source)

    def convert_program(self, root: up.Block) -> ast.Program:
        if not self.source.text:
            return ast.Program(
                ast.SourceLocation(line=1, column=1, start=0, end=0, raw=""),
                body=None,
            )

        ancestors: Ancestors = (root,)
        body = self._build(
            ast.Block,
            root.location_data,
            statements=[self._expr(expr, ancestors) for expr in root.expressions],
        )
        last = self.source.to_position(len(self.source) - 1)
        whole = up.LocationData(0, 0, last.line, last.column)
        return self._build(ast.Program, whole, body=body)

    def convert(self, node: up.UpstreamNode, ancestors: Ancestors = ()) -> ast.Node | None:
        inner: Ancestors = (*ancestors, node)

        if isinstance(node, up.Value):
            value = self._expr(node.base, inner)
            for prop in node.properties:
                value = self._access(value, prop, node.base.location_data, inner)
            return value

        if isinstance(node, up.Literal):
            return self._literal(node, ancestors)

        if isinstance(node, up.Call):
            return self._build(
                ast.FunctionApplication,
                node.location_data,
                function=self._expr(node.variable, inner),
                arguments=[self._expr(arg, inner) for arg in node.args],
            )

        if isinstance(node, up.Op):
            return self._operator(node, ancestors)

        if isinstance(node, up.Assign):
            if node.context == "object":
                return self._build(
                    ast.ObjectInitialiserMember,
                    node.location_data,
                    key=self._expr(node.variable, inner),
                    expression=self._expr(node.value, inner),
                )
            return self._build(
                ast.AssignOp,
                node.location_data,
                assignee=self._expr(node.variable, inner),
                expression=self._expr(node.value, inner),
            )

        if isinstance(node, up.Obj):
            members: list[ast.Node] = []
            for prop in node.properties:
                if isinstance(prop, up.Value):
                    # shorthand `{a}`: key and value are the same node
                    key_value = self._expr(prop, inner)
                    members.append(
                        self._build(
                            ast.ObjectInitialiserMember,
                            prop.location_data,
                            key=key_value,
                            expression=key_value,
                        )
                    )
                else:
                    members.append(self._expr(prop, inner))
            return self._build(ast.ObjectInitialiser, node.location_data, members=members)

        if isinstance(node, up.Arr):
            return self._build(
                ast.ArrayInitialiser,
                node.location_data,
                members=[self._expr(member, inner) for member in node.objects],
            )

        if isinstance(node, up.Parens):
            body = node.body
            if isinstance(body, up.Block):
                if not body.expressions:
                    raise UnrecognizedNodeError(
                        node, ancestors=ancestors, detail="parenthesized expression is empty"
                    )
                return self._expr(body.expressions[0], (*inner, body))
            return self._expr(body, inner)

        if isinstance(node, up.If):
            return self._conditional(node, ancestors)

        if isinstance(node, up.Code):
            function_type: type[ast.BaseFunction] = (
                ast.BoundFunction if node.bound else ast.Function
            )
            return self._build(
                function_type,
                node.location_data,
                body=self._block(node.body, inner) if node.body is not None else None,
                parameters=[self._expr(param, inner) for param in node.params],
            )

        if isinstance(node, up.Param):
            param = self._expr(node.name, inner)
            if node.value is None:
                return param
            return self._build(
                ast.DefaultParam,
                node.location_data,
                param=param,
                default=self._expr(node.value, inner),
            )

        if isinstance(node, up.Block):
            return self._block(node, ancestors)

        if isinstance(node, up.Bool):
            if node.val not in _BOOL_VALUES:
                raise UnrecognizedNodeError(
                    node, ancestors=ancestors, detail=f"unknown boolean literal: {node.val}"
                )
            return self._build(ast.Bool, node.location_data, data=_BOOL_VALUES[node.val])

        if isinstance(node, up.Null):
            return self._build(ast.Null, node.location_data)

        if isinstance(node, up.While):
            # upstream sometimes leaves the body out of the loop's own span
            return self._build(
                ast.While,
                locations_containing(node, node.condition, node.body),
                condition=self._expr(node.condition, inner),
                body=self._block(node.body, inner),
            )

        if isinstance(node, up.Class):
            return self._class(node, ancestors)

        if isinstance(node, up.Switch):
            return self._switch(node, ancestors)

        raise UnrecognizedNodeError(node, ancestors=ancestors)

    def _expr(self, node: up.UpstreamNode, ancestors: Ancestors) -> ast.Node:
        result = self.convert(node, ancestors)
        if result is None:
            raise UnrecognizedNodeError(
                node, ancestors=ancestors, detail="empty block where an expression is expected"
            )
        return result

    def _block(self, node: up.UpstreamNode, ancestors: Ancestors) -> ast.Block | None:
        if not isinstance(node, up.Block):
            raise UnrecognizedNodeError(
                node, ancestors=ancestors, detail=f"expected a Block, got {node.node_type}"
            )
        if not node.expressions:
            return None
        inner: Ancestors = (*ancestors, node)
        return self._build(
            ast.Block,
            node.location_data,
            statements=[self._expr(expr, inner) for expr in node.expressions],
        )

    def _literal(self, node: up.Literal, ancestors: Ancestors) -> ast.Node:
        if looks_numeric(node.value):
            number = parse_number(node.value)
            if number is None:
                raise UnrecognizedNodeError(
                    node, ancestors=ancestors, detail=f"unimplemented numeric literal: {node.value}"
                )
            if isinstance(number, int):
                return self._build(ast.Int, node.location_data, data=number)
            return self._build(ast.Float, node.location_data, data=number)

        if node.value == "this":
            return self._build(ast.This, node.location_data)

        classified = classify_literal(node.value)
        if classified.kind is LiteralKind.STRING:
            return self._build(ast.String, node.location_data, data=classified.value)
        return self._build(ast.Identifier, node.location_data, data=node.value)

    def _access(
        self,
        expression: ast.Node,
        prop: up.UpstreamNode,
        base_loc: up.LocationData | None,
        ancestors: Ancestors,
    ) -> ast.Node:
        # Always merge against the original base span; `expression` may already be wider.
        loc = merge_all(base_loc, prop.location_data)

        if isinstance(prop, up.Access):
            if not isinstance(prop.name, up.Literal):
                raise UnrecognizedNodeError(
                    prop, ancestors=ancestors, detail="member access name is not a literal"
                )
            return self._build(
                ast.MemberAccessOp,
                loc,
                expression=expression,
                member_name=prop.name.value,
            )

        if isinstance(prop, up.Index):
            if loc is not None:
                loc = expand_right_through(loc, "]", self.source)
            return self._build(
                ast.DynamicMemberAccessOp,
                loc,
                expression=expression,
                indexing_expr=self._expr(prop.index, (*ancestors, prop)),
            )

        raise UnrecognizedNodeError(
            prop, ancestors=ancestors, detail=f"unknown property type: {prop.node_type}"
        )

    def _operator(self, op: up.Op, ancestors: Ancestors, *, synthetic: bool = False) -> ast.Node:
        inner: Ancestors = (*ancestors, op)
        loc = None if synthetic else op.location_data

        if op.second is not None:
            binary_type = _BINARY_OPS.get(op.operator)
            if binary_type is None:
                raise UnrecognizedNodeError(
                    op, ancestors=ancestors, detail=f"unknown binary operator: {op.operator}"
                )
            return self._build(
                binary_type,
                loc,
                left=self._expr(op.first, inner),
                right=self._expr(op.second, inner),
            )

        unary_type = _UNARY_OPS.get(op.operator)
        if unary_type is None:
            raise UnrecognizedNodeError(
                op, ancestors=ancestors, detail=f"unknown unary operator: {op.operator}"
            )
        return self._build(unary_type, loc, expression=self._expr(op.first, inner))

    def _conditional(self, node: up.If, ancestors: Ancestors) -> ast.Conditional:
        inner: Ancestors = (*ancestors, node)
        condition = node.condition
        # `unless c` reaches us as `if !c` where the `!` reuses the whole statement's span.
        unless_sugar = (
            isinstance(condition, up.Op)
            and condition.operator == "!"
            and condition.location_data is not None
            and condition.location_data == node.location_data
        )
        if isinstance(condition, up.Op) and unless_sugar:
            converted = self._operator(condition, inner, synthetic=True)
        else:
            converted = self._expr(condition, inner)

        return self._build(
            ast.Conditional,
            node.location_data,
            condition=converted,
            consequent=self._block(node.body, inner),
            alternate=self.convert(node.else_body, inner) if node.else_body is not None else None,
        )

    def _class(self, node: up.Class, ancestors: Ancestors) -> ast.Class:
        inner: Ancestors = (*ancestors, node)
        name = self._expr(node.variable, inner) if node.variable is not None else None

        ctor: ast.Constructor | None = None
        bound_members: list[ast.Node] = []
        body: ast.Block | None = None
        if node.body is not None and node.body.expressions:
            body_ancestors: Ancestors = (*inner, node.body)
            statements: list[ast.Node] = []
            for expr in node.body.expressions:
                if not (isinstance(expr, up.Value) and isinstance(expr.base, up.Obj)):
                    statements.append(self._expr(expr, body_ancestors))
                    continue
                member_ancestors: Ancestors = (*body_ancestors, expr, expr.base)
                for prop in expr.base.properties:
                    statement, value = self._class_member(prop, member_ancestors)
                    statements.append(statement)
                    if isinstance(statement, ast.Constructor):
                        ctor = statement
                    if isinstance(value, ast.BoundFunction):
                        bound_members.append(statement)
            body = self._build(ast.Block, node.body.location_data, statements=statements)

        return self._build(
            ast.Class,
            node.location_data,
            name=name,
            name_assignee=name,
            body=body,
            bound_members=bound_members,
            parent=self._expr(node.parent, inner) if node.parent is not None else None,
            ctor=ctor,
        )

    def _class_member(
        self, prop: up.UpstreamNode, ancestors: Ancestors
    ) -> tuple[ast.Node, ast.Node]:
        if isinstance(prop, up.Value):
            key = value = self._expr(prop, ancestors)
        elif isinstance(prop, up.Assign):
            key = self._expr(prop.variable, (*ancestors, prop))
            value = self._expr(prop.value, (*ancestors, prop))
        else:
            raise UnrecognizedNodeError(
                prop, ancestors=ancestors, detail=f"unknown class member type: {prop.node_type}"
            )

        statement: ast.Node
        if isinstance(key, (ast.Identifier, ast.String)) and key.data == "constructor":
            statement = self._build(ast.Constructor, prop.location_data, expression=value)
        elif isinstance(key, ast.MemberAccessOp) and isinstance(key.expression, ast.This):
            statement = self._build(
                ast.AssignOp, prop.location_data, assignee=key, expression=value
            )
        else:
            statement = self._build(
                ast.ClassProtoAssignOp, prop.location_data, assignee=key, expression=value
            )
        return statement, value

    def _switch(self, node: up.Switch, ancestors: Ancestors) -> ast.Switch:
        inner: Ancestors = (*ancestors, node)
        cases: list[ast.SwitchCase] = []
        for conditions, body in node.cases:
            condition_list = conditions if isinstance(conditions, list) else [conditions]
            loc = locations_containing(*condition_list, body)
            if loc is not None:
                # upstream does not attribute the `when` keyword to the case
                loc = expand_left_through(loc, "when ", self.source)
            cases.append(
                self._build(
                    ast.SwitchCase,
                    loc,
                    conditions=[self._expr(condition, inner) for condition in condition_list],
                    consequent=self._block(body, inner),
                )
            )

        return self._build(
            ast.Switch,
            node.location_data,
            expression=self._expr(node.subject, inner) if node.subject is not None else None,
            cases=cases,
            alternate=self._block(node.otherwise, inner) if node.otherwise is not None else None,
        )

    def _build(self, node_type: type[N], loc: up.LocationData | None, **attrs: object) -> N:
        return self.builder.build(node_type, loc, **attrs)


def parse(source: str | SourceText, tree: up.Block) -> ast.Program:
    """Convert an upstream parse tree of ``source`` into a normalized ``Program``."""
    text = source if isinstance(source, SourceText) else SourceText(source)
    return TreeConverter(text).convert_program(tree)
