from __future__ import annotations

from collections.abc import Callable

import pytest

from csast.parse import ast
from csast.parse.converter import TreeConverter, parse
from csast.parse.errors import AnchorNotFoundError, UnrecognizedNodeError
from csast.upstream import nodes as up

Fragment = tuple[str, up.Block]


def _index_access(make_kit: Callable) -> Fragment:
    kit = make_kit("a[b]\n")
    tree = kit.root(
        up.Value(
            location_data=kit.loc("a[b]"),
            base=kit.literal("a"),
            # upstream attributes only the index expression to the accessor
            properties=[up.Index(location_data=kit.loc("b"), index=kit.value("b"))],
        )
    )
    return kit.text, tree


def _member_chain(make_kit: Callable) -> Fragment:
    kit = make_kit("a.b.c")
    tree = kit.root(
        up.Value(
            location_data=kit.loc("a.b.c"),
            base=kit.literal("a"),
            properties=[
                up.Access(location_data=kit.loc(".b"), name=kit.literal("b")),
                up.Access(location_data=kit.loc(".c"), name=kit.literal("c")),
            ],
        )
    )
    return kit.text, tree


def _switch(make_kit: Callable) -> Fragment:
    kit = make_kit("switch x\n  when 1 then y\n")
    tree = kit.root(
        up.Switch(
            location_data=kit.loc("switch x\n  when 1 then y"),
            subject=kit.value("x"),
            cases=[
                (
                    kit.value("1"),
                    up.Block(location_data=kit.loc("y"), expressions=[kit.value("y")]),
                )
            ],
        )
    )
    return kit.text, tree


def _unless(make_kit: Callable) -> Fragment:
    kit = make_kit("unless x then y")
    whole = kit.loc("unless x then y")
    tree = kit.root(
        up.If(
            location_data=whole,
            condition=up.Op(location_data=whole, operator="!", first=kit.value("x")),
            body=up.Block(location_data=kit.loc("y"), expressions=[kit.value("y")]),
        )
    )
    return kit.text, tree


def _shorthand_object(make_kit: Callable) -> Fragment:
    kit = make_kit("{a}")
    tree = kit.root(
        up.Value(
            location_data=kit.loc("{a}"),
            base=up.Obj(location_data=kit.loc("{a}"), properties=[kit.value("a")]),
        )
    )
    return kit.text, tree


def _class(make_kit: Callable) -> Fragment:
    text = "class A extends B\n  constructor: ->\n  b: => 1\n  @c: 2\n"
    kit = make_kit(text)
    at = kit.loc("@c")
    this_c = up.Value(
        location_data=at,
        base=up.Literal(location_data=kit.loc("@"), value="this"),
        properties=[
            up.Access(
                location_data=up.LocationData(at.first_line, at.first_column + 1, at.last_line, at.last_column),
                name=up.Literal(
                    location_data=up.LocationData(at.first_line, at.first_column + 1, at.last_line, at.last_column),
                    value="c",
                ),
            )
        ],
    )
    members = kit.loc("constructor: ->\n  b: => 1\n  @c: 2")
    tree = kit.root(
        up.Class(
            location_data=kit.loc(text.rstrip("\n")),
            variable=kit.value("A"),
            parent=kit.value("B"),
            body=up.Block(
                location_data=members,
                expressions=[
                    up.Value(
                        location_data=members,
                        base=up.Obj(
                            location_data=members,
                            properties=[
                                up.Assign(
                                    location_data=kit.loc("constructor: ->"),
                                    context="object",
                                    variable=kit.value("constructor"),
                                    value=up.Code(
                                        location_data=kit.loc("->"),
                                        body=up.Block(),
                                    ),
                                ),
                                up.Assign(
                                    location_data=kit.loc("b: => 1"),
                                    context="object",
                                    variable=kit.value("b"),
                                    value=up.Code(
                                        location_data=kit.loc("=> 1"),
                                        body=up.Block(
                                            location_data=kit.loc("1"),
                                            expressions=[kit.value("1")],
                                        ),
                                        bound=True,
                                    ),
                                ),
                                up.Assign(
                                    location_data=kit.loc("@c: 2"),
                                    context="object",
                                    variable=this_c,
                                    value=kit.value("2"),
                                ),
                            ],
                        ),
                    )
                ],
            ),
        )
    )
    return text, tree


def _while(make_kit: Callable) -> Fragment:
    kit = make_kit("while a\n  b")
    tree = kit.root(
        up.While(
            # upstream span stops before the loop body
            location_data=kit.loc("while a"),
            condition=kit.value("a"),
            body=up.Block(location_data=kit.loc("b"), expressions=[kit.value("b")]),
        )
    )
    return kit.text, tree


def _operators(make_kit: Callable) -> Fragment:
    kit = make_kit("1 + 2 * 3 - 4 / 5 % 6\n-a\n+b\ntypeof c\nnot d")
    binary = up.Op(
        location_data=kit.loc("1 + 2 * 3 - 4 / 5 % 6"),
        operator="-",
        first=up.Op(
            location_data=kit.loc("1 + 2 * 3"),
            operator="+",
            first=kit.value("1"),
            second=up.Op(
                location_data=kit.loc("2 * 3"),
                operator="*",
                first=kit.value("2"),
                second=kit.value("3"),
            ),
        ),
        second=up.Op(
            location_data=kit.loc("4 / 5 % 6"),
            operator="%",
            first=up.Op(
                location_data=kit.loc("4 / 5"),
                operator="/",
                first=kit.value("4"),
                second=kit.value("5"),
            ),
            second=kit.value("6"),
        ),
    )
    tree = kit.root(
        binary,
        up.Op(location_data=kit.loc("-a"), operator="-", first=kit.value("a")),
        up.Op(location_data=kit.loc("+b"), operator="+", first=kit.value("b")),
        up.Op(location_data=kit.loc("typeof c"), operator="typeof", first=kit.value("c")),
        up.Op(location_data=kit.loc("not d"), operator="!", first=kit.value("d")),
    )
    return kit.text, tree


def _call_and_literals(make_kit: Callable) -> Fragment:
    kit = make_kit("f(a, 'x', 1.5, true, null, this)")
    tree = kit.root(
        up.Call(
            location_data=kit.loc("f(a, 'x', 1.5, true, null, this)"),
            variable=kit.value("f"),
            args=[
                kit.value("a"),
                kit.value("'x'"),
                kit.value("1.5"),
                up.Value(location_data=kit.loc("true"), base=up.Bool(location_data=kit.loc("true"), val="true")),
                up.Value(location_data=kit.loc("null"), base=up.Null(location_data=kit.loc("null"))),
                kit.value("this"),
            ],
        )
    )
    return kit.text, tree


def _assign_object_array(make_kit: Callable) -> Fragment:
    kit = make_kit("x = {k: [1, 2]}")
    tree = kit.root(
        up.Assign(
            location_data=kit.loc("x = {k: [1, 2]}"),
            variable=kit.value("x"),
            value=up.Value(
                location_data=kit.loc("{k: [1, 2]}"),
                base=up.Obj(
                    location_data=kit.loc("{k: [1, 2]}"),
                    properties=[
                        up.Assign(
                            location_data=kit.loc("k: [1, 2]"),
                            context="object",
                            variable=kit.value("k"),
                            value=up.Value(
                                location_data=kit.loc("[1, 2]"),
                                base=up.Arr(
                                    location_data=kit.loc("[1, 2]"),
                                    objects=[kit.value("1"), kit.value("2")],
                                ),
                            ),
                        )
                    ],
                ),
            ),
        )
    )
    return kit.text, tree


def _function_with_params(make_kit: Callable) -> Fragment:
    kit = make_kit("(a, b = 1) -> (a)")
    tree = kit.root(
        up.Code(
            location_data=kit.loc("(a, b = 1) -> (a)"),
            params=[
                up.Param(location_data=kit.loc("a"), name=kit.literal("a")),
                up.Param(location_data=kit.loc("b = 1"), name=kit.literal("b"), value=kit.value("1")),
            ],
            body=up.Block(
                location_data=kit.loc("(a)"),
                expressions=[
                    up.Value(
                        location_data=kit.loc("(a)"),
                        base=up.Parens(
                            location_data=kit.loc("(a)"),
                            body=up.Block(
                                location_data=kit.loc("a", nth=1),
                                expressions=[kit.value("a", nth=1)],
                            ),
                        ),
                    )
                ],
            ),
        )
    )
    return kit.text, tree


def _if_else(make_kit: Callable) -> Fragment:
    kit = make_kit("if a then b else c")
    tree = kit.root(
        up.If(
            location_data=kit.loc("if a then b else c"),
            condition=kit.value("a"),
            body=up.Block(location_data=kit.loc("b"), expressions=[kit.value("b")]),
            else_body=up.Block(location_data=kit.loc("c"), expressions=[kit.value("c")]),
        )
    )
    return kit.text, tree


FRAGMENTS = [
    _index_access,
    _member_chain,
    _switch,
    _unless,
    _shorthand_object,
    _class,
    _while,
    _operators,
    _call_and_literals,
    _assign_object_array,
    _function_with_params,
    _if_else,
]


@pytest.mark.parametrize("fragment", FRAGMENTS, ids=lambda f: f.__name__.lstrip("_"))
def test_every_fragment_converts_to_a_well_formed_tree(
    fragment: Callable, make_kit: Callable, well_formed: Callable
) -> None:
    text, tree = fragment(make_kit)
    program = parse(text, tree)

    assert isinstance(program, ast.Program)
    assert program.range == (0, len(text))
    assert program.raw == text
    well_formed(program, text)


def test_empty_source_yields_bodyless_program() -> None:
    program = parse("", up.Block())

    assert program.range == (0, 0)
    assert program.raw == ""
    assert program.body is None
    assert program.virtual is False
    assert (program.line, program.column) == (1, 1)


def test_index_access_range_includes_closing_bracket(make_kit: Callable) -> None:
    text, tree = _index_access(make_kit)
    program = parse(text, tree)

    assert program.body is not None
    access = program.body.statements[0]
    assert isinstance(access, ast.DynamicMemberAccessOp)
    assert access.raw == "a[b]"
    assert access.raw.endswith("]")
    assert isinstance(access.indexing_expr, ast.Identifier)
    assert access.indexing_expr.range == (2, 3)


def test_member_chain_folds_left_to_right(make_kit: Callable) -> None:
    text, tree = _member_chain(make_kit)
    program = parse(text, tree)

    assert program.body is not None
    outer = program.body.statements[0]
    assert isinstance(outer, ast.MemberAccessOp)
    assert outer.member_name == "c"
    assert outer.raw == "a.b.c"
    inner = outer.expression
    assert isinstance(inner, ast.MemberAccessOp)
    assert inner.member_name == "b"
    assert inner.raw == "a.b"
    assert isinstance(inner.expression, ast.Identifier)
    assert inner.expression.data == "a"


def test_switch_case_range_starts_at_when_keyword(make_kit: Callable) -> None:
    text, tree = _switch(make_kit)
    program = parse(text, tree)

    assert program.body is not None
    switch = program.body.statements[0]
    assert isinstance(switch, ast.Switch)
    assert isinstance(switch.expression, ast.Identifier)
    assert switch.alternate is None
    (case,) = switch.cases
    assert case.raw is not None and case.raw.startswith("when 1")
    assert case.raw == "when 1 then y"
    assert [type(c) for c in case.conditions] == [ast.Int]
    assert case.consequent is not None
    assert (case.line, case.column) == (2, 3)


def test_switch_case_with_multiple_conditions(make_kit: Callable) -> None:
    kit = make_kit("switch\n  when a, b then z\n  else d")
    tree = kit.root(
        up.Switch(
            location_data=kit.loc("switch\n  when a, b then z\n  else d"),
            cases=[
                (
                    [kit.value("a"), kit.value("b")],
                    up.Block(location_data=kit.loc("z"), expressions=[kit.value("z")]),
                )
            ],
            otherwise=up.Block(location_data=kit.loc("d"), expressions=[kit.value("d")]),
        )
    )
    program = parse(kit.text, tree)

    assert program.body is not None
    switch = program.body.statements[0]
    assert isinstance(switch, ast.Switch)
    assert switch.expression is None
    assert [c.data for c in switch.cases[0].conditions] == ["a", "b"]
    assert switch.cases[0].raw == "when a, b then z"
    assert switch.alternate is not None
    assert switch.alternate.raw == "d"


def test_unless_condition_is_virtual(make_kit: Callable) -> None:
    text, tree = _unless(make_kit)
    program = parse(text, tree)

    assert program.body is not None
    conditional = program.body.statements[0]
    assert isinstance(conditional, ast.Conditional)
    assert conditional.raw == "unless x then y"
    negation = conditional.condition
    assert isinstance(negation, ast.LogicalNotOp)
    assert negation.virtual is True
    assert negation.range is None and negation.raw is None
    assert negation.expression.virtual is False
    assert negation.expression.raw == "x"


def test_unless_not_keeps_inner_negation_located(make_kit: Callable) -> None:
    kit = make_kit("unless not x then y")
    whole = kit.loc("unless not x then y")
    inner = up.Op(location_data=kit.loc("not x"), operator="!", first=kit.value("x"))
    tree = kit.root(
        up.If(
            location_data=whole,
            condition=up.Op(location_data=whole, operator="!", first=inner),
            body=up.Block(location_data=kit.loc("y"), expressions=[kit.value("y")]),
        )
    )
    program = parse(kit.text, tree)

    assert program.body is not None
    conditional = program.body.statements[0]
    assert isinstance(conditional, ast.Conditional)
    outer_not = conditional.condition
    assert isinstance(outer_not, ast.LogicalNotOp) and outer_not.virtual
    inner_not = outer_not.expression
    assert isinstance(inner_not, ast.LogicalNotOp)
    assert inner_not.virtual is False
    assert inner_not.raw == "not x"


def test_explicit_negation_is_not_virtual(make_kit: Callable) -> None:
    kit = make_kit("if !x then y")
    tree = kit.root(
        up.If(
            location_data=kit.loc("if !x then y"),
            condition=up.Op(location_data=kit.loc("!x"), operator="!", first=kit.value("x")),
            body=up.Block(location_data=kit.loc("y"), expressions=[kit.value("y")]),
        )
    )
    program = parse(kit.text, tree)

    assert program.body is not None
    conditional = program.body.statements[0]
    assert isinstance(conditional, ast.Conditional)
    assert conditional.condition.virtual is False
    assert conditional.condition.raw == "!x"


def test_shorthand_member_shares_key_and_expression(make_kit: Callable) -> None:
    text, tree = _shorthand_object(make_kit)
    program = parse(text, tree)

    assert program.body is not None
    obj = program.body.statements[0]
    assert isinstance(obj, ast.ObjectInitialiser)
    (member,) = obj.members
    assert isinstance(member, ast.ObjectInitialiserMember)
    assert isinstance(member.key, ast.Identifier)
    assert member.key is member.expression
    assert member.raw == "a"


def test_class_body_desugaring(make_kit: Callable) -> None:
    text, tree = _class(make_kit)
    program = parse(text, tree)

    assert program.body is not None
    cls = program.body.statements[0]
    assert isinstance(cls, ast.Class)
    assert isinstance(cls.name, ast.Identifier) and cls.name.data == "A"
    assert cls.name_assignee is cls.name
    assert isinstance(cls.parent, ast.Identifier) and cls.parent.data == "B"
    assert cls.body is not None

    ctor, method, field_init = cls.body.statements
    assert isinstance(ctor, ast.Constructor)
    assert isinstance(ctor.expression, ast.Function)
    assert ctor.expression.body is None
    assert cls.ctor is ctor
    assert sum(isinstance(s, ast.Constructor) for s in cls.body.statements) == 1

    assert isinstance(method, ast.ClassProtoAssignOp)
    assert isinstance(method.expression, ast.BoundFunction)
    assert cls.bound_members == [method]
    assert cls.bound_members[0] is method

    assert isinstance(field_init, ast.AssignOp)
    assert isinstance(field_init.assignee, ast.MemberAccessOp)
    assert isinstance(field_init.assignee.expression, ast.This)
    assert field_init.assignee.member_name == "c"
    assert field_init.raw == "@c: 2"


def test_anonymous_class_with_empty_body(make_kit: Callable) -> None:
    kit = make_kit("class")
    tree = kit.root(up.Class(location_data=kit.loc("class"), body=up.Block()))
    program = parse(kit.text, tree)

    assert program.body is not None
    cls = program.body.statements[0]
    assert isinstance(cls, ast.Class)
    assert cls.name is None and cls.name_assignee is None
    assert cls.body is None
    assert cls.bound_members == []
    assert cls.ctor is None and cls.parent is None


def test_while_span_covers_body(make_kit: Callable) -> None:
    text, tree = _while(make_kit)
    program = parse(text, tree)

    assert program.body is not None
    loop = program.body.statements[0]
    assert isinstance(loop, ast.While)
    assert loop.raw == "while a\n  b"
    assert loop.body is not None and loop.body.raw == "b"


def test_operator_dispatch(make_kit: Callable) -> None:
    text, tree = _operators(make_kit)
    program = parse(text, tree)

    assert program.body is not None
    binary, negate, plus, typeof, logical_not = program.body.statements
    assert isinstance(binary, ast.SubtractOp)
    assert isinstance(binary.left, ast.PlusOp)
    assert isinstance(binary.left.right, ast.MultiplyOp)
    assert isinstance(binary.right, ast.RemOp)
    assert isinstance(binary.right.left, ast.DivideOp)
    assert isinstance(negate, ast.UnaryNegateOp)
    assert isinstance(plus, ast.UnaryPlusOp)
    assert isinstance(typeof, ast.TypeofOp)
    assert isinstance(logical_not, ast.LogicalNotOp)
    assert logical_not.raw == "not d"


def test_call_arguments_and_literal_routing(make_kit: Callable) -> None:
    text, tree = _call_and_literals(make_kit)
    program = parse(text, tree)

    assert program.body is not None
    call = program.body.statements[0]
    assert isinstance(call, ast.FunctionApplication)
    assert isinstance(call.function, ast.Identifier)
    ident, string, number, boolean, null, this = call.arguments
    assert isinstance(ident, ast.Identifier) and ident.data == "a"
    assert isinstance(string, ast.String) and string.data == "x"
    assert string.raw == "'x'"
    assert isinstance(number, ast.Float) and number.data == 1.5
    assert isinstance(boolean, ast.Bool) and boolean.data is True
    assert isinstance(null, ast.Null)
    assert isinstance(this, ast.This)


def test_integral_numbers_become_int(make_kit: Callable) -> None:
    kit = make_kit("[10, 1.0, 0x1F]")
    tree = kit.root(
        up.Value(
            location_data=kit.loc("[10, 1.0, 0x1F]"),
            base=up.Arr(
                location_data=kit.loc("[10, 1.0, 0x1F]"),
                objects=[kit.value("10"), kit.value("1.0"), kit.value("0x1F")],
            ),
        )
    )
    program = parse(kit.text, tree)

    assert program.body is not None
    array = program.body.statements[0]
    assert isinstance(array, ast.ArrayInitialiser)
    assert [type(m) for m in array.members] == [ast.Int, ast.Int, ast.Int]
    assert [m.data for m in array.members] == [10, 1, 31]


def test_assignment_contexts(make_kit: Callable) -> None:
    text, tree = _assign_object_array(make_kit)
    program = parse(text, tree)

    assert program.body is not None
    assign = program.body.statements[0]
    assert isinstance(assign, ast.AssignOp)
    obj = assign.expression
    assert isinstance(obj, ast.ObjectInitialiser)
    (member,) = obj.members
    assert isinstance(member, ast.ObjectInitialiserMember)
    assert member.raw == "k: [1, 2]"
    assert isinstance(member.expression, ast.ArrayInitialiser)
    assert len(member.expression.members) == 2


def test_function_parameters_and_parens_pass_through(make_kit: Callable) -> None:
    text, tree = _function_with_params(make_kit)
    program = parse(text, tree)

    assert program.body is not None
    fn = program.body.statements[0]
    assert isinstance(fn, ast.Function)
    plain, defaulted = fn.parameters
    assert isinstance(plain, ast.Identifier)
    assert isinstance(defaulted, ast.DefaultParam)
    assert isinstance(defaulted.param, ast.Identifier) and defaulted.param.data == "b"
    assert isinstance(defaulted.default, ast.Int) and defaulted.default.data == 1
    assert defaulted.raw == "b = 1"
    assert fn.body is not None
    (inner,) = fn.body.statements
    assert isinstance(inner, ast.Identifier)
    assert inner.raw == "a"


def test_conditional_with_alternate(make_kit: Callable) -> None:
    text, tree = _if_else(make_kit)
    program = parse(text, tree)

    assert program.body is not None
    conditional = program.body.statements[0]
    assert isinstance(conditional, ast.Conditional)
    assert isinstance(conditional.alternate, ast.Block)
    assert conditional.alternate.raw == "c"


def test_operator_range_widens_to_cover_operands(make_kit: Callable) -> None:
    kit = make_kit("a + b")
    tree = kit.root(
        up.Op(
            # upstream span misses the left operand
            location_data=kit.loc("+ b"),
            operator="+",
            first=kit.value("a"),
            second=kit.value("b"),
        )
    )
    program = parse(kit.text, tree)

    assert program.body is not None
    plus = program.body.statements[0]
    assert isinstance(plus, ast.PlusOp)
    assert plus.range == (0, 5)
    assert plus.raw == "a + b"
    # line and column still report where the upstream span started
    assert (plus.line, plus.column) == (1, 3)


def test_parenthesized_operand_passes_through(make_kit: Callable) -> None:
    kit = make_kit("(a) + b")
    tree = kit.root(
        up.Op(
            location_data=kit.loc("(a) + b"),
            operator="+",
            first=up.Value(
                location_data=kit.loc("(a)"),
                base=up.Parens(
                    location_data=kit.loc("(a)"),
                    body=up.Block(location_data=kit.loc("a"), expressions=[kit.value("a")]),
                ),
            ),
            second=kit.value("b"),
        )
    )
    program = parse(kit.text, tree)

    assert program.body is not None
    plus = program.body.statements[0]
    assert isinstance(plus, ast.PlusOp)
    assert plus.raw == "(a) + b"
    assert isinstance(plus.left, ast.Identifier)
    assert plus.left.range == (1, 2)


def test_unknown_node_type_is_a_hard_failure(make_kit: Callable) -> None:
    kit = make_kit("throw a")
    tree = kit.root(
        up.UnknownNode(
            location_data=kit.loc("throw a"),
            type_name="Throw",
            payload={"expression": {"type": "Value"}},
        )
    )

    with pytest.raises(UnrecognizedNodeError) as info:
        parse(kit.text, tree)

    assert info.value.node_type == "Throw"
    assert info.value.ancestors == ("Block",)
    assert isinstance(info.value.structure, dict)
    assert info.value.structure["type"] == "Throw"
    assert "unknown node type: Throw" in str(info.value)


@pytest.mark.parametrize(
    ("operator", "second"),
    [("&&", True), ("**", True), ("~", False), ("delete", False)],
)
def test_unknown_operator_is_a_hard_failure(
    make_kit: Callable, operator: str, second: bool
) -> None:
    kit = make_kit("a ? b")
    tree = kit.root(
        up.Op(
            location_data=kit.loc("a ? b"),
            operator=operator,
            first=kit.value("a"),
            second=kit.value("b") if second else None,
        )
    )

    with pytest.raises(UnrecognizedNodeError) as info:
        parse(kit.text, tree)

    assert operator in str(info.value)
    assert info.value.node_type == "Op"


def test_missing_closing_bracket_raises_anchor_error(make_kit: Callable) -> None:
    kit = make_kit("a[b")
    tree = kit.root(
        up.Value(
            location_data=kit.loc("a[b"),
            base=kit.literal("a"),
            properties=[up.Index(location_data=kit.loc("b"), index=kit.value("b"))],
        )
    )

    with pytest.raises(AnchorNotFoundError) as info:
        parse(kit.text, tree)

    assert info.value.anchor == "]"
    assert info.value.direction == "right"
    assert (info.value.line, info.value.column) == (1, 3)


def test_unknown_accessor_is_a_hard_failure(make_kit: Callable) -> None:
    kit = make_kit("a[1..2]")
    tree = kit.root(
        up.Value(
            location_data=kit.loc("a[1..2]"),
            base=kit.literal("a"),
            properties=[up.UnknownNode(location_data=kit.loc("[1..2]"), type_name="Slice")],
        )
    )

    with pytest.raises(UnrecognizedNodeError, match="unknown property type: Slice"):
        parse(kit.text, tree)


def test_converter_is_reusable_across_trees(make_kit: Callable) -> None:
    text, tree = _member_chain(make_kit)
    converter = TreeConverter(make_kit(text).source)

    first = converter.convert_program(tree)
    second = converter.convert_program(tree)

    assert first == second
    assert first is not second
