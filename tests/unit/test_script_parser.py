"""Tests for the script tokenizer and parser."""

import math

import pytest

from sparklet.core import ParseError, TokenizeError
from sparklet.script import TokenType, parse_expression, parse_program, tokenize
from sparklet.script import nodes as n


@pytest.mark.unit
def test_tokenize_longest_punctuator():
    values = [t.value for t in tokenize("a === b !== c ?? d")[:-1]]
    assert values == ["a", "===", "b", "!==", "c", "??", "d"]


@pytest.mark.unit
def test_tokenize_optional_chain_vs_ternary_decimal():
    """``a?.5:1`` is a conditional with 0.5, not optional chaining."""
    types = [t.value for t in tokenize("a?.5:1")[:-1]]
    assert types == ["a", "?", 0.5, ":", 1]


@pytest.mark.unit
def test_tokenize_string_escapes():
    tokens = tokenize(r"'a\'b\nA'")
    assert tokens[0].type == TokenType.STRING
    assert tokens[0].value == "a'b\nA"


@pytest.mark.unit
def test_tokenize_skips_comments():
    tokens = tokenize("1 // line\n + /* block */ 2")
    assert [t.value for t in tokens[:-1]] == [1, "+", 2]


@pytest.mark.unit
@pytest.mark.parametrize("source", ["'open", "`open", "1 # 2", "/* open"])
def test_tokenize_errors(source):
    with pytest.raises(TokenizeError):
        tokenize(source)


@pytest.mark.unit
def test_parse_precedence():
    expr = parse_expression("1 + 2 * 3")
    assert isinstance(expr, n.Binary)
    assert expr.op == "+"
    assert isinstance(expr.right, n.Binary) and expr.right.op == "*"


@pytest.mark.unit
def test_parse_exponent_right_associative():
    expr = parse_expression("2 ** 3 ** 2")
    assert expr.op == "**"
    assert isinstance(expr.right, n.Binary)


@pytest.mark.unit
def test_parse_arrow_forms():
    single = parse_expression("x => x + 1")
    multi = parse_expression("(c, i) => i")
    block = parse_expression("() => { return 1; }")

    assert isinstance(single, n.Arrow) and single.params == ("x",)
    assert multi.params == ("c", "i")
    assert isinstance(block.body, n.Block)


@pytest.mark.unit
def test_parse_object_literal_features():
    expr = parse_expression("{...state, count, [key]: 1, 'quoted': 2}")
    assert isinstance(expr, n.ObjectLiteral)
    assert isinstance(expr.properties[0], n.Spread)
    assert expr.properties[1].key == "count"
    assert isinstance(expr.properties[2].key, n.Identifier)
    assert expr.properties[3].key == "quoted"


@pytest.mark.unit
def test_parse_optional_chaining():
    expr = parse_expression("state.user?.name")
    assert isinstance(expr, n.Member)
    assert expr.optional is True


@pytest.mark.unit
@pytest.mark.parametrize("source", ["", "1 +", "a b", "(1", "{a: }"])
def test_parse_expression_errors(source):
    with pytest.raises(ParseError):
        parse_expression(source)


@pytest.mark.unit
def test_parse_program_statements():
    program = parse_program("""
        const a = 1;
        let b;
        b = a + 1
        if (b > 1) { return {b}; } else return {};
    """)
    kinds = [type(stmt) for stmt in program.body]
    assert kinds == [n.VarDecl, n.VarDecl, n.Assign, n.If]


@pytest.mark.unit
def test_member_assignment_rejected():
    with pytest.raises(ParseError, match="Only local variables"):
        parse_program("state.count = 5;")


@pytest.mark.unit
def test_const_requires_initializer():
    with pytest.raises(ParseError):
        parse_program("const a;")


@pytest.mark.unit
@pytest.mark.parametrize("source", [
    "(" * 3000 + "1" + ")" * 3000,
    "[" * 3000 + "]" * 3000,
    "!" * 3000 + "true",
    "{a: " * 3000 + "1" + "}" * 3000,
    "(() => " * 3000 + "1" + ")" * 3000,
])
def test_deep_nesting_rejected(source):
    with pytest.raises(ParseError, match="Nesting deeper"):
        parse_expression(source)


@pytest.mark.unit
def test_deep_statement_nesting_rejected():
    with pytest.raises(ParseError, match="Nesting deeper"):
        parse_program("if (1) { " * 500 + "return 1;" + " }" * 500)


@pytest.mark.unit
def test_moderate_nesting_parses():
    expr = parse_expression("(" * 30 + "1" + ")" * 30)
    assert expr == n.Literal(1)
    program = parse_program("if (1) { " * 10 + "return 1;" + " }" * 10)
    assert isinstance(program.body[0], n.If)


@pytest.mark.unit
def test_huge_number_literal_is_infinite():
    tokens = tokenize("1" + "0" * 5000)
    assert tokens[0].value == math.inf
    assert tokenize("12345678901234567890")[0].value == 1.2345678901234567e19
