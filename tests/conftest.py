"""Pytest configuration: a generator with emitters for a handful of sample blocks."""

import pytest

from blockjava.backend.context import GenerationContext
from blockjava.backend.java import JavaBlockEmitter, JavaConfig, JavaGenerator
from blockjava.backend.names import PROCEDURE
from blockjava.backend.precedence import (
    ORDER_ASSIGNMENT,
    ORDER_ATOMIC,
    ORDER_CONDITIONAL,
    ORDER_LOGICAL_OR,
    ORDER_NONE,
    ORDER_UNARY_SIGN,
    binary_order,
)


def _text(block, e):
    return (e.quote(block.get_field_value("TEXT") or ""), ORDER_ATOMIC)


def _number(block, e):
    value = block.get_field_value("NUM") or "0"
    if value.startswith("-"):
        return (value, ORDER_UNARY_SIGN)
    return (value, ORDER_ATOMIC)


def _arithmetic(block, e):
    op = block.get_field_value("OP")
    order = binary_order(op)
    a = e.value_to_code(block, "A", order) or "0"
    # Right operand binds one order tighter: a - (b - c) keeps its parens
    b = e.value_to_code(block, "B", order - 1) or "0"
    return (a + " " + op + " " + b, order)


def _ternary(block, e):
    cond = e.value_to_code(block, "IF", ORDER_LOGICAL_OR) or "false"
    then = e.value_to_code(block, "THEN", ORDER_CONDITIONAL) or "null"
    other = e.value_to_code(block, "ELSE", ORDER_CONDITIONAL) or "null"
    return (cond + " ? " + then + " : " + other, ORDER_CONDITIONAL)


def _var_get(block, e):
    return (e.get_name(block.get_field_value("VAR")), ORDER_ATOMIC)


def _var_set(block, e):
    name = block.get_field_value("VAR")
    e.set_global_var(block, name)
    value = e.value_to_code(block, "VALUE", ORDER_ASSIGNMENT) or "null"
    return e.get_name(name) + " = " + value + ";\n"


def _say(block, e):
    return "System.out.println(" + (e.to_string_code(block, "TEXT") or '""') + ");\n"


def _if(block, e):
    cond = e.value_to_code(block, "IF0", ORDER_NONE) or "false"
    return "if (" + cond + ") {\n" + e.statement_to_code(block, "DO0") + "}\n"


def _procedure(block, e):
    logical = block.get_field_value("NAME")
    name = e.get_name(logical, PROCEDURE)
    params = ", ".join("Object " + e.get_name(p) for p in block.local_variables)
    body = e.statement_to_code(block, "STACK")
    e.add_definition("%" + logical, name, "public void " + name + "(" + params + ") {\n" + body + "}")
    return None


SAMPLE_EMITTERS = {
    "text": _text,
    "math_number": _number,
    "math_arithmetic": _arithmetic,
    "logic_ternary": _ternary,
    "variables_get": _var_get,
    "variables_set": _var_set,
    "text_print": _say,
    "controls_if": _if,
    "procedures_defnoreturn": _procedure,
}


@pytest.fixture
def config():
    return JavaConfig(year=2024, author="Ada")


@pytest.fixture
def generator(config):
    gen = JavaGenerator(config)
    for tag, fn in SAMPLE_EMITTERS.items():
        gen.register(tag, fn)
    return gen


@pytest.fixture
def emitter(config):
    """A walker over a fresh context, for driving single blocks."""
    return JavaBlockEmitter(dict(SAMPLE_EMITTERS), GenerationContext(config))
