"""Java expression precedence.

Lower numbers bind tighter. A value block reports the order of the expression it
produced; the caller asks for its child with the order of the slot the child
lands in. See https://docs.oracle.com/javase/tutorial/java/nutsandbolts/operators.html
"""

from __future__ import annotations

ORDER_ATOMIC: int = 0  # literals, names
ORDER_COLLECTION: int = 1
ORDER_STRING_CONVERSION: int = 1
ORDER_MEMBER: int = 2  # . []
ORDER_FUNCTION_CALL: int = 2  # ()
ORDER_POSTFIX: int = 3  # expr++ expr--
ORDER_EXPONENTIATION: int = 3
ORDER_LOGICAL_NOT: int = 3  # !
ORDER_UNARY_SIGN: int = 4  # ++expr --expr +expr -expr ~
ORDER_MULTIPLICATIVE: int = 5  # * / %
ORDER_ADDITIVE: int = 6  # + -
ORDER_BITWISE_SHIFT: int = 7  # << >> >>>
ORDER_RELATIONAL: int = 8  # < > <= >= instanceof
ORDER_EQUALITY: int = 9  # == !=
ORDER_BITWISE_AND: int = 10  # &
ORDER_BITWISE_XOR: int = 11  # ^
ORDER_BITWISE_OR: int = 12  # |
ORDER_LOGICAL_AND: int = 13  # &&
ORDER_LOGICAL_OR: int = 14  # ||
ORDER_CONDITIONAL: int = 15  # ? :
ORDER_ASSIGNMENT: int = 16  # = += -= *= /= %= &= ^= |= <<= >>= >>>=
ORDER_NONE: int = 99  # no surrounding context

# Binary operator -> order, for emitters that build expressions from an operator token
BINARY_ORDER: dict[str, int] = {
    "*": ORDER_MULTIPLICATIVE,
    "/": ORDER_MULTIPLICATIVE,
    "%": ORDER_MULTIPLICATIVE,
    "+": ORDER_ADDITIVE,
    "-": ORDER_ADDITIVE,
    "<<": ORDER_BITWISE_SHIFT,
    ">>": ORDER_BITWISE_SHIFT,
    ">>>": ORDER_BITWISE_SHIFT,
    "<": ORDER_RELATIONAL,
    "<=": ORDER_RELATIONAL,
    ">": ORDER_RELATIONAL,
    ">=": ORDER_RELATIONAL,
    "instanceof": ORDER_RELATIONAL,
    "==": ORDER_EQUALITY,
    "!=": ORDER_EQUALITY,
    "&": ORDER_BITWISE_AND,
    "^": ORDER_BITWISE_XOR,
    "|": ORDER_BITWISE_OR,
    "&&": ORDER_LOGICAL_AND,
    "||": ORDER_LOGICAL_OR,
}


def binary_order(op: str) -> int:
    return BINARY_ORDER.get(op, ORDER_NONE)


def needs_parens(child_order: int, parent_order: int) -> bool:
    """Check if a child of `child_order` must be wrapped to sit in a `parent_order` slot.

    True iff the child binds more loosely than the slot requires. A slot with no
    surrounding context (ORDER_NONE) never needs parentheses. Equal orders are
    left bare; emitters of non-associative operators ask for their right operand
    one order tighter.
    """
    if parent_order == ORDER_NONE:
        return False
    return child_order > parent_order
