#!/usr/bin/env python3
"""
Render symderiv expression trees back to text.

Two notations share one traversal:

    plain     x^2*\\ln(x)-a/(x*y)         (re-parseable by symderiv_core)
    typeset   x^{2} \\cdot \\ln\\left(x\\right)-\\frac{a}{x \\cdot y}

Rendering applies a fixed set of presentational folds, looking only at the
already-rendered text of the children:

    0*u, u*0 -> 0        1*u, u*1 -> u        -1*u -> -u
    u^0 -> 1             u^1 -> u
    u/1 -> u             0/u -> 0             v/(u*u) -> v/u^2
    0+u, u+0 -> u        u-0 -> u             0-u -> (-u)     u+-v -> u-v
    ln(1) -> 0           exp(0) -> 1          exp(1) -> e

The square fold only applies to a divisor, where the quotient rule puts g*g;
a product written by the user keeps both factors.  Exp prints as exp(u) in
plain mode, since e^u reads back as a power of the parameter e.

The tree itself is never rewritten.  Every child is rendered exactly once and
the result carries the precedence of what was actually emitted, so a folded
subterm is parenthesized according to its folded form.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from symderiv_core import (
    Expr,
    Constant,
    Variable,
    Parameter,
    Add,
    Sub,
    Mul,
    Div,
    Pow,
    Ln,
    Exp,
)
from symderiv_fraction import ExactFraction


class RenderMode(str, Enum):
    PLAIN = "plain"
    TYPESET = "typeset"


# Binding strength of an emitted piece of text.
SUM = 10          # a+b, a-b
PRODUCT = 20      # a*b, a/b, 3/7, -a*b
NEGATION = 25     # -a, -3, -(a+b)
POWER = 30        # a^b, e^{u}
FUNCTION = 35     # \ln(u), exp(u), \frac{a}{b}
ATOM = 40         # 3, x, a, (anything)

# Exponents are parsed as a single unary, so these may follow '^' bare.
BARE_EXPONENT = (NEGATION, FUNCTION, ATOM)


@dataclass(frozen=True)
class Rendered:
    text: str
    precedence: int


ZERO = Rendered("0", ATOM)
ONE = Rendered("1", ATOM)


def render(expr: Expr, mode: RenderMode = RenderMode.PLAIN) -> str:
    """Render expr as a string in the given notation."""
    return render_node(expr, RenderMode(mode)).text


def render_node(expr: Expr, mode: RenderMode) -> Rendered:
    if isinstance(expr, Constant):
        return render_constant(expr.value, mode)

    if isinstance(expr, (Variable, Parameter)):
        return Rendered(expr.name, ATOM)

    if isinstance(expr, Add):
        return render_add(render_node(expr.left, mode), render_node(expr.right, mode))

    if isinstance(expr, Sub):
        return render_sub(render_node(expr.left, mode), render_node(expr.right, mode), mode)

    if isinstance(expr, Mul):
        return render_mul(render_node(expr.left, mode), render_node(expr.right, mode), mode)

    if isinstance(expr, Div):
        return render_div(render_node(expr.left, mode), render_divisor(expr.right, mode), mode)

    if isinstance(expr, Pow):
        return render_pow(render_node(expr.base, mode), render_node(expr.exponent, mode), mode)

    if isinstance(expr, Ln):
        return render_ln(render_node(expr.argument, mode), mode)

    if isinstance(expr, Exp):
        return render_exp(render_node(expr.argument, mode), mode)

    raise NotImplementedError(f"Unknown Expr node type: {type(expr)}")


# ---------------------------------------------------------------------------
# Grouping helpers
# ---------------------------------------------------------------------------

def group(text: str, mode: RenderMode) -> str:
    if mode is RenderMode.TYPESET:
        return f"\\left({text}\\right)"
    return f"({text})"


def operand(r: Rendered, min_precedence: int, mode: RenderMode) -> str:
    if r.precedence >= min_precedence:
        return r.text
    return group(r.text, mode)


def signed_operand(r: Rendered, min_precedence: int, mode: RenderMode) -> str:
    """Like operand(), but a right-hand operand never starts with a bare minus."""
    if r.text.startswith("-"):
        return group(r.text, mode)
    return operand(r, min_precedence, mode)


def negate(r: Rendered, mode: RenderMode) -> Rendered:
    """Prefix a minus sign, grouping whatever would not bind to it."""
    if r.text.startswith("-"):
        return Rendered("-" + group(r.text, mode), NEGATION)
    if r.precedence >= FUNCTION:
        return Rendered("-" + r.text, NEGATION)
    if r.precedence == PRODUCT:
        # -a*b reads back as (-a)*b, which has the same value
        return Rendered("-" + r.text, PRODUCT)
    # powers and sums: -x^2 would read back as (-x)^2
    return Rendered("-" + group(r.text, mode), NEGATION)


# ---------------------------------------------------------------------------
# Per-node rendering
# ---------------------------------------------------------------------------

def render_constant(value: ExactFraction, mode: RenderMode) -> Rendered:
    magnitude = abs(value.numerator)
    if value.is_integer():
        text = str(magnitude)
        body = Rendered(text, ATOM)
    elif mode is RenderMode.TYPESET:
        body = Rendered(f"\\frac{{{magnitude}}}{{{value.denominator}}}", FUNCTION)
    else:
        body = Rendered(f"{magnitude}/{value.denominator}", PRODUCT)

    if value.numerator < 0:
        return Rendered("-" + body.text, min(body.precedence, NEGATION))
    return body


def render_add(left: Rendered, right: Rendered) -> Rendered:
    if left.text == "0":
        return right
    if right.text == "0":
        return left
    if right.text.startswith("-"):
        return Rendered(left.text + right.text, SUM)
    return Rendered(f"{left.text}+{right.text}", SUM)


def render_sub(left: Rendered, right: Rendered, mode: RenderMode) -> Rendered:
    if right.text == "0":
        return left
    if left.text == "0":
        return Rendered(group(negate(right, mode).text, mode), ATOM)
    if right.precedence > SUM and not right.text.startswith("-"):
        rhs = right.text
    else:
        rhs = group(right.text, mode)
    return Rendered(f"{left.text}-{rhs}", SUM)


def render_mul(left: Rendered, right: Rendered, mode: RenderMode,
               fold_square: bool = False) -> Rendered:
    if left.text == "0" or right.text == "0":
        return ZERO
    if left.text == "1":
        return right
    if right.text == "1":
        return left
    if left.text == "-1":
        return negate(right, mode)
    if right.text == "-1":
        return negate(left, mode)
    if fold_square and left.text == right.text:
        return square(left, mode)

    sep = " \\cdot " if mode is RenderMode.TYPESET else "*"
    text = operand(left, PRODUCT, mode) + sep + signed_operand(right, PRODUCT, mode)
    return Rendered(text, PRODUCT)


def square(base: Rendered, mode: RenderMode) -> Rendered:
    exponent = "^{2}" if mode is RenderMode.TYPESET else "^2"
    return Rendered(operand(base, ATOM, mode) + exponent, POWER)


def render_divisor(expr: Expr, mode: RenderMode) -> Rendered:
    if isinstance(expr, Mul):
        left = render_node(expr.left, mode)
        right = render_node(expr.right, mode)
        return render_mul(left, right, mode, fold_square=True)
    return render_node(expr, mode)


def render_div(left: Rendered, right: Rendered, mode: RenderMode) -> Rendered:
    if right.text == "1":
        return left
    if left.text == "0":
        return ZERO

    if mode is RenderMode.TYPESET:
        return Rendered(f"\\frac{{{left.text}}}{{{right.text}}}", FUNCTION)

    numerator = operand(left, PRODUCT, mode)
    denominator = signed_operand(right, NEGATION, mode)
    # "x^2/3" or "3/2^x" would lex the digits around "/" as one fraction
    # literal; "3/7" may, since it reads back as the same text
    if (numerator[-1].isdigit() and denominator[0].isdigit()
            and not (numerator.isdigit() and denominator.isdigit())):
        numerator = group(numerator, mode)
    return Rendered(f"{numerator}/{denominator}", PRODUCT)


def render_pow(base: Rendered, exponent: Rendered, mode: RenderMode) -> Rendered:
    if exponent.text == "0":
        return ONE
    if exponent.text == "1":
        return base

    lhs = operand(base, ATOM, mode)
    if mode is RenderMode.TYPESET:
        return Rendered(f"{lhs}^{{{exponent.text}}}", POWER)

    if exponent.precedence in BARE_EXPONENT:
        rhs = exponent.text
    else:
        rhs = group(exponent.text, mode)
    return Rendered(f"{lhs}^{rhs}", POWER)


def render_ln(argument: Rendered, mode: RenderMode) -> Rendered:
    if argument.text == "1":
        return ZERO
    if mode is RenderMode.TYPESET:
        return Rendered(f"\\ln\\left({argument.text}\\right)", FUNCTION)
    return Rendered(f"\\ln({argument.text})", FUNCTION)


def render_exp(argument: Rendered, mode: RenderMode) -> Rendered:
    if argument.text == "0":
        return ONE
    if argument.text == "1":
        return Rendered("e", ATOM)
    if mode is RenderMode.TYPESET:
        return Rendered(f"e^{{{argument.text}}}", POWER)
    return Rendered(f"exp({argument.text})", FUNCTION)
