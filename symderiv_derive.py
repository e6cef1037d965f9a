#!/usr/bin/env python3
"""
Structural differentiation of symderiv expression trees.

derive() never looks at numeric values and never simplifies: each node kind
maps to exactly one rule, and the result is always a brand-new tree.  Any
subtree of the input that reappears in the output is clone()d, so the input
stays intact (it is typically printed right after).

    (f+g)'   = f' + g'
    (f-g)'   = f' - g'
    (f*g)'   = f'*g + f*g'
    (f/g)'   = (f'*g - f*g') / (g*g)
    ln(f)'   = f' / f
    exp(f)'  = f' * exp(f)
    (f^p)'   = f^p * (p'*ln(f) + p*(f'/f))
"""

from __future__ import annotations

from typing import Optional

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
    clone,
    parse_formula,
)


def derive(expr: Expr, variable: Optional[str] = None) -> Expr:
    """
    Return d(expr)/dv where v is the differentiation variable.

    The parser already decided which words are the variable: Variable nodes
    differentiate to 1, Parameter nodes to 0.  Passing `variable` additionally
    treats any Variable node with a different name as a constant, for trees
    composed by hand.
    """
    if isinstance(expr, Constant):
        return Constant(0)

    if isinstance(expr, Variable):
        if variable is not None and expr.name != variable:
            return Constant(0)
        return Constant(1)

    if isinstance(expr, Parameter):
        return Constant(0)

    if isinstance(expr, Add):
        return Add(derive(expr.left, variable), derive(expr.right, variable))

    if isinstance(expr, Sub):
        return Sub(derive(expr.left, variable), derive(expr.right, variable))

    if isinstance(expr, Mul):
        f, g = expr.left, expr.right
        return Add(
            Mul(derive(f, variable), clone(g)),
            Mul(clone(f), derive(g, variable)),
        )

    if isinstance(expr, Div):
        f, g = expr.left, expr.right
        return Div(
            Sub(
                Mul(derive(f, variable), clone(g)),
                Mul(clone(f), derive(g, variable)),
            ),
            Mul(clone(g), clone(g)),
        )

    if isinstance(expr, Ln):
        f = expr.argument
        return Div(derive(f, variable), clone(f))

    if isinstance(expr, Exp):
        f = expr.argument
        return Mul(derive(f, variable), Exp(clone(f)))

    if isinstance(expr, Pow):
        # logarithmic differentiation; the exponent may depend on the variable
        f, p = expr.base, expr.exponent
        return Mul(
            Pow(clone(f), clone(p)),
            Add(
                Mul(derive(p, variable), Ln(clone(f))),
                Mul(clone(p), Div(derive(f, variable), clone(f))),
            ),
        )

    raise NotImplementedError(f"Unknown Expr node type: {type(expr)}")


def derive_formula(src: str, variable: str = "x") -> Expr:
    """Convenience: parse src with the given variable name and differentiate it."""
    return derive(parse_formula(src, variable), variable)
