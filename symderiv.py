#!/usr/bin/env python3
"""
Differentiate a formula with respect to one variable and print both sides.

    $ python symderiv.py "x^2-2^x"
    f : x^2-2^x
    f': x^2*2*1/x-2^x*\\ln(2)

    $ python symderiv.py "a/x" --typeset
    f : \\frac{a}{x}
    f': \\frac{\\left(-a\\right)}{x^{2}}

Every word other than the variable (default: x) is a parameter and is held
constant.  Malformed formulas are reported on stderr with exit status 1.

Usage:

    python symderiv.py FORMULA [--var NAME] [--typeset]
    echo "ln(x)*x" | python symderiv.py - --var x
"""

from __future__ import annotations

import argparse
import sys
from typing import Tuple

from symderiv_core import parse_formula
from symderiv_derive import derive
from symderiv_render import RenderMode, render


def differentiate(formula: str, variable: str = "x",
                  mode: RenderMode = RenderMode.PLAIN) -> Tuple[str, str]:
    """
    Parse `formula`, differentiate it and return the two output lines:

        ("f : <formula>", "f': <derivative>")

    Nothing is returned on failure; LexError / SyntaxError / ZeroDivisionError
    propagate from the parser.
    """
    expr = parse_formula(formula, variable)
    # render the source first; derive() leaves expr untouched anyway
    original = render(expr, mode)
    derivative = render(derive(expr, variable), mode)
    return f"f : {original}", f"f': {derivative}"


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Symbolically differentiate a single-variable formula."
    )
    p.add_argument(
        "formula",
        help='Formula, e.g. "x^2-2^x" or "a/x". Use "-" to read it from stdin.',
    )
    p.add_argument(
        "--var",
        "-v",
        dest="variable",
        default="x",
        help="Differentiation variable (default: x). Other words are parameters.",
    )
    p.add_argument(
        "--typeset",
        "-t",
        action="store_true",
        help="Render LaTeX-style output (\\frac, \\cdot, ^{...}) instead of plain text.",
    )
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    src = args.formula
    if src == "-":
        src = sys.stdin.readline()
    src = src.strip()

    mode = RenderMode.TYPESET if args.typeset else RenderMode.PLAIN

    try:
        lines = differentiate(src, args.variable, mode)
    except (SyntaxError, ArithmeticError, ValueError) as e:
        kind = type(e).__name__
        print(f"[ERROR] {kind}: {e}", file=sys.stderr)
        return 1

    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
