#!/usr/bin/env python3
"""
Write the hand-picked formula set checked by eval_symderiv.py.

Usage:
    python make_manual_formulas.py --out manual_formulas.jsonl
"""

import argparse
import json
from pathlib import Path

CASES = [
    # ----- Arithmetic & polynomials -----
    ("poly_1", "x + 1", "x"),
    ("poly_2", "x^2 + 2*x + 1", "x"),
    ("poly_3", "x^3 - 3*x + 2", "x"),
    ("poly_4", "3/7*x^2 - 5/2", "x"),
    ("poly_5", "-(x - 1)*(x + 1)", "x"),

    # ----- Quotients -----
    ("quot_1", "a/x", "x"),
    ("quot_2", "(x^2 - 1) / (x + 2)", "x"),
    ("quot_3", "1 / (1/x + 1/b)", "x"),

    # ----- Powers (left-associative chains) -----
    ("pow_1", "x^2 - 2^x", "x"),
    ("pow_2", "x^x", "x"),
    ("pow_3", "x^2^3", "x"),          # (x^2)^3
    ("pow_4", "x^(1/2)", "x"),
    ("pow_5", "(a*x + b)^n", "x"),

    # ----- Logarithms & exponentials -----
    ("ln_1", "ln(x)", "x"),
    ("ln_2", "\\ln(x^2 + a)", "x"),
    ("exp_1", "exp(x)", "x"),
    ("exp_2", "exp(-(x^2) / 2)", "x"),
    ("exp_3", "exp(a*t)*ln(t)", "t"),

    # ----- Parameters only / other variable names -----
    ("param_1", "a*b + c", "x"),
    ("param_2", "y^k + k*y", "y"),
    ("param_3", "e^x + x^e", "x"),       # e is a parameter, not Exp

    # ----- Showcase formula -----
    ("mixed_1", "(ln(x) - exp(x))*x + a/x + x^2 - 2^x", "x"),
]


def parse_args():
    p = argparse.ArgumentParser(description="Write the manual formula JSONL set.")
    p.add_argument("--out", default="manual_formulas.jsonl",
                   help="Output JSONL path (default: manual_formulas.jsonl).")
    return p.parse_args()


def main():
    args = parse_args()
    out = Path(args.out)
    with out.open("w", encoding="utf-8") as f:
        for id_, formula, variable in CASES:
            rec = {
                "id": id_,
                "formula": formula,
                "variable": variable,
            }
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")
    print(f"Wrote {len(CASES)} cases to {out}")


if __name__ == "__main__":
    main()
