#!/usr/bin/env python3
"""
Check symderiv derivatives numerically on a set of formulas.

For each record in a JSONL file (default: manual_formulas.jsonl) with fields

    {"id": "poly_1", "formula": "x^2 + 2*x + 1", "variable": "x"}

we:

  1. Parse the formula and differentiate it
  2. JIT-compile f and df with llvmlite (symderiv_codegen_llvm)
  3. Sample the variable and parameters at a few points and compare df
     against the central difference (f(x+h) - f(x-h)) / 2h
  4. Count pass / fail.

Samples where f or df is not finite (ln of a negative number, ...) are
skipped; a formula with no usable sample is reported as "skipped".

Usage:

    python eval_symderiv.py --in manual_formulas.jsonl --max-formulas 20
    python eval_symderiv.py --formula "x^x" --var x
"""

from __future__ import annotations

import argparse
import json
import math
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from symderiv_codegen_llvm import CompiledFormula, build_module_for_formula, jit_compile
from symderiv_core import parameters, parse_formula
from symderiv_render import render

VARIABLE_SAMPLES = [0.3, 0.7, 1.3, 2.1, 3.4]

# ---------------------------------------------------------------------------
# Sample generation
# ---------------------------------------------------------------------------

def generate_samples(params: List[str]) -> List[Dict[str, float]]:
    """
    Parameter values for each sample; all positive so ln() and fractional
    powers of plain parameters stay in their real domain.
    """
    if not params:
        return [{}]
    base = {name: 1.5 + 0.75 * i for i, name in enumerate(params)}
    shifted = {name: value + 0.4 for name, value in base.items()}
    return [base, shifted]


def central_difference(f, x: float, rest: List[float], h: float) -> float:
    return (f(x + h, *rest) - f(x - h, *rest)) / (2.0 * h)


# ---------------------------------------------------------------------------
# Evaluation pipeline
# ---------------------------------------------------------------------------

@dataclass
class EvalResult:
    record_id: str
    formula: str
    status: str      # "ok", "parse_error", "compile_error", "mismatch", "skipped"
    detail: str = ""
    samples: int = 0


def check_compiled(
    compiled: CompiledFormula,
    params: List[str],
    step: float = 1e-5,
    rel_tol: float = 1e-4,
    abs_tol: float = 1e-6,
) -> Tuple[int, List[str]]:
    """
    Compare df to a central difference of f at every sample point.

    Returns (number of usable samples, list of mismatch descriptions).
    """
    f = compiled.functions["f"]
    df = compiled.functions["df"]
    used = 0
    mismatches: List[str] = []

    for env in generate_samples(params):
        rest = [env[name] for name in params]
        for x in VARIABLE_SAMPLES:
            got = df(x, *rest)
            expected = central_difference(f, x, rest, step)
            if not (math.isfinite(got) and math.isfinite(expected)):
                continue
            used += 1
            if not math.isclose(got, expected, rel_tol=rel_tol, abs_tol=abs_tol):
                mismatches.append(f"x={x} {env}: df={got!r} finite-diff={expected!r}")
    return used, mismatches


def evaluate_formula(
    formula: str,
    variable: str,
    record_id: str,
    step: float = 1e-5,
    rel_tol: float = 1e-4,
    abs_tol: float = 1e-6,
) -> EvalResult:
    # 1) Parse
    try:
        expr = parse_formula(formula, variable)
    except (SyntaxError, ArithmeticError, ValueError) as e:
        return EvalResult(record_id, formula, "parse_error", str(e))

    # 2) Build + JIT
    params = parameters(expr)
    try:
        module = build_module_for_formula(expr, variable, module_name=f"symderiv_{record_id}")
        compiled = jit_compile(module, [variable] + params)
    except RuntimeError as e:
        return EvalResult(record_id, formula, "compile_error", str(e))

    # 3) Sample
    used, mismatches = check_compiled(compiled, params, step, rel_tol, abs_tol)
    if used == 0:
        return EvalResult(record_id, formula, "skipped", "No finite sample points.")
    if mismatches:
        return EvalResult(record_id, formula, "mismatch", "\n".join(mismatches), used)
    return EvalResult(record_id, formula, "ok", render(expr), used)


# ---------------------------------------------------------------------------
# CLI driver
# ---------------------------------------------------------------------------

def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(
        description="Check symderiv derivatives against finite differences."
    )
    p.add_argument(
        "--in",
        dest="in_path",
        default="manual_formulas.jsonl",
        help="Input JSONL with 'formula' (and optional 'variable') fields.",
    )
    p.add_argument(
        "--formula",
        default=None,
        help="Check a single formula instead of reading --in.",
    )
    p.add_argument(
        "--var",
        dest="variable",
        default="x",
        help="Variable for --formula, and default for records without one.",
    )
    p.add_argument(
        "--max-formulas",
        type=int,
        default=1000,
        help="Maximum number of formulas to evaluate (default: 1000).",
    )
    p.add_argument("--step", type=float, default=1e-5,
                   help="Finite-difference step h (default: 1e-5).")
    p.add_argument("--rel-tol", type=float, default=1e-4,
                   help="Relative tolerance (default: 1e-4).")
    p.add_argument("--abs-tol", type=float, default=1e-6,
                   help="Absolute tolerance (default: 1e-6).")
    return p.parse_args(argv)


def load_records(args) -> List[Dict[str, str]]:
    if args.formula is not None:
        return [{"id": "cli", "formula": args.formula, "variable": args.variable}]

    records = []
    with Path(args.in_path).open("r", encoding="utf-8") as fin:
        for line in fin:
            if len(records) >= args.max_formulas:
                break
            if not line.strip():
                continue
            rec = json.loads(line)
            if not rec.get("formula"):
                continue
            records.append(rec)
    return records


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    results: List[EvalResult] = []
    timings: List[float] = []

    for idx, rec in enumerate(load_records(args)):
        record_id = str(rec.get("id", idx))
        variable = rec.get("variable") or args.variable

        start_t = time.perf_counter()
        res = evaluate_formula(rec["formula"], variable, record_id,
                               args.step, args.rel_tol, args.abs_tol)
        elapsed = time.perf_counter() - start_t
        if res.status in ("ok", "mismatch"):
            timings.append(elapsed)

        results.append(res)
        print(f"[{res.status.upper()}] {record_id}: {res.formula}")

    # Summary
    counts: Dict[str, int] = {}
    for r in results:
        counts[r.status] = counts.get(r.status, 0) + 1

    print("\n=== Summary ===")
    print(f"Total evaluated: {len(results)}")
    for status, count in sorted(counts.items()):
        print(f"  {status}: {count}")

    for r in results:
        if r.status != "ok":
            print(f"\n--- {r.status.upper()} for {r.record_id} ---")
            print(f"Formula: {r.formula}")
            print(f"Detail: {r.detail}")

    print("\n=== Performance summary (parse + derive + JIT + sampling) ===")
    if timings:
        print(f"Formulas timed:  {len(timings)}")
        print(f"Total time:      {sum(timings):.3f} s")
        print(f"Median per form: {statistics.median(timings) * 1000:.1f} ms")
        print(f"Min / Max:       {min(timings) * 1000:.1f} ms / {max(timings) * 1000:.1f} ms")
    else:
        print("No formula reached the sampling stage.")

    return 0 if all(r.status in ("ok", "skipped") for r in results) else 1


if __name__ == "__main__":
    raise SystemExit(main())
