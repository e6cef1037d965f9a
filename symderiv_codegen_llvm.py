#!/usr/bin/env python3
"""
LLVM code generator for symderiv expressions.

Given a formula like

    x^2 - a*ln(x)

we:

  1. Parse it (symderiv_core) and differentiate it (symderiv_derive)
  2. Build an LLVM module with two functions sharing one signature:

         double f(double x, double a);
         double df(double x, double a);

  3. Either emit LLVM IR to a .ll file, or JIT-compile the module and hand
     back ctypes callables (used by eval_symderiv.py to check derivatives).

The variable always comes first, followed by the parameters in sorted order.
"""

from __future__ import annotations

import argparse
import ctypes
import ctypes.util
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import llvmlite.binding as llvm
from llvmlite import ir

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
    parameters,
    parse_formula,
)
from symderiv_derive import derive

# ---------------------------------------------------------------------------
# Expression codegen
# ---------------------------------------------------------------------------

INTRINSICS = {
    "pow": ("llvm.pow.f64", 2),
    "log": ("llvm.log.f64", 1),
    "exp": ("llvm.exp.f64", 1),
}


def intrinsic(module: ir.Module, key: str) -> ir.Function:
    """Declare (once per module) and return a double-typed LLVM math intrinsic."""
    name, arity = INTRINSICS[key]
    fn = module.globals.get(name)
    if fn is None:
        double = ir.DoubleType()
        fn_ty = ir.FunctionType(double, [double] * arity)
        fn = ir.Function(module, fn_ty, name=name)
    return fn


def codegen_expr(
    expr: Expr,
    builder: ir.IRBuilder,
    env: Dict[str, ir.Value],
    module: ir.Module,
) -> ir.Value:
    """
    Generate LLVM IR for an Expr, returning an ir.Value (double).

    env: mapping from variable/parameter name -> ir.Value (function arguments)
    module: LLVM module (needed to declare the math intrinsics)
    """
    double = ir.DoubleType()

    if isinstance(expr, Constant):
        return ir.Constant(double, float(expr.value))

    if isinstance(expr, (Variable, Parameter)):
        if expr.name not in env:
            raise ValueError(f"Unbound symbol {expr.name!r} in codegen")
        return env[expr.name]

    if isinstance(expr, (Add, Sub, Mul, Div)):
        left = codegen_expr(expr.left, builder, env, module)
        right = codegen_expr(expr.right, builder, env, module)

        if isinstance(expr, Add):
            return builder.fadd(left, right, name="addtmp")
        if isinstance(expr, Sub):
            return builder.fsub(left, right, name="subtmp")
        if isinstance(expr, Mul):
            return builder.fmul(left, right, name="multmp")
        return builder.fdiv(left, right, name="divtmp")

    if isinstance(expr, Pow):
        base = codegen_expr(expr.base, builder, env, module)
        exponent = codegen_expr(expr.exponent, builder, env, module)
        return builder.call(intrinsic(module, "pow"), [base, exponent], name="powtmp")

    if isinstance(expr, Ln):
        arg = codegen_expr(expr.argument, builder, env, module)
        return builder.call(intrinsic(module, "log"), [arg], name="lntmp")

    if isinstance(expr, Exp):
        arg = codegen_expr(expr.argument, builder, env, module)
        return builder.call(intrinsic(module, "exp"), [arg], name="exptmp")

    raise NotImplementedError(f"Unknown Expr node type: {type(expr)}")


# ---------------------------------------------------------------------------
# Function + module construction
# ---------------------------------------------------------------------------

def add_function(module: ir.Module, name: str, body: Expr, arg_names: Sequence[str]) -> ir.Function:
    """Append `double name(double, ...)` computing `body` to module."""
    double = ir.DoubleType()
    fn_ty = ir.FunctionType(double, [double for _ in arg_names])
    fn = ir.Function(module, fn_ty, name=name)

    env: Dict[str, ir.Value] = {}
    for arg, arg_name in zip(fn.args, arg_names):
        arg.name = arg_name
        env[arg_name] = arg

    block = fn.append_basic_block(name="entry")
    builder = ir.IRBuilder(block)
    builder.ret(codegen_expr(body, builder, env, module))
    return fn


def build_module_for_formula(
    expr: Expr,
    variable: str,
    module_name: str = "symderiv_module",
) -> ir.Module:
    """
    Build a module holding f (expr itself) and df (its derivative).

    Both take (variable, *sorted parameters) as doubles.
    """
    module = ir.Module(name=module_name)
    arg_names = [variable] + parameters(expr)
    add_function(module, "f", expr, arg_names)
    add_function(module, "df", derive(expr, variable), arg_names)
    return module


# ---------------------------------------------------------------------------
# JIT compilation
# ---------------------------------------------------------------------------

_native_ready = False


def init_native() -> None:
    global _native_ready
    if _native_ready:
        return
    llvm.initialize_native_target()
    llvm.initialize_native_asmprinter()
    # make pow/log/exp resolvable when the intrinsics lower to libm calls
    libm = ctypes.util.find_library("m")
    if libm:
        llvm.load_library_permanently(libm)
    _native_ready = True


@dataclass
class CompiledFormula:
    """JIT-compiled f/df pair; keeps the execution engine alive."""
    arg_names: List[str]
    engine: object
    functions: Dict[str, Callable[..., float]] = field(default_factory=dict)

    def __call__(self, name: str, *args: float) -> float:
        return self.functions[name](*args)


def jit_compile(module: ir.Module, arg_names: Sequence[str],
                names: Sequence[str] = ("f", "df")) -> CompiledFormula:
    init_native()
    target = llvm.Target.from_default_triple()
    target_machine = target.create_target_machine()

    llmod = llvm.parse_assembly(str(module))
    llmod.triple = llvm.get_process_triple()
    llmod.data_layout = str(target_machine.target_data)
    llmod.verify()

    engine = llvm.create_mcjit_compiler(llmod, target_machine)
    engine.finalize_object()
    engine.run_static_constructors()

    cfunc_ty = ctypes.CFUNCTYPE(ctypes.c_double, *([ctypes.c_double] * len(arg_names)))
    compiled = CompiledFormula(arg_names=list(arg_names), engine=engine)
    for name in names:
        addr = engine.get_function_address(name)
        compiled.functions[name] = cfunc_ty(addr)
    return compiled


def compile_formula(src: str, variable: str = "x") -> CompiledFormula:
    """Parse, differentiate and JIT-compile `src` in one go."""
    expr = parse_formula(src, variable)
    module = build_module_for_formula(expr, variable)
    return jit_compile(module, [variable] + parameters(expr))


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(
        description="Generate LLVM IR (.ll) for a formula and its derivative."
    )
    p.add_argument(
        "formula",
        help='Formula, e.g. "x^2 - a*ln(x)"',
    )
    p.add_argument(
        "--var",
        dest="variable",
        default="x",
        help="Differentiation variable (default: x).",
    )
    p.add_argument(
        "--out",
        "-o",
        required=True,
        help="Output .ll file path.",
    )
    p.add_argument(
        "--module-name",
        default="symderiv_module",
        help="Optional LLVM module name.",
    )
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)

    expr = parse_formula(args.formula.strip(), args.variable)
    module = build_module_for_formula(expr, args.variable, module_name=args.module_name)

    with open(args.out, "w", encoding="utf-8") as f:
        f.write(str(module))
    print(f"[INFO] Wrote LLVM IR for f and df to {args.out}")


if __name__ == "__main__":
    main()
