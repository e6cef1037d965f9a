#!/usr/bin/env python3
"""
Exact rational arithmetic for symderiv literal coefficients.

Every Constant node in an expression tree carries an ExactFraction, so
coefficients like 3/7 survive parsing, differentiation and rendering without
any floating-point rounding.

Invariants kept by construction:

    denominator > 0
    gcd(|numerator|, denominator) == 1
    numerator == 0  =>  denominator == 1
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from math import gcd
from typing import Union


IntOrFraction = Union[int, "ExactFraction"]


@total_ordering
@dataclass(frozen=True, init=False)
class ExactFraction:
    numerator: int
    denominator: int

    def __init__(self, numerator: int = 0, denominator: int = 1):
        if denominator == 0:
            raise ZeroDivisionError(
                f"Fraction with zero denominator: {numerator}/{denominator}"
            )
        if denominator < 0:
            numerator, denominator = -numerator, -denominator
        if numerator == 0:
            denominator = 1
        else:
            # math.gcd works on absolute values and gcd(0, n) == n
            g = gcd(numerator, denominator)
            numerator //= g
            denominator //= g
        object.__setattr__(self, "numerator", numerator)
        object.__setattr__(self, "denominator", denominator)

    @classmethod
    def from_string(cls, text: str) -> "ExactFraction":
        """Build a fraction from "N" or "N/D" (digits only, optional leading '-')."""
        num, sep, den = text.partition("/")
        if sep:
            return cls(int(num), int(den))
        return cls(int(num))

    # -----------------------------------------------------------------------
    # Arithmetic (cross-multiplication, renormalized by the constructor)
    # -----------------------------------------------------------------------

    def __add__(self, other: IntOrFraction) -> "ExactFraction":
        other = _coerce(other)
        return ExactFraction(
            self.numerator * other.denominator + self.denominator * other.numerator,
            self.denominator * other.denominator,
        )

    def __sub__(self, other: IntOrFraction) -> "ExactFraction":
        other = _coerce(other)
        return ExactFraction(
            self.numerator * other.denominator - self.denominator * other.numerator,
            self.denominator * other.denominator,
        )

    def __neg__(self) -> "ExactFraction":
        return ExactFraction(-self.numerator, self.denominator)

    def __mul__(self, other: IntOrFraction) -> "ExactFraction":
        other = _coerce(other)
        return ExactFraction(
            self.numerator * other.numerator,
            self.denominator * other.denominator,
        )

    def __truediv__(self, other: IntOrFraction) -> "ExactFraction":
        other = _coerce(other)
        if other.numerator == 0:
            raise ZeroDivisionError(f"Division of {self} by zero fraction")
        return ExactFraction(
            self.numerator * other.denominator,
            self.denominator * other.numerator,
        )

    __radd__ = __add__
    __rmul__ = __mul__

    def __rsub__(self, other: IntOrFraction) -> "ExactFraction":
        return _coerce(other) - self

    def __rtruediv__(self, other: IntOrFraction) -> "ExactFraction":
        return _coerce(other) / self

    # -----------------------------------------------------------------------
    # Comparison
    # -----------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if isinstance(other, int):
            other = ExactFraction(other)
        if not isinstance(other, ExactFraction):
            return NotImplemented
        return (self.numerator == other.numerator
                and self.denominator == other.denominator)

    def __lt__(self, other: IntOrFraction) -> bool:
        other = _coerce(other)
        # denominators are positive, so cross-multiplying keeps the order
        return self.numerator * other.denominator < other.numerator * self.denominator

    def __hash__(self) -> int:
        return hash((self.numerator, self.denominator))

    # -----------------------------------------------------------------------
    # Inspection / display
    # -----------------------------------------------------------------------

    def is_integer(self) -> bool:
        return self.denominator == 1

    def __float__(self) -> float:
        return self.numerator / self.denominator

    def __str__(self) -> str:
        if self.denominator == 1:
            return str(self.numerator)
        return f"{self.numerator}/{self.denominator}"

    def __repr__(self) -> str:
        return f"ExactFraction({self.numerator}, {self.denominator})"


def _coerce(value: IntOrFraction) -> ExactFraction:
    if isinstance(value, ExactFraction):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return ExactFraction(value)
    raise TypeError(f"Cannot use {type(value).__name__} as an exact fraction")
