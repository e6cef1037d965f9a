#!/usr/bin/env python3
"""
Core expression tree + lexer + parser for symderiv.

We parse single-variable formulas such as:

    x^2 - 2^x
    a/x + 3/7*x
    ln(x)*exp(-x)

into an immutable tree of ten node kinds:

    Constant, Variable, Parameter,
    Add, Sub, Mul, Div, Pow,
    Ln, Exp

Grammar (informal, lowest to highest precedence):

    expr    -> term (('+' | '-') term)*
    term    -> power (('*' | '/') power)*
    power   -> unary ('^' unary)*              # left-associative: a^b^c == (a^b)^c
    unary   -> '-' unary                       # desugars to Mul(Constant(-1), unary)
             | NUMBER                          # 12 or 12/5 (no spaces inside)
             | 'ln' '(' expr ')'  |  '\\ln' '(' expr ')'
             | 'exp' '(' expr ')'
             | WORD                            # Variable if it is the variable name,
                                               # Parameter otherwise
             | '(' expr ')'

Whitespace between tokens is skipped.  Nodes never share children; use
clone() when a subtree has to appear in two places.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Iterator, List, Optional

from symderiv_fraction import ExactFraction

# ---------------------------------------------------------------------------
# Expression tree
# ---------------------------------------------------------------------------

class Expr:
    """Base class for expressions."""
    pass


@dataclass(frozen=True)
class Constant(Expr):
    value: ExactFraction

    def __post_init__(self):
        if isinstance(self.value, int):
            object.__setattr__(self, "value", ExactFraction(self.value))


@dataclass(frozen=True)
class Variable(Expr):
    name: str


@dataclass(frozen=True)
class Parameter(Expr):
    name: str


@dataclass(frozen=True)
class Add(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Sub(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Mul(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Div(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Pow(Expr):
    base: Expr
    exponent: Expr


@dataclass(frozen=True)
class Ln(Expr):
    argument: Expr


@dataclass(frozen=True)
class Exp(Expr):
    argument: Expr


def clone(expr: Expr) -> Expr:
    """Return a fresh deep copy of expr (ExactFraction values are immutable and reused)."""
    attrs = {}
    for f in fields(expr):
        a = getattr(expr, f.name)
        attrs[f.name] = clone(a) if isinstance(a, Expr) else a
    return type(expr)(**attrs)


def children(expr: Expr) -> Iterator[Expr]:
    for f in fields(expr):
        a = getattr(expr, f.name)
        if isinstance(a, Expr):
            yield a


def iter_nodes(expr: Expr) -> Iterator[Expr]:
    """Pre-order walk over every node of the tree."""
    yield expr
    for child in children(expr):
        yield from iter_nodes(child)


def parameters(expr: Expr) -> List[str]:
    """Sorted names of all Parameter nodes in expr."""
    return sorted({n.name for n in iter_nodes(expr) if isinstance(n, Parameter)})


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

class LexError(SyntaxError):
    """Unrecognized character or malformed number/identifier in a formula."""
    pass


SYMBOL_KINDS = {
    "+": "ADD",
    "-": "SUB",
    "*": "MUL",
    "/": "DIV",
    "^": "POW",
    "(": "LPAR",
    ")": "RPAR",
}

# Backslash commands accepted by the lexer; everything else is a LexError.
COMMANDS = ("ln",)


# ASCII only: str.isdigit() also accepts superscript digits that int() rejects.
def is_digit(c: str) -> bool:
    return "0" <= c <= "9"


@dataclass
class Token:
    kind: str   # NUMBER, WORD, ADD, SUB, MUL, DIV, POW, LPAR, RPAR, EOF, ERROR
    value: str
    pos: int = 0

    def __repr__(self) -> str:
        return f"Token({self.kind!r}, {self.value!r})"


def tokenize_formula(src: str) -> List[Token]:
    """
    Turn a formula into a flat list of tokens, terminated by EOF.

    - Words: maximal runs of letters, optionally prefixed by '\\' (e.g. \\ln)
    - Numbers: digits, optionally followed immediately by '/' and digits (3/7)
    - Symbols: + - * / ^ ( )
    - Any other non-space character becomes an ERROR token; scanning goes on
      so callers can report every bad character at once.
    """
    tokens: List[Token] = []
    i = 0
    n = len(src)

    while i < n:
        c = src[i]

        if c.isspace():
            i += 1
            continue

        if c.isalpha() or (c == "\\" and i + 1 < n and src[i + 1].isalpha()):
            j = i + 1
            while j < n and src[j].isalpha():
                j += 1
            tokens.append(Token("WORD", src[i:j], i))
            i = j
            continue

        if is_digit(c):
            j = i + 1
            while j < n and is_digit(src[j]):
                j += 1
            # fraction literal: the '/' must be followed by a digit right away
            if j + 1 < n and src[j] == "/" and is_digit(src[j + 1]):
                j += 2
                while j < n and is_digit(src[j]):
                    j += 1
            tokens.append(Token("NUMBER", src[i:j], i))
            i = j
            continue

        if c in SYMBOL_KINDS:
            tokens.append(Token(SYMBOL_KINDS[c], c, i))
            i += 1
            continue

        tokens.append(Token("ERROR", c, i))
        i += 1

    tokens.append(Token("EOF", "", n))
    return tokens


def check_tokens(tokens: List[Token]) -> None:
    """Raise LexError for the first ERROR token or unknown backslash command."""
    for tok in tokens:
        if tok.kind == "ERROR":
            raise LexError(f"Unexpected character {tok.value!r} at offset {tok.pos}")
        if tok.kind == "WORD" and tok.value.startswith("\\") and tok.value[1:] not in COMMANDS:
            raise LexError(f"Unknown command {tok.value!r} at offset {tok.pos}")


# ---------------------------------------------------------------------------
# Recursive-descent parser
# ---------------------------------------------------------------------------

FUNCTIONS = {
    "ln": Ln,
    "\\ln": Ln,
    "exp": Exp,
}


class Parser:
    def __init__(self, tokens: List[Token], variable: str):
        self.tokens = tokens
        self.variable = variable
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def consume(self, expected_kind: Optional[str] = None) -> Token:
        tok = self.current
        if expected_kind is not None and tok.kind != expected_kind:
            raise SyntaxError(
                f"Expected {expected_kind}, got {describe(tok)} at offset {tok.pos}"
            )
        self.pos += 1
        return tok

    def match(self, *kinds: str) -> bool:
        return self.current.kind in kinds

    # expr    -> term (('+' | '-') term)*
    def parse_expr(self) -> Expr:
        node = self.parse_term()
        while self.match("ADD", "SUB"):
            op = self.consume().kind
            right = self.parse_term()
            node = Add(node, right) if op == "ADD" else Sub(node, right)
        return node

    # term    -> power (('*' | '/') power)*
    def parse_term(self) -> Expr:
        node = self.parse_power()
        while self.match("MUL", "DIV"):
            op = self.consume().kind
            right = self.parse_power()
            node = Mul(node, right) if op == "MUL" else Div(node, right)
        return node

    # power   -> unary ('^' unary)*   # left-associative on purpose
    def parse_power(self) -> Expr:
        node = self.parse_unary()
        while self.match("POW"):
            self.consume("POW")
            node = Pow(node, self.parse_unary())
        return node

    # unary   -> '-' unary | NUMBER | WORD | function | '(' expr ')'
    def parse_unary(self) -> Expr:
        tok = self.current

        if tok.kind == "SUB":
            self.consume("SUB")
            return Mul(Constant(-1), self.parse_unary())

        if tok.kind == "NUMBER":
            self.consume("NUMBER")
            return Constant(ExactFraction.from_string(tok.value))

        if tok.kind == "WORD":
            return self.parse_word()

        if tok.kind == "LPAR":
            return self.parse_group()

        if tok.kind == "EOF":
            raise SyntaxError(f"Unexpected end of formula at offset {tok.pos}")
        raise SyntaxError(f"Unexpected {describe(tok)} at offset {tok.pos}")

    def parse_word(self) -> Expr:
        tok = self.consume("WORD")
        name = tok.value

        if name == self.variable:
            return Variable(name)

        if name in FUNCTIONS and self.match("LPAR"):
            return FUNCTIONS[name](self.parse_group())
        if name.startswith("\\"):
            raise SyntaxError(f"Expected '(' after {name} at offset {self.current.pos}")

        return Parameter(name)

    def parse_group(self) -> Expr:
        opening = self.consume("LPAR")
        node = self.parse_expr()
        if not self.match("RPAR"):
            raise SyntaxError(
                f"Missing ')' for '(' at offset {opening.pos}, got {describe(self.current)}"
            )
        self.consume("RPAR")
        return node


def describe(tok: Token) -> str:
    if tok.kind == "EOF":
        return "end of formula"
    return f"{tok.kind} {tok.value!r}"


# ---------------------------------------------------------------------------
# Top-level: parse a formula for a given differentiation variable
# ---------------------------------------------------------------------------

def parse_formula(src: str, variable: str = "x") -> Expr:
    """
    Parse formula text into an Expr.

    Words equal to `variable` become Variable nodes; every other word is a
    Parameter.  Raises LexError / SyntaxError for malformed input and
    ZeroDivisionError for literals like 1/0.
    """
    if not variable or not variable.isalpha():
        raise ValueError(f"Variable name must be alphabetic, got {variable!r}")

    tokens = tokenize_formula(src)
    check_tokens(tokens)
    parser = Parser(tokens, variable)
    expr = parser.parse_expr()
    if not parser.match("EOF"):
        tok = parser.current
        raise SyntaxError(f"Unexpected {describe(tok)} at offset {tok.pos} after expression")
    return expr

