"""
Expression tree for symcalc.

Every value the parser produces and every evaluator returns is one of five
node types:

    Integer(7)              - arbitrary precision integer
    Double(2.5)             - floating point number
    Fraction(1, 3)          - exact rational, always in lowest terms
    Symbol("x")             - free variable, operator name or defined variable
    Function(head, params)  - head(params...), head is a Symbol with an evaluator

Nodes are frozen after construction. Simplification builds new nodes, so a
sub-tree can be shared between any number of larger expressions.
"""

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Tuple, Union

# Display precedence, only consulted when rendering back to text
PREC_DEFINE = 100
PREC_ADD = 200
PREC_MULTIPLY = 300
PREC_POWER = 400
PREC_ATOM = 1000


class Expr:
    """Base class for expression nodes."""

    @property
    def precedence(self) -> int:
        return PREC_ATOM

    def is_number(self) -> bool:
        """True for the literal kinds Integer, Double and Fraction."""
        return False

    def evaluate(self) -> "Expr":
        """Reduce this node. Literals are already fully reduced."""
        return self

    def render(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class Integer(Expr):
    value: int

    @property
    def precedence(self) -> int:
        return PREC_ADD if self.value < 0 else PREC_ATOM

    def is_number(self) -> bool:
        return True

    def render(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Double(Expr):
    value: float

    @property
    def precedence(self) -> int:
        return PREC_ADD if self.value < 0 else PREC_ATOM

    def is_number(self) -> bool:
        return True

    def render(self) -> str:
        return format_double(self.value)


@dataclass(frozen=True)
class Fraction(Expr):
    """
    Exact rational number.

    Construction reduces to lowest terms and moves the sign onto the
    numerator:

        Fraction(2, 4)   -> Fraction(numerator=1, denominator=2)
        Fraction(3, -6)  -> Fraction(numerator=-1, denominator=2)
    """

    numerator: int
    denominator: int = 1

    def __post_init__(self):
        if self.denominator == 0:
            raise ZeroDivisionError(f"Fraction({self.numerator}, 0)")
        divisor = math.gcd(self.numerator, self.denominator)
        if self.denominator < 0:
            divisor = -divisor
        object.__setattr__(self, "numerator", self.numerator // divisor)
        object.__setattr__(self, "denominator", self.denominator // divisor)

    @property
    def precedence(self) -> int:
        # n/d reads like a product
        return PREC_ADD if self.numerator < 0 else PREC_MULTIPLY

    def is_number(self) -> bool:
        return True

    def render(self) -> str:
        return f"{self.numerator}/{self.denominator}"


@dataclass(frozen=True)
class Symbol(Expr):
    """
    A named symbol.

    A symbol without an evaluator is a free variable. With an evaluator it is
    either a built-in operator head (ADD, MULTIPLY, ...) or a defined
    variable whose evaluator substitutes the bound value. Equality only looks
    at the name.
    """

    name: str
    evaluator: Optional[Any] = field(default=None, compare=False, repr=False)

    def evaluate(self) -> Expr:
        if self.evaluator is None:
            return self
        return self.evaluator.evaluate_symbol(self)

    def render(self) -> str:
        return self.name


@dataclass(frozen=True)
class Function(Expr):
    """Application of an operator symbol to an ordered tuple of parameters."""

    head: Symbol
    params: Tuple[Expr, ...] = ()

    def __post_init__(self):
        if not isinstance(self.head, Symbol) or self.head.evaluator is None:
            raise TypeError(f"Function head {self.head!r} has no evaluator")
        object.__setattr__(self, "params", tuple(self.params))

    @property
    def evaluator(self):
        return self.head.evaluator

    @property
    def precedence(self) -> int:
        return self.head.evaluator.precedence

    def evaluate(self) -> Expr:
        return self.head.evaluator.evaluate(self)

    def render(self) -> str:
        return self.head.evaluator.render(self)


Number = Union[Integer, Double, Fraction]

ZERO = Integer(0)
ONE = Integer(1)
TWO = Integer(2)
NEG_ONE = Integer(-1)


def format_double(value: float) -> str:
    """Render a float without exponent notation so it parses back."""
    text = repr(value)
    if "e" in text:
        text = format(Decimal(text), "f")
        if "." not in text:
            text += ".0"
    return text


def has_head(expr: Expr, name: str) -> bool:
    """Check if expr is a Function whose head is named name."""
    return isinstance(expr, Function) and expr.head.name == name


def rational(numerator: int, denominator: int = 1) -> Union[Integer, Fraction]:
    """Exact value numerator/denominator, as an Integer when it is whole."""
    value = Fraction(numerator, denominator)
    if value.denominator == 1:
        return Integer(value.numerator)
    return value


def as_fraction(expr: Union[Integer, Fraction]) -> Fraction:
    if isinstance(expr, Fraction):
        return expr
    return Fraction(expr.value, 1)


def to_float(expr: Number) -> float:
    if isinstance(expr, Fraction):
        return expr.numerator / expr.denominator
    return float(expr.value)


def is_zero(expr: Expr) -> bool:
    """Exact zero. A Double 0.0 does not count."""
    if isinstance(expr, Integer):
        return expr.value == 0
    if isinstance(expr, Fraction):
        return expr.numerator == 0
    return False


def is_one(expr: Expr) -> bool:
    """Exact one. A Double 1.0 does not count."""
    if isinstance(expr, Integer):
        return expr.value == 1
    if isinstance(expr, Fraction):
        return expr.numerator == 1 and expr.denominator == 1
    return False


def is_negative(expr: Expr) -> bool:
    """Check if expr is a number literal below zero."""
    if isinstance(expr, Fraction):
        return expr.numerator < 0
    if isinstance(expr, (Integer, Double)):
        return expr.value < 0
    return False
