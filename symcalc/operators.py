"""
Built-in operator evaluators for symcalc.

    MULTIPLY  x*y    precedence 300
    ADD       x+y    precedence 200
    POWER     x^y    precedence 400
    DEFINE    x=y    precedence 100  (one per Registry)

plus the SubstitutionEvaluator attached to symbols of defined variables.

The parser has no subtraction or division nodes: x-y arrives as
ADD(x, MULTIPLY(-1, y)) and x/y as MULTIPLY(x, POWER(y, -1)).
"""

import logging
from typing import Optional, Sequence, Tuple

from .errors import DefinitionError
from .evaluator import Evaluator, NaryEvaluator, NO_SIMPLIFICATION, promote
from .expr import (
    Expr, Integer, Double, Fraction, Symbol, Function,
    PREC_ADD, PREC_DEFINE, PREC_MULTIPLY, PREC_POWER,
    ZERO, ONE, TWO, NEG_ONE,
    has_head, is_negative, is_one, is_zero, rational, to_float,
)

logger = logging.getLogger(__name__)

# Exact powers whose result would need more bits are left unreduced
MAX_EXACT_BITS = 10000


def _too_large(base: int, power: int) -> bool:
    """Check if base**power would need more than MAX_EXACT_BITS bits."""
    if abs(base) <= 1:
        return False
    return abs(power) * abs(base).bit_length() > MAX_EXACT_BITS


def _power_parts(expr: Expr) -> Tuple[Expr, Expr]:
    """Split x^n into (x, n); anything else is (expr, 1)."""
    if has_head(expr, POWER.name) and len(expr.params) == 2:
        return expr.params[0], expr.params[1]
    return expr, ONE


def _is_reciprocal(expr: Expr) -> bool:
    return has_head(expr, POWER.name) and len(expr.params) == 2 and expr.params[1] == NEG_ONE


def _reads_as_fraction(params: Sequence[Expr], index: int) -> bool:
    """True if n/d at params[index] would parse back as a Fraction literal."""
    following = params[index + 1] if index + 1 < len(params) else None
    return (isinstance(params[index - 1], Integer)
            and isinstance(params[index].params[0], Integer)
            and not (following is not None and _is_reciprocal(following)))


def _split_coefficient(expr: Expr) -> Optional[Tuple[Expr, Expr]]:
    """
    Split a term into (numeric coefficient, rest).

        MULTIPLY(3, x, y) -> (3, MULTIPLY(x, y))
        x                 -> (1, x)
        5                 -> None
    """
    if expr.is_number():
        return None
    if has_head(expr, MULTIPLY.name) and len(expr.params) >= 2 and expr.params[0].is_number():
        rest = expr.params[1:]
        if len(rest) == 1:
            return expr.params[0], rest[0]
        return expr.params[0], MULTIPLY.create(*rest)
    return ONE, expr


class MultiplyEvaluator(NaryEvaluator):
    """
    Multiplication.

    Rules, in order:
        0*x = 0             x*1 = x, 1*x = x
        2*(1/3) = 2/3       mixed literals are promoted to a common kind
        x*x = x^2
        x^a*x^b = x^(a+b)   also x*x^b and x^a*x
        2*x*x = 2*x^2       regrouping into a running product

    A numeric coefficient is moved to the front of the product.
    """

    name = "MULTIPLY"
    operator = "*"
    precedence = PREC_MULTIPLY
    identity = ONE
    associative = True

    def reduce(self, args: Sequence[Expr]) -> Expr:
        result = super().reduce(args)
        # Numeric coefficient first: x*2 -> 2*x
        if self.owns(result) and not result.params[0].is_number():
            numbers = [param for param in result.params if param.is_number()]
            if numbers:
                others = [param for param in result.params if not param.is_number()]
                return self.create(*numbers, *others)
        return result

    def combine_integers(self, left: Integer, right: Integer) -> Expr:
        return Integer(left.value * right.value)

    def combine_doubles(self, left: Double, right: Double) -> Expr:
        return Double(left.value * right.value)

    def combine_fractions(self, left: Fraction, right: Fraction) -> Expr:
        return rational(left.numerator * right.numerator,
                        left.denominator * right.denominator)

    def combine_objects(self, left: Expr, right: Expr) -> Expr:
        if is_zero(left) or is_zero(right):
            return ZERO
        if is_one(left):
            return right
        if is_one(right):
            return left
        if left.is_number() and right.is_number():
            return self.combine(*promote(left, right))
        if left == right:
            return POWER.reduce([left, TWO])

        base, exponent = _power_parts(left)
        other_base, other_exponent = _power_parts(right)
        if base == other_base and (exponent is not ONE or other_exponent is not ONE):
            return POWER.reduce([base, ADD.reduce([exponent, other_exponent])])
        return NO_SIMPLIFICATION

    def render_infix(self, function: Function) -> str:
        # -1 leading a product prints as a unary minus, and x^(-1) after
        # another factor prints as /x
        params = function.params
        text = ""
        for index, param in enumerate(params):
            if index == 0 and param == NEG_ONE and not params[1].is_number():
                text = "-"
                continue
            if index == 0 and isinstance(param, (Integer, Fraction)) and is_negative(param):
                text = param.render()
                continue
            has_factor = text not in ("", "-")
            if has_factor and _is_reciprocal(param) and not _reads_as_fraction(params, index):
                text += "/" + self.render_operand(param.params[0], strict=True)
                continue
            if has_factor:
                text += self.operator
            text += self.render_operand(param)
        return text


class AddEvaluator(NaryEvaluator):
    """
    Addition. Subtraction arrives as addition of a negated term.

    Rules, in order:
        x+0 = x, 0+x = x
        1+0.5 = 1.5         mixed literals are promoted to a common kind
        x+x = 2*x
        2*x+3*x = 5*x       like terms merge their coefficients, x-x = 0
    """

    name = "ADD"
    operator = "+"
    precedence = PREC_ADD
    identity = ZERO
    associative = True

    def combine_integers(self, left: Integer, right: Integer) -> Expr:
        return Integer(left.value + right.value)

    def combine_doubles(self, left: Double, right: Double) -> Expr:
        return Double(left.value + right.value)

    def combine_fractions(self, left: Fraction, right: Fraction) -> Expr:
        return rational(left.numerator * right.denominator + right.numerator * left.denominator,
                        left.denominator * right.denominator)

    def combine_objects(self, left: Expr, right: Expr) -> Expr:
        if is_zero(left):
            return right
        if is_zero(right):
            return left
        if left.is_number() and right.is_number():
            return self.combine(*promote(left, right))
        if left == right:
            return MULTIPLY.reduce([TWO, left])

        left_term = _split_coefficient(left)
        right_term = _split_coefficient(right)
        if left_term and right_term and left_term[1] == right_term[1]:
            coefficient = self.reduce([left_term[0], right_term[0]])
            return MULTIPLY.reduce([coefficient, left_term[1]])
        return NO_SIMPLIFICATION

    def render_infix(self, function: Function) -> str:
        text = ""
        for index, param in enumerate(function.params):
            term = self.render_operand(param)
            if index > 0 and not term.startswith("-"):
                text += self.operator
            text += term
        return text


class PowerEvaluator(NaryEvaluator):
    """
    Exponentiation, folded left to right like the parser reads x^2^3.

    Rules:
        2^10 = 1024, 2^-2 = 1/4, (2/3)^2 = 4/9     exact where possible
        x^0 = 1, x^1 = x, 1^x = 1, 0^n = 0 for n > 0
        (x^a)^n = x^(a*n) for an integer n

    2^(1/2) and (-8.0)^(1/3.0) stay unreduced; symcalc has no radicals or
    complex numbers.
    """

    name = "POWER"
    operator = "^"
    precedence = PREC_POWER

    def combine_integers(self, base: Integer, exponent: Integer) -> Expr:
        power = exponent.value
        if base.value == 0 and power < 0:
            return NO_SIMPLIFICATION
        if _too_large(base.value, power):
            return NO_SIMPLIFICATION
        if power >= 0:
            return Integer(base.value ** power)
        return rational(1, base.value ** -power)

    def combine_doubles(self, base: Double, exponent: Double) -> Expr:
        try:
            value = base.value ** exponent.value
        except (OverflowError, ZeroDivisionError) as e:
            logger.debug("POWER: %s^%s left unreduced: %s", base, exponent, e)
            return NO_SIMPLIFICATION
        if isinstance(value, complex):
            return NO_SIMPLIFICATION
        return Double(value)

    def combine_fractions(self, base: Fraction, exponent: Fraction) -> Expr:
        if exponent.denominator != 1:
            return NO_SIMPLIFICATION
        power = exponent.numerator
        if base.numerator == 0 and power < 0:
            return NO_SIMPLIFICATION
        if _too_large(base.numerator, power) or _too_large(base.denominator, power):
            return NO_SIMPLIFICATION
        if power >= 0:
            return rational(base.numerator ** power, base.denominator ** power)
        return rational(base.denominator ** -power, base.numerator ** -power)

    def combine_objects(self, base: Expr, exponent: Expr) -> Expr:
        if is_zero(exponent):
            return ONE
        if is_one(exponent):
            return base
        if is_one(base):
            return ONE
        if base.is_number() and exponent.is_number():
            if is_zero(base) and to_float(exponent) > 0:
                return ZERO
            return self.combine(*promote(base, exponent))
        if has_head(base, self.name) and len(base.params) == 2 and isinstance(exponent, Integer):
            inner_base, inner_exponent = base.params
            return self.reduce([inner_base, MULTIPLY.reduce([inner_exponent, exponent])])
        return NO_SIMPLIFICATION

    def render_infix(self, function: Function) -> str:
        # x^y^z reads back as POWER(POWER(x,y),z)
        if len(function.params) > 2:
            return self.render_call(function)
        base, exponent = function.params
        return self.render_operand(base) + self.operator + self.render_operand(exponent, strict=True)


class DefineEvaluator(Evaluator):
    """
    Variable definition, x = expression.

    Evaluating DEFINE(x, value) evaluates value, binds it to x in the
    registry and returns it. The target itself is never evaluated, so a
    variable can be redefined.
    """

    name = "DEFINE"
    operator = "="
    precedence = PREC_DEFINE

    def __init__(self, registry):
        super().__init__()
        self.registry = registry

    def evaluate(self, function: Function) -> Expr:
        if len(function.params) != 2:
            raise DefinitionError(
                f"DEFINE expects 2 parameters, got {len(function.params)}")
        target, value = function.params
        if not isinstance(target, Symbol):
            raise DefinitionError(f"Cannot assign to {target}")
        value = value.evaluate()
        self.registry.define(target.name, value)
        return value


class SubstitutionEvaluator(Evaluator):
    """Replaces the symbol of a defined variable with its bound value."""

    def __init__(self, registry, name: str):
        self.name = name
        super().__init__()
        self.registry = registry

    def evaluate_symbol(self, symbol: Symbol) -> Expr:
        value = self.registry.value_of(symbol.name)
        if value is None:
            # Undefined since it was parsed
            return Symbol(symbol.name)
        return value


# Built-in operator singletons
MULTIPLY = MultiplyEvaluator()
ADD = AddEvaluator()
POWER = PowerEvaluator()
