"""
Evaluator dispatch framework for symcalc.

Every operator symbol owns an evaluator. Evaluating a Function node
evaluates its parameters and hands them to the head's evaluator:

    evaluator.reduce([a, b, c, d])

NaryEvaluator.reduce() is a left fold of a pairwise step:

    combine(a, b)            -> ab       (simplified)
    combine(ab, c)           -> NO_SIMPLIFICATION, keep OP(ab, c)
    combine(OP(ab, c), d)    -> ...

The pairwise step dispatches on the kinds of its two operands, first match
wins:

    1. Same literal kind (Integer/Integer, Double/Double, Fraction/Fraction)
       -> combine_integers / combine_doubles / combine_fractions
    2. Anything else -> combine_objects, the operator's structural rules;
       associative operators then try to regroup the right operand into a
       running result that is already headed by the same operator
    3. NO_SIMPLIFICATION -> the pair is kept as an unreduced node

Reduction never mutates its inputs; it builds new nodes or returns existing
sub-nodes unchanged.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .expr import (
    Expr, Integer, Double, Fraction, Symbol, Function, Number,
    PREC_ATOM, as_fraction, has_head, to_float,
)

logger = logging.getLogger(__name__)


class _NoSimplification:
    """
    Singleton returned by a pairwise step that found no applicable rule.

    It is falsy, but compare with `is`: a simplified result may itself be a
    falsy-looking value such as Integer(0).
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_SIMPLIFICATION"


# Singleton instance
NO_SIMPLIFICATION = _NoSimplification()


def promote(left: Number, right: Number) -> Tuple[Number, Number]:
    """
    Coerce two number literals of different kinds to a common kind.

    Any Double makes both Doubles; otherwise both become Fractions.

    Examples:
        promote(Integer(2), Fraction(1, 3)) -> (Fraction(2, 1), Fraction(1, 3))
        promote(Integer(2), Double(0.5))    -> (Double(2.0), Double(0.5))
    """
    if isinstance(left, Double) or isinstance(right, Double):
        return Double(to_float(left)), Double(to_float(right))
    return as_fraction(left), as_fraction(right)


class Evaluator:
    """
    Simplification logic bound to an operator symbol.

    Subclasses set `name` (upper case for built-in operators), `precedence`
    and, for infix operators, `operator`. The base evaluator leaves its
    function unreduced and renders it in functional form, NAME(a,b).
    """

    name: str = ""
    precedence: int = PREC_ATOM
    operator: Optional[str] = None

    def __init__(self):
        self.symbol = Symbol(self.name, self)

    def create(self, *params: Expr) -> Function:
        """Build an unevaluated node headed by this evaluator's symbol."""
        return Function(self.symbol, params)

    def evaluate(self, function: Function) -> Expr:
        """Evaluate the parameters, then reduce them."""
        args = [param.evaluate() for param in function.params]
        return self.reduce(args)

    def reduce(self, args: Sequence[Expr]) -> Expr:
        return self.create(*args)

    def evaluate_symbol(self, symbol: Symbol) -> Expr:
        """Value of a bare symbol carrying this evaluator."""
        return symbol

    def render(self, function: Function) -> str:
        if self.operator is None or len(function.params) < 2:
            return self.render_call(function)
        return self.render_infix(function)

    def render_call(self, function: Function) -> str:
        args = ",".join(param.render() for param in function.params)
        return f"{self.name}({args})"

    def render_infix(self, function: Function) -> str:
        return self.operator.join(self.render_operand(param) for param in function.params)

    def render_operand(self, operand: Expr, strict: bool = False) -> str:
        """
        Render an operand, parenthesized if it binds more loosely.

        With strict=True an operand of equal precedence is parenthesized as
        well (right operands of a left-associative operator).
        """
        text = operand.render()
        if operand.precedence < self.precedence:
            return f"({text})"
        if strict and operand.precedence == self.precedence:
            return f"({text})"
        return text

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class NaryEvaluator(Evaluator):
    """
    Evaluator that folds a pairwise step over its argument list.

    Subclasses fill in the specialization points:
        combine_integers(a, b)   - both Integer
        combine_doubles(a, b)    - both Double
        combine_fractions(a, b)  - both Fraction
        combine_objects(a, b)    - every other pairing

    Each returns the simplified node or NO_SIMPLIFICATION.

    Class attributes:
        identity:    value of the empty application, e.g. ADD() = 0
        associative: flatten nested applications and regroup operands into
                     an existing application of the same operator
    """

    identity: Optional[Expr] = None
    associative: bool = False

    def __init__(self):
        super().__init__()
        self._pair_handlers: Dict[Tuple[type, type], Callable[[Expr, Expr], Expr]] = {
            (Integer, Integer): self.combine_integers,
            (Double, Double): self.combine_doubles,
            (Fraction, Fraction): self.combine_fractions,
        }

    def reduce(self, args: Sequence[Expr]) -> Expr:
        args = list(args)
        if self.associative:
            args = self.flatten(args)
        if not args:
            return self.identity if self.identity is not None else self.create()

        result = args[0]
        for operand in args[1:]:
            combined = self.combine(result, operand)
            if combined is NO_SIMPLIFICATION:
                combined = self.join(result, operand)
            else:
                logger.debug("%s: %s, %s -> %s", self.name, result, operand, combined)
            result = combined
        return result

    def combine(self, left: Expr, right: Expr) -> Expr:
        """The pairwise reduction step."""
        handler = self._pair_handlers.get((type(left), type(right)))
        if handler is not None:
            return handler(left, right)

        combined = self.combine_objects(left, right)
        if combined is NO_SIMPLIFICATION and self.associative and self.owns(left):
            combined = self.absorb(left, right)
        return combined

    def combine_integers(self, left: Integer, right: Integer) -> Expr:
        return NO_SIMPLIFICATION

    def combine_doubles(self, left: Double, right: Double) -> Expr:
        return NO_SIMPLIFICATION

    def combine_fractions(self, left: Fraction, right: Fraction) -> Expr:
        return NO_SIMPLIFICATION

    def combine_objects(self, left: Expr, right: Expr) -> Expr:
        return NO_SIMPLIFICATION

    def owns(self, expr: Expr) -> bool:
        """Check if expr is an application of this operator."""
        return has_head(expr, self.name)

    def flatten(self, args: List[Expr]) -> List[Expr]:
        """Splice nested applications of this operator into one list."""
        flat = []
        for arg in args:
            if self.owns(arg):
                flat.extend(self.flatten(list(arg.params)))
            else:
                flat.append(arg)
        return flat

    def absorb(self, function: Function, operand: Expr) -> Expr:
        """
        Regroup operand into an application of this operator.

        The operand is combined with the first parameter that simplifies
        against it, and the parameter list is reduced again so the new
        value can meet the others:

            MULTIPLY(2, x) * x  ->  MULTIPLY(2, x^2)
            MULTIPLY(3, x) * 0  ->  0
        """
        params = list(function.params)
        for index, param in enumerate(params):
            combined = self.combine(param, operand)
            if combined is not NO_SIMPLIFICATION:
                params[index] = combined
                return self.reduce(params)
        return NO_SIMPLIFICATION

    def join(self, left: Expr, right: Expr) -> Function:
        """Keep an unreduced pair, appending to a running application."""
        if self.associative and self.owns(left):
            return Function(left.head, left.params + (right,))
        return self.create(left, right)
