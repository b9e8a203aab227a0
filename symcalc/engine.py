"""
Calculator facade for symcalc.

Ties the parser, the evaluators and a registry together:

    from symcalc import Calculator

    calc = Calculator()
    calc("x*x*2")            # MULTIPLY(2, POWER(x, 2)), renders as 2*x^2
    calc("y = 1/3 + 1/6")    # binds y to 1/2
    calc("4*y")              # Integer(2)

Every Calculator owns its own Registry unless one is passed in, so variable
bindings do not leak between calculators.
"""

import logging
from typing import Dict, List, Optional, Union

from .errors import SymcalcError
from .expr import Expr, Function, Symbol
from .parser import Parser
from .registry import Registry

logger = logging.getLogger(__name__)


class Calculator:
    """
    Parse, evaluate and render expressions against one registry.

    Example:
        calc = Calculator()
        calc.define("r", "2")
        str(calc("r^2*3"))   # '12'
    """

    def __init__(self, registry: Optional[Registry] = None):
        self.registry = registry if registry is not None else Registry()
        self.parser = Parser(self.registry)

    def parse(self, text: str) -> Expr:
        """Parse text without evaluating it."""
        return self.parser.parse(text)

    def evaluate(self, expr: Union[str, Expr]) -> Expr:
        """Evaluate an expression tree, parsing it first if given text."""
        if isinstance(expr, str):
            expr = self.parse(expr)
        try:
            result = expr.evaluate()
        except RecursionError:
            raise SymcalcError("Expression nested too deeply to evaluate") from None
        logger.debug("Evaluated %s to %s", expr, result)
        return result

    def calculate(self, text: str) -> Expr:
        """Parse and evaluate text."""
        return self.evaluate(self.parse(text))

    def __call__(self, text: str) -> Expr:
        return self.calculate(text)

    def define(self, name: str, text: str) -> Expr:
        """
        Bind name to the evaluated value of text.

        Same effect as calculating "name = text".
        """
        value = self.calculate(text)
        self.registry.define(name, value)
        return value

    def undefine(self, name: str) -> bool:
        return self.registry.undefine(name)

    def variables(self) -> Dict[str, Expr]:
        return self.registry.variables()

    def render(self, expr: Expr) -> str:
        try:
            return expr.render()
        except RecursionError:
            raise SymcalcError("Expression nested too deeply to render") from None

    def __repr__(self) -> str:
        return f"Calculator({self.registry!r})"


def format_tree(expr: Expr, indent: str = "  ") -> str:
    """
    Render the structure of an expression, one node per line.

        >>> print(format_tree(parse("x/2")))
        MULTIPLY
          x
          POWER
            2 (Integer)
            -1 (Integer)
    """
    lines: List[str] = []

    def walk(node: Expr, depth: int):
        if isinstance(node, Function):
            lines.append(indent * depth + node.head.name)
            for param in node.params:
                walk(param, depth + 1)
        elif isinstance(node, Symbol):
            lines.append(indent * depth + node.name)
        else:
            lines.append(f"{indent * depth}{node.render()} ({type(node).__name__})")

    walk(expr, 0)
    return "\n".join(lines)


def evaluate(expr: Union[str, Expr]) -> Expr:
    """
    Evaluate an expression with the process-wide registry.

    Text is parsed with symcalc.registry.get_registry(), so definitions made
    here are visible to later calls.
    """
    if isinstance(expr, str):
        expr = Parser().parse(expr)
    return expr.evaluate()
