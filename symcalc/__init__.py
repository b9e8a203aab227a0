"""
symcalc - a symbolic calculator

Parses infix expressions into immutable expression trees and simplifies them
with algebraic rules instead of numeric approximation.

Quick Start:
    from symcalc import Calculator

    calc = Calculator()
    str(calc("x*x*2"))            # '2*x^2'
    str(calc("1/3 + 1/6"))        # '1/2'
    calc("r = 2")
    str(calc("3*r^2"))            # '12'

Syntax:
    + - * / ^         arithmetic, ^ binds tightest and associates left
    ( )               grouping
    name = expr       define a variable
    NAME(a, b, ...)   call an operator (ADD, MULTIPLY, POWER, DEFINE)

Expression Tree:
    Integer(7), Double(2.5), Fraction(1, 3)   number literals
    Symbol("x")                               variable
    Function(head, params)                    operator application

    x - y   is   ADD(x, MULTIPLY(-1, y))
    x / y   is   MULTIPLY(x, POWER(y, -1))

Extending:
    Subclass NaryEvaluator, fill in the combine_* hooks and
    Registry.register() the instance under an upper-case name.
"""

__version__ = "0.1.0"

# Expression model
from .expr import (
    Expr,
    Integer,
    Double,
    Fraction,
    Symbol,
    Function,
    Number,
    rational,
)

# Errors
from .errors import (
    SymcalcError,
    ParseError,
    UnsupportedOperatorError,
    DefinitionError,
)

# Evaluator framework
from .evaluator import (
    Evaluator,
    NaryEvaluator,
    NO_SIMPLIFICATION,
    promote,
)

# Built-in operators
from .operators import (
    ADD,
    MULTIPLY,
    POWER,
    AddEvaluator,
    MultiplyEvaluator,
    PowerEvaluator,
    DefineEvaluator,
    SubstitutionEvaluator,
)

# Registry, parser and calculator
from .registry import Registry, get_registry, reset_registry
from .parser import Parser, parse
from .engine import Calculator, evaluate, format_tree

# Public API
__all__ = [
    # Version
    "__version__",
    # Expression model
    "Expr",
    "Integer",
    "Double",
    "Fraction",
    "Symbol",
    "Function",
    "Number",
    "rational",
    # Errors
    "SymcalcError",
    "ParseError",
    "UnsupportedOperatorError",
    "DefinitionError",
    # Evaluators
    "Evaluator",
    "NaryEvaluator",
    "NO_SIMPLIFICATION",
    "promote",
    "ADD",
    "MULTIPLY",
    "POWER",
    "AddEvaluator",
    "MultiplyEvaluator",
    "PowerEvaluator",
    "DefineEvaluator",
    "SubstitutionEvaluator",
    # Registry
    "Registry",
    "get_registry",
    "reset_registry",
    # Parsing and evaluation
    "Parser",
    "parse",
    "Calculator",
    "evaluate",
    "format_tree",
]
