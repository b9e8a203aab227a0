"""
Evaluator registry: built-in operators and user variable bindings.

The parser only reads from a registry:

    registry.lookup_operator("ADD")                      -> AddEvaluator or None
    registry.is_variable_defined("x")                    -> bool
    registry.get_variable_substitution_evaluator("x")    -> SubstitutionEvaluator

Bindings change only when a DEFINE node is evaluated (or through the
calculator / REPL surface).

A process-wide registry is available through get_registry(); tests and
embedders that want isolation construct their own Registry().
"""

import logging
import re
from typing import Dict, List, Optional

from .errors import DefinitionError
from .evaluator import Evaluator
from .expr import Expr
from .operators import ADD, MULTIPLY, POWER, DefineEvaluator, SubstitutionEvaluator

logger = logging.getLogger(__name__)

VARIABLE_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9]*$")


def is_operator_name(name: str) -> bool:
    """All upper-case identifiers are reserved for operators."""
    return name.isupper()


class Registry:
    """
    Operator table and variable store.

    Example:
        registry = Registry()
        registry.define("x", Integer(3))
        registry.value_of("x")          # Integer(3)
        registry.lookup_operator("POWER")
    """

    def __init__(self):
        self._operators: Dict[str, Evaluator] = {}
        self._variables: Dict[str, Expr] = {}
        self._substitutions: Dict[str, SubstitutionEvaluator] = {}

        for evaluator in (ADD, MULTIPLY, POWER, DefineEvaluator(self)):
            self.register(evaluator)

    def register(self, evaluator: Evaluator) -> "Registry":
        """
        Register an operator evaluator under its name.

        Returns self for chaining.
        """
        if not is_operator_name(evaluator.name):
            raise ValueError(f"Operator names must be upper case: {evaluator.name!r}")
        self._operators[evaluator.name] = evaluator
        return self

    def lookup_operator(self, name: str) -> Optional[Evaluator]:
        return self._operators.get(name)

    def operator_names(self) -> List[str]:
        return sorted(self._operators)

    # Variables

    def is_variable_defined(self, name: str) -> bool:
        return name in self._variables

    def get_variable_substitution_evaluator(self, name: str) -> SubstitutionEvaluator:
        """The evaluator that replaces the symbol name with its bound value."""
        if name not in self._substitutions:
            self._substitutions[name] = SubstitutionEvaluator(self, name)
        return self._substitutions[name]

    def value_of(self, name: str) -> Optional[Expr]:
        return self._variables.get(name)

    def define(self, name: str, value: Expr):
        """Bind a variable. Operator names and malformed names are rejected."""
        if not VARIABLE_NAME.match(name):
            raise DefinitionError(f"Invalid variable name: {name!r}")
        if is_operator_name(name):
            raise DefinitionError(f"Cannot assign to operator name {name}")
        self._variables[name] = value
        logger.info("Defined %s = %s", name, value)

    def undefine(self, name: str) -> bool:
        """Remove a binding. Returns False if name was not defined."""
        if name not in self._variables:
            return False
        del self._variables[name]
        logger.info("Undefined %s", name)
        return True

    def variables(self) -> Dict[str, Expr]:
        return dict(self._variables)

    def clear_variables(self):
        self._variables.clear()
        logger.info("Cleared all variables")

    def __repr__(self) -> str:
        return (f"Registry(operators={self.operator_names()}, "
                f"variables={sorted(self._variables)})")


_registry: Optional[Registry] = None


def get_registry() -> Registry:
    """The process-wide registry, created on first use."""
    global _registry
    if _registry is None:
        _registry = Registry()
    return _registry


def reset_registry() -> Registry:
    """Replace the process-wide registry with a fresh one."""
    global _registry
    _registry = Registry()
    return _registry
