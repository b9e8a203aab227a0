#!/usr/bin/env python3
"""
symcalc Feature Demonstration

This script walks through parsing, simplification, variables, rendering
and extending symcalc with a custom operator.
"""

from symcalc import (
    Calculator, Registry, NaryEvaluator, NO_SIMPLIFICATION,
    ParseError, UnsupportedOperatorError, format_tree,
)
from symcalc.expr import to_float


def section(title: str):
    """Print a section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print('='*60)


def demo_simplification():
    """Demonstrate algebraic simplification."""
    section("Simplification")

    calc = Calculator()
    examples = [
        "x*1",
        "x*0",
        "x*x",
        "x^2*x^3",
        "2*x*x",
        "2*x + 3*x",
        "x + y - x",
        "x/x",
        "(x^2)^3",
    ]

    for text in examples:
        print(f"  {text:12} => {calc(text)}")


def demo_exact_numbers():
    """Demonstrate exact fractions and mixed arithmetic."""
    section("Exact Numbers")

    calc = Calculator()
    examples = [
        "1/3",
        "2/4",
        "1/3 + 1/6",
        "2^-2",
        "(2/3)^2",
        "1 + 0.5",
        "2^100",
        "2^(1/2)",
    ]

    for text in examples:
        print(f"  {text:12} => {calc(text)}")


def demo_variables():
    """Demonstrate variable definitions."""
    section("Variables")

    calc = Calculator()
    for text in ["r = 2", "area = 3*r^2", "area/4", "y = x + 1", "y*y"]:
        print(f"  {text:14} => {calc(text)}")

    print(f"\n  Defined: {sorted(calc.variables())}")


def demo_rendering():
    """Demonstrate precedence-aware rendering."""
    section("Rendering")

    calc = Calculator()
    for text in ["(x+1)*2", "x+1*2", "a/(b*c)", "x-(y+1)", "x^(2^3)"]:
        tree = calc.parse(text)
        print(f"  {text:10} => {tree}")

    print("\n  Structure of x/2 - y:")
    for line in format_tree(calc.parse("x/2 - y")).splitlines():
        print(f"    {line}")


def demo_errors():
    """Demonstrate error reporting."""
    section("Errors")

    calc = Calculator()
    for text in ["(x+1", "x+1)", "x $ 1", "5/0", "FOO(x)"]:
        try:
            calc(text)
        except UnsupportedOperatorError as e:
            print(f"  {text:8} => unsupported operator {e.name}")
        except ParseError as e:
            print(f"  {text:8} => {e}")


class MaxEvaluator(NaryEvaluator):
    """MAX(a, b, ...): largest number literal, symbols kept."""

    name = "MAX"

    def combine_objects(self, left, right):
        if left.is_number() and right.is_number():
            return left if to_float(left) >= to_float(right) else right
        return NO_SIMPLIFICATION

    combine_integers = combine_objects
    combine_doubles = combine_objects
    combine_fractions = combine_objects


def demo_custom_operator():
    """Demonstrate registering a custom evaluator."""
    section("Custom Operator")

    calc = Calculator(Registry().register(MaxEvaluator()))
    for text in ["MAX(3, 1/2, 7)", "MAX(x, 2, 5)", "MAX(2^3, 3^2)"]:
        print(f"  {text:16} => {calc(text)}")


def main():
    """Run all demos."""
    print("symcalc Feature Demonstration")

    demo_simplification()
    demo_exact_numbers()
    demo_variables()
    demo_rendering()
    demo_errors()
    demo_custom_operator()

    print(f"\n{'='*60}")
    print(" Demo complete!")
    print('='*60)


if __name__ == "__main__":
    main()
