"""Tests for the built-in operator rules."""

import pytest
from symcalc.engine import Calculator
from symcalc.errors import DefinitionError
from symcalc.evaluator import NO_SIMPLIFICATION
from symcalc.expr import Integer, Double, Fraction, Symbol, Function
from symcalc.operators import ADD, MULTIPLY, POWER, MAX_EXACT_BITS, DefineEvaluator
from symcalc.registry import Registry

x, y = Symbol("x"), Symbol("y")


@pytest.fixture
def calc():
    return Calculator()


def simplify(text):
    return Calculator().calculate(text)


class TestMultiply:
    """Tests for multiplication rules."""

    def test_identity(self):
        """x*1 reduces to the bare symbol."""
        assert simplify("x*1") == x
        assert simplify("1*x") == x

    def test_zero_absorbs(self):
        assert simplify("x*0") == Integer(0)
        assert simplify("0*x*y") == Integer(0)

    def test_square(self):
        """Equal operands fold into a square."""
        assert simplify("x*x") == POWER.create(x, Integer(2))

    def test_square_matches_parsed_power(self, calc):
        assert calc("x*x") == calc.parse("x^2")

    def test_exponent_combination(self):
        assert simplify("x^2*x^3") == POWER.create(x, Integer(5))

    def test_power_times_base(self):
        assert simplify("x^2*x") == POWER.create(x, Integer(3))
        assert simplify("x*x^2") == POWER.create(x, Integer(3))

    def test_cancellation(self):
        """x/x is 1."""
        assert simplify("x/x") == Integer(1)

    def test_integers(self):
        assert simplify("6*7") == Integer(42)

    def test_doubles(self):
        assert simplify("1.5*2.0") == Double(3.0)

    def test_fractions(self):
        assert simplify("2/3*3/4") == Fraction(1, 2)

    def test_mixed_promotion(self):
        """Integer times fraction stays exact; a double makes it inexact."""
        assert simplify("3*(1/3)") == Integer(1)
        assert simplify("2*0.25") == Double(0.5)

    def test_regrouping(self):
        """Later operands are combined with matching earlier ones."""
        assert simplify("2*x*x") == MULTIPLY.create(Integer(2), POWER.create(x, Integer(2)))
        assert simplify("2*x*3") == MULTIPLY.create(Integer(6), x)

    def test_coefficient_first(self):
        assert simplify("x*2") == MULTIPLY.create(Integer(2), x)

    def test_symbolic_kept(self):
        assert simplify("x*y") == MULTIPLY.create(x, y)

    def test_nested_products_flattened(self):
        assert simplify("x*(y*x)") == MULTIPLY.create(POWER.create(x, Integer(2)), y)


class TestAdd:
    """Tests for addition rules."""

    def test_integers(self):
        assert simplify("1+2+3") == Integer(6)

    def test_fractions(self):
        assert simplify("1/3+1/6") == Fraction(1, 2)

    def test_mixed(self):
        assert simplify("1+1/2") == Fraction(3, 2)
        assert simplify("1+0.5") == Double(1.5)

    def test_zero_identity(self):
        assert simplify("x+0") == x
        assert simplify("0+x") == x

    def test_doubling(self):
        assert simplify("x+x") == MULTIPLY.create(Integer(2), x)

    def test_like_terms(self):
        assert simplify("2*x+3*x") == MULTIPLY.create(Integer(5), x)
        assert simplify("x+x+x") == MULTIPLY.create(Integer(3), x)

    def test_subtraction_cancels(self):
        assert simplify("x-x") == Integer(0)
        assert simplify("x+y-x") == y

    def test_unlike_terms_kept(self):
        assert simplify("x+y") == ADD.create(x, y)

    def test_subtraction_of_numbers(self):
        assert simplify("10-3-2") == Integer(5)


class TestPower:
    """Tests for power rules."""

    def test_integer_power(self):
        assert simplify("2^10") == Integer(1024)

    def test_negative_exponent_is_exact(self):
        assert simplify("2^(-2)") == Fraction(1, 4)
        assert simplify("(-2)^(-3)") == Fraction(-1, 8)

    def test_fraction_power(self):
        assert simplify("(2/3)^2") == Fraction(4, 9)
        assert simplify("(2/3)^(-2)") == Fraction(9, 4)

    def test_double_power(self):
        assert simplify("2.0^0.5") == Double(2.0 ** 0.5)

    def test_fractional_exponent_kept(self):
        """There are no radicals."""
        assert simplify("2^(1/2)") == POWER.create(Integer(2), Fraction(1, 2))

    def test_complex_result_kept(self):
        result = simplify("(-8.0)^(1/3.0)")
        assert isinstance(result, Function)
        assert result.params[0] == Double(-8.0)

    def test_zero_to_negative_kept(self):
        """0^-1 is not reduced to infinity."""
        assert POWER.combine(Integer(0), Integer(-1)) is NO_SIMPLIFICATION
        assert POWER.combine(Double(0.0), Double(-1.0)) is NO_SIMPLIFICATION

    def test_identities(self):
        assert simplify("x^0") == Integer(1)
        assert simplify("x^1") == x
        assert simplify("1^x") == Integer(1)
        assert simplify("0^3") == Integer(0)

    def test_power_of_power(self):
        assert simplify("x^2^3") == POWER.create(x, Integer(6))

    def test_symbolic_kept(self):
        assert simplify("x^y") == POWER.create(x, y)

    def test_huge_power_kept(self):
        """Results beyond the exact size limit stay unreduced."""
        exponent = MAX_EXACT_BITS + 1
        assert POWER.combine(Integer(2), Integer(exponent)) is NO_SIMPLIFICATION
        assert POWER.combine(Integer(1), Integer(exponent)) == Integer(1)
        assert POWER.combine(Integer(-1), Integer(exponent)) == Integer(-1)

    def test_big_but_allowed(self):
        assert simplify("2^100") == Integer(2 ** 100)


class TestDefine:
    """Tests for DEFINE."""

    def test_binds_and_returns_value(self, calc):
        assert calc("y = 1/3 + 1/6") == Fraction(1, 2)
        assert calc.registry.value_of("y") == Fraction(1, 2)

    def test_later_expressions_substitute(self, calc):
        calc("r = 2")
        assert calc("3*r^2") == Integer(12)

    def test_redefine(self, calc):
        calc("a = 1")
        calc("a = a + 1")
        assert calc("a") == Integer(2)

    def test_symbolic_value(self, calc):
        calc("y = x + 1")
        assert calc("y*2") == MULTIPLY.create(Integer(2), ADD.create(x, Integer(1)))

    def test_chained_define_rejected(self, calc):
        """a=b=1 assigns to a definition, which is not a variable."""
        with pytest.raises(DefinitionError):
            calc("a = b = 1")

    def test_assign_to_number_rejected(self, calc):
        with pytest.raises(DefinitionError) as exc_info:
            calc("2 = x")
        assert "Cannot assign" in str(exc_info.value)

    def test_assign_to_operator_rejected(self, calc):
        with pytest.raises(DefinitionError):
            calc("ADD = 1")

    def test_arity_checked(self, calc):
        with pytest.raises(DefinitionError):
            calc("DEFINE(x)")

    def test_render(self):
        define = DefineEvaluator(Registry())
        assert str(define.create(y, ADD.create(x, Integer(1)))) == "y=x+1"


class TestSubstitution:
    """Tests for substitution of defined variables."""

    def test_undefined_after_parse(self, calc):
        """A symbol whose variable was removed evaluates to itself."""
        calc("k = 3")
        expr = calc.parse("k + 1")
        calc.undefine("k")
        assert expr.evaluate() == ADD.create(Symbol("k"), Integer(1))

    def test_value_at_evaluation_time(self, calc):
        """The bound value is looked up when evaluating, not when parsing."""
        calc("k = 3")
        expr = calc.parse("k*2")
        calc("k = 5")
        assert expr.evaluate() == Integer(10)
