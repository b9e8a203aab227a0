"""Tests for the evaluator dispatch framework."""

import pytest
from symcalc.evaluator import Evaluator, NaryEvaluator, NO_SIMPLIFICATION, promote
from symcalc.expr import Integer, Double, Fraction, Symbol, ZERO, to_float
from symcalc.operators import MULTIPLY
from symcalc.parser import Parser
from symcalc.registry import Registry

x, y = Symbol("x"), Symbol("y")


class MaxEvaluator(NaryEvaluator):
    """MAX(a, b, ...) of number literals; symbols are kept."""

    name = "MAX"

    def combine_integers(self, left, right):
        return left if left.value >= right.value else right

    def combine_objects(self, left, right):
        if left.is_number() and right.is_number():
            return left if to_float(left) >= to_float(right) else right
        return NO_SIMPLIFICATION


class RecordingEvaluator(NaryEvaluator):
    """Records every pairwise step it is asked to take."""

    name = "REC"
    associative = True

    def __init__(self):
        super().__init__()
        self.calls = []

    def combine_integers(self, left, right):
        self.calls.append(("integers", left, right))
        return Integer(left.value + right.value)

    def combine_doubles(self, left, right):
        self.calls.append(("doubles", left, right))
        return NO_SIMPLIFICATION

    def combine_fractions(self, left, right):
        self.calls.append(("fractions", left, right))
        return NO_SIMPLIFICATION

    def combine_objects(self, left, right):
        self.calls.append(("objects", left, right))
        return NO_SIMPLIFICATION


class TestNoSimplification:
    """Tests for the sentinel."""

    def test_singleton(self):
        assert type(NO_SIMPLIFICATION)() is NO_SIMPLIFICATION

    def test_falsy(self):
        assert not NO_SIMPLIFICATION

    def test_repr(self):
        assert repr(NO_SIMPLIFICATION) == "NO_SIMPLIFICATION"


class TestPromote:
    """Tests for mixed literal promotion."""

    def test_integer_fraction(self):
        assert promote(Integer(2), Fraction(1, 3)) == (Fraction(2, 1), Fraction(1, 3))

    def test_double_wins(self):
        assert promote(Integer(2), Double(0.5)) == (Double(2.0), Double(0.5))
        assert promote(Fraction(1, 4), Double(0.5)) == (Double(0.25), Double(0.5))


class TestDispatch:
    """Tests for the type-pair dispatch order."""

    def test_same_kind_pairs(self):
        """Same literal kinds go to their dedicated hook."""
        rec = RecordingEvaluator()
        rec.combine(Integer(1), Integer(2))
        rec.combine(Double(1.0), Double(2.0))
        rec.combine(Fraction(1, 2), Fraction(1, 3))
        assert [call[0] for call in rec.calls] == ["integers", "doubles", "fractions"]

    def test_mixed_pairs_go_to_objects(self):
        """Mixed kinds and symbols go to combine_objects."""
        rec = RecordingEvaluator()
        rec.combine(Integer(1), Double(2.0))
        rec.combine(x, Integer(1))
        assert [call[0] for call in rec.calls] == ["objects", "objects"]

    def test_base_hooks_do_nothing(self):
        """An evaluator without rules never simplifies."""
        nary = NaryEvaluator()
        assert nary.combine(Integer(1), Integer(2)) is NO_SIMPLIFICATION
        assert nary.combine(x, y) is NO_SIMPLIFICATION


class TestFold:
    """Tests for the pairwise left fold."""

    def test_full_reduction(self):
        rec = RecordingEvaluator()
        assert rec.reduce([Integer(1), Integer(2), Integer(3)]) == Integer(6)

    def test_unreduced_pair_kept(self):
        """A pair without a rule is kept as a two argument node."""
        max_ = MaxEvaluator()
        assert max_.reduce([x, y]) == max_.create(x, y)

    def test_partial_reduction_is_left_to_right(self):
        """Only adjacent pairs of the running fold are combined."""
        max_ = MaxEvaluator()
        result = max_.reduce([Integer(1), Integer(5), x, Integer(7)])
        # MAX(1, 5) -> 5, MAX(5, x) kept, MAX(MAX(5, x), 7) kept
        assert result == max_.create(max_.create(Integer(5), x), Integer(7))

    def test_associative_fold_appends(self):
        """Associative evaluators grow one flat node instead of nesting."""
        rec = RecordingEvaluator()
        result = rec.reduce([x, y, Symbol("z")])
        assert result == rec.create(x, y, Symbol("z"))

    def test_associative_flatten(self):
        rec = RecordingEvaluator()
        nested = rec.create(x, rec.create(y, Integer(1)))
        assert rec.flatten([nested, Integer(2)]) == [x, y, Integer(1), Integer(2)]

    def test_absorb_regroups(self):
        """An operand is combined with a matching parameter of the running node."""
        rec = RecordingEvaluator()
        result = rec.reduce([Integer(1), x, Integer(2)])
        assert result == rec.create(Integer(3), x)

    def test_empty_uses_identity(self):
        assert MULTIPLY.reduce([]) == Integer(1)

    def test_empty_without_identity(self):
        max_ = MaxEvaluator()
        assert max_.reduce([]) == max_.create()

    def test_single_argument(self):
        assert MaxEvaluator().reduce([x]) == x

    def test_inputs_not_mutated(self):
        rec = RecordingEvaluator()
        args = [Integer(1), x, Integer(2)]
        rec.reduce(args)
        assert args == [Integer(1), x, Integer(2)]


class TestEvaluatorBase:
    """Tests for the base Evaluator."""

    def test_symbol_bound(self):
        max_ = MaxEvaluator()
        assert max_.symbol == Symbol("MAX")
        assert max_.symbol.evaluator is max_

    def test_evaluate_evaluates_params(self):
        """Parameters are evaluated before the fold."""
        max_ = MaxEvaluator()
        inner = MULTIPLY.create(Integer(2), Integer(3))
        assert max_.create(inner, Integer(4)).evaluate() == Integer(6)

    def test_functional_render(self):
        """Evaluators without an operator render as NAME(a,b)."""
        max_ = MaxEvaluator()
        assert str(max_.create(x, Integer(2))) == "MAX(x,2)"

    def test_single_param_render(self):
        """Operators with fewer than two params render functionally."""
        assert str(MULTIPLY.create(x)) == "MULTIPLY(x)"
        assert str(MULTIPLY.create()) == "MULTIPLY()"

    def test_plain_evaluator_keeps_function(self):
        class Inert(Evaluator):
            name = "INERT"

        inert = Inert()
        f = inert.create(MULTIPLY.create(Integer(2), Integer(3)))
        assert f.evaluate() == inert.create(Integer(6))

    def test_repr(self):
        assert repr(MULTIPLY) == "MultiplyEvaluator(MULTIPLY)"


class TestRegisteredExtension:
    """Tests for a user evaluator registered with the parser."""

    def test_parse_and_evaluate(self):
        registry = Registry().register(MaxEvaluator())
        expr = Parser(registry).parse("MAX(3, 1/2, 7)")
        assert expr.evaluate() == Integer(7)

    def test_symbolic_argument_kept(self):
        registry = Registry().register(MaxEvaluator())
        result = Parser(registry).parse("MAX(x, 2*3)").evaluate()
        assert str(result) == "MAX(x,6)"

    def test_lowercase_name_rejected(self):
        class Lower(Evaluator):
            name = "low"

        with pytest.raises(ValueError):
            Registry().register(Lower())

    def test_idempotent(self):
        """Reducing a reduced tree changes nothing."""
        registry = Registry().register(MaxEvaluator())
        once = Parser(registry).parse("MAX(x, 2, 5)").evaluate()
        assert once.evaluate() == once
        assert ZERO.evaluate() == ZERO
