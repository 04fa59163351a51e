"""
Tests for the combination search engine.

Validates:
1. Combination count = product of series lengths
2. Enumeration order (R1 outermost) and the empty-slot case
3. Results sorted by quantized error, best-match extraction
4. Rejection monotonicity and absent results
5. Compile-time checks, cancellation and scoring contract errors
"""

import logging

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from rcalc.candidate import Candidate, MAX_SLOTS
from rcalc.constraints import ConstraintBuilder
from rcalc.errors import SearchCancelled, SlotLimitError, UnboundVariableError
from rcalc.search import MAX_QUANTIZED_ERROR, Calculator, quantize_error
from rcalc.series import E3, E6, E12, E24, Series


def _score(*bounds, **kwargs):
    return ConstraintBuilder().extend(bounds).finish(**kwargs)


class _Recorder:
    """Wraps a scoring function and records every candidate it sees."""

    def __init__(self, inner):
        self.inner = inner
        self.seen = []

    def __call__(self, candidate):
        self.seen.append(candidate)
        return self.inner(candidate)


class TestCombinations:
    """Test the pre-flight combination count."""

    def test_product_of_lengths(self):
        calc = Calculator([E24, E6, E24])
        assert calc.combinations() == 168 * 42 * 168
        assert calc.combinations() == 1185408

    def test_no_slots(self):
        assert Calculator([]).combinations() == 1

    def test_matches_enumeration(self):
        calc = Calculator([E3, Series([1.0, 2.0, 3.0]), Series([5.0, 6.0])])
        assert sum(1 for _ in calc.iter_candidates()) == calc.combinations()

    def test_large_count_exact(self):
        """Counts beyond 64 bits stay exact."""
        calc = Calculator.e24(10)
        assert calc.combinations() == 168 ** 10

    def test_convenience_constructors(self):
        assert Calculator.e3(2).slots == (E3, E3)
        assert Calculator.e6(1).slots == (E6,)
        assert Calculator.e12(3).combinations() == 84 ** 3
        assert len(Calculator.e24(4)) == 4


class TestEnumeration:
    """Test candidate enumeration order."""

    def test_r1_outermost(self):
        calc = Calculator([Series([1.0, 2.0]), Series([3.0, 4.0])])
        values = [c.values for c in calc.iter_candidates()]
        assert values == [(1.0, 3.0), (1.0, 4.0), (2.0, 3.0), (2.0, 4.0)]

    def test_slot_draws_from_own_series(self):
        a, b = Series([1.0, 2.0]), Series([30.0, 40.0, 50.0])
        for c in Calculator([a, b]).iter_candidates():
            assert len(c) == 2
            assert c.value_at(1) in a
            assert c.value_at(2) in b

    def test_aliased_series(self):
        """The same series instance may back several slots."""
        calc = Calculator([E3, E3])
        assert sum(1 for _ in calc.iter_candidates()) == 21 * 21

    def test_empty_candidate(self):
        """No slots: exactly one empty candidate, scored once."""
        recorder = _Recorder(lambda c: 0.0)
        results = Calculator([]).search(recorder)
        assert len(recorder.seen) == 1
        assert recorder.seen[0].values == ()
        assert len(results) == 1

    def test_deterministic(self):
        calc = Calculator.e3(2)
        score = _score('R1 + R2 ~ 500')
        first = [(e, c.values) for e, c in calc.search(score)]
        second = [(e, c.values) for e, c in calc.search(score)]
        assert first == second


class TestSearchScenarios:
    """End-to-end searches with small, known series."""

    def test_single_slot_comparison(self):
        calc = Calculator([Series([10.0, 20.0])])
        results = calc.search(_score('R1 > 15'))
        assert len(results) == 1
        err, candidate = results[0]
        assert err == 0
        assert candidate.value_at(1) == 20.0

    def test_two_slot_tolerance(self):
        calc = Calculator([Series([10.0, 20.0]), Series([5.0, 15.0])])
        recorder = _Recorder(_score('R1+R2 ~ 25'))
        results = calc.search(recorder)

        assert [c.values for c in recorder.seen] == [(10.0, 5.0), (10.0, 15.0), (20.0, 5.0), (20.0, 15.0)]
        assert [recorder.inner(c) for c in recorder.seen] == [10.0, 0.0, 0.0, 10.0]

        assert len(results) == 4
        assert [e for e, _ in results] == [0, 0, 10 * 10 ** 9, 10 * 10 ** 9]
        # stable sort: ties keep enumeration order
        assert [c.values for _, c in results.best()] == [(10.0, 15.0), (20.0, 5.0)]

    def test_no_solution_returns_none(self):
        assert Calculator.e3(1).search(_score('R1 < 0')) is None

    def test_divider(self):
        """Equal halves of a divider give exactly 0.5."""
        results = Calculator.e12(2).search(_score('R2/(R1+R2) ~ 0.5'))
        best = results.best()
        assert len(best) == len(E12)
        assert all(c.value_at(1) == c.value_at(2) for _, c in best)

    def test_handwritten_score(self):
        """Any callable returning Optional[float] can drive a search."""
        def score(c):
            if c.sum() > 35:
                return None
            return abs(c.sum() - 30.0)

        results = Calculator([Series([10.0, 20.0]), Series([10.0, 20.0])]).search(score)
        assert len(results) == 3
        assert sorted(c.values for _, c in results.best()) == [(10.0, 20.0), (20.0, 10.0)]

    def test_regulator_feedback_network(self):
        """13K/15K/2K hits both output voltage targets exactly."""
        score = _score(
            'R1+R2+R3 <= 1e6',
            'R1+R2+R3 >= 1e4',
            '0.8 * (1 + R1/R3) ~ 6.0',
            '0.8 * (1 + (R1+R2)/R3) ~ 12.0',
            slot_count=3,
        )
        assert quantize_error(score(Candidate((13000.0, 15000.0, 2000.0)))) == 0
        assert score(Candidate((1.0, 1.0, 1.0))) is None


class TestInvariants:
    """Properties that hold for any search."""

    def test_sorted_errors(self):
        results = Calculator.e6(2).search(_score('R1 / R2 ~ 3.3'))
        errs = results.errors().astype(np.int64)
        assert np.all(np.diff(errs) >= 0)

    def test_rejection_monotonicity(self):
        calc = Calculator.e3(2)
        base = ['R1 + R2 ~ 500']
        fewer = calc.search(_score(*base))
        more = calc.search(_score(*base, 'R1 < 1000'))
        assert len(more) <= len(fewer)
        even_more = calc.search(_score(*base, 'R1 < 1000', 'R2 >= 100'))
        assert len(even_more) <= len(more)

    def test_quantization_idempotent(self):
        for err in (0.0, 0.1234567891234, 3.5, 1e-12, 42.000000001):
            q = quantize_error(err)
            assert quantize_error(q / 1e9) == q

    def test_quantize_values(self):
        assert quantize_error(0.0) == 0
        assert quantize_error(1.0) == 1_000_000_000
        assert quantize_error(0.4e-9) == 0
        assert quantize_error(0.6e-9) == 1

    def test_quantize_saturates(self):
        """Errors past the 64-bit range clamp instead of overflowing."""
        assert quantize_error(1e300) == MAX_QUANTIZED_ERROR
        assert quantize_error(float('inf')) == MAX_QUANTIZED_ERROR
        assert quantize_error(1e9) == 10 ** 18

    def test_quantize_rejects_invalid(self):
        with pytest.raises(ValueError):
            quantize_error(-1.0)
        with pytest.raises(ValueError):
            quantize_error(float('nan'))

    def test_negative_score_rejected(self):
        with pytest.raises(ValueError):
            Calculator([Series([1.0])]).search(lambda c: -0.5)


class TestSearchErrors:
    """Configuration errors and cancellation."""

    def test_unbound_slot_detected_before_enumeration(self):
        recorder = _Recorder(_score('R3 > 1'))
        recorder.required_slots = recorder.inner.required_slots
        with pytest.raises(UnboundVariableError):
            Calculator.e3(2).search(recorder)
        assert recorder.seen == []

    def test_too_many_slots(self):
        with pytest.raises(SlotLimitError):
            Calculator([E3] * (MAX_SLOTS + 1))

    def test_max_slots_allowed(self):
        assert len(Calculator([Series([1.0])] * MAX_SLOTS)) == MAX_SLOTS

    def test_non_series_slot(self):
        with pytest.raises(TypeError):
            Calculator([[1.0, 2.0]])

    def test_cancel_immediately(self):
        with pytest.raises(SearchCancelled):
            Calculator.e3(2).search(_score('R1 > 0'), cancel=lambda: True)

    def test_cancel_polled_per_outer_value(self):
        polls = []

        def cancel():
            polls.append(1)
            return len(polls) > 3

        recorder = _Recorder(lambda c: 0.0)
        with pytest.raises(SearchCancelled):
            Calculator.e3(2).search(recorder, cancel=cancel)
        assert len(recorder.seen) == 3 * len(E3)

    def test_cancel_never(self):
        results = Calculator.e3(1).search(lambda c: 0.0, cancel=lambda: False)
        assert len(results) == len(E3)

    def test_evaluation_failures_rejected(self):
        calc = Calculator([Series([0.0, 1.0]), Series([1.0])])
        score = _score('R2 / R1 ~ 1')
        results = calc.search(score)
        assert len(results) == 1
        assert score.evaluation_failures == 1

    def test_huge_error_saturates(self):
        results = Calculator([Series([1.0])]).search(_score('R1 * 1e300 ~ 0'))
        assert len(results) == 1
        assert results.best_error == MAX_QUANTIZED_ERROR
        assert results.errors().tolist() == [MAX_QUANTIZED_ERROR]

    def test_failures_logged_per_search(self, caplog):
        """A reused score only reports failures from the current search."""
        score = _score('R2 / R1 ~ 1')
        with caplog.at_level(logging.WARNING, logger='rcalc.search'):
            Calculator([Series([0.0, 1.0]), Series([1.0])]).search(score)
        assert '1 candidates rejected' in caplog.text

        caplog.clear()
        with caplog.at_level(logging.WARNING, logger='rcalc.search'):
            results = Calculator([Series([1.0]), Series([1.0])]).search(score)
        assert len(results) == 1
        assert 'rejected' not in caplog.text
        assert score.evaluation_failures == 1


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
