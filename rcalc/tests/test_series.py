"""
Tests for standard value series construction.

Validates:
1. Series length = multiplier count × decade count
2. Multiplier-major, decade-minor ordering
3. Nested series keep the smaller series as a prefix
4. Lookup by name
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from rcalc.series import (
    DECADES,
    E3,
    E3_BASE,
    E6,
    E6_ADD,
    E12,
    E24,
    E48,
    E96,
    Series,
    build_series,
    extend_series,
    get_series,
)


class TestBuildSeries:
    """Test series built from base multipliers."""

    def test_length(self):
        """k multipliers over 7 decades give 7k values."""
        s = build_series([1.0, 2.2, 4.7])
        assert len(s) == 3 * len(DECADES)

    def test_single_multiplier(self):
        s = build_series([1.0])
        assert list(s) == [1.0, 10.0, 100.0, 1000.0, 10000.0, 100000.0, 1000000.0]

    def test_multiplier_major_order(self):
        """Each multiplier runs through every decade before the next starts."""
        s = build_series([1.0, 5.0])
        assert list(s) == [
            1.0, 10.0, 100.0, 1e3, 1e4, 1e5, 1e6,
            5.0, 50.0, 500.0, 5e3, 5e4, 5e5, 5e6,
        ]

    def test_values_are_products(self):
        """Values are exactly multiplier * decade."""
        s = build_series([2.2, 4.7])
        expected = [m * d for m in (2.2, 4.7) for d in DECADES]
        assert list(s) == expected

    def test_name(self):
        assert build_series([1.0], name='X1').name == 'X1'
        assert build_series([1.0]).name is None


class TestExtendSeries:
    """Test series extension."""

    def test_prefix_preserved(self):
        """The base series is an exact prefix of the extended one."""
        assert E6.values[:len(E3)] == E3.values

    def test_new_values_appended(self):
        tail = E6.values[len(E3):]
        assert tail == build_series(E6_ADD).values

    def test_length_is_sum(self):
        base = build_series([1.0, 2.0])
        ext = extend_series(base, [3.0, 4.0, 5.0])
        assert len(ext) == (2 + 3) * len(DECADES)

    def test_base_unchanged(self):
        before = E3.values
        extend_series(E3, [9.9])
        assert E3.values == before


class TestStandardSeries:
    """Verify the standard series tables."""

    def test_lengths(self):
        assert len(E3) == 21
        assert len(E6) == 42
        assert len(E12) == 84
        assert len(E24) == 168
        assert len(E48) == 336
        assert len(E96) == 672

    def test_nesting(self):
        """E3 ⊂ E6 ⊂ E12 ⊂ E24 as ordered prefixes."""
        assert E12.values[:len(E6)] == E6.values
        assert E24.values[:len(E12)] == E12.values

    def test_e3_start(self):
        assert E3[0] == 1.0
        assert E3[len(DECADES)] == pytest.approx(2.2)
        assert E3_BASE == [1.0, 2.2, 4.7]

    def test_all_positive(self):
        for s in (E3, E6, E12, E24, E48, E96):
            assert all(v > 0 for v in s)

    def test_range(self):
        """Smallest value is 1 ohm, largest is below 10M."""
        for s in (E3, E24, E96):
            assert min(s) == 1.0
            assert max(s) < 1e7

    def test_contains(self):
        assert 4.7 in E3
        assert 1.5 not in E3
        assert 1.5 in E6

    def test_immutable(self):
        with pytest.raises(AttributeError):
            E3.name = 'other'
        assert isinstance(E3.values, tuple)


class TestGetSeries:
    """Test lookup by name."""

    def test_exact_name(self):
        assert get_series('E24') is E24

    def test_case_insensitive(self):
        assert get_series('e6') is E6
        assert get_series(' E12 ') is E12

    def test_unknown_raises(self):
        with pytest.raises(ValueError):
            get_series('E7')

    def test_shared_instance(self):
        """Lookups return the same shared object."""
        assert get_series('E3') is get_series('e3')
        assert isinstance(get_series('E96'), Series)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
