"""
E-series standard component values.

A series is the full list of values a slot may take: each per-decade
multiplier (1.0 to <10.0) scaled across seven decades, 1 to 1M.
Values are ordered multiplier-major, decade-minor, and that order is the
order in which the search engine walks them.
"""

from typing import Dict, Iterable, Iterator, Optional, Sequence, Tuple

import numpy as np

# Power-of-ten scale factors applied to every base multiplier
DECADES = (1e0, 1e1, 1e2, 1e3, 1e4, 1e5, 1e6)

# Multipliers each nested series adds to the previous one (IEC 60063)
E3_BASE = [1.0, 2.2, 4.7]
E6_ADD = [1.5, 3.3, 6.8]
E12_ADD = [1.2, 1.8, 2.7, 3.9, 5.6, 8.2]
E24_ADD = [1.1, 1.3, 1.6, 2.0, 2.4, 3.0, 3.6, 4.3, 5.1, 6.2, 7.5, 9.1]

E48_BASE = [
    1.00, 1.05, 1.10, 1.15, 1.21, 1.27, 1.33, 1.40, 1.47, 1.54, 1.62, 1.69,
    1.78, 1.87, 1.96, 2.05, 2.15, 2.26, 2.37, 2.49, 2.61, 2.74, 2.87, 3.01,
    3.16, 3.32, 3.48, 3.65, 3.83, 4.02, 4.22, 4.42, 4.64, 4.87, 5.11, 5.36,
    5.62, 5.90, 6.19, 6.49, 6.81, 7.15, 7.50, 7.87, 8.25, 8.66, 9.09, 9.53,
]

E96_BASE = [
    1.00, 1.02, 1.05, 1.07, 1.10, 1.13, 1.15, 1.18, 1.21, 1.24, 1.27, 1.30,
    1.33, 1.37, 1.40, 1.43, 1.47, 1.50, 1.54, 1.58, 1.62, 1.65, 1.69, 1.74,
    1.78, 1.82, 1.87, 1.91, 1.96, 2.00, 2.05, 2.10, 2.15, 2.21, 2.26, 2.32,
    2.37, 2.43, 2.49, 2.55, 2.61, 2.67, 2.74, 2.80, 2.87, 2.94, 3.01, 3.09,
    3.16, 3.24, 3.32, 3.40, 3.48, 3.57, 3.65, 3.74, 3.83, 3.92, 4.02, 4.12,
    4.22, 4.32, 4.42, 4.53, 4.64, 4.75, 4.87, 4.99, 5.11, 5.23, 5.36, 5.49,
    5.62, 5.76, 5.90, 6.04, 6.19, 6.34, 6.49, 6.65, 6.81, 6.98, 7.15, 7.32,
    7.50, 7.68, 7.87, 8.06, 8.25, 8.45, 8.66, 8.87, 9.09, 9.31, 9.53, 9.76,
]


def _expand(multipliers: Iterable[float]) -> Tuple[float, ...]:
    """Scale each multiplier across all decades, multiplier-major."""
    m = np.asarray(list(multipliers), dtype=np.float64)
    return tuple(np.outer(m, np.asarray(DECADES)).ravel().tolist())


class Series:
    """
    Immutable ordered collection of candidate values for one slot.

    Instances are read-only and meant to be shared: several slots of one
    calculator, and several calculators, may hold the same Series.
    """

    __slots__ = ('_values', '_name')

    def __init__(self, values: Sequence[float], name: Optional[str] = None):
        self._values = tuple(float(v) for v in values)
        self._name = name

    @property
    def values(self) -> Tuple[float, ...]:
        return self._values

    @property
    def name(self) -> Optional[str]:
        return self._name

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)

    def __getitem__(self, idx):
        return self._values[idx]

    def __contains__(self, value) -> bool:
        return value in self._values

    def __repr__(self) -> str:
        label = self.name or 'custom'
        return f'Series({label}, {len(self)} values)'


def build_series(multipliers: Sequence[float], name: Optional[str] = None) -> Series:
    """
    Build a series from per-decade base multipliers.

    Args:
        multipliers: Base values, by convention in [1.0, 10.0)
        name: Optional label (e.g. 'E3')

    Returns:
        Series of len(multipliers) * len(DECADES) values.
    """
    return Series(_expand(multipliers), name=name)


def extend_series(base: Series, multipliers: Sequence[float], name: Optional[str] = None) -> Series:
    """
    Extend an existing series with additional multipliers.

    The base series' values come first, in their original order, followed
    by the decade expansion of the new multipliers.
    """
    return Series(base.values + _expand(multipliers), name=name)


E3 = build_series(E3_BASE, name='E3')
E6 = extend_series(E3, E6_ADD, name='E6')
E12 = extend_series(E6, E12_ADD, name='E12')
E24 = extend_series(E12, E24_ADD, name='E24')
E48 = build_series(E48_BASE, name='E48')
E96 = build_series(E96_BASE, name='E96')

E_SERIES: Dict[str, Series] = {
    'E3': E3,
    'E6': E6,
    'E12': E12,
    'E24': E24,
    'E48': E48,
    'E96': E96,
}


def get_series(name: str) -> Series:
    """Look up a standard series by name ('E24', 'e6', ...)."""
    key = name.strip().upper()
    if key not in E_SERIES:
        raise ValueError(f"Unknown series '{name}'. Must be one of: {list(E_SERIES.keys())}")
    return E_SERIES[key]
