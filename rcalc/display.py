"""
Text rendering of resistor values and search results.

Values use the resistor marking convention, where the multiplier letter
takes the place of the decimal point:

    format_value(470)     → '470R'
    format_value(4700)    → '4K7'
    format_value(13000)   → '13K'
    format_value(2.2e6)   → '2M2'
"""

from typing import Sequence

import numpy as np

from rcalc.candidate import Candidate, slot_name
from rcalc.results import Entry, ResultSet
from rcalc.search import ERROR_SCALE


def _format_scaled(value: float, unit: str) -> str:
    # 12 significant digits hides float noise such as 2.2 * 1000 = 2200.0000000000005.
    # Positional notation keeps 1e18 as 1000000000000M rather than 1e+12M.
    text = np.format_float_positional(value, precision=12, unique=True, fractional=False, trim='-')
    if '.' in text:
        return text.replace('.', unit)
    return text + unit


def format_value(r: float) -> str:
    """Render a resistance in ohms as e.g. '4K7' or '100R'."""
    if r < 1e3:
        return _format_scaled(r, 'R')
    if r < 1e6:
        return _format_scaled(r / 1e3, 'K')
    return _format_scaled(r / 1e6, 'M')


def format_candidate(candidate: Candidate, sep: str = ', ') -> str:
    """'R1: 13K, R2: 15K, R3: 2K'. Use sep='\\n' for one slot per line."""
    return sep.join(
        f'{slot_name(i)}: {format_value(v)}' for i, v in enumerate(candidate, start=1)
    )


def format_error(quantized: int) -> str:
    return f'{quantized / ERROR_SCALE:.3f}'


def format_match(index: int, entry: Entry) -> str:
    """Render one ranked entry; ``index`` is 1-based."""
    err, candidate = entry
    return (
        f'Match {index}:\n'
        f'Error: {format_error(err)}\n'
        f'Values: {format_candidate(candidate)}\n'
    )


def format_matches(entries: Sequence[Entry]) -> str:
    return '\n'.join(format_match(i, entry) for i, entry in enumerate(entries, start=1))


def format_best(results: ResultSet) -> str:
    """All matches sharing the lowest error, separated by blank lines."""
    return format_matches(results.best())
