"""
Resistor value calculator.

Searches standard component value series (E3 through E96) for
combinations that satisfy a set of bounds, and ranks them by how far
they are from the requested targets.

Example:
    calc = Calculator([E24, E6, E24])
    results = calc.search(
        ConstraintBuilder()
        .bound('R1+R2+R3 <= 1e6')
        .bound('R1+R2+R3 >= 1e4')
        .bound('0.8 * (1 + R1/R3) ~ 6.0')
        .bound('0.8 * (1 + (R1+R2)/R3) ~ 12.0')
        .finish(slot_count=3)
    )
    print(format_best(results))

All math is deterministic: the same inputs give the same ranking.
"""

from rcalc.series import Series, build_series, extend_series, get_series, E3, E6, E12, E24, E48, E96, E_SERIES
from rcalc.candidate import Candidate, MAX_SLOTS, slot_name
from rcalc.expression import Expression
from rcalc.constraints import Comparison, Tolerance, CompiledScore, ConstraintBuilder, parse_constraint, compile_constraints
from rcalc.results import ResultSet
from rcalc.search import Calculator, quantize_error
from rcalc.display import format_value, format_candidate, format_match, format_best
from rcalc.errors import (
    RCalcError,
    ConstraintParseError,
    ExpressionSyntaxError,
    UnboundVariableError,
    SlotLimitError,
    ExpressionEvaluationError,
    SearchCancelled,
)

__version__ = "0.1.0"
