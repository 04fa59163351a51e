"""
Constraint parsing and compilation.

A bound is a line of text ``expr op target``:

    R1 + R2 + R3 <= 1e6          comparison: rejects values that fail it
    0.8 * (1 + R1/R3) ~ 6.0      tolerance: adds |expr - target| to the error

``expr`` is an arithmetic expression over slot variables R1..Rn and
``target`` is a real number. Bounds are parsed one at a time and then
compiled into a single scoring function for ``Calculator.search``.
"""

import logging
import operator
import re
import sys
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from rcalc.candidate import MAX_SLOTS, Candidate
from rcalc.errors import (
    ConstraintParseError,
    ExpressionEvaluationError,
    UnboundVariableError,
)
from rcalc.expression import Expression

logger = logging.getLogger(__name__)

EPSILON = sys.float_info.epsilon

TOLERANCE_OP = '~'

# Detection order: two-character operators before their one-character
# prefixes, tolerance marker last.
OPERATOR_PRECEDENCE = ('<=', '>=', '==', '!=', '<', '>', TOLERANCE_OP)

COMPARATORS: Dict[str, Callable[[float, float], bool]] = {
    '<=': operator.le,
    '>=': operator.ge,
    '<': operator.lt,
    '>': operator.gt,
    '==': lambda a, b: abs(a - b) < EPSILON,
    '!=': lambda a, b: abs(a - b) > EPSILON,
}

_SLOT_VAR = re.compile(r'^R([1-9][0-9]*)$')


@dataclass(frozen=True)
class Comparison:
    """Hard gate: the candidate is rejected unless ``expr op target`` holds."""
    expression: Expression
    op: str
    target: float

    def holds(self, context: Dict[str, float]) -> bool:
        return COMPARATORS[self.op](self.expression.evaluate(context), self.target)


@dataclass(frozen=True)
class Tolerance:
    """Soft bound: contributes |expr - target| to the candidate's error."""
    expression: Expression
    target: float

    def deviation(self, context: Dict[str, float]) -> float:
        return abs(self.target - self.expression.evaluate(context))


Constraint = Union[Comparison, Tolerance]


def parse_constraint(text: str) -> Constraint:
    """
    Parse one bound of the form ``expr op target``.

    The text is split at the first occurrence of the detected operator and
    both sides are trimmed.

    Raises:
        ConstraintParseError: no recognised operator, or either side does
            not parse (ExpressionSyntaxError for the expression side).
    """
    op = next((candidate for candidate in OPERATOR_PRECEDENCE if candidate in text), None)
    if op is None:
        raise ConstraintParseError(
            f"Bound must contain either <, <=, >, >=, ==, != or ~: '{text}'"
        )

    lhs, rhs = text.split(op, 1)
    expression = Expression.parse(lhs)

    target_text = rhs.strip()
    try:
        target = float(target_text)
    except ValueError:
        raise ConstraintParseError(
            f"Expected a real number target after '{op}', got '{target_text}'"
        ) from None

    if op == TOLERANCE_OP:
        return Tolerance(expression, target)
    return Comparison(expression, op, target)


def _slot_index(name: str) -> Optional[int]:
    m = _SLOT_VAR.match(name)
    return int(m.group(1)) if m else None


def _required_slots(constraints: Sequence[Constraint], slot_count: Optional[int]) -> int:
    """Check every referenced name is a slot variable; return the highest index used."""
    highest = 0
    limit = MAX_SLOTS if slot_count is None else min(slot_count, MAX_SLOTS)
    for c in constraints:
        for name in sorted(c.expression.variables):
            idx = _slot_index(name)
            if idx is None or idx > MAX_SLOTS:
                raise UnboundVariableError(
                    f"'{name}' in '{c.expression.text}' is not a slot variable (R1..R{MAX_SLOTS})"
                )
            if idx > limit:
                raise UnboundVariableError(
                    f"'{name}' in '{c.expression.text}' but only {limit} slots are configured"
                )
            highest = max(highest, idx)
    return highest


class CompiledScore:
    """
    Scoring function built from an ordered list of constraints.

    Calling it with a Candidate returns None when any comparison fails,
    otherwise the sum of all tolerance deviations (0.0 when there are none).
    Comparisons are checked before tolerances are summed.

    With ``strict`` false, a candidate whose expressions cannot be evaluated
    (division by zero, domain errors) is rejected and counted in
    ``evaluation_failures``, which counts over every call made to this score.
    With ``strict`` true the error propagates.
    """

    def __init__(self, constraints: Sequence[Constraint], required_slots: int = 0, strict: bool = False):
        self.constraints: Tuple[Constraint, ...] = tuple(constraints)
        self.required_slots = required_slots
        self.strict = strict
        self.evaluation_failures = 0
        self._comparisons = [c for c in self.constraints if isinstance(c, Comparison)]
        self._tolerances = [c for c in self.constraints if isinstance(c, Tolerance)]

    def __call__(self, candidate: Candidate) -> Optional[float]:
        context = candidate.bindings()
        try:
            for cmp in self._comparisons:
                if not cmp.holds(context):
                    return None
            err = 0.0
            for tol in self._tolerances:
                err += tol.deviation(context)
            return err
        except ExpressionEvaluationError:
            if self.strict:
                raise
            self.evaluation_failures += 1
            return None

    def __len__(self) -> int:
        return len(self.constraints)


def compile_constraints(
    constraints: Sequence[Constraint],
    slot_count: Optional[int] = None,
    strict: bool = False,
) -> CompiledScore:
    """
    Compile constraints into one scoring function.

    Args:
        constraints: Parsed constraints, in declaration order
        slot_count: Number of configured slots, if known. References past
            it are rejected here rather than during the search.
        strict: Propagate evaluation errors instead of rejecting the candidate

    Raises:
        UnboundVariableError: a constraint names something other than an
            available slot variable.
    """
    required = _required_slots(constraints, slot_count)
    return CompiledScore(constraints, required_slots=required, strict=strict)


class ConstraintBuilder:
    """
    Fluent builder for scoring functions.

        score = (ConstraintBuilder()
                 .bound('R1+R2+R3 <= 1e6')
                 .bound('0.8 * (1 + R1/R3) ~ 6.0')
                 .finish())
    """

    def __init__(self):
        self._constraints: List[Constraint] = []

    def bound(self, text: str) -> 'ConstraintBuilder':
        """Parse and append a bound. Raises ConstraintParseError on bad input."""
        self._constraints.append(parse_constraint(text))
        return self

    def extend(self, texts: Sequence[str]) -> 'ConstraintBuilder':
        for text in texts:
            self.bound(text)
        return self

    @property
    def constraints(self) -> Tuple[Constraint, ...]:
        return tuple(self._constraints)

    def finish(self, slot_count: Optional[int] = None, strict: bool = False) -> CompiledScore:
        score = compile_constraints(self._constraints, slot_count=slot_count, strict=strict)
        logger.debug('Compiled %d constraints (highest slot R%d)', len(score), score.required_slots)
        return score
