"""
Combination search over standard value series.

The calculator walks the full cross product of its configured series
(R1 outermost, so R1 varies slowest), scores each candidate and keeps the
accepted ones ranked by quantized error.

All enumeration is single-threaded and deterministic: the same slots and
scoring function always produce the same ResultSet in the same order.
"""

import logging
import math
from itertools import product
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from rcalc.candidate import MAX_SLOTS, Candidate
from rcalc.errors import SearchCancelled, SlotLimitError, UnboundVariableError
from rcalc.results import ResultSet
from rcalc.series import E3, E6, E12, E24, Series

logger = logging.getLogger(__name__)

# Errors are ranked in parts per billion
ERROR_SCALE = 1e9

# Largest quantized error; bigger errors saturate here instead of overflowing
MAX_QUANTIZED_ERROR = 2 ** 64 - 1

ScoreFn = Callable[[Candidate], Optional[float]]


def quantize_error(err: float) -> int:
    """
    Convert a real error into integer parts per billion, rounding half up.

    Errors too large for an unsigned 64-bit count, infinity included,
    saturate at MAX_QUANTIZED_ERROR.
    """
    if math.isnan(err) or err < 0:
        raise ValueError(f'Scoring function returned invalid error {err!r}; must be >= 0')
    scaled = err * ERROR_SCALE + 0.5
    if scaled >= MAX_QUANTIZED_ERROR:
        return MAX_QUANTIZED_ERROR
    return int(math.floor(scaled))


class Calculator:
    """
    Search engine over a list of series, one per slot.

    Example:
        calc = Calculator([E24, E6, E24])
        results = calc.search(score)
    """

    def __init__(self, slots: Sequence[Series]):
        slots = list(slots)
        if len(slots) > MAX_SLOTS:
            raise SlotLimitError(f'{len(slots)} slots requested, at most {MAX_SLOTS} are supported')
        for i, s in enumerate(slots, start=1):
            if not isinstance(s, Series):
                raise TypeError(f'Slot R{i} must be a Series, got {type(s).__name__}')
        self._slots: Tuple[Series, ...] = tuple(slots)

    @classmethod
    def e3(cls, count: int) -> 'Calculator':
        """``count`` slots drawn from E3."""
        return cls([E3] * count)

    @classmethod
    def e6(cls, count: int) -> 'Calculator':
        return cls([E6] * count)

    @classmethod
    def e12(cls, count: int) -> 'Calculator':
        return cls([E12] * count)

    @classmethod
    def e24(cls, count: int) -> 'Calculator':
        return cls([E24] * count)

    @property
    def slots(self) -> Tuple[Series, ...]:
        return self._slots

    def __len__(self) -> int:
        return len(self._slots)

    def combinations(self) -> int:
        """
        Number of candidates a search will evaluate.

        Search time is linear in this number, so it is a useful estimate
        before committing to a large search.
        """
        return math.prod(len(s) for s in self._slots)

    def iter_candidates(self, cancel: Optional[Callable[[], bool]] = None) -> Iterator[Candidate]:
        """
        Lazily yield every candidate, R1 outermost.

        With no slots this yields exactly one empty candidate. ``cancel`` is
        polled once per value of the outermost slot.
        """
        if not self._slots:
            yield Candidate(())
            return

        outer, inner = self._slots[0], self._slots[1:]
        for first in outer:
            if cancel is not None and cancel():
                raise SearchCancelled(f'Search cancelled at R1 = {first}')
            for rest in product(*inner):
                yield Candidate((first,) + rest)

    def search(self, score: ScoreFn, cancel: Optional[Callable[[], bool]] = None) -> Optional[ResultSet]:
        """
        Score every candidate and rank the accepted ones.

        Args:
            score: Maps a Candidate to None (rejected) or an error >= 0.
                Typically a CompiledScore from ConstraintBuilder.finish().
            cancel: Optional callback; returning True stops the search with
                SearchCancelled.

        Returns:
            ResultSet sorted by ascending quantized error, or None if no
            candidate was accepted.
        """
        required = getattr(score, 'required_slots', 0)
        if required > len(self._slots):
            raise UnboundVariableError(
                f'Constraints reference R{required} but only {len(self._slots)} slots are configured'
            )

        logger.info('Searching %d slots, %d combinations', len(self._slots), self.combinations())
        failures_before = getattr(score, 'evaluation_failures', 0)

        accepted: List[Tuple[int, Candidate]] = []
        for candidate in self.iter_candidates(cancel):
            err = score(candidate)
            if err is not None:
                accepted.append((quantize_error(err), candidate))

        failures = getattr(score, 'evaluation_failures', 0) - failures_before
        if failures:
            logger.warning('%d candidates rejected because an expression could not be evaluated', failures)

        logger.info('Accepted %d candidates', len(accepted))
        if not accepted:
            return None

        accepted.sort(key=lambda entry: entry[0])
        return ResultSet(accepted)
