"""
Candidate value assignments.

A candidate binds one value to every configured slot. Slots are
referenced externally as R1, R2, ... Rn (1-based).
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

from rcalc.errors import SlotLimitError

# Highest slot index that has a variable name (R1..R100)
MAX_SLOTS = 100

SLOT_NAMES: Tuple[str, ...] = tuple(f'R{i}' for i in range(1, MAX_SLOTS + 1))


def slot_name(idx: int) -> str:
    """Variable name for 1-based slot ``idx``."""
    if not 1 <= idx <= MAX_SLOTS:
        raise SlotLimitError(f'Slot index {idx} outside R1..R{MAX_SLOTS}')
    return SLOT_NAMES[idx - 1]


@dataclass(frozen=True)
class Candidate:
    """One concrete assignment of a value to every slot."""
    values: Tuple[float, ...]

    def value_at(self, idx: int) -> float:
        """Value of R{idx}, counting from R1."""
        if idx < 1 or idx > len(self.values):
            raise IndexError(f'R{idx} not in candidate with {len(self.values)} slots')
        return self.values[idx - 1]

    def sum(self) -> float:
        """Sum of all values. Good for overall bounds on dividers."""
        return sum(self.values)

    def bindings(self) -> Dict[str, float]:
        return dict(zip(SLOT_NAMES, self.values))

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[float]:
        return iter(self.values)
