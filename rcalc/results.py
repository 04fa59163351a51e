"""Ranked search results."""

from typing import Iterator, List, Sequence, Tuple

import numpy as np

from rcalc.candidate import Candidate

Entry = Tuple[int, Candidate]


class ResultSet:
    """
    Accepted candidates from one search, lowest error first.

    Each entry is ``(quantized_error, candidate)`` where the quantized error
    is the real error in parts per billion. Entries with equal quantized
    error are ties and have no meaningful relative order.
    """

    def __init__(self, entries: Sequence[Entry]):
        if not entries:
            raise ValueError('ResultSet requires at least one entry')
        self._entries: Tuple[Entry, ...] = tuple(entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, idx):
        return self._entries[idx]

    @property
    def best_error(self) -> int:
        return self._entries[0][0]

    def best(self) -> List[Entry]:
        """All entries sharing the lowest quantized error."""
        best = self.best_error
        out = []
        for entry in self._entries:
            if entry[0] != best:
                break
            out.append(entry)
        return out

    def top(self, n: int) -> List[Entry]:
        return list(self._entries[:n])

    def errors(self) -> np.ndarray:
        """Quantized errors in result order."""
        return np.fromiter((e for e, _ in self._entries), dtype=np.uint64, count=len(self._entries))
