"""Integer id allocation for transactions and catalog entries."""

import time
from typing import Callable, Iterable, Optional


class IdAllocator:
    """
    Hands out millisecond-timestamp ids.

    Ids are strictly increasing within the process and skip any id in
    `taken`, so two records created in the same millisecond (an origin and
    its occurrences, say) never collide.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time
        self._last = 0

    def allocate(self, taken: Iterable[int] = ()) -> int:
        taken_ids = taken if isinstance(taken, (set, frozenset)) else set(taken)

        candidate = int(self._clock() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        while candidate in taken_ids:
            candidate += 1

        self._last = candidate
        return candidate
