"""
Candidate points and the priority queue that orders them.

A candidate is the worst-approximated raster sample found while scanning one
triangle. Candidates are never removed from the queue once pushed; the driver
recognises stale ones when they are popped.
"""

import heapq
import itertools
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass
class Candidate:
    """Best sample found so far in one scan of a triangle."""
    x: int = 0
    y: int = 0
    z: float = 0.0
    importance: float = -math.inf
    token: int = 0
    triangle: int = -1
    generation: int = 0
    edge: bool = False

    def consider(self, x: int, y: int, z: float, diff: float) -> None:
        """Keep the sample if its deviation is strictly greater than the current one."""
        if diff > self.importance:
            self.x = x
            self.y = y
            self.z = z
            self.importance = diff

    @property
    def found(self) -> bool:
        """True once at least one sample has been considered."""
        return self.importance != -math.inf


class CandidateQueue:
    """
    Max-priority queue of candidates keyed by importance.

    Equal importances pop in token order, oldest first.
    """

    def __init__(self):
        self._heap: List[Tuple[float, int, int, Candidate]] = []
        self._sequence = itertools.count()

    def push(self, candidate: Candidate) -> None:
        heapq.heappush(self._heap, (-candidate.importance, candidate.token, next(self._sequence), candidate))

    def pop_max(self) -> Candidate:
        """
        Remove and return the candidate with the greatest importance.

        Raises:
            IndexError: If the queue is empty
        """
        if not self._heap:
            raise IndexError("pop from an empty candidate queue")
        return heapq.heappop(self._heap)[3]

    def peek_max(self) -> Optional[Candidate]:
        return self._heap[0][3] if self._heap else None

    def clear(self) -> None:
        self._heap.clear()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
