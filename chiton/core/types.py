# chiton/core/types.py
#!/usr/bin/env python3
from dataclasses import dataclass, field
from typing import List, Tuple, Optional, Dict, Any, NamedTuple


class Point(NamedTuple):
    row: int
    col: int

    def offset(self, dr: int, dc: int) -> "Point":
        return Point(self.row + dr, self.col + dc)


# up, down, left, right
STEPS4: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


def manhattan(a: Point, b: Point) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


@dataclass
class StepResult:
    status: str                   # "idle" | "running" | "done" | "no_path"
    opened: List[Point] = field(default_factory=list)
    closed: List[Point] = field(default_factory=list)
    opened_back: List[Point] = field(default_factory=list)   # backward frontier (bidirectional only)
    closed_back: List[Point] = field(default_factory=list)
    current: Optional[Point] = None
    cost: Optional[int] = None
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def finished(self) -> bool:
        return self.status in ("done", "no_path")
