# chiton/core/grid.py
#!/usr/bin/env python3
"""
Cavern risk grid.

A Grid is a dense, immutable rectangle of single-digit risk levels stored
row-major, plus an optional set of impassable wall cells. Entering a cell
costs its risk; the cell you start on costs nothing.

- parse_grid(text, size=None) -> Grid
- Grid.expand(factor) -> Grid   (tile with wraparound risk escalation)
- check_endpoints(grid, start, end)  (raise before any search work)
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Iterator, Optional, Tuple

from chiton.core.types import Point, STEPS4

MAX_RISK = 9
EXPAND_FACTOR = 5
DIGITS = "0123456789"


# -------------------- errors --------------------

class GridFormatError(ValueError):
    """Text could not be turned into a grid."""


class InvalidSizeError(GridFormatError):
    pass


class InvalidRiskError(GridFormatError):
    def __init__(self, point: Point, char: str):
        self.point = point
        self.char = char
        super().__init__(
            f"invalid risk level {char!r} at row {point.row + 1}, column {point.col + 1}"
        )


class InvalidEndpointError(ValueError):
    """A search endpoint cannot be used on this grid."""


class OutOfBoundsError(InvalidEndpointError):
    def __init__(self, point: Point, size: Point):
        self.point = point
        self.size = size
        super().__init__(f"point {tuple(point)} is outside the {size.row}x{size.col} grid")


# -------------------- grid --------------------

@dataclass(frozen=True)
class Grid:
    height: int
    width: int
    cells: Tuple[int, ...]                   # row-major, height * width
    walls: FrozenSet[Point] = frozenset()

    def __post_init__(self):
        if self.height <= 0 or self.width <= 0:
            raise InvalidSizeError(f"grid must be non-empty, got {self.height}x{self.width}")
        if len(self.cells) != self.height * self.width:
            raise InvalidSizeError(
                f"expected {self.height * self.width} cells, got {len(self.cells)}"
            )

    @property
    def size(self) -> Point:
        return Point(self.height, self.width)

    def in_bounds(self, p: Point) -> bool:
        r, c = p
        return 0 <= r < self.height and 0 <= c < self.width

    def is_block(self, p: Point) -> bool:
        return p in self.walls

    def cost_of(self, p: Point) -> int:
        # Explicit check: a negative index would otherwise wrap silently.
        if not self.in_bounds(p):
            raise IndexError(f"{tuple(p)} outside {self.height}x{self.width} grid")
        r, c = p
        return self.cells[r * self.width + c]

    __getitem__ = cost_of

    def neighbours(self, p: Point) -> Iterator[Tuple[Point, int]]:
        """Yield (neighbour, risk) for the passable 4-connected neighbours of p."""
        r, c = p
        h, w = self.height, self.width
        cells, walls = self.cells, self.walls
        for dr, dc in STEPS4:
            nr, nc = r + dr, c + dc
            if 0 <= nr < h and 0 <= nc < w:
                n = Point(nr, nc)
                if walls and n in walls:
                    continue
                yield n, cells[nr * w + nc]

    def min_risk(self) -> int:
        """Smallest risk among passable cells (scale of the admissible heuristic)."""
        if not self.walls:
            return min(self.cells)
        w = self.width
        risks = [v for i, v in enumerate(self.cells) if Point(i // w, i % w) not in self.walls]
        return min(risks) if risks else 1

    def expand(self, factor: int = EXPAND_FACTOR) -> "Grid":
        """Tile the grid factor x factor times, raising risk by one per tile step (9 wraps to 1)."""
        if factor < 1:
            raise ValueError(f"expand factor must be >= 1, got {factor}")
        h, w = self.height, self.width
        cells = []
        for i in range(h * factor):
            dy, r = divmod(i, h)
            row = self.cells[r * w:(r + 1) * w]
            for dx in range(factor):
                bump = dy + dx
                cells.extend((v - 1 + bump) % MAX_RISK + 1 for v in row)
        walls = frozenset(
            Point(p.row + dy * h, p.col + dx * w)
            for p in self.walls
            for dy in range(factor)
            for dx in range(factor)
        )
        return Grid(h * factor, w * factor, tuple(cells), walls)

    def with_walls(self, points: Iterable[Tuple[int, int]]) -> "Grid":
        walls = set(self.walls)
        for p in points:
            p = Point(*p)
            if not self.in_bounds(p):
                raise OutOfBoundsError(p, self.size)
            walls.add(p)
        return Grid(self.height, self.width, self.cells, frozenset(walls))

    def to_text(self) -> str:
        lines = []
        for r in range(self.height):
            lines.append("".join(
                "#" if Point(r, c) in self.walls else str(self.cells[r * self.width + c])
                for c in range(self.width)
            ))
        return "\n".join(lines)


# -------------------- parsing --------------------

def parse_grid(text: str, size: Optional[Tuple[int, int]] = None) -> Grid:
    """Parse newline-separated rows of risk digits.

    Lines are stripped and leading or trailing blank lines ignored; a blank
    line between rows is a size error. Error rows count lines of the text as
    given. If size=(rows, cols) is given the text must match it exactly;
    otherwise the grid must be rectangular.
    """
    numbered = [(i, line.strip()) for i, line in enumerate(text.splitlines())]
    filled = [i for i, line in numbered if line]
    if filled:
        numbered = numbered[filled[0]:filled[-1] + 1]
    else:
        numbered = []

    cells = []
    for i, line in numbered:
        for c, ch in enumerate(line):
            if ch not in DIGITS:
                raise InvalidRiskError(Point(i, c), ch)
            cells.append(ord(ch) - 48)

    for i, line in numbered:
        if not line:
            raise InvalidSizeError(f"row {i + 1} is blank")

    if size is not None:
        rows, cols = size
        if len(numbered) != rows:
            raise InvalidSizeError(f"expected {rows} rows, got {len(numbered)}")
    else:
        if not numbered:
            raise InvalidSizeError("grid text is empty")
        rows, cols = len(numbered), len(numbered[0][1])

    for i, line in numbered:
        if len(line) != cols:
            raise InvalidSizeError(f"row {i + 1} has {len(line)} columns, expected {cols}")

    return Grid(rows, cols, tuple(cells))


def check_endpoints(grid: Grid, start: Point, end: Point) -> None:
    for p in (start, end):
        if not grid.in_bounds(p):
            raise OutOfBoundsError(p, grid.size)
        if grid.is_block(p):
            raise InvalidEndpointError(f"point {tuple(p)} is a wall")
