import heapq
import random
from pathlib import Path

import pytest

from chiton.core.grid import Grid, parse_grid
from chiton.core.types import Point

SAMPLE = """\
1163751742
1381373672
2136511328
3694931569
7463417111
1319128137
1359912421
3125421639
1293138521
2311944581
"""

MAP_DIR = Path(__file__).resolve().parents[1] / "chiton" / "maps"


@pytest.fixture
def sample_text():
    return SAMPLE


@pytest.fixture
def sample_grid():
    return parse_grid(SAMPLE)


@pytest.fixture
def walled_grid(sample_grid):
    """Sample grid split in two by a full-height wall on column 5."""
    return sample_grid.with_walls((r, 5) for r in range(sample_grid.height))


def reference_min_risk(grid: Grid, start, end):
    """Plain Dijkstra with no early exit, used as ground truth."""
    start, end = Point(*start), Point(*end)
    dist = {start: 0}
    pq = [(0, start)]
    while pq:
        d, u = heapq.heappop(pq)
        if d > dist[u]:
            continue
        for v, risk in grid.neighbours(u):
            if d + risk < dist.get(v, float("inf")):
                dist[v] = d + risk
                heapq.heappush(pq, (d + risk, v))
    return dist.get(end)


def random_case(seed: int, wall_ratio: float = 0.0, low: int = 1, high: int = 9):
    """Random grid plus two passable endpoints."""
    rng = random.Random(seed)
    h, w = rng.randint(1, 12), rng.randint(1, 12)
    grid = Grid(h, w, tuple(rng.randint(low, high) for _ in range(h * w)))
    start = Point(rng.randrange(h), rng.randrange(w))
    end = Point(rng.randrange(h), rng.randrange(w))
    walls = [
        Point(r, c) for r in range(h) for c in range(w)
        if rng.random() < wall_ratio and Point(r, c) not in (start, end)
    ]
    return grid.with_walls(walls), start, end
