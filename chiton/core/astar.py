# chiton/core/astar.py
#!/usr/bin/env python3
"""
A* minimum-risk search, one expansion per step() so the viewer can animate it.

Algorithm API shared with the bidirectional search:
- init(grid, start, goal) - reset() - step() -> StepResult - run() -> cost

Heuristic:
- Manhattan distance to the goal, scaled by the grid's minimum passable risk.
  Every step costs at least that much, so h never overestimates and never
  drops by more than one step's cost (admissible and consistent).

Frontier order: (estimate, cost, point). Lower estimate first, then the
cheaper accumulated cost among equally promising entries.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple, List, Optional
import heapq
import logging

from chiton.core.grid import Grid, check_endpoints
from chiton.core.types import Point, StepResult, manhattan

logger = logging.getLogger(__name__)


@dataclass
class AStarSearch:
    name: str = "A*"

    # Internal state
    grid: Optional[Grid] = None
    start: Optional[Point] = None
    goal: Optional[Point] = None
    open_pq: List[Tuple[int, int, Point]] = field(default_factory=list)  # (f, g, point)
    open_set: set = field(default_factory=set)         # for overlay
    closed_set: set = field(default_factory=set)
    g: Dict[Point, int] = field(default_factory=dict)
    popped_count: int = 0
    done: bool = False
    no_path: bool = False
    cost: Optional[int] = None
    scale: int = 1

    # -------------------- lifecycle --------------------

    def init(self, grid: Grid, start: Tuple[int, int], goal: Tuple[int, int]) -> None:
        """Bind to a grid and endpoints; raises before any search work if they are invalid."""
        start, goal = Point(*start), Point(*goal)
        check_endpoints(grid, start, goal)
        self.grid, self.start, self.goal = grid, start, goal
        self.scale = grid.min_risk()
        self.reset()

    def reset(self) -> None:
        """Clear all state and seed with the start node."""
        if self.grid is None:
            return
        self.open_pq.clear()
        self.open_set.clear()
        self.closed_set.clear()
        self.g.clear()
        self.popped_count = 0
        self.done = False
        self.no_path = False
        self.cost = None

        s = self.start
        if s == self.goal:
            self.done = True
            self.cost = 0
            return
        self.g[s] = 0
        heapq.heappush(self.open_pq, (self._h(s), 0, s))
        self.open_set.add(s)

    def _h(self, p: Point) -> int:
        return self.scale * manhattan(p, self.goal)

    # -------------------- main stepping logic --------------------

    def step(self) -> StepResult:
        """
        Run ONE A* expansion step:
          - Pop the lowest-estimate entry; skip it if a cheaper path already superseded it.
          - If it is the goal, its cost is optimal: finish.
          - Else relax its neighbours with edge cost = risk(neighbour).
        """
        if self.grid is None:
            return StepResult(status="idle", metrics={"algo": self.name})

        if self.done:
            return StepResult(status="done", cost=self.cost, metrics=self._metrics())

        if self.no_path:
            return StepResult(status="no_path", metrics=self._metrics())

        if not self.open_pq:
            self.no_path = True
            logger.debug("%s: frontier exhausted after %d expansions", self.name, self.popped_count)
            return StepResult(status="no_path", metrics=self._metrics())

        _, g_u, u = heapq.heappop(self.open_pq)

        # Ignore stale pops
        if g_u > self.g[u]:
            return StepResult(status="running", current=u, metrics=self._metrics())

        self.popped_count += 1
        self.open_set.discard(u)
        self.closed_set.add(u)

        if u == self.goal:
            self.done = True
            self.cost = g_u
            logger.debug("%s: reached %s with risk %d after %d expansions",
                         self.name, tuple(u), g_u, self.popped_count)
            return StepResult(status="done", closed=[u], current=u, cost=g_u,
                              metrics=self._metrics())

        opened_now: List[Point] = []
        for v, risk in self.grid.neighbours(u):
            alt = g_u + risk
            if alt < self.g.get(v, alt + 1):
                self.g[v] = alt
                heapq.heappush(self.open_pq, (alt + self._h(v), alt, v))
                if v not in self.closed_set and v not in self.open_set:
                    self.open_set.add(v)
                    opened_now.append(v)

        return StepResult(status="running", opened=opened_now, closed=[u], current=u,
                          metrics=self._metrics())

    def run(self) -> Optional[int]:
        """Step until finished; return the minimum total risk or None if unreachable."""
        while True:
            res = self.step()
            if res.status == "idle":
                raise RuntimeError(f"{self.name}: init() must be called before run()")
            if res.finished:
                return self.cost

    # -------------------- metrics --------------------

    def _metrics(self) -> dict:
        return {
            "algo": self.name,
            "popped": self.popped_count,
            "open_size": len(self.open_set),
            "closed_count": len(self.closed_set),
            "total_cost": self.cost,
        }


def find_min_risk(grid: Grid, start: Tuple[int, int], end: Tuple[int, int]) -> Optional[int]:
    """Minimum total risk from start to end (start's own risk excluded), or None if unreachable."""
    search = AStarSearch()
    search.init(grid, start, end)
    return search.run()
