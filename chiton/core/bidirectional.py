# chiton/core/bidirectional.py
#!/usr/bin/env python3
"""
Bidirectional minimum-risk search (meet in the middle).

Two frontiers run at once: forward from the start toward the goal and
backward from the goal toward the start. Each step expands one node on each
side. The backward side is seeded with the goal's own risk, so a point p
reached by both sides lies on a complete path of risk

    forward[p] + backward[p] - risk(p)

and `mu` keeps the cheapest such path seen so far.

Stopping rules (any one ends the search with `mu`):
- one frontier has no open nodes left;
- min open cost forward + min open cost backward > mu;
- heuristic variant only: the smallest open forward estimate is >= mu, or the
  smallest open backward estimate is >= mu + risk(start) (backward labels
  include the start's risk once they reach it).

A node is always expanded on its own side even if the other side has already
settled it; only the stopping rules above end the search.

heuristic=False gives the plain-cost variant (bidirectional Dijkstra).
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import heapq
import logging

from chiton.core.grid import Grid, check_endpoints
from chiton.core.types import Point, StepResult, manhattan

logger = logging.getLogger(__name__)


@dataclass
class Frontier:
    """One direction of the search: its queues, distance table and closed set."""
    target: Point
    scale: int
    open_pq: List[Tuple[int, int, Point]] = field(default_factory=list)   # (f, g, point)
    by_cost: List[Tuple[int, Point]] = field(default_factory=list)        # (g, point), lazy
    g: Dict[Point, int] = field(default_factory=dict)
    open_set: set = field(default_factory=set)
    closed_set: set = field(default_factory=set)

    def h(self, p: Point) -> int:
        return self.scale * manhattan(p, self.target)

    def push(self, p: Point, cost: int) -> bool:
        """Record a strictly better label for p. Returns True if p is newly opened."""
        self.g[p] = cost
        heapq.heappush(self.open_pq, (cost + self.h(p), cost, p))
        heapq.heappush(self.by_cost, (cost, p))
        if p in self.closed_set or p in self.open_set:
            return False
        self.open_set.add(p)
        return True

    def pop(self) -> Optional[Tuple[int, Point]]:
        """Pop and close the best fresh entry, skipping stale ones."""
        while self.open_pq:
            _, cost, p = heapq.heappop(self.open_pq)
            if cost > self.g[p] or p in self.closed_set:
                continue
            self.open_set.discard(p)
            self.closed_set.add(p)
            return cost, p
        return None

    def min_cost(self) -> Optional[int]:
        """Smallest accumulated cost among open nodes, or None if none are open."""
        q = self.by_cost
        while q:
            cost, p = q[0]
            if p in self.closed_set or cost > self.g[p]:
                heapq.heappop(q)
                continue
            return cost
        return None

    def min_estimate(self) -> int:
        # May include stale entries; those only make the bound more conservative.
        return self.open_pq[0][0]


@dataclass
class BidirectionalSearch:
    name: str = "Bidirectional A*"
    heuristic: bool = True

    grid: Optional[Grid] = None
    start: Optional[Point] = None
    goal: Optional[Point] = None
    forward: Optional[Frontier] = None
    backward: Optional[Frontier] = None
    mu: Optional[int] = None
    meeting: Optional[Point] = None
    popped_count: int = 0
    done: bool = False
    no_path: bool = False
    cost: Optional[int] = None

    # -------------------- lifecycle --------------------

    def init(self, grid: Grid, start: Tuple[int, int], goal: Tuple[int, int]) -> None:
        start, goal = Point(*start), Point(*goal)
        check_endpoints(grid, start, goal)
        self.grid, self.start, self.goal = grid, start, goal
        self.reset()

    def reset(self) -> None:
        if self.grid is None:
            return
        scale = self.grid.min_risk() if self.heuristic else 0
        self.forward = Frontier(target=self.goal, scale=scale)
        self.backward = Frontier(target=self.start, scale=scale)
        self.mu = None
        self.meeting = None
        self.popped_count = 0
        self.done = False
        self.no_path = False
        self.cost = None

        if self.start == self.goal:
            self.done = True
            self.cost = 0
            return
        self.forward.push(self.start, 0)
        self.backward.push(self.goal, self.grid.cost_of(self.goal))

    # -------------------- helpers --------------------

    def _should_stop(self) -> bool:
        f_min = self.forward.min_cost()
        b_min = self.backward.min_cost()
        if f_min is None or b_min is None:
            return True
        if self.mu is None:
            return False
        if f_min + b_min > self.mu:
            return True
        if not self.heuristic:
            return False
        return (self.forward.min_estimate() >= self.mu
                or self.backward.min_estimate() >= self.mu + self.grid.cost_of(self.start))

    def _expand(self, side: Frontier, other: Frontier) -> Tuple[Optional[Point], List[Point]]:
        popped = side.pop()
        if popped is None:
            return None, []
        g_u, u = popped
        self.popped_count += 1

        opened: List[Point] = []
        for p, risk in self.grid.neighbours(u):
            alt = g_u + risk
            if alt >= side.g.get(p, alt + 1):
                continue
            if side.push(p, alt):
                opened.append(p)
            g_other = other.g.get(p)
            if g_other is not None:
                candidate = alt + g_other - risk
                if self.mu is None or candidate < self.mu:
                    self.mu = candidate
                    self.meeting = p
        return u, opened

    def _finish(self) -> StepResult:
        if self.mu is None:
            self.no_path = True
            logger.debug("%s: frontiers never met after %d expansions", self.name, self.popped_count)
            return StepResult(status="no_path", metrics=self._metrics())
        self.done = True
        self.cost = self.mu
        logger.debug("%s: risk %d via %s after %d expansions",
                     self.name, self.mu, tuple(self.meeting), self.popped_count)
        return StepResult(status="done", cost=self.cost, current=self.meeting,
                          metrics=self._metrics())

    # -------------------- main stepping logic --------------------

    def step(self) -> StepResult:
        """Expand one node forward, then one node backward."""
        if self.grid is None:
            return StepResult(status="idle", metrics={"algo": self.name})

        if self.done:
            return StepResult(status="done", cost=self.cost, current=self.meeting,
                              metrics=self._metrics())

        if self.no_path:
            return StepResult(status="no_path", metrics=self._metrics())

        if self._should_stop():
            return self._finish()

        u, opened = self._expand(self.forward, self.backward)
        v, opened_back = self._expand(self.backward, self.forward)

        return StepResult(
            status="running",
            opened=opened,
            closed=[u] if u is not None else [],
            opened_back=opened_back,
            closed_back=[v] if v is not None else [],
            current=u if u is not None else v,
            metrics=self._metrics(),
        )

    def run(self) -> Optional[int]:
        while True:
            res = self.step()
            if res.status == "idle":
                raise RuntimeError(f"{self.name}: init() must be called before run()")
            if res.finished:
                return self.cost

    # -------------------- metrics --------------------

    def _metrics(self) -> dict:
        fwd, bwd = self.forward, self.backward
        return {
            "algo": self.name,
            "popped": self.popped_count,
            "open_size": len(fwd.open_set) + len(bwd.open_set) if fwd else 0,
            "closed_count": len(fwd.closed_set) + len(bwd.closed_set) if fwd else 0,
            "mu": self.mu,
            "meeting": self.meeting,
            "total_cost": self.cost,
        }


def bidirectional_astar(grid: Grid, start: Tuple[int, int], end: Tuple[int, int]) -> Optional[int]:
    search = BidirectionalSearch()
    search.init(grid, start, end)
    return search.run()


def bidirectional_dijkstra(grid: Grid, start: Tuple[int, int], end: Tuple[int, int]) -> Optional[int]:
    search = BidirectionalSearch(name="Bidirectional Dijkstra", heuristic=False)
    search.init(grid, start, end)
    return search.run()
