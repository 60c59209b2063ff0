import pytest

from chiton.core.astar import find_min_risk
from chiton.core.bidirectional import (
    BidirectionalSearch,
    Frontier,
    bidirectional_astar,
    bidirectional_dijkstra,
)
from chiton.core.grid import OutOfBoundsError, parse_grid
from chiton.core.types import Point

from conftest import random_case, reference_min_risk

SOLVERS = [find_min_risk, bidirectional_astar, bidirectional_dijkstra]


# =============================================================================
# Fixture answers
# =============================================================================

@pytest.mark.parametrize("solve", [bidirectional_astar, bidirectional_dijkstra])
def test_sample(sample_grid, solve):
    assert solve(sample_grid, (0, 0), (9, 9)) == 40


@pytest.mark.parametrize("solve", [bidirectional_astar, bidirectional_dijkstra])
def test_sample_expanded(sample_grid, solve):
    assert solve(sample_grid.expand(5), (0, 0), (49, 49)) == 315


@pytest.mark.parametrize("solve", [bidirectional_astar, bidirectional_dijkstra])
def test_adjacent_and_identical_endpoints(sample_grid, solve):
    assert solve(sample_grid, (2, 2), (2, 2)) == 0
    assert solve(sample_grid, (0, 0), (0, 1)) == 1
    assert solve(sample_grid, (0, 1), (0, 0)) == 1


# =============================================================================
# Cross-checks against A* and a plain reference
# =============================================================================

@pytest.mark.parametrize("seed", range(60))
def test_random_grids_agree(seed):
    grid, start, end = random_case(seed)
    expected = reference_min_risk(grid, start, end)
    assert [solve(grid, start, end) for solve in SOLVERS] == [expected] * 3


@pytest.mark.parametrize("seed", range(100, 160))
def test_random_walled_grids_agree(seed):
    grid, start, end = random_case(seed, wall_ratio=0.3)
    expected = reference_min_risk(grid, start, end)
    assert [solve(grid, start, end) for solve in SOLVERS] == [expected] * 3


@pytest.mark.parametrize("seed", range(200, 220))
def test_random_grids_with_zero_risk_agree(seed):
    grid, start, end = random_case(seed, wall_ratio=0.1, low=0)
    expected = reference_min_risk(grid, start, end)
    assert [solve(grid, start, end) for solve in SOLVERS] == [expected] * 3


def test_reverse_direction_differs_by_endpoint_risks(sample_grid):
    a, b = Point(1, 8), Point(8, 2)
    there = bidirectional_astar(sample_grid, a, b)
    back = bidirectional_astar(sample_grid, b, a)
    assert there - back == sample_grid.cost_of(b) - sample_grid.cost_of(a)


# =============================================================================
# Unreachable / invalid
# =============================================================================

@pytest.mark.parametrize("solve", [bidirectional_astar, bidirectional_dijkstra])
def test_unreachable_returns_none(walled_grid, solve):
    assert solve(walled_grid, (0, 0), (9, 9)) is None
    assert solve(walled_grid, (9, 9), (0, 0)) is None


def test_boxed_in_start():
    grid = parse_grid("11111\n11111\n11111").with_walls([(0, 1), (1, 0)])
    assert bidirectional_astar(grid, (0, 0), (2, 4)) is None


@pytest.mark.parametrize("solve", [bidirectional_astar, bidirectional_dijkstra])
def test_out_of_bounds(sample_grid, solve):
    with pytest.raises(OutOfBoundsError):
        solve(sample_grid, (0, 0), (0, 10))


# =============================================================================
# Step API / state
# =============================================================================

def test_reset_is_idempotent(sample_grid):
    search = BidirectionalSearch()
    search.init(sample_grid.expand(2), (0, 0), (19, 19))
    cost = search.run()
    popped = search.popped_count
    search.reset()
    assert search.run() == cost
    assert search.popped_count == popped


def test_step_reports_both_frontiers(sample_grid):
    search = BidirectionalSearch()
    search.init(sample_grid, (0, 0), (9, 9))
    res = search.step()
    assert res.status == "running"
    assert res.closed == [Point(0, 0)]
    assert res.closed_back == [Point(9, 9)]
    assert set(res.opened) == {Point(1, 0), Point(0, 1)}
    assert set(res.opened_back) == {Point(8, 9), Point(9, 8)}

    while not res.finished:
        res = search.step()
    assert res.cost == 40
    assert res.metrics["mu"] == 40
    assert search.meeting is not None


def test_plain_variant_has_zero_heuristic(sample_grid):
    plain = BidirectionalSearch(name="Bidirectional Dijkstra", heuristic=False)
    plain.init(sample_grid, (0, 0), (9, 9))
    assert plain.forward.scale == plain.backward.scale == 0
    assert plain.run() == 40
    assert plain.step().metrics["algo"] == "Bidirectional Dijkstra"


def test_frontier_min_cost_skips_closed_and_stale():
    f = Frontier(target=Point(0, 0), scale=0)
    f.push(Point(0, 1), 5)
    f.push(Point(0, 2), 7)
    f.push(Point(0, 1), 3)          # supersedes the 5
    assert f.min_cost() == 3
    assert f.pop() == (3, Point(0, 1))
    assert f.min_cost() == 7
    assert f.pop() == (7, Point(0, 2))
    assert f.pop() is None
    assert f.min_cost() is None
