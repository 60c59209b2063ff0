import pytest

from chiton.core.astar import AStarSearch, find_min_risk
from chiton.core.grid import InvalidEndpointError, OutOfBoundsError, parse_grid
from chiton.core.types import Point


def test_sample_corners(sample_grid):
    assert find_min_risk(sample_grid, (0, 0), (9, 9)) == 40


def test_sample_expanded_corners(sample_grid):
    big = sample_grid.expand(5)
    assert find_min_risk(big, (0, 0), (49, 49)) == 315


def test_start_risk_not_counted():
    grid = parse_grid("9\n1")
    assert find_min_risk(grid, (0, 0), (1, 0)) == 1
    assert find_min_risk(grid, (1, 0), (0, 0)) == 9


def test_prefers_cheaper_detour():
    grid = parse_grid("19\n11")
    assert find_min_risk(grid, (0, 0), (1, 1)) == 2
    assert find_min_risk(grid, (0, 1), (1, 0)) == 2


def test_start_equals_end_is_zero(sample_grid):
    search = AStarSearch()
    search.init(sample_grid, (4, 4), (4, 4))
    assert search.run() == 0
    assert search.popped_count == 0


def test_unreachable_returns_none(walled_grid):
    assert find_min_risk(walled_grid, (0, 0), (9, 9)) is None


def test_walls_force_longer_route():
    grid = parse_grid("111\n111\n111").with_walls([(0, 1), (1, 1)])
    assert find_min_risk(grid, (0, 0), (0, 2)) == 6


@pytest.mark.parametrize("start, end", [((0, 0), (10, 10)), ((-1, 0), (9, 9)), ((0, 10), (0, 0))])
def test_out_of_bounds_rejected_before_search(sample_grid, start, end):
    search = AStarSearch()
    with pytest.raises(OutOfBoundsError):
        search.init(sample_grid, start, end)
    assert search.grid is None


def test_wall_endpoint_rejected(walled_grid):
    with pytest.raises(InvalidEndpointError):
        find_min_risk(walled_grid, (0, 0), (3, 5))


def test_repeated_calls_are_idempotent(sample_grid):
    first = find_min_risk(sample_grid, (0, 0), (9, 9))
    assert find_min_risk(sample_grid, (0, 0), (9, 9)) == first

    search = AStarSearch()
    search.init(sample_grid, (9, 0), (0, 9))
    cost = search.run()
    popped = search.popped_count
    search.reset()
    assert search.run() == cost
    assert search.popped_count == popped


def test_step_api(sample_grid):
    search = AStarSearch()
    assert search.step().status == "idle"
    with pytest.raises(RuntimeError):
        search.run()

    search.init(sample_grid, (0, 0), (9, 9))
    first = search.step()
    assert first.status == "running"
    assert first.closed == [Point(0, 0)]
    assert set(first.opened) == {Point(1, 0), Point(0, 1)}

    res = first
    while not res.finished:
        res = search.step()
    assert res.status == "done"
    assert res.cost == 40
    assert res.metrics["total_cost"] == 40
    # finished searches keep reporting their result
    assert search.step().cost == 40


def test_no_path_step_status(walled_grid):
    search = AStarSearch()
    search.init(walled_grid, (0, 0), (9, 9))
    assert search.run() is None
    assert search.step().status == "no_path"
    assert search.closed_set and Point(0, 6) not in search.closed_set
