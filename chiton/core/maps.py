# chiton/core/maps.py
#!/usr/bin/env python3
"""
Map files → Scenario (grid + endpoints).

Two formats:
- *.txt   raw puzzle input, one row of risk digits per line; start is the
          top-left corner and goal the bottom-right corner.
- *.json  {"rows": [...], "start": [r, c], "goal": [r, c],
           "walls": [[r, c], ...], "expand": n, "name": "..."}
          Only "rows" is required. Endpoints refer to the grid after expansion;
          goal defaults to its bottom-right corner.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple, Union
import json
import logging

from chiton.core.grid import Grid, GridFormatError, parse_grid, check_endpoints
from chiton.core.types import Point

logger = logging.getLogger(__name__)


@dataclass
class Scenario:
    name: str
    grid: Grid
    start: Point
    goal: Point


def corners(grid: Grid) -> Tuple[Point, Point]:
    return Point(0, 0), Point(grid.height - 1, grid.width - 1)


def _point(value: Any, key: str) -> Point:
    if (not isinstance(value, (list, tuple)) or len(value) != 2
            or not all(isinstance(v, int) for v in value)):
        raise GridFormatError(f"{key!r} must be a [row, col] pair of integers, got {value!r}")
    return Point(*value)


def scenario_from_dict(data: Dict[str, Any], name: str = "custom") -> Scenario:
    rows = data.get("rows")
    if not isinstance(rows, list) or not all(isinstance(r, str) for r in rows):
        raise GridFormatError("'rows' must be a list of digit strings")
    grid = parse_grid("\n".join(rows))

    walls = data.get("walls", [])
    if not isinstance(walls, list):
        raise GridFormatError("'walls' must be a list of [row, col] pairs")
    if walls:
        grid = grid.with_walls(_point(w, "walls") for w in walls)

    factor = data.get("expand", 1)
    if not isinstance(factor, int) or factor < 1:
        raise GridFormatError(f"'expand' must be a positive integer, got {factor!r}")
    if factor > 1:
        grid = grid.expand(factor)

    start, goal = corners(grid)
    if "start" in data:
        start = _point(data["start"], "start")
    if "goal" in data:
        goal = _point(data["goal"], "goal")
    check_endpoints(grid, start, goal)
    return Scenario(str(data.get("name", name)), grid, start, goal)


def load_map(path: Union[str, Path]) -> Scenario:
    path = Path(path)
    text = path.read_text()
    if path.suffix == ".json":
        data = json.loads(text)
        if not isinstance(data, dict):
            raise GridFormatError(f"{path.name}: expected a JSON object")
        scenario = scenario_from_dict(data, name=path.stem)
    else:
        grid = parse_grid(text)
        scenario = Scenario(path.stem, grid, *corners(grid))
    logger.info("loaded %s: %dx%d grid, %s -> %s", scenario.name,
                scenario.grid.height, scenario.grid.width,
                tuple(scenario.start), tuple(scenario.goal))
    return scenario
