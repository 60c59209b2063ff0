# chiton/app/cli.py
#!/usr/bin/env python3
"""
Chiton driver: read a risk grid and report the lowest total risk.

    chiton INPUT [--size ROWS COLS] [--start R,C] [--end R,C]
                 [--factor N] [--algo astar|bidirectional|dijkstra]
                 [--log-level LEVEL] [--view]

Part 1: A* on the grid as given (corners unless --start/--end).
Part 2: the grid tiled --factor times each way, corner to corner, with --algo.

Config:
- ENV: CHITON_LOG_LEVEL=DEBUG|INFO|WARNING|...   (CLI: --log-level)
- ENV: CHITON_ALGO=astar|bidirectional|dijkstra  (CLI: --algo)
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from chiton.core.astar import find_min_risk
from chiton.core.bidirectional import bidirectional_astar, bidirectional_dijkstra
from chiton.core.grid import EXPAND_FACTOR, Grid, GridFormatError, InvalidEndpointError, parse_grid
from chiton.core.maps import Scenario, corners
from chiton.core.types import Point

logger = logging.getLogger(__name__)

SOLVERS: Dict[str, Callable[[Grid, Point, Point], Optional[int]]] = {
    "astar": find_min_risk,
    "bidirectional": bidirectional_astar,
    "dijkstra": bidirectional_dijkstra,
}
DEFAULT_ALGO = "bidirectional"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def resolve_log_level() -> str:
    return os.getenv("CHITON_LOG_LEVEL", "WARNING").upper()


def resolve_algo() -> str:
    algo = os.getenv("CHITON_ALGO", DEFAULT_ALGO).lower()
    return algo if algo in SOLVERS else DEFAULT_ALGO


def setup_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING),
                        format=LOG_FORMAT, force=True)


def parse_point(text: str) -> Point:
    try:
        r, c = (int(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid point {text!r}, expected ROW,COL")
    return Point(r, c)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chiton", description="Lowest total risk through a cavern risk grid")
    parser.add_argument("input", type=Path, help="grid file: one row of risk digits per line")
    parser.add_argument("--size", nargs=2, type=int, metavar=("ROWS", "COLS"),
                        help="declared grid size; inferred from the file when omitted")
    parser.add_argument("--start", type=parse_point, help="part 1 start as ROW,COL (default 0,0)")
    parser.add_argument("--end", type=parse_point, help="part 1 end as ROW,COL (default bottom-right)")
    parser.add_argument("--factor", type=int, default=EXPAND_FACTOR, help="part 2 tiling factor")
    parser.add_argument("--algo", choices=sorted(SOLVERS), default=resolve_algo(),
                        help="part 2 search algorithm")
    parser.add_argument("--log-level", default=resolve_log_level(), help="logging level")
    parser.add_argument("--view", action="store_true", help="open the search viewer instead of printing answers")
    return parser


def report(part: int, answer: Optional[int]) -> None:
    if answer is None:
        print(f"[Part {part}] Could not find any path connecting the endpoints.")
    else:
        print(f"[Part {part}] The lowest total risk possible is {answer}.")


def solve(grid: Grid, start: Point, end: Point, factor: int, algo: str) -> Tuple[Optional[int], Optional[int]]:
    part1 = find_min_risk(grid, start, end)
    logger.info("part 1 (A*): %s", part1)

    big = grid.expand(factor)
    part2 = SOLVERS[algo](big, *corners(big))
    logger.info("part 2 (%s on %dx%d): %s", algo, big.height, big.width, part2)
    return part1, part2


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        text = args.input.read_text()
    except OSError as e:
        print(f"Error reading file \"{args.input}\"! : {e}", file=sys.stderr)
        return 1

    try:
        grid = parse_grid(text, tuple(args.size) if args.size else None)
    except GridFormatError as e:
        print(f"Error parsing cavern! : {e}", file=sys.stderr)
        return 1

    default_start, default_end = corners(grid)
    start = args.start or default_start
    end = args.end or default_end

    if args.factor < 1:
        print(f"Error: --factor must be >= 1, got {args.factor}", file=sys.stderr)
        return 1

    try:
        if args.view:
            from chiton.app.viewer import Viewer
            Viewer(Scenario(args.input.stem, grid, start, end)).run()
            return 0
        part1, part2 = solve(grid, start, end, args.factor, args.algo)
    except InvalidEndpointError as e:
        print(f"Error: one or more endpoints not usable: {e}", file=sys.stderr)
        return 1

    report(1, part1)
    report(2, part2)
    return 0


if __name__ == "__main__":
    sys.exit(main())
