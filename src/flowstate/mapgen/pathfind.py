# src/flowstate/mapgen/pathfind.py
# Randomized best-first search through empty cells. Jittered priorities keep
# paths varied between seeds; the slack bound lets them wind a little.

import heapq
from typing import List, Optional, Set

from ..grid import Grid, GridPos
from ..rng import SeededRng
from ..tiles import TileType, step

Path = List[GridPos]

MAX_ITERATIONS = 600
SLACK = 6


def manhattan(a: GridPos, b: GridPos) -> int:
    return abs(a.r - b.r) + abs(a.c - b.c)


def find_path(
    rng: SeededRng,
    start: GridPos,
    end: GridPos,
    grid: Grid,
    forbidden: Set[GridPos],
    *,
    max_iterations: int = MAX_ITERATIONS,
    slack: int = SLACK,
) -> Optional[Path]:
    """
    Return a start..end path (both included) or None.
    - Expands only into EMPTY cells or `end` itself.
    - Cells in `forbidden` are never entered, except `end`.
    - A step may move at most `slack` farther from `end` than its parent.
    - Running out of `max_iterations` expansions is a normal None outcome.
    """
    counter = 0  # heap tie-break, keeps ordering independent of GridPos compare
    heap = [(manhattan(start, end) + _jitter(rng), counter, start, [start])]
    visited = set(forbidden)
    visited.add(start)

    iterations = 0
    while heap and iterations < max_iterations:
        iterations += 1
        _, _, pos, path = heapq.heappop(heap)
        if pos == end:
            return path

        dirs = [0, 1, 2, 3]
        rng.shuffle(dirs)
        here = manhattan(pos, end)
        for d in dirs:
            nr, nc = step(pos.r, pos.c, d)
            if not grid.in_bounds(nr, nc):
                continue
            nxt = GridPos(nr, nc)
            if nxt != end:
                if nxt in visited:
                    continue
                if grid.get(nr, nc).type != TileType.EMPTY:
                    continue
            elif nxt in path:
                continue
            dist = manhattan(nxt, end)
            if dist > here + slack:
                continue
            visited.add(nxt)
            counter += 1
            heapq.heappush(heap, (dist + _jitter(rng), counter, nxt, path + [nxt]))
    return None


def _jitter(rng: SeededRng) -> float:
    # symmetric perturbation in [-1, 1)
    return rng.next() * 2 - 1
