# src/flowstate/mapgen/fallback.py
# Hard-coded layout used when every generation attempt failed. The three
# paths are fixed, so the level is solvable by construction; only the tile
# flavour (diodes, filler) and the scramble still come from the seed.

from typing import Tuple

from ..config import DEFAULT_CONFIG, GeneratorConfig
from ..engine.flow import calculate_flow
from ..grid import Grid, GridPos
from ..rng import SeededRng
from ..tiles import TileType
from .carve import place_terminal, render_merge, render_segment
from .fill import fill_empty, scramble
from .solution import Solution


def fallback_paths(n: int):
    merge = GridPos(3, 3)
    path_a = [GridPos(2, c) for c in range(4)] + [merge]
    path_b = [GridPos(n - 3, c) for c in range(4)] + [GridPos(r, 3) for r in range(n - 4, 2, -1)]
    path_c = [GridPos(3, c) for c in range(3, n)]
    return path_a, path_b, path_c


def build_fallback(rng: SeededRng, config: GeneratorConfig = DEFAULT_CONFIG) -> Tuple[Grid, Solution]:
    n = config.size
    grid = Grid.empty(n)
    path_a, path_b, path_c = fallback_paths(n)

    place_terminal(grid, path_a[0], TileType.SOURCE, path_a[1])
    place_terminal(grid, path_b[0], TileType.SOURCE, path_b[1])
    place_terminal(grid, path_c[-1], TileType.SINK, path_c[-2])
    for path in (path_a, path_b, path_c):
        render_segment(grid, path, rng, config)
    render_merge(grid, path_c[0], path_a, path_b, path_c)

    fill_empty(rng, grid, config)
    solution = Solution.capture(grid)
    scramble(rng, grid)
    return calculate_flow(grid, delay_step=config.flow_delay_step), solution
