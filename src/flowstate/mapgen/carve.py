# src/flowstate/mapgen/carve.py
# Turn abstract paths into concrete, correctly rotated pipe tiles.
# All rotations written here are the solution rotations.

from typing import List

from ..config import DEFAULT_CONFIG, GeneratorConfig
from ..grid import Grid, GridPos, TileState
from ..rng import SeededRng
from ..tiles import TileType, direction_between, opposite, orient
from .pathfind import Path


def render_segment(grid: Grid, path: Path, rng: SeededRng,
                   config: GeneratorConfig = DEFAULT_CONFIG) -> None:
    """Render the interior cells of `path`; endpoints are left untouched."""
    for i in range(1, len(path) - 1):
        prev, cur, nxt = path[i - 1], path[i], path[i + 1]
        if grid.at(cur).type != TileType.EMPTY:
            continue
        dir_in = direction_between(prev, cur)
        dir_out = direction_between(cur, nxt)
        if dir_in == dir_out:
            if rng.next() < config.diode_chance:
                # valve points along the direction of travel
                grid.set(cur.r, cur.c, TileState(type=TileType.DIODE, rotation=dir_out))
            else:
                grid.set(cur.r, cur.c, TileState(
                    type=TileType.STRAIGHT,
                    rotation=orient(TileType.STRAIGHT, (dir_in, opposite(dir_in))),
                ))
        else:
            entry_side = opposite(dir_in)
            grid.set(cur.r, cur.c, TileState(
                type=TileType.ELBOW,
                rotation=orient(TileType.ELBOW, (entry_side, dir_out)),
            ))


def render_merge(grid: Grid, merge: GridPos, path_a: Path, path_b: Path, path_c: Path) -> None:
    """
    The merge cell joins both source branches and the sink-bound path.
    Three distinct sides -> TEE; a repeated side -> CROSS. Always fixed.
    """
    wanted: List[int] = []
    for side in (
        direction_between(merge, path_a[-2]),
        direction_between(merge, path_b[-2]),
        direction_between(merge, path_c[1]),
    ):
        if side not in wanted:
            wanted.append(side)
    tile = grid.at(merge)
    if len(wanted) == 3:
        tile.type = TileType.TEE
        tile.rotation = orient(TileType.TEE, wanted)
    else:
        tile.type = TileType.CROSS
        tile.rotation = 0
    tile.fixed = True


def place_terminal(grid: Grid, pos: GridPos, tile_type: TileType, neighbour: GridPos) -> None:
    """Place a fixed SOURCE or SINK opening toward its path neighbour."""
    grid.set(pos.r, pos.c, TileState(
        type=tile_type,
        rotation=orient(tile_type, (direction_between(pos, neighbour),)),
        fixed=True,
    ))
