# src/flowstate/mapgen/fill.py
from ..config import DEFAULT_CONFIG, GeneratorConfig
from ..grid import Grid, TileState
from ..rng import SeededRng
from ..tiles import TileType


def pick_filler(rng: SeededRng, config: GeneratorConfig = DEFAULT_CONFIG) -> TileType:
    total = sum(w for _, w in config.fill_weights)
    roll = rng.next() * total
    for name, weight in config.fill_weights:
        if roll < weight:
            return TileType(name)
        roll -= weight
    return TileType(config.fill_weights[-1][0])


def fill_empty(rng: SeededRng, grid: Grid, config: GeneratorConfig = DEFAULT_CONFIG) -> int:
    """Replace every EMPTY cell with a decorative connectable tile. Returns the count."""
    n = 0
    for i, tile in enumerate(grid.buf):
        if tile.type == TileType.EMPTY:
            grid.buf[i] = TileState(type=pick_filler(rng, config), rotation=rng.range(0, 3))
            n += 1
    return n


def scramble(rng: SeededRng, grid: Grid) -> None:
    # Only rotatable tiles move; fixed anchors, merge and locks keep their solution pose.
    for tile in grid.buf:
        if not tile.fixed:
            tile.rotation = rng.range(0, 3)
