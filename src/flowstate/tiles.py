# Tile vocabulary and the connection model.
# Masks are [up, right, down, left] at rotation 0; rotation r turns the tile
# clockwise r quarter turns, so "up" becomes "right" at r=1.

from enum import Enum
from typing import Iterable, List, Tuple

UP, RIGHT, DOWN, LEFT = 0, 1, 2, 3

# (dr, dc) per direction index
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((-1, 0), (0, 1), (1, 0), (0, -1))


class TileType(str, Enum):
    EMPTY = "EMPTY"
    STRAIGHT = "STRAIGHT"
    ELBOW = "ELBOW"
    TEE = "TEE"
    CROSS = "CROSS"
    BRIDGE = "BRIDGE"   # overpass: all four sides open, axes kept apart
    SOURCE = "SOURCE"
    SINK = "SINK"
    BLOCK = "BLOCK"
    DIODE = "DIODE"     # one-way valve along its rotation


class NodeStatus(str, Enum):
    NORMAL = "NORMAL"
    REQUIRED = "REQUIRED"
    FORBIDDEN = "FORBIDDEN"
    LOCKED = "LOCKED"
    KEY = "KEY"
    CAPACITOR = "CAPACITOR"


class FlowColor:
    NONE = 0
    CYAN = 1
    MAGENTA = 2
    WHITE = 3   # CYAN | MAGENTA


TILE_MASKS = {
    TileType.STRAIGHT: (1, 0, 1, 0),
    TileType.ELBOW:    (1, 1, 0, 0),
    TileType.TEE:      (1, 1, 1, 0),
    TileType.CROSS:    (1, 1, 1, 1),
    TileType.BRIDGE:   (1, 1, 1, 1),
    TileType.SOURCE:   (0, 1, 0, 0),
    TileType.SINK:     (0, 0, 0, 1),
    TileType.BLOCK:    (0, 0, 0, 0),
    TileType.EMPTY:    (0, 0, 0, 0),
    TileType.DIODE:    (1, 0, 1, 0),
}

# Types that carry flow at all
CONDUCTIVE = frozenset(t for t, m in TILE_MASKS.items() if any(m))
TERMINALS = frozenset((TileType.SOURCE, TileType.SINK))


def opposite(d: int) -> int:
    return (d + 2) % 4


def connections(tile_type: TileType, rotation: int) -> List[int]:
    base = TILE_MASKS[tile_type]
    r = rotation % 4
    # right-rotate: the bit at index i moves to index i + r
    return [base[(i - r) % 4] for i in range(4)]


def sides(tile_type: TileType, rotation: int) -> frozenset:
    return frozenset(d for d, bit in enumerate(connections(tile_type, rotation)) if bit)


def are_connected(a, b, d: int) -> bool:
    """True iff tile a opens toward b (direction d) and b opens back toward a."""
    return (connections(a.type, a.rotation)[d] == 1
            and connections(b.type, b.rotation)[opposite(d)] == 1)


def orient(tile_type: TileType, wanted: Iterable[int]) -> int:
    """First rotation whose open sides are exactly `wanted`."""
    target = frozenset(wanted)
    for r in range(4):
        if sides(tile_type, r) == target:
            return r
    raise ValueError(f"{tile_type.value} cannot open exactly {sorted(target)}")


def step(r: int, c: int, d: int) -> Tuple[int, int]:
    dr, dc = DIRECTIONS[d]
    return r + dr, c + dc


def direction_between(a, b) -> int:
    """Direction of travel from a to an orthogonal neighbour b."""
    dr, dc = b.r - a.r, b.c - a.c
    for d, delta in enumerate(DIRECTIONS):
        if delta == (dr, dc):
            return d
    raise ValueError(f"{a} and {b} are not neighbours")
