# src/flowstate/engine/flow.py
# Breadth-first colour propagation from the sources.
#
# Colours are 2-bit masks merged with OR, so a tile can only ever grow from
# NONE toward WHITE. Each tile (or bridge lane) is enqueued at most once per
# growth step, which bounds the work and makes the final colouring
# independent of visiting order. Only flow_delay (cosmetic) may depend on it.

from collections import deque
from typing import Deque, Dict, List, Optional, Tuple

from ..config import DEFAULT_CONFIG
from ..grid import Grid, GridPos, TileState
from ..tiles import FlowColor, TileType, are_connected, opposite, step

VERTICAL, HORIZONTAL = 0, 1

# (pos, colour carried, depth, side the flow entered through)
_Item = Tuple[GridPos, int, int, Optional[int]]


def source_colors(grid: Grid) -> Dict[GridPos, int]:
    """
    Sources sorted by (row, col) alternate CYAN, MAGENTA. This is the only
    tie-break rule: screen position never decides the colour.
    """
    sources = grid.find(TileType.SOURCE)
    if len(sources) > 2:
        raise ValueError(f"{len(sources)} sources would alias colours; at most 2 supported")
    return {pos: (FlowColor.CYAN if i % 2 == 0 else FlowColor.MAGENTA)
            for i, pos in enumerate(sources)}


def _show_bridge(tile: TileState, lanes: List[int]) -> None:
    # A bridge shows the lane on its own axis; the crossing lane only when
    # the main deck is dry. The two lanes are never mixed.
    main = tile.rotation % 2
    tile.has_flow = any(lanes)
    tile.flow_color = lanes[main] if lanes[main] else lanes[1 - main]


def calculate_flow(grid: Grid, *, delay_step: int = DEFAULT_CONFIG.flow_delay_step) -> Grid:
    """Return a new grid with has_flow/flow_color/flow_delay recomputed."""
    grid.check()
    out = grid.clone()
    for tile in out.buf:
        tile.has_flow = False
        tile.flow_color = FlowColor.NONE
        tile.flow_delay = 0

    queue: Deque[_Item] = deque()
    for pos, color in source_colors(out).items():
        tile = out.at(pos)
        tile.has_flow = True
        tile.flow_color = color
        queue.append((pos, color, 0, None))

    bridge_lanes: Dict[GridPos, List[int]] = {}

    while queue:
        pos, color, depth, entry = queue.popleft()
        cur = out.at(pos)
        for d in range(4):
            # overpass: stay on the axis we came in on; either axis may enter, whatever the rotation
            if cur.type == TileType.BRIDGE and entry is not None and d % 2 != entry % 2:
                continue
            nr, nc = step(pos.r, pos.c, d)
            if not out.in_bounds(nr, nc):
                continue
            nb = out.get(nr, nc)
            if not are_connected(cur, nb, d):
                continue
            # one-way valve: enter only when travelling along its rotation
            if nb.type == TileType.DIODE and d != nb.rotation:
                continue
            if nb.type in (TileType.BLOCK, TileType.EMPTY):
                continue

            npos = GridPos(nr, nc)
            if nb.type == TileType.BRIDGE:
                lanes = bridge_lanes.setdefault(npos, [FlowColor.NONE, FlowColor.NONE])
                axis = VERTICAL if d % 2 == 0 else HORIZONTAL
                new_color = lanes[axis] | color
                if new_color == lanes[axis]:
                    continue
                if not nb.has_flow:
                    nb.flow_delay = (depth + 1) * delay_step
                lanes[axis] = new_color
                _show_bridge(nb, lanes)
            else:
                new_color = nb.flow_color | color
                if new_color == nb.flow_color:
                    continue
                nb.has_flow = True
                nb.flow_color = new_color
                nb.flow_delay = (depth + 1) * delay_step
            queue.append((npos, new_color, depth + 1, opposite(d)))
    return out


def wet_count(grid: Grid) -> int:
    return sum(1 for t in grid.buf if t.has_flow)
