# src/flowstate/engine/win.py
from ..grid import Grid
from ..tiles import FlowColor, NodeStatus, TileType


def check_win_condition(grid: Grid) -> bool:
    """
    Pure predicate over a simulated grid. Won iff:
      - exactly one SINK is powered WHITE,
      - at least two SOURCEs carry flow,
      - every REQUIRED tile carries flow,
      - no FORBIDDEN tile carries flow.
    """
    grid.check()
    white_sinks = 0
    live_sources = 0
    for t in grid.buf:
        if t.type == TileType.SINK and t.has_flow and t.flow_color == FlowColor.WHITE:
            white_sinks += 1
        elif t.type == TileType.SOURCE and t.has_flow:
            live_sources += 1
        if t.status == NodeStatus.REQUIRED and not t.has_flow:
            return False
        if t.status == NodeStatus.FORBIDDEN and t.has_flow:
            return False
    return white_sinks == 1 and live_sources >= 2
