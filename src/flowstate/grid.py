from dataclasses import dataclass, replace
from typing import Dict, Iterator, List

from .config import GRID_SIZE
from .tiles import FlowColor, NodeStatus, TileType

GLYPHS = {
    TileType.EMPTY: ".",
    TileType.STRAIGHT: "|",
    TileType.ELBOW: "L",
    TileType.TEE: "T",
    TileType.CROSS: "+",
    TileType.BRIDGE: "#",
    TileType.SOURCE: "@",
    TileType.SINK: "O",
    TileType.BLOCK: "X",
    TileType.DIODE: "v",
}


@dataclass(frozen=True, order=True)
class GridPos:
    r: int
    c: int

    def __repr__(self) -> str:
        return f"({self.r},{self.c})"


@dataclass
class TileState:
    type: TileType = TileType.EMPTY
    rotation: int = 0
    fixed: bool = False
    status: NodeStatus = NodeStatus.NORMAL
    # Derived by the simulator on every pass; never source of truth.
    has_flow: bool = False
    flow_color: int = FlowColor.NONE
    flow_delay: int = 0

    def copy(self) -> "TileState":
        return replace(self)

    def to_record(self) -> Dict:
        return {
            "type": self.type.value,
            "rotation": self.rotation,
            "fixed": self.fixed,
            "status": self.status.value,
            "hasFlow": self.has_flow,
            "flowColor": self.flow_color,
            "flowDelay": self.flow_delay,
        }

    @classmethod
    def from_record(cls, rec: Dict) -> "TileState":
        return cls(
            type=TileType(rec["type"]),
            rotation=int(rec["rotation"]),
            fixed=bool(rec["fixed"]),
            status=NodeStatus(rec.get("status", NodeStatus.NORMAL.value)),
            has_flow=bool(rec.get("hasFlow", False)),
            flow_color=int(rec.get("flowColor", FlowColor.NONE)),
            flow_delay=int(rec.get("flowDelay", 0)),
        )


@dataclass
class Grid:
    buf: List[TileState]
    size: int = GRID_SIZE

    @classmethod
    def empty(cls, size: int = GRID_SIZE) -> "Grid":
        return cls(buf=[TileState() for _ in range(size * size)], size=size)

    def idx(self, r: int, c: int) -> int:
        if not self.in_bounds(r, c):
            raise IndexError(f"({r},{c}) outside {self.size}x{self.size} grid")
        return r * self.size + c

    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.size and 0 <= c < self.size

    def get(self, r: int, c: int) -> TileState:
        return self.buf[self.idx(r, c)]

    def set(self, r: int, c: int, tile: TileState) -> None:
        self.buf[self.idx(r, c)] = tile

    def at(self, pos: GridPos) -> TileState:
        return self.get(pos.r, pos.c)

    def clone(self) -> "Grid":
        return Grid(buf=[t.copy() for t in self.buf], size=self.size)

    def positions(self) -> Iterator[GridPos]:
        for r in range(self.size):
            for c in range(self.size):
                yield GridPos(r, c)

    def find(self, tile_type: TileType) -> List[GridPos]:
        """Positions holding `tile_type`, in (row, col) order."""
        return [p for p in self.positions() if self.at(p).type == tile_type]

    def rows(self) -> List[List[TileState]]:
        return [self.buf[r * self.size:(r + 1) * self.size] for r in range(self.size)]

    def check(self) -> None:
        """Raise on a malformed grid: these are upstream bugs, not game states."""
        if self.size <= 0 or len(self.buf) != self.size * self.size:
            raise ValueError(f"grid buffer holds {len(self.buf)} tiles, expected {self.size}x{self.size}")
        for i, t in enumerate(self.buf):
            if not isinstance(t.type, TileType):
                raise TypeError(f"tile {i}: unknown tile type {t.type!r}")
            if not isinstance(t.status, NodeStatus):
                raise TypeError(f"tile {i}: unknown node status {t.status!r}")
            if not (0 <= t.rotation <= 3):
                raise ValueError(f"tile {i}: rotation {t.rotation} out of range 0..3")

    def to_records(self) -> List[List[Dict]]:
        return [[t.to_record() for t in row] for row in self.rows()]

    @classmethod
    def from_records(cls, records: List[List[Dict]]) -> "Grid":
        size = len(records)
        if any(len(row) != size for row in records):
            raise ValueError("grid records must form a square matrix")
        g = cls(buf=[TileState.from_record(rec) for row in records for rec in row], size=size)
        g.check()
        return g

    def as_text(self) -> str:
        """One line per row: tile glyph plus rotation digit, e.g. "L1 |0 .0"."""
        return "\n".join(
            " ".join(f"{GLYPHS[t.type]}{t.rotation}" for t in row) for row in self.rows()
        )
