# src/flowstate/mapgen/solution.py
# The pre-scramble layout captured at generation time.

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from ..grid import Grid, GridPos
from ..tiles import NodeStatus, TileType, sides


def same_pose(tile_type: TileType, a: int, b: int) -> bool:
    # A straight at 0 and 2 looks and conducts the same; a diode does not.
    if tile_type == TileType.DIODE:
        return a % 4 == b % 4
    return sides(tile_type, a) == sides(tile_type, b)


@dataclass
class Solution:
    rotations: Dict[GridPos, int] = field(default_factory=dict)
    # Bugs sitting on the powered route; the capacitor charge clears them.
    neutralize: List[GridPos] = field(default_factory=list)

    @classmethod
    def capture(cls, grid: Grid, neutralize: Sequence[GridPos] = ()) -> "Solution":
        rotations = {
            p: grid.at(p).rotation
            for p in grid.positions()
            if (not grid.at(p).fixed or grid.at(p).status == NodeStatus.LOCKED)
            and grid.at(p).type not in (TileType.EMPTY, TileType.BLOCK)
        }
        return cls(rotations=rotations, neutralize=list(neutralize))

    def apply(self, grid: Grid) -> Grid:
        """Return a copy of `grid` posed as solved (flow fields untouched)."""
        out = grid.clone()
        for p, rot in self.rotations.items():
            out.at(p).rotation = rot
        for p in self.neutralize:
            tile = out.at(p)
            tile.status = NodeStatus.NORMAL
            tile.fixed = False
        return out

    def wrong_tiles(self, grid: Grid) -> List[GridPos]:
        """Rotatable tiles whose pose differs from the solution, in (row, col) order."""
        return sorted(p for p, rot in self.rotations.items()
                      if not grid.at(p).fixed and not same_pose(grid.at(p).type, grid.at(p).rotation, rot))

    def to_dict(self) -> Dict:
        return {
            "tiles": [{"r": p.r, "c": p.c, "rotation": rot} for p, rot in sorted(self.rotations.items())],
            "neutralize": [{"r": p.r, "c": p.c} for p in self.neutralize],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Solution":
        return cls(
            rotations={GridPos(t["r"], t["c"]): int(t["rotation"]) for t in data.get("tiles", [])},
            neutralize=[GridPos(p["r"], p["c"]) for p in data.get("neutralize", [])],
        )
