# src/flowstate/engine/state.py
# GameState: one player's session on one seed. Owns the grid and applies the
# rules that sit on top of the simulator (locks, capacitor charge, zapping
# bugs, undo, hints).

from __future__ import annotations

import logging as log
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..config import DEFAULT_CONFIG, GeneratorConfig
from ..grid import Grid, GridPos
from ..mapgen.generator import build_level
from ..tiles import NodeStatus
from .flow import calculate_flow
from .hints import Hint, SolutionStore, suggest_move
from .win import check_win_condition


def rotate_tile(grid: Grid, pos: GridPos) -> Grid:
    """Rotate one tile a quarter turn clockwise and re-simulate. Input untouched."""
    out = grid.clone()
    tile = out.at(pos)
    tile.rotation = (tile.rotation + 1) % 4
    return calculate_flow(out)


@dataclass
class _Snapshot:
    grid: Grid
    moves: int
    charges: int
    has_charged: bool


class GameState:
    def __init__(
        self,
        seed: str,
        *,
        config: GeneratorConfig = DEFAULT_CONFIG,
        store: Optional[SolutionStore] = None,
    ) -> None:
        self.seed = seed
        self.config = config
        self.store = store
        self.reset()

    # ---- Lifecycle ----
    def reset(self) -> None:
        level = build_level(self.seed, self.config)
        if self.store is not None:
            self.store.store(self.seed, level.solution)
        self.grid: Grid = level.grid
        self.moves = 0
        self.is_won = False
        self.charges = 0
        self._has_charged = False
        self.history: List[_Snapshot] = []
        self._apply_mechanics()

    # ---- Player actions ----
    def rotate(self, pos: GridPos) -> bool:
        """Rotate a tile; False when the game is over or the tile is fixed."""
        if self.is_won or self.grid.at(pos).fixed:
            return False
        self._push()
        self._commit(rotate_tile(self.grid, pos))
        return True

    def zap(self, pos: GridPos) -> bool:
        """Spend the capacitor charge to turn a FORBIDDEN tile into a normal pipe."""
        tile = self.grid.at(pos)
        if self.is_won or self.charges <= 0 or tile.status != NodeStatus.FORBIDDEN:
            return False
        self._push()
        out = self.grid.clone()
        zapped = out.at(pos)
        zapped.status = NodeStatus.NORMAL
        zapped.fixed = False
        self.charges -= 1
        log.debug(f"{self.seed!r}: zapped bug at {pos}")
        self.grid = calculate_flow(out)
        self._settle()
        return True

    def apply_hint(self, hint: Hint) -> bool:
        if self.is_won or self.grid.at(hint.position).fixed:
            return False
        self._push()
        out = self.grid.clone()
        out.at(hint.position).rotation = hint.target_rotation % 4
        self._commit(calculate_flow(out))
        return True

    def hint(self) -> Optional[Hint]:
        if self.is_won:
            return None
        return suggest_move(self.grid, self.seed, self.store)

    @property
    def can_undo(self) -> bool:
        return bool(self.history) and not self.is_won

    def undo(self) -> bool:
        if not self.can_undo:
            return False
        snap = self.history.pop()
        self.grid = snap.grid
        self.moves = snap.moves
        self.charges = snap.charges
        self._has_charged = snap.has_charged
        return True

    # ---- Helpers ----
    def _push(self) -> None:
        self.history.append(_Snapshot(self.grid, self.moves, self.charges, self._has_charged))

    def _commit(self, flowed: Grid) -> None:
        self.grid = flowed
        self.moves += 1
        self._settle()

    def _settle(self) -> None:
        self.is_won = check_win_condition(self.grid)
        if self.is_won:
            log.info(f"{self.seed!r}: solved in {self.moves} moves")
        else:
            self._apply_mechanics()

    def _apply_mechanics(self) -> None:
        key_powered = any(t.status == NodeStatus.KEY and t.has_flow for t in self.grid.buf)
        cap_powered = any(t.status == NodeStatus.CAPACITOR and t.has_flow for t in self.grid.buf)

        locked = [t for t in self.grid.buf if t.status == NodeStatus.LOCKED and t.fixed]
        if key_powered and locked:
            for t in locked:
                t.fixed = False
            log.debug(f"{self.seed!r}: key powered, {len(locked)} lock(s) released")

        # one charge per game, however often the capacitor is re-powered
        if cap_powered and self.charges == 0 and not self._has_charged:
            self.charges = 1
            self._has_charged = True
            log.debug(f"{self.seed!r}: capacitor charged")

    # ---- Save shape ----
    def to_dict(self) -> Dict:
        return {
            "grid": self.grid.to_records(),
            "moves": self.moves,
            "isWon": self.is_won,
            "gameDate": self.seed,
            "charges": self.charges,
        }

    @classmethod
    def from_dict(cls, data: Dict, *, config: GeneratorConfig = DEFAULT_CONFIG,
                  store: Optional[SolutionStore] = None) -> "GameState":
        state = cls.__new__(cls)
        state.seed = data["gameDate"]
        state.config = config
        state.store = store
        state.grid = calculate_flow(Grid.from_records(data["grid"]))
        state.moves = int(data.get("moves", 0))
        state.is_won = bool(data.get("isWon", False))
        state.charges = int(data.get("charges", 0))
        state._has_charged = state.charges > 0
        state.history = []
        return state
