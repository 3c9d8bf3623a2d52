# src/flowstate/engine/hints.py
# Hint sources. The stored solution is authoritative; the greedy search is
# only a fallback when nothing was stored for a seed.

import logging as log
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Tuple

from ..grid import Grid, GridPos
from ..mapgen.solution import Solution
from ..rng import SeededRng
from ..tiles import CONDUCTIVE, NodeStatus, TERMINALS
from .flow import calculate_flow, wet_count

MAX_STORED_SOLUTIONS = 50


@dataclass(frozen=True)
class Hint:
    position: GridPos
    target_rotation: int


class HintProvider(Protocol):
    def suggest_move(self, grid: Grid, seed: str) -> Optional[Hint]: ...


class SolutionStore:
    """In-memory store of the most recent solutions, keyed by seed."""

    def __init__(self, capacity: int = MAX_STORED_SOLUTIONS) -> None:
        assert capacity > 0
        self.capacity = capacity
        self._solutions: "OrderedDict[str, Solution]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._solutions)

    def __contains__(self, seed: str) -> bool:
        return seed in self._solutions

    def store(self, seed: str, solution: Solution) -> None:
        self._solutions[seed] = solution
        self._solutions.move_to_end(seed)
        while len(self._solutions) > self.capacity:
            dropped, _ = self._solutions.popitem(last=False)
            log.debug(f"solution store full, dropped {dropped!r}")
        log.debug(f"stored solution for {seed!r} ({len(solution.rotations)} tiles)")

    def get(self, seed: str) -> Optional[Solution]:
        return self._solutions.get(seed)

    def clear(self) -> None:
        self._solutions.clear()

    def hint_from_solution(self, seed: str, grid: Grid) -> Optional[Hint]:
        """A tile that is currently wrong, with its solution rotation."""
        solution = self.get(seed)
        if solution is None:
            log.debug(f"no stored solution for {seed!r}")
            return None
        wrong = solution.wrong_tiles(grid)
        if not wrong:
            return None
        rng = SeededRng(f"{seed}:hint:{len(wrong)}")
        pos = rng.pick(wrong)
        return Hint(position=pos, target_rotation=solution.rotations[pos])

    def progress(self, seed: str, grid: Grid) -> Tuple[int, int]:
        """(tiles in solution pose, tiles in solution)."""
        solution = self.get(seed)
        if solution is None:
            return 0, 0
        wrong = len(solution.wrong_tiles(grid))
        total = len(solution.rotations)
        return total - wrong, total

    def suggest_move(self, grid: Grid, seed: str) -> Optional[Hint]:
        return self.hint_from_solution(seed, grid)

    def to_dict(self) -> Dict:
        return {seed: sol.to_dict() for seed, sol in self._solutions.items()}

    @classmethod
    def from_dict(cls, data: Dict, capacity: int = MAX_STORED_SOLUTIONS) -> "SolutionStore":
        store = cls(capacity)
        for seed, sol in data.items():
            store.store(seed, Solution.from_dict(sol))
        return store


class GreedyHintProvider:
    """
    Without a stored solution: try every rotation of every rotatable pipe (in
    a seed-shuffled order) and suggest the one that powers the most tiles
    without powering a FORBIDDEN tile. None when no rotation adds flow.
    """

    def suggest_move(self, grid: Grid, seed: str) -> Optional[Hint]:
        best: Optional[Hint] = None
        best_wet = wet_count(calculate_flow(grid))
        candidates = [
            p for p in grid.positions()
            if not grid.at(p).fixed
            and grid.at(p).type in CONDUCTIVE
            and grid.at(p).type not in TERMINALS
        ]
        SeededRng(f"{seed}:greedy").shuffle(candidates)
        for pos in candidates:
            current = grid.at(pos).rotation
            for rot in range(4):
                if rot == current:
                    continue
                trial = grid.clone()
                trial.at(pos).rotation = rot
                flowed = calculate_flow(trial)
                if any(t.status == NodeStatus.FORBIDDEN and t.has_flow for t in flowed.buf):
                    continue
                wet = wet_count(flowed)
                if wet > best_wet:
                    best, best_wet = Hint(position=pos, target_rotation=rot), wet
        return best


def suggest_move(grid: Grid, seed: str, store: Optional[SolutionStore] = None) -> Optional[Hint]:
    """
    Stored solution first. The greedy search runs only for seeds with no
    stored solution: once every stored tile is posed, a greedy gain could
    only mean turning a correct tile away from its solution.
    """
    providers: List[HintProvider] = []
    if store is not None:
        providers.append(store)
    if store is None or seed not in store:
        providers.append(GreedyHintProvider())
    for provider in providers:
        hint = provider.suggest_move(grid, seed)
        if hint is not None:
            return hint
    return None
