# src/flowstate/mapgen/generator.py
# Canonical level generator: seed -> guaranteed-solvable scrambled grid.

import logging as log
from dataclasses import dataclass
from typing import Optional, Tuple

from ..config import DEFAULT_CONFIG, GeneratorConfig
from ..engine.flow import calculate_flow
from ..engine.win import check_win_condition
from ..grid import Grid, GridPos, TileState
from ..rng import SeededRng
from ..tiles import FlowColor, TileType
from .carve import place_terminal, render_merge, render_segment
from .fallback import build_fallback
from .fill import fill_empty, scramble
from .pathfind import find_path
from .placement import add_capacitor_pair, add_decoy, add_key_lock, add_side_quest
from .solution import Solution


@dataclass
class GeneratedLevel:
    seed: str
    grid: Grid          # scrambled and simulated, ready to play
    solution: Solution  # pre-scramble rotations
    attempts: int
    fallback: bool = False


def place_anchors(rng: SeededRng, n: int) -> Tuple[GridPos, GridPos, GridPos, GridPos]:
    """
    Sources in the top and bottom bands of the left edge, sink on the right
    edge, merge point in the middle band. Returns (src_a, src_b, sink, merge).
    """
    band = n // 4
    src_a = GridPos(rng.range(0, band), rng.range(0, 1))
    src_b = GridPos(rng.range(n - 1 - band, n - 1), rng.range(0, 1))
    sink = GridPos(rng.range(band, n - 1 - band), n - 1)
    merge = GridPos(rng.range(band, n - 1 - band), rng.range(n // 2 - 1, n // 2 + 1))
    return src_a, src_b, sink, merge


def attempt_level(rng: SeededRng, config: GeneratorConfig = DEFAULT_CONFIG) -> Optional[Tuple[Grid, Solution]]:
    """One generation attempt. Returns (unscrambled grid, solution) or None."""
    n = config.size
    grid = Grid.empty(n)
    src_a, src_b, sink, merge = place_anchors(rng, n)
    grid.set(src_a.r, src_a.c, TileState(type=TileType.SOURCE, fixed=True))
    grid.set(src_b.r, src_b.c, TileState(type=TileType.SOURCE, fixed=True))
    grid.set(sink.r, sink.c, TileState(type=TileType.SINK, fixed=True))
    occupied = {src_a, src_b, sink, merge}

    paths = []
    for start, end in ((src_a, merge), (src_b, merge), (merge, sink)):
        path = find_path(rng, start, end, grid, occupied,
                         max_iterations=config.path_max_iterations, slack=config.path_slack)
        if path is None:
            log.debug(f"no path {start} -> {end}")
            return None
        occupied.update(path[1:-1])
        paths.append(path)
    path_a, path_b, path_c = paths

    place_terminal(grid, src_a, TileType.SOURCE, path_a[1])
    place_terminal(grid, src_b, TileType.SOURCE, path_b[1])
    place_terminal(grid, sink, TileType.SINK, path_c[-2])
    for path in paths:
        render_segment(grid, path, rng, config)
    render_merge(grid, merge, path_a, path_b, path_c)

    # Mechanics, in this order, each best-effort
    skeleton = path_a + path_b + path_c
    neutralize = []
    pair = add_capacitor_pair(rng, grid, path_a, path_b, config)
    if pair:
        neutralize.append(pair[1])
    placed = 0
    for _ in range(config.side_quest_tries):
        if add_side_quest(rng, grid, skeleton, occupied, config):
            placed += 1
        if placed >= config.side_quest_max:
            break
    for _ in range(config.decoy_count):
        add_decoy(rng, grid, skeleton, occupied, config)
    add_key_lock(rng, grid, path_a, path_b, path_c, config)

    fill_empty(rng, grid, config)

    # Validate the solution pose, not the scrambled one
    solution = Solution.capture(grid, neutralize)
    solved = calculate_flow(solution.apply(grid), delay_step=config.flow_delay_step)
    if solved.at(sink).flow_color != FlowColor.WHITE:
        log.debug("sink not white in solution pose")
        return None
    if not check_win_condition(solved):
        log.debug("solution pose leaks into a hazard or misses a required node")
        return None
    return grid, solution


def build_level(seed: str, config: GeneratorConfig = DEFAULT_CONFIG) -> GeneratedLevel:
    """Always returns a playable level; never raises for any seed string."""
    rng = SeededRng(seed)
    for attempt in range(1, config.max_attempts + 1):
        result = attempt_level(rng, config)
        if result is None:
            continue
        grid, solution = result
        scramble(rng, grid)
        log.debug(f"seed {seed!r}: generated on attempt {attempt}")
        return GeneratedLevel(
            seed=seed,
            grid=calculate_flow(grid, delay_step=config.flow_delay_step),
            solution=solution,
            attempts=attempt,
        )

    log.warning(f"seed {seed!r}: {config.max_attempts} attempts failed, using fallback layout")
    grid, solution = build_fallback(rng, config)
    return GeneratedLevel(seed=seed, grid=grid, solution=solution,
                          attempts=config.max_attempts, fallback=True)


def generate_level(seed: str, config: GeneratorConfig = DEFAULT_CONFIG) -> Grid:
    """
    Scrambled, simulated grid for `seed`. Solvable means the captured
    solution wins: rotations alone when the level has no capacitor, otherwise
    rotations plus spending the capacitor charge on the bug (GameState.zap).
    """
    return build_level(seed, config).grid
