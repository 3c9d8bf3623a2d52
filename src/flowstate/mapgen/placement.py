# src/flowstate/mapgen/placement.py
# Gameplay mechanics layered onto already-rendered paths. Every placement is
# best-effort: when no valid slot exists it does nothing and reports so.

from typing import List, Optional, Set, Tuple

from ..config import DEFAULT_CONFIG, GeneratorConfig
from ..grid import Grid, GridPos, TileState
from ..rng import SeededRng
from ..tiles import NodeStatus, TileType, opposite, orient, sides, step
from .pathfind import Path


def _free(grid: Grid, occupied: Set[GridPos], r: int, c: int) -> bool:
    return (grid.in_bounds(r, c)
            and grid.get(r, c).type == TileType.EMPTY
            and GridPos(r, c) not in occupied)


def _unique(cells: List[GridPos]) -> List[GridPos]:
    seen: Set[GridPos] = set()
    out = []
    for p in cells:
        if p not in seen:
            seen.add(p)
            out.append(p)
    return out


def add_capacitor_pair(
    rng: SeededRng,
    grid: Grid,
    path_a: Path,
    path_b: Path,
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> Optional[Tuple[GridPos, GridPos]]:
    """
    Capacitor early on one source branch, bug (FORBIDDEN) late on the same
    branch. Flow must pass the capacitor to earn the charge that clears the bug.
    Returns (capacitor, bug) or None.
    """
    if not rng.chance(config.capacitor_chance):
        return None
    route = path_a if rng.next() > 0.5 else path_b
    if len(route) <= 4:
        return None
    cap, bug = route[1], route[-2]
    cap_tile, bug_tile = grid.at(cap), grid.at(bug)
    if cap_tile.fixed or bug_tile.fixed:
        return None
    cap_tile.status = NodeStatus.CAPACITOR
    bug_tile.status = NodeStatus.FORBIDDEN
    return cap, bug


def _tip_rotation(rng: SeededRng, grid: Grid, pos: GridPos, back: int) -> int:
    # An elbow tip has one spare arm; prefer pointing it off the board.
    options = [(back, (back + 1) % 4), (back, (back + 3) % 4)]
    rng.shuffle(options)
    for pair in options:
        spare = pair[1]
        if not grid.in_bounds(*step(pos.r, pos.c, spare)):
            return orient(TileType.ELBOW, pair)
    return orient(TileType.ELBOW, options[0])


def add_side_quest(
    rng: SeededRng,
    grid: Grid,
    skeleton: List[GridPos],
    occupied: Set[GridPos],
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> bool:
    """
    Branch 1-2 cells off a path tile into empty space. The origin becomes a TEE
    and the branch tip is REQUIRED, forcing a detour through it.
    """
    candidates = [
        p for p in _unique(skeleton)
        if grid.at(p).type in (TileType.STRAIGHT, TileType.ELBOW)
        and not grid.at(p).fixed
        and grid.at(p).status == NodeStatus.NORMAL
    ]
    if not candidates:
        return False

    target = rng.pick(candidates)
    origin = grid.at(target)
    open_sides = sides(origin.type, origin.rotation)
    dirs = [0, 1, 2, 3]
    rng.shuffle(dirs)

    for d in dirs:
        if d in open_sides:
            continue
        r1, c1 = step(target.r, target.c, d)
        if not _free(grid, occupied, r1, c1):
            continue
        first = GridPos(r1, c1)

        if rng.chance(config.side_quest_long_chance):
            for td in ((d + 1) % 4, (d + 3) % 4):
                r2, c2 = step(r1, c1, td)
                if not _free(grid, occupied, r2, c2):
                    continue
                tip = GridPos(r2, c2)
                origin.type = TileType.TEE
                origin.rotation = orient(TileType.TEE, open_sides | {d})
                grid.set(r1, c1, TileState(
                    type=TileType.ELBOW,
                    rotation=orient(TileType.ELBOW, (opposite(d), td)),
                ))
                grid.set(r2, c2, TileState(
                    type=TileType.ELBOW,
                    rotation=_tip_rotation(rng, grid, tip, opposite(td)),
                    status=NodeStatus.REQUIRED,
                ))
                occupied.update((first, tip))
                return True

        origin.type = TileType.TEE
        origin.rotation = orient(TileType.TEE, open_sides | {d})
        grid.set(r1, c1, TileState(
            type=TileType.ELBOW,
            rotation=_tip_rotation(rng, grid, first, opposite(d)),
            status=NodeStatus.REQUIRED,
        ))
        occupied.add(first)
        return True
    return False


def add_decoy(
    rng: SeededRng,
    grid: Grid,
    skeleton: List[GridPos],
    occupied: Set[GridPos],
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> List[GridPos]:
    """
    Grow a short unconnected dead end next to a path cell, ending in a
    FORBIDDEN tip. Returns the decoy cells (empty when nothing was placed).
    """
    if len(skeleton) < 3:
        return []
    start = skeleton[rng.range(1, len(skeleton) - 2)]
    if grid.at(start).fixed:
        return []

    placed: List[GridPos] = []
    cur = start
    max_len = rng.range(1, config.decoy_max_len)
    while len(placed) < max_len:
        dirs = [d for d in range(4) if _free(grid, occupied, *step(cur.r, cur.c, d))]
        if not dirs:
            break
        nr, nc = step(cur.r, cur.c, rng.pick(dirs))
        grid.set(nr, nc, TileState(type=TileType.STRAIGHT, rotation=rng.range(0, 3)))
        cur = GridPos(nr, nc)
        occupied.add(cur)
        placed.append(cur)

    if placed:
        tip = grid.at(placed[-1])
        tip.type = TileType.ELBOW
        tip.status = NodeStatus.FORBIDDEN
    return placed


def add_key_lock(
    rng: SeededRng,
    grid: Grid,
    path_a: Path,
    path_b: Path,
    path_c: Path,
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> Optional[Tuple[GridPos, GridPos]]:
    """
    Lock a tile near the sink (fixed until powered key) and hide the key on a
    source branch. Returns (lock, key) or None.
    """
    if len(path_c) <= 3 or not rng.chance(config.lock_chance):
        return None
    lock = path_c[-2]
    lock_tile = grid.at(lock)
    if lock_tile.fixed or lock_tile.status != NodeStatus.NORMAL:
        return None

    key_path = path_a if rng.next() > 0.5 else path_b
    if len(key_path) <= 2:
        return None
    key = key_path[rng.range(1, len(key_path) - 2)]
    key_tile = grid.at(key)
    if key_tile.status != NodeStatus.NORMAL:
        return None

    lock_tile.status = NodeStatus.LOCKED
    lock_tile.fixed = True
    key_tile.status = NodeStatus.KEY
    return lock, key
