# tests/test_placement.py
from flowstate.config import GeneratorConfig
from flowstate.engine.flow import calculate_flow
from flowstate.grid import Grid, GridPos
from flowstate.mapgen.carve import place_terminal, render_segment
from flowstate.mapgen.placement import add_capacitor_pair, add_decoy, add_key_lock, add_side_quest
from flowstate.rng import SeededRng
from flowstate.tiles import NodeStatus, TileType

NO_DIODES = GeneratorConfig(diode_chance=0.0)

def row_path(r, c0, c1):
    return [GridPos(r, c) for c in range(c0, c1 + 1)]

def rendered(paths, rng):
    g = Grid.empty(8)
    for p in paths:
        render_segment(g, p, rng, NO_DIODES)
    return g

def powered_row(rng):
    # source at (3,0) feeding straights along row 3
    path = row_path(3, 0, 7)
    g = rendered([path], rng)
    place_terminal(g, path[0], TileType.SOURCE, path[1])
    return g, path

def test_capacitor_and_bug_share_a_branch():
    cfg = GeneratorConfig(diode_chance=0.0, capacitor_chance=1.0)
    for i in range(10):
        rng = SeededRng(f"cap-{i}")
        path_a, path_b = row_path(1, 0, 6), row_path(6, 0, 6)
        g = rendered([path_a, path_b], rng)
        cap, bug = add_capacitor_pair(rng, g, path_a, path_b, cfg)
        assert (cap, bug) in ((path_a[1], path_a[-2]), (path_b[1], path_b[-2]))
        assert g.at(cap).status == NodeStatus.CAPACITOR
        assert g.at(bug).status == NodeStatus.FORBIDDEN

def test_capacitor_skipped_on_short_or_unlucky_routes():
    rng = SeededRng("cap-short")
    path_a, path_b = row_path(1, 0, 3), row_path(6, 0, 3)
    g = rendered([path_a, path_b], rng)
    cfg = GeneratorConfig(capacitor_chance=1.0)
    assert add_capacitor_pair(rng, g, path_a, path_b, cfg) is None
    never = GeneratorConfig(capacitor_chance=0.0)
    long_a, long_b = row_path(2, 0, 7), row_path(5, 0, 7)
    assert add_capacitor_pair(rng, rendered([long_a, long_b], rng), long_a, long_b, never) is None

def test_side_quest_branches_to_a_powered_required_tip():
    for i in range(10):
        rng = SeededRng(f"quest-{i}")
        g, path = powered_row(rng)
        occupied = set(path)
        assert add_side_quest(rng, g, path, occupied, NO_DIODES)
        tees = g.find(TileType.TEE)
        assert len(tees) == 1 and tees[0] in path, f"seed {i}: origin not a path TEE"
        tips = [p for p in g.positions() if g.at(p).status == NodeStatus.REQUIRED]
        assert len(tips) == 1 and tips[0] not in path
        assert tips[0] in occupied
        out = calculate_flow(g)
        assert out.at(tips[0]).has_flow, f"seed {i}: tip not connected back to the path"

def test_decoy_ends_forbidden_off_the_path():
    for i in range(10):
        rng = SeededRng(f"decoy-{i}")
        g, path = powered_row(rng)
        occupied = set(path)
        cells = add_decoy(rng, g, path, occupied)
        assert cells, f"seed {i}: no decoy placed"
        assert not set(cells) & set(path)
        assert all(g.at(p).type == TileType.STRAIGHT for p in cells[:-1])
        tip = g.at(cells[-1])
        assert tip.type == TileType.ELBOW and tip.status == NodeStatus.FORBIDDEN
        assert not calculate_flow(g).at(cells[-1]).has_flow

def test_decoy_needs_a_skeleton():
    rng = SeededRng("decoy-short")
    assert add_decoy(rng, Grid.empty(8), [GridPos(0, 0), GridPos(0, 1)], set()) == []

def test_lock_near_sink_key_on_a_source_branch():
    cfg = GeneratorConfig(diode_chance=0.0, lock_chance=1.0)
    for i in range(10):
        rng = SeededRng(f"lock-{i}")
        path_a, path_b, path_c = row_path(1, 0, 6), row_path(6, 0, 6), row_path(3, 2, 7)
        g = rendered([path_a, path_b, path_c], rng)
        lock, key = add_key_lock(rng, g, path_a, path_b, path_c, cfg)
        assert lock == path_c[-2]
        assert g.at(lock).status == NodeStatus.LOCKED and g.at(lock).fixed
        assert key in path_a[1:-1] or key in path_b[1:-1]
        assert g.at(key).status == NodeStatus.KEY

def test_lock_skipped_without_chance():
    rng = SeededRng("lock-never")
    path_a, path_b, path_c = row_path(1, 0, 6), row_path(6, 0, 6), row_path(3, 2, 7)
    g = rendered([path_a, path_b, path_c], rng)
    assert add_key_lock(rng, g, path_a, path_b, path_c, GeneratorConfig(lock_chance=0.0)) is None
    assert not [p for p in g.positions() if g.at(p).status == NodeStatus.LOCKED]
