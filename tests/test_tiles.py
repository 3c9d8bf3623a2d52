import pytest

from flowstate.grid import GridPos, TileState
from flowstate.tiles import (
    DOWN, LEFT, RIGHT, UP, TileType, are_connected, connections, direction_between, orient, sides,
)

def test_straight_rotation():
    assert connections(TileType.STRAIGHT, 0) == [1, 0, 1, 0]
    assert connections(TileType.STRAIGHT, 1) == [0, 1, 0, 1]

def test_elbow_turns_clockwise():
    assert sides(TileType.ELBOW, 0) == {UP, RIGHT}
    assert sides(TileType.ELBOW, 1) == {RIGHT, DOWN}
    assert sides(TileType.ELBOW, 2) == {DOWN, LEFT}
    assert sides(TileType.ELBOW, 3) == {LEFT, UP}

def test_terminals_open_one_side():
    assert sides(TileType.SOURCE, 0) == {RIGHT}
    assert sides(TileType.SINK, 0) == {LEFT}
    assert sides(TileType.BLOCK, 2) == frozenset()

def test_rotation_is_periodic():
    for t in TileType:
        for r in range(4):
            assert connections(t, r) == connections(t, r + 4)

def test_orient_finds_rotation():
    assert orient(TileType.TEE, (UP, DOWN, LEFT)) == 2
    assert orient(TileType.SOURCE, (DOWN,)) == 1
    assert orient(TileType.SINK, (UP,)) == 1
    with pytest.raises(ValueError):
        orient(TileType.STRAIGHT, (UP, RIGHT))

def test_are_connected_needs_both_sides():
    a = TileState(type=TileType.STRAIGHT, rotation=1)
    b = TileState(type=TileType.ELBOW, rotation=2)   # down + left
    assert are_connected(a, b, RIGHT)
    assert not are_connected(b, a, RIGHT)
    c = TileState(type=TileType.ELBOW, rotation=0)   # up + right
    assert not are_connected(a, c, RIGHT)

def test_direction_between():
    assert direction_between(GridPos(2, 2), GridPos(1, 2)) == UP
    assert direction_between(GridPos(2, 2), GridPos(2, 1)) == LEFT
    with pytest.raises(ValueError):
        direction_between(GridPos(0, 0), GridPos(1, 1))
