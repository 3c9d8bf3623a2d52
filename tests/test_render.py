import os

from flowstate.engine.flow import calculate_flow
from flowstate.mapgen.generator import build_level
from flowstate.render.tileset import Tileset, render_grid, save_png
from flowstate.tiles import TileType

def test_render_size():
    grid = build_level("2024-07-04").grid
    img = render_grid(grid, tile_size=8)
    assert img.size == (64, 64)

def test_wet_and_dry_tiles_differ():
    level = build_level("2024-07-04")
    solved = calculate_flow(level.solution.apply(level.grid))
    sink = solved.at(solved.find(TileType.SINK)[0])
    dry = sink.copy()
    dry.has_flow = False
    tiles = Tileset(16)
    assert tiles.image(sink).tobytes() != tiles.image(dry).tobytes()

def test_save_png(tmp_path):
    out = os.path.join(str(tmp_path), "previews", "level.png")
    save_png(build_level("2024-07-04").grid, out, tile_size=4)
    assert os.path.getsize(out) > 0
