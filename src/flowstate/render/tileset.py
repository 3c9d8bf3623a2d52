# src/flowstate/render/tileset.py
# Static PNG previews of a grid for debugging generated levels (no gameplay).
from __future__ import annotations

import os
from functools import lru_cache
from typing import Tuple

from PIL import Image, ImageDraw

from ..grid import Grid, TileState
from ..tiles import FlowColor, NodeStatus, TileType, connections

RGBA = Tuple[int, int, int, int]

BACKGROUND: RGBA = (18, 18, 28, 255)
PIPE_DRY: RGBA = (90, 90, 110, 255)
FLOW_RGBA = {
    FlowColor.CYAN: (0, 230, 255, 255),
    FlowColor.MAGENTA: (255, 0, 200, 255),
    FlowColor.WHITE: (255, 255, 255, 255),
}
STATUS_RGBA = {
    NodeStatus.REQUIRED: (0, 220, 0, 255),
    NodeStatus.FORBIDDEN: (255, 60, 60, 255),
    NodeStatus.LOCKED: (255, 200, 0, 255),
    NodeStatus.KEY: (255, 160, 0, 255),
    NodeStatus.CAPACITOR: (120, 120, 255, 255),
}


def _pipe_color(tile: TileState) -> RGBA:
    if tile.has_flow:
        return FLOW_RGBA.get(tile.flow_color, PIPE_DRY)
    return PIPE_DRY


class Tileset:
    """
    Tiny cached tile painter:
      - one image per (type, rotation, status, colour, fixed) combination
      - arms drawn from the centre toward every open side
      - status shown as a coloured frame, fixed tiles get a dot
    """
    def __init__(self, tile_size: int = 32):
        self.tile_size = tile_size

    def image(self, tile: TileState) -> Image.Image:
        return self._paint(tile.type, tile.rotation, tile.status, _pipe_color(tile), tile.fixed)

    @lru_cache(maxsize=1024)
    def _paint(self, tile_type: TileType, rotation: int, status: NodeStatus,
               color: RGBA, fixed: bool) -> Image.Image:
        s = self.tile_size
        img = Image.new("RGBA", (s, s), BACKGROUND)
        draw = ImageDraw.Draw(img)
        mid, half_w = s // 2, max(1, s // 8)

        if tile_type == TileType.BLOCK:
            draw.rectangle((1, 1, s - 2, s - 2), fill=PIPE_DRY)
        arms = connections(tile_type, rotation)
        boxes = (
            (mid - half_w, 0, mid + half_w, mid),       # up
            (mid, mid - half_w, s - 1, mid + half_w),   # right
            (mid - half_w, mid, mid + half_w, s - 1),   # down
            (0, mid - half_w, mid, mid + half_w),       # left
        )
        for d, open_side in enumerate(arms):
            if open_side:
                draw.rectangle(boxes[d], fill=color)

        if tile_type in (TileType.SOURCE, TileType.SINK):
            r = s // 4
            draw.ellipse((mid - r, mid - r, mid + r, mid + r), fill=color, outline=(0, 0, 0, 255))
        elif tile_type == TileType.DIODE:
            # arrowhead along the permitted direction of travel
            tip = ((mid, 2), (s - 3, mid), (mid, s - 3), (2, mid))[rotation % 4]
            draw.polygon((tip, (mid - half_w * 2, mid), (mid + half_w * 2, mid)) if rotation % 2 == 0
                         else (tip, (mid, mid - half_w * 2), (mid, mid + half_w * 2)), fill=color)
        elif tile_type == TileType.BRIDGE:
            draw.rectangle((mid - half_w * 2, mid - half_w * 2, mid + half_w * 2, mid + half_w * 2),
                           outline=(0, 0, 0, 255))

        frame = STATUS_RGBA.get(status)
        if frame is not None:
            draw.rectangle((0, 0, s - 1, s - 1), outline=frame, width=max(1, s // 16))
        if fixed:
            draw.ellipse((2, 2, 2 + half_w, 2 + half_w), fill=(200, 200, 200, 255))
        return img


def render_grid(grid: Grid, tile_size: int = 32, margin: int = 0) -> Image.Image:
    tiles = Tileset(tile_size)
    w = grid.size * tile_size + 2 * margin
    canvas = Image.new("RGBA", (w, w), (0, 0, 0, 255))
    for r, row in enumerate(grid.rows()):
        for c, tile in enumerate(row):
            canvas.paste(tiles.image(tile), (margin + c * tile_size, margin + r * tile_size))
    return canvas


def save_png(grid: Grid, out_png: str, tile_size: int = 32) -> None:
    parent = os.path.dirname(out_png)
    if parent:
        os.makedirs(parent, exist_ok=True)
    render_grid(grid, tile_size=tile_size).save(out_png)
