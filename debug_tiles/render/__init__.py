"""Tile rendering: vector rasterization and labeled tile synthesis."""

from .tile import TILE_SIZE, TileCoordinate, encode_png, render_tile, render_tile_png
from .vector import Path, Rasterizer, rect, rounded_rect

__all__ = [
    "TILE_SIZE",
    "TileCoordinate",
    "encode_png",
    "render_tile",
    "render_tile_png",
    "Path",
    "Rasterizer",
    "rect",
    "rounded_rect",
]
