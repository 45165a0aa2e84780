from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional, Tuple

from minebeat.components.board import Board, Cell
from minebeat.constants import CELL_PADDING
from minebeat.rendering.intensity_grid import IntensityGrid
from minebeat.ui.layout import cell_origin

if TYPE_CHECKING:
    from minebeat.systems.render import RenderSystem

Color = Tuple[int, int, int]

HIDDEN_COLOR: Color = (58, 66, 96)
REVEALED_COLOR: Color = (196, 198, 206)
MINE_COLOR: Color = (40, 40, 40)
EXPLODED_COLOR: Color = (214, 60, 60)
FLAG_COLOR: Color = (255, 196, 64)
MUTED_FLAG_COLOR: Color = (120, 110, 90)
MUTE_MARK_COLOR: Color = (20, 20, 28)
PLAYHEAD_COLOR = (255, 255, 255, 46)

NUMBER_COLORS: Dict[int, Color] = {
    1: (40, 90, 220),
    2: (30, 140, 60),
    3: (210, 50, 50),
    4: (30, 30, 130),
    5: (130, 30, 30),
    6: (20, 130, 130),
    7: (20, 20, 20),
    8: (110, 110, 110),
}


def scale_color(color: Color, factor: float) -> Color:
    return tuple(max(0, min(255, int(round(channel * factor)))) for channel in color)  # type: ignore[return-value]


def cell_color(cell: Cell, intensity: float, exploded: bool = False, show_mines: bool = False) -> Color:
    """Fill colour of a cell; hidden cells are brightened by the ripple intensity."""
    if cell.revealed:
        if cell.is_mine:
            return EXPLODED_COLOR if exploded else MINE_COLOR
        return REVEALED_COLOR
    if show_mines and cell.is_mine:
        return MINE_COLOR
    return scale_color(HIDDEN_COLOR, intensity)


def probability_label(value: Optional[float]) -> str:
    if value is None:
        return ""
    return f"{round(value * 100)}"


class BoardRenderer:
    def __init__(self, render_system: RenderSystem, intensity: IntensityGrid, padding: int = CELL_PADDING):
        self._rs = render_system
        self._intensity = intensity
        self._padding = padding

    def render(self, arcade, board: Board, geometry, *, playhead: int | None, lost_at, probabilities, headless: bool) -> None:
        tile_size, start_x, start_y = geometry
        rs = self._rs
        rs._last_cell_layout = {}
        show_mines = lost_at is not None
        draw_size = max(tile_size - self._padding, 2)

        for row in range(board.rows):
            for col in range(board.cols):
                cell = board.cells[row][col]
                left, bottom = cell_origin(row, col, tile_size, start_x, start_y, board.rows)
                color = cell_color(cell, self._intensity.intensity(row, col), (row, col) == lost_at, show_mines)
                rs._last_cell_layout[(row, col)] = (left, bottom, color)
                if headless:
                    continue
                arcade.draw_lrbt_rectangle_filled(left, left + draw_size, bottom, bottom + draw_size, color)
                cx = left + draw_size / 2
                cy = bottom + draw_size / 2
                if cell.revealed and not cell.is_mine and cell.number > 0:
                    arcade.draw_text(
                        str(cell.number), cx, cy, NUMBER_COLORS[cell.number],
                        font_size=max(6, int(tile_size * 0.45)), anchor_x="center", anchor_y="center", bold=True,
                    )
                elif cell.flagged:
                    flag = MUTED_FLAG_COLOR if cell.muted else FLAG_COLOR
                    half = draw_size * 0.3
                    arcade.draw_triangle_filled(cx - half, cy - half, cx - half, cy + half, cx + half, cy, flag)
                elif probabilities is not None and probabilities[row][col] is not None:
                    arcade.draw_text(
                        probability_label(probabilities[row][col]), cx, cy, (210, 210, 230),
                        font_size=max(5, int(tile_size * 0.28)), anchor_x="center", anchor_y="center",
                    )
                if cell.muted and not cell.revealed:
                    inset = draw_size * 0.2
                    arcade.draw_line(left + inset, bottom + inset, left + draw_size - inset, bottom + draw_size - inset, MUTE_MARK_COLOR, 2)

        if playhead is not None and not headless:
            left = start_x + playhead * tile_size
            arcade.draw_lrbt_rectangle_filled(left, left + tile_size, start_y, start_y + board.rows * tile_size, PLAYHEAD_COLOR)
