from minebeat.constants import (
    BOARD_MAX_HEIGHT_PCT,
    BOARD_MAX_WIDTH_PCT,
    BOTTOM_MARGIN,
    MIN_TILE_SIZE,
    TOP_MARGIN,
)


def compute_board_geometry(window_width: int, window_height: int, rows: int, cols: int):
    """Return (tile_size, start_x, start_y) for a rows x cols board.

    Shared by the renderer and the input system so clicks map onto the drawn cells.
    ``start_y`` is the bottom edge of the board; row 0 is drawn at the top.
    """
    max_board_w = window_width * BOARD_MAX_WIDTH_PCT
    max_board_h = (window_height - BOTTOM_MARGIN - TOP_MARGIN) * BOARD_MAX_HEIGHT_PCT
    tile_by_w = max_board_w / cols
    tile_by_h = max_board_h / rows
    tile_size = int(min(tile_by_w, tile_by_h))
    if tile_size < MIN_TILE_SIZE:
        tile_size = MIN_TILE_SIZE
    total_width = cols * tile_size
    start_x = (window_width - total_width) / 2
    start_y = BOTTOM_MARGIN
    return tile_size, start_x, start_y


def cell_at_point(x: float, y: float, window_width: int, window_height: int, rows: int, cols: int):
    """Board (row, col) under a window point, or None when the point misses the board."""
    tile_size, start_x, start_y = compute_board_geometry(window_width, window_height, rows, cols)
    col = int((x - start_x) // tile_size)
    screen_row = int((y - start_y) // tile_size)
    if col < 0 or col >= cols or screen_row < 0 or screen_row >= rows:
        return None
    return rows - 1 - screen_row, col


def cell_origin(row: int, col: int, tile_size: int, start_x: float, start_y: float, rows: int):
    """Bottom-left corner of a cell in window coordinates."""
    return start_x + col * tile_size, start_y + (rows - 1 - row) * tile_size
