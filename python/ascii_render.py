"""
ASCII rendering of a board.

Each cell is drawn as one box-drawing character showing its exposed
connectors, coloured by state. Meant for terminals and debugging; the
engine itself never renders.
"""

from __future__ import annotations

import logging
from typing import Callable

import simple_chalk as chalk  # type: ignore[import-untyped]

from net_grid import CellGrid
from net_types import Blocked, Cell, Direction, Free

logger = logging.getLogger(__name__)

U, D, L, R = Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT

GLYPHS: dict[frozenset[Direction], str] = {
    frozenset(): " ",
    frozenset({U}): "╵",
    frozenset({D}): "╷",
    frozenset({L}): "╴",
    frozenset({R}): "╶",
    frozenset({U, D}): "│",
    frozenset({L, R}): "─",
    frozenset({D, R}): "┌",
    frozenset({D, L}): "┐",
    frozenset({U, R}): "└",
    frozenset({U, L}): "┘",
    frozenset({U, D, R}): "├",
    frozenset({U, D, L}): "┤",
    frozenset({D, L, R}): "┬",
    frozenset({U, L, R}): "┴",
    frozenset({U, D, L, R}): "┼",
}

FREE_CHAR = "·"
BLOCKED_CHAR = " "
BLIND_CHAR = "?"


def glyph(cell: Cell) -> str:
    """Character for a cell's exposed connectors, ignoring colour."""
    mask = cell.effective_mask
    match mask:
        case Free():
            return FREE_CHAR
        case Blocked():
            return BLOCKED_CHAR
    if cell.blind:
        return BLIND_CHAR
    return GLYPHS[mask]


def cell_color(cell: Cell) -> Callable[[str], str]:
    """
    Colour for a cell.

    Root yellow, locked blue, connected green, disconnected red; unused cells
    are left plain.
    """
    if cell.is_unused:
        return lambda s: s
    if cell.is_root:
        return chalk.yellowBright if cell.connected else chalk.yellow
    if cell.locked:
        return chalk.blueBright if cell.connected else chalk.blue
    return chalk.green if cell.connected else chalk.red


def render_board(
    grid: CellGrid,
    color: bool = True,
    whole_grid: bool = False,
    highlight: tuple[int, int] | None = None,
) -> str:
    """
    Render the board to a string, one text line per row of cells.

    Args:
        grid: The grid to draw
        color: Add ANSI colours
        whole_grid: Draw the full matrix rather than just the board
        highlight: Optional (x, y) of a cell to draw in white, e.g. the focus

    Returns:
        Rendered board, rows joined by newlines
    """
    if whole_grid:
        xs = range(grid.width)
        ys = range(grid.height)
    else:
        xs = range(grid.region.start_x, grid.region.end_x)
        ys = range(grid.region.start_y, grid.region.end_y)

    lines: list[str] = []
    for y in ys:
        chars: list[str] = []
        for x in xs:
            cell = grid.cell(x, y)
            char = glyph(cell)
            if color:
                colorize = chalk.white if highlight == (x, y) else cell_color(cell)
                char = colorize(char)
            chars.append(char)
        lines.append("".join(chars))

    logger.debug("render_board: %d rows x %d cols, color=%s", len(ys), len(xs), color)
    return "\n".join(lines)
