"""
Cell matrix and neighbour resolution.

The matrix is a fixed width x height arena of cells addressed by
(x, y). Only a centred sub-rectangle of it, the board, takes part in a game;
the board size depends on the skill level. Neighbours are not stored on the
cells: they are computed on demand from the board region and the wrap flag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from net_types import (
    BLOCKED,
    FREE,
    Cell,
    CellPosition,
    Direction,
    SkillConfig,
    SkillLevel,
    as_skill_config,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardRegion:
    """The active board inside the cell matrix. End coordinates are exclusive."""

    start_x: int
    start_y: int
    width: int
    height: int

    @property
    def end_x(self) -> int:
        return self.start_x + self.width

    @property
    def end_y(self) -> int:
        return self.start_y + self.height

    @property
    def cell_count(self) -> int:
        return self.width * self.height

    def contains(self, x: int, y: int) -> bool:
        return self.start_x <= x < self.end_x and self.start_y <= y < self.end_y

    def positions(self) -> Iterator[CellPosition]:
        for y in range(self.start_y, self.end_y):
            for x in range(self.start_x, self.end_x):
                yield CellPosition(x, y)


def board_region(grid_width: int, grid_height: int, skill: SkillConfig | SkillLevel) -> BoardRegion:
    """
    Centre the skill's board in the grid.

    The board is clamped to the grid, so a small grid plays every skill on
    the whole matrix.
    """
    board_w, board_h = as_skill_config(skill).board_size(grid_width, grid_height)
    board_w = min(board_w, grid_width)
    board_h = min(board_h, grid_height)
    return BoardRegion(
        (grid_width - board_w) // 2,
        (grid_height - board_h) // 2,
        board_w,
        board_h,
    )


def incr(v: int, lo: int, hi: int) -> int:
    """v + 1, wrapped to stay in [lo, hi)."""
    return v + 1 if v < hi - 1 else lo


def decr(v: int, lo: int, hi: int) -> int:
    """v - 1, wrapped to stay in [lo, hi)."""
    return v - 1 if v > lo else hi - 1


def neighbor_position(
    x: int,
    y: int,
    direction: Direction,
    region: BoardRegion,
    wraps: bool,
) -> CellPosition | None:
    """
    Find the neighbour of a board position.

    Wrapping boards wrap at the board edge, not the matrix edge. Non-wrapping
    boards have no neighbour across the board edge, and positions outside the
    board have no neighbours at all.

    Returns:
        Position of the neighbour, or None if there is no link in that direction
    """
    if not region.contains(x, y):
        return None

    if direction == Direction.UP:
        if not wraps and y == region.start_y:
            return None
        return CellPosition(x, decr(y, region.start_y, region.end_y))
    elif direction == Direction.DOWN:
        if not wraps and y == region.end_y - 1:
            return None
        return CellPosition(x, incr(y, region.start_y, region.end_y))
    elif direction == Direction.LEFT:
        if not wraps and x == region.start_x:
            return None
        return CellPosition(decr(x, region.start_x, region.end_x), y)
    else:
        if not wraps and x == region.end_x - 1:
            return None
        return CellPosition(incr(x, region.start_x, region.end_x), y)


class CellGrid:
    """
    Arena of cells for one game.

    Usage:
        grid = CellGrid(12, 9)
        grid.reset(board_region(12, 9, SkillLevel.NOVICE), wraps=False)
        for cell in grid.board_cells():
            ...
    """

    def __init__(self, width: int, height: int) -> None:
        if width < 1 or height < 1:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.region = BoardRegion(0, 0, width, height)
        self.wraps = False
        self.root: Cell | None = None
        self._cells = [[Cell(x, y) for x in range(width)] for y in range(height)]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> Cell:
        if not self.in_bounds(x, y):
            raise ValueError(
                f"Cell ({x}, {y}) is outside the {self.width}x{self.height} grid"
            )
        return self._cells[y][x]

    def cell_at(self, pos: CellPosition) -> Cell:
        return self.cell(pos.x, pos.y)

    def neighbor(self, cell: Cell, direction: Direction) -> Cell | None:
        pos = neighbor_position(cell.x, cell.y, direction, self.region, self.wraps)
        return self.cell_at(pos) if pos is not None else None

    def all_cells(self) -> Iterator[Cell]:
        for row in self._cells:
            yield from row

    def board_cells(self) -> Iterator[Cell]:
        for pos in self.region.positions():
            yield self._cells[pos.y][pos.x]

    def reset(self, region: BoardRegion, wraps: bool) -> None:
        """
        Prepare the matrix for a new board.

        Every cell's state is overwritten: board cells become Free and cells
        outside the board become Blocked. Safe to call any number of times.
        """
        if region.end_x > self.width or region.end_y > self.height or region.start_x < 0 or region.start_y < 0:
            raise ValueError(
                f"Board region {region} does not fit the {self.width}x{self.height} grid"
            )
        self.region = region
        self.wraps = wraps
        self.root = None
        for cell in self.all_cells():
            cell.reset(FREE if region.contains(cell.x, cell.y) else BLOCKED)
        logger.info(
            "reset board %dx%d at (%d, %d) in %dx%d grid, wraps=%s",
            region.width,
            region.height,
            region.start_x,
            region.start_y,
            self.width,
            self.height,
            wraps,
        )

    def set_root(self, cell: Cell | None) -> None:
        """Make cell the single server cell of the board."""
        if self.root is not None:
            self.root.is_root = False
        self.root = cell
        if cell is not None:
            cell.is_root = True
