"""
Saved board state.

A BoardRecord holds everything needed to put a game back on a grid: each
cell's layout, rotation and flags, the root and focus positions, and the
solved snapshot used by the auto-solver. The storage format belongs to the
caller; record_to_dict()/record_from_dict() convert to plain data.

Records survive a device rotation. If the saved grid is the current grid
with width and height swapped, cells are moved by a quarter turn:

- Rotate left (current grid is landscape): (x, y) -> (y, H - x - 1), and
  every cell layout turns -90 degrees.
- Rotate right (current grid is portrait): (x, y) -> (W - y - 1, x), and
  every cell layout turns +90 degrees.

W and H are the current grid's width and height.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping

from net_grid import BoardRegion, CellGrid
from net_types import (
    BLOCKED,
    Blocked,
    CellPosition,
    ConnectionMask,
    RestoreFailure,
    RestoreFailureReason,
    mask_from_str,
    mask_to_str,
    rotate_mask,
)

logger = logging.getLogger(__name__)


class Orientation(Enum):
    """How a saved grid sits relative to the current grid."""

    SAME = "same"
    ROTATE_LEFT = "rotate_left"
    ROTATE_RIGHT = "rotate_right"


def orientation_for(saved_width: int, saved_height: int, grid_width: int, grid_height: int) -> Orientation | None:
    """
    Work out how to map a saved grid onto the current one.

    Returns:
        The orientation, or None if the dimensions are incompatible
    """
    if saved_width == grid_width and saved_height == grid_height:
        return Orientation.SAME
    if saved_width == grid_height and saved_height == grid_width:
        if grid_width > grid_height:
            return Orientation.ROTATE_LEFT
        return Orientation.ROTATE_RIGHT
    return None


def map_position(orientation: Orientation, x: int, y: int, grid_width: int, grid_height: int) -> CellPosition:
    """Map a saved position into the current grid."""
    match orientation:
        case Orientation.SAME:
            return CellPosition(x, y)
        case Orientation.ROTATE_LEFT:
            return CellPosition(y, grid_height - x - 1)
        case Orientation.ROTATE_RIGHT:
            return CellPosition(grid_width - y - 1, x)


def quarter_turn(orientation: Orientation) -> int:
    """Degrees every cell layout turns under an orientation."""
    match orientation:
        case Orientation.SAME:
            return 0
        case Orientation.ROTATE_LEFT:
            return -90
        case Orientation.ROTATE_RIGHT:
            return 90


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class CellRecord:
    """Saved state of one cell."""

    directions: ConnectionMask
    rotation: int = 0
    locked: bool = False
    blind: bool = False
    root: bool = False


@dataclass(frozen=True)
class SolvedSnapshot:
    """
    The generated layout of a board, kept for the auto-solver.

    Plain data: masks[y][x] is the solved mask of each cell in a
    grid_width x grid_height matrix.
    """

    grid_width: int
    grid_height: int
    root: CellPosition
    focus: CellPosition
    masks: tuple[tuple[ConnectionMask, ...], ...]

    def mask_at(self, x: int, y: int) -> ConnectionMask:
        return self.masks[y][x]


@dataclass(frozen=True)
class BoardRecord:
    """Saved state of a whole grid."""

    grid_width: int
    grid_height: int
    root: CellPosition | None
    focus: CellPosition | None
    cells: Mapping[CellPosition, CellRecord] = field(default_factory=dict)
    solved: SolvedSnapshot | None = None


def capture_snapshot(grid: CellGrid, focus: CellPosition | None = None) -> SolvedSnapshot:
    """Record the generated layout of the grid. Call before scrambling."""
    if grid.root is None:
        raise ValueError("Cannot capture a solved snapshot of a grid with no root cell")

    root = grid.root.position
    masks = tuple(
        tuple(grid.cell(x, y).directions for x in range(grid.width))
        for y in range(grid.height)
    )
    return SolvedSnapshot(grid.width, grid.height, root, focus or root, masks)


def orient_snapshot(snapshot: SolvedSnapshot, grid_width: int, grid_height: int) -> SolvedSnapshot | None:
    """
    Fit a snapshot to the current grid dimensions.

    Returns:
        The snapshot itself if the dimensions match, a rotated copy if they
        are swapped, or None if they are incompatible
    """
    orientation = orientation_for(snapshot.grid_width, snapshot.grid_height, grid_width, grid_height)
    if orientation is None:
        return None
    if orientation == Orientation.SAME:
        return snapshot

    turn = quarter_turn(orientation)
    masks: list[list[ConnectionMask]] = [[BLOCKED] * grid_width for _ in range(grid_height)]
    for y, row in enumerate(snapshot.masks):
        for x, mask in enumerate(row):
            pos = map_position(orientation, x, y, grid_width, grid_height)
            masks[pos.y][pos.x] = rotate_mask(mask, turn)

    return SolvedSnapshot(
        grid_width,
        grid_height,
        map_position(orientation, snapshot.root.x, snapshot.root.y, grid_width, grid_height),
        map_position(orientation, snapshot.focus.x, snapshot.focus.y, grid_width, grid_height),
        tuple(tuple(row) for row in masks),
    )


def export_board(
    grid: CellGrid,
    focus: CellPosition | None = None,
    solved: SolvedSnapshot | None = None,
) -> BoardRecord:
    """Save the full state of every cell in the grid."""
    cells = {
        cell.position: CellRecord(cell.directions, cell.rotation, cell.locked, cell.blind, cell.is_root)
        for cell in grid.all_cells()
    }
    root = grid.root.position if grid.root is not None else None
    return BoardRecord(grid.width, grid.height, root, focus, cells, solved)


def orient_record(record: BoardRecord, grid_width: int, grid_height: int) -> BoardRecord | RestoreFailure:
    """
    Fit a saved record to the current grid dimensions.

    Nothing is modified; the result can be committed with apply_record().

    Returns:
        A record with the current dimensions, or a RestoreFailure if the saved
        grid neither matches nor transposes onto the current one, or a cell
        record is missing
    """
    orientation = orientation_for(record.grid_width, record.grid_height, grid_width, grid_height)
    if orientation is None:
        return RestoreFailure(
            RestoreFailureReason.INCOMPATIBLE_DIMENSIONS,
            f"saved {record.grid_width}x{record.grid_height}, current {grid_width}x{grid_height}",
        )

    for name, pos in (("root", record.root), ("focus", record.focus)):
        if pos is not None and not (0 <= pos.x < record.grid_width and 0 <= pos.y < record.grid_height):
            return RestoreFailure(
                RestoreFailureReason.POSITION_OUT_OF_RANGE,
                f"{name} ({pos.x}, {pos.y}) outside saved {record.grid_width}x{record.grid_height} grid",
            )

    turn = quarter_turn(orientation)
    cells: dict[CellPosition, CellRecord] = {}
    for y in range(record.grid_height):
        for x in range(record.grid_width):
            saved = record.cells.get(CellPosition(x, y))
            if saved is None:
                return RestoreFailure(RestoreFailureReason.MISSING_CELL, f"no record for cell ({x}, {y})")
            pos = map_position(orientation, x, y, grid_width, grid_height)
            cells[pos] = replace(saved, directions=rotate_mask(saved.directions, turn)) if turn else saved

    def remap(pos: CellPosition | None) -> CellPosition | None:
        if pos is None:
            return None
        return map_position(orientation, pos.x, pos.y, grid_width, grid_height)

    if orientation != Orientation.SAME:
        logger.info(
            "restoring %dx%d grid onto %dx%d: %s",
            record.grid_width,
            record.grid_height,
            grid_width,
            grid_height,
            orientation.value,
        )
    return BoardRecord(grid_width, grid_height, remap(record.root), remap(record.focus), cells, record.solved)


def occupied_region(record: BoardRecord) -> BoardRegion | None:
    """
    Bounding box of the saved cells that are not Blocked.

    For a generated game this is exactly the board the record was saved with,
    wherever a device rotation has moved it.
    """
    used = [pos for pos, cell in record.cells.items() if not isinstance(cell.directions, Blocked)]
    if not used:
        return None
    min_x = min(pos.x for pos in used)
    min_y = min(pos.y for pos in used)
    max_x = max(pos.x for pos in used)
    max_y = max(pos.y for pos in used)
    return BoardRegion(min_x, min_y, max_x - min_x + 1, max_y - min_y + 1)


def apply_record(record: BoardRecord, grid: CellGrid) -> None:
    """
    Load an oriented record into the grid.

    The grid's board region should already be set; connection flags are
    cleared and need recomputing afterwards.
    """
    if record.grid_width != grid.width or record.grid_height != grid.height:
        raise ValueError(
            f"Record is {record.grid_width}x{record.grid_height} but grid is {grid.width}x{grid.height}\n"
            f"  Use orient_record() first"
        )

    grid.set_root(None)
    for cell in grid.all_cells():
        saved = record.cells[cell.position]
        cell.reset(saved.directions)
        cell.rotation = saved.rotation
        cell.locked = saved.locked
        cell.blind = saved.blind
    if record.root is not None:
        grid.set_root(grid.cell_at(record.root))


# =============================================================================
# Plain Data Conversion
# =============================================================================


def _pos_to_list(pos: CellPosition | None) -> list[int] | None:
    return [pos.x, pos.y] if pos is not None else None


def _pos_from_list(value: Any) -> CellPosition | None:
    if value is None:
        return None
    x, y = value
    return CellPosition(int(x), int(y))


def snapshot_to_dict(snapshot: SolvedSnapshot) -> dict[str, Any]:
    return {
        "grid_width": snapshot.grid_width,
        "grid_height": snapshot.grid_height,
        "root": _pos_to_list(snapshot.root),
        "focus": _pos_to_list(snapshot.focus),
        "masks": [[mask_to_str(mask) for mask in row] for row in snapshot.masks],
    }


def snapshot_from_dict(data: Mapping[str, Any]) -> SolvedSnapshot:
    root = _pos_from_list(data["root"])
    focus = _pos_from_list(data["focus"])
    if root is None or focus is None:
        raise ValueError("Solved snapshot needs root and focus positions")
    return SolvedSnapshot(
        int(data["grid_width"]),
        int(data["grid_height"]),
        root,
        focus,
        tuple(tuple(mask_from_str(text) for text in row) for row in data["masks"]),
    )


def record_to_dict(record: BoardRecord) -> dict[str, Any]:
    """Convert a record to JSON-compatible data. Cells are keyed "x,y"."""
    return {
        "grid_width": record.grid_width,
        "grid_height": record.grid_height,
        "root": _pos_to_list(record.root),
        "focus": _pos_to_list(record.focus),
        "cells": {
            f"{pos.x},{pos.y}": {
                "dirs": mask_to_str(cell.directions),
                "rotation": cell.rotation,
                "locked": cell.locked,
                "blind": cell.blind,
                "root": cell.root,
            }
            for pos, cell in record.cells.items()
        },
        "solved": snapshot_to_dict(record.solved) if record.solved is not None else None,
    }


def record_from_dict(data: Mapping[str, Any]) -> BoardRecord:
    """
    Rebuild a record from record_to_dict() output.

    Missing cells are left out of the record, so restoring it fails cleanly.

    Raises:
        ValueError: If a required key is missing or a value is malformed
    """
    try:
        cells: dict[CellPosition, CellRecord] = {}
        for key, value in data["cells"].items():
            x, y = (int(part) for part in key.split(","))
            cells[CellPosition(x, y)] = CellRecord(
                mask_from_str(value["dirs"]),
                int(value.get("rotation", 0)),
                bool(value.get("locked", False)),
                bool(value.get("blind", False)),
                bool(value.get("root", False)),
            )
        solved = data.get("solved")
        return BoardRecord(
            int(data["grid_width"]),
            int(data["grid_height"]),
            _pos_from_list(data.get("root")),
            _pos_from_list(data.get("focus")),
            cells,
            snapshot_from_dict(solved) if solved is not None else None,
        )
    except KeyError as err:
        raise ValueError(f"Saved board is missing key {err}") from err
