"""
Text format for boards.

Lets tests and debugging sessions write a layout by hand instead of
generating one.
"""

from __future__ import annotations

from net_grid import BoardRegion, CellGrid
from net_types import Cell, mask_from_str, mask_to_str

__all__ = ["parse_board", "format_board"]


def parse_board(definition: str, wraps: bool = False) -> CellGrid:
    """
    Parse a board from a compact string format.

    Format:
    - Rows separated by |
    - Cells separated by spaces
    - Each cell is a mask, optionally prefixed and suffixed:
      * Letters from U, D, L, R: the cell's generated connectors
        Examples: "R" -> terminal facing right, "LR" -> straight horizontal
      * Underscore (_): Free cell (not part of the network)
      * Hash (#): Blocked cell
      * '*' prefix: the root (server) cell, at most one per board
        Example: "*DR"
      * '@' suffix: rotation in degrees applied on top of the layout
        Examples: "L@90", "*UD@-180"

    The whole matrix is the board.

    Example:
        "*R LR L"
        Creates a 3x1 board: root on the left linked through a straight
        piece to a terminal on the right.

    Args:
        definition: The board definition
        wraps: Whether the board wraps around its edges

    Returns:
        CellGrid holding the board, with connection flags not yet computed
    """
    row_strings = definition.strip().split("|")
    rows: list[list[tuple[str, bool, int]]] = []

    for row_idx, row_str in enumerate(row_strings):
        tokens: list[tuple[str, bool, int]] = []
        for col_idx, cell_str in enumerate(row_str.split()):
            is_root = cell_str.startswith("*")
            body = cell_str[1:] if is_root else cell_str
            mask_str, _, rot_str = body.partition("@")
            try:
                rotation = int(rot_str) if rot_str else 0
                mask_from_str(mask_str)
                if rotation % 90 != 0:
                    raise ValueError(f"rotation {rotation} is not a multiple of 90")
            except ValueError as err:
                raise ValueError(
                    f"Invalid cell string: '{cell_str}'\n"
                    f"  Row {row_idx}: \"{row_str}\"\n"
                    f"  Position: column {col_idx}\n"
                    f"  Problem: {err}\n"
                    f"  Valid formats:\n"
                    f"    - Letters from 'UDLR': connectors (e.g., 'R', 'UDL')\n"
                    f"    - '_': Free cell\n"
                    f"    - '#': Blocked cell\n"
                    f"    - '*' prefix: root cell (e.g., '*DR')\n"
                    f"    - '@' suffix: rotation in degrees (e.g., 'L@90')"
                ) from None
            tokens.append((mask_str, is_root, rotation))
        rows.append(tokens)

    # Validate all rows have same length
    cols = len(rows[0])
    if cols == 0:
        raise ValueError("Board definition has no cells")
    mismatched = [(i, len(row)) for i, row in enumerate(rows) if len(row) != cols]
    if mismatched:
        error_msg = (
            f"Inconsistent row lengths in board\n"
            f"  Expected: {cols} columns (from row 0)\n"
            f"  Mismatched rows:\n"
        )
        for row_idx, actual_cols in mismatched:
            error_msg += f"    Row {row_idx}: {actual_cols} columns - \"{row_strings[row_idx]}\"\n"
        error_msg += "  All rows must have the same number of cells"
        raise ValueError(error_msg)

    roots = [(x, y) for y, row in enumerate(rows) for x, (_, is_root, _) in enumerate(row) if is_root]
    if len(roots) > 1:
        raise ValueError(f"Board has {len(roots)} root cells at {roots}; at most one is allowed")

    grid = CellGrid(cols, len(rows))
    grid.reset(BoardRegion(0, 0, cols, len(rows)), wraps)
    for y, row in enumerate(rows):
        for x, (mask_str, is_root, rotation) in enumerate(row):
            cell = grid.cell(x, y)
            cell.reset(mask_from_str(mask_str))
            cell.rotation = rotation
            if is_root:
                grid.set_root(cell)

    return grid


def _format_cell(cell: Cell) -> str:
    text = mask_to_str(cell.directions)
    if cell.is_root:
        text = "*" + text
    if cell.rotation % 360 != 0:
        text += f"@{cell.rotation}"
    return text


def format_board(grid: CellGrid) -> str:
    """Write a grid's board in parse_board() format."""
    region = grid.region
    return "|".join(
        " ".join(_format_cell(grid.cell(x, y)) for x in range(region.start_x, region.end_x))
        for y in range(region.start_y, region.end_y)
    )
