"""
Connectivity of the live board.

Connections are recomputed from scratch after every rotation by a
breadth-first flood from the root over links that both ends agree on.
"""

from __future__ import annotations

from collections import deque

from net_grid import CellGrid
from net_types import CARDINALS, Cell, CellPosition, Direction


def _has_new_connection(grid: CellGrid, cell: Cell, direction: Direction, got: set[CellPosition]) -> Cell | None:
    """
    Check for a link from cell in direction to a cell not yet in got.

    A link needs both cells to expose facing connectors. If there is one, the
    other cell is added to got.

    Returns:
        The newly reached cell, or None
    """
    other = grid.neighbor(cell, direction)
    if other is None or other.position in got:
        return None

    if not cell.has_connection(direction) or not other.has_connection(direction.reverse):
        return None

    got.add(other.position)
    return other


def connected_positions(grid: CellGrid) -> set[CellPosition]:
    """
    Positions reachable from the root through agreed links.

    Empty when there is no root or the root has been turned away from its
    generated orientation.
    """
    got: set[CellPosition] = set()
    root = grid.root
    if root is None or root.is_rotated:
        return got

    got.add(root.position)
    queue: deque[Cell] = deque([root])
    while queue:
        cell = queue.popleft()
        for direction in CARDINALS:
            other = _has_new_connection(grid, cell, direction, got)
            if other is not None:
                queue.append(other)
    return got


def update_connections(grid: CellGrid) -> bool:
    """
    Recompute the connected flag of every cell in the matrix.

    Returns:
        True if at least one cell is connected now that was not before. A
        second call with no rotation in between returns False.
    """
    got = connected_positions(grid)

    new_connections = 0
    for cell in grid.all_cells():
        now_connected = cell.position in got
        if now_connected and not cell.connected:
            new_connections += 1
        cell.connected = now_connected

    return new_connections != 0


def is_solved(grid: CellGrid) -> bool:
    """
    True if every terminal (degree-1 cell) on the board is connected.

    Junctions and unused cells need not be connected; some layouts reach every
    terminal without using every cable. Reads the flags left by
    update_connections().
    """
    for cell in grid.board_cells():
        if cell.degree == 1 and not cell.connected:
            return False
    return True


def unconnected_cells(grid: CellGrid) -> int:
    """Number of board cells that are part of the network but not connected."""
    return sum(
        1
        for cell in grid.board_cells()
        if not cell.is_unused and not cell.connected
    )
