"""
Auto-solver move planning.

The planner walks the solved snapshot breadth-first from the server, so
the moves run outward through the network, and compares each solved cell
with the live cell at the same place.
"""

from __future__ import annotations

import logging
from collections import deque

from net_generator import RandomSource, coin
from net_grid import CellGrid, neighbor_position
from net_state import SolvedSnapshot, orient_snapshot
from net_types import CARDINALS, CellPosition, Move

logger = logging.getLogger(__name__)


def solve_cell(snapshot: SolvedSnapshot, grid: CellGrid, pos: CellPosition, rng: RandomSource) -> list[Move]:
    """
    Moves that turn the live cell at pos into its solved layout.

    A half turn is two quarter turns the same way; which way is picked at
    random. Cells that no rotation can fix get no moves.
    """
    target = snapshot.mask_at(pos.x, pos.y)
    live = grid.cell_at(pos)
    if live.effective_mask == target:
        return []
    if live.rotated_mask(90) == target:
        return [Move(pos.x, pos.y, 90)]
    if live.rotated_mask(-90) == target:
        return [Move(pos.x, pos.y, -90)]
    if live.rotated_mask(180) == target:
        rot = 90 if coin(rng) else -90
        return [Move(pos.x, pos.y, rot), Move(pos.x, pos.y, rot)]

    logger.debug("no rotation solves cell (%d, %d)", pos.x, pos.y)
    return []


def plan_moves(snapshot: SolvedSnapshot | None, grid: CellGrid, rng: RandomSource) -> list[Move]:
    """
    Build the programmed move list that returns the grid to its solved layout.

    Neighbours are followed through the snapshot's own links, so cells are
    visited in solved-network order whatever the live rotations are.

    Args:
        snapshot: Solved layout saved when the net was created, or None
        grid: Live grid; its board region and wrap flag decide neighbours
        rng: Source for the direction of half turns

    Returns:
        Moves in execution order; empty if there is no usable snapshot
    """
    if snapshot is None:
        return []

    solved = orient_snapshot(snapshot, grid.width, grid.height)
    if solved is None:
        logger.warning(
            "solved snapshot %dx%d does not fit %dx%d grid",
            snapshot.grid_width,
            snapshot.grid_height,
            grid.width,
            grid.height,
        )
        return []

    moves: list[Move] = []
    seen = {solved.root}
    queue: deque[CellPosition] = deque([solved.root])
    while queue:
        pos = queue.popleft()
        moves.extend(solve_cell(solved, grid, pos, rng))

        mask = solved.mask_at(pos.x, pos.y)
        if not isinstance(mask, frozenset):
            continue
        for direction in CARDINALS:
            if direction not in mask:
                continue
            nxt = neighbor_position(pos.x, pos.y, direction, grid.region, grid.wraps)
            if nxt is not None and nxt not in seen:
                seen.add(nxt)
                queue.append(nxt)

    logger.info("auto-solve planned %d moves", len(moves))
    return moves
