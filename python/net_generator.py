"""
Random network generation.

A network is grown from a random root cell. Each pass over the work list
either grows up to two (three on branchier skills) links from the front cell
or defers that cell to the back of the list, which keeps branches from
running in long straight corridors.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Protocol

from net_grid import CellGrid
from net_types import CARDINALS, FREE, Cell, Free, SkillConfig, SkillLevel, as_skill_config

logger = logging.getLogger(__name__)

# Accept a net once this share of the board is in use
MIN_FILL_RATIO = 0.85

# Give up on the fill ratio after this many attempts and keep the last net
MAX_NET_TRIES = 10


class RandomSource(Protocol):
    """The part of random.Random the engine draws from."""

    def randrange(self, stop: int) -> int: ...


def coin(rng: RandomSource) -> bool:
    return rng.randrange(2) == 0


def check_board(grid: CellGrid) -> None:
    """Raise ValueError if no network can be laid out on the grid's board."""
    region = grid.region
    if region.cell_count < 2:
        raise ValueError(
            f"Board {region.width}x{region.height} is too small for a network\n"
            f"  A board needs at least two cells"
        )
    if grid.wraps and (region.width < 2 or region.height < 2):
        raise ValueError(
            f"Wrapping board {region.width}x{region.height} links cells to themselves\n"
            f"  Wrapping boards need at least two cells in each direction"
        )


def add_random_dir(grid: CellGrid, worklist: deque[Cell], rng: RandomSource) -> Cell | None:
    """
    Link the front cell of the work list to one of its Free neighbours.

    The neighbour is picked uniformly among the Free ones, gets the reverse
    link, and is appended to the work list. Does nothing if the front cell has
    no Free neighbour.

    Returns:
        The newly linked cell, or None
    """
    cell = worklist[0]
    candidates = []
    for direction in CARDINALS:
        other = grid.neighbor(cell, direction)
        if other is not None and isinstance(other.directions, Free):
            candidates.append((direction, other))

    if not candidates:
        return None

    direction, dest = candidates[rng.randrange(len(candidates))]
    cell.add_dir(direction)
    dest.add_dir(direction.reverse)
    worklist.append(dest)
    return dest


def create_net(grid: CellGrid, skill: SkillConfig | SkillLevel, rng: RandomSource) -> int:
    """
    Lay out one random network on the grid's board.

    The grid must already have been reset for the board. May be called
    repeatedly; every call starts again from an empty board.

    Returns:
        Number of board cells used by the network
    """
    skill = as_skill_config(skill)
    check_board(grid)
    region = grid.region

    for cell in grid.board_cells():
        cell.reset(FREE)
    grid.set_root(None)

    root = grid.cell(
        region.start_x + rng.randrange(region.width),
        region.start_y + rng.randrange(region.height),
    )
    grid.set_root(root)
    root.connected = True

    worklist: deque[Cell] = deque([root])
    if coin(rng):
        add_random_dir(grid, worklist, rng)

    while worklist:
        if coin(rng):
            add_random_dir(grid, worklist, rng)

            # Half the time, try a second branch from the same cell
            if coin(rng):
                add_random_dir(grid, worklist, rng)

            # A third branch makes nets busier, and allows 4-way crosses
            if skill.branch_factor >= 3 and rng.randrange(3) == 0:
                add_random_dir(grid, worklist, rng)
        else:
            worklist.append(worklist[0])

        worklist.popleft()

    cells = sum(1 for cell in grid.board_cells() if not isinstance(cell.directions, Free))
    logger.debug("created net with %d cells, root at (%d, %d)", cells, root.x, root.y)
    return cells


def build_network(
    grid: CellGrid,
    skill: SkillConfig | SkillLevel,
    rng: RandomSource,
    min_fill: float = MIN_FILL_RATIO,
    max_tries: int = MAX_NET_TRIES,
) -> tuple[int, int]:
    """
    Generate networks until one fills enough of the board.

    The last attempt is kept even if it is too sparse.

    Returns:
        Tuple of (cells used, attempts made)
    """
    if max_tries < 1:
        raise ValueError(f"max_tries must be at least 1, got {max_tries}")

    min_cells = int(grid.region.cell_count * min_fill)
    cells = 0
    tries = 0
    while tries < max_tries and (tries == 0 or cells < min_cells):
        cells = create_net(grid, skill, rng)
        tries += 1

    logger.info("created net in %d tries with %d cells (min %d)", tries, cells, min_cells)
    return (cells, tries)


def scramble(grid: CellGrid, skill: SkillConfig | SkillLevel, rng: RandomSource) -> None:
    """
    Turn every board cell by a random amount in {-180, -90, 0, +90}.

    Cells with at least the skill's blind threshold of connectors are hidden.
    """
    skill = as_skill_config(skill)
    for cell in grid.board_cells():
        cell.rotation = (rng.randrange(4) - 2) * 90
        if cell.degree >= skill.blind_threshold:
            cell.blind = True
