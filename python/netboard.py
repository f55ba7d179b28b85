"""
The puzzle engine.

NetBoard owns one cell matrix and runs games on it: generating a network,
scrambling it, applying the player's rotate/lock commands, tracking which
cells are connected to the server, and planning auto-solve moves. Every
operation that touches cell state holds the board lock.
"""

from __future__ import annotations

import logging
import random
import threading

from net_autosolve import plan_moves
from net_connectivity import is_solved, unconnected_cells, update_connections
from net_generator import (
    MAX_NET_TRIES,
    MIN_FILL_RATIO,
    RandomSource,
    build_network,
    scramble,
)
from net_grid import BoardRegion, CellGrid, board_region
from net_state import (
    BoardRecord,
    SolvedSnapshot,
    apply_record,
    capture_snapshot,
    export_board,
    occupied_region,
    orient_record,
)
from net_types import (
    Cell,
    CellPosition,
    LockToggled,
    Move,
    Rejected,
    RejectReason,
    RestoreFailure,
    Rotated,
    SkillConfig,
    SkillLevel,
    as_skill_config,
)

logger = logging.getLogger(__name__)


class NetBoard:
    """
    A network puzzle on a fixed-size grid.

    Usage:
        board = NetBoard(17, 10, rng=random.Random(7))
        board.new_game(SkillLevel.EXPERT)
        result = board.rotate(3, 4)
        if isinstance(result, Rejected):
            ...
        for move in board.plan_autosolve():
            board.apply_move(move)
    """

    def __init__(self, grid_width: int, grid_height: int, rng: RandomSource | None = None) -> None:
        self.grid = CellGrid(grid_width, grid_height)
        self.rng: RandomSource = rng if rng is not None else random.SystemRandom()
        self.skill: SkillConfig | None = None
        self.focus: CellPosition | None = None
        self.solved_snapshot: SolvedSnapshot | None = None
        self.click_count = 0
        self._prev_clicked: CellPosition | None = None
        self._lock = threading.RLock()

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    @property
    def region(self) -> BoardRegion:
        return self.grid.region

    @property
    def root(self) -> Cell | None:
        return self.grid.root

    def cell(self, x: int, y: int) -> Cell:
        return self.grid.cell(x, y)

    # =========================================================================
    # Game Setup
    # =========================================================================

    def reset_board(self, skill: SkillConfig | SkillLevel, region: BoardRegion | None = None) -> None:
        """Size and clear the board for a skill level, centred unless a region is given."""
        skill = as_skill_config(skill)
        if region is None:
            region = board_region(self.width, self.height, skill)
        with self._lock:
            self.skill = skill
            self.grid.reset(region, skill.wraps)
            self.focus = None
            self.click_count = 0
            self._prev_clicked = None

    def new_game(
        self,
        skill: SkillConfig | SkillLevel,
        min_fill: float = MIN_FILL_RATIO,
        max_tries: int = MAX_NET_TRIES,
    ) -> int:
        """
        Set up a new scrambled puzzle.

        Returns:
            Number of board cells used by the network
        """
        skill = as_skill_config(skill)
        with self._lock:
            self.reset_board(skill)
            cells, _ = build_network(self.grid, skill, self.rng, min_fill, max_tries)

            assert self.grid.root is not None
            self.focus = self.grid.root.position
            self.solved_snapshot = capture_snapshot(self.grid, self.focus)

            scramble(self.grid, skill, self.rng)
            update_connections(self.grid)
            return cells

    # =========================================================================
    # Player Commands
    # =========================================================================

    def set_focus(self, x: int | None, y: int | None = None) -> None:
        """Focus a cell; set_focus(None) clears the focus."""
        with self._lock:
            if x is None or y is None:
                self.focus = None
            else:
                self.focus = self.grid.cell(x, y).position

    def rotate(self, x: int, y: int, degrees: int = 90) -> Rotated | Rejected:
        """
        Turn a cell a quarter turn in response to the player.

        Unused and locked cells are refused without changing anything.
        """
        if degrees not in (90, -90):
            raise ValueError(f"Cells turn in steps of +90 or -90 degrees, got {degrees}")
        with self._lock:
            cell = self.grid.cell(x, y)
            if cell.is_unused:
                logger.debug("rotate (%d, %d) rejected: unused cell", x, y)
                return Rejected(cell.position, RejectReason.UNUSED_CELL)
            if cell.locked:
                logger.debug("rotate (%d, %d) rejected: locked", x, y)
                return Rejected(cell.position, RejectReason.LOCKED)

            self.focus = cell.position
            was_solved = is_solved(self.grid)
            result = self._turn(cell, degrees)
            self._count_click(cell.position, was_solved)
            return result

    def toggle_lock(self, x: int, y: int) -> LockToggled | Rejected:
        with self._lock:
            cell = self.grid.cell(x, y)
            if cell.is_unused:
                logger.debug("lock (%d, %d) rejected: unused cell", x, y)
                return Rejected(cell.position, RejectReason.UNUSED_CELL)

            self.focus = cell.position
            cell.locked = not cell.locked
            return LockToggled(cell.position, cell.locked)

    def apply_move(self, move: Move) -> Rotated:
        """
        Execute one programmed auto-solve move.

        The cell is focused, unlocked and revealed before it turns.
        """
        with self._lock:
            cell = self.grid.cell(move.x, move.y)
            self.focus = cell.position
            cell.locked = False
            cell.blind = False
            return self._turn(cell, move.degrees)

    def _turn(self, cell: Cell, degrees: int) -> Rotated:
        cell.rotate(degrees)
        newly_connected = update_connections(self.grid)
        solved = is_solved(self.grid)
        if solved:
            for board_cell in self.grid.board_cells():
                board_cell.blind = False
        return Rotated(cell.position, degrees, newly_connected, solved)

    def _count_click(self, pos: CellPosition, was_solved: bool) -> None:
        # Repeat turns of one cell count once: three clockwise turns are one anticlockwise turn
        if pos != self._prev_clicked and not was_solved:
            self.click_count += 1
            self._prev_clicked = pos

    # =========================================================================
    # Queries
    # =========================================================================

    def update_connections(self) -> bool:
        """Recompute connections; True if any cell newly connected."""
        with self._lock:
            return update_connections(self.grid)

    def is_solved(self) -> bool:
        with self._lock:
            return is_solved(self.grid)

    def unconnected_cells(self) -> int:
        with self._lock:
            return unconnected_cells(self.grid)

    def plan_autosolve(self) -> list[Move]:
        """Moves that restore the generated layout; empty before any game."""
        with self._lock:
            return plan_moves(self.solved_snapshot, self.grid, self.rng)

    # =========================================================================
    # Save / Restore
    # =========================================================================

    def export_state(self) -> BoardRecord:
        with self._lock:
            return export_board(self.grid, self.focus, self.solved_snapshot)

    def restore_state(self, record: BoardRecord, skill: SkillConfig | SkillLevel) -> bool:
        """
        Load a saved game.

        The saved grid may be this grid or this grid turned on its side. The
        board region is taken from where the saved cells land, so a board with
        an odd margin keeps its neighbours. On failure the board is left
        untouched and the caller should start a new game.

        Returns:
            True if the game was restored
        """
        skill = as_skill_config(skill)
        with self._lock:
            oriented = orient_record(record, self.width, self.height)
            if isinstance(oriented, RestoreFailure):
                logger.warning("restore failed: %s (%s)", oriented.reason.value, oriented.details)
                return False

            self.reset_board(skill, occupied_region(oriented))
            apply_record(oriented, self.grid)
            self.focus = oriented.focus
            self.solved_snapshot = oriented.solved
            update_connections(self.grid)
            return True
