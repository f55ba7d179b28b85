"""Tests for auto-solve planning."""

import random

import pytest

from board_parser import parse_board
from net_autosolve import plan_moves, solve_cell
from net_connectivity import is_solved, update_connections
from net_state import SolvedSnapshot, capture_snapshot
from net_types import CellPosition, Move, SkillLevel
from netboard import NetBoard


def solved_board(definition: str, wraps: bool = False) -> SolvedSnapshot:
    """Parse a board and snapshot it with every rotation cleared."""
    layout = parse_board(definition, wraps)
    for cell in layout.all_cells():
        cell.rotation = 0
    return capture_snapshot(layout)


class TestSolveCell:
    """Tests for single-cell move selection."""

    def test_aligned_cell_needs_nothing(self) -> None:
        snapshot = solved_board("*R L")
        grid = parse_board("*R L")
        assert solve_cell(snapshot, grid, CellPosition(1, 0), random.Random(0)) == []

    def test_quarter_turn_back(self) -> None:
        snapshot = solved_board("*R L")
        grid = parse_board("*R L@90")
        assert solve_cell(snapshot, grid, CellPosition(1, 0), random.Random(0)) == [Move(1, 0, -90)]

    def test_quarter_turn_forward(self) -> None:
        snapshot = solved_board("*R L")
        grid = parse_board("*R L@-90")
        assert solve_cell(snapshot, grid, CellPosition(1, 0), random.Random(0)) == [Move(1, 0, 90)]

    @pytest.mark.parametrize("seed", range(8))
    def test_half_turn_is_two_moves_one_way(self, seed: int) -> None:
        snapshot = solved_board("*R L")
        grid = parse_board("*R L@180")
        moves = solve_cell(snapshot, grid, CellPosition(1, 0), random.Random(seed))
        assert len(moves) == 2
        assert moves[0] == moves[1]
        assert moves[0].degrees in (90, -90)

    def test_half_turn_direction_varies(self) -> None:
        snapshot = solved_board("*R L")
        grid = parse_board("*R L@180")
        rng = random.Random(5)
        signs = {solve_cell(snapshot, grid, CellPosition(1, 0), rng)[0].degrees for _ in range(40)}
        assert signs == {90, -90}

    def test_clockwise_preferred_for_symmetric_piece(self) -> None:
        """A straight piece a quarter turn out matches both ways; +90 wins."""
        snapshot = solved_board("*R LR L")
        grid = parse_board("*R LR@90 L")
        assert solve_cell(snapshot, grid, CellPosition(1, 0), random.Random(0)) == [Move(1, 0, 90)]

    def test_unmatched_cell_skipped(self) -> None:
        snapshot = solved_board("*R L")
        grid = parse_board("*R LR")
        assert solve_cell(snapshot, grid, CellPosition(1, 0), random.Random(0)) == []


class TestPlanMoves:
    """Tests for whole-board planning."""

    def test_no_snapshot(self) -> None:
        grid = parse_board("*R L@90")
        assert plan_moves(None, grid, random.Random(0)) == []

    def test_incompatible_snapshot(self) -> None:
        snapshot = solved_board("*R LR L")
        grid = parse_board("*R L@90")
        assert plan_moves(snapshot, grid, random.Random(0)) == []

    def test_moves_run_outward_from_root(self) -> None:
        snapshot = solved_board("*R LR L")
        grid = parse_board("*R@90 LR@90 L@-90")
        moves = plan_moves(snapshot, grid, random.Random(0))
        assert [(m.x, m.y) for m in moves] == [(0, 0), (1, 0), (2, 0)]
        assert moves == [Move(0, 0, -90), Move(1, 0, 90), Move(2, 0, 90)]

    def test_follows_wrapped_links(self) -> None:
        snapshot = solved_board("*L _ R", wraps=True)
        grid = parse_board("*L _ R@90", wraps=True)
        assert plan_moves(snapshot, grid, random.Random(0)) == [Move(2, 0, -90)]

    def test_applying_plan_solves_parsed_board(self) -> None:
        snapshot = solved_board("*DR L|UD@90 _|U@180 _")
        grid = parse_board("*DR@-90 L@90|UD@90 _|U@180 _")
        for move in plan_moves(snapshot, grid, random.Random(3)):
            grid.cell(move.x, move.y).rotate(move.degrees)
        update_connections(grid)
        assert is_solved(grid)
        for cell in grid.all_cells():
            assert cell.effective_mask == snapshot.mask_at(cell.x, cell.y)


class TestConvergence:
    """Planning on generated boards."""

    @pytest.mark.parametrize("skill", list(SkillLevel))
    @pytest.mark.parametrize("seed", [0, 1, 7, 13, 29])
    def test_plan_restores_generated_layout(self, skill: SkillLevel, seed: int) -> None:
        board = NetBoard(17, 10, rng=random.Random(seed))
        board.new_game(skill)
        snapshot = board.solved_snapshot
        assert snapshot is not None

        # Locked cells are unlocked by programmed moves
        for cell in list(board.grid.board_cells())[::5]:
            if not cell.is_unused:
                board.toggle_lock(cell.x, cell.y)

        moves = board.plan_autosolve()
        for move in moves:
            assert move.degrees in (90, -90)
            board.apply_move(move)

        for cell in board.grid.all_cells():
            assert cell.effective_mask == snapshot.mask_at(cell.x, cell.y)
        assert board.is_solved()
        assert board.unconnected_cells() == 0
        assert board.plan_autosolve() == []

    def test_plan_is_empty_before_any_game(self) -> None:
        board = NetBoard(8, 6, rng=random.Random(0))
        assert board.plan_autosolve() == []

    def test_each_cell_moved_at_most_twice(self) -> None:
        board = NetBoard(17, 10, rng=random.Random(4))
        board.new_game(SkillLevel.MASTER)
        counts: dict[tuple[int, int], int] = {}
        for move in board.plan_autosolve():
            counts[(move.x, move.y)] = counts.get((move.x, move.y), 0) + 1
        assert counts
        assert max(counts.values()) <= 2
