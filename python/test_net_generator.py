"""Tests for network generation."""

import random
from collections import deque

import pytest

from net_connectivity import is_solved, unconnected_cells, update_connections
from net_generator import add_random_dir, build_network, create_net, scramble
from net_grid import BoardRegion, CellGrid, board_region
from net_types import CARDINALS, Cell, CellPosition, Direction, Free, SkillConfig, SkillLevel

SKILLS = [SkillLevel.NOVICE, SkillLevel.EXPERT, SkillLevel.MASTER, SkillLevel.INSANE]
SEEDS = [0, 1, 2, 17, 99]


def fresh_grid(width: int, height: int, skill: SkillConfig | SkillLevel) -> CellGrid:
    config = skill.config if isinstance(skill, SkillLevel) else skill
    grid = CellGrid(width, height)
    grid.reset(board_region(width, height, config), config.wraps)
    return grid


def linked(mask: object, direction: Direction) -> bool:
    return isinstance(mask, frozenset) and direction in mask


def network_component(grid: CellGrid) -> set[CellPosition]:
    """Cells reachable from the root through generated links, ignoring rotation."""
    assert grid.root is not None
    seen = {grid.root.position}
    queue: deque[Cell] = deque([grid.root])
    while queue:
        cell = queue.popleft()
        for direction in CARDINALS:
            other = grid.neighbor(cell, direction)
            if linked(cell.directions, direction) and other is not None and other.position not in seen:
                seen.add(other.position)
                queue.append(other)
    return seen


class TestCreateNet:
    """Tests for a single generation pass."""

    @pytest.mark.parametrize("skill", SKILLS)
    @pytest.mark.parametrize("seed", SEEDS)
    def test_links_are_mirrored(self, skill: SkillLevel, seed: int) -> None:
        """Every link has a matching reverse link on the neighbour."""
        grid = fresh_grid(9, 7, skill)
        create_net(grid, skill, random.Random(seed))

        for cell in grid.board_cells():
            for direction in CARDINALS:
                other = grid.neighbor(cell, direction)
                mirrored = other is not None and linked(other.directions, direction.reverse)
                assert linked(cell.directions, direction) == mirrored, (
                    f"cell ({cell.x}, {cell.y}) {direction.name}"
                )

    @pytest.mark.parametrize("skill", SKILLS)
    @pytest.mark.parametrize("seed", SEEDS)
    def test_single_component(self, skill: SkillLevel, seed: int) -> None:
        """All used cells hang off the root."""
        grid = fresh_grid(9, 7, skill)
        cells = create_net(grid, skill, random.Random(seed))

        used = {cell.position for cell in grid.board_cells() if not isinstance(cell.directions, Free)}
        assert network_component(grid) == used
        assert len(used) == cells

    @pytest.mark.parametrize("seed", SEEDS)
    def test_single_root_on_board(self, seed: int) -> None:
        grid = fresh_grid(12, 9, SkillLevel.NOVICE)
        rng = random.Random(seed)
        create_net(grid, SkillLevel.NOVICE, rng)
        create_net(grid, SkillLevel.NOVICE, rng)

        roots = [cell for cell in grid.all_cells() if cell.is_root]
        assert len(roots) == 1
        assert roots[0] is grid.root
        assert grid.region.contains(grid.root.x, grid.root.y)
        assert grid.root.degree >= 1

    def test_outside_cells_untouched(self) -> None:
        grid = fresh_grid(14, 12, SkillLevel.NOVICE)
        create_net(grid, SkillLevel.NOVICE, random.Random(5))
        for cell in grid.all_cells():
            if not grid.region.contains(cell.x, cell.y):
                assert cell.is_unused
                assert cell.degree == 0

    def test_same_seed_same_net(self) -> None:
        first = fresh_grid(9, 7, SkillLevel.MASTER)
        second = fresh_grid(9, 7, SkillLevel.MASTER)
        create_net(first, SkillLevel.MASTER, random.Random(42))
        create_net(second, SkillLevel.MASTER, random.Random(42))
        assert [c.directions for c in first.all_cells()] == [c.directions for c in second.all_cells()]
        assert first.root.position == second.root.position

    def test_solved_before_scramble(self) -> None:
        grid = fresh_grid(9, 7, SkillLevel.EXPERT)
        create_net(grid, SkillLevel.EXPERT, random.Random(3))
        update_connections(grid)
        assert is_solved(grid)
        assert unconnected_cells(grid) == 0

    def test_two_by_two_board(self) -> None:
        """A 2x2 board holds a tree of at most four cells, solved as generated."""
        skill = SkillConfig(board_major=2, board_minor=2)
        for seed in SEEDS:
            grid = fresh_grid(2, 2, skill)
            cells = create_net(grid, skill, random.Random(seed))
            assert 2 <= cells <= 4
            links = sum(cell.degree for cell in grid.board_cells()) // 2
            assert links == cells - 1
            update_connections(grid)
            assert is_solved(grid)

    def test_one_by_one_board_rejected(self) -> None:
        skill = SkillConfig(board_major=1, board_minor=1)
        grid = fresh_grid(1, 1, skill)
        with pytest.raises(ValueError, match="too small"):
            create_net(grid, skill, random.Random(0))

    def test_wrapping_strip_rejected(self) -> None:
        skill = SkillConfig(branch_factor=3, wraps=True, board_major=4, board_minor=1)
        grid = fresh_grid(4, 1, skill)
        with pytest.raises(ValueError, match="Wrapping"):
            create_net(grid, skill, random.Random(0))

    def test_non_wrapping_strip(self) -> None:
        skill = SkillConfig(board_major=5, board_minor=1)
        grid = fresh_grid(5, 1, skill)
        cells = create_net(grid, skill, random.Random(8))
        assert cells >= 2
        for cell in grid.board_cells():
            assert not linked(cell.directions, Direction.UP)
            assert not linked(cell.directions, Direction.DOWN)


class TestAddRandomDir:
    """Tests for a single growth step."""

    def test_links_to_free_neighbour(self) -> None:
        grid = CellGrid(3, 3)
        grid.reset(BoardRegion(0, 0, 3, 3), wraps=False)
        centre = grid.cell(1, 1)
        worklist: deque[Cell] = deque([centre])

        dest = add_random_dir(grid, worklist, random.Random(1))

        assert dest is not None
        assert list(worklist) == [centre, dest]
        assert centre.degree == 1
        assert dest.degree == 1
        (direction,) = centre.directions
        assert grid.neighbor(centre, direction) is dest
        assert dest.directions == frozenset({direction.reverse})

    def test_no_free_neighbour(self) -> None:
        grid = CellGrid(2, 1)
        grid.reset(BoardRegion(0, 0, 2, 1), wraps=False)
        left, right = grid.cell(0, 0), grid.cell(1, 0)
        left.add_dir(Direction.RIGHT)
        right.add_dir(Direction.LEFT)
        worklist: deque[Cell] = deque([left])

        assert add_random_dir(grid, worklist, random.Random(0)) is None
        assert list(worklist) == [left]
        assert left.directions == frozenset({Direction.RIGHT})


class TestBuildNetwork:
    """Tests for the retrying driver."""

    def test_meets_fill_ratio_or_exhausts_tries(self) -> None:
        for seed in SEEDS:
            grid = fresh_grid(17, 10, SkillLevel.MASTER)
            cells, tries = build_network(grid, SkillLevel.MASTER, random.Random(seed))
            min_cells = int(grid.region.cell_count * 0.85)
            assert 1 <= tries <= 10
            assert cells >= min_cells or tries == 10

    def test_single_try_when_threshold_is_zero(self) -> None:
        grid = fresh_grid(6, 6, SkillLevel.NOVICE)
        _, tries = build_network(grid, SkillLevel.NOVICE, random.Random(0), min_fill=0.0)
        assert tries == 1

    def test_accepts_last_attempt(self) -> None:
        """An impossible threshold runs every try and keeps the last net."""
        grid = fresh_grid(6, 6, SkillLevel.NOVICE)
        cells, tries = build_network(grid, SkillLevel.NOVICE, random.Random(0), min_fill=2.0, max_tries=3)
        assert tries == 3
        assert cells == sum(1 for c in grid.board_cells() if not isinstance(c.directions, Free))

    def test_bad_max_tries(self) -> None:
        grid = fresh_grid(6, 6, SkillLevel.NOVICE)
        with pytest.raises(ValueError):
            build_network(grid, SkillLevel.NOVICE, random.Random(0), max_tries=0)


class TestScramble:
    """Tests for scrambling a generated board."""

    def test_rotation_offsets(self) -> None:
        grid = fresh_grid(9, 7, SkillLevel.EXPERT)
        create_net(grid, SkillLevel.EXPERT, random.Random(4))
        scramble(grid, SkillLevel.EXPERT, random.Random(4))
        offsets = {cell.rotation for cell in grid.board_cells()}
        assert offsets <= {-180, -90, 0, 90}
        assert len(offsets) > 1

    def test_layout_unchanged(self) -> None:
        grid = fresh_grid(9, 7, SkillLevel.EXPERT)
        create_net(grid, SkillLevel.EXPERT, random.Random(4))
        before = [cell.directions for cell in grid.all_cells()]
        scramble(grid, SkillLevel.EXPERT, random.Random(11))
        assert [cell.directions for cell in grid.all_cells()] == before

    def test_blind_threshold(self) -> None:
        grid = fresh_grid(10, 10, SkillLevel.INSANE)
        create_net(grid, SkillLevel.INSANE, random.Random(6))
        scramble(grid, SkillLevel.INSANE, random.Random(6))
        for cell in grid.board_cells():
            assert cell.blind == (cell.degree >= 3)

    def test_no_blind_cells_below_threshold(self) -> None:
        grid = fresh_grid(10, 10, SkillLevel.MASTER)
        create_net(grid, SkillLevel.MASTER, random.Random(6))
        scramble(grid, SkillLevel.MASTER, random.Random(6))
        assert not any(cell.blind for cell in grid.all_cells())
