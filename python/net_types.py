"""
Shared type definitions for the scramblenet puzzle engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Direction(Enum):
    """Cardinal direction of a cell connector."""

    UP = "U"  # Decreasing y
    DOWN = "D"  # Increasing y
    LEFT = "L"  # Decreasing x
    RIGHT = "R"  # Increasing x

    @property
    def reverse(self) -> Direction:
        return _REVERSE[self]

    @property
    def clockwise(self) -> Direction:
        return _CLOCKWISE[self]

    @property
    def counterclockwise(self) -> Direction:
        return _CLOCKWISE[_REVERSE[self]]

    @property
    def delta(self) -> tuple[int, int]:
        """(dx, dy) step for this direction."""
        return _DELTAS[self]


_REVERSE = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

_CLOCKWISE = {
    Direction.UP: Direction.RIGHT,
    Direction.RIGHT: Direction.DOWN,
    Direction.DOWN: Direction.LEFT,
    Direction.LEFT: Direction.UP,
}

_DELTAS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

# Fixed iteration order for every breadth-first walk over the board
CARDINALS: tuple[Direction, ...] = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)


# =============================================================================
# Connection Masks
# =============================================================================


@dataclass(frozen=True)
class Free:
    """A board cell that the generated network does not use."""

    pass


@dataclass(frozen=True)
class Blocked:
    """A cell that is forcibly empty (outside the active board)."""

    pass


FREE = Free()
BLOCKED = Blocked()

ConnectionMask = Free | Blocked | frozenset[Direction]


def degree(mask: ConnectionMask) -> int:
    """Number of connectors exposed by a mask (0 for Free and Blocked)."""
    match mask:
        case Free() | Blocked():
            return 0
        case _:
            return len(mask)


def rotate_mask(mask: ConnectionMask, degrees: int) -> ConnectionMask:
    """
    Rotate a mask by a multiple of 90 degrees.

    Positive angles turn clockwise (UP -> RIGHT). Free and Blocked masks are
    unchanged by rotation.

    Raises:
        ValueError: If degrees is not a multiple of 90
    """
    if degrees % 90 != 0:
        raise ValueError(f"Rotation must be a multiple of 90 degrees, got {degrees}")

    match mask:
        case Free() | Blocked():
            return mask

    turns = (degrees // 90) % 4
    rotated = set(mask)
    for _ in range(turns):
        rotated = {d.clockwise for d in rotated}
    return frozenset(rotated)


def add_direction(mask: ConnectionMask, direction: Direction) -> ConnectionMask:
    """Return the mask with one more connector; a Free mask becomes a link set."""
    match mask:
        case Free():
            return frozenset({direction})
        case Blocked():
            raise ValueError(f"Cannot add {direction.name} to a blocked cell")
        case _:
            return mask | {direction}


def mask_to_str(mask: ConnectionMask) -> str:
    """
    Compact text form of a mask.

    Links are written as direction letters in UDLR order ("UR", "DLR"),
    Free as "_" and Blocked as "#".
    """
    match mask:
        case Free():
            return "_"
        case Blocked():
            return "#"
        case _:
            return "".join(d.value for d in CARDINALS if d in mask)


def mask_from_str(text: str) -> ConnectionMask:
    """Parse the output of mask_to_str()."""
    if text == "_":
        return FREE
    if text == "#":
        return BLOCKED
    if not text:
        raise ValueError("Empty mask string")

    directions: set[Direction] = set()
    for char in text:
        try:
            direction = Direction(char.upper())
        except ValueError:
            raise ValueError(
                f"Invalid mask string: '{text}'\n"
                f"  Bad character: '{char}'\n"
                f"  Valid forms: letters from 'UDLR', '_' (free), '#' (blocked)"
            ) from None
        if direction in directions:
            raise ValueError(f"Invalid mask string: '{text}' repeats '{char}'")
        directions.add(direction)
    return frozenset(directions)


# =============================================================================
# Cells
# =============================================================================


@dataclass(frozen=True)
class CellPosition:
    """A cell coordinate in the full grid matrix."""

    x: int
    y: int


@dataclass(eq=False)
class Cell:
    """
    A single grid cell.

    `directions` is the layout the generator produced; the player's turns are
    tracked separately in `rotation`, so the exposed connectors are
    `directions` rotated by `rotation` (see effective_mask).
    """

    x: int
    y: int
    directions: ConnectionMask = FREE
    rotation: int = 0  # Degrees, multiple of 90, not normalised
    is_root: bool = False
    locked: bool = False
    blind: bool = False
    connected: bool = False

    @property
    def position(self) -> CellPosition:
        return CellPosition(self.x, self.y)

    @property
    def effective_mask(self) -> ConnectionMask:
        return rotate_mask(self.directions, self.rotation)

    @property
    def degree(self) -> int:
        return degree(self.directions)

    @property
    def is_unused(self) -> bool:
        """True for Free and Blocked cells."""
        return isinstance(self.directions, (Free, Blocked))

    @property
    def is_rotated(self) -> bool:
        """True when the exposed connectors differ from the generated layout."""
        return self.effective_mask != self.directions

    def has_connection(self, direction: Direction) -> bool:
        mask = self.effective_mask
        return isinstance(mask, frozenset) and direction in mask

    def rotated_mask(self, degrees: int) -> ConnectionMask:
        """The effective mask this cell would have after turning by degrees."""
        return rotate_mask(self.effective_mask, degrees)

    def rotate(self, degrees: int) -> None:
        """Turn the cell a quarter turn; positive is clockwise."""
        if degrees not in (90, -90):
            raise ValueError(f"Cells turn in steps of +90 or -90 degrees, got {degrees}")
        self.rotation += degrees

    def add_dir(self, direction: Direction) -> None:
        self.directions = add_direction(self.directions, direction)

    def reset(self, mask: ConnectionMask) -> None:
        """Clear all state and give the cell a new layout."""
        self.directions = mask
        self.rotation = 0
        self.is_root = False
        self.locked = False
        self.blind = False
        self.connected = False


@dataclass(frozen=True)
class Move:
    """A single programmed rotation produced by the auto-solver."""

    x: int
    y: int
    degrees: int  # +90 or -90


# =============================================================================
# Command Results
# =============================================================================


class RejectReason(Enum):
    """Why a rotate/lock command was refused."""

    UNUSED_CELL = "unused_cell"  # Free or Blocked cell
    LOCKED = "locked"  # Locked cells cannot be rotated


@dataclass(frozen=True)
class Rejected:
    """A command that left the board unchanged."""

    position: CellPosition
    reason: RejectReason


@dataclass(frozen=True)
class Rotated:
    """A rotation that was applied."""

    position: CellPosition
    degrees: int
    newly_connected: bool  # At least one cell joined the network
    solved: bool


@dataclass(frozen=True)
class LockToggled:
    """A lock toggle that was applied."""

    position: CellPosition
    locked: bool


class RestoreFailureReason(Enum):
    """Why persisted state could not be restored."""

    INCOMPATIBLE_DIMENSIONS = "incompatible_dimensions"
    MISSING_CELL = "missing_cell"
    POSITION_OUT_OF_RANGE = "position_out_of_range"


@dataclass(frozen=True)
class RestoreFailure:
    """Persisted state that does not fit the current grid."""

    reason: RestoreFailureReason
    details: str | None = None


# =============================================================================
# Skill Configuration
# =============================================================================


@dataclass(frozen=True)
class SkillConfig:
    """
    Rules for one game.

    board_major/board_minor give the board size along the grid's long and
    short axes; a landscape grid gets a board_major-wide board.
    """

    branch_factor: int = 2  # Max links grown from a cell per pass; 2 or 3
    wraps: bool = False  # Network wraps around the board edges
    blind_threshold: int = 9  # Cells with this many connectors or more are blind
    board_major: int = 10
    board_minor: int = 8

    def __post_init__(self) -> None:
        if self.branch_factor not in (2, 3):
            raise ValueError(f"branch_factor must be 2 or 3, got {self.branch_factor}")
        if self.board_major < 1 or self.board_minor < 1:
            raise ValueError(
                f"Board dimensions must be positive, got {self.board_major}x{self.board_minor}"
            )

    def board_size(self, grid_width: int, grid_height: int) -> tuple[int, int]:
        """Board (width, height) for a grid, before clamping to the grid."""
        if grid_width > grid_height:
            return (self.board_major, self.board_minor)
        return (self.board_minor, self.board_major)


class SkillLevel(Enum):
    """Preset skill levels."""

    NOVICE = SkillConfig(2, False, 9, 10, 8)
    NORMAL = SkillConfig(2, False, 9, 11, 8)
    EXPERT = SkillConfig(2, False, 9, 15, 8)
    MASTER = SkillConfig(3, True, 9, 17, 10)
    INSANE = SkillConfig(3, True, 3, 17, 10)

    @property
    def config(self) -> SkillConfig:
        return self.value


def as_skill_config(skill: SkillConfig | SkillLevel) -> SkillConfig:
    return skill.config if isinstance(skill, SkillLevel) else skill
