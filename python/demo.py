"""
Demonstration of the scramblenet engine.

Generates a seeded puzzle, shows it scrambled, then runs the auto-solver
move by move and shows the solved board.

    python demo.py [skill] [seed]
"""

import logging
import random
import sys

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ascii_render import render_board
from netboard import NetBoard
from net_types import SkillLevel


def board_panel(board: NetBoard, title: str) -> Panel:
    """Board picture plus status lines."""
    focus = (board.focus.x, board.focus.y) if board.focus is not None else None
    body = Text.from_ansi(render_board(board.grid, highlight=focus))
    body.append("\n\n")
    body.append("Solved: ", style="bold")
    body.append(f"{board.is_solved()}\n")
    body.append("Unconnected cells: ", style="bold")
    body.append(f"{board.unconnected_cells()}\n")
    body.append("Clicks: ", style="bold")
    body.append(f"{board.click_count}")
    border = "green" if board.is_solved() else "red"
    return Panel(body, title=title, border_style=border, expand=False)


def main(skill: SkillLevel, seed: int) -> None:
    console = Console()
    board = NetBoard(17, 10, rng=random.Random(seed))

    cells = board.new_game(skill)
    console.print(board_panel(board, f"{skill.name} seed={seed}: {cells} cells, scrambled"))

    moves = board.plan_autosolve()
    console.print(f"Auto-solve: {len(moves)} moves")
    for move in moves:
        board.apply_move(move)

    console.print(board_panel(board, f"{skill.name} seed={seed}: auto-solved"))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    skill_name = sys.argv[1].upper() if len(sys.argv) > 1 else "EXPERT"
    seed = int(sys.argv[2]) if len(sys.argv) > 2 else 1
    main(SkillLevel[skill_name], seed)
