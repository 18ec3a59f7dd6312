"""
Rendering surfaces for the client.
"""

import logging
import sys
from typing import List, Optional, TextIO, Tuple

from fhe_minesweeper.cells import CellKind, CellState, cell_id, new_board


logger = logging.getLogger(__name__)


CellChange = Tuple[int, int, CellState]


class BoardView:
    """Surface the client paints into.

    Controls are identified the way the page identifies its elements: the
    account area, the connect and deploy affordances, and one element per
    cell named ``cell-{row}-{col}``.
    """

    def show_account(self, address: str) -> None:
        raise NotImplementedError

    def set_connect_enabled(self, enabled: bool) -> None:
        raise NotImplementedError

    def set_deploy_enabled(self, enabled: bool) -> None:
        raise NotImplementedError

    def reset_grid(self, size: int) -> None:
        raise NotImplementedError

    def paint_cells(self, changes: List[CellChange]) -> None:
        raise NotImplementedError

    def alert(self, message: str) -> None:
        raise NotImplementedError

    def notify(self, message: str) -> None:
        raise NotImplementedError


class TerminalView(BoardView):
    """ANSI terminal rendering of the board."""

    COLORS = {
        CellKind.HIDDEN: '\033[90m',    # Dark gray
        CellKind.EMPTY: '\033[37m',     # White
        CellKind.MINE: '\033[31m',      # Red
        CellKind.REVEALED: '\033[96m',  # Cyan
    }
    RESET = '\033[0m'
    BOLD = '\033[1m'

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self.grid: List[List[CellState]] = []
        self.connect_enabled = True
        self.deploy_enabled = False

    def _print(self, text: str) -> None:
        print(text, file=self.stream, flush=True)

    def show_account(self, address: str) -> None:
        self._print(f"{self.BOLD}Connected as: {address}{self.RESET}")

    def set_connect_enabled(self, enabled: bool) -> None:
        self.connect_enabled = enabled
        if enabled:
            self._print("Type 'connect' to connect your wallet.")

    def set_deploy_enabled(self, enabled: bool) -> None:
        self.deploy_enabled = enabled
        if enabled:
            self._print("Type 'deploy' for a new board or 'attach <address>' for an existing one.")

    def reset_grid(self, size: int) -> None:
        self.grid = new_board(size)
        self.render()

    def paint_cells(self, changes: List[CellChange]) -> None:
        for row, col, state in changes:
            self.grid[row][col] = state
            logger.debug(f"Painted {cell_id(row, col)} as {state}")
        if changes:
            self.render()

    def alert(self, message: str) -> None:
        self._print(f"\033[31m⚠️  {message}{self.RESET}")

    def notify(self, message: str) -> None:
        self._print(message)

    def _cell_text(self, state: CellState) -> str:
        if state.kind is CellKind.HIDDEN:
            text = "·"
        elif state.kind is CellKind.MINE:
            text = "*"
        else:
            text = state.glyph
        return f"{self.COLORS[state.kind]}{text:>2}{self.RESET}"

    def render(self) -> None:
        """Print the whole board with row and column indices."""
        size = len(self.grid)
        header = "    " + "".join(f"{col:>3}" for col in range(size))
        lines = [header]
        for row, cells in enumerate(self.grid):
            lines.append(f"{row:>3} " + "".join(" " + self._cell_text(state) for state in cells))
        self._print("\n".join(lines))
