"""
Cell states and the on-chain cell code encoding.

The contract returns one unsigned integer per cell:

    0      hidden
    1      revealed, no adjacent mines
    2      mine
    n > 2  revealed, n - 2 adjacent mines
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

from fhe_minesweeper.errors import CellDecodeError


Coordinate = Tuple[int, int]

HIDDEN_CODE = 0
EMPTY_CODE = 1
MINE_CODE = 2
NUMBER_OFFSET = 2
MAX_ADJACENT_MINES = 8


class CellKind(str, Enum):
    """Decoded cell categories."""
    HIDDEN = "hidden"
    EMPTY = "empty"
    MINE = "mine"
    REVEALED = "revealed"


@dataclass(frozen=True)
class CellState:
    """Render-ready state of one cell."""
    kind: CellKind
    value: Optional[int] = None  # adjacency count, REVEALED only

    @property
    def css_class(self) -> str:
        return f"cell {self.kind.value}"

    @property
    def glyph(self) -> str:
        if self.kind is CellKind.HIDDEN:
            return ""
        if self.kind is CellKind.EMPTY:
            return "0"
        if self.kind is CellKind.MINE:
            return "💣"
        return str(self.value)

    def __str__(self) -> str:
        if self.kind is CellKind.REVEALED:
            return f"Revealed({self.value})"
        return self.kind.name.capitalize()


HIDDEN = CellState(CellKind.HIDDEN)
EMPTY = CellState(CellKind.EMPTY)
MINE = CellState(CellKind.MINE)


def revealed(count: int) -> CellState:
    """State for a revealed cell with ``count`` adjacent mines."""
    if not 1 <= count <= MAX_ADJACENT_MINES:
        raise ValueError(f"Adjacency count must be in 1..{MAX_ADJACENT_MINES}, got {count}")
    return CellState(CellKind.REVEALED, count)


def decode_cell(code: Any, cell: Optional[Coordinate] = None) -> CellState:
    """Decode one raw cell code, raising CellDecodeError if it is out of range."""
    if isinstance(code, bool) or not isinstance(code, int):
        raise CellDecodeError(code, cell)
    if code == HIDDEN_CODE:
        return HIDDEN
    if code == EMPTY_CODE:
        return EMPTY
    if code == MINE_CODE:
        return MINE
    if NUMBER_OFFSET < code <= NUMBER_OFFSET + MAX_ADJACENT_MINES:
        return CellState(CellKind.REVEALED, code - NUMBER_OFFSET)
    raise CellDecodeError(code, cell)


def encode_cell(state: CellState) -> int:
    """Inverse of decode_cell."""
    if state.kind is CellKind.HIDDEN:
        return HIDDEN_CODE
    if state.kind is CellKind.EMPTY:
        return EMPTY_CODE
    if state.kind is CellKind.MINE:
        return MINE_CODE
    return state.value + NUMBER_OFFSET


def cell_id(row: int, col: int) -> str:
    """Stable element id of a cell."""
    return f"cell-{row}-{col}"


def new_board(size: int) -> List[List[CellState]]:
    """A size x size board with every cell hidden."""
    return [[HIDDEN for _ in range(size)] for _ in range(size)]
