"""
Board synchronization: poll the contract, decode cells, repaint changes.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, List, Optional

from fhe_minesweeper.blockchain import GET_BOARD
from fhe_minesweeper.cells import CellState, decode_cell, new_board
from fhe_minesweeper.contract_handle import ContractHandle, ContractState
from fhe_minesweeper.errors import CellDecodeError, PollReadError
from fhe_minesweeper.view import BoardView, CellChange


logger = logging.getLogger(__name__)


class SyncPhase(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    RECONCILING = "reconciling"


class BoardSyncEngine:
    """Keeps the local board in step with the contract.

    Each timer tick starts at most one poll. A tick that arrives while a
    poll is still running is dropped, so board writes never arrive out of
    order. A failed poll leaves the board untouched and the next tick is
    the retry.
    """

    def __init__(self, contract_handle: ContractHandle, view: BoardView, board_size: int = 16):
        self.contract_handle = contract_handle
        self.view = view
        self.board_size = board_size
        self.board: List[List[CellState]] = new_board(board_size)
        self.phase = SyncPhase.IDLE
        self.dropped_ticks = 0
        self._generation = 0
        self._poll_task: Optional[asyncio.Task] = None

        contract_handle.add_ready_listener(self._on_contract_ready)

    def _on_contract_ready(self, state: ContractState) -> None:
        self.reset_board()

    def reset_board(self) -> None:
        """Recreate the board with every cell hidden."""
        self._generation += 1
        self.board = new_board(self.board_size)
        self.view.reset_grid(self.board_size)
        logger.info(f"Board reset to {self.board_size}x{self.board_size} hidden cells")

    def on_tick(self) -> Optional[asyncio.Task]:
        """Timer callback. Returns the started poll task, or None if dropped."""
        if not self.contract_handle.is_ready:
            return None
        if self.phase is not SyncPhase.IDLE:
            self.dropped_ticks += 1
            logger.debug(f"Tick dropped, engine is {self.phase.value}")
            return None

        # Claim the slot before yielding so a second tick sees POLLING
        self.phase = SyncPhase.POLLING
        self._poll_task = asyncio.create_task(self._poll_cycle())
        return self._poll_task

    async def poll_once(self) -> bool:
        """Run one poll cycle unless one is already running."""
        task = self.on_tick()
        if task is None:
            return False
        return await task

    async def _poll_cycle(self) -> bool:
        generation = self._generation
        try:
            try:
                raw_board = await self.contract_handle.read(GET_BOARD)
            except Exception as e:
                raise PollReadError(f"getBoard failed: {e}") from e

            if generation != self._generation:
                logger.info("Discarding board fetched from a previous contract")
                return False

            self.phase = SyncPhase.RECONCILING
            changes = self.reconcile(raw_board)
            if changes:
                self.view.paint_cells(changes)
            return True

        except PollReadError as e:
            logger.warning(f"\033[33m⚠️  Poll failed: {e}\033[0m")
            return False
        finally:
            self.phase = SyncPhase.IDLE

    def _check_shape(self, raw_board: Any) -> None:
        try:
            rows = list(raw_board)
        except TypeError:
            raise PollReadError(f"Board is not a grid: {raw_board!r}") from None
        try:
            mismatched = len(rows) != self.board_size or any(len(row) != self.board_size for row in rows)
        except TypeError:
            raise PollReadError(f"Board rows are not sequences: {raw_board!r}") from None
        if mismatched:
            raise PollReadError(f"Board shape does not match {self.board_size}x{self.board_size}")

    def reconcile(self, raw_board: Any) -> List[CellChange]:
        """Apply raw codes to the board and return the cells that changed.

        Cells whose code cannot be decoded keep their previous state.
        """
        self._check_shape(raw_board)

        changes: List[CellChange] = []
        for row, raw_row in enumerate(raw_board):
            for col, code in enumerate(raw_row):
                try:
                    state = decode_cell(code, (row, col))
                except CellDecodeError as e:
                    logger.warning(f"\033[33m⚠️  {e}; keeping {self.board[row][col]}\033[0m")
                    continue
                if state != self.board[row][col]:
                    changes.append((row, col, state))

        for row, col, state in changes:
            self.board[row][col] = state
        return changes
