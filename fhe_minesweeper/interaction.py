"""
Cell click handling.
"""

import logging

from fhe_minesweeper.blockchain import PICK_MINE
from fhe_minesweeper.contract_handle import ContractHandle
from fhe_minesweeper.session import SessionContext


logger = logging.getLogger(__name__)


class CellInteractionController:
    """Turns cell clicks into reveal transactions.

    A coordinate stays in ``context.pending`` while its transaction is in
    flight; clicks on it are ignored until it confirms or fails. The board
    itself is only ever updated by the next poll.
    """

    def __init__(self, context: SessionContext, contract_handle: ContractHandle, board_size: int = 16):
        self.context = context
        self.contract_handle = contract_handle
        self.board_size = board_size

    def is_pending(self, row: int, col: int) -> bool:
        return (row, col) in self.context.pending

    async def request_reveal(self, row: int, col: int) -> bool:
        """Reveal (row, col). Returns True once the transaction is confirmed."""
        if not self.contract_handle.is_ready:
            logger.debug(f"Click on ({row}, {col}) ignored, contract not ready")
            return False
        if not (0 <= row < self.board_size and 0 <= col < self.board_size):
            logger.debug(f"Click on ({row}, {col}) ignored, outside the board")
            return False
        coordinate = (row, col)
        if coordinate in self.context.pending:
            logger.debug(f"Click on {coordinate} ignored, reveal already pending")
            return False

        token = object()
        self.context.pending[coordinate] = token
        logger.info(f"\033[94m⛏️  Revealing cell {coordinate}...\033[0m")
        try:
            result = await self.contract_handle.write(PICK_MINE, row, col)
        finally:
            # A rebind may have cleared the slot and handed it to a newer reveal
            if self.context.pending.get(coordinate) is token:
                del self.context.pending[coordinate]

        if not result.success:
            logger.error(f"\033[31m❌ Reveal of {coordinate} failed: {result.error}\033[0m")
            return False
        return True
