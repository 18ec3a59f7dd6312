"""
Exceptions raised by the minesweeper client.
"""

from typing import Any, Dict, Optional, Tuple


class MinesweeperError(Exception):
    """Base class for client errors."""

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {"type": self.__class__.__name__, "message": str(self)}


class WalletUnavailable(MinesweeperError):
    """No wallet is configured, so the session cannot connect."""


class ConnectionRejected(MinesweeperError):
    """The wallet refused or failed the account request."""


class DeployFailed(MinesweeperError):
    """The game contract could not be deployed."""


class ContractNotReady(MinesweeperError):
    """An operation needed a bound contract but none is ready."""


class PollReadError(MinesweeperError):
    """Fetching or shaping the board during a poll failed."""


class CellDecodeError(MinesweeperError):
    """A raw cell code is outside the known encoding."""

    def __init__(self, code: Any, cell: Optional[Tuple[int, int]] = None):
        self.code = code
        self.cell = cell
        message = f"Cannot decode cell code {code!r}"
        if cell is not None:
            message = f"{message} at {cell}"
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["code"] = repr(self.code)
        if self.cell is not None:
            payload["cell"] = list(self.cell)
        return payload


class WriteFailed(MinesweeperError):
    """A state-changing contract call did not confirm."""

    def __init__(self, operation: str, reason: str, tx_hash: Optional[str] = None):
        self.operation = operation
        self.reason = reason
        self.tx_hash = tx_hash
        super().__init__(f"{operation} failed: {reason}")

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload.update({"operation": self.operation, "reason": self.reason})
        if self.tx_hash:
            payload["tx_hash"] = self.tx_hash
        return payload


class NotConnected(MinesweeperError):
    """An operation needed a connected wallet."""
