"""
Wallet connection state machine and the shared session context.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from fhe_minesweeper.cells import Coordinate
from fhe_minesweeper.errors import ConnectionRejected, WalletUnavailable
from fhe_minesweeper.view import BoardView


logger = logging.getLogger(__name__)


class ConnectionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


@dataclass(frozen=True)
class ConnectionState:
    """Wallet connection state."""
    status: ConnectionStatus
    address: Optional[str] = None
    signer: Any = None
    reason: Optional[str] = None

    @classmethod
    def disconnected(cls) -> "ConnectionState":
        return cls(ConnectionStatus.DISCONNECTED)

    @classmethod
    def connecting(cls) -> "ConnectionState":
        return cls(ConnectionStatus.CONNECTING)

    @classmethod
    def connected(cls, address: str, signer: Any) -> "ConnectionState":
        return cls(ConnectionStatus.CONNECTED, address=address, signer=signer)

    @classmethod
    def failed(cls, reason: str) -> "ConnectionState":
        return cls(ConnectionStatus.FAILED, reason=reason)

    @property
    def is_connected(self) -> bool:
        return self.status is ConnectionStatus.CONNECTED


@dataclass
class SessionContext:
    """Mutable state shared by the session components.

    ConnectionSession writes ``connection``; ContractHandle writes
    ``contract_state``; CellInteractionController writes ``pending``, which maps
    each coordinate with a reveal in flight to the token of that reveal.
    """
    connection: ConnectionState = field(default_factory=ConnectionState.disconnected)
    contract_state: Any = None
    pending: Dict[Coordinate, object] = field(default_factory=dict)

    @property
    def signer(self) -> Any:
        return self.connection.signer

    @property
    def web3(self) -> Any:
        signer = self.connection.signer
        return getattr(signer, "web3", None)

    @property
    def address(self) -> Optional[str]:
        return self.connection.address


class ConnectionSession:
    """Acquires accounts and a signer from the wallet."""

    def __init__(self, context: SessionContext, wallet, view: BoardView):
        self.context = context
        self.wallet = wallet
        self.view = view

    @property
    def state(self) -> ConnectionState:
        return self.context.connection

    async def connect(self) -> ConnectionState:
        """Connect the wallet.

        Returns the current state without a new account request when a
        connection is in progress or established. Raises WalletUnavailable
        when no wallet exists; other failures end in the FAILED state.
        """
        current = self.context.connection
        if current.status in (ConnectionStatus.CONNECTING, ConnectionStatus.CONNECTED):
            logger.debug(f"connect() ignored while {current.status.value}")
            return current

        if self.wallet is None:
            self.context.connection = ConnectionState.failed("wallet not found")
            self.view.alert("Wallet not found")
            raise WalletUnavailable("No wallet is available; configure MINESWEEPER_PRIVATE_KEY")

        self.context.connection = ConnectionState.connecting()
        self.view.set_connect_enabled(False)
        logger.info("Requesting wallet accounts...")

        try:
            accounts = await self.wallet.request_accounts()
            if not accounts:
                raise ConnectionRejected("Wallet returned no accounts")
            signer = await self.wallet.get_signer()
        except Exception as e:
            reason = str(e) or e.__class__.__name__
            logger.error(f"\033[31m❌ Wallet connection failed: {reason}\033[0m")
            self.context.connection = ConnectionState.failed(reason)
            self.view.alert(f"Wallet connection failed: {reason}")
            self.view.set_connect_enabled(True)
            return self.context.connection

        address = accounts[0]
        self.context.connection = ConnectionState.connected(address, signer)
        logger.info(f"\033[92m✅ Connected as {address}\033[0m")
        self.view.show_account(address)
        self.view.set_deploy_enabled(True)
        return self.context.connection
