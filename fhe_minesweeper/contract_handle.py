"""
Deployment, attachment and calls to the game contract.
"""

import asyncio
import functools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from web3.exceptions import TimeExhausted

from fhe_minesweeper.blockchain import (
    ContractArtifact,
    TransactionFailed,
    contract_function,
    get_contract,
)
from fhe_minesweeper.errors import ContractNotReady, DeployFailed, NotConnected, WriteFailed
from fhe_minesweeper.session import SessionContext
from fhe_minesweeper.view import BoardView


logger = logging.getLogger(__name__)


class ContractStatus(str, Enum):
    UNBOUND = "unbound"
    DEPLOYING = "deploying"
    READY = "ready"
    DEPLOY_FAILED = "deploy_failed"


@dataclass(frozen=True)
class ContractState:
    """Binding state of the game contract."""
    status: ContractStatus
    contract: Any = None
    address: Optional[str] = None
    reason: Optional[str] = None
    error: Optional[DeployFailed] = None

    @property
    def is_ready(self) -> bool:
        return self.status is ContractStatus.READY


UNBOUND = ContractState(ContractStatus.UNBOUND)
DEPLOYING = ContractState(ContractStatus.DEPLOYING)


@dataclass
class WriteResult:
    """Outcome of a state-changing contract call."""
    operation: str
    success: bool
    tx_hash: Optional[str] = None
    receipt: Optional[Dict[str, Any]] = None
    error: Optional[WriteFailed] = None


async def _run_blocking(func: Callable, *args: Any) -> Any:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args))


class ContractHandle:
    """Owns the contract binding and exposes read/write calls to it."""

    def __init__(
        self,
        context: SessionContext,
        artifact: ContractArtifact,
        view: BoardView,
        *,
        deploy_timeout: float = 180.0,
        write_timeout: float = 60.0,
    ):
        self.context = context
        self.artifact = artifact
        self.view = view
        self.deploy_timeout = deploy_timeout
        self.write_timeout = write_timeout
        self._ready_listeners: List[Callable[[ContractState], None]] = []
        self.context.contract_state = UNBOUND

    @property
    def state(self) -> ContractState:
        return self.context.contract_state

    @property
    def is_ready(self) -> bool:
        return self.state.is_ready

    def add_ready_listener(self, listener: Callable[[ContractState], None]) -> None:
        """Call ``listener`` every time a new contract becomes ready."""
        self._ready_listeners.append(listener)

    def _require_connected(self) -> None:
        if not self.context.connection.is_connected:
            raise NotConnected("Connect a wallet before binding the game contract")

    def _become_ready(self, contract: Any, address: str) -> ContractState:
        self.context.contract_state = ContractState(ContractStatus.READY, contract=contract, address=address)
        self.context.pending.clear()
        for listener in self._ready_listeners:
            listener(self.context.contract_state)
        return self.context.contract_state

    async def deploy_new(self) -> ContractState:
        """Deploy a fresh game contract and bind to it."""
        self._require_connected()

        if self.state.status not in (ContractStatus.UNBOUND, ContractStatus.DEPLOY_FAILED):
            logger.warning(f"Deploy rejected while contract is {self.state.status.value}")
            return self.state

        self.context.contract_state = DEPLOYING
        self.view.set_deploy_enabled(False)
        logger.info(f"\033[94m🚀 Deploying {self.artifact.contract_name}...\033[0m")

        try:
            address = await _run_blocking(self.context.signer.deploy, self.artifact, self.deploy_timeout)
            contract = get_contract(self.context.web3, address, self.artifact.abi)
        except Exception as e:
            reason = str(e) or e.__class__.__name__
            logger.error(f"\033[31m❌ Deployment failed: {reason}\033[0m")
            self.context.contract_state = ContractState(
                ContractStatus.DEPLOY_FAILED, reason=reason, error=DeployFailed(reason)
            )
            self.view.alert(f"Deployment failed: {reason}")
            self.view.set_deploy_enabled(True)
            return self.context.contract_state

        logger.info(f"\033[92m✅ Contract deployed at {address}\033[0m")
        return self._become_ready(contract, address)

    async def attach(self, address: str) -> ContractState:
        """Bind to an already deployed game contract, without a transaction."""
        self._require_connected()

        if self.state.status is ContractStatus.DEPLOYING:
            logger.warning("Attach rejected while a deployment is in flight")
            return self.state

        try:
            contract = get_contract(self.context.web3, address, self.artifact.abi)
        except ValueError as e:
            logger.error(f"\033[31m❌ Cannot attach to {address}: {e}\033[0m")
            self.view.alert(f"Cannot attach to {address}: {e}")
            return self.state

        self.view.set_deploy_enabled(False)
        logger.info(f"\033[92m🔗 Attached to contract at {address}\033[0m")
        return self._become_ready(contract, address)

    async def read(self, operation: str, *args: Any) -> Any:
        """Read-only contract call. Errors propagate to the caller."""
        state = self.state
        if not state.is_ready:
            raise ContractNotReady(f"Cannot call {operation} while contract is {state.status.value}")

        call = contract_function(state.contract, operation, *args)
        return await _run_blocking(call.call)

    async def write(self, operation: str, *args: Any) -> WriteResult:
        """Send a transaction and wait until it is mined or fails."""
        state = self.state
        if not state.is_ready:
            error = WriteFailed(operation, f"contract is {state.status.value}")
            return WriteResult(operation, success=False, error=error)

        try:
            call = contract_function(state.contract, operation, *args)
            tx_hash, receipt = await asyncio.wait_for(
                _run_blocking(self.context.signer.transact, call, self.write_timeout),
                timeout=self.write_timeout,
            )
        except (asyncio.TimeoutError, TimeExhausted):
            error = WriteFailed(operation, f"not mined within {self.write_timeout:g}s")
            return WriteResult(operation, success=False, error=error)
        except TransactionFailed as e:
            error = WriteFailed(operation, "transaction reverted", tx_hash=e.tx_hash)
            return WriteResult(operation, success=False, tx_hash=e.tx_hash, error=error)
        except Exception as e:
            error = WriteFailed(operation, str(e) or e.__class__.__name__)
            return WriteResult(operation, success=False, error=error)

        logger.info(f"\033[92m✅ {operation}{args} confirmed in {tx_hash}\033[0m")
        return WriteResult(operation, success=True, tx_hash=tx_hash, receipt=receipt)
