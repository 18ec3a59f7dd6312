"""
Wallet provider backed by a local private key.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from eth_account import Account
from web3 import Web3

from .connection import ContractArtifact, get_web3_connection
from .transactions import build_sign_send_transaction, deploy_contract


logger = logging.getLogger(__name__)


class LocalSigner:
    """Signs and sends transactions with a private key."""

    def __init__(self, web3: Web3, private_key: str):
        self.web3 = web3
        self._private_key = private_key
        self.address = Account.from_key(private_key).address

    def deploy(self, artifact: ContractArtifact, timeout: float) -> str:
        """Deploy ``artifact``, returning the live contract address."""
        address, _ = deploy_contract(
            self.web3,
            artifact,
            self._private_key,
            receipt_timeout=timeout,
        )
        return address

    def transact(self, function_call, timeout: float) -> Tuple[str, Dict[str, Any]]:
        """Send ``function_call`` and wait for it to be mined."""
        return build_sign_send_transaction(
            self.web3,
            function_call,
            self._private_key,
            receipt_timeout=timeout,
        )


class LocalKeyWallet:
    """Wallet that exposes one account derived from a private key.

    The RPC connection is opened lazily on the first account request, so a
    bad endpoint surfaces as a failed connection rather than a startup crash.
    """

    def __init__(self, rpc_url: str, private_key: str):
        self.rpc_url = rpc_url
        self._private_key = private_key
        self._web3: Optional[Web3] = None

    async def _ensure_web3(self) -> Web3:
        if self._web3 is None:
            loop = asyncio.get_running_loop()
            self._web3 = await loop.run_in_executor(None, get_web3_connection, self.rpc_url)
        return self._web3

    async def request_accounts(self) -> List[str]:
        """Return the accounts this wallet authorizes."""
        await self._ensure_web3()
        return [Account.from_key(self._private_key).address]

    async def get_signer(self) -> LocalSigner:
        web3 = await self._ensure_web3()
        return LocalSigner(web3, self._private_key)


def wallet_from_config(rpc_url: str, private_key: Optional[str]) -> Optional[LocalKeyWallet]:
    """Build the default wallet, or None when no key is configured."""
    if not private_key:
        logger.warning("No private key configured, wallet unavailable")
        return None
    return LocalKeyWallet(rpc_url, private_key)
