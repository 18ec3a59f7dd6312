"""
Encryption instance bootstrap.

The homomorphic encryption client is created once per process from the
network parameters below. The client only needs to know whether an instance
exists; all cryptography happens inside it.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

import aiohttp

from fhe_minesweeper.config import ClientConfig


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncryptionParams:
    """Network parameters an encryption instance is bound to."""
    chain_id: int
    network_url: str
    gateway_url: str
    kms_contract_address: str
    acl_contract_address: str

    @classmethod
    def from_config(cls, config: ClientConfig) -> "EncryptionParams":
        return cls(
            chain_id=config.chain_id,
            network_url=config.rpc_url,
            gateway_url=config.gateway_url,
            kms_contract_address=config.kms_contract_address,
            acl_contract_address=config.acl_contract_address,
        )


@dataclass
class EncryptionInstance:
    """Configured encryption client handle."""
    params: EncryptionParams
    key_info: Dict[str, Any] = field(default_factory=dict)


InstanceFactory = Callable[[EncryptionParams], Awaitable[EncryptionInstance]]


async def fetch_gateway_instance(params: EncryptionParams) -> EncryptionInstance:
    """Default factory: fetch the gateway's public key metadata."""
    url = f"{params.gateway_url.rstrip('/')}/keyurl"
    timeout = aiohttp.ClientTimeout(total=30)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        async with session.get(url) as response:
            text = await response.text()
            if response.status != 200:
                raise RuntimeError(f"Gateway key request failed: {response.status} - {text}")
            data = await response.json(content_type=None)
    return EncryptionInstance(params=params, key_info=data)


class EncryptionInstanceProvider:
    """Creates the encryption instance at most once.

    Concurrent and repeated ``init()`` calls share one creation attempt. If
    that attempt fails, every call raises the same error and ``instance``
    stays None for the rest of the process.
    """

    def __init__(self, params: EncryptionParams, factory: InstanceFactory = fetch_gateway_instance):
        self.params = params
        self.factory = factory
        self.instance: Optional[EncryptionInstance] = None
        self._future: Optional[asyncio.Future] = None

    @property
    def available(self) -> bool:
        return self.instance is not None

    async def init(self) -> EncryptionInstance:
        if self._future is None:
            self._future = asyncio.ensure_future(self._create())
        return await self._future

    async def _create(self) -> EncryptionInstance:
        logger.info(f"Creating encryption instance for chain {self.params.chain_id} via {self.params.gateway_url}")
        try:
            instance = await self.factory(self.params)
        except Exception as e:
            logger.error(f"\033[31m❌ Encryption instance unavailable: {e}\033[0m")
            raise
        self.instance = instance
        logger.info("\033[92m🔐 Encryption instance ready\033[0m")
        return instance
