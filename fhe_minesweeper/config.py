"""
Configuration settings for the FHE Minesweeper client.
"""

import os
from dataclasses import dataclass
from typing import Optional


SEPOLIA_CHAIN_ID = 11155111


@dataclass
class ClientConfig:
    """Client configuration settings."""

    # Blockchain settings
    rpc_url: str = "https://eth-sepolia.public.blastapi.io"
    chain_id: int = SEPOLIA_CHAIN_ID
    private_key: Optional[str] = None

    # Encryption network settings
    gateway_url: str = "https://gateway.sepolia.zama.ai"
    kms_contract_address: str = "0x9D6891A6240D6130c54ae243d8005063D05fE14b"
    acl_contract_address: str = "0xFee8407e2f5e3Ee68ad77cAE98c434e637f516e5"

    # Contract settings
    artifact_path: str = "artifacts/contracts/Minesweeper.sol/Minesweeper.json"
    contract_address: Optional[str] = None  # Attach instead of deploying when set

    # Game settings
    board_size: int = 16

    # Timing settings
    poll_interval_ms: int = 1000
    write_timeout_seconds: float = 60.0
    deploy_timeout_seconds: float = 180.0

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Create config from environment variables."""
        # Normalize private key to ensure it has 0x prefix
        private_key = os.getenv("MINESWEEPER_PRIVATE_KEY") or None
        if private_key and not private_key.startswith("0x"):
            private_key = "0x" + private_key

        defaults = cls()
        return cls(
            rpc_url=os.getenv("MINESWEEPER_RPC_URL", defaults.rpc_url),
            chain_id=int(os.getenv("MINESWEEPER_CHAIN_ID", str(defaults.chain_id))),
            private_key=private_key,
            gateway_url=os.getenv("MINESWEEPER_GATEWAY_URL", defaults.gateway_url),
            kms_contract_address=os.getenv("MINESWEEPER_KMS_CONTRACT_ADDRESS", defaults.kms_contract_address),
            acl_contract_address=os.getenv("MINESWEEPER_ACL_CONTRACT_ADDRESS", defaults.acl_contract_address),
            artifact_path=os.getenv("MINESWEEPER_ARTIFACT_PATH", defaults.artifact_path),
            contract_address=os.getenv("MINESWEEPER_CONTRACT_ADDRESS") or None,
            board_size=int(os.getenv("MINESWEEPER_BOARD_SIZE", str(defaults.board_size))),
            poll_interval_ms=int(os.getenv("MINESWEEPER_POLL_INTERVAL_MS", str(defaults.poll_interval_ms))),
            write_timeout_seconds=float(os.getenv("MINESWEEPER_WRITE_TIMEOUT", str(defaults.write_timeout_seconds))),
            deploy_timeout_seconds=float(os.getenv("MINESWEEPER_DEPLOY_TIMEOUT", str(defaults.deploy_timeout_seconds))),
        )
