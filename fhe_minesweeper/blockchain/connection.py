"""
Web3 connection and contract artifact utilities.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from web3 import Web3
from web3.contract import Contract


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractArtifact:
    """ABI and creation bytecode of a compiled contract."""
    contract_name: str
    abi: List[Dict[str, Any]]
    bytecode: str


def get_web3_connection(rpc_url: str) -> Web3:
    """Create Web3 connection."""
    web3 = Web3(Web3.HTTPProvider(rpc_url))

    if not web3.is_connected():
        raise ConnectionError(f"Failed to connect to {rpc_url}")

    logger.info(f"Connected to blockchain at {rpc_url}")
    return web3


def load_artifact(artifact_path: str) -> ContractArtifact:
    """Load a Hardhat-style artifact JSON (abi + bytecode)."""
    path = Path(artifact_path)
    with open(path, "r") as f:
        data = json.load(f)

    if "abi" not in data:
        raise ValueError(f"Artifact {path} has no 'abi' entry")

    artifact = ContractArtifact(
        contract_name=data.get("contractName", path.stem),
        abi=data["abi"],
        bytecode=data.get("bytecode", "0x"),
    )
    logger.info(f"Loaded artifact for {artifact.contract_name} from {path}")
    return artifact


def get_contract(web3: Web3, contract_address: str, abi: List[Dict[str, Any]]) -> Contract:
    """Get contract instance bound to a deployed address."""
    contract = web3.eth.contract(
        address=Web3.to_checksum_address(contract_address),
        abi=abi
    )

    logger.info(f"Loaded contract at {contract_address}")
    return contract
