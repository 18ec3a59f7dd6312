"""
Blockchain utilities for the minesweeper client.
"""

from .connection import ContractArtifact, get_web3_connection, get_contract, load_artifact
from .game import GET_BOARD, PICK_MINE, contract_function
from .transactions import TransactionFailed, build_sign_send_transaction, deploy_contract
from .wallet import LocalKeyWallet, LocalSigner, wallet_from_config

__all__ = [
    "ContractArtifact",
    "get_web3_connection",
    "get_contract",
    "load_artifact",
    "GET_BOARD",
    "PICK_MINE",
    "contract_function",
    "TransactionFailed",
    "build_sign_send_transaction",
    "deploy_contract",
    "LocalKeyWallet",
    "LocalSigner",
    "wallet_from_config",
]
