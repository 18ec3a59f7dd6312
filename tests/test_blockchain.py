"""Artifact loading, transaction sending and the local key wallet."""

from __future__ import annotations

import asyncio
import json

import pytest
from eth_account import Account
from hexbytes import HexBytes
from web3 import Web3

from fhe_minesweeper.blockchain import (
    LocalKeyWallet,
    TransactionFailed,
    build_sign_send_transaction,
    deploy_contract,
    load_artifact,
    wallet_from_config,
)
from fhe_minesweeper.blockchain import transactions as transactions_module
from fhe_minesweeper.blockchain import wallet as wallet_module
from tests.fakes import ARTIFACT, CONTRACT_A

PRIVATE_KEY = "0x" + "4c" * 32
TX_HASH = HexBytes(b"\x01" * 32)


class TxEth:
    def __init__(self, status: int = 1, send_errors: list[Exception] | None = None):
        self.account = Account()
        self.status = status
        self.send_errors = list(send_errors or [])
        self.sent: list[bytes] = []
        self.code = HexBytes(b"\x60\x80")
        self.gas_price = 10

    def get_transaction_count(self, address, block_identifier):
        return len(self.sent)

    def estimate_gas(self, transaction):
        return 100_000

    def get_block(self, block_identifier):
        return {"baseFeePerGas": 1_000_000_000}

    def send_raw_transaction(self, raw):
        self.sent.append(raw)
        if self.send_errors:
            raise self.send_errors.pop(0)
        return TX_HASH

    def wait_for_transaction_receipt(self, tx_hash, timeout):
        return {"status": self.status, "contractAddress": CONTRACT_A}

    def get_code(self, address):
        return self.code

    def contract(self, abi, bytecode):
        return FactoryStub()


class TxWeb3:
    def __init__(self, **kwargs):
        self.eth = TxEth(**kwargs)

    def to_wei(self, value, unit):
        assert unit == "gwei"
        return int(value * 10**9)


class PickMineCall:
    def build_transaction(self, params):
        transaction = dict(params)
        transaction.update({
            "chainId": 11155111,
            "to": Web3.to_checksum_address("0x" + "bb" * 20),
            "data": "0x1234",
        })
        return transaction


class FactoryStub:
    def constructor(self):
        return PickMineCall()


def test_load_artifact_reads_abi_and_bytecode(tmp_path) -> None:
    path = tmp_path / "Minesweeper.json"
    path.write_text(json.dumps({"contractName": "Minesweeper", "abi": ARTIFACT.abi, "bytecode": "0x6080"}))

    artifact = load_artifact(str(path))

    assert artifact.contract_name == "Minesweeper"
    assert artifact.abi == ARTIFACT.abi
    assert artifact.bytecode == "0x6080"


def test_load_artifact_without_abi_fails(tmp_path) -> None:
    path = tmp_path / "Broken.json"
    path.write_text(json.dumps({"bytecode": "0x"}))
    with pytest.raises(ValueError):
        load_artifact(str(path))


def test_transaction_is_signed_sent_and_confirmed() -> None:
    web3 = TxWeb3()
    tx_hash, receipt = build_sign_send_transaction(web3, PickMineCall(), PRIVATE_KEY)

    assert tx_hash == "0x" + "01" * 32
    assert receipt["status"] == 1
    assert len(web3.eth.sent) == 1


def test_nonce_too_low_is_retried() -> None:
    web3 = TxWeb3(send_errors=[ValueError({"message": "nonce too low"})])
    tx_hash, _ = build_sign_send_transaction(web3, PickMineCall(), PRIVATE_KEY, retry_sleep_seconds=0)

    assert tx_hash == "0x" + "01" * 32
    assert len(web3.eth.sent) == 2


def test_unexpected_send_error_is_raised_without_retry() -> None:
    web3 = TxWeb3(send_errors=[ValueError({"message": "insufficient funds for gas"})])
    with pytest.raises(ValueError):
        build_sign_send_transaction(web3, PickMineCall(), PRIVATE_KEY, retry_sleep_seconds=0)
    assert len(web3.eth.sent) == 1


def test_failed_status_raises_transaction_failed() -> None:
    web3 = TxWeb3(status=0)
    with pytest.raises(TransactionFailed) as excinfo:
        build_sign_send_transaction(web3, PickMineCall(), PRIVATE_KEY)
    assert excinfo.value.tx_hash == "0x" + "01" * 32
    assert len(web3.eth.sent) == 1


def test_deploy_waits_for_live_code() -> None:
    web3 = TxWeb3()
    address, tx_hash = deploy_contract(web3, ARTIFACT, PRIVATE_KEY)
    assert address == CONTRACT_A
    assert tx_hash == "0x" + "01" * 32


def test_deploy_without_code_fails(monkeypatch) -> None:
    web3 = TxWeb3()
    web3.eth.code = HexBytes(b"")
    monkeypatch.setattr(
        transactions_module,
        "build_sign_send_transaction",
        lambda *args, **kwargs: ("0xabc", {"contractAddress": CONTRACT_A}),
    )
    with pytest.raises(RuntimeError, match="No contract code"):
        deploy_contract(web3, ARTIFACT, PRIVATE_KEY)


def test_wallet_needs_a_private_key() -> None:
    assert wallet_from_config("http://127.0.0.1:8545", None) is None
    assert isinstance(wallet_from_config("http://127.0.0.1:8545", PRIVATE_KEY), LocalKeyWallet)


def test_local_wallet_connects_lazily(monkeypatch) -> None:
    opened: list[str] = []
    sentinel_web3 = TxWeb3()

    def fake_connection(rpc_url):
        opened.append(rpc_url)
        return sentinel_web3

    monkeypatch.setattr(wallet_module, "get_web3_connection", fake_connection)
    wallet = LocalKeyWallet("http://127.0.0.1:8545", PRIVATE_KEY)
    assert opened == []

    async def scenario():
        accounts = await wallet.request_accounts()
        signer = await wallet.get_signer()
        return accounts, signer

    accounts, signer = asyncio.run(scenario())

    expected = Account.from_key(PRIVATE_KEY).address
    assert accounts == [expected]
    assert signer.address == expected
    assert signer.web3 is sentinel_web3
    assert opened == ["http://127.0.0.1:8545"]


def test_local_wallet_surfaces_unreachable_rpc(monkeypatch) -> None:
    def unreachable(rpc_url):
        raise ConnectionError(f"Failed to connect to {rpc_url}")

    monkeypatch.setattr(wallet_module, "get_web3_connection", unreachable)
    wallet = LocalKeyWallet("http://127.0.0.1:1", PRIVATE_KEY)

    with pytest.raises(ConnectionError):
        asyncio.run(wallet.request_accounts())
