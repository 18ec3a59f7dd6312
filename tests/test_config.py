"""Environment-driven configuration."""

from __future__ import annotations

from fhe_minesweeper.config import ClientConfig

ENV_VARS = [
    "MINESWEEPER_PRIVATE_KEY",
    "MINESWEEPER_RPC_URL",
    "MINESWEEPER_CONTRACT_ADDRESS",
    "MINESWEEPER_BOARD_SIZE",
    "MINESWEEPER_POLL_INTERVAL_MS",
    "MINESWEEPER_WRITE_TIMEOUT",
]


def _clear(monkeypatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment(monkeypatch) -> None:
    _clear(monkeypatch)
    config = ClientConfig.from_env()

    assert config.private_key is None
    assert config.contract_address is None
    assert config.board_size == 16
    assert config.poll_interval_seconds == 1.0
    assert config.write_timeout_seconds == 60.0
    assert config.chain_id == 11155111


def test_environment_overrides(monkeypatch) -> None:
    _clear(monkeypatch)
    monkeypatch.setenv("MINESWEEPER_PRIVATE_KEY", "ab" * 32)
    monkeypatch.setenv("MINESWEEPER_RPC_URL", "http://127.0.0.1:8545")
    monkeypatch.setenv("MINESWEEPER_CONTRACT_ADDRESS", "0x6eE276EA5763214c9E117A99e5eF97f8c4025415")
    monkeypatch.setenv("MINESWEEPER_BOARD_SIZE", "8")
    monkeypatch.setenv("MINESWEEPER_POLL_INTERVAL_MS", "250")
    monkeypatch.setenv("MINESWEEPER_WRITE_TIMEOUT", "15")

    config = ClientConfig.from_env()

    assert config.private_key == "0x" + "ab" * 32
    assert config.rpc_url == "http://127.0.0.1:8545"
    assert config.contract_address == "0x6eE276EA5763214c9E117A99e5eF97f8c4025415"
    assert config.board_size == 8
    assert config.poll_interval_seconds == 0.25
    assert config.write_timeout_seconds == 15.0


def test_empty_private_key_means_no_wallet(monkeypatch) -> None:
    _clear(monkeypatch)
    monkeypatch.setenv("MINESWEEPER_PRIVATE_KEY", "")
    assert ClientConfig.from_env().private_key is None
