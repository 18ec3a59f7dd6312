"""Encryption instance bootstrap."""

from __future__ import annotations

import asyncio

import pytest

from fhe_minesweeper.config import ClientConfig
from fhe_minesweeper.encryption import EncryptionInstance, EncryptionInstanceProvider, EncryptionParams


def _params() -> EncryptionParams:
    return EncryptionParams.from_config(ClientConfig())


def test_params_come_from_config() -> None:
    params = _params()
    assert params.chain_id == 11155111
    assert params.gateway_url == "https://gateway.sepolia.zama.ai"
    assert params.kms_contract_address == "0x9D6891A6240D6130c54ae243d8005063D05fE14b"
    assert params.acl_contract_address == "0xFee8407e2f5e3Ee68ad77cAE98c434e637f516e5"


def test_instance_is_created_once() -> None:
    calls: list[EncryptionParams] = []

    async def factory(params: EncryptionParams) -> EncryptionInstance:
        calls.append(params)
        await asyncio.sleep(0)
        return EncryptionInstance(params=params, key_info={"publicKeyId": "abc"})

    async def scenario():
        provider = EncryptionInstanceProvider(_params(), factory)
        first, second = await asyncio.gather(provider.init(), provider.init())
        third = await provider.init()
        return provider, first, second, third

    provider, first, second, third = asyncio.run(scenario())

    assert len(calls) == 1
    assert first is second is third
    assert provider.available
    assert provider.instance.key_info == {"publicKeyId": "abc"}


def test_failed_creation_leaves_instance_unavailable() -> None:
    calls = 0

    async def factory(params: EncryptionParams) -> EncryptionInstance:
        nonlocal calls
        calls += 1
        raise RuntimeError("gateway down")

    async def scenario():
        provider = EncryptionInstanceProvider(_params(), factory)
        errors = []
        for _ in range(2):
            try:
                await provider.init()
            except RuntimeError as e:
                errors.append(str(e))
        return provider, errors

    provider, errors = asyncio.run(scenario())

    assert errors == ["gateway down", "gateway down"]
    assert calls == 1
    assert provider.instance is None
    assert not provider.available


def test_factory_errors_propagate_from_init() -> None:
    async def factory(params: EncryptionParams) -> EncryptionInstance:
        raise ConnectionError("unreachable")

    provider = EncryptionInstanceProvider(_params(), factory)
    with pytest.raises(ConnectionError):
        asyncio.run(provider.init())
