"""
Transaction utilities.
"""

import logging
import time
from typing import Dict, Any, Tuple, Optional

from web3 import Web3
from web3.types import TxParams

from .connection import ContractArtifact


logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 5_000_000  # FHE operations are gas heavy


class TransactionFailed(Exception):
    """A mined transaction reported a failed status."""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Transaction failed: {tx_hash}")


def estimate_gas_with_buffer(web3: Web3, transaction: TxParams, buffer_percent: int = 20) -> int:
    """Estimate gas with buffer."""
    try:
        estimated_gas = web3.eth.estimate_gas(transaction)
        return int(estimated_gas * (1 + buffer_percent / 100))
    except Exception as e:
        logger.warning(f"Gas estimation failed: {e}, using default")
        return DEFAULT_GAS_LIMIT


def _error_message(exc: Exception) -> str:
    details = exc.args[0] if exc.args else None
    if isinstance(details, dict):
        return str(details.get('message', '')).lower()
    return str(exc).lower()


def build_sign_send_transaction(
    web3: Web3,
    function_call,
    private_key: str,
    tx_params: Optional[Dict[str, Any]] = None,
    *,
    receipt_timeout: float = 120,
    retries: int = 2,
    retry_sleep_seconds: float = 0.3,
    fee_bump_factor: float = 1.15,
) -> Tuple[str, Dict[str, Any]]:
    """Build, sign and send a transaction, then wait for its receipt.

    ``function_call`` is anything with ``build_transaction``: a bound contract
    function or a contract constructor.

    - Detects 'nonce too low' and refreshes nonce using 'pending'.
    - Handles 'already known' by waiting on the computed tx hash.
    - Bumps fees on retries to satisfy replacement requirements.
    - Raises ``web3.exceptions.TimeExhausted`` if no receipt arrives within
      ``receipt_timeout`` seconds.
    """
    if not tx_params:
        tx_params = {}

    account = web3.eth.account.from_key(private_key)

    def _apply_default_fees(tx: Dict[str, Any], attempt_index: int) -> None:
        # If both legacy and EIP-1559 are absent, set EIP-1559 params
        if 'gasPrice' not in tx and 'maxFeePerGas' not in tx:
            try:
                base_fee = web3.eth.get_block('latest')['baseFeePerGas']
                max_priority_fee = web3.to_wei(2, 'gwei')
                tx['maxFeePerGas'] = base_fee * 2 + max_priority_fee
                tx['maxPriorityFeePerGas'] = max_priority_fee
                tx.pop('gasPrice', None)
            except Exception:
                tx['gasPrice'] = web3.eth.gas_price
        # On retries, bump whichever pricing scheme is present
        if attempt_index > 0:
            if 'maxFeePerGas' in tx and 'maxPriorityFeePerGas' in tx:
                tx['maxPriorityFeePerGas'] = int(tx['maxPriorityFeePerGas'] * fee_bump_factor)
                tx['maxFeePerGas'] = int(tx['maxFeePerGas'] * fee_bump_factor)
            elif 'gasPrice' in tx:
                tx['gasPrice'] = int(tx['gasPrice'] * fee_bump_factor)

    def _wait(tx_hash) -> Dict[str, Any]:
        receipt = web3.eth.wait_for_transaction_receipt(tx_hash, timeout=receipt_timeout)
        if receipt['status'] != 1:
            raise TransactionFailed(Web3.to_hex(tx_hash))
        return receipt

    last_error: Optional[Exception] = None
    signed_txn = None

    for attempt in range(retries + 1):
        try:
            # Always take latest pending nonce
            current_nonce = web3.eth.get_transaction_count(account.address, 'pending')
            transaction: Dict[str, Any] = function_call.build_transaction({
                'from': account.address,
                'nonce': current_nonce,
                'gas': tx_params.get('gas', None),
                'gasPrice': tx_params.get('gasPrice', None),
                'maxFeePerGas': tx_params.get('maxFeePerGas', None),
                'maxPriorityFeePerGas': tx_params.get('maxPriorityFeePerGas', None),
                'value': tx_params.get('value', 0),
            })

            # Remove None values
            transaction = {k: v for k, v in transaction.items() if v is not None}

            if 'gas' not in transaction:
                transaction['gas'] = estimate_gas_with_buffer(web3, transaction)

            _apply_default_fees(transaction, attempt)

            signed_txn = web3.eth.account.sign_transaction(transaction, private_key)
            tx_hash = web3.eth.send_raw_transaction(signed_txn.raw_transaction)
            logger.info(f"Sent transaction {Web3.to_hex(tx_hash)}, waiting for receipt...")

            receipt = _wait(tx_hash)
            return Web3.to_hex(tx_hash), receipt

        except TransactionFailed:
            raise

        except Exception as exc:  # noqa: BLE001
            last_error = exc
            message = _error_message(exc)

            # If tx is already known, wait for its hash
            if 'already known' in message and signed_txn is not None:
                computed_hash = Web3.keccak(signed_txn.raw_transaction)
                receipt = _wait(computed_hash)
                return Web3.to_hex(computed_hash), receipt

            retryable = (
                'nonce too low' in message
                or 'replacement transaction underpriced' in message
                or 'transaction underpriced' in message
            )
            if attempt < retries and retryable:
                logger.warning(f"Retrying transaction after: {message}")
                time.sleep(retry_sleep_seconds)
                continue

            break

    raise last_error if last_error else Exception('Unknown transaction error')


def deploy_contract(
    web3: Web3,
    artifact: ContractArtifact,
    private_key: str,
    *,
    receipt_timeout: float = 180,
) -> Tuple[str, str]:
    """Deploy ``artifact`` and return ``(contract_address, tx_hash)``.

    Returns only once the deployment is mined and code is live at the new
    address.
    """
    factory = web3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
    tx_hash, receipt = build_sign_send_transaction(
        web3,
        factory.constructor(),
        private_key,
        receipt_timeout=receipt_timeout,
    )

    contract_address = receipt.get('contractAddress')
    if not contract_address:
        raise RuntimeError(f"Deployment {tx_hash} produced no contract address")

    if not web3.eth.get_code(contract_address):
        raise RuntimeError(f"No contract code at {contract_address} after deployment {tx_hash}")

    logger.info(f"Deployed {artifact.contract_name} at {contract_address} (tx {tx_hash})")
    return contract_address, tx_hash
