"""
Contract call transactions.

Builds the unsigned single-operation transactions used for contract calls.
Applying a simulation to them is done by the RPC client; signing and
submission are left to the caller.
"""

from typing import Sequence

from stellar_sdk import Account, TransactionBuilder, TransactionEnvelope
from stellar_sdk import xdr as stellar_xdr

from .config import SDKConfig


def build_contract_call(
    source: Account,
    contract_id: str,
    function_name: str,
    parameters: Sequence[stellar_xdr.SCVal],
    config: SDKConfig,
) -> TransactionEnvelope:
    """
    Build a transaction invoking one contract function.

    Args:
        source: Source account with its current sequence number
        contract_id: Contract strkey (C...)
        function_name: Contract function to invoke
        parameters: Encoded function arguments
        config: Supplies network passphrase, base fee and timeout

    Returns:
        Unsigned transaction envelope
    """
    builder = TransactionBuilder(
        source_account=source,
        network_passphrase=config.network_passphrase,
        base_fee=config.default_fee,
    )
    builder.append_invoke_contract_function_op(
        contract_id=contract_id,
        function_name=function_name,
        parameters=list(parameters),
    )
    if config.default_timeout:
        builder.set_timeout(config.default_timeout)
    else:
        builder.add_time_bounds(0, 0)
    return builder.build()
