"""
Two-Phase Gas Estimation

Execution phase
    ``eth_estimateGas`` of the wallet's ``executeBatch`` as if called by the
    EntryPoint. Best effort: failures and implausibly low estimates fall
    back to ``FALLBACK_CALL_GAS``.

Verification phase
    ``EntryPoint.simulateValidation`` with a maximal gas allowance and a
    synthetic signature. The call always reverts; ``ValidationResult``
    carries ``preOpGas``. Any other outcome is a hard failure.

Both simulations of the EntryPoint go through a ``CallSimulator`` so the
transport that surfaces revert data can be swapped.
"""

import logging
from typing import Sequence

from web3 import AsyncWeb3

from .calldata import encode_execute_batch, encode_simulate_handle_op, encode_simulate_validation
from .constants import (
    BASE_TX_GAS,
    DUMMY_ECDSA_SIGNATURE,
    FALLBACK_CALL_GAS,
    LOW_GAS_THRESHOLD,
    MAX_VERIFICATION_GAS,
)
from .reverts import EXECUTION_RESULT, VALIDATION_SUCCESS_ERRORS, decode_revert
from .schemas import ExecutionResult, UserOperation, ValidationReturnInfo
from .signatures import SignatureLayout, encode_session_nonce
from .simulators import CallSimulator
from ...engine.exceptions import GasEstimationError, SimulationError
from ...schemas.bases import ZERO_ADDRESS, to_hex

logger = logging.getLogger(__name__)


def build_mock_signature(layout: SignatureLayout = SignatureLayout.SERVER_PREFIXED) -> bytes:
    """
    Synthetic signature with the byte length of ``layout``.

    One ``DUMMY_ECDSA_SIGNATURE`` per ECDSA part followed by a zero session
    nonce. The default layout is the longest supported one.
    """
    layout = SignatureLayout(layout)
    return DUMMY_ECDSA_SIGNATURE * layout.ecdsa_parts + encode_session_nonce(0)


def adjust_call_gas(raw_estimate: int) -> int:
    """Strip the intrinsic transaction gas, or fall back for trivial estimates."""
    if raw_estimate <= LOW_GAS_THRESHOLD:
        return FALLBACK_CALL_GAS
    return raw_estimate - BASE_TX_GAS


async def estimate_call_gas(
    w3: AsyncWeb3,
    entrypoint: str,
    smart_account: str,
    targets: Sequence[str],
    values: Sequence[int],
    calldatas: Sequence[bytes],
) -> int:
    """
    Estimate ``callGasLimit`` for ``executeBatch(targets, values, calldatas)``.

    Never raises on simulation failure: an insufficient balance or an
    unreachable slippage bound at estimation time is expected, so the
    fallback constant is returned and a warning is logged.

    Returns:
        int: ``raw - 21000``, or ``FALLBACK_CALL_GAS`` when the raw estimate
        is ``<= 50000`` or the estimate failed.
    """
    call_data = encode_execute_batch(targets, values, calldatas)
    tx = {"from": entrypoint, "to": smart_account, "data": to_hex(call_data)}
    try:
        raw_estimate = await w3.eth.estimate_gas(tx)
    except Exception as e:
        logger.warning(
            "executeBatch gas estimation failed for %s, using fallback %s: %s",
            smart_account,
            FALLBACK_CALL_GAS,
            e,
        )
        return FALLBACK_CALL_GAS

    call_gas = adjust_call_gas(raw_estimate)
    logger.debug("executeBatch raw estimate %s -> callGasLimit %s", raw_estimate, call_gas)
    return call_gas


async def estimate_verification_gas(
    simulator: CallSimulator,
    entrypoint: str,
    user_op: UserOperation,
    layout: SignatureLayout = SignatureLayout.SERVER_PREFIXED,
) -> int:
    """
    Estimate ``verificationGasLimit`` through ``simulateValidation``.

    Args:
        simulator: Transport used for the always-reverting call.
        entrypoint: EntryPoint address.
        user_op: Unsigned operation (initCode and callData populated).
        layout: Signature layout used to size the mock signature.

    Returns:
        int: ``returnInfo.preOpGas`` of the ``ValidationResult`` revert.

    Raises:
        GasEstimationError: On any decoded revert other than
            ``ValidationResult``/``ValidationResultWithAggregation`` (the
            message embeds the error name and arguments), or if the call
            did not revert at all.
        RevertDecodingError: If the revert payload cannot be decoded.
    """
    simulated = user_op.model_copy(
        update={
            "verification_gas_limit": MAX_VERIFICATION_GAS,
            "signature": to_hex(build_mock_signature(layout)),
        }
    )
    outcome = await simulator.call(entrypoint, encode_simulate_validation(simulated.to_tuple()))
    if outcome.success:
        raise GasEstimationError(
            f"simulateValidation on {entrypoint} returned without reverting: {to_hex(outcome.data)}"
        )

    decoded = decode_revert(outcome.data)
    if decoded.name not in VALIDATION_SUCCESS_ERRORS:
        raise GasEstimationError(
            f"Verification gas estimation failed: {decoded.describe()}",
            error_name=decoded.name,
            error_args=decoded.args,
        )

    return_info = ValidationReturnInfo.from_tuple(decoded.args[0])
    logger.debug(
        "simulateValidation for %s: preOpGas=%s sigFailed=%s",
        user_op.sender,
        return_info.pre_op_gas,
        return_info.sig_failed,
    )
    return return_info.pre_op_gas


async def simulate_handle_op(
    simulator: CallSimulator,
    entrypoint: str,
    user_op: UserOperation,
    target: str = ZERO_ADDRESS,
    target_calldata: bytes = b"",
) -> ExecutionResult:
    """
    Run ``EntryPoint.simulateHandleOp`` and decode its ``ExecutionResult``.

    The operation should carry a real signature; validation runs in full.

    Raises:
        SimulationError: If the call did not revert or reverted with any
            error other than ``ExecutionResult``.
        RevertDecodingError: If the revert payload cannot be decoded.
    """
    call_data = encode_simulate_handle_op(user_op.to_tuple(), target, target_calldata)
    outcome = await simulator.call(entrypoint, call_data)
    if outcome.success:
        raise SimulationError(f"simulateHandleOp on {entrypoint} returned without reverting")

    decoded = decode_revert(outcome.data)
    if decoded.name != EXECUTION_RESULT.name:
        raise SimulationError(
            f"simulateHandleOp failed: {decoded.describe()}",
            error_name=decoded.name,
            error_args=decoded.args,
        )
    return ExecutionResult.from_args(decoded.args)
