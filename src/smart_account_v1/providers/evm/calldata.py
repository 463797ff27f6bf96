"""
Local Calldata Encoding

Encodes every state-changing or simulation call the provider places inside
a user operation (or sends through ``eth_call``) without a node round trip.
Each call is described by a ``FunctionSpec`` holding its name and ABI
argument types; the 4-byte selector is derived from the canonical
signature with ``eth_utils`` and arguments are packed with ``eth_abi``.

Exported helpers
----------------
encode_approve / encode_exact_input_single / encode_unwrap_weth9 /
encode_multicall
    ERC-20 and Uniswap V3 SwapRouter calls that make up the swap.

encode_execute_batch / encode_create_account
    SmartAccountV1 wallet batch execution and factory deployment.

encode_simulate_validation / encode_simulate_handle_op
    EntryPoint v0.6 simulation entry points (always revert).

encode_quote_exact_input_single
    Uniswap QuoterV2 single-hop quote.
"""

from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector

from .CONTRACT_ABI import USER_OPERATION_TUPLE_TYPE
from ...schemas.bases import hex_to_bytes


@dataclass(frozen=True)
class FunctionSpec:
    """
    ABI description of a single contract function.

    Attributes:
        name: Function name (e.g. ``executeBatch``).
        arg_types: Canonical ABI types of the arguments, in order.
    """
    name: str
    arg_types: Tuple[str, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.arg_types)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode(self, *args: Any) -> bytes:
        """Return ``selector ++ abi.encode(args)``."""
        return self.selector + encode(list(self.arg_types), list(args))

    def decode(self, data) -> Tuple[Any, ...]:
        """
        Decode calldata produced by :meth:`encode`.

        Raises:
            ValueError: If the selector does not match this function.
        """
        raw = hex_to_bytes(data)
        if raw[:4] != self.selector:
            raise ValueError(
                f"Calldata selector 0x{raw[:4].hex()} does not match {self.signature}"
            )
        return tuple(decode(list(self.arg_types), raw[4:]))


EXACT_INPUT_SINGLE_PARAMS_TYPE = "(address,address,uint24,address,uint256,uint256,uint256,uint160)"
QUOTE_EXACT_INPUT_SINGLE_PARAMS_TYPE = "(address,address,uint256,uint24,uint160)"

APPROVE = FunctionSpec("approve", ("address", "uint256"))
EXACT_INPUT_SINGLE = FunctionSpec("exactInputSingle", (EXACT_INPUT_SINGLE_PARAMS_TYPE,))
UNWRAP_WETH9 = FunctionSpec("unwrapWETH9", ("uint256", "address"))
MULTICALL = FunctionSpec("multicall", ("bytes[]",))
EXECUTE_BATCH = FunctionSpec("executeBatch", ("address[]", "uint256[]", "bytes[]"))
CREATE_ACCOUNT = FunctionSpec("createAccount", ("address", "uint256"))
SIMULATE_VALIDATION = FunctionSpec("simulateValidation", (USER_OPERATION_TUPLE_TYPE,))
SIMULATE_HANDLE_OP = FunctionSpec("simulateHandleOp", (USER_OPERATION_TUPLE_TYPE, "address", "bytes"))
QUOTE_EXACT_INPUT_SINGLE = FunctionSpec("quoteExactInputSingle", (QUOTE_EXACT_INPUT_SINGLE_PARAMS_TYPE,))


def encode_approve(spender: str, amount: int) -> bytes:
    return APPROVE.encode(spender, amount)


def encode_exact_input_single(
    *,
    token_in: str,
    token_out: str,
    fee: int,
    recipient: str,
    deadline: int,
    amount_in: int,
    amount_out_minimum: int,
    sqrt_price_limit_x96: int = 0,
) -> bytes:
    """
    Encode SwapRouter ``exactInputSingle(ExactInputSingleParams)``.

    The struct field order is tokenIn, tokenOut, fee, recipient, deadline,
    amountIn, amountOutMinimum, sqrtPriceLimitX96.
    """
    params = (
        token_in,
        token_out,
        fee,
        recipient,
        deadline,
        amount_in,
        amount_out_minimum,
        sqrt_price_limit_x96,
    )
    return EXACT_INPUT_SINGLE.encode(params)


def encode_unwrap_weth9(amount_minimum: int, recipient: str) -> bytes:
    return UNWRAP_WETH9.encode(amount_minimum, recipient)


def encode_multicall(calls: Sequence[bytes]) -> bytes:
    return MULTICALL.encode([bytes(call) for call in calls])


def encode_execute_batch(
    targets: Sequence[str],
    values: Sequence[int],
    calldatas: Sequence[bytes],
) -> bytes:
    """
    Encode SmartAccountV1 ``executeBatch(dest[], value[], func[])``.

    Raises:
        ValueError: If the three arrays differ in length.
    """
    if not (len(targets) == len(values) == len(calldatas)):
        raise ValueError(
            "executeBatch arrays must have equal length "
            f"(targets={len(targets)}, values={len(values)}, calldatas={len(calldatas)})"
        )
    return EXECUTE_BATCH.encode(list(targets), list(values), [bytes(c) for c in calldatas])


def encode_create_account(owner: str, salt: int) -> bytes:
    return CREATE_ACCOUNT.encode(owner, salt)


def encode_simulate_validation(user_op_tuple: Tuple[Any, ...]) -> bytes:
    return SIMULATE_VALIDATION.encode(user_op_tuple)


def encode_simulate_handle_op(
    user_op_tuple: Tuple[Any, ...],
    target: str,
    target_calldata: bytes = b"",
) -> bytes:
    return SIMULATE_HANDLE_OP.encode(user_op_tuple, target, target_calldata)


def encode_quote_exact_input_single(
    *,
    token_in: str,
    token_out: str,
    amount_in: int,
    fee: int,
    sqrt_price_limit_x96: int = 0,
) -> bytes:
    return QUOTE_EXACT_INPUT_SINGLE.encode(
        (token_in, token_out, amount_in, fee, sqrt_price_limit_x96)
    )


def decode_quote_exact_input_single_result(data: bytes) -> List[int]:
    """
    Decode QuoterV2 ``quoteExactInputSingle`` return data.

    Returns:
        ``[amountOut, sqrtPriceX96After, initializedTicksCrossed, gasEstimate]``
    """
    return list(decode(["uint256", "uint160", "uint32", "uint256"], hex_to_bytes(data)))
