"""
Revert Payload Decoding

EntryPoint v0.6 reports simulation results through reverts: a successful
``simulateValidation`` reverts with ``ValidationResult`` and
``simulateHandleOp`` with ``ExecutionResult``. This module keeps a registry
of the custom errors the provider may meet, keyed by 4-byte selector, and
decodes raw revert data into a ``DecodedRevert``.

Anything that does not match a registered selector, or whose body fails ABI
decoding, raises ``RevertDecodingError`` carrying the raw payload.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector

from ...engine.exceptions import RevertDecodingError
from ...schemas.bases import hex_to_bytes

RETURN_INFO_TYPE = "(uint256,uint256,bool,uint48,uint48,bytes)"
STAKE_INFO_TYPE = "(uint256,uint256)"
AGGREGATOR_STAKE_INFO_TYPE = f"(address,{STAKE_INFO_TYPE})"


@dataclass(frozen=True)
class ErrorSpec:
    """ABI description of a Solidity custom error."""
    name: str
    arg_types: Tuple[str, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.arg_types)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode(self, *args: Any) -> bytes:
        return self.selector + encode(list(self.arg_types), list(args))


@dataclass(frozen=True)
class DecodedRevert:
    """
    A revert payload matched against a registered error.

    Attributes:
        name: Error name (e.g. ``ValidationResult``)
        args: Decoded arguments in declaration order
        data: The raw revert bytes
    """
    name: str
    args: Tuple[Any, ...]
    data: bytes

    def describe(self) -> str:
        """Human readable ``Name(arg, ...)`` form used in error messages."""
        rendered = ", ".join(_render(arg) for arg in self.args)
        return f"{self.name}({rendered})"


VALIDATION_RESULT = ErrorSpec(
    "ValidationResult",
    (RETURN_INFO_TYPE, STAKE_INFO_TYPE, STAKE_INFO_TYPE, STAKE_INFO_TYPE),
)
VALIDATION_RESULT_WITH_AGGREGATION = ErrorSpec(
    "ValidationResultWithAggregation",
    (RETURN_INFO_TYPE, STAKE_INFO_TYPE, STAKE_INFO_TYPE, STAKE_INFO_TYPE, AGGREGATOR_STAKE_INFO_TYPE),
)
EXECUTION_RESULT = ErrorSpec(
    "ExecutionResult",
    ("uint256", "uint256", "uint48", "uint48", "bool", "bytes"),
)
FAILED_OP = ErrorSpec("FailedOp", ("uint256", "string"))
SENDER_ADDRESS_RESULT = ErrorSpec("SenderAddressResult", ("address",))
SIGNATURE_VALIDATION_FAILED = ErrorSpec("SignatureValidationFailed", ("address",))
ERROR_STRING = ErrorSpec("Error", ("string",))
PANIC = ErrorSpec("Panic", ("uint256",))

#: Registered errors keyed by 4-byte selector.
KNOWN_ERRORS: Dict[bytes, ErrorSpec] = {
    spec.selector: spec
    for spec in (
        VALIDATION_RESULT,
        VALIDATION_RESULT_WITH_AGGREGATION,
        EXECUTION_RESULT,
        FAILED_OP,
        SENDER_ADDRESS_RESULT,
        SIGNATURE_VALIDATION_FAILED,
        ERROR_STRING,
        PANIC,
    )
}

#: Error names that mean "validation succeeded" for ``simulateValidation``.
VALIDATION_SUCCESS_ERRORS = frozenset(
    {VALIDATION_RESULT.name, VALIDATION_RESULT_WITH_AGGREGATION.name}
)


def _render(value: Any) -> str:
    if isinstance(value, bytes):
        return "0x" + value.hex()
    if isinstance(value, tuple):
        return "(" + ", ".join(_render(item) for item in value) + ")"
    return repr(value) if isinstance(value, str) else str(value)


def decode_revert(data: Union[str, bytes, bytearray, None]) -> DecodedRevert:
    """
    Decode raw revert data against the known error registry.

    Args:
        data: Revert bytes or their hex encoding.

    Returns:
        DecodedRevert: The matched error and its decoded arguments.

    Raises:
        RevertDecodingError: If the payload is empty, not hex, has an
            unknown selector or a body that does not ABI-decode.
    """
    if data is None:
        raise RevertDecodingError("Revert carried no data", payload=data)
    try:
        raw = hex_to_bytes(data)
    except ValueError as exc:
        raise RevertDecodingError(f"Revert data is not hex: {data!r}", payload=data) from exc

    if len(raw) < 4:
        raise RevertDecodingError(
            f"Revert data too short to carry a selector: 0x{raw.hex()}", payload=raw
        )

    spec = KNOWN_ERRORS.get(raw[:4])
    if spec is None:
        raise RevertDecodingError(
            f"Unknown revert selector 0x{raw[:4].hex()} in payload 0x{raw.hex()}",
            payload=raw,
        )

    try:
        args = tuple(decode(list(spec.arg_types), raw[4:]))
    except (DecodingError, ValueError) as exc:
        raise RevertDecodingError(
            f"Malformed {spec.name} revert payload 0x{raw.hex()}", payload=raw
        ) from exc

    return DecodedRevert(name=spec.name, args=args, data=raw)
