"""
Exception and Error Definitions Module

Defines the exception hierarchy raised by the SmartAccountV1 provider while
building swap requests, deriving nonces, estimating gas and preparing
session-key authorizations. All exceptions inherit from ProviderError so a
caller can catch every provider failure with a single ``except`` clause.

Exception Hierarchy:
    ProviderError (root)
    ├── ConfigurationError
    ├── InvalidRequestError
    │   ├── NonceRangeError
    │   ├── SmartAccountExistsError
    │   └── SessionKeyAuthorizationError
    └── BlockchainInteractionError
        ├── SimulationError
        │   └── GasEstimationError
        ├── RevertDecodingError
        └── JsonRpcError

Failures of ordinary remote reads (pool lookup, address derivation, nonce
reads) are NOT wrapped: the underlying web3 / httpx exception reaches the
caller unchanged.
"""

from typing import Any, Optional, Tuple


class ProviderError(Exception):
    """
    Root exception class for all provider-specific exceptions.

    All custom exceptions inherit from this class to enable unified
    exception handling by callers (e.g. HTTP glue translating failures
    into 4xx/5xx responses).
    """
    pass


class ConfigurationError(ProviderError):
    """
    Raised when configuration is missing or unsupported for the active chain.

    This includes scenarios such as:
    - No smart account factory configured (needed for lazy deployment)
    - No session key manager / authorizer configured
    - DEX name not present in the DEX table
    - Chain has no DEX table or no native-wrapper (WETH) address

    Raised before any remote call is made.

    Attributes:
        key: Name of the missing configuration key
    """

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class InvalidRequestError(ProviderError):
    """
    Raised when a request violates a precondition.

    This includes scenarios such as:
    - Neither ``smart_account`` nor ``init_smart_account_input`` provided
    - ``token_in`` equals ``token_out``
    - ``smart_account`` disagrees with the address derived for initialization

    These are never retried.
    """
    pass


class NonceRangeError(InvalidRequestError):
    """
    Raised when a nonce sequence id does not fit in 31 bits.

    Attributes:
        sequence_id: The rejected sequence id
    """

    def __init__(self, message: str, sequence_id: Optional[int] = None):
        super().__init__(message)
        self.sequence_id = sequence_id


class SmartAccountExistsError(InvalidRequestError):
    """
    Raised when initialization is requested for a wallet that already has code.

    Attributes:
        address: Counterfactual address that already holds a contract
    """

    def __init__(self, message: str, address: Optional[str] = None):
        super().__init__(message)
        self.address = address


class SessionKeyAuthorizationError(InvalidRequestError):
    """
    Raised when the advisory session-key authorization pre-check fails.

    The check is best effort: another registration can land between the
    read and the owner's external signature, so passing it is no guarantee.
    """
    pass


class BlockchainInteractionError(ProviderError):
    """
    Raised when an interaction with the node produced an unusable result.

    Plain transport failures are not wrapped in this class; it covers
    results the provider could not interpret.
    """
    pass


class SimulationError(BlockchainInteractionError):
    """
    Raised when an EntryPoint simulation reverted with an unexpected error.

    Attributes:
        error_name: Decoded custom error name (e.g. ``FailedOp``), if any
        error_args: Decoded custom error arguments, if any
    """

    def __init__(
        self,
        message: str,
        error_name: Optional[str] = None,
        error_args: Optional[Tuple[Any, ...]] = None,
    ):
        super().__init__(message)
        self.error_name = error_name
        self.error_args = error_args


class GasEstimationError(SimulationError):
    """
    Raised when verification-phase gas cannot be estimated.

    The message embeds the decoded revert name and arguments so that
    "operation would be rejected" failures are distinguishable from gas
    shortfalls.
    """
    pass


class RevertDecodingError(BlockchainInteractionError):
    """
    Raised when revert data cannot be decoded.

    Attributes:
        payload: Raw undecodable payload (bytes, hex string or JSON text)
    """

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


class JsonRpcError(BlockchainInteractionError):
    """
    Raised when a raw JSON-RPC call returns an error without revert data,
    or an envelope that is neither a result nor an error.

    Attributes:
        rpc_method: RPC method that was called (e.g. ``eth_call``)
        error: The JSON-RPC ``error`` object or raw response body
    """

    def __init__(self, message: str, rpc_method: Optional[str] = None, error: Any = None):
        super().__init__(message)
        self.rpc_method = rpc_method
        self.error = error
