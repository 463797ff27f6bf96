"""
SmartAccountV1 Schema Models

Pydantic models for swap requests, user operations, address tables and
session keys. All classes inherit from ``CanonicalModel`` so they accept and
emit the camelCase field names used by bundlers and the JavaScript SDK.

User operation:
    - UserOperation: EntryPoint v0.6 ``UserOperation``; frozen once built,
      only the signature may be attached via ``with_signature``.

Address tables:
    - DexAddressesV3: Uniswap-V3-shaped DEX deployment.
    - Dex: Per-chain DEX name mapping plus the native-wrapper (WETH) token.
    - SmartAccountV1Addresses: entrypoint, factory, session-key manager or
      authorizer.

Requests / responses:
    - SinglePathSwapInput, InitSmartAccountV1Input, CreateSwapRequestInput
    - CreateSwapRequestOutput
    - SessionKey, CreateSessionKeyRequestOutput

Simulation payloads:
    - ValidationReturnInfo: ``returnInfo`` of ``ValidationResult``.
    - ExecutionResult: decoded ``simulateHandleOp`` result.
    - QuoteExactInputSingleResult: decoded QuoterV2 quote.
"""

from typing import Any, Dict, Optional, Tuple

from pydantic import ConfigDict, Field

from ...schemas.bases import (
    Address,
    CanonicalModel,
    HexData,
    Uint160,
    Uint24,
    Uint256,
    hex_to_bytes,
)


class UserOperation(CanonicalModel):
    """
    EntryPoint v0.6 ``UserOperation``.

    Gas and fee fields default to zero and ``signature`` to ``0x`` so a
    freshly assembled operation is in its "before estimation" state. The
    model is frozen: use ``model_copy(update=...)`` internally while
    assembling and ``with_signature`` once it has been handed to the caller.

    Example::

        op = UserOperation(sender=wallet, nonce=nonce, callData=call_data)
        signed = op.with_signature(owner_signature)
    """

    model_config = ConfigDict(frozen=True)

    sender: Address = Field(..., description="Smart account executing the operation")
    nonce: Uint256 = Field(..., description="Partitioned EntryPoint nonce")
    init_code: HexData = Field(default="0x", description="Factory address ++ createAccount calldata")
    call_data: HexData = Field(default="0x", description="executeBatch calldata")
    call_gas_limit: Uint256 = Field(default=0)
    verification_gas_limit: Uint256 = Field(default=0)
    pre_verification_gas: Uint256 = Field(default=0)
    max_fee_per_gas: Uint256 = Field(default=0)
    max_priority_fee_per_gas: Uint256 = Field(default=0)
    paymaster_and_data: HexData = Field(default="0x")
    signature: HexData = Field(default="0x")

    def with_signature(self, signature) -> "UserOperation":
        """Return a copy of this operation carrying ``signature`` (hex or bytes)."""
        return self.model_validate({**self.model_dump(), "signature": signature})

    def to_tuple(self) -> Tuple[Any, ...]:
        """ABI tuple in EntryPoint struct order, ready for ``eth_abi``/web3."""
        return (
            self.sender,
            self.nonce,
            hex_to_bytes(self.init_code),
            hex_to_bytes(self.call_data),
            self.call_gas_limit,
            self.verification_gas_limit,
            self.pre_verification_gas,
            self.max_fee_per_gas,
            self.max_priority_fee_per_gas,
            hex_to_bytes(self.paymaster_and_data),
            hex_to_bytes(self.signature),
        )

    def to_rpc(self) -> Dict[str, str]:
        """JSON-RPC form (``eth_sendUserOperation``): integers as hex quantities."""
        rpc: Dict[str, str] = {}
        for key, value in self.to_dict().items():
            rpc[key] = hex(value) if isinstance(value, int) else value
        return rpc


class DexAddressesV3(CanonicalModel):
    """Uniswap-V3-shaped DEX deployment on one chain."""

    swap_router: Address
    factory: Address
    nonfungible_position_manager: Address
    quoter_v2: Address


class Dex(CanonicalModel):
    """
    DEX table for one chain.

    Attributes:
        uniswap_v3: Uniswap V3 deployment, if any.
        pancake_swap_v3: PancakeSwap V3 deployment, if any.
        weth: Native-wrapper token; swaps out of it unwrap to native currency.
    """

    uniswap_v3: Optional[DexAddressesV3] = None
    pancake_swap_v3: Optional[DexAddressesV3] = None
    weth: Optional[Address] = None

    def get_dex(self, name: str) -> Optional[DexAddressesV3]:
        """Look up a deployment by its camelCase DEX name (``uniswapV3``)."""
        if name == "uniswapV3":
            return self.uniswap_v3
        if name == "pancakeSwapV3":
            return self.pancake_swap_v3
        return None


class SmartAccountV1Addresses(CanonicalModel):
    """SmartAccountV1 deployment on one chain."""

    entrypoint: Optional[Address] = None
    smart_account_factory_v1: Optional[Address] = None
    session_key_manager: Optional[Address] = None
    authorizer: Optional[Address] = None


class SinglePathSwapInput(CanonicalModel):
    """
    Single-hop exact-input swap.

    ``deadline`` is enforced by the router, not locally. ``recipient``
    defaults to the smart account; ``sqrt_price_limit_x96`` of 0 means no
    price limit.
    """

    token_in: Address
    token_out: Address
    fee: Uint24
    recipient: Optional[Address] = None
    deadline: Uint256
    amount_in: Uint256
    amount_out_minimum: Uint256
    sqrt_price_limit_x96: Uint160 = 0


class InitSmartAccountV1Input(CanonicalModel):
    """Owner and salt for counterfactual deployment through the factory."""

    owner: Address
    salt: Uint256


class CreateSwapRequestInput(CanonicalModel):
    """
    Swap request accepted by ``SmartAccountV1Provider.create_swap_request``.

    Attributes:
        order_id: Sequence id inside the (pool, direction) nonce partition.
        smart_account: Existing wallet; optional when ``init_smart_account_input`` is given.
        dex: DEX name to resolve against the DEX table.
        swap_input: The swap to execute.
        gasless: Zero fee fields; a sponsor pays out of band.
        init_smart_account_input: Deploy the wallet with this operation.
    """

    order_id: int = Field(default=0, description="Nonce sequence id, validated against 2**31 by the provider")
    smart_account: Optional[Address] = None
    dex: str = Field(description="DEX name, resolved against the DEX table by the provider")
    swap_input: SinglePathSwapInput
    gasless: bool = False
    init_smart_account_input: Optional[InitSmartAccountV1Input] = None


class CreateSwapRequestOutput(CanonicalModel):
    """Sender, operation hash and the unsigned operation."""

    smart_account: Address
    user_op_hash: HexData
    request: UserOperation


class SessionKey(CanonicalModel):
    """
    Ephemeral secp256k1 key pair.

    ``public_key`` is the 64-byte uncompressed key without the ``0x04``
    prefix; ``address`` is the low 160 bits of its keccak256 hash.
    """

    private_key: HexData
    public_key: HexData
    address: Address


class CreateSessionKeyRequestOutput(CanonicalModel):
    """Fresh session key plus the EIP-712 request the owner must sign."""

    session_key: SessionKey
    request: Dict[str, Any]


class ValidationReturnInfo(CanonicalModel):
    """``returnInfo`` member of the EntryPoint ``ValidationResult`` error."""

    pre_op_gas: int
    prefund: int
    sig_failed: bool
    valid_after: int
    valid_until: int
    paymaster_context: HexData

    @classmethod
    def from_tuple(cls, value: Tuple[Any, ...]) -> "ValidationReturnInfo":
        pre_op_gas, prefund, sig_failed, valid_after, valid_until, context = value
        return cls(
            pre_op_gas=pre_op_gas,
            prefund=prefund,
            sig_failed=sig_failed,
            valid_after=valid_after,
            valid_until=valid_until,
            paymaster_context=context,
        )


class QuoteExactInputSingleResult(CanonicalModel):
    """Decoded QuoterV2 ``quoteExactInputSingle`` return values."""

    amount_out: int
    sqrt_price_x96_after: int
    initialized_ticks_crossed: int
    gas_estimate: int


class ExecutionResult(CanonicalModel):
    """Decoded ``ExecutionResult`` revert of ``simulateHandleOp``."""

    pre_op_gas: int
    paid: int
    valid_after: int
    valid_until: int
    target_success: bool
    target_result: HexData

    @classmethod
    def from_args(cls, args: Tuple[Any, ...]) -> "ExecutionResult":
        pre_op_gas, paid, valid_after, valid_until, target_success, target_result = args
        return cls(
            pre_op_gas=pre_op_gas,
            paid=paid,
            valid_after=valid_after,
            valid_until=valid_until,
            target_success=target_success,
            target_result=target_result,
        )
