from .provider import SmartAccountV1Provider, build_swap_calldata, build_batch_legs
from .constants import (
    ProviderConfig,
    ENTRYPOINT_ADDRESS,
    DEX_CHAINS,
    SMART_ACCOUNT_V1_CHAINS,
    get_rpc_url_from_env,
)
from .schemas import (
    UserOperation,
    DexAddressesV3,
    Dex,
    SmartAccountV1Addresses,
    SinglePathSwapInput,
    InitSmartAccountV1Input,
    CreateSwapRequestInput,
    CreateSwapRequestOutput,
    SessionKey,
    CreateSessionKeyRequestOutput,
    ValidationReturnInfo,
    ExecutionResult,
    QuoteExactInputSingleResult,
)
from .signatures import (
    SignatureLayout,
    aggregate_client_signatures,
    prefix_server_signature,
    aggregate_signatures,
    sign_user_op_hash,
    sign_typed_data_request,
    recover_typed_data_signer,
)
from .simulators import CallSimulator, SimulationOutcome, Web3CallSimulator, JsonRpcCallSimulator
from .nonces import compute_nonce_key, decode_nonce, decode_nonce_key, derive_nonce
from .gas import estimate_call_gas, estimate_verification_gas, simulate_handle_op, build_mock_signature
from .session_keys import generate_session_key, public_key_to_address
from .uniswap_v3 import convert_sqrt_x96_to_price, convert_price_to_sqrt_x96, quote_exact_input_single

__all__ = [
    "SmartAccountV1Provider",
    "build_swap_calldata",
    "build_batch_legs",
    "ProviderConfig",
    "ENTRYPOINT_ADDRESS",
    "DEX_CHAINS",
    "SMART_ACCOUNT_V1_CHAINS",
    "get_rpc_url_from_env",
    "UserOperation",
    "DexAddressesV3",
    "Dex",
    "SmartAccountV1Addresses",
    "SinglePathSwapInput",
    "InitSmartAccountV1Input",
    "CreateSwapRequestInput",
    "CreateSwapRequestOutput",
    "SessionKey",
    "CreateSessionKeyRequestOutput",
    "ValidationReturnInfo",
    "ExecutionResult",
    "QuoteExactInputSingleResult",
    "SignatureLayout",
    "aggregate_client_signatures",
    "prefix_server_signature",
    "aggregate_signatures",
    "sign_user_op_hash",
    "sign_typed_data_request",
    "recover_typed_data_signer",
    "CallSimulator",
    "SimulationOutcome",
    "Web3CallSimulator",
    "JsonRpcCallSimulator",
    "compute_nonce_key",
    "decode_nonce",
    "decode_nonce_key",
    "derive_nonce",
    "estimate_call_gas",
    "estimate_verification_gas",
    "simulate_handle_op",
    "build_mock_signature",
    "generate_session_key",
    "public_key_to_address",
    "convert_sqrt_x96_to_price",
    "convert_price_to_sqrt_x96",
    "quote_exact_input_single",
]
