"""
SmartAccountV1 Swap Request Provider

Builds unsigned EntryPoint v0.6 user operations that make a SmartAccountV1
wallet execute a Uniswap-V3-shaped single-hop swap, optionally deploying the
wallet in the same operation, and prepares session-key authorization
requests.

Key Features:
    - Per-chain address resolution (override > built-in table > absent)
    - Pool/direction partitioned nonces
    - Two-phase gas estimation through EntryPoint simulation
    - Lazy wallet deployment through factory init code
    - Session key Permit / Revoke EIP-712 requests

The provider is stateless per request and safe to share between concurrent
requests. The setters mutate configuration without synchronisation and must
not be called while requests are in flight.

Dependencies:
    - web3.py: For async RPC reads and gas estimation
    - eth_abi / eth_utils: For local calldata encoding
    - eth_keys / eth_account: For session keys and EIP-712
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from web3 import AsyncWeb3

from ..bases import SwapRequestProvider
from .CONTRACT_ABI import (
    get_entrypoint_abi,
    get_session_key_manager_abi,
    get_smart_account_factory_abi,
)
from .calldata import (
    encode_approve,
    encode_create_account,
    encode_exact_input_single,
    encode_execute_batch,
    encode_multicall,
    encode_unwrap_weth9,
)
from .constants import (
    DEX_CHAINS,
    ENTRYPOINT_ADDRESS,
    SMART_ACCOUNT_V1_CHAINS,
    ProviderConfig,
    get_rpc_url_from_env,
)
from .gas import estimate_call_gas, estimate_verification_gas, simulate_handle_op
from .nonces import derive_nonce, validate_sequence_id
from .schemas import (
    CreateSessionKeyRequestOutput,
    CreateSwapRequestInput,
    CreateSwapRequestOutput,
    Dex,
    DexAddressesV3,
    ExecutionResult,
    QuoteExactInputSingleResult,
    SinglePathSwapInput,
    UserOperation,
)
from .session_keys import (
    build_session_key_typed_data,
    generate_session_key,
    resolve_session_key_address,
)
from .simulators import CallSimulator, JsonRpcCallSimulator, Web3CallSimulator
from .uniswap_v3 import quote_exact_input_single
from ...engine.exceptions import (
    ConfigurationError,
    InvalidRequestError,
    SessionKeyAuthorizationError,
    SmartAccountExistsError,
)
from ...schemas.bases import ZERO_ADDRESS, hex_to_bytes, to_checksum, to_hex

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Calldata assembly
# ---------------------------------------------------------------------------

def build_swap_calldata(swap_input: SinglePathSwapInput, smart_account: str, weth: str) -> bytes:
    """
    Router calldata for ``swap_input``.

    When ``token_out`` is WETH the router keeps the output
    (``recipient = 0x0``) and ``unwrapWETH9`` pays native currency to the
    recipient inside the same ``multicall``. Otherwise a single
    ``exactInputSingle`` pays the recipient directly. The recipient
    defaults to the smart account.
    """
    recipient = swap_input.recipient or smart_account
    unwraps = swap_input.token_out.lower() == weth.lower()

    exact_input_single = encode_exact_input_single(
        token_in=swap_input.token_in,
        token_out=swap_input.token_out,
        fee=swap_input.fee,
        recipient=ZERO_ADDRESS if unwraps else recipient,
        deadline=swap_input.deadline,
        amount_in=swap_input.amount_in,
        amount_out_minimum=swap_input.amount_out_minimum,
        sqrt_price_limit_x96=swap_input.sqrt_price_limit_x96,
    )
    if not unwraps:
        return exact_input_single

    unwrap = encode_unwrap_weth9(swap_input.amount_out_minimum, recipient)
    return encode_multicall([exact_input_single, unwrap])


def build_batch_legs(
    swap_input: SinglePathSwapInput,
    router: str,
    weth: str,
    swap_calldata: bytes,
) -> Tuple[List[str], List[int], List[bytes]]:
    """
    ``executeBatch`` targets, values and calldatas.

    Swapping out of WETH sends ``amount_in`` as native value to the router
    in a single leg. Any other input token is approved to the router first;
    both legs carry zero value.
    """
    if swap_input.token_in.lower() == weth.lower():
        return [router], [swap_input.amount_in], [swap_calldata]

    approve = encode_approve(router, swap_input.amount_in)
    return [swap_input.token_in, router], [0, 0], [approve, swap_calldata]


class SmartAccountV1Provider(SwapRequestProvider):
    """
    SmartAccountV1 swap request builder bound to one chain.

    Attributes:
        w3: Async web3 instance used for every remote read
        chain_id: Chain the provider builds operations for
        config: Explicit overrides (see ``ProviderConfig``)
        simulator: Transport for EntryPoint / quoter simulations
        entrypoint: Resolved EntryPoint address
        factory: Resolved SmartAccountV1 factory, or None
        session_key_manager: Resolved session key manager, or None
        authorizer: Resolved authorizer, or None
        dex: Resolved DEX table, or None

    Example:
        provider = await SmartAccountV1Provider.from_rpc_url("http://localhost:8545")

        output = await provider.create_swap_request(
            CreateSwapRequestInput(
                dex="uniswapV3",
                swap_input=SinglePathSwapInput(
                    token_in=WETH,
                    token_out=TOKEN,
                    fee=3000,
                    deadline=2**255,
                    amount_in=10_000,
                    amount_out_minimum=0,
                ),
                gasless=True,
                init_smart_account_input=InitSmartAccountV1Input(owner=owner, salt=salt),
            )
        )
        signature = sign_user_op_hash(owner_key, output.user_op_hash)
        signed_op = output.request.with_signature(signature)
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        chain_id: int,
        config: Optional[ProviderConfig] = None,
        simulator: Optional[CallSimulator] = None,
    ):
        self.w3 = w3
        self.chain_id = chain_id
        self.config = config or ProviderConfig()
        self.simulator = simulator or Web3CallSimulator(w3)

        chain_accounts = SMART_ACCOUNT_V1_CHAINS.get(chain_id)
        self._chain_dex = DEX_CHAINS.get(chain_id)

        self.entrypoint: str = (
            self.config.entrypoint
            or (chain_accounts.entrypoint if chain_accounts else None)
            or ENTRYPOINT_ADDRESS
        )
        self.factory: Optional[str] = self.config.factory or (
            chain_accounts.smart_account_factory_v1 if chain_accounts else None
        )
        self.session_key_manager: Optional[str] = self.config.session_key_manager or (
            chain_accounts.session_key_manager if chain_accounts else None
        )
        self.authorizer: Optional[str] = self.config.authorizer or (
            chain_accounts.authorizer if chain_accounts else None
        )
        self.dex: Optional[Dex] = self.config.dex or self._chain_dex

    @classmethod
    async def from_web3(
        cls,
        w3: AsyncWeb3,
        config: Optional[ProviderConfig] = None,
        simulator: Optional[CallSimulator] = None,
    ) -> "SmartAccountV1Provider":
        """Build a provider for the chain ``w3`` is connected to."""
        chain_id = await w3.eth.chain_id
        return cls(w3, chain_id, config=config, simulator=simulator)

    @classmethod
    async def from_rpc_url(
        cls,
        rpc_url: Optional[str] = None,
        config: Optional[ProviderConfig] = None,
        request_timeout: int = 60,
        raw_json_rpc_simulation: bool = False,
    ) -> "SmartAccountV1Provider":
        """
        Build a provider from an HTTP JSON-RPC endpoint.

        Args:
            rpc_url: Endpoint; defaults to ``SMART_ACCOUNT_RPC_URL``.
            config: Explicit overrides; defaults to ``ProviderConfig.from_env()``.
            request_timeout: Transport timeout in seconds.
            raw_json_rpc_simulation: Simulate with raw httpx ``eth_call``
                instead of web3 (for nodes whose revert data web3 drops).

        Raises:
            ConfigurationError: If no RPC URL is given or configured.
        """
        rpc_url = rpc_url or get_rpc_url_from_env()
        if not rpc_url:
            raise ConfigurationError(
                "RPC URL not provided. Either pass 'rpc_url' or set SMART_ACCOUNT_RPC_URL.",
                key="SMART_ACCOUNT_RPC_URL",
            )

        w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(
            rpc_url,
            request_kwargs={"timeout": request_timeout}
        ))
        simulator = JsonRpcCallSimulator(rpc_url, timeout=request_timeout) if raw_json_rpc_simulation else None
        return await cls.from_web3(w3, config=config or ProviderConfig.from_env(), simulator=simulator)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_dex(self, dex: Union[Dex, Dict[str, Any]]) -> None:
        """Replace the DEX table. Not safe while requests are in flight."""
        self.dex = dex if isinstance(dex, Dex) else Dex.model_validate(dex)

    def set_factory(self, factory: str) -> None:
        """Replace the SmartAccountV1 factory. Not safe while requests are in flight."""
        self.factory = to_checksum(factory)

    def set_session_key_manager(self, session_key_manager: str) -> None:
        """Replace the session key manager. Not safe while requests are in flight."""
        self.session_key_manager = to_checksum(session_key_manager)

    def set_authorizer(self, authorizer: str) -> None:
        """Replace the authorizer. Not safe while requests are in flight."""
        self.authorizer = to_checksum(authorizer)

    @property
    def weth(self) -> Optional[str]:
        """Native-wrapper token: override, then DEX table, then chain table."""
        if self.config.weth:
            return self.config.weth
        if self.dex is not None and self.dex.weth:
            return self.dex.weth
        if self._chain_dex is not None:
            return self._chain_dex.weth
        return None

    def _require_dex(self, dex_name: str) -> DexAddressesV3:
        dex = self.dex.get_dex(dex_name) if self.dex is not None else None
        if dex is None:
            raise ConfigurationError(f"{dex_name} not supported on chain {self.chain_id}", key=dex_name)
        return dex

    def _require_weth(self) -> str:
        weth = self.weth
        if not weth:
            raise ConfigurationError(f"WETH address not configured for chain {self.chain_id}", key="weth")
        return weth

    def _require_factory(self) -> str:
        if not self.factory:
            raise ConfigurationError(
                f"Smart account factory not configured for chain {self.chain_id}", key="factory"
            )
        return self.factory

    def _require_session_manager(self) -> str:
        manager = self.session_key_manager or self.authorizer
        if not manager:
            raise ConfigurationError(
                f"Session key manager not supported on chain {self.chain_id}", key="session_key_manager"
            )
        return manager

    # ------------------------------------------------------------------
    # Remote reads
    # ------------------------------------------------------------------

    async def get_smart_account_address(self, owner: str, salt: int) -> str:
        """
        Counterfactual wallet address from ``factory.getAddress(owner, salt)``.

        Raises:
            ConfigurationError: If no factory is configured.
        """
        factory = self._require_factory()
        contract = self.w3.eth.contract(address=factory, abi=get_smart_account_factory_abi())
        address = await contract.functions.getAddress(to_checksum(owner), salt).call()
        return to_checksum(address)

    async def build_init_code(self, owner: str, salt: int) -> Tuple[str, bytes]:
        """
        Derive the wallet address and its deployment init code.

        Returns:
            ``(address, factory ++ createAccount(owner, salt))``

        Raises:
            SmartAccountExistsError: If code is already deployed at the address.
        """
        factory = self._require_factory()
        address = await self.get_smart_account_address(owner, salt)
        code = await self.w3.eth.get_code(address)
        if code and len(code) > 0:
            raise SmartAccountExistsError("Smart account already exists", address=address)

        init_code = hex_to_bytes(factory) + encode_create_account(to_checksum(owner), salt)
        return address, init_code

    async def get_nonce_for_smart_account(
        self,
        smart_account: str,
        dex_factory: str,
        token_in: str,
        token_out: str,
        fee: int,
        sequence_id: int = 0,
    ) -> int:
        """Pool/direction partitioned EntryPoint nonce (see ``nonces.derive_nonce``)."""
        return await derive_nonce(
            self.w3,
            self.entrypoint,
            smart_account,
            dex_factory,
            token_in,
            token_out,
            fee,
            sequence_id,
        )

    async def calculate_execute_batch_gas_limit(
        self,
        smart_account: str,
        targets: Sequence[str],
        values: Sequence[int],
        calldatas: Sequence[bytes],
    ) -> int:
        """Execution-phase gas limit; never raises on simulation failure."""
        return await estimate_call_gas(self.w3, self.entrypoint, smart_account, targets, values, calldatas)

    async def calculate_verification_gas_limit(self, user_op: UserOperation) -> int:
        """Verification-phase gas limit from ``simulateValidation``."""
        return await estimate_verification_gas(
            self.simulator, self.entrypoint, user_op, self.config.signature_layout
        )

    async def get_user_op_hash(self, user_op: UserOperation) -> str:
        """``EntryPoint.getUserOpHash(op)``; independent of the signature."""
        contract = self.w3.eth.contract(address=self.entrypoint, abi=get_entrypoint_abi())
        user_op_hash = await contract.functions.getUserOpHash(user_op.to_tuple()).call()
        return to_hex(user_op_hash)

    async def simulate_handle_op(
        self,
        user_op: UserOperation,
        target: str = ZERO_ADDRESS,
        target_calldata: bytes = b"",
    ) -> ExecutionResult:
        """Full ``simulateHandleOp`` of a signed operation."""
        return await simulate_handle_op(self.simulator, self.entrypoint, user_op, target, target_calldata)

    async def quote_exact_input_single(
        self, dex_name: str, swap_input: SinglePathSwapInput
    ) -> QuoteExactInputSingleResult:
        """QuoterV2 quote of ``swap_input`` on the named DEX."""
        dex = self._require_dex(dex_name)
        return await quote_exact_input_single(self.simulator, dex.quoter_v2, swap_input)

    # ------------------------------------------------------------------
    # Swap requests
    # ------------------------------------------------------------------

    async def create_swap_request(
        self,
        swap_request: Union[CreateSwapRequestInput, Dict[str, Any]],
    ) -> CreateSwapRequestOutput:
        """
        Build an unsigned user operation executing ``swap_request``.

        Preconditions are checked before any remote call: a sender source
        (``smart_account`` or ``init_smart_account_input``), a configured
        DEX and WETH, a factory when initialising, distinct tokens and an
        in-range ``order_id``.

        Args:
            swap_request: ``CreateSwapRequestInput`` or its dict form.

        Returns:
            CreateSwapRequestOutput: sender, ``userOpHash`` and the unsigned
            operation (fees zero when ``gasless``).

        Raises:
            ConfigurationError: Missing DEX, WETH or factory.
            InvalidRequestError: No sender source, same token in/out, or a
                ``smart_account`` that disagrees with the derived address.
            NonceRangeError: ``order_id >= 2**31``.
            SmartAccountExistsError: Initialisation requested for a deployed wallet.
            GasEstimationError / RevertDecodingError: Verification gas failed.
        """
        if not isinstance(swap_request, CreateSwapRequestInput):
            swap_request = CreateSwapRequestInput.model_validate(swap_request)

        init_input = swap_request.init_smart_account_input
        swap_input = swap_request.swap_input

        if not swap_request.smart_account and init_input is None:
            raise InvalidRequestError("Must provide either `smart_account` or `init_smart_account_input`")
        dex = self._require_dex(swap_request.dex)
        weth = self._require_weth()
        if init_input is not None:
            self._require_factory()
        if swap_input.token_in.lower() == swap_input.token_out.lower():
            raise InvalidRequestError("TokenIn and TokenOut must be different")
        validate_sequence_id(swap_request.order_id)

        init_code = b""
        smart_account = swap_request.smart_account
        if init_input is not None:
            derived, init_code = await self.build_init_code(init_input.owner, init_input.salt)
            if smart_account and smart_account.lower() != derived.lower():
                raise InvalidRequestError(
                    f"smart_account {smart_account} does not match derived address {derived}"
                )
            smart_account = derived

        swap_calldata = build_swap_calldata(swap_input, smart_account, weth)
        targets, values, calldatas = build_batch_legs(swap_input, dex.swap_router, weth, swap_calldata)
        call_data = encode_execute_batch(targets, values, calldatas)

        nonce = await self.get_nonce_for_smart_account(
            smart_account,
            dex.factory,
            swap_input.token_in,
            swap_input.token_out,
            swap_input.fee,
            swap_request.order_id,
        )

        user_op = UserOperation(
            sender=smart_account,
            nonce=nonce,
            init_code=init_code,
            call_data=call_data,
        )

        call_gas_limit = await self.calculate_execute_batch_gas_limit(smart_account, targets, values, calldatas)
        user_op = user_op.model_copy(update={"call_gas_limit": call_gas_limit})

        verification_gas_limit = await self.calculate_verification_gas_limit(user_op)
        user_op = user_op.model_copy(update={"verification_gas_limit": verification_gas_limit})

        if not swap_request.gasless:
            user_op = user_op.model_copy(
                update={
                    "max_fee_per_gas": self.config.max_fee_per_gas,
                    "max_priority_fee_per_gas": self.config.max_priority_fee_per_gas,
                }
            )

        user_op_hash = await self.get_user_op_hash(user_op)
        logger.info(
            "Built swap request for %s: nonce=%s callGasLimit=%s verificationGasLimit=%s",
            smart_account,
            nonce,
            call_gas_limit,
            verification_gas_limit,
        )
        return CreateSwapRequestOutput(smart_account=smart_account, user_op_hash=user_op_hash, request=user_op)

    # ------------------------------------------------------------------
    # Session keys
    # ------------------------------------------------------------------

    async def _is_authorized(self, manager: str, owner: str, session_key: str) -> bool:
        contract = self.w3.eth.contract(address=manager, abi=get_session_key_manager_abi())
        return await contract.functions.isAuthorized(owner, session_key).call()

    async def _session_nonce(self, manager: str, owner: str) -> int:
        contract = self.w3.eth.contract(address=manager, abi=get_session_key_manager_abi())
        return await contract.functions.nonces(owner).call()

    async def create_session_key_request(self, owner: str, salt: int) -> CreateSessionKeyRequestOutput:
        """
        Generate a session key and the ``Permit`` request authorizing it.

        The "already authorized" check is advisory: another registration
        can land between this read and the owner's signature.

        Raises:
            ConfigurationError: No session key manager or authorizer configured.
            SessionKeyAuthorizationError: The fresh key is already authorized.
        """
        manager = self._require_session_manager()
        owner = to_checksum(owner)
        session_key = generate_session_key()

        if await self._is_authorized(manager, owner, session_key.address):
            raise SessionKeyAuthorizationError("Session key already authorized")

        nonce = await self._session_nonce(manager, owner)
        typed_data = build_session_key_typed_data(
            primary_type="Permit",
            chain_id=self.chain_id,
            manager=manager,
            owner=owner,
            salt=salt,
            session_key=session_key.address,
            nonce=nonce,
        )
        return CreateSessionKeyRequestOutput(session_key=session_key, request=typed_data.to_dict())

    async def revoke_session_key_request(
        self,
        owner: str,
        salt: int,
        session_key: Union[str, bytes],
    ) -> Dict[str, Any]:
        """
        Build the ``Revoke`` request for a session key.

        Args:
            owner: Smart account owner.
            salt: Factory salt of the owner's smart account.
            session_key: Session key address, or its public key (64/65-byte
                uncompressed or 33-byte compressed, hex or bytes).

        Raises:
            ConfigurationError: No session key manager or authorizer configured.
            SessionKeyAuthorizationError: The key is not currently authorized
                (advisory, same race as for ``create_session_key_request``).
        """
        manager = self._require_session_manager()
        owner = to_checksum(owner)
        session_key_address = resolve_session_key_address(session_key)

        if not await self._is_authorized(manager, owner, session_key_address):
            raise SessionKeyAuthorizationError("Session key not authorized")

        nonce = await self._session_nonce(manager, owner)
        typed_data = build_session_key_typed_data(
            primary_type="Revoke",
            chain_id=self.chain_id,
            manager=manager,
            owner=owner,
            salt=salt,
            session_key=session_key_address,
            nonce=nonce,
        )
        return typed_data.to_dict()
