"""
SmartAccountV1 Chain Configuration Management

Built-in per-chain address tables (EntryPoint, SmartAccountV1 factory,
session-key authorizer, Uniswap V3 deployments, WETH), gas and fee
constants, and ``ProviderConfig``: the explicit overrides a provider is
constructed with.

Resolution order for every address is
``explicit override > built-in chain table > absent``. Absent values do not
fail at construction; the operation that needs one raises
``ConfigurationError`` naming the missing key.
"""

import os
from typing import Dict, Optional

import dotenv
from pydantic import BaseModel, ConfigDict, Field

from .schemas import Dex, DexAddressesV3, SmartAccountV1Addresses
from .signatures import SignatureLayout
from ...schemas.bases import Address

dotenv.load_dotenv()

# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------

#: Canonical EntryPoint v0.6 deployment (same address on every chain).
ENTRYPOINT_ADDRESS: str = "0x5FF137D4b0FDCD49DcA30c7CF57E578a026d2789"

#: EIP-712 domain name of the session key manager.
SESSION_MANAGER_DOMAIN_NAME: str = "LongDefi Session Key Manager"

#: EIP-712 domain version of the session key manager.
SESSION_MANAGER_DOMAIN_VERSION: str = "1"

UNISWAP_V3_ETH_ADDRESSES = DexAddressesV3(
    factory="0x1F98431c8aD98523631AE4a59f267346ea31F984",
    swap_router="0xE592427A0AEce92De3Edee1F18E0157C05861564",
    nonfungible_position_manager="0xC36442b4a4522E871399CD717aBDD847Ab11FE88",
    quoter_v2="0x61fFE014bA17989E743c5F6cB21bF9697530B21e",
)

SMART_ACCOUNT_V1_CHAINS: Dict[int, SmartAccountV1Addresses] = {
    11155111: SmartAccountV1Addresses(
        entrypoint=ENTRYPOINT_ADDRESS,
        smart_account_factory_v1="0x2a7554024fe1F77C4cf62ae176E24C63bF5a14d5",
        authorizer="0xfD1de5cab889487f7E4773dD77c1f218071CD145",
    ),
}

DEX_CHAINS: Dict[int, Dex] = {
    1: Dex(
        uniswap_v3=UNISWAP_V3_ETH_ADDRESSES,
        weth="0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
    ),
    11155111: Dex(
        uniswap_v3=DexAddressesV3(
            factory="0x0227628f3F023bb0B980b67D528571c95c6DaC1c",
            swap_router="0xc671db9c8c2e650FB5C9B9F119522700e5b7A958",
            nonfungible_position_manager="0x1238536071E1c677A632429e3655c799b22cDA52",
            quoter_v2="0xAb32382C0FE4F7FDC63E3A5d87e9545D64aa4c3e",
        ),
        weth="0xfFf9976782d46CC05630D1f6eBAb18b2324d6B14",
    ),
    137: Dex(
        uniswap_v3=UNISWAP_V3_ETH_ADDRESSES,
        weth="0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270",
    ),
    80001: Dex(
        uniswap_v3=UNISWAP_V3_ETH_ADDRESSES,
        weth="0x9c3C9283D3e44854697Cd22D3Faa240Cfb032889",
    ),
}

# ---------------------------------------------------------------------------
# Gas and fees
# ---------------------------------------------------------------------------

#: Intrinsic gas of a plain transaction, included in ``eth_estimateGas``.
BASE_TX_GAS: int = 21_000

#: Raw estimates at or below this mean the target has no code yet.
LOW_GAS_THRESHOLD: int = 50_000

#: callGasLimit used when execution-phase estimation fails or is too low.
FALLBACK_CALL_GAS: int = 200_000

#: verificationGasLimit attached while simulating validation.
MAX_VERIFICATION_GAS: int = 30_000_000

#: Placeholder fee rates for non-gasless operations (wei).
DEFAULT_MAX_FEE_PER_GAS: int = 30_000_000_000
DEFAULT_MAX_PRIORITY_FEE_PER_GAS: int = 2_000_000_000

#: Synthetic 65-byte ECDSA signature used only to size verification
#: simulation. It has no cryptographic meaning.
DUMMY_ECDSA_SIGNATURE: bytes = bytes.fromhex(
    "fffffffffffffffffffffffffffffff0000000000000000000000000000000007"
    "aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa1c"
)


class ProviderConfig(BaseModel):
    """
    Explicit configuration overrides for ``SmartAccountV1Provider``.

    Every field is optional; ``None`` falls back to the built-in chain
    tables. ``signature_layout`` sizes the mock signature used for
    verification-gas simulation.
    """

    model_config = ConfigDict(validate_assignment=True)

    entrypoint: Optional[Address] = Field(None, description="EntryPoint override")
    factory: Optional[Address] = Field(None, description="SmartAccountV1 factory override")
    session_key_manager: Optional[Address] = Field(None, description="Session key manager override")
    authorizer: Optional[Address] = Field(None, description="Authorizer override")
    dex: Optional[Dex] = Field(None, description="DEX table override")
    weth: Optional[Address] = Field(None, description="Native-wrapper token override")
    max_fee_per_gas: int = Field(DEFAULT_MAX_FEE_PER_GAS, ge=0)
    max_priority_fee_per_gas: int = Field(DEFAULT_MAX_PRIORITY_FEE_PER_GAS, ge=0)
    signature_layout: SignatureLayout = Field(SignatureLayout.SERVER_PREFIXED)

    @classmethod
    def from_env(cls, **overrides) -> "ProviderConfig":
        """
        Build a config from ``SMART_ACCOUNT_*`` environment variables.

        Environment Variables:
            - SMART_ACCOUNT_ENTRYPOINT
            - SMART_ACCOUNT_FACTORY
            - SMART_ACCOUNT_SESSION_KEY_MANAGER
            - SMART_ACCOUNT_AUTHORIZER
            - SMART_ACCOUNT_WETH

        Unset or empty variables are ignored. Keyword ``overrides`` win over
        the environment.

        Example:
            # .env
            # SMART_ACCOUNT_FACTORY="0x2a7554024fe1F77C4cf62ae176E24C63bF5a14d5"

            config = ProviderConfig.from_env()
        """
        env_keys = {
            "entrypoint": "SMART_ACCOUNT_ENTRYPOINT",
            "factory": "SMART_ACCOUNT_FACTORY",
            "session_key_manager": "SMART_ACCOUNT_SESSION_KEY_MANAGER",
            "authorizer": "SMART_ACCOUNT_AUTHORIZER",
            "weth": "SMART_ACCOUNT_WETH",
        }
        values = {}
        for field_name, env_key in env_keys.items():
            value = os.getenv(env_key)
            if value:
                values[field_name] = value
        values.update(overrides)
        return cls(**values)


def get_rpc_url_from_env() -> Optional[str]:
    """
    Load the JSON-RPC endpoint from environment variables.

    Environment Variable:
        - SMART_ACCOUNT_RPC_URL: HTTP(S) JSON-RPC endpoint of the target chain

    Returns:
        str: RPC URL from environment, or None if not configured

    Example:
        # export SMART_ACCOUNT_RPC_URL="http://localhost:8545"

        provider = await SmartAccountV1Provider.from_rpc_url(get_rpc_url_from_env())
    """
    return os.getenv("SMART_ACCOUNT_RPC_URL")
