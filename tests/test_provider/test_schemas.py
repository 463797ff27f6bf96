"""
Schema and Configuration Test Suite

Tests for the pydantic request/response models, the EVM field types and
ProviderConfig environment loading.

Usage:
    pytest test_schemas.py -v
"""

import json

import pytest
from pydantic import ValidationError

from test_mocks import (
    MOCK_FACTORY_ADDRESS,
    MOCK_OWNER_ADDRESS,
    MOCK_SMART_ACCOUNT,
    MOCK_TOKEN_ADDRESS,
    MOCK_WETH_ADDRESS,
    create_swap_input,
    create_swap_request_input,
)

from smart_account_v1.providers.evm.constants import (
    DEX_CHAINS,
    SMART_ACCOUNT_V1_CHAINS,
    ProviderConfig,
    get_rpc_url_from_env,
)
from smart_account_v1.providers.evm.schemas import (
    CreateSwapRequestInput,
    Dex,
    SinglePathSwapInput,
    UserOperation,
)
from smart_account_v1.providers.evm.signatures import SignatureLayout
from smart_account_v1.schemas.bases import UINT24_MAX, hex_to_bytes, to_checksum


class TestFieldTypes:
    """Test suite for Address / HexData / bounded integers."""

    def test_address_is_checksummed(self):
        op = UserOperation(sender=MOCK_SMART_ACCOUNT.lower(), nonce=0)
        assert op.sender == MOCK_SMART_ACCOUNT

    @pytest.mark.parametrize("address", ["0x1234", "not-an-address", "0x" + "zz" * 20])
    def test_invalid_address(self, address):
        with pytest.raises(ValidationError):
            UserOperation(sender=address, nonce=0)

    def test_hex_data_accepts_bytes(self):
        op = UserOperation(sender=MOCK_SMART_ACCOUNT, nonce=0, call_data=b"\xde\xad")
        assert op.call_data == "0xdead"

    def test_hex_data_rejects_odd_length(self):
        with pytest.raises(ValidationError):
            UserOperation(sender=MOCK_SMART_ACCOUNT, nonce=0, call_data="0xabc")

    def test_uint_bounds(self):
        with pytest.raises(ValidationError):
            UserOperation(sender=MOCK_SMART_ACCOUNT, nonce=-1)
        with pytest.raises(ValidationError):
            UserOperation(sender=MOCK_SMART_ACCOUNT, nonce=2**256)
        with pytest.raises(ValidationError):
            create_swap_input(fee=UINT24_MAX + 1)

    def test_helpers(self):
        assert hex_to_bytes("0x0102") == b"\x01\x02"
        assert hex_to_bytes(b"\x01") == b"\x01"
        assert to_checksum(MOCK_OWNER_ADDRESS.lower()) == MOCK_OWNER_ADDRESS
        with pytest.raises(ValueError):
            to_checksum(MOCK_OWNER_ADDRESS[2:])


class TestUserOperation:
    """Test suite for the UserOperation model."""

    def test_defaults(self):
        op = UserOperation(sender=MOCK_SMART_ACCOUNT, nonce=1)

        assert op.init_code == "0x"
        assert op.call_gas_limit == 0
        assert op.signature == "0x"

    def test_is_frozen(self):
        op = UserOperation(sender=MOCK_SMART_ACCOUNT, nonce=1)

        with pytest.raises(ValidationError):
            op.nonce = 2

    def test_with_signature(self):
        op = UserOperation(sender=MOCK_SMART_ACCOUNT, nonce=1, call_data="0x01")

        signed = op.with_signature(b"\xaa" * 65)

        assert signed.signature == "0x" + "aa" * 65
        assert signed.call_data == "0x01"
        assert op.signature == "0x"

    def test_camel_case_dump(self):
        op = UserOperation(sender=MOCK_SMART_ACCOUNT, nonce=1, callGasLimit=5)

        data = op.to_dict()

        assert list(data) == [
            "sender",
            "nonce",
            "initCode",
            "callData",
            "callGasLimit",
            "verificationGasLimit",
            "preVerificationGas",
            "maxFeePerGas",
            "maxPriorityFeePerGas",
            "paymasterAndData",
            "signature",
        ]
        assert data["callGasLimit"] == 5

    def test_to_tuple_and_rpc(self):
        op = UserOperation(sender=MOCK_SMART_ACCOUNT, nonce=2**200, init_code="0x01")

        assert op.to_tuple()[:3] == (MOCK_SMART_ACCOUNT, 2**200, b"\x01")
        rpc = op.to_rpc()
        assert rpc["nonce"] == hex(2**200)
        assert rpc["initCode"] == "0x01"
        assert rpc["maxFeePerGas"] == "0x0"

    def test_canonical_json_keeps_big_integers(self):
        op = UserOperation(sender=MOCK_SMART_ACCOUNT, nonce=2**255)
        assert json.loads(op.to_canonical_json())["nonce"] == 2**255


class TestRequestModels:
    """Test suite for swap request models."""

    def test_swap_request_from_camel_case(self):
        request = CreateSwapRequestInput.model_validate(
            {
                "orderId": 3,
                "smartAccount": MOCK_SMART_ACCOUNT,
                "dex": "uniswapV3",
                "swapInput": {
                    "tokenIn": MOCK_TOKEN_ADDRESS,
                    "tokenOut": MOCK_WETH_ADDRESS,
                    "fee": 500,
                    "deadline": 1,
                    "amountIn": 10,
                    "amountOutMinimum": 0,
                },
                "gasless": True,
            }
        )

        assert request.order_id == 3
        assert request.swap_input.sqrt_price_limit_x96 == 0
        assert request.swap_input.recipient is None
        assert request.init_smart_account_input is None

    def test_unknown_dex_name_is_kept(self):
        """DEX names are resolved by the provider, not by the model."""
        request = create_swap_request_input(dex="sushiSwapV3")
        assert request.dex == "sushiSwapV3"

    def test_swap_input_requires_amounts(self):
        with pytest.raises(ValidationError):
            SinglePathSwapInput(token_in=MOCK_TOKEN_ADDRESS, token_out=MOCK_WETH_ADDRESS, fee=500)

    def test_get_dex(self):
        dex = DEX_CHAINS[1]

        assert dex.get_dex("uniswapV3") is dex.uniswap_v3
        assert dex.get_dex("pancakeSwapV3") is None
        assert Dex().get_dex("uniswapV3") is None


class TestProviderConfig:
    """Test suite for ProviderConfig and environment loading."""

    def test_defaults(self):
        config = ProviderConfig()

        assert config.factory is None
        assert config.signature_layout is SignatureLayout.SERVER_PREFIXED
        assert config.max_fee_per_gas == 30_000_000_000

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SMART_ACCOUNT_FACTORY", MOCK_FACTORY_ADDRESS.lower())
        monkeypatch.setenv("SMART_ACCOUNT_WETH", "")
        monkeypatch.delenv("SMART_ACCOUNT_ENTRYPOINT", raising=False)

        config = ProviderConfig.from_env(max_fee_per_gas=7)

        assert config.factory == MOCK_FACTORY_ADDRESS
        assert config.weth is None
        assert config.entrypoint is None
        assert config.max_fee_per_gas == 7

    def test_overrides_beat_environment(self, monkeypatch):
        monkeypatch.setenv("SMART_ACCOUNT_FACTORY", MOCK_FACTORY_ADDRESS)

        config = ProviderConfig.from_env(factory=MOCK_SMART_ACCOUNT)

        assert config.factory == MOCK_SMART_ACCOUNT

    def test_invalid_address(self):
        with pytest.raises(ValidationError):
            ProviderConfig(factory="0xnope")

    def test_validate_assignment(self):
        config = ProviderConfig()
        with pytest.raises(ValidationError):
            config.max_fee_per_gas = -1

    def test_layout_from_string(self):
        assert ProviderConfig(signature_layout="client").signature_layout is SignatureLayout.CLIENT

    def test_rpc_url_from_env(self, monkeypatch):
        monkeypatch.setenv("SMART_ACCOUNT_RPC_URL", "http://node:8545")
        assert get_rpc_url_from_env() == "http://node:8545"

    def test_chain_tables(self):
        sepolia = SMART_ACCOUNT_V1_CHAINS[11155111]
        assert sepolia.smart_account_factory_v1 == MOCK_FACTORY_ADDRESS
        assert set(DEX_CHAINS) == {1, 11155111, 137, 80001}
        assert all(dex.weth for dex in DEX_CHAINS.values())
