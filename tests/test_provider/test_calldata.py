"""
Calldata Encoding Test Suite

Tests for locally encoded router, wallet and factory calls:
- Well-known function selectors
- Struct argument order of exactInputSingle
- executeBatch array length checks

Usage:
    pytest test_calldata.py -v
"""

import pytest

from test_mocks import (
    MOCK_DEADLINE,
    MOCK_OWNER_ADDRESS,
    MOCK_RECIPIENT,
    MOCK_SALT,
    MOCK_SWAP_ROUTER,
    MOCK_TOKEN_ADDRESS,
    MOCK_TOKEN_B_ADDRESS,
)

from smart_account_v1.providers.evm.calldata import (
    APPROVE,
    CREATE_ACCOUNT,
    EXACT_INPUT_SINGLE,
    EXECUTE_BATCH,
    MULTICALL,
    UNWRAP_WETH9,
    decode_quote_exact_input_single_result,
    encode_approve,
    encode_create_account,
    encode_exact_input_single,
    encode_execute_batch,
    encode_multicall,
    encode_unwrap_weth9,
)


class TestSelectors:
    """Well-known selectors of the ERC-20 and SwapRouter functions."""

    @pytest.mark.parametrize(
        "spec,selector",
        [
            (APPROVE, "095ea7b3"),
            (MULTICALL, "ac9650d8"),
            (EXACT_INPUT_SINGLE, "414bf389"),
            (UNWRAP_WETH9, "49404b7c"),
        ],
    )
    def test_selector(self, spec, selector):
        assert spec.selector.hex() == selector

    def test_signature_text(self):
        assert EXECUTE_BATCH.signature == "executeBatch(address[],uint256[],bytes[])"
        assert CREATE_ACCOUNT.signature == "createAccount(address,uint256)"


class TestEncoding:
    """Test suite for individual call encoders."""

    def test_approve(self):
        data = encode_approve(MOCK_SWAP_ROUTER, 10_000)

        assert data[:4].hex() == "095ea7b3"
        spender, amount = APPROVE.decode(data)
        assert spender.lower() == MOCK_SWAP_ROUTER.lower()
        assert amount == 10_000

    def test_exact_input_single_field_order(self):
        """tokenIn, tokenOut, fee, recipient, deadline, amountIn, amountOutMinimum, sqrtPriceLimitX96."""
        data = encode_exact_input_single(
            token_in=MOCK_TOKEN_ADDRESS,
            token_out=MOCK_TOKEN_B_ADDRESS,
            fee=500,
            recipient=MOCK_RECIPIENT,
            deadline=MOCK_DEADLINE,
            amount_in=1_000,
            amount_out_minimum=900,
            sqrt_price_limit_x96=2**96,
        )

        (params,) = EXACT_INPUT_SINGLE.decode(data)
        token_in, token_out, fee, recipient, deadline, amount_in, amount_out_minimum, limit = params
        assert token_in.lower() == MOCK_TOKEN_ADDRESS.lower()
        assert token_out.lower() == MOCK_TOKEN_B_ADDRESS.lower()
        assert fee == 500
        assert recipient.lower() == MOCK_RECIPIENT.lower()
        assert (deadline, amount_in, amount_out_minimum, limit) == (MOCK_DEADLINE, 1_000, 900, 2**96)

    def test_unwrap_and_multicall(self):
        unwrap = encode_unwrap_weth9(900, MOCK_RECIPIENT)
        data = encode_multicall([b"\x01\x02", unwrap])

        (calls,) = MULTICALL.decode(data)
        assert list(calls) == [b"\x01\x02", unwrap]
        amount, recipient = UNWRAP_WETH9.decode(unwrap)
        assert amount == 900
        assert recipient.lower() == MOCK_RECIPIENT.lower()

    def test_create_account(self):
        owner, salt = CREATE_ACCOUNT.decode(encode_create_account(MOCK_OWNER_ADDRESS, MOCK_SALT))
        assert owner.lower() == MOCK_OWNER_ADDRESS.lower()
        assert salt == MOCK_SALT

    def test_execute_batch_length_mismatch(self):
        with pytest.raises(ValueError, match="equal length"):
            encode_execute_batch([MOCK_SWAP_ROUTER], [0, 0], [b""])

    def test_decode_with_wrong_selector(self):
        with pytest.raises(ValueError, match="does not match"):
            APPROVE.decode(encode_unwrap_weth9(1, MOCK_RECIPIENT))

    def test_decode_quote_result(self):
        from eth_abi import encode

        data = encode(["uint256", "uint160", "uint32", "uint256"], [995, 2**96, 1, 80_000])
        assert decode_quote_exact_input_single_result(data) == [995, 2**96, 1, 80_000]
