"""
Uniswap V3 Price and Quote Helpers

``sqrtPriceX96`` is ``sqrt(token1/token0) * 2**96`` in raw token units,
with token0 the lower-addressed token of the pair. These helpers convert
between that representation and a human price of token0 in token1 units
adjusted for both tokens' ``decimals()``, and run QuoterV2 single-hop
quotes through a ``CallSimulator``.
"""

from decimal import Decimal, localcontext
from typing import Sequence, Tuple, Union

from web3 import AsyncWeb3

from .CONTRACT_ABI import get_decimals_abi
from .calldata import decode_quote_exact_input_single_result, encode_quote_exact_input_single
from .reverts import decode_revert
from .schemas import QuoteExactInputSingleResult, SinglePathSwapInput
from .simulators import CallSimulator
from ...engine.exceptions import SimulationError

Q96: int = 2**96

_PRECISION: int = 80


def sort_tokens(tokens: Sequence[str]) -> Tuple[str, str]:
    """Return ``(token0, token1)`` ordered by lowercase address."""
    if len(tokens) != 2:
        raise ValueError(f"Expected a token pair, got {len(tokens)} tokens")
    first, second = tokens
    if first.lower() < second.lower():
        return first, second
    return second, first


async def get_pair_decimals(w3: AsyncWeb3, tokens: Sequence[str]) -> Tuple[int, int]:
    """Read ``decimals()`` of ``(token0, token1)``."""
    token0, token1 = sort_tokens(tokens)
    decimals0 = await w3.eth.contract(address=token0, abi=get_decimals_abi()).functions.decimals().call()
    decimals1 = await w3.eth.contract(address=token1, abi=get_decimals_abi()).functions.decimals().call()
    return decimals0, decimals1


def sqrt_x96_to_price(sqrt_price_x96: Union[int, Decimal], decimals0: int, decimals1: int) -> Decimal:
    """
    Convert ``sqrtPriceX96`` to a decimals-adjusted price.

    Returns:
        Decimal: ``10**decimals1 / ((sqrtPriceX96 / 2**96)**2 * 10**decimals0)``
    """
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        sqrt_price = Decimal(sqrt_price_x96) / Q96
        raw_price = sqrt_price * sqrt_price
        if raw_price == 0:
            raise ValueError("sqrtPriceX96 must be positive")
        return Decimal(10) ** decimals1 / (raw_price * Decimal(10) ** decimals0)


def price_to_sqrt_x96(price: Union[int, float, str, Decimal], decimals0: int, decimals1: int) -> int:
    """Inverse of ``sqrt_x96_to_price``, floored to an integer ``uint160``."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        price = Decimal(str(price))
        if price <= 0:
            raise ValueError(f"Price must be positive, got {price}")
        normalized = Decimal(10) ** decimals1 / (price * Decimal(10) ** decimals0)
        return int(normalized.sqrt() * Q96)


async def convert_sqrt_x96_to_price(w3: AsyncWeb3, tokens: Sequence[str], sqrt_price_x96: int) -> Decimal:
    """
    Price of a pool given its ``sqrtPriceX96``, reading both tokens' decimals.

    Example::

        price = await convert_sqrt_x96_to_price(
            w3,
            [USDC, WETH],
            2018382873588440326581633304624437,
        )  # ~1540.820552 USDC per WETH
    """
    decimals0, decimals1 = await get_pair_decimals(w3, tokens)
    return sqrt_x96_to_price(sqrt_price_x96, decimals0, decimals1)


async def convert_price_to_sqrt_x96(
    w3: AsyncWeb3,
    tokens: Sequence[str],
    price: Union[int, float, str, Decimal],
) -> int:
    """``sqrtPriceX96`` for a decimals-adjusted ``price``, reading both tokens' decimals."""
    decimals0, decimals1 = await get_pair_decimals(w3, tokens)
    return price_to_sqrt_x96(price, decimals0, decimals1)


async def quote_exact_input_single(
    simulator: CallSimulator,
    quoter: str,
    swap_input: SinglePathSwapInput,
) -> QuoteExactInputSingleResult:
    """
    Quote a single-hop exact-input swap with QuoterV2.

    Raises:
        SimulationError: If the quoter reverted (e.g. pool missing).
        RevertDecodingError: If the revert payload cannot be decoded.
    """
    call_data = encode_quote_exact_input_single(
        token_in=swap_input.token_in,
        token_out=swap_input.token_out,
        amount_in=swap_input.amount_in,
        fee=swap_input.fee,
        sqrt_price_limit_x96=swap_input.sqrt_price_limit_x96,
    )
    outcome = await simulator.call(quoter, call_data)
    if not outcome.success:
        decoded = decode_revert(outcome.data)
        raise SimulationError(
            f"quoteExactInputSingle reverted: {decoded.describe()}",
            error_name=decoded.name,
            error_args=decoded.args,
        )

    amount_out, sqrt_price_x96_after, ticks_crossed, gas_estimate = decode_quote_exact_input_single_result(
        outcome.data
    )
    return QuoteExactInputSingleResult(
        amount_out=amount_out,
        sqrt_price_x96_after=sqrt_price_x96_after,
        initialized_ticks_crossed=ticks_crossed,
        gas_estimate=gas_estimate,
    )
