"""
Pool-Partitioned Nonce Derivation

EntryPoint v0.6 nonces are ``(key: uint192, sequence: uint64)``. The
SmartAccountV1 provider partitions the 192-bit key by liquidity pool and
swap direction so that independent swap streams never block each other:

    key = (pool << 32) | (direction << 31) | sequence_id

``direction`` is 1 when ``lower(token_in) < lower(token_out)``. The nonce
itself is read from ``EntryPoint.getNonce(sender, key)``.
"""

import logging
from typing import Tuple

from web3 import AsyncWeb3, Web3

from .CONTRACT_ABI import get_entrypoint_abi, get_uniswap_v3_factory_abi
from ...engine.exceptions import NonceRangeError
from ...schemas.bases import to_checksum

logger = logging.getLogger(__name__)

#: Exclusive upper bound of a caller-supplied sequence id (31 bits).
MAX_SEQUENCE_ID: int = 2**31

_DIRECTION_BIT: int = 1 << 31
_POOL_SHIFT: int = 32
_KEY_LIMIT: int = 2**192


def validate_sequence_id(sequence_id: int) -> None:
    """
    Reject sequence ids that do not fit in 31 bits.

    Raises:
        NonceRangeError: If ``sequence_id`` is negative or ``>= 2**31``.
    """
    if not isinstance(sequence_id, int) or isinstance(sequence_id, bool):
        raise NonceRangeError(f"Sequence id must be an integer, got {sequence_id!r}", sequence_id=sequence_id)
    if sequence_id < 0 or sequence_id >= MAX_SEQUENCE_ID:
        raise NonceRangeError(
            f"Sequence id {sequence_id} out of range: must satisfy 0 <= id < 2**31",
            sequence_id=sequence_id,
        )


def swap_direction(token_in: str, token_out: str) -> int:
    """Return 1 if ``lower(token_in) < lower(token_out)`` else 0."""
    return 1 if token_in.lower() < token_out.lower() else 0


def compute_nonce_key(pool: str, token_in: str, token_out: str, sequence_id: int) -> int:
    """
    Pack the 192-bit EntryPoint nonce key for a swap partition.

    Args:
        pool: Pool address returned by the DEX factory.
        token_in: Input token address.
        token_out: Output token address.
        sequence_id: Caller-chosen id inside the partition (< 2**31).

    Returns:
        int: ``(pool << 32) | (direction << 31) | sequence_id``.

    Raises:
        NonceRangeError: If ``sequence_id`` is out of range.
    """
    validate_sequence_id(sequence_id)
    pool_int = int(pool.lower(), 16)
    return (pool_int << _POOL_SHIFT) | (swap_direction(token_in, token_out) << 31) | sequence_id


def decode_nonce_key(key: int) -> Tuple[str, int, int]:
    """
    Split a 192-bit nonce key back into ``(pool, direction, sequence_id)``.

    Raises:
        ValueError: If ``key`` is negative or does not fit in 192 bits.
    """
    if key < 0 or key >= _KEY_LIMIT:
        raise ValueError(f"Nonce key {key} does not fit in 192 bits")
    sequence_id = key & (MAX_SEQUENCE_ID - 1)
    direction = 1 if key & _DIRECTION_BIT else 0
    pool = Web3.to_checksum_address("0x" + (key >> _POOL_SHIFT).to_bytes(20, "big").hex())
    return pool, direction, sequence_id


def decode_nonce(nonce: int) -> Tuple[str, int, int, int]:
    """
    Split a full 256-bit EntryPoint nonce into
    ``(pool, direction, sequence_id, entrypoint_sequence)``.

    Raises:
        ValueError: If ``nonce`` is negative or does not fit in 256 bits.
    """
    if nonce < 0 or nonce >= 2**256:
        raise ValueError(f"Nonce {nonce} does not fit in 256 bits")
    pool, direction, sequence_id = decode_nonce_key(nonce >> 64)
    return pool, direction, sequence_id, nonce & (2**64 - 1)


async def get_pool_address(w3: AsyncWeb3, dex_factory: str, token_in: str, token_out: str, fee: int) -> str:
    """Read ``UniswapV3Factory.getPool(token_in, token_out, fee)``. Addresses may be in any letter case."""
    factory = w3.eth.contract(address=to_checksum(dex_factory), abi=get_uniswap_v3_factory_abi())
    return await factory.functions.getPool(to_checksum(token_in), to_checksum(token_out), fee).call()


async def derive_nonce(
    w3: AsyncWeb3,
    entrypoint: str,
    smart_account: str,
    dex_factory: str,
    token_in: str,
    token_out: str,
    fee: int,
    sequence_id: int,
) -> int:
    """
    Derive the EntryPoint nonce of a swap operation.

    The sequence id is validated before any network access. Remote failures
    (pool lookup, ``getNonce``) propagate unchanged.

    Args:
        w3: Async web3 instance.
        entrypoint: EntryPoint address.
        smart_account: Sender of the operation.
        dex_factory: Uniswap-V3-shaped factory used for the pool lookup.
        token_in: Input token.
        token_out: Output token.
        fee: Pool fee tier.
        sequence_id: Caller-chosen id inside the partition.

    Returns:
        int: Current 256-bit nonce for the partition.

    Raises:
        NonceRangeError: If ``sequence_id`` is out of range.
    """
    validate_sequence_id(sequence_id)
    entrypoint = to_checksum(entrypoint)
    smart_account = to_checksum(smart_account)

    pool = await get_pool_address(w3, dex_factory, token_in, token_out, fee)
    key = compute_nonce_key(pool, token_in, token_out, sequence_id)

    entrypoint_contract = w3.eth.contract(address=entrypoint, abi=get_entrypoint_abi())
    nonce = await entrypoint_contract.functions.getNonce(smart_account, key).call()
    logger.debug("Derived nonce %s for %s (pool=%s, sequence_id=%s)", nonce, smart_account, pool, sequence_id)
    return nonce
