"""
Base Schema Models for the SmartAccountV1 SDK

This module defines the base model every schema inherits from together with
the reusable field types for EVM values (addresses, hex byte strings and
bounded unsigned integers).

Core Classes:
    - CanonicalModel: Pydantic base model with camelCase aliases and
      canonical JSON serialization

Field Types:
    - Address: EVM address normalised to EIP-55 checksum form
    - HexData: ``0x``-prefixed lowercase hex byte string (accepts bytes)
    - Uint256 / Uint160 / Uint24: bounded non-negative integers

Dependencies:
    - pydantic: For data validation and serialization
    - web3: For checksum address normalisation
"""

import json
from typing import Annotated, Any, Dict, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel
from web3 import Web3

#: Largest value representable by a Solidity ``uint256``.
UINT256_MAX: int = 2**256 - 1

#: Largest value representable by a Solidity ``uint160``.
UINT160_MAX: int = 2**160 - 1

#: Largest value representable by a Solidity ``uint24`` (Uniswap fee tier).
UINT24_MAX: int = 2**24 - 1

#: The zero address, used as a neutral swap recipient when unwrapping WETH.
ZERO_ADDRESS: str = "0x0000000000000000000000000000000000000000"


def to_checksum(address: str) -> str:
    """
    Normalise an EVM address to EIP-55 checksum form.

    Args:
        address: 0x-prefixed 40-hex-char address in any letter case.

    Returns:
        The checksummed address.

    Raises:
        ValueError: If ``address`` is not a 20-byte hex address.
    """
    if not isinstance(address, str) or not address.startswith("0x") or len(address) != 42:
        raise ValueError(f"Invalid EVM address: {address!r}")
    try:
        return Web3.to_checksum_address(address)
    except ValueError as exc:
        raise ValueError(f"Invalid EVM address: {address!r}") from exc


def hex_to_bytes(value: Union[str, bytes, bytearray]) -> bytes:
    """Decode a ``0x``-prefixed (or bare) hex string; bytes pass through."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise ValueError(f"Expected hex string or bytes, got {type(value).__name__}")
    body = value[2:] if value[:2] in ("0x", "0X") else value
    if len(body) % 2:
        raise ValueError(f"Hex string has odd length: {value!r}")
    try:
        return bytes.fromhex(body)
    except ValueError as exc:
        raise ValueError(f"Invalid hex string: {value!r}") from exc


def to_hex(value: Union[str, bytes, bytearray]) -> str:
    """Return ``value`` as a ``0x``-prefixed lowercase hex string."""
    return "0x" + hex_to_bytes(value).hex()


Address = Annotated[str, BeforeValidator(to_checksum)]
HexData = Annotated[str, BeforeValidator(to_hex)]
Uint256 = Annotated[int, Field(ge=0, le=UINT256_MAX)]
Uint160 = Annotated[int, Field(ge=0, le=UINT160_MAX)]
Uint24 = Annotated[int, Field(ge=0, le=UINT24_MAX)]


class CanonicalModel(BaseModel):
    """
    Pydantic base model with camelCase wire names and canonical JSON output.

    Fields are declared in snake_case and serialised under camelCase aliases
    (``init_code`` -> ``initCode``) so dumps match the JSON shape used by
    bundlers and the JavaScript SDK. Either name is accepted on input.

    Example:
        class MyModel(CanonicalModel):
            call_data: str

        MyModel(callData="0x").to_dict()  # {"callData": "0x"}
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    def to_canonical_json(self) -> str:
        """
        Convert the model to a deterministic JSON string.

        Keys are sorted, separators are compact and integers stay integers
        (256-bit values are emitted as JSON numbers, not floats).

        Returns:
            str: Canonical JSON string.
        """
        data = self.model_dump(mode="json", by_alias=True)
        return json.dumps(
            data,
            separators=(",", ":"),
            sort_keys=True,
            ensure_ascii=False
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the model to a dictionary keyed by camelCase aliases.

        Returns:
            Dict[str, Any]: Dictionary with all model fields.
        """
        return self.model_dump(by_alias=True)
