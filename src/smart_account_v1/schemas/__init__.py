from .bases import (
    CanonicalModel,
    Address,
    HexData,
    Uint256,
    Uint160,
    Uint24,
    UINT256_MAX,
    UINT160_MAX,
    UINT24_MAX,
    ZERO_ADDRESS,
    to_checksum,
    to_hex,
    hex_to_bytes,
)

__all__ = [
    "CanonicalModel",
    "Address",
    "HexData",
    "Uint256",
    "Uint160",
    "Uint24",
    "UINT256_MAX",
    "UINT160_MAX",
    "UINT24_MAX",
    "ZERO_ADDRESS",
    "to_checksum",
    "to_hex",
    "hex_to_bytes",
]
