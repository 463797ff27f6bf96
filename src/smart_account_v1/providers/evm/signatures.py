"""
Signature Aggregation and Local Signing Utilities

Packs the individual ECDSA signatures produced for a user operation into the
single ``signature`` byte string the SmartAccountV1 validator expects, and
provides in-process ``eth_account`` signing helpers for tests, scripts and
back-office tooling. No RPC calls are made.

Signature layouts
-----------------
Deployed validators disagree on the byte layout, so the layout is an
explicit policy (``SignatureLayout``):

    CLIENT            owner(65) ++ session(65) ++ uint256_be(nonce)
    SERVER_PREFIXED   server(65) ++ owner(65) ++ session(65) ++ uint256_be(nonce)

In the server-prefixed layout the client produces the CLIENT bytes and the
server/bundler prefixes its own signature (``prefix_server_signature``).

Exported helpers
----------------
aggregate_client_signatures
    Pure packing of owner signature, session signature and session nonce.

prefix_server_signature / aggregate_signatures
    Build the final operation signature for a given layout.

sign_user_op_hash
    EIP-191 personal signature over a 32-byte ``userOpHash``.

sign_typed_data_request / recover_typed_data_signer
    Sign or recover an EIP-712 session-key ``Permit`` / ``Revoke`` request.
"""

from enum import Enum
from typing import Any, Dict, Optional, Union

from eth_account import Account
from eth_account.messages import encode_defunct, encode_typed_data

from ...schemas.bases import UINT256_MAX, hex_to_bytes, to_hex

BytesLike = Union[str, bytes, bytearray]

#: Length of a packed ``r || s || v`` ECDSA signature.
ECDSA_SIGNATURE_LENGTH: int = 65

#: Length of the big-endian session nonce suffix.
SESSION_NONCE_LENGTH: int = 32


class SignatureLayout(str, Enum):
    """Byte layout of the aggregated user operation signature."""

    CLIENT = "client"
    SERVER_PREFIXED = "server_prefixed"

    @property
    def ecdsa_parts(self) -> int:
        """Number of 65-byte ECDSA signatures in the layout."""
        return 3 if self is SignatureLayout.SERVER_PREFIXED else 2

    @property
    def length(self) -> int:
        """Total byte length of a signature in this layout."""
        return self.ecdsa_parts * ECDSA_SIGNATURE_LENGTH + SESSION_NONCE_LENGTH


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def encode_session_nonce(nonce: int) -> bytes:
    """Encode ``nonce`` as a fixed-width 32-byte big-endian integer."""
    if not 0 <= nonce <= UINT256_MAX:
        raise ValueError(f"Session nonce out of uint256 range: {nonce}")
    return nonce.to_bytes(SESSION_NONCE_LENGTH, "big")


def aggregate_client_signatures(
    owner_signature: BytesLike,
    session_signature: BytesLike,
    session_nonce: int,
) -> bytes:
    """
    Concatenate ``owner ++ session ++ uint256_be(session_nonce)``.

    No hashing and no length validation is performed: the output length is
    always ``len(owner) + len(session) + 32``.

    Args:
        owner_signature: Owner's signature over the user operation hash.
        session_signature: Session key's signature over the same hash.
        session_nonce: Session nonce the validator checks.

    Returns:
        bytes: The client part of the operation signature.

    Example::

        client_sig = aggregate_client_signatures(owner_sig, session_sig, 0)
        signed_op = op.with_signature(client_sig)
    """
    return (
        hex_to_bytes(owner_signature)
        + hex_to_bytes(session_signature)
        + encode_session_nonce(session_nonce)
    )


def prefix_server_signature(server_signature: BytesLike, client_signature: BytesLike) -> bytes:
    """Prepend the server/authorizer signature to the client signature bytes."""
    return hex_to_bytes(server_signature) + hex_to_bytes(client_signature)


def aggregate_signatures(
    layout: SignatureLayout,
    *,
    owner_signature: BytesLike,
    session_signature: BytesLike,
    session_nonce: int,
    server_signature: Optional[BytesLike] = None,
) -> bytes:
    """
    Build the final operation signature for ``layout``.

    Raises:
        ValueError: If ``server_signature`` is missing for
            ``SERVER_PREFIXED`` or supplied for ``CLIENT``.
    """
    layout = SignatureLayout(layout)
    client = aggregate_client_signatures(owner_signature, session_signature, session_nonce)
    if layout is SignatureLayout.CLIENT:
        if server_signature is not None:
            raise ValueError("CLIENT signature layout does not carry a server signature")
        return client
    if server_signature is None:
        raise ValueError("SERVER_PREFIXED signature layout requires a server signature")
    return prefix_server_signature(server_signature, client)


# ---------------------------------------------------------------------------
# Local signing
# ---------------------------------------------------------------------------

def sign_user_op_hash(private_key: str, user_op_hash: BytesLike) -> str:
    """
    Sign a ``userOpHash`` as an EIP-191 personal message over its raw bytes.

    Returns:
        0x-prefixed 65-byte ``r || s || v`` signature.
    """
    message = encode_defunct(primitive=hex_to_bytes(user_op_hash))
    signed = Account.sign_message(message, private_key=private_key)
    return to_hex(signed.signature)


def sign_typed_data_request(private_key: str, request: Dict[str, Any]) -> str:
    """
    Sign an EIP-712 request dict (``{types, primaryType, domain, message}``).

    Returns:
        0x-prefixed 65-byte ``r || s || v`` signature.
    """
    signed = Account.sign_typed_data(private_key, full_message=request)
    return to_hex(signed.signature)


def recover_typed_data_signer(request: Dict[str, Any], signature: BytesLike) -> str:
    """Recover the checksummed address that signed an EIP-712 request dict."""
    signable = encode_typed_data(full_message=request)
    return Account.recover_message(signable, signature=hex_to_bytes(signature))
