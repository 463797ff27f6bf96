"""
Session Key Material and Authorization Requests

A session key is an ephemeral secp256k1 key pair whose address the owner
authorizes on the session key manager by signing an EIP-712 ``Permit``
(and later de-authorizes with a mirror ``Revoke``). Keys are generated with
``eth_account`` and public keys handled with ``eth_keys``; the provider never
retains the private key.
"""

from typing import Union

from eth_account import Account
from eth_keys import keys
from eth_keys.exceptions import ValidationError

from .constants import SESSION_MANAGER_DOMAIN_NAME, SESSION_MANAGER_DOMAIN_VERSION
from .schemas import SessionKey
from .standards import EIP712Domain, SessionKeyMessage, SessionKeyTypedData
from ...schemas.bases import hex_to_bytes, to_checksum, to_hex


def generate_session_key() -> SessionKey:
    """
    Generate a fresh secp256k1 session key.

    Returns:
        SessionKey: private key, 64-byte uncompressed public key and the
        address derived from ``keccak256(public_key)[-20:]``.
    """
    account = Account.create()
    public_key = keys.PrivateKey(bytes(account.key)).public_key
    return SessionKey(
        private_key=to_hex(bytes(account.key)),
        public_key=to_hex(public_key.to_bytes()),
        address=account.address,
    )


def load_public_key(public_key: Union[str, bytes]) -> keys.PublicKey:
    """
    Parse a secp256k1 public key.

    Accepts the 64-byte raw form, the 65-byte ``0x04``-prefixed uncompressed
    form and the 33-byte compressed form, as bytes or hex.

    Raises:
        ValueError: If the length or prefix is not a public key encoding.
    """
    raw = hex_to_bytes(public_key)
    if len(raw) == 65:
        if raw[0] != 0x04:
            raise ValueError("65-byte public key must start with 0x04")
        raw = raw[1:]
    try:
        if len(raw) == 64:
            return keys.PublicKey(raw)
        if len(raw) == 33:
            return keys.PublicKey.from_compressed_bytes(raw)
    except (ValidationError, ValueError) as exc:
        raise ValueError(f"Invalid secp256k1 public key: {to_hex(raw)}") from exc
    raise ValueError(f"Unsupported public key length: {len(raw)} bytes")


def public_key_to_address(public_key: Union[str, bytes]) -> str:
    """Checksummed address of a public key (low 160 bits of its keccak256)."""
    return load_public_key(public_key).to_checksum_address()


def resolve_session_key_address(session_key: Union[str, bytes]) -> str:
    """Accept a session key address or public key and return its address."""
    if isinstance(session_key, str) and len(session_key) == 42 and session_key[:2] in ("0x", "0X"):
        return to_checksum(session_key)
    return public_key_to_address(session_key)


def build_session_key_typed_data(
    *,
    primary_type: str,
    chain_id: int,
    manager: str,
    owner: str,
    salt: int,
    session_key: str,
    nonce: int,
) -> SessionKeyTypedData:
    """
    Build the ``Permit`` or ``Revoke`` typed data for the session key manager.

    The domain is ``{name: SESSION_MANAGER_DOMAIN_NAME, version: "1",
    chainId, verifyingContract: manager}``.
    """
    domain = EIP712Domain(
        name=SESSION_MANAGER_DOMAIN_NAME,
        version=SESSION_MANAGER_DOMAIN_VERSION,
        chainId=chain_id,
        verifyingContract=manager,
    )
    message = SessionKeyMessage(owner=owner, salt=salt, sessionKey=session_key, nonce=nonce)
    return SessionKeyTypedData(domain=domain, message=message, primary_type=primary_type)
