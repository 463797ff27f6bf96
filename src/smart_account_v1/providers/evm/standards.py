from dataclasses import dataclass, field
from typing import Dict, Any, List, Literal


# -----------------------------
# EIP-712 Domain
# -----------------------------

@dataclass
class EIP712Domain:
    """
    EIP-712 domain separator.
    Used to prevent signature replay across domains.
    """
    name: str
    version: str
    chainId: int
    verifyingContract: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chainId,
            "verifyingContract": self.verifyingContract,
        }


# -----------------------------
# Session key manager: Permit / Revoke
# -----------------------------

#: Struct fields shared by ``Permit`` and ``Revoke``.
SESSION_KEY_STRUCT_FIELDS: List[Dict[str, str]] = [
    {"name": "owner", "type": "address"},
    {"name": "salt", "type": "uint256"},
    {"name": "sessionKey", "type": "address"},
    {"name": "nonce", "type": "uint256"},
]


@dataclass
class SessionKeyMessage:
    """
    Message payload of a session-key ``Permit`` or ``Revoke``.

    Attributes:
        owner: Smart account owner signing the request.
        salt: Factory salt identifying the owner's smart account.
        sessionKey: Address of the session key being granted or revoked.
        nonce: Current replay nonce of ``owner`` on the manager contract.
    """
    owner: str
    salt: int
    sessionKey: str
    nonce: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "salt": self.salt,
            "sessionKey": self.sessionKey,
            "nonce": self.nonce,
        }


@dataclass
class SessionKeyTypedData:
    """
    Container for session-key typed data usable with EIP-712 signing routines.

    ``to_dict()`` produces the ``{types, primaryType, domain, message}``
    layout accepted by ``eth_account`` and by wallet ``eth_signTypedData_v4``.
    The ``EIP712Domain`` entry is included so the dict is self-describing.

    Attributes:
        domain: EIP712Domain of the session key manager.
        message: SessionKeyMessage carrying the payload.
        primary_type: ``"Permit"`` to authorize, ``"Revoke"`` to revoke.
    """
    domain: EIP712Domain
    message: SessionKeyMessage

    primary_type: Literal["Permit", "Revoke"] = "Permit"

    types: Dict[str, List[Dict[str, str]]] = field(init=False)

    def __post_init__(self):
        self.types = {
            "EIP712Domain": [
                {"name": "name", "type": "string"},
                {"name": "version", "type": "string"},
                {"name": "chainId", "type": "uint256"},
                {"name": "verifyingContract", "type": "address"},
            ],
            self.primary_type: [dict(item) for item in SESSION_KEY_STRUCT_FIELDS],
        }

    def to_dict(self) -> Dict[str, Any]:
        """Return a dictionary compatible with EIP-712 structured signing."""
        return {
            "types": self.types,
            "primaryType": self.primary_type,
            "domain": self.domain.to_dict(),
            "message": self.message.to_dict(),
        }
