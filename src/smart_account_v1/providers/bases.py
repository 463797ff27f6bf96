"""
Abstract Base Class for Swap Request Providers

Defines the interface a smart-account request builder implements: building
an unsigned user operation for a swap, and preparing session-key
authorization requests for the owner to sign.

Core Classes:
    - SwapRequestProvider: stateless request builder bound to one chain

Concrete providers (``SmartAccountV1Provider``) resolve their contract
addresses per chain and read chain state through an async RPC client.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Union


class SwapRequestProvider(ABC):
    """
    Abstract Base Class for user operation request builders.

    Implementations never sign or submit anything: they return unsigned
    operations and typed-data requests that the caller signs externally.

    Key Responsibilities:
    1. create_swap_request: assemble an unsigned operation and its hash
    2. create_session_key_request: mint a session key and its Permit request
    3. revoke_session_key_request: build the mirror Revoke request
    """

    @abstractmethod
    async def create_swap_request(self, swap_request: Any) -> Any:
        """
        Build an unsigned user operation executing a swap.

        Args:
            swap_request: Swap request model (or its dict form)

        Returns:
            The sender address, the operation hash and the unsigned operation
        """
        pass

    @abstractmethod
    async def create_session_key_request(self, owner: str, salt: int) -> Any:
        """
        Generate a session key and the EIP-712 request authorizing it.

        Args:
            owner: Smart account owner who will sign the request
            salt: Factory salt of the owner's smart account

        Returns:
            The session key material and the typed-data request
        """
        pass

    @abstractmethod
    async def revoke_session_key_request(
        self,
        owner: str,
        salt: int,
        session_key: Union[str, bytes],
    ) -> Dict[str, Any]:
        """
        Build the EIP-712 request revoking a session key.

        Args:
            owner: Smart account owner who will sign the request
            salt: Factory salt of the owner's smart account
            session_key: Session key address or public key

        Returns:
            The typed-data request
        """
        pass
