"""
SmartAccountV1 / ERC-4337 / Uniswap V3 Smart Contract ABI Module

This module provides simplified ABI definitions for the read-only contract
calls the provider makes through ``web3.eth.contract``: EntryPoint v0.6
nonce and hash queries, the SmartAccountV1 factory, the session key
manager, the Uniswap V3 factory and ERC-20 metadata.

State-changing calls are never sent by the provider; their calldata is
encoded locally in ``calldata.py``.

Usage:
    from CONTRACT_ABI import (
        get_entrypoint_abi,
        get_smart_account_factory_abi,
        get_uniswap_v3_factory_abi,
    )

    entrypoint = web3.eth.contract(address=ENTRYPOINT_ADDRESS, abi=get_entrypoint_abi())
    nonce = await entrypoint.functions.getNonce(sender, key).call()
"""

from typing import Dict, Any, List

#: ABI components of the EntryPoint v0.6 ``UserOperation`` struct.
USER_OPERATION_COMPONENTS: List[Dict[str, str]] = [
    {"name": "sender", "type": "address"},
    {"name": "nonce", "type": "uint256"},
    {"name": "initCode", "type": "bytes"},
    {"name": "callData", "type": "bytes"},
    {"name": "callGasLimit", "type": "uint256"},
    {"name": "verificationGasLimit", "type": "uint256"},
    {"name": "preVerificationGas", "type": "uint256"},
    {"name": "maxFeePerGas", "type": "uint256"},
    {"name": "maxPriorityFeePerGas", "type": "uint256"},
    {"name": "paymasterAndData", "type": "bytes"},
    {"name": "signature", "type": "bytes"},
]

#: Canonical ABI type string of the ``UserOperation`` tuple.
USER_OPERATION_TUPLE_TYPE: str = (
    "(" + ",".join(component["type"] for component in USER_OPERATION_COMPONENTS) + ")"
)


def get_entrypoint_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for EntryPoint v0.6 ``getNonce`` and ``getUserOpHash``.

    Returns:
        List[Dict[str, Any]]: ABI for the two view functions.

    Example:
        entrypoint = web3.eth.contract(address=ENTRYPOINT_ADDRESS, abi=get_entrypoint_abi())
        user_op_hash = await entrypoint.functions.getUserOpHash(op.to_tuple()).call()
    """
    return [
        {
            "name": "getNonce",
            "type": "function",
            "stateMutability": "view",
            "inputs": [
                {"name": "sender", "type": "address"},
                {"name": "key", "type": "uint192"},
            ],
            "outputs": [{"name": "nonce", "type": "uint256"}],
        },
        {
            "name": "getUserOpHash",
            "type": "function",
            "stateMutability": "view",
            "inputs": [
                {
                    "name": "userOp",
                    "type": "tuple",
                    "components": USER_OPERATION_COMPONENTS,
                }
            ],
            "outputs": [{"name": "", "type": "bytes32"}],
        },
    ]


def get_smart_account_factory_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for SmartAccountV1 factory ``getAddress(owner, salt)``.

    Returns:
        List[Dict[str, Any]]: ABI for the counterfactual address query.
    """
    return [
        {
            "name": "getAddress",
            "type": "function",
            "stateMutability": "view",
            "inputs": [
                {"name": "owner", "type": "address"},
                {"name": "salt", "type": "uint256"},
            ],
            "outputs": [{"name": "", "type": "address"}],
        }
    ]


def get_session_key_manager_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for session key manager ``nonces(owner)`` and ``isAuthorized``.

    The same surface is exposed by the authorizer contract deployed on
    chains that use it instead of a dedicated manager.

    Returns:
        List[Dict[str, Any]]: ABI for the replay nonce and authorization queries.
    """
    return [
        {
            "name": "nonces",
            "type": "function",
            "stateMutability": "view",
            "inputs": [{"name": "owner", "type": "address"}],
            "outputs": [{"name": "", "type": "uint256"}],
        },
        {
            "name": "isAuthorized",
            "type": "function",
            "stateMutability": "view",
            "inputs": [
                {"name": "owner", "type": "address"},
                {"name": "sessionKey", "type": "address"},
            ],
            "outputs": [{"name": "", "type": "bool"}],
        },
    ]


def get_uniswap_v3_factory_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for Uniswap V3 factory ``getPool(tokenA, tokenB, fee)``.

    Returns:
        List[Dict[str, Any]]: ABI for the pool address lookup.
    """
    return [
        {
            "name": "getPool",
            "type": "function",
            "stateMutability": "view",
            "inputs": [
                {"name": "tokenA", "type": "address"},
                {"name": "tokenB", "type": "address"},
                {"name": "fee", "type": "uint24"},
            ],
            "outputs": [{"name": "pool", "type": "address"}],
        }
    ]


def get_decimals_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for ERC20 ``decimals()``.

    Returns:
        List[Dict[str, Any]]: ABI for the ``decimals`` view function.
    """
    return [
        {
            "name": "decimals",
            "type": "function",
            "stateMutability": "view",
            "inputs": [],
            "outputs": [{"name": "", "type": "uint8"}],
        }
    ]
