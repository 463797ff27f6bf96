from .exceptions import (
    ProviderError,
    ConfigurationError,
    InvalidRequestError,
    NonceRangeError,
    SmartAccountExistsError,
    SessionKeyAuthorizationError,
    BlockchainInteractionError,
    SimulationError,
    GasEstimationError,
    RevertDecodingError,
    JsonRpcError,
)

__all__ = [
    "ProviderError",
    "ConfigurationError",
    "InvalidRequestError",
    "NonceRangeError",
    "SmartAccountExistsError",
    "SessionKeyAuthorizationError",
    "BlockchainInteractionError",
    "SimulationError",
    "GasEstimationError",
    "RevertDecodingError",
    "JsonRpcError",
]
