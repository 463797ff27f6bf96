from .bases import SwapRequestProvider
from .evm import (
    SmartAccountV1Provider,
    ProviderConfig,
    UserOperation,
    CreateSwapRequestInput,
    CreateSwapRequestOutput,
    SignatureLayout,
)

__all__ = [
    "SwapRequestProvider",
    "SmartAccountV1Provider",
    "ProviderConfig",
    "UserOperation",
    "CreateSwapRequestInput",
    "CreateSwapRequestOutput",
    "SignatureLayout",
]
