"""
Adapters for the ModelSignature verification authority.

- Base URL, authentication and request shapes
- Timeout and retry policy for every call
- Error mapping onto shared errors
- Typed response models
"""

from .client import ModelSignatureClient
from .models import (
    ApiPayload,
    BundleCheck,
    BundleStatus,
    JWTClaims,
    ModelInfo,
    ProviderInfo,
    ResponseBinding,
    VerificationResult,
)

__all__ = [
    "ApiPayload",
    "BundleCheck",
    "BundleStatus",
    "JWTClaims",
    "ModelInfo",
    "ModelSignatureClient",
    "ProviderInfo",
    "ResponseBinding",
    "VerificationResult",
]
