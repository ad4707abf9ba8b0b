"""
ModelSignature SDK: verify model identity tokens and enforce acceptance policy.

Typical use::

    client = ModelSignatureClient(api_key="...")
    enforcer = create_secure_policy(client, allowed_providers={"acme"})
    result = await enforcer.enforce_policy(token)

Layout:

- shared: configuration, logging, errors, retry and metrics
- tokens: local, unverified token inspection
- adapters: HTTP client for the verification authority and its response models
- policy: the policy enforcer and its presets
"""

from modelsignature.adapters import (
    BundleCheck,
    BundleStatus,
    JWTClaims,
    ModelInfo,
    ModelSignatureClient,
    ProviderInfo,
    ResponseBinding,
    VerificationResult,
)
from modelsignature.policy import (
    PolicyConfig,
    PolicyEnforcer,
    PolicyResult,
    create_lenient_policy,
    create_secure_policy,
)
from modelsignature.shared.config import ClientConfig, ClientSettings
from modelsignature.shared.errors import (
    HTTPError,
    InvalidFormatError,
    InvalidResponseError,
    MalformedPayloadError,
    ModelSignatureError,
    PolicyViolationError,
    RequestFailedError,
)
from modelsignature.tokens import decode_claims, hash_output, is_expired, is_valid_format, token_age

__version__ = "0.4.0"

__all__ = [
    "BundleCheck",
    "BundleStatus",
    "ClientConfig",
    "ClientSettings",
    "HTTPError",
    "InvalidFormatError",
    "InvalidResponseError",
    "JWTClaims",
    "MalformedPayloadError",
    "ModelInfo",
    "ModelSignatureClient",
    "ModelSignatureError",
    "PolicyConfig",
    "PolicyEnforcer",
    "PolicyResult",
    "PolicyViolationError",
    "ProviderInfo",
    "RequestFailedError",
    "ResponseBinding",
    "VerificationResult",
    "create_lenient_policy",
    "create_secure_policy",
    "decode_claims",
    "hash_output",
    "is_expired",
    "is_valid_format",
    "token_age",
]
