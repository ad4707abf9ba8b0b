"""
Response models for the verification authority.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# Loosely-typed JSON for pass-through endpoints.
ApiPayload = Dict[str, Any]


class BundleStatus(str, Enum):
    """Authority-reported status of a model's attestation bundle."""
    UNKNOWN = "unknown"
    VERIFIED = "verified"
    INVALID = "invalid"
    ERROR = "error"


class _AuthorityModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore", protected_namespaces=())


class JWTClaims(_AuthorityModel):
    """Claims carried by an identity token."""
    model_id: str
    provider_id: str
    user_fingerprint: str = Field(..., alias="user_fp")
    deployment_id: Optional[str] = None
    model_digest: Optional[str] = None
    response_hash: Optional[str] = None
    bound_to_response: Optional[bool] = None
    issued_at: Optional[float] = Field(None, alias="iat")
    expires_at: Optional[float] = Field(None, alias="exp")
    token_id: Optional[str] = Field(None, alias="jti")


class ModelInfo(_AuthorityModel):
    """Registered model the token was issued for."""
    id: str
    name: str
    version: str
    type: Optional[str] = None
    model_digest: Optional[str] = None
    sigstore_bundle_url: Optional[str] = None
    bundle_status: Optional[BundleStatus] = None
    bundle_last_checked: Optional[str] = None


class ProviderInfo(_AuthorityModel):
    """Provider operating the model."""
    id: str
    name: str
    website: Optional[str] = None
    verification_level: Optional[str] = None
    domain_verified: Optional[bool] = None


class BundleCheck(_AuthorityModel):
    """Result of the authority's bundle verification."""
    status: BundleStatus
    last_checked: Optional[str] = None
    details: Optional[Any] = None


class VerificationResult(_AuthorityModel):
    """Outcome of ``GET /api/v1/jwt/verify/{token}``."""
    valid: bool
    claims: Optional[JWTClaims] = None
    model: Optional[ModelInfo] = None
    provider: Optional[ProviderInfo] = None
    bundle_check: Optional[BundleCheck] = None
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "VerificationResult":
        """Synthetic result for a verification that never completed."""
        return cls(valid=False, error=error)


class ResponseBinding(_AuthorityModel):
    """Outcome of ``POST /api/v1/jwt/{token}/bind-response``."""
    response_hash: str
    bound_token: str
    verification_url: str
