"""
Ready-made enforcers for production and development use.
"""

from typing import Any

from modelsignature.adapters.client import ModelSignatureClient
from .engine import PolicyEnforcer
from .models import PolicyConfig

SECURE_DEFAULTS = {
    "fail_closed": True,
    "require_deployment_id": True,
    "require_model_digest": True,
    "max_token_age": 300,
}

LENIENT_DEFAULTS = {
    "fail_closed": False,
    "require_deployment_id": False,
    "require_model_digest": False,
    "max_token_age": 3600,
}


def create_secure_policy(client: ModelSignatureClient, **overrides: Any) -> PolicyEnforcer:
    """Fail-closed enforcer requiring deployment ID and model digest, 5 minute tokens."""
    return PolicyEnforcer(client, PolicyConfig(**{**SECURE_DEFAULTS, **overrides}))


def create_lenient_policy(client: ModelSignatureClient, **overrides: Any) -> PolicyEnforcer:
    """Fail-open enforcer for development, 1 hour tokens."""
    return PolicyEnforcer(client, PolicyConfig(**{**LENIENT_DEFAULTS, **overrides}))
