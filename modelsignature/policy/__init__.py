"""
Policy enforcement package.
"""

from .engine import PolicyEnforcer
from .models import PolicyConfig, PolicyResult
from .presets import create_lenient_policy, create_secure_policy

__all__ = [
    "PolicyConfig",
    "PolicyEnforcer",
    "PolicyResult",
    "create_lenient_policy",
    "create_secure_policy",
]
