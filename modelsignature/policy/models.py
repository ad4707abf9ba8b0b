"""
Policy data models.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, FrozenSet, Iterable, Optional, Tuple

from modelsignature.adapters.models import VerificationResult

DEFAULT_MAX_TOKEN_AGE = 900


@dataclass(frozen=True)
class PolicyConfig:
    """Acceptance rules applied to verified tokens.

    Empty allow-lists mean no restriction. ``max_token_age`` of None
    disables the age check.
    """
    require_deployment_id: bool = False
    require_model_digest: bool = False
    require_bundle_verification: bool = False
    allowed_providers: FrozenSet[str] = field(default_factory=frozenset)
    allowed_models: FrozenSet[str] = field(default_factory=frozenset)
    max_token_age: Optional[int] = DEFAULT_MAX_TOKEN_AGE
    fail_closed: bool = True

    def __post_init__(self):
        object.__setattr__(self, "allowed_providers", _as_frozenset(self.allowed_providers))
        object.__setattr__(self, "allowed_models", _as_frozenset(self.allowed_models))

    def with_changes(self, **changes: Any) -> "PolicyConfig":
        """Return a copy with ``changes`` applied; unknown names raise TypeError."""
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise TypeError(f"Unknown policy field(s): {', '.join(sorted(unknown))}")
        return replace(self, **changes)


@dataclass(frozen=True)
class PolicyResult:
    """Outcome of a policy evaluation."""
    allowed: bool
    reasons: Tuple[str, ...]
    verification: VerificationResult


def _as_frozenset(values: Optional[Iterable[str]]) -> FrozenSet[str]:
    if values is None:
        return frozenset()
    if isinstance(values, str):
        return frozenset([values])
    return frozenset(values)
