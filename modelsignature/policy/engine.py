"""
Policy enforcement for verified identity tokens.
"""

import math
import time
from typing import Any, Iterable, List, Optional

from modelsignature.adapters.client import ModelSignatureClient
from modelsignature.adapters.models import BundleStatus, VerificationResult
from modelsignature.shared.errors import PolicyViolationError, RequestFailedError
from modelsignature.shared.logging import get_logger, set_token_context
from modelsignature.shared.metrics import SDKMetrics
from .models import PolicyConfig, PolicyResult


class PolicyEnforcer:
    """Verifies tokens with the authority and applies a ``PolicyConfig``.

    Every rule is evaluated so the caller sees all violations at once. When
    ``fail_closed`` is set a denial raises ``PolicyViolationError``; otherwise
    the denial is returned as a ``PolicyResult``.
    """

    def __init__(self, client: ModelSignatureClient, config: Optional[PolicyConfig] = None, **overrides: Any):
        self.client = client
        self._config = (config or PolicyConfig()).with_changes(**overrides)
        self.logger = get_logger("modelsignature.policy")

    @property
    def metrics(self) -> SDKMetrics:
        return self.client.metrics

    def get_config(self) -> PolicyConfig:
        """Current configuration (an immutable snapshot)."""
        return self._config

    def update_config(self, **changes: Any) -> None:
        """Replace configuration fields, e.g. ``update_config(fail_closed=False)``."""
        self._config = self._config.with_changes(**changes)
        self.logger.info("Policy config updated", fields=sorted(changes))

    async def enforce_policy(self, token: str) -> PolicyResult:
        """Verify ``token`` and check it against the current policy."""
        set_token_context(token)
        violations: List[str] = []

        try:
            verification = await self.client.verify_token(token)
        except Exception as e:
            message = _failure_message(e)
            self.logger.warning("Verification request failed", error=message, error_type=type(e).__name__)
            violations.append(f"Verification request failed: {message}")
            verification = VerificationResult.failed(message)
            return self._decide(self._config, violations, verification)

        config = self._config
        if not verification.valid:
            violations.append(f"Token verification failed: {verification.error}")
        else:
            violations.extend(self.check_rules(verification, config))

        return self._decide(config, violations, verification)

    def check_rules(self, verification: VerificationResult, config: PolicyConfig,
                    now: Optional[int] = None) -> List[str]:
        """Return every rule violated by a valid verification result."""
        claims = verification.claims
        model = verification.model
        provider = verification.provider
        bundle_check = verification.bundle_check

        if claims is None:
            return ["No claims found in token"]

        violations: List[str] = []

        if config.max_token_age is not None:
            if claims.issued_at is None:
                violations.append("Unable to determine token age")
            else:
                now = int(time.time()) if now is None else now
                age = now - claims.issued_at
                if age > config.max_token_age:
                    violations.append(f"Token is too old: {math.ceil(age)}s > {config.max_token_age}s")

        if config.require_deployment_id and not claims.deployment_id:
            violations.append("Deployment ID is required but not present in token")

        if config.require_model_digest and not claims.model_digest:
            violations.append("Model digest is required but not present in token")

        if config.require_bundle_verification:
            if bundle_check is None:
                violations.append("Bundle verification is required but no bundle information available")
            elif bundle_check.status != BundleStatus.VERIFIED:
                violations.append(f"Bundle verification failed: status is '{bundle_check.status.value}'")

        if config.allowed_providers:
            if provider is None or provider.id not in config.allowed_providers:
                violations.append(f"Provider '{_id_or_unknown(provider)}' is not in allowed list")

        if config.allowed_models:
            if model is None or model.id not in config.allowed_models:
                violations.append(f"Model '{_id_or_unknown(model)}' is not in allowed list")

        return violations

    async def quick_check(self, token: str,
                          require_deployment: Optional[bool] = None,
                          require_digest: Optional[bool] = None,
                          max_age: Optional[int] = None,
                          allowed_providers: Optional[Iterable[str]] = None) -> bool:
        """Boolean shorthand over ``enforce_policy``; never raises."""
        try:
            overrides = {
                "require_deployment_id": require_deployment,
                "require_model_digest": require_digest,
                "max_token_age": max_age,
                "allowed_providers": allowed_providers,
            }
            config = self._config.with_changes(
                fail_closed=False,
                **{key: value for key, value in overrides.items() if value is not None}
            )
            result = await PolicyEnforcer(self.client, config).enforce_policy(token)
            return result.allowed
        except Exception as e:
            self.logger.debug("Quick check failed", error=str(e))
            return False

    def _decide(self, config: PolicyConfig, violations: List[str],
                verification: VerificationResult) -> PolicyResult:
        allowed = not violations
        result = PolicyResult(allowed=allowed, reasons=tuple(violations), verification=verification)

        claims = verification.claims
        self.logger.info(
            "Policy decision",
            allowed=allowed,
            reason_count=len(violations),
            model_id=claims.model_id if claims else None,
            provider_id=claims.provider_id if claims else None,
            fail_closed=config.fail_closed
        )
        self.metrics.record_decision("allowed" if allowed else "denied")

        if not allowed and config.fail_closed:
            raise PolicyViolationError(result.reasons, details={"verification_error": verification.error})

        return result


def _failure_message(error: Exception) -> str:
    if isinstance(error, RequestFailedError):
        return error.last_message
    return str(error) or type(error).__name__


def _id_or_unknown(entity: Any) -> str:
    return entity.id if entity is not None and entity.id else "unknown"
