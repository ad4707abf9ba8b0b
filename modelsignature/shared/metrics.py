"""
Prometheus metrics for the ModelSignature SDK.
"""

from typing import Any, Dict, Optional
import threading

from prometheus_client import CollectorRegistry, Counter, Histogram


class SDKMetrics:
    """Collectors for authority requests and policy decisions."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up request and policy metrics."""
        self._metrics["requests_total"] = Counter(
            "modelsignature_requests_total",
            "Total requests sent to the verification authority",
            ["method", "endpoint", "outcome"],
            registry=self.registry
        )

        self._metrics["request_retries_total"] = Counter(
            "modelsignature_request_retries_total",
            "Attempts that failed with a retryable error",
            ["endpoint"],
            registry=self.registry
        )

        self._metrics["request_duration_seconds"] = Histogram(
            "modelsignature_request_duration_seconds",
            "Duration of a single request attempt in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        self._metrics["policy_decisions_total"] = Counter(
            "modelsignature_policy_decisions_total",
            "Policy enforcement decisions",
            ["decision"],
            registry=self.registry
        )

    def record_request(self, method: str, endpoint: str, outcome: str, duration: float):
        """Record one request attempt."""
        self._metrics["requests_total"].labels(method=method, endpoint=endpoint, outcome=outcome).inc()
        self._metrics["request_duration_seconds"].labels(method=method, endpoint=endpoint).observe(duration)

    def record_retry(self, endpoint: str):
        """Record an attempt that failed with a retryable error."""
        self._metrics["request_retries_total"].labels(endpoint=endpoint).inc()

    def record_decision(self, decision: str):
        """Record a policy decision (allowed / denied / error)."""
        self._metrics["policy_decisions_total"].labels(decision=decision).inc()

    def get_sample(self, name: str, labels: Optional[Dict[str, str]] = None) -> float:
        """Read a sample value back from the registry (0.0 if never set)."""
        value = self.registry.get_sample_value(name, labels or {})
        return value or 0.0


_metrics_lock = threading.Lock()
_default_metrics: Optional[SDKMetrics] = None


def get_metrics() -> SDKMetrics:
    """Process-wide metrics instance on its own registry."""
    global _default_metrics
    with _metrics_lock:
        if _default_metrics is None:
            _default_metrics = SDKMetrics()
        return _default_metrics
