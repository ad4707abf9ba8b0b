"""
Client for the ModelSignature verification authority.
"""

import asyncio
import time
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from modelsignature.shared.config import ClientConfig, ClientSettings, resolve_client_config
from modelsignature.shared.errors import (
    HTTPError,
    InvalidFormatError,
    InvalidResponseError,
    MalformedPayloadError,
)
from modelsignature.shared.logging import get_logger, token_fingerprint
from modelsignature.shared.metrics import SDKMetrics, get_metrics
from modelsignature.shared.retry import RetryConfig, retry_async
from modelsignature.tokens.codec import is_valid_format
from .models import ApiPayload, ResponseBinding, VerificationResult


class ModelSignatureClient:
    """Client for communicating with the verification authority.

    Every call goes through ``_request``: one ``httpx.AsyncClient`` per call,
    each attempt bounded by ``timeout`` seconds, 5xx and transport failures
    retried with exponential backoff, 4xx surfaced immediately.
    """

    def __init__(self,
                 api_key: Optional[str] = None,
                 api_base_url: Optional[str] = None,
                 timeout: Optional[float] = None,
                 retries: Optional[int] = None,
                 settings: Optional[ClientSettings] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 metrics: Optional[SDKMetrics] = None):
        self._config = resolve_client_config(
            settings,
            api_key=api_key,
            api_base_url=api_base_url,
            timeout=timeout,
            retries=retries
        )
        self._transport = transport
        self.metrics = metrics or get_metrics()
        self.logger = get_logger("modelsignature.client")

    def get_config(self) -> ClientConfig:
        """Snapshot of the current configuration."""
        return self._config.model_copy()

    def update_config(self, **changes: Any) -> None:
        """Replace configuration fields, e.g. ``update_config(timeout=5.0)``."""
        if "api_base_url" in changes and changes["api_base_url"]:
            changes["api_base_url"] = changes["api_base_url"].rstrip("/")
        self._config = self._config.merged(**changes)
        self.logger.info("Client config updated", fields=sorted(changes))

    async def verify_token(self, token: str) -> VerificationResult:
        """Verify a token with the authority."""
        if not is_valid_format(token):
            raise InvalidFormatError()

        data = await self._request("GET", f"/api/v1/jwt/verify/{token}", endpoint="jwt_verify")

        try:
            result = VerificationResult.model_validate(data)
        except ValidationError as e:
            self.logger.error("Malformed verification payload", error=str(e))
            raise MalformedPayloadError(
                "Verification response did not match the expected schema",
                details={"errors": e.errors(include_url=False, include_input=False)}
            )

        if not result.valid:
            self.logger.warning(
                "Token rejected by authority",
                token=token_fingerprint(token),
                error=result.error
            )
        return result

    async def bind_response(self, token: str, response_text: str) -> ResponseBinding:
        """Bind a token to the hash of a model response."""
        if not is_valid_format(token):
            raise InvalidFormatError()

        if not response_text or not isinstance(response_text, str):
            raise InvalidResponseError()

        data = await self._request(
            "POST",
            f"/api/v1/jwt/{token}/bind-response",
            endpoint="jwt_bind_response",
            json={"response_text": response_text}
        )

        try:
            return ResponseBinding.model_validate(data)
        except ValidationError as e:
            raise MalformedPayloadError(
                "Bind response did not match the expected schema",
                details={"errors": e.errors(include_url=False, include_input=False)}
            )

    async def register_deployment(self, name: str, endpoint_url: str, certificate_fingerprint: str,
                                  description: Optional[str] = None,
                                  deployment_type: Optional[str] = None,
                                  metadata: Optional[Dict[str, Any]] = None) -> ApiPayload:
        """Register a new deployment."""
        payload = _compact({
            "name": name,
            "description": description,
            "endpoint_url": endpoint_url,
            "certificate_fingerprint": certificate_fingerprint,
            "deployment_type": deployment_type,
            "metadata": metadata,
        })
        return await self._request("POST", "/api/v1/deployments", endpoint="deployments", json=payload)

    async def list_deployments(self) -> List[ApiPayload]:
        """List deployments of the current provider."""
        return await self._request("GET", "/api/v1/deployments", endpoint="deployments")

    async def allow_deployment_for_model(self, model_id: str, deployment_id: str) -> ApiPayload:
        """Allow a deployment to serve a model."""
        return await self._request(
            "POST",
            f"/api/v1/models/{model_id}/deployments/{deployment_id}/allow",
            endpoint="deployment_allow"
        )

    async def update_deployment_status(self, deployment_id: str, status: str) -> ApiPayload:
        """Update deployment status."""
        return await self._request(
            "PUT",
            f"/api/v1/deployments/{deployment_id}/status",
            endpoint="deployment_status",
            json={"status": status}
        )

    async def delete_deployment(self, deployment_id: str) -> ApiPayload:
        """Delete a deployment."""
        return await self._request("DELETE", f"/api/v1/deployments/{deployment_id}", endpoint="deployment")

    async def create_verification_with_mtls(self, model_id: str, prompt: str, response: str,
                                            client_cert_fingerprint: Optional[str] = None,
                                            client_cert_subject: Optional[str] = None,
                                            client_cert_issuer: Optional[str] = None,
                                            metadata: Optional[Dict[str, Any]] = None) -> ApiPayload:
        """Create a verification carrying mTLS client certificate details."""
        payload = _compact({
            "model_id": model_id,
            "prompt": prompt,
            "response": response,
            "client_cert_fingerprint": client_cert_fingerprint,
            "client_cert_subject": client_cert_subject,
            "client_cert_issuer": client_cert_issuer,
            "metadata": metadata,
        })
        return await self._request("POST", "/api/v1/create-verification", endpoint="create_verification", json=payload)

    async def register_model(self, model_id: str, name: str, **fields: Any) -> ApiPayload:
        """Register a model (description, license, digest, bundle_url, ...)."""
        payload = _compact({"model_id": model_id, "name": name, **fields})
        return await self._request("POST", "/api/v1/models", endpoint="models", json=payload)

    async def search(self, query: str, **options: Any) -> ApiPayload:
        """Search models and providers."""
        return await self._request(
            "GET", "/api/v1/search", endpoint="search", params=_query_params({"q": query, **options})
        )

    async def list_public_models(self, **options: Any) -> ApiPayload:
        return await self._request(
            "GET", "/api/v1/public/models", endpoint="public_models", params=_query_params(options)
        )

    async def get_public_model(self, model_id: str) -> ApiPayload:
        return await self._request("GET", f"/api/v1/public/models/{model_id}", endpoint="public_model")

    async def list_public_providers(self, **options: Any) -> ApiPayload:
        return await self._request(
            "GET", "/api/v1/public/providers", endpoint="public_providers", params=_query_params(options)
        )

    async def get_public_provider(self, provider_id: str) -> ApiPayload:
        return await self._request("GET", f"/api/v1/public/providers/{provider_id}", endpoint="public_provider")

    async def _request(self, method: str, path: str, endpoint: str,
                       json: Optional[Any] = None,
                       params: Optional[Dict[str, str]] = None) -> Any:
        """Send a request through the retry pipeline and return the JSON body."""
        config = self._config
        retry_config = RetryConfig(
            retries=config.retries,
            base_delay=config.base_delay,
            max_delay=config.max_delay,
            jitter=config.jitter
        )

        headers = {}
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"

        async def _attempt():
            start = time.perf_counter()
            outcome = "error"
            try:
                async with httpx.AsyncClient(
                    base_url=config.api_base_url,
                    timeout=config.timeout,
                    headers=headers,
                    transport=self._transport
                ) as client:
                    try:
                        response = await asyncio.wait_for(
                            client.request(method, path, json=json, params=params),
                            timeout=config.timeout
                        )
                    except asyncio.TimeoutError:
                        outcome = "timeout"
                        raise httpx.TimeoutException(f"Request timed out after {config.timeout}s")

                if response.is_success:
                    outcome = "success"
                    return response.json()

                outcome = str(response.status_code)
                raise HTTPError(
                    _error_message(response),
                    status_code=response.status_code,
                    details={"endpoint": endpoint}
                )
            finally:
                self.metrics.record_request(method, endpoint, outcome, time.perf_counter() - start)

        def _is_terminal(error: BaseException) -> bool:
            if isinstance(error, HTTPError) and not error.retryable:
                return True
            self.metrics.record_retry(endpoint)
            return False

        self.logger.debug("Sending request", method=method, endpoint=endpoint, retries=config.retries)
        return await retry_async(
            _attempt,
            retry_config,
            retry_on=(HTTPError, httpx.HTTPError, ValueError),
            is_terminal=_is_terminal,
            name=endpoint
        )


def _error_message(response: httpx.Response) -> str:
    """Prefer ``detail``, then ``error`` from a JSON error body."""
    message = f"HTTP {response.status_code}: {response.reason_phrase}"
    try:
        data = response.json()
    except ValueError:
        return message

    if isinstance(data, dict):
        if data.get("detail"):
            return str(data["detail"])
        if data.get("error"):
            return str(data["error"])
    return message


def _compact(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def _query_params(options: Dict[str, Any]) -> Dict[str, str]:
    params = {}
    for key, value in options.items():
        if value is None:
            continue
        if isinstance(value, bool):
            params[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple, set, frozenset)):
            params[key] = ",".join(str(item) for item in value)
        else:
            params[key] = str(value)
    return params
