"""
Integration tests for the verification and policy flow against the mock authority.
"""

import hashlib

import httpx
import pytest

from mocks.authority.server import MockAuthorityServer
from modelsignature import (
    HTTPError,
    ModelSignatureClient,
    PolicyEnforcer,
    PolicyViolationError,
    create_lenient_policy,
    create_secure_policy,
    decode_claims,
    hash_output,
)
from modelsignature.shared.config import ClientSettings
from modelsignature.shared.metrics import SDKMetrics


class TestVerificationFlow:
    """End-to-end flow through the HTTP stack with an in-process authority."""

    @pytest.fixture
    def authority(self):
        return MockAuthorityServer()

    @pytest.fixture
    def client(self, authority):
        return ModelSignatureClient(
            api_base_url="http://authority.test",
            api_key="test-key",
            retries=2,
            settings=ClientSettings(base_delay=0, max_delay=0, jitter=0),
            transport=httpx.ASGITransport(app=authority.app),
            metrics=SDKMetrics()
        )

    @pytest.mark.asyncio
    async def test_verify_issued_token(self, authority, client):
        token = authority.issue_token(deployment_id="dep-1")

        result = await client.verify_token(token)

        assert result.valid is True
        assert result.claims.deployment_id == "dep-1"
        assert result.model.name == "Test Model"
        assert result.provider.domain_verified is True

    @pytest.mark.asyncio
    async def test_secure_policy_allows_complete_token(self, authority, client):
        """Test a token carrying every claim the secure preset requires."""
        token = authority.issue_token(deployment_id="dep-1", model_digest="sha256:abc")
        enforcer = create_secure_policy(client, allowed_providers={"test-provider"})

        result = await enforcer.enforce_policy(token)

        assert result.allowed is True
        assert result.reasons == ()

    @pytest.mark.asyncio
    async def test_secure_policy_rejects_incomplete_token(self, authority, client):
        token = authority.issue_token()
        enforcer = create_secure_policy(client)

        with pytest.raises(PolicyViolationError) as exc_info:
            await enforcer.enforce_policy(token)

        assert exc_info.value.violations == (
            "Deployment ID is required but not present in token",
            "Model digest is required but not present in token",
        )

    @pytest.mark.asyncio
    async def test_old_token_rejected_by_secure_policy(self, authority, client):
        token = authority.issue_token(issued_ago=600, deployment_id="dep-1", model_digest="sha256:abc")
        enforcer = create_secure_policy(client, fail_closed=False)

        result = await enforcer.enforce_policy(token)

        assert result.allowed is False
        assert result.reasons[0].startswith("Token is too old")

    @pytest.mark.asyncio
    async def test_expired_token_reported_by_authority(self, authority, client):
        token = authority.issue_token(issued_ago=2000, expires_in=900)
        enforcer = create_lenient_policy(client)

        result = await enforcer.enforce_policy(token)

        assert result.allowed is False
        assert result.reasons == ("Token verification failed: Token expired",)

    @pytest.mark.asyncio
    async def test_bundle_check_from_authority(self, authority, client):
        authority.bundle_status["test-model"] = "invalid"
        token = authority.issue_token()
        enforcer = PolicyEnforcer(client, require_bundle_verification=True, fail_closed=False)

        result = await enforcer.enforce_policy(token)

        assert result.reasons == ("Bundle verification failed: status is 'invalid'",)

    @pytest.mark.asyncio
    async def test_transient_failures_are_retried(self, authority, client):
        authority.fail_next(503, count=2)
        token = authority.issue_token()

        result = await client.verify_token(token)

        assert result.valid is True
        assert authority.request_count == 3

    @pytest.mark.asyncio
    async def test_outage_is_a_policy_violation(self, authority, client):
        authority.fail_next(500, count=3)
        token = authority.issue_token()
        enforcer = create_lenient_policy(client)

        result = await enforcer.enforce_policy(token)

        assert authority.request_count == 3
        assert result.reasons == ("Verification request failed: Scripted failure 500",)
        assert await PolicyEnforcer(client).quick_check(token) is True

    @pytest.mark.asyncio
    async def test_bind_response(self, authority, client):
        token = authority.issue_token()
        text = "The answer is 42."

        binding = await client.bind_response(token, text)

        assert binding.response_hash == hash_output(text) == hashlib.sha256(text.encode()).hexdigest()
        bound_claims = decode_claims(binding.bound_token)
        assert bound_claims["response_hash"] == binding.response_hash
        assert bound_claims["bound_to_response"] is True

        verified = await client.verify_token(binding.bound_token)
        assert verified.claims.bound_to_response is True

    @pytest.mark.asyncio
    async def test_deployment_registration(self, authority, client):
        created = await client.register_deployment(
            name="prod",
            endpoint_url="https://api.example.com",
            certificate_fingerprint="ab:cd",
            deployment_type="production"
        )

        deployments = await client.list_deployments()

        assert created["id"] == "dep_1"
        assert deployments == [created]

    @pytest.mark.asyncio
    async def test_missing_public_model(self, authority, client):
        with pytest.raises(HTTPError) as exc_info:
            await client.get_public_model("nope")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Model not found"
        assert authority.request_count == 1
