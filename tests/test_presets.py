"""
Unit tests for the policy presets.
"""

import pytest

from modelsignature.adapters.client import ModelSignatureClient
from modelsignature.policy.engine import PolicyEnforcer
from modelsignature.policy.presets import create_lenient_policy, create_secure_policy


class TestPolicyPresets:
    """Test cases for create_secure_policy and create_lenient_policy."""

    @pytest.fixture
    def client(self):
        return ModelSignatureClient(api_base_url="http://localhost:8000")

    def test_secure_policy_defaults(self, client):
        enforcer = create_secure_policy(client)
        config = enforcer.get_config()

        assert isinstance(enforcer, PolicyEnforcer)
        assert enforcer.client is client
        assert config.fail_closed is True
        assert config.require_deployment_id is True
        assert config.require_model_digest is True
        assert config.max_token_age == 300
        assert config.require_bundle_verification is False

    def test_lenient_policy_defaults(self, client):
        config = create_lenient_policy(client).get_config()

        assert config.fail_closed is False
        assert config.require_deployment_id is False
        assert config.require_model_digest is False
        assert config.max_token_age == 3600

    def test_secure_policy_overrides(self, client):
        """Test that overrides win over the preset values."""
        config = create_secure_policy(client, max_token_age=600, allowed_providers=["acme"]).get_config()

        assert config.max_token_age == 600
        assert config.allowed_providers == frozenset({"acme"})
        assert config.require_deployment_id is True

    def test_lenient_policy_overrides(self, client):
        config = create_lenient_policy(client, fail_closed=True, require_bundle_verification=True).get_config()

        assert config.fail_closed is True
        assert config.require_bundle_verification is True
        assert config.max_token_age == 3600

    def test_unknown_override(self, client):
        with pytest.raises(TypeError):
            create_secure_policy(client, strictness="max")
