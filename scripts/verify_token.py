#!/usr/bin/env python3
"""
Verify a model identity token and print the policy decision.

Useful from a developer workstation or CI job to check what a given policy
would decide for a token, without wiring the SDK into an application.
Exit status is 0 when the token is allowed, 1 when denied, 2 on usage errors.
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from modelsignature import (
    ModelSignatureClient,
    PolicyEnforcer,
    create_lenient_policy,
    create_secure_policy,
    decode_claims,
    is_valid_format,
)
from modelsignature.shared.config import get_settings
from modelsignature.shared.logging import configure_logging


async def run(
    *,
    token: str,
    preset: str,
    api_base_url: Optional[str],
    api_key: Optional[str],
    allowed_providers: List[str],
    allowed_models: List[str],
    max_age: Optional[int],
) -> dict:
    """Evaluate the token and return a JSON-serialisable summary."""
    client = ModelSignatureClient(api_key=api_key, api_base_url=api_base_url)

    overrides = {"fail_closed": False}
    if allowed_providers:
        overrides["allowed_providers"] = allowed_providers
    if allowed_models:
        overrides["allowed_models"] = allowed_models
    if max_age is not None:
        overrides["max_token_age"] = max_age

    if preset == "secure":
        enforcer = create_secure_policy(client, **overrides)
    elif preset == "lenient":
        enforcer = create_lenient_policy(client, **overrides)
    else:
        enforcer = PolicyEnforcer(client, **overrides)

    result = await enforcer.enforce_policy(token)
    return {
        "allowed": result.allowed,
        "reasons": list(result.reasons),
        "verification": result.verification.model_dump(mode="json", exclude_none=True),
    }


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Verify a ModelSignature token against a policy.")
    parser.add_argument("token", help="Compact identity token")
    parser.add_argument("--preset", choices=["secure", "lenient", "default"], default="default", help="Policy preset")
    parser.add_argument("--api-base-url", default=None, help="Verification authority base URL")
    parser.add_argument("--api-key", default=None, help="API key (defaults to MODELSIGNATURE_API_KEY)")
    parser.add_argument("--allow-provider", action="append", default=[], dest="allowed_providers", help="Allowed provider ID (repeatable)")
    parser.add_argument("--allow-model", action="append", default=[], dest="allowed_models", help="Allowed model ID (repeatable)")
    parser.add_argument("--max-age", type=int, default=None, help="Maximum token age in seconds")
    parser.add_argument("--decode-only", action="store_true", help="Print the unverified claims and exit")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    configure_logging(get_settings().log_level)

    if not is_valid_format(args.token):
        print("Invalid token format", file=sys.stderr)
        return 2

    if args.decode_only:
        print(json.dumps(decode_claims(args.token), indent=2))
        return 0

    summary = asyncio.run(run(
        token=args.token,
        preset=args.preset,
        api_base_url=args.api_base_url,
        api_key=args.api_key,
        allowed_providers=args.allowed_providers,
        allowed_models=args.allowed_models,
        max_age=args.max_age,
    ))
    print(json.dumps(summary, indent=2))
    return 0 if summary["allowed"] else 1


if __name__ == "__main__":
    sys.exit(main())
