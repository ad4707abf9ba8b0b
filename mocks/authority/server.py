"""
Mock verification authority providing the token verification and binding endpoints.
"""

import hashlib
import time
from typing import Any, Dict, List, Optional

import jwt
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from modelsignature.shared.logging import get_logger


class BindResponseRequest(BaseModel):
    response_text: str


class MockAuthorityServer:
    """In-memory stand-in for the ModelSignature API.

    Tokens are HS256 JWTs signed with ``secret``. Failures can be scripted
    with ``fail_next(status, count)`` to exercise client retries.
    """

    def __init__(self, secret: str = "mock-secret"):
        self.secret = secret
        self.logger = get_logger("mock.authority")
        self.app = FastAPI(title="Mock ModelSignature Authority", version="1.0.0")

        self.models: Dict[str, Dict[str, Any]] = {
            "test-model": {"id": "test-model", "name": "Test Model", "version": "1.0.0"}
        }
        self.providers: Dict[str, Dict[str, Any]] = {
            "test-provider": {"id": "test-provider", "name": "Test Provider", "domain_verified": True}
        }
        self.bundle_status: Dict[str, str] = {}
        self.deployments: List[Dict[str, Any]] = []
        self.request_count = 0
        self._scripted_failures: List[int] = []

        self._setup_routes()

    def fail_next(self, status_code: int, count: int = 1):
        """Answer the next ``count`` requests with ``status_code``."""
        self._scripted_failures.extend([status_code] * count)

    def _setup_routes(self):
        """Set up mock authority routes."""

        @self.app.middleware("http")
        async def scripted_failures(request: Request, call_next):
            self.request_count += 1
            if self._scripted_failures:
                status_code = self._scripted_failures.pop(0)
                return JSONResponse(status_code=status_code, content={"error": f"Scripted failure {status_code}"})
            return await call_next(request)

        @self.app.get("/api/v1/jwt/verify/{token}")
        async def verify(token: str):
            """Verify a token and describe its model and provider."""
            try:
                claims = jwt.decode(token, self.secret, algorithms=["HS256"])
            except jwt.ExpiredSignatureError:
                return {"valid": False, "error": "Token expired"}
            except jwt.InvalidTokenError as e:
                return {"valid": False, "error": f"Invalid token: {e}"}

            result: Dict[str, Any] = {
                "valid": True,
                "claims": claims,
                "model": self.models.get(claims.get("model_id")),
                "provider": self.providers.get(claims.get("provider_id")),
            }
            status = self.bundle_status.get(claims.get("model_id"))
            if status:
                result["bundle_check"] = {"status": status, "last_checked": "2024-01-01T00:00:00Z"}
            return result

        @self.app.post("/api/v1/jwt/{token}/bind-response")
        async def bind_response(token: str, body: BindResponseRequest):
            """Bind a token to the hash of a response."""
            try:
                claims = jwt.decode(token, self.secret, algorithms=["HS256"])
            except jwt.InvalidTokenError:
                raise HTTPException(status_code=400, detail="Invalid token")

            response_hash = hashlib.sha256(body.response_text.encode("utf-8")).hexdigest()
            bound_token = jwt.encode(
                {**claims, "response_hash": response_hash, "bound_to_response": True},
                self.secret,
                algorithm="HS256"
            )
            return {
                "response_hash": response_hash,
                "bound_token": bound_token,
                "verification_url": f"https://modelsignature.com/v/{response_hash}"
            }

        @self.app.get("/api/v1/deployments")
        async def list_deployments():
            return self.deployments

        @self.app.post("/api/v1/deployments")
        async def register_deployment(request: Request):
            data = await request.json()
            deployment = {"id": f"dep_{len(self.deployments) + 1}", "status": "active", **data}
            self.deployments.append(deployment)
            return deployment

        @self.app.get("/api/v1/public/models/{model_id}")
        async def get_public_model(model_id: str):
            if model_id not in self.models:
                raise HTTPException(status_code=404, detail="Model not found")
            return self.models[model_id]

    def issue_token(self, expires_in: int = 900, issued_ago: int = 0, **claims: Any) -> str:
        """Issue a token the way the real authority would."""
        now = int(time.time()) - issued_ago
        payload = {
            "model_id": "test-model",
            "provider_id": "test-provider",
            "user_fp": "test-fp",
            "iat": now,
            "exp": now + expires_in,
            "jti": f"jti-{now}",
        }
        payload.update({key: value for key, value in claims.items() if value is not None})
        return jwt.encode(payload, self.secret, algorithm="HS256")


def create_app(secret: Optional[str] = None) -> FastAPI:
    """Application factory for ``uvicorn --factory``."""
    return MockAuthorityServer(secret or "mock-secret").app
