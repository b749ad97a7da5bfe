"""
Partner insurance HTTP client.

Creates activity policies through the insurer's signed partner API.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import httpx

from src.integrations.insurance.request_builder import PolicyRequest, build_policy_body
from src.integrations.insurance.signing import (
    current_timestamp_ms,
    generate_request_signature,
    serialize_body,
    signed_headers,
)
from src.utils.config_loader import InsuranceConfig, load_insurance_config

logger = logging.getLogger(__name__)


class InsuranceConfigurationError(RuntimeError):
    """Raised when partner credentials are missing."""


class InsuranceApiError(RuntimeError):
    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"YAS API error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class YasInsuranceClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        partner_id: Optional[str] = None,
        secret_key: Optional[str] = None,
        config: Optional[InsuranceConfig] = None,
        timeout_seconds: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or os.getenv("YAS_BASE_URL", "")).rstrip("/")
        self.partner_id = partner_id or os.getenv("YAS_PARTNER_ID", "")
        self.secret_key = secret_key or os.getenv("YAS_SECRET_KEY", "")
        self.config = config or load_insurance_config()
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def policy_path(self) -> str:
        return f"/partner/{self.partner_id}/policy/create"

    def _check_credentials(self) -> None:
        missing = [
            name
            for name, value in (
                ("YAS_BASE_URL", self.base_url),
                ("YAS_PARTNER_ID", self.partner_id),
                ("YAS_SECRET_KEY", self.secret_key),
            )
            if not value
        ]
        if missing:
            raise InsuranceConfigurationError(f"Insurance API is not configured: missing {', '.join(missing)}")

    async def create_policy(self, request: PolicyRequest) -> Dict[str, Any]:
        """
        Sign and send a policy-creation request.

        Raises UnknownBranchError before any I/O when the branch is not
        configured, and InsuranceApiError on a non-2xx partner response.
        """
        branch_config = self.config.for_branch(request.branch)
        self._check_credentials()

        body = build_policy_body(request, branch_config, self.config)
        body_string = serialize_body(body)
        method = "post"
        path = self.policy_path()
        timestamp = current_timestamp_ms()
        signature = generate_request_signature(self.secret_key, path, method, timestamp, body_string)
        headers = signed_headers(self.partner_id, timestamp, signature)

        logger.info("Creating policy for branch=%s partner=%s", request.branch, branch_config.partner)
        logger.debug("Policy request path=%s timestamp=%s body=%s", path, timestamp, body_string)

        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            response = await client.request(
                method.upper(),
                f"{self.base_url}{path}",
                content=body_string.encode("utf-8"),
                headers=headers,
            )

        if not response.is_success:
            logger.error("Insurance API rejected policy: %s %s", response.status_code, response.text)
            raise InsuranceApiError(response.status_code, response.text)

        data = response.json() if response.content else {}
        logger.info("Insurance policy created: status=%s", response.status_code)
        return data
