"""HTTP client for the plans API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .settings import get_settings

logger = logging.getLogger(__name__)


class PlansAPIError(Exception):
    """Raised when a call to the plans API does not succeed."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PlansClient:
    """
    Thin wrapper around the plans REST API.

    Every method issues exactly one request; nothing is retried. An existing
    ``httpx.Client`` (for instance a FastAPI ``TestClient``) can be passed in,
    otherwise one is created for ``base_url`` (PLANS_API_URL by default) and
    owned by this object.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ) -> None:
        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(base_url=(base_url or get_settings().api_url).rstrip("/"), timeout=timeout)
        self._client = http_client

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "PlansClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, failure: str, use_server_message: bool = False, **kwargs: Any) -> Any:
        logger.debug("%s %s", method, path)
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise PlansAPIError(failure) from exc
        if resp.is_error:
            message = failure
            if use_server_message:
                try:
                    body = resp.json()
                except ValueError:
                    body = None
                if isinstance(body, dict) and body.get("message"):
                    message = str(body["message"])
            raise PlansAPIError(message, status_code=resp.status_code)
        return resp.json()

    # -- endpoints -----------------------------------------------------------

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health", "Health check failed")

    def get_plans(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/plans", "Failed to fetch plans")

    def get_plan(self, plan_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/plans/{plan_id}", "Failed to fetch plan")

    def create_plan(self, plan: Dict[str, Any]) -> Dict[str, Any]:
        """Create a plan; validation failures surface the server's message."""
        return self._request("POST", "/api/plans", "Failed to create plan", use_server_message=True, json=plan)

    def update_plan(self, plan_id: str, plan: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/api/plans/{plan_id}", "Failed to update plan", json=plan)

    def delete_plan(self, plan_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/api/plans/{plan_id}", "Failed to delete plan")
