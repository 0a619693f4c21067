"""Async HTTP client for the task API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-success response from the task API."""

    def __init__(self, status_code: int, error: str, details: Optional[str] = None):
        super().__init__(f"{error}: {details}" if details else error)
        self.status_code = status_code
        self.error = error
        self.details = details

    @classmethod
    def from_response(cls, resp: httpx.Response) -> "ApiError":
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and payload.get("error"):
            details = payload.get("details")
            return cls(resp.status_code, str(payload["error"]), str(details) if details is not None else None)
        return cls(resp.status_code, f"HTTP {resp.status_code}", resp.text or None)


class TaskApiClient:
    """
    Thin wrapper around the /tasks endpoints.

    Every call is one independent request; nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        kwargs: Dict[str, Any] = {"base_url": base_url.rstrip("/"), "transport": transport}
        if timeout is not None:
            kwargs["timeout"] = timeout
        self._client = httpx.AsyncClient(**kwargs)

    async def __aenter__(self) -> "TaskApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        resp = await self._client.request(method, url, **kwargs)
        if resp.status_code >= 400:
            err = ApiError.from_response(resp)
            logger.debug("%s %s failed: %s", method, url, err)
            raise err
        try:
            return resp.json()
        except ValueError as exc:
            logger.debug("%s %s returned a non-JSON body", method, url)
            raise ApiError(resp.status_code, "Invalid response", f"Expected JSON from {method} {url}: {exc}") from exc

    async def list_tasks(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/tasks")

    async def update_task(self, task_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PATCH", f"/tasks/{task_id}", json=updates)

    async def delete_task(self, task_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/tasks/{task_id}")

    async def extract(self, text: str) -> Dict[str, Any]:
        return await self._request("POST", "/tasks/extract", json={"text": text})
