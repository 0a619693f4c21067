"""
Language model client used by task extraction.

Talks to the Anthropic Messages API over httpx. The transport can be
swapped (httpx.MockTransport) so tests never touch the network.
"""

import logging
from typing import Any, Optional, Protocol

import httpx

logger = logging.getLogger(__name__)


class LLMConfigError(Exception):
    """Raised when the client cannot run due to missing configuration."""

    def __init__(self, message: str, missing: Optional[list[str]] = None):
        super().__init__(message)
        self.missing = missing or []


class LLMAPIError(Exception):
    """Upstream returned an error status; status_code is None when no usable error status exists."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class LLMClient(Protocol):
    """Anything that can turn a prompt into reply text."""

    model: str

    async def complete(self, prompt: str, *, max_tokens: int) -> str:
        ...


class AnthropicClient:
    """Minimal async client for the Anthropic Messages API."""

    key = "anthropic"

    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: str,
        base_url: str = "https://api.anthropic.com",
        api_version: str = "2023-06-01",
        timeout_seconds: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def validate_config(self) -> None:
        if not self.api_key:
            raise LLMConfigError(
                "ANTHROPIC_API_KEY is not set",
                missing=["ANTHROPIC_API_KEY"],
            )

    def _build_request_body(self, prompt: str, max_tokens: int) -> dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": prompt,
                },
            ],
        }

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.api_key or "",
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            payload = resp.json()
        except ValueError:
            return resp.text or f"HTTP {resp.status_code}"
        if isinstance(payload, dict):
            err = payload.get("error")
            if isinstance(err, dict) and err.get("message"):
                return str(err["message"])
            if isinstance(err, str):
                return err
        return resp.text or f"HTTP {resp.status_code}"

    @staticmethod
    def _extract_text(payload: Any) -> str:
        """Return the first content block's text, or '' when it is not text."""
        if not isinstance(payload, dict):
            return ""
        content = payload.get("content") or []
        if not content or not isinstance(content[0], dict):
            return ""
        first = content[0]
        if first.get("type") != "text":
            return ""
        text = first.get("text")
        return text if isinstance(text, str) else ""

    async def complete(self, prompt: str, *, max_tokens: int) -> str:
        self.validate_config()

        url = f"{self.base_url}/v1/messages"
        timeout = httpx.Timeout(self.timeout_seconds)
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                resp = await client.post(url, json=self._build_request_body(prompt, max_tokens), headers=self._headers())
        except httpx.TimeoutException as exc:
            raise LLMAPIError(f"Request to {self.key} timed out: {exc}") from exc
        except httpx.RequestError as exc:  # connection/transport errors
            raise LLMAPIError(f"Could not reach {self.key}: {exc}") from exc

        if resp.status_code >= 400:
            message = self._error_message(resp)
            logger.warning("LLM call failed status=%s model=%s: %s", resp.status_code, self.model, message)
            raise LLMAPIError(message, status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as exc:
            raise LLMAPIError(f"Invalid JSON from {self.key}: {exc}") from exc

        return self._extract_text(payload)
