from __future__ import annotations

from typing import Any

import httpx
from loguru import logger
from tenacity import AsyncRetrying

from policy_drafter.transport import AgentResult
from policy_drafter.transports.common import default_retry_kwargs

_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class RetryableStatusError(Exception):
    def __init__(self, status_code: int, detail: str):
        super().__init__(f"HTTP {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class HttpAgentTransport:
    """Calls a hosted agent endpoint (``POST {base_url}/api/agent``).

    Connection errors, timeouts, 429 and 5xx answers are retried with
    exponential backoff. Whatever is still failing afterwards comes back as an
    unsuccessful ``AgentResult`` carrying a readable error.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str = "",
        timeout_seconds: float = 120.0,
        retry_attempts: int = 4,
        retry_wait=None,
        client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._retry_kwargs = default_retry_kwargs(
            (httpx.TransportError, RetryableStatusError),
            attempts=retry_attempts,
            wait=retry_wait,
        )
        self._client = client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def invoke(self, message: str, agent_id: str, *, session_id: str) -> AgentResult:
        payload = {"message": message, "agent_id": agent_id, "session_id": session_id}
        logger.debug(f"Agent request: agent={agent_id}, session={session_id}, chars={len(message)}")
        try:
            async for attempt in AsyncRetrying(**self._retry_kwargs):
                with attempt:
                    response = await self._post(payload)
        except RetryableStatusError as ex:
            return AgentResult(success=False, error=ex.detail or f"HTTP {ex.status_code}")
        except httpx.TimeoutException:
            return AgentResult(success=False, error=f"Agent request timed out after {self._timeout_seconds:.0f} seconds")
        except httpx.TransportError as ex:
            return AgentResult(success=False, error=f"Agent unreachable: {ex}")

        return self._to_result(response)

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        client = self._get_client()
        response = await client.post("/api/agent", json=payload)
        if response.status_code in _RETRYABLE_STATUS:
            raise RetryableStatusError(response.status_code, _error_detail(response))
        return response

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self._api_key:
                headers["x-api-key"] = self._api_key
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                timeout=self._timeout_seconds,
            )
        return self._client

    def _to_result(self, response: httpx.Response) -> AgentResult:
        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.warning(f"Agent call failed: HTTP {response.status_code} {detail}")
            return AgentResult(success=False, error=detail)

        try:
            body = response.json()
        except ValueError:
            logger.warning("Agent returned a non-JSON body")
            return AgentResult(success=False, error="Agent returned an invalid response")

        if not isinstance(body, dict):
            return AgentResult(success=True, response={"status": "success", "result": body})
        if "success" not in body:
            return AgentResult(success=True, response=body.get("response", body))
        if body.get("success"):
            return AgentResult(success=True, response=body.get("response"))
        error = body.get("error")
        return AgentResult(success=False, response=body.get("response"), error=str(error) if error else None)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    text = response.text.strip()
    if text:
        return f"HTTP {response.status_code}: {text[:200]}"
    return f"HTTP {response.status_code}"
