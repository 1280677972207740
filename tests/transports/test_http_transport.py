import asyncio
import json
import unittest

import httpx
from tenacity import wait_none

from policy_drafter.transports.http_transport import HttpAgentTransport


class HttpAgentTransportTests(unittest.TestCase):
    def setUp(self) -> None:
        self.requests: list[httpx.Request] = []

    def _transport(self, *responses: httpx.Response | Exception, attempts: int = 3) -> HttpAgentTransport:
        queue = list(responses)

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            item = queue.pop(0)
            if isinstance(item, Exception):
                raise item
            return item

        client = httpx.AsyncClient(base_url="https://agent.example", transport=httpx.MockTransport(handler))
        return HttpAgentTransport(
            "https://agent.example",
            timeout_seconds=30,
            retry_attempts=attempts,
            retry_wait=wait_none(),
            client=client,
        )

    def _invoke(self, transport: HttpAgentTransport):
        return asyncio.run(transport.invoke("Draft it", "agent-1", session_id="session_1"))

    def test_posts_message_agent_and_session(self) -> None:
        transport = self._transport(httpx.Response(200, json={"success": True, "response": {"result": "ok"}}))

        result = self._invoke(transport)

        self.assertTrue(result.success)
        self.assertEqual({"result": "ok"}, result.response)
        request = self.requests[0]
        self.assertEqual("POST", request.method)
        self.assertEqual("/api/agent", request.url.path)
        self.assertEqual(
            {"message": "Draft it", "agent_id": "agent-1", "session_id": "session_1"},
            json.loads(request.content),
        )

    def test_agent_reported_failure_passes_error_through(self) -> None:
        transport = self._transport(httpx.Response(200, json={"success": False, "error": "rate limited"}))
        result = self._invoke(transport)
        self.assertFalse(result.success)
        self.assertEqual("rate limited", result.error)

    def test_body_without_success_flag_is_treated_as_response(self) -> None:
        transport = self._transport(
            httpx.Response(200, json={"response": {"result": "a"}}),
            httpx.Response(200, json={"result": "b"}),
            httpx.Response(200, json=["c"]),
        )

        first = self._invoke(transport)
        second = self._invoke(transport)
        third = self._invoke(transport)

        self.assertEqual({"result": "a"}, first.response)
        self.assertEqual({"result": "b"}, second.response)
        self.assertEqual({"status": "success", "result": ["c"]}, third.response)

    def test_retries_server_errors_then_succeeds(self) -> None:
        transport = self._transport(
            httpx.Response(503, text="busy"),
            httpx.ConnectError("refused"),
            httpx.Response(200, json={"success": True, "response": {"result": "ok"}}),
        )

        result = self._invoke(transport)

        self.assertTrue(result.success)
        self.assertEqual(3, len(self.requests))

    def test_exhausted_rate_limit_returns_detail(self) -> None:
        transport = self._transport(
            httpx.Response(429, json={"error": "rate limited"}),
            httpx.Response(429, json={"error": "rate limited"}),
            attempts=2,
        )

        result = self._invoke(transport)

        self.assertFalse(result.success)
        self.assertEqual("rate limited", result.error)
        self.assertEqual(2, len(self.requests))

    def test_timeout_is_reported(self) -> None:
        transport = self._transport(httpx.ReadTimeout("slow"), attempts=1)
        result = self._invoke(transport)
        self.assertEqual("Agent request timed out after 30 seconds", result.error)

    def test_unreachable_agent_is_reported(self) -> None:
        transport = self._transport(httpx.ConnectError("refused"), attempts=1)
        result = self._invoke(transport)
        self.assertFalse(result.success)
        self.assertTrue(result.error.startswith("Agent unreachable"))

    def test_client_errors_are_not_retried(self) -> None:
        transport = self._transport(httpx.Response(400, text="bad agent id"))

        result = self._invoke(transport)

        self.assertFalse(result.success)
        self.assertEqual("HTTP 400: bad agent id", result.error)
        self.assertEqual(1, len(self.requests))

    def test_non_json_body_is_invalid(self) -> None:
        transport = self._transport(httpx.Response(200, text="<html>"))
        result = self._invoke(transport)
        self.assertEqual("Agent returned an invalid response", result.error)


if __name__ == "__main__":
    unittest.main()
