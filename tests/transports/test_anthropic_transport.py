import asyncio
import unittest
from types import SimpleNamespace

import anthropic
import httpx

from policy_drafter.normalizer import normalize_policy
from policy_drafter.transports.anthropic_transport import AnthropicAgentTransport


def _text_response(text: str) -> SimpleNamespace:
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text)],
        stop_reason="end_turn",
        usage=SimpleNamespace(input_tokens=10, output_tokens=20),
    )


class _FakeMessages:
    def __init__(self, outcomes: list):
        self._outcomes = outcomes
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append({**kwargs, "messages": list(kwargs["messages"])})
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class AnthropicAgentTransportTests(unittest.TestCase):
    def _transport(self, *outcomes, max_history_messages: int = 20) -> AnthropicAgentTransport:
        transport = AnthropicAgentTransport("test-key", model="test-model", max_history_messages=max_history_messages)
        self.messages = _FakeMessages(list(outcomes))
        transport._client = SimpleNamespace(messages=self.messages)
        return transport

    def test_success_wraps_text_for_normalizer(self) -> None:
        transport = self._transport(_text_response('{"policy_title": "EU Launch Policy"}'))

        result = asyncio.run(transport.invoke("Draft it", "agent-1", session_id="s1"))

        self.assertTrue(result.success)
        self.assertEqual("success", result.response["status"])
        policy = normalize_policy(result, regulation="GDPR", scope="Full Policy")
        self.assertEqual("EU Launch Policy", policy.title)
        call = self.messages.calls[0]
        self.assertEqual("test-model", call["model"])
        self.assertIn("JSON", call["system"])

    def test_history_is_kept_per_session(self) -> None:
        transport = self._transport(_text_response("one"), _text_response("two"), _text_response("other"))

        asyncio.run(transport.invoke("Draft it", "agent-1", session_id="s1"))
        asyncio.run(transport.invoke("Revise it", "agent-1", session_id="s1"))
        asyncio.run(transport.invoke("Draft", "agent-1", session_id="s2"))

        self.assertEqual(3, len(self.messages.calls[1]["messages"]))
        self.assertEqual("one", self.messages.calls[1]["messages"][1]["content"])
        self.assertEqual(1, len(self.messages.calls[2]["messages"]))
        self.assertEqual(4, len(transport.history("s1")))

    def test_history_is_trimmed_in_pairs(self) -> None:
        transport = self._transport(_text_response("one"), _text_response("two"), max_history_messages=3)

        asyncio.run(transport.invoke("first", "agent-1", session_id="s1"))
        asyncio.run(transport.invoke("second", "agent-1", session_id="s1"))

        history = transport.history("s1")
        self.assertEqual(["second", "two"], [m["content"] for m in history])
        self.assertEqual("user", history[0]["role"])

    def test_status_error_becomes_failure(self) -> None:
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        error = anthropic.BadRequestError(
            message="prompt is too long",
            response=httpx.Response(400, request=request),
            body=None,
        )
        transport = self._transport(error)

        result = asyncio.run(transport.invoke("Draft it", "agent-1", session_id="s1"))

        self.assertFalse(result.success)
        self.assertEqual("prompt is too long", result.error)
        self.assertEqual([], transport.history("s1"))


if __name__ == "__main__":
    unittest.main()
