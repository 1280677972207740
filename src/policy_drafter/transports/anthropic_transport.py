from __future__ import annotations

import anthropic
from loguru import logger
from tenacity import retry

from policy_drafter.prompts import build_system_prompt
from policy_drafter.transport import AgentResult
from policy_drafter.transports.common import default_retry_kwargs


class AnthropicAgentTransport:
    """Talks to Claude directly, standing in for a hosted drafting agent.

    Conversation history is kept per ``session_id`` so that a revision request
    reaches the model together with the draft it refers to.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "claude-sonnet-4-5-20250929",
        max_tokens: int = 8192,
        temperature: float = 0.3,
        max_history_messages: int = 20,
    ):
        self._client = anthropic.AsyncAnthropic(api_key=api_key)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._max_history_messages = max_history_messages
        self._histories: dict[str, list[dict]] = {}

    def history(self, session_id: str) -> list[dict]:
        return list(self._histories.get(session_id, []))

    async def invoke(self, message: str, agent_id: str, *, session_id: str) -> AgentResult:
        history = self._histories.setdefault(session_id, [])
        messages = history + [{"role": "user", "content": message}]
        try:
            text = await self._create_message(messages)
        except anthropic.APIStatusError as ex:
            logger.warning(f"Anthropic request failed for session {session_id}: {ex.status_code} {ex.message}")
            return AgentResult(success=False, error=ex.message)
        except anthropic.APIConnectionError as ex:
            logger.warning(f"Anthropic unreachable for session {session_id}: {ex}")
            return AgentResult(success=False, error="Agent unreachable. Please try again.")

        history.append({"role": "user", "content": message})
        history.append({"role": "assistant", "content": text})
        self._trim_history(session_id)
        return AgentResult(success=True, response={"status": "success", "result": text})

    def _trim_history(self, session_id: str) -> None:
        history = self._histories[session_id]
        if self._max_history_messages <= 0 or len(history) <= self._max_history_messages:
            return
        remove_count = len(history) - self._max_history_messages
        # Keep user/assistant alternation intact.
        remove_count += remove_count % 2
        logger.info(f"Trimmed {remove_count} oldest message(s) from agent history of {session_id}")
        del history[:remove_count]

    @retry(
        **default_retry_kwargs((
            anthropic.RateLimitError,
            anthropic.APIConnectionError,
            anthropic.APITimeoutError,
        ))
    )
    async def _create_message(self, messages: list[dict]) -> str:
        logger.debug(f"API request: model={self._model}, messages={len(messages)}")
        response = await self._client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            system=build_system_prompt(),
            messages=messages,
        )
        usage = response.usage
        logger.debug(
            f"API response: stop_reason={response.stop_reason}, "
            f"input_tokens={usage.input_tokens}, output_tokens={usage.output_tokens}"
        )
        return "".join(block.text for block in response.content if block.type == "text")
