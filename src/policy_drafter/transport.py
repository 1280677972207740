from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class AgentResult:
    success: bool
    response: Any = None
    error: str | None = None


@runtime_checkable
class AgentTransport(Protocol):
    async def invoke(self, message: str, agent_id: str, *, session_id: str) -> AgentResult:
        """Send one instruction to the agent.

        ``session_id`` correlates calls of the same drafting session so the agent
        can keep conversational context between a draft and its revisions.
        Failures the agent reports are returned as ``AgentResult(success=False)``;
        exceptions are left to the caller.
        """
        ...


def create_transport(
    transport_name: str,
    *,
    base_url: str = "",
    api_key: str = "",
    model: str = "",
    max_tokens: int = 8192,
    timeout_seconds: float = 120.0,
) -> AgentTransport:
    """Factory: create an AgentTransport by name."""
    name = transport_name.strip().lower()
    if name == "http":
        from policy_drafter.transports.http_transport import HttpAgentTransport
        return HttpAgentTransport(base_url, api_key=api_key, timeout_seconds=timeout_seconds)
    if name == "anthropic":
        from policy_drafter.transports.anthropic_transport import AnthropicAgentTransport
        return AnthropicAgentTransport(api_key, model=model, max_tokens=max_tokens)
    raise ValueError(f"Unknown transport: {transport_name!r}. Supported: 'http', 'anthropic'")
