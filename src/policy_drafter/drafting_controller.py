from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from loguru import logger

from policy_drafter.activity import ActivityMonitor
from policy_drafter.normalizer import normalize_policy
from policy_drafter.policy_record import PolicyRecord
from policy_drafter.prompts import DEFAULT_REGULATION, DEFAULT_SCOPE, build_generate_message, build_revise_message
from policy_drafter.sessions.models import ConversationEntry, Role, Session
from policy_drafter.sessions.session_store import SessionStore
from policy_drafter.transport import AgentTransport

OUTPUT_TAB = "output"

GENERATE_FAILED = "Failed to generate policy. Please try again."
GENERATE_UNEXPECTED = "An unexpected error occurred. Please try again."
REVISE_FAILED = "Failed to revise policy."
REVISE_UNEXPECTED = "An unexpected error occurred during revision."


class DraftingState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"


class DraftOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REJECTED = "rejected"


@dataclass
class ViewState:
    """Presentation state the controller drives but does not render."""

    regulation: str = DEFAULT_REGULATION
    scope: str = DEFAULT_SCOPE
    error: str | None = None
    active_tab: str = OUTPUT_TAB
    sidebar_open: bool = False


class DraftingController:
    def __init__(
        self,
        store: SessionStore,
        transport: AgentTransport,
        activity: ActivityMonitor,
        *,
        agent_id: str,
        view: ViewState | None = None,
    ):
        self._store = store
        self._transport = transport
        self._activity = activity
        self._agent_id = agent_id
        self.view = view or ViewState()
        self._outstanding: set[str] = set()

        store.add_created_listener(self._on_session_created)
        store.add_selected_listener(self._on_session_selected)

    @property
    def error(self) -> str | None:
        return self.view.error

    @property
    def loading(self) -> bool:
        return self.state() is DraftingState.AWAITING_RESPONSE

    def state(self, session_id: str | None = None) -> DraftingState:
        sid = session_id or self._store.current_session_id
        if sid in self._outstanding:
            return DraftingState.AWAITING_RESPONSE
        return DraftingState.IDLE

    @property
    def sessions(self) -> tuple[Session, ...]:
        return self._store.sessions

    def current_session(self) -> Session:
        return self._store.current_session()

    def current_policy(self) -> PolicyRecord | None:
        return self._store.current_session().last_policy()

    def create_session(self) -> Session:
        return self._store.create_session()

    def select_session(self, session_id: str) -> bool:
        return self._store.select_session(session_id)

    async def generate(
        self,
        prompt: str,
        regulation: str | None = None,
        scope: str | None = None,
    ) -> DraftOutcome:
        scenario = prompt.strip()
        session_id = self._store.current_session_id
        if not scenario or session_id in self._outstanding:
            return DraftOutcome.REJECTED

        regulation = regulation or self.view.regulation
        scope = scope or self.view.scope
        return await self._round_trip(
            session_id,
            user_content=scenario,
            message=build_generate_message(scenario, regulation, scope),
            regulation=regulation,
            scope=scope,
            failure_message=GENERATE_FAILED,
            unexpected_message=GENERATE_UNEXPECTED,
            show_output=True,
        )

    async def revise(self, feedback: str) -> DraftOutcome:
        feedback = feedback.strip()
        session_id = self._store.current_session_id
        if not feedback or session_id in self._outstanding:
            return DraftOutcome.REJECTED

        previous = self._store.get_session(session_id).last_policy()
        return await self._round_trip(
            session_id,
            user_content=f"Revision: {feedback}",
            message=build_revise_message(feedback),
            regulation=previous.regulation_framework if previous else self.view.regulation,
            scope=previous.scope_type if previous else self.view.scope,
            failure_message=REVISE_FAILED,
            unexpected_message=REVISE_UNEXPECTED,
            show_output=False,
        )

    async def _round_trip(
        self,
        session_id: str,
        *,
        user_content: str,
        message: str,
        regulation: str,
        scope: str,
        failure_message: str,
        unexpected_message: str,
        show_output: bool,
    ) -> DraftOutcome:
        # Everything below targets session_id as captured here, even if the
        # user switches or creates sessions while the agent is working.
        log = logger.bind(session_id=session_id)
        self._outstanding.add(session_id)
        self.view.error = None
        feed = self._activity.feed_for(session_id)

        try:
            self._store.append_entry(
                session_id,
                ConversationEntry(role=Role.USER, content=user_content, timestamp=self._store.now()),
            )
            feed.set_processing(True)
            result = await self._transport.invoke(message, self._agent_id, session_id=session_id)
            if not result.success:
                log.warning(f"Agent call failed: {result.error}")
                self.view.error = result.error or failure_message
                return DraftOutcome.FAILED

            policy = normalize_policy(result, regulation=regulation, scope=scope)
            self._store.append_entry(
                session_id,
                ConversationEntry(
                    role=Role.ASSISTANT,
                    content=policy.title,
                    policy_data=policy,
                    timestamp=self._store.now(),
                ),
            )
            self.view.error = None
            if show_output:
                self.view.active_tab = OUTPUT_TAB
            log.info(f"Draft '{policy.title}' added")
            return DraftOutcome.SUCCEEDED
        except Exception:
            log.exception("Unexpected error while drafting")
            self.view.error = unexpected_message
            return DraftOutcome.FAILED
        finally:
            self._outstanding.discard(session_id)
            feed.set_processing(False)

    def _on_session_created(self, session: Session) -> None:
        self.view.error = None
        self._activity.reset(session.id)

    def _on_session_selected(self, session_id: str) -> None:
        self.view.error = None
        self.view.sidebar_open = False
