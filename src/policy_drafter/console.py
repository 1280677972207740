from __future__ import annotations

from datetime import datetime
from pathlib import Path

from policy_drafter.activity import ActivityMonitor
from policy_drafter.commands.router import CommandRouter
from policy_drafter.drafting_controller import DraftingController, DraftOutcome
from policy_drafter.knowledge.service import KnowledgeBaseService
from policy_drafter.policy_record import PolicyRecord
from policy_drafter.prompts import REGULATIONS, SCOPES
from policy_drafter.samples import SAMPLE_POLICY, SAMPLE_SCENARIO
from policy_drafter.sessions.models import Role, Session

_HELP_LINES = (
    "Type a scenario to generate a draft, or use a command:",
    "  /revise <feedback>      revise the latest draft",
    "  /show                   show the latest draft",
    "  /history                show this session's turns",
    "  /export [path]          save the latest draft as markdown",
    "  /regulation <name>      " + ", ".join(REGULATIONS),
    "  /scope <name>           " + ", ".join(SCOPES),
    "  /new | /sessions | /select <id or number>",
    "  /docs | /upload <path> | /delete <file name>",
    "  /activity               agent activity for this session",
    "  /sample                 toggle the sample draft (no agent calls)",
)


def _short_date(epoch_millis: int) -> str:
    return datetime.fromtimestamp(epoch_millis / 1000).strftime("%b %d %H:%M")


class DraftingConsole:
    """Line-oriented front end over the drafting controller."""

    _LINE_PREFIX = "drafter> "

    def __init__(
        self,
        controller: DraftingController,
        *,
        activity: ActivityMonitor,
        knowledge: KnowledgeBaseService | None = None,
        export_dir: str | None = None,
    ):
        self._controller = controller
        self._activity = activity
        self._knowledge = knowledge
        self._export_dir = Path(export_dir) if export_dir else Path.cwd()
        self.sample_mode = False
        self._router = CommandRouter(
            on_help=self._on_help,
            on_session=self._handle_session_command,
            on_revise=self._handle_revise,
            on_setting=self._handle_setting,
            on_draft=self._handle_draft_command,
            on_knowledge=self._handle_knowledge_command,
            on_unknown=self._on_unknown_command,
        )

    @property
    def prompt(self) -> str:
        if self.sample_mode:
            return "[sample] you> "
        view = self._controller.view
        return f"[{view.regulation} / {view.scope}] you> "

    async def handle(self, user_input: str) -> None:
        if await self._router.try_handle(user_input):
            return
        if self.sample_mode:
            self._print("Sample mode is on. Type /sample to turn it off before drafting.")
            return
        self._print("Drafting...")
        outcome = await self._controller.generate(user_input)
        self._report(outcome, show_policy=True)

    def _print(self, text: str) -> None:
        print(f"{self._LINE_PREFIX}{text}")

    def _report(self, outcome: DraftOutcome, *, show_policy: bool) -> None:
        if outcome is DraftOutcome.REJECTED:
            self._print("Nothing to send, or a request is still running for this session.")
            return
        if outcome is DraftOutcome.FAILED:
            self._print(f"Error: {self._controller.error}")
            return
        policy = self._controller.current_policy()
        if policy is None:
            return
        if show_policy:
            for line in self.format_policy_lines(policy):
                print(line)
        else:
            self._print(f"Revised: {policy.title} (use /show to view)")

    async def _on_help(self) -> None:
        for line in _HELP_LINES:
            self._print(line)

    def _on_unknown_command(self, command: str) -> None:
        self._print(f"Unknown command: {command}. Type /help for commands.")

    async def _handle_revise(self, feedback: str) -> None:
        if self.sample_mode:
            self._print("Sample mode is on. Type /sample to turn it off before revising.")
            return
        if self._controller.current_policy() is None:
            self._print("There is no draft to revise yet.")
            return
        if not feedback:
            self._print("Usage: /revise <feedback>")
            return
        self._print("Revising...")
        outcome = await self._controller.revise(feedback)
        self._report(outcome, show_policy=False)

    async def _handle_setting(self, name: str, value: str) -> None:
        choices = REGULATIONS if name == "regulation" else SCOPES
        match = next((c for c in choices if c.lower() == value.lower()), None)
        if match is None:
            self._print(f"Usage: /{name} <{' | '.join(choices)}>")
            return
        if name == "regulation":
            self._controller.view.regulation = match
        else:
            self._controller.view.scope = match
        self._print(f"{name.capitalize()} set to {match}")

    async def _handle_session_command(self, command: str, argument: str) -> None:
        if command == "new":
            session = self._controller.create_session()
            self._print(f"Started {session.id}")
            return
        sessions = self._controller.sessions
        if command == "sessions":
            current_id = self._controller.current_session().id
            for index, session in enumerate(sessions, start=1):
                print(self.format_session_list_entry(index, session, active_session_id=current_id))
            return

        target = argument
        if argument.isdigit() and 1 <= int(argument) <= len(sessions):
            target = sessions[int(argument) - 1].id
        if not target or not self._controller.select_session(target):
            self._print(f"Session not found: {argument or '(none)'}")
            return
        session = self._controller.current_session()
        self._print(f"Switched to {session.title} [{session.id}]")

    async def _handle_draft_command(self, command: str, argument: str) -> None:
        if command == "history":
            for line in self.format_history_lines(self._controller.current_session()):
                print(line)
            return
        if command == "activity":
            feed = self._activity.feed_for(self._controller.current_session().id)
            state = "processing" if feed.processing else "idle"
            self._print(f"Agent {feed.active_agent or '-'}: {state}, {len(feed.events)} event(s)")
            for message in feed.thinking_messages[-5:]:
                self._print(f"  ... {message}")
            return
        if command == "sample":
            self._toggle_sample_mode()
            return

        policy = SAMPLE_POLICY if self.sample_mode else self._controller.current_policy()
        if policy is None:
            self._print("No draft yet. Describe a scenario to generate one.")
            return
        if command == "show":
            for line in self.format_policy_lines(policy):
                print(line)
            return
        path = Path(argument) if argument else self._export_dir / policy.download_filename()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(policy.to_markdown(), encoding="utf-8")
        self._print(f"Saved {path}")

    def _toggle_sample_mode(self) -> None:
        self.sample_mode = not self.sample_mode
        if not self.sample_mode:
            self._print("Sample mode off.")
            return
        self._print("Sample mode on. Showing a sample draft for:")
        self._print(f"  {SAMPLE_SCENARIO}")
        for line in self.format_policy_lines(SAMPLE_POLICY):
            print(line)

    async def _handle_knowledge_command(self, command: str, argument: str) -> None:
        if self._knowledge is None:
            self._print("Knowledge base is not configured.")
            return
        if command == "docs":
            await self._knowledge.refresh()
            if not self._knowledge.documents:
                self._print("No documents in the knowledge base.")
            for doc in self._knowledge.documents:
                self._print(f"- {doc.file_name}")
            return
        if not argument:
            self._print(f"Usage: /{command} <{'path' if command == 'upload' else 'file name'}>")
            return
        if command == "upload":
            await self._knowledge.upload(argument)
            self._print(self._knowledge.upload_status)
            return
        if await self._knowledge.delete(argument):
            self._print(f"Deleted {argument}")
        else:
            self._print(f"Could not delete {argument}")

    def format_session_list_entry(self, index: int, session: Session, *, active_session_id: str) -> str:
        marker = "*" if session.id == active_session_id else " "
        return (
            f"{self._LINE_PREFIX}{marker} {index}. {session.title} [{session.id}] "
            f"({len(session.entries)} turns, updated {_short_date(session.updated_at)})"
        )

    def format_history_lines(self, session: Session) -> list[str]:
        if not session.entries:
            return [f"{self._LINE_PREFIX}No turns yet in {session.title}."]
        lines = []
        for entry in session.entries:
            who = "you" if entry.role is Role.USER else "agent"
            lines.append(f"{self._LINE_PREFIX}[{_short_date(entry.timestamp)}] {who}: {entry.content}")
        return lines

    def format_policy_lines(self, policy: PolicyRecord) -> list[str]:
        lines = [
            f"{self._LINE_PREFIX}{policy.title}",
            f"{self._LINE_PREFIX}[{policy.regulation_framework}] [{policy.scope_type}]",
        ]
        if policy.key_sections:
            lines.append(f"{self._LINE_PREFIX}Key sections: {', '.join(policy.key_sections)}")
        lines.append("")
        lines.extend(policy.content.splitlines())
        if policy.compliance_notes:
            lines.extend(["", "Compliance notes:", policy.compliance_notes])
        if policy.revision_suggestions:
            lines.extend(["", "Revision suggestions:", policy.revision_suggestions])
        return lines
