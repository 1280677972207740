import asyncio
import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from policy_drafter.activity import ActivityMonitor
from policy_drafter.console import DraftingConsole
from policy_drafter.drafting_controller import DraftingController
from policy_drafter.sessions import InMemoryKeyValueStore, SessionStore
from policy_drafter.transport import AgentResult
from tests.sessions.base import FakeClock

_POLICY_JSON = (
    '{"policy_title": "EU Launch Policy", "policy_content": "## Data We Collect\\nEmail only.", '
    '"key_sections": ["Data We Collect"], "compliance_notes": "Covers Art. 13."}'
)


class _QueuedTransport:
    def __init__(self, *results: AgentResult):
        self._results = list(results)
        self.messages: list[str] = []

    async def invoke(self, message: str, agent_id: str, *, session_id: str) -> AgentResult:
        self.messages.append(message)
        return self._results.pop(0)


class DraftingConsoleTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = SessionStore(InMemoryKeyValueStore(), clock=FakeClock())
        self.store.initialize()
        self.transport = _QueuedTransport(
            AgentResult(success=True, response={"result": _POLICY_JSON}),
            AgentResult(success=True, response={"result": '{"policy_title": "EU Launch Policy v2"}'}),
        )
        self.controller = DraftingController(self.store, self.transport, ActivityMonitor(), agent_id="agent-1")
        self.console = DraftingConsole(self.controller, activity=ActivityMonitor(), export_dir=self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *inputs: str) -> str:
        out = io.StringIO()
        with redirect_stdout(out):
            for text in inputs:
                asyncio.run(self.console.handle(text))
        return out.getvalue()

    def test_prompt_shows_selection(self) -> None:
        self.assertEqual("[GDPR / Full Policy] you> ", self.console.prompt)
        self._run("/regulation ccpa", "/scope specific section")
        self.assertEqual("[CCPA / Specific Section] you> ", self.console.prompt)

    def test_unknown_setting_value_shows_usage(self) -> None:
        output = self._run("/regulation HIPAA")
        self.assertIn("Usage: /regulation <GDPR | CCPA", output)
        self.assertEqual("GDPR", self.controller.view.regulation)

    def test_plain_text_generates_and_prints_draft(self) -> None:
        output = self._run("Launch in EU")

        self.assertIn("drafter> EU Launch Policy", output)
        self.assertIn("Key sections: Data We Collect", output)
        self.assertIn("Email only.", output)
        self.assertIn("Covers Art. 13.", output)
        self.assertIn("Scenario: Launch in EU", self.transport.messages[0])

    def test_failed_generation_prints_error(self) -> None:
        self.transport._results = [AgentResult(success=False, error="rate limited")]
        output = self._run("Launch in EU")
        self.assertIn("drafter> Error: rate limited", output)

    def test_revise_requires_a_draft_and_feedback(self) -> None:
        self.assertIn("There is no draft to revise yet.", self._run("/revise shorter"))
        self._run("Launch in EU")
        self.assertIn("Usage: /revise <feedback>", self._run("/revise"))

        output = self._run("/revise Make it shorter")

        self.assertIn("Revised: EU Launch Policy v2", output)
        self.assertEqual("Revision: Make it shorter", self.store.current_session().entries[2].content)

    def test_export_writes_markdown(self) -> None:
        self._run("Launch in EU")

        output = self._run("/export")

        path = Path(self._tmp.name) / "eu_launch_policy.md"
        self.assertIn(f"Saved {path}", output)
        self.assertTrue(path.read_text(encoding="utf-8").startswith("# EU Launch Policy\n\n## Data We Collect"))

    def test_show_without_draft(self) -> None:
        self.assertIn("No draft yet.", self._run("/show"))

    def test_session_commands(self) -> None:
        first_id = self.store.current_session_id
        self._run("Launch in EU")

        output = self._run("/new", "/sessions")
        self.assertIn("Started ", output)
        self.assertIn("* 1. New Draft", output)
        self.assertIn(f"  2. EU Launch Policy [{first_id}]", output)

        output = self._run("/select 2")
        self.assertIn(f"Switched to EU Launch Policy [{first_id}]", output)
        self.assertEqual(first_id, self.store.current_session_id)

        self.assertIn("Session not found: nope", self._run("/select nope"))

    def test_history_lists_turns(self) -> None:
        self.assertIn("No turns yet in New Draft.", self._run("/history"))
        self._run("Launch in EU")

        output = self._run("/history")

        self.assertIn("you: Launch in EU", output)
        self.assertIn("agent: EU Launch Policy", output)

    def test_sample_mode_shows_canned_draft_without_agent_calls(self) -> None:
        output = self._run("/sample")

        self.assertTrue(self.console.sample_mode)
        self.assertEqual("[sample] you> ", self.console.prompt)
        self.assertIn("Privacy Policy for Mobile Application - GDPR Compliance", output)
        self.assertIn("launching a new mobile application in the EU", output)

        output = self._run("Launch in EU", "/revise shorter")
        self.assertIn("Sample mode is on. Type /sample to turn it off before drafting.", output)
        self.assertIn("before revising", output)
        self.assertEqual([], self.transport.messages)
        self.assertEqual((), self.store.current_session().entries)

    def test_sample_mode_export_and_toggle_off(self) -> None:
        self._run("/sample")
        self._run("/export")

        path = Path(self._tmp.name) / "privacy_policy_for_mobile_application_-_gdpr_compliance.md"
        self.assertTrue(path.read_text(encoding="utf-8").startswith("# Privacy Policy for Mobile Application"))

        self.assertIn("Sample mode off.", self._run("/sample"))
        self.assertIn("No draft yet.", self._run("/show"))

    def test_knowledge_commands_without_knowledge_base(self) -> None:
        self.assertIn("Knowledge base is not configured.", self._run("/docs"))

    def test_unknown_command(self) -> None:
        self.assertIn("Unknown command: /nope", self._run("/nope"))


if __name__ == "__main__":
    unittest.main()
