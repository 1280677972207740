import unittest

from policy_drafter.policy_record import PolicyRecord
from policy_drafter.sessions import ConversationEntry, ConversationLog, Role
from tests.sessions.base import assistant_entry, user_entry


class ConversationLogTests(unittest.TestCase):
    def test_append_preserves_call_order(self) -> None:
        log = ConversationLog()
        entries = [user_entry(f"u{i}", timestamp=i) for i in range(5)]
        for entry in entries:
            log = log.append(entry)

        self.assertEqual(5, len(log))
        self.assertEqual(tuple(entries), log.entries)
        self.assertEqual(entries, list(log))

    def test_append_returns_new_log(self) -> None:
        original = ConversationLog()
        extended = original.append(user_entry("hello"))
        self.assertEqual(0, len(original))
        self.assertEqual(1, len(extended))

    def test_last_with_policy_data_scans_from_tail(self) -> None:
        log = ConversationLog()
        self.assertIsNone(log.last_with_policy_data())

        log = log.append(user_entry("u1")).append(assistant_entry("First"))
        log = log.append(user_entry("u2")).append(assistant_entry("Second")).append(user_entry("u3"))

        latest = log.last_with_policy_data()
        self.assertIsNotNone(latest)
        self.assertEqual("Second", latest.policy_data.title)

    def test_last_with_policy_data_none_without_assistant_drafts(self) -> None:
        log = ConversationLog((user_entry("a"), user_entry("b")))
        self.assertIsNone(log.last_with_policy_data())

    def test_user_entries_cannot_carry_policy(self) -> None:
        with self.assertRaises(ValueError):
            ConversationEntry(role=Role.USER, content="x", timestamp=1, policy_data=PolicyRecord())


if __name__ == "__main__":
    unittest.main()
