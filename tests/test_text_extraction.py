import unittest

from policy_drafter.text_extraction import extract_plain_text


class ExtractPlainTextTests(unittest.TestCase):
    def test_string_passes_through(self) -> None:
        self.assertEqual("hello", extract_plain_text("hello"))

    def test_follows_result(self) -> None:
        self.assertEqual("draft", extract_plain_text({"status": "success", "result": "draft"}))

    def test_prefers_result_text_over_message(self) -> None:
        payload = {"result": {"text": "from result"}, "message": "from message"}
        self.assertEqual("from result", extract_plain_text(payload))

    def test_falls_back_to_message_when_result_empty(self) -> None:
        self.assertEqual("note", extract_plain_text({"result": {}, "message": "note"}))

    def test_empty_success_stub_is_empty(self) -> None:
        self.assertEqual("", extract_plain_text({"status": "success", "result": {}}))

    def test_lists_are_joined(self) -> None:
        self.assertEqual("a\nb", extract_plain_text([{"text": "a"}, "", {"content": "b"}]))

    def test_unknown_shapes_yield_empty_text(self) -> None:
        for payload in (None, True, {"x": 1}, object()):
            with self.subTest(payload=payload):
                self.assertEqual("", extract_plain_text(payload))

    def test_deep_nesting_is_bounded(self) -> None:
        payload: dict = {"result": "bottom"}
        for _ in range(50):
            payload = {"result": payload}
        self.assertEqual("", extract_plain_text(payload))


if __name__ == "__main__":
    unittest.main()
