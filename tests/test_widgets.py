"""Widget behavior tests run inside a minimal host app."""

from __future__ import annotations

from datetime import datetime
import unittest

from textual.app import App, ComposeResult

from lingua_chat.transcript import MessageRole, TranscriptStore
from lingua_chat.widgets import ConversationView, InputBox, MessageBubble, StatusBar


class _ConversationHost(App[None]):
    def __init__(self, transcript: TranscriptStore) -> None:
        super().__init__()
        self.view = ConversationView(
            welcome_text="Welcome [friend]!",
            clock=lambda: datetime(2024, 1, 1, 9, 30),
        )
        self.view.attach_transcript(transcript)

    def compose(self) -> ComposeResult:
        yield self.view


class _InputHost(App[None]):
    def __init__(self) -> None:
        super().__init__()
        self.box = InputBox(template_text="Translate [text] to French")
        self.submissions = 0

    def compose(self) -> ComposeResult:
        yield self.box

    def on_input_box_submit_requested(self, _message: InputBox.SubmitRequested) -> None:
        self.submissions += 1


class _StatusHost(App[None]):
    def compose(self) -> ComposeResult:
        yield StatusBar(id="status_bar")


class MessageBubbleTests(unittest.TestCase):
    """Role labels."""

    def test_role_prefix(self) -> None:
        self.assertEqual(MessageBubble("x", role="user").role_prefix, "You")
        self.assertEqual(MessageBubble("x", role="assistant").role_prefix, "Assistant")
        self.assertIn("Error", MessageBubble("x", role="error").role_prefix)
        self.assertTrue(MessageBubble("x", role="error").has_class("role-error"))


class ConversationViewTests(unittest.IsolatedAsyncioTestCase):
    """Welcome removal, bubbles, and pending replies."""

    async def test_welcome_removed_on_first_append_only(self) -> None:
        transcript = TranscriptStore()
        app = _ConversationHost(transcript)
        async with app.run_test() as pilot:
            self.assertEqual(len(app.query(".welcome-message")), 1)

            transcript.append(MessageRole.USER, "hello")
            transcript.append(MessageRole.ASSISTANT, "bonjour")
            await pilot.pause()

            self.assertEqual(len(app.query(".welcome-message")), 0)
            self.assertEqual(len(app.view.bubbles), 2)
            self.assertEqual(len(app.query(".message-user")), 1)
            self.assertEqual(len(app.query(".message-assistant")), 1)
            self.assertEqual(app.view.bubbles[0].timestamp, "09:30")

    async def test_pending_reply_replaced_by_final_entry(self) -> None:
        transcript = TranscriptStore()
        app = _ConversationHost(transcript)
        async with app.run_test() as pilot:
            transcript.append(MessageRole.USER, "hello")
            app.view.show_pending_reply("Bon")
            app.view.show_pending_reply("Bonjo")
            await pilot.pause()
            self.assertEqual(len(app.query(".message-pending")), 1)

            transcript.append(MessageRole.ASSISTANT, "Bonjour")
            await pilot.pause()
            self.assertEqual(len(app.query(".message-pending")), 0)
            self.assertEqual(app.view.bubbles[-1].message_content, "Bonjour")

    async def test_clear_does_not_restore_welcome(self) -> None:
        transcript = TranscriptStore()
        app = _ConversationHost(transcript)
        async with app.run_test() as pilot:
            transcript.append(MessageRole.ERROR, "boom")
            await pilot.pause()
            transcript.clear()
            app.view.clear_messages()
            await pilot.pause()

            self.assertEqual(app.view.bubbles, [])
            self.assertEqual(len(app.query(MessageBubble)), 0)
            self.assertFalse(app.view.has_welcome)
            self.assertEqual(len(app.query(".welcome-message")), 0)

    async def test_no_welcome_when_transcript_already_started(self) -> None:
        transcript = TranscriptStore()
        transcript.append(MessageRole.USER, "earlier")
        app = _ConversationHost(transcript)
        async with app.run_test():
            self.assertFalse(app.view.has_welcome)
            self.assertEqual(len(app.query(".welcome-message")), 0)


class InputBoxTests(unittest.IsolatedAsyncioTestCase):
    """Draft editing, keys, and busy state."""

    async def test_enter_posts_submit_request(self) -> None:
        app = _InputHost()
        async with app.run_test() as pilot:
            app.box.text_area.focus()
            await pilot.press("a", "enter")
            await pilot.pause()
            self.assertEqual(app.submissions, 1)
            self.assertEqual(app.box.text_area.text, "a")

    async def test_shift_enter_inserts_newline(self) -> None:
        app = _InputHost()
        async with app.run_test() as pilot:
            app.box.text_area.focus()
            await pilot.press("a", "shift+enter", "b")
            await pilot.pause()
            self.assertEqual(app.box.text_area.text, "a\nb")
            self.assertEqual(app.submissions, 0)

    async def test_send_button_posts_submit_request(self) -> None:
        app = _InputHost()
        async with app.run_test() as pilot:
            await pilot.click("#send_button")
            await pilot.pause()
            self.assertEqual(app.submissions, 1)

    async def test_set_draft_positions_cursor(self) -> None:
        app = _InputHost()
        async with app.run_test() as pilot:
            app.box.set_draft("line one\nsay [x] now")
            await pilot.pause()
            self.assertEqual(app.box.text_area.cursor_location, (1, 5))
            app.box.set_draft("no marker")
            self.assertEqual(app.box.text_area.cursor_location, (0, 9))
            self.assertEqual(app.box.get_draft(), "no marker")

    async def test_busy_disables_controls_and_template(self) -> None:
        app = _InputHost()
        async with app.run_test() as pilot:
            app.box.set_busy(True)
            await pilot.pause()
            self.assertTrue(app.box.text_area.disabled)
            self.assertTrue(app.query_one("#send_button").disabled)
            self.assertTrue(app.query_one("#use_template").disabled)

            app.box.use_template()
            self.assertEqual(app.box.text_area.text, "")

            app.box.set_busy(False)
            await pilot.pause()
            self.assertFalse(app.box.text_area.disabled)
            self.assertIs(app.focused, app.box.text_area)

    async def test_template_text_is_shown_literally(self) -> None:
        app = _InputHost()
        async with app.run_test():
            template = app.query_one("#prompt_template")
            self.assertIn("[text]", str(template.render()))


class StatusBarTests(unittest.IsolatedAsyncioTestCase):
    """Status segments."""

    async def test_set_status_updates_labels(self) -> None:
        app = _StatusHost()
        async with app.run_test():
            bar = app.query_one(StatusBar)
            bar.set_status(
                credential_configured=False,
                model="test/model",
                message_count=3,
                phase="SENDING",
            )
            self.assertIn("no key", str(app.query_one("#status_credential").render()))
            self.assertIn("test/model", str(app.query_one("#status_model").render()))
            self.assertIn("3", str(app.query_one("#status_messages").render()))
            self.assertIn("SENDING", str(app.query_one("#status_phase").render()))


if __name__ == "__main__":
    unittest.main()
