"""Runtime-style tests for the real Textual app class."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path
import tempfile
import unittest

from lingua_chat.app import LinguaChatApp
from lingua_chat.exceptions import ServiceUnavailableError
from lingua_chat.session import SubmitOutcome
from lingua_chat.state import SessionPhase
from lingua_chat.transcript import MessageRole


class _RuntimeFakeClient:
    def __init__(
        self,
        fragments: list[str] | None = None,
        error: Exception | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.fragments = fragments if fragments is not None else ["Bon", "jour"]
        self.error = error
        self.gate = gate
        self.calls: list[str] = []

    async def stream_completion(self, user_message: str) -> AsyncIterator[str]:
        self.calls.append(user_message)
        if self.gate is not None:
            await self.gate.wait()
        for fragment in self.fragments:
            yield fragment
        if self.error is not None:
            raise self.error


class AppRuntimeTests(unittest.IsolatedAsyncioTestCase):
    """Exercise actions against the real app class."""

    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self.config_path = Path(self._temp_dir.name) / "config.toml"

    def tearDown(self) -> None:
        self._temp_dir.cleanup()

    def _build_app(
        self,
        client: _RuntimeFakeClient | None = None,
        environ: dict[str, str] | None = None,
    ) -> LinguaChatApp:
        app = LinguaChatApp(
            config_path=self.config_path,
            environ={"HF_API_KEY": "hf_test"} if environ is None else environ,
            client=client or _RuntimeFakeClient(),
        )
        app._copied_text = ""
        app.copy_to_clipboard = lambda value: setattr(app, "_copied_text", value)  # type: ignore[method-assign]
        return app

    async def test_send_appends_user_and_assistant(self) -> None:
        client = _RuntimeFakeClient()
        app = self._build_app(client)
        async with app.run_test() as pilot:
            self.assertTrue(app.conversation.has_welcome)
            app.input_box.text_area.text = "hello"

            outcome = await app.send_user_message()
            await pilot.pause()

            self.assertEqual(outcome, SubmitOutcome.COMPLETED)
            self.assertEqual(client.calls, ["hello"])
            self.assertEqual(
                [(m.role, m.text) for m in app.transcript.messages],
                [(MessageRole.USER, "hello"), (MessageRole.ASSISTANT, "Bonjour")],
            )
            self.assertFalse(app.conversation.has_welcome)
            self.assertEqual(len(app.query(".welcome-message")), 0)
            self.assertEqual(len(app.conversation.bubbles), 2)
            self.assertEqual(len(app.query(".message-pending")), 0)
            self.assertEqual(app.input_box.text_area.text, "")
            self.assertFalse(app.input_box.text_area.disabled)
            self.assertEqual(app.session.phase, SessionPhase.IDLE)
            self.assertEqual(app.sub_title, "Ready")

    async def test_enter_key_submits_draft(self) -> None:
        client = _RuntimeFakeClient()
        app = self._build_app(client)
        async with app.run_test() as pilot:
            app.input_box.text_area.focus()
            await pilot.press("h", "i", "enter")
            for _ in range(20):
                if len(app.transcript) >= 2:
                    break
                await pilot.pause(0.05)

            self.assertEqual(client.calls, ["hi"])
            self.assertEqual(len(app.transcript), 2)

    async def test_empty_draft_is_ignored(self) -> None:
        client = _RuntimeFakeClient()
        app = self._build_app(client)
        async with app.run_test():
            app.input_box.text_area.text = "   "
            outcome = await app.send_user_message()
            self.assertEqual(outcome, SubmitOutcome.IGNORED_EMPTY)
            self.assertEqual(app.sub_title, "Cannot send an empty message.")
            self.assertEqual(len(app.transcript), 0)
            self.assertTrue(app.conversation.has_welcome)
            self.assertEqual(client.calls, [])

    async def test_missing_key_shows_error_entry(self) -> None:
        client = _RuntimeFakeClient()
        app = self._build_app(client, environ={})
        async with app.run_test() as pilot:
            app.input_box.text_area.text = "hello"
            outcome = await app.send_user_message()
            await pilot.pause()

            self.assertEqual(outcome, SubmitOutcome.MISSING_CREDENTIAL)
            self.assertEqual(app.sub_title, "API key missing")
            self.assertEqual(len(app.transcript), 1)
            self.assertEqual(app.transcript.messages[0].role, MessageRole.ERROR)
            self.assertTrue(
                app.transcript.messages[0].text.startswith("API key not found")
            )
            self.assertFalse(app.conversation.has_welcome)
            self.assertEqual(client.calls, [])

    async def test_service_unavailable_shows_error_entry(self) -> None:
        client = _RuntimeFakeClient(
            fragments=[], error=ServiceUnavailableError("Model is currently loading")
        )
        app = self._build_app(client)
        async with app.run_test() as pilot:
            app.input_box.text_area.text = "hello"
            outcome = await app.send_user_message()
            await pilot.pause()

            self.assertEqual(outcome, SubmitOutcome.FAILED)
            self.assertEqual(app.sub_title, "Request failed")
            self.assertEqual(
                app.transcript.messages[-1].text,
                "Model is loading. Please wait a moment.",
            )
            self.assertEqual(len(app.query(".message-error")), 1)
            self.assertFalse(app.input_box.text_area.disabled)

    async def test_input_disabled_while_busy(self) -> None:
        gate = asyncio.Event()
        client = _RuntimeFakeClient(gate=gate)
        app = self._build_app(client)
        async with app.run_test() as pilot:
            app.input_box.text_area.text = "first"
            task = asyncio.create_task(app.send_user_message())
            await asyncio.sleep(0)

            self.assertTrue(app.session.busy)
            self.assertTrue(app.input_box.text_area.disabled)
            self.assertTrue(app.query_one("#send_button").disabled)
            self.assertTrue(app.activity.busy)
            self.assertEqual(await app.send_user_message(), SubmitOutcome.REJECTED_BUSY)

            app.action_clear_transcript()
            self.assertEqual(app.sub_title, "Clear is available only when idle.")

            gate.set()
            self.assertEqual(await task, SubmitOutcome.COMPLETED)
            await pilot.pause()
            self.assertFalse(app.input_box.text_area.disabled)
            self.assertFalse(app.activity.busy)
            self.assertEqual(client.calls, ["first"])

    async def test_use_template_places_cursor_in_placeholder(self) -> None:
        app = self._build_app()
        async with app.run_test() as pilot:
            app.action_use_template()
            await pilot.pause()

            area = app.input_box.text_area
            self.assertEqual(area.text, "Translate [text] to French")
            self.assertEqual(area.cursor_location, (0, 11))
            self.assertIs(app.focused, area)

    async def test_template_button_loads_template(self) -> None:
        app = self._build_app()
        async with app.run_test() as pilot:
            await pilot.click("#use_template")
            await pilot.pause()
            self.assertEqual(
                app.input_box.text_area.text, "Translate [text] to French"
            )

    async def test_clear_and_copy_actions(self) -> None:
        app = self._build_app()
        async with app.run_test() as pilot:
            app.action_copy_last_message()
            self.assertEqual(app.sub_title, "No assistant message available to copy.")

            app.input_box.text_area.text = "hello"
            await app.send_user_message()
            await pilot.pause()

            app.action_copy_last_message()
            self.assertEqual(app._copied_text, "Bonjour")
            self.assertEqual(app.sub_title, "Copied latest assistant message.")

            app.action_clear_transcript()
            await pilot.pause()
            self.assertEqual(app.sub_title, "Transcript cleared.")
            self.assertEqual(len(app.transcript), 0)
            self.assertEqual(app.conversation.bubbles, [])
            self.assertFalse(app.conversation.has_welcome)
            self.assertEqual(len(app.query(".welcome-message")), 0)

    async def test_keymap_follows_config(self) -> None:
        self.config_path.write_text(
            '[keybinds]\nuse_template = "f2"\n', encoding="utf-8"
        )
        app = self._build_app()
        async with app.run_test() as pilot:
            await pilot.press("f2")
            await pilot.pause()
            self.assertEqual(
                app.input_box.text_area.text, "Translate [text] to French"
            )

    async def test_status_bar_tracks_transcript(self) -> None:
        app = self._build_app()
        async with app.run_test() as pilot:
            app.input_box.text_area.text = "hello"
            await app.send_user_message()
            await pilot.pause()
            messages_label = app.query_one("#status_messages")
            self.assertIn("Messages: 2", str(messages_label.render()))
            credential_label = app.query_one("#status_credential")
            self.assertIn("key set", str(credential_label.render()))


if __name__ == "__main__":
    unittest.main()
