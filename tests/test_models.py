"""Tests for transcript and request records."""

from __future__ import annotations

from datetime import datetime, timezone
import unittest

from kirin_chat.models import (
    ASSISTANT,
    SERVER,
    USER,
    ContentEntry,
    Message,
    OutgoingTurnRequest,
    Participant,
    ParticipantKind,
)


class ParticipantTests(unittest.TestCase):
    """Validate the fixed participants."""

    def test_fixed_participants_have_distinct_ids(self) -> None:
        ids = {USER.id, ASSISTANT.id, SERVER.id}
        self.assertEqual(ids, {"user", "smile", "server"})
        self.assertEqual(ASSISTANT.display_name, "Kirin")
        self.assertIsNone(USER.avatar)

    def test_blank_display_name_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Participant(ParticipantKind.USER, id="u", display_name=" ")


class MessageTests(unittest.TestCase):
    """Validate message construction rules."""

    def test_default_timestamp_is_timezone_aware(self) -> None:
        message = Message(author=USER, text="hi")
        self.assertIsNotNone(message.created_at.tzinfo)

    def test_naive_timestamp_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Message(author=USER, text="hi", created_at=datetime(2024, 1, 1))

    def test_non_participant_author_is_rejected(self) -> None:
        with self.assertRaises(TypeError):
            Message(author={"id": "user"}, text="hi")  # type: ignore[arg-type]

    def test_with_text_keeps_author_and_timestamp(self) -> None:
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        message = Message(author=ASSISTANT, text="Hel", created_at=created)
        updated = message.with_text("Hello")
        self.assertEqual(updated.text, "Hello")
        self.assertEqual(updated.created_at, created)
        self.assertEqual(message.text, "Hel")


class OutgoingTurnRequestTests(unittest.TestCase):
    """Validate the wire payload of a turn."""

    def test_payload_uses_backend_field_names(self) -> None:
        request = OutgoingTurnRequest(
            model="deepseek-r1:70b",
            thread_id=0,
            stream=True,
            messages=(
                ContentEntry(role="system", content="be nice"),
                ContentEntry(role="user", content="hi"),
            ),
        )
        self.assertEqual(
            request.to_payload(),
            {
                "model": "deepseek-r1:70b",
                "threadId": 0,
                "stream": True,
                "messages": [
                    {"role": "system", "content": "be nice"},
                    {"role": "user", "content": "hi"},
                ],
            },
        )


if __name__ == "__main__":
    unittest.main()
