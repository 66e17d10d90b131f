"""Tests for trace payload normalization and transcript ordering."""

from __future__ import annotations

from annotator.models.trace import ChatMessage, Trace
from annotator.services.normalizer import (
    IgnoredPayload,
    MessageListPayload,
    MessagePayload,
    TextPayload,
    classify_payload,
    normalize_trace_messages,
    sort_messages,
)

TS = "2024-05-01T10:00:00Z"


def _roles_and_content(messages: list[ChatMessage]) -> list[tuple[str, object]]:
    return [(m.role, m.content) for m in messages]


class TestClassifyPayload:
    def test_shapes(self) -> None:
        assert isinstance(classify_payload("hi"), TextPayload)
        assert isinstance(classify_payload([]), MessageListPayload)
        assert isinstance(
            classify_payload({"role": "user", "content": "x"}), MessagePayload
        )

    def test_unrecognized_shapes_are_ignored(self) -> None:
        for raw in (None, 42, {"foo": "bar"}, {"role": "user", "content": ""}):
            assert isinstance(classify_payload(raw), IgnoredPayload)


class TestInput:
    def test_plain_string_without_timestamp(self) -> None:
        """A string input becomes exactly one user message."""
        messages = normalize_trace_messages(Trace(id="t", input="hello"))
        assert len(messages) == 1
        assert messages[0].role == "user"
        assert messages[0].content == "hello"
        assert messages[0].timestamp is None

    def test_message_list_defaults_timestamp(self) -> None:
        trace = Trace(
            id="t",
            timestamp=TS,
            input=[
                {"role": "system", "content": "be nice"},
                {"role": "user", "content": "hi", "timestamp": "2024-05-01T09:00:00Z"},
            ],
        )
        messages = normalize_trace_messages(trace)
        # Own timestamp is earlier, so it sorts first.
        assert _roles_and_content(messages) == [("user", "hi"), ("system", "be nice")]
        assert messages[1].timestamp == TS

    def test_message_list_keeps_extra_fields(self) -> None:
        trace = Trace(id="t", input=[{"role": "tool", "content": "42", "name": "calc"}])
        message = normalize_trace_messages(trace)[0]
        assert message.model_extra == {"name": "calc"}

    def test_message_list_skips_non_messages(self) -> None:
        trace = Trace(id="t", input=["loose string", {"content": "no role"}, {"role": "user", "content": "ok"}])
        assert _roles_and_content(normalize_trace_messages(trace)) == [("user", "ok")]

    def test_numeric_epoch_timestamps_are_converted(self) -> None:
        trace = Trace(
            id="t",
            input=[
                {"role": "user", "content": "ms", "timestamp": 1714557600000},
                {"role": "user", "content": "s", "timestamp": 1714554000},
                {"role": "user", "content": "odd", "timestamp": {"at": "noon"}},
            ],
        )
        messages = normalize_trace_messages(trace)
        assert [m.content for m in messages] == ["s", "ms", "odd"]
        assert messages[0].timestamp == "2024-05-01T09:00:00+00:00"
        assert messages[1].timestamp == "2024-05-01T10:00:00+00:00"
        assert messages[2].timestamp is None

    def test_single_message_object(self) -> None:
        trace = Trace(id="t", timestamp=TS, input={"role": "user", "content": "question"})
        messages = normalize_trace_messages(trace)
        assert _roles_and_content(messages) == [("user", "question")]
        assert messages[0].timestamp == TS


class TestOutput:
    def test_text_parts_and_messages_keep_order(self) -> None:
        """``[{text}, {role, content}]`` yields two assistant messages in order."""
        trace = Trace(
            id="t",
            output=[{"text": "hi"}, {"role": "assistant", "content": "bye"}],
        )
        assert _roles_and_content(normalize_trace_messages(trace)) == [
            ("assistant", "hi"),
            ("assistant", "bye"),
        ]

    def test_unmatched_entries_are_dropped(self) -> None:
        trace = Trace(id="t", output=[{"type": "image"}, {"text": ""}, 7, {"text": "kept"}])
        assert _roles_and_content(normalize_trace_messages(trace)) == [("assistant", "kept")]

    def test_string_output(self) -> None:
        trace = Trace(id="t", timestamp=TS, output="answer")
        messages = normalize_trace_messages(trace)
        assert _roles_and_content(messages) == [("assistant", "answer")]
        assert messages[0].timestamp == TS

    def test_single_message_object_used_as_is(self) -> None:
        trace = Trace(id="t", timestamp=TS, output={"role": "assistant", "content": "done"})
        messages = normalize_trace_messages(trace)
        assert _roles_and_content(messages) == [("assistant", "done")]
        assert messages[0].timestamp is None

    def test_unrecognized_payloads_produce_nothing(self) -> None:
        trace = Trace(id="t", input={"query": "x"}, output=12.5)
        assert normalize_trace_messages(trace) == []


class TestOrdering:
    def test_input_precedes_output(self) -> None:
        trace = Trace(id="t", timestamp=TS, input="q", output="a")
        assert _roles_and_content(normalize_trace_messages(trace)) == [
            ("user", "q"),
            ("assistant", "a"),
        ]

    def test_sorted_ascending_by_timestamp(self) -> None:
        messages = [
            ChatMessage(role="user", content="late", timestamp="2024-05-01T12:00:00Z"),
            ChatMessage(role="user", content="early", timestamp="2024-05-01T08:00:00+00:00"),
            ChatMessage(role="user", content="middle", timestamp="2024-05-01T10:00:00"),
        ]
        assert [m.content for m in sort_messages(messages)] == ["early", "middle", "late"]

    def test_missing_timestamps_preserve_order(self) -> None:
        messages = [
            ChatMessage(role="user", content="a"),
            ChatMessage(role="assistant", content="b"),
            ChatMessage(role="user", content="c", timestamp="not a date"),
        ]
        assert [m.content for m in sort_messages(messages)] == ["a", "b", "c"]
