"""Unit tests for the chat models, message store and result formatting."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from dataverse.backend import QueryExecutionResult
from dataverse.chat import (
    Message,
    MessageStore,
    Role,
    build_markdown_table,
    build_result_section,
    welcome_message,
)
from dataverse.chat.formatting import NO_FIELDS_TEXT, NO_ROWS_TEXT, format_cell
from dataverse.streaming import Channel


class TestMessage:
    """Tests for the Message model."""

    def test_defaults(self):
        """Test that a new message starts empty with a generated id."""
        message = Message(role=Role.USER)

        assert message.id
        assert message.content == ""
        assert message.detail is None
        assert message.result is None
        assert not message.has_query

    def test_ids_are_unique(self):
        assert Message(role=Role.USER).id != Message(role=Role.USER).id

    def test_id_is_frozen(self):
        """Test that the id cannot be reassigned."""
        message = Message(role=Role.ASSISTANT)

        with pytest.raises(ValueError):
            message.id = "other"

    def test_has_query_ignores_blank_detail(self):
        assert not Message(role=Role.ASSISTANT, detail="  \n").has_query
        assert Message(role=Role.ASSISTANT, detail="SELECT 1").has_query

    def test_welcome_message(self):
        """Test the greeting at the top of a fresh thread."""
        message = welcome_message()

        assert message.role == Role.ASSISTANT
        assert message.title == "Welcome to DataVerse Chat"
        assert message.tokens == 386
        assert message.content


class TestMessageStore:
    """Tests for MessageStore."""

    def test_create_and_get(self, store):
        """Test that created messages are kept in order."""
        first = store.create_message(Message(role=Role.USER, content="hi"))
        second = store.create_message(Message(role=Role.ASSISTANT))

        assert [m.id for m in store.messages] == [first.id, second.id]
        assert store.get(first.id) is first
        assert store.last() is second
        assert first.id in store
        assert len(store) == 2

    def test_duplicate_id_rejected(self, store):
        message = store.create_message(Message(role=Role.USER))

        with pytest.raises(ValueError):
            store.create_message(Message(id=message.id, role=Role.USER))

    def test_get_unknown_raises(self, store):
        """Test that unknown ids raise KeyError while find returns None."""
        with pytest.raises(KeyError):
            store.get("missing")
        assert store.find("missing") is None

    def test_append_starts_missing_field_from_empty(self, store):
        """Test appending to a field that does not exist yet."""
        message = store.create_message(Message(role=Role.ASSISTANT))

        store.append_to_field(message.id, Channel.RESULT, "| a |")
        store.append_to_field(message.id, "result", "\n| 1 |")

        assert store.get(message.id).result == "| a |\n| 1 |"

    def test_unknown_field_rejected(self, store):
        message = store.create_message(Message(role=Role.ASSISTANT))

        with pytest.raises(ValueError):
            store.append_to_field(message.id, "title", "x")

    def test_subscribers_see_every_mutation(self, store):
        """Test the events emitted for create, append, set and reset."""
        events = []
        unsubscribe = store.subscribe(events.append)

        message = store.create_message(Message(role=Role.ASSISTANT))
        store.append_to_field(message.id, Channel.CONTENT, "Here")
        store.set_field(message.id, Channel.RESULT, "")
        store.reset([welcome_message()])

        assert [e.kind for e in events] == ["created", "appended", "set", "reset"]
        assert events[1].field == Channel.CONTENT
        assert events[1].fragment == "Here"
        assert len(store) == 1

        unsubscribe()
        store.create_message(Message(role=Role.USER))
        assert len(events) == 4

    @given(st.lists(st.text(), max_size=20))
    def test_appends_concatenate(self, fragments: list[str]):
        """Property test: a field equals the join of its appends."""
        store = MessageStore()
        message = store.create_message(Message(role=Role.ASSISTANT))
        for fragment in fragments:
            store.append_to_field(message.id, Channel.CONTENT, fragment)

        assert store.get(message.id).content == "".join(fragments)


class TestFormatCell:
    """Tests for table cell rendering."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, ""),
            (1, "1"),
            (2.5, "2.5"),
            ("x", "x"),
            (True, "true"),
            (False, "false"),
            ({"k": 1}, '{"k":1}'),
            ([1, "a"], '[1,"a"]'),
        ],
    )
    def test_format_cell(self, value, expected):
        assert format_cell(value) == expected


class TestBuildMarkdownTable:
    """Tests for build_markdown_table."""

    def test_rows_become_table(self):
        """Test header, separator and body rows in input order."""
        table = build_markdown_table([{"a": 1, "b": "x"}, {"a": 2, "b": "y"}])

        assert table.splitlines() == [
            "| a | b |",
            "| --- | --- |",
            "| 1 | x |",
            "| 2 | y |",
        ]

    def test_no_rows(self):
        assert build_markdown_table([]) == NO_ROWS_TEXT

    def test_no_fields(self):
        assert build_markdown_table([{}]) == NO_FIELDS_TEXT

    def test_non_mapping_first_row_has_no_fields(self):
        """Test that a first row without keys yields the no-fields text."""
        assert build_markdown_table([None, {"a": 1}]) == NO_FIELDS_TEXT

    def test_non_mapping_later_row_renders_empty(self):
        table = build_markdown_table([{"a": 1}, None])

        assert table.splitlines()[-1] == "|  |"

    def test_columns_from_first_row(self):
        """Test that later rows are read with the first row's keys."""
        table = build_markdown_table([{"a": 1}, {"b": 2}])

        assert table.splitlines()[-1] == "|  |"


class TestBuildResultSection:
    """Tests for build_result_section."""

    def test_section_with_row_count(self):
        """Test the heading, row count and table layout."""
        result = QueryExecutionResult(data=[{"n": 3}], row_count=1)

        assert build_result_section(result) == (
            "\n\n### Query Results\nRows returned: 1\n| n |\n| --- |\n| 3 |"
        )

    def test_section_without_row_count(self):
        section = build_result_section(QueryExecutionResult(data=[]))

        assert "Rows returned" not in section
        assert section.endswith("No rows returned.")
