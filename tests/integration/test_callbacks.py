"""
Integration tests for the Dash callbacks.

The registered functions are pulled out of the app's callback map and called
directly, so they run against the real engine, store and layout without a
browser.
"""

from unittest.mock import patch

import pytest
from dash import no_update
from quanta.engine import NEW_CHAT_MESSAGE, State
from quanta.layout import FALLBACK_PROMPT, SUGGESTED_PROMPTS
from quanta.models import ASSISTANT_ROLE, USER_ROLE


@pytest.fixture
def get_callback(test_app):
    def _get(name):
        for spec in test_app.callback_map.values():
            func = spec.get("callback")
            if func is not None and func.__name__ == name:
                return func.__wrapped__
        raise LookupError(name)

    return _get


class TestSendMessage:
    """The first half of a turn: show the prompt and clear the composer."""

    @pytest.mark.parametrize("user_input", [None, "", "   ", "\n"])
    def test_blank_input_is_a_no_op(self, test_app, get_callback, user_input):
        before = test_app.engine.messages

        result = get_callback("send_message")(1, user_input)

        assert all(value is no_update for value in result)
        assert test_app.engine.messages == before
        assert test_app.engine.pending is None

    def test_no_clicks_is_a_no_op(self, test_app, get_callback):
        result = get_callback("send_message")(0, "Hello")
        assert all(value is no_update for value in result)

    def test_prompt_is_shown_before_reply(self, test_app, get_callback):
        rendered, value, pending, disabled = get_callback("send_message")(1, "Hello")

        assert value == ""
        assert disabled is True
        assert pending["prompt"] == "Hello"
        assert len(rendered) == 2
        assert test_app.engine.messages[-1].role == USER_ROLE
        assert test_app.engine.state is State.AWAITING_REPLY

        get_callback("fetch_reply")(pending)

    def test_input_truncated_to_max_chars(self, test_app, get_callback):
        max_chars = test_app.layout_builder.max_chars

        _, _, pending, _ = get_callback("send_message")(1, "x" * (max_chars + 500))

        assert len(test_app.engine.messages[-1].content) == max_chars
        assert len(pending["prompt"]) == max_chars
        get_callback("fetch_reply")(pending)


class TestFetchReply:
    """The second half of a turn, chained on the pending prompt store."""

    def test_reply_completes_turn(self, test_app, get_callback):
        _, _, pending, _ = get_callback("send_message")(1, "Hello")

        rendered, disabled = get_callback("fetch_reply")(pending)

        assert disabled is False
        assert len(rendered) == 3
        assert test_app.engine.messages[-1].role == ASSISTANT_ROLE
        assert "Hello" in test_app.engine.messages[-1].content
        assert test_app.engine.state is State.IDLE
        assert test_app.engine.pending is None

    def test_empty_store_is_a_no_op(self, get_callback):
        assert get_callback("fetch_reply")(None) == (no_update, no_update)

    def test_consecutive_turns(self, test_app, get_callback):
        for prompt in ["one", "two"]:
            _, _, pending, _ = get_callback("send_message")(1, prompt)
            get_callback("fetch_reply")(pending)

        roles = [m.role for m in test_app.engine.messages]
        assert roles == [ASSISTANT_ROLE, USER_ROLE, ASSISTANT_ROLE, USER_ROLE, ASSISTANT_ROLE]


class TestLoadConversation:
    def test_renders_current_conversation(self, test_app, get_callback):
        rendered, pending = get_callback("load_conversation")("/")

        assert len(rendered) == len(test_app.engine.messages)
        assert pending is no_update

    def test_resumes_pending_prompt(self, test_app, get_callback):
        get_callback("send_message")(1, "Hello")

        rendered, pending = get_callback("load_conversation")("/")

        assert pending["prompt"] == "Hello"
        get_callback("fetch_reply")(pending)
        assert test_app.engine.pending is None


class TestCreateNewChat:
    def test_new_chat(self, test_app, get_callback):
        get_callback("send_message")(1, "Hello")

        rendered, disabled = get_callback("create_new_chat")(1)

        assert len(rendered) == 1
        assert disabled is False
        assert [m.content for m in test_app.engine.messages] == [NEW_CHAT_MESSAGE]

    def test_new_chat_frees_composer_for_next_prompt(self, test_app, get_callback):
        get_callback("send_message")(1, "abandoned")
        get_callback("create_new_chat")(1)

        _, _, pending, _ = get_callback("send_message")(2, "Hello again")
        get_callback("fetch_reply")(pending)

        contents = [m.content for m in test_app.engine.messages]
        assert contents[:2] == [NEW_CHAT_MESSAGE, "Hello again"]
        assert len(contents) == 3

    def test_no_clicks_is_a_no_op(self, get_callback):
        assert get_callback("create_new_chat")(0) == (no_update, no_update)


class TestComposerCallbacks:
    def test_insert_known_suggestion(self, get_callback):
        label = next(iter(SUGGESTED_PROMPTS))
        with patch("quanta.callbacks.callback_context") as ctx:
            ctx.triggered_id = {"type": "suggestion", "index": label}
            value = get_callback("insert_suggestion")([1, 0, 0, 0])

        assert value == SUGGESTED_PROMPTS[label]

    def test_insert_unknown_suggestion_falls_back(self, get_callback):
        with patch("quanta.callbacks.callback_context") as ctx:
            ctx.triggered_id = {"type": "suggestion", "index": "Unknown"}
            value = get_callback("insert_suggestion")([1])

        assert value == FALLBACK_PROMPT

    def test_no_suggestion_clicked(self, get_callback):
        assert get_callback("insert_suggestion")([0, 0, 0, 0]) is no_update

    def test_char_count(self, get_callback):
        assert get_callback("update_char_count")("abc") == "3/3,000"
        assert get_callback("update_char_count")(None) == "0/3,000"
