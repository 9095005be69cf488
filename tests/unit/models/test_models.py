"""Tests for message and context models."""

import pytest
from pydantic import ValidationError

from dialogflow_connector.models import (
    BotMessage,
    Button,
    Card,
    DialogflowContext,
    Media,
    UserMessage,
)


class TestUserMessage:
    """Tests for UserMessage."""

    def test_from_framework_dict(self) -> None:
        """Framework field names are understood."""
        message = UserMessage.model_validate({
            "messageText": "hi",
            "buttons": [{"text": "Yes", "payload": "YES"}],
            "SET_DIALOGFLOW_CONTEXT": {"ctx": 2},
            "SET_DIALOGFLOW_QUERYPARAMS": {"timeZone": "UTC"},
            "sender": "me",
        })

        assert message.message_text == "hi"
        assert message.buttons == [Button(text="Yes", payload="YES")]
        assert message.set_dialogflow_context == {"ctx": 2}
        assert message.set_dialogflow_queryparams == {"timeZone": "UTC"}

    def test_unknown_fields_kept(self) -> None:
        """Other framework fields are preserved."""
        message = UserMessage.model_validate({"messageText": "hi", "sender": "me"})
        assert message.model_extra == {"sender": "me"}

    def test_defaults(self) -> None:
        """An empty message is valid."""
        message = UserMessage()
        assert message.message_text is None
        assert message.buttons == []
        assert message.set_dialogflow_context is None


class TestBotMessage:
    """Tests for BotMessage."""

    def test_dump_by_alias(self) -> None:
        """Dumps use the framework's field names."""
        message = BotMessage(
            message_text="Hi",
            cards=[Card(text="c", image=Media(media_uri="https://x/a.png", mime_type="image/png"))],
        )

        data = message.model_dump(by_alias=True, exclude_none=True)

        assert data["sender"] == "bot"
        assert data["messageText"] == "Hi"
        assert data["cards"][0]["image"] == {"mediaUri": "https://x/a.png", "mimeType": "image/png"}
        assert data["nlp"] == {"intent": {}, "entities": []}

    def test_sender_is_bot(self) -> None:
        """Only bot messages can be created."""
        with pytest.raises(ValidationError):
            BotMessage(sender="me")


class TestDialogflowContext:
    """Tests for DialogflowContext."""

    def test_short_name(self) -> None:
        context = DialogflowContext(name="projects/p/agent/sessions/s/contexts/welcome")
        assert context.short_name == "welcome"
        assert context.lifespan_count == 1

    def test_request_includes_parameters(self) -> None:
        """Parameters are part of the request when present."""
        context = DialogflowContext(name="n", lifespan_count=3, parameters={"a": {"b": 1}})

        assert context.to_request() == {
            "name": "n",
            "lifespan_count": 3,
            "parameters": {"a": {"b": 1}},
        }

    def test_frozen(self) -> None:
        """Contexts are immutable; merging replaces them."""
        context = DialogflowContext(name="n")
        with pytest.raises(ValidationError):
            context.lifespan_count = 5
