"""Framework-neutral message models.

Field aliases follow the camelCase names the test framework uses, so
messages can be validated from and dumped to the framework's dicts
with ``by_alias=True``.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class FrameworkModel(BaseModel):
    """Base for models exchanged with the test framework."""

    model_config = ConfigDict(populate_by_name=True)


class Button(FrameworkModel):
    """A clickable button, quick reply or suggestion chip."""

    text: str | None = Field(default=None, description="Button label")
    payload: Any = Field(default=None, description="Postback value or event")


class Media(FrameworkModel):
    """An image or other attachment."""

    media_uri: str | None = Field(default=None, alias="mediaUri")
    mime_type: str = Field(default="application/unknown", alias="mimeType")
    alt_text: str | None = Field(default=None, alias="altText")


class Card(FrameworkModel):
    """A rich card with optional image and buttons."""

    text: str | None = None
    subtext: str | None = None
    image: Media | None = None
    buttons: list[Button] | None = None


class Intent(FrameworkModel):
    """Intent recognized for a turn."""

    name: str | None = None
    confidence: float | None = None
    incomprehension: bool | None = Field(
        default=None, description="Set when a fallback intent matched"
    )


class Entity(FrameworkModel):
    """A single flattened intent parameter."""

    name: str
    value: str


class NLP(FrameworkModel):
    """Intent and entity annotations attached to every bot message."""

    intent: Intent = Field(default_factory=Intent)
    entities: list[Entity] = Field(default_factory=list)


class UserMessage(FrameworkModel):
    """A user turn as handed over by the test framework.

    Besides text and buttons the framework may attach contexts to set
    and query parameters to override for this turn.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    message_text: str | None = Field(default=None, alias="messageText")
    buttons: list[Button] = Field(default_factory=list)
    set_dialogflow_context: dict[str, Any] | None = Field(
        default=None, alias="SET_DIALOGFLOW_CONTEXT"
    )
    set_dialogflow_queryparams: dict[str, Any] | None = Field(
        default=None, alias="SET_DIALOGFLOW_QUERYPARAMS"
    )


class BotMessage(FrameworkModel):
    """A normalized bot reply delivered to the test framework."""

    sender: Literal["bot"] = "bot"
    message_text: str | None = Field(default=None, alias="messageText")
    media: list[Media] | None = None
    buttons: list[Button] | None = None
    cards: list[Card] | None = None
    nlp: NLP = Field(default_factory=NLP)
    source_data: dict[str, Any] | None = Field(
        default=None, alias="sourceData", description="Raw query result"
    )
