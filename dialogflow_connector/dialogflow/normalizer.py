"""Normalization of Dialogflow query results into bot messages.

A query result carries a list of fulfillment messages, each holding
exactly one variant (text, card, carousel, ...). Every supported variant
becomes one BotMessage; all of them share the same NLP annotation and
the raw query result as source data.

Query results are handled in their JSON form (snake_case keys) as
produced by ``message_to_dict``.
"""

import mimetypes
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from google.protobuf import json_format

from dialogflow_connector.dialogflow.nlp import extract_entities, extract_intent
from dialogflow_connector.models import NLP, BotMessage, Button, Card, Media
from dialogflow_connector.observability.logging import get_logger
from dialogflow_connector.observability.metrics import (
    BOT_MESSAGES,
    SKIPPED_FULFILLMENT_MESSAGES,
)

logger = get_logger(__name__)

DEFAULT_PLATFORM = "PLATFORM_UNSPECIFIED"
UNKNOWN_MIME_TYPE = "application/unknown"


def message_to_dict(message: Any) -> dict[str, Any]:
    """JSON form of a proto-plus SDK message, keeping proto field names."""
    return json_format.MessageToDict(
        type(message).pb(message),
        preserving_proto_field_name=True,
    )


def guess_mime_type(uri: str | None) -> str:
    if not uri:
        return UNKNOWN_MIME_TYPE
    mime_type, _ = mimetypes.guess_type(uri)
    return mime_type or UNKNOWN_MIME_TYPE


def _media(uri: str | None, alt_text: str | None = None) -> Media:
    return Media(media_uri=uri, mime_type=guess_mime_type(uri), alt_text=alt_text)


def _image(image: Mapping[str, Any] | None) -> Media | None:
    if not image:
        return None
    return _media(image.get("image_uri"), image.get("accessibility_text"))


def _first(values: list[Any] | None) -> Any:
    return values[0] if values else None


def is_default_platform(message: Mapping[str, Any]) -> bool:
    return message.get("platform", DEFAULT_PLATFORM) in (DEFAULT_PLATFORM, "", None)


def select_fulfillment_messages(
    messages: Iterable[Mapping[str, Any]],
    output_platform: str | None = None,
) -> list[Mapping[str, Any]]:
    """Pick the fulfillment messages meant for the output platform.

    Without an output platform only default-platform messages are kept.
    With one, its messages are kept, falling back to the default-platform
    messages when the agent defines none for it.
    """
    messages = list(messages)
    if output_platform:
        selected = [m for m in messages if m.get("platform") == output_platform]
        if selected:
            return selected
    return [m for m in messages if is_default_platform(m)]


# Variant handlers: fulfillment variant payload -> BotMessage fields


def _text(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {"message_text": _first(payload.get("text"))}


def _simple_responses(payload: Mapping[str, Any]) -> dict[str, Any]:
    response = _first(payload.get("simple_responses")) or {}
    return {
        "message_text": response.get("text_to_speech") or response.get("display_text")
    }


def _image_message(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {"media": [_image(payload) or _media(None)]}


def _quick_replies(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {"buttons": [Button(text=reply) for reply in payload.get("quick_replies", [])]}


def _card(payload: Mapping[str, Any]) -> dict[str, Any]:
    image_uri = payload.get("image_uri")
    buttons = payload.get("buttons")
    card = Card(
        text=payload.get("title"),
        subtext=payload.get("subtitle"),
        image=_media(image_uri) if image_uri else None,
        buttons=[
            Button(text=button.get("text"), payload=button.get("postback"))
            for button in buttons
        ] if buttons else None,
    )
    return {"message_text": payload.get("title"), "cards": [card]}


def _basic_card(payload: Mapping[str, Any]) -> dict[str, Any]:
    buttons = payload.get("buttons")
    card = Card(
        text=payload.get("title"),
        subtext=payload.get("subtitle") or payload.get("formatted_text"),
        image=_image(payload.get("image")),
        buttons=[
            Button(
                text=button.get("title"),
                payload=(button.get("open_uri_action") or {}).get("uri"),
            )
            for button in buttons
        ] if buttons else None,
    )
    return {"message_text": payload.get("title"), "cards": [card]}


def _item_card(item: Mapping[str, Any]) -> Card:
    key = (item.get("info") or {}).get("key")
    return Card(
        text=item.get("title"),
        subtext=item.get("description"),
        image=_image(item.get("image")),
        buttons=[Button(text=key)] if key else None,
    )


def _list_select(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "message_text": payload.get("title"),
        "cards": [_item_card(item) for item in payload.get("items", [])],
    }


def _carousel_select(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {"cards": [_item_card(item) for item in payload.get("items", [])]}


def _suggestions(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "buttons": [
            Button(text=suggestion.get("title"))
            for suggestion in payload.get("suggestions", [])
        ]
    }


def _link_out_suggestion(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "buttons": [
            Button(text=payload.get("destination_name"), payload=payload.get("uri"))
        ]
    }


# Checked in order; the first variant present wins
VARIANT_HANDLERS: tuple[tuple[str, Callable[[Mapping[str, Any]], dict[str, Any]]], ...] = (
    ("text", _text),
    ("simple_responses", _simple_responses),
    ("image", _image_message),
    ("quick_replies", _quick_replies),
    ("card", _card),
    ("basic_card", _basic_card),
    ("list_select", _list_select),
    ("carousel_select", _carousel_select),
    ("suggestions", _suggestions),
    ("link_out_suggestion", _link_out_suggestion),
)


def fulfillment_variant(message: Mapping[str, Any]) -> str | None:
    """Name of the supported variant a fulfillment message carries."""
    for variant, _ in VARIANT_HANDLERS:
        if variant in message:
            return variant
    return None


def normalize_fulfillment_message(
    message: Mapping[str, Any],
    nlp: NLP,
    source_data: dict[str, Any] | None = None,
) -> BotMessage | None:
    """Convert one fulfillment message, None for unsupported variants."""
    for variant, handler in VARIANT_HANDLERS:
        if variant in message:
            fields = handler(message[variant] or {})
            return BotMessage(nlp=nlp, source_data=source_data, **fields)
    return None


class ResponseNormalizer:
    """Turns query results into the bot messages of one turn."""

    def __init__(
        self,
        output_platform: str | None = None,
        force_intent_resolution: bool = True,
        fallback_intents: Iterable[str] = (),
        record_metrics: bool = True,
    ) -> None:
        """Initialize the normalizer.

        Args:
            output_platform: Platform whose fulfillment messages are used
            force_intent_resolution: Emit an NLP-only message when no
                fulfillment message could be converted
            fallback_intents: Intent names that mark incomprehension
            record_metrics: Count emitted and skipped messages
        """
        self._output_platform = output_platform
        self._force_intent_resolution = force_intent_resolution
        self._fallback_intents = list(fallback_intents)
        self._record_metrics = record_metrics

    def nlp(self, query_result: Mapping[str, Any]) -> NLP:
        return NLP(
            intent=extract_intent(query_result, self._fallback_intents),
            entities=extract_entities(query_result.get("parameters")),
        )

    def normalize(self, query_result: dict[str, Any]) -> list[BotMessage]:
        """Bot messages for a query result, in fulfillment order."""
        nlp = self.nlp(query_result)
        messages: list[BotMessage] = []

        selected = select_fulfillment_messages(
            query_result.get("fulfillment_messages", []),
            self._output_platform,
        )
        for fulfillment in selected:
            bot_message = normalize_fulfillment_message(fulfillment, nlp, query_result)
            if bot_message is None:
                logger.debug(
                    "unsupported_fulfillment_message",
                    variants=sorted(k for k in fulfillment if k != "platform"),
                )
                if self._record_metrics:
                    SKIPPED_FULFILLMENT_MESSAGES.inc()
                continue
            if self._record_metrics:
                BOT_MESSAGES.labels(variant=fulfillment_variant(fulfillment)).inc()
            messages.append(bot_message)

        if not messages and self._force_intent_resolution:
            if self._record_metrics:
                BOT_MESSAGES.labels(variant="nlp_only").inc()
            messages.append(BotMessage(nlp=nlp, source_data=query_result))

        return messages
