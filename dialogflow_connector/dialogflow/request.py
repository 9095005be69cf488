"""Detect-intent request construction.

Builds the query input for a user turn and keeps the ordered set of
contexts that goes out with the next query.
"""

import json
import re
from collections.abc import Mapping
from typing import Any

from dialogflow_connector.dialogflow.clients import context_path
from dialogflow_connector.models import DialogflowContext, UserMessage

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Convert top-level camelCase keys (``languageCode``) to snake_case."""
    return {_CAMEL_BOUNDARY.sub("_", key).lower(): value for key, value in data.items()}


def build_query_input(
    message: UserMessage,
    language_code: str,
    button_events: bool = True,
) -> dict[str, Any]:
    """Build the query input for a user turn.

    A pressed button is sent as an event when button events are enabled:
    a JSON object payload is used as the event itself, any other payload
    (or the button text) becomes the event name.
    """
    if button_events and message.buttons:
        button = message.buttons[0]
        if button.text or button.payload:
            return {"event": _event_input(button.payload or button.text, language_code)}

    return {
        "text": {
            "text": message.message_text or "",
            "language_code": language_code,
        }
    }


def _event_input(payload: Any, language_code: str) -> dict[str, Any]:
    event: dict[str, Any] = {"language_code": language_code}

    if isinstance(payload, Mapping):
        parsed: Any = payload
    else:
        try:
            parsed = json.loads(payload)
        except (TypeError, json.JSONDecodeError):
            parsed = None

    if isinstance(parsed, Mapping):
        event.update(snake_case_keys(parsed))
    else:
        event["name"] = str(payload)
    return event


def parse_lifespan(value: Any) -> int:
    """Lifespan count from a capability or message value, 1 if unparseable."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 1


def create_context(
    project_id: str,
    session_id: str,
    name: str,
    lifespan: Any,
    parameters: Mapping[str, Any] | None = None,
) -> DialogflowContext:
    """Create a context bound to the current session."""
    return DialogflowContext(
        name=context_path(project_id, session_id, name),
        lifespan_count=parse_lifespan(lifespan),
        parameters=dict(parameters) if parameters else None,
    )


def extract_custom_contexts(
    message: UserMessage,
    project_id: str,
    session_id: str,
) -> list[DialogflowContext]:
    """Contexts the test case asks to set for this turn.

    Each entry maps a context name either to a lifespan or to a mapping
    with ``lifespan`` and ``parameters``.
    """
    if not message.set_dialogflow_context:
        return []

    contexts = []
    for name, value in message.set_dialogflow_context.items():
        if isinstance(value, Mapping):
            contexts.append(
                create_context(
                    project_id,
                    session_id,
                    name,
                    value.get("lifespan"),
                    value.get("parameters"),
                )
            )
        else:
            contexts.append(create_context(project_id, session_id, name, value))
    return contexts


def merge_contexts(
    current: list[DialogflowContext],
    incoming: list[DialogflowContext],
) -> list[DialogflowContext]:
    """Merge contexts by name.

    A context with a known name replaces the old one in place, new names
    are appended in the order they arrive. Neither input is modified.
    """
    merged = list(current)
    positions = {context.name: i for i, context in enumerate(merged)}
    for context in incoming:
        if context.name in positions:
            merged[positions[context.name]] = context
        else:
            positions[context.name] = len(merged)
            merged.append(context)
    return merged


def build_request(
    session: str,
    query_input: dict[str, Any],
    contexts: list[DialogflowContext],
    knowledge_base_names: list[str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Assemble a DetectIntentRequest as a dict.

    Args:
        session: Session resource path
        query_input: Text or event input
        contexts: Contexts to activate with this query
        knowledge_base_names: Knowledge bases to query (v2beta1 only)
        overrides: Query parameters that replace the computed ones
    """
    query_params: dict[str, Any] = {
        "contexts": [context.to_request() for context in contexts],
    }
    if knowledge_base_names:
        query_params["knowledge_base_names"] = list(knowledge_base_names)
    if overrides:
        query_params.update(snake_case_keys(overrides))

    return {
        "session": session,
        "query_input": query_input,
        "query_params": query_params,
    }
