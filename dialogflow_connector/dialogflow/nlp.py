"""Intent and entity extraction from a query result."""

from collections.abc import Iterable, Mapping
from typing import Any

from google.protobuf import json_format, struct_pb2

from dialogflow_connector.models import Entity, Intent
from dialogflow_connector.observability.logging import get_logger

logger = get_logger(__name__)


def extract_intent(
    query_result: Mapping[str, Any],
    fallback_intents: Iterable[str] = (),
) -> Intent:
    """Intent annotation for a query result.

    Intents listed in fallback_intents mark the turn as not understood.
    """
    intent = query_result.get("intent")
    if not intent:
        return Intent()

    name = intent.get("display_name")
    is_fallback = name in set(fallback_intents)
    return Intent(
        name=name,
        confidence=query_result.get("intent_detection_confidence", 0.0),
        incomprehension=True if is_fallback else None,
    )


def extract_entities(parameters: Mapping[str, Any] | struct_pb2.Struct | None) -> list[Entity]:
    """Flatten intent parameters into entities.

    Nested objects and lists produce dotted names (``address.city``,
    ``colors.0``). Null values and empty strings are skipped.
    """
    if parameters is None:
        return []
    if isinstance(parameters, struct_pb2.Struct):
        parameters = json_format.MessageToDict(parameters)
    return _walk_mapping("", parameters)


def _walk_mapping(prefix: str, fields: Mapping[str, Any]) -> list[Entity]:
    entities: list[Entity] = []
    for key, value in fields.items():
        entities.extend(_walk_value(f"{prefix}.{key}" if prefix else str(key), value))
    return entities


def _walk_value(key: str, value: Any) -> list[Entity]:
    if value is None:
        return []
    if isinstance(value, bool):
        return [Entity(name=key, value="true" if value else "false")]
    if isinstance(value, int | float):
        return [Entity(name=key, value=format_number(value))]
    if isinstance(value, str):
        return [Entity(name=key, value=value)] if value else []
    if isinstance(value, Mapping):
        return _walk_mapping(key, value)
    if isinstance(value, list | tuple):
        entities: list[Entity] = []
        for i, item in enumerate(value):
            entities.extend(_walk_value(f"{key}.{i}", item))
        return entities

    logger.debug("unsupported_entity_kind", entity=key, kind=type(value).__name__)
    return []


def format_number(value: int | float) -> str:
    """Struct numbers are doubles; render integral ones without '.0'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
