"""Connector data models.

- DialogflowContext for contexts sent with a query
- UserMessage / BotMessage and their parts for the test framework side
"""

from dialogflow_connector.models.context import DialogflowContext
from dialogflow_connector.models.message import (
    NLP,
    BotMessage,
    Button,
    Card,
    Entity,
    Intent,
    Media,
    UserMessage,
)

__all__ = [
    "DialogflowContext",
    "BotMessage",
    "Button",
    "Card",
    "Entity",
    "Intent",
    "Media",
    "NLP",
    "UserMessage",
]
