"""Dialogflow connector plugin for conversational testing.

The test framework loads the plugin through PLUGIN_VERSION and
PLUGIN_CLASS and drives one DialogflowConnector per conversation.
"""

from dialogflow_connector.capabilities import Capability, ConnectorConfig
from dialogflow_connector.connector import DialogflowConnector
from dialogflow_connector.exceptions import (
    ConfigurationError,
    ConnectorError,
    DialogflowRequestError,
    NotStartedError,
)
from dialogflow_connector.models import BotMessage, UserMessage

PLUGIN_VERSION = 1
PLUGIN_CLASS = DialogflowConnector

__all__ = [
    "PLUGIN_VERSION",
    "PLUGIN_CLASS",
    "DialogflowConnector",
    "Capability",
    "ConnectorConfig",
    "BotMessage",
    "UserMessage",
    "ConnectorError",
    "ConfigurationError",
    "DialogflowRequestError",
    "NotStartedError",
]
