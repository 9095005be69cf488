"""Configuration models."""

from dialogflow_connector.config.models.dialogflow import DialogflowClientConfig
from dialogflow_connector.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)

__all__ = [
    "DialogflowClientConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
]
