"""Prometheus metrics for the Dialogflow connector.

Tracks detect-intent traffic, latencies and the shape of normalized
bot replies.
"""

from prometheus_client import Counter, Histogram

# Request metrics
DETECT_INTENT_COUNT = Counter(
    "dfconnector_detect_intent_total",
    "Total number of detect-intent calls sent to Dialogflow",
    labelnames=["api_version", "query_type", "status"],
)

DETECT_INTENT_LATENCY = Histogram(
    "dfconnector_detect_intent_latency_seconds",
    "Detect-intent round trip latency in seconds",
    labelnames=["api_version"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# Normalization metrics
BOT_MESSAGES = Counter(
    "dfconnector_bot_messages_total",
    "Bot messages delivered to the test framework",
    labelnames=["variant"],
)

SKIPPED_FULFILLMENT_MESSAGES = Counter(
    "dfconnector_skipped_fulfillment_messages_total",
    "Fulfillment messages with an unsupported variant",
)

# Error metrics
ERRORS = Counter(
    "dfconnector_errors_total",
    "Total number of connector errors",
    labelnames=["error_type"],
)
