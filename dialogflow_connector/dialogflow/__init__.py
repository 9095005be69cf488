"""Dialogflow integration: clients, request building, normalization.

- DialogflowClients creates the SDK clients from service account info
- request builds query inputs and merges contexts
- normalizer converts query results into bot messages
- nlp extracts intents and flattens parameters into entities
"""

from dialogflow_connector.dialogflow.clients import (
    DialogflowClients,
    context_path,
    project_path,
    session_path,
)
from dialogflow_connector.dialogflow.mock import (
    MockDialogflowClients,
    MockKnowledgeBasesClient,
    MockSessionsClient,
    make_detect_intent_response,
)
from dialogflow_connector.dialogflow.nlp import extract_entities, extract_intent
from dialogflow_connector.dialogflow.normalizer import (
    ResponseNormalizer,
    message_to_dict,
    normalize_fulfillment_message,
    select_fulfillment_messages,
)
from dialogflow_connector.dialogflow.request import (
    build_query_input,
    build_request,
    create_context,
    extract_custom_contexts,
    merge_contexts,
)

__all__ = [
    # Clients
    "DialogflowClients",
    "session_path",
    "context_path",
    "project_path",
    # Request
    "build_query_input",
    "build_request",
    "create_context",
    "extract_custom_contexts",
    "merge_contexts",
    # Response
    "ResponseNormalizer",
    "message_to_dict",
    "normalize_fulfillment_message",
    "select_fulfillment_messages",
    "extract_entities",
    "extract_intent",
    # Testing
    "MockDialogflowClients",
    "MockKnowledgeBasesClient",
    "MockSessionsClient",
    "make_detect_intent_response",
]
