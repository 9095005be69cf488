"""Mock Dialogflow clients for testing.

Return real SDK response objects without making API calls, so the
connector's conversion code runs exactly as it does against the
service.
"""

from collections import deque
from collections.abc import AsyncIterator
from typing import Any

from google.cloud import dialogflow_v2, dialogflow_v2beta1

from dialogflow_connector.config.models.dialogflow import DialogflowClientConfig
from dialogflow_connector.dialogflow.clients import DialogflowClients


def make_detect_intent_response(
    query_result: dict[str, Any] | None = None,
    beta: bool = False,
) -> Any:
    """Build a DetectIntentResponse from a query result dict.

    Keys use proto field names, e.g.
    ``{"intent": {"display_name": "greet"}, "fulfillment_messages": [...]}``.
    """
    module = dialogflow_v2beta1 if beta else dialogflow_v2
    return module.DetectIntentResponse(
        response_id="mock-response",
        query_result=query_result or {},
    )


class MockSessionsClient:
    """Sessions client returning queued responses.

    Queued entries may be query result dicts, DetectIntentResponse
    objects, or exceptions to raise.

    Requests are converted to DetectIntentRequest first, like the real
    client does, so fields unknown to the SDK raise ValueError.
    """

    def __init__(
        self,
        responses: list[Any] | None = None,
        default_query_result: dict[str, Any] | None = None,
        beta: bool = False,
    ) -> None:
        self._responses: deque[Any] = deque(responses or [])
        self._default_query_result = default_query_result or {}
        self._call_history: list[dict[str, Any]] = []
        self.beta = beta
        self.closed = False

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Requests received, for testing assertions."""
        return self._call_history

    def add_response(self, response: Any) -> None:
        self._responses.append(response)

    async def detect_intent(
        self,
        request: dict[str, Any] | None = None,
        *,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> Any:
        self._call_history.append({"request": request, "timeout": timeout, "kwargs": kwargs})
        module = dialogflow_v2beta1 if self.beta else dialogflow_v2
        module.DetectIntentRequest(request or {})

        response = self._responses.popleft() if self._responses else self._default_query_result
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, dict):
            return make_detect_intent_response(response, beta=self.beta)
        return response


class _KnowledgeBasePager:
    def __init__(self, knowledge_bases: list[Any]) -> None:
        self._knowledge_bases = knowledge_bases

    def __aiter__(self) -> AsyncIterator[Any]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Any]:
        for knowledge_base in self._knowledge_bases:
            yield knowledge_base


class MockKnowledgeBasesClient:
    """Knowledge bases client listing a fixed set of knowledge bases."""

    def __init__(self, names: list[str] | None = None) -> None:
        self._names = names or []
        self.requests: list[str] = []

    async def list_knowledge_bases(self, parent: str, **kwargs: Any) -> _KnowledgeBasePager:
        self.requests.append(parent)
        return _KnowledgeBasePager([
            dialogflow_v2beta1.KnowledgeBase(name=name, display_name=name.rsplit("/", 1)[-1])
            for name in self._names
        ])


class MockDialogflowClients(DialogflowClients):
    """Client factory handing out mock clients.

    Usage:
        clients = MockDialogflowClients(responses=[{"fulfillment_messages": [...]}])
        connector = DialogflowConnector(queue, caps, client_factory=lambda *_: clients)
    """

    def __init__(
        self,
        responses: list[Any] | None = None,
        knowledge_base_names: list[str] | None = None,
        config: DialogflowClientConfig | None = None,
    ) -> None:
        super().__init__(credentials=None, config=config)
        self._responses = list(responses or [])
        self.knowledge_bases_client = MockKnowledgeBasesClient(knowledge_base_names)
        self.sessions_clients: list[MockSessionsClient] = []
        self.closed_clients: list[Any] = []

    @property
    def last_sessions_client(self) -> MockSessionsClient:
        return self.sessions_clients[-1]

    def sessions(self, beta: bool = False) -> MockSessionsClient:
        client = MockSessionsClient(self._responses, beta=beta)
        self.sessions_clients.append(client)
        return client

    def knowledge_bases(self) -> MockKnowledgeBasesClient:
        return self.knowledge_bases_client

    async def close(self, client: Any) -> None:
        if isinstance(client, MockSessionsClient):
            client.closed = True
        self.closed_clients.append(client)
