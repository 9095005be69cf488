"""Dialogflow SDK client construction.

DialogflowClients owns the service account credentials and creates the
async SDK clients the connector needs. The v2 API is used by default;
knowledge base queries require the v2beta1 API.
"""

from typing import Any

from google.api_core.client_options import ClientOptions
from google.cloud import dialogflow_v2, dialogflow_v2beta1
from google.oauth2 import service_account

from dialogflow_connector.config.models.dialogflow import DialogflowClientConfig
from dialogflow_connector.observability.logging import get_logger

logger = get_logger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/dialogflow",
]


def session_path(project_id: str, session_id: str) -> str:
    """Resource path of a conversation session."""
    return dialogflow_v2.SessionsClient.session_path(project_id, session_id)


def context_path(project_id: str, session_id: str, context_id: str) -> str:
    """Resource path of a context inside a session.

    Names that already are full resource paths are returned unchanged.
    """
    if context_id.startswith("projects/"):
        return context_id
    return dialogflow_v2.ContextsClient.context_path(project_id, session_id, context_id)


def project_path(project_id: str) -> str:
    """Resource path of a project, the parent of its knowledge bases."""
    return dialogflow_v2beta1.KnowledgeBasesClient.common_project_path(project_id)


class DialogflowClients:
    """Factory for Dialogflow SDK clients sharing one set of credentials.

    Example:
        clients = DialogflowClients.from_service_account_info(info)
        sessions = clients.sessions()
        response = await sessions.detect_intent(request=request)
    """

    def __init__(
        self,
        credentials: Any,
        config: DialogflowClientConfig | None = None,
    ) -> None:
        """Initialize the factory.

        Args:
            credentials: google.auth credentials used by every client
            config: Endpoint and timeout settings
        """
        self._credentials = credentials
        self._config = config or DialogflowClientConfig()

    @classmethod
    def from_service_account_info(
        cls,
        info: dict[str, str],
        config: DialogflowClientConfig | None = None,
    ) -> "DialogflowClients":
        """Create a factory from service account fields.

        Args:
            info: Mapping with client_email, private_key and token_uri

        Raises:
            ValueError: If the private key cannot be parsed
        """
        credentials = service_account.Credentials.from_service_account_info(
            info, scopes=SCOPES
        )
        return cls(credentials, config)

    @property
    def config(self) -> DialogflowClientConfig:
        return self._config

    def _client_options(self) -> ClientOptions | None:
        if self._config.api_endpoint:
            return ClientOptions(api_endpoint=self._config.api_endpoint)
        return None

    def sessions(self, beta: bool = False) -> Any:
        """Create an async sessions client.

        Args:
            beta: Use the v2beta1 API (needed for knowledge base queries)
        """
        module = dialogflow_v2beta1 if beta else dialogflow_v2
        logger.debug(
            "creating_sessions_client",
            api_version="v2beta1" if beta else "v2",
            api_endpoint=self._config.api_endpoint,
        )
        return module.SessionsAsyncClient(
            credentials=self._credentials,
            client_options=self._client_options(),
        )

    def knowledge_bases(self) -> Any:
        """Create an async v2beta1 knowledge bases client."""
        return dialogflow_v2beta1.KnowledgeBasesAsyncClient(
            credentials=self._credentials,
            client_options=self._client_options(),
        )

    async def list_knowledge_base_names(self, project_id: str) -> list[str]:
        """Resource names of all knowledge bases of a project."""
        client = self.knowledge_bases()
        try:
            pager = await client.list_knowledge_bases(parent=project_path(project_id))
            return [knowledge_base.name async for knowledge_base in pager]
        finally:
            await self.close(client)

    async def close(self, client: Any) -> None:
        """Close the transport of a client created by this factory."""
        await client.transport.close()
