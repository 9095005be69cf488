"""Dialogflow connector for the conversational test framework.

The framework drives the connector through its lifecycle:

    connector = DialogflowConnector(queue_bot_says, caps)
    connector.validate()
    connector.build()
    await connector.start()
    await connector.user_says({"messageText": "hi"})
    await connector.stop()
    connector.clean()

Every user turn is sent to Dialogflow as one detect-intent call; the
resulting bot messages are handed back through ``queue_bot_says``.
"""

import inspect
import time
import uuid
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError

from dialogflow_connector.bootstrap import configure_observability
from dialogflow_connector.capabilities import ConnectorConfig
from dialogflow_connector.config import Settings, get_settings
from dialogflow_connector.config.models.dialogflow import DialogflowClientConfig
from dialogflow_connector.dialogflow.clients import DialogflowClients, session_path
from dialogflow_connector.dialogflow.normalizer import ResponseNormalizer, message_to_dict
from dialogflow_connector.dialogflow.request import (
    build_query_input,
    build_request,
    create_context,
    extract_custom_contexts,
    merge_contexts,
)
from dialogflow_connector.exceptions import DialogflowRequestError, NotStartedError
from dialogflow_connector.models import BotMessage, DialogflowContext, UserMessage
from dialogflow_connector.observability.logging import get_logger
from dialogflow_connector.observability.metrics import (
    DETECT_INTENT_COUNT,
    DETECT_INTENT_LATENCY,
    ERRORS,
)

logger = get_logger(__name__)

QueueBotSays = Callable[[BotMessage], Awaitable[None] | None]
ClientFactory = Callable[[dict[str, str], DialogflowClientConfig], DialogflowClients]


class DialogflowConnector:
    """Drives one Dialogflow conversation on behalf of the test framework.

    Attributes:
        caps: Capability mapping handed over by the framework
        config: Validated configuration (after validate())
        conversation_id: Dialogflow session id (after start())
        contexts: Contexts pending for the next query
    """

    def __init__(
        self,
        queue_bot_says: QueueBotSays,
        caps: Mapping[str, Any] | None = None,
        client_factory: ClientFactory | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the connector.

        Args:
            queue_bot_says: Callback receiving each bot message, sync or async
            caps: Capability mapping
            client_factory: Creates the SDK client factory from service
                account info (default: DialogflowClients.from_service_account_info)
            settings: Process settings (default: get_settings())
        """
        self.queue_bot_says = queue_bot_says
        self.caps: dict[str, Any] = dict(caps or {})
        self._settings = settings or get_settings()
        self._client_factory = client_factory or DialogflowClients.from_service_account_info
        configure_observability(self._settings)

        self.config: ConnectorConfig | None = None
        self._clients: DialogflowClients | None = None
        self._sessions_client: Any = None
        self._normalizer: ResponseNormalizer | None = None
        self._api_version = "v2"

        self.conversation_id: str | None = None
        self.session_path: str | None = None
        self.knowledge_base_names: list[str] = []
        self.contexts: list[DialogflowContext] = []

    @property
    def _metrics_enabled(self) -> bool:
        return self._settings.observability.metrics.enabled

    def validate(self) -> None:
        """Check the capabilities.

        Raises:
            ConfigurationError: If a required capability is missing or malformed
        """
        logger.debug("validate_called")
        self.config = ConnectorConfig.from_capabilities(self.caps)

    def build(self) -> None:
        """Create service account credentials and the client factory."""
        logger.debug("build_called")
        config = self.config or ConnectorConfig.from_capabilities(self.caps)
        self.config = config

        client_config = self._settings.dialogflow
        self._clients = self._client_factory(
            config.credentials_info(client_config.token_uri),
            client_config,
        )

    async def start(self) -> None:
        """Open a new conversation.

        Resolves the knowledge bases to query, creates the sessions client
        and seeds the initial contexts from the capabilities.
        """
        logger.debug("start_called")
        if self._clients is None or self.config is None:
            raise NotStartedError("not built")
        config = self.config

        self.conversation_id = str(uuid.uuid1())

        if config.list_knowledge_bases:
            self.knowledge_base_names = await self._clients.list_knowledge_base_names(
                config.project_id
            )
        else:
            self.knowledge_base_names = config.knowledge_base_names

        beta = bool(self.knowledge_base_names)
        if beta:
            logger.info(
                "using_knowledge_bases",
                knowledge_base_names=self.knowledge_base_names,
                api_version="v2beta1",
            )
        self._api_version = "v2beta1" if beta else "v2"
        self._sessions_client = self._clients.sessions(beta=beta)
        self.session_path = session_path(config.project_id, self.conversation_id)

        self.contexts = [
            create_context(
                config.project_id,
                self.conversation_id,
                context.name,
                context.lifespan,
                context.parameters,
            )
            for context in config.input_contexts
        ]

        self._normalizer = ResponseNormalizer(
            output_platform=config.output_platform,
            force_intent_resolution=config.force_intent_resolution,
            fallback_intents=config.fallback_intents,
            record_metrics=self._metrics_enabled,
        )

        logger.info(
            "conversation_started",
            conversation_id=self.conversation_id,
            initial_contexts=[context.short_name for context in self.contexts],
        )

    async def user_says(self, message: UserMessage | Mapping[str, Any]) -> list[BotMessage]:
        """Send one user turn and deliver the bot's replies.

        Args:
            message: The user message, as a model or the framework's dict

        Returns:
            The bot messages passed to queue_bot_says, in order

        Raises:
            NotStartedError: If start() has not been called
            DialogflowRequestError: If the detect-intent call fails
        """
        logger.debug("user_says_called")
        if (
            self._sessions_client is None
            or self._normalizer is None
            or self.config is None
            or self.conversation_id is None
            or self.session_path is None
        ):
            raise NotStartedError("not built")

        if not isinstance(message, UserMessage):
            message = UserMessage.model_validate(message)

        query_input = build_query_input(
            message, self.config.language_code, self.config.button_events
        )
        query_type = next(iter(query_input))

        self.contexts = merge_contexts(
            self.contexts,
            extract_custom_contexts(message, self.config.project_id, self.conversation_id),
        )

        request = build_request(
            self.session_path,
            query_input,
            self.contexts,
            knowledge_base_names=self.knowledge_base_names,
            overrides=message.set_dialogflow_queryparams,
        )
        logger.debug("dialogflow_request", request=request)

        started = time.perf_counter()
        try:
            response = await self._sessions_client.detect_intent(
                request=request,
                timeout=self._settings.dialogflow.request_timeout,
            )
        except (GoogleAPIError, GoogleAuthError, ValueError, TypeError) as e:
            # Request dicts become protos inside the client; unknown fields raise ValueError
            self._record_request(query_type, "error", started)
            if self._metrics_enabled:
                ERRORS.labels(error_type=type(e).__name__).inc()
            logger.warning(
                "detect_intent_failed",
                conversation_id=self.conversation_id,
                error=str(e),
            )
            raise DialogflowRequestError(
                f"Cannot send message to dialogflow container: {e}"
            ) from e
        self._record_request(query_type, "success", started)

        # Pending contexts only go out once; Dialogflow keeps them afterwards
        self.contexts = []

        query_result = message_to_dict(response.query_result)
        logger.debug("dialogflow_response", query_result=query_result)

        bot_messages = self._normalizer.normalize(query_result)
        for bot_message in bot_messages:
            await self._deliver(bot_message)
        return bot_messages

    async def stop(self) -> None:
        """End the conversation and close the sessions client."""
        logger.debug("stop_called")
        try:
            if self._sessions_client is not None and self._clients is not None:
                await self._clients.close(self._sessions_client)
        finally:
            self._sessions_client = None
            self._normalizer = None
            self.session_path = None
            self.contexts = []
            self.knowledge_base_names = []

    def clean(self) -> None:
        """Drop credentials and the client factory."""
        logger.debug("clean_called")
        self._clients = None

    async def _deliver(self, bot_message: BotMessage) -> None:
        result = self.queue_bot_says(bot_message)
        if inspect.isawaitable(result):
            await result

    def _record_request(self, query_type: str, status: str, started: float) -> None:
        if not self._metrics_enabled:
            return
        DETECT_INTENT_COUNT.labels(
            api_version=self._api_version, query_type=query_type, status=status
        ).inc()
        DETECT_INTENT_LATENCY.labels(api_version=self._api_version).observe(
            time.perf_counter() - started
        )


__all__ = ["ClientFactory", "DialogflowConnector", "QueueBotSays"]
