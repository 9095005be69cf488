"""Capability names, defaults and validation.

The test framework hands the connector a flat mapping of capability
names to values. ConnectorConfig.from_capabilities turns that mapping
into a typed configuration and fails fast on anything missing or
malformed.
"""

import json
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, SecretStr, ValidationError

from dialogflow_connector.exceptions import ConfigurationError


class Capability(str, Enum):
    """Capability names understood by the connector.

    The three INPUT_CONTEXT capabilities may carry a suffix (for example
    ``DIALOGFLOW_INPUT_CONTEXT_NAME_2``) to seed several contexts.
    """

    PROJECT_ID = "DIALOGFLOW_PROJECT_ID"
    CLIENT_EMAIL = "DIALOGFLOW_CLIENT_EMAIL"
    PRIVATE_KEY = "DIALOGFLOW_PRIVATE_KEY"
    LANGUAGE_CODE = "DIALOGFLOW_LANGUAGE_CODE"
    INPUT_CONTEXT_NAME = "DIALOGFLOW_INPUT_CONTEXT_NAME"
    INPUT_CONTEXT_LIFESPAN = "DIALOGFLOW_INPUT_CONTEXT_LIFESPAN"
    INPUT_CONTEXT_PARAMETERS = "DIALOGFLOW_INPUT_CONTEXT_PARAMETERS"
    OUTPUT_PLATFORM = "DIALOGFLOW_OUTPUT_PLATFORM"
    FORCE_INTENT_RESOLUTION = "DIALOGFLOW_FORCE_INTENT_RESOLUTION"
    BUTTON_EVENTS = "DIALOGFLOW_BUTTON_EVENTS"
    ENABLE_KNOWLEDGEBASE = "DIALOGFLOW_ENABLE_KNOWLEDGEBASE"
    FALLBACK_INTENTS = "DIALOGFLOW_FALLBACK_INTENTS"


DEFAULTS: dict[str, Any] = {
    Capability.LANGUAGE_CODE.value: "en-US",
    Capability.FORCE_INTENT_RESOLUTION.value: True,
    Capability.BUTTON_EVENTS.value: True,
    Capability.ENABLE_KNOWLEDGEBASE.value: False,
    Capability.FALLBACK_INTENTS.value: ["Default Fallback Intent"],
}

REQUIRED = (
    Capability.PROJECT_ID,
    Capability.CLIENT_EMAIL,
    Capability.PRIVATE_KEY,
)


class InputContextConfig(BaseModel):
    """An initial context seeded into the first query of a conversation."""

    suffix: str = Field(default="", description="Capability name suffix")
    name: str = Field(..., description="Context id (not the full path)")
    lifespan: int = Field(..., description="Lifespan count")
    parameters: dict[str, Any] | None = Field(default=None)


class ConnectorConfig(BaseModel):
    """Validated connector configuration."""

    project_id: str
    client_email: str
    private_key: SecretStr
    language_code: str = "en-US"
    output_platform: str | None = None
    force_intent_resolution: bool = True
    button_events: bool = True
    enable_knowledgebase: bool | list[str] = False
    fallback_intents: list[str] = Field(
        default_factory=lambda: ["Default Fallback Intent"]
    )
    input_contexts: list[InputContextConfig] = Field(default_factory=list)

    @property
    def list_knowledge_bases(self) -> bool:
        """Whether all knowledge bases of the project should be queried."""
        return self.enable_knowledgebase is True

    @property
    def knowledge_base_names(self) -> list[str]:
        """Knowledge base names given explicitly in the capabilities."""
        if isinstance(self.enable_knowledgebase, list):
            return list(self.enable_knowledgebase)
        return []

    def credentials_info(self, token_uri: str) -> dict[str, str]:
        """Service account info accepted by google.oauth2.service_account.

        Keys coming from environment variables often carry escaped
        newlines, which are restored here.
        """
        return {
            "type": "service_account",
            "project_id": self.project_id,
            "client_email": self.client_email,
            "private_key": self.private_key.get_secret_value().replace("\\n", "\n"),
            "token_uri": token_uri,
        }

    @classmethod
    def from_capabilities(cls, caps: Mapping[str, Any]) -> "ConnectorConfig":
        """Apply defaults to the capability mapping and validate it.

        Raises:
            ConfigurationError: On the first missing or malformed capability
        """
        merged = dict(DEFAULTS)
        merged.update({key: value for key, value in caps.items() if value is not None})

        for capability in REQUIRED:
            if not merged.get(capability.value):
                raise ConfigurationError(
                    f"{capability.value} capability required",
                    capability=capability.value,
                )

        try:
            return cls(
                project_id=str(merged[Capability.PROJECT_ID.value]),
                client_email=str(merged[Capability.CLIENT_EMAIL.value]),
                private_key=str(merged[Capability.PRIVATE_KEY.value]),
                language_code=merged[Capability.LANGUAGE_CODE.value],
                output_platform=merged.get(Capability.OUTPUT_PLATFORM.value) or None,
                force_intent_resolution=merged[Capability.FORCE_INTENT_RESOLUTION.value],
                button_events=merged[Capability.BUTTON_EVENTS.value],
                enable_knowledgebase=_parse_knowledgebase(
                    merged[Capability.ENABLE_KNOWLEDGEBASE.value]
                ),
                fallback_intents=_parse_fallback_intents(
                    merged[Capability.FALLBACK_INTENTS.value]
                ),
                input_contexts=[
                    _parse_input_context(merged, suffix)
                    for suffix in context_suffixes(merged)
                ],
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid capabilities: {e}") from e


def context_suffixes(caps: Mapping[str, Any]) -> list[str]:
    """Suffixes of all INPUT_CONTEXT_NAME capabilities, sorted by key."""
    prefix = Capability.INPUT_CONTEXT_NAME.value
    return [key[len(prefix):] for key in sorted(caps) if key.startswith(prefix)]


def _parse_input_context(caps: Mapping[str, Any], suffix: str) -> InputContextConfig:
    name_cap = Capability.INPUT_CONTEXT_NAME.value + suffix
    lifespan_cap = Capability.INPUT_CONTEXT_LIFESPAN.value + suffix
    parameters_cap = Capability.INPUT_CONTEXT_PARAMETERS.value + suffix

    name = caps.get(name_cap)
    lifespan = caps.get(lifespan_cap)
    if not name or lifespan is None or lifespan == "":
        raise ConfigurationError(
            f"{name_cap} and {lifespan_cap} capability required",
            capability=name_cap,
        )

    try:
        lifespan_count = int(lifespan)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"{lifespan_cap} capability has to be an integer, got {lifespan!r}",
            capability=lifespan_cap,
        ) from e

    return InputContextConfig(
        suffix=suffix,
        name=str(name),
        lifespan=lifespan_count,
        parameters=_parse_parameters(parameters_cap, caps.get(parameters_cap)),
    )


def _parse_parameters(capability: str, value: Any) -> dict[str, Any] | None:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"{capability} capability is not valid JSON: {e}",
                capability=capability,
            ) from e
    if not isinstance(value, Mapping):
        raise ConfigurationError(
            f"{capability} capability has to be a JSON object",
            capability=capability,
        )
    return dict(value)


def _parse_knowledgebase(value: Any) -> bool | list[str]:
    capability = Capability.ENABLE_KNOWLEDGEBASE.value
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("["):
            try:
                value = json.loads(stripped)
            except json.JSONDecodeError as e:
                raise ConfigurationError(
                    f"{capability} capability is not valid JSON: {e}",
                    capability=capability,
                ) from e
        else:
            return stripped.lower() == "true"
    if isinstance(value, list | tuple) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigurationError(
        f"{capability} capability has to be an array of knowledge base identifiers, or a boolean",
        capability=capability,
    )


def _parse_fallback_intents(value: Any) -> list[str]:
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("["):
            try:
                return [str(v) for v in json.loads(stripped)]
            except json.JSONDecodeError as e:
                raise ConfigurationError(
                    f"{Capability.FALLBACK_INTENTS.value} capability is not valid JSON: {e}",
                    capability=Capability.FALLBACK_INTENTS.value,
                ) from e
        return [name.strip() for name in stripped.split(",") if name.strip()]
    if isinstance(value, list | tuple | set | frozenset):
        return [str(v) for v in value]
    raise ConfigurationError(
        f"{Capability.FALLBACK_INTENTS.value} capability has to be a list of intent names",
        capability=Capability.FALLBACK_INTENTS.value,
    )
