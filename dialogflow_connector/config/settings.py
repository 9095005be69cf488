"""Root settings model for the connector."""

from typing import Any

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from dialogflow_connector.config.models.dialogflow import DialogflowClientConfig
from dialogflow_connector.config.models.observability import ObservabilityConfig

# TOML config read by the custom settings source
_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Set the TOML configuration to be used by Settings."""
    global _toml_config
    _toml_config = config


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that reads from TOML configuration."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return _toml_config.copy()


class Settings(BaseSettings):
    """Process-wide connector settings.

    Per-conversation behaviour comes from the capability mapping handed
    over by the test framework; these settings only cover what is shared
    by every connector in the process.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. default.toml from DFCONNECTOR_CONFIG_DIR, else the bundled defaults
    3. {DFCONNECTOR_ENV}.toml from the same directory
    4. DFCONNECTOR_* environment variables
    """

    model_config = SettingsConfigDict(
        env_prefix="DFCONNECTOR_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(
        default="dialogflow-connector", description="Application name for logging"
    )
    dialogflow: DialogflowClientConfig = Field(
        default_factory=DialogflowClientConfig,
        description="SDK client configuration",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Logging and metrics configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: constructor arguments, environment, TOML, defaults."""
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )
