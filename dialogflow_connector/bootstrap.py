"""Process-wide observability setup.

The test framework instantiates one connector per conversation; logging
is configured by the first one and left alone afterwards.
"""

from dialogflow_connector.config import Settings, get_settings
from dialogflow_connector.observability.logging import setup_logging

_configured = False


def configure_observability(settings: Settings | None = None, force: bool = False) -> None:
    """Configure structlog from settings.

    Args:
        settings: Settings to use (default: get_settings())
        force: Reconfigure even if already done in this process
    """
    global _configured
    if _configured and not force:
        return

    settings = settings or get_settings()
    logging_config = settings.observability.logging
    setup_logging(
        level=logging_config.level,
        format=logging_config.format,
        redact_secrets=logging_config.redact_secrets,
    )
    _configured = True
