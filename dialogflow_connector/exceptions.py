"""Connector exception hierarchy.

All connector exceptions inherit from ConnectorError so the test
framework can tell connector failures apart from assertion failures.
"""


class ConnectorError(Exception):
    """Base exception for all connector errors."""

    error_code: str = "CONNECTOR_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(ConnectorError):
    """Raised by validate() when a capability is missing or malformed."""

    error_code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, capability: str | None = None) -> None:
        super().__init__(message)
        self.capability = capability


class NotStartedError(ConnectorError):
    """Raised when a message is sent before build() and start()."""

    error_code = "NOT_STARTED"


class DialogflowRequestError(ConnectorError):
    """Raised when the Dialogflow API call fails."""

    error_code = "DIALOGFLOW_REQUEST_FAILED"
