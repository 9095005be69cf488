"""Dialogflow API client configuration."""

from pydantic import BaseModel, Field


class DialogflowClientConfig(BaseModel):
    """Settings applied to every SDK client the connector creates."""

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="detect_intent timeout in seconds",
    )
    api_endpoint: str | None = Field(
        default=None,
        description="Regional endpoint, e.g. 'europe-west1-dialogflow.googleapis.com'",
    )
    token_uri: str = Field(
        default="https://oauth2.googleapis.com/token",
        description="OAuth token endpoint for service account credentials",
    )
