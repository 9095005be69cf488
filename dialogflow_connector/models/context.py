"""Dialogflow context models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DialogflowContext(BaseModel):
    """A named, time-limited piece of conversation state sent with a query."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Full context resource path")
    lifespan_count: int = Field(
        default=1, description="Number of turns the context stays active"
    )
    parameters: dict[str, Any] | None = Field(
        default=None, description="Context parameters (JSON form of a Struct)"
    )

    @property
    def short_name(self) -> str:
        """Context id without the project/session path."""
        return self.name.rsplit("/", 1)[-1]

    def to_request(self) -> dict[str, Any]:
        """Render the context as a DetectIntentRequest fragment."""
        context: dict[str, Any] = {
            "name": self.name,
            "lifespan_count": self.lifespan_count,
        }
        if self.parameters:
            context["parameters"] = self.parameters
        return context
