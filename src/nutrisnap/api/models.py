"""Request models for the HTTP API."""

from pydantic import BaseModel, Field

from nutrisnap.domain.chat import ChatTurn


class TextEntryRequest(BaseModel):
    """Meal described in free text."""

    description: str


class ImageEntryRequest(BaseModel):
    """Meal photo encoded as a data URI."""

    data_uri: str


class ChatRequest(BaseModel):
    """Dietician chat request with the full conversation so far."""

    history: list[ChatTurn] = Field(default_factory=list)
    use_food_log: bool = True
