"""Domain models for the dietician chat."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, Field

from nutrisnap.domain.entries import FoodEntry


class ChatTurn(BaseModel):
    """One turn of a chat conversation."""

    role: Literal["user", "model"]
    text: str = Field(min_length=1)


@dataclass(frozen=True)
class ToolCall:
    """Function call requested by the model."""

    call_id: str
    name: str
    arguments: str


@dataclass(frozen=True)
class ModelReply:
    """Conversational model output: text and/or tool calls."""

    text: str | None
    tool_calls: list[ToolCall] = field(default_factory=list)


# Already bound to the authenticated user; takes no user id.
FoodLogProvider = Callable[[], Awaitable[list[FoodEntry]]]
