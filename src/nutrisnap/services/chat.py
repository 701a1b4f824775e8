"""AI dietician chat with an optional, user-scoped food log tool."""

import json
import logging
from dataclasses import dataclass
from typing import Protocol

from nutrisnap.domain.chat import ChatTurn, FoodLogProvider, ModelReply, ToolCall
from nutrisnap.errors import ChatError, ValidationError

_logger = logging.getLogger(__name__)

MAX_HISTORY_TURNS = 20
MAX_TOOL_ROUNDS = 3
FOOD_LOG_TOOL_NAME = "get_food_log"

DIETICIAN_INSTRUCTIONS = (
    "You are a friendly and knowledgeable AI dietician for the NutriSnap app. "
    "Give helpful, safe and personalized dietary advice.\n"
    "- Never give medical advice. If asked, gently decline and recommend "
    "consulting a doctor.\n"
    "- When the user asks about their own diet, use the food log tool if it is "
    "available to see what they ate in the last 10 days.\n"
    "- You can also answer general nutrition questions.\n"
    "- Keep responses concise and easy to understand.\n"
    "- Be encouraging and positive."
)

FOOD_LOG_TOOL: dict[str, object] = {
    "type": "function",
    "name": FOOD_LOG_TOOL_NAME,
    "description": (
        "Return the current user's food log from the last 10 days, newest first."
    ),
    "parameters": {
        "type": "object",
        "properties": {},
        "required": [],
        "additionalProperties": False,
    },
    "strict": True,
}


class ChatModelClient(Protocol):
    """Interface for conversational LLM calls with function tools."""

    async def respond(
        self,
        *,
        model: str,
        instructions: str,
        input_items: list[dict[str, object]],
        tools: list[dict[str, object]],
    ) -> ModelReply:
        """Return the model's reply to the conversation so far."""


@dataclass
class DieticianChatService:
    """Service that answers nutrition questions in a chat."""

    client: ChatModelClient
    model: str

    async def reply(
        self, history: list[ChatTurn], food_log: FoodLogProvider | None = None
    ) -> str:
        """Return the dietician's answer to the latest user turn."""
        if not history:
            raise ValidationError("Please enter a message.")
        if history[-1].role != "user":
            raise ValidationError("The last message must come from the user.")

        input_items: list[dict[str, object]] = [
            _turn_item(turn) for turn in history[-MAX_HISTORY_TURNS:]
        ]
        tools = [FOOD_LOG_TOOL] if food_log is not None else []

        for _ in range(MAX_TOOL_ROUNDS + 1):
            response = await self._respond(input_items, tools)
            if not response.tool_calls:
                text = (response.text or "").strip()
                if not text:
                    raise ChatError()
                return text
            for call in response.tool_calls:
                input_items.append(
                    {
                        "type": "function_call",
                        "call_id": call.call_id,
                        "name": call.name,
                        "arguments": call.arguments,
                    }
                )
                output = await _run_tool(call, food_log)
                input_items.append(
                    {
                        "type": "function_call_output",
                        "call_id": call.call_id,
                        "output": json.dumps(output),
                    }
                )

        _logger.warning("Dietician chat exceeded %s tool rounds", MAX_TOOL_ROUNDS)
        raise ChatError()

    async def _respond(
        self, input_items: list[dict[str, object]], tools: list[dict[str, object]]
    ) -> ModelReply:
        try:
            return await self.client.respond(
                model=self.model,
                instructions=DIETICIAN_INSTRUCTIONS,
                input_items=input_items,
                tools=tools,
            )
        except Exception as exc:
            _logger.exception("Dietician chat call failed")
            raise ChatError() from exc


async def _run_tool(call: ToolCall, food_log: FoodLogProvider | None) -> object:
    if call.name != FOOD_LOG_TOOL_NAME or food_log is None:
        return {"error": f"Unknown tool: {call.name}"}
    try:
        entries = await food_log()
    except Exception:
        _logger.exception("Failed to load food log for chat")
        return {"error": "Food log is unavailable."}
    return [
        {
            "name": entry.name,
            "calories": entry.calories,
            "protein": entry.protein,
            "carbs": entry.carbs,
            "fats": entry.fats,
            "createdAt": entry.created_at.isoformat(),
        }
        for entry in entries
    ]


def _turn_item(turn: ChatTurn) -> dict[str, object]:
    role = "assistant" if turn.role == "model" else "user"
    return {"role": role, "content": turn.text}
