"""OpenAI Responses API client for extraction, recognition and chat."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrisnap.domain.chat import ModelReply, ToolCall
from nutrisnap.services.chat import ChatModelClient
from nutrisnap.services.extraction import StructuredModelClient


@dataclass
class OpenAIModelClient(StructuredModelClient, ChatModelClient):
    """Model client backed by the OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIModelClient":
        """Create an OpenAI model client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def generate_structured(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        image_data_url: str | None,
        schema_name: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Call the Responses API with structured outputs."""
        content: list[dict[str, object]] = [{"type": "input_text", "text": prompt}]
        if image_data_url:
            content.append({"type": "input_image", "image_url": image_data_url})
        request_payload: dict[str, object] = {
            "model": model,
            "input": [{"role": "user", "content": content}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return json.loads(output_text)

    async def respond(
        self,
        *,
        model: str,
        instructions: str,
        input_items: list[dict[str, object]],
        tools: list[dict[str, object]],
    ) -> ModelReply:
        """Call the Responses API for a chat turn, surfacing tool calls."""
        request_payload: dict[str, object] = {
            "model": model,
            "instructions": instructions,
            "input": input_items,
            "store": False,
        }
        if tools:
            request_payload["tools"] = tools

        response = await self.client.responses.create(**request_payload)
        tool_calls = [
            ToolCall(call_id=item.call_id, name=item.name, arguments=item.arguments)
            for item in response.output
            if getattr(item, "type", None) == "function_call"
        ]
        return ModelReply(text=response.output_text or None, tool_calls=tool_calls)
