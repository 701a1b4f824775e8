"""Shared test fixtures."""

import base64
import copy
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

import pytest

from nutrisnap.config import Settings
from nutrisnap.containers import AppContainer
from nutrisnap.domain.chat import ModelReply
from nutrisnap.domain.entries import FoodEntry
from nutrisnap.services.auth import TokenVerifier
from nutrisnap.services.chat import ChatModelClient, DieticianChatService
from nutrisnap.services.entries import EntryLogService, EntryRepository
from nutrisnap.services.extraction import ExtractionService, StructuredModelClient
from nutrisnap.services.ingestion import IngestionService
from nutrisnap.services.recognition import RecognitionService

USER_ID = UUID("11111111-1111-4111-8111-111111111111")
OTHER_USER_ID = UUID("22222222-2222-4222-8222-222222222222")
USER_TOKEN = "user-token"
OTHER_USER_TOKEN = "other-user-token"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"fake-png-body"
PNG_DATA_URI = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()

OATMEAL_PAYLOAD: dict[str, object] = {
    "foodItems": [
        {
            "name": "1 bowl of oatmeal with blueberries",
            "calories": 210.0,
            "protein": 6.5,
            "carbs": 38.0,
            "fats": 4.0,
        }
    ]
}


@dataclass
class FakeModelClient(StructuredModelClient):
    """Fake structured model client returning canned payloads.

    ``by_keyword`` picks an extraction payload when the keyword appears in the
    text description; ``fail_keywords`` raise for matching descriptions.
    """

    extraction_payload: dict[str, object] = field(
        default_factory=lambda: copy.deepcopy(OATMEAL_PAYLOAD)
    )
    recognition_payload: dict[str, object] = field(
        default_factory=lambda: {"foodItems": []}
    )
    by_keyword: dict[str, dict[str, object]] = field(default_factory=dict)
    fail_keywords: set[str] = field(default_factory=set)
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

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
        self.calls.append(
            {
                "schema_name": schema_name,
                "prompt": prompt,
                "image_data_url": image_data_url,
            }
        )
        if self.error is not None:
            raise self.error
        if schema_name == "food_recognition":
            return self.recognition_payload
        description = prompt.rpartition("Description:")[2]
        for keyword in self.fail_keywords:
            if keyword in description:
                raise RuntimeError(f"model failed for {keyword}")
        for keyword, payload in self.by_keyword.items():
            if keyword in description:
                return payload
        return self.extraction_payload

    def calls_for(self, schema_name: str) -> list[dict[str, object]]:
        return [call for call in self.calls if call["schema_name"] == schema_name]


@dataclass
class FakeChatClient(ChatModelClient):
    """Fake chat client that replays scripted replies."""

    replies: list[ModelReply] = field(default_factory=list)
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def respond(
        self,
        *,
        model: str,
        instructions: str,
        input_items: list[dict[str, object]],
        tools: list[dict[str, object]],
    ) -> ModelReply:
        self.calls.append(
            {
                "model": model,
                "instructions": instructions,
                "input_items": copy.deepcopy(input_items),
                "tools": tools,
            }
        )
        if self.error is not None:
            raise self.error
        if not self.replies:
            return ModelReply(text="Eat more vegetables.")
        return self.replies.pop(0)


@dataclass
class InMemoryEntryRepository(EntryRepository):
    """In-memory entry repository with write-failure injection.

    With ``fail_after`` set, a batch raises after that many rows were staged;
    staged rows are discarded so nothing becomes visible.
    """

    entries: dict[UUID, FoodEntry] = field(default_factory=dict)
    fail_after: int | None = None
    list_calls: list[tuple[UUID, datetime, int]] = field(default_factory=list)

    def add_entries(self, user_id: UUID, entries: list[FoodEntry]) -> None:
        staged = dict(self.entries)
        for index, entry in enumerate(entries):
            if self.fail_after is not None and index == self.fail_after:
                raise RuntimeError("write failed")
            staged[entry.id] = entry
        self.entries = staged

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> None:
        entry = self.entries.get(entry_id)
        if entry is not None and entry.user_id == user_id:
            del self.entries[entry_id]

    def list_entries_since(
        self, user_id: UUID, since: datetime, limit: int
    ) -> list[FoodEntry]:
        self.list_calls.append((user_id, since, limit))
        matching = [
            entry
            for entry in self.entries.values()
            if entry.user_id == user_id and entry.created_at >= since
        ]
        matching.sort(key=lambda entry: entry.created_at, reverse=True)
        return matching[:limit]

    def for_user(self, user_id: UUID) -> list[FoodEntry]:
        return [entry for entry in self.entries.values() if entry.user_id == user_id]


@dataclass
class FakeTokenVerifier(TokenVerifier):
    """Token verifier backed by a static token map."""

    tokens: dict[str, UUID] = field(
        default_factory=lambda: {
            USER_TOKEN: USER_ID,
            OTHER_USER_TOKEN: OTHER_USER_ID,
        }
    )

    def verify(self, token: str) -> UUID | None:
        return self.tokens.get(token)


def make_entry(  # noqa: PLR0913
    created_at: datetime,
    name: str = "apple",
    calories: float = 95.0,
    protein: float = 0.5,
    carbs: float = 25.0,
    fats: float = 0.3,
    user_id: UUID = USER_ID,
) -> FoodEntry:
    """Build a food entry, by default for the primary test user."""
    return FoodEntry(
        id=uuid4(),
        user_id=user_id,
        name=name,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fats=fats,
        created_at=created_at,
    )


def make_ingestion_service(
    model_client: FakeModelClient,
    repository: InMemoryEntryRepository,
    strategy: str = "direct",
) -> IngestionService:
    return IngestionService(
        extraction_service=ExtractionService(
            client=model_client, model="gpt-test", reasoning_effort=None, store=False
        ),
        recognition_service=RecognitionService(
            client=model_client, model="gpt-test", reasoning_effort=None, store=False
        ),
        repository=repository,
        strategy=strategy,  # type: ignore[arg-type]
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=(
            "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
            "eyJyb2xlIjoic2VydmljZV9yb2xlIn0."
            "c2lnbmF0dXJl"
        ),
        openai_api_key="openai-key",
        environment="test",
    )


@pytest.fixture
def model_client() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture
def chat_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def entry_repository() -> InMemoryEntryRepository:
    return InMemoryEntryRepository()


@pytest.fixture
def container(
    settings: Settings,
    model_client: FakeModelClient,
    chat_client: FakeChatClient,
    entry_repository: InMemoryEntryRepository,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        token_verifier=FakeTokenVerifier(),
        ingestion_service=make_ingestion_service(model_client, entry_repository),
        entry_log_service=EntryLogService(repository=entry_repository),
        chat_service=DieticianChatService(client=chat_client, model="gpt-test"),
        close_resources=close_resources,
    )
