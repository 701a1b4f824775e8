"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrisnap.adapters.openai_model_client import OpenAIModelClient
from nutrisnap.adapters.supabase_entry_repository import SupabaseEntryRepository
from nutrisnap.adapters.supabase_token_verifier import SupabaseTokenVerifier
from nutrisnap.config import Settings
from nutrisnap.services.auth import TokenVerifier
from nutrisnap.services.chat import DieticianChatService
from nutrisnap.services.entries import EntryLogService
from nutrisnap.services.extraction import ExtractionService
from nutrisnap.services.ingestion import IngestionService
from nutrisnap.services.recognition import RecognitionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    token_verifier: TokenVerifier
    ingestion_service: IngestionService
    entry_log_service: EntryLogService
    chat_service: DieticianChatService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    entry_repository = SupabaseEntryRepository(
        supabase_client, table_name=resolved_settings.supabase_entries_table
    )
    model_client = OpenAIModelClient.create(resolved_settings.openai_api_key)
    extraction_service = ExtractionService(
        client=model_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    recognition_service = RecognitionService(
        client=model_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    ingestion_service = IngestionService(
        extraction_service=extraction_service,
        recognition_service=recognition_service,
        repository=entry_repository,
        strategy=resolved_settings.ingestion_strategy,
    )
    entry_log_service = EntryLogService(
        repository=entry_repository,
        window_days=resolved_settings.log_window_days,
    )
    chat_service = DieticianChatService(
        client=model_client,
        model=resolved_settings.openai_chat_model,
    )

    async def close_resources() -> None:
        await model_client.client.close()

    return AppContainer(
        settings=resolved_settings,
        token_verifier=SupabaseTokenVerifier(supabase_client),
        ingestion_service=ingestion_service,
        entry_log_service=entry_log_service,
        chat_service=chat_service,
        close_resources=close_resources,
    )
