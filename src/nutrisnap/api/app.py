"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from uuid import UUID

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from nutrisnap.api.auth import require_user, viewer_timezone
from nutrisnap.api.models import ChatRequest, ImageEntryRequest, TextEntryRequest
from nutrisnap.app_logging import configure_logging
from nutrisnap.containers import AppContainer
from nutrisnap.domain.entries import DayGroup, FoodEntry
from nutrisnap.domain.submissions import (
    ImageSubmission,
    TextSubmission,
    parse_image_data_uri,
)
from nutrisnap.errors import NutriSnapError, ValidationError

MAX_LOG_DAYS = 90
_REQUEST_SECTIONS = {"body", "query", "path", "header"}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(NutriSnapError)
    async def handle_nutrisnap_error(
        request: Request, exc: NutriSnapError
    ) -> JSONResponse:
        logger.warning(
            "Request failed: %s",
            type(exc).__name__,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": _format_error(container, exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"error": _validation_message(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/entries/text")
    async def add_text_entry(
        body: TextEntryRequest, user_id: UUID = Depends(require_user)
    ) -> dict[str, object]:
        """Log food from a text description."""
        entries = await container.ingestion_service.ingest(
            user_id, TextSubmission(description=body.description)
        )
        return _entries_payload(entries)

    @app.post("/entries/image")
    async def add_image_entry(
        body: ImageEntryRequest, user_id: UUID = Depends(require_user)
    ) -> dict[str, object]:
        """Log food from a photo sent as a data URI."""
        submission = parse_image_data_uri(body.data_uri)
        entries = await container.ingestion_service.ingest(user_id, submission)
        return _entries_payload(entries)

    @app.post("/entries/photo")
    async def add_photo_entry(
        request: Request, user_id: UUID = Depends(require_user)
    ) -> dict[str, object]:
        """Log food from a raw image upload."""
        image_bytes = await request.body()
        if not image_bytes:
            raise ValidationError("Image is required.")
        mime_type = request.headers.get("content-type", "").split(";")[0].strip()
        if mime_type and mime_type != "application/octet-stream":
            submission = ImageSubmission(data=image_bytes, mime_type=mime_type)
        else:
            submission = ImageSubmission.from_bytes(image_bytes)
        entries = await container.ingestion_service.ingest(user_id, submission)
        return _entries_payload(entries)

    @app.get("/entries/today")
    async def today_totals(
        user_id: UUID = Depends(require_user),
        timezone: str = Depends(viewer_timezone),
    ) -> dict[str, float]:
        """Return today's nutrition totals."""
        totals = container.entry_log_service.get_today(user_id, timezone)
        return asdict(totals)

    @app.get("/entries")
    async def list_entries(
        days: int | None = Query(default=None, ge=1, le=MAX_LOG_DAYS),
        user_id: UUID = Depends(require_user),
        timezone: str = Depends(viewer_timezone),
    ) -> dict[str, object]:
        """Return the recent food log grouped by day."""
        groups = container.entry_log_service.get_log(user_id, timezone, days)
        return {"groups": [_group_payload(group) for group in groups]}

    @app.delete("/entries/{entry_id}")
    async def delete_entry(
        entry_id: UUID, user_id: UUID = Depends(require_user)
    ) -> dict[str, str]:
        """Delete one of the user's entries."""
        container.entry_log_service.delete(user_id, entry_id)
        return {"status": "ok"}

    @app.post("/dietician/chat")
    async def dietician_chat(
        body: ChatRequest, user_id: UUID = Depends(require_user)
    ) -> dict[str, str]:
        """Answer the latest chat message."""
        food_log = (
            container.entry_log_service.bind_food_log(user_id)
            if body.use_food_log
            else None
        )
        reply = await container.chat_service.reply(body.history, food_log)
        return {"reply": reply}

    return app


def _format_error(container: AppContainer, exc: NutriSnapError) -> str:
    """Return the user-facing message, with cause details in local runs."""
    message = exc.user_message
    if container.settings.environment != "local" or exc.__cause__ is None:
        return message
    cause = exc.__cause__
    detail = f"{type(cause).__name__}: {cause}".strip()
    return f"{message} (debug: {detail})"


def _validation_message(exc: RequestValidationError) -> str:
    """Name the first invalid field without exposing validator internals."""
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    location = [
        str(part)
        for part in errors[0].get("loc", ())
        if part not in _REQUEST_SECTIONS
    ]
    if not location:
        return "Invalid request."
    return f"Invalid value for {'.'.join(location)}."


def _entries_payload(entries: list[FoodEntry]) -> dict[str, object]:
    return {"entries": [entry.to_dict() for entry in entries]}


def _group_payload(group: DayGroup) -> dict[str, object]:
    return {
        "day": group.day.isoformat(),
        "label": group.label,
        "entries": [entry.to_dict() for entry in group.entries],
    }
