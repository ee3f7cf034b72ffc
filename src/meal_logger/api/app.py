"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import Depends, FastAPI, Header, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from meal_logger.api.models import (
    EntriesPayload,
    EntryPayload,
    PaginationPayload,
    ProcessMealCommand,
    ProcessResultPayload,
)
from meal_logger.app_logging import configure_logging
from meal_logger.containers import AppContainer
from meal_logger.services.entries import DeleteOutcome


async def require_user_id(x_user_id: str | None = Header(default=None)) -> UUID:
    """Return the caller's user id supplied by the upstream auth layer."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from None


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/process")
    async def process_meal(
        command: ProcessMealCommand,
        request: Request,
        user_id: UUID = Depends(require_user_id),
    ) -> JSONResponse:
        """Log every food item found in a free-text meal description."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.meal_processing_service.process(
            command.text, user_id
        )
        payload = ProcessResultPayload.from_domain(result)
        if not result.successes and result.errors:
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        else:
            status_code = status.HTTP_201_CREATED
        return JSONResponse(
            payload.model_dump(mode="json", by_alias=True), status_code=status_code
        )

    @app.get("/entries")
    def list_entries(
        request: Request, user_id: UUID = Depends(require_user_id)
    ) -> JSONResponse:
        """Return today's entries for the caller."""
        state_container: AppContainer = request.app.state.container
        entries = state_container.entry_service.list_today(user_id)
        payload = EntriesPayload(
            data=[EntryPayload.from_domain(entry) for entry in entries],
            pagination=PaginationPayload(
                page=1, size=len(entries), total=len(entries)
            ),
        )
        return JSONResponse(payload.model_dump(mode="json", by_alias=True))

    @app.delete("/entries/{entry_id}")
    def delete_entry(
        entry_id: UUID, request: Request, user_id: UUID = Depends(require_user_id)
    ) -> Response:
        """Delete one of the caller's entries."""
        state_container: AppContainer = request.app.state.container
        outcome = state_container.entry_service.delete_entry(user_id, entry_id)
        if outcome is DeleteOutcome.NOT_FOUND:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        if outcome is DeleteOutcome.FORBIDDEN:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app
