"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_logger.adapters.openrouter_client import OpenRouterCompletionClient
from meal_logger.adapters.supabase_entry_repository import SupabaseEntryRepository
from meal_logger.adapters.supabase_product_repository import (
    SupabaseProductRepository,
)
from meal_logger.config import Settings
from meal_logger.services.entries import EntryService, EntryWriter, system_clock
from meal_logger.services.meals import MealProcessingService
from meal_logger.services.parser import MealTextParser
from meal_logger.services.products import ProductResolver


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    meal_processing_service: MealProcessingService
    entry_service: EntryService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    product_repository = SupabaseProductRepository(supabase_client)
    entry_repository = SupabaseEntryRepository(supabase_client)
    completion_client = OpenRouterCompletionClient.create(
        resolved_settings.openrouter_api_key,
        base_url=resolved_settings.openrouter_base_url,
        model=resolved_settings.openrouter_model,
        timeout_seconds=resolved_settings.llm_timeout_seconds,
    )
    clock = system_clock(resolved_settings.timezone)
    meal_processing_service = MealProcessingService(
        parser=MealTextParser(completion_client),
        resolver=ProductResolver(
            repository=product_repository,
            completion_client=completion_client,
        ),
        writer=EntryWriter(repository=entry_repository, clock=clock),
        deadline_seconds=resolved_settings.request_deadline_seconds,
    )
    entry_service = EntryService(repository=entry_repository, clock=clock)

    async def close_resources() -> None:
        await completion_client.close()

    return AppContainer(
        settings=resolved_settings,
        meal_processing_service=meal_processing_service,
        entry_service=entry_service,
        close_resources=close_resources,
    )
