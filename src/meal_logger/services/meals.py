"""Meal processing pipeline: parse, resolve, write, aggregate."""

import asyncio
import logging
from dataclasses import dataclass
from uuid import UUID

from meal_logger.domain.meals import EntryResult, ItemError, ParsedItem, ProcessResult
from meal_logger.domain.products import Product, ResolutionFailure
from meal_logger.services.entries import EntryWriter
from meal_logger.services.parser import MealParseError, MealTextParser
from meal_logger.services.products import ProductResolver

NO_ITEMS_MESSAGE = "No recognizable meal items found in the input"
INVALID_QUANTITY_MESSAGE = "Quantity must be greater than zero"
WRITE_TIMEOUT_MESSAGE = "Timed out while saving entry"

_logger = logging.getLogger(__name__)

Resolved = dict[str, Product | ResolutionFailure]


@dataclass
class MealProcessingService:
    """Logs every item of a meal description, isolating per-item failures."""

    parser: MealTextParser
    resolver: ProductResolver
    writer: EntryWriter
    deadline_seconds: float = 60.0

    async def process(self, text: str, user_id: UUID) -> ProcessResult:
        """Process a meal description and report successes and errors.

        Items whose product is already cached are written before any
        missing product is resolved, so a slow lookup only fails its own
        items. Results keep the parse order.
        """
        deadline = asyncio.get_running_loop().time() + self.deadline_seconds

        try:
            async with asyncio.timeout_at(deadline):
                items = await self.parser.parse(text)
        except TimeoutError:
            return _text_failure(text, "Timed out while parsing meal description")
        except MealParseError as exc:
            return _text_failure(text, f"Failed to parse meal description: {exc}")
        except Exception:
            _logger.exception("Unexpected error while parsing meal description")
            return _text_failure(text, "Failed to parse meal description")
        if not items:
            return _text_failure(text, NO_ITEMS_MESSAGE)

        names = list(dict.fromkeys(item.name for item in items if item.quantity > 0))
        resolved = await self._lookup_cached(names, deadline)

        outcomes: dict[int, EntryResult | ItemError] = {}
        for index, item in enumerate(items):
            if item.quantity <= 0 or item.name in resolved:
                outcomes[index] = await self._write_item(
                    item, resolved, user_id, deadline
                )

        await self._resolve_missing(names, resolved, deadline)
        for index, item in enumerate(items):
            if index not in outcomes:
                outcomes[index] = await self._write_item(
                    item, resolved, user_id, deadline
                )

        result = ProcessResult()
        for index in range(len(items)):
            outcome = outcomes[index]
            if isinstance(outcome, ItemError):
                result.errors.append(outcome)
            else:
                result.successes.append(outcome)
        _logger.info(
            "Processed meal: items=%s successes=%s errors=%s",
            len(items),
            len(result.successes),
            len(result.errors),
        )
        return result

    async def _lookup_cached(self, names: list[str], deadline: float) -> Resolved:
        resolved: Resolved = {}
        try:
            async with asyncio.timeout_at(deadline):
                resolved.update(await self.resolver.resolve_batch(set(names)))
        except Exception:
            _logger.exception("Batch product lookup failed, resolving one by one")
        return resolved

    async def _resolve_missing(
        self, names: list[str], resolved: Resolved, deadline: float
    ) -> None:
        for name in names:
            if name in resolved:
                continue
            try:
                async with asyncio.timeout_at(deadline):
                    resolved[name] = await self.resolver.resolve_or_create(name, name)
            except TimeoutError:
                resolved[name] = ResolutionFailure(
                    name=name, message="Timed out while resolving product"
                )
            except Exception:
                _logger.exception("Unexpected error while resolving %s", name)
                resolved[name] = ResolutionFailure(
                    name=name, message="Unexpected error while resolving product"
                )

    async def _write_item(
        self,
        item: ParsedItem,
        resolved: Resolved,
        user_id: UUID,
        deadline: float,
    ) -> EntryResult | ItemError:
        if item.quantity <= 0:
            return ItemError(item.source_text, INVALID_QUANTITY_MESSAGE)
        product = resolved.get(item.name)
        if product is None:
            return ItemError(item.source_text, "Product could not be resolved")
        if isinstance(product, ResolutionFailure):
            return ItemError(item.source_text, product.message)
        if asyncio.get_running_loop().time() >= deadline:
            return ItemError(item.source_text, WRITE_TIMEOUT_MESSAGE)
        # A started write runs to completion so the result matches storage.
        try:
            return await self.writer.write(product, item.quantity, user_id)
        except Exception:
            _logger.exception("Failed to create entry for %s", item.name)
            return ItemError(item.source_text, "Failed to create entry")


def _text_failure(text: str, message: str) -> ProcessResult:
    return ProcessResult(successes=[], errors=[ItemError(text, message)])
