"""Free-text meal parsing using LLMs."""

from dataclasses import dataclass

from meal_logger.domain.completions import OutputSchema, ParsedMeal
from meal_logger.domain.meals import ParsedItem
from meal_logger.domain.products import normalize_name
from meal_logger.services.completion import CompletionError, StructuredCompletionClient

PARSED_MEAL_SCHEMA: OutputSchema[ParsedMeal] = OutputSchema(
    name="parsed_meal",
    json_schema={
        "type": "object",
        "properties": {
            "items": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {
                            "type": "string",
                            "description": "Name of the food item",
                        },
                        "quantity": {
                            "type": "number",
                            "description": "Quantity in the unit of the item",
                        },
                    },
                    "required": ["name", "quantity"],
                    "additionalProperties": False,
                },
            }
        },
        "required": ["items"],
        "additionalProperties": False,
    },
    model=ParsedMeal,
)

_SYSTEM_PROMPT = """You are an expert nutrition data parser. Analyze meal \
descriptions and extract individual food items with quantities.

Guidelines:
- Extract all identifiable food items from the description
- Include quantity for each item (default to 100 if not specified)
- Use grams for solids, millilitres for liquids, a count for individual items
- Normalize food names to lowercase singular form
- Return ONLY valid JSON with no additional text

Example output: {"items": [{"name": "chicken", "quantity": 200}, \
{"name": "rice", "quantity": 100}]}"""


class MealParseError(Exception):
    """Raised when a meal description could not be parsed."""


@dataclass
class MealTextParser:
    """Turns a meal description into named, quantified items."""

    client: StructuredCompletionClient
    max_tokens: int = 500
    temperature: float = 0.3

    async def parse(self, text: str) -> list[ParsedItem]:
        """Parse ``text`` into items; an empty list means nothing was recognized."""
        prompt = (
            "Parse the following meal description and extract food items "
            f'with quantities:\n\n"{text}"'
        )
        try:
            completion = await self.client.complete(
                prompt=prompt,
                schema=PARSED_MEAL_SCHEMA,
                system_prompt=_SYSTEM_PROMPT,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except CompletionError as exc:
            raise MealParseError(f"LLM meal parsing failed: {exc}") from exc

        items: list[ParsedItem] = []
        for item in completion.content.items:
            name = normalize_name(item.name)
            if not name:
                continue
            items.append(ParsedItem(name=name, quantity=item.quantity))
        return items
