from __future__ import annotations

import json
from typing import Any

from app.core.categories import AVAILABLE_CATEGORIES


CATEGORIZATION_PROMPT = """You are a financial transaction categorization expert. Analyze the following transaction messages and categorize each one.

Available Categories:
{category_list}

Transaction Messages:
{messages}

For each transaction, respond with a JSON array where each object has:
{{
  "transactionIndex": number (1-based),
  "category": string (exact category name from the list),
  "confidence": number (0-1),
  "reasoning": string (brief explanation)
}}

Example response:
[
  {{
    "transactionIndex": 1,
    "category": "Food & Dining",
    "confidence": 0.95,
    "reasoning": "Clear indication of food purchase"
  }}
]

Respond only with the JSON array, no other text."""


def build_category_list(categories: list[dict[str, Any]] | None = None) -> str:
    categories = categories if categories is not None else AVAILABLE_CATEGORIES
    return "\n".join(f"- {cat['name']}: {cat['description']}" for cat in categories)


def build_categorization_prompt(
    messages: list[str],
    categories: list[dict[str, Any]] | None = None,
) -> str:
    """Build the prompt asking the model to bucket memos into categories.

    Args:
        messages: Memo texts, numbered from 1 in the prompt
        categories: Catalog entries with 'name' and 'description' fields
    """
    # One line per memo, quoted as a JSON string
    numbered = "\n".join(
        f"{idx}. {json.dumps(msg, ensure_ascii=False)}" for idx, msg in enumerate(messages, start=1)
    )
    return CATEGORIZATION_PROMPT.format(
        category_list=build_category_list(categories),
        messages=numbered,
    )
