from __future__ import annotations

import json
import re
from typing import Any

from app.core.exceptions import LLMParseError
from app.core.logging import get_logger
from app.prompt.category_prompts import build_categorization_prompt

logger = get_logger("memoledger.adapters.llm")

TEMPERATURE = 0.1
MAX_TOKENS = 2000

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


class LLMAdapter:
    """Shared prompt/parse flow; subclasses only implement ``_call_model``."""

    provider = "llm"
    display_name = "LLM"

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name

    def infer_categories(self, messages: list[str]) -> tuple[list[dict[str, Any]], str]:
        prompt = build_categorization_prompt(messages)
        logger.debug(f"Categorizing {len(messages)} messages with {self.display_name}")

        text = self._call_model(prompt, operation="infer_categories")
        logger.debug(f"{self.display_name} response received: {text[:100]}...")
        results = self._parse_categories(text)
        logger.info(f"{self.display_name} categorized {len(results)} of {len(messages)} messages")
        return results, text

    def _call_model(self, prompt: str, operation: str = "generate") -> str:
        raise NotImplementedError

    def _parse_categories(self, text: str) -> list[dict[str, Any]]:
        cleaned = self._extract_json_array(text)
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse categories JSON: {e}. Raw response: {text[:200]}")
            raise LLMParseError(
                f"Failed to parse AI response as JSON: {e}",
                raw_response=text,
                details={"error": str(e)},
            ) from e

        if not isinstance(data, list):
            logger.warning(f"Expected list for categories, got {type(data).__name__}")
            raise LLMParseError(
                "AI response is not a JSON array",
                raw_response=text,
            )

        results: list[dict[str, Any]] = []
        for position, item in enumerate(data, start=1):
            if not isinstance(item, dict):
                continue
            results.append(
                {
                    "transactionIndex": self._as_int(item.get("transactionIndex"), position),
                    "category": str(item.get("category", "")).strip(),
                    "confidence": self._as_confidence(item.get("confidence")),
                    "reasoning": str(item.get("reasoning", "") or "").strip(),
                }
            )
        return results

    @classmethod
    def _extract_json_array(cls, text: str) -> str:
        cleaned = cls._strip_code_fence(text)
        match = _JSON_ARRAY.search(cleaned)
        return match.group(0) if match else cleaned.strip()

    @staticmethod
    def _strip_code_fence(text: str) -> str:
        cleaned = text.strip()
        if cleaned.startswith("```"):
            cleaned = cleaned.split("\n", 1)[1] if "\n" in cleaned else ""
        if cleaned.endswith("```"):
            cleaned = cleaned.rsplit("\n", 1)[0]
        return cleaned.strip()

    @staticmethod
    def _as_int(value: Any, default: int) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    @staticmethod
    def _as_confidence(value: Any) -> float:
        try:
            confidence = float(value)
        except (TypeError, ValueError):
            return 0.0
        return min(max(confidence, 0.0), 1.0)
