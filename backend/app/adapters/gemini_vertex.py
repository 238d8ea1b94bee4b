from __future__ import annotations

import os

import vertexai
from dotenv import load_dotenv
from google.api_core import exceptions as google_exceptions
from vertexai.generative_models import GenerativeModel

from app.adapters.base import MAX_TOKENS, TEMPERATURE, LLMAdapter
from app.core.exceptions import LLMAuthenticationError, LLMConnectionError, LLMRateLimitError
from app.core.logging import get_logger

logger = get_logger("memoledger.adapters.gemini")

GENERATION_CONFIG = {
    "temperature": TEMPERATURE,
    "max_output_tokens": MAX_TOKENS,
    "top_p": 0.8,
    "top_k": 10,
}


class GeminiVertexAdapter(LLMAdapter):
    provider = "gemini"
    display_name = "Google Gemini"

    def __init__(
        self,
        model_name: str,
        project: str | None = None,
        location: str | None = None,
    ) -> None:
        super().__init__(model_name)
        try:
            if project:
                vertexai.init(project=project, location=location or "us-central1")
            self.model = GenerativeModel(model_name)
            logger.info(f"Initialized GeminiVertexAdapter with model: {model_name}")
        except Exception as e:
            logger.error(f"Failed to initialize GenerativeModel: {e}")
            raise LLMConnectionError(
                f"Failed to initialize LLM model: {model_name}",
                details={"model": model_name, "error": str(e)},
            ) from e

    def _call_model(self, prompt: str, operation: str = "generate") -> str:
        """Call the LLM model with error handling."""
        try:
            response = self.model.generate_content(prompt, generation_config=GENERATION_CONFIG)
            text = getattr(response, "text", "") or ""
            if not text:
                logger.warning(f"Empty response from LLM for operation: {operation}")
            return text
        except (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied) as e:
            logger.error(f"Gemini rejected credentials: {e}")
            raise LLMAuthenticationError(
                "Authentication failed with Google Gemini. Please check your API key.",
                details={"operation": operation, "error": str(e)},
            ) from e
        except google_exceptions.ResourceExhausted as e:
            logger.error(f"LLM rate limit exceeded: {e}")
            raise LLMRateLimitError(
                "Rate limit exceeded for Google Gemini. Please try again later.",
                details={"operation": operation, "error": str(e)},
            ) from e
        except google_exceptions.ServiceUnavailable as e:
            logger.error(f"LLM service unavailable: {e}")
            raise LLMConnectionError(
                "Google Gemini is temporarily unavailable.",
                details={"operation": operation, "error": str(e)},
            ) from e
        except google_exceptions.InvalidArgument as e:
            logger.error(f"Invalid argument to LLM: {e}")
            raise LLMConnectionError(
                "Bad request to Google Gemini. Please check your input.",
                details={"operation": operation, "error": str(e)},
            ) from e
        except Exception as e:
            logger.error(f"Unexpected LLM error during {operation}: {e}", exc_info=True)
            raise LLMConnectionError(
                f"Google Gemini API error: {e}",
                details={"operation": operation, "error": str(e)},
            ) from e


if __name__ == "__main__":
    load_dotenv()
    project = os.getenv("GOOGLE_CLOUD_PROJECT") or os.getenv("VERTEX_PROJECT")
    location = os.getenv("VERTEX_LOCATION", "us-central1")
    model_name = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    if not project:
        raise SystemExit("Set GOOGLE_CLOUD_PROJECT or VERTEX_PROJECT before running this check.")

    adapter = GeminiVertexAdapter(model_name, project=project, location=location)
    results, raw = adapter.infer_categories(["Dinner at restaurant", "Tip for delivery"])
    print(raw)
