"""Google Gemini client (Gemini API or Vertex AI)."""

from __future__ import annotations

import os
from typing import Any

from sqlpowerhouse.exceptions import GenerationUnavailable
from sqlpowerhouse.generation.client import GenerationClient


class GeminiGenerationClient(GenerationClient):
    """Content generation through the google-genai SDK.

    Uses the Gemini API when an API key is available and Vertex AI
    otherwise (project and location come from the environment).
    """

    DEFAULT_MODEL = "gemini-2.5-flash-lite"

    def __init__(self, model: str = DEFAULT_MODEL, api_key: str | None = None) -> None:
        """Initialize the client.

        Args:
            model: Gemini model name.
            api_key: Gemini API key. Falls back to GEMINI_API_KEY env var.
        """
        try:
            from google import genai
            from google.genai import types
        except ImportError as e:
            raise ImportError(
                "google-genai is required for Gemini generation. "
                "Install it with: pip install sqlpowerhouse[gemini]"
            ) from e

        api_key = api_key or os.environ.get("GEMINI_API_KEY")
        self._client: Any = genai.Client(api_key=api_key) if api_key else genai.Client(vertexai=True)
        self._config = types.GenerateContentConfig(temperature=0)
        self._model = model

    def generate(self, prompt: str) -> str:
        """Single-turn generation at temperature 0."""
        try:
            response = self._client.models.generate_content(
                model=self._model,
                contents=prompt,
                config=self._config,
            )
        except Exception as e:
            raise GenerationUnavailable(
                f"Gemini generation failed: {e}", {"model": self._model}
            ) from e

        return response.text or ""

    @property
    def model_name(self) -> str:
        return self._model
