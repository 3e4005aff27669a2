"""OpenAI chat-completion client."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from sqlpowerhouse.exceptions import GenerationUnavailable
from sqlpowerhouse.generation.client import GenerationClient

if TYPE_CHECKING:
    from openai import OpenAI


class OpenAIGenerationClient(GenerationClient):
    """Chat completions through the OpenAI API (or a compatible endpoint)."""

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        base_url: str | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            model: Chat model name.
            api_key: OpenAI API key. Falls back to OPENAI_API_KEY env var.
            base_url: Optional OpenAI-compatible endpoint.
        """
        try:
            from openai import OpenAI
        except ImportError as e:
            raise ImportError(
                "openai is required for OpenAI generation. "
                "Install it with: pip install sqlpowerhouse[openai]"
            ) from e

        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self._client: OpenAI = OpenAI(api_key=api_key, base_url=base_url)
        self._model = model

    def generate(self, prompt: str) -> str:
        """Single-turn completion at temperature 0."""
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0,
            )
        except Exception as e:
            raise GenerationUnavailable(
                f"OpenAI completion failed: {e}", {"model": self._model}
            ) from e

        return response.choices[0].message.content or ""

    @property
    def model_name(self) -> str:
        return self._model
