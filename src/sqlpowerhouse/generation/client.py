"""Generation client interface."""

from abc import ABC, abstractmethod


class GenerationClient(ABC):
    """Thin adapter around a language-model completion call.

    Implementations pin temperature to zero and translate transport or auth
    failures into GenerationUnavailable. They hold no business logic.
    """

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Complete a prompt.

        Args:
            prompt: Full prompt text.

        Returns:
            Raw model output.

        Raises:
            GenerationUnavailable: If the model call fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier, for logging."""
        ...
