"""Language-model clients for SQL generation.

Example:
    >>> from sqlpowerhouse.generation import get_client
    >>> client = get_client("gemini", model="gemini-2.5-flash-lite")
    >>> raw = client.generate(prompt)
"""

from sqlpowerhouse.generation.client import GenerationClient

__all__ = [
    "GenerationClient",
    "get_client",
]


def get_client(
    client: str | GenerationClient = "openai",
    **kwargs: object,
) -> GenerationClient:
    """Get a generation client by name or return the client if already instantiated.

    Args:
        client: Client name ("openai", "gemini") or GenerationClient instance.
        **kwargs: Additional arguments passed to the client constructor.

    Returns:
        GenerationClient instance.

    Raises:
        ValueError: If client name is unknown.
        ImportError: If required dependencies are not installed.
    """
    if isinstance(client, GenerationClient):
        return client

    if client == "openai":
        from sqlpowerhouse.generation.openai import OpenAIGenerationClient

        return OpenAIGenerationClient(**kwargs)  # type: ignore[arg-type]
    elif client == "gemini":
        from sqlpowerhouse.generation.gemini import GeminiGenerationClient

        return GeminiGenerationClient(**kwargs)  # type: ignore[arg-type]
    else:
        raise ValueError(f"Unknown generation client: {client}. Available: 'openai', 'gemini'")
