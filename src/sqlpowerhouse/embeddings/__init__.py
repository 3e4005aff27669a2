"""Embedding providers for context retrieval.

The retriever and the sync jobs must share one provider configuration:
both sides of the vector index have to come from the same model.

Example:
    >>> from sqlpowerhouse.embeddings import get_provider
    >>> provider = get_provider("fastembed")
    >>> vector = provider.embed("total revenue per month")
"""

from sqlpowerhouse.embeddings.provider import EmbeddingProvider, EmbeddingResult

__all__ = [
    "EmbeddingProvider",
    "EmbeddingResult",
    "get_provider",
]


def get_provider(
    provider: str | EmbeddingProvider = "fastembed",
    **kwargs: object,
) -> EmbeddingProvider:
    """Get an embedding provider by name or return the provider if already instantiated.

    Args:
        provider: Provider name ("fastembed", "openai") or EmbeddingProvider instance.
        **kwargs: Additional arguments passed to the provider constructor.

    Returns:
        EmbeddingProvider instance.

    Raises:
        ValueError: If provider name is unknown.
        ImportError: If required dependencies are not installed.
    """
    if isinstance(provider, EmbeddingProvider):
        return provider

    if provider == "fastembed":
        from sqlpowerhouse.embeddings.fastembed import FastEmbedProvider

        return FastEmbedProvider(**kwargs)  # type: ignore[arg-type]
    elif provider == "openai":
        from sqlpowerhouse.embeddings.openai import OpenAIProvider

        return OpenAIProvider(**kwargs)  # type: ignore[arg-type]
    else:
        raise ValueError(
            f"Unknown embedding provider: {provider}. Available: 'fastembed', 'openai'"
        )
