"""Provider dependencies for API routes.

Routes take their generators through ``Depends`` so tests can swap them via
``app.dependency_overrides``.
"""

from functools import lru_cache

from contentforge.core.config import get_settings
from contentforge.core.llm import (
    TextGenerator,
    build_openrouter_generator,
    build_perplexity_generator,
)


@lru_cache(maxsize=1)
def get_openrouter_generator() -> TextGenerator:
    """OpenRouter generator (cached per process)."""
    return build_openrouter_generator(get_settings())


@lru_cache(maxsize=1)
def get_perplexity_generator() -> TextGenerator:
    """Perplexity generator (cached per process)."""
    return build_perplexity_generator(get_settings())
