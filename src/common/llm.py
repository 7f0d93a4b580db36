"""
Shared LLM helpers.

This module centralizes construction of the OpenAI-compatible client and the
chat completion call so every inference provider talks to the API the same
way. Calls are made exactly once; retry policy belongs to the caller.
"""

import openai

from .config import Settings


def build_openai_client(settings: Settings) -> openai.OpenAI:
    """
    Create an OpenAI-compatible client from explicit settings.

    Raises `ValueError` when the OpenAI provider is selected without an API key.
    """
    if settings.LLM_PROVIDER == "ollama":
        return openai.OpenAI(
            api_key="ollama",  # Ollama ignores the key but the SDK requires one
            base_url=settings.OLLAMA_BASE_URL,
            timeout=settings.REQUEST_TIMEOUT,
            max_retries=0,
        )
    if not settings.OPENAI_API_KEY:
        raise ValueError("Required environment variable 'OPENAI_API_KEY' is not set.")
    return openai.OpenAI(
        api_key=settings.OPENAI_API_KEY,
        timeout=settings.REQUEST_TIMEOUT,
        max_retries=0,
    )


class OpenAIChatMixin:
    """
    Mixin providing a single OpenAI-compatible chat completion call.

    The mixin expects ``self.settings``. Subclasses call `_init_client` from
    ``__init__`` so one client, and one connection pool, is shared by every
    worker thread that uses the instance.
    """

    client: openai.OpenAI

    def _init_client(self) -> None:
        self.client = build_openai_client(self.settings)

    def _create_completion(self, **kwargs):
        """Call the OpenAI-compatible chat completion API once."""
        return self.client.chat.completions.create(**kwargs)
