from enum import Enum
from functools import lru_cache
from typing import Union

from pydantic import BaseModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.ollama import OllamaProvider


class ModelConfig(BaseModel):
    """Configuration for a language model."""

    provider: str
    model_name: str
    context_window: int


class ModelChoice(Enum):
    """Available language models with their configurations."""

    OPENAI_GPT4O_MINI = ModelConfig(
        provider="openai",
        model_name="gpt-4o-mini",
        context_window=128_000,
    )
    OPENAI_GPT4O = ModelConfig(
        provider="openai",
        model_name="gpt-4o",
        context_window=128_000,
    )
    # https://ollama.com/library/qwen3 - Local models
    OLLAMA_QWEN3_0_8B = ModelConfig(
        provider="ollama",
        model_name="qwen3:8b",
        context_window=40_000,
    )


ModelSpec = Union[str, OpenAIChatModel]

_OLLAMA_BASE_URL = "http://127.0.0.1:11434/v1"


@lru_cache(maxsize=None)
def _get_ollama_model(model_name: str) -> OpenAIChatModel:
    provider = OllamaProvider(base_url=_OLLAMA_BASE_URL)
    return OpenAIChatModel(model_name=model_name, provider=provider)


def get_model(choice: ModelChoice) -> ModelSpec:
    """Get a model instance from a ModelChoice enum value."""
    config = choice.value
    if config.provider == "openai":
        return f"openai:{config.model_name}"
    if config.provider == "ollama":
        return _get_ollama_model(config.model_name)
    raise ValueError(f"Unsupported model provider: {config.provider}")


def model_choice_from_name(name: str) -> ModelChoice:
    """Resolve a settings value such as ``OPENAI_GPT4O_MINI`` or ``gpt-4o-mini``."""
    for choice in ModelChoice:
        if name in (choice.name, choice.value.model_name):
            return choice
    raise ValueError(f"Unknown model: {name}")


# Rough characters-per-token ratio of English transcripts.
_CHARS_PER_TOKEN = 4


def fit_to_context(text: str, choice: ModelChoice, reserved_tokens: int = 4_000) -> str:
    """Cut ``text`` so that it leaves ``reserved_tokens`` of the context window free."""
    max_chars = max(0, choice.value.context_window - reserved_tokens) * _CHARS_PER_TOKEN
    return text[:max_chars]
