"""LLM factory utilities."""

from langchain_openai import ChatOpenAI

from .config import Settings, get_settings


def build_llm(settings: Settings | None = None) -> ChatOpenAI:
    """Build a chat model instance using the provided settings."""
    resolved = settings or get_settings()
    return ChatOpenAI(
        api_key=resolved.openai_api_key,
        model=resolved.openai_model,
        temperature=resolved.temperature,
    )
