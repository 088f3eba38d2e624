from .base import (
    LLMClient, LLMError, ModelStream, StreamPart,
    TextDelta, ToolCallPart, UsagePart, FinishPart,
)
from .openai_client import OpenAIClient
from .gemini_client import GeminiClient
from ..config import Config, ConfigError


def create_transport(cfg: Config, provider: str | None = None,
                     model: str | None = None) -> LLMClient:
    """Build the model transport for *provider* (default: from config)."""
    provider = (provider or cfg.PROVIDER).lower()
    model = model or cfg.get_provider_model(provider)
    llm_kwargs = dict(
        max_retries=cfg.LLM_MAX_RETRIES,
        retry_delay=cfg.LLM_RETRY_DELAY,
        timeout=cfg.REQUEST_TIMEOUT,
    )

    if provider == "openai":
        if not cfg.OPENAI_API_KEY:
            raise ConfigError(
                "OpenAI provider requires an API key. "
                "Set OPENAI_API_KEY or add it to .ai-secretary.yaml.")
        return OpenAIClient(base_url=cfg.OPENAI_BASE_URL, model=model,
                            api_key=cfg.OPENAI_API_KEY, **llm_kwargs)
    if provider == "google":
        if not cfg.GOOGLE_API_KEY:
            raise ConfigError(
                "Google provider requires an API key. "
                "Set GOOGLE_GENERATIVE_AI_API_KEY or add it to .ai-secretary.yaml.")
        return GeminiClient(base_url=cfg.GOOGLE_BASE_URL, model=model,
                            api_key=cfg.GOOGLE_API_KEY, **llm_kwargs)
    raise ConfigError(f"Unknown provider '{provider}'. Choose openai or google.")
