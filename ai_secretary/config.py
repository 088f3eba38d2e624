"""
Configuration — loads settings from .ai-secretary.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import os

import yaml


class ConfigError(Exception):
    """Raised when the configuration cannot produce a usable setup."""


PROVIDERS = ("openai", "google")

_DEFAULTS = {
    "provider": "openai",
    "models": {
        "openai": "gpt-4.1",
        "google": "gemini-2.5-flash-preview-04-17",
    },
    "openai_api_key": "",
    "openai_base_url": "https://api.openai.com/v1",
    "google_api_key": "",
    "google_base_url": "https://generativelanguage.googleapis.com/v1beta",
    "wiki_api_url": "https://wiki.creatorsgarten.org/api/contentsgarten",
    "wikigarten_auth": "",
    "llm_max_retries": 3,
    "llm_retry_delay": 2.0,
    "request_timeout": 300.0,
    "diff_context": 5,
}

# Config file search locations
_CONFIG_FILENAMES = [".ai-secretary.yaml", ".ai-secretary.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    # Search CWD first, then home directory
    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


def _section(yd: dict, name: str) -> dict:
    value = yd.get(name)
    return value if isinstance(value, dict) else {}


class Config:
    """Application configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables
    3. .ai-secretary.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, default, cast=str):
            value = os.getenv(env_key)
            source = env_key
            if not value:
                value = yd.get(yaml_key)
                source = yaml_key
            if value is None:
                return default
            try:
                return cast(value)
            except (TypeError, ValueError):
                raise ConfigError(
                    f"Invalid value for {source}: {value!r}") from None

        self.PROVIDER = _get("PROVIDER", "provider", _DEFAULTS["provider"]).lower()
        self.MODEL = _get("AI_SECRETARY_MODEL", "model", None)

        # Per-provider default models
        self._provider_models: dict[str, str] = dict(_DEFAULTS["models"])
        models_section = _section(yd, "models")
        for provider in PROVIDERS:
            if provider in models_section:
                self._provider_models[provider] = str(models_section[provider])

        openai_section = _section(yd, "openai")
        self.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY") or openai_section.get(
            "api_key", _DEFAULTS["openai_api_key"])
        self.OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or openai_section.get(
            "base_url", _DEFAULTS["openai_base_url"])

        google_section = _section(yd, "google")
        self.GOOGLE_API_KEY = (os.getenv("GOOGLE_GENERATIVE_AI_API_KEY")
                               or os.getenv("GEMINI_API_KEY")
                               or google_section.get("api_key",
                                                     _DEFAULTS["google_api_key"]))
        self.GOOGLE_BASE_URL = os.getenv("GEMINI_BASE_URL") or google_section.get(
            "base_url", _DEFAULTS["google_base_url"])

        # Creatorsgarten wiki
        self.WIKI_API_URL = _get("WIKI_API_URL", "wiki_api_url",
                                 _DEFAULTS["wiki_api_url"])
        self.WIKIGARTEN_AUTH = _get("WIKIGARTEN_AUTH", "wikigarten_auth",
                                    _DEFAULTS["wikigarten_auth"])

        self.LLM_MAX_RETRIES = _get("LLM_MAX_RETRIES", "llm_max_retries",
                                    _DEFAULTS["llm_max_retries"], cast=int)
        self.LLM_RETRY_DELAY = _get("LLM_RETRY_DELAY", "llm_retry_delay",
                                    _DEFAULTS["llm_retry_delay"], cast=float)
        self.REQUEST_TIMEOUT = _get("REQUEST_TIMEOUT", "request_timeout",
                                    _DEFAULTS["request_timeout"], cast=float)
        self.DIFF_CONTEXT = _get("DIFF_CONTEXT", "diff_context",
                                 _DEFAULTS["diff_context"], cast=int)

    def get_provider_model(self, provider: str) -> str:
        """Return the model for *provider*: explicit override, else its default."""
        if self.MODEL:
            return self.MODEL
        try:
            return self._provider_models[provider]
        except KeyError:
            raise ConfigError(
                f"Unknown provider '{provider}'. "
                f"Choose one of: {', '.join(PROVIDERS)}") from None

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
