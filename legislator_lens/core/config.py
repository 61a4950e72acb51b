"""
Legislator Lens - configuration
Configuration is a plain dict read with .get(key, default). load_config layers
defaults, environment variables and explicit overrides.
"""
import copy
import os
from typing import Any, Dict, Optional

DEFAULT_CONFIG: Dict[str, Any] = {
    # cloud credentials
    "gemini_api_key": None,
    "guardian_api_key": None,
    "news_api_key": None,
    "serpapi_api_key": None,
    "gemini_model": "gemini-2.0-flash",

    # on-device runtime
    "ollama_api_base": "http://localhost:11434",
    "on_device_model": "gemma3:1b",
    "session_timeout_seconds": 30,
    "temperature": 0.7,
    "top_k": 40,

    # HTTP clients
    "retrieval": {"timeout_seconds": 10},

    # analysis
    "max_provisions": 5,
    "max_news_results": 30,
    "max_bill_tokens_k": 4,
    "use_tokenizer": True,

    # cache
    "cache_dir": None,
    "cache_expiration_seconds": 7 * 24 * 3600,

    # LLM transcript log
    "llm_log_enabled": False,
    "llm_log_max_size_mb": 1,
    "llm_log_dir": None,
}

# environment variable -> config key
ENV_VARS = {
    "GEMINI_API_KEY": "gemini_api_key",
    "GUARDIAN_API_KEY": "guardian_api_key",
    "NEWS_API_KEY": "news_api_key",
    "SERPAPI_API_KEY": "serpapi_api_key",
    "OLLAMA_API_BASE": "ollama_api_base",
    "LEGISLATOR_LENS_MODEL": "on_device_model",
    "LEGISLATOR_LENS_CACHE_DIR": "cache_dir",
}


def load_config(overrides: Optional[Dict[str, Any]] = None, environ=None) -> Dict[str, Any]:
    """
    Build the effective configuration.

    :param overrides: explicit settings, applied last
    :param environ: mapping to read variables from, defaults to os.environ
    :return: merged configuration dict
    """
    environ = os.environ if environ is None else environ
    config = copy.deepcopy(DEFAULT_CONFIG)

    for env_name, key in ENV_VARS.items():
        value = environ.get(env_name)
        if value:
            config[key] = value

    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key] = {**config[key], **value}
        else:
            config[key] = value
    return config
