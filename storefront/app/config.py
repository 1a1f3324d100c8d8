#!/usr/bin/env python3
"""
Configuration management for the storefront backend.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Config:
    """Configuration class for the application."""

    # Database Configuration
    DATABASE_URL = os.getenv(
        "DATABASE_URL",
        f"sqlite:///{os.path.join(os.path.dirname(__file__), '..', 'data', 'storefront.db')}",
    )

    # AI Provider Configuration (cohere|together|groq|rule_based)
    AI_PROVIDER = os.getenv("AI_PROVIDER", "rule_based").lower()

    COHERE_API_KEY = os.getenv("COHERE_API_KEY")
    COHERE_API_URL = "https://api.cohere.ai/v1/generate"
    COHERE_MODEL = os.getenv("COHERE_MODEL", "command-light")
    COHERE_TIMEOUT = float(os.getenv("COHERE_TIMEOUT", 10))

    TOGETHER_API_KEY = os.getenv("TOGETHER_API_KEY")
    TOGETHER_API_URL = "https://api.together.xyz/inference"
    TOGETHER_MODEL = os.getenv("TOGETHER_MODEL", "togethercomputer/llama-2-7b-chat")
    TOGETHER_TIMEOUT = float(os.getenv("TOGETHER_TIMEOUT", 15))

    GROQ_API_KEY = os.getenv("GROQ_API_KEY")
    GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"
    GROQ_LLM_MODEL = os.getenv("GROQ_LLM_MODEL", "llama3-8b-8192")
    GROQ_TIMEOUT = float(os.getenv("GROQ_TIMEOUT", 10))

    # Auth Configuration
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))

    # Application Configuration
    SETTINGS_CACHE_TTL = float(os.getenv("SETTINGS_CACHE_TTL", 0))
    ORDER_STRICT_TRANSITIONS = _flag("ORDER_STRICT_TRANSITIONS", "true")
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    SEARCH_LIMIT = 10
    HIGHLIGHT_LIMIT = 5

    PROVIDERS = ("cohere", "together", "groq", "rule_based")

    @classmethod
    def provider_keys(cls):
        return {
            "cohere": cls.COHERE_API_KEY,
            "together": cls.TOGETHER_API_KEY,
            "groq": cls.GROQ_API_KEY,
        }

    @classmethod
    def debug_print(cls):
        from ..utils.logger import get_logger

        log = get_logger("config")
        log.info("AI_PROVIDER=%s", cls.AI_PROVIDER)
        for name, key in cls.provider_keys().items():
            log.info("%s key set=%s", name, bool(key))
        log.info("ORDER_STRICT_TRANSITIONS=%s SETTINGS_CACHE_TTL=%s", cls.ORDER_STRICT_TRANSITIONS, cls.SETTINGS_CACHE_TTL)

    @classmethod
    def validate(cls):
        """Validate that the configuration is consistent."""
        from ..utils.logger import get_logger

        if cls.AI_PROVIDER not in cls.PROVIDERS:
            raise ValueError(
                f"Unknown AI_PROVIDER '{cls.AI_PROVIDER}', expected one of: {', '.join(cls.PROVIDERS)}"
            )

        # A configured provider without credentials is not fatal: chat replies fall back to templates
        if cls.AI_PROVIDER != "rule_based" and not cls.provider_keys().get(cls.AI_PROVIDER):
            get_logger("config").warning(
                "AI_PROVIDER=%s but no API key is set; chat will use rule-based replies", cls.AI_PROVIDER
            )

        if cls.SETTINGS_CACHE_TTL < 0:
            raise ValueError("SETTINGS_CACHE_TTL must be >= 0")

        return True


# Validate configuration on import
Config.validate()
