"""
Configuration loader for the mission match service.

Loads all settings from environment variables (.env file).
Validates required settings and provides type-safe access.
"""

import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """
    Centralized configuration for the match engine and its providers.

    All values loaded from environment variables - NO SECRETS IN CODE.
    """

    # ===== MongoDB =====
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    MONGO_DB_NAME: str = os.getenv("MONGO_DB_NAME", "linkedin_network_analysis")

    # ===== LLM APIs =====
    # Azure OpenAI takes priority when both key and endpoint are present,
    # otherwise the public OpenAI API is used.
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    AZURE_OPENAI_API_KEY: str = os.getenv("AZURE_OPENAI_API_KEY", "")
    AZURE_OPENAI_ENDPOINT: str = os.getenv("AZURE_OPENAI_ENDPOINT", "")
    AZURE_OPENAI_DEPLOYMENT: str = os.getenv("AZURE_OPENAI_DEPLOYMENT", "gpt-4o")
    AZURE_OPENAI_API_VERSION: str = os.getenv("AZURE_OPENAI_API_VERSION", "2024-06-01")

    # ===== LLM Model Configuration =====
    DEFAULT_MODEL: str = os.getenv("DEFAULT_MODEL", "gpt-4o")
    EMBEDDING_MODEL: str = os.getenv("EMBEDDING_MODEL", "text-embedding-3-large")

    # Temperature settings
    CREATIVE_TEMPERATURE: float = 0.7  # Match reasoning and recommendations
    ANALYTICAL_TEMPERATURE: float = 0.1  # Mission attribute extraction

    @classmethod
    def use_azure(cls) -> bool:
        """True when Azure OpenAI credentials are fully configured."""
        return bool(cls.AZURE_OPENAI_API_KEY and cls.AZURE_OPENAI_ENDPOINT)

    @classmethod
    def has_llm_credentials(cls) -> bool:
        """True when any embedding/chat provider credentials are configured."""
        return cls.use_azure() or bool(cls.OPENAI_API_KEY)

    @classmethod
    def get_llm_provider(cls) -> Optional[str]:
        """
        Get the provider used for embeddings and chat.

        Returns:
            "azure", "openai", or None when nothing is configured
        """
        if cls.use_azure():
            return "azure"
        if cls.OPENAI_API_KEY:
            return "openai"
        return None

    @classmethod
    def get_chat_model(cls) -> str:
        """Chat model name (Azure deployment name when on Azure)."""
        if cls.use_azure():
            return cls.AZURE_OPENAI_DEPLOYMENT
        return cls.DEFAULT_MODEL

    @classmethod
    def summary(cls) -> str:
        """Return a summary of the current configuration (safe for logging)."""
        provider = cls.get_llm_provider()
        return f"""
Configuration Summary:
  MongoDB: {'✓ Configured' if cls.MONGODB_URI else '✗ Missing'} (db: {cls.MONGO_DB_NAME})
  LLM provider: {provider or '✗ Missing'}
  Chat model: {cls.get_chat_model()}
  Embedding model: {cls.EMBEDDING_MODEL}
        """.strip()
