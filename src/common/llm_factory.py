"""
LLM Factory Module.

Provides factory functions for the chat and embedding clients used by the
match engine. All stages should use these factories instead of direct
ChatOpenAI/OpenAIEmbeddings instantiation so that provider selection
(Azure OpenAI vs OpenAI) lives in one place.

Usage:
    from src.common.llm_factory import create_chat_llm, create_embeddings

    llm = create_chat_llm(temperature=0.7, max_tokens=150)
    embeddings = create_embeddings()
    vectors = await embeddings.aembed_documents(["..."])
"""

import logging
from typing import Any, Optional, Union

from langchain_openai import (
    AzureChatOpenAI,
    AzureOpenAIEmbeddings,
    ChatOpenAI,
    OpenAIEmbeddings,
)

from src.common.config import Config
from src.common.error_handling import ConfigurationError

logger = logging.getLogger(__name__)


def _require_credentials() -> str:
    provider = Config.get_llm_provider()
    if provider is None:
        raise ConfigurationError(
            "LLM provider configuration missing",
            details="Set OPENAI_API_KEY or AZURE_OPENAI_API_KEY and AZURE_OPENAI_ENDPOINT",
        )
    return provider


def create_chat_llm(
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    **kwargs: Any,
) -> Union[ChatOpenAI, AzureChatOpenAI]:
    """
    Create a chat model client.

    Args:
        model: Model or Azure deployment name (defaults to Config.get_chat_model())
        temperature: Temperature (defaults to Config.CREATIVE_TEMPERATURE)
        max_tokens: Completion token cap
        **kwargs: Additional client parameters

    Returns:
        ChatOpenAI or AzureChatOpenAI instance

    Raises:
        ConfigurationError: If no provider credentials are configured
    """
    provider = _require_credentials()
    effective_model = model or Config.get_chat_model()
    effective_temperature = temperature if temperature is not None else Config.CREATIVE_TEMPERATURE

    if provider == "azure":
        logger.debug(f"Creating AzureChatOpenAI: deployment={effective_model}")
        return AzureChatOpenAI(
            azure_deployment=effective_model,
            azure_endpoint=Config.AZURE_OPENAI_ENDPOINT,
            api_key=Config.AZURE_OPENAI_API_KEY,
            api_version=Config.AZURE_OPENAI_API_VERSION,
            temperature=effective_temperature,
            max_tokens=max_tokens,
            **kwargs,
        )

    logger.debug(f"Creating ChatOpenAI: model={effective_model}")
    return ChatOpenAI(
        model=effective_model,
        api_key=Config.OPENAI_API_KEY,
        temperature=effective_temperature,
        max_tokens=max_tokens,
        **kwargs,
    )


def create_embeddings(
    model: Optional[str] = None,
    **kwargs: Any,
) -> Union[OpenAIEmbeddings, AzureOpenAIEmbeddings]:
    """
    Create an embeddings client (accepts multi-input requests).

    Args:
        model: Embedding model or Azure deployment (defaults to Config.EMBEDDING_MODEL)
        **kwargs: Additional client parameters

    Raises:
        ConfigurationError: If no provider credentials are configured
    """
    provider = _require_credentials()
    effective_model = model or Config.EMBEDDING_MODEL

    if provider == "azure":
        return AzureOpenAIEmbeddings(
            azure_deployment=effective_model,
            azure_endpoint=Config.AZURE_OPENAI_ENDPOINT,
            api_key=Config.AZURE_OPENAI_API_KEY,
            api_version=Config.AZURE_OPENAI_API_VERSION,
            **kwargs,
        )

    return OpenAIEmbeddings(
        model=effective_model,
        api_key=Config.OPENAI_API_KEY,
        **kwargs,
    )
