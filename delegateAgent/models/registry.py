"""Chat model provider registry.

Maps a provider name to a factory that builds a LangChain chat model. The
``openai`` provider is registered up front; other providers are loaded on
first use from their ``langchain-<provider>`` integration package.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from delegateAgent.utils.error_handler import ProviderNotFound

LOGGER = logging.getLogger(__name__)

ModelFactory = Callable[..., BaseChatModel]
ProviderLoader = Callable[[str], Optional[ModelFactory]]

# provider name -> (integration module, chat model class)
KNOWN_INTEGRATIONS: Dict[str, Tuple[str, str]] = {
    "anthropic": ("langchain_anthropic", "ChatAnthropic"),
    "google_genai": ("langchain_google_genai", "ChatGoogleGenerativeAI"),
    "mistralai": ("langchain_mistralai", "ChatMistralAI"),
    "groq": ("langchain_groq", "ChatGroq"),
    "ollama": ("langchain_ollama", "ChatOllama"),
    "deepseek": ("langchain_deepseek", "ChatDeepSeek"),
    "xai": ("langchain_xai", "ChatXAI"),
}


def _chat_kwargs(
    model_id: str,
    api_key: Optional[str],
    base_url: Optional[str],
    temperature: Optional[float],
    options: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"model": model_id}
    if api_key:
        kwargs["api_key"] = api_key
    if base_url:
        kwargs["base_url"] = base_url
    if temperature is not None:
        kwargs["temperature"] = temperature
    if options:
        kwargs.update(options)
    return kwargs


def class_factory(chat_class: Callable[..., BaseChatModel]) -> ModelFactory:
    """Wrap a chat model class as a registry factory."""

    def factory(
        model_id: str,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: Optional[float] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> BaseChatModel:
        return chat_class(**_chat_kwargs(model_id, api_key, base_url, temperature, options))

    return factory


def import_integration(provider: str) -> Optional[ModelFactory]:
    """Default loader: import the provider's LangChain integration package.

    Returns:
        A factory, or None when the provider is unknown or not installed
    """
    module_name, class_name = KNOWN_INTEGRATIONS.get(
        provider, (f"langchain_{provider}", None)
    )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        LOGGER.debug(f"  Provider package {module_name} not importable: {e}")
        return None

    if class_name is None:
        # Unknown provider: look for a single Chat* class in the package
        candidates = [name for name in getattr(module, "__all__", dir(module)) if name.startswith("Chat")]
        if len(candidates) != 1:
            LOGGER.debug(f"  No unique chat model class in {module_name}: {candidates}")
            return None
        class_name = candidates[0]

    chat_class = getattr(module, class_name, None)
    if chat_class is None:
        return None
    return class_factory(chat_class)


class ProviderRegistry:
    """Provider name -> chat model factory, with lazy loading and caching."""

    def __init__(self, loader: Optional[ProviderLoader] = import_integration) -> None:
        self._factories: Dict[str, ModelFactory] = {"openai": class_factory(ChatOpenAI)}
        self._loaded: Dict[str, ModelFactory] = {}
        self._loader = loader

    def register(self, name: str, factory: ModelFactory) -> None:
        """Statically register a factory, replacing any previous one."""
        self._factories[name] = factory
        self._loaded.pop(name, None)

    def get_factory(self, provider: str) -> ModelFactory:
        """Return the factory for a provider, loading it on first use.

        Raises:
            ProviderNotFound: No factory registered and the loader found none
        """
        if provider in self._factories:
            return self._factories[provider]
        if provider in self._loaded:
            return self._loaded[provider]

        factory = None
        if self._loader is not None:
            try:
                factory = self._loader(provider)
            except Exception as e:
                LOGGER.warning(f"  Loader failed for provider '{provider}': {e}")

        if factory is None:
            raise ProviderNotFound(
                f"Provider not found: {provider}",
                {"provider": provider},
            )

        LOGGER.info(f"  ✓ Loaded provider: {provider}")
        self._loaded[provider] = factory
        return factory

    def resolve(
        self,
        provider: str,
        model_id: str,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: Optional[float] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> BaseChatModel:
        """Build a chat model for ``provider`` / ``model_id``.

        Raises:
            ProviderNotFound: Unknown or unloadable provider
        """
        factory = self.get_factory(provider)
        LOGGER.debug(f"  Resolving model {provider}:{model_id}")
        return factory(
            model_id,
            api_key=api_key,
            base_url=base_url,
            temperature=temperature,
            options=options,
        )

    def clear_cache(self) -> None:
        """Forget dynamically loaded factories. Static registrations stay."""
        self._loaded.clear()

    def list_providers(self) -> list:
        return sorted(set(self._factories) | set(self._loaded))
