"""
LLM providers shipped with cmdfy
"""

from cmdfy.core.llm import ProviderRegistry
from .anthropic import AnthropicProvider
from .deepseek import DeepSeekProvider
from .gemini import GeminiProvider
from .ollama import OllamaProvider
from .openai import OpenAIProvider

__all__ = [
    "AnthropicProvider",
    "DeepSeekProvider",
    "GeminiProvider",
    "OllamaProvider",
    "OpenAIProvider",
    "build_registry",
]


def build_registry() -> ProviderRegistry:
    """Registry with every built-in provider"""
    registry = ProviderRegistry()
    registry.register("openai", OpenAIProvider.from_settings, aliases=("chatGPT",))
    registry.register("deepseek", DeepSeekProvider.from_settings)
    registry.register("anthropic", AnthropicProvider.from_settings, aliases=("claude",))
    registry.register("gemini", GeminiProvider.from_settings)
    registry.register(
        "ollama",
        OllamaProvider.from_settings,
        requires_api_key=OllamaProvider.requires_api_key
    )
    return registry
