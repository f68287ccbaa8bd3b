"""
DeepSeek provider for cmdfy
"""

from cmdfy.providers.openai import OpenAIProvider


class DeepSeekProvider(OpenAIProvider):
    """DeepSeek through the OpenAI-compatible OpenRouter endpoint"""

    name = "deepseek"
    default_model = "deepseek/deepseek-chat"
    default_base_url = "https://openrouter.ai/api/v1"
