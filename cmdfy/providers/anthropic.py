"""
Anthropic provider for cmdfy
"""

from typing import Tuple

from cmdfy.core.llm import DeadlineClient, LLMProvider

API_VERSION = "2023-06-01"


class AnthropicProvider(LLMProvider):
    """Anthropic messages API provider"""

    name = "anthropic"
    default_model = "claude-3-5-sonnet-latest"
    default_base_url = "https://api.anthropic.com/v1"

    def _complete(self, client: DeadlineClient, system_prompt: str, user_prompt: str) -> Tuple[str, int]:
        headers = {
            'Content-Type': 'application/json',
            'x-api-key': self.api_key,
            'anthropic-version': API_VERSION
        }

        payload = {
            "model": self.model,
            "system": system_prompt,
            "messages": [
                {"role": "user", "content": user_prompt}
            ],
            "max_tokens": self.max_tokens
        }

        result = client.post_json(f"{self.base_url}/messages", headers=headers, payload=payload)

        if result.get('error'):
            error = result['error']
            raise ValueError(f"anthropic api error: {error.get('type')} - {error.get('message')}")

        content = result.get('content') or []
        text = "".join(part.get('text', '') for part in content if part.get('type', 'text') == 'text')

        usage = result.get('usage') or {}
        tokens = int(usage.get('input_tokens', 0)) + int(usage.get('output_tokens', 0))
        return text, tokens
