"""
OpenAI provider for cmdfy
"""

from typing import Tuple

from cmdfy.core.llm import DeadlineClient, LLMProvider


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions provider"""

    name = "openai"
    default_model = "gpt-3.5-turbo"
    default_base_url = "https://api.openai.com/v1"

    def _headers(self) -> dict:
        return {
            'Authorization': f'Bearer {self.api_key}',
            'Content-Type': 'application/json'
        }

    def _complete(self, client: DeadlineClient, system_prompt: str, user_prompt: str) -> Tuple[str, int]:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "stream": False
        }

        result = client.post_json(
            f"{self.base_url}/chat/completions",
            headers=self._headers(),
            payload=payload
        )

        choices = result.get('choices') or []
        if not choices:
            return "", 0

        content = choices[0]['message']['content'] or ""
        usage = result.get('usage') or {}
        return content, int(usage.get('total_tokens', 0))
