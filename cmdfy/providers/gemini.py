"""
Gemini provider for cmdfy
"""

from typing import Tuple

from cmdfy.core.llm import DeadlineClient, LLMProvider


class GeminiProvider(LLMProvider):
    """Google Gemini generateContent provider"""

    name = "gemini"
    default_model = "gemini-2.0-flash"
    default_base_url = "https://generativelanguage.googleapis.com"

    def _complete(self, client: DeadlineClient, system_prompt: str, user_prompt: str) -> Tuple[str, int]:
        headers = {
            'Content-Type': 'application/json',
            'x-goog-api-key': self.api_key
        }

        # Gemini takes a single prompt here
        payload = {
            "contents": [
                {"role": "user", "parts": [{"text": f"{system_prompt}\n{user_prompt}"}]}
            ],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_tokens
            }
        }

        result = client.post_json(
            f"{self.base_url}/v1beta/models/{self.model}:generateContent",
            headers=headers,
            payload=payload
        )

        candidates = result.get('candidates') or []
        if not candidates:
            return "", 0

        parts = (candidates[0].get('content') or {}).get('parts') or []
        text = "".join(part.get('text', '') for part in parts)

        usage = result.get('usageMetadata') or {}
        return text, int(usage.get('totalTokenCount', 0))
