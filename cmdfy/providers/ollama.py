"""
Ollama provider for cmdfy
"""

from typing import Tuple

from cmdfy.core.llm import DeadlineClient, LLMProvider


class OllamaProvider(LLMProvider):
    """Local Ollama chat provider, needs no API key"""

    name = "ollama"
    requires_api_key = False
    default_model = "llama3"
    default_base_url = "http://localhost:11434"

    def _complete(self, client: DeadlineClient, system_prompt: str, user_prompt: str) -> Tuple[str, int]:
        payload = {
            "model": self.model,
            "messages": [
                {
                    "role": "system",
                    "content": system_prompt + "\nDo not output anything other than JSON."
                },
                {"role": "user", "content": user_prompt}
            ],
            "stream": False
        }

        result = client.post_json(
            f"{self.base_url}/api/chat",
            headers={'Content-Type': 'application/json'},
            payload=payload
        )

        content = (result.get('message') or {}).get('content', '')
        tokens = int(result.get('prompt_eval_count', 0)) + int(result.get('eval_count', 0))
        return content, tokens
