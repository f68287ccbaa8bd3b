"""
LLM Provider base class, provider registry and dispatch for cmdfy
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from .errors import GenerationError, ProviderInitError, ProviderNotFoundError
from .models import CommandResult, Metrics, ProviderSettings, SystemMetadata

logger = logging.getLogger(__name__)

RESPONSE_SCHEMA = """{
  "steps": [
    {
      "tool": "string (the primary command, e.g. git, grep)",
      "args": ["string", "arguments"],
      "op": "string (operator to connect to next step: | (pipe), && (and), ; (seq), || (or), > (redirect), >> (append). Empty for last step.)"
    }
  ],
  "explanation": "string (brief explanation of the entire pipeline)",
  "dangerous": boolean (true if ANY step modifies files significantly, deletes data, or has destructive side effects)
}"""


class GenerationContext:
    """Deadline and cancellation signal for one provider call.

    Providers check it before a request and between response chunks
    (see DeadlineClient), so a call returns shortly after the deadline
    passes or the context is cancelled.
    """

    def __init__(self, deadline: Optional[float] = None):
        self.deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def with_timeout(cls, seconds: float) -> "GenerationContext":
        return cls(time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, None when there is no deadline"""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def timeout(self, default: float) -> float:
        remaining = self.remaining()
        if remaining is None:
            return default
        return min(default, remaining)

    def check(self, provider: str = "") -> None:
        if self.cancelled:
            raise GenerationError("generation cancelled", provider)
        if self.expired:
            raise GenerationError("deadline exceeded", provider)


class DeadlineClient:
    """httpx client bound to a GenerationContext for the whole request.

    The response body is streamed and the context checked after every
    chunk, so a server trickling bytes cannot hold a call past its
    deadline or after it was cancelled. Each network wait is capped by the
    time left when the client was opened.
    """

    def __init__(self, context: GenerationContext, provider: str, timeout: float, transport=None):
        self.context = context
        self.provider = provider
        self._client = httpx.Client(timeout=context.timeout(timeout), transport=transport)

    def post_json(self, url: str, headers: Optional[Dict[str, str]] = None, payload: Any = None) -> Any:
        """POST `payload` as JSON and return the decoded JSON reply"""
        body = bytearray()
        with self._client.stream("POST", url, headers=headers, json=payload) as response:
            self.context.check(self.provider)
            for chunk in response.iter_bytes():
                self.context.check(self.provider)
                body.extend(chunk)
            complete = httpx.Response(
                response.status_code,
                content=bytes(body),
                request=response.request
            )

        complete.raise_for_status()
        return complete.json()

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "DeadlineClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class LLMProvider(ABC):
    """Abstract base class for LLM providers"""

    name = "provider"
    requires_api_key = True
    default_model = ""
    default_base_url = ""

    def __init__(self, api_key: str = "", model: Optional[str] = None, **kwargs):
        self.api_key = api_key
        self.model = model or self.default_model
        self.base_url = (kwargs.get('base_url') or self.default_base_url).rstrip('/')
        self.timeout = kwargs.get('timeout', 30)
        self.max_tokens = kwargs.get('max_tokens', 1024)
        self.temperature = kwargs.get('temperature', 0.1)
        # Lets tests swap the network for httpx.MockTransport
        self.transport = kwargs.get('transport')

        if self.requires_api_key and not self.api_key:
            raise ProviderInitError(f"api key is required for {self.name}", self.name)

    @classmethod
    def from_settings(cls, settings: ProviderSettings, **kwargs) -> "LLMProvider":
        return cls(
            api_key=settings.api_key,
            model=settings.model,
            base_url=settings.base_url,
            **kwargs
        )

    @abstractmethod
    def _complete(self, client: DeadlineClient, system_prompt: str, user_prompt: str) -> Tuple[str, int]:
        """Send one request and return (reply text, token count)"""
        pass

    def generate(self, context: GenerationContext, query: str, metadata: SystemMetadata) -> CommandResult:
        """Generate a command pipeline for the query"""
        context.check(self.name)

        system_prompt = self.get_system_prompt(metadata)
        user_prompt = self.get_user_prompt(query, metadata)

        start_time = time.perf_counter()
        try:
            with self._client(context) as client:
                text, token_count = self._complete(client, system_prompt, user_prompt)
        except httpx.HTTPStatusError as e:
            raise GenerationError(
                f"{self.name} API error (status {e.response.status_code}): {self._error_detail(e.response)}",
                self.name
            ) from e
        except httpx.TimeoutException as e:
            raise GenerationError(f"{self.name} request timed out", self.name) from e
        except httpx.HTTPError as e:
            raise GenerationError(f"{self.name} request failed: {e}", self.name) from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise GenerationError(f"unexpected response from {self.name}: {e}", self.name) from e
        latency = time.perf_counter() - start_time

        result = self.parse_result(text)
        logger.debug("%s answered in %.3fs using %d tokens", self.name, latency, token_count)
        return result.model_copy(update={
            "metrics": Metrics(latency=format_latency(latency), token_count=max(0, token_count))
        })

    def _client(self, context: GenerationContext) -> DeadlineClient:
        return DeadlineClient(context, self.name, self.timeout, transport=self.transport)

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            detail = response.json()
        except ValueError:
            return response.text
        if isinstance(detail, dict):
            error = detail.get('error')
            if isinstance(error, dict):
                return error.get('message', 'Unknown error')
            if error:
                return str(error)
        return response.text

    def get_system_prompt(self, metadata: SystemMetadata) -> str:
        """Get the system prompt for command generation"""
        lines = [
            "You are a command line expert.",
            "Your task is to translate the following natural language request into a shell command or a pipeline of commands.",
            "Respond ONLY with a valid JSON object matching this schema:",
            RESPONSE_SCHEMA,
            "",
            f"Operating System: {metadata.os}",
            f"Shell: {metadata.shell}",
            f"Available Tools: {', '.join(metadata.available_commands)}",
            f"Current Directory Files: {', '.join(metadata.current_dir_files)}",
        ]

        if metadata.previous_error:
            lines.append(f"Previous command failed with: {metadata.previous_error}")

        if metadata.few_shot_examples:
            lines.append("")
            lines.append("Examples of commands the user accepted before:")
            for example in metadata.few_shot_examples:
                lines.append(f"Request: {example.query}\nCommand: {example.command}")

        return "\n".join(lines)

    def get_user_prompt(self, query: str, metadata: SystemMetadata) -> str:
        return f"Request: {query}"

    def parse_result(self, text: str) -> CommandResult:
        """Validate the model's reply into a CommandResult"""
        payload = extract_json(text)
        if not payload:
            raise GenerationError(f"empty response from {self.name}", self.name)

        try:
            return CommandResult.model_validate_json(payload)
        except ValidationError as e:
            raise GenerationError(
                f"failed to parse JSON response from {self.name}: {e}. raw: {payload}",
                self.name
            ) from e


def extract_json(text: str) -> str:
    """Strip markdown fences and chatter around the JSON object in a reply"""
    result = (text or "").strip()
    if result.startswith("```json"):
        result = result[len("```json"):]
    elif result.startswith("```"):
        result = result[3:]
    if result.endswith("```"):
        result = result[:-3]
    result = result.strip()

    # Chatty models sometimes wrap the object in prose
    start = result.find("{")
    end = result.rfind("}")
    if start != -1 and end > start:
        result = result[start:end + 1]
    return result


def format_latency(seconds: float) -> str:
    if seconds < 1:
        return f"{round(seconds * 1000)}ms"
    return f"{seconds:.3f}s"


Factory = Callable[..., LLMProvider]


class ProviderRegistry:
    """Name to factory table, filled once at start-up"""

    def __init__(self):
        self._factories: Dict[str, Factory] = {}
        self._aliases: Dict[str, str] = {}
        self._local: set = set()

    def register(
        self,
        name: str,
        factory: Factory,
        aliases: Tuple[str, ...] = (),
        requires_api_key: bool = True
    ) -> None:
        self._factories[name] = factory
        for alias in aliases:
            self._aliases[alias] = name
        if not requires_api_key:
            self._local.add(name)

    def canonical(self, name: str) -> str:
        if name in self._factories:
            return name
        if name in self._aliases:
            return self._aliases[name]
        raise ProviderNotFoundError(name)

    def names(self) -> List[str]:
        """Primary provider names, sorted"""
        return sorted(self._factories)

    def requires_api_key(self, name: str) -> bool:
        return self.canonical(name) not in self._local

    def resolve(self, name: str, settings: ProviderSettings, **kwargs) -> LLMProvider:
        factory = self._factories[self.canonical(name)]
        return factory(settings, **kwargs)

    def __contains__(self, name: str) -> bool:
        return name in self._factories or name in self._aliases


class LLMManager:
    """Resolves configured providers from the registry"""

    def __init__(self, config, registry: ProviderRegistry, **provider_kwargs: Any):
        self.config = config
        self.registry = registry
        self.provider_kwargs = provider_kwargs

    def get_provider(self, name: Optional[str] = None) -> LLMProvider:
        """Get the provider for the single-provider flow"""
        name = self.registry.canonical(name or self.config.get_current_provider())
        settings = self.config.resolve_credentials(
            name, requires_api_key=self.registry.requires_api_key(name)
        )
        return self.registry.resolve(name, settings, **self.provider_kwargs)

    def eligible_providers(self) -> Dict[str, LLMProvider]:
        """Every registered provider whose credentials resolve"""
        providers = {}
        for name in self.registry.names():
            requires_key = self.registry.requires_api_key(name)
            # Local providers only join a comparison once the user set them up
            if not requires_key and not self.config.is_configured(name):
                continue
            try:
                settings = self.config.resolve_credentials(name, requires_api_key=requires_key)
                providers[name] = self.registry.resolve(name, settings, **self.provider_kwargs)
            except ProviderInitError as e:
                logger.debug("Skipping %s: %s", name, e)
        return providers
