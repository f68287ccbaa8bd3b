"""
Comparison engine for cmdfy.
Fans one query out to every eligible provider and joins all outcomes
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Dict, List, Mapping, Optional

from .errors import GenerationError, NoEligibleProviders
from .llm import GenerationContext, LLMProvider
from .models import ProviderResult, SystemMetadata

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ResultCollector:
    """Thread-safe sink for provider outcomes.

    The first outcome recorded for a provider wins. Once sealed, further
    writes (from a provider that already timed out) are dropped.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._results: Dict[str, ProviderResult] = {}
        self._sealed = False

    def add(self, result: ProviderResult) -> bool:
        with self._lock:
            if self._sealed or result.name in self._results:
                return False
            self._results[result.name] = result
            return True

    def seal(self) -> List[ProviderResult]:
        with self._lock:
            self._sealed = True
            return sorted(self._results.values(), key=lambda r: r.name)


class ComparisonEngine:
    """Runs one query against many providers concurrently"""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def compare(
        self,
        providers: Mapping[str, LLMProvider],
        query: str,
        metadata: SystemMetadata
    ) -> List[ProviderResult]:
        """Query every provider and wait for all of them.

        Returns one ProviderResult per provider, sorted by name. A provider
        that fails or overruns its deadline yields an error result and never
        affects the others.
        """
        if not providers:
            raise NoEligibleProviders()

        collector = ResultCollector()
        contexts: Dict[str, GenerationContext] = {}
        futures = {}

        logger.info("Comparing %d providers: %s", len(providers), ", ".join(sorted(providers)))

        pool = ThreadPoolExecutor(max_workers=len(providers), thread_name_prefix="cmdfy-compare")
        try:
            for name, provider in providers.items():
                context = GenerationContext.with_timeout(self.timeout)
                contexts[name] = context
                futures[name] = pool.submit(
                    self._invoke, collector, name, provider, context, query, metadata
                )

            for name, future in futures.items():
                try:
                    future.result(timeout=contexts[name].remaining())
                except FutureTimeout:
                    contexts[name].cancel()
                    logger.warning("%s timed out after %gs", name, self.timeout)
                    collector.add(ProviderResult(
                        name=name,
                        error=GenerationError(f"timed out after {self.timeout:g}s", name)
                    ))
        finally:
            # Stragglers are cancelled and bounded by their own deadline
            pool.shutdown(wait=False, cancel_futures=True)

        return collector.seal()

    @staticmethod
    def _invoke(
        collector: ResultCollector,
        name: str,
        provider: LLMProvider,
        context: GenerationContext,
        query: str,
        metadata: SystemMetadata
    ) -> None:
        outcome: Optional[ProviderResult] = None
        try:
            outcome = ProviderResult(name=name, result=provider.generate(context, query, metadata))
        except GenerationError as e:
            outcome = ProviderResult(name=name, error=e)
        except Exception as e:
            # A misbehaving provider must not take the batch down with it
            logger.exception("%s raised unexpectedly", name)
            outcome = ProviderResult(name=name, error=GenerationError(str(e) or type(e).__name__, name))

        if not collector.add(outcome):
            logger.debug("Dropping late result from %s", name)
