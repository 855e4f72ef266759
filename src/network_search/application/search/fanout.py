"""
Provider fan-out with per-branch failure isolation.

One branch per provider runs concurrently. A branch that raises, times out
or is abandoned at the overall deadline contributes nothing and is reported
as failed; every other branch keeps its contribution. Results come back in
provider registration order, which is what URL dedupe relies on.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from network_search.infrastructure.providers.base import ContentProvider, ProviderResult
from network_search.shared.async_utils import gather_isolated
from network_search.shared.exceptions import is_provider_failure

logger = logging.getLogger(__name__)

BranchCall = Callable[[ContentProvider], Awaitable[ProviderResult]]


@dataclass
class BranchOutcome:
    """What one provider contributed to a fan-out."""

    provider: ContentProvider
    result: ProviderResult

    @property
    def failed(self) -> bool:
        return not self.result.ok


class FanOutExecutor:
    """
    Runs one call per provider concurrently.

    Usage:
        executor = FanOutExecutor(deadline=8.0)
        outcomes = await executor.run(providers, lambda p: p.search_detailed("knee"))
    """

    def __init__(self, deadline: float | None = None) -> None:
        self._deadline = deadline

    async def run(self, providers: Sequence[ContentProvider], call: BranchCall) -> list[BranchOutcome]:
        if not providers:
            return []

        start = time.perf_counter()
        results = await gather_isolated([call(p) for p in providers], deadline=self._deadline)

        outcomes: list[BranchOutcome] = []
        for provider, result in zip(providers, results):
            if isinstance(result, ProviderResult):
                outcomes.append(BranchOutcome(provider, result))
                continue

            failed = ProviderResult(source_name=provider.name, attempted=1)
            if result is None:
                logger.warning(f"{provider.name}: abandoned at fan-out deadline ({self._deadline}s)")
                failed.record_failure("abandoned at deadline")
            elif is_provider_failure(result):
                logger.warning(f"{provider.name}: provider failed: {result}")
                failed.record_failure(result)
            else:
                logger.error(f"{provider.name}: unexpected provider error", exc_info=result)
                failed.record_failure(result)
            outcomes.append(BranchOutcome(provider, failed))

        elapsed_ms = (time.perf_counter() - start) * 1000
        failed_names = [o.provider.name for o in outcomes if o.failed]
        logger.info(
            f"Fan-out: {len(outcomes)} source(s), "
            f"{sum(len(o.result.items) for o in outcomes)} item(s), "
            f"{len(failed_names)} failed, {elapsed_ms:.0f}ms"
        )
        return outcomes
