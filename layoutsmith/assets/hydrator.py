"""Best-effort concurrent loading of furniture models for a layout.

Every furniture with a model URL gets its own task. Tasks never raise: each one
turns its own failure into a report item, so the join completes after every
attempt has finished and one broken asset never blocks the others.
"""

import asyncio
import logging
import time

from collections.abc import Coroutine
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from omegaconf import DictConfig

from layoutsmith.assets.fetchers import AssetFetcher
from layoutsmith.assets.normalization import NormalizationResult
from layoutsmith.errors import AssetFetchError

if TYPE_CHECKING:
    from layoutsmith.entities.furniture import Furniture
    from layoutsmith.entities.layout import Layout

console_logger = logging.getLogger(__name__)


class LoadStatus(Enum):
    LOADED = "loaded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class AssetLoadResult:
    """Outcome of hydrating one furniture."""

    room_name: str
    furniture_name: str
    model_url: str | None
    status: LoadStatus
    error: str | None = None
    normalization: NormalizationResult | None = None
    duration_s: float = 0.0


@dataclass
class HydrationReport:
    """Per-item results of a layout hydration."""

    layout_id: str
    results: list[AssetLoadResult] = field(default_factory=list)

    @property
    def loaded(self) -> list[AssetLoadResult]:
        return [r for r in self.results if r.status == LoadStatus.LOADED]

    @property
    def failed(self) -> list[AssetLoadResult]:
        return [r for r in self.results if r.status == LoadStatus.FAILED]

    @property
    def skipped(self) -> list[AssetLoadResult]:
        return [r for r in self.results if r.status == LoadStatus.SKIPPED]

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        return (
            f"Layout {self.layout_id}: {len(self.loaded)} loaded, "
            f"{len(self.failed)} failed, {len(self.skipped)} without model"
        )


class AssetHydrator:
    """Loads furniture models concurrently with an all-complete join."""

    def __init__(
        self,
        fetcher: AssetFetcher,
        max_concurrency: int | None = None,
        timeout_s: float | None = None,
    ):
        """
        Args:
            fetcher: Source of raw model bytes.
            max_concurrency: Maximum fetches in flight. None means unbounded.
            timeout_s: Per-furniture timeout. None waits indefinitely, in which
                case one stalled fetch stalls the whole join.
        """
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self.fetcher = fetcher
        self.max_concurrency = max_concurrency
        self.timeout_s = timeout_s

    @classmethod
    def from_config(cls, cfg: DictConfig, fetcher: AssetFetcher) -> "AssetHydrator":
        max_fetches = cfg.assets.max_concurrent_fetches
        timeout = cfg.assets.fetch_timeout_s
        return cls(
            fetcher=fetcher,
            max_concurrency=int(max_fetches) if max_fetches is not None else None,
            timeout_s=float(timeout) if timeout is not None else None,
        )

    async def _load_one(
        self,
        room_name: str,
        furniture: "Furniture",
        semaphore: asyncio.Semaphore | None,
    ) -> AssetLoadResult:
        result = AssetLoadResult(
            room_name=room_name,
            furniture_name=furniture.name,
            model_url=furniture.model_url,
            status=LoadStatus.FAILED,
        )
        start = time.monotonic()
        try:
            if semaphore is not None:
                async with semaphore:
                    normalization = await self._with_timeout(furniture)
            else:
                normalization = await self._with_timeout(furniture)
            result.status = LoadStatus.LOADED
            result.normalization = normalization
        except AssetFetchError as e:
            result.error = str(e)
        except asyncio.TimeoutError:
            result.error = str(
                AssetFetchError(
                    furniture.model_url or "", f"timed out after {self.timeout_s}s"
                )
            )
        except Exception as e:
            # Unexpected failures are still confined to this furniture.
            result.error = f"{type(e).__name__}: {e}"
        result.duration_s = time.monotonic() - start

        if result.status == LoadStatus.FAILED:
            console_logger.warning(
                f"Keeping placeholder for {furniture.name} in {room_name}: "
                f"{result.error}"
            )
        return result

    async def _with_timeout(self, furniture: "Furniture") -> NormalizationResult | None:
        if self.timeout_s is None:
            return await furniture.load_model(self.fetcher)
        return await asyncio.wait_for(
            furniture.load_model(self.fetcher), timeout=self.timeout_s
        )

    async def hydrate(self, layout: "Layout") -> HydrationReport:
        """Load every furniture model in the layout.

        Resolves after every attempt has completed; never raises for asset
        failures. Report results follow room and furniture order.
        """
        semaphore = (
            asyncio.Semaphore(self.max_concurrency)
            if self.max_concurrency is not None
            else None
        )

        results: list[AssetLoadResult | None] = []
        pending: list[tuple[int, Coroutine[Any, Any, AssetLoadResult]]] = []
        for room in layout.rooms:
            for furniture in room.furniture:
                if furniture.model_url:
                    pending.append(
                        (len(results), self._load_one(room.name, furniture, semaphore))
                    )
                    results.append(None)
                else:
                    results.append(
                        AssetLoadResult(
                            room_name=room.name,
                            furniture_name=furniture.name,
                            model_url=None,
                            status=LoadStatus.SKIPPED,
                        )
                    )

        if pending:
            console_logger.info(
                f"Loading {len(pending)} furniture models for layout "
                f"{layout.layout_id}"
            )
            loaded = await asyncio.gather(*(coro for _, coro in pending))
            for (index, _), result in zip(pending, loaded):
                results[index] = result

        report = HydrationReport(layout_id=layout.layout_id, results=results)
        console_logger.info(report.summary())
        return report
