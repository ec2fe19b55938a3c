"""Application-level session management for the property viewer.

Ties the pieces together in the order the core requires: fetch description,
hydrate master, load its models, register it, then hand out session clones.
Masters stay cached in the registry, so re-opening or resetting a layout costs
one clone and no network traffic.
"""

import asyncio
import logging

from dataclasses import dataclass
from typing import Any, Protocol

from omegaconf import DictConfig

from layoutsmith.assets.fetchers import AssetFetcher, RoutingAssetFetcher
from layoutsmith.assets.hydrator import AssetHydrator, HydrationReport
from layoutsmith.entities.description import LayoutDefaults
from layoutsmith.entities.layout import Layout
from layoutsmith.errors import NotFoundError
from layoutsmith.registry import LayoutRegistry
from layoutsmith.scene.resource_pool import ResourcePool

console_logger = logging.getLogger(__name__)


class DescriptionSource(Protocol):
    """Anything that resolves a layout id to a raw description."""

    def get_description(self, layout_id: str) -> dict[str, Any]: ...


@dataclass
class SessionHandle:
    """An open viewing session."""

    layout_id: str
    layout: Layout
    """The session clone; safe to mutate."""

    report: HydrationReport | None = None
    """Model loading report when this open created the master, else None."""


class LayoutViewerService:
    """Opens, resets and closes viewing sessions backed by cached masters.

    Keeps at most one active session per layout id.
    """

    def __init__(
        self,
        source: DescriptionSource,
        hydrator: AssetHydrator,
        pool: ResourcePool,
        registry: LayoutRegistry | None = None,
        defaults: LayoutDefaults | None = None,
    ):
        self.source = source
        self.hydrator = hydrator
        self.pool = pool
        self.registry = registry or LayoutRegistry()
        self.defaults = defaults or LayoutDefaults()
        self._sessions: dict[str, SessionHandle] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @classmethod
    def from_config(
        cls,
        cfg: DictConfig,
        source: DescriptionSource,
        fetcher: AssetFetcher | None = None,
    ) -> "LayoutViewerService":
        fetcher = fetcher or RoutingAssetFetcher.from_config(cfg)
        return cls(
            source=source,
            hydrator=AssetHydrator.from_config(cfg, fetcher),
            pool=ResourcePool.from_config(cfg),
            defaults=LayoutDefaults.from_config(cfg),
        )

    def get_session(self, layout_id: str) -> SessionHandle | None:
        return self._sessions.get(layout_id)

    def _lock_for(self, layout_id: str) -> asyncio.Lock:
        lock = self._locks.get(layout_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[layout_id] = lock
        return lock

    async def _load_master(self, layout_id: str) -> tuple[Layout, HydrationReport]:
        description = await asyncio.to_thread(self.source.get_description, layout_id)
        master = Layout.hydrate(description, self.pool, defaults=self.defaults)
        report = await master.load_assets_with(self.hydrator)
        if report.failed:
            console_logger.warning(
                f"Some furniture models failed to load for {layout_id}: "
                f"{', '.join(r.furniture_name for r in report.failed)}"
            )
        return master, report

    async def open_session(self, layout_id: str) -> SessionHandle:
        """Return the active session for a layout, creating it if needed.

        Concurrent opens of the same id share one master load and one session.

        Raises:
            NotFoundError: If the description source does not know the id.
            MalformedDescriptionError: If the description cannot be hydrated.
            DescriptionSourceError: If the description source is unavailable.
        """
        async with self._lock_for(layout_id):
            existing = self._sessions.get(layout_id)
            if existing is not None:
                return existing

            report = None
            if not self.registry.exists(layout_id):
                master, report = await self._load_master(layout_id)
                self.registry.register_master(layout_id, master)

            handle = SessionHandle(
                layout_id=layout_id,
                layout=self.registry.get_session_clone(layout_id),
                report=report,
            )
            self._sessions[layout_id] = handle
            console_logger.info(f"Opened session for {layout_id}")
            return handle

    def reset_session(self, layout_id: str) -> SessionHandle:
        """Discard the current session and start a fresh clone of the master.

        Raises:
            NotFoundError: If no master is registered for the id.
        """
        if not self.registry.exists(layout_id):
            raise NotFoundError(layout_id)
        self.close_session(layout_id)
        handle = SessionHandle(
            layout_id=layout_id, layout=self.registry.get_session_clone(layout_id)
        )
        self._sessions[layout_id] = handle
        console_logger.info(f"Session reset for {layout_id} (new clone created)")
        return handle

    def close_session(self, layout_id: str) -> bool:
        """Dispose the active session for a layout. Returns True if one existed."""
        handle = self._sessions.pop(layout_id, None)
        if handle is None:
            return False
        handle.layout.dispose()
        return True

    async def reload_master(self, layout_id: str) -> SessionHandle:
        """Re-fetch the description, rebuild the master and open a new session.

        The active session is closed first, so the replaced master has no
        outstanding clones from this service and is disposed, unless it is
        still registered under another id.
        """
        async with self._lock_for(layout_id):
            master, report = await self._load_master(layout_id)
            self.close_session(layout_id)
            previous = self.registry.register_master(layout_id, master)
            if previous is not None and not self.registry.is_registered(previous):
                previous.dispose()

            handle = SessionHandle(
                layout_id=layout_id,
                layout=self.registry.get_session_clone(layout_id),
                report=report,
            )
            self._sessions[layout_id] = handle
            return handle

    def shutdown(self) -> None:
        """Close all sessions and dispose all masters."""
        for layout_id in list(self._sessions):
            self.close_session(layout_id)
        self.registry.shutdown()
