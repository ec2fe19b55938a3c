"""Registry of master layouts and factory for session clones."""

import logging

from layoutsmith.entities.layout import Layout
from layoutsmith.errors import NotFoundError

console_logger = logging.getLogger(__name__)


class LayoutRegistry:
    """Maps layout ids to their master layout.

    Masters are cached templates; every ``get_session_clone`` call returns a new
    independent deep copy. Clones are never cached or deduplicated. The registry
    does not wait for asset loading: callers must finish ``load_assets`` on a
    master before registering it.
    """

    def __init__(self) -> None:
        self._masters: dict[str, Layout] = {}

    def register_master(self, layout_id: str, layout: Layout) -> Layout | None:
        """Store a layout as the master for an id (last write wins).

        The displaced master, if any, is demoted but not disposed: sessions
        cloned from it may still reference its model resources. The caller
        decides when to dispose it. A layout registered under several ids stays
        a master until the last of them is replaced.

        Args:
            layout_id: Template id the layout is registered under.
            layout: Layout to become the master.

        Returns:
            The previous master for this id, or None.
        """
        previous = self._masters.get(layout_id)
        if previous is layout:
            return None

        if layout.has_model_references and not layout.assets_loaded:
            console_logger.warning(
                f"Registering master {layout_id} before its assets were loaded; "
                "sessions will show placeholders"
            )

        self._masters[layout_id] = layout
        layout._set_master(True)
        if previous is not None:
            if not self.is_registered(previous):
                previous._set_master(False)
            console_logger.info(f"Replaced master layout {layout_id}")
        else:
            console_logger.info(f"Registered master layout {layout_id}")
        return previous

    def get_session_clone(self, layout_id: str) -> Layout:
        """Create a new session from the master registered under an id.

        Raises:
            NotFoundError: If no master is registered under the id.
        """
        master = self._masters.get(layout_id)
        if master is None:
            raise NotFoundError(layout_id)
        session = master.clone()
        console_logger.debug(f"Created session clone for {layout_id}")
        return session

    def get_master(self, layout_id: str) -> Layout | None:
        return self._masters.get(layout_id)

    def exists(self, layout_id: str) -> bool:
        return layout_id in self._masters

    def is_registered(self, layout: Layout) -> bool:
        """Whether the layout is the master for any id."""
        return any(master is layout for master in self._masters.values())

    def list_ids(self) -> list[str]:
        return list(self._masters)

    def size(self) -> int:
        """Get number of registered masters."""
        return len(self._masters)

    def unregister(self, layout_id: str) -> Layout | None:
        """Remove and return a master without disposing it."""
        master = self._masters.pop(layout_id, None)
        if master is not None:
            if not self.is_registered(master):
                master._set_master(False)
            console_logger.info(f"Unregistered master layout {layout_id}")
        return master

    def shutdown(self) -> None:
        """Dispose and remove every master."""
        count = len(self._masters)
        # Aliased masters appear more than once; dispose is idempotent.
        for master in self._masters.values():
            master._set_master(False)
            master.dispose()
        self._masters.clear()
        console_logger.info(f"Disposed {count} master layouts")
