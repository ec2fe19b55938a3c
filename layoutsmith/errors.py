"""Exception types raised by layoutsmith.

Every error derives from ``LayoutsmithError`` and from the closest builtin
exception, so callers may catch either.
"""


class LayoutsmithError(Exception):
    """Base class for all layoutsmith errors."""


class MalformedDescriptionError(LayoutsmithError, ValueError):
    """A layout description is missing or has invalid required fields."""


class AssetFetchError(LayoutsmithError, RuntimeError):
    """A furniture asset could not be fetched or decoded."""

    def __init__(self, url: str, reason: str):
        """
        Args:
            url: Asset URL or path that failed.
            reason: Human-readable failure reason.
        """
        super().__init__(f"Failed to load asset {url}: {reason}")
        self.url = url
        self.reason = reason


class NotFoundError(LayoutsmithError, LookupError):
    """A layout id is not known to the registry or description source."""

    def __init__(self, layout_id: str, where: str = "registry"):
        super().__init__(f"Layout {layout_id} not found in {where}.")
        self.layout_id = layout_id


class ResourcePoolError(LayoutsmithError, RuntimeError):
    """A shared rendering resource could not be created."""


class DescriptionSourceError(LayoutsmithError, ConnectionError):
    """The description backend is unreachable or returned an unusable response."""
