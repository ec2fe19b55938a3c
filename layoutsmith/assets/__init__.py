from .fetchers import (
    AssetFetcher,
    HttpAssetFetcher,
    LocalAssetFetcher,
    RoutingAssetFetcher,
)
from .hydrator import AssetHydrator, AssetLoadResult, HydrationReport, LoadStatus
from .normalization import NormalizationResult

__all__ = [
    "AssetFetcher",
    "AssetHydrator",
    "AssetLoadResult",
    "HttpAssetFetcher",
    "HydrationReport",
    "LoadStatus",
    "LocalAssetFetcher",
    "NormalizationResult",
    "RoutingAssetFetcher",
]
