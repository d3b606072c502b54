"""
Centralized client initialization module.

This module provides lazy-loaded shared clients for the application.
"""
from typing import Optional

from src.utils.store_client import CycleStoreClient
from src.services.metrics_cache import CycleMetricsCache

# Initialize shared clients (lazy loading)
_metrics_cache = None

def get_store_client(token: Optional[str] = None) -> CycleStoreClient:
    """
    Create a cycle store client.

    Not shared: each request may carry its own caller token.
    """
    return CycleStoreClient.from_env(token=token)

def get_metrics_cache() -> CycleMetricsCache:
    """Get or create the metrics cache."""
    global _metrics_cache
    if _metrics_cache is None:
        _metrics_cache = CycleMetricsCache()
    return _metrics_cache
