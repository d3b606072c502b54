"""
Derived cycle metrics caching service.

This module caches computed cycle overviews per user so dashboard screens
do not recompute them on every view.

An entry is valid while all of these hold:
    - its TTL has not passed (METRICS_CACHE_TTL_SECONDS, default 24 hours)
    - the record snapshot it was computed from still has the same record
      count, latest period start and content fingerprint
    - it was computed on the same calendar day, since cycle day and the
      countdown move with the date
    - it has not been invalidated, which happens whenever a record is
      created or deleted

Typical usage:
    cache = CycleMetricsCache()
    cached = cache.get_cached_metrics(user_id, records)
    if cached:
        return cached.overview

    overview = build_cycle_overview(records)
    cache.cache_metrics(user_id, overview, records)
"""
import hashlib
import json
import os
import time
from typing import Iterable, Optional
from datetime import date, datetime

from aws_lambda_powertools import Logger

from src.models.cycle import CycleRecord
from src.models.insights import CachedCycleMetrics, CycleOverview
from src.services.exceptions import MetricsCacheError
from src.services.normalizer import sort_records
from src.utils.dynamo import get_dynamo, create_pk, create_metrics_sk

logger = Logger()

DEFAULT_TTL_SECONDS = 24 * 60 * 60

class CycleMetricsCache:
    """Service for caching derived cycle metrics."""

    def __init__(self, ttl_seconds: Optional[int] = None):
        """
        Initialize metrics cache service.

        Args:
            ttl_seconds: Entry lifetime; defaults to METRICS_CACHE_TTL_SECONDS
        """
        self.dynamo = get_dynamo()
        if ttl_seconds is None:
            ttl_seconds = int(os.environ.get('METRICS_CACHE_TTL_SECONDS', DEFAULT_TTL_SECONDS))
        self.ttl_seconds = ttl_seconds

    def _calculate_ttl(self) -> int:
        """
        Calculate TTL for cached metrics.

        Returns:
            Unix timestamp for TTL
        """
        return int(time.time() + self.ttl_seconds)

    @staticmethod
    def _fingerprint(records: Iterable[CycleRecord]) -> str:
        """
        Hash the record contents so edits made at the store (end dates,
        symptoms, notes) are noticed even when count and latest start match.
        """
        ordered = sorted(records, key=lambda r: (r.period_start_date, r.id))
        canonical = json.dumps(
            [record.model_dump(mode="json") for record in ordered],
            sort_keys=True
        )
        return hashlib.sha256(canonical.encode()).hexdigest()

    @classmethod
    def _snapshot_key(cls, records: Iterable[CycleRecord]) -> tuple:
        ordered = sort_records(records, reverse=True)
        latest = ordered[0].period_start_date if ordered else None
        return len(ordered), latest, cls._fingerprint(ordered)

    def get_cached_metrics(
        self,
        user_id: str,
        records: Optional[Iterable[CycleRecord]] = None,
        today: Optional[date] = None
    ) -> Optional[CachedCycleMetrics]:
        """
        Get cached metrics for user if a valid entry exists.

        Args:
            user_id: User identifier
            records: Optional current record snapshot; an entry computed from
                a different snapshot is treated as stale
            today: Reference date, defaults to today

        Returns:
            CachedCycleMetrics if found and valid, None otherwise

        Raises:
            MetricsCacheError: If there is an error accessing the cache
        """
        if today is None:
            today = date.today()

        try:
            item = self.dynamo.get_item({
                "PK": create_pk(user_id),
                "SK": create_metrics_sk()
            })

            if item and item.get('ttl', 0) > time.time():
                cached = CachedCycleMetrics.model_validate_json(item['metrics'])
                snapshot = (cached.record_count, cached.latest_start_date, cached.fingerprint)
                same_snapshot = records is None or self._snapshot_key(records) == snapshot
                if same_snapshot and cached.computed_on == today:
                    logger.info("Retrieved cached cycle metrics", extra={
                        "user_id": user_id,
                        "cache_hit": True
                    })
                    return cached

            logger.info("No valid cached metrics found", extra={
                "user_id": user_id,
                "cache_hit": False
            })
            return None

        except Exception as e:
            logger.error("Error retrieving cached metrics", extra={
                "user_id": user_id,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise MetricsCacheError(f"Failed to retrieve cached metrics: {str(e)}")

    def cache_metrics(
        self,
        user_id: str,
        overview: CycleOverview,
        records: Iterable[CycleRecord],
        today: Optional[date] = None
    ) -> CachedCycleMetrics:
        """
        Cache a computed overview.

        Args:
            user_id: User identifier
            overview: Overview computed from `records`
            records: Record snapshot the overview was computed from
            today: Date the overview was computed for, defaults to today

        Returns:
            The stored cache entry

        Raises:
            MetricsCacheError: If there is an error caching the metrics
        """
        try:
            record_count, latest_start, fingerprint = self._snapshot_key(records)
            cached = CachedCycleMetrics(
                user_id=user_id,
                overview=overview,
                record_count=record_count,
                latest_start_date=latest_start,
                fingerprint=fingerprint,
                computed_on=today or date.today(),
                cached_at=datetime.now().isoformat(),
                ttl=self._calculate_ttl()
            )

            # Stored as JSON text; DynamoDB rejects float attributes
            self.dynamo.put_item({
                "PK": create_pk(user_id),
                "SK": create_metrics_sk(),
                "metrics": cached.model_dump_json(),
                "cached_at": cached.cached_at,
                "ttl": cached.ttl
            })

            logger.info("Cached cycle metrics", extra={
                "user_id": user_id,
                "record_count": record_count
            })
            return cached

        except Exception as e:
            logger.error("Error caching metrics", extra={
                "user_id": user_id,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise MetricsCacheError(f"Failed to cache metrics: {str(e)}")

    def invalidate(self, user_id: str) -> None:
        """
        Drop the cached metrics for a user.

        Args:
            user_id: User identifier

        Raises:
            MetricsCacheError: If the entry cannot be deleted
        """
        try:
            self.dynamo.delete_item({
                "PK": create_pk(user_id),
                "SK": create_metrics_sk()
            })
            logger.info("Invalidated cached cycle metrics", extra={"user_id": user_id})
        except Exception as e:
            logger.error("Error invalidating cached metrics", extra={
                "user_id": user_id,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise MetricsCacheError(f"Failed to invalidate cached metrics: {str(e)}")
