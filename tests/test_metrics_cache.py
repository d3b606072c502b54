"""
Tests for cycle metrics caching service.
"""
import json
import pytest
import time
from datetime import date
from unittest.mock import Mock, patch

from src.models.cycle import CycleRecord
from src.services.exceptions import MetricsCacheError
from src.services.metrics_cache import CycleMetricsCache
from src.services.overview import build_cycle_overview

TODAY = date(2025, 4, 25)

@pytest.fixture
def cache():
    """Create CycleMetricsCache instance with mocked DynamoDB."""
    with patch('src.services.metrics_cache.get_dynamo') as mock_get_dynamo:
        mock_dynamo = Mock()
        mock_get_dynamo.return_value = mock_dynamo
        yield CycleMetricsCache(), mock_dynamo

@pytest.fixture
def stored_item(cache, regular_records):
    """Cache an overview and return the item written to DynamoDB."""
    cache_service, mock_dynamo = cache
    overview = build_cycle_overview(regular_records, today=TODAY)
    cache_service.cache_metrics("123456", overview, regular_records, today=TODAY)
    return mock_dynamo.put_item.call_args[0][0]

def test_calculate_ttl(cache):
    """Test TTL calculation is 24 hours in future by default."""
    cache_service, _ = cache
    current_time = time.time()
    ttl = cache_service._calculate_ttl()

    expected_ttl = current_time + (24 * 60 * 60)
    assert abs(ttl - expected_ttl) <= 1

def test_ttl_from_environment(monkeypatch):
    """Test METRICS_CACHE_TTL_SECONDS override."""
    monkeypatch.setenv('METRICS_CACHE_TTL_SECONDS', '600')
    with patch('src.services.metrics_cache.get_dynamo'):
        assert CycleMetricsCache().ttl_seconds == 600
        assert CycleMetricsCache(ttl_seconds=60).ttl_seconds == 60

def test_cache_metrics(stored_item, regular_records):
    """Test the stored item layout."""
    assert stored_item['PK'] == "USER#123456"
    assert stored_item['SK'] == "METRICS#overview"
    assert isinstance(stored_item['ttl'], int)

    metrics = json.loads(stored_item['metrics'])
    assert metrics['record_count'] == len(regular_records)
    assert metrics['latest_start_date'] == "2025-04-23"
    assert metrics['computed_on'] == "2025-04-25"
    assert metrics['overview']['current_cycle_day'] == 3
    assert len(metrics["fingerprint"]) == 64

def test_get_cached_metrics_hit(cache, stored_item, regular_records):
    """Test retrieving a valid cached overview."""
    cache_service, mock_dynamo = cache
    mock_dynamo.get_item.return_value = stored_item

    result = cache_service.get_cached_metrics("123456", regular_records, today=TODAY)

    assert result is not None
    assert result.overview == build_cycle_overview(regular_records, today=TODAY)
    mock_dynamo.get_item.assert_called_once_with({
        "PK": "USER#123456",
        "SK": "METRICS#overview"
    })

def test_get_cached_metrics_expired(cache, stored_item, regular_records):
    """Test retrieving expired cached metrics returns None."""
    cache_service, mock_dynamo = cache
    mock_dynamo.get_item.return_value = {**stored_item, 'ttl': int(time.time()) - 3600}

    assert cache_service.get_cached_metrics("123456", regular_records, today=TODAY) is None

def test_get_cached_metrics_changed_snapshot(cache, stored_item, regular_records):
    """A new record makes the entry stale."""
    cache_service, mock_dynamo = cache
    mock_dynamo.get_item.return_value = stored_item
    records = regular_records + [CycleRecord(id="99", period_start_date=date(2025, 5, 20))]

    assert cache_service.get_cached_metrics("123456", records, today=TODAY) is None

def test_get_cached_metrics_edited_record(cache, stored_item, regular_records):
    """An edit that keeps count and latest start still makes the entry stale."""
    cache_service, mock_dynamo = cache
    mock_dynamo.get_item.return_value = stored_item
    records = list(regular_records)
    records[0] = records[0].model_copy(update={"period_end_date": date(2025, 1, 8)})

    assert cache_service.get_cached_metrics("123456", records, today=TODAY) is None

def test_get_cached_metrics_next_day(cache, stored_item, regular_records):
    """Entries computed on another day are stale."""
    cache_service, mock_dynamo = cache
    mock_dynamo.get_item.return_value = stored_item

    assert cache_service.get_cached_metrics("123456", regular_records, today=date(2025, 4, 26)) is None

def test_get_cached_metrics_without_snapshot(cache, stored_item):
    """Without records only TTL and day are checked."""
    cache_service, mock_dynamo = cache
    mock_dynamo.get_item.return_value = stored_item

    assert cache_service.get_cached_metrics("123456", today=TODAY) is not None

def test_get_cached_metrics_miss(cache):
    """Test cache miss returns None."""
    cache_service, mock_dynamo = cache
    mock_dynamo.get_item.return_value = None

    assert cache_service.get_cached_metrics("123456") is None
    assert mock_dynamo.get_item.called

def test_get_cached_metrics_error(cache):
    """Test error handling when retrieving cached metrics."""
    cache_service, mock_dynamo = cache
    mock_dynamo.get_item.side_effect = Exception("DynamoDB error")

    with pytest.raises(MetricsCacheError) as exc_info:
        cache_service.get_cached_metrics("123456")

    assert "Failed to retrieve cached metrics" in str(exc_info.value)

def test_cache_metrics_error(cache, regular_records):
    """Test error handling when caching metrics."""
    cache_service, mock_dynamo = cache
    mock_dynamo.put_item.side_effect = Exception("DynamoDB error")
    overview = build_cycle_overview(regular_records, today=TODAY)

    with pytest.raises(MetricsCacheError) as exc_info:
        cache_service.cache_metrics("123456", overview, regular_records, today=TODAY)

    assert "Failed to cache metrics" in str(exc_info.value)

def test_invalidate(cache):
    """Test invalidation deletes the entry."""
    cache_service, mock_dynamo = cache

    cache_service.invalidate("123456")

    mock_dynamo.delete_item.assert_called_once_with({
        "PK": "USER#123456",
        "SK": "METRICS#overview"
    })

def test_invalidate_error(cache):
    """Test error handling when invalidating."""
    cache_service, mock_dynamo = cache
    mock_dynamo.delete_item.side_effect = Exception("DynamoDB error")

    with pytest.raises(MetricsCacheError) as exc_info:
        cache_service.invalidate("123456")

    assert "Failed to invalidate cached metrics" in str(exc_info.value)
