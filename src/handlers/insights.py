"""
Lambda handler for cycle insights.

GET returns the cycle overview for a user (served from the metrics cache when
the record snapshot is unchanged), plus the monthly timeline and calendar
period days when `month=YYYY-MM` is given, and grouped history when `search`,
`history_year` or `history_month` is given. POST logs a period and DELETE
removes one; both invalidate the cached metrics.

Only malformed request parameters produce a 400. Anything that fails after
the request was accepted, including bad data from the cycle store, is a 500.
"""
from typing import Any, Dict, Optional
from datetime import date
import json

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from src.utils.clients import get_metrics_cache, get_store_client
from src.utils.formatters import format_overview
from src.utils.logging import logger
from src.services.exceptions import MetricsCacheError
from src.services.history import (
    filter_records,
    get_period_days,
    group_by_start_date,
    search_records
)
from src.services.overview import build_cycle_overview
from src.services.statistics import get_monthly_cycle_timeline

tracer = Tracer()

HISTORY_PARAMS = ("search", "history_year", "history_month")

def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=str)
    }

def _bearer_token(event: Dict) -> Optional[str]:
    headers = event.get("headers") or {}
    value = headers.get("Authorization") or headers.get("authorization")
    if value and value.lower().startswith("bearer "):
        return value[7:]
    return None

def _invalidate_metrics(user_id: str) -> None:
    try:
        get_metrics_cache().invalidate(user_id)
    except MetricsCacheError:
        logger.warning("Could not invalidate cached metrics", extra={"user_id": user_id})

def _parse_calendar_month(value: str) -> int:
    month = int(value)
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {value}")
    return month

def _parse_month(value: str) -> tuple:
    """Parse 'YYYY-MM' into (year, month)."""
    year, month = value.split("-")
    return int(year), _parse_calendar_month(month)

def _parse_query(params: Dict[str, str]) -> Dict[str, Any]:
    """
    Validate GET query parameters before anything is fetched.

    Args:
        params: Query string parameters

    Returns:
        Parsed `month` (year, month) tuple or None, and `history` filters
        or None when no history was requested

    Raises:
        ValueError: On malformed month or year values
    """
    query = {"month": None, "history": None}

    if params.get("month"):
        query["month"] = _parse_month(params["month"])

    if any(key in params for key in HISTORY_PARAMS):
        query["history"] = {
            "search": params.get("search"),
            "year": int(params["history_year"]) if params.get("history_year") else None,
            "month": _parse_calendar_month(params["history_month"]) if params.get("history_month") else None
        }

    return query

def _parse_body(event: Dict) -> Dict[str, Any]:
    body = json.loads(event.get("body") or "{}")
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body

@tracer.capture_method
def get_insights(user_id: str, query: Dict[str, Any], token: Optional[str]) -> Dict[str, Any]:
    """
    Build the insights payload for a user.

    Args:
        user_id: User identifier
        query: Parsed query parameters from _parse_query
        token: Caller token forwarded to the cycle store

    Returns:
        JSON-ready payload
    """
    store = get_store_client(token)
    records = store.list_cycles()
    today = date.today()

    overview = None
    cache = get_metrics_cache()
    try:
        cached = cache.get_cached_metrics(user_id, records, today)
        if cached:
            overview = cached.overview
    except MetricsCacheError:
        logger.warning("Metrics cache unavailable, recomputing", extra={"user_id": user_id})

    if overview is None:
        overview = build_cycle_overview(
            records,
            insights=store.get_insights(),
            dashboard=store.get_dashboard(),
            today=today
        )
        try:
            cache.cache_metrics(user_id, overview, records, today)
        except MetricsCacheError:
            logger.warning("Could not cache metrics", extra={"user_id": user_id})

    payload = {
        "user_id": user_id,
        "overview": overview.model_dump(mode="json"),
        "display": format_overview(overview)
    }

    if query["month"]:
        year, month = query["month"]
        timeline = get_monthly_cycle_timeline(records, year, month, overview.average_cycle_length)
        payload["monthly_timeline"] = [row.model_dump(mode="json") for row in timeline]
        payload["period_days"] = sorted(d.isoformat() for d in get_period_days(records, year, month))

    history = query["history"]
    if history is not None:
        matches = filter_records(records, year=history["year"], month=history["month"])
        matches = search_records(matches, history["search"], today)
        payload["history"] = [
            {
                "date": date_key,
                "cycles": [record.model_dump(mode="json") for record in group]
            }
            for date_key, group in group_by_start_date(matches)
        ]

    return payload

@logger.inject_lambda_context
@tracer.capture_lambda_handler
def handler(event: Dict, context: LambdaContext) -> Dict:
    """
    Handle insights requests.

    Args:
        event: API Gateway Lambda proxy event
        context: Lambda context

    Returns:
        API Gateway Lambda proxy response
    """
    try:
        method = event.get("httpMethod", "GET")
        params = event.get("queryStringParameters") or {}
        user_id = params.get("user_id")

        if not user_id:
            return _response(400, {"error": "user_id is required"})

        try:
            query = _parse_query(params) if method == "GET" else None
            body = _parse_body(event) if method == "POST" else None
        except ValueError as e:
            logger.warning("Invalid insights request", extra={"error": str(e)})
            return _response(400, {"error": str(e)})

        token = _bearer_token(event)

        if method == "GET":
            return _response(200, get_insights(user_id, query, token))

        if method == "POST":
            record = get_store_client(token).create_cycle(body)
            _invalidate_metrics(user_id)
            return _response(201, {"cycle": record.model_dump(mode="json")})

        if method == "DELETE":
            cycle_id = (event.get("pathParameters") or {}).get("id")
            if not cycle_id:
                return _response(400, {"error": "cycle id is required"})
            get_store_client(token).delete_cycle(cycle_id)
            _invalidate_metrics(user_id)
            return _response(200, {"deleted": cycle_id})

        return _response(405, {"error": f"Method {method} not allowed"})

    except Exception as e:
        logger.exception("Error handling insights request")
        return _response(500, {"error": str(e)})
