"""
Cycle store API client implementation.
"""
import os
from typing import Any, Dict, List, Optional

import requests
from aws_lambda_powertools import Logger

from src.models.cycle import CycleRecord, SymptomStat
from src.models.insights import StoreDashboard, StoreInsights
from src.services.exceptions import CycleStoreError
from src.services.normalizer import coerce_records

logger = Logger()

DEFAULT_TIMEOUT = 10

class CycleStoreClient:
    """Client for the cycle store REST API."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["Accept"] = "application/json"
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_env(cls, token: Optional[str] = None) -> "CycleStoreClient":
        """
        Build a client from CYCLE_STORE_URL, CYCLE_STORE_TOKEN and CYCLE_STORE_TIMEOUT.

        Args:
            token: Optional bearer token overriding CYCLE_STORE_TOKEN

        Raises:
            EnvironmentError: If CYCLE_STORE_URL is not set
        """
        try:
            base_url = os.environ["CYCLE_STORE_URL"]
        except KeyError:
            raise EnvironmentError(
                "CYCLE_STORE_URL environment variable not set. "
                "This variable must be set to the cycle store API base URL."
            )
        return cls(
            base_url,
            token=token or os.environ.get("CYCLE_STORE_TOKEN"),
            timeout=float(os.environ.get("CYCLE_STORE_TIMEOUT", DEFAULT_TIMEOUT))
        )

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """
        Send a request and unwrap the {"success": ..., "data": ...} envelope.

        Raises:
            requests.HTTPError: On non-2xx responses
            CycleStoreError: If the body reports failure or is not JSON
        """
        response = self.session.request(
            method,
            f"{self.base_url}{path}",
            timeout=self.timeout,
            **kwargs
        )
        response.raise_for_status()

        if not response.content:
            return None

        try:
            body = response.json()
        except ValueError:
            raise CycleStoreError(f"Non-JSON response from {method} {path}")

        if isinstance(body, dict) and "success" in body:
            if not body["success"]:
                raise CycleStoreError(body.get("message") or f"{method} {path} failed")
            return body.get("data")
        return body

    def list_cycles(self) -> List[CycleRecord]:
        """
        Get all cycle records for the authenticated user.

        Returns:
            Valid records; malformed ones are dropped
        """
        data = self._request("GET", "/cycles") or []
        records = coerce_records(data)
        logger.info("Fetched cycle records", extra={
            "received": len(data),
            "valid": len(records)
        })
        return records

    def get_cycle(self, cycle_id: str) -> CycleRecord:
        """
        Get a single cycle record.

        Args:
            cycle_id: Record identifier

        Returns:
            The record
        """
        data = self._request("GET", f"/cycles/{cycle_id}")
        return CycleRecord.model_validate(data)

    def create_cycle(self, payload: Dict[str, Any]) -> CycleRecord:
        """
        Log a new period.

        Args:
            payload: Record fields, e.g. period_start_date, period_end_date,
                flow_intensity, notes, symptoms

        Returns:
            The created record as stored
        """
        data = self._request("POST", "/cycles", json=payload)
        return CycleRecord.model_validate(data)

    def delete_cycle(self, cycle_id: str) -> None:
        """
        Delete a cycle record.

        Args:
            cycle_id: Record identifier
        """
        self._request("DELETE", f"/cycles/{cycle_id}")

    def get_insights(self) -> StoreInsights:
        """Get the server-computed insight aggregates."""
        data = self._request("GET", "/cycles/insights") or {}
        return StoreInsights.model_validate(data)

    def get_dashboard(self) -> StoreDashboard:
        """Get the server-computed dashboard shortcut."""
        data = self._request("GET", "/cycles/dashboard") or {}
        return StoreDashboard.model_validate(data)

    def list_symptoms(self) -> List[SymptomStat]:
        """Get the server symptom statistics."""
        data = self._request("GET", "/symptoms/statistics") or []
        return [
            SymptomStat(
                symptom_type=item["symptom_type"],
                occurrence_count=item.get("occurrence_count", item.get("count", 0))
            )
            for item in data
        ]
