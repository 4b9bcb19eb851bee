"""
Client for the external metric metadata API.

Fetch failures (connection errors, timeouts, non-2xx responses, bodies that
are not the expected JSON) raise ``MetadataFetchError``.  The client does
not retry or fall back to cached data; callers decide.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import requests
from pydantic import ValidationError

from api.models import CompleteMetricConfig, DisplayItem, Followup, Metric, Prompt, SignalGroup, Specialty

logger = logging.getLogger(__name__)

METADATA_API_URL = os.getenv("METADATA_API_URL", "http://127.0.0.1:5000/api/metadata")
METADATA_API_TIMEOUT = float(os.getenv("METADATA_API_TIMEOUT", "10"))


class MetadataError(Exception):
    """Base class for metadata API failures."""


class MetadataFetchError(MetadataError):
    def __init__(self, message: str, url: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class MetadataNotFound(MetadataFetchError):
    """The API answered 404 for the requested metric."""


class MetadataClient:
    """Thin wrapper over the metadata endpoints. One session per client."""

    def __init__(
        self,
        base_url: str = METADATA_API_URL,
        timeout_seconds: float = METADATA_API_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def close(self) -> None:
        self._session.close()

    def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> dict:
        url = f"{self.base_url}/{path.lstrip('/')}"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            response = self._session.get(url, params=query or None, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Metadata request failed: GET {url}: {e}")
            raise MetadataFetchError(f"Metadata API unreachable: {e}", url=url) from e

        if response.status_code == 404:
            raise MetadataNotFound(f"Not found: {path}", url=url, status_code=404)
        if not response.ok:
            logger.warning(f"Metadata API error: GET {url} -> {response.status_code}")
            raise MetadataFetchError(
                f"API error: {response.status_code} {response.reason}",
                url=url,
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise MetadataFetchError("Metadata API returned non-JSON body", url=url,
                                     status_code=response.status_code) from e
        if not isinstance(body, dict):
            raise MetadataFetchError("Metadata API returned unexpected body", url=url,
                                     status_code=response.status_code)
        return body

    def _parse(self, model, data: Any, url: str):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise MetadataFetchError(f"Malformed metadata response: {e.error_count()} errors", url=url) from e

    def _parse_list(self, model, items: Any, path: str) -> list:
        if not isinstance(items, list):
            return []
        return [self._parse(model, item, path) for item in items]

    def get_specialties(self) -> list[Specialty]:
        body = self._get("specialties")
        specialties = body.get("specialties") or []
        # Older API versions return bare names
        items = [{"name": s} if isinstance(s, str) else s for s in specialties]
        return sorted(self._parse_list(Specialty, items, "specialties"), key=lambda s: s.display_order)

    def get_metrics(self, specialty: Optional[str] = None, domain: Optional[str] = None) -> dict[str, list[Metric]]:
        body = self._get("metrics", {"specialty": specialty, "domain": domain})
        grouped = body.get("metrics") or {}
        if not isinstance(grouped, dict):
            return {}
        return {name: self._parse_list(Metric, items, "metrics") for name, items in grouped.items()}

    def get_metric(self, metric_id: str) -> Metric:
        body = self._get(f"metrics/{metric_id}")
        return self._parse(Metric, body.get("metric", body), f"metrics/{metric_id}")

    def get_complete(self, metric_id: str) -> CompleteMetricConfig:
        path = f"metrics/{metric_id}/complete"
        return self._parse(CompleteMetricConfig, self._get(path), path)

    def get_signals(self, metric_id: str) -> list[SignalGroup]:
        body = self._get("signals", {"metricId": metric_id})
        return self._parse_list(SignalGroup, body.get("signalGroups"), "signals")

    def get_followups(self, metric_id: str) -> list[Followup]:
        body = self._get("followups", {"metricId": metric_id})
        return self._parse_list(Followup, body.get("followups"), "followups")

    def get_display_plan(self, metric_id: str) -> list[DisplayItem]:
        body = self._get(f"display-plan/{metric_id}")
        items = self._parse_list(DisplayItem, body.get("displayItems"), "display-plan")
        return sorted(items, key=lambda d: d.display_order)

    def get_prompts(self, metric_id: str) -> list[Prompt]:
        body = self._get(f"prompts/{metric_id}")
        return self._parse_list(Prompt, body.get("prompts"), "prompts")

    def search(self, query: str, specialty: Optional[str] = None) -> list[dict]:
        body = self._get("search", {"q": query, "specialty": specialty})
        results = body.get("results") or []
        return [r for r in results if isinstance(r, dict)]
