"""
Base adapter contract for windowed ingestion sources.

Adapters MUST NOT: retry requests, hold shared state between cycles,
or control lifecycle (the coordinator does that).

Adapters ONLY: register_metrics, build_url, fetch, parse, normalize.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List

from kwollect_input.ingestion.core.window import FetchWindow
from kwollect_input.pipeline.measurement import MeasurementPoint
from kwollect_input.pipeline.registry import MetricId, MetricRegistry


class BaseAdapter(ABC):
    """Contract for all windowed source adapters."""

    @abstractmethod
    def register_metrics(self, registry: MetricRegistry) -> Dict[str, MetricId]:
        """Register configured metrics once, at start. Returns name -> handle."""
        pass

    @abstractmethod
    def build_url(self, window: FetchWindow) -> str:
        """Render the query URL for one fetch window."""
        pass

    @abstractmethod
    def fetch(self, url: str) -> Any:
        """Fetch raw data from source. One attempt, no retries."""
        pass

    @abstractmethod
    def parse(self, raw: Any) -> List[Any]:
        """Parse raw response into a list of records."""
        pass

    @abstractmethod
    def normalize(self, record: Any, timestamp: datetime) -> MeasurementPoint:
        """Turn one record into a pipeline point. timestamp is the poll instant."""
        pass
