"""
Kwollect adapter: Grid'5000 metrology API -> pipeline points.
No retries, no lifecycle. The poll coordinator drives it.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List

from kwollect_input.config.settings import settings
from kwollect_input.ingestion.core.base_adapter import BaseAdapter
from kwollect_input.ingestion.kwollect.batch import parse_batch
from kwollect_input.ingestion.kwollect.client import KwollectClient
from kwollect_input.ingestion.kwollect.codec import MeasureRecord
from kwollect_input.ingestion.kwollect.mapper import MeasurementMapper
from kwollect_input.ingestion.core.window import FetchWindow
from kwollect_input.ingestion.kwollect.url_builder import build_kwollect_url
from kwollect_input.pipeline.measurement import MeasurementPoint
from kwollect_input.pipeline.registry import MetricId, MetricRegistry, MetricValueType
from kwollect_input.utils.logger import logger


class KwollectAdapter(BaseAdapter):
    """Adapter for the Kwollect metrics endpoint of one Grid'5000 site."""

    def __init__(
        self,
        site: str | None = None,
        hostnames: Iterable[str] | None = None,
        metrics: Iterable[str] | None = None,
        base_url: str | None = None,
        uint_metrics: Iterable[str] | None = None,
        client: KwollectClient | None = None,
        use_poll_timestamp: bool | None = None,
    ):
        self.site = site or settings.KWOLLECT_SITE
        self.hostnames = list(hostnames or settings.KWOLLECT_HOSTNAMES)
        self.metrics = list(metrics or settings.KWOLLECT_METRICS)
        self.base_url = base_url or settings.KWOLLECT_BASE_URL
        self.uint_metrics = set(
            uint_metrics if uint_metrics is not None else settings.KWOLLECT_UINT_METRICS
        )
        self.client = client or KwollectClient()
        self.use_poll_timestamp = (
            use_poll_timestamp
            if use_poll_timestamp is not None
            else settings.KWOLLECT_USE_POLL_TIMESTAMP
        )
        self.mapper: MeasurementMapper | None = None

        if not self.hostnames:
            raise ValueError("Kwollect adapter requires at least one hostname")
        if not self.metrics:
            raise ValueError("Kwollect adapter requires at least one metric")

    def register_metrics(self, registry: MetricRegistry) -> Dict[str, MetricId]:
        handles: Dict[str, MetricId] = {}
        for name in self.metrics:
            value_type = (
                MetricValueType.UINT if name in self.uint_metrics else MetricValueType.FLOAT
            )
            handles[name] = registry.register(
                name,
                value_type=value_type,
                description=f"Kwollect metric {name} ({self.site})",
            )
            logger.info(f"Registered metric {name} as {value_type.value}")

        self.mapper = MeasurementMapper(handles, use_poll_timestamp=self.use_poll_timestamp)
        return handles

    def build_url(self, window: FetchWindow) -> str:
        return build_kwollect_url(
            self.base_url, self.site, self.hostnames, self.metrics, window
        )

    def fetch(self, url: str) -> Any:
        return self.client.fetch(url)

    def parse(self, raw: Any) -> List[MeasureRecord]:
        return parse_batch(raw)

    def normalize(self, record: MeasureRecord, timestamp: datetime) -> MeasurementPoint:
        if self.mapper is None:
            raise RuntimeError("register_metrics() must run before normalize()")
        return self.mapper.map(record, timestamp)
