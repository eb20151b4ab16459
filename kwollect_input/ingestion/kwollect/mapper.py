from datetime import datetime
from typing import Mapping

from kwollect_input.ingestion.core.errors import MapError
from kwollect_input.ingestion.kwollect.codec import MeasureRecord
from kwollect_input.ingestion.kwollect.constants import (
    CONSUMER_KIND_DEVICE_ORIGIN,
    DEVICE_ORIGIN_LABEL,
    METRIC_ID_ATTRIBUTE,
    RESOURCE_KIND_DEVICE,
    U64_MAX,
)
from kwollect_input.pipeline.measurement import (
    MeasurementPoint,
    Resource,
    ResourceConsumer,
)
from kwollect_input.pipeline.registry import MetricId, MetricValueType


class MeasurementMapper:
    """MeasureRecord -> MeasurementPoint.

    The metric is looked up by record.metric_id in the name -> handle table
    built at start. Upstream identifiers are never used as handles directly.
    """

    def __init__(self, metrics: Mapping[str, MetricId], use_poll_timestamp: bool = False):
        self.metrics = dict(metrics)
        self.use_poll_timestamp = use_poll_timestamp

    def map(self, record: MeasureRecord, timestamp: datetime) -> MeasurementPoint:
        metric = self.metrics.get(record.metric_id)
        if metric is None:
            raise MapError(f"metric {record.metric_id!r} is not configured")

        origin = record.labels.get(DEVICE_ORIGIN_LABEL)
        if isinstance(origin, str):
            consumer = ResourceConsumer.custom(CONSUMER_KIND_DEVICE_ORIGIN, origin)
        else:
            consumer = ResourceConsumer.local_machine()

        attributes = {k: v for k, v in record.labels.items() if k != DEVICE_ORIGIN_LABEL}
        attributes[METRIC_ID_ATTRIBUTE] = record.metric_id

        return MeasurementPoint(
            metric=metric,
            timestamp=timestamp if self.use_poll_timestamp else record.timestamp,
            value=coerce_value(record.value, metric.value_type),
            resource=Resource.custom(RESOURCE_KIND_DEVICE, record.device_id),
            consumer=consumer,
            attributes=attributes,
        )


def coerce_value(value: float | int, value_type: MetricValueType) -> float | int:
    if value_type is MetricValueType.FLOAT:
        return float(value)
    # u64 metric: truncate towards zero
    if value != value or value in (float("inf"), float("-inf")):
        raise MapError(f"cannot store {value!r} in an unsigned metric")
    if value < 0 or value > U64_MAX:
        raise MapError(f"{value!r} is out of range for an unsigned metric")
    return int(value)
