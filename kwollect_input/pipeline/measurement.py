"""Pipeline-side measurement model: what the host receives from a source."""

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Deque, Dict, Iterator, List, Union

from kwollect_input.pipeline.registry import MetricId

AttributeValue = Union[bool, float, int, str]


class ResourceKind(str, Enum):
    LOCAL_MACHINE = "local_machine"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Resource:
    """What produced the measurement."""

    kind: ResourceKind
    custom_kind: str | None = None
    id: str | None = None

    @classmethod
    def local_machine(cls) -> "Resource":
        return cls(ResourceKind.LOCAL_MACHINE)

    @classmethod
    def custom(cls, kind: str, id: str) -> "Resource":
        return cls(ResourceKind.CUSTOM, kind, id)


@dataclass(frozen=True)
class ResourceConsumer:
    """What consumed (or caused) the measured resource usage."""

    kind: ResourceKind
    custom_kind: str | None = None
    id: str | None = None

    @classmethod
    def local_machine(cls) -> "ResourceConsumer":
        return cls(ResourceKind.LOCAL_MACHINE)

    @classmethod
    def custom(cls, kind: str, id: str) -> "ResourceConsumer":
        return cls(ResourceKind.CUSTOM, kind, id)


@dataclass(frozen=True)
class MeasurementPoint:
    """A single typed measurement, ready for the pipeline.

    Attributes:
        metric: Registered metric handle.
        timestamp: Instant of the measurement (aware).
        value: float or unsigned int, matching metric.value_type.
        resource: Producer identity.
        consumer: Consumer identity.
        attributes: Provenance and extra dimensions.
    """

    metric: MetricId
    timestamp: datetime
    value: Union[float, int]
    resource: Resource
    consumer: ResourceConsumer
    attributes: Dict[str, AttributeValue] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "metric": self.metric.name,
            "timestamp": self.timestamp,
            "value": self.value,
            "resource": {"kind": self.resource.custom_kind or self.resource.kind.value, "id": self.resource.id},
            "consumer": {"kind": self.consumer.custom_kind or self.consumer.kind.value, "id": self.consumer.id},
            "attributes": dict(self.attributes),
        }


class MeasurementAccumulator:
    """Collects the points produced by one poll call."""

    def __init__(self) -> None:
        self._points: List[MeasurementPoint] = []

    def push(self, point: MeasurementPoint) -> None:
        self._points.append(point)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[MeasurementPoint]:
        return iter(self._points)

    def drain(self) -> List[MeasurementPoint]:
        points, self._points = self._points, []
        return points


class MeasurementSink:
    """Bounded store of the most recently emitted points (newest last)."""

    def __init__(self, capacity: int = 1000) -> None:
        self._points: Deque[MeasurementPoint] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def write(self, points: List[MeasurementPoint]) -> None:
        with self._lock:
            self._points.extend(points)

    def recent(self, limit: int | None = None) -> List[MeasurementPoint]:
        with self._lock:
            points = list(self._points)
        if limit is not None:
            points = points[-limit:] if limit > 0 else []
        return points
