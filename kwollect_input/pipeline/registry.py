"""
Metric registry: map metric name -> typed metric handle.

Handles are registered once (plugin start) and never change afterwards.
Only registration and lookup.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class MetricValueType(str, Enum):
    FLOAT = "f64"
    UINT = "u64"


@dataclass(frozen=True)
class MetricId:
    """Opaque handle of a registered metric."""

    id: int
    name: str
    value_type: MetricValueType
    unit: str = ""
    description: str = ""


class MetricRegistry:
    """Maps metric name to MetricId. Duplicate names are rejected."""

    def __init__(self) -> None:
        self._metrics: Dict[str, MetricId] = {}
        self._lock = threading.Lock()

    def register(
        self,
        name: str,
        value_type: MetricValueType = MetricValueType.FLOAT,
        unit: str = "",
        description: str = "",
    ) -> MetricId:
        """Register a metric and return its handle."""
        with self._lock:
            if name in self._metrics:
                raise ValueError(f"Metric {name!r} is already registered")
            metric = MetricId(
                id=len(self._metrics),
                name=name,
                value_type=value_type,
                unit=unit,
                description=description,
            )
            self._metrics[name] = metric
        return metric

    def get(self, name: str) -> Optional[MetricId]:
        """Return the handle registered under name, or None."""
        return self._metrics.get(name)

    def list_metrics(self) -> list[str]:
        """Return all registered metric names."""
        return list(self._metrics.keys())
