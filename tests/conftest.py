"""Shared test fixtures for all test modules."""

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from kwollect_input.ingestion.core.coordinator import PollCoordinator
from kwollect_input.ingestion.kwollect.adapter import KwollectAdapter
from kwollect_input.pipeline.events import EventBus
from kwollect_input.pipeline.registry import MetricRegistry
from kwollect_input.pipeline.runtime import PipelineRuntime

BASE_URL = "https://api.grid5000.fr/stable"
POWER_METRIC = "wattmetre_power_watt"


def power_record(**overrides: Any) -> dict:
    """The taurus-7 wattmeter measure returned by Kwollect."""
    record = {
        "device_id": "taurus-7",
        "metric_id": POWER_METRIC,
        "timestamp": "2025-07-21T16:15:31+02:00",
        "value": 131.7,
        "labels": {"_device_orig": "wattmetre1-port6"},
    }
    record.update(overrides)
    return record


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


class FakeKwollectClient:
    """Records fetched URLs and returns a canned payload (or raises)."""

    def __init__(self, payload: Any = None, error: Exception | None = None) -> None:
        self.payload = payload if payload is not None else [power_record()]
        self.error = error
        self.urls: list[str] = []

    def fetch(self, url: str) -> Any:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.payload


class FakeScheduler:
    """Stands in for APScheduler's BackgroundScheduler."""

    def __init__(self) -> None:
        self.running = False
        self.jobs: dict[str, dict] = {}
        self.modified: list[tuple[str, dict]] = []

    def add_job(self, **kwargs: Any) -> None:
        self.jobs[kwargs["id"]] = kwargs

    def modify_job(self, job_id: str, **changes: Any) -> None:
        self.modified.append((job_id, changes))

    def start(self) -> None:
        self.running = True

    def shutdown(self, wait: bool = True) -> None:
        self.running = False


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 7, 21, 14, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def client() -> FakeKwollectClient:
    return FakeKwollectClient()


@pytest.fixture
def adapter(client: FakeKwollectClient) -> KwollectAdapter:
    return KwollectAdapter(
        site="lyon",
        hostnames=["taurus-7"],
        metrics=[POWER_METRIC],
        base_url=BASE_URL,
        uint_metrics=[],
        client=client,
        use_poll_timestamp=False,
    )


@pytest.fixture
def registry() -> MetricRegistry:
    return MetricRegistry()


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def coordinator(adapter: KwollectAdapter, clock: FakeClock) -> PollCoordinator:
    return PollCoordinator(adapter, trigger=None, trigger_ack_timeout=0.01, clock=clock)


@pytest.fixture
def started(
    coordinator: PollCoordinator, registry: MetricRegistry, events: EventBus
) -> PollCoordinator:
    coordinator.start(registry, events)
    return coordinator


def make_runtime(client: FakeKwollectClient) -> tuple[PipelineRuntime, FakeScheduler]:
    """A runtime around the real Kwollect adapter, with a fake client and scheduler."""
    adapter = KwollectAdapter(
        site="lyon",
        hostnames=["taurus-7"],
        metrics=[POWER_METRIC],
        base_url=BASE_URL,
        uint_metrics=[],
        client=client,
        use_poll_timestamp=False,
    )
    scheduler = FakeScheduler()
    runtime = PipelineRuntime(
        PollCoordinator(adapter, trigger_ack_timeout=0.01),
        poll_interval=60,
        scheduler=scheduler,  # type: ignore[arg-type]
    )
    return runtime, scheduler
