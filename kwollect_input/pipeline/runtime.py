from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from kwollect_input.config.settings import settings
from kwollect_input.ingestion.core.coordinator import PollCoordinator
from kwollect_input.ingestion.core.errors import PollError
from kwollect_input.ingestion.kwollect.adapter import KwollectAdapter
from kwollect_input.pipeline.events import MEASUREMENT_CYCLE_FINISHED, EventBus
from kwollect_input.pipeline.measurement import MeasurementAccumulator, MeasurementSink
from kwollect_input.pipeline.registry import MetricRegistry
from kwollect_input.utils.logger import logger

POLL_JOB_ID = "kwollect_input_poll"


class PipelineRuntime:
    """
    Minimal host around the poll coordinator.

    The scheduler calls poll() on a slow interval; a "measurement cycle
    finished" event makes the coordinator request an immediate run through
    trigger_now().
    """

    def __init__(
        self,
        coordinator: PollCoordinator,
        registry: MetricRegistry | None = None,
        events: EventBus | None = None,
        sink: MeasurementSink | None = None,
        poll_interval: int | None = None,
        scheduler: BackgroundScheduler | None = None,
    ):
        self.coordinator = coordinator
        self.registry = registry or MetricRegistry()
        self.events = events or EventBus()
        self.sink = sink or MeasurementSink(settings.KWOLLECT_SINK_CAPACITY)
        self.poll_interval = poll_interval or settings.KWOLLECT_POLL_INTERVAL
        self.scheduler = scheduler or BackgroundScheduler(timezone="UTC")

        self.coordinator.set_trigger(self.trigger_now)

    def start(self) -> None:
        self.coordinator.start(self.registry, self.events)

        self.scheduler.add_job(
            func=self.poll_once,
            trigger=IntervalTrigger(seconds=self.poll_interval),
            id=POLL_JOB_ID,
            name="Kwollect input poll",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info(f"Scheduler started: Kwollect poll every {self.poll_interval}s")

    def shutdown(self) -> None:
        self.coordinator.stop()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped gracefully")

    def trigger_now(self) -> None:
        """Ask the scheduler to run the poll job immediately."""
        self.scheduler.modify_job(POLL_JOB_ID, next_run_time=datetime.now(timezone.utc))

    def publish_cycle_finished(self, **payload) -> int:
        return self.events.publish(MEASUREMENT_CYCLE_FINISHED, **payload)

    def poll_once(self) -> int:
        accumulator = MeasurementAccumulator()
        try:
            emitted = self.coordinator.poll(accumulator, datetime.now(timezone.utc))
        except PollError as e:
            # Host policy: log and wait for the next trigger, no retry
            logger.error(f"Poll cycle failed: {e}")
            return 0

        points = accumulator.drain()
        if points:
            self.sink.write(points)
            for point in points:
                logger.debug(f"Measurement: {point}")
        return emitted


def build_runtime() -> PipelineRuntime:
    """Wire the Kwollect adapter, coordinator and host from settings."""
    return PipelineRuntime(PollCoordinator(KwollectAdapter()))
