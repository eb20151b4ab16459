"""
Poll coordinator: one fetch cycle per "measurement cycle finished" event.

Lifecycle (order must never change):

    start()   register metrics, arm the window start, subscribe to the event
    event     close the window, build the URL, put it in the slot, trigger-now
    poll()    take the slot, fetch, parse, normalize, push to the accumulator

The event handler and the poll call run on different threads. The only
thing they share is the slot; its lock is never held across network I/O.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Optional

from kwollect_input.config.settings import settings
from kwollect_input.ingestion.core.base_adapter import BaseAdapter
from kwollect_input.ingestion.core.errors import BatchError, FetchError, MapError, PollError
from kwollect_input.ingestion.core.slot import SharedSlot
from kwollect_input.ingestion.core.window import FetchWindow, wall_clock_now
from kwollect_input.pipeline.events import MEASUREMENT_CYCLE_FINISHED, EventBus
from kwollect_input.pipeline.measurement import MeasurementAccumulator
from kwollect_input.pipeline.registry import MetricId, MetricRegistry
from kwollect_input.utils.logger import logger


class CoordinatorState(str, Enum):
    IDLE = "idle"
    WINDOW_ARMED = "window_armed"
    WAITING_FOR_EVENT = "waiting_for_event"
    FETCHING = "fetching"
    EMITTING = "emitting"


@dataclass(frozen=True)
class FetchRequest:
    url: str
    window: FetchWindow


class PollCoordinator:
    """
    Single-flight fetch state machine around one source adapter.
    At most one fetch runs at a time; a second event before the pending
    request is consumed replaces it (last write wins).
    """

    def __init__(
        self,
        adapter: BaseAdapter,
        trigger: Optional[Callable[[], None]] = None,
        trigger_ack_timeout: Optional[float] = None,
        clock: Callable[[], datetime] = wall_clock_now,
    ) -> None:
        self._adapter = adapter
        self._trigger = trigger
        self._trigger_ack_timeout = (
            trigger_ack_timeout
            if trigger_ack_timeout is not None
            else settings.KWOLLECT_TRIGGER_ACK_TIMEOUT
        )
        self._clock = clock

        self._slot: SharedSlot[FetchRequest] = SharedSlot()
        self._metrics: Dict[str, MetricId] = {}
        self._events: Optional[EventBus] = None
        self._next_start: Optional[datetime] = None

        self._state = CoordinatorState.IDLE
        self._state_lock = threading.Lock()
        self._event_lock = threading.Lock()
        self._fetch_lock = threading.Lock()
        self._poll_ack = threading.Event()

    # -----------------------------
    # Introspection
    # -----------------------------
    @property
    def state(self) -> CoordinatorState:
        with self._state_lock:
            return self._state

    @property
    def metrics(self) -> Dict[str, MetricId]:
        return dict(self._metrics)

    @property
    def started(self) -> bool:
        return self._events is not None

    def set_trigger(self, trigger: Callable[[], None]) -> None:
        self._trigger = trigger

    def _set_state(self, state: CoordinatorState) -> None:
        with self._state_lock:
            previous, self._state = self._state, state
        if previous is not state:
            logger.debug(f"Coordinator {previous.value} -> {state.value}")

    # -----------------------------
    # Start hook
    # -----------------------------
    def start(self, registry: MetricRegistry, events: EventBus) -> Dict[str, MetricId]:
        """Register metrics, arm the first window and subscribe to the trigger event."""
        if self.started:
            raise RuntimeError("PollCoordinator is already started")

        # 1. Metric identities (immutable afterwards)
        self._metrics = self._adapter.register_metrics(registry)

        # 2. Window start
        self._next_start = self._clock()
        self._set_state(CoordinatorState.WINDOW_ARMED)

        # 3. Subscribe: no fetch happens before the first event
        self._events = events
        events.subscribe(MEASUREMENT_CYCLE_FINISHED, self.on_measurement_cycle_finished)
        self._set_state(CoordinatorState.WAITING_FOR_EVENT)

        logger.info(
            f"Kwollect input started: {len(self._metrics)} metric(s), "
            f"window opened at {self._next_start.isoformat()}"
        )
        return self.metrics

    def stop(self) -> None:
        if self._events is not None:
            self._events.unsubscribe(MEASUREMENT_CYCLE_FINISHED, self.on_measurement_cycle_finished)
            self._events = None
        self._set_state(CoordinatorState.IDLE)
        logger.info("Kwollect input stopped")

    # -----------------------------
    # Event hook
    # -----------------------------
    def on_measurement_cycle_finished(self, **payload) -> None:
        """Close the current window and ask the host for an immediate poll.

        Never raises; every failure is logged.
        """
        try:
            request, displaced = self._arm_fetch()
            if request is None:
                return

            if displaced is not None:
                logger.warning(
                    f"Pending fetch for window {displaced.window.start.isoformat()} -> "
                    f"{displaced.window.end.isoformat()} was never polled; "
                    "replaced by the new window (last write wins)"
                )

            if self._trigger is None:
                logger.debug("No trigger configured, the next scheduled poll will fetch")
                return

            self._trigger()
            if not self._poll_ack.wait(self._trigger_ack_timeout):
                logger.warning(
                    f"Poll did not pick up the fetch within {self._trigger_ack_timeout}s"
                )
        except Exception as e:
            logger.exception(f"Kwollect event handler failed: {e}")

    def _arm_fetch(self):
        with self._event_lock:
            if self._next_start is None or not self.started:
                logger.warning("Event received before start(), ignored")
                return None, None

            end = max(self._clock(), self._next_start)
            window = FetchWindow(self._next_start, end)
            request = FetchRequest(self._adapter.build_url(window), window)
            self._next_start = end

            self._poll_ack.clear()
            displaced = self._slot.offer(request)
            self._set_state(CoordinatorState.FETCHING)

        logger.info(f"Fetch armed for {request.url}")
        return request, displaced

    # -----------------------------
    # Poll hook
    # -----------------------------
    def poll(
        self,
        accumulator: MeasurementAccumulator,
        timestamp: Optional[datetime] = None,
    ) -> int:
        """Run the pending fetch cycle, if any. Returns the number of points pushed.

        Raises:
            PollError: the remote fetch failed; fatal for this cycle only.
        """
        if not self._fetch_lock.acquire(blocking=False):
            logger.debug("A fetch is already in flight, skipping this poll")
            return 0

        try:
            request = self._slot.take()
            if request is None:
                logger.debug("No pending Kwollect fetch, nothing to poll")
                return 0

            self._poll_ack.set()
            return self._run_cycle(request, accumulator, timestamp or self._clock())
        finally:
            self._fetch_lock.release()
            # Held so an event cannot arm between the check and the set
            with self._event_lock:
                if not self.started:
                    self._set_state(CoordinatorState.IDLE)
                elif self._slot.pending():
                    self._set_state(CoordinatorState.FETCHING)
                else:
                    self._set_state(CoordinatorState.WAITING_FOR_EVENT)

    def _run_cycle(
        self,
        request: FetchRequest,
        accumulator: MeasurementAccumulator,
        timestamp: datetime,
    ) -> int:
        self._set_state(CoordinatorState.FETCHING)

        try:
            raw = self._adapter.fetch(request.url)
        except FetchError as e:
            logger.error(f"Failed to fetch Kwollect data: {e}")
            raise PollError(str(e)) from e

        try:
            records = self._adapter.parse(raw)
        except BatchError as e:
            logger.error(f"Discarding Kwollect response: {e}")
            return 0

        self._set_state(CoordinatorState.EMITTING)

        emitted = 0
        for record in records:
            try:
                point = self._adapter.normalize(record, timestamp)
            except MapError as e:
                logger.warning(f"Dropping record of {getattr(record, 'device_id', '?')}: {e}")
                continue
            accumulator.push(point)
            emitted += 1

        logger.info(
            f"Kwollect cycle {request.window.start.isoformat()} -> "
            f"{request.window.end.isoformat()}: {emitted}/{len(records)} point(s) emitted"
        )
        return emitted
