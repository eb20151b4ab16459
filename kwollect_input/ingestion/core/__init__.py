# ingestion core: adapter contract, coordinator, slot, window, errors

from kwollect_input.ingestion.core.base_adapter import BaseAdapter
from kwollect_input.ingestion.core.coordinator import (
    CoordinatorState,
    FetchRequest,
    PollCoordinator,
)
from kwollect_input.ingestion.core.slot import SharedSlot
from kwollect_input.ingestion.core.window import FetchWindow

__all__ = [
    "BaseAdapter",
    "CoordinatorState",
    "FetchRequest",
    "FetchWindow",
    "PollCoordinator",
    "SharedSlot",
]
