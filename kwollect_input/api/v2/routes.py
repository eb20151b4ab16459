from fastapi import APIRouter, BackgroundTasks, Query, Request

from kwollect_input.api.v2.schemas import EventAccepted, MeasurementOut
from kwollect_input.pipeline.events import MEASUREMENT_CYCLE_FINISHED

router = APIRouter(prefix="/v2", tags=["v2"])


@router.post(
    "/events/measurement-cycle-finished",
    response_model=EventAccepted,
    status_code=202,
)
def measurement_cycle_finished(request: Request, background_tasks: BackgroundTasks):
    runtime = request.app.state.runtime

    # The handler waits (bounded) for the poll to start: keep it off the request
    background_tasks.add_task(runtime.publish_cycle_finished)

    return {"status": "accepted", "event": MEASUREMENT_CYCLE_FINISHED}


@router.get("/measurements", response_model=list[MeasurementOut])
def recent_measurements(
    request: Request,
    limit: int = Query(100, ge=0, le=1000),
):
    points = request.app.state.runtime.sink.recent(limit)
    return [p.to_dict() for p in points]
