from fastapi import APIRouter, Request

from kwollect_input.api.v2.schemas import HealthOut

router = APIRouter(tags=["health"])

@router.get("/health", response_model=HealthOut)
def health(request: Request):
    coordinator = request.app.state.runtime.coordinator
    return {
        "status": "ok",
        "state": coordinator.state.value,
        "metrics": sorted(coordinator.metrics),
    }
