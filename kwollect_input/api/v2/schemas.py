from pydantic import BaseModel
from datetime import datetime
from typing import Dict, List, Optional, Union


class Identity(BaseModel):
    kind: str
    id: Optional[str] = None


class MeasurementOut(BaseModel):
    metric: str
    timestamp: datetime
    value: Union[int, float]
    resource: Identity
    consumer: Identity
    attributes: Dict[str, Union[bool, int, float, str]] = {}


class EventAccepted(BaseModel):
    status: str
    event: str


class HealthOut(BaseModel):
    status: str
    state: str
    metrics: List[str]
