from datetime import datetime
from typing import Iterable

from kwollect_input.ingestion.core.window import FetchWindow
from kwollect_input.ingestion.kwollect.constants import API_OFFSET, API_TIME_FORMAT


def format_api_time(instant: datetime) -> str:
    """Render an instant in Grid'5000 civil time (fixed UTC+2)."""
    return instant.astimezone(API_OFFSET).strftime(API_TIME_FORMAT)


def _join(values: Iterable[str] | str) -> str:
    if isinstance(values, str):
        return values
    return ",".join(values)


def build_kwollect_url(
    base_url: str,
    site: str,
    hostnames: Iterable[str] | str,
    metrics: Iterable[str] | str,
    window: FetchWindow,
) -> str:
    """Constructs the Kwollect query URL of the Grid'5000 API."""
    return (
        f"{base_url.rstrip('/')}/sites/{site}/metrics"
        f"?nodes={_join(hostnames)}"
        f"&metrics={_join(metrics)}"
        f"&start_time={format_api_time(window.start)}"
        f"&end_time={format_api_time(window.end)}"
    )
