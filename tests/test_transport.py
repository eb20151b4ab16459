"""Tests for the Kwollect URL builder and HTTP client."""

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import requests

from kwollect_input.ingestion.core.errors import InvalidPayload, TransportError
from kwollect_input.ingestion.kwollect.client import KwollectClient
from kwollect_input.ingestion.core.window import FetchWindow
from kwollect_input.ingestion.kwollect.url_builder import build_kwollect_url, format_api_time

UTC = timezone.utc


class TestFetchWindow:
    @pytest.mark.transport
    def test_naive_instants_are_rejected(self) -> None:
        with pytest.raises(ValueError):
            FetchWindow(datetime(2025, 7, 21, 14), datetime(2025, 7, 21, 15))

    @pytest.mark.transport
    def test_end_before_start_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            FetchWindow(datetime(2025, 7, 21, 15, tzinfo=UTC), datetime(2025, 7, 21, 14, tzinfo=UTC))


class TestBuildKwollectUrl:
    @pytest.mark.transport
    def test_url_in_grid5000_civil_time(self) -> None:
        window = FetchWindow(
            datetime(2025, 7, 21, 14, 15, 31, tzinfo=UTC),
            datetime(2025, 7, 21, 14, 25, 31, 999999, tzinfo=UTC),
        )

        url = build_kwollect_url(
            "https://api.grid5000.fr/stable", "lyon", ["taurus-7"], ["wattmetre_power_watt"], window
        )

        assert url == (
            "https://api.grid5000.fr/stable/sites/lyon/metrics"
            "?nodes=taurus-7&metrics=wattmetre_power_watt"
            "&start_time=2025-07-21T16:15:31&end_time=2025-07-21T16:25:31"
        )

    @pytest.mark.transport
    def test_multiple_nodes_and_metrics_are_comma_joined(self) -> None:
        window = FetchWindow(datetime(2025, 1, 1, tzinfo=UTC), datetime(2025, 1, 1, 0, 1, tzinfo=UTC))

        url = build_kwollect_url(
            "https://api.grid5000.fr/stable/",
            "lyon",
            ["taurus-7", "taurus-8"],
            ["wattmetre_power_watt", "bmc_node_power_watt"],
            window,
        )

        assert "/stable/sites/lyon/metrics?" in url
        assert "nodes=taurus-7,taurus-8" in url
        assert "metrics=wattmetre_power_watt,bmc_node_power_watt" in url

    @pytest.mark.transport
    def test_offset_is_fixed_regardless_of_input_zone(self) -> None:
        tokyo = timezone(timedelta(hours=9))
        instant = datetime(2025, 1, 1, 9, 0, 0, tzinfo=tokyo)

        # 00:00 UTC -> 02:00 in the API offset, even in winter
        assert format_api_time(instant) == "2025-01-01T02:00:00"


class FakeResponse:
    def __init__(self, status: int = 200, body: Any = None, invalid_json: bool = False) -> None:
        self.status_code = status
        self._body = body
        self._invalid = invalid_json
        self.content = b"[]"

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        if self._invalid:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._body


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response

    def close(self) -> None:
        pass


class TestKwollectClient:
    @pytest.mark.transport
    def test_fetch_uses_basic_auth_and_returns_json(self) -> None:
        session = FakeSession(FakeResponse(body=[{"device_id": "taurus-7"}]))
        client = KwollectClient("alice", "secret", timeout=5, session=session)  # type: ignore[arg-type]

        data = client.fetch("https://api.grid5000.fr/stable/sites/lyon/metrics")

        assert data == [{"device_id": "taurus-7"}]
        assert len(session.calls) == 1
        assert session.calls[0]["auth"] == ("alice", "secret")
        assert session.calls[0]["timeout"] == 5

    @pytest.mark.transport
    def test_connection_failure_is_transport_error(self) -> None:
        session = FakeSession(error=requests.ConnectionError("connection refused"))
        client = KwollectClient("alice", "secret", session=session)  # type: ignore[arg-type]

        with pytest.raises(TransportError) as exc:
            client.fetch("https://example.invalid/metrics")

        assert exc.value.url == "https://example.invalid/metrics"
        assert len(session.calls) == 1

    @pytest.mark.transport
    def test_timeout_is_transport_error(self) -> None:
        session = FakeSession(error=requests.Timeout("read timed out"))
        client = KwollectClient("alice", "secret", session=session)  # type: ignore[arg-type]

        with pytest.raises(TransportError):
            client.fetch("https://example.invalid/metrics")

    @pytest.mark.transport
    def test_http_error_status_is_transport_error(self) -> None:
        session = FakeSession(FakeResponse(status=401))
        client = KwollectClient("alice", "wrong", session=session)  # type: ignore[arg-type]

        with pytest.raises(TransportError):
            client.fetch("https://api.grid5000.fr/stable/sites/lyon/metrics")

    @pytest.mark.transport
    def test_unparseable_body_is_invalid_payload(self) -> None:
        session = FakeSession(FakeResponse(invalid_json=True))
        client = KwollectClient("alice", "secret", session=session)  # type: ignore[arg-type]

        with pytest.raises(InvalidPayload):
            client.fetch("https://api.grid5000.fr/stable/sites/lyon/metrics")

    @pytest.mark.transport
    def test_default_session_does_not_retry(self) -> None:
        client = KwollectClient("alice", "secret")
        try:
            adapter = client.session.get_adapter("https://api.grid5000.fr")
            assert adapter.max_retries.total == 0
        finally:
            client.close()
