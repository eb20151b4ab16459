"""Tests for parse_batch (lenient policy)."""

import pytest

from conftest import power_record
from kwollect_input.ingestion.core.errors import NotAnArray
from kwollect_input.ingestion.kwollect.batch import parse_batch


class TestParseBatch:
    @pytest.mark.codec
    @pytest.mark.parametrize(
        "raw",
        [{"items": [power_record()]}, power_record(), "[]", 42, None, True],
    )
    def test_non_array_top_level_fails(self, raw: object) -> None:
        with pytest.raises(NotAnArray):
            parse_batch(raw)

    @pytest.mark.codec
    def test_empty_array_gives_no_records(self) -> None:
        assert parse_batch([]) == []

    @pytest.mark.codec
    def test_all_valid_records_are_returned_in_order(self) -> None:
        raw = [power_record(device_id="taurus-7"), power_record(device_id="taurus-8")]

        records = parse_batch(raw)

        assert [r.device_id for r in records] == ["taurus-7", "taurus-8"]

    @pytest.mark.codec
    def test_malformed_records_are_skipped(self) -> None:
        missing_device = power_record()
        del missing_device["device_id"]
        raw = [
            power_record(device_id="taurus-7"),
            missing_device,
            "not an object",
            power_record(device_id="taurus-9", value=-1),
            power_record(device_id="taurus-8", value=12),
        ]

        records = parse_batch(raw)

        assert [r.device_id for r in records] == ["taurus-7", "taurus-8"]
        assert records[1].value == 12
