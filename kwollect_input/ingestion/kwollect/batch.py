from typing import Any, List

from kwollect_input.ingestion.core.errors import DecodeError, NotAnArray
from kwollect_input.ingestion.kwollect.codec import MeasureRecord, decode_record
from kwollect_input.utils.logger import logger


def parse_batch(raw: Any) -> List[MeasureRecord]:
    """
    Kwollect response -> list of MeasureRecord.

    Lenient: a record that fails to decode is logged and skipped, the others
    are still returned. A top-level value that is not a JSON array fails the
    whole batch with NotAnArray.
    """
    if not isinstance(raw, list):
        raise NotAnArray(type(raw).__name__ if raw is not None else "null")

    records: List[MeasureRecord] = []
    skipped = 0

    for index, item in enumerate(raw):
        try:
            records.append(decode_record(item))
        except DecodeError as e:
            skipped += 1
            logger.warning(f"Skipping Kwollect record #{index}: {e}")

    logger.info(f"Parsed Kwollect batch: {len(records)} decoded, {skipped} skipped")
    return records
