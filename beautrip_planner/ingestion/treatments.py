"""
Treatment catalogue ingestion: raw JSON (file or HTTP) -> ``TreatmentRecord``.

Feed format
-----------
A JSON array of objects using the catalogue's column names:

  treatment_id, treatment_name, hospital_name, category_large, category_mid,
  category_small, rating, review_count, selling_price, dis_rate,
  treatment_hashtags, downtime, surgery_time

The feed is produced by a pandas export and may contain bare ``NaN`` tokens,
which are not valid JSON; ``clean_payload_text`` rewrites them to ``null``
before parsing.

Validation policy
-----------------
Rows without a usable name (or id) carry nothing to rank and are skipped with
a warning.  Any other row that fails model validation is collected; if there
are failures a single ``ValueError`` lists the first 10.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from beautrip_planner.models.treatment import (
    TreatmentRecord,
    normalize_category_text,
    parse_leading_int,
)

logger = logging.getLogger(__name__)

_NAN_VALUE = re.compile(r":\s*NaN\s*([,}\]])")

# Feed column -> TreatmentRecord field.
FIELD_ALIASES: dict[str, str] = {
    "treatment_id":       "id",
    "treatment_name":     "name",
    "hospital_name":      "hospital_name",
    "category_large":     "category_large",
    "category_mid":       "category_mid",
    "category_small":     "category_small",
    "rating":             "rating",
    "review_count":       "review_count",
    "selling_price":      "selling_price",
    "dis_rate":           "discount_rate",
    "treatment_hashtags": "hashtags",
    "downtime":           "recovery_days",
    "surgery_time":       "procedure_minutes",
}


def parse_recovery_period(value: Any) -> int:
    """Recovery days from ``downtime``: ``3`` / ``"3일"`` / ``"1-2일"`` -> 3 / 3 / 1."""
    return parse_leading_int(value)


def parse_procedure_time(value: Any) -> int:
    """Procedure minutes from ``surgery_time``: ``30`` / ``"30분"`` -> 30."""
    return parse_leading_int(value)


def clean_payload_text(text: str) -> str:
    """Replace bare ``NaN`` JSON values with ``null``."""
    return _NAN_VALUE.sub(r": null\1", text)


def _map_row(row: dict[str, Any]) -> dict[str, Any]:
    mapped: dict[str, Any] = {}
    for key, value in row.items():
        target = FIELD_ALIASES.get(key, key)
        if target in TreatmentRecord.model_fields and target not in mapped:
            mapped[target] = value
    return mapped


def parse_treatment_rows(rows: list[Any]) -> list[TreatmentRecord]:
    """Validate already-decoded feed rows.

    Raises:
        ValueError: If any non-skipped row fails validation.
    """
    records: list[TreatmentRecord] = []
    errors: list[str] = []
    skipped = 0

    for idx, row in enumerate(rows):
        if not isinstance(row, dict):
            errors.append(f"row {idx}: expected an object, got {type(row).__name__}")
            continue
        mapped = _map_row(row)
        if normalize_category_text(mapped.get("name")) is None or mapped.get("id") is None:
            skipped += 1
            continue
        try:
            records.append(TreatmentRecord(**mapped))
        except ValidationError as exc:
            errors.append(f"row {idx} (id={mapped.get('id')}): {exc.errors()[0]['msg']}")

    if skipped:
        logger.warning("Skipped %d treatment rows without a name or id.", skipped)

    if errors:
        preview = "\n  ".join(errors[:10])
        raise ValueError(
            f"{len(errors)} treatment row(s) failed validation:\n  {preview}"
        )

    logger.info("Parsed %d treatment records.", len(records))
    return records


def parse_treatment_payload(text: str) -> list[TreatmentRecord]:
    """Parse a raw feed payload into validated records.

    Raises:
        ValueError: If the payload is not a JSON array, or rows fail validation.
    """
    try:
        data = json.loads(clean_payload_text(text))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Treatment payload is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise ValueError(
            f"Treatment payload must be a JSON array, got {type(data).__name__}."
        )
    return parse_treatment_rows(data)


def load_treatments(path: Path) -> list[TreatmentRecord]:
    """Load and validate a treatment feed file.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the payload is malformed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Treatment file not found: {path}")
    return parse_treatment_payload(path.read_text(encoding="utf-8"))


class TreatmentApiClient:
    """HTTP client for the remote treatment catalogue.

    Usage::

        client = TreatmentApiClient(config.api.treatments_url)
        records = client.fetch_treatments()

    Attributes:
        url: Catalogue endpoint returning the JSON array.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    def fetch_treatments(self) -> list[TreatmentRecord]:
        """Download and parse the catalogue.

        Raises:
            httpx.HTTPStatusError: On non-2xx response.
            httpx.HTTPError: On transport failure.
            ValueError: If the payload is malformed.
        """
        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            resp = client.get(self.url)
            resp.raise_for_status()
        logger.info("Fetched treatment catalogue from %s (%d bytes)", self.url, len(resp.content))
        return parse_treatment_payload(resp.text)
