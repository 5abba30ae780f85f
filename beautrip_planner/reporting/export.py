"""
Ranking report writers: CSV and JSON files for ranked category groups.

Pure I/O over in-memory ``RankingGroup`` lists; no DB access.

Output files
------------
  data/outputs/rankings/
    rankings_{label}_{date}.csv    -- one row per (group, item)
    rankings_{label}_{date}.json   -- same data, nested by group
"""

from __future__ import annotations

import csv
import json
import logging
import re
from datetime import date
from pathlib import Path
from typing import Any, Sequence

from beautrip_planner.ranking.ranker import RankingGroup

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "v1"

_UNSAFE_LABEL_CHARS = re.compile(r"[^\w.-]+")

CSV_FIELDS = [
    "group_rank", "group_key", "group_score", "group_average_rating",
    "group_total_reviews", "item_rank", "treatment_id", "treatment_name",
    "hospital_name", "rating", "review_count",
]


def report_path(output_dir: Path, label: str, run_date: date, suffix: str) -> Path:
    """``rankings_{label}_{date}{suffix}`` with ``label`` reduced to one path segment.

    Category names such as ``"보톡스/필러"`` become ``"보톡스_필러"``.
    """
    safe = _UNSAFE_LABEL_CHARS.sub("_", label).strip("._") or "categories"
    return output_dir / f"rankings_{safe}_{run_date}{suffix}"


def ranking_rows(groups: Sequence[RankingGroup]) -> list[dict[str, Any]]:
    """Flatten ranked groups into one dict per (group, item)."""
    rows: list[dict[str, Any]] = []
    for group_rank, group in enumerate(groups, start=1):
        for item_rank, item in enumerate(group.items, start=1):
            rows.append(
                {
                    "group_rank":           group_rank,
                    "group_key":            group.group_key,
                    "group_score":          round(group.score, 4),
                    "group_average_rating": round(group.average_rating, 2),
                    "group_total_reviews":  group.total_reviews,
                    "item_rank":            item_rank,
                    "treatment_id":         item.id,
                    "treatment_name":       item.name,
                    "hospital_name":        item.hospital_name or "",
                    "rating":               item.rating,
                    "review_count":         item.review_count,
                }
            )
    return rows


def write_rankings_csv(
    groups:     Sequence[RankingGroup],
    output_dir: Path,
    label:      str = "categories",
    run_date:   date | None = None,
) -> Path:
    """Write ranked groups to a CSV file and return its path."""
    if run_date is None:
        run_date = date.today()

    output_dir.mkdir(parents=True, exist_ok=True)
    csv_path = report_path(output_dir, label, run_date, ".csv")

    rows = ranking_rows(groups)
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        writer.writerows(rows)

    logger.info("Ranking CSV written: %s (%d rows)", csv_path, len(rows))
    return csv_path


def write_rankings_json(
    groups:     Sequence[RankingGroup],
    output_dir: Path,
    label:      str = "categories",
    run_date:   date | None = None,
) -> Path:
    """Write ranked groups to a structured JSON file and return its path."""
    if run_date is None:
        run_date = date.today()

    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = report_path(output_dir, label, run_date, ".json")

    payload: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "label":          label,
        "generated_at":   run_date.isoformat(),
        "groups": [
            {
                "rank":           rank,
                "group_key":      g.group_key,
                "score":          round(g.score, 4),
                "average_rating": round(g.average_rating, 2),
                "total_reviews":  g.total_reviews,
                "components":     g.components.as_dict() if g.components else None,
                "items": [
                    item.model_dump(mode="json", exclude_none=True) for item in g.items
                ],
            }
            for rank, g in enumerate(groups, start=1)
        ],
    }

    with json_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)

    logger.info("Ranking JSON written: %s (%d groups)", json_path, len(groups))
    return json_path
