"""
Plain-text terminal formatters for CLI output.

Every formatter returns a multi-line string for ``typer.echo()``.
"""

from __future__ import annotations

from typing import Optional, Sequence

from beautrip_planner.models.schedule import DateClassification, ScheduleEntry, TravelPeriod
from beautrip_planner.ranking.hospitals import HospitalSummary
from beautrip_planner.ranking.procedures import TreatmentRanking
from beautrip_planner.ranking.ranker import RankingGroup
from beautrip_planner.schedule.recommend import TravelRecommendation

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def format_ranking_table(groups: Sequence[RankingGroup], top_items: int = 3) -> str:
    """Ranked groups with their leading items."""
    if not groups:
        return "  No category has enough reviews to rank."

    lines: list[str] = []
    for rank, group in enumerate(groups, start=1):
        lines.append(
            f"{rank:>3}. {group.group_key}  "
            f"score={group.score:.3f}  avg={group.average_rating:.2f}  "
            f"reviews={group.total_reviews}  items={group.item_count}"
        )
        for item in group.items[:top_items]:
            hospital = f" @ {item.hospital_name}" if item.hospital_name else ""
            lines.append(
                f"       - {item.name}{hospital}  "
                f"({item.rating:.1f}, {item.review_count} reviews)"
            )
    return "\n".join(lines)


def format_hospital_table(hospitals: Sequence[HospitalSummary], limit: int = 20) -> str:
    if not hospitals:
        return "  No hospitals found."

    lines = [f"{'#':>3}  {'Hospital':<30} {'Avg':>5} {'Reviews':>8}  Categories"]
    for rank, h in enumerate(hospitals[:limit], start=1):
        lines.append(
            f"{rank:>3}  {h.hospital_name[:30]:<30} {h.average_rating:>5.1f} "
            f"{h.total_reviews:>8}  {', '.join(h.categories)}"
        )
    return "\n".join(lines)


def format_treatment_rankings(rankings: Sequence[TreatmentRanking], limit: int = 20) -> str:
    """Procedures by recommendation score, with price and best-rated hospitals."""
    if not rankings:
        return "  No procedures found."

    lines = [
        f"{'#':>3}  {'Procedure':<24} {'Score':>7} {'Avg':>5} {'Reviews':>8} "
        f"{'Avg price':>10}  Offers"
    ]
    for rank, r in enumerate(rankings[:limit], start=1):
        price = f"{r.average_price:>10,.0f}" if r.average_price > 0 else f"{'-':>10}"
        lines.append(
            f"{rank:>3}  {r.treatment_name[:24]:<24} {r.recommendation_score:>7.1f} "
            f"{r.average_rating:>5.2f} {r.total_reviews:>8} {price}  {r.offer_count}"
        )
        hospitals = [t.hospital_name for t in r.top_treatments if t.hospital_name]
        if hospitals:
            lines.append(f"       top: {', '.join(hospitals)}")
    return "\n".join(lines)


def format_travel_recommendations(
    recommendations: Sequence[TravelRecommendation],
    top_items: int = 3,
) -> str:
    if not recommendations:
        return "  No treatments match this trip."

    lines: list[str] = []
    for rec in recommendations:
        lines.append(
            f"[{rec.category_mid}] avg recovery {rec.average_recovery_days:.1f}d, "
            f"avg procedure {rec.average_procedure_minutes:.0f}min"
        )
        for item in rec.treatments[:top_items]:
            lines.append(f"    - {item.name} (recovery {item.recovery_days}d)")
    return "\n".join(lines)


def format_schedule_entries(
    entries:       Sequence[ScheduleEntry],
    travel_period: Optional[TravelPeriod],
    warnings:      Sequence[ScheduleEntry] = (),
) -> str:
    lines: list[str] = []
    if travel_period is None:
        lines.append("Travel period: not set")
    else:
        lines.append(f"Travel period: {travel_period.start} ~ {travel_period.end}")

    if not entries:
        lines.append("  No procedures planned.")
        return "\n".join(lines)

    warned = {e.entry_id for e in warnings}
    for entry in entries:
        flag = "  [WARN] recovery extends past travel end" if entry.entry_id in warned else ""
        label = entry.procedure_name or entry.procedure_id or "procedure"
        lines.append(
            f"  {entry.entry_id[:8]}  {entry.procedure_date}  {label}  "
            f"recovery {entry.recovery_days}d{flag}"
        )
    return "\n".join(lines)


def _cell_tag(c: DateClassification) -> str:
    if c.is_procedure_day:
        return "P"
    if c.is_recovery_outside_travel:
        return "!"
    if c.recovery_day_index is not None:
        return "R"
    if c.is_travel_day:
        return "T"
    return "."


def format_calendar(classifications: Sequence[DateClassification]) -> str:
    """Month grid: ``P`` procedure, ``R`` recovery, ``!`` recovery outside
    travel, ``T`` travel day, ``.`` free."""
    if not classifications:
        return ""

    lines = ["  ".join(f"{d:>5}" for d in _WEEKDAYS)]
    row: list[str] = ["     "] * classifications[0].day.weekday()
    for c in classifications:
        row.append(f"{c.day.day:>3}{_cell_tag(c):<2}")
        if len(row) == 7:
            lines.append("  ".join(row))
            row = []
    if row:
        lines.append("  ".join(row))
    lines.append("")
    lines.append("P=procedure  R=recovery  !=recovery outside travel  T=travel")
    return "\n".join(lines)
