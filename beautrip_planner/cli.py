"""
Beautrip planner: CLI entry point.

Every command runs the same steps:
  1. ``load_config()`` (exit 1 with an ``[ERROR]`` line if it fails).
  2. Configure logging.
  3. Validate inputs.
  4. Execute the action (ranking, schedule update, calendar, ...).
  5. Report the result to stdout.

Install and run::

    pip install -e .
    beautrip --help
    beautrip validate-config
    beautrip init-db
    beautrip rank --file data/raw/treatments.json --output-dir data/outputs/rankings
    beautrip set-travel --start 2024-06-10 --end 2024-06-15
    beautrip schedule-add --date 2024-06-14 --recovery-days 5 --name "코 필러"
    beautrip calendar --month 2024-06
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Optional

import httpx
import typer
from pydantic import ValidationError

app = typer.Typer(
    name="beautrip",
    help="Beautrip planner: treatment rankings and travel/recovery scheduling.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """``load_config()``, or exit 1 with the reason on stderr."""
    from beautrip_planner.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except (ValidationError, ValueError) as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config) -> None:
    from beautrip_planner.utils.logging import configure_logging
    configure_logging(config.logging)


def _fail(message: str) -> None:
    typer.echo(f"[ERROR] {message}", err=True)
    raise typer.Exit(code=1)


def _load_records(config, treatments_file: Optional[str], remote: bool):
    """Load treatment records from a file or the remote catalogue."""
    from beautrip_planner.ingestion.treatments import TreatmentApiClient, load_treatments

    try:
        if remote:
            client = TreatmentApiClient(
                config.api.treatments_url, timeout=config.api.timeout_seconds
            )
            return client.fetch_treatments()
        return load_treatments(Path(treatments_file or config.data.treatments_file))
    except FileNotFoundError as exc:
        _fail(str(exc))
    except ValueError as exc:
        _fail(f"Invalid treatment data: {exc}")
    except httpx.HTTPError as exc:
        _fail(f"Catalogue request failed: {exc}")


def _parse_day(value: str, option: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        typer.echo(f"[ERROR] {option} must be YYYY-MM-DD, got '{value}'.", err=True)
        raise typer.Exit(code=1)


def _open_schedule(config, user: Optional[str]):
    """Return (connection context manager, user scope)."""
    from beautrip_planner.db.connection import get_connection

    ctx = get_connection(
        config.database.db_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    )
    return ctx, user or config.schedule.default_user


def _schedule_repo(conn, scope: str):
    from beautrip_planner.db.repositories.schedule_repo import ScheduleRepository
    from beautrip_planner.db.schema import apply_schema

    apply_schema(conn)
    return ScheduleRepository(conn, scope)


_FILE_OPTION = typer.Option(
    None, "--file", "-f", help="Treatment JSON file (default: config data.treatments_file)."
)
_REMOTE_OPTION = typer.Option(False, "--remote", help="Fetch the catalogue over HTTP.")
_CONFIG_OPTION = typer.Option(None, "--config", help="Path to TOML config file.")
_USER_OPTION = typer.Option(None, "--user", help="User scope (default: config schedule.default_user).")


# ── Config / DB ───────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = _CONFIG_OPTION,
    show_full: bool = typer.Option(False, "--full", help="Print the full config as JSON."),
) -> None:
    """Validate the configuration file and print parsed values."""
    config = _load_config_or_exit(config_path)

    typer.echo("Planner settings:")
    typer.echo("")
    typer.echo(f"  User store:       {config.database.db_path}")
    typer.echo(f"  Treatments file:  {config.data.treatments_file}")
    typer.echo(f"  Group level:      {config.ranking.group_level}")
    typer.echo(f"  Prior weight:     {config.ranking.prior_weight}")
    typer.echo(f"  Default user:     {config.schedule.default_user}")
    typer.echo(f"  Log level:        {config.logging.level}")

    if show_full:
        typer.echo("")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str, ensure_ascii=False))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("init-db")
def init_db(config_path: Optional[str] = _CONFIG_OPTION) -> None:
    """Create the user-store database. Safe to run multiple times."""
    from beautrip_planner.db.connection import get_connection
    from beautrip_planner.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    typer.echo(f"User store: {config.database.db_path}")
    with get_connection(
        config.database.db_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    ) as conn:
        apply_schema(conn)

    typer.echo(f"  {len(ALL_TABLE_NAMES)} table(s) in place.")
    typer.echo("[OK] User store ready.")


# ── Rankings ──────────────────────────────────────────────────────────────────

@app.command("rank")
def rank(
    treatments_file: Optional[str] = _FILE_OPTION,
    remote: bool = _REMOTE_OPTION,
    level: Optional[str] = typer.Option(
        None, "--level", help="Category level to group on: large, mid or small."
    ),
    category: Optional[str] = typer.Option(
        None, "--category", help="Only rank records in this large/mid category."
    ),
    kbeauty: bool = typer.Option(False, "--kbeauty", help="Only K-beauty keyword treatments."),
    top_items: int = typer.Option(3, "--top-items", help="Items shown per group."),
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", help="Write CSV + JSON reports to this directory."
    ),
    save: bool = typer.Option(
        False, "--save", help="Write CSV + JSON reports to config data.output_dir."
    ),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Rank treatment categories by review-adjusted quality."""
    from beautrip_planner.ranking.filters import filter_by_category, filter_by_keywords
    from beautrip_planner.ranking.ranker import rank_categories
    from beautrip_planner.reporting.export import write_rankings_csv, write_rankings_json
    from beautrip_planner.reporting.formatters import format_ranking_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    records = _load_records(config, treatments_file, remote)
    records = filter_by_category(records, category)
    if kbeauty:
        records = filter_by_keywords(records)

    try:
        groups = rank_categories(
            records,
            level=level or config.ranking.group_level,
            weights=config.ranking.to_weights(),
        )
    except ValueError as exc:
        _fail(str(exc))

    typer.echo(f"Ranked {len(groups)} categories from {len(records)} treatments.")
    typer.echo(format_ranking_table(groups, top_items=top_items))

    if output_dir or save:
        out = Path(output_dir or config.data.output_dir)
        label = "kbeauty" if kbeauty else (category or "categories")
        try:
            csv_path = write_rankings_csv(groups, out, label=label)
            json_path = write_rankings_json(groups, out, label=label)
        except OSError as exc:
            _fail(f"Could not write ranking reports to {out}: {exc}")
        typer.echo(f"  CSV:  {csv_path}")
        typer.echo(f"  JSON: {json_path}")


@app.command("hospitals")
def hospitals(
    treatments_file: Optional[str] = _FILE_OPTION,
    remote: bool = _REMOTE_OPTION,
    limit: int = typer.Option(20, "--limit", help="Hospitals to show."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List hospitals by average treatment rating."""
    from beautrip_planner.ranking.hospitals import summarize_hospitals
    from beautrip_planner.reporting.formatters import format_hospital_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    summaries = summarize_hospitals(_load_records(config, treatments_file, remote))
    typer.echo(format_hospital_table(summaries, limit=limit))


@app.command("procedures")
def procedures(
    treatments_file: Optional[str] = _FILE_OPTION,
    remote: bool = _REMOTE_OPTION,
    category: Optional[str] = typer.Option(
        None, "--category", help="Only procedures in this large/mid category."
    ),
    kbeauty: bool = typer.Option(False, "--kbeauty", help="Only K-beauty keyword treatments."),
    limit: int = typer.Option(20, "--limit", help="Procedures to show."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Rank procedures by name across hospitals (rating, reviews, price)."""
    from beautrip_planner.ranking.filters import filter_by_category, filter_by_keywords
    from beautrip_planner.ranking.procedures import rank_treatments
    from beautrip_planner.reporting.formatters import format_treatment_rankings

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    records = filter_by_category(_load_records(config, treatments_file, remote), category)
    if kbeauty:
        records = filter_by_keywords(records)

    rankings = rank_treatments(records)
    typer.echo(f"Ranked {len(rankings)} procedures from {len(records)} treatments.")
    typer.echo(format_treatment_rankings(rankings, limit=limit))


@app.command("recommend")
def recommend(
    treatments_file: Optional[str] = _FILE_OPTION,
    remote: bool = _REMOTE_OPTION,
    category: Optional[str] = typer.Option(
        None,
        "--category",
        help="Planner category (e.g. 보톡스/필러, 체형/지방, 전체, 기타) or a keyword.",
    ),
    user: Optional[str] = _USER_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Recommend treatments whose recovery fits the saved travel period."""
    from beautrip_planner.reporting.formatters import format_travel_recommendations
    from beautrip_planner.schedule.recommend import recommend_for_travel

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    ctx, scope = _open_schedule(config, user)
    with ctx as conn:
        period = _schedule_repo(conn, scope).get_travel_period()
    if period is None:
        _fail("No travel period set. Run 'beautrip set-travel' first.")

    records = _load_records(config, treatments_file, remote)
    recs = recommend_for_travel(
        records,
        period,
        weights=config.ranking.to_weights(),
        max_per_group=config.schedule.max_recommendations_per_group,
        category_large=category,
    )
    typer.echo(f"Trip: {period.start} ~ {period.end} ({period.day_count} days)")
    typer.echo(format_travel_recommendations(recs))


# ── Travel period ─────────────────────────────────────────────────────────────

@app.command("set-travel")
def set_travel(
    start: str = typer.Option(..., "--start", help="First travel day (YYYY-MM-DD)."),
    end: str = typer.Option(..., "--end", help="Last travel day (YYYY-MM-DD)."),
    user: Optional[str] = _USER_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Save the travel period."""
    from beautrip_planner.models.schedule import TravelPeriod
    from beautrip_planner.schedule.model import entries_outside_travel

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        period = TravelPeriod(start=_parse_day(start, "--start"), end=_parse_day(end, "--end"))
    except ValidationError as exc:
        _fail(f"Invalid travel period: {exc.errors()[0]['msg']}")

    ctx, scope = _open_schedule(config, user)
    with ctx as conn:
        repo = _schedule_repo(conn, scope)
        repo.set_travel_period(period)
        late = entries_outside_travel(repo.list_entries(), period)

    typer.echo(f"[OK] Travel period set: {period.start} ~ {period.end}")
    for entry in late:
        typer.echo(
            f"  [WARN] Recovery for {entry.procedure_name or entry.entry_id[:8]} "
            f"continues past {period.end}."
        )


@app.command("show-travel")
def show_travel(
    user: Optional[str] = _USER_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Print the saved travel period."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    ctx, scope = _open_schedule(config, user)
    with ctx as conn:
        period = _schedule_repo(conn, scope).get_travel_period()

    if period is None:
        typer.echo("Travel period: not set")
    else:
        typer.echo(f"Travel period: {period.start} ~ {period.end} ({period.day_count} days)")


@app.command("clear-travel")
def clear_travel(
    user: Optional[str] = _USER_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Remove the saved travel period."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    ctx, scope = _open_schedule(config, user)
    with ctx as conn:
        removed = _schedule_repo(conn, scope).clear_travel_period()

    typer.echo("[OK] Travel period cleared." if removed else "Travel period was not set.")


# ── Schedule entries ──────────────────────────────────────────────────────────

@app.command("schedule-add")
def schedule_add(
    procedure_date: str = typer.Option(..., "--date", help="Procedure day (YYYY-MM-DD)."),
    recovery_days: int = typer.Option(0, "--recovery-days", help="Days of recovery after the procedure."),
    name: Optional[str] = typer.Option(None, "--name", help="Procedure name."),
    procedure_id: Optional[str] = typer.Option(None, "--procedure-id", help="Catalogue treatment id."),
    user: Optional[str] = _USER_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Add a procedure to the schedule and warn if recovery outlasts the trip."""
    from beautrip_planner.models.schedule import ScheduleEntry
    from beautrip_planner.schedule.model import is_recovery_period_outside_travel

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        entry = ScheduleEntry(
            procedure_id=procedure_id,
            procedure_name=name,
            procedure_date=_parse_day(procedure_date, "--date"),
            recovery_days=recovery_days,
        )
    except ValidationError as exc:
        _fail(f"Invalid schedule entry: {exc.errors()[0]['msg']}")

    ctx, scope = _open_schedule(config, user)
    with ctx as conn:
        repo = _schedule_repo(conn, scope)
        repo.add_entry(entry)
        period = repo.get_travel_period()

    typer.echo(f"[OK] Added {entry.entry_id[:8]} on {entry.procedure_date}.")
    if is_recovery_period_outside_travel(entry, period):
        typer.echo(f"  [WARN] Recovery continues past travel end ({period.end}).")


@app.command("schedule-list")
def schedule_list(
    user: Optional[str] = _USER_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List planned procedures."""
    from beautrip_planner.reporting.formatters import format_schedule_entries
    from beautrip_planner.schedule.model import entries_outside_travel

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    ctx, scope = _open_schedule(config, user)
    with ctx as conn:
        repo = _schedule_repo(conn, scope)
        entries = repo.list_entries()
        period = repo.get_travel_period()

    typer.echo(
        format_schedule_entries(entries, period, entries_outside_travel(entries, period))
    )


@app.command("schedule-remove")
def schedule_remove(
    entry_id: str = typer.Argument(..., help="Entry id (a unique prefix is enough)."),
    user: Optional[str] = _USER_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Remove a planned procedure."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    ctx, scope = _open_schedule(config, user)
    with ctx as conn:
        repo = _schedule_repo(conn, scope)
        matches = [e for e in repo.list_entries() if e.entry_id.startswith(entry_id)]
        if len(matches) != 1:
            _fail(f"Entry id '{entry_id}' matched {len(matches)} entries.")
        repo.remove_entry(matches[0].entry_id)

    typer.echo(f"[OK] Removed {matches[0].entry_id[:8]}.")


@app.command("calendar")
def calendar_view(
    month: Optional[str] = typer.Option(
        None, "--month", help="Month to show (YYYY-MM). Defaults to the travel start month."
    ),
    user: Optional[str] = _USER_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Show a month calendar with procedure, recovery and travel days."""
    from beautrip_planner.reporting.formatters import format_calendar
    from beautrip_planner.schedule.model import month_calendar

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    ctx, scope = _open_schedule(config, user)
    with ctx as conn:
        repo = _schedule_repo(conn, scope)
        entries = repo.list_entries()
        period = repo.get_travel_period()

    if month:
        try:
            year, mon = (int(part) for part in month.split("-", 1))
            date(year, mon, 1)
        except ValueError:
            _fail(f"--month must be YYYY-MM, got '{month}'.")
    else:
        anchor = period.start if period else date.today()
        year, mon = anchor.year, anchor.month

    days = month_calendar(year, mon, entries, period)
    typer.echo(f"{year}-{mon:02d}")
    typer.echo(format_calendar(days))

    outside = [d for d in days if d.is_recovery_outside_travel]
    if outside:
        typer.echo(
            f"[WARN] {len(outside)} recovery day(s) fall outside the travel period "
            f"(first: {outside[0].day})."
        )


@app.command("favorite")
def favorite(
    treatment_id: str = typer.Argument(..., help="Catalogue treatment id to toggle."),
    user: Optional[str] = _USER_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Toggle a treatment in the favorites list."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    ctx, scope = _open_schedule(config, user)
    with ctx as conn:
        now_favorite = _schedule_repo(conn, scope).toggle_favorite(treatment_id)

    typer.echo(
        f"[OK] {treatment_id} {'added to' if now_favorite else 'removed from'} favorites."
    )


if __name__ == "__main__":
    app()
