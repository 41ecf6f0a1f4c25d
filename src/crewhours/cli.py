import os
import sys
from pathlib import Path
import typer
from crewhours.config import settings
from crewhours.logging import logger, get_run_id

app = typer.Typer(no_args_is_help=True)


@app.callback()
def main():
    """
    Crew hours reconciliation CLI.
    """
    pass


@app.command(name="doctor")
def doctor():
    """
    Check configuration and data directory health.
    """
    logger.info("Running doctor check...")

    failures: list[str] = []
    passed = 0

    print("\n🩺 Crew Hours Doctor\n")

    # ── Check 1: Environment / Interpreter ──────────────────────────────────
    print("[Environment]")
    print(f"  Python: {sys.version.split()[0]}")
    print(f"  Prefix: {sys.prefix}")
    print(f"  Run ID: {get_run_id()}")
    passed += 1

    # ── Check 2: Thresholds ─────────────────────────────────────────────────
    print("\n[Matching]")
    print(f"  MATCH_MIN_CONFIDENCE:           {settings.MATCH_MIN_CONFIDENCE}")
    print(f"  EMPLOYEE_MATCH_MIN_CONFIDENCE:  {settings.EMPLOYEE_MATCH_MIN_CONFIDENCE}")
    print(f"  DUPLICATE_JOB_MIN_CONFIDENCE:   {settings.DUPLICATE_JOB_MIN_CONFIDENCE}")
    print(f"  MATCH_REVIEW_THRESHOLD:         {settings.MATCH_REVIEW_THRESHOLD}")
    print(f"  SPECIAL_SHIFT_HOURS:            {settings.SPECIAL_SHIFT_HOURS}")
    thresholds = [
        settings.MATCH_MIN_CONFIDENCE,
        settings.EMPLOYEE_MATCH_MIN_CONFIDENCE,
        settings.DUPLICATE_JOB_MIN_CONFIDENCE,
        settings.MATCH_REVIEW_THRESHOLD,
    ]
    if all(0 <= t <= 100 for t in thresholds):
        print("  Thresholds:                     ✅ Within 0-100")
        passed += 1
    else:
        print("  Thresholds:                     ❌ Out of range")
        failures.append("Match thresholds must be between 0 and 100")

    # ── Check 3: Alerts ─────────────────────────────────────────────────────
    print("\n[Alerts]")
    if settings.OVERRUN_ALERT_WEBHOOK_URL is not None:
        print("  OVERRUN_ALERT_WEBHOOK_URL:      ✅ Set")
    else:
        print("  OVERRUN_ALERT_WEBHOOK_URL:      ⚠️  Not set (overruns are only logged)")
    passed += 1

    # ── Check 4: Data directory / database ──────────────────────────────────
    print("\n[Database]")
    if settings.DATABASE_URL:
        print(f"  DATABASE_URL:                   ✅ {settings.DATABASE_URL.split('://')[0]}://…")
        passed += 1
    else:
        data_dir = Path(settings.data_dir)
        db_file = data_dir / "crewhours.db"
        if db_file.exists():
            if os.access(db_file, os.W_OK):
                print(f"  {db_file}          ✅ Exists and writable")
                passed += 1
            else:
                print(f"  {db_file}          ❌ Exists but NOT writable")
                failures.append(f"{db_file} is not writable: check file permissions")
        elif data_dir.exists() and os.access(data_dir, os.W_OK):
            print(f"  {db_file}          ✅ Does not exist yet; {data_dir}/ is writable")
            passed += 1
        else:
            print(f"  {data_dir}/                     ❌ Missing or not writable")
            failures.append(f"{data_dir.absolute()} is missing or not writable")

    # ── Summary ──────────────────────────────────────────────────────────────
    total = passed + len(failures)
    print(f"\n{'─' * 50}")
    if failures:
        print(f"Result: {passed}/{total} checks passed\n")
        for msg in failures:
            print(f"  ❌ {msg}")
        print()
        raise typer.Exit(code=1)
    else:
        print(f"Result: {passed}/{total} checks passed, all good ✅")
        print()


db_app = typer.Typer(help="Database management commands.")
app.add_typer(db_app, name="db")


@db_app.command("init")
def init():
    """Initialize the database tables."""
    from sqlalchemy.exc import SQLAlchemyError
    from crewhours.db import init_db
    try:
        init_db()
        logger.info("Database initialized successfully.")
        print("✅ Database initialized.")
    except SQLAlchemyError as e:
        logger.error(f"Failed to initialize database: {e}")
        print(f"❌ Failed: {e}")
        raise typer.Exit(code=1)


@app.command(name="parse")
def parse(path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True)):
    """Parse a time-clock export offline and print per-label totals."""
    from crewhours.domain.exceptions import EmptyExportError
    from crewhours.reconcile.export_parser import parse_export
    try:
        parsed = parse_export(path.read_bytes())
    except EmptyExportError as e:
        print(f"❌ {e.message}")
        raise typer.Exit(code=1)

    totals: dict[str, list] = {}
    for shift in parsed.shifts:
        entry = totals.setdefault(shift.job_label, [0, 0.0, 0])
        entry[0] += 1
        entry[1] += shift.total_hours
        entry[2] += int(shift.is_qc or shift.is_delivery_drop)

    print(f"Header at row {parsed.header_row}; {len(parsed.shifts)} shifts, {len(totals)} job labels\n")
    for label, (count, hours, special) in totals.items():
        note = f"  ({special} special)" if special else ""
        print(f"  {label:<40} {count:>4} shifts  {hours:>8.2f} h{note}")


if __name__ == "__main__":
    app()
