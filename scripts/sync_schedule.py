#!/usr/bin/env python3
"""Apply a show time plan file to the planner service for one date.

Plan file (JSON):
  {"date": "2025-08-14",
   "slots": [{"slot_id": 1, "movie_id": 7, "movie_title": "Dune", "price": 150},
             {"slot_id": 2, "movie_id": null}]}
A slot with movie_id null is cleared (its planner record is deleted). Slots not listed keep
whatever the planner service already has.

Run from the project root:
  python scripts/sync_schedule.py plan.json --dry-run
  python scripts/sync_schedule.py plan.json
"""
import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from pathlib import Path

project_dir = Path(__file__).resolve().parent.parent
if str(project_dir) not in sys.path:
    sys.path.insert(0, str(project_dir))

from boxoffice.core.errors import PlannerError, SubmissionError
from boxoffice.services.showtime import ScheduleSession


def _load_plan(path: Path) -> tuple[date, list[dict]]:
    data = json.loads(path.read_text())
    return date.fromisoformat(data["date"]), list(data.get("slots") or [])


async def run(plan_path: Path, dry_run: bool) -> int:
    day, slots = _load_plan(plan_path)
    session = ScheduleSession()
    await session.open()
    status = await session.select_date(day)
    if not status.synced:
        print(f"Error: planner records for {day} could not be loaded: {status.error}", file=sys.stderr)
        return 1
    for entry in slots:
        slot_id = entry["slot_id"]
        if entry.get("movie_id") is None:
            session.clear(slot_id)
        else:
            session.assign(slot_id, entry["movie_id"], entry.get("movie_title"), entry.get("price"))
    if dry_run:
        plan = session.plan()
        for op in plan.creates + plan.updates + plan.deletes:
            print(f"{op.operation.value:7} slot={op.time_slot_id} time={op.display_time} "
                  f"record={op.planner_record_id} movie={op.movie_id} price={op.price}")
        print(f"{plan.operation_count} operation(s) for {day}")
        return 0
    result = await session.submit()
    print(result.message or result.status)
    return 0


def main():
    parser = argparse.ArgumentParser(description="Sync a date's show time plan to the planner service")
    parser.add_argument("plan", type=Path, help="JSON plan file")
    parser.add_argument("--dry-run", action="store_true", help="Print the writes without sending them")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    try:
        sys.exit(asyncio.run(run(args.plan, args.dry_run)))
    except SubmissionError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"  {e.diagnostics()}", file=sys.stderr)
        sys.exit(1)
    except (PlannerError, KeyError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
