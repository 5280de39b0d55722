#!/usr/bin/env python3
"""
Quick checks so the backend can start. Run from the project root:
  python scripts/check_backend.py
"""
import asyncio
import os
import sys
from pathlib import Path

project_dir = Path(__file__).resolve().parent.parent
os.chdir(project_dir)
if str(project_dir) not in sys.path:
    sys.path.insert(0, str(project_dir))


def main():
    errors = []

    # 1) .env
    env_file = project_dir / ".env"
    if not env_file.exists():
        print("WARN .env missing; using defaults (PLANNER_API_BASE_URL etc.)")
    else:
        print("OK  .env exists")

    # 2) App import (catches missing deps, bad imports)
    try:
        from boxoffice.main import app  # noqa: F401
        print("OK  App import (boxoffice.main)")
    except Exception as e:
        errors.append(f"App import: {e}")
        print("FAIL App import:", e)
        return 1

    # 3) Planner service reachable and serving the slot catalog
    try:
        from boxoffice.services.planner import PlannerClient

        client = PlannerClient()
        slots = asyncio.run(client.list_show_times())
        print(f"OK  Planner service ({client.config.base_url}): {len(slots)} show time slots")
    except Exception as e:
        errors.append(f"Planner service: {e}")
        print("FAIL Planner service:", e)

    if errors:
        print("\nFix the above, then run:")
        print("  uvicorn boxoffice.main:app --reload --host 0.0.0.0 --port 8000")
        return 1
    print("\nAll checks passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
