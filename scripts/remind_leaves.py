"""Send reminders for approved leaves starting tomorrow (or on --date YYYY-MM-DD).

Meant to run once a day from cron.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from datetime import timedelta
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.campus_leave.campus_leave.common.datetime_utils import parse_iso_date, today_local
from src.campus_leave.campus_leave.container import build_container
from src.campus_leave.campus_leave.core.logging_config import configure_logging


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--date", help="Leave start date to remind for (default: tomorrow)")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))

    day = parse_iso_date(args.date) if args.date else today_local() + timedelta(days=1)
    container = build_container(settings)
    sent = container.leave_notifier.remind_leaves_starting(day)
    print(f"OK: {sent} reminder(s) sent for leaves starting {day.isoformat()}")


if __name__ == "__main__":
    main()
