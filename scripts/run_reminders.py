#!/usr/bin/env python3
"""Run one birthday / anniversary reminder cycle from the shell.

Usage:
    python -m scripts.run_reminders              # as of today in REMINDER_TIMEZONE
    python -m scripts.run_reminders --as-of 2025-12-30
"""

import argparse
import datetime as dt
import sys

from app.core.exceptions import CycleAlreadyRunningError
from app.core.logger import init_logging
from app.services.reminders import build_scheduler


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--as-of", type=dt.date.fromisoformat, default=None, help="Reference date (YYYY-MM-DD)")
    args = parser.parse_args(argv)

    init_logging()
    try:
        report = build_scheduler().run_daily_cycle(as_of=args.as_of)
    except CycleAlreadyRunningError as exc:
        print(exc.message, file=sys.stderr)
        return 2

    print(f"Reminder cycle as of {report.as_of}")
    for tenant in report.tenants:
        line = (
            f"  salon {tenant.salon_id}: sent={tenant.sent} failed={tenant.failed} "
            f"skipped={tenant.skipped} already_sent={tenant.deduplicated}"
        )
        if tenant.error:
            line += f" ERROR: {tenant.error}"
        print(line)
    print(f"Total: sent={report.sent} failed={report.failed} failed_salons={report.tenants_failed}")
    return 1 if report.error or report.tenants_failed else 0


if __name__ == "__main__":
    sys.exit(main())
