"""
CLI wrapper for compute_birth_chart().

Usage:
    python -m saju.run --name NAME --birth-date YYYY-MM-DD --birth-time HH:MM \
        --gender GENDER [--wolwun-from YEAR --wolwun-to YEAR] [--today YYYY-MM-DD] \
        [--no-narrative] [--log-level LEVEL]
"""

import argparse
import json
import logging
import sys
from datetime import datetime

from saju.astro_calendar import OracleError
from saju.chart import compute_birth_chart


def main(argv=None):
    parser = argparse.ArgumentParser(description="Compute a Saju birth chart with luck cycles.")
    parser.add_argument("--name", default="")
    parser.add_argument("--birth-date", required=True, dest="birth_date")
    parser.add_argument("--birth-time", required=True, dest="birth_time")
    parser.add_argument("--gender", required=True, choices=["male", "female"])
    parser.add_argument("--wolwun-from", dest="wolwun_from", type=int, default=None,
                        help="first year of the monthly cycle table")
    parser.add_argument("--wolwun-to", dest="wolwun_to", type=int, default=None,
                        help="last year of the monthly cycle table")
    parser.add_argument("--today", default=None,
                        help="reference date YYYY-MM-DD (default: system date)")
    parser.add_argument("--no-narrative", dest="narrative", action="store_false")
    parser.add_argument("--log-level", dest="log_level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    today = datetime.strptime(args.today, "%Y-%m-%d").date() if args.today else None
    month_window = None
    if args.wolwun_from is not None or args.wolwun_to is not None:
        first = args.wolwun_from if args.wolwun_from is not None else args.wolwun_to
        last = args.wolwun_to if args.wolwun_to is not None else args.wolwun_from
        month_window = (first, last)

    try:
        chart = compute_birth_chart(
            name=args.name,
            birth_date=args.birth_date,
            birth_time=args.birth_time,
            gender=args.gender,
            today=today,
            month_window=month_window,
            with_narrative=args.narrative,
        )
    except (ValueError, OracleError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(chart.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
