from __future__ import annotations

import argparse
import logging
import sys

import httpx

from .live import load_live_bonus, load_live_team
from .report_console import print_bonus_report, print_team_report
from .report_html import generate_html


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="FPL Live - provisional bonus points and automatic substitutions"
    )
    parser.add_argument(
        "--gameweek",
        type=int,
        default=None,
        help="Gameweek to evaluate (default: current)",
    )
    parser.add_argument(
        "--user",
        type=int,
        default=None,
        metavar="ENTRY_ID",
        help="Also apply auto-subs to this FPL entry's team",
    )
    parser.add_argument(
        "--html",
        type=str,
        default=None,
        metavar="FILE",
        help="Generate HTML bonus report to FILE",
    )
    parser.add_argument(
        "--no-console",
        action="store_true",
        help="Suppress console output",
    )
    parser.add_argument(
        "--web",
        action="store_true",
        help="Launch the web interface instead of CLI",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=5000,
        help="Port for the web server (default: 5000)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.web:
        from .web import app

        print(f"Starting FPL Live web interface on http://localhost:{args.port}")
        app.run(debug=args.verbose, port=args.port)
        return

    print("Fetching live FPL data...")
    try:
        bonus_report = load_live_bonus(args.gameweek)
        team_report = load_live_team(args.user, args.gameweek) if args.user else None
    except (httpx.HTTPError, ValueError) as e:
        print(f"Error fetching data: {e}", file=sys.stderr)
        sys.exit(1)

    if not args.no_console:
        print_bonus_report(bonus_report)
        if team_report is not None:
            print_team_report(team_report)

    if args.html:
        generate_html(bonus_report, output_path=args.html)
        print(f"HTML report saved to {args.html}")


if __name__ == "__main__":
    main()
