"""Command-line front door for whid.

Parses CLI options, merges them into the layered settings, and launches
the dashboard for the chosen root directory.
"""

from __future__ import annotations

import argparse
from datetime import date
from pathlib import Path

from .config import CONFIG_PATH, ensure_user_config, load_settings
from .errors import WhidError
from .logs import configure_logging
from .runtime import run_dashboard
from .timeframe import PRESETS, DateRange


def _iso_date(value: str) -> date:
    """argparse type for ``YYYY-MM-DD`` values."""
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date (expected YYYY-MM-DD): {value!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="whid",
        description="Browse recent commits across git repositories and summarize them for standup.",
    )
    parser.add_argument(
        "timeframe",
        nargs="?",
        default=None,
        choices=[preset.keyword for preset in PRESETS],
        help="Initial timeframe preset (default from config, else 24).",
    )
    parser.add_argument("--root", default=None, help="Directory to scan for repositories. Defaults to cwd.")
    parser.add_argument("--lang", choices=["en", "de"], default=None, help="Language of the AI summary.")
    parser.add_argument("--prompt", default=None, metavar="PATH", help="Custom prompt template file.")
    parser.add_argument("--model", default=None, help="Gemini model name.")
    parser.add_argument("--from", dest="date_from", type=_iso_date, default=None, help="Start date YYYY-MM-DD.")
    parser.add_argument("--to", dest="date_to", type=_iso_date, default=None, help="End date YYYY-MM-DD.")
    parser.add_argument("--all-authors", action="store_true", help="Show commits from every author.")
    parser.add_argument("--detailed", action="store_true", help="Show commit bodies in the list.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--nopager", action="store_true", help="Print commits directly without the dashboard.")
    parser.add_argument("--log-level", default=None, help="Log level for the log file (default WARNING).")
    return parser


def resolve_date_range(date_from: date | None, date_to: date | None, today: date | None = None) -> DateRange | None:
    """Combine ``--from``/``--to``; raises ``ValueError`` for invalid combinations."""
    if date_from is None and date_to is None:
        return None
    if date_from is None:
        raise ValueError("--to requires --from")
    end = date_to if date_to is not None else (today or date.today())
    if date_from > end:
        raise ValueError("--from must not be after --to")
    return DateRange(date_from, end)


def main(argv: list[str] | None = None, default_root: Path | None = None) -> None:
    """Parse CLI arguments and launch the dashboard."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    try:
        date_range = resolve_date_range(args.date_from, args.date_to)
    except ValueError as exc:
        parser.error(str(exc))

    ensure_user_config()
    settings = load_settings(
        {
            "timeframe": args.timeframe,
            "lang": args.lang,
            "custom_prompt_path": args.prompt,
            "gemini_model": args.model,
            "filter_by_user": False if args.all_authors else None,
            "detailed_commit_view": True if args.detailed else None,
        }
    )

    if default_root is None:
        default_root = Path.cwd()
    root = Path(args.root).expanduser() if args.root else default_root
    if not root.is_dir():
        raise SystemExit(f"Path not found: {root}")

    try:
        run_dashboard(
            root,
            settings,
            date_range=date_range,
            nopager=args.nopager,
            no_color=args.no_color,
            config_path=CONFIG_PATH,
        )
    except (WhidError, OSError) as exc:
        raise SystemExit(f"whid: {exc}") from exc


if __name__ == "__main__":
    main()
