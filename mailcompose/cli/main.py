"""Command-line frontend for the Compose email validator."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from mailcompose.core.validate import get_summary, validate_html

load_dotenv(Path(__file__).resolve().parents[2] / ".env")


def _json_dump(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _read_html(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _cmd_validate(args: argparse.Namespace) -> int:
    result = validate_html(_read_html(args.input))
    payload = {**result.to_dict(), "summary": get_summary(result)}
    if args.report:
        Path(args.report).write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    if args.summary:
        print(payload["summary"])
    else:
        _json_dump(payload)
    return 0 if result.is_valid else 1


def _cmd_summary(args: argparse.Namespace) -> int:
    print(get_summary(validate_html(_read_html(args.input))))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mailcompose", description="Compose email HTML tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_cmd = subparsers.add_parser("validate", help="Check email HTML for email-client compatibility")
    validate_cmd.add_argument("input", help="HTML file path, or - for stdin")
    validate_cmd.add_argument("--report", default="", help="Also write the JSON result to this path")
    validate_cmd.add_argument("--summary", action="store_true", help="Print only the one-line summary")
    validate_cmd.set_defaults(func=_cmd_validate)

    summary_cmd = subparsers.add_parser("summary", help="Print the compatibility summary line")
    summary_cmd.add_argument("input", help="HTML file path, or - for stdin")
    summary_cmd.set_defaults(func=_cmd_summary)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args) or 0)
    except (OSError, UnicodeDecodeError) as exc:
        parser.exit(status=2, message=f"error: {exc}\n")


if __name__ == "__main__":
    raise SystemExit(main())
