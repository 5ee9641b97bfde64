from __future__ import annotations

import argparse

from sopkalender.generator.build_calendars import main as build_main
from sopkalender.generator.check import main as check_main
from sopkalender.generator.readme_links import main as readme_main

COMMANDS = {
    "build": build_main,
    "update-readme": readme_main,
    "check": check_main,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Waste collection calendar generator")
    parser.add_argument("command", choices=sorted(COMMANDS), help="Command to run")
    args, rest = parser.parse_known_args(argv)
    return COMMANDS[args.command](rest)


if __name__ == "__main__":
    raise SystemExit(main())
