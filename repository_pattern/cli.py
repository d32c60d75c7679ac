#!/usr/bin/env python3
"""repository-pattern command line."""

import argparse
import logging
import sys

from repository_pattern.console import COMMANDS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="repository-pattern", description="Repository / Service scaffolding")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for command_class in COMMANDS:
        command_class.configure_parser(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    return args.command_class().run(args)


if __name__ == "__main__":
    sys.exit(main())
