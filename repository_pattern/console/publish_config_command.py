"""
publish:config

Writes the default REPOSITORY_* settings into the project's ``.env`` so they
can be edited in place.
"""

import logging
from argparse import Namespace
from pathlib import Path

from dotenv import dotenv_values, set_key
from rich.console import Console

from repository_pattern.common.config import PUBLISHABLE_ENV


logger = logging.getLogger(__name__)


class PublishConfigCommand:
    name = "publish:config"
    description = "Publish the repository-pattern settings to the .env file"

    def __init__(self, console: Console | None = None, base_path: str | Path | None = None) -> None:
        self.console = console or Console()
        self.base_path = Path(base_path) if base_path is not None else Path.cwd()

    @classmethod
    def configure_parser(cls, subparsers) -> None:
        parser = subparsers.add_parser(cls.name, help=cls.description, description=cls.description)
        parser.add_argument("--env-file", default=".env", help="Target file, relative to the working directory")
        parser.add_argument("--force", action="store_true", help="Overwrite keys that are already set")
        parser.set_defaults(command_class=cls)

    def run(self, args: Namespace) -> int:
        return self.handle(env_file=args.env_file, force=args.force)

    def handle(self, env_file: str = ".env", force: bool = False) -> int:
        path = self.base_path / env_file
        path.touch(exist_ok=True)
        existing = dotenv_values(path)

        written = []
        for key, value in PUBLISHABLE_ENV.items():
            if key in existing and not force:
                continue
            set_key(str(path), key, value, quote_mode="never")
            written.append(key)

        if written:
            logger.info(f"Published {len(written)} settings to {path}")
            self.console.print(f"[green]Published {len(written)} settings to {path}[/]")
        else:
            self.console.print(f"[yellow]{path} already has every setting. Use --force to overwrite.[/]")
        return 0
