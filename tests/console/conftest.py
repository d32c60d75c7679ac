import io

import pytest
from rich.console import Console

from repository_pattern.console import CreatePatternCommand


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def make_command(tmp_path, output):
    """Build a CreatePatternCommand rooted at tmp_path with the module-cache refresh off."""

    def _make(**config) -> CreatePatternCommand:
        settings = {"dump_auto_load": False, "ask_dump_auto_load": False, "binding_mode": "provider"}
        settings.update(config)
        return CreatePatternCommand(config=settings, console=Console(file=output, width=400), base_path=tmp_path)

    return _make
