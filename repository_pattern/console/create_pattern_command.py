"""
make:repository

Generates, for a given name:
- Repository interface and SQLAlchemy implementation
- Service interface and implementation
- Bindings in the repository / service provider modules (provider mode)
"""

import keyword
import logging
import re
import shlex
import subprocess
from argparse import Namespace
from pathlib import Path
from typing import Any

import questionary
from rich.console import Console
from rich.table import Table

from repository_pattern.common.config import REPOSITORY_CONFIG, default_dump_auto_load_command


logger = logging.getLogger(__name__)

SUCCESS = 0
FAILURE = 1

CLASS_NAME_PATTERN = re.compile(r"^[A-Z][A-Za-z0-9_]*$")

STUB_PATH = Path(__file__).resolve().parent / "stubs"


class ValidationError(ValueError):
    """Raised when the command arguments are malformed."""

    pass


def studly(value: str) -> str:
    """``user_profile`` / ``user-profile`` / ``userProfile`` -> ``UserProfile``."""
    parts = re.split(r"[-_\s]+", value.strip())
    return "".join(part[:1].upper() + part[1:] for part in parts if part)


def snake(value: str) -> str:
    """``UserProfile`` -> ``user_profile``."""
    value = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", value)
    value = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", value)
    return value.replace("-", "_").lower()


def render(stub: str, replacements: dict[str, str]) -> str:
    """
    Replace every placeholder token in one pass.

    Longer tokens win over their prefixes, and text inserted by a replacement
    is never scanned again, so ``#Binding`` may re-emit itself as a marker.
    """
    if not replacements:
        return stub
    keys = sorted(replacements, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(key) for key in keys))
    return pattern.sub(lambda match: replacements[match.group(0)], stub)


class CreatePatternCommand:
    name = "make:repository"
    description = "Create a new repository and service pattern with interfaces"

    TYPE_CLASS = "class"
    TYPE_INTERFACE = "interface"
    LAYER_REPOSITORY = "repository"
    LAYER_SERVICE = "service"

    PROVIDERS = {
        LAYER_REPOSITORY: "repository_service_provider.py",
        LAYER_SERVICE: "internal_service_provider.py",
    }

    def __init__(
        self, config: dict[str, Any] | None = None, console: Console | None = None, base_path: str | Path | None = None
    ) -> None:
        self.config = {**REPOSITORY_CONFIG, **(config or {})}
        self.console = console or Console()
        self.base_path = Path(base_path) if base_path is not None else Path.cwd()
        self.stubs: dict[str, Path] = {}

        self.name_input = ""
        self.model_option: str | None = None
        self.force = False

        self.repository_namespace = ""
        self.service_namespace = ""
        self.path_directory_repository = Path()
        self.path_directory_service = Path()

    # ------------------------------------------------------------------
    # CLI wiring
    # ------------------------------------------------------------------
    @classmethod
    def configure_parser(cls, subparsers) -> None:
        parser = subparsers.add_parser(cls.name, help=cls.description, description=cls.description)
        parser.add_argument("name", help="The name of the repository")
        parser.add_argument("--model", default=None, help="The model class name")
        parser.add_argument("--force", action="store_true", help="Overwrite existing files")
        parser.set_defaults(command_class=cls)

    def run(self, args: Namespace) -> int:
        return self.handle(args.name, model=args.model, force=args.force)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------
    def handle(self, name: str, model: str | None = None, force: bool = False) -> int:
        """
        Returns:
            0 on success, 1 on validation error, directory conflict or unexpected error
        """
        self.name_input = studly(name or "")
        self.model_option = model or None
        self.force = force

        try:
            self.initialize_stubs()
            self.validate_input()
            self.setup_directories_and_namespaces()

            if not self.create_pattern_files():
                return FAILURE

            if self.config["binding_mode"] == "provider":
                self.update_service_providers()
            self.run_dump_auto_load()
            self.display_success_messages()

            return SUCCESS

        except ValidationError as e:
            self.console.print(f"[red]Validation Error: {e}[/]")
            return FAILURE
        except Exception as e:
            logger.error(f"make:repository failed for {self.name_input!r}: {e}")
            self.console.print(f"[red]Unexpected Error: {e}[/]")
            return FAILURE

    def initialize_stubs(self) -> None:
        self.stubs = {
            "repository_interface": STUB_PATH / "interface.repository.stub",
            "repository_implement": STUB_PATH / "implement.repository.stub",
            "service_interface": STUB_PATH / "interface.service.stub",
            "service_implement": STUB_PATH / "implement.service.stub",
            "provider_repository": STUB_PATH / "provider.repository.stub",
            "provider_service": STUB_PATH / "provider.service.stub",
        }

    def validate_input(self) -> None:
        if not self.name_input:
            raise ValidationError("Repository name cannot be empty")

        if not CLASS_NAME_PATTERN.match(self.name_input):
            raise ValidationError("Repository name must be a valid class name starting with uppercase letter")

        package = snake(self.name_input)
        if keyword.iskeyword(package):
            raise ValidationError(f"Repository name {self.name_input} maps to the reserved package name '{package}'")

        if self.model_option and not CLASS_NAME_PATTERN.match(self.model_option):
            raise ValidationError("Model name must be a valid class name starting with uppercase letter")

    # ------------------------------------------------------------------
    # Paths & namespaces
    # ------------------------------------------------------------------
    def setup_directories_and_namespaces(self) -> None:
        package = snake(self.name_input)
        app_namespace = self.config["app_namespace"]
        app_path = self.base_path / self.config["app_path"]

        # app.repositories.user
        self.repository_namespace = ".".join(
            filter(None, [app_namespace, self.prepare_namespace_by_path(self.config["path_repository"]), package])
        )
        self.service_namespace = ".".join(
            filter(None, [app_namespace, self.prepare_namespace_by_path(self.config["path_service"]), package])
        )

        self.path_directory_repository = app_path / self.config["path_repository"] / package
        self.path_directory_service = app_path / self.config["path_service"] / package

    @staticmethod
    def prepare_namespace_by_path(folder: str) -> str:
        return folder.strip().strip("/").replace("/", ".")

    def get_model_name(self) -> str:
        """``--model`` if given, else the name without a trailing ``Repository``."""
        if self.model_option:
            return self.model_option
        if self.name_input.endswith("Repository") and self.name_input != "Repository":
            return self.name_input[: -len("Repository")]
        return self.name_input

    def class_names(self, layer: str) -> tuple[str, str]:
        """(interface name, class name) for a layer."""
        if layer == self.LAYER_REPOSITORY:
            return f"{self.name_input}RepositoryInterface", f"{self.name_input}EloquentRepository"
        return f"{self.name_input}ServiceInterface", f"{self.name_input}Service"

    def generated_files(self) -> list[tuple[Path, str, str]]:
        """(path, type, layer) of the four generated modules."""
        files = []
        for layer, directory in (
            (self.LAYER_REPOSITORY, self.path_directory_repository),
            (self.LAYER_SERVICE, self.path_directory_service),
        ):
            interface_name, class_name = self.class_names(layer)
            files.append((directory / f"{snake(interface_name)}.py", self.TYPE_INTERFACE, layer))
            files.append((directory / f"{snake(class_name)}.py", self.TYPE_CLASS, layer))
        return files

    # ------------------------------------------------------------------
    # File generation
    # ------------------------------------------------------------------
    def create_pattern_files(self) -> bool:
        if not self.create_directories():
            return False

        for path, file_type, layer in self.generated_files():
            path.write_text(self.build_file_content(file_type, layer), encoding="utf-8")
            logger.debug(f"Wrote {path}")

        return True

    def create_directories(self) -> bool:
        for directory in (self.path_directory_repository, self.path_directory_service):
            if not self.make_directory(directory):
                return False
        return True

    def make_directory(self, path: Path) -> bool:
        if path.exists() and not self.force:
            self.console.print(f"[red]Directory {path} already exists! Use --force to overwrite.[/]")
            return False

        path.mkdir(mode=0o755, parents=True, exist_ok=True)
        return True

    def build_file_content(self, file_type: str, layer: str) -> str:
        suffix = "interface" if file_type == self.TYPE_INTERFACE else "implement"
        stub = self.stubs[f"{layer}_{suffix}"].read_text(encoding="utf-8")
        return render(stub, self.get_stub_replacements(layer))

    def get_stub_replacements(self, layer: str) -> dict[str, str]:
        interface_name, class_name = self.class_names(layer)
        namespace = self.repository_namespace if layer == self.LAYER_REPOSITORY else self.service_namespace
        repository_interface_name, _ = self.class_names(self.LAYER_REPOSITORY)

        attribute_mode = self.config["binding_mode"] == "attribute"

        return {
            "#Namespace": namespace,
            "#InterfaceName": interface_name,
            "#InterfaceModule": snake(interface_name),
            "#ClassName": class_name,
            "#RepositoryNamespace": self.repository_namespace,
            "#RepositoryInterfaceName": repository_interface_name,
            "#RepositoryInterfaceModule": snake(repository_interface_name),
            "#ModelNamespace": self.config["models_namespace"],
            "#ModelName": self.get_model_name(),
            "#BindImport\n": "from repository_pattern import bind\n" if attribute_mode else "",
            "#BindDecorator\n": f"@bind({interface_name})\n" if attribute_mode else "",
        }

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------
    def update_service_providers(self) -> None:
        for layer in (self.LAYER_REPOSITORY, self.LAYER_SERVICE):
            self.update_service_provider(layer)

    def provider_path(self, layer: str) -> Path:
        return self.base_path / self.config["app_path"] / "providers" / self.PROVIDERS[layer]

    def update_service_provider(self, layer: str) -> None:
        provider_path = self.provider_path(layer)

        content = (
            provider_path.read_text(encoding="utf-8")
            if provider_path.exists()
            else self.stubs[f"provider_{layer}"].read_text(encoding="utf-8")
        )

        interface_name, class_name = self.class_names(layer)
        if f"{interface_name}: {class_name}," in content:
            logger.info(f"{provider_path.name} already binds {interface_name}")
            return

        provider_path.parent.mkdir(parents=True, exist_ok=True)
        provider_path.write_text(render(content, self.get_provider_replacements(layer)), encoding="utf-8")

    def get_provider_replacements(self, layer: str) -> dict[str, str]:
        interface_name, class_name = self.class_names(layer)
        namespace = self.repository_namespace if layer == self.LAYER_REPOSITORY else self.service_namespace

        return {
            "#InterfaceUseNamespace": (
                f"from {namespace}.{snake(interface_name)} import {interface_name}\n#InterfaceUseNamespace"
            ),
            "#ClassUseNamespace": f"from {namespace}.{snake(class_name)} import {class_name}\n#ClassUseNamespace",
            "#Binding": f"{interface_name}: {class_name},\n    #Binding",
        }

    # ------------------------------------------------------------------
    # Class-map refresh
    # ------------------------------------------------------------------
    def run_dump_auto_load(self) -> None:
        if self.config["dump_auto_load"] or (self.config["ask_dump_auto_load"] and self.confirm_dump_auto_load()):
            command = self.dump_auto_load_command()
            with self.console.status("Refreshing module cache for the generated classes"):
                result = subprocess.run(command, cwd=self.base_path, capture_output=True, text=True, check=False)
            if result.returncode != 0:
                logger.warning(f"{shlex.join(command)} exited with {result.returncode}: {result.stderr.strip()}")

    def dump_auto_load_command(self) -> list[str]:
        configured = self.config.get("dump_auto_load_command")
        if configured:
            return shlex.split(configured) if isinstance(configured, str) else list(configured)
        return default_dump_auto_load_command(str(self.config["app_path"]))

    def confirm_dump_auto_load(self) -> bool:
        return bool(questionary.confirm("Refresh the module cache for the generated classes?", default=True).ask())

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def display_success_messages(self) -> None:
        name = self.name_input
        self.console.print("[green]Repository and Service patterns created successfully![/]")

        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column(style="bold")
        table.add_column(style="dim")
        table.add_row("Repository Interface", f"{self.repository_namespace}.{name}RepositoryInterface")
        table.add_row("Repository Implementation", f"{self.repository_namespace}.{name}EloquentRepository")
        table.add_row("Service Interface", f"{self.service_namespace}.{name}ServiceInterface")
        table.add_row("Service Implementation", f"{self.service_namespace}.{name}Service")

        if self.model_option:
            table.add_row("Model Binding", f"{self.config['models_namespace']}.{self.model_option}")

        self.console.print(table)
