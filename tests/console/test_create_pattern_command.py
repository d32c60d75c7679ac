"""
make:repository file generation, provider updates and class-map refresh.
"""

import re
import subprocess

import pytest

from repository_pattern.console import create_pattern_command
from repository_pattern.console.create_pattern_command import FAILURE, SUCCESS, render, snake, studly


MARKER = re.compile(r"#[A-Z][A-Za-z]+")


def read(path) -> str:
    return path.read_text(encoding="utf-8")


@pytest.mark.unit
class TestHelpers:
    @pytest.mark.parametrize(
        "value, expected",
        [("user", "User"), ("user_profile", "UserProfile"), ("user-profile", "UserProfile"), ("  Post ", "Post")],
    )
    def test_studly(self, value, expected):
        assert studly(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("UserRepositoryInterface", "user_repository_interface"),
            ("UserEloquentRepository", "user_eloquent_repository"),
            ("HTTPClient", "http_client"),
            ("User", "user"),
        ],
    )
    def test_snake(self, value, expected):
        assert snake(value) == expected

    def test_render_single_pass_and_longest_token(self):
        stub = "#ModelNamespace.#ModelName\n#Binding"
        replacements = {
            "#ModelName": "User",
            "#ModelNamespace": "app.models",
            "#Binding": "A: B,\n#Binding",
        }

        assert render(stub, replacements) == "app.models.User\nA: B,\n#Binding"


@pytest.mark.unit
class TestGeneration:
    def test_generates_four_files(self, make_command, tmp_path):
        assert make_command().handle("User") == SUCCESS

        repository_dir = tmp_path / "app" / "repositories" / "user"
        service_dir = tmp_path / "app" / "services" / "user"
        assert sorted(p.name for p in repository_dir.iterdir()) == [
            "user_eloquent_repository.py",
            "user_repository_interface.py",
        ]
        assert sorted(p.name for p in service_dir.iterdir()) == ["user_service.py", "user_service_interface.py"]

    def test_generated_contents(self, make_command, tmp_path):
        make_command().handle("User")

        repository = read(tmp_path / "app/repositories/user/user_eloquent_repository.py")
        interface = read(tmp_path / "app/repositories/user/user_repository_interface.py")
        service = read(tmp_path / "app/services/user/user_service.py")
        service_interface = read(tmp_path / "app/services/user/user_service_interface.py")

        assert "class UserEloquentRepository(BaseRepository[User], UserRepositoryInterface):" in repository
        assert "from app.models import User" in repository
        assert "from app.repositories.user.user_repository_interface import UserRepositoryInterface" in repository
        assert "class UserRepositoryInterface(ABC):" in interface
        assert "class UserService(BaseService[UserRepositoryInterface], UserServiceInterface):" in service
        assert "from app.services.user.user_service_interface import UserServiceInterface" in service
        assert "class UserServiceInterface(ABC):" in service_interface
        assert "@bind" not in repository

        for content in (repository, interface, service, service_interface):
            assert MARKER.search(content) is None
            compile(content, "<generated>", "exec")

    def test_snake_cased_input(self, make_command, tmp_path):
        assert make_command().handle("blog_post") == SUCCESS

        content = read(tmp_path / "app/repositories/blog_post/blog_post_eloquent_repository.py")
        assert "class BlogPostEloquentRepository(BaseRepository[BlogPost]" in content

    def test_model_derived_from_repository_suffix(self, make_command, tmp_path):
        make_command().handle("PostRepository")

        content = read(tmp_path / "app/repositories/post_repository/post_repository_eloquent_repository.py")
        assert "from app.models import Post\n" in content
        assert "BaseRepository[Post]" in content

    def test_explicit_model(self, make_command, tmp_path, output):
        assert make_command().handle("Author", model="User") == SUCCESS

        content = read(tmp_path / "app/repositories/author/author_eloquent_repository.py")
        assert "from app.models import User\n" in content
        assert "super().__init__(User, session)" in content
        assert "Model Binding" in output.getvalue()

    def test_configured_paths(self, make_command, tmp_path):
        command = make_command(
            app_path="src/shop", app_namespace="shop", path_repository="data/repos", path_service="domain",
            models_namespace="shop.db.models",
        )

        assert command.handle("Order") == SUCCESS

        content = read(tmp_path / "src/shop/data/repos/order/order_eloquent_repository.py")
        assert "from shop.db.models import Order" in content
        assert "from shop.data.repos.order.order_repository_interface import" in content
        assert (tmp_path / "src/shop/domain/order/order_service.py").exists()

    def test_success_output(self, make_command, output):
        make_command().handle("User")

        text = output.getvalue()
        assert "Repository and Service patterns created successfully!" in text
        assert "app.repositories.user.UserRepositoryInterface" in text
        assert "app.repositories.user.UserEloquentRepository" in text
        assert "app.services.user.UserServiceInterface" in text
        assert "app.services.user.UserService" in text


@pytest.mark.unit
class TestValidation:
    @pytest.mark.parametrize("name", ["", "   ", "1User", "User!", "user.profile"])
    def test_invalid_name(self, make_command, output, tmp_path, name):
        assert make_command().handle(name) == FAILURE
        assert "Validation Error" in output.getvalue()
        assert not (tmp_path / "app").exists()

    @pytest.mark.parametrize("name", ["Import", "class", "Global", "return", "async"])
    def test_keyword_package_name(self, make_command, output, tmp_path, name):
        assert make_command().handle(name) == FAILURE
        assert "reserved package name" in output.getvalue()
        assert not (tmp_path / "app").exists()

    @pytest.mark.parametrize("model", ["user", "User-Model", "9Lives"])
    def test_invalid_model(self, make_command, output, model):
        assert make_command().handle("User", model=model) == FAILURE
        assert "Model name must be a valid class name" in output.getvalue()

    def test_existing_directory_without_force(self, make_command, output, tmp_path):
        make_command().handle("User")
        target = tmp_path / "app/repositories/user/user_eloquent_repository.py"
        target.write_text("# edited\n", encoding="utf-8")

        assert make_command().handle("User") == FAILURE
        assert "already exists! Use --force to overwrite." in output.getvalue()
        assert read(target) == "# edited\n"

    def test_existing_directory_with_force(self, make_command, tmp_path):
        make_command().handle("User")
        target = tmp_path / "app/repositories/user/user_eloquent_repository.py"
        target.write_text("# edited\n", encoding="utf-8")

        assert make_command().handle("User", force=True) == SUCCESS
        assert "class UserEloquentRepository" in read(target)

    def test_unexpected_error(self, make_command, output, monkeypatch):
        command = make_command()

        def fail():
            raise OSError("disk full")

        monkeypatch.setattr(command, "update_service_providers", fail)

        assert command.handle("User") == FAILURE
        assert "Unexpected Error: disk full" in output.getvalue()


@pytest.mark.unit
class TestProviders:
    def provider(self, tmp_path, name):
        return read(tmp_path / "app" / "providers" / name)

    def test_provider_files_created_from_templates(self, make_command, tmp_path):
        make_command().handle("User")

        repository_provider = self.provider(tmp_path, "repository_service_provider.py")
        service_provider = self.provider(tmp_path, "internal_service_provider.py")

        assert "from app.repositories.user.user_repository_interface import UserRepositoryInterface" in repository_provider
        assert "from app.repositories.user.user_eloquent_repository import UserEloquentRepository" in repository_provider
        assert "    UserRepositoryInterface: UserEloquentRepository,\n    #Binding" in repository_provider
        assert "    UserServiceInterface: UserService,\n    #Binding" in service_provider
        compile(repository_provider, "<provider>", "exec")
        compile(service_provider, "<provider>", "exec")

    def test_bindings_accumulate(self, make_command, tmp_path):
        make_command().handle("User")
        make_command().handle("Post")

        for name in ("repository_service_provider.py", "internal_service_provider.py"):
            content = self.provider(tmp_path, name)
            assert content.count("#Binding") == 1
            assert content.count("#InterfaceUseNamespace") == 1
            assert content.count("#ClassUseNamespace") == 1

        repository_provider = self.provider(tmp_path, "repository_service_provider.py")
        assert repository_provider.count("UserRepositoryInterface: UserEloquentRepository,") == 1
        assert repository_provider.count("PostRepositoryInterface: PostEloquentRepository,") == 1
        assert repository_provider.index("UserRepositoryInterface:") < repository_provider.index("PostRepositoryInterface:")
        compile(repository_provider, "<provider>", "exec")

    def test_existing_provider_content_is_preserved(self, make_command, tmp_path):
        make_command().handle("User")
        path = tmp_path / "app/providers/repository_service_provider.py"
        path.write_text(read(path).replace("BINDINGS", "# custom comment\nBINDINGS", 1), encoding="utf-8")

        make_command().handle("Post")

        content = read(path)
        assert "# custom comment" in content
        assert "UserRepositoryInterface: UserEloquentRepository," in content
        assert "PostRepositoryInterface: PostEloquentRepository," in content

    def test_forced_rerun_does_not_duplicate(self, make_command, tmp_path):
        make_command().handle("User")
        make_command().handle("User", force=True)

        content = self.provider(tmp_path, "repository_service_provider.py")
        assert content.count("UserRepositoryInterface: UserEloquentRepository,") == 1

    def test_attribute_mode_decorates_and_skips_providers(self, make_command, tmp_path):
        make_command(binding_mode="attribute").handle("User")

        repository = read(tmp_path / "app/repositories/user/user_eloquent_repository.py")
        service = read(tmp_path / "app/services/user/user_service.py")

        assert "from repository_pattern import bind\n" in repository
        assert "@bind(UserRepositoryInterface)\nclass UserEloquentRepository(" in repository
        assert "@bind(UserServiceInterface)\nclass UserService(" in service
        assert not (tmp_path / "app" / "providers").exists()
        compile(repository, "<generated>", "exec")


@pytest.mark.unit
class TestDumpAutoLoad:
    @pytest.fixture
    def calls(self, monkeypatch):
        recorded = []

        def fake_run(command, **kwargs):
            recorded.append(command)
            return subprocess.CompletedProcess(command, 0, "", "")

        monkeypatch.setattr(create_pattern_command.subprocess, "run", fake_run)
        return recorded

    def test_always(self, make_command, calls):
        make_command(dump_auto_load=True).handle("User")

        assert len(calls) == 1
        assert calls[0][1:] == ["-m", "compileall", "-q", "app"]

    def test_configured_command(self, make_command, calls):
        make_command(dump_auto_load=True, dump_auto_load_command="make refresh-cache").handle("User")

        assert calls == [["make", "refresh-cache"]]

    def test_never(self, make_command, calls):
        make_command(dump_auto_load=False, ask_dump_auto_load=False).handle("User")

        assert calls == []

    @pytest.mark.parametrize("answer, expected", [(True, 1), (False, 0)])
    def test_ask(self, make_command, calls, monkeypatch, answer, expected):
        command = make_command(dump_auto_load=False, ask_dump_auto_load=True)
        monkeypatch.setattr(command, "confirm_dump_auto_load", lambda: answer)

        assert command.handle("User") == SUCCESS
        assert len(calls) == expected

    def test_failed_refresh_does_not_fail_command(self, make_command, monkeypatch):
        monkeypatch.setattr(
            create_pattern_command.subprocess,
            "run",
            lambda command, **kwargs: subprocess.CompletedProcess(command, 2, "", "nope"),
        )

        assert make_command(dump_auto_load=True).handle("User") == SUCCESS
