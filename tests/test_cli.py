"""Tests for grouter.cli: argument parsing, app resolution, routes, run."""

import sys
import types
from unittest.mock import MagicMock, patch

import pytest

from grouter.cli import main
from grouter.cli._resolve import resolve_app
from grouter.config import RouterConfig
from grouter.routing.dispatcher import Dispatcher
from grouter.routing.router import Router


async def require_token(request, next):
    return await next(request)


def list_users():
    return []


def _build_router() -> Router:
    router = Router("/", config=RouterConfig(host="0.0.0.0", port=9000))
    router.get("/ping").do(lambda: "pong")
    api = router.add_sub_router("api").add_middlewares(require_token)
    api.get("/users").do(list_users)
    api.any("/echo").do(lambda request: request.method)
    return router


@pytest.fixture
def fake_module(monkeypatch: pytest.MonkeyPatch) -> types.ModuleType:
    """Register a module exposing routers under several names."""
    mod = types.ModuleType("_grouter_cli_app")
    mod.router = _build_router()  # type: ignore[attr-defined]
    mod.dispatcher = _build_router().compile()  # type: ignore[attr-defined]
    mod.create_router = _build_router  # type: ignore[attr-defined]
    mod.empty = Router()  # type: ignore[attr-defined]
    mod.not_a_router = "just a string"  # type: ignore[attr-defined]
    mod.broken_factory = lambda: 1 / 0  # type: ignore[attr-defined]

    duplicate = Router()
    duplicate.get("/x").do(list_users)
    duplicate.get("/x/").do(list_users)
    mod.duplicate = duplicate  # type: ignore[attr-defined]

    monkeypatch.setitem(sys.modules, "_grouter_cli_app", mod)
    return mod


class TestMain:
    def test_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "grouter" in capsys.readouterr().out

    @pytest.mark.parametrize("command", ["routes", "run"])
    def test_missing_app_argument(self, command: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([command])
        assert exc_info.value.code == 2


@pytest.mark.usefixtures("fake_module")
class TestResolveApp:
    def test_default_attribute_is_router(self, fake_module: types.ModuleType) -> None:
        assert resolve_app("_grouter_cli_app") is fake_module.router

    def test_dispatcher(self) -> None:
        assert isinstance(resolve_app("_grouter_cli_app:dispatcher"), Dispatcher)

    def test_factory_is_called(self) -> None:
        assert isinstance(resolve_app("_grouter_cli_app:create_router"), Router)

    def test_factory_error(self) -> None:
        with pytest.raises(TypeError, match="raised an error"):
            resolve_app("_grouter_cli_app:broken_factory")

    def test_wrong_type(self) -> None:
        with pytest.raises(TypeError, match="not a grouter Router"):
            resolve_app("_grouter_cli_app:not_a_router")

    def test_missing_module(self) -> None:
        with pytest.raises(ModuleNotFoundError):
            resolve_app("nonexistent_module_xyz:router")

    def test_missing_attribute(self) -> None:
        with pytest.raises(AttributeError):
            resolve_app("_grouter_cli_app:nope")


@pytest.mark.usefixtures("fake_module")
class TestRoutesCommand:
    def test_lists_flattened_routes(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_grouter_cli_app:router"])
        out = capsys.readouterr().out
        lines = out.splitlines()

        assert lines[0].split() == ["METHOD", "PATH", "HANDLER", "MIDDLEWARE"]
        assert any(line.split()[:2] == ["*", "/api/echo"] for line in lines[2:])
        users = next(line for line in lines if "/api/users" in line)
        assert "list_users" in users
        assert "require_token" in users
        assert "/ping" in out

    def test_empty_router(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_grouter_cli_app:empty"])
        assert capsys.readouterr().out.strip() == "No routes registered."

    def test_duplicate_routes_exit_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", "_grouter_cli_app:duplicate"])
        assert exc_info.value.code == 1
        assert "Duplicate route" in capsys.readouterr().err

    def test_bad_import_exits_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", "nonexistent_module_xyz"])
        assert exc_info.value.code == 1
        assert capsys.readouterr().err.startswith("Error:")


@pytest.mark.usefixtures("fake_module")
class TestRunCommand:
    @patch("grouter.cli._run.run_server")
    def test_uses_config_defaults(self, mock_server: MagicMock) -> None:
        main(["run", "_grouter_cli_app:router"])
        mock_server.assert_called_once()
        args, kwargs = mock_server.call_args
        assert isinstance(args[0], Dispatcher)
        assert args[1:] == ("0.0.0.0", 9000)
        assert kwargs == {"log_level": "info"}

    @patch("grouter.cli._run.run_server")
    def test_flags_override_config(self, mock_server: MagicMock) -> None:
        main(["run", "_grouter_cli_app:router", "--host", "127.0.0.1", "--port", "3000"])
        args = mock_server.call_args[0]
        assert args[1:] == ("127.0.0.1", 3000)

    @patch("grouter.cli._run.run_server")
    def test_serves_compiled_dispatcher(
        self, mock_server: MagicMock, fake_module: types.ModuleType
    ) -> None:
        main(["run", "_grouter_cli_app:router"])
        assert mock_server.call_args[0][0] is fake_module.router.compile()


class TestRouterRun:
    @patch("grouter.server.dev.run_server")
    def test_run_compiles_and_serves(self, mock_server: MagicMock) -> None:
        router = Router(config=RouterConfig(port=8123, log_level="debug"))
        router.get("/").do(lambda: "home")
        router.run()
        mock_server.assert_called_once_with(
            router.compile(), "127.0.0.1", 8123, log_level="debug"
        )

    def test_missing_uvicorn(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from grouter.errors import ConfigurationError
        from grouter.server.dev import run_server

        monkeypatch.setitem(sys.modules, "uvicorn", None)
        with pytest.raises(ConfigurationError, match=r"grouter\[server\]"):
            run_server(Router().compile(), "127.0.0.1", 8000)
