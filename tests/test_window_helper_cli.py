import json

from typer.testing import CliRunner

from presentbuddy import window_helper_cli as cli
from presentbuddy.core.window_helper import WindowManagerHelper

runner = CliRunner()


class _Backend:
    requires_permission = True

    def __init__(self, windows=2, trusted=True):
        self.windows = [{"minimized": False} for _ in range(windows)]
        self.trusted = trusted
        self.requested = 0

    def is_trusted(self):
        return self.trusted

    def request_trust(self):
        self.requested += 1

    def list_apps(self):
        return ["Safari"]

    def app_name(self, app):
        return app

    def list_windows(self, app):
        return self.windows

    def is_minimized(self, window):
        return window["minimized"]

    def set_minimized(self, window, minimized):
        window["minimized"] = minimized

    def activate(self, app):
        pass

    def hide(self, app):
        pass

    def is_hidden(self, app):
        return True


def _use_backend(monkeypatch, backend):
    monkeypatch.setattr(
        cli, "build_window_helper", lambda: WindowManagerHelper(backend, prompt_on_denied=False)
    )


def test_minimize_all_prints_summary(monkeypatch):
    _use_backend(monkeypatch, _Backend(windows=2))

    result = runner.invoke(cli.app, ["minimize-all"])

    assert result.exit_code == 0
    assert "Minimized 2/2 windows" in result.stdout


def test_json_output_schema(monkeypatch):
    _use_backend(monkeypatch, _Backend(windows=3))

    result = runner.invoke(cli.app, ["--json", "minimize-all"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"success": True, "counts": {"acted": 3, "total": 3}}


def test_no_windows_exits_with_failure(monkeypatch):
    _use_backend(monkeypatch, _Backend(windows=0))

    result = runner.invoke(cli.app, ["--json", "restore-all"])

    assert result.exit_code == 1
    assert json.loads(result.stdout)["errorCode"] == "NoWindowsFound"


def test_permission_denied_json(monkeypatch):
    _use_backend(monkeypatch, _Backend(trusted=False))

    result = runner.invoke(cli.app, ["--json", "minimize-app", "Safari"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["errorCode"] == "PermissionDenied"
    assert payload["counts"] == {"acted": 0, "total": 0}
    assert "Accessibility" in payload["error"]


def test_check_permission_reports_denied(monkeypatch):
    _use_backend(monkeypatch, _Backend(trusted=False))

    result = runner.invoke(cli.app, ["check-permission"])

    assert result.exit_code == 1
    assert result.stdout.strip() == "denied"


def test_request_permission_returns_pending(monkeypatch):
    backend = _Backend(trusted=False)
    _use_backend(monkeypatch, backend)

    result = runner.invoke(cli.app, ["request-permission"])

    assert result.exit_code == 0
    assert result.stdout.strip() == "pending"
    assert backend.requested == 1


def test_missing_backend_is_helper_missing(monkeypatch):
    monkeypatch.setattr(cli, "build_window_helper", lambda: None)

    result = runner.invoke(cli.app, ["--json", "hide-all"])

    assert result.exit_code == 1
    assert json.loads(result.stdout)["errorCode"] == "HelperMissing"
