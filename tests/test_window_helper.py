from presentbuddy.core.errors import ErrorKind, OperationFailed, PermissionDenied
from presentbuddy.core.models import Counts
from presentbuddy.core.permission import PermissionState
from presentbuddy.core.ports import WindowBackend
from presentbuddy.core.window_helper import WindowManagerHelper


class _Window:
    def __init__(self, minimized=False, fail=None):
        self.minimized = minimized
        self.fail = fail


class _App:
    def __init__(self, name, windows=(), list_error=None, stubborn=False):
        self.name = name
        self.windows = list(windows)
        self.list_error = list_error
        self.stubborn = stubborn
        self.hidden = False
        self.activated = False


class _Backend(WindowBackend):
    requires_permission = True

    def __init__(self, apps=(), trusted=True):
        self.apps = list(apps)
        self.trusted = trusted
        self.requested = 0
        self.listed = 0

    def is_trusted(self) -> bool:
        return self.trusted

    def request_trust(self) -> None:
        self.requested += 1

    def list_apps(self):
        self.listed += 1
        return self.apps

    def app_name(self, app) -> str:
        return app.name

    def list_windows(self, app):
        if app.list_error == "permission":
            raise PermissionDenied()
        if app.list_error:
            raise OperationFailed("cannot read windows")
        return app.windows

    def is_minimized(self, window) -> bool:
        return window.minimized

    def set_minimized(self, window, minimized: bool) -> None:
        if window.fail == "permission":
            raise PermissionDenied()
        if window.fail:
            raise OperationFailed("AX error -25200")
        window.minimized = minimized

    def activate(self, app) -> None:
        app.activated = True

    def hide(self, app) -> None:
        if not app.stubborn:
            app.hidden = True

    def is_hidden(self, app) -> bool:
        return app.hidden


def test_minimize_all_with_no_windows():
    helper = WindowManagerHelper(_Backend([_App("Finder")]))

    result = helper.minimize_all()

    assert not result.success
    assert result.error_code == ErrorKind.NO_WINDOWS_FOUND
    assert result.counts == Counts(0, 0)


def test_minimize_all_with_permission_revoked_does_not_enumerate():
    backend = _Backend([_App("Safari", [_Window()])], trusted=False)
    helper = WindowManagerHelper(backend)

    result = helper.minimize_all()

    assert result.error_code == ErrorKind.PERMISSION_DENIED
    assert result.counts == Counts(0, 0)
    assert backend.listed == 0
    assert backend.requested == 1
    assert helper.permission_state == PermissionState.PENDING


def test_no_dialog_mode_skips_consent_prompt():
    backend = _Backend([_App("Safari", [_Window()])], trusted=False)
    helper = WindowManagerHelper(backend, prompt_on_denied=False)

    result = helper.minimize_all()

    assert result.error_code == ErrorKind.PERMISSION_DENIED
    assert backend.requested == 0
    assert helper.permission_state == PermissionState.DENIED


def test_permission_rechecked_on_every_call():
    backend = _Backend([_App("Safari", [_Window()])])
    helper = WindowManagerHelper(backend)
    assert helper.minimize_all().success

    backend.trusted = False
    result = helper.restore_all()

    assert result.error_code == ErrorKind.PERMISSION_DENIED
    assert helper.permission_state == PermissionState.PENDING


def test_partial_failure_reports_counts():
    windows = [_Window() for _ in range(7)] + [_Window(fail="error") for _ in range(3)]
    helper = WindowManagerHelper(_Backend([_App("Code", windows)]))

    result = helper.minimize_all()

    assert not result.success
    assert result.error_code == ErrorKind.OPERATION_FAILED
    assert result.counts == Counts(7, 10)
    assert "Failed to minimize 3/10 windows" in result.error


def test_already_minimized_windows_are_not_counted():
    windows = [_Window(minimized=True), _Window(minimized=True), _Window(), _Window(), _Window()]
    helper = WindowManagerHelper(_Backend([_App("Terminal", windows)]))

    result = helper.minimize_all()

    assert result.success
    assert result.counts == Counts(3, 3)
    assert all(w.minimized for w in windows)


def test_all_windows_failing_is_permission_denied():
    windows = [_Window(fail="error"), _Window(fail="error")]
    helper = WindowManagerHelper(_Backend([_App("Mail", windows)]))

    result = helper.minimize_all()

    assert result.error_code == ErrorKind.PERMISSION_DENIED
    assert result.counts == Counts(0, 2)


def test_per_app_permission_error_wins_over_partial_success():
    apps = [
        _App("Safari", [_Window(), _Window()]),
        _App("Secure", list_error="permission"),
    ]
    helper = WindowManagerHelper(_Backend(apps))

    result = helper.minimize_all()

    assert result.error_code == ErrorKind.PERMISSION_DENIED
    assert result.counts == Counts(2, 2)


def test_only_permission_errors_and_no_windows():
    helper = WindowManagerHelper(_Backend([_App("Secure", list_error="permission")]))

    result = helper.minimize_all()

    assert result.error_code == ErrorKind.PERMISSION_DENIED
    assert result.counts == Counts(0, 0)


def test_unreadable_app_is_skipped():
    apps = [_App("Broken", list_error="error"), _App("Notes", [_Window()])]
    helper = WindowManagerHelper(_Backend(apps))

    result = helper.minimize_all()

    assert result.success
    assert result.counts == Counts(1, 1)


def test_restore_all_activates_apps_with_restored_windows():
    restored = _App("Safari", [_Window(minimized=True)])
    untouched = _App("Notes", [_Window()])
    helper = WindowManagerHelper(_Backend([restored, untouched]))

    result = helper.restore_all()

    assert result.success
    assert result.counts == Counts(1, 1)
    assert restored.activated
    assert not untouched.activated


def test_minimize_app_not_found():
    helper = WindowManagerHelper(_Backend([_App("Safari", [_Window()])]))

    result = helper.minimize_app("Keynote")

    assert result.error_code == ErrorKind.APP_NOT_FOUND
    assert "Keynote" in result.error


def test_minimize_app_only_touches_named_app():
    safari = _App("Safari", [_Window()])
    notes = _App("Notes", [_Window()])
    helper = WindowManagerHelper(_Backend([safari, notes]))

    result = helper.minimize_app("Safari")

    assert result.success
    assert safari.windows[0].minimized
    assert not notes.windows[0].minimized


def test_minimize_all_except_skips_named_app():
    keynote = _App("Keynote", [_Window()])
    safari = _App("Safari", [_Window(), _Window()])
    helper = WindowManagerHelper(_Backend([keynote, safari]))

    result = helper.minimize_all_except("Keynote")

    assert result.success
    assert result.counts == Counts(2, 2)
    assert not keynote.windows[0].minimized


def test_hide_all_reports_visible_apps():
    apps = [_App("Safari"), _App("Stubborn", stubborn=True)]
    helper = WindowManagerHelper(_Backend(apps))

    result = helper.hide_all()

    assert result.error_code == ErrorKind.OPERATION_FAILED
    assert result.counts == Counts(1, 2)


def test_backend_without_permission_gate_is_granted():
    backend = _Backend([_App("xterm", [_Window()])], trusted=False)
    backend.requires_permission = False
    helper = WindowManagerHelper(backend)

    assert helper.check_permission()
    assert helper.minimize_all().success
    assert helper.permission_state == PermissionState.GRANTED
