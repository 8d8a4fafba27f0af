"""Permission-gated window management.

Scans regular applications through a WindowBackend, minimizes or restores
their windows and folds per-app/per-window failures into one typed
OperationResult. Nothing here raises past the public methods.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Callable

from .errors import (
    AppNotFound,
    NoWindowsFound,
    OperationFailed,
    PermissionDenied,
    PresentBuddyError,
)
from .models import Counts, OperationResult
from .permission import PermissionEvent, PermissionState, PermissionStateMachine
from .ports import WindowBackend

logger = logging.getLogger(__name__)


@dataclass
class _Tally:
    acted: int = 0
    total: int = 0
    permission_errors: int = 0
    errors: list[str] = field(default_factory=list)
    touched_apps: list[Any] = field(default_factory=list)

    @property
    def counts(self) -> Counts:
        return Counts(self.acted, self.total)


class WindowManagerHelper:
    """Window operations behind the accessibility permission.

    Args:
        backend: OS window access
        prompt_on_denied: Trigger the OS consent prompt when a sensitive call
            finds the permission missing. Callers that show their own UI
            turn this off.
    """

    def __init__(self, backend: WindowBackend, prompt_on_denied: bool = True):
        self._backend = backend
        self._prompt_on_denied = prompt_on_denied
        self._permission = PermissionStateMachine()

    @property
    def permission_state(self) -> PermissionState:
        return self._permission.state

    def check_permission(self) -> bool:
        """Fresh OS query; never trusts a previously observed grant."""
        if not self._backend.requires_permission:
            self._permission.observe(True)
            return True
        try:
            trusted = bool(self._backend.is_trusted())
        except Exception as e:
            logger.warning("Permission query failed: %s", e)
            trusted = False
        self._permission.observe(trusted)
        return trusted

    def request_permission(self) -> OperationResult:
        """Trigger the consent prompt and return without waiting for the answer."""
        if self.check_permission():
            return OperationResult.ok(value=self.permission_state.name.lower())
        try:
            self._backend.request_trust()
        except Exception as e:
            logger.warning("Permission request failed: %s", e)
        self._permission.transition(PermissionEvent.REQUEST)
        return OperationResult.ok(value=self.permission_state.name.lower())

    # Public operations

    def minimize_all(self) -> OperationResult:
        return self._guarded(lambda: self._set_minimized(self._regular_apps(), True))

    def restore_all(self) -> OperationResult:
        return self._guarded(self._restore_all)

    def minimize_app(self, name: str) -> OperationResult:
        return self._guarded(lambda: self._minimize_app(name))

    def minimize_all_except(self, name: str) -> OperationResult:
        def run():
            apps = [a for a in self._regular_apps() if self._name_of(a) != name]
            if not apps:
                raise NoWindowsFound(counts=Counts(0, 0))
            return self._set_minimized(apps, True)

        return self._guarded(run)

    def hide_all(self) -> OperationResult:
        return self._guarded(self._hide_all)

    # Internals

    def _guarded(self, operation: Callable[[], OperationResult]) -> OperationResult:
        try:
            self._ensure_permission()
            return operation()
        except PresentBuddyError as e:
            logger.info("Window operation failed: %s (%s)", e.detail, e.kind.value)
            return OperationResult.from_error(e)

    def _ensure_permission(self) -> None:
        if self.check_permission():
            return
        if self._prompt_on_denied:
            self.request_permission()
        raise PermissionDenied(counts=Counts(0, 0))

    def _regular_apps(self) -> list[Any]:
        try:
            return list(self._backend.list_apps())
        except PresentBuddyError:
            raise
        except Exception as e:
            raise OperationFailed(f"Failed to list applications: {e}") from e

    def _name_of(self, app) -> str:
        try:
            return self._backend.app_name(app) or "Unknown"
        except Exception:
            return "Unknown"

    def _minimize_app(self, name: str) -> OperationResult:
        apps = [a for a in self._regular_apps() if self._name_of(a) == name]
        if not apps:
            raise AppNotFound(name)
        return self._set_minimized(apps, True, scope=f" in {name}")

    def _restore_all(self) -> OperationResult:
        tally = self._scan(self._regular_apps(), minimize=False)
        for app in tally.touched_apps:
            try:
                self._backend.activate(app)
            except Exception as e:
                logger.debug("Could not activate %s: %s", self._name_of(app), e)
        return _classify(tally, "restore")

    def _set_minimized(self, apps: list[Any], minimize: bool, scope: str = "") -> OperationResult:
        tally = self._scan(apps, minimize)
        return _classify(tally, "minimize" if minimize else "restore", scope)

    def _scan(self, apps: list[Any], minimize: bool) -> _Tally:
        """Drive every window of apps to the requested minimized state.

        Windows already in that state are skipped and not counted.
        """
        tally = _Tally()
        for app in apps:
            name = self._name_of(app)
            try:
                windows = self._backend.list_windows(app)
            except PermissionDenied:
                tally.permission_errors += 1
                tally.errors.append(f"Accessibility permission denied for app: {name}")
                logger.warning("Accessibility permission denied for app: %s", name)
                continue
            except Exception as e:
                tally.errors.append(f"Error accessing windows for app {name}: {e}")
                logger.warning("Error accessing windows for app %s: %s", name, e)
                continue

            acted_before = tally.acted
            for window in windows:
                try:
                    if bool(self._backend.is_minimized(window)) == minimize:
                        continue
                except PermissionDenied:
                    tally.permission_errors += 1
                    continue
                except Exception:
                    # Unreadable state: attempt the change anyway
                    pass

                tally.total += 1
                try:
                    self._backend.set_minimized(window, minimize)
                    tally.acted += 1
                except PermissionDenied:
                    tally.permission_errors += 1
                    tally.errors.append(f"Permission denied for window in {name}")
                except Exception as e:
                    tally.errors.append(f"Failed to change window in {name}: {e}")
                    logger.debug("Failed to change window in %s: %s", name, e)

            if tally.acted > acted_before:
                tally.touched_apps.append(app)
        return tally

    def _hide_all(self) -> OperationResult:
        apps = self._regular_apps()
        if not apps:
            raise NoWindowsFound(counts=Counts(0, 0))
        for app in apps:
            try:
                self._backend.hide(app)
            except Exception as e:
                logger.debug("Could not hide %s: %s", self._name_of(app), e)

        visible = 0
        for app in apps:
            try:
                if not self._backend.is_hidden(app):
                    visible += 1
            except Exception:
                visible += 1
        counts = Counts(len(apps) - visible, len(apps))
        if visible:
            raise OperationFailed(f"Failed to hide {visible} application(s)", counts)
        return OperationResult.ok(counts)


def _classify(tally: _Tally, verb: str, scope: str = "") -> OperationResult:
    counts = tally.counts
    if tally.total == 0:
        if tally.permission_errors:
            raise PermissionDenied(counts=counts)
        raise NoWindowsFound(counts=counts)

    if tally.acted == 0 or tally.permission_errors:
        raise PermissionDenied(counts=counts)

    failed = tally.total - tally.acted
    if failed:
        detail = f"Failed to {verb} {failed}/{tally.total} windows{scope}"
        if tally.errors:
            detail += ". Details: " + "; ".join(tally.errors)
        raise OperationFailed(detail, counts)

    return OperationResult.ok(counts)
