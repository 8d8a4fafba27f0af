"""Core ports (interfaces) for PresentBuddy.

These protocols define the boundaries between the core orchestration
and platform-specific adapters. They are intentionally small and
capability-oriented to keep the core decoupled.
"""

from __future__ import annotations

from typing import Any, Protocol, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from .models import Document


@runtime_checkable
class OSActuator(Protocol):
    """Executes one primitive OS operation per call.

    Methods raise PresentBuddyError subclasses on failure. Window methods
    return an OperationResult from the window helper.
    """

    name: str

    async def hide_icons(self) -> None:
        """Hide desktop icons."""

    async def show_icons(self) -> None:
        """Show desktop icons."""

    async def minimize_windows(self):
        """Minimize all regular application windows."""

    async def restore_windows(self):
        """Restore minimized application windows."""

    async def read_wallpaper(self) -> str | None:
        """Return the current wallpaper path."""

    async def change_wallpaper(self, path: str) -> None:
        """Set the wallpaper to path."""

    async def restore_wallpaper(self, path: str) -> None:
        """Set the wallpaper back to a captured path."""

    async def read_volume(self) -> int | None:
        """Return the current output volume (0..100)."""

    async def mute_audio(self) -> None:
        """Mute output audio."""

    async def unmute_audio(self, volume_level: int | None) -> None:
        """Unmute output audio and restore volume_level when given."""

    async def disable_notifications(self) -> None:
        """Suppress notifications."""

    async def enable_notifications(self) -> None:
        """Re-enable notifications."""


@runtime_checkable
class WindowBackend(Protocol):
    """OS window access used by the window helper.

    App and window handles are opaque to the helper. Per-app and
    per-window calls raise PermissionDenied or OperationFailed.
    """

    requires_permission: bool

    def is_trusted(self) -> bool:
        """Fresh query of the accessibility permission."""

    def request_trust(self) -> None:
        """Trigger the OS consent prompt without waiting for the answer."""

    def list_apps(self) -> list[Any]:
        """Regular (non-background) running applications."""

    def app_name(self, app) -> str:
        """User-facing application name."""

    def list_windows(self, app) -> list[Any]:
        """Windows belonging to app."""

    def is_minimized(self, window) -> bool:
        """True when window is minimized."""

    def set_minimized(self, window, minimized: bool) -> None:
        """Minimize or restore window."""

    def activate(self, app) -> None:
        """Bring app to the foreground."""

    def hide(self, app) -> None:
        """Hide app."""

    def is_hidden(self, app) -> bool:
        """True when app is hidden."""


@runtime_checkable
class PersistentStore(Protocol):
    """Durable document holding OriginalState and Settings."""

    def load(self) -> "Document":
        """Load the document (defaults when missing)."""

    def save(self, document: "Document") -> None:
        """Persist the document."""


@runtime_checkable
class UIFeedback(Protocol):
    """User-visible notifications."""

    def notify(self, title: str, message: str) -> None:
        """Display a notification."""

    def prompt_permission_remediation(self) -> None:
        """Point the user at the OS privacy settings panel."""
