"""Core data model: features, system/original state, results and settings."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from .errors import ErrorKind, PresentBuddyError


class Feature(Enum):
    """The five togglable presentation aids."""

    ICONS = "icons"
    WINDOWS = "windows"
    WALLPAPER = "wallpaper"
    AUDIO = "audio"
    NOTIFICATIONS = "notifications"


# SystemState attribute backing each feature
FEATURE_FLAGS: dict[Feature, str] = {
    Feature.ICONS: "icons_hidden",
    Feature.WINDOWS: "windows_minimized",
    Feature.WALLPAPER: "wallpaper_changed",
    Feature.AUDIO: "audio_muted",
    Feature.NOTIFICATIONS: "notifications_disabled",
}


@dataclass
class SystemState:
    """Current on/off status of each feature. Only the orchestrator writes it."""

    icons_hidden: bool = False
    windows_minimized: bool = False
    wallpaper_changed: bool = False
    audio_muted: bool = False
    notifications_disabled: bool = False

    def is_active(self, feature: Feature) -> bool:
        return getattr(self, FEATURE_FLAGS[feature])

    def set_active(self, feature: Feature, active: bool) -> None:
        setattr(self, FEATURE_FLAGS[feature], active)

    def active_features(self) -> list[Feature]:
        return [f for f in Feature if self.is_active(f)]

    def copy(self) -> SystemState:
        return replace(self)


@dataclass
class OriginalState:
    """Captured pre-change values needed to undo wallpaper and audio."""

    wallpaper_path: str | None = None
    volume_level: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.wallpaper_path is not None:
            data["wallpaperPath"] = self.wallpaper_path
        if self.volume_level is not None:
            data["volumeLevel"] = self.volume_level
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> OriginalState:
        data = data or {}
        path = data.get("wallpaperPath")
        volume = data.get("volumeLevel")
        return cls(
            wallpaper_path=path if isinstance(path, str) and path else None,
            volume_level=clamp_volume(volume) if isinstance(volume, (int, float)) else None,
        )

    def copy(self) -> OriginalState:
        return replace(self)


@dataclass
class Settings:
    auto_restore: bool = True
    start_minimized: bool = False
    default_wallpaper: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "autoRestore": self.auto_restore,
            "startMinimized": self.start_minimized,
        }
        if self.default_wallpaper:
            data["defaultWallpaper"] = self.default_wallpaper
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Settings:
        data = data or {}
        return cls(
            auto_restore=bool(data.get("autoRestore", True)),
            start_minimized=bool(data.get("startMinimized", False)),
            default_wallpaper=data.get("defaultWallpaper") or None,
        )


@dataclass
class Document:
    """The persisted JSON document."""

    original_state: OriginalState = field(default_factory=OriginalState)
    settings: Settings = field(default_factory=Settings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "originalState": self.original_state.to_dict(),
            "settings": self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Document:
        data = data or {}
        return cls(
            original_state=OriginalState.from_dict(data.get("originalState")),
            settings=Settings.from_dict(data.get("settings")),
        )


@dataclass(frozen=True)
class Counts:
    acted: int
    total: int

    def __str__(self) -> str:
        return f"{self.acted}/{self.total}"


@dataclass(frozen=True)
class OperationResult:
    """Uniform outcome of every actuator, helper and orchestrator call.

    Attributes:
        success: True when the operation fully succeeded
        counts: acted/total window tallies for window operations
        error: Human-readable failure detail
        error_code: Typed failure kind
        value: Read-back value of capture operations (wallpaper path, volume)
    """

    success: bool
    counts: Counts | None = None
    error: str | None = None
    error_code: ErrorKind | None = None
    value: Any = None

    @classmethod
    def ok(cls, counts: Counts | None = None, value: Any = None) -> OperationResult:
        return cls(success=True, counts=counts, value=value)

    @classmethod
    def failure(
        cls, kind: ErrorKind, error: str, counts: Counts | None = None
    ) -> OperationResult:
        return cls(success=False, counts=counts, error=error, error_code=kind)

    @classmethod
    def from_error(cls, exc: PresentBuddyError) -> OperationResult:
        return cls.failure(exc.kind, exc.detail, exc.counts)

    @property
    def needs_permission_prompt(self) -> bool:
        return self.error_code is ErrorKind.PERMISSION_DENIED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success}
        if self.counts is not None:
            data["counts"] = {"acted": self.counts.acted, "total": self.counts.total}
        if self.error is not None:
            data["error"] = self.error
        if self.error_code is not None:
            data["errorCode"] = self.error_code.value
        if self.value is not None:
            data["value"] = self.value
        return data


def clamp_volume(level: float) -> int:
    return max(0, min(100, int(round(level))))
