"""UI feedback adapter."""

from __future__ import annotations

from ..ui_feedback import notify, open_privacy_settings


class UIFeedbackAdapter:
    def notify(self, title: str, message: str) -> None:
        notify(title, message)

    def prompt_permission_remediation(self) -> None:
        notify(
            "Accessibility permission required",
            "Grant PresentBuddy access in System Settings > Privacy & Security > Accessibility",
            timeout=5,
        )
        open_privacy_settings()
