"""Uniform async surface over the OS actuator."""

from __future__ import annotations

from enum import Enum
import logging

from .errors import ErrorKind, PresentBuddyError
from .models import OperationResult
from .ports import OSActuator

logger = logging.getLogger(__name__)


class Operation(Enum):
    HIDE_ICONS = "hide_icons"
    SHOW_ICONS = "show_icons"
    MINIMIZE_WINDOWS = "minimize_windows"
    RESTORE_WINDOWS = "restore_windows"
    READ_WALLPAPER = "read_wallpaper"
    CHANGE_WALLPAPER = "change_wallpaper"
    RESTORE_WALLPAPER = "restore_wallpaper"
    READ_VOLUME = "read_volume"
    MUTE_AUDIO = "mute_audio"
    UNMUTE_AUDIO = "unmute_audio"
    DISABLE_NOTIFICATIONS = "disable_notifications"
    ENABLE_NOTIFICATIONS = "enable_notifications"


class PlatformDispatcher:
    """Maps an Operation to the actuator method of the same name.

    Typed actuator errors become failed results; anything else becomes
    OperationFailed. Read operations return their value in ``result.value``.
    """

    def __init__(self, actuator: OSActuator):
        self._actuator = actuator

    @property
    def platform_name(self) -> str:
        return getattr(self._actuator, "name", type(self._actuator).__name__)

    async def execute(self, op: Operation, **params) -> OperationResult:
        method = getattr(self._actuator, op.value)
        try:
            outcome = await method(**params)
        except PresentBuddyError as e:
            logger.warning("%s failed: %s", op.value, e.detail)
            return OperationResult.from_error(e)
        except Exception as e:
            logger.exception("%s raised unexpectedly", op.value)
            return OperationResult.failure(ErrorKind.OPERATION_FAILED, f"{op.value}: {e}")

        if isinstance(outcome, OperationResult):
            return outcome
        return OperationResult.ok(value=outcome)
