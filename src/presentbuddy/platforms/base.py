"""Base class for the per-OS actuators."""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
import logging
from typing import Awaitable, Callable

from ..adapters.shell import CommandResult, run_command
from ..config import config
from ..core.errors import HelperMissing, HelperTimeout
from ..core.models import OperationResult
from ..core.window_helper import WindowManagerHelper

logger = logging.getLogger(__name__)

CommandRunner = Callable[..., Awaitable[CommandResult]]


class BaseActuator(ABC):
    """One primitive OS operation per call.

    Subclasses invoke OS command-line tools through ``self.run`` and raise
    PresentBuddyError subclasses on failure. Window operations go to the
    window helper when one is available.
    """

    name = "base"

    def __init__(
        self,
        window_helper: WindowManagerHelper | None = None,
        runner: CommandRunner | None = None,
    ):
        self._helper = window_helper
        self._runner = runner or run_command

    async def run(self, *args: str, check: bool = True) -> CommandResult:
        return await self._runner(list(args), check=check)

    async def call_helper(self, operation: str, *args) -> OperationResult:
        """Run a blocking helper operation in a worker thread, time-bounded.

        The scan itself is not aborted on timeout; only the wait is.
        """
        if self._helper is None:
            raise HelperMissing("Window helper is not available on this system")
        method = getattr(self._helper, operation)
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(method, *args), config.HELPER_TIMEOUT
            )
        except asyncio.TimeoutError as e:
            raise HelperTimeout(
                f"Window helper timed out after {config.HELPER_TIMEOUT:g}s ({operation})"
            ) from e

    async def minimize_windows(self) -> OperationResult:
        return await self.call_helper("minimize_all")

    async def restore_windows(self) -> OperationResult:
        return await self.call_helper("restore_all")

    async def restore_wallpaper(self, path: str) -> None:
        await self.change_wallpaper(path)

    @abstractmethod
    async def hide_icons(self) -> None: ...

    @abstractmethod
    async def show_icons(self) -> None: ...

    @abstractmethod
    async def read_wallpaper(self) -> str | None: ...

    @abstractmethod
    async def change_wallpaper(self, path: str) -> None: ...

    @abstractmethod
    async def read_volume(self) -> int | None: ...

    @abstractmethod
    async def mute_audio(self) -> None: ...

    @abstractmethod
    async def unmute_audio(self, volume_level: int | None) -> None: ...

    @abstractmethod
    async def disable_notifications(self) -> None: ...

    @abstractmethod
    async def enable_notifications(self) -> None: ...
