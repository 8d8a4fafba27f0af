"""Feature orchestration for PresentBuddy.

Owns SystemState and OriginalState, turns enable/disable requests into
dispatcher operations and persists captured values. Every public coroutine
returns an OperationResult; nothing raises past this layer.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
import logging
from pathlib import Path

from .dispatcher import Operation, PlatformDispatcher
from .errors import ErrorKind, OperationFailed
from .models import Counts, Document, Feature, OperationResult, OriginalState, Settings, SystemState
from .ports import PersistentStore, UIFeedback

logger = logging.getLogger(__name__)

_ENABLE_OPS = {
    Feature.ICONS: Operation.HIDE_ICONS,
    Feature.WINDOWS: Operation.MINIMIZE_WINDOWS,
    Feature.NOTIFICATIONS: Operation.DISABLE_NOTIFICATIONS,
}

_DISABLE_OPS = {
    Feature.ICONS: Operation.SHOW_ICONS,
    Feature.WINDOWS: Operation.RESTORE_WINDOWS,
    Feature.NOTIFICATIONS: Operation.ENABLE_NOTIFICATIONS,
}


class FeatureOrchestrator:
    """Idempotent enable/disable of presentation features.

    Operations on the same feature are serialized; different features may
    run concurrently (toggle_all). All coroutines must run on one event loop.
    """

    def __init__(
        self,
        dispatcher: PlatformDispatcher,
        store: PersistentStore,
        ui: UIFeedback | None = None,
        fallback_wallpaper: str | None = None,
    ):
        self._dispatcher = dispatcher
        self._store = store
        self._ui = ui
        self._fallback_wallpaper = fallback_wallpaper or None

        document = store.load()
        self._state = SystemState()
        self._original = document.original_state
        self._settings = document.settings

        self._feature_locks = {feature: asyncio.Lock() for feature in Feature}
        self._save_lock = asyncio.Lock()
        self._permission_prompted = False

    # Queries

    def get_state(self) -> SystemState:
        return self._state.copy()

    def get_original_state(self) -> OriginalState:
        return self._original.copy()

    def get_settings(self) -> Settings:
        return replace(self._settings)

    async def save_settings(self, settings: Settings) -> OperationResult:
        self._settings = replace(settings)
        return await self._persist()

    # Toggles

    async def enable(self, feature: Feature, wallpaper: str | None = None) -> OperationResult:
        async with self._feature_locks[feature]:
            if self._state.is_active(feature):
                return OperationResult.ok()

            if feature is Feature.WALLPAPER:
                result = await self._enable_wallpaper(wallpaper)
            elif feature is Feature.AUDIO:
                result = await self._enable_audio()
            else:
                result = await self._dispatcher.execute(_ENABLE_OPS[feature])

            if result.success:
                self._state.set_active(feature, True)
                logger.info("Enabled %s", feature.value)
            await self._handle_failure(feature, result)
            return result

    async def disable(self, feature: Feature) -> OperationResult:
        async with self._feature_locks[feature]:
            if not self._state.is_active(feature):
                return OperationResult.ok()

            if feature is Feature.WALLPAPER:
                result = await self._disable_wallpaper()
            elif feature is Feature.AUDIO:
                result = await self._disable_audio()
            else:
                result = await self._dispatcher.execute(_DISABLE_OPS[feature])
                if feature is Feature.WINDOWS and result.error_code is ErrorKind.NO_WINDOWS_FOUND:
                    # Nothing left minimized: already in the requested state
                    result = OperationResult.ok(result.counts)

            if result.success:
                self._state.set_active(feature, False)
                logger.info("Disabled %s", feature.value)
            await self._handle_failure(feature, result)
            return result

    async def toggle(self, feature: Feature) -> OperationResult:
        if self._state.is_active(feature):
            return await self.disable(feature)
        return await self.enable(feature)

    async def toggle_all(self) -> OperationResult:
        """All on -> all off; otherwise switch on whatever is off.

        A mixed state never disables an active feature.
        """
        active = self._state.active_features()
        if len(active) == len(Feature):
            targets = [(feature, self.disable(feature)) for feature in Feature]
        else:
            targets = [(feature, self.enable(feature)) for feature in Feature if feature not in active]

        results = await asyncio.gather(*(coro for _, coro in targets), return_exceptions=True)
        return _aggregate([feature for feature, _ in targets], results)

    async def disable_all(self) -> OperationResult:
        """Leave presentation mode: disable every active feature, windows included.

        Unlike toggle_all this works from a mixed state, so features that keep
        failing to enable never trap the others in the on position.
        """
        features = self._state.active_features()
        results = await asyncio.gather(*(self.disable(f) for f in features), return_exceptions=True)
        return _aggregate(features, results)

    async def restore_all(self) -> OperationResult:
        """Best-effort shutdown restore of every active feature except windows.

        Wallpaper and audio are restored only when a capture exists.
        Failures are logged, never raised.
        """
        features = []
        for feature in self._state.active_features():
            if feature is Feature.WINDOWS:
                continue
            if feature is Feature.WALLPAPER and self._original.wallpaper_path is None:
                continue
            if feature is Feature.AUDIO and self._original.volume_level is None:
                continue
            features.append(feature)

        results = await asyncio.gather(*(self.disable(f) for f in features), return_exceptions=True)
        aggregate = _aggregate(features, results)
        if not aggregate.success:
            logger.error("Restore incomplete: %s", aggregate.error)
        return aggregate

    async def restore_persisted(self) -> OperationResult:
        """Undo captures left behind by a session that did not shut down cleanly."""
        features = []
        coros = []
        if self._original.wallpaper_path is not None:
            self._state.set_active(Feature.WALLPAPER, True)
            features.append(Feature.WALLPAPER)
            coros.append(self.disable(Feature.WALLPAPER))
        if self._original.volume_level is not None:
            self._state.set_active(Feature.AUDIO, True)
            features.append(Feature.AUDIO)
            coros.append(self.disable(Feature.AUDIO))
        results = await asyncio.gather(*coros, return_exceptions=True)
        return _aggregate(features, results)

    # Feature specifics

    def _resolve_wallpaper(self, wallpaper: str | None) -> str:
        target = wallpaper or self._settings.default_wallpaper or self._fallback_wallpaper
        if not target:
            raise OperationFailed("No wallpaper given and no default wallpaper configured")
        path = Path(target).expanduser()
        if not path.is_file():
            raise OperationFailed(f"Wallpaper file not found: {path}")
        return str(path.resolve())

    async def _enable_wallpaper(self, wallpaper: str | None) -> OperationResult:
        try:
            target = self._resolve_wallpaper(wallpaper)
        except OperationFailed as e:
            return OperationResult.from_error(e)

        captured = await self._capture(Operation.READ_WALLPAPER)
        result = await self._dispatcher.execute(Operation.CHANGE_WALLPAPER, path=target)
        if result.success and self._original.wallpaper_path is None and captured:
            self._original.wallpaper_path = captured
            await self._persist()
        return result

    async def _disable_wallpaper(self) -> OperationResult:
        path = self._original.wallpaper_path
        if path is None:
            logger.warning("No original wallpaper captured, leaving current wallpaper")
            return OperationResult.ok()
        result = await self._dispatcher.execute(Operation.RESTORE_WALLPAPER, path=path)
        if result.success:
            self._original.wallpaper_path = None
            await self._persist()
        return result

    async def _enable_audio(self) -> OperationResult:
        captured = await self._capture(Operation.READ_VOLUME)
        result = await self._dispatcher.execute(Operation.MUTE_AUDIO)
        if result.success and self._original.volume_level is None and captured is not None:
            self._original.volume_level = captured
            await self._persist()
        return result

    async def _disable_audio(self) -> OperationResult:
        volume = self._original.volume_level
        result = await self._dispatcher.execute(Operation.UNMUTE_AUDIO, volume_level=volume)
        if result.success and volume is not None:
            self._original.volume_level = None
            await self._persist()
        return result

    async def _capture(self, op: Operation) -> str | int | None:
        """Read the pre-change value; a failed read captures nothing."""
        result = await self._dispatcher.execute(op)
        if not result.success:
            logger.warning("Could not capture original value (%s): %s", op.value, result.error)
            return None
        return result.value

    # Persistence and feedback

    async def _persist(self) -> OperationResult:
        async with self._save_lock:
            document = Document(original_state=self._original.copy(), settings=replace(self._settings))
            try:
                await asyncio.to_thread(self._store.save, document)
            except OSError as e:
                logger.error("Failed to persist state: %s", e)
                return OperationResult.failure(ErrorKind.OPERATION_FAILED, f"Failed to save: {e}")
        return OperationResult.ok()

    async def _handle_failure(self, feature: Feature, result: OperationResult) -> None:
        if result.success:
            return
        logger.warning("%s failed: %s", feature.value, result.error)
        if not result.needs_permission_prompt or self._permission_prompted or self._ui is None:
            return
        self._permission_prompted = True
        try:
            await asyncio.to_thread(self._ui.prompt_permission_remediation)
        except Exception as e:
            logger.warning("Permission prompt failed: %s", e)


def _aggregate(features: list[Feature], results: list) -> OperationResult:
    """Fold per-feature results into one; counts are succeeded/attempted."""
    failures = []
    first_code = None
    acted = 0
    for feature, result in zip(features, results):
        if isinstance(result, BaseException):
            logger.error("%s raised: %s", feature.value, result)
            failures.append(f"{feature.value} ({result})")
            first_code = first_code or ErrorKind.OPERATION_FAILED
        elif result.success:
            acted += 1
        else:
            failures.append(f"{feature.value} ({result.error})")
            first_code = first_code or result.error_code

    counts = Counts(acted, len(features))
    if failures:
        return OperationResult(
            success=False,
            counts=counts,
            error="Failed: " + "; ".join(failures),
            error_code=first_code or ErrorKind.OPERATION_FAILED,
        )
    return OperationResult.ok(counts)
