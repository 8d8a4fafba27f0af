import asyncio

from presentbuddy.core.dispatcher import PlatformDispatcher
from presentbuddy.core.errors import ErrorKind, NoWindowsFound, OperationFailed, PermissionDenied
from presentbuddy.core.models import Counts, Document, Feature, OperationResult, OriginalState, Settings
from presentbuddy.core.orchestrator import FeatureOrchestrator
from presentbuddy.core.ports import PersistentStore, UIFeedback


class _Actuator:
    name = "fake"

    def __init__(self, wallpaper="/orig.jpg", volume=40, fail=(), window_error=None):
        self.calls = []
        self.wallpaper = wallpaper
        self.volume = volume
        self.muted = False
        self.fail = set(fail)
        self.window_error = window_error

    async def _do(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail:
            raise OperationFailed(f"{name} failed")

    def called(self, name):
        return [c for c in self.calls if c[0] == name]

    async def hide_icons(self):
        await self._do("hide_icons")

    async def show_icons(self):
        await self._do("show_icons")

    async def minimize_windows(self):
        await self._do("minimize_windows")
        if self.window_error:
            raise self.window_error
        return OperationResult.ok(Counts(2, 2))

    async def restore_windows(self):
        await self._do("restore_windows")
        return OperationResult.ok(Counts(2, 2))

    async def read_wallpaper(self):
        await self._do("read_wallpaper")
        return self.wallpaper

    async def change_wallpaper(self, path):
        await self._do("change_wallpaper", path)
        self.wallpaper = path

    async def restore_wallpaper(self, path):
        await self._do("restore_wallpaper", path)
        self.wallpaper = path

    async def read_volume(self):
        await self._do("read_volume")
        return self.volume

    async def mute_audio(self):
        await self._do("mute_audio")
        self.muted = True

    async def unmute_audio(self, volume_level):
        await self._do("unmute_audio", volume_level)
        self.muted = False
        if volume_level is not None:
            self.volume = volume_level

    async def disable_notifications(self):
        await self._do("disable_notifications")

    async def enable_notifications(self):
        await self._do("enable_notifications")


class _Store(PersistentStore):
    def __init__(self, document=None):
        self.document = document or Document()
        self.saves = []

    def load(self):
        return Document.from_dict(self.document.to_dict())

    def save(self, document):
        self.document = Document.from_dict(document.to_dict())
        self.saves.append(document.to_dict())


class _UI(UIFeedback):
    def __init__(self):
        self.notifications = []
        self.prompts = 0

    def notify(self, title: str, message: str) -> None:
        self.notifications.append((title, message))

    def prompt_permission_remediation(self) -> None:
        self.prompts += 1


def _build(actuator=None, store=None, ui=None, fallback_wallpaper=None):
    actuator = actuator or _Actuator()
    store = store or _Store()
    ui = ui or _UI()
    orchestrator = FeatureOrchestrator(
        PlatformDispatcher(actuator), store, ui, fallback_wallpaper=fallback_wallpaper
    )
    return orchestrator, actuator, store, ui


def _wallpaper(tmp_path):
    path = tmp_path / "slides.png"
    path.write_bytes(b"png")
    return path


def test_enable_is_idempotent():
    orchestrator, actuator, _, _ = _build()

    async def scenario():
        first = await orchestrator.enable(Feature.ICONS)
        second = await orchestrator.enable(Feature.ICONS)
        return first, second

    first, second = asyncio.run(scenario())

    assert first.success and second.success
    assert len(actuator.called("hide_icons")) == 1
    assert orchestrator.get_state().icons_hidden


def test_disable_when_inactive_is_noop():
    orchestrator, actuator, _, _ = _build()

    result = asyncio.run(orchestrator.disable(Feature.NOTIFICATIONS))

    assert result.success
    assert actuator.calls == []


def test_wallpaper_round_trip(tmp_path):
    orchestrator, actuator, store, _ = _build()
    target = _wallpaper(tmp_path)

    async def scenario():
        enabled = await orchestrator.enable(Feature.WALLPAPER, wallpaper=str(target))
        captured = orchestrator.get_original_state()
        disabled = await orchestrator.disable(Feature.WALLPAPER)
        return enabled, captured, disabled

    enabled, captured, disabled = asyncio.run(scenario())

    assert enabled.success and disabled.success
    assert captured.wallpaper_path == "/orig.jpg"
    assert actuator.called("change_wallpaper") == [("change_wallpaper", str(target.resolve()))]
    assert actuator.wallpaper == "/orig.jpg"
    assert orchestrator.get_original_state().wallpaper_path is None
    assert not orchestrator.get_state().wallpaper_changed
    assert store.saves[0]["originalState"] == {"wallpaperPath": "/orig.jpg"}
    assert store.document.original_state.wallpaper_path is None


def test_existing_capture_is_never_overwritten(tmp_path):
    store = _Store(Document(original_state=OriginalState(wallpaper_path="/older.jpg")))
    orchestrator, actuator, _, _ = _build(store=store)

    async def scenario():
        await orchestrator.enable(Feature.WALLPAPER, wallpaper=str(_wallpaper(tmp_path)))
        assert orchestrator.get_original_state().wallpaper_path == "/older.jpg"
        await orchestrator.disable(Feature.WALLPAPER)

    asyncio.run(scenario())

    assert actuator.called("restore_wallpaper") == [("restore_wallpaper", "/older.jpg")]


def test_default_wallpaper_from_settings(tmp_path):
    target = _wallpaper(tmp_path)
    store = _Store(Document(settings=Settings(default_wallpaper=str(target))))
    orchestrator, actuator, _, _ = _build(store=store)

    result = asyncio.run(orchestrator.enable(Feature.WALLPAPER))

    assert result.success
    assert actuator.wallpaper == str(target.resolve())


def test_missing_wallpaper_file_fails_before_any_change(tmp_path):
    orchestrator, actuator, store, _ = _build()

    result = asyncio.run(orchestrator.enable(Feature.WALLPAPER, wallpaper=str(tmp_path / "nope.png")))

    assert not result.success
    assert result.error_code == ErrorKind.OPERATION_FAILED
    assert actuator.calls == []
    assert store.saves == []
    assert not orchestrator.get_state().wallpaper_changed


def test_failed_enable_leaves_state_untouched():
    orchestrator, actuator, store, _ = _build(actuator=_Actuator(fail={"mute_audio"}))

    result = asyncio.run(orchestrator.enable(Feature.AUDIO))

    assert not result.success
    assert "mute_audio failed" in result.error
    assert not orchestrator.get_state().audio_muted
    assert orchestrator.get_original_state().volume_level is None
    assert store.saves == []


def test_audio_round_trip_restores_volume():
    orchestrator, actuator, store, _ = _build(actuator=_Actuator(volume=65))

    async def scenario():
        await orchestrator.enable(Feature.AUDIO)
        assert actuator.muted
        assert store.document.original_state.volume_level == 65
        actuator.volume = 0
        await orchestrator.disable(Feature.AUDIO)

    asyncio.run(scenario())

    assert not actuator.muted
    assert actuator.volume == 65
    assert actuator.called("unmute_audio") == [("unmute_audio", 65)]


def test_disable_audio_without_capture_only_unmutes():
    orchestrator, actuator, _, _ = _build(actuator=_Actuator(fail={"read_volume"}))

    async def scenario():
        enabled = await orchestrator.enable(Feature.AUDIO)
        assert enabled.success
        assert orchestrator.get_original_state().volume_level is None
        return await orchestrator.disable(Feature.AUDIO)

    result = asyncio.run(scenario())

    assert result.success
    assert actuator.called("unmute_audio") == [("unmute_audio", None)]


def test_toggle_all_from_all_off_enables_everything(tmp_path):
    orchestrator, _, _, _ = _build(fallback_wallpaper=str(_wallpaper(tmp_path)))

    result = asyncio.run(orchestrator.toggle_all())

    assert result.success
    assert result.counts == Counts(5, 5)
    assert len(orchestrator.get_state().active_features()) == 5


def test_toggle_all_mixed_never_disables(tmp_path):
    orchestrator, actuator, _, _ = _build(fallback_wallpaper=str(_wallpaper(tmp_path)))

    async def scenario():
        await orchestrator.enable(Feature.ICONS)
        await orchestrator.enable(Feature.AUDIO)
        return await orchestrator.toggle_all()

    result = asyncio.run(scenario())

    assert result.counts == Counts(3, 3)
    assert orchestrator.get_state().icons_hidden
    assert orchestrator.get_state().audio_muted
    assert actuator.called("show_icons") == []
    assert actuator.called("unmute_audio") == []


def test_toggle_all_from_all_on_disables_everything(tmp_path):
    orchestrator, _, _, _ = _build(fallback_wallpaper=str(_wallpaper(tmp_path)))

    async def scenario():
        await orchestrator.toggle_all()
        return await orchestrator.toggle_all()

    result = asyncio.run(scenario())

    assert result.success
    assert orchestrator.get_state().active_features() == []


def test_toggle_all_one_failure_does_not_stop_others(tmp_path):
    orchestrator, _, _, _ = _build(
        actuator=_Actuator(fail={"disable_notifications"}),
        fallback_wallpaper=str(_wallpaper(tmp_path)),
    )

    result = asyncio.run(orchestrator.toggle_all())

    assert not result.success
    assert result.counts == Counts(4, 5)
    assert "notifications" in result.error
    state = orchestrator.get_state()
    assert state.icons_hidden and state.windows_minimized and state.audio_muted
    assert not state.notifications_disabled


def test_restore_all_skips_windows(tmp_path):
    orchestrator, actuator, _, _ = _build(fallback_wallpaper=str(_wallpaper(tmp_path)))

    async def scenario():
        await orchestrator.toggle_all()
        return await orchestrator.restore_all()

    result = asyncio.run(scenario())

    assert result.success
    assert result.counts == Counts(4, 4)
    assert orchestrator.get_state().active_features() == [Feature.WINDOWS]
    assert actuator.called("restore_windows") == []
    assert actuator.wallpaper == "/orig.jpg"


def test_restore_all_logs_failures_without_raising():
    orchestrator, _, _, _ = _build(actuator=_Actuator(fail={"show_icons"}))

    async def scenario():
        await orchestrator.enable(Feature.ICONS)
        return await orchestrator.restore_all()

    result = asyncio.run(scenario())

    assert not result.success
    assert orchestrator.get_state().icons_hidden


def test_permission_prompt_shown_once_per_session():
    actuator = _Actuator(window_error=PermissionDenied())
    orchestrator, _, _, ui = _build(actuator=actuator)

    async def scenario():
        first = await orchestrator.enable(Feature.WINDOWS)
        second = await orchestrator.enable(Feature.WINDOWS)
        return first, second

    first, second = asyncio.run(scenario())

    assert first.error_code == ErrorKind.PERMISSION_DENIED
    assert second.error_code == ErrorKind.PERMISSION_DENIED
    assert ui.prompts == 1
    assert not orchestrator.get_state().windows_minimized


def test_save_settings_persists_with_captures():
    store = _Store(Document(original_state=OriginalState(volume_level=30)))
    orchestrator, _, _, _ = _build(store=store)

    asyncio.run(orchestrator.save_settings(Settings(auto_restore=False, start_minimized=True)))

    assert store.saves[-1] == {
        "originalState": {"volumeLevel": 30},
        "settings": {"autoRestore": False, "startMinimized": True},
    }
    assert orchestrator.get_settings().auto_restore is False


def test_restore_persisted_undoes_crashed_session():
    store = _Store(Document(original_state=OriginalState(wallpaper_path="/orig.jpg", volume_level=55)))
    actuator = _Actuator(wallpaper="/slides.png")
    orchestrator, _, _, _ = _build(actuator=actuator, store=store)

    result = asyncio.run(orchestrator.restore_persisted())

    assert result.success
    assert actuator.wallpaper == "/orig.jpg"
    assert actuator.volume == 55
    assert store.document.original_state == OriginalState()


def test_state_copies_are_detached():
    orchestrator, _, _, _ = _build()

    state = orchestrator.get_state()
    state.icons_hidden = True

    assert not orchestrator.get_state().icons_hidden


def test_audio_capture_happens_once():
    orchestrator, actuator, store, _ = _build(actuator=_Actuator(volume=70))

    async def scenario():
        await orchestrator.enable(Feature.AUDIO)
        actuator.volume = 15
        await orchestrator.enable(Feature.AUDIO)

    asyncio.run(scenario())

    assert orchestrator.get_original_state().volume_level == 70
    assert store.document.original_state.volume_level == 70
    assert len(actuator.called("read_volume")) == 1


def test_zero_windows_leaves_flag_off():
    orchestrator, _, _, ui = _build(actuator=_Actuator(window_error=NoWindowsFound()))

    result = asyncio.run(orchestrator.enable(Feature.WINDOWS))

    assert not result.success
    assert result.error_code == ErrorKind.NO_WINDOWS_FOUND
    assert not orchestrator.get_state().windows_minimized
    assert ui.prompts == 0


def test_toggle_single_feature():
    orchestrator, actuator, _, _ = _build()

    async def scenario():
        await orchestrator.toggle(Feature.NOTIFICATIONS)
        assert orchestrator.get_state().notifications_disabled
        await orchestrator.toggle(Feature.NOTIFICATIONS)

    asyncio.run(scenario())

    assert not orchestrator.get_state().notifications_disabled
    assert [c[0] for c in actuator.calls] == ["disable_notifications", "enable_notifications"]


def test_disable_all_leaves_presentation_mode_from_mixed_state(tmp_path):
    actuator = _Actuator(fail={"hide_icons"}, window_error=NoWindowsFound())
    orchestrator, _, _, _ = _build(actuator=actuator, fallback_wallpaper=str(_wallpaper(tmp_path)))

    async def scenario():
        for _ in range(3):
            await orchestrator.toggle_all()
        assert orchestrator.get_state().wallpaper_changed
        return await orchestrator.disable_all()

    result = asyncio.run(scenario())

    assert result.success
    assert result.counts == Counts(3, 3)
    assert orchestrator.get_state().active_features() == []
    assert actuator.wallpaper == "/orig.jpg"
    assert not actuator.muted
