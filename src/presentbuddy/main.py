#!/usr/bin/env python3
"""PresentBuddy: press the hotkey to toggle every presentation aid at once"""

from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from functools import partial
import logging
import signal
import threading

import typer

from .adapters.storage import JsonStore
from .adapters.ui_feedback import UIFeedbackAdapter
from .async_bridge import get_async_bridge
from .config import config
from .core.dispatcher import PlatformDispatcher
from .core.models import Feature, OperationResult
from .core.orchestrator import FeatureOrchestrator
from .logging_setup import configure_logging
from .platform_factory import get_actuator
from .platform_utils import IS_WINDOWS, print_platform_info

logger = logging.getLogger(__name__)


class PresentBuddy:
    """Main application - global hotkey bound to toggle_all"""

    def __init__(self, actuator=None, store=None, ui=None):
        config.create_dirs()
        self.ui = ui or UIFeedbackAdapter()
        self.dispatcher = PlatformDispatcher(actuator or get_actuator())
        self.orchestrator = FeatureOrchestrator(
            self.dispatcher,
            store or JsonStore(),
            self.ui,
            fallback_wallpaper=config.DEFAULT_WALLPAPER,
        )
        self.bridge = get_async_bridge()
        self.hotkey = None
        self._shutdown_event = threading.Event()

    def hotkey_bindings(self) -> dict:
        """Map configured hotkeys to actions; empty hotkeys are left unbound."""
        bindings = {
            config.HOTKEY: self.on_hotkey,
            config.EXIT_HOTKEY: self.on_exit_hotkey,
        }
        for feature in Feature:
            hotkey = config.FEATURE_HOTKEYS.get(feature.value)
            if hotkey:
                bindings[hotkey] = partial(self.on_feature_hotkey, feature)
        return {hotkey: action for hotkey, action in bindings.items() if hotkey}

    # Hotkey actions (called from the listener thread)

    def on_hotkey(self) -> Future:
        """Toggle all features"""
        print("⏯ Toggling...")
        return self._submit(self.orchestrator.toggle_all())

    def on_feature_hotkey(self, feature: Feature) -> Future:
        """Toggle a single feature"""
        print(f"⏯ Toggling {feature.value}...")
        return self._submit(self.orchestrator.toggle(feature))

    def on_exit_hotkey(self) -> Future:
        """Leave presentation mode, whatever is currently on"""
        print("⏹ Leaving presentation mode...")
        return self._submit(self.orchestrator.disable_all())

    def _submit(self, coro) -> Future:
        future = self.bridge.submit(coro)
        future.add_done_callback(self._report_toggle)
        return future

    def _report_toggle(self, future: Future):
        try:
            result: OperationResult = future.result()
        except Exception as e:
            logger.exception("Hotkey action crashed")
            self.ui.notify("❌ Error", str(e)[:50])
            return

        active = [f.value for f in self.orchestrator.get_state().active_features()]
        status = ", ".join(active) if active else "nothing"
        if result.success:
            print(f"✓ Active: {status}")
            self.ui.notify("PresentBuddy", f"Active: {status}")
        else:
            print(f"⚠ {result.error}")
            self.ui.notify("⚠ PresentBuddy", result.error or "Toggle failed")

    def run(self):
        """Run the application"""
        from .hotkey_handler import HotkeyHandler

        print("\n" + "=" * 50)
        print("🎬 PresentBuddy")
        print("=" * 50)
        print(f"Platform: {self.dispatcher.platform_name}")
        print(f"Hotkey: {config.HOTKEY}  (leave: {config.EXIT_HOTKEY})")
        print("\nPress hotkey to toggle presentation mode")
        print("Press Ctrl+C to quit")
        print("=" * 50 + "\n")

        self.hotkey = HotkeyHandler(self.hotkey_bindings())
        self.hotkey.start()
        settings = self.orchestrator.get_settings()
        if not settings.start_minimized:
            self.ui.notify("PresentBuddy Ready", f"Press {config.HOTKEY}")

        try:
            if IS_WINDOWS:
                self._shutdown_event.wait()
            else:
                while not self._shutdown_event.is_set():
                    signal.pause()
        except KeyboardInterrupt:
            pass

        self.shutdown()

    def restore_once(self) -> bool:
        """Undo captures persisted by a previous session, then exit."""
        result = self.bridge.run_sync(
            self.orchestrator.restore_persisted(), timeout=config.SHUTDOWN_TIMEOUT
        )
        if result.success:
            print(f"✓ Restored {result.counts}")
        else:
            print(f"⚠ {result.error}")
        self.bridge.stop()
        return result.success

    def shutdown(self):
        """Clean shutdown, restoring the desktop when auto-restore is on"""
        print("\nShutting down...")
        self._shutdown_event.set()
        if self.hotkey:
            self.hotkey.stop()

        if self.orchestrator.get_settings().auto_restore:
            try:
                result = self.bridge.run_sync(
                    self.orchestrator.restore_all(), timeout=config.SHUTDOWN_TIMEOUT
                )
                if not result.success:
                    print(f"⚠ {result.error}")
            except FutureTimeoutError:
                logger.error("Restore timed out after %ss", config.SHUTDOWN_TIMEOUT)

        self.bridge.stop()
        print("✓ Done")

    def request_shutdown(self):
        """Request application shutdown (thread-safe)"""
        self._shutdown_event.set()


def run(
    restore: bool = typer.Option(
        False, "--restore", help="Restore wallpaper and volume left by a previous session, then exit"
    ),
    info: bool = typer.Option(False, "--info", help="Print platform information and exit"),
) -> None:
    """PresentBuddy desktop presentation mode."""
    configure_logging()

    if info:
        print_platform_info()
        return

    app = PresentBuddy()
    if restore:
        raise typer.Exit(0 if app.restore_once() else 1)

    def signal_handler(sig, frame):
        app.request_shutdown()

    signal.signal(signal.SIGINT, signal_handler)
    if not IS_WINDOWS:
        signal.signal(signal.SIGTERM, signal_handler)

    app.run()


def main():
    typer.run(run)


if __name__ == "__main__":
    main()
