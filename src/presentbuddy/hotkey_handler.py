"""Global hotkey handling for PresentBuddy"""

import logging

from pynput import keyboard

logger = logging.getLogger(__name__)


class HotkeyHandler:
    """Fire a callback when one of the bound global hotkeys is pressed.

    Hotkeys use pynput syntax, e.g. ``<ctrl>+<alt>+p``.
    """

    def __init__(self, bindings: dict):
        self.bindings = {hotkey: callback for hotkey, callback in bindings.items() if hotkey}
        self.listener = None

    def start(self):
        """Start the global hotkey listener"""
        try:
            self.listener = keyboard.GlobalHotKeys(
                {hotkey: self._guard(hotkey, callback) for hotkey, callback in self.bindings.items()}
            )
        except ValueError as e:
            logger.error("Invalid hotkey in %s: %s", sorted(self.bindings), e)
            raise
        self.listener.start()

    def stop(self):
        """Stop the listener"""
        if self.listener:
            self.listener.stop()
            self.listener = None

    @staticmethod
    def _guard(hotkey, callback):
        def fire():
            try:
                callback()
            except Exception:
                # Keep the listener thread alive
                logger.exception("Hotkey %s callback failed", hotkey)

        return fire
