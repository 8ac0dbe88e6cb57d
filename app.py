# app.py
from __future__ import annotations
from typing import Optional

from textual.app import App

from logger import log
from settings import InstallerSettings
from wizard.machine import WizardState, initial_state


class HackerOSInstaller(App):
    """HackerOS Installer wizard. `run()` returns the frozen InstallConfig, or None on quit."""

    CSS = """
    Screen {
        background: $surface;
    }
    .title {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }
    #content {
        margin: 1 2;
        border: round $primary;
        padding: 1 2;
    }
    #step_label {
        color: $text-muted;
    }
    #options {
        margin-top: 1;
    }
    #preview {
        margin-top: 1;
        color: $primary;
    }
    #hint {
        dock: bottom;
        height: 1;
        margin: 0 2;
        color: $text-muted;
    }
    """

    def __init__(self, settings: Optional[InstallerSettings] = None) -> None:
        super().__init__()
        self.settings = settings or InstallerSettings()
        self.wizard: WizardState = initial_state(self.settings.default_hostname)
        log.info("HackerOSInstaller started")

    async def on_mount(self) -> None:
        from screens.s01_wizard import WizardScreen
        await self.push_screen(WizardScreen())
