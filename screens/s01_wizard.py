# screens/s01_wizard.py
from __future__ import annotations
from textual import events
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Footer, Static

from logger import log
from widgets.hackeros_header import HackerOSHeader
from wizard.machine import (
    CharInput, Confirm, DeleteChar, ListStage, Navigate, PreviewShown, Quit,
    Stage, transition,
)
from wizard.render import Frame, render

LOGGED_FIELDS = {
    Stage.USERNAME: "username",
    Stage.HOSTNAME: "hostname",
    Stage.EDITION: "edition",
    Stage.BRANCH: "branch",
    Stage.FILESYSTEM: "filesystem",
    Stage.PARTITION_MODE: "manual_partition",
    Stage.DISK: "disk",
}


class WizardScreen(Screen):
    """All ten wizard stages; redrawn from `render()` after every event."""

    BINDINGS = [
        Binding("enter", "confirm", "Confirm", priority=True),
        Binding("up", "move(-1)", "Previous", priority=True),
        Binding("down", "move(1)", "Next", priority=True),
        Binding("backspace", "delete_char", "Delete", show=False, priority=True),
        Binding("escape", "quit_wizard", "Quit", priority=True),
        Binding("ctrl+q", "quit_wizard", "Quit", show=False, priority=True),
    ]

    def compose(self) -> ComposeResult:
        yield HackerOSHeader()
        with Vertical(id="content"):
            yield Static("", id="step_label")
            yield Static("", id="stage_title", classes="title")
            yield Static("", id="stage_body")
            yield Static("", id="options")
            yield Static("", id="preview")
        yield Static("", id="hint")
        yield Footer()

    def on_mount(self) -> None:
        self.redraw()

    # -- Drawing ---------------------------------------------------------------

    def _options_markup(self, frame: Frame) -> str:
        rows = []
        for i, label in enumerate(frame.options):
            if i == frame.highlighted:
                rows.append(f"[bold green]>> {label}[/bold green]")
            else:
                rows.append(f"   {label}")
        return "\n".join(rows)

    def redraw(self) -> None:
        frame = render(self.app.wizard, self.app.settings.images_dir)
        self.query_one("#step_label", Static).update(frame.step_label)
        self.query_one("#stage_title", Static).update(frame.title)
        self.query_one("#stage_body", Static).update("\n".join(frame.lines))
        self.query_one("#options", Static).update(self._options_markup(frame))
        self.query_one("#hint", Static).update(frame.hint)
        preview = self.query_one("#preview", Static)
        if frame.preview:
            preview.update(f"[bold]Edition Preview[/bold]\nPreviewing image: {frame.preview}")
            # one-shot: shown on this frame only
            self.app.wizard = transition(self.app.wizard, PreviewShown())
        else:
            preview.update("")

    # -- Events ----------------------------------------------------------------

    def send(self, *wizard_events) -> None:
        before = self.app.wizard
        after = before
        for ev in wizard_events:
            after = transition(after, ev)
        self.app.wizard = after

        if after.aborted:
            log.info("Wizard quit on stage %s – no changes made", before.stage.name)
            self.app.exit(None)
            return
        if after.stage != before.stage:
            self._log_transition(before.stage, after)
        if after.finished:
            config = after.install_config()
            log.info("Wizard complete – handing over: %s", config.public_dict())
            self.app.exit(config)
            return
        self.redraw()

    def _log_transition(self, left: Stage, state) -> None:
        if left == Stage.PASSWORD:
            log.info("Wizard: password set")
        elif left in LOGGED_FIELDS:
            field = LOGGED_FIELDS[left]
            log.info("Wizard: %s = %s", field, getattr(state, field))
        else:
            log.info("Wizard: %s -> %s", left.name, state.stage.name)

    def action_confirm(self) -> None:
        state = self.app.wizard
        if isinstance(state.spec, ListStage) and state.cursor is None:
            # Enter on the implicitly highlighted first row picks it
            self.send(Navigate(0), Confirm())
        else:
            self.send(Confirm())

    def action_move(self, delta: int) -> None:
        self.send(Navigate(delta))

    def action_delete_char(self) -> None:
        self.send(DeleteChar())

    def action_quit_wizard(self) -> None:
        self.send(Quit())

    def on_key(self, event: events.Key) -> None:
        if not (event.is_printable and event.character):
            return
        event.stop()
        if not self.app.wizard.accepts_text() and event.character == "q":
            self.send(Quit())
        else:
            self.send(CharInput(event.character))
