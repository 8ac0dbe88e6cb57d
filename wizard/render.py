# wizard/render.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from rich.markup import escape

from state import Edition
from wizard.machine import InfoStage, ListStage, Stage, TextStage, WizardState

PREVIEW_IMAGES = {
    Edition.OFFICIAL: "plasma.png",
    Edition.GNOME: "gnome.png",
    Edition.XFCE: "xfce.png",
    Edition.BLUE: "blue.png",
    Edition.HYDRA: "hydra.png",
    Edition.CYBERSECURITY: "cybersecurity.png",
    Edition.WAYFIRE: "wayfire.png",
    Edition.ATOMIC: "atomic.png",
}

DEFAULT_IMAGES_DIR = Path("/usr/share/HackerOS-Installer/images")


@dataclass(frozen=True)
class Frame:
    """Everything the screen needs to draw one wizard stage."""

    title: str
    step_label: str
    lines: List[str] = field(default_factory=list)
    options: List[str] = field(default_factory=list)
    highlighted: Optional[int] = None
    preview: Optional[str] = None
    hint: str = ""


def preview_path(edition: Optional[Edition], images_dir: Path = DEFAULT_IMAGES_DIR) -> Optional[str]:
    if edition is None:
        return None
    return str(images_dir / PREVIEW_IMAGES[edition])


def _summary_lines(state: WizardState) -> List[str]:
    def label(value) -> str:
        return value.value if value is not None else "-"
    return [
        f"Username         : {escape(state.username)}",
        f"Hostname         : {escape(state.hostname)}",
        f"Edition          : {label(state.edition)}",
        f"Branch           : {label(state.branch)}"
        + (f" ({state.branch.codename})" if state.branch else ""),
        f"Filesystem       : {label(state.filesystem)}",
        f"Manual Partition : {'Yes' if state.manual_partition else 'No'}",
        f"Disk             : {escape(state.disk)}",
        "",
        "[bold red]All data on the disk will be erased.[/bold red]",
    ]


def render(state: WizardState, images_dir: Path = DEFAULT_IMAGES_DIR) -> Frame:
    """Project a wizard snapshot into a Frame. Never mutates `state`."""
    spec = state.spec
    step_label = f"Step {int(state.stage) + 1}/{len(Stage) - 1}"
    preview = preview_path(state.edition, images_dir) if state.preview_pending else None

    if isinstance(spec, TextStage):
        value = getattr(state, spec.field)
        shown = "*" * len(value) if spec.masked else escape(value)
        prompt = spec.prompt
        if spec.blank_means_default:
            prompt = f"{prompt} (default: {state.default_hostname})"
        lines = [f"{prompt}: {shown}▏"]
        if spec.validator is not None and not value:
            lines.append("[dim](required)[/dim]")
        return Frame(spec.title, step_label, lines=lines, preview=preview,
                     hint="Type, Backspace to delete, Enter to confirm, Esc to quit")

    if isinstance(spec, ListStage):
        return Frame(spec.title, step_label, options=list(spec.labels),
                     highlighted=state.highlighted, preview=preview,
                     hint="↑/↓ to choose, Enter to confirm, q to quit")

    if state.stage == Stage.SUMMARY:
        return Frame(spec.title, step_label, lines=_summary_lines(state), preview=preview,
                     hint="Press Enter to install, q to quit")

    if isinstance(spec, InfoStage):
        return Frame(spec.title, step_label,
                     lines=["Welcome to HackerOS Installer!", "Press Enter to start."],
                     hint="Enter to start, q to quit")

    return Frame("Installing", "", lines=["Handing over to the installer…"])
