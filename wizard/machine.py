# wizard/machine.py
"""
Pure wizard state machine.

`transition(state, event)` never mutates its input and never touches the
host; the Textual screen feeds it key events and redraws from the result.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Callable, Optional, Tuple, Union

from state import (
    Branch, Configuration, DEFAULT_HOSTNAME, Edition, Filesystem, InstallConfig,
)
from validators import (
    clamp_index, resolve_hostname, validate_disk, validate_password, validate_username,
)


class Stage(IntEnum):
    WELCOME = 0
    USERNAME = 1
    PASSWORD = 2
    HOSTNAME = 3
    EDITION = 4
    BRANCH = 5
    FILESYSTEM = 6
    PARTITION_MODE = 7
    DISK = 8
    SUMMARY = 9
    INSTALL = 10    # terminal: hand off to the pipeline


# -- Stage definitions -------------------------------------------------------

@dataclass(frozen=True)
class InfoStage:
    title: str


@dataclass(frozen=True)
class TextStage:
    title: str
    field: str
    prompt: str
    validator: Optional[Callable[[str], Tuple[bool, str]]] = None
    masked: bool = False
    blank_means_default: bool = False


@dataclass(frozen=True)
class ListStage:
    title: str
    field: str
    options: Tuple[Tuple[object, str], ...]
    preview: bool = False

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(label for _, label in self.options)


EDITION_OPTIONS = (
    (Edition.OFFICIAL, "Official (KDE Plasma + SDDM)"),
    (Edition.GNOME, "Gnome (GNOME + GDM3)"),
    (Edition.XFCE, "XFCE (XFCE + LightDM)"),
    (Edition.BLUE, "Blue (Custom Environment)"),
    (Edition.HYDRA, "Hydra (Custom Look)"),
    (Edition.CYBERSECURITY, "Cybersecurity (With Tools)"),
    (Edition.WAYFIRE, "Wayfire (Wayfire + SDDM)"),
    (Edition.ATOMIC, "Atomic (With Hammer)"),
)

BRANCH_OPTIONS = (
    (Branch.STABLE, "Stable (trixie)"),
    (Branch.TESTING, "Testing (forky)"),
    (Branch.UNSTABLE, "Unstable (sid)"),
)

FILESYSTEM_OPTIONS = (
    (Filesystem.BTRFS, "Btrfs"),
    (Filesystem.EXT4, "Ext4"),
    (Filesystem.ZFS, "Zfs"),
)

PARTITION_OPTIONS = (
    (False, "Automatic Partitioning"),
    (True, "Manual Partitioning"),
)

StageSpec = Union[InfoStage, TextStage, ListStage]

STAGES = {
    Stage.WELCOME: InfoStage("Welcome"),
    Stage.USERNAME: TextStage("User Creation", "username", "Enter username",
                              validator=validate_username),
    Stage.PASSWORD: TextStage("Password", "password", "Enter password",
                              validator=validate_password, masked=True),
    Stage.HOSTNAME: TextStage("Hostname", "hostname", "Enter hostname",
                              blank_means_default=True),
    Stage.EDITION: ListStage("Select Edition", "edition", EDITION_OPTIONS, preview=True),
    Stage.BRANCH: ListStage("Select Debian Branch", "branch", BRANCH_OPTIONS),
    Stage.FILESYSTEM: ListStage("Select Filesystem", "filesystem", FILESYSTEM_OPTIONS),
    Stage.PARTITION_MODE: ListStage("Partitioning Mode", "manual_partition",
                                    PARTITION_OPTIONS),
    Stage.DISK: TextStage("Disk Selection", "disk", "Enter disk (e.g., /dev/sda)",
                          validator=validate_disk),
    Stage.SUMMARY: InfoStage("Summary"),
}


# -- Events ------------------------------------------------------------------

@dataclass(frozen=True)
class Confirm:
    pass


@dataclass(frozen=True)
class Navigate:
    delta: int    # -1 previous, +1 next, 0 pin the implicit highlight


@dataclass(frozen=True)
class CharInput:
    char: str


@dataclass(frozen=True)
class DeleteChar:
    pass


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class PreviewShown:
    pass


Event = Union[Confirm, Navigate, CharInput, DeleteChar, Quit, PreviewShown]


# -- State -------------------------------------------------------------------

@dataclass(frozen=True)
class WizardState:
    stage: Stage = Stage.WELCOME
    username: str = ""
    password: str = ""
    hostname: str = ""
    edition: Optional[Edition] = None
    branch: Optional[Branch] = None
    filesystem: Optional[Filesystem] = None
    manual_partition: bool = False
    disk: str = ""
    cursor: Optional[int] = None
    preview_pending: bool = False
    aborted: bool = False
    default_hostname: str = DEFAULT_HOSTNAME

    @property
    def spec(self) -> Optional[StageSpec]:
        return STAGES.get(self.stage)

    @property
    def finished(self) -> bool:
        return self.stage == Stage.INSTALL

    @property
    def highlighted(self) -> int:
        """Index drawn as selected; an unset cursor shows the first option."""
        return self.cursor if self.cursor is not None else 0

    def accepts_text(self) -> bool:
        return isinstance(self.spec, TextStage)

    def configuration(self) -> Configuration:
        return Configuration(
            username=self.username,
            password=self.password,
            hostname=self.hostname,
            edition=self.edition,
            branch=self.branch,
            filesystem=self.filesystem,
            manual_partition=self.manual_partition,
            disk=self.disk,
        )

    def install_config(self) -> InstallConfig:
        if not self.finished:
            raise ValueError(f"wizard not finished (stage {self.stage.name})")
        return self.configuration().freeze()


def initial_state(default_hostname: str = DEFAULT_HOSTNAME) -> WizardState:
    return WizardState(default_hostname=default_hostname)


# -- Transitions -------------------------------------------------------------

def _advance(state: WizardState, **changes) -> WizardState:
    return replace(state, stage=Stage(state.stage + 1), cursor=None, **changes)


def _confirm(state: WizardState) -> WizardState:
    spec = state.spec
    if isinstance(spec, InfoStage):
        return _advance(state)

    if isinstance(spec, TextStage):
        value = getattr(state, spec.field)
        if spec.blank_means_default:
            return _advance(state, **{spec.field: resolve_hostname(value, state.default_hostname)})
        if spec.validator is not None:
            ok, _ = spec.validator(value)
            if not ok:
                return state
        return _advance(state)

    if isinstance(spec, ListStage):
        if state.cursor is None or not 0 <= state.cursor < len(spec.options):
            return state
        value, _ = spec.options[state.cursor]
        changes = {spec.field: value}
        if spec.preview:
            changes["preview_pending"] = True
        return _advance(state, **changes)

    return state


def _navigate(state: WizardState, delta: int) -> WizardState:
    spec = state.spec
    if not isinstance(spec, ListStage):
        return state
    return replace(state, cursor=clamp_index(state.highlighted + delta, len(spec.options)))


def _edit_text(state: WizardState, event: Event) -> WizardState:
    spec = state.spec
    if not isinstance(spec, TextStage):
        return state
    value = getattr(state, spec.field)
    if isinstance(event, CharInput):
        value += event.char
    else:
        value = value[:-1]
    return replace(state, **{spec.field: value})


def transition(state: WizardState, event: Event) -> WizardState:
    """Return the state that follows `event`. Terminal and aborted states absorb everything."""
    if state.aborted or state.finished:
        return state
    if isinstance(event, Quit):
        return replace(state, aborted=True)
    if isinstance(event, PreviewShown):
        return replace(state, preview_pending=False)
    if isinstance(event, Confirm):
        return _confirm(state)
    if isinstance(event, Navigate):
        return _navigate(state, event.delta)
    if isinstance(event, (CharInput, DeleteChar)):
        return _edit_text(state, event)
    return state
