# provision/editions.py
from __future__ import annotations
import shutil
from pathlib import Path
from typing import Callable, Dict, List

from errors import InstallError
from logger import log
from settings import InstallerSettings
from state import Edition, InstallConfig
from system.command import CommandRunner
from system.fetch import Fetcher

EDITION_PACKAGES: Dict[Edition, List[str]] = {
    Edition.OFFICIAL: ["kde-plasma-desktop", "sddm"],
    Edition.GNOME: ["gnome", "gdm3"],
    Edition.XFCE: ["xfce4", "lightdm"],
    Edition.WAYFIRE: ["wayfire", "sddm"],
    Edition.CYBERSECURITY: ["nmap", "wireshark"],
}

BLUE_COMPONENTS = ("wm", "shell", "launcher", "Desktop", "decorations", "core")
BLUE_DISPLAY_MANAGER = ["sddm"]

HAMMER_COMPONENTS = ("hammer-updater", "hammer-tui", "hammer-core", "hammer-builder")
HAMMER_LIB_DIR = "usr/lib/HackerOS/hammer"
ATOMIC_PACKAGES = ["kde-plasma-desktop", "sddm"]


def copy_tree(src: Path, dst: Path) -> None:
    """Recursive merge-copy of src's contents into dst."""
    try:
        shutil.copytree(src, dst, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise InstallError(f"Copying {src} to {dst} failed: {e}") from e
    log.info("Copied %s -> %s", src, dst)


class EditionInstaller:
    """Installs the chosen desktop edition into the mounted target root."""

    def __init__(
        self,
        runner: CommandRunner,
        fetcher: Fetcher,
        settings: InstallerSettings,
    ):
        self.runner = runner
        self.fetcher = fetcher
        self.settings = settings
        self.target = Path(settings.target_root)
        self._actions: Dict[Edition, Callable[[InstallConfig], None]] = {
            Edition.OFFICIAL: self._install_packages,
            Edition.GNOME: self._install_packages,
            Edition.XFCE: self._install_packages,
            Edition.WAYFIRE: self._install_packages,
            Edition.CYBERSECURITY: self._install_packages,
            Edition.BLUE: self._install_blue,
            Edition.HYDRA: self._install_hydra,
            Edition.ATOMIC: self._install_atomic,
        }

    def install(self, config: InstallConfig) -> None:
        log.info("Installing edition %s", config.edition.value)
        self.copy_base_overlay()
        self._actions[config.edition](config)
        log.info("Edition %s installed", config.edition.value)

    def copy_base_overlay(self) -> None:
        copy_tree(self.settings.overlay_dir, self.target)

    def apt_install(self, packages: List[str]) -> None:
        self.runner.run_in_target_root(["apt-get", "install", "-y", *packages])

    def _mkdir(self, path: Path) -> Path:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InstallError(f"Cannot create {path}: {e}") from e
        return path

    # -- Package editions ------------------------------------------------------

    def _install_packages(self, config: InstallConfig) -> None:
        self.apt_install(EDITION_PACKAGES[config.edition])

    # -- Blue: prebuilt binaries ----------------------------------------------

    def _install_blue(self, config: InstallConfig) -> None:
        release = self.settings.blue_release_url.rstrip("/")
        home_rel = f"home/{config.username}/.hackeros/Blue-Environment"
        home = self._mkdir(self.target / home_rel)
        for name in BLUE_COMPONENTS:
            self.fetcher.fetch(f"{release}/{name}", str(home / name))

        self._mkdir(self.target / "usr/bin")
        self.fetcher.fetch(f"{release}/Blue-Environment",
                           str(self.target / "usr/bin/Blue-Environment"))
        self._mkdir(self.target / "usr/share/wayland-sessions")
        self.fetcher.fetch(self.settings.blue_session_url,
                           str(self.target / "usr/share/wayland-sessions/Blue-Environment.desktop"))

        # downloads land as root; hand the per-user tree back to its owner
        self.runner.run_in_target_root([
            "chown", "-R", f"{config.username}:{config.username}",
            f"/home/{config.username}/.hackeros",
        ])
        self.apt_install(BLUE_DISPLAY_MANAGER)

    # -- Hydra: configuration repository ---------------------------------------

    def _install_hydra(self, config: InstallConfig) -> None:
        clone_dir = Path(self.settings.hydra_clone_dir)
        if clone_dir.exists():
            log.info("Removing stale clone at %s", clone_dir)
            shutil.rmtree(clone_dir)
        self.runner.run("git", ["clone", "--depth", "1",
                                self.settings.hydra_repo_url, str(clone_dir)])
        copy_tree(clone_dir / "files", self.target)
        shutil.rmtree(clone_dir)
        log.info("Removed clone at %s", clone_dir)

    # -- Atomic: hammer ---------------------------------------------------------

    def _install_atomic(self, config: InstallConfig) -> None:
        release = self.settings.hammer_release_url.rstrip("/")
        self._mkdir(self.target / "usr/bin")
        self.fetcher.fetch(f"{release}/hammer", str(self.target / "usr/bin/hammer"))

        lib_dir = self._mkdir(self.target / HAMMER_LIB_DIR)
        for name in HAMMER_COMPONENTS:
            self.fetcher.fetch(f"{release}/{name}", str(lib_dir / name))

        self.apt_install(ATOMIC_PACKAGES)
        self.runner.run_in_target_root(["hammer", "setup"])
