# provision/pipeline.py
"""
The installation pipeline: a fixed, fail-fast sequence of phases that
turns a blank disk into a bootable HackerOS system.

Every mount is held in an ExitStack, so any failure after mounting
unwinds the mounts (best effort) before the error propagates. Only a
fully successful run unmounts strictly, removes the installer from the
live system and reboots.
"""
from __future__ import annotations
import os
import shutil
from contextlib import ExitStack
from pathlib import Path
from typing import Callable, List, Optional

import yaml

from errors import CommandError, InstallError
from logger import log, log_file_path
from provision.editions import EditionInstaller
from provision.partition import (
    boot_format_command, format_command, fstab_entries, layout_for,
    render_fstab, root_mount_source, sfdisk_script,
)
from settings import InstallerSettings
from state import Filesystem, InstallConfig
from system.command import CommandRunner
from system.fetch import Fetcher
from system.mounts import BIND_SOURCES, bind_target, mounted, zfs_pool

ProgressCallback = Callable[[int, int, str], None]

RECORD_DIR = "var/log/hackeros-installer"
EFIVARS_DIR = "/sys/firmware/efi/efivars"

PHASES = (
    ("Configuring package repository", "configure_repository"),
    ("Partitioning disk", "partition_disk"),
    ("Creating filesystems", "create_filesystems"),
    ("Mounting target", "mount_target"),
    ("Bootstrapping base system", "bootstrap"),
    ("Writing filesystem table", "write_fstab"),
    ("Binding host filesystems", "bind_mounts"),
    ("Installing base packages and user", "setup_base_and_user"),
    ("Setting hostname", "set_hostname"),
    ("Installing edition", "install_edition"),
    ("Installing bootloader", "install_bootloader"),
    ("Recording installation", "write_install_record"),
    ("Cleaning up", "cleanup"),
    ("Rebooting", "reboot"),
)


def sources_line(mirror_url: str, codename: str) -> str:
    return f"deb {mirror_url} {codename} main"


def sudoers_filename(username: str) -> str:
    # sudo skips drop-ins whose names contain '.'
    return username.replace(".", "_")


class InstallationPipeline:
    def __init__(
        self,
        config: InstallConfig,
        settings: InstallerSettings,
        runner: Optional[CommandRunner] = None,
        fetcher: Optional[Fetcher] = None,
        editions: Optional[EditionInstaller] = None,
        progress: Optional[ProgressCallback] = None,
    ):
        self.config = config
        self.settings = settings
        self.runner = runner or CommandRunner(settings.target_root)
        self.fetcher = fetcher or Fetcher()
        self.editions = editions or EditionInstaller(self.runner, self.fetcher, settings)
        self.progress = progress
        self.target = Path(settings.target_root)
        self.layout = layout_for(config.disk)
        self.completed: List[str] = []
        self._mounts: Optional[ExitStack] = None

    # -- Driver ------------------------------------------------------------------

    def run(self) -> None:
        log.info("Starting installation: %s", self.config.public_dict())
        with ExitStack() as mounts:
            self._mounts = mounts
            for index, (title, method) in enumerate(PHASES, 1):
                self._run_phase(index, title, getattr(self, method))
        log.info("Installation finished")

    def _run_phase(self, index: int, title: str, action: Callable[[], None]) -> None:
        log.info("Phase %d/%d: %s", index, len(PHASES), title)
        if self.progress:
            self.progress(index, len(PHASES), title)
        try:
            action()
        except InstallError:
            log.error("Phase '%s' failed", title)
            raise
        except OSError as e:
            log.error("Phase '%s' failed: %s", title, e)
            raise InstallError(f"{title}: {e}") from e
        self.completed.append(title)

    def _hold(self, cm) -> None:
        self._mounts.enter_context(cm)

    def _write(self, path: Path, content: str, mode: Optional[int] = None) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        if mode is not None:
            os.chmod(path, mode)
        log.info("Wrote %s", path)

    # -- Phases ------------------------------------------------------------------

    def configure_repository(self) -> None:
        line = sources_line(self.settings.mirror_url, self.config.branch.codename)
        self._write(Path(self.settings.sources_list), line + "\n")
        self.runner.run("apt-get", ["update"])

    def partition_disk(self) -> None:
        disk = self.config.disk
        if self.config.manual_partition:
            log.info("Handing %s to cfdisk; expecting boot=%s root=%s",
                     disk, self.layout.boot, self.layout.root)
            self.runner.run("cfdisk", [disk], interactive=True)
        else:
            self.runner.run("sfdisk", [disk], stdin=sfdisk_script(self.settings.boot_size))

    def create_filesystems(self) -> None:
        program, args = boot_format_command(self.layout.boot)
        self.runner.run(program, args)
        program, args = format_command(self.config.filesystem, self.layout.root,
                                       self.settings.zfs_pool)
        self.runner.run(program, args)
        if self.config.filesystem is Filesystem.ZFS:
            self._hold(zfs_pool(self.runner, self.settings.zfs_pool))

    def mount_target(self) -> None:
        source, fstype = root_mount_source(self.config.filesystem, self.layout,
                                           self.settings.zfs_pool)
        self._hold(mounted(self.runner, source, str(self.target), fstype=fstype))
        self._hold(mounted(self.runner, self.layout.boot, str(self.target / "boot")))

    def bootstrap(self) -> None:
        self.runner.run("debootstrap", [self.config.branch.codename, str(self.target),
                                        self.settings.mirror_url])

    def write_fstab(self) -> None:
        root_uuid = None
        if self.config.filesystem is not Filesystem.ZFS:
            root_uuid = self.runner.capture("blkid", ["-s", "UUID", "-o", "value", self.layout.root])
        boot_uuid = self.runner.capture("blkid", ["-s", "UUID", "-o", "value", self.layout.boot])
        entries = fstab_entries(self.config.filesystem, root_uuid, boot_uuid,
                                self.settings.zfs_pool)
        self._write(self.target / "etc/fstab", render_fstab(entries))

    def bind_mounts(self) -> None:
        for source in BIND_SOURCES:
            self._hold(mounted(self.runner, source, bind_target(str(self.target), source),
                               bind=True))
        # /sys is bound non-recursively; grub-install needs efivarfs to write the boot entry
        if Path(self.settings.efivars_dir).is_dir():
            self._hold(mounted(self.runner, "efivarfs",
                               bind_target(str(self.target), EFIVARS_DIR), fstype="efivarfs"))
        else:
            log.warning("No EFI variables at %s; the firmware boot entry cannot be written",
                        self.settings.efivars_dir)

    def setup_base_and_user(self) -> None:
        user = self.config.username
        self.runner.run_in_target_root(["apt-get", "update"])
        self.runner.run_in_target_root(["apt-get", "install", "-y",
                                        *self.settings.kernel_packages,
                                        *self.settings.base_packages])
        self.runner.run_in_target_root(["useradd", "-m", "-G", "sudo", "-s", "/bin/bash", user])
        self.runner.run_in_target_root(["chpasswd"], stdin=f"{user}:{self.config.password}\n")
        self._write_sudoers(user)

    def _write_sudoers(self, user: str) -> None:
        name = sudoers_filename(user)
        path = self.target / "etc/sudoers.d" / name
        self._write(path, f"{user} ALL=(ALL) ALL\n", mode=0o440)
        try:
            self.runner.run_in_target_root(["visudo", "-cf", f"/etc/sudoers.d/{name}"])
        except CommandError:
            path.unlink()
            log.error("Rejected sudoers drop-in for %s", user)
            raise

    def set_hostname(self) -> None:
        self._write(self.target / "etc/hostname", self.config.hostname + "\n")

    def install_edition(self) -> None:
        self.editions.install(self.config)

    def install_bootloader(self) -> None:
        self.runner.run_in_target_root([
            "grub-install",
            "--target=x86_64-efi",
            "--efi-directory=/boot",
            f"--bootloader-id={self.settings.bootloader_id}",
            self.config.disk,
        ])
        self.runner.run_in_target_root(["update-grub"])

    def write_install_record(self) -> None:
        record_dir = self.target / RECORD_DIR
        payload = yaml.safe_dump(self.config.public_dict(), default_flow_style=False)
        self._write(record_dir / "install.yaml", payload, mode=0o600)
        log_path = Path(log_file_path())
        if log_path.exists():
            shutil.copy2(log_path, record_dir / log_path.name)

    def cleanup(self) -> None:
        # Strict release: an unmount failure here stops us before uninstall/reboot
        self._mounts.close()
        self.self_uninstall()

    def self_uninstall(self) -> None:
        asset_dir = Path(self.settings.asset_dir)
        if asset_dir.exists():
            shutil.rmtree(asset_dir)
            log.info("Removed %s", asset_dir)
        for name in self.settings.self_installed_files:
            path = Path(name)
            if path.exists() or path.is_symlink():
                path.unlink()
                log.info("Removed %s", path)
            else:
                log.warning("Expected installer file %s is already gone", path)

    def reboot(self) -> None:
        self.runner.run("reboot")
