# settings.py
from __future__ import annotations
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional

import yaml

from errors import SettingsError
from logger import log

SETTINGS_FILE = Path("/etc/hackeros-installer/settings.yaml")
SETTINGS_ENV = "HACKEROS_INSTALLER_SETTINGS"

BLUE_RELEASE = "https://github.com/HackerOS-Linux-System/Blue-Environment/releases/download/v0.1"
HAMMER_RELEASE = "https://github.com/HackerOS-Linux-System/hammer/releases/download/v0.5"


@dataclass
class InstallerSettings:
    """Host-side knobs for the installer. Everything here has a working default."""

    target_root: str = "/mnt"
    sources_list: str = "/etc/apt/sources.list"
    mirror_url: str = "http://deb.debian.org/debian"
    default_hostname: str = "hackeros"

    asset_dir: str = "/usr/share/HackerOS-Installer"
    self_installed_files: List[str] = field(default_factory=lambda: [
        "/usr/bin/HackerOS-Installer",
        "/etc/profile.d/HackerOS-Installer.sh",
    ])

    boot_size: str = "512M"
    zfs_pool: str = "hackeros"
    kernel_packages: List[str] = field(default_factory=lambda: [
        "linux-image-amd64", "grub-efi-amd64",
    ])
    base_packages: List[str] = field(default_factory=lambda: ["sudo"])
    efivars_dir: str = "/sys/firmware/efi/efivars"
    bootloader_id: str = "HackerOS"

    blue_release_url: str = BLUE_RELEASE
    blue_session_url: str = (
        "https://raw.githubusercontent.com/HackerOS-Linux-System/"
        "Blue-Environment/main/Blue-Environment.desktop"
    )
    hammer_release_url: str = HAMMER_RELEASE
    hydra_repo_url: str = "https://github.com/HackerOS-Linux-System/hydra-look-and-feel.git"
    hydra_clone_dir: str = "/tmp/hydra-look-and-feel"

    @property
    def overlay_dir(self) -> Path:
        return Path(self.asset_dir) / "official"

    @property
    def images_dir(self) -> Path:
        return Path(self.asset_dir) / "images"


def load_settings(path: Optional[str] = None) -> InstallerSettings:
    """
    Build settings from defaults plus an optional YAML override file.
    Lookup order: explicit `path`, $HACKEROS_INSTALLER_SETTINGS, SETTINGS_FILE.
    A missing file is not an error; a malformed one is.
    """
    candidate = Path(path or os.environ.get(SETTINGS_ENV) or SETTINGS_FILE)
    settings = InstallerSettings()
    if not candidate.exists():
        log.debug("No settings file at %s – using defaults", candidate)
        return settings

    try:
        data = yaml.safe_load(candidate.read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        raise SettingsError(f"Cannot read settings file {candidate}: {e}") from e
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {candidate} must contain a mapping")

    known = {f.name for f in fields(InstallerSettings)}
    for key, value in data.items():
        if key not in known:
            log.warning("Ignoring unknown setting %r in %s", key, candidate)
            continue
        setattr(settings, key, value)
    log.info("Loaded settings from %s", candidate)
    return settings
