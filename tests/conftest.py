# tests/conftest.py
import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import subprocess
from pathlib import Path

import pytest

from errors import CommandError, FetchError
from settings import InstallerSettings
from state import Branch, Edition, Filesystem, InstallConfig
from system.command import CommandRunner


class FakeRunner(CommandRunner):
    """Records every command instead of running it."""

    def __init__(self, target_root, fail_on=None, hooks=None):
        super().__init__(target_root)
        self.calls = []
        self.stdins = []
        self.interactive = []
        self.fail_on = fail_on
        self.hooks = hooks or {}

    def _exec(self, argv, stdin, interactive):
        self.calls.append(list(argv))
        self.stdins.append(stdin)
        self.interactive.append(interactive)
        if self.fail_on and self.fail_on(argv):
            raise CommandError(argv, 1, "simulated failure")
        hook = self.hooks.get(argv[0])
        if hook:
            hook(argv)
        stdout = ""
        if argv[0] == "blkid":
            stdout = "uuid-" + argv[-1].rsplit("/", 1)[-1] + "\n"
        return subprocess.CompletedProcess(argv, 0, stdout, "")

    def programs(self):
        return [c[0] for c in self.calls]

    def chroot_commands(self):
        return [c[-1] for c in self.calls if c[0] == "chroot"]

    def index_of(self, predicate):
        for i, c in enumerate(self.calls):
            if predicate(c):
                return i
        raise AssertionError("no matching call")


class FakeFetcher:
    def __init__(self, fail_on=None):
        self.fetched = []
        self.fail_on = fail_on

    def fetch(self, url, destination):
        if self.fail_on and self.fail_on(url):
            raise FetchError(url, "HTTP 404")
        self.fetched.append((url, destination))
        return Path(destination)


@pytest.fixture
def settings(tmp_path):
    assets = tmp_path / "assets"
    (assets / "official" / "etc").mkdir(parents=True)
    (assets / "official" / "etc" / "issue").write_text("HackerOS\n")
    (assets / "images").mkdir()
    binary = tmp_path / "bin" / "HackerOS-Installer"
    profile = tmp_path / "profile.d" / "HackerOS-Installer.sh"
    for f in (binary, profile):
        f.parent.mkdir(parents=True)
        f.write_text("#!/bin/sh\n")
    return InstallerSettings(
        target_root=str(tmp_path / "mnt"),
        sources_list=str(tmp_path / "apt" / "sources.list"),
        asset_dir=str(assets),
        self_installed_files=[str(binary), str(profile)],
        hydra_clone_dir=str(tmp_path / "hydra-look-and-feel"),
        efivars_dir=str(tmp_path / "no-efivars"),
    )


@pytest.fixture
def runner(settings):
    return FakeRunner(settings.target_root)


@pytest.fixture
def fetcher():
    return FakeFetcher()


def make_config(**overrides):
    values = dict(
        username="alice",
        password="x",
        hostname="hackeros",
        edition=Edition.GNOME,
        branch=Branch.TESTING,
        filesystem=Filesystem.EXT4,
        manual_partition=False,
        disk="/dev/sda",
    )
    values.update(overrides)
    return InstallConfig(**values)


@pytest.fixture
def config():
    return make_config()
