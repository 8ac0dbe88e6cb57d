# errors.py
from __future__ import annotations
from typing import List, Optional


class InstallError(Exception):
    """Base class for every failure that aborts an installation."""


class SettingsError(InstallError):
    """The settings file exists but cannot be used."""


class PreflightError(InstallError):
    """The host is not ready; raised before anything destructive runs."""


class CommandError(InstallError):
    """An external command failed to launch or exited non-zero."""

    def __init__(self, argv: List[str], returncode: Optional[int], stderr: str = ""):
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        if returncode is None:
            msg = f"could not run {argv[0]}"
        else:
            msg = f"{' '.join(argv)} exited with status {returncode}"
        if stderr:
            msg = f"{msg}: {stderr.strip()[-400:]}"
        super().__init__(msg)


class FetchError(InstallError):
    """A download failed (network, HTTP status or local write)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Download of {url} failed: {reason}")


class BuildError(InstallError):
    """The live image build cannot start or did not finish."""
