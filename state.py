# state.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional

DEFAULT_HOSTNAME = "hackeros"


class Edition(Enum):
    OFFICIAL = "Official"
    GNOME = "Gnome"
    XFCE = "Xfce"
    BLUE = "Blue"
    HYDRA = "Hydra"
    CYBERSECURITY = "Cybersecurity"
    WAYFIRE = "Wayfire"
    ATOMIC = "Atomic"


class Branch(Enum):
    STABLE = "Stable"
    TESTING = "Testing"
    UNSTABLE = "Unstable"

    @property
    def codename(self) -> str:
        return BRANCH_CODENAMES[self]


BRANCH_CODENAMES = {
    Branch.STABLE: "trixie",
    Branch.TESTING: "forky",
    Branch.UNSTABLE: "sid",
}


class Filesystem(Enum):
    BTRFS = "Btrfs"
    EXT4 = "Ext4"
    ZFS = "Zfs"


@dataclass
class Configuration:
    # Steps 1-3
    username: str = ""
    password: str = ""
    hostname: str = ""

    # Steps 4-7
    edition: Optional[Edition] = None
    branch: Optional[Branch] = None
    filesystem: Optional[Filesystem] = None
    manual_partition: bool = False

    # Step 8
    disk: str = ""

    def freeze(self) -> "InstallConfig":
        """Snapshot for the pipeline. Only call once the wizard has gated every field."""
        return InstallConfig(
            username=self.username,
            password=self.password,
            hostname=self.hostname or DEFAULT_HOSTNAME,
            edition=self.edition,
            branch=self.branch,
            filesystem=self.filesystem,
            manual_partition=self.manual_partition,
            disk=self.disk,
        )


@dataclass(frozen=True)
class InstallConfig:
    """Read-only configuration handed from the wizard to the pipeline."""

    username: str
    password: str
    hostname: str
    edition: Edition
    branch: Branch
    filesystem: Filesystem
    manual_partition: bool
    disk: str

    def public_dict(self) -> dict:
        """Everything except the password, with enums flattened to their labels."""
        data = asdict(self)
        data.pop("password")
        for key in ("edition", "branch", "filesystem"):
            data[key] = data[key].value
        data["codename"] = self.branch.codename
        return data
