# provision/partition.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple

from state import Filesystem

BOOT_FSTYPE = "vfat"

FSTAB_TYPES = {
    Filesystem.BTRFS: "btrfs",
    Filesystem.EXT4: "ext4",
    Filesystem.ZFS: "zfs",
}


@dataclass(frozen=True)
class PartitionLayout:
    disk: str
    boot: str    # EFI system partition, mounted at /boot
    root: str


def partition_device(disk: str, number: int) -> str:
    """/dev/sda -> /dev/sda1, /dev/nvme0n1 -> /dev/nvme0n1p1."""
    if disk[-1:].isdigit():
        return f"{disk}p{number}"
    return f"{disk}{number}"


def layout_for(disk: str) -> PartitionLayout:
    return PartitionLayout(
        disk=disk,
        boot=partition_device(disk, 1),
        root=partition_device(disk, 2),
    )


def sfdisk_script(boot_size: str) -> str:
    """GPT: ESP of `boot_size` first, Linux root on the rest."""
    return (
        "label: gpt\n"
        f",{boot_size},U\n"
        ",,L\n"
    )


def format_command(
    filesystem: Filesystem, device: str, zfs_pool: str
) -> Tuple[str, List[str]]:
    if filesystem is Filesystem.BTRFS:
        return "mkfs.btrfs", ["-f", device]
    if filesystem is Filesystem.EXT4:
        return "mkfs.ext4", ["-F", device]
    # legacy mountpoint keeps the pool under plain mount/umount control
    return "zpool", ["create", "-f", "-O", "mountpoint=legacy", zfs_pool, device]


def boot_format_command(device: str) -> Tuple[str, List[str]]:
    return "mkfs.fat", ["-F", "32", device]


def root_mount_source(
    filesystem: Filesystem, layout: PartitionLayout, zfs_pool: str
) -> Tuple[str, Optional[str]]:
    """(source, fstype) for mounting the new root."""
    if filesystem is Filesystem.ZFS:
        return zfs_pool, "zfs"
    return layout.root, None


@dataclass(frozen=True)
class FstabEntry:
    spec: str
    mountpoint: str
    fstype: str
    options: str = "defaults"
    dump: int = 0
    passno: int = 0

    def line(self) -> str:
        return f"{self.spec}\t{self.mountpoint}\t{self.fstype}\t{self.options}\t{self.dump}\t{self.passno}"


def render_fstab(entries: List[FstabEntry]) -> str:
    header = "# /etc/fstab: written by HackerOS Installer\n"
    return header + "".join(e.line() + "\n" for e in entries)


def fstab_entries(
    filesystem: Filesystem,
    root_uuid: Optional[str],
    boot_uuid: str,
    zfs_pool: str,
) -> List[FstabEntry]:
    if filesystem is Filesystem.ZFS:
        root = FstabEntry(zfs_pool, "/", "zfs")
    else:
        root = FstabEntry(f"UUID={root_uuid}", "/", FSTAB_TYPES[filesystem],
                          passno=0 if filesystem is Filesystem.BTRFS else 1)
    boot = FstabEntry(f"UUID={boot_uuid}", "/boot", BOOT_FSTYPE, options="umask=0077", passno=2)
    return [root, boot]
