# tests/test_partition.py
import pytest

from provision.partition import (
    boot_format_command, format_command, fstab_entries, layout_for,
    partition_device, render_fstab, root_mount_source, sfdisk_script,
)
from state import Filesystem


@pytest.mark.parametrize("disk,expected", [
    ("/dev/sda", "/dev/sda2"),
    ("/dev/vdb", "/dev/vdb2"),
    ("/dev/nvme0n1", "/dev/nvme0n1p2"),
    ("/dev/mmcblk0", "/dev/mmcblk0p2"),
])
def test_partition_device_naming(disk, expected):
    assert partition_device(disk, 2) == expected


def test_layout_puts_boot_first():
    layout = layout_for("/dev/sda")
    assert layout.boot == "/dev/sda1"
    assert layout.root == "/dev/sda2"


def test_sfdisk_script_defines_gpt_esp_and_root():
    script = sfdisk_script("512M")
    lines = script.strip().splitlines()
    assert lines[0] == "label: gpt"
    assert lines[1] == ",512M,U"
    assert lines[2] == ",,L"


@pytest.mark.parametrize("fs,program", [
    (Filesystem.BTRFS, "mkfs.btrfs"),
    (Filesystem.EXT4, "mkfs.ext4"),
    (Filesystem.ZFS, "zpool"),
])
def test_format_command_per_filesystem(fs, program):
    prog, args = format_command(fs, "/dev/sda2", "hackeros")
    assert prog == program
    assert args[-1] == "/dev/sda2"


def test_zfs_pool_uses_legacy_mountpoint():
    _, args = format_command(Filesystem.ZFS, "/dev/sda2", "tank")
    assert "mountpoint=legacy" in args
    assert args[-2:] == ["tank", "/dev/sda2"]
    assert root_mount_source(Filesystem.ZFS, layout_for("/dev/sda"), "tank") == ("tank", "zfs")


def test_root_mount_source_for_block_filesystems():
    assert root_mount_source(Filesystem.EXT4, layout_for("/dev/sda"), "x") == ("/dev/sda2", None)


def test_boot_is_fat32():
    assert boot_format_command("/dev/sda1") == ("mkfs.fat", ["-F", "32", "/dev/sda1"])


def test_fstab_uses_uuids():
    text = render_fstab(fstab_entries(Filesystem.EXT4, "r-uuid", "b-uuid", "hackeros"))
    assert "UUID=r-uuid\t/\text4\tdefaults\t0\t1" in text
    assert "UUID=b-uuid\t/boot\tvfat\tumask=0077\t0\t2" in text


def test_fstab_for_zfs_names_the_pool():
    text = render_fstab(fstab_entries(Filesystem.ZFS, None, "b-uuid", "hackeros"))
    assert "hackeros\t/\tzfs" in text
