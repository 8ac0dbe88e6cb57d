# system/mounts.py
from __future__ import annotations
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from errors import InstallError
from logger import log
from system.command import CommandRunner

BIND_SOURCES = ("/dev", "/proc", "/sys", "/run")


def _release(runner: CommandRunner, program: str, args: List[str], strict: bool) -> None:
    """Strict on the success path; on an error path never mask the original failure."""
    try:
        runner.run(program, args)
    except InstallError as e:
        if strict:
            raise
        log.warning("Cleanup '%s %s' failed while unwinding: %s", program, " ".join(args), e)


@contextmanager
def mounted(
    runner: CommandRunner,
    source: str,
    target: str,
    *,
    fstype: Optional[str] = None,
    bind: bool = False,
) -> Iterator[str]:
    """Mount `source` on `target` for the duration of the block, then unmount it."""
    try:
        Path(target).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InstallError(f"Cannot create mount point {target}: {e}") from e

    args: List[str] = []
    if bind:
        args.append("--bind")
    if fstype:
        args += ["-t", fstype]
    runner.run("mount", [*args, source, target])
    log.info("Mounted %s on %s", source, target)
    try:
        yield target
    except BaseException:
        _release(runner, "umount", [target], strict=False)
        raise
    _release(runner, "umount", [target], strict=True)
    log.info("Unmounted %s", target)


@contextmanager
def zfs_pool(runner: CommandRunner, pool: str) -> Iterator[str]:
    """Export a freshly created pool once everything on it is unmounted."""
    try:
        yield pool
    except BaseException:
        _release(runner, "zpool", ["export", pool], strict=False)
        raise
    _release(runner, "zpool", ["export", pool], strict=True)
    log.info("Exported ZFS pool %s", pool)


def bind_target(target_root: str, source: str) -> str:
    return str(Path(target_root) / source.lstrip("/"))
