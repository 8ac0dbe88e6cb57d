# provision/preflight.py
from __future__ import annotations
import asyncio
import shutil
from dataclasses import dataclass
from typing import Callable, List, Optional
from urllib.parse import urlsplit

from errors import PreflightError
from logger import log
from settings import InstallerSettings
from state import Edition, Filesystem, InstallConfig

BASE_TOOLS = ["apt-get", "mount", "umount", "debootstrap", "chroot", "blkid", "mkfs.fat", "reboot"]

FORMAT_TOOLS = {
    Filesystem.BTRFS: "mkfs.btrfs",
    Filesystem.EXT4: "mkfs.ext4",
    Filesystem.ZFS: "zpool",
}


@dataclass
class HostCheck:
    """Outcome of one readiness check on the live system."""

    kind: str
    subject: str
    ok: bool
    reason: str = ""

    def __str__(self) -> str:
        return f"{self.kind} {self.subject}: " + ("ok" if self.ok else self.reason)


def required_tools(config: InstallConfig) -> List[str]:
    tools = list(BASE_TOOLS)
    tools.append("cfdisk" if config.manual_partition else "sfdisk")
    tools.append(FORMAT_TOOLS[config.filesystem])
    if config.edition is Edition.HYDRA:
        tools.append("git")
    return tools


def check_tools(tools: List[str], which: Callable[[str], Optional[str]] = shutil.which) -> List[HostCheck]:
    results = []
    for tool in tools:
        found = which(tool) is not None
        results.append(HostCheck("tool", tool, found, "" if found else "not found on PATH"))
    return results


async def reach_mirror(host: str, port: int, timeout: float = 10.0) -> HostCheck:
    """Open and close one TCP connection to the package mirror."""
    subject = f"{host}:{port}"
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=timeout)
    except asyncio.TimeoutError:
        reason = f"no answer within {timeout:g}s"
    except ConnectionRefusedError:
        reason = "connection refused"
    except OSError as e:
        reason = f"unreachable ({e})"
    else:
        writer.close()
        await writer.wait_closed()
        log.info("Mirror %s reachable", subject)
        return HostCheck("mirror", subject, True)
    log.warning("Mirror %s: %s", subject, reason)
    return HostCheck("mirror", subject, False, reason)


def mirror_endpoint(mirror_url: str):
    parts = urlsplit(mirror_url)
    port = parts.port or (443 if parts.scheme == "https" else 80)
    return parts.hostname or "", port


def run_preflight(
    config: InstallConfig,
    settings: InstallerSettings,
    which: Callable[[str], Optional[str]] = shutil.which,
    timeout: float = 10.0,
) -> List[HostCheck]:
    """Check the host before touching the disk. Raises PreflightError listing every failure."""
    results = check_tools(required_tools(config), which)
    host, port = mirror_endpoint(settings.mirror_url)
    results.append(asyncio.run(reach_mirror(host, port, timeout)))

    for r in results:
        log.info("Preflight %s", r)
    failed = [r for r in results if not r.ok]
    if failed:
        raise PreflightError(
            "Preflight failed:\n" + "\n".join(f"  {r}" for r in failed)
        )
    return results
