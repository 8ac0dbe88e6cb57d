# main.py
import os, sys

from errors import InstallError
from logger import log

def print_progress(index: int, total: int, title: str) -> None:
    print(f"[{index}/{total}] {title}…", flush=True)

def install(config, settings) -> int:
    """Run preflight and the pipeline outside the TUI; returns the process exit code."""
    from provision.pipeline import InstallationPipeline
    from provision.preflight import run_preflight

    try:
        run_preflight(config, settings)
        InstallationPipeline(config, settings, progress=print_progress).run()
    except InstallError as e:
        log.error("Installation failed: %s", e)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0

def main():
    if os.geteuid() != 0:
        print("ERROR: The installer must be run as root.", file=sys.stderr)
        sys.exit(1)

    from settings import load_settings
    try:
        settings = load_settings()
    except InstallError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    from app import HackerOSInstaller
    # Textual restores the terminal before run() returns
    config = HackerOSInstaller(settings).run()
    if config is None:
        log.info("Installer quit before installation – nothing changed")
        sys.exit(0)
    sys.exit(install(config, settings))

if __name__ == "__main__":
    main()
