# image_builder.py
"""
Builds the HackerOS live ISO with live-build.

The build directory holds a `config/` tree for live-build and a
`config-hackeros.hacker` file: a JSON array whose first element names
the flavour, e.g. ["lts"]. The flavour picks the Debian distribution,
then `lb clean`, `lb config --distribution <dist>` and `lb build` run in
order. The first failing command ends the build.
"""
from __future__ import annotations
import json
import os
import sys
from pathlib import Path
from typing import List, Optional

from errors import BuildError, InstallError
from logger import log
from system.command import CommandRunner

CONFIG_FILE = "config-hackeros.hacker"
CONFIG_DIR = "config"

FLAVOUR_DISTRIBUTIONS = {
    "lts": "trixie",
    "normal": "forky",
}


def distribution_for(flavour: str) -> str:
    try:
        return FLAVOUR_DISTRIBUTIONS[flavour.lower()]
    except KeyError:
        raise BuildError(
            f"Unknown flavour {flavour!r}; supported: 'lts' or 'normal'"
        ) from None


def read_flavour(path: Path) -> str:
    try:
        data = json.loads(path.read_text().strip())
    except OSError as e:
        raise BuildError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise BuildError(f"Cannot parse {path}: {e}") from e
    if not isinstance(data, list) or not data or not isinstance(data[0], str):
        raise BuildError(
            f'{path} must hold an array with at least one string, e.g. ["lts"]'
        )
    return data[0]


class ImageBuilder:
    def __init__(self, workdir: str, runner: Optional[CommandRunner] = None):
        self.workdir = Path(workdir)
        self.runner = runner or CommandRunner(cwd=str(self.workdir))

    def check_workdir(self) -> None:
        if not (self.workdir / CONFIG_FILE).is_file():
            raise BuildError(f"Configuration file {CONFIG_FILE} not found in {self.workdir}")
        if not (self.workdir / CONFIG_DIR).is_dir():
            raise BuildError(f"Configuration directory {CONFIG_DIR}/ not found in {self.workdir}")

    def build(self) -> str:
        """Run the three live-build steps; returns the distribution built."""
        self.check_workdir()
        dist = distribution_for(read_flavour(self.workdir / CONFIG_FILE))
        log.info("Building HackerOS image on Debian %s in %s", dist, self.workdir)

        steps: List[tuple] = [
            ("Cleaning previous build", ["clean"]),
            (f"Configuring live-build for {dist}", ["config", "--distribution", dist]),
            ("Building image", ["build"]),
        ]
        for title, args in steps:
            print(f"{title}…", flush=True)
            self.runner.run("lb", args)
        log.info("Image build finished")
        return dist


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    workdir = args[0] if args else os.getcwd()
    try:
        dist = ImageBuilder(workdir).build()
    except InstallError as e:
        log.error("Image build failed: %s", e)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    print(f"HackerOS ({dist}) image built in {workdir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
