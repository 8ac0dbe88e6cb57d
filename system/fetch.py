# system/fetch.py
from __future__ import annotations
import os
import stat
from pathlib import Path

import requests

from errors import FetchError
from logger import log

CHUNK_SIZE = 8192
TIMEOUT = 120
DESKTOP_SUFFIX = ".desktop"


def wants_executable(destination: str) -> bool:
    """Downloaded binaries get +x; directories and desktop entries do not."""
    return not destination.endswith(os.sep) and not destination.endswith(DESKTOP_SUFFIX)


def make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


class Fetcher:
    """Streams remote artifacts onto disk."""

    def __init__(self, session: requests.Session = None, timeout: int = TIMEOUT):
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(self, url: str, destination: str) -> Path:
        path = Path(destination)
        log.info("Downloading %s -> %s", url, destination)
        try:
            with self.session.get(url, stream=True, timeout=self.timeout,
                                  allow_redirects=True) as resp:
                resp.raise_for_status()
                path.parent.mkdir(parents=True, exist_ok=True)
                written = 0
                with open(path, "wb") as f:
                    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                        f.write(chunk)
                        written += len(chunk)
        except requests.RequestException as e:
            log.error("Download of %s failed: %s", url, e)
            raise FetchError(url, str(e)) from e
        except OSError as e:
            log.error("Could not write %s: %s", destination, e)
            raise FetchError(url, f"cannot write {destination}: {e}") from e

        if wants_executable(destination):
            try:
                make_executable(path)
            except OSError as e:
                raise FetchError(url, f"cannot chmod {destination}: {e}") from e
        log.info("Downloaded %d bytes to %s", written, destination)
        return path
