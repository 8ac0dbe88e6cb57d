# tests/test_fetch.py
import os
import stat

import pytest
import requests
from unittest.mock import MagicMock

from errors import FetchError
from system.fetch import Fetcher, wants_executable


def fake_session(chunks=(b"abc", b"def"), error=None):
    resp = MagicMock()
    resp.__enter__.return_value = resp
    resp.__exit__.return_value = False
    resp.iter_content.return_value = iter(chunks)
    if error is not None:
        resp.raise_for_status.side_effect = error
    session = MagicMock()
    session.get.return_value = resp
    return session


def test_fetch_streams_body_to_disk(tmp_path):
    dest = tmp_path / "usr" / "bin" / "hammer"
    session = fake_session()
    Fetcher(session=session).fetch("https://example.com/hammer", str(dest))
    assert dest.read_bytes() == b"abcdef"
    _, kwargs = session.get.call_args
    assert kwargs["stream"] is True


def test_binary_is_marked_executable(tmp_path):
    dest = tmp_path / "wm"
    Fetcher(session=fake_session()).fetch("https://example.com/wm", str(dest))
    assert os.stat(dest).st_mode & stat.S_IXUSR


def test_desktop_entry_is_not_executable(tmp_path):
    dest = tmp_path / "Blue-Environment.desktop"
    Fetcher(session=fake_session()).fetch("https://example.com/x.desktop", str(dest))
    assert not os.stat(dest).st_mode & stat.S_IXUSR


def test_http_error_raises_fetch_error(tmp_path):
    session = fake_session(error=requests.HTTPError("404 Client Error"))
    with pytest.raises(FetchError) as exc:
        Fetcher(session=session).fetch("https://example.com/missing", str(tmp_path / "m"))
    assert "404" in str(exc.value)
    assert exc.value.url == "https://example.com/missing"


def test_connection_error_raises_fetch_error(tmp_path):
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("unreachable")
    with pytest.raises(FetchError):
        Fetcher(session=session).fetch("https://example.com/x", str(tmp_path / "x"))


def test_local_write_failure_raises_fetch_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("")
    with pytest.raises(FetchError):
        Fetcher(session=fake_session()).fetch("https://example.com/x", str(blocker / "x"))


@pytest.mark.parametrize("path,expected", [
    ("/mnt/usr/bin/hammer", True),
    ("/mnt/usr/share/wayland-sessions/Blue-Environment.desktop", False),
    ("/mnt/usr/lib/HackerOS/", False),
])
def test_wants_executable(path, expected):
    assert wants_executable(path) is expected
