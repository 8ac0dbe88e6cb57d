# widgets/hackeros_header.py
from __future__ import annotations
import pyfiglet
from textual.widgets import Static

_ASCII = pyfiglet.figlet_format("HackerOS", font="small")


class HackerOSHeader(Static):
    """Full-width cyan ASCII-art header shown above every wizard stage."""

    DEFAULT_CSS = """
    HackerOSHeader {
        color: #22d3ee;
        text-style: bold;
        width: 100%;
        padding: 0 2;
    }
    """

    def __init__(self) -> None:
        super().__init__(_ASCII)
