# validators.py
from __future__ import annotations
from typing import Tuple

def validate_required(value: str, label: str) -> Tuple[bool, str]:
    if not value:
        return False, f"{label} must not be empty."
    return True, ""

def validate_username(username: str) -> Tuple[bool, str]:
    return validate_required(username, "Username")

def validate_password(password: str) -> Tuple[bool, str]:
    return validate_required(password, "Password")

def validate_disk(disk: str) -> Tuple[bool, str]:
    """Only emptiness is checked; the device itself is probed by the partitioner."""
    return validate_required(disk, "Disk")

def resolve_hostname(hostname: str, default: str) -> str:
    """Blank hostnames fall back to the default."""
    return hostname if hostname else default

def clamp_index(index: int, option_count: int) -> int:
    """Clamp a list cursor to [0, option_count - 1]."""
    if option_count <= 0:
        return 0
    return max(0, min(index, option_count - 1))
