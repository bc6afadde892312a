#!/usr/bin/env python3
"""
Auxiliary utility functions for Kladeusis

Formatting helpers shared by the reporter and the CLI.
"""

import pathlib
from typing import Optional

_SI_UNITS = ["B", "kB", "MB", "GB", "TB", "PB"]


def format_bytes(size_bytes: int) -> str:
    """Format byte size into a human-readable decimal (SI) string

    Args:
        size_bytes: Size in bytes to format

    Returns:
        String with three significant digits like "1.54 kB", "12.3 MB" or "789 B".
        The unit is picked before rounding, so 999999 is "1000 kB".
    """
    if size_bytes < 1000:
        return f"{size_bytes} B"

    value = float(size_bytes)
    unit = 0
    while value >= 1000 and unit < len(_SI_UNITS) - 1:
        value /= 1000
        unit += 1

    return f"{float(f'{value:.3g}'):g} {_SI_UNITS[unit]}"


def format_path_for_display(path: str, home_path: Optional[str] = None) -> str:
    """Format file path for display by replacing home directory with ~

    Args:
        path: File path to format
        home_path: Home directory path (defaults to platform home)

    Returns:
        Path with home directory replaced by ~ if applicable
    """
    if home_path is None:
        home_path = str(pathlib.Path.home())

    return path.replace(home_path, "~")
