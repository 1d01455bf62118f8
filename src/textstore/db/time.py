# src/textstore/db/time.py
"""Clock helpers for record timestamps."""

import time


def unix_timestamp() -> int:
    """Return the current Unix time in whole seconds."""
    return int(time.time())
