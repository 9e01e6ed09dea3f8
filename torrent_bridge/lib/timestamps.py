"""Wall-clock helpers."""

import time


def unix_now() -> int:
    """
    Current wall-clock time as whole seconds since the epoch.

    Returns:
        int: Unix timestamp (e.g., 1760000000)
    """
    return int(time.time())
