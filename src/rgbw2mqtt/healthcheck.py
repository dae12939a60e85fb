# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
#!/usr/bin/env python3
import os
import sys
import time


def is_healthy(path: str, max_age: int) -> bool:
    """The service touches its ready file every minute; a stale or missing file means it is stuck."""
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return False
    return time.time() - st.st_mtime < max_age


def main() -> None:
    path = os.getenv("READY_FILE", "/tmp/rgbw2mqtt.ready")
    max_age = int(os.getenv("HEALTH_MAX_AGE", "90"))  # seconds
    sys.exit(0 if is_healthy(path, max_age) else 1)


if __name__ == "__main__":
    main()
