# registry_pipeline/log.py
#
# Shared pipeline logger. Every line carries the time elapsed since the
# process started so the operator can see how long each phase takes.
from __future__ import annotations

import sys
import time

_start = time.monotonic()


def log(message: str) -> None:
    elapsed = time.monotonic() - _start
    minutes, seconds = divmod(int(elapsed), 60)
    sys.stdout.write(f"[registry {minutes:02d}:{seconds:02d}] {message}\n")
    sys.stdout.flush()
