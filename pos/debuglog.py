"""Append-only debug log shared by the engine and the TUI."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from pos.config import DEBUG_LOG_PATH


def log_debug(message: str, path: str | Path | None = None) -> None:
    """Append one timestamped line to the debug log."""
    try:
        ts = datetime.now(timezone.utc).isoformat()
        log_path = Path(path or DEBUG_LOG_PATH)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("a", encoding="utf-8") as fh:
            fh.write(f"{ts} {message}\n")
    except Exception:
        # Logging must never interfere with checkout flow.
        return
