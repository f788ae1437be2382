import time
from typing import List, Optional

LEVELS = ("debug", "info", "warning", "error")


class LoggingMixin:
    """Per-player log ring; the page shows it in a debug drawer."""

    def _append_log(self, msg: str, level: str = "info") -> None:
        ts = time.strftime("%Y-%m-%d %H:%M:%S")
        entry = (LEVELS.index(level), f"[{ts}] {level.upper():7} {self.name}: {msg}")
        with self.lock:
            self._logs.append(entry)
            if len(self._logs) > self._log_max:
                self._logs = self._logs[-self._log_max :]

    def get_logs(self, limit: int = 200, min_level: Optional[str] = None) -> List[str]:
        floor = LEVELS.index(min_level) if min_level in LEVELS else 0
        with self.lock:
            lines = [line for lvl, line in self._logs if lvl >= floor]
        if limit <= 0 or limit >= len(lines):
            return lines
        return lines[-limit:]
