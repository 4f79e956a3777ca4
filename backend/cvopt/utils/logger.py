import json
import os
import threading
from collections import deque
from datetime import datetime, timezone

from typing import Any, Deque, Dict, List, Optional

class JSONLLogger:
    """Simple JSONL logger for request diagnostics."""

    def __init__(self, log_path: str = "logs/server_log.jsonl", max_recent: int = 500):
        self.log_path = log_path
        self._lock = threading.Lock()
        # Only the most recent events stay in memory; the file keeps everything
        self.request_log: Deque[Dict] = deque(maxlen=max_recent)

        log_dir = os.path.dirname(log_path)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

    def log(self, payload: Dict[str, Any]) -> None:
        """Write a payload as a JSON line with timestamp metadata."""
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **payload,
        }
        # JSONL for easier parsing
        serialized = json.dumps(entry, default=self._fallback_serializer)
        with self._lock:
            with open(self.log_path, "a", encoding="utf-8") as log_file:
                log_file.write(serialized + "\n")

    @staticmethod
    def _fallback_serializer(obj: Any) -> Any:
        """Ensure non-serializable objects degrade gracefully."""
        try:
            return str(obj)
        except Exception:
            return repr(obj)

    def log_event(self, request_id: str, event: str, **fields: Any) -> None:
        payload = {
            "request_id": request_id,
            "event": event,
            **fields,
        }
        self.log(payload=payload)
        with self._lock:
            self.request_log.append(payload)

    def log_error(self, request_id: str, stage: str, error_message: str) -> None:
        self.log_event(
            request_id,
            "request_error",
            stage=stage,
            error_message=error_message,
        )

    def get_request_log(self, request_id: Optional[str] = None) -> List[Dict]:
        with self._lock:
            entries = list(self.request_log)
        if request_id is None:
            return entries
        return [e for e in entries if e.get("request_id") == request_id]

    def read(self) -> str:
        """Return the raw contents of the log file."""
        if not os.path.exists(self.log_path):
            return ""
        with self._lock:
            with open(self.log_path, "r", encoding="utf-8") as log_file:
                return log_file.read()
