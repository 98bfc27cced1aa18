import json
import logging
import time
from datetime import datetime, timezone


def log_tool_call(tool: str, fn: str, start_time: float, ok: bool, http_status: int | None = None) -> None:
    latency_ms = (time.monotonic() - start_time) * 1000
    log_data = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "tool": tool,
        "fn": fn,
        "latency_ms": f"{latency_ms:.2f}",
        "ok": ok,
        "http_status": http_status,
    }
    logging.info(json.dumps(log_data))
