"""
活动记录：发送成功/失败、告警等消息，保留最近 100 条，供界面展示。
"""
import threading
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Dict, List

LOG_TYPES = ("success", "error", "warning", "info")
MAX_LOGS = 100

_recent_logs = deque(maxlen=MAX_LOGS)
_log_lock = threading.RLock()


def log_to_history(message: str, log_type: str = "info") -> Dict[str, str]:
    if log_type not in LOG_TYPES:
        raise ValueError(f"unknown log type: {log_type}")
    entry = {
        "id": uuid.uuid4().hex,
        "message": message,
        "type": log_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    with _log_lock:
        _recent_logs.appendleft(entry)  # 最新的在前
    print(f"[Activity][{log_type}] {message}")
    return entry


def log_success(message: str):
    return log_to_history(message, "success")


def log_error(message: str):
    return log_to_history(message, "error")


def log_warning(message: str):
    return log_to_history(message, "warning")


def log_info(message: str):
    return log_to_history(message, "info")


def get_recent_logs() -> List[Dict[str, str]]:
    with _log_lock:
        return list(_recent_logs)


def clear_logs():
    with _log_lock:
        _recent_logs.clear()
