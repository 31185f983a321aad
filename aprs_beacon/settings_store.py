"""
用户设置的持久化：呼号、passcode、注释/状态文本、定时发送间隔。

以 JSON 文件保存；文件不存在或损坏时按空设置处理。
"""
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from .config import GLOBAL_CONFIG

SETTING_KEYS = ("callsign", "passcode", "comment_text", "status_text", "schedule_interval")
TEXT_KEYS = ("callsign", "passcode", "comment_text", "status_text")

# 兼容前端的 camelCase 字段名
_ALIASES = {
    "commentText": "comment_text",
    "statusText": "status_text",
    "statuText": "status_text",
    "scheduleInterval": "schedule_interval",
}

LOCK = threading.RLock()


def _settings_path(path: Optional[Path] = None) -> Path:
    return Path(path) if path else Path(GLOBAL_CONFIG["settings_file"])


def normalize_settings(raw: Any) -> Dict[str, Any]:
    """只保留已知字段，未知字段丢弃。"""
    if not isinstance(raw, dict):
        return {}
    settings = {}
    for key, value in raw.items():
        key = _ALIASES.get(key, key)
        if key not in SETTING_KEYS:
            continue
        if key == "schedule_interval" and value is not None:
            try:
                value = int(value)
            except (TypeError, ValueError):
                print(f"[Settings][WARNING] schedule_interval 非法({value})，已忽略")
                continue
        elif key in TEXT_KEYS and value is not None:
            # passcode 常以数字形式提交
            value = str(value)
        settings[key] = value
    return settings


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    settings_path = _settings_path(path)
    with LOCK:
        if not settings_path.exists():
            return {}
        try:
            with settings_path.open("r", encoding="utf-8") as f:
                return normalize_settings(json.load(f))
        except (OSError, ValueError) as e:
            print(f"[Settings][WARNING] 读取设置失败，使用空设置: {e}")
            return {}


def save_settings(settings: Dict[str, Any], path: Optional[Path] = None) -> None:
    """原子写：临时文件写完 fsync 后再替换，避免半截文件。"""
    settings_path = _settings_path(path)
    payload = normalize_settings(settings)
    with LOCK:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".tmp_settings_", dir=str(settings_path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmpf:
                json.dump(payload, tmpf, ensure_ascii=False, indent=2)
                tmpf.flush()
                os.fsync(tmpf.fileno())
            os.replace(tmp_path, str(settings_path))
        finally:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)


def update_setting(key: str, value: Any, path: Optional[Path] = None) -> Dict[str, Any]:
    key = _ALIASES.get(key, key)
    if key not in SETTING_KEYS:
        raise KeyError(f"unknown setting: {key}")
    with LOCK:
        settings = load_settings(path)
        settings[key] = value
        save_settings(settings, path)
        return load_settings(path)
