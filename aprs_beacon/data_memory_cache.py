import threading
from typing import Dict, Optional

from .models import GeoPosition

# 每个设备最近一次定位；位置对象不可变，取出后无需拷贝
_position_cache: Dict[str, GeoPosition] = {}
_cache_lock = threading.RLock()  # 使用可重入锁防止死锁


def update_position(device_id: str, position: GeoPosition):
    with _cache_lock:
        _position_cache[device_id] = position


def get_position(device_id: str) -> Optional[GeoPosition]:
    with _cache_lock:
        return _position_cache.get(device_id)


def get_latest_position() -> Optional[GeoPosition]:
    """所有设备中时间戳最新的一条位置，供定时信标使用。"""
    with _cache_lock:
        positions = list(_position_cache.values())
    if not positions:
        return None
    return max(positions, key=lambda p: p.timestamp or 0)


def clear_position_cache():
    with _cache_lock:
        _position_cache.clear()
        print("[Cache] Position cache cleared")
