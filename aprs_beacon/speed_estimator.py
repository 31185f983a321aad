"""
当定位源没有给出速度时，用前后两次定位估算平均地速。

估算结果不可信时（缺时间戳、间隔太短/太长、速度离谱）一律返回 None，
调用方不需要区分具体原因。
"""
import math
import time
from typing import Optional, Tuple

from .models import GeoPosition

EARTH_RADIUS = 6371000.0       # m
MAX_INTERVAL_MS = 300000       # 5 分钟以前的参考点不可靠
MIN_INTERVAL_MS = 1000         # 间隔太短会把 GPS 抖动放大成离谱速度
MAX_PLAUSIBLE_SPEED = 200.0    # m/s，约 720 km/h
DEFAULT_MAX_AGE_MS = 60000


def haversine_distance(origin: Tuple[float, float], destination: Tuple[float, float]) -> float:
    """ Haversine distance calculation.

    :param origin: a (lat, lon) tuple.
    :param destination: a (lat, lon) tuple.
    :returns: a distance in meters.
    """
    lat1, lon1 = origin
    lat2, lon2 = destination

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS * c


def estimate_speed(previous: GeoPosition, current: GeoPosition) -> Optional[float]:
    """返回 previous -> current 的平均速度（m/s），无法可信估算时返回 None。"""
    if previous.timestamp is None or current.timestamp is None:
        return None

    elapsed_ms = current.timestamp - previous.timestamp
    if elapsed_ms > MAX_INTERVAL_MS or elapsed_ms < MIN_INTERVAL_MS:
        return None

    distance = haversine_distance(
        (previous.latitude, previous.longitude),
        (current.latitude, current.longitude),
    )
    speed = distance / (elapsed_ms / 1000.0)

    # 信号丢失导致的坐标跳变
    if speed > MAX_PLAUSIBLE_SPEED:
        return None
    return speed


def backfill_speed(previous: Optional[GeoPosition], current: GeoPosition) -> GeoPosition:
    """
    定位源自带速度时以其为准，直接返回 current；
    否则尝试用上一次定位估算并附加到新对象上。
    """
    if current.speed is not None or previous is None:
        return current
    speed = estimate_speed(previous, current)
    if speed is None:
        return current
    return current.with_speed(speed)


def is_position_stale(position: Optional[GeoPosition],
                      max_age_ms: int = DEFAULT_MAX_AGE_MS,
                      now_ms: Optional[int] = None) -> bool:
    if position is None or position.timestamp is None:
        return True
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return now_ms - position.timestamp > max_age_ms
