import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _optional_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"non-finite value: {value}")
    return value


@dataclass(frozen=True)
class GeoPosition:
    """一次定位结果。每次定位都生成新的对象，不做原地修改。"""
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    altitude: Optional[float] = None
    speed: Optional[float] = None     # m/s
    timestamp: Optional[int] = None   # epoch 毫秒

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeoPosition":
        """
        从上报的 JSON 构造位置，兼容 camelCase 与 snake_case。
        缺少经纬度或数值非法时抛 ValueError。
        """
        if not isinstance(data, dict):
            raise ValueError("position must be an object")
        lat = data.get("latitude")
        lon = data.get("longitude")
        if lat is None or lon is None:
            raise ValueError("missing latitude or longitude")
        try:
            timestamp = data.get("timestamp")
            return cls(
                latitude=float(lat),
                longitude=float(lon),
                accuracy=_optional_float(data.get("accuracy")),
                altitude=_optional_float(data.get("altitude")),
                speed=_optional_float(data.get("speed", data.get("speedMps", data.get("speed_mps")))),
                timestamp=int(timestamp) if timestamp not in (None, "") else None,
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"invalid position: {e}") from e

    def with_speed(self, speed: Optional[float]) -> "GeoPosition":
        return replace(self, speed=speed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "altitude": self.altitude,
            "speed": self.speed,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class StationIdentity:
    callsign: str
    passcode: str


@dataclass
class TransmissionResult:
    success: bool
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    callsign: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "callsign": self.callsign,
        }
