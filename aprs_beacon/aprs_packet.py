"""
APRS 位置/状态报文编码。

生成的报文为 TNC2 文本格式，例如::

    BG5XYZ>APRS,TCPIP*:!3954.00N/11624.00E/010[comment
    BG5XYZ>APRS,TCPIP*:>status text

纯字符串构造，不做任何网络或文件 I/O。报文末尾不带 CRLF，由发送端追加。
"""
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

MPS_TO_KNOTS = 1.94384

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


@dataclass(frozen=True)
class PacketFormat:
    """报文格式选项，历史上的几种变体（带时间戳、RELAY 路径、单包）都用它表达。"""
    destination: str = "APRS"
    path: str = "TCPIP*"
    symbol_table: str = "/"
    symbol_code: str = "["
    with_timestamp: bool = False
    multi_packet: bool = True


DEFAULT_FORMAT = PacketFormat()


def _degrees_minutes(value: float):
    abs_value = abs(value)
    degrees = math.floor(abs_value)
    # 与 toFixed(2) 一致：对 double 的精确值做四舍五入（half up）
    minutes = Decimal((abs_value - degrees) * 60).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if minutes >= 60:
        degrees += 1
        minutes = Decimal("0.00")
    return degrees, minutes


def format_latitude(lat: float) -> str:
    """纬度 -> DDMM.mmN / DDMM.mmS"""
    degrees, minutes = _degrees_minutes(lat)
    direction = "N" if lat >= 0 else "S"
    return f"{degrees:02d}{minutes:05.2f}{direction}"


def format_longitude(lon: float) -> str:
    """经度 -> DDDMM.mmE / DDDMM.mmW"""
    degrees, minutes = _degrees_minutes(lon)
    direction = "E" if lon >= 0 else "W"
    return f"{degrees:03d}{minutes:05.2f}{direction}"


def mps_to_knots(speed_mps: float) -> int:
    # half up，不用 round() 的银行家舍入
    return int(math.floor(speed_mps * MPS_TO_KNOTS + 0.5))


def format_speed(speed_mps: Optional[float]) -> Optional[str]:
    """m/s -> 3 位补零的节数；无速度、负速度或 NaN/Inf 返回 None。"""
    if speed_mps is None or not math.isfinite(speed_mps) or speed_mps < 0:
        return None
    return f"{mps_to_knots(speed_mps):03d}"


def format_timestamp(when: Optional[datetime] = None) -> str:
    """APRS DHM zulu 时间戳，如 171045z"""
    when = when or datetime.now(timezone.utc)
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    return when.strftime("%d%H%M") + "z"


def sanitize_text(text: Optional[str]) -> str:
    """
    去掉注释/状态中的 CR、LF 及其它控制字符。
    APRS-IS 以 CRLF 作为报文分隔，保留它们等于允许调用方注入额外报文。
    其余字符原样保留。
    """
    if not text:
        return ""
    return _CONTROL_CHARS_RE.sub("", text)


def _header(callsign: str, packet_format: PacketFormat) -> str:
    header = f"{callsign}>{packet_format.destination}"
    if packet_format.path:
        header += f",{packet_format.path}"
    return header + ":"


def generate_packets(
    callsign: str,
    latitude: float,
    longitude: float,
    comment_text: Optional[str] = None,
    status_text: Optional[str] = None,
    speed_mps: Optional[float] = None,
    packet_format: PacketFormat = DEFAULT_FORMAT,
    timestamp: Optional[datetime] = None,
) -> List[str]:
    """
    生成一组 APRS 报文：第一条为位置报告，若给出 status_text 则追加一条状态报告。

    :param callsign: 呼号，转大写后原样嵌入，不做校验。
    :param speed_mps: 速度（m/s），为 None 或负数时省略速度字段。
    :param packet_format: 报文格式选项。
    :param timestamp: 仅在 packet_format.with_timestamp 时使用，默认当前 UTC 时间。
    """
    clean_callsign = callsign.upper()
    header = _header(clean_callsign, packet_format)

    lat = format_latitude(latitude)
    lon = format_longitude(longitude)

    if packet_format.with_timestamp:
        body = f"@{format_timestamp(timestamp)}"
    else:
        body = "!"
    body += f"{lat}{packet_format.symbol_table}{lon}"

    speed = format_speed(speed_mps)
    if speed is not None:
        body += f"/{speed}"

    body += packet_format.symbol_code + sanitize_text(comment_text)

    packets = [header + body]

    status = sanitize_text(status_text)
    if status and packet_format.multi_packet:
        packets.append(f"{header}>{status}")

    return packets
