from typing import Optional, Sequence

import aprs
import requests

from .config import GLOBAL_CONFIG
from .models import StationIdentity, TransmissionResult

HTTP_TIMEOUT = 10


def _success(callsign: str) -> TransmissionResult:
    return TransmissionResult(
        success=True,
        message=f"APRS packet transmitted successfully for {callsign}",
        callsign=callsign,
    )


def _failure(callsign: str, reason) -> TransmissionResult:
    return TransmissionResult(
        success=False,
        message=f"Failed to transmit APRS packet: {reason}",
        callsign=callsign,
    )


def send_via_aprs_is(identity: StationIdentity, packets: Sequence[str], server: str) -> TransmissionResult:
    """通过 APRS-IS（aprs.TCP）登录并逐条发送报文。"""
    callsign = identity.callsign.encode("utf-8")
    password = identity.passcode.encode("utf-8")
    server_host = server.encode("utf-8")

    # 创建 TCP 对象并传入服务器信息
    a = aprs.TCP(callsign, password, servers=[server_host])
    a.start()
    try:
        for packet in packets:
            frame_text = packet.encode()
            aprs_return = a.send(frame_text)
            # 发送端会追加 CRLF
            if aprs_return == len(frame_text) + 2:
                print(f"[APRS_Service]APRS Report Good Length:{aprs_return}")
            else:
                print(f"[APRS_Service]APRS Report Return:{aprs_return} Frame: {frame_text} Bad Request..")
                return _failure(identity.callsign, f"short write ({aprs_return} bytes)")
    finally:
        try:
            a.stop()
        except Exception as e:
            print(f"[APRS_Service][WARNING] close connection failed: {e}")
    return _success(identity.callsign)


def send_via_http_relay(identity: StationIdentity, packets: Sequence[str], relay_url: str) -> TransmissionResult:
    """把报文 POST 给 HTTP 中继，由中继负责连接 APRS-IS。"""
    if not relay_url:
        return _failure(identity.callsign, "no http_relay_url configured")
    for packet in packets:
        response = requests.post(
            relay_url,
            json={
                "callsign": identity.callsign,
                "passcode": identity.passcode,
                "packet": packet,
            },
            timeout=HTTP_TIMEOUT,
        )
        response.raise_for_status()  # 如果状态码非 2xx，将抛出异常
        print(f"[APRS_Service]Relay accepted packet, HTTP {response.status_code}")
    return _success(identity.callsign)


def transmit_packets(identity: StationIdentity,
                     packets: Sequence[str],
                     mode: Optional[str] = None,
                     server: Optional[str] = None,
                     relay_url: Optional[str] = None) -> TransmissionResult:
    """
    发送一组报文（顺序不变），任何异常都转换为失败结果返回，不重试。
    """
    mode = mode or GLOBAL_CONFIG["transmit_mode"]
    try:
        if not packets:
            raise ValueError("no packets to send")
        print(f"[APRS_Service]callsign:{identity.callsign}, mode:{mode}, packets:{list(packets)}")
        if mode == "http":
            return send_via_http_relay(identity, packets, relay_url or GLOBAL_CONFIG["http_relay_url"])
        return send_via_aprs_is(identity, packets, server or GLOBAL_CONFIG["aprs_server"])
    except requests.HTTPError as err:
        print(f"[APRS_Service]APRS Report Error: {err}")
        status = err.response.status_code if err.response is not None else "unknown"
        return _failure(identity.callsign, f"HTTP error! status: {status}")
    except Exception as err:
        print(f"[APRS_Service]APRS Report Error: {err}")
        return _failure(identity.callsign, err)
