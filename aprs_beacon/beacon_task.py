"""
定时信标：按设置中的间隔，把最近一次定位重新编码并发送。
"""
import threading
from typing import Callable, Optional

from . import activity_log, data_memory_cache, settings_store
from .aprs_packet import DEFAULT_FORMAT, PacketFormat, generate_packets
from .aprs_report import transmit_packets
from .models import StationIdentity, TransmissionResult
from .speed_estimator import MAX_INTERVAL_MS, is_position_stale
from .validation import is_valid_station_identity
from .wake_lock import WakeLock

DEFAULT_INTERVAL = 300   # 秒
MIN_INTERVAL = 30


def effective_interval(interval) -> int:
    try:
        interval = int(interval)
    except (TypeError, ValueError):
        return DEFAULT_INTERVAL
    if interval <= 0:
        return DEFAULT_INTERVAL
    return max(interval, MIN_INTERVAL)


class BeaconScheduler(object):

    def __init__(self,
                 transmit: Callable[..., TransmissionResult] = transmit_packets,
                 load_settings: Callable[[], dict] = settings_store.load_settings,
                 get_position=data_memory_cache.get_latest_position,
                 wake_lock: Optional[WakeLock] = None,
                 packet_format: PacketFormat = DEFAULT_FORMAT,
                 max_age_ms: int = MAX_INTERVAL_MS) -> None:
        self.transmit = transmit
        self.load_settings = load_settings
        self.get_position = get_position
        self.wake_lock = wake_lock or WakeLock()
        self.packet_format = packet_format
        self.max_age_ms = max_age_ms
        self._stop_event = None  # type: Optional[threading.Event]
        self._thread = None  # type: Optional[threading.Thread]
        self._lock = threading.RLock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def interval(self) -> int:
        return effective_interval(self.load_settings().get("schedule_interval"))

    def beacon_once(self) -> Optional[TransmissionResult]:
        settings = self.load_settings()
        callsign = settings.get("callsign")
        passcode = settings.get("passcode")
        if not is_valid_station_identity(callsign, passcode):
            activity_log.log_warning("Beacon skipped: callsign and passcode are required")
            return None

        position = self.get_position()
        if position is None:
            activity_log.log_warning("Beacon skipped: no position available")
            return None
        if is_position_stale(position, self.max_age_ms):
            activity_log.log_warning("Beacon skipped: last position is stale")
            return None

        packets = generate_packets(
            callsign.strip(),
            position.latitude,
            position.longitude,
            comment_text=settings.get("comment_text"),
            status_text=settings.get("status_text"),
            speed_mps=position.speed,
            packet_format=self.packet_format,
        )
        result = self.transmit(StationIdentity(callsign.strip(), passcode.strip()), packets)
        if result.success:
            activity_log.log_success(result.message)
        else:
            activity_log.log_error(result.message)
        return result

    def _run(self, stop_event: threading.Event):
        print("[Beacon] starting beacon loop")
        while not stop_event.is_set():
            interval = DEFAULT_INTERVAL
            try:
                self.beacon_once()
                interval = self.interval
            except Exception as e:
                # 防止任何异常杀死信标线程
                print(f"[Beacon][ERROR] {e}")
            stop_event.wait(interval)
        print("[Beacon] beacon loop stopped")

    def start(self) -> bool:
        with self._lock:
            if self.running:
                return False
            # 每个线程独立的停止信号，旧线程即使未及时退出也不会被重新唤醒
            self._stop_event = threading.Event()
            self.wake_lock.acquire()
            self._thread = threading.Thread(target=self._run, args=(self._stop_event,),
                                            daemon=True, name="aprs-beacon")
            self._thread.start()
            return True

    def stop(self, timeout: float = 5.0) -> bool:
        with self._lock:
            if self._thread is None:
                return False
            self._stop_event.set()
            self._thread.join(timeout)
            if self._thread.is_alive():
                print("[Beacon][WARNING] beacon thread still busy, it will exit after the current send")
            self._thread = None
            self.wake_lock.release()
            return True
