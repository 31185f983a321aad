from typing import Any, Callable, Optional

Requester = Callable[[], Any]


class WakeLock(object):
    """
    平台唤醒锁，由使用方显式持有并传递，不使用模块级全局句柄。

    requester 调用后返回一个带 release() 方法的句柄；未提供 requester 表示
    当前平台不支持，acquire() 返回 False。
    """

    def __init__(self, requester: Optional[Requester] = None) -> None:
        self.requester = requester
        self._handle = None

    @property
    def held(self) -> bool:
        return self._handle is not None

    def acquire(self) -> bool:
        if self._handle is not None:
            return True
        if self.requester is None:
            print("[WakeLock][WARNING] Wake lock not supported on this platform")
            return False
        try:
            self._handle = self.requester()
        except Exception as e:
            print(f"[WakeLock][WARNING] Failed to acquire wake lock: {e}")
            return False
        return self._handle is not None

    def release(self) -> bool:
        if self._handle is None:
            return True
        try:
            self._handle.release()
        except Exception as e:
            print(f"[WakeLock][WARNING] Failed to release wake lock: {e}")
            return False
        self._handle = None
        return True
