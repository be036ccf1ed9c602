"""
Kanpo AI — 定期自動保存

AutoSaver はデーモンスレッドで一定間隔ごとに controller.persist() を呼ぶ。
入力イベントでは拾えない変更もこれで保存される。
alive が False を返したら (利用者のセッションが終わったら) スレッドは自分で止まる。
"""

import threading
from typing import Callable, Optional

from kanpo_ai.utils import get_logger

log = get_logger("autosave")


class AutoSaver:
    """
    例:
        with AutoSaver(controller, interval_ms=5000):
            ...
    """

    def __init__(
        self,
        controller,
        interval_ms: Optional[int] = None,
        alive: Optional[Callable[[], bool]] = None,
    ):
        self.controller = controller
        self.alive = alive
        if interval_ms is None:
            interval_ms = controller.config.session.auto_save_interval_ms
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self.interval_ms = interval_ms
        self.ticks = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> bool:
        """一回分の保存"""
        self.ticks += 1
        return self.controller.persist()

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_ms / 1000.0):
            if self.alive is not None and not self.alive():
                log.debug("Owner session ended, auto-save stopped")
                break
            self.tick()

    def start(self) -> "AutoSaver":
        if self.running:
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="kanpo-autosave", daemon=True)
        self._thread.start()
        log.debug(f"Auto-save every {self.interval_ms}ms")
        return self

    def stop(self, timeout: Optional[float] = 1.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def __enter__(self) -> "AutoSaver":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.stop()
