"""
Simulation Timers

Two background tasks feed simulated events into the desk:
- Alarm injector: every alarm_interval_sec, raise an alarm on a random
  guarded zone with an active contract
- Battery drain: every drain_interval_sec, drop every zone's battery

Each task runs on its own daemon thread but performs its work under the
desk lock, so its effects are serialized with operator commands. After
stop() returns no further mutation happens.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

from .desk import DispatchDesk


logger = logging.getLogger(__name__)


class PeriodicTask:
    """Run a callback every ``interval_sec`` until stopped."""

    def __init__(
        self,
        name: str,
        interval_sec: float,
        callback: Callable[[], Any],
        lock: Optional[threading.RLock] = None,
    ):
        self.name = name
        self.interval_sec = interval_sec
        self._callback = callback
        self._lock = lock or threading.RLock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.fire_count = 0
        self.error_count = 0
        self.last_fired_at: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the task (no-op if already running)."""
        if self.is_running:
            return
        # One event per run: a worker left behind by a timed-out stop()
        # still sees its own event set and exits.
        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run, args=(stop_event,), name=f"sim-{self.name}", daemon=True
        )
        self._thread.start()
        logger.info("[SIM] %s started, every %ss", self.name, self.interval_sec)

    def _run(self, stop_event: threading.Event) -> None:
        # Event.wait returns True once stop() is called
        while not stop_event.wait(timeout=self.interval_sec):
            with self._lock:
                # stop() may have been called while we waited for the lock
                if stop_event.is_set():
                    break
                self.fire()

    def fire(self) -> None:
        """Run the callback once; failures are logged and counted, not raised."""
        try:
            self._callback()
        except Exception:
            self.error_count += 1
            logger.exception("[SIM] %s tick failed", self.name)
        else:
            self.fire_count += 1
            self.last_fired_at = time.time()

    def stop(self, timeout: float = 1.0) -> None:
        """Stop the task and wait for the thread to exit."""
        self._stop_event.set()
        # Don't join if called from the task thread itself
        if (
            self._thread and
            self._thread.is_alive() and
            self._thread != threading.current_thread()
        ):
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("[SIM] %s still busy after %ss, left to exit on its own", self.name, timeout)
        self._thread = None

    def get_status(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "running": self.is_running,
            "interval_sec": self.interval_sec,
            "fire_count": self.fire_count,
            "error_count": self.error_count,
            "last_fired_at": self.last_fired_at,
        }


class SimulationTimers:
    """Alarm injector and battery drain for one desk."""

    def __init__(self, desk: DispatchDesk):
        self.desk = desk
        config = desk.config
        self.alarm_injector = PeriodicTask(
            "alarm_injector", config.alarm_interval_sec, self._inject_alarm, desk.lock
        )
        self.battery_drain = PeriodicTask(
            "battery_drain", config.drain_interval_sec, desk.drain_batteries, desk.lock
        )

    @property
    def is_running(self) -> bool:
        return self.alarm_injector.is_running or self.battery_drain.is_running

    def start(self) -> None:
        self.alarm_injector.start()
        self.battery_drain.start()

    def stop(self) -> None:
        self.alarm_injector.stop()
        self.battery_drain.stop()
        logger.info("[SIM] timers stopped")

    def fire_alarm(self):
        """Inject one alarm now, outside the schedule."""
        return self.desk.inject_random_alarm()

    def drain_once(self) -> int:
        """Apply one drain step now, outside the schedule."""
        return self.desk.drain_batteries()

    def _inject_alarm(self) -> None:
        call = self.desk.inject_random_alarm()
        if call is not None:
            logger.info("[SIM] alarm injected on zone %s", call.zone_id)

    def get_status(self) -> Dict[str, Any]:
        return {
            "running": self.is_running,
            "tasks": [
                self.alarm_injector.get_status(),
                self.battery_drain.get_status(),
            ],
        }
