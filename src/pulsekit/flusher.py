from __future__ import annotations

import logging
import os
import threading
from typing import Callable, Optional

_logger = logging.getLogger(__name__)


class PeriodicFlusher:
  """
  Background thread that runs a flush callback on a fixed interval.

  The worker is multi-process aware: the owning PID is tracked and a fresh
  thread is started in a forked child the next time ``start()`` is called.
  """

  def __init__(self, flush: Callable[[], None], interval: float) -> None:
    if interval <= 0:
      raise ValueError(f"flush interval must be positive, got {interval!r}")
    self._flush = flush
    self._interval = interval
    self._thread: Optional[threading.Thread] = None
    self._stopped = threading.Event()
    self._closed = False
    self._pid = os.getpid()
    self._lock = threading.Lock()

  @property
  def interval(self) -> float:
    return self._interval

  def start(self) -> None:
    """
    Start the worker thread. Safe to call repeatedly and after a fork.

    A no-op once ``stop()`` has been called.
    """
    current_pid = os.getpid()
    with self._lock:
      if self._closed:
        return
      if self._pid != current_pid:
        self._pid = current_pid
        self._stopped = threading.Event()
        self._thread = None

      if self._thread is not None and self._thread.is_alive():
        return

      self._thread = threading.Thread(
        target=self._run, name="pulsekit-flusher", daemon=True
      )
      self._thread.start()

  def stop(self, timeout: Optional[float] = None) -> None:
    with self._lock:
      self._closed = True
    self._stopped.set()
    thread = self._thread
    if thread is not None and thread.is_alive() and thread is not threading.current_thread():
      thread.join(timeout=timeout)

  def is_running(self) -> bool:
    return self._thread is not None and self._thread.is_alive()

  def _run(self) -> None:
    stopped = self._stopped
    while not stopped.wait(self._interval):
      try:
        self._flush()
      except Exception:
        # Keep the timer alive; delivery errors are already handled below us.
        _logger.debug("pulsekit periodic flush failed", exc_info=True)
