from __future__ import annotations

import threading
from typing import List

from .models import Event


class EventQueue:
  """
  In-process FIFO buffer of events waiting for delivery.

  All mutation happens under a single lock. The lock only covers the list
  operation itself, never the network call that follows a drain, so a slow
  send does not stop other threads from capturing.

  There is no capacity limit: if the batch threshold is never reached and no
  flush is ever requested, the queue keeps growing.
  """

  def __init__(self) -> None:
    self._events: List[Event] = []
    self._lock = threading.Lock()

  def push(self, event: Event) -> int:
    """
    Append an event and return the queue length right after the append.
    """
    with self._lock:
      self._events.append(event)
      return len(self._events)

  def drain_all(self) -> List[Event]:
    """
    Remove and return every queued event, in push order.
    """
    with self._lock:
      drained, self._events = self._events, []
    return drained

  def __len__(self) -> int:
    with self._lock:
      return len(self._events)
