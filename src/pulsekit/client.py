"""
PulseKit client: capture, enrichment, batching and delivery of events.
"""

from __future__ import annotations

import functools
import logging
import weakref
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import ClientConfig
from .excepthook import ExceptHookIntegration
from .flusher import PeriodicFlusher
from .logging_setup import enable_debug_output
from .models import Event, Level
from .queue import EventQueue
from .stacktrace import capture_stack, frames_from_traceback
from .transport import HttpTransport

_logger = logging.getLogger(__name__)


def _utc_now() -> str:
  """Current UTC time as an RFC 3339 string."""
  return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _drain_and_send(queue: EventQueue, transport: HttpTransport, debug: bool) -> None:
  events = queue.drain_all()
  if not events:
    return
  try:
    transport.send(events)
  except Exception:
    # Capture and flush are fire-and-forget; the drained batch is dropped.
    if debug:
      _logger.warning("pulsekit dropped %s event(s) after a send error", len(events), exc_info=True)


def _shutdown(
  queue: EventQueue,
  transport: HttpTransport,
  flusher: Optional[PeriodicFlusher],
  hooks: Optional[ExceptHookIntegration],
  debug: bool,
) -> None:
  if hooks is not None:
    hooks.uninstall()
  if flusher is not None:
    flusher.stop()
  _drain_and_send(queue, transport, debug)
  transport.close()


class Client:
  """
  Thread-safe PulseKit client.

  Captured events are enriched and queued. Once the queue holds
  ``batch_size`` events the whole backlog is sent on the calling thread.
  ``flush()`` (async) and ``flush_blocking()`` send whatever is queued right
  away. Closing the client, leaving a ``with`` block, garbage collection and
  interpreter exit all trigger one last blocking flush.

  Delivery is best effort and at most once: nothing raised by the network
  ever reaches the caller, and events from a failed send are not re-queued.

  Usage:
    client = Client(ClientConfig(endpoint="https://pulse.example.com", api_key="pk_..."))
    client.capture_message("worker started")
    client.capture_error("payment provider timed out")
    client.close()
  """

  def __init__(
    self,
    config: ClientConfig,
    transport: Optional[HttpTransport] = None,
  ) -> None:
    self._config = config
    self._queue = EventQueue()
    self._transport = transport or HttpTransport(
      endpoint=config.endpoint,
      api_key=config.api_key,
      debug=config.debug,
    )

    if config.debug:
      enable_debug_output()

    self._flusher: Optional[PeriodicFlusher] = None
    if config.flush_interval is not None:
      self._flusher = PeriodicFlusher(
        functools.partial(_drain_and_send, self._queue, self._transport, config.debug),
        config.flush_interval,
      )
      self._flusher.start()

    self._hooks: Optional[ExceptHookIntegration] = None
    if config.auto_capture:
      self._hooks = ExceptHookIntegration(self)
      self._hooks.install()

    self._finalizer = weakref.finalize(
      self, _shutdown, self._queue, self._transport, self._flusher, self._hooks, config.debug
    )

  @property
  def config(self) -> ClientConfig:
    return self._config

  @property
  def queue(self) -> EventQueue:
    return self._queue

  @property
  def transport(self) -> HttpTransport:
    return self._transport

  @property
  def closed(self) -> bool:
    return not self._finalizer.alive

  # -- capture ---------------------------------------------------------------

  def capture(self, event: Event) -> None:
    """Enrich and queue a caller-built event."""
    self._enqueue(event)

  def capture_error(self, message: str) -> None:
    """Capture an error with the stack trace of the calling code."""
    self._enqueue(self._error_event(message))

  def capture_error_with_options(
    self,
    message: str,
    tags: Optional[Dict[str, str]] = None,
    metadata: Optional[Dict[str, Any]] = None,
  ) -> None:
    event = self._error_event(message)
    self._enqueue(_with_options(event, tags, metadata))

  def capture_message(self, message: str, level: Level = Level.INFO) -> None:
    self._enqueue(Event(event_type="message", level=level, message=message))

  def capture_message_with_options(
    self,
    message: str,
    level: Level = Level.INFO,
    tags: Optional[Dict[str, str]] = None,
    metadata: Optional[Dict[str, Any]] = None,
  ) -> None:
    event = Event(event_type="message", level=level, message=message)
    self._enqueue(_with_options(event, tags, metadata))

  def capture_exception(
    self,
    exc: BaseException,
    tags: Optional[Dict[str, str]] = None,
    metadata: Optional[Dict[str, Any]] = None,
  ) -> None:
    """
    Capture an exception as an error event.

    The stack trace comes from the exception's own traceback rather than
    from the current call stack.
    """
    details: Dict[str, Any] = {"exception_type": type(exc).__name__}
    if metadata:
      details.update(metadata)

    frames = frames_from_traceback(exc.__traceback__)
    event = Event(
      event_type="error",
      level=Level.ERROR,
      message=f"{type(exc).__name__}: {exc}",
      stacktrace=frames or None,
    )
    self._enqueue(_with_options(event, tags, details))

  # -- flush -----------------------------------------------------------------

  async def flush(self) -> None:
    """
    Send every queued event, suspending the current coroutine until the
    request completes.
    """
    events = self._queue.drain_all()
    if not events:
      return
    try:
      await self._transport.send_async(events)
    except Exception:
      if self._config.debug:
        _logger.warning("pulsekit dropped %s event(s) after a send error", len(events), exc_info=True)

  def flush_blocking(self) -> None:
    """Send every queued event, blocking until the request completes."""
    _drain_and_send(self._queue, self._transport, self._config.debug)

  def close(self) -> None:
    """
    Stop the background flusher (if any) and flush what is still queued.

    Idempotent; only the first call sends anything.
    """
    self._finalizer()

  def __enter__(self) -> "Client":
    return self

  def __exit__(self, exc_type, exc, tb) -> None:
    self.close()

  # -- internals -------------------------------------------------------------

  def _error_event(self, message: str) -> Event:
    # Must be called directly from a public capture_error* method so the
    # fixed skip depth lands on the caller's frame.
    return Event(
      event_type="error",
      level=Level.ERROR,
      message=message,
      stacktrace=capture_stack(),
    )

  def _enrich(self, event: Event) -> Event:
    update: Dict[str, Any] = {"timestamp": _utc_now()}
    if event.environment is None:
      update["environment"] = self._config.environment
    if event.release is None and self._config.release is not None:
      update["release"] = self._config.release
    if event.level is None:
      update["level"] = Level.INFO
    return event.model_copy(update=update)

  def _enqueue(self, event: Event) -> None:
    enriched = self._enrich(event)
    try:
      # Serialize once up front so a bad payload only costs its own event.
      enriched.to_dict()
    except Exception:
      if self._config.debug:
        _logger.warning("pulsekit dropped a %r event that cannot be serialized", enriched.event_type, exc_info=True)
      return

    if self._flusher is not None:
      # Restarts the timer thread in a forked child.
      self._flusher.start()

    size = self._queue.push(enriched)
    if self._config.debug:
      _logger.debug("pulsekit event queued, queue size: %s", size)
    if size >= self._config.batch_size:
      self.flush_blocking()


def _with_options(
  event: Event,
  tags: Optional[Dict[str, str]],
  metadata: Optional[Dict[str, Any]],
) -> Event:
  update: Dict[str, Any] = {}
  if tags is not None:
    update["tags"] = dict(tags)
  if metadata is not None:
    update["metadata"] = dict(metadata)
  return event.model_copy(update=update) if update else event
