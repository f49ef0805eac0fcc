from __future__ import annotations

import logging
import sys
from logging import Handler, LogRecord
from typing import TYPE_CHECKING, Any, Dict, Optional

from .models import Event, Level
from .stacktrace import frames_from_traceback
from .transport import in_send

if TYPE_CHECKING:
  from .client import Client

_DEBUG_HANDLER_NAME = "pulsekit-debug-output"

# Loggers of the SDK and of the HTTP stack it sends through.
_IGNORED_LOGGERS = ("pulsekit", "httpx", "httpcore")


def level_for_record(levelno: int) -> Level:
  if levelno >= logging.CRITICAL:
    return Level.FATAL
  if levelno >= logging.ERROR:
    return Level.ERROR
  if levelno >= logging.WARNING:
    return Level.WARNING
  if levelno >= logging.INFO:
    return Level.INFO
  return Level.DEBUG


class PulseKitHandler(Handler):
  """
  Logging handler that turns log records into PulseKit events.
  """

  def __init__(self, client: "Client", level: int = logging.NOTSET) -> None:
    super().__init__(level=level)
    self._client = client

  def emit(self, record: LogRecord) -> None:
    # Records produced while delivering events must not feed back into the queue.
    if in_send() or _is_ignored_logger(record.name):
      return
    try:
      self._client.capture(self.record_to_event(record))
    except Exception:
      # Never break application logging.
      self.handleError(record)

  def record_to_event(self, record: LogRecord) -> Event:
    metadata: Dict[str, Any] = {"logger": record.name}
    if getattr(record, "pathname", None):
      metadata["file_path"] = record.pathname
    if getattr(record, "lineno", None) is not None:
      metadata["line_no"] = record.lineno

    stacktrace = None
    if record.exc_info:
      _type, _value, _tb = record.exc_info
      if _type is not None:
        metadata["exception_type"] = _type.__name__
      if _tb is not None:
        stacktrace = frames_from_traceback(_tb)

    return Event(
      event_type="log",
      level=level_for_record(record.levelno),
      message=record.getMessage(),
      metadata=metadata,
      stacktrace=stacktrace,
    )


def _is_ignored_logger(name: str) -> bool:
  return any(name == prefix or name.startswith(prefix + ".") for prefix in _IGNORED_LOGGERS)


def setup_logging(
  client: "Client",
  logger: Optional[logging.Logger] = None,
  level: int = logging.WARNING,
) -> PulseKitHandler:
  """
  Attach a PulseKit handler to a logger (the root logger by default).

  Existing handlers are kept. Calling this again for the same logger returns
  the handler that is already attached instead of adding a second one.
  """
  target_logger = logger or logging.getLogger()

  for existing in target_logger.handlers:
    if isinstance(existing, PulseKitHandler):
      return existing

  handler = PulseKitHandler(client, level=level)
  target_logger.addHandler(handler)
  return handler


def enable_debug_output() -> None:
  """
  Print the SDK's diagnostic log lines to stdout.
  """
  sdk_logger = logging.getLogger("pulsekit")
  sdk_logger.setLevel(logging.DEBUG)
  for existing in sdk_logger.handlers:
    if existing.get_name() == _DEBUG_HANDLER_NAME:
      return

  handler = logging.StreamHandler(sys.stdout)
  handler.set_name(_DEBUG_HANDLER_NAME)
  handler.setFormatter(logging.Formatter("[pulsekit] %(levelname)s %(name)s: %(message)s"))
  sdk_logger.addHandler(handler)
