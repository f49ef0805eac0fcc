from __future__ import annotations

import logging
import sys
import threading
import weakref
from types import TracebackType
from typing import TYPE_CHECKING, Any, Callable, Optional, Type

if TYPE_CHECKING:
  from .client import Client

_logger = logging.getLogger(__name__)


class ExceptHookIntegration:
  """
  Reports uncaught exceptions to a client, then defers to the previous hooks.

  Covers the main thread (``sys.excepthook``) and other threads
  (``threading.excepthook``). Only a weak reference to the client is held,
  so an installed hook never keeps the client alive; once the client is
  gone the hooks only pass exceptions through.
  """

  def __init__(self, client: "Client") -> None:
    self._client_ref = weakref.ref(client)
    self._previous_sys_hook: Optional[Callable[..., Any]] = None
    self._previous_threading_hook: Optional[Callable[..., Any]] = None
    self._installed = False

  @property
  def installed(self) -> bool:
    return self._installed

  def install(self) -> None:
    if self._installed:
      return
    self._previous_sys_hook = sys.excepthook
    self._previous_threading_hook = threading.excepthook
    sys.excepthook = self._sys_hook
    threading.excepthook = self._threading_hook
    self._installed = True

  def uninstall(self) -> None:
    """
    Put the previous hooks back, unless something else replaced ours since.
    """
    if not self._installed:
      return
    if sys.excepthook == self._sys_hook:
      sys.excepthook = self._previous_sys_hook
    if threading.excepthook == self._threading_hook:
      threading.excepthook = self._previous_threading_hook
    self._installed = False

  def _report(
    self,
    exc_type: Type[BaseException],
    exc: Optional[BaseException],
    flush: bool,
  ) -> None:
    client = self._client_ref()
    if client is None or exc is None:
      return
    if issubclass(exc_type, (KeyboardInterrupt, SystemExit)):
      return
    try:
      client.capture_exception(exc, tags={"mechanism": "excepthook"})
      if flush:
        # The interpreter is about to exit; deliver before it does.
        client.flush_blocking()
    except Exception:
      _logger.debug("pulsekit failed to report an uncaught exception", exc_info=True)

  def _sys_hook(
    self,
    exc_type: Type[BaseException],
    exc: BaseException,
    tb: Optional[TracebackType],
  ) -> None:
    self._report(exc_type, exc, flush=True)
    previous = self._previous_sys_hook or sys.__excepthook__
    previous(exc_type, exc, tb)

  def _threading_hook(self, args: Any) -> None:
    self._report(args.exc_type, args.exc_value, flush=False)
    previous = self._previous_threading_hook or threading.__excepthook__
    previous(args)
