from __future__ import annotations

import contextvars
import logging
import threading
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from ..models import Event

SINGLE_PATH = "/api/v1/events"
BATCH_PATH = "/api/v1/events/batch"
API_KEY_HEADER = "X-PulseKit-Key"

_logger = logging.getLogger("pulsekit.transport")

# True while the current thread or task is inside a send. Log records emitted
# then come from the HTTP stack and must not be captured again.
_sending: contextvars.ContextVar[bool] = contextvars.ContextVar("pulsekit_sending", default=False)


def in_send() -> bool:
  return _sending.get()


class HttpTransport:
  """
  HTTP transport that posts events to the PulseKit ingestion API.

  One event goes to the single-event endpoint, two or more go to the batch
  endpoint. Each send is a single attempt with no timeout. Failures and
  non-2xx responses are logged (only in debug mode) and never raised back
  to the caller; the events of a failed send are dropped.
  """

  def __init__(
    self,
    endpoint: str,
    api_key: str,
    debug: bool = False,
    http_transport: Optional[httpx.BaseTransport] = None,
    async_http_transport: Optional[httpx.AsyncBaseTransport] = None,
  ) -> None:
    self.endpoint = endpoint
    self.api_key = api_key
    self.debug = debug
    self._http_transport = http_transport
    self._async_http_transport = async_http_transport
    self._client: Optional[httpx.Client] = None
    self._closed = False
    self._lock = threading.Lock()

  @property
  def headers(self) -> Dict[str, str]:
    return {
      "Content-Type": "application/json",
      API_KEY_HEADER: self.api_key,
    }

  def build_request(self, events: Sequence[Event]) -> Tuple[str, Dict[str, Any]]:
    """
    Pick the target URL and JSON body for a non-empty list of events.
    """
    if not events:
      raise ValueError("cannot build a request for an empty event list")

    base = self.endpoint.rstrip("/")
    if len(events) == 1:
      return base + SINGLE_PATH, events[0].to_dict()
    return base + BATCH_PATH, {"events": [event.to_dict() for event in events]}

  def send(self, events: List[Event]) -> None:
    """
    Post events, blocking the calling thread until the exchange finishes.
    """
    if not events:
      return

    url, body = self.build_request(events)
    token = _sending.set(True)
    try:
      client = self._get_client()
      if client is None:
        # Closed transport: use a one-shot client so nothing is left open.
        with httpx.Client(timeout=None, transport=self._http_transport) as one_shot:
          response = one_shot.post(url, json=body, headers=self.headers)
      else:
        response = client.post(url, json=body, headers=self.headers)
    except (httpx.HTTPError, OSError) as exc:
      self._log_failure(url, len(events), exc)
      return
    finally:
      _sending.reset(token)
    self._log_response(url, len(events), response)

  async def send_async(self, events: List[Event]) -> None:
    """
    Post events from a coroutine without blocking the event loop thread.
    """
    if not events:
      return

    url, body = self.build_request(events)
    token = _sending.set(True)
    try:
      async with httpx.AsyncClient(
        timeout=None, transport=self._async_http_transport
      ) as client:
        response = await client.post(url, json=body, headers=self.headers)
    except (httpx.HTTPError, OSError) as exc:
      self._log_failure(url, len(events), exc)
      return
    finally:
      _sending.reset(token)
    self._log_response(url, len(events), response)

  def close(self) -> None:
    """
    Close the pooled HTTP client. Later sends still work, each on its own
    short-lived client.
    """
    with self._lock:
      self._closed = True
      client, self._client = self._client, None
    if client is not None:
      client.close()

  def _get_client(self) -> Optional[httpx.Client]:
    with self._lock:
      if self._closed:
        return None
      if self._client is None:
        self._client = httpx.Client(timeout=None, transport=self._http_transport)
      return self._client

  def _log_response(self, url: str, count: int, response: httpx.Response) -> None:
    if not self.debug:
      return
    if response.is_success:
      _logger.debug("pulsekit sent %s event(s) to %s (status=%s)", count, url, response.status_code)
    else:
      _logger.warning(
        "pulsekit ingestion rejected %s event(s) at %s (status=%s)",
        count,
        url,
        response.status_code,
      )

  def _log_failure(self, url: str, count: int, exc: BaseException) -> None:
    if self.debug:
      _logger.warning(
        "pulsekit HTTP transport failed to deliver %s event(s) to %s: %s",
        count,
        url,
        exc,
      )
