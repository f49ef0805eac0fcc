import json
import logging
from typing import Any, Callable, List, Optional

import httpx
import pytest

from pulsekit import Client, ClientConfig
from pulsekit.transport import HttpTransport

ENDPOINT = "http://pulse.test"
API_KEY = "pk_test_123"


class RecordingServer:
  """
  Stand-in for the ingestion API: records every request it receives.
  """

  def __init__(self) -> None:
    self.requests: List[httpx.Request] = []
    self.status_code = 201
    self.error: Optional[Exception] = None

  def handler(self, request: httpx.Request) -> httpx.Response:
    self.requests.append(request)
    if self.error is not None:
      raise self.error
    return httpx.Response(self.status_code, json={"success": True})

  @property
  def paths(self) -> List[str]:
    return [r.url.path for r in self.requests]

  def bodies(self) -> List[Any]:
    return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def server() -> RecordingServer:
  return RecordingServer()


@pytest.fixture
def make_transport(server: RecordingServer) -> Callable[..., HttpTransport]:
  def _make(debug: bool = False) -> HttpTransport:
    mock = httpx.MockTransport(server.handler)
    return HttpTransport(
      endpoint=ENDPOINT,
      api_key=API_KEY,
      debug=debug,
      http_transport=mock,
      async_http_transport=mock,
    )

  return _make


@pytest.fixture
def make_client(make_transport):
  clients: List[Client] = []

  def _make(**overrides: Any) -> Client:
    config = ClientConfig(endpoint=ENDPOINT, api_key=API_KEY, **overrides)
    client = Client(config, transport=make_transport(debug=config.debug))
    clients.append(client)
    return client

  yield _make

  for client in clients:
    client.close()


@pytest.fixture(autouse=True)
def reset_sdk_logger():
  """Drop handlers that debug-mode clients attach to the ``pulsekit`` logger."""

  def _reset() -> None:
    sdk_logger = logging.getLogger("pulsekit")
    for handler in list(sdk_logger.handlers):
      sdk_logger.removeHandler(handler)
    sdk_logger.setLevel(logging.NOTSET)

  _reset()
  yield
  _reset()
