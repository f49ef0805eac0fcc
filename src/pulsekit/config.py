from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_ENVIRONMENT = "production"
DEFAULT_BATCH_SIZE = 10


@dataclass(frozen=True)
class ClientConfig:
  """
  Settings for a PulseKit client. Read-only once the client is built.

  ``endpoint`` is not validated; a bad value only shows up as a transport
  error (visible with ``debug=True``).
  """

  endpoint: str
  api_key: str
  environment: str = DEFAULT_ENVIRONMENT
  release: Optional[str] = None
  batch_size: int = DEFAULT_BATCH_SIZE
  debug: bool = False
  # Seconds between background flushes; None disables the timer.
  flush_interval: Optional[float] = None
  # Report uncaught exceptions through sys.excepthook and threading.excepthook.
  auto_capture: bool = False

  def __post_init__(self) -> None:
    if self.batch_size < 1:
      raise ValueError(f"batch_size must be >= 1, got {self.batch_size!r}")
    if self.flush_interval is not None and self.flush_interval <= 0:
      raise ValueError(
        f"flush_interval must be positive when set, got {self.flush_interval!r}"
      )

  @classmethod
  def from_env(cls) -> "ClientConfig":
    """
    Load configuration from environment variables.

    Required:
      - PULSEKIT_ENDPOINT
      - PULSEKIT_API_KEY

    Optional:
      - PULSEKIT_ENVIRONMENT (default: production)
      - PULSEKIT_RELEASE
      - PULSEKIT_BATCH_SIZE (default: 10)
      - PULSEKIT_DEBUG (default: false)
      - PULSEKIT_FLUSH_INTERVAL (seconds, default: disabled)
      - PULSEKIT_AUTO_CAPTURE (default: false)
    """
    return cls.from_params_or_env()

  @classmethod
  def from_params_or_env(
    cls,
    endpoint: Optional[str] = None,
    api_key: Optional[str] = None,
    environment: Optional[str] = None,
    release: Optional[str] = None,
    batch_size: Optional[int] = None,
    debug: Optional[bool] = None,
    flush_interval: Optional[float] = None,
    auto_capture: Optional[bool] = None,
  ) -> "ClientConfig":
    """
    Build configuration from explicit parameters, falling back to environment variables.

    Priority:
      1. Explicit function arguments
      2. Environment variables
      3. Built-in defaults
    """
    url = endpoint or os.getenv("PULSEKIT_ENDPOINT")
    if not url:
      raise ValueError(
        "PulseKit endpoint is not configured. "
        "Pass endpoint=... or set PULSEKIT_ENDPOINT."
      )

    key = api_key or os.getenv("PULSEKIT_API_KEY")
    if not key:
      raise ValueError(
        "PulseKit API key is not configured. "
        "Pass api_key=... or set PULSEKIT_API_KEY."
      )

    env = environment or os.getenv("PULSEKIT_ENVIRONMENT") or DEFAULT_ENVIRONMENT
    rel = release or os.getenv("PULSEKIT_RELEASE") or None

    if batch_size is None:
      batch_size = _get_int("PULSEKIT_BATCH_SIZE", DEFAULT_BATCH_SIZE)
    if debug is None:
      debug = _get_bool("PULSEKIT_DEBUG", False)
    if flush_interval is None:
      flush_interval = _get_float("PULSEKIT_FLUSH_INTERVAL")
    if auto_capture is None:
      auto_capture = _get_bool("PULSEKIT_AUTO_CAPTURE", False)

    return cls(
      endpoint=url,
      api_key=key,
      environment=env,
      release=rel,
      batch_size=batch_size,
      debug=debug,
      flush_interval=flush_interval,
      auto_capture=auto_capture,
    )


def _get_int(name: str, default: int) -> int:
  raw = os.getenv(name)
  if raw is None or not raw.strip():
    return default
  try:
    return int(raw.strip())
  except ValueError:
    raise ValueError(f"Invalid {name} '{raw}': expected an integer") from None


def _get_float(name: str) -> Optional[float]:
  raw = os.getenv(name)
  if raw is None or not raw.strip():
    return None
  try:
    return float(raw.strip())
  except ValueError:
    raise ValueError(f"Invalid {name} '{raw}': expected a number of seconds") from None


def _get_bool(name: str, default: bool) -> bool:
  """
  Parse a boolean environment variable.

  Accepts common truthy/falsey strings; anything else falls back to ``default``.
  """
  raw = os.getenv(name)
  if raw is None:
    return default

  value = raw.strip().lower()
  if value in ("1", "true", "yes", "on"):
    return True
  if value in ("0", "false", "no", "off"):
    return False

  return default
