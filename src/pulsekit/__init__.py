"""
pulsekit

PulseKit client SDK: captures errors, messages and custom events, enriches
them and delivers them in batches to a PulseKit ingestion endpoint.
"""

from .client import Client
from .config import ClientConfig
from .logging_setup import PulseKitHandler, setup_logging
from .models import Event, Level, StackFrame

__version__ = "1.0.0"

__all__ = [
  "Client",
  "ClientConfig",
  "Event",
  "Level",
  "StackFrame",
  "PulseKitHandler",
  "setup_logging",
]
