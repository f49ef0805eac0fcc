from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Level(str, Enum):
  """
  Severity of an event. Serialized as the lowercase name.
  """

  DEBUG = "debug"
  INFO = "info"
  WARNING = "warning"
  ERROR = "error"
  FATAL = "fatal"


class StackFrame(BaseModel):
  """
  One frame of a captured stack trace. Every field is optional.
  """

  file: Optional[str] = None
  line: Optional[int] = Field(default=None, ge=0)
  function: Optional[str] = None


class Event(BaseModel):
  """
  Canonical event shape sent to the PulseKit ingestion API.

  ``event_type`` travels as ``type`` on the wire. Unset optional fields are
  left out of the serialized payload entirely (never sent as null).
  """

  model_config = ConfigDict(populate_by_name=True)

  event_type: str = Field(..., alias="type")
  level: Optional[Level] = None
  message: Optional[str] = None
  metadata: Optional[Dict[str, Any]] = None
  stacktrace: Optional[List[StackFrame]] = None
  tags: Optional[Dict[str, str]] = None
  # Overwritten by the client at capture time.
  timestamp: Optional[str] = None
  fingerprint: Optional[str] = None
  environment: Optional[str] = None
  release: Optional[str] = None

  def to_dict(self) -> Dict[str, Any]:
    """Wire representation of the event."""
    return self.model_dump(mode="json", by_alias=True, exclude_none=True)

  def with_level(self, level: Level) -> "Event":
    return self.model_copy(update={"level": Level(level)})

  def with_message(self, message: str) -> "Event":
    return self.model_copy(update={"message": message})

  def with_metadata(self, metadata: Dict[str, Any]) -> "Event":
    return self.model_copy(update={"metadata": dict(metadata)})

  def with_tags(self, tags: Dict[str, str]) -> "Event":
    return self.model_copy(update={"tags": dict(tags)})

  def with_fingerprint(self, fingerprint: str) -> "Event":
    return self.model_copy(update={"fingerprint": fingerprint})

  def with_environment(self, environment: str) -> "Event":
    return self.model_copy(update={"environment": environment})

  def with_release(self, release: str) -> "Event":
    return self.model_copy(update={"release": release})
