import json

import pytest
from pydantic import ValidationError

from pulsekit.models import Event, Level, StackFrame


def test_event_with_only_type_serializes_to_type_key_only():
  event = Event(event_type="payment.success")

  assert event.to_dict() == {"type": "payment.success"}
  assert "null" not in json.dumps(event.to_dict())


def test_event_accepts_wire_name_for_type():
  event = Event(type="deploy")

  assert event.event_type == "deploy"
  assert event.to_dict()["type"] == "deploy"


def test_full_event_serialization_uses_wire_names_and_lowercase_level():
  event = Event(
    event_type="error",
    level=Level.WARNING,
    message="disk almost full",
    metadata={"free_bytes": 1024, "mounts": ["/", "/data"]},
    stacktrace=[StackFrame(file="app.py", line=12, function="main")],
    tags={"region": "eu"},
    timestamp="2026-01-08T05:23:41.000Z",
    fingerprint="disk-full",
    environment="staging",
    release="1.4.2",
  )

  assert event.to_dict() == {
    "type": "error",
    "level": "warning",
    "message": "disk almost full",
    "metadata": {"free_bytes": 1024, "mounts": ["/", "/data"]},
    "stacktrace": [{"file": "app.py", "line": 12, "function": "main"}],
    "tags": {"region": "eu"},
    "timestamp": "2026-01-08T05:23:41.000Z",
    "fingerprint": "disk-full",
    "environment": "staging",
    "release": "1.4.2",
  }


def test_stack_frame_omits_absent_fields():
  event = Event(
    event_type="error",
    stacktrace=[StackFrame(function="handler"), StackFrame(file="x.py", line=0)],
  )

  assert event.to_dict()["stacktrace"] == [
    {"function": "handler"},
    {"file": "x.py", "line": 0},
  ]


def test_level_strings_are_coerced_and_unknown_levels_rejected():
  assert Event(event_type="message", level="fatal").level is Level.FATAL

  with pytest.raises(ValidationError):
    Event(event_type="message", level="critical")


def test_negative_line_number_is_rejected():
  with pytest.raises(ValidationError):
    StackFrame(line=-1)


def test_builder_methods_return_updated_copies():
  base = Event(event_type="signup")

  updated = (
    base.with_level(Level.DEBUG)
    .with_message("new user")
    .with_tags({"plan": "pro"})
    .with_metadata({"user_id": 7})
    .with_fingerprint("signup")
    .with_environment("dev")
    .with_release("2.0.0")
  )

  assert base.to_dict() == {"type": "signup"}
  assert updated.to_dict() == {
    "type": "signup",
    "level": "debug",
    "message": "new user",
    "tags": {"plan": "pro"},
    "metadata": {"user_id": 7},
    "fingerprint": "signup",
    "environment": "dev",
    "release": "2.0.0",
  }
