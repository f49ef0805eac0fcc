import sys
from pathlib import Path

from pulsekit.stacktrace import DEFAULT_SKIP, capture_stack, frames_from_traceback


def test_capture_stack_with_no_skip_starts_at_capture_stack():
  frames = capture_stack(skip=0)

  assert frames[0].function == "capture_stack"
  assert frames[1].function == "test_capture_stack_with_no_skip_starts_at_capture_stack"


def test_default_skip_drops_three_frames():
  def entry_point():
    return builder()

  def builder():
    return capture_stack()

  frames = capture_stack(skip=0)
  assert DEFAULT_SKIP == 3

  skipped = entry_point()
  assert skipped[0].function == "test_default_skip_drops_three_frames"
  assert len(skipped) == len(frames) - 1


def test_frames_have_file_line_and_function():
  (frame, *_rest) = capture_stack(skip=1)

  assert Path(frame.file).name == "test_stacktrace.py"
  assert frame.line > 0
  assert frame.function == "test_frames_have_file_line_and_function"


def test_frames_from_traceback_is_innermost_first():
  def inner():
    raise RuntimeError("boom")

  def outer():
    inner()

  try:
    outer()
  except RuntimeError:
    tb = sys.exc_info()[2]

  frames = frames_from_traceback(tb)

  assert [f.function for f in frames] == [
    "inner",
    "outer",
    "test_frames_from_traceback_is_innermost_first",
  ]


def test_frames_from_missing_traceback_is_empty():
  assert frames_from_traceback(None) == []
