from __future__ import annotations

import inspect
from types import FrameType, TracebackType
from typing import List, Optional

from .models import StackFrame

# Frames belonging to the capture machinery: capture_stack itself, the client's
# error-event builder and the public capture_error* entry point.
DEFAULT_SKIP = 3


def _frame_to_stack_frame(frame: FrameType, lineno: Optional[int]) -> StackFrame:
  code = frame.f_code
  return StackFrame(
    file=code.co_filename or None,
    line=lineno if lineno is not None and lineno >= 0 else None,
    function=code.co_name or None,
  )


def capture_stack(skip: int = DEFAULT_SKIP) -> List[StackFrame]:
  """
  Capture the live call stack, innermost frame first.

  The first ``skip`` frames are dropped, counting this function's own frame
  as the first one.
  """
  frames: List[StackFrame] = []
  frame = inspect.currentframe()
  index = 0
  try:
    while frame is not None:
      if index >= skip:
        frames.append(_frame_to_stack_frame(frame, frame.f_lineno))
      frame = frame.f_back
      index += 1
  finally:
    # Break the reference cycle through the frame object.
    del frame
  return frames


def frames_from_traceback(tb: Optional[TracebackType]) -> List[StackFrame]:
  """
  Convert an exception traceback into frames, innermost frame first.
  """
  frames: List[StackFrame] = []
  while tb is not None:
    frames.append(_frame_to_stack_frame(tb.tb_frame, tb.tb_lineno))
    tb = tb.tb_next
  frames.reverse()
  return frames
