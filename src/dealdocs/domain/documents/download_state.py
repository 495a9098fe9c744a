"""DownloadState state machine for streamed document downloads

The state at the moment a failure happens decides how it is reported:
- NOT_STARTED: nothing is on the wire yet, a structured 500 body can be sent
- HEADERS_SENT / STREAMING: the status line is committed, the only honest
  recourse is to drop the connection so a truncated file never looks like a
  successful download
"""

from enum import Enum
from typing import Dict, List


class DownloadState(str, Enum):
    """Download lifecycle

    State flow:
    NOT_STARTED → HEADERS_SENT → STREAMING → DONE
    any non-terminal state → ABORTED
    """
    NOT_STARTED = "NOT_STARTED"    # Headers prepared, nothing sent
    HEADERS_SENT = "HEADERS_SENT"  # Status line and headers committed
    STREAMING = "STREAMING"        # At least one body chunk sent
    DONE = "DONE"                  # Final empty chunk sent (terminal success)
    ABORTED = "ABORTED"            # Failed or cancelled (terminal)


ALLOWED_TRANSITIONS: Dict[DownloadState, List[DownloadState]] = {
    DownloadState.NOT_STARTED: [DownloadState.HEADERS_SENT, DownloadState.ABORTED],
    DownloadState.HEADERS_SENT: [DownloadState.STREAMING, DownloadState.DONE, DownloadState.ABORTED],
    DownloadState.STREAMING: [DownloadState.DONE, DownloadState.ABORTED],
    DownloadState.DONE: [],
    DownloadState.ABORTED: [],
}


class InvalidDownloadTransition(Exception):
    """Raised when a download attempts a transition the table forbids."""
    pass


def can_transition(from_state: DownloadState, to_state: DownloadState) -> bool:
    """Validate if state transition is allowed

    Example:
        >>> can_transition(DownloadState.NOT_STARTED, DownloadState.HEADERS_SENT)
        True
        >>> can_transition(DownloadState.DONE, DownloadState.ABORTED)
        False
    """
    return to_state in ALLOWED_TRANSITIONS.get(from_state, [])


def headers_committed(state: DownloadState) -> bool:
    """True once the status line can no longer be changed"""
    return state in (DownloadState.HEADERS_SENT, DownloadState.STREAMING)


def is_terminal(state: DownloadState) -> bool:
    return not ALLOWED_TRANSITIONS.get(state)
