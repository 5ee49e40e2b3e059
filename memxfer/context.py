"""Request context and the context variable for the in-flight request.

A ``RequestContext`` is the cancellation carrier a client session attaches
to each request. Handlers bind the request to ``current_request`` for the
duration of a call. Nothing inside the package reads it; it is there for
the protocol layer and other callers, such as log filters or hooks
wrapped around the handlers, that need the in-flight request without
having it passed in.
"""

import contextvars
import threading
import time
from contextlib import contextmanager
from typing import Any, Iterator

# Context variable holding the request currently being served
current_request: contextvars.ContextVar[Any] = contextvars.ContextVar(
    "memxfer_current_request", default=None
)


class RequestContext:
    """Cancellable context with an optional deadline.

    Handlers accept the context but do not poll it; a cancelled caller
    simply abandons the result.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._cancelled = threading.Event()
        self.deadline: float | None = (
            time.monotonic() + timeout if timeout is not None else None
        )

    def cancel(self) -> None:
        """Mark the context as cancelled."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        """True once cancel() was called or the deadline has passed."""
        if self._cancelled.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; return cancelled."""
        if self.deadline is not None:
            remaining = max(0.0, self.deadline - time.monotonic())
            timeout = remaining if timeout is None else min(timeout, remaining)
        self._cancelled.wait(timeout)
        return self.cancelled


@contextmanager
def request_scope(request: Any) -> Iterator[Any]:
    """Bind ``request`` as the current request for the enclosed block."""
    token = current_request.set(request)
    try:
        yield request
    finally:
        current_request.reset(token)
