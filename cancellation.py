"""Cancellation support for long-running traversals.

Tree and search operations run in worker threads. A CancellationToken is
passed down every recursive call and fired when the awaiting request ends,
so an abandoned or timed-out scan stops at its next checkpoint instead of
walking the rest of the tree.
"""

import asyncio
import logging
import threading
from typing import Any, Callable, Optional, TypeVar

from errors import OperationCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """Thread-safe abort flag shared between a request and its worker."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason = "Operation cancelled"

    def cancel(self, reason: Optional[str] = None) -> None:
        if reason:
            self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, path: str) -> None:
        """Raise OperationCancelledError if the token has been fired."""
        if self._event.is_set():
            raise OperationCancelledError(path, self.reason)


async def run_cancellable(
    func: Callable[..., T],
    *args: Any,
    timeout: Optional[float] = None,
    **kwargs: Any,
) -> T:
    """Run a traversal function in a worker thread with a cancellation token.

    The function receives a fresh token as its ``cancel_token`` keyword
    argument. The token is fired when the call finishes for any reason:
    normal return, timeout, or cancellation of the awaiting task.

    Args:
        func: Blocking function accepting a ``cancel_token`` keyword.
        *args: Positional arguments for func.
        timeout: Seconds before the call is abandoned (None or <= 0 disables).
        **kwargs: Keyword arguments for func.

    Returns:
        Whatever func returns.

    Raises:
        OperationCancelledError: If the timeout expired.
    """
    token = CancellationToken()
    call = asyncio.to_thread(func, *args, cancel_token=token, **kwargs)
    try:
        if timeout and timeout > 0:
            return await asyncio.wait_for(call, timeout)
        return await call
    except asyncio.TimeoutError:
        token.cancel(f"Operation timed out after {timeout:g} seconds")
        logger.warning("%s timed out after %s seconds", getattr(func, "__name__", func), timeout)
        target = str(args[0]) if args else ""
        raise OperationCancelledError(target, token.reason) from None
    finally:
        token.cancel()
