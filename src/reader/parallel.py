"""File-group worker pool with cooperative cancellation.

This module fans one task out per selected file group and fans the
results back in, in submission order, once every task has finished.
Recoverable per-task errors are returned as outcomes; anything else
cancels the remaining tasks and is re-raised to the caller.
"""

from __future__ import annotations

import contextvars
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Generic, Sequence, TypeVar

from core.errors import SampleCancelledError

K = TypeVar("K")
R = TypeVar("R")

_CANCELLED_MESSAGE = (
    "Read was cancelled or exceeded its timeout; partial results were discarded."
)


class CancellationToken:
    """Cancellation flag with an optional monotonic deadline.

    Workers call :meth:`raise_if_cancelled` between records; the token trips
    when :meth:`cancel` is called from any thread, the deadline passes, or
    its parent token trips. Cancelling a child never cancels its parent.
    """

    def __init__(
        self,
        timeout: float | None = None,
        parent: CancellationToken | None = None,
    ) -> None:
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._parent = parent

    def child(self) -> CancellationToken:
        """Return a token that trips with this one but can be cancelled on its own."""
        return CancellationToken(parent=self)

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return self._parent is not None and self._parent.is_cancelled

    def remaining(self) -> float | None:
        """Seconds left before the nearest deadline, or ``None`` without one."""
        own = None if self._deadline is None else max(0.0, self._deadline - time.monotonic())
        inherited = self._parent.remaining() if self._parent is not None else None
        if own is None or inherited is None:
            return own if inherited is None else inherited
        return min(own, inherited)

    def raise_if_cancelled(self) -> None:
        if self.is_cancelled:
            raise SampleCancelledError(_CANCELLED_MESSAGE)


@dataclass(frozen=True)
class TaskOutcome(Generic[K, R]):
    """Result of one task: either ``result`` or a recoverable ``error``."""

    key: K
    result: R | None = None
    error: Exception | None = None


def run_tasks(
    tasks: Sequence[tuple[K, Callable[[CancellationToken], R]]],
    *,
    max_workers: int,
    token: CancellationToken,
    recoverable: tuple[type[Exception], ...],
) -> list[TaskOutcome[K, R]]:
    """Run tasks and return their outcomes in submission order.

    Args:
        tasks: ``(key, fn)`` pairs; ``fn`` receives a token for this call.
        max_workers: Worker threads; ``<= 1`` runs tasks sequentially.
        token: Caller token; it is never cancelled by this function.
        recoverable: Exception types captured as per-task outcomes.

    Returns:
        One outcome per task, ordered like ``tasks``.

    Raises:
        SampleCancelledError: If cancellation stops a task before it finishes.
        Exception: The first non-recoverable task error, in submission order.
    """
    if max_workers <= 1 or len(tasks) <= 1:
        return [_run_one(key, fn, token, recoverable) for key, fn in tasks]
    call_token = token.child()
    worker_count = min(max_workers, len(tasks))
    with ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="lakesample-fg") as pool:
        futures: list[Future[TaskOutcome[K, R]]] = [
            pool.submit(contextvars.copy_context().run, _run_one, key, fn, call_token, recoverable)
            for key, fn in tasks
        ]
        _, pending = wait(futures, timeout=call_token.remaining(), return_when=FIRST_EXCEPTION)
        if pending:
            call_token.cancel()
            for future in pending:
                future.cancel()
            wait(pending)
    outcomes: list[TaskOutcome[K, R]] = []
    interrupted = bool(pending)
    for future in futures:
        outcome = _future_outcome(future)
        if outcome is None:
            interrupted = True
        else:
            outcomes.append(outcome)
    if interrupted:
        raise SampleCancelledError(_CANCELLED_MESSAGE)
    return outcomes


def _run_one(
    key: K,
    fn: Callable[[CancellationToken], R],
    token: CancellationToken,
    recoverable: tuple[type[Exception], ...],
) -> TaskOutcome[K, R]:
    token.raise_if_cancelled()
    try:
        return TaskOutcome(key=key, result=fn(token))
    except recoverable as error:
        return TaskOutcome(key=key, error=error)


def _future_outcome(future: Future[TaskOutcome[K, R]]) -> TaskOutcome[K, R] | None:
    """Return a finished future's outcome, or ``None`` if it was cancelled.

    Fatal task errors are re-raised.
    """
    if future.cancelled():
        return None
    error = future.exception()
    if isinstance(error, SampleCancelledError):
        return None
    if error is not None:
        raise error
    return future.result()
