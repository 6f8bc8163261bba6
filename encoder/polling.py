"""
Bounded polling.

poll_until() re-fetches a remote value at a fixed interval until a predicate
accepts it. It can stop early three ways: max_seconds, max_attempts, or
a cancel event set from another thread (signal handler, worker shutdown).
With none of them configured it polls forever.
"""
import threading
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from .exceptions import PollCancelledError, PollTimeoutError

T = TypeVar("T")


@dataclass(frozen=True)
class PollPolicy:
    interval: float = 1.0
    max_seconds: float | None = None
    max_attempts: int | None = None

    @classmethod
    def from_config(cls, config) -> "PollPolicy":
        return cls(
            interval=config.poll_interval,
            max_seconds=config.poll_max_seconds,
            max_attempts=config.poll_max_attempts,
        )


def poll_until(
    fetch: Callable[[], T],
    is_done: Callable[[T], bool],
    policy: PollPolicy = PollPolicy(),
    *,
    cancel_event: threading.Event | None = None,
    sleep: Callable[[float], None] | None = None,
    clock: Callable[[], float] | None = None,
    what: str = "operation",
) -> T:
    """
    Call fetch() until is_done(value) is true and return that value.

    Raises PollTimeoutError when max_attempts fetches or max_seconds elapse
    without completion, PollCancelledError when cancel_event is set.
    Exceptions from fetch/is_done propagate unchanged.
    """
    sleep = sleep or time.sleep
    clock = clock or time.monotonic
    started = clock()
    attempts = 0

    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise PollCancelledError(f"Polling {what} was cancelled after {attempts} attempt(s)")

        value = fetch()
        attempts += 1
        if is_done(value):
            return value

        if policy.max_attempts is not None and attempts >= policy.max_attempts:
            raise PollTimeoutError(f"{what} not complete after {attempts} attempt(s)")
        elapsed = clock() - started
        if policy.max_seconds is not None and elapsed >= policy.max_seconds:
            raise PollTimeoutError(f"{what} not complete after {elapsed:.0f}s")

        if cancel_event is not None:
            # wakes up early when the event is set
            if cancel_event.wait(policy.interval):
                raise PollCancelledError(f"Polling {what} was cancelled after {attempts} attempt(s)")
        else:
            sleep(policy.interval)
