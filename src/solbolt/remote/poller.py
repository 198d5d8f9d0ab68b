"""
Task Poll State Machine

Polls one remote task until it finishes, backing off while it is pending:

    IDLE --start--> RUNNING --SUCCESS--> SUCCEEDED
                       |--FAILURE------> FAILED
                       +--not found / cancel--> IDLE

The interval starts at a base value, doubles on every pending answer up to
a cap, and resets whenever the loop stops. Starting a new task supersedes
the running one: every loop carries a generation token, and a timer or a
poll answer belonging to an older generation is discarded. The context
given to start() belongs to that loop alone and is handed to on_success
with the result.
"""

import threading
from enum import Enum
from typing import Any, Callable, Optional

from solbolt.remote.client import PollResult
from solbolt.utils.exceptions import ServiceError, SolboltError, TaskFailedError
from solbolt.utils.logging import get_logger

logger = get_logger("poller")


class TaskKind(str, Enum):
    COMPILE = "compile"
    SYMEXEC = "symexec"


class TaskStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.SUCCEEDED, TaskStatus.FAILED)


# (base, max) poll interval in seconds
POLL_INTERVALS = {
    TaskKind.COMPILE: (0.5, 1.0),
    TaskKind.SYMEXEC: (5.0, 60.0),
}


class TaskPoller:
    """
    Polls a single task kind. One live loop at most.

    Args:
        kind: Which task kind this poller follows
        poll: Callable returning the PollResult for a task id
        on_success: Called with the task result and the loop's context on
            SUCCESS. Any exception raised here turns the outcome into FAILED.
        on_failure: Called with the TaskFailedError on FAILURE
        timer_factory: ``threading.Timer``-compatible factory
        base_interval: Override of the kind's base interval
        max_interval: Override of the kind's maximum interval

    Callbacks run while the poller's lock is held, so they observe a stable
    state; they may start a new task on the same poller.
    """

    def __init__(
        self,
        kind: TaskKind,
        poll: Callable[[str], PollResult],
        on_success: Optional[Callable[[Any, Any], None]] = None,
        on_failure: Optional[Callable[[SolboltError], None]] = None,
        timer_factory: Callable[..., Any] = threading.Timer,
        base_interval: Optional[float] = None,
        max_interval: Optional[float] = None,
    ):
        default_base, default_max = POLL_INTERVALS[TaskKind(kind)]
        self.kind = TaskKind(kind)
        self.poll = poll
        self.on_success = on_success
        self.on_failure = on_failure
        self.timer_factory = timer_factory
        self.base_interval = base_interval if base_interval is not None else default_base
        self.max_interval = max_interval if max_interval is not None else default_max

        self._lock = threading.RLock()
        self._changed = threading.Condition(self._lock)
        self._generation = 0
        self._timer = None

        self.status = TaskStatus.IDLE
        self.task_id: Optional[str] = None
        self.interval = self.base_interval
        self.context: Any = None
        self.result: Any = None
        self.error: Optional[SolboltError] = None

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def start(self, task_id: str, context: Any = None) -> int:
        """Begin polling ``task_id``, superseding any running loop. Returns the loop's generation."""
        with self._lock:
            self._stop_timer()
            if self.status is TaskStatus.RUNNING:
                logger.debug("%s task %s superseded by %s", self.kind.value, self.task_id, task_id)
            self._generation += 1
            self.task_id = task_id
            self.context = context
            self.status = TaskStatus.RUNNING
            self.interval = self.base_interval
            self.result = None
            self.error = None
            self._schedule(self._generation)
            self._changed.notify_all()
            return self._generation

    def cancel(self) -> None:
        """Abandon the running loop, if any, and return to IDLE."""
        with self._lock:
            self._stop_timer()
            self._generation += 1
            if self.status is TaskStatus.RUNNING:
                logger.debug("%s task %s cancelled", self.kind.value, self.task_id)
                self.status = TaskStatus.IDLE
            self.interval = self.base_interval
            self._changed.notify_all()

    def wait(self, timeout: Optional[float] = None) -> TaskStatus:
        """Block until the loop leaves RUNNING or ``timeout`` elapses; returns the status."""
        with self._lock:
            self._changed.wait_for(lambda: self.status is not TaskStatus.RUNNING, timeout)
            return self.status

    # -- loop internals -----------------------------------------------------

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self, generation: int) -> None:
        timer = self.timer_factory(self.interval, self._tick, args=(generation,))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self.status is not TaskStatus.RUNNING:
                return
            task_id = self.task_id

        try:
            answer = self.poll(task_id)
        except ServiceError as e:
            logger.warning("Polling %s task %s failed, retrying: %s", self.kind.value, task_id, e.message)
            answer = None

        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding stale poll answer for %s task %s", self.kind.value, task_id)
                return
            self._timer = None
            try:
                self._handle(generation, answer)
            finally:
                self._changed.notify_all()

    def _handle(self, generation: int, answer: Optional[PollResult]) -> None:
        if answer is None or answer.is_pending:
            self.interval = min(self.interval * 2, self.max_interval)
            logger.debug("%s task %s pending, next poll in %.1fs", self.kind.value, self.task_id, self.interval)
            self._schedule(generation)
            return

        self.interval = self.base_interval
        self._generation += 1

        if answer.not_found:
            logger.info("%s task %s not found, giving up", self.kind.value, self.task_id)
            self.status = TaskStatus.IDLE
            return

        if answer.is_failure:
            self._fail(TaskFailedError(
                f"{self.kind.value.capitalize()} task failed for unknown reasons, please try again later.",
                task_id=self.task_id,
                kind=self.kind.value,
            ))
            return

        finished = self._generation
        if self.on_success is not None:
            try:
                self.on_success(answer.result, self.context)
            except SolboltError as e:
                self._fail(e)
                return
            except Exception as e:
                logger.exception("Applying %s task %s result failed", self.kind.value, self.task_id)
                self._fail(TaskFailedError(
                    f"Could not apply {self.kind.value} result: {e}",
                    task_id=self.task_id,
                    kind=self.kind.value,
                    output=repr(e),
                ))
                return
            if self._generation != finished:
                # on_success started another task
                return

        self.result = answer.result
        self.status = TaskStatus.SUCCEEDED
        logger.info("%s task %s succeeded", self.kind.value, self.task_id)

    def _fail(self, error: SolboltError) -> None:
        self.status = TaskStatus.FAILED
        self.error = error
        logger.warning("%s task %s failed: %s", self.kind.value, self.task_id, error.message)
        if self.on_failure is not None:
            self.on_failure(error)
