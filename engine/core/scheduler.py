"""
Cooperative task scheduler.

Tasks are plain generators driven by the game loop. A task suspends by
yielding:

- ``Wait(seconds)``: resume once the scheduler clock has advanced by
  ``seconds`` since the suspension point. ``Wait(0)`` behaves like
  ``None``.
- ``None``: resume on the next ``update`` call (one tick).

Usage:
    def blink(light):
        while True:
            light.toggle()
            yield Wait(0.5)

    task = scheduler.start(blink(light))
    ...
    scheduler.update(dt)    # once per fixed update
    task.cancel()           # stops before the next resumption
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generator, Optional


logger = logging.getLogger(__name__)

# Tolerance for accumulated float error in the clock
_EPSILON = 1e-9

TaskGenerator = Generator[Optional["Wait"], None, Any]


@dataclass(frozen=True)
class Wait:
    """Suspend the yielding task for a fixed delay."""
    seconds: float


class Task:
    """
    Handle for a scheduled generator.

    Attributes:
        name: Label used in log messages
    """

    def __init__(self, generator: TaskGenerator, name: str = ""):
        self.name = name or getattr(generator, "__name__", "task")
        self._generator = generator
        self._wake_time: float = 0.0
        self._wake_tick: int = 0
        self._done = False
        self._cancelled = False

    @property
    def done(self) -> bool:
        """True once the generator finished, failed or was cancelled."""
        return self._done

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop the task. It will never resume."""
        if self._done:
            return
        self._cancelled = True
        self._done = True
        self._generator.close()

    def _step(self, now: float, tick: int) -> None:
        """Resume the generator once and record its next wake-up."""
        try:
            request = next(self._generator)
        except StopIteration:
            self._done = True
            return
        except Exception:
            logger.exception("Task '%s' failed", self.name)
            self._done = True
            return

        if self._done:
            # Cancelled from inside its own step
            return

        if isinstance(request, Wait):
            # `now` is the time the task was due, so delays do not drift
            self._wake_time = now + request.seconds
            # A zero delay still waits for the next tick
            self._wake_tick = tick if request.seconds > 0 else tick + 1
        else:
            self._wake_time = now
            self._wake_tick = tick + 1

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else ("done" if self._done else "running")
        return f"Task({self.name!r}, {state})"


class Scheduler:
    """
    Runs tasks on the single logic thread.

    Nothing here is thread-safe: start, cancel and update must all be
    called from the game loop.
    """

    def __init__(self):
        self._tasks: list[Task] = []
        self._time: float = 0.0
        self._tick: int = 0

    @property
    def time(self) -> float:
        """Scheduler clock in seconds."""
        return self._time

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def active_tasks(self) -> list[Task]:
        return [task for task in self._tasks if not task.done]

    def start(self, generator: TaskGenerator, name: str = "") -> Task:
        """
        Start a task.

        The generator runs immediately up to its first suspension point.
        """
        task = Task(generator, name)
        task._wake_time = self._time
        task._step(self._time, self._tick)
        if not task.done:
            self._tasks.append(task)
        return task

    def update(self, dt: float) -> None:
        """Advance the clock and resume every task that is due."""
        self._time += dt
        self._tick += 1

        # Tasks started during this update wait for the next one
        for task in list(self._tasks):
            while not task.done and self._is_due(task):
                task._step(task._wake_time, self._tick)

        self._tasks = [task for task in self._tasks if not task.done]

    def cancel_all(self) -> None:
        """Cancel every live task."""
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()

    def _is_due(self, task: Task) -> bool:
        return task._wake_tick <= self._tick and task._wake_time <= self._time + _EPSILON
