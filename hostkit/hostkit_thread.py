"""
Cooperative tasks over generators, with exceptions and task-local storage.

A task wraps a function. When the function is a generator function, the task
suspends at each yield and resume() returns what was yielded; otherwise the
first resume() simply returns the function's result.

    def worker(n):
        got = yield suspend("ready", n)     # suspend, handing back two values
        if got is None:
            yield raise_("no input")        # an exception object, not an error
        return got * 2

    t = Task(worker)
    t.resume(21)          -> Outcome(status='yielded', values=('ready', 21))
    t.resume(5)           -> Outcome(status='returned', values=(10,))

Every resume() produces an Outcome tagged returned / yielded / raised /
error, so a caller can tell a yielded value from a raised exception object
from a Python error without inspecting the values themselves.
"""

from __future__ import annotations
import contextvars
import inspect
import weakref
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional, Tuple

from hostkit.hostkit_config import dbg
from hostkit.hostkit_errors import CannotYieldOnMainThread, UncaughtException


class _MainTask:
    """The task that is running when no Task is: it can never suspend."""
    status = "running"

    def __repr__(self):
        return "<main task>"


MAIN = _MainTask()

_running: contextvars.ContextVar[Any] = contextvars.ContextVar("hostkit_running_task", default=MAIN)


# =================================================================
# Suspension markers and exception objects
# =================================================================

class Suspension:
    """Yielded by a task to hand values back to whoever resumed it."""
    __slots__ = ("values",)

    def __init__(self, values: Tuple[Any, ...]):
        self.values = values

    def __repr__(self):
        return f"<suspension {self.values!r}>"


class ThreadException:
    """An exception value passed across a yield, distinct from ordinary values."""
    __slots__ = ("values",)

    def __init__(self, *values: Any):
        self.values = values

    def __getitem__(self, index):
        return self.values[index]

    def __len__(self):
        return len(self.values)

    def __repr__(self):
        return "<exception>"


def is_exception(obj: Any) -> bool:
    return isinstance(obj, ThreadException)


@dataclass
class Outcome:
    """The structured result of one resume()."""
    status: Literal['returned', 'yielded', 'raised', 'error']
    values: Tuple[Any, ...] = ()
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status != 'error'

    @property
    def value(self) -> Any:
        """The first value, or None."""
        return self.values[0] if self.values else None


# =================================================================
# Tasks
# =================================================================

class Task:
    def __init__(self, fn: Callable[..., Any]):
        if not callable(fn):
            raise TypeError(f"task body must be callable, not {type(fn).__name__}")
        self.fn = fn
        self.status: Literal['suspended', 'running', 'dead'] = 'suspended'
        self._gen = None
        self._started = False

    def resume(self, *values: Any) -> Outcome:
        if self.status == 'dead':
            return Outcome('error', error=RuntimeError("cannot resume dead task"))
        if self.status == 'running':
            return Outcome('error', error=RuntimeError("cannot resume non-suspended task"))
        self.status = 'running'
        token = _running.set(self)
        try:
            if not self._started:
                self._started = True
                result = self.fn(*values)
                if not inspect.isgenerator(result):
                    return self._finish(Outcome('returned', (result,)))
                self._gen = result
                yielded = next(self._gen)
            else:
                yielded = self._gen.send(_send_value(values))
        except StopIteration as stop:
            return self._finish(Outcome('returned', (stop.value,)))
        except Exception as e:
            return self._finish(Outcome('error', error=e))
        finally:
            _running.reset(token)
        self.status = 'suspended'
        dbg("thread", repr(self), "suspended")
        if isinstance(yielded, Suspension):
            return Outcome('yielded', yielded.values)
        if isinstance(yielded, ThreadException):
            return Outcome('raised', (yielded,))
        return Outcome('yielded', (yielded,))

    def _finish(self, outcome: Outcome) -> Outcome:
        self.status = 'dead'
        self._gen = None
        dbg("thread", repr(self), "finished", outcome.status)
        return outcome

    def __repr__(self):
        name = getattr(self.fn, "__name__", "task")
        return f"<task {name} {self.status} at {hex(id(self))}>"


def _send_value(values: Tuple[Any, ...]) -> Any:
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    return values


def current():
    return _running.get()


def is_task(obj: Any) -> bool:
    return isinstance(obj, (Task, _MainTask))


def is_yieldable() -> bool:
    return isinstance(_running.get(), Task)


def pcall(fn: Callable[..., Any], *args: Any) -> Outcome:
    """Runs fn as a new task until it returns, yields or fails."""
    return Task(fn).resume(*args)


def resume(task: Task, *values: Any) -> Outcome:
    return task.resume(*values)


def suspend(*values: Any) -> Suspension:
    """Marker for `yield suspend(...)`; only valid inside a running task."""
    if not is_yieldable():
        raise CannotYieldOnMainThread(values)
    return Suspension(values)


def throw(*values: Any) -> Suspension:
    if not is_yieldable():
        raise CannotYieldOnMainThread(values)
    return Suspension(values)


def raise_(*values: Any) -> ThreadException:
    """Marker for `yield raise_(...)`: the resume outcome is 'raised'."""
    if not is_yieldable():
        raise UncaughtException(values)
    return ThreadException(*values)


# =================================================================
# Task-local storage
# =================================================================

class TaskLocal:
    """Per-task variables. A task's variables go away when the task is collected.

        env.count = 0
        env.count        -> 0 in this task, None in any other
    """

    def __init__(self):
        object.__setattr__(self, "_storage", weakref.WeakKeyDictionary())

    def _locals(self, create: bool = False):
        task = current()
        storage = object.__getattribute__(self, "_storage")
        found = storage.get(task)
        if found is None and create:
            found = storage[task] = {}
        return found

    def get(self, name: str, default: Any = None) -> Any:
        found = self._locals()
        if found is None:
            return default
        return found.get(name, default)

    def set(self, name: str, value: Any) -> None:
        if not isinstance(name, str):
            raise TypeError(f"task variable name not a string: {name!r}")
        self._locals(create=True)[name] = value

    def clear(self) -> None:
        found = self._locals()
        if found is not None:
            found.clear()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        return self.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def task_count(self) -> int:
        """Number of live tasks holding variables."""
        return len(object.__getattribute__(self, "_storage"))


env = TaskLocal()


__all__ = [
    "MAIN",
    "Task",
    "Outcome",
    "Suspension",
    "ThreadException",
    "TaskLocal",
    "env",
    "current",
    "is_task",
    "is_yieldable",
    "is_exception",
    "pcall",
    "resume",
    "suspend",
    "throw",
    "raise_",
]
