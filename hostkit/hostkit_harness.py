"""
Lightweight checking of Python code, with a running tally and a summary.

A check script calls:

    harness.start(filename, msg)   associate the checks that follow with filename
                                   (default: the calling file) and print msg
    harness.heading(label)         group the checks that follow under label
    harness.subheading(label)      ... and under a sub-group
    harness.check(cond, msg)       count one check; record a failure when cond is falsy
    harness.finish(msg)            print the summary and return a RunResult

Several check scripts can be run and totalled together:

    harness.dofile(path)           run a script, saving its RunResult
    harness.print_grand_total()    add up all saved results and print the total

A failed check never raises; it is counted, printed as a red X, and listed
with its source location when the run finishes.
"""

from __future__ import annotations
import inspect
import runpy
import sys
from dataclasses import dataclass
from typing import Any, List, NamedTuple, Optional, TextIO

import pystache

from hostkit.hostkit_config import color_enabled, dbg
from hostkit.hostkit_errors import EvalError
from hostkit.hostkit_termcolor import wrap

_renderer = pystache.Renderer(escape=lambda u: u)

SUMMARY_TEMPLATE = "\n\n** {{label}}: {{count}} tests attempted.\n"
FAILURE_TEMPLATE = "{{src}}:{{line}} {{heading}}: {{subheading}}: {{message}}\n"


@dataclass
class Failure:
    heading: str
    subheading: str
    heading_count: int
    subheading_count: int
    count: int
    line: Optional[int]
    src: str
    message: str


class RunResult(NamedTuple):
    filename: Optional[str]
    total: int
    failed: int
    heading_count: int
    subheading_count: int
    failures: List[Failure]


@dataclass
class FileResult:
    path: str
    result: Optional[RunResult]


class Harness:
    """Sequential check counter: idle -> running -> finished."""

    def __init__(self, out: Optional[TextIO] = None, color: Optional[bool] = None):
        self._out = out
        self.color = color_enabled() if color is None else color
        self.results: List[FileResult] = []
        self.last_result: Optional[RunResult] = None
        self._setup()
        self.state = "idle"

    @property
    def out(self) -> TextIO:
        # Resolved late so that replaced/captured stdout is honoured
        return self._out if self._out is not None else sys.stdout

    def _setup(self):
        self.filename: Optional[str] = None
        self.count = 0
        self.fail_count = 0
        self.heading_count = 0
        self.subheading_count = 0
        self.failures: List[Failure] = []
        self.current_heading = "No heading"
        self.current_subheading = ""

    # --- Output helpers ---

    def _write(self, *parts: Any):
        for p in parts:
            self.out.write(str(p))

    def _color_write(self, color: str, *parts: Any):
        text = "".join(str(p) for p in parts)
        self.out.write(wrap(color, text) if self.color else text)

    # --- Public API ---

    def current_filename(self, level: int = 0) -> str:
        frame = inspect.currentframe()
        try:
            caller = frame.f_back
            for _ in range(level):
                if caller.f_back is None:
                    break
                caller = caller.f_back
            return caller.f_code.co_filename
        finally:
            del frame

    def start(self, filename: Optional[str] = None, message: Optional[str] = None):
        self._setup()
        self.filename = filename or self.current_filename(level=1)
        self.state = "running"
        self._write("Entering ", self.filename, "\n")
        if message:
            self._write(message, "\n")

    def check(self, condition: Any, message: str = "", level: int = 0):
        frame = inspect.currentframe()
        try:
            caller = frame.f_back
            for _ in range(level):
                if caller.f_back is None:
                    break
                caller = caller.f_back
            line, src = caller.f_lineno, caller.f_code.co_filename
        finally:
            del frame
        if self.state != "running":
            dbg("harness", "check outside a run; starting one for", src)
            self._setup()
            self.filename = src
            self.state = "running"
        self.count += 1
        self.heading_count += 1
        self.subheading_count += 1
        if condition:
            self._write(".")
            return
        self._color_write("red", "X")
        self.failures.append(Failure(
            heading=self.current_heading or "Heading unassigned",
            subheading=self.current_subheading or "",
            heading_count=self.heading_count,
            subheading_count=self.subheading_count,
            count=self.count,
            line=line,
            src=src,
            message=message or "",
        ))
        self.fail_count += 1

    def heading(self, label: str):
        self.heading_count = 0
        self.subheading_count = 0
        self.current_heading = label
        self.current_subheading = ""
        self._write("\n", label, " ")

    def subheading(self, label: str):
        self.subheading_count = 0
        self.current_subheading = label
        self._write("\n\t", label, " ")

    def _summarize(self, label: str, count: int, fail_count: int):
        total = _renderer.render(SUMMARY_TEMPLATE, {"label": label, "count": count})
        if fail_count == 0:
            self._color_write("green", total)
            self._color_write("green", "** All tests passed.\n")
        else:
            self._write(total)
            self._write("** ", fail_count, " tests failed\n")

    def finish(self, message: Optional[str] = None) -> RunResult:
        self._summarize("TOTAL", self.count, self.fail_count)
        for f in self.failures:
            self._color_write("red", _renderer.render(FAILURE_TEMPLATE, f))
        if message:
            self._write(message, "\n")
        self.state = "finished"
        self.last_result = RunResult(
            self.filename,
            self.count,
            self.fail_count,
            self.heading_count,
            self.subheading_count,
            list(self.failures),
        )
        return self.last_result

    # --- Running multiple files of checks ---

    def dofile(self, path: str) -> Optional[RunResult]:
        """Runs a check script with this harness bound to 'harness' in its globals."""
        self.last_result = None
        try:
            runpy.run_path(path, init_globals={"harness": self}, run_name="__hostkit_check__")
        except Exception as e:
            raise EvalError(f"error running check file {path}: {e}") from e
        result = self.last_result
        self.results.append(FileResult(path, result))
        dbg("harness", "dofile", path, "reported" if result else "did not report")
        return result

    def reset(self):
        self.results = []
        self.last_result = None
        self._setup()
        self.state = "idle"

    def print_grand_total(self) -> bool:
        """Adds up all saved results. Returns True when no check failed."""
        count, fail_count = 0, 0
        self._write("\n")
        for entry in self.results:
            if entry.result is None:
                self._write("File ", entry.path, " did not report results\n")
            else:
                count += entry.result.total
                fail_count += entry.result.failed
        self._summarize("GRAND TOTAL", count, fail_count)
        return fail_count == 0


# Module-level convenience API over a default harness
_default = Harness()

start = _default.start
check = _default.check
heading = _default.heading
subheading = _default.subheading
finish = _default.finish
dofile = _default.dofile
reset = _default.reset
print_grand_total = _default.print_grand_total
current_filename = _default.current_filename


def default_harness() -> Harness:
    return _default


__all__ = [
    "Harness",
    "Failure",
    "RunResult",
    "FileResult",
    "default_harness",
    "start",
    "check",
    "heading",
    "subheading",
    "finish",
    "dofile",
    "reset",
    "print_grand_total",
    "current_filename",
]
