from hostkit.hostkit_errors import (
    HostkitError,
    InvalidKey,
    InvalidPrototype,
    InvalidDescriptor,
    InsufficientElements,
    ModuleNotFound,
    EvalError,
    ModuleLoadError,
    CannotYieldOnMainThread,
    UncaughtException,
    UnknownColorOrAttribute,
)
from hostkit.hostkit_config import LoaderConfig, load_config
from hostkit.hostkit_termcolor import tc
from hostkit.hostkit_set import Set
from hostkit.hostkit_recordtype import NIL, Record, RecordType, define
from hostkit.hostkit_harness import Harness, RunResult
from hostkit.hostkit_submodule import Module
from hostkit.hostkit_thread import Task, Outcome, pcall

__all__ = [
    "HostkitError",
    "InvalidKey",
    "InvalidPrototype",
    "InvalidDescriptor",
    "InsufficientElements",
    "ModuleNotFound",
    "EvalError",
    "ModuleLoadError",
    "CannotYieldOnMainThread",
    "UncaughtException",
    "UnknownColorOrAttribute",
    "LoaderConfig",
    "load_config",
    "tc",
    "Set",
    "NIL",
    "Record",
    "RecordType",
    "define",
    "Harness",
    "RunResult",
    "Module",
    "Task",
    "Outcome",
    "pcall",
]
