"""
Error types raised by the hostkit helpers.

Every error derives from HostkitError and from the built-in exception it
most resembles, so callers can catch either.
"""

from typing import Any, List, Optional


class HostkitError(Exception):
    """Base class for all hostkit errors."""
    pass


class InvalidKey(HostkitError, KeyError, AttributeError):
    """A record field that is not part of the record's prototype."""
    def __init__(self, key: Any, typename: Optional[str] = None):
        self.key = key
        self.typename = typename
        msg = f"invalid key {key!r}"
        if typename:
            msg += f" for type {typename}"
        super().__init__(msg)

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""


class InvalidPrototype(HostkitError, TypeError):
    pass


class InvalidDescriptor(HostkitError, TypeError):
    pass


class InsufficientElements(HostkitError, ValueError):
    def __init__(self, wanted: int, available: int):
        self.wanted = wanted
        self.available = available
        super().__init__(f"insufficient elements in set: wanted {wanted}, have {available}")


class ModuleNotFound(HostkitError, ImportError):
    """The loader tried every strategy and found nothing."""
    def __init__(self, message: str, attempts: Optional[List[str]] = None):
        self.attempts = list(attempts or [])
        super().__init__(message)


class EvalError(HostkitError):
    """Code evaluated in a module failed to compile or raised."""
    pass


class ModuleLoadError(EvalError):
    """An artifact exists on a search path but could not be loaded."""
    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"error loading {path}:\n{message}")


class CannotYieldOnMainThread(HostkitError, RuntimeError):
    def __init__(self, values=()):
        self.values = tuple(values)
        super().__init__("cannot yield from main thread")


class UncaughtException(HostkitError, RuntimeError):
    def __init__(self, values=()):
        self.values = tuple(values)
        super().__init__("uncaught exception")


class UnknownColorOrAttribute(HostkitError, AttributeError):
    def __init__(self, name: Any):
        self.color = name
        super().__init__(f"no such color or attribute: {name}")


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
]
