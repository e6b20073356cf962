"""
Write text in color using ANSI escape sequences.

    wrap("red", "hi")                    -> red "hi", then back to the default color
    wrap("red", "hi", background=True)   -> same, for the background color
    start("bold", "hi")                  -> bold "hi", attribute left on
    stop("bold", "hi")                   -> "hi" followed by the bold-off sequence

The same functions are available attribute-style through `tc`:

    tc.red("hi"), tc.bg.red("hi"), tc.start.red("hi"), tc.start.bg.red("hi"),
    tc.stop.red("hi"), tc.stop.bg.red("hi"), tc.bold("hi"), tc.stop.bold("hi")

Reference: https://en.wikipedia.org/wiki/ANSI_escape_code
"""

from typing import Callable, Dict, List, Optional

from hostkit.hostkit_errors import UnknownColorOrAttribute


def csi(rest: str) -> str:
    return "\033[" + rest


_COLOR_NAMES = ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")

FG: Dict[str, str] = {name: csi(f"3{i}m") for i, name in enumerate(_COLOR_NAMES)}
FG["default"] = csi("39m")

BG: Dict[str, str] = {name: csi(f"4{i}m") for i, name in enumerate(_COLOR_NAMES)}
BG["default"] = csi("49m")

ATTR_ON: Dict[str, str] = {
    "reverse": csi("7m"),
    "bold": csi("1m"),
    "blink": csi("5m"),
    "underline": csi("4m"),
    "none": csi("0m"),  # removes all attributes
}

ATTR_OFF: Dict[str, str] = {
    "reverse": csi("27m"),
    "bold": csi("22m"),
    "blink": csi("25m"),
    "underline": csi("24m"),
}


def colors() -> List[str]:
    return list(FG.keys())


def attributes() -> List[str]:
    return list(ATTR_ON.keys())


def _codes(name: str, background: bool) -> tuple[str, Optional[str], str]:
    """Returns (on, off-after-wrap, reset-for-stop) for a color or attribute."""
    if not isinstance(name, str):
        raise UnknownColorOrAttribute(name)
    table = BG if background else FG
    if name in table:
        return table[name], table["default"], table["default"]
    if name in ATTR_ON and not background:
        off = ATTR_OFF.get(name)
        return ATTR_ON[name], off, off or ATTR_ON["none"]
    raise UnknownColorOrAttribute(name)


def wrap(name: str, text: Optional[str] = "", background: bool = False) -> str:
    on, off, _ = _codes(name, background)
    return on + (text or "") + (off or "")


def start(name: str, text: Optional[str] = "", background: bool = False) -> str:
    on, _, _ = _codes(name, background)
    return on + (text or "")


def stop(name: str, text: Optional[str] = "", background: bool = False) -> str:
    _, _, reset = _codes(name, background)
    return (text or "") + reset


class _Emitters:
    """Attribute namespace of emitter functions; unknown names raise."""

    def __init__(self, kind: Callable[..., str], background: bool = False):
        self._kind = kind
        self._background = background

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)
        if name == "bg" and not self._background:
            return _Emitters(self._kind, background=True)
        _codes(name, self._background)  # validate eagerly
        kind, background = self._kind, self._background
        return lambda text="": kind(name, text, background=background)

    def __getitem__(self, name: str):
        return getattr(self, name)

    def __repr__(self) -> str:
        where = "bg " if self._background else ""
        return f"<termcolor {where}{self._kind.__name__}>"


class _TermColor(_Emitters):
    def __init__(self):
        super().__init__(wrap)
        self.start = _Emitters(start)
        self.stop = _Emitters(stop)


tc = _TermColor()


__all__ = [
    "wrap",
    "start",
    "stop",
    "colors",
    "attributes",
    "tc",
    "FG",
    "BG",
    "ATTR_ON",
    "ATTR_OFF",
]
