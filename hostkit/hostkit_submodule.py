"""
Custom module system: modules within modules.

Each Module owns an environment, a dict seeded from a snapshot of the
builtins taken when this file is imported. Code loaded into or evaluated in
a module sees that environment as its builtins, so bindings made there stay
out of the host interpreter. The environment carries module-local versions
of __import__, require, import_ and current_module.

import_ searches, in order:
  1. the module's own loaded cache
  2. the parent module's loaded cache (sys.modules for a top-level module)
  3. the compiled path, for <name>.pyc
  4. the source path, for <name>.py
  5. the native path, for extension modules

Search paths are ';'-separated lists of directory prefixes; a relative
prefix is taken relative to the module's root path. Whatever is found is
memoized in the module's loaded cache and is visible to submodules.
"""

from __future__ import annotations
import ast
import builtins
import contextvars
import importlib
import importlib.machinery
import importlib.util
import os
import sys
import types
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from hostkit.hostkit_config import LoaderConfig, dbg
from hostkit.hostkit_errors import EvalError, ModuleLoadError, ModuleNotFound

# Snapshot of the host's builtins at the time this module loads
_HOST_SNAPSHOT: Dict[str, Any] = dict(vars(builtins))

_current_module: contextvars.ContextVar[Optional['Module']] = contextvars.ContextVar(
    "hostkit_current_module", default=None
)

COMPILED_EXT = (".pyc",)
SOURCE_EXT = (".py",)
NATIVE_EXT = tuple(importlib.machinery.EXTENSION_SUFFIXES)

# (where, thing, attempts): thing is None when nothing was found
SearchResult = Tuple[Optional[str], Any, List[str]]


def current_module() -> Optional['Module']:
    return _current_module.get()


def _split_path(path: str) -> List[str]:
    return [p for p in path.split(";") if p]


def _exec_into(module: 'Module', name: str, path: str, code: types.CodeType) -> types.ModuleType:
    """Runs a code object in a fresh namespace whose builtins are the module env."""
    loaded = types.ModuleType(name)
    loaded.__file__ = path
    loaded.__dict__["__builtins__"] = module.env
    token = _current_module.set(module)
    try:
        exec(code, loaded.__dict__)
    finally:
        _current_module.reset(token)
    return loaded


def _load_compiled(module: 'Module', name: str, fullname: str):
    loader = importlib.machinery.SourcelessFileLoader(name, fullname)
    code = loader.get_code(name)
    return _exec_into(module, name, fullname, code)


def _load_source(module: 'Module', name: str, fullname: str):
    # compile() decodes per the file's own coding declaration
    with open(fullname, "rb") as f:
        source = f.read()
    code = compile(source, fullname, "exec")
    return _exec_into(module, name, fullname, code)


def _load_native(module: 'Module', name: str, fullname: str):
    loader = importlib.machinery.ExtensionFileLoader(name, fullname)
    spec = importlib.util.spec_from_file_location(name, fullname, loader=loader)
    if spec is None:
        raise ImportError(f"cannot create a spec for {fullname}")
    loaded = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(loaded)
    return loaded


def make_path_searcher(loader: Callable[['Module', str, str], Any],
                       extensions: Tuple[str, ...]) -> Callable[['Module', str, str], SearchResult]:
    """Builds a strategy that probes each prefix of a search path for name+ext."""
    def search(module: 'Module', path: str, name: str) -> SearchResult:
        attempts: List[str] = []
        relname = name.replace(".", os.sep)
        for prefix in _split_path(path):
            for ext in extensions:
                fullname = os.path.join(prefix, relname + ext)
                if not os.path.isabs(fullname):
                    fullname = os.path.join(module.root, fullname)
                if not os.path.isfile(fullname):
                    attempts.append(fullname)
                    continue
                # The file exists, so any failure is an error in the file itself
                try:
                    return fullname, loader(module, name, fullname), attempts
                except Exception as e:
                    raise ModuleLoadError(fullname, f"{type(e).__name__}: {e}") from e
        return None, None, attempts
    return search


def _search_loaded(module: 'Module', path: str, name: str) -> SearchResult:
    return "loaded", module.loaded.get(name), ["loaded (not already loaded)"]


def _search_parent_loaded(module: 'Module', path: str, name: str) -> SearchResult:
    if module.parent is not None:
        cache, label = module.parent.loaded, f"{module.parent!r}.loaded"
    else:
        cache, label = sys.modules, "sys.modules"
    return label, cache.get(name), [f"{label} (not already loaded in parent)"]


@dataclass
class SearchStrategy:
    """One step in the resolution sequence. A path of None disables the step."""
    label: str
    path: Optional[str]
    search: Callable[['Module', str, str], SearchResult]


def _default_strategies(compiled_path: Optional[str],
                        source_path: Optional[str],
                        native_path: Optional[str]) -> List[SearchStrategy]:
    return [
        SearchStrategy("loaded", "", _search_loaded),
        SearchStrategy("parent", "", _search_parent_loaded),
        SearchStrategy("compiled", compiled_path, make_path_searcher(_load_compiled, COMPILED_EXT)),
        SearchStrategy("source", source_path, make_path_searcher(_load_source, SOURCE_EXT)),
        SearchStrategy("native", native_path, make_path_searcher(_load_native, NATIVE_EXT)),
    ]


class Module:
    """A named environment with its own loaded cache and search strategies."""

    def __init__(self, name: str, root_path: Optional[str] = "",
                 compiled_path: Optional[str] = None,
                 source_path: Optional[str] = None,
                 native_path: Optional[str] = None,
                 parent: Optional['Module'] = None):
        self.name = name
        self.root = root_path or ""
        # Lookup only; a module never owns its parent
        self.parent = parent
        self.loaded: Dict[str, Any] = {}
        self.strategies = _default_strategies(compiled_path, source_path, native_path)
        self.env = self._initial_environment()

    @classmethod
    def from_config(cls, config: LoaderConfig, parent: Optional['Module'] = None) -> 'Module':
        return cls(config.name, config.root, config.compiled_path,
                   config.source_path, config.native_path, parent=parent)

    def _initial_environment(self) -> Dict[str, Any]:
        env = dict(_HOST_SNAPSHOT)
        env["__name__"] = self.name
        # Evaluated code must resolve builtins, including __import__, from env
        env["__builtins__"] = env
        env["__import__"] = self._make_import_hook()
        env["require"] = self.require
        env["import_"] = self.import_
        env["current_module"] = lambda: self
        return env

    def _make_import_hook(self):
        host_import = _HOST_SNAPSHOT["__import__"]

        def __import__(name, globals=None, locals=None, fromlist=(), level=0):
            if level == 0 and name in self.loaded:
                return self.loaded[name]
            try:
                return host_import(name, globals, locals, fromlist, level)
            except ModuleNotFoundError as e:
                raise ModuleNotFound(
                    f"in {self!r}, module {name!r} is not already loaded, "
                    f"and the host import has failed: {e}"
                ) from e
        return __import__

    def require(self, name: str) -> Any:
        """Returns the module's loaded entry for name, else imports it from the host."""
        if name in self.loaded:
            return self.loaded[name]
        try:
            return importlib.import_module(name)
        except ModuleNotFoundError as e:
            raise ModuleNotFound(
                f"in {self!r}, module {name!r} is not already loaded, "
                f"and the host import has failed: {e}"
            ) from e

    def search(self, name: str) -> Tuple[bool, Any, List[str]]:
        attempts: List[str] = []
        for strategy in self.strategies:
            if strategy.path is None:
                continue
            where, thing, tried = strategy.search(self, strategy.path, name)
            if thing is not None:
                dbg("submodule", repr(self), "found", repr(name), "via", strategy.label, "at", where)
                return True, thing, attempts
            dbg("submodule", repr(self), "missed", repr(name), "via", strategy.label)
            attempts.extend(tried)
        return False, None, attempts

    def import_(self, name: str) -> Any:
        found, thing, attempts = self.search(name)
        if not found:
            raise ModuleNotFound(
                f"in {self!r}, module {name!r} not found:\n" + "\n".join(attempts),
                attempts,
            )
        self.loaded[name] = thing
        return thing

    def eval(self, source: str) -> Any:
        return evaluate(source, self)

    def __repr__(self) -> str:
        return f"<module {self.name}>"


def new(name: str, root_path: Optional[str] = "", *search_paths: Optional[str]) -> Module:
    """new(name, root, compiled_path, source_path, native_path)"""
    if len(search_paths) > 3:
        raise TypeError("new() takes at most three search paths (compiled, source, native)")
    compiled_path, source_path, native_path = (tuple(search_paths) + (None, None, None))[:3]
    return Module(name, root_path, compiled_path, source_path, native_path)


def import_(name: str, in_module: Optional[Module] = None) -> Any:
    in_module = in_module or current_module()
    if in_module is None:
        raise RuntimeError("can only import into a module")
    return in_module.import_(name)


def evaluate(source: str, module: Module) -> Any:
    """Runs source with the module environment as its globals.

    Returns the value of a trailing expression statement, else None.
    """
    if not isinstance(module, Module):
        raise TypeError(f"second arg not a module: {module!r}")
    if not isinstance(source, str):
        raise TypeError(f"first arg not a string: {source!r}")
    try:
        tree = ast.parse(source, filename="<module.eval>", mode="exec")
        tail = None
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            tail = ast.Expression(tree.body.pop().value)
        body = compile(tree, "<module.eval>", "exec")
        tail_code = compile(tail, "<module.eval>", "eval") if tail is not None else None
    except SyntaxError as e:
        raise EvalError(f"in {module!r}: {e}") from e

    token = _current_module.set(module)
    try:
        exec(body, module.env)
        return eval(tail_code, module.env) if tail_code is not None else None
    except Exception as e:
        raise EvalError(f"in {module!r}: {type(e).__name__}: {e}") from e
    finally:
        _current_module.reset(token)


__all__ = [
    "Module",
    "SearchStrategy",
    "make_path_searcher",
    "new",
    "import_",
    "evaluate",
    "current_module",
]
