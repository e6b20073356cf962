"""
Simple sets with pluggable equality.

A Set compares elements in one of three ways, fastest first:

  - Python equality (the default): elements are dict keys. An unhashable
    element, such as a list, is keyed by identity instead.
  - value_fn only: elements are stored under value_fn(element), so two
    elements are equal when their extracted values are equal. The
    extracted values must be hashable.
  - eq_fn: a linear scan calling eq_fn(a, b). When value_fn is also given,
    eq_fn receives the extracted values.
"""

import collections.abc
from typing import Any, Callable, Iterator, Optional

from hostkit.hostkit_errors import InsufficientElements


class _ElementsView(collections.abc.Collection):
    """A live, restartable view of the elements of a Set."""
    __slots__ = ("_set",)

    def __init__(self, s: 'Set'):
        self._set = s

    def __len__(self):
        return self._set.size()

    def __iter__(self):
        return self._set._iter_elements()

    def __contains__(self, elt):
        return elt in self._set

    def __repr__(self):
        return f"<elements of {self._set!r}>"


class _Identity:
    """Dict key for an unhashable element: equal only to a key for the same object."""
    __slots__ = ("obj",)

    def __init__(self, obj):
        self.obj = obj

    def __hash__(self):
        return id(self.obj)

    def __eq__(self, other):
        return isinstance(other, _Identity) and other.obj is self.obj


class Set:
    """An unordered collection in which no two equal elements coexist."""

    def __init__(self, value_fn: Optional[Callable[[Any], Any]] = None,
                 eq_fn: Optional[Callable[[Any, Any], bool]] = None):
        self.value_fn = value_fn
        self.eq_fn = eq_fn
        self.simple = value_fn is None and eq_fn is None
        self.mapped = value_fn is not None and eq_fn is None
        if value_fn is not None and eq_fn is not None:
            self._eq = lambda a, b: eq_fn(value_fn(a), value_fn(b))
        else:
            self._eq = eq_fn
        # dict in the keyed modes, list under a custom equality
        self._elements: Any = {} if (self.simple or self.mapped) else []

    def _key(self, elt):
        if self.mapped:
            return self.value_fn(elt)
        try:
            hash(elt)
        except TypeError:
            return _Identity(elt)
        return elt

    def _empty_like(self) -> 'Set':
        return Set(self.value_fn, self.eq_fn)

    def _iter_elements(self) -> Iterator[Any]:
        if isinstance(self._elements, dict):
            return iter(list(self._elements.values()))
        return iter(list(self._elements))

    # --- Core operations ---

    def insert(self, elt):
        """Adds elt unless an equal element is present. Returns the stored element."""
        if isinstance(self._elements, dict):
            return self._elements.setdefault(self._key(elt), elt)
        eq = self._eq
        for e in self._elements:
            if eq(e, elt):
                return e
        self._elements.append(elt)
        return elt

    def delete(self, elt):
        if isinstance(self._elements, dict):
            self._elements.pop(self._key(elt), None)
            return
        eq = self._eq
        for i, e in enumerate(self._elements):
            if eq(e, elt):
                del self._elements[i]
                return

    def contains(self, elt):
        """Returns the stored element equal to elt, or None."""
        if isinstance(self._elements, dict):
            return self._elements.get(self._key(elt))
        eq = self._eq
        for e in self._elements:
            if eq(e, elt):
                return e
        return None

    def __contains__(self, elt) -> bool:
        if isinstance(self._elements, dict):
            return self._key(elt) in self._elements
        return any(self._eq(e, elt) for e in self._elements)

    def size(self) -> int:
        return len(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def empty(self) -> bool:
        return len(self._elements) == 0

    def elements(self) -> _ElementsView:
        return _ElementsView(self)

    def __iter__(self):
        return self._iter_elements()

    def choose(self, n: int) -> 'Set':
        """Removes n arbitrary elements and returns them as a new set."""
        if n > len(self._elements):
            raise InsufficientElements(n, len(self._elements))
        chosen = self._empty_like()
        for e in self._iter_elements():
            if len(chosen) >= n:
                break
            chosen.insert(e)
        for e in chosen:
            self.delete(e)
        return chosen

    # --- Set algebra ---

    def union(self, other: 'Set') -> 'Set':
        u = self._empty_like()
        for e in self:
            u.insert(e)
        for e in other:
            u.insert(e)
        return u

    def intersection(self, other: 'Set') -> 'Set':
        i = self._empty_like()
        for e in self:
            if e in other:
                i.insert(e)
        return i

    def difference(self, other: 'Set') -> 'Set':
        """self - other"""
        d = self._empty_like()
        for e in self:
            if e not in other:
                d.insert(e)
        return d

    __or__ = union
    __and__ = intersection
    __sub__ = difference

    # --- Higher-order helpers ---

    def map(self, fn: Callable[[Any], Any]) -> 'Set':
        # Results use default equality: they need not resemble the elements.
        results = Set()
        for e in self:
            results.insert(fn(e))
        return results

    def filter(self, fn: Callable[[Any], Any]) -> 'Set':
        results = self._empty_like()
        for e in self:
            if fn(e):
                results.insert(e)
        return results

    def foreach(self, fn: Callable[[Any], Any]) -> None:
        for e in self:
            fn(e)

    def __repr__(self) -> str:
        mode = "simple" if self.simple else ("mapped" if self.mapped else "linear")
        return f"<Set {mode} size={len(self)} at {hex(id(self))}>"


def new(value_fn=None, eq_fn=None) -> Set:
    return Set(value_fn, eq_fn)


def is_set(obj: Any) -> bool:
    return isinstance(obj, Set)


__all__ = ["Set", "new", "is_set"]
